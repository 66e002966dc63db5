from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.config import Settings, get_settings
from jobtracker.core.events import ListenerSet, Subscription
from jobtracker.db.repositories import Repository
from jobtracker.errors import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 240_000
DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"


@dataclass(slots=True, frozen=True)
class Identity:
    uid: str
    email: str
    display_name: str = ""


@dataclass(slots=True)
class AuthResult:
    identity: Identity
    token: str
    expires_at: datetime


def hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS)
    return digest.hex()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class LocalIdentityProvider:
    """Email/password identities with opaque bearer session tokens.

    Listeners registered with ``on_auth_state_changed`` receive the
    ``Identity`` after every sign-up or sign-in and ``None`` after sign-out.
    """

    def __init__(self, session_factory: Callable[[], Session], settings: Settings | None = None):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self._listeners = ListenerSet("auth_state")

    def on_auth_state_changed(self, listener: Callable[[Identity | None], None]) -> Subscription:
        return self._listeners.add(listener)

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> AuthResult:
        email = normalize_email(email)
        if "@" not in email:
            raise ValidationError("A valid email address is required")
        if len(password) < self.settings.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.settings.min_password_length} characters"
            )

        with self.session_factory() as session:
            repo = Repository(session)
            if repo.get_credential_by_email(email) is not None:
                raise AuthenticationError(DUPLICATE_EMAIL_MESSAGE)

            salt = secrets.token_hex(16)
            try:
                credential = repo.create_credential(
                    uid=uuid.uuid4().hex,
                    email=email,
                    password_salt=salt,
                    password_hash=hash_password(password, salt),
                    display_name=(display_name or "").strip(),
                )
            except IntegrityError as exc:
                session.rollback()
                raise AuthenticationError(DUPLICATE_EMAIL_MESSAGE) from exc
            identity = Identity(uid=credential.uid, email=credential.email, display_name=credential.display_name)
            result = self._open_session(repo, identity)

        logger.info("Registered identity uid=%s", identity.uid)
        self._listeners.notify(identity)
        return result

    def sign_in(self, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        with self.session_factory() as session:
            repo = Repository(session)
            credential = repo.get_credential_by_email(email)
            if credential is None or not hmac.compare_digest(
                credential.password_hash,
                hash_password(password, credential.password_salt),
            ):
                logger.info("Rejected sign-in for email=%s", email)
                raise AuthenticationError("Invalid email or password")

            identity = Identity(uid=credential.uid, email=credential.email, display_name=credential.display_name)
            result = self._open_session(repo, identity)

        self._listeners.notify(identity)
        return result

    def sign_out(self, token: str) -> bool:
        with self.session_factory() as session:
            removed = Repository(session).delete_auth_session(token)
        if removed:
            self._listeners.notify(None)
        return removed

    def resolve(self, token: str) -> Identity | None:
        if not token:
            return None

        with self.session_factory() as session:
            repo = Repository(session)
            auth_session = repo.get_auth_session(token)
            if auth_session is None:
                return None
            if _as_utc(auth_session.expires_at) <= datetime.now(UTC):
                repo.delete_auth_session(token)
                return None

            credential = repo.get_credential(auth_session.uid)
            if credential is None:
                return None
            return Identity(uid=credential.uid, email=credential.email, display_name=credential.display_name)

    def _open_session(self, repo: Repository, identity: Identity) -> AuthResult:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(UTC) + timedelta(minutes=self.settings.session_ttl_min)
        repo.create_auth_session(token=token, uid=identity.uid, expires_at=expires_at)
        return AuthResult(identity=identity, token=token, expires_at=expires_at)
