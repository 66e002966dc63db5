from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.config import get_settings
from jobtracker.core.identity import Identity
from jobtracker.db.models import UserProfile
from jobtracker.db.repositories import Repository
from jobtracker.errors import AuthorizationError, ValidationError
from jobtracker.types import ROLES, Role

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_MESSAGE = "Unauthorized: admin access required"


def determine_initial_role(email: str, admin_emails: Iterable[str] | None = None) -> Role:
    if admin_emails is None:
        allowlist = get_settings().admin_email_set
    else:
        allowlist = {item.strip().lower() for item in admin_emails}
    return "admin" if email.strip().lower() in allowlist else "user"


def validate_role(role: str) -> Role:
    if role not in ROLES:
        raise ValidationError(f"Invalid role specified: {role!r}")
    return role  # type: ignore[return-value]


def initialize_user_profile(session: Session, identity: Identity) -> UserProfile:
    repo = Repository(session)
    try:
        profile = repo.get_user_profile(identity.uid)
        if profile is not None:
            return repo.touch_last_login(profile)

        display_name = identity.display_name or identity.email.split("@")[0]
        profile = repo.create_user_profile(
            uid=identity.uid,
            email=identity.email,
            role=determine_initial_role(identity.email),
            display_name=display_name,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to initialize user profile uid=%s", identity.uid)
        raise

    logger.info("Created user profile uid=%s role=%s", profile.uid, profile.role)
    return profile


def get_user_profile(session: Session, uid: str) -> UserProfile | None:
    return Repository(session).get_user_profile(uid)


def is_admin(session: Session, uid: str) -> bool:
    try:
        profile = Repository(session).get_user_profile(uid, fresh=True)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Admin check failed uid=%s error=%s", uid, exc)
        return False
    return profile is not None and profile.role == "admin"


def require_admin(session: Session, uid: str) -> None:
    if not is_admin(session, uid):
        logger.warning("Rejected privileged operation uid=%s", uid)
        raise AuthorizationError(ADMIN_REQUIRED_MESSAGE)
