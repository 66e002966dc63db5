from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from jobtracker.core.access import get_user_profile
from jobtracker.core.identity import Identity, LocalIdentityProvider
from jobtracker.core.runtime import get_identity_provider
from jobtracker.db.repositories import Repository
from jobtracker.db.session import SessionLocal
from jobtracker.errors import AuthenticationError, ValidationError


@pytest.fixture
def provider() -> LocalIdentityProvider:
    return LocalIdentityProvider(SessionLocal)


def test_sign_up_then_sign_in(provider: LocalIdentityProvider) -> None:
    signed_up = provider.sign_up("Jane@Example.com", "secret123", display_name="Jane")

    assert signed_up.identity.email == "jane@example.com"
    assert provider.resolve(signed_up.token) == signed_up.identity

    signed_in = provider.sign_in("jane@example.com", "secret123")
    assert signed_in.identity.uid == signed_up.identity.uid
    assert signed_in.token != signed_up.token


def test_sign_up_validation(provider: LocalIdentityProvider) -> None:
    with pytest.raises(ValidationError):
        provider.sign_up("not-an-email", "secret123")
    with pytest.raises(ValidationError):
        provider.sign_up("jane@example.com", "123")

    provider.sign_up("jane@example.com", "secret123")
    with pytest.raises(AuthenticationError):
        provider.sign_up("JANE@example.com", "another1")


def test_wrong_password_is_rejected(provider: LocalIdentityProvider) -> None:
    provider.sign_up("jane@example.com", "secret123")
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        provider.sign_in("jane@example.com", "wrong-password")
    with pytest.raises(AuthenticationError):
        provider.sign_in("nobody@example.com", "secret123")


def test_listeners_see_sign_in_and_sign_out(provider: LocalIdentityProvider) -> None:
    events: list[Identity | None] = []
    provider.on_auth_state_changed(events.append)

    result = provider.sign_up("jane@example.com", "secret123")
    assert provider.sign_out(result.token) is True
    assert provider.sign_out(result.token) is False

    assert events == [result.identity, None]
    assert provider.resolve(result.token) is None


def test_expired_session_does_not_resolve(provider: LocalIdentityProvider) -> None:
    result = provider.sign_up("jane@example.com", "secret123")
    with SessionLocal() as session:
        auth_session = Repository(session).get_auth_session(result.token)
        auth_session.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        session.commit()

    assert provider.resolve(result.token) is None
    with SessionLocal() as session:
        assert Repository(session).get_auth_session(result.token) is None


def test_runtime_provider_creates_profile_on_sign_up() -> None:
    result = get_identity_provider().sign_up("admin2@jobtracker.com", "secret123")

    with SessionLocal() as session:
        profile = get_user_profile(session, result.identity.uid)
        assert profile is not None
        assert profile.role == "admin"
        assert profile.display_name == "admin2"
        assert profile.is_active is True


def test_racing_duplicate_sign_up_is_an_authentication_error(
    provider: LocalIdentityProvider, monkeypatch: pytest.MonkeyPatch
) -> None:
    provider.sign_up("jane@example.com", "secret123")
    # Both requests pass the lookup before either has inserted.
    monkeypatch.setattr(Repository, "get_credential_by_email", lambda self, email: None)

    with pytest.raises(AuthenticationError, match="already exists"):
        provider.sign_up("jane@example.com", "another1")
