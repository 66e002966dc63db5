from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from jobtracker.core.access import get_user_profile, initialize_user_profile
from jobtracker.core.applications import JobApplicationStore
from jobtracker.core.identity import Identity, LocalIdentityProvider
from jobtracker.core.runtime import get_identity_provider, get_snapshot_bus
from jobtracker.db.models import UserProfile
from jobtracker.db.session import SessionLocal, get_db_session
from jobtracker.llm.service import CareerAIService

bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_identity() -> LocalIdentityProvider:
    return get_identity_provider()


@lru_cache(maxsize=1)
def get_ai_service() -> CareerAIService:
    return CareerAIService()


def get_application_store() -> JobApplicationStore:
    return JobApplicationStore(SessionLocal, get_snapshot_bus())


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    identity_provider: LocalIdentityProvider = Depends(get_identity),
) -> Identity:
    identity = identity_provider.resolve(credentials.credentials) if credentials else None
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def load_active_user(db: Session, identity: Identity) -> UserProfile:
    profile = get_user_profile(db, identity.uid)
    if profile is None:
        profile = initialize_user_profile(db, identity)
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return profile


def get_current_user(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> UserProfile:
    return load_active_user(db, identity)
