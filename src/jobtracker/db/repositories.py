from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from jobtracker.db.base import utcnow
from jobtracker.db.models import AuthSession, Credential, JobApplication, UserProfile


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def get_user_profile(self, uid: str, *, fresh: bool = False) -> UserProfile | None:
        return self.session.get(UserProfile, uid, populate_existing=fresh)

    def create_user_profile(self, *, uid: str, email: str, role: str, display_name: str) -> UserProfile:
        now = utcnow()
        profile = UserProfile(
            uid=uid,
            email=email,
            role=role,
            is_active=True,
            display_name=display_name,
            created_at=now,
            updated_at=now,
            last_login=now,
        )
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def touch_last_login(self, profile: UserProfile) -> UserProfile:
        profile.last_login = utcnow()
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def get_user_by_email(self, email: str) -> UserProfile | None:
        return self.session.scalar(select(UserProfile).where(UserProfile.email == email))

    def list_users(self) -> list[UserProfile]:
        return list(self.session.scalars(select(UserProfile).order_by(UserProfile.created_at.desc())).all())

    def update_user_fields(self, uid: str, values: dict[str, Any]) -> UserProfile | None:
        profile = self.session.get(UserProfile, uid)
        if profile is None:
            return None
        for key, value in values.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def create_job_application(self, *, user_id: str, values: dict[str, Any]) -> JobApplication:
        now = utcnow()
        record = JobApplication(user_id=user_id, created_at=now, updated_at=now, **values)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def get_job_application(self, *, user_id: str, record_id: int) -> JobApplication | None:
        return self.session.scalar(
            select(JobApplication).where(
                JobApplication.id == record_id,
                JobApplication.user_id == user_id,
            )
        )

    def update_job_application(self, record: JobApplication, values: dict[str, Any]) -> JobApplication:
        for key, value in values.items():
            setattr(record, key, value)
        record.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete_job_application(self, record: JobApplication) -> None:
        self.session.delete(record)
        self.session.commit()

    def list_job_applications(self, user_id: str) -> list[JobApplication]:
        statement = (
            select(JobApplication)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_recent_job_applications(self, user_id: str, limit: int = 10) -> list[JobApplication]:
        statement = (
            select(JobApplication)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.application_date.desc(), JobApplication.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def get_credential_by_email(self, email: str) -> Credential | None:
        return self.session.scalar(select(Credential).where(Credential.email == email))

    def get_credential(self, uid: str) -> Credential | None:
        return self.session.get(Credential, uid)

    def create_credential(
        self,
        *,
        uid: str,
        email: str,
        password_salt: str,
        password_hash: str,
        display_name: str,
    ) -> Credential:
        credential = Credential(
            uid=uid,
            email=email,
            password_salt=password_salt,
            password_hash=password_hash,
            display_name=display_name,
        )
        self.session.add(credential)
        self.session.commit()
        self.session.refresh(credential)
        return credential

    def create_auth_session(self, *, token: str, uid: str, expires_at: datetime) -> AuthSession:
        auth_session = AuthSession(token=token, uid=uid, expires_at=expires_at)
        self.session.add(auth_session)
        self.session.commit()
        return auth_session

    def get_auth_session(self, token: str) -> AuthSession | None:
        return self.session.get(AuthSession, token)

    def delete_auth_session(self, token: str) -> bool:
        result = self.session.execute(delete(AuthSession).where(AuthSession.token == token))
        self.session.commit()
        return bool(result.rowcount)
