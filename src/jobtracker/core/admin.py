from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.access import require_admin, validate_role
from jobtracker.db.repositories import Repository
from jobtracker.errors import RecordNotFoundError
from jobtracker.types import UserProfileView, UserStatistics

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 5


class AdminService:
    """Privileged user management.

    Each operation re-checks the requesting user's role before touching the
    store, so a demotion takes effect on the very next call.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repo = Repository(session)

    def list_all_users(self, requesting_uid: str) -> list[UserProfileView]:
        require_admin(self.session, requesting_uid)
        return [UserProfileView.model_validate(row) for row in self.repo.list_users()]

    def get_statistics(self, requesting_uid: str) -> UserStatistics:
        require_admin(self.session, requesting_uid)
        users = [UserProfileView.model_validate(row) for row in self.repo.list_users()]
        return UserStatistics(
            total_users=len(users),
            active_users=sum(1 for user in users if user.is_active),
            admin_users=sum(1 for user in users if user.role == "admin"),
            moderator_users=sum(1 for user in users if user.role == "moderator"),
            regular_users=sum(1 for user in users if user.role == "user"),
            recent_users=users[:RECENT_USERS_LIMIT],
        )

    def update_user_role(self, requesting_uid: str, target_uid: str, role: str) -> UserProfileView:
        require_admin(self.session, requesting_uid)
        role = validate_role(role)
        profile = self._write(target_uid, {"role": role})
        logger.info("Role changed target=%s role=%s by=%s", target_uid, role, requesting_uid)
        return profile

    def set_active(self, requesting_uid: str, target_uid: str, active: bool) -> UserProfileView:
        require_admin(self.session, requesting_uid)
        profile = self._write(target_uid, {"is_active": bool(active)})
        logger.info("Active flag changed target=%s active=%s by=%s", target_uid, active, requesting_uid)
        return profile

    def _write(self, target_uid: str, values: dict) -> UserProfileView:
        try:
            profile = self.repo.update_user_fields(target_uid, values)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to update user profile uid=%s", target_uid)
            raise
        if profile is None:
            raise RecordNotFoundError(f"user {target_uid} not found")
        return UserProfileView.model_validate(profile)
