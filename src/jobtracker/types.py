from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "moderator", "user"]
ApplicationStatus = Literal["applied", "interview", "offer", "rejected", "withdrawn"]
TurnRole = Literal["user", "assistant"]

ROLES: tuple[str, ...] = ("admin", "moderator", "user")
APPLICATION_STATUSES: tuple[str, ...] = ("applied", "interview", "offer", "rejected", "withdrawn")
STATUS_LABELS: dict[str, str] = {
    "applied": "Applied",
    "interview": "Interview Scheduled",
    "offer": "Offer Received",
    "rejected": "Rejected",
    "withdrawn": "Withdrawn",
}


class JobApplicationFields(BaseModel):
    company: str
    position: str
    location: str = ""
    salary: str = ""
    status: ApplicationStatus = "applied"
    application_date: date = Field(default_factory=date.today)
    job_url: str = ""
    notes: str = ""


class JobApplicationUpdate(BaseModel):
    company: str | None = None
    position: str | None = None
    location: str | None = None
    salary: str | None = None
    status: ApplicationStatus | None = None
    application_date: date | None = None
    job_url: str | None = None
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}


class JobApplicationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    company: str
    position: str
    location: str = ""
    salary: str = ""
    status: str = "applied"
    application_date: date | None = None
    job_url: str = ""
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserProfileView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: str
    role: str
    is_active: bool
    display_name: str
    created_at: datetime | None = None
    last_login: datetime | None = None


class ApplicationStatistics(BaseModel):
    total: int = 0
    applied: int = 0
    interview: int = 0
    offer: int = 0
    rejected: int = 0
    withdrawn: int = 0
    success_rate: int = 0


class UserStatistics(BaseModel):
    total_users: int = 0
    active_users: int = 0
    admin_users: int = 0
    moderator_users: int = 0
    regular_users: int = 0
    recent_users: list[UserProfileView] = Field(default_factory=list)


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    role: TurnRole
    content: str
    timestamp: datetime


class ModelResponse(BaseModel):
    content: str
