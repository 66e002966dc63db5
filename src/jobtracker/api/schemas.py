from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from jobtracker.types import ConversationTurn, JobApplicationRecord, Role, UserProfileView


class SignUpRequest(BaseModel):
    email: str
    password: str
    display_name: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserProfileView | None = None


class CreatedResponse(BaseModel):
    id: int


class ResumeAnalysisRequest(BaseModel):
    resume_text: str
    target_role: str = ""


class JobDescriptionRequest(BaseModel):
    job_description: str


class InterviewQuestionsRequest(BaseModel):
    job_description: str
    resume_text: str = ""


class AIResultResponse(BaseModel):
    kind: str
    text_mode: bool
    raw: Any
    normalized: dict[str, Any]


class ChatRequest(BaseModel):
    turns: list[ConversationTurn] = Field(default_factory=list)
    message: str


class ChatResponse(BaseModel):
    turns: list[ConversationTurn]
    error: str | None = None


class RoleUpdateRequest(BaseModel):
    role: str


class ActiveUpdateRequest(BaseModel):
    active: bool


class CareerSummaryResponse(BaseModel):
    total_applications: int
    success_rate: int
    most_applied_position: str | None = None
    role: Role | None = None
    recent_applications: list[JobApplicationRecord] = Field(default_factory=list)
