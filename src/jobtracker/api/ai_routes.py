from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends

from jobtracker.api.deps import get_ai_service, get_application_store, get_current_user
from jobtracker.api.schemas import (
    AIResultResponse,
    ChatRequest,
    ChatResponse,
    InterviewQuestionsRequest,
    JobDescriptionRequest,
    ResumeAnalysisRequest,
)
from jobtracker.core.applications import JobApplicationStore
from jobtracker.core.chat import ChatSession, build_user_context
from jobtracker.db.models import UserProfile
from jobtracker.errors import UnrecognizedResponseShape
from jobtracker.llm.schemas import ResultKind, TextModeResult, normalize_result
from jobtracker.llm.service import INSIGHTS_APPLICATION_LIMIT, CareerAIService
from jobtracker.types import UserProfileView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])

_TEXT_TYPES: dict[str, str] = {
    "resume": "text_analysis",
    "job_description": "text_analysis",
    "career_insights": "text_insights",
    "interview_questions": "text_questions",
}


def _result_response(kind: ResultKind, raw: Any) -> AIResultResponse:
    try:
        normalized = normalize_result(kind, raw)
    except UnrecognizedResponseShape as exc:
        logger.warning("Downgrading AI result to text mode: %s", exc)
        normalized = TextModeResult(
            content=json.dumps(raw, indent=2, ensure_ascii=False, default=str),
            type=_TEXT_TYPES[kind],
        )
    return AIResultResponse(
        kind=kind,
        text_mode=isinstance(normalized, TextModeResult),
        raw=raw,
        normalized=normalized.model_dump(),
    )


@router.post("/resume", response_model=AIResultResponse)
def analyze_resume(
    payload: ResumeAnalysisRequest,
    user: UserProfile = Depends(get_current_user),
    ai: CareerAIService = Depends(get_ai_service),
) -> AIResultResponse:
    return _result_response("resume", ai.analyze_resume(payload.resume_text, payload.target_role))


@router.post("/job-description", response_model=AIResultResponse)
def analyze_job_description(
    payload: JobDescriptionRequest,
    user: UserProfile = Depends(get_current_user),
    ai: CareerAIService = Depends(get_ai_service),
) -> AIResultResponse:
    return _result_response("job_description", ai.analyze_job_description(payload.job_description))


@router.post("/interview-questions", response_model=AIResultResponse)
def interview_questions(
    payload: InterviewQuestionsRequest,
    user: UserProfile = Depends(get_current_user),
    ai: CareerAIService = Depends(get_ai_service),
) -> AIResultResponse:
    raw = ai.generate_interview_questions(payload.job_description, payload.resume_text)
    return _result_response("interview_questions", raw)


@router.post("/career-insights", response_model=AIResultResponse)
def career_insights(
    user: UserProfile = Depends(get_current_user),
    ai: CareerAIService = Depends(get_ai_service),
    store: JobApplicationStore = Depends(get_application_store),
) -> AIResultResponse:
    profile = UserProfileView.model_validate(user)
    applications = store.recent_by_application_date(user.uid, limit=INSIGHTS_APPLICATION_LIMIT)
    return _result_response("career_insights", ai.generate_career_insights(profile, applications))


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    user: UserProfile = Depends(get_current_user),
    ai: CareerAIService = Depends(get_ai_service),
    store: JobApplicationStore = Depends(get_application_store),
) -> ChatResponse:
    context = build_user_context(UserProfileView.model_validate(user), store.snapshot(user.uid))
    session = ChatSession(ai, context=context, turns=payload.turns)
    if not session.turns:
        session.welcome()
    session.send(payload.message)
    return ChatResponse(turns=list(session.turns), error=session.last_error)
