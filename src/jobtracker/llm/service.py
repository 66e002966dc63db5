from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from typing import Any

from jobtracker.config import Settings, get_settings
from jobtracker.errors import AIRequestError, ValidationError
from jobtracker.llm.prompts import (
    ASSISTANT_SYSTEM_PROMPT,
    CAREER_INSIGHTS_PROMPT,
    CAREER_INSIGHTS_SYSTEM_PROMPT,
    INTERVIEW_QUESTIONS_PROMPT,
    INTERVIEW_SYSTEM_PROMPT,
    JOB_DESCRIPTION_ANALYSIS_PROMPT,
    JOB_DESCRIPTION_SYSTEM_PROMPT,
    RESUME_ANALYSIS_PROMPT,
    RESUME_SYSTEM_PROMPT,
)
from jobtracker.llm.providers import LLMProvider, ProviderConfig, parse_structured

logger = logging.getLogger(__name__)

INSIGHTS_APPLICATION_LIMIT = 10

AIResult = dict[str, Any] | list[Any]


class CareerAIService:
    """Builds career prompts, calls the completion API and parses replies.

    Structured (JSON) replies are returned as-is; anything else comes back as
    a text-mode envelope ``{"content": ..., "type": "text_*"}``.
    """

    def __init__(self, settings: Settings | None = None, provider: LLMProvider | None = None):
        self.settings = settings or get_settings()
        self.provider = provider or LLMProvider(ProviderConfig.from_settings(self.settings))

    def analyze_resume(self, resume_text: str, target_role: str = "") -> AIResult:
        if not resume_text or not resume_text.strip():
            raise ValidationError("Please provide resume text to analyze")

        target_role = (target_role or "").strip()
        prompt = RESUME_ANALYSIS_PROMPT.format(
            target_role_line=f"Target Role: {target_role}" if target_role else "",
            resume_text=resume_text.strip(),
        )
        content = self._complete(
            operation="resume analysis",
            system_prompt=RESUME_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.settings.resume_temperature,
            max_tokens=self.settings.resume_max_tokens,
        )
        return self._structured_or_text(content, text_type="text_analysis")

    def analyze_job_description(self, job_description: str) -> AIResult:
        if not job_description or not job_description.strip():
            raise ValidationError("Please provide a job description to analyze")

        prompt = JOB_DESCRIPTION_ANALYSIS_PROMPT.format(job_description=job_description.strip())
        content = self._complete(
            operation="job description analysis",
            system_prompt=JOB_DESCRIPTION_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.settings.job_description_temperature,
            max_tokens=self.settings.job_description_max_tokens,
        )
        return self._structured_or_text(content, text_type="text_analysis")

    def generate_career_insights(self, profile: Any, applications: Sequence[Any]) -> AIResult:
        recent = [safe_dict(item) for item in list(applications)[:INSIGHTS_APPLICATION_LIMIT]]
        prompt = CAREER_INSIGHTS_PROMPT.format(
            profile_json=to_json(safe_dict(profile)),
            applications_json=to_json(recent),
        )
        content = self._complete(
            operation="career insights",
            system_prompt=CAREER_INSIGHTS_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.settings.insights_temperature,
            max_tokens=self.settings.insights_max_tokens,
        )
        return self._structured_or_text(content, text_type="text_insights")

    def generate_interview_questions(self, job_description: str, resume_text: str = "") -> AIResult:
        if not job_description or not job_description.strip():
            raise ValidationError("Please provide a job description")

        resume_text = (resume_text or "").strip()
        prompt = INTERVIEW_QUESTIONS_PROMPT.format(
            resume_clause=" and candidate resume" if resume_text else "",
            job_description=job_description.strip(),
            resume_block=f"Candidate Resume:\n{resume_text}" if resume_text else "",
        )
        content = self._complete(
            operation="interview questions",
            system_prompt=INTERVIEW_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.settings.interview_temperature,
            max_tokens=self.settings.interview_max_tokens,
        )
        return self._structured_or_text(content, text_type="text_questions", allow_list=True)

    def chat_with_assistant(self, turns: Sequence[dict[str, str]], context: dict[str, Any] | None = None) -> str:
        system_prompt = ASSISTANT_SYSTEM_PROMPT.format(context_json=to_json(context or {}))
        messages = [{"role": turn["role"], "content": turn["content"]} for turn in turns]
        return self._complete(
            operation="assistant chat",
            system_prompt=system_prompt,
            messages=messages,
            temperature=self.settings.chat_temperature,
            max_tokens=self.settings.chat_max_tokens,
        )

    def _complete(
        self,
        *,
        operation: str,
        system_prompt: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            response = self.provider.complete_chat(
                model=self.settings.openai_model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as exc:
            logger.warning("AI request failed operation=%s error=%s", operation, exc)
            raise AIRequestError(operation, exc) from exc
        return response.content

    @staticmethod
    def _structured_or_text(content: str, *, text_type: str, allow_list: bool = False) -> AIResult:
        parsed = parse_structured(content)
        if isinstance(parsed, dict) or (allow_list and isinstance(parsed, list)):
            return parsed
        return {"content": content, "type": text_type}


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=True, default=str)


def safe_dict(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if is_dataclass(value):
        return asdict(value)

    payload = {}
    for key in dir(value):
        if key.startswith("_"):
            continue
        candidate = getattr(value, key)
        if callable(candidate):
            continue
        try:
            json.dumps(candidate, default=str)
            payload[key] = candidate
        except TypeError:
            payload[key] = str(candidate)
    return payload
