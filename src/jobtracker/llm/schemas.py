from __future__ import annotations

import json
import re
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from jobtracker.errors import UnrecognizedResponseShape

ResultKind = Literal["resume", "job_description", "career_insights", "interview_questions"]

_ITEM_TITLE_KEYS = ("title", "recommendation", "goal", "name", "skill", "question", "item")
_ITEM_DETAIL_KEYS = ("description", "details", "detail", "reason", "explanation")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "\n".join(part for part in (_text(item) for item in value) if part)
    if isinstance(value, dict):
        title = next((_text(value[key]) for key in _ITEM_TITLE_KEYS if value.get(key)), "")
        detail = next((_text(value[key]) for key in _ITEM_DETAIL_KEYS if value.get(key)), "")
        if title and detail:
            return f"{title}: {detail}"
        if title or detail:
            return title or detail
        return json.dumps(value, ensure_ascii=True, default=str)
    return str(value)


def _items(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [text for text in (_text(item) for item in value) if text]
    if isinstance(value, dict) and not any(key in value for key in _ITEM_TITLE_KEYS + _ITEM_DETAIL_KEYS):
        return [f"{key}: {_text(item)}" for key, item in value.items() if _text(item)]
    text = _text(value)
    return [text] if text else []


def _score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        if not match:
            return None
        number = float(match.group(0))
    return max(0.0, min(10.0, number))


Items = Annotated[list[str], BeforeValidator(_items)]
Text = Annotated[str, BeforeValidator(_text)]
Score = Annotated[float | None, BeforeValidator(_score)]


def _section(*aliases: str) -> Any:
    return Field(default_factory=list, validation_alias=AliasChoices(*aliases))


def _text_section(*aliases: str) -> Any:
    return Field(default="", validation_alias=AliasChoices(*aliases))


class _CanonicalResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def recognized_keys(cls) -> set[str]:
        keys: set[str] = set()
        for name, field in cls.model_fields.items():
            keys.add(name)
            alias = field.validation_alias
            if isinstance(alias, AliasChoices):
                keys.update(choice for choice in alias.choices if isinstance(choice, str))
        return keys


class ResumeAnalysis(_CanonicalResult):
    overall_assessment: Text = _text_section("overall_assessment", "assessment", "overallAssessment")
    score: Score = Field(default=None, validation_alias=AliasChoices("score", "overall_score", "rating"))
    strengths: Items = _section("strengths")
    areas_for_improvement: Items = _section("areas_for_improvement", "improvements", "areasForImprovement")
    missing_elements: Items = _section("missing_elements", "missing", "missingElements")
    formatting_structure: Items = _section("formatting_structure", "formatting", "formatting_and_structure")
    keywords_ats: Items = _section("keywords_ats", "keywords", "ats_optimization", "keywords_and_ats_optimization")
    industry_recommendations: Items = _section(
        "industry_recommendations", "industry_specific", "industry_specific_recommendations"
    )
    action_items: Items = _section("action_items", "actions", "actionItems")


class JobDescriptionAnalysis(_CanonicalResult):
    role_summary: Text = _text_section("role_summary", "summary", "roleSummary")
    key_responsibilities: Items = _section("key_responsibilities", "responsibilities")
    required_skills: Items = _section("required_skills", "skills")
    preferred_qualifications: Items = _section("preferred_qualifications", "qualifications")
    experience_level: Text = _text_section("experience_level", "experienceLevel", "level")
    company_culture_indicators: Items = _section("company_culture_indicators", "culture", "company_culture")
    salary_range_estimate: Text = _text_section("salary_range_estimate", "salary_estimate", "salary")
    application_tips: Items = _section("application_tips", "tips")
    red_flags: Items = _section("red_flags", "warnings")
    match_score_factors: Items = _section("match_score_factors", "match_factors")


class CareerInsights(_CanonicalResult):
    career_trajectory_analysis: Items = _section("career_trajectory_analysis", "trajectory")
    market_position: Text = _text_section("market_position", "marketPosition")
    skill_gap_analysis: Items = _section("skill_gap_analysis", "skill_gaps")
    industry_trends: Items = _section("industry_trends", "trends")
    networking_recommendations: Items = _section("networking_recommendations", "networking")
    personal_branding_suggestions: Items = _section("personal_branding_suggestions", "branding")
    short_term_goals: Items = _section("short_term_goals", "short_goals")
    long_term_strategy: Items = _section("long_term_strategy", "long_strategy")
    application_strategy: Items = _section("application_strategy", "strategy")
    professional_development: Items = _section("professional_development", "development")


class InterviewQuestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: Text = ""
    guidance: Text = Field(default="", validation_alias=AliasChoices("guidance", "approach", "how_to_answer"))
    key_points: Items = Field(default_factory=list, validation_alias=AliasChoices("key_points", "points"))


def _questions(value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [item if isinstance(item, dict) else {"question": _text(item)} for item in value]


Questions = Annotated[list[InterviewQuestion], BeforeValidator(_questions)]


class InterviewQuestions(_CanonicalResult):
    technical: Questions = _section("technical", "technical_questions")
    behavioral: Questions = _section("behavioral", "behavioral_questions")
    role_fit: Questions = _section("role_fit", "company_fit", "company_role_fit", "fit")
    situational: Questions = _section("situational", "situational_questions")
    experience: Questions = _section("experience", "experience_questions", "questions_about_experience")


class TextModeResult(BaseModel):
    content: str
    type: str


CANONICAL_MODELS: dict[str, type[_CanonicalResult]] = {
    "resume": ResumeAnalysis,
    "job_description": JobDescriptionAnalysis,
    "career_insights": CareerInsights,
    "interview_questions": InterviewQuestions,
}

_CATEGORY_PREFIXES = {
    "tech": "technical",
    "behav": "behavioral",
    "company": "role_fit",
    "role": "role_fit",
    "fit": "role_fit",
    "situat": "situational",
    "experience": "experience",
}


def _group_question_categories(payload: list[Any]) -> dict[str, Any]:
    grouped: dict[str, list[Any]] = {}
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        category = str(entry.get("category", "")).strip().lower()
        field = next((name for prefix, name in _CATEGORY_PREFIXES.items() if category.startswith(prefix)), None)
        if field is None:
            continue
        grouped.setdefault(field, []).extend(_questions(entry.get("questions", [])))
    return grouped


def is_text_mode(payload: Any) -> bool:
    return (
        isinstance(payload, dict)
        and set(payload) == {"content", "type"}
        and str(payload.get("type", "")).startswith("text_")
    )


def normalize_result(kind: ResultKind, payload: Any) -> _CanonicalResult | TextModeResult:
    if is_text_mode(payload):
        return TextModeResult.model_validate(payload)

    model = CANONICAL_MODELS[kind]
    if kind == "interview_questions" and isinstance(payload, list):
        payload = _group_question_categories(payload)

    if not isinstance(payload, dict):
        raise UnrecognizedResponseShape(kind, [])

    recognized = model.recognized_keys()
    if not recognized.intersection(payload):
        raise UnrecognizedResponseShape(kind, sorted(str(key) for key in payload))
    return model.model_validate(payload)
