from __future__ import annotations

import pytest

from jobtracker.errors import UnrecognizedResponseShape
from jobtracker.llm.schemas import (
    CareerInsights,
    InterviewQuestions,
    JobDescriptionAnalysis,
    ResumeAnalysis,
    TextModeResult,
    normalize_result,
)


def test_resume_aliases_map_to_canonical_fields() -> None:
    result = normalize_result(
        "resume",
        {
            "assessment": "Good foundation",
            "overall_score": "8/10",
            "strengths": ["Clear summary", {"title": "Impact", "description": "Quantified results"}],
            "improvements": "Add metrics",
            "keywords": {"missing": "Kubernetes"},
        },
    )

    assert isinstance(result, ResumeAnalysis)
    assert result.overall_assessment == "Good foundation"
    assert result.score == 8.0
    assert result.strengths == ["Clear summary", "Impact: Quantified results"]
    assert result.areas_for_improvement == ["Add metrics"]
    assert result.keywords_ats == ["missing: Kubernetes"]
    assert result.action_items == []


def test_score_is_clamped() -> None:
    assert normalize_result("resume", {"score": 42}).score == 10.0
    assert normalize_result("resume", {"score": "n/a", "strengths": []}).score is None


def test_job_description_aliases() -> None:
    result = normalize_result(
        "job_description",
        {"summary": "Build APIs", "skills": ["Python", "SQL"], "level": "Senior", "warnings": []},
    )
    assert isinstance(result, JobDescriptionAnalysis)
    assert result.role_summary == "Build APIs"
    assert result.required_skills == ["Python", "SQL"]
    assert result.experience_level == "Senior"


def test_career_insights_canonical_keys() -> None:
    result = normalize_result("career_insights", {"market_position": "Strong", "trends": ["AI"]})
    assert isinstance(result, CareerInsights)
    assert result.industry_trends == ["AI"]


def test_interview_category_list_is_grouped() -> None:
    result = normalize_result(
        "interview_questions",
        [
            {"category": "Technical Questions", "questions": [{"question": "Explain REST", "approach": "Be concise"}]},
            {"category": "Behavioral", "questions": ["Tell me about a conflict"]},
            {"category": "Company/Role Fit", "questions": []},
            {"category": "Unknown", "questions": ["ignored"]},
        ],
    )

    assert isinstance(result, InterviewQuestions)
    assert result.technical[0].question == "Explain REST"
    assert result.technical[0].guidance == "Be concise"
    assert result.behavioral[0].question == "Tell me about a conflict"
    assert result.role_fit == []


def test_text_mode_passes_through() -> None:
    result = normalize_result("resume", {"content": "plain words", "type": "text_analysis"})
    assert result == TextModeResult(content="plain words", type="text_analysis")


def test_unrecognized_shape_raises() -> None:
    with pytest.raises(UnrecognizedResponseShape) as excinfo:
        normalize_result("resume", {"foo": 1, "bar": 2})
    assert excinfo.value.keys == ["bar", "foo"]

    with pytest.raises(UnrecognizedResponseShape):
        normalize_result("job_description", ["not", "a", "dict"])
