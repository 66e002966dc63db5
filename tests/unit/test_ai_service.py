from __future__ import annotations

import json

import pytest

from jobtracker.errors import AIRequestError, ValidationError
from jobtracker.llm.providers import parse_structured
from jobtracker.types import JobApplicationRecord, ModelResponse


def test_parse_structured_handles_fences_and_plain_text() -> None:
    assert parse_structured('{"score": 8}') == {"score": 8}
    assert parse_structured('```json\n{"score": 8}\n```') == {"score": 8}
    assert parse_structured("Here you go:\n```\n[1, 2]\n```") == [1, 2]
    assert parse_structured("Hello, good luck!") is None
    assert parse_structured('"just a string"') is None
    assert parse_structured("   ") is None


def test_structured_resume_result_is_returned_unchanged(make_ai) -> None:
    payload = {"overall_assessment": "Solid", "score": 7, "strengths": ["Python"]}
    service, calls = make_ai(json.dumps(payload))

    result = service.analyze_resume("Ten years of Python.", target_role="Backend Engineer")

    assert result == payload
    request = calls.calls[0]
    assert request["model"] == service.settings.openai_model
    assert request["temperature"] == 0.7
    assert request["max_tokens"] == 200
    assert request["messages"][0]["role"] == "system"
    assert "Target Role: Backend Engineer" in request["messages"][1]["content"]


@pytest.mark.parametrize(
    ("method", "args", "text_type"),
    [
        ("analyze_resume", ("resume text",), "text_analysis"),
        ("analyze_job_description", ("We are hiring.",), "text_analysis"),
        ("generate_career_insights", ({"uid": "u-1"}, []), "text_insights"),
        ("generate_interview_questions", ("We are hiring.",), "text_questions"),
    ],
)
def test_non_json_reply_becomes_text_mode(make_ai, method: str, args: tuple, text_type: str) -> None:
    service, _ = make_ai("Hello, good luck!")
    assert getattr(service, method)(*args) == {"content": "Hello, good luck!", "type": text_type}


def test_interview_questions_accept_list_payload(make_ai) -> None:
    payload = [{"category": "Technical", "questions": [{"question": "Explain GIL"}]}]
    service, calls = make_ai(json.dumps(payload))

    assert service.generate_interview_questions("Backend role", resume_text="My resume") == payload
    assert "Candidate Resume:\nMy resume" in calls.calls[0]["messages"][1]["content"]


def test_json_list_is_text_mode_for_resume(make_ai) -> None:
    service, _ = make_ai("[1, 2, 3]")
    assert service.analyze_resume("resume") == {"content": "[1, 2, 3]", "type": "text_analysis"}


@pytest.mark.parametrize(
    ("method", "args"),
    [
        ("analyze_resume", ("   ",)),
        ("analyze_job_description", ("",)),
        ("generate_interview_questions", ("\n",)),
    ],
)
def test_blank_input_is_rejected_before_any_request(make_ai, method: str, args: tuple) -> None:
    service, calls = make_ai("unused")
    with pytest.raises(ValidationError):
        getattr(service, method)(*args)
    assert calls.calls == []


def test_provider_failure_is_wrapped_with_operation(make_ai) -> None:
    service, _ = make_ai(ConnectionError("connection refused"))
    with pytest.raises(AIRequestError) as excinfo:
        service.analyze_job_description("We are hiring.")
    assert excinfo.value.operation == "job description analysis"
    assert "connection refused" in str(excinfo.value)


def test_career_insights_use_ten_most_recent_applications(make_ai) -> None:
    records = [
        JobApplicationRecord(id=index, user_id="u-1", company=f"Co{index}", position="Engineer")
        for index in range(15)
    ]
    service, calls = make_ai('{"market_position": "strong"}')

    service.generate_career_insights({"uid": "u-1"}, records)

    prompt = calls.calls[0]["messages"][1]["content"]
    assert '"Co9"' in prompt
    assert '"Co10"' not in prompt
    assert calls.calls[0]["temperature"] == 0.8
    assert calls.calls[0]["max_tokens"] == 250


def test_chat_prepends_context_system_message(make_ai) -> None:
    service, calls = make_ai("Keep going!")
    turns = [
        {"role": "assistant", "content": "Hi"},
        {"role": "user", "content": "Any advice?"},
    ]

    reply = service.chat_with_assistant(turns, {"total_applications": 4, "success_rate": 25})

    assert reply == "Keep going!"
    messages = calls.calls[0]["messages"]
    assert messages[0]["role"] == "system"
    assert '"total_applications": 4' in messages[0]["content"]
    assert messages[1:] == turns
    assert calls.calls[0]["max_tokens"] == 100


def test_provider_returns_message_text(make_ai) -> None:
    service, calls = make_ai("plain reply")

    response = service.provider.complete_chat(
        model="gpt-4", messages=[{"role": "user", "content": "hi"}], temperature=0.2, max_tokens=10
    )

    assert response == ModelResponse(content="plain reply")
    assert calls.calls[0]["max_tokens"] == 10
