from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from jobtracker.core.chat import ChatSession, build_user_context
from jobtracker.errors import ValidationError
from jobtracker.llm.prompts import ASSISTANT_APOLOGY_MESSAGE, ASSISTANT_WELCOME_MESSAGE
from jobtracker.types import ConversationTurn, JobApplicationRecord, UserProfileView


def test_send_appends_user_and_assistant_turns(make_ai) -> None:
    service, calls = make_ai("Tailor your resume for each role.")
    session = ChatSession(service, context={"total_applications": 0})

    session.welcome()
    reply = session.send("How do I stand out?")

    assert reply is not None
    assert [turn.role for turn in session.turns] == ["assistant", "user", "assistant"]
    assert [turn.id for turn in session.turns] == [1, 2, 3]
    assert session.turns[0].content == ASSISTANT_WELCOME_MESSAGE
    assert reply.content == "Tailor your resume for each role."
    assert session.last_error is None
    assert calls.calls[0]["messages"][-1] == {"role": "user", "content": "How do I stand out?"}


def test_blank_message_is_ignored(make_ai) -> None:
    service, calls = make_ai()
    session = ChatSession(service)
    assert session.send("   ") is None
    assert session.turns == ()
    assert calls.calls == []


def test_failed_reply_appends_apology(make_ai) -> None:
    service, _ = make_ai(TimeoutError("upstream timed out"))
    session = ChatSession(service)

    reply = session.send("Hello?")

    assert reply is not None
    assert reply.role == "assistant"
    assert reply.content == ASSISTANT_APOLOGY_MESSAGE
    assert [turn.role for turn in session.turns] == ["user", "assistant"]
    assert "upstream timed out" in session.last_error


def test_existing_turns_continue_numbering(make_ai) -> None:
    service, _ = make_ai("Sure.")
    now = datetime.now(UTC)
    history = [
        ConversationTurn(id=4, role="assistant", content="Hi", timestamp=now),
        ConversationTurn(id=7, role="user", content="Help", timestamp=now),
    ]
    session = ChatSession(service, turns=history)
    session.send("Thanks")
    assert [turn.id for turn in session.turns] == [4, 7, 8, 9]


def test_out_of_order_turns_are_rejected(make_ai) -> None:
    service, _ = make_ai()
    now = datetime.now(UTC)
    history = [
        ConversationTurn(id=2, role="assistant", content="Hi", timestamp=now),
        ConversationTurn(id=1, role="user", content="Help", timestamp=now),
    ]
    with pytest.raises(ValidationError):
        ChatSession(service, turns=history)


def test_clear_empties_history(make_ai) -> None:
    service, _ = make_ai("ok")
    session = ChatSession(service)
    session.send("hi")
    session.clear()
    assert session.turns == ()


def test_user_context_summarizes_applications() -> None:
    profile = UserProfileView(uid="u-1", email="jane@example.com", role="user", is_active=True, display_name="Jane")
    records = [
        JobApplicationRecord(
            id=index,
            user_id="u-1",
            company=f"Co{index}",
            position="Engineer",
            status="offer" if index % 2 else "applied",
            application_date=date(2024, 1, index),
        )
        for index in range(1, 13)
    ]

    context = build_user_context(profile, records)

    assert context["profile"]["uid"] == "u-1"
    assert context["total_applications"] == 12
    assert context["success_rate"] == 50
    assert len(context["recent_applications"]) == 10
    assert context["recent_applications"][0]["company"] == "Co12"
    assert "user_id" not in context["recent_applications"][0]
