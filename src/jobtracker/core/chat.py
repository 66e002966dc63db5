from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from jobtracker.core.applications import compute_statistics
from jobtracker.errors import AIRequestError, ValidationError
from jobtracker.llm.prompts import ASSISTANT_APOLOGY_MESSAGE, ASSISTANT_WELCOME_MESSAGE
from jobtracker.llm.service import CareerAIService
from jobtracker.types import ConversationTurn, JobApplicationRecord, TurnRole, UserProfileView

logger = logging.getLogger(__name__)

CONTEXT_APPLICATION_LIMIT = 10


def build_user_context(
    profile: UserProfileView | None,
    records: Sequence[JobApplicationRecord],
) -> dict[str, Any]:
    recent = sorted(
        records,
        key=lambda record: (record.application_date.toordinal() if record.application_date else 0, record.id),
        reverse=True,
    )[:CONTEXT_APPLICATION_LIMIT]
    stats = compute_statistics(records)
    return {
        "profile": profile.model_dump(mode="json") if profile is not None else None,
        "recent_applications": [
            record.model_dump(mode="json", exclude={"user_id", "created_at", "updated_at"}) for record in recent
        ],
        "total_applications": stats.total,
        "success_rate": stats.success_rate,
    }


class ChatSession:
    """Append-only conversation with the career assistant.

    Turns are never edited once appended. A failed completion still gets an
    assistant turn (an apology) so every user turn is answered.
    """

    def __init__(
        self,
        ai: CareerAIService,
        context: dict[str, Any] | None = None,
        turns: Iterable[ConversationTurn] | None = None,
    ):
        self.ai = ai
        self.context = context or {}
        self._turns: list[ConversationTurn] = list(turns or [])
        for previous, current in zip(self._turns, self._turns[1:]):
            if current.id <= previous.id:
                raise ValidationError("Conversation turns must be in chronological order")
        next_id = max((turn.id for turn in self._turns), default=0) + 1
        self._ids = itertools.count(next_id)
        self.last_error: str | None = None

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def welcome(self) -> ConversationTurn:
        return self._append("assistant", ASSISTANT_WELCOME_MESSAGE)

    def send(self, message: str) -> ConversationTurn | None:
        if not message or not message.strip():
            return None

        self.last_error = None
        self._append("user", message)
        history = [{"role": turn.role, "content": turn.content} for turn in self._turns]
        try:
            reply = self.ai.chat_with_assistant(history, self.context)
        except AIRequestError as exc:
            logger.warning("Assistant reply failed: %s", exc)
            self.last_error = str(exc)
            return self._append("assistant", ASSISTANT_APOLOGY_MESSAGE)
        return self._append("assistant", reply)

    def clear(self) -> None:
        self._turns.clear()
        self.last_error = None

    def _append(self, role: TurnRole, content: str) -> ConversationTurn:
        turn = ConversationTurn(id=next(self._ids), role=role, content=content, timestamp=datetime.now(UTC))
        self._turns.append(turn)
        return turn
