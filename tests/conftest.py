from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ADMIN_EMAILS"] = "admin@jobtracker.com,admin2@jobtracker.com"

from types import SimpleNamespace

import pytest

from jobtracker.config import get_settings
from jobtracker.db import models  # noqa: F401
from jobtracker.db.base import Base
from jobtracker.db.session import engine
from jobtracker.llm.providers import LLMProvider, ProviderConfig
from jobtracker.llm.service import CareerAIService


class FakeChatCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeOpenAIClient:
    def __init__(self, *replies):
        self.completions = FakeChatCompletions(replies)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def make_ai():
    def _make(*replies):
        client = FakeOpenAIClient(*replies)
        provider = LLMProvider(
            ProviderConfig(name="openai", base_url="http://localhost:9999/v1", api_key="dummy", timeout_sec=5),
            client=client,
        )
        return CareerAIService(settings=get_settings(), provider=provider), client.completions

    return _make
