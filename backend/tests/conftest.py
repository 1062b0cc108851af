"""Shared test fixtures for backend tests."""

import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from writing_buddy.core.database import create_db_engine
from writing_buddy.core.errors import ProviderError
from writing_buddy.services.ledger import MessageLedger
from writing_buddy.services.llm.base import BaseLLMProvider, Message
from writing_buddy.services.orchestrator import TurnOrchestrator
from writing_buddy.services.sessions import SessionStateMachine
from writing_buddy.services.store import SQLStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_db_engine("sqlite://")

OWNER = "alice"
OTHER_OWNER = "bob"


class FakeProvider(BaseLLMProvider):
    """Records every call; replies from a script or fails on demand."""

    name = "fake"

    def __init__(self):
        self.calls: list[dict] = []
        self.replies: list[str] = []
        self.fail_with: ProviderError | None = None
        self.delay = 0.0

    async def generate_reply(
        self, system_instruction: str, history: list[Message], max_output_tokens: int
    ) -> str:
        self.calls.append({
            "system_instruction": system_instruction,
            "history": [(m.role, m.content) for m in history],
            "max_output_tokens": max_output_tokens,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with:
            raise self.fail_with
        if self.replies:
            return self.replies.pop(0)
        return f"Coach reply {len(self.calls)}"


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import writing_buddy.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def store():
    return SQLStore(test_engine)


@pytest.fixture
def ledger(store):
    return MessageLedger(store)


@pytest.fixture
def sessions(store):
    return SessionStateMachine(store)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def orchestrator(sessions, ledger, fake_provider):
    return TurnOrchestrator(
        sessions=sessions,
        ledger=ledger,
        provider=fake_provider,
        turn_max_tokens=1000,
        finish_max_tokens=1500,
    )


@pytest.fixture
def client(fake_provider):
    """FastAPI TestClient with the database and provider patched."""
    with (
        patch("writing_buddy.main.create_db_engine", return_value=test_engine),
        patch("writing_buddy.main.get_llm_provider", return_value=fake_provider),
    ):
        from writing_buddy.main import app

        with TestClient(app, headers={"X-Owner-Id": OWNER}) as c:
            yield c
