"""
Pytest configuration and fixtures
"""
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from carebot.agents.generation import GenerationClient
from carebot.api.app import create_app
from carebot.store.database import Database
from carebot.store.repository import CustomerRepository
from carebot.store.seed import seed


class FakeCompletions:
    """Stands in for client.chat.completions and records every prompt."""

    def __init__(self):
        self.replies = []
        self.error = None
        self.raw_response = None
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.raw_response is not None:
            return self.raw_response
        content = self.replies.pop(0) if self.replies else json.dumps(
            {"reply": "Everything looks good!", "escalate": False}
        )
        message = SimpleNamespace(role="assistant", content=content)
        return SimpleNamespace(choices=[SimpleNamespace(index=0, message=message)])

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]


class FakeOpenAI:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite store for each test"""
    db = Database(tmp_path / "carebot-test.db").open()
    yield db
    db.close()


@pytest.fixture
def repo(database) -> CustomerRepository:
    return CustomerRepository(database)


@pytest.fixture
def seeded(repo):
    """Demo customers; returns {"John Doe": id, "Jane Smith": id}"""
    return seed(repo)


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def generator(fake_openai) -> GenerationClient:
    return GenerationClient(client=fake_openai, model="test-model")


@pytest.fixture
def client(database, generator):
    """API client bound to the test store and the fake generator"""
    return TestClient(create_app(database=database, generator=generator))
