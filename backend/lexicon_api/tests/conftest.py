import asyncio
import json
import os
from datetime import datetime, timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ["GROQ_API_KEY"] = "test-key"

import pytest
from fastapi.testclient import TestClient

from lexicon_api.completion_client import get_completion_client
from lexicon_api.db import Base, SessionLocal, engine
from lexicon_api.errors import UpstreamError
from lexicon_api.main import app
from lexicon_api.models import Synonym, VocabularyWord
from lexicon_api.scheduler import JobRunner, get_job_runner


class FakeCompletionClient:
    """Returns scripted completions per content type, in order."""

    def __init__(self):
        self.responses = {}
        self.calls = []
        self.closed = 0
        self.delay = 0

    def queue(self, content_type, *items):
        self.responses.setdefault(content_type, []).extend(items)

    async def generate(self, content_type, **params):
        self.calls.append((content_type, params))
        if self.delay:
            await asyncio.sleep(self.delay)
        pending = self.responses.get(content_type) or []
        if not pending:
            raise UpstreamError("Empty response from completion API")
        item = pending.pop(0)
        if isinstance(item, Exception):
            raise item
        return item if isinstance(item, str) else json.dumps(item)

    async def aclose(self):
        self.closed += 1


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_llm():
    return FakeCompletionClient()


@pytest.fixture
def runner(fake_llm):
    return JobRunner(session_factory=SessionLocal, client_factory=lambda: fake_llm)


@pytest.fixture
def client(fake_llm, runner):
    app.dependency_overrides[get_completion_client] = lambda: fake_llm
    app.dependency_overrides[get_job_runner] = lambda: runner
    app.state.rate_limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.rate_limiter.reset()


def register(client, email="learner@example.com", name="Learner", password="secret123"):
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def make_word(db, text, *, created_at=None, synonyms=(), difficulty="advanced", **fields):
    word = VocabularyWord(text=text, difficulty=difficulty, **fields)
    if created_at is not None:
        word.created_at = created_at
    word.synonyms = [Synonym(text=s) for s in synonyms]
    db.add(word)
    db.commit()
    db.refresh(word)
    return word


def make_words(db, count, *, start=None):
    """Words w0..w{count-1}, w0 being the newest."""
    start = start or datetime(2026, 1, 1, 12, 0, 0)
    return [make_word(db, f"w{i}", created_at=start - timedelta(minutes=i)) for i in range(count)]
