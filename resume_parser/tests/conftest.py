"""
Pytest fixtures for the resume parser tests.
No network and no real sleeping: providers are faked or backed by httpx.MockTransport,
and the retry controller gets a recording sleep.
"""
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from resume_parser.app.core.dependencies import get_batch_processor, get_session
from resume_parser.app.services.batch_processor import BatchProcessor
from resume_parser.app.services.resume_extractor import (
    ProviderKind,
    ResumeExtractor,
    ResumeProvider,
    RetryPolicy,
)
from resume_parser.app.services.session_store import SessionState
from resume_parser.main import app

OPENROUTER_KEY = "sk-or-v1-test-key"
GEMINI_KEY = "AIzaSy-test-key"


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeProvider(ResumeProvider):
    """Provider whose single attempt is answered by respond(resume_text)."""

    def __init__(self, kind: ProviderKind, respond: Callable[[str], Any], max_attempts: int = 5):
        super().__init__(RetryPolicy(max_attempts=max_attempts))
        self.kind = kind
        self.max_chars = 6000
        self._respond = respond
        self.calls: list[tuple[str, str]] = []

    async def extract(self, resume_text: str, api_key: str) -> dict:
        self.calls.append((resume_text, api_key))
        return self._respond(resume_text)


def lowest(a: float, b: float) -> float:
    """Deterministic jitter: always the lower bound."""
    return a


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def session():
    return SessionState()


@pytest.fixture
def make_extractor(recording_sleep):
    def _make(chat: ResumeProvider | None = None, structured: ResumeProvider | None = None) -> ResumeExtractor:
        providers = {
            ProviderKind.CHAT_COMPLETION: chat or FakeProvider(ProviderKind.CHAT_COMPLETION, lambda t: {}),
            ProviderKind.STRUCTURED_OUTPUT: structured or FakeProvider(ProviderKind.STRUCTURED_OUTPUT, lambda t: {}),
        }
        return ResumeExtractor(providers, sleep=recording_sleep, uniform=lowest)
    return _make


def decode_text(data: bytes) -> str:
    """Fake PDF text extraction: the bytes are the text; b"corrupt" raises."""
    if data.startswith(b"corrupt"):
        raise ValueError("Invalid PDF structure")
    return data.decode("utf-8")


def candidate_from_text(text: str) -> dict:
    first_word = text.split()[0]
    return {
        "name": f"  {first_word.title()}   Doe ",
        "email": f"{first_word}@Example.com",
        "phone": "+1 (555) 123-4567",
        "skills": ["Python", "python", "SQL"],
        "experience_years": "5",
        "education": "BSc",
        "location": "Berlin",
        "summary": text,
    }


@pytest.fixture
def chat_provider():
    return FakeProvider(ProviderKind.CHAT_COMPLETION, candidate_from_text)


@pytest.fixture
def processor(session, make_extractor, chat_provider):
    return BatchProcessor(session, extractor=make_extractor(chat=chat_provider), text_extractor=decode_text)


@pytest.fixture
def client(session, processor):
    """TestClient with a fresh session and a fake-provider batch processor."""
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_batch_processor] = lambda: processor
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
