"""Shared test fixtures for the relay."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from src.config import Config
from src.services.quota import QuotaTracker
from src.services.relay import QueryRelay
from src.services.upstream import GroqClient, TavilyClient

# ============================================================================
# Clock / Quota Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(clock: FakeClock) -> QuotaTracker:
    return QuotaTracker(clock=clock)


# ============================================================================
# Upstream Mocking Fixtures
# ============================================================================


@pytest.fixture
def mock_groq() -> MagicMock:
    """GroqClient stand-in whose complete() returns a valid completion."""
    groq = MagicMock(spec=GroqClient)
    groq.complete = AsyncMock(
        return_value={"choices": [{"message": {"role": "assistant", "content": "Photosynthesis is..."}}]}
    )
    return groq


@pytest.fixture
def mock_tavily() -> MagicMock:
    """TavilyClient stand-in whose search() returns a search payload."""
    tavily = MagicMock(spec=TavilyClient)
    tavily.search = AsyncMock(
        return_value={
            "query": "python",
            "answer": "Python is a programming language.",
            "results": [{"title": "Python", "url": "https://python.org", "content": "..."}],
        }
    )
    return tavily


@pytest.fixture
def offline_relay(tracker: QuotaTracker) -> QueryRelay:
    """Relay with no API keys configured."""
    return QueryRelay(tracker)


@pytest.fixture
def mock_httpx_client():
    """Build a patched httpx.AsyncClient class whose post() returns the given body.

    Pass ``json_payload`` for a JSON-encoded body or ``content`` for raw bytes.
    """

    def _build(json_payload=None, side_effect=None, content=None):
        response = MagicMock()
        response.status_code = 200
        response.content = content if content is not None else json.dumps(json_payload).encode()

        client_class = MagicMock()
        client = client_class.return_value.__aenter__.return_value
        client.post = AsyncMock(return_value=response, side_effect=side_effect)
        return client_class, client

    return _build


@pytest.fixture
def connect_error():
    """Build an httpx.ConnectError caused by the given socket-level error, as httpx raises it."""

    def _build(cause: BaseException, message: str = "connect failed") -> httpx.ConnectError:
        error = httpx.ConnectError(message, request=MagicMock())
        error.__cause__ = cause
        return error

    return _build


# ============================================================================
# App Fixtures
# ============================================================================


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Config with no API keys and no static directory."""
    return Config(
        groq_api_key=None,
        tavily_api_key=None,
        static_dir=str(tmp_path / "missing-public"),
    )


@pytest.fixture
def client(test_config: Config, tracker: QuotaTracker) -> TestClient:
    from src.main import create_app

    return TestClient(create_app(test_config, tracker))
