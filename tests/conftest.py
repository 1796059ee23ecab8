"""Pytest configuration - loads .env for live tests and fakes the HTTP transport."""

import io
import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from email.message import Message
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from carthooks.core.client import APIClient, ClientConfig
from carthooks.sdk import CarthooksClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BASE_URL = "https://api.test.carthooks.local"
TOKEN = "test-token"


# =============================================================================
# Fake Transport
# =============================================================================


@dataclass
class RecordedRequest:
    """A request captured by the fake transport."""

    method: str
    url: str
    headers: dict[str, str]
    body: Any = None
    raw_body: bytes | None = None
    timeout: Any = None


class FakeResponse:
    """Minimal stand-in for the object urlopen returns."""

    def __init__(self, status: int, body: bytes):
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeAPI:
    """Queue of canned responses replayed by a patched urlopen."""

    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[Any] = field(default_factory=list)

    def respond(self, body: Any = None, status: int = 200, raw: bytes | str | None = None) -> "FakeAPI":
        """Queue a response. ``body`` is JSON-encoded unless ``raw`` is given."""
        if raw is None:
            payload = json.dumps(body).encode("utf-8")
        else:
            payload = raw.encode("utf-8") if isinstance(raw, str) else raw
        self.responses.append((status, payload))
        return self

    def envelope(
        self,
        data: Any = None,
        meta: dict | None = None,
        trace_id: str = "trace-1",
        error: dict | None = None,
        status: int = 200,
    ) -> "FakeAPI":
        """Queue a response wrapped in the standard envelope."""
        return self.respond({"data": data, "meta": meta or {}, "trace_id": trace_id, "error": error}, status=status)

    def fail(self, exc: BaseException) -> "FakeAPI":
        """Queue a transport-level exception."""
        self.responses.append(exc)
        return self

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    def urlopen(self, req: urllib.request.Request, timeout: Any = None) -> FakeResponse:
        raw_body = req.data
        self.requests.append(
            RecordedRequest(
                method=req.get_method(),
                url=req.full_url,
                headers=dict(req.header_items()),
                body=json.loads(raw_body) if raw_body else None,
                raw_body=raw_body,
                timeout=timeout,
            )
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request: {req.get_method()} {req.full_url}")

        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response

        status, payload = response
        # Mirror urllib: 4xx/5xx surface as HTTPError
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "error", Message(), io.BytesIO(payload))
        return FakeResponse(status, payload)


@pytest.fixture
def fake_api(monkeypatch) -> FakeAPI:
    """Patch urllib's urlopen with a recording fake."""
    api = FakeAPI()
    monkeypatch.setattr(urllib.request, "urlopen", api.urlopen)
    return api


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, access_token=TOKEN)


@pytest.fixture
def api_client(config) -> APIClient:
    return APIClient(config)


@pytest.fixture
def client(config) -> CarthooksClient:
    return CarthooksClient(config)
