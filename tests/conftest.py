"""Shared test fixtures for the salute_speech test suite.

WHY: Client tests need a stand-in for the SaluteSpeech REST service and a
controllable clock. Centralizing them here keeps every test module talking
to the same fake server with the same payload shapes.

HOW: FakeSaluteServer is an httpx.MockTransport handler that records every
request and answers the token, upload, async_recognize, task:get and
data:download endpoints. FakeClock provides a callable clock plus an async
sleep that advances it instead of waiting.

RULES:
- No test ever touches the real network
- Payload shapes match the SaluteSpeech REST API envelopes
- Every status query response is driven by the server's status script
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from salute_speech.api.client import SaluteSpeechClient
from salute_speech.audio.metadata import AudioMetadata

BASE_URL = "https://speech.test/rest/v1"
TOKEN_URL = "https://auth.test/api/v2/oauth"
AUTH_KEY = "dGVzdC1pZDp0ZXN0LXNlY3JldA=="
SESSION_ID = "6f0b4b46-6d0e-4b5a-9bd6-3a3c1f1c0e01"
START_TIME = 1_700_000_000.0

HELLO_RESULT: List[Dict[str, Any]] = [
    {"results": [{"text": "hello world", "normalized_text": "hello world"}]},
]


# ---------------------------------------------------------------------------
# Fake clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Wall clock that only moves when told to (or when sleep is awaited)."""

    def __init__(self, now: float = START_TIME, sleep_step: Optional[float] = None) -> None:
        self.now = now
        self.sleep_step = sleep_step
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(self.sleep_step if self.sleep_step is not None else seconds)


# ---------------------------------------------------------------------------
# Fake SaluteSpeech service
# ---------------------------------------------------------------------------


class FakeSaluteServer:
    """In-process stand-in for the token and recognition endpoints."""

    def __init__(
        self,
        clock: FakeClock,
        statuses: Optional[List[str]] = None,
        result: Optional[List[Dict[str, Any]]] = None,
        token_lifetime_s: float = 1800.0,
    ) -> None:
        self.clock = clock
        self.statuses = list(statuses or ["DONE"])
        self.result = HELLO_RESULT if result is None else result
        self.token_lifetime_s = token_lifetime_s
        self.requests: List[httpx.Request] = []
        self.token_calls = 0
        # path (or "token") -> callable returning a Response, overrides defaults
        self.overrides: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def status_queries(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/task:get")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = "token" if request.url.host == "auth.test" else request.url.path
        if key in self.overrides:
            return self.overrides[key](request)

        if key == "token":
            self.token_calls += 1
            expires_at_ms = int((self.clock() + self.token_lifetime_s) * 1000)
            return httpx.Response(
                200,
                json={"access_token": "token-{}".format(self.token_calls), "expires_at": expires_at_ms},
            )
        if key.endswith("/data:upload"):
            return httpx.Response(200, json={"status": 200, "result": {"request_file_id": "file-1"}})
        if key.endswith("/speech:async_recognize"):
            return httpx.Response(200, json={"status": 200, "result": _task("NEW")})
        if key.endswith("/task:get"):
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            task = _task(status)
            if status == "DONE":
                task["response_file_id"] = "response-1"
            if status == "ERROR":
                task["error"] = "audio decoding failed"
            return httpx.Response(200, json={"status": 200, "result": task})
        if key.endswith("/data:download"):
            return httpx.Response(200, json=self.result)
        return httpx.Response(404, text="no route for {}".format(key))


def _task(status: str) -> Dict[str, Any]:
    return {
        "id": "task-1",
        "status": status,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:01Z",
    }


def fake_metadata_reader(path) -> AudioMetadata:
    return AudioMetadata(sample_rate=16000, channels_count=1)


def make_client(server: FakeSaluteServer, clock: FakeClock, **kwargs) -> SaluteSpeechClient:
    """Build a client wired to the fake server, clock and metadata reader."""
    params: Dict[str, Any] = dict(
        auth_key=AUTH_KEY,
        session_id=SESSION_ID,
        base_url=BASE_URL,
        token_url=TOKEN_URL,
        max_wait_s=300.0,
        poll_delay_s=2.0,
        transport=server.transport(),
        metadata_reader=fake_metadata_reader,
        clock=clock,
        sleep=clock.sleep,
    )
    params.update(kwargs)
    return SaluteSpeechClient(**params)


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def server(clock):
    return FakeSaluteServer(clock)


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "speech.mp3"
    path.write_bytes(b"ID3\x03fake mp3 bytes")
    return path
