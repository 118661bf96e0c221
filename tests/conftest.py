from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Union

import httpx
import pytest

from waterlight import Waterlight

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]

COMPLETION = {
    "id": "chatcmpl-abc",
    "object": "chat.completion",
    "created": 1700000000,
    "model": "mist-1-turbo",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello!"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
}


class FakeTransport:
    """Replays queued replies in order and records every request it receives."""

    def __init__(self, replies: Iterable[Reply]) -> None:
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        return reply(request)


class ChunkedStream(httpx.SyncByteStream):
    """Response body delivered as separate reads; counts how often it is closed."""

    def __init__(self, chunks: Iterable[Union[str, bytes, Exception]]) -> None:
        self._chunks = list(chunks)
        self.close_count = 0

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk

    def close(self) -> None:
        self.close_count += 1


class FakeClock:
    """Monotonic clock that only moves when a test advances it."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DripStream(ChunkedStream):
    """Response body whose every read costs `step` seconds on the fake clock."""

    def __init__(self, clock: FakeClock, chunks: Iterable[Union[str, bytes]], step: float) -> None:
        super().__init__(chunks)
        self._clock = clock
        self._step = step

    def __iter__(self) -> Iterator[bytes]:
        for chunk in super().__iter__():
            self._clock.advance(self._step)
            yield chunk


def json_response(status: int, body: Any = None, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status, json={} if body is None else body, headers=headers)


def sse_response(body: ChunkedStream, status: int = 200) -> httpx.Response:
    return httpx.Response(status, stream=body, headers={"Content-Type": "text/event-stream"})


def raise_error(error_cls: type[httpx.RequestError], message: str) -> Callable[[httpx.Request], httpx.Response]:
    def _reply(request: httpx.Request) -> httpx.Response:
        raise error_cls(message, request=request)

    return _reply


def build_client(transport: FakeTransport, **kwargs: Any) -> Waterlight:
    kwargs.setdefault("api_key", "wl-key")
    http_client = httpx.Client(transport=httpx.MockTransport(transport))
    return Waterlight(http_client=http_client, **kwargs)


@pytest.fixture(autouse=True)
def _clear_waterlight_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WATERLIGHT_API_KEY", raising=False)
    monkeypatch.delenv("WATERLIGHT_BASE_URL", raising=False)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr("waterlight.clients.dispatcher.time.sleep", recorded.append)
    return recorded


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr("waterlight.clients.dispatcher.time.monotonic", fake)
    return fake
