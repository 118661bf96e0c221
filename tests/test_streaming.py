from __future__ import annotations

import json

import httpx
import pytest

from waterlight import APIError, AuthenticationError, Stream, WaterlightError
from waterlight.parsers.stream_parser import MAX_BUFFER_SIZE
from tests.conftest import ChunkedStream, DripStream, FakeClock, FakeTransport, build_client, raise_error, sse_response

MESSAGES = [{"role": "user", "content": "x"}]


def _chunk(chunk_id: str, content: str | None = None, finish_reason: str | None = None) -> dict:
    delta = {"content": content} if content is not None else {}
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "mist-1-turbo",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


CHUNK_1 = _chunk("chunk-1", "Hello")
CHUNK_2 = _chunk("chunk-2", " world")
CHUNK_DONE = _chunk("chunk-3", finish_reason="stop")


def _frame(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def test_parses_data_lines_into_chunks() -> None:
    body = ChunkedStream([_frame(CHUNK_1), _frame(CHUNK_2), _frame(CHUNK_DONE), "data: [DONE]\n\n"])
    client = build_client(FakeTransport([sse_response(body)]))

    stream = client.chat.completions.create(model="mist-1-turbo", messages=MESSAGES, stream=True)
    chunks = list(stream)

    assert isinstance(stream, Stream)
    assert [chunk["choices"][0]["delta"].get("content") for chunk in chunks] == ["Hello", " world", None]
    assert chunks[2]["choices"][0]["finish_reason"] == "stop"
    assert body.close_count == 1


def test_terminates_on_done_and_ignores_later_frames() -> None:
    body = ChunkedStream([_frame(CHUNK_1), "data: [DONE]\n\n", _frame(CHUNK_2)])
    client = build_client(FakeTransport([sse_response(body)]))

    chunks = list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert [chunk["id"] for chunk in chunks] == ["chunk-1"]
    assert body.close_count == 1


def test_skips_malformed_json_chunks() -> None:
    body = ChunkedStream([_frame(CHUNK_1), "data: {invalid json\n\n", _frame(CHUNK_2), "data: [DONE]\n\n"])
    client = build_client(FakeTransport([sse_response(body)]))

    chunks = list(client.chat.completions.create(model="m", messages=MESSAGES, stream=True))

    assert [chunk["id"] for chunk in chunks] == ["chunk-1", "chunk-2"]


def test_ends_quietly_without_done_sentinel() -> None:
    body = ChunkedStream([_frame(CHUNK_1), 'data: {"partial"'])
    client = build_client(FakeTransport([sse_response(body)]))

    chunks = list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert [chunk["id"] for chunk in chunks] == ["chunk-1"]
    assert body.close_count == 1


def test_sends_streaming_headers_and_forces_stream_flag() -> None:
    transport = FakeTransport([sse_response(ChunkedStream(["data: [DONE]\n\n"]))])
    client = build_client(transport, api_key="wl-stream", base_url="https://api.test")

    for _ in client.chat.completions.create(model="m", messages=MESSAGES, stream=True):
        pass

    request = transport.requests[0]
    assert str(request.url) == "https://api.test/v1/chat/completions"
    assert request.method == "POST"
    assert request.headers["Accept"] == "text/event-stream"
    assert request.headers["Authorization"] == "Bearer wl-stream"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"].startswith("waterlight-python/")
    assert json.loads(request.content) == {"model": "m", "messages": MESSAGES, "stream": True}


def test_connects_lazily_on_first_iteration() -> None:
    transport = FakeTransport([sse_response(ChunkedStream([_frame(CHUNK_1), "data: [DONE]\n\n"]))])
    client = build_client(transport)

    stream = client.chat.completions.create_stream(model="m", messages=MESSAGES)
    assert transport.requests == []

    iterator = iter(stream)
    assert transport.requests == []

    assert next(iterator)["id"] == "chunk-1"
    assert len(transport.requests) == 1


def test_non_ok_response_raises_base_error() -> None:
    transport = FakeTransport([httpx.Response(500, text="Server Error")])
    client = build_client(transport, max_retries=3)

    with pytest.raises(WaterlightError) as exc_info:
        list(client.chat.completions.create(model="m", messages=MESSAGES, stream=True))

    assert type(exc_info.value) is WaterlightError
    assert exc_info.value.status == 500
    assert "Streaming error: 500 Server Error" in exc_info.value.message
    assert len(transport.requests) == 1


def test_non_ok_response_is_not_classified_by_status() -> None:
    response = httpx.Response(401, json={"error": {"message": "bad key"}})
    client = build_client(FakeTransport([response]))

    with pytest.raises(WaterlightError) as exc_info:
        list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert not isinstance(exc_info.value, AuthenticationError)
    assert exc_info.value.status == 401


def test_non_ok_response_is_released() -> None:
    body = ChunkedStream(["Bad Gateway"])
    client = build_client(FakeTransport([sse_response(body, status=502)]))

    with pytest.raises(WaterlightError):
        list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert body.close_count == 1


def test_connect_timeout_maps_to_408() -> None:
    client = build_client(FakeTransport([raise_error(httpx.ConnectTimeout, "timed out")]))

    with pytest.raises(APIError) as exc_info:
        list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert exc_info.value.message == "Stream request timed out"
    assert exc_info.value.status == 408


def test_connect_network_error_maps_to_0() -> None:
    client = build_client(FakeTransport([raise_error(httpx.ConnectError, "connection refused")]))

    with pytest.raises(APIError) as exc_info:
        list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert exc_info.value.message == "Network error: connection refused"
    assert exc_info.value.status == 0


def test_read_timeout_mid_stream_maps_to_408() -> None:
    body = ChunkedStream([_frame(CHUNK_1), httpx.ReadTimeout("read timed out")])
    client = build_client(FakeTransport([sse_response(body)]))
    received = []

    with pytest.raises(APIError) as exc_info:
        for chunk in client.chat.completions.create_stream(model="m", messages=MESSAGES):
            received.append(chunk)

    assert [chunk["id"] for chunk in received] == ["chunk-1"]
    assert exc_info.value.status == 408
    assert body.close_count == 1


def test_stream_outliving_timeout_maps_to_408(clock: FakeClock) -> None:
    body = DripStream(clock, [_frame(CHUNK_1), _frame(CHUNK_2), _frame(CHUNK_DONE), "data: [DONE]\n\n"], step=0.3)
    client = build_client(FakeTransport([sse_response(body)]), timeout_ms=500)
    received = []

    with pytest.raises(APIError) as exc_info:
        for chunk in client.chat.completions.create_stream(model="m", messages=MESSAGES):
            received.append(chunk)

    assert [chunk["id"] for chunk in received] == ["chunk-1"]
    assert exc_info.value.message == "Stream request timed out"
    assert exc_info.value.status == 408
    assert body.close_count == 1


def test_stream_deadline_starts_at_connect(clock: FakeClock) -> None:
    body = DripStream(clock, [_frame(CHUNK_1), "data: [DONE]\n\n"], step=0.1)
    transport = FakeTransport([sse_response(body)])
    client = build_client(transport, timeout_ms=500)

    stream = client.chat.completions.create_stream(model="m", messages=MESSAGES)
    clock.advance(10)

    assert [chunk["id"] for chunk in stream] == ["chunk-1"]
    assert body.close_count == 1


def test_buffer_overflow_aborts_stream() -> None:
    body = ChunkedStream([b"data: " + b"x" * MAX_BUFFER_SIZE])
    client = build_client(FakeTransport([sse_response(body)]))

    with pytest.raises(APIError, match="SSE buffer overflow") as exc_info:
        list(client.chat.completions.create_stream(model="m", messages=MESSAGES))

    assert exc_info.value.status == 0
    assert body.close_count == 1


def test_cannot_iterate_twice() -> None:
    body = ChunkedStream(["data: [DONE]\n\n"])
    client = build_client(FakeTransport([sse_response(body)]))
    stream = client.chat.completions.create_stream(model="m", messages=MESSAGES)

    assert list(stream) == []
    with pytest.raises(WaterlightError, match="only be iterated once"):
        iter(stream)


def test_close_after_early_break_releases_response_once() -> None:
    body = ChunkedStream([_frame(CHUNK_1), _frame(CHUNK_2), "data: [DONE]\n\n"])
    client = build_client(FakeTransport([sse_response(body)]))

    stream = client.chat.completions.create_stream(model="m", messages=MESSAGES)
    for _ in stream:
        break
    assert body.close_count == 0

    stream.close()
    stream.close()
    assert body.close_count == 1


def test_context_manager_releases_response() -> None:
    body = ChunkedStream([_frame(CHUNK_1), _frame(CHUNK_2), "data: [DONE]\n\n"])
    client = build_client(FakeTransport([sse_response(body)]))

    with client.chat.completions.create(model="m", messages=MESSAGES, stream=True) as stream:
        first = next(iter(stream))

    assert first["id"] == "chunk-1"
    assert body.close_count == 1


def test_close_before_iteration_does_not_connect() -> None:
    transport = FakeTransport([])
    client = build_client(transport)

    stream = client.chat.completions.create_stream(model="m", messages=MESSAGES)
    stream.close()

    assert transport.requests == []
    with pytest.raises(WaterlightError, match="closed"):
        iter(stream)
    assert transport.requests == []
