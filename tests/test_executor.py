"""Request executor: URL/query building, error classification, cancellation, stream release."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from ipfs_cluster_client.client import ClusterClient
from ipfs_cluster_client.errors import DecodeError, HttpError, RequestCancelledError
from ipfs_cluster_client.models.files import FilePart
from ipfs_cluster_client.transport.executor import RequestExecutor, build_query, run_with_signal

from tests.factories import CID_BAR, CID_FOO, make_add_wire


class TrackedStream(httpx.AsyncByteStream):
    """Response body that records whether it was released."""

    def __init__(self, chunks: list[bytes], stall_after: int | None = None) -> None:
        self.chunks = chunks
        self.stall_after = stall_after
        self.closed = False

    async def __aiter__(self):
        for i, chunk in enumerate(self.chunks):
            if self.stall_after is not None and i >= self.stall_after:
                await asyncio.sleep(30)
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


def make_executor(handler, base_url: str = "http://cluster.test", headers=None) -> RequestExecutor:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RequestExecutor(base_url, headers, http_client)


# ── URL and query building ───────────────────────────────────────


def test_build_query_skips_unset():
    assert build_query({"a": None, "b": True, "c": 1, "d": ["x", "y"]}) == {
        "b": "true", "c": "1", "d": ["x", "y"],
    }


def test_url_joins_relative_to_base_path():
    executor = RequestExecutor("http://cluster.test/api")
    assert str(executor.url("pins")) == "http://cluster.test/api/pins"
    assert str(executor.url("/version")) == "http://cluster.test/api/version"


async def test_query_and_headers_sent():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    executor = make_executor(handler, headers={"Authorization": "Basic abc"})
    result = await executor.request(
        "pins/x", "POST",
        params={"name": "n", "skip": None, "user-allocations": ["p1", "p2"]},
        headers={"X-Extra": "1"},
    )
    assert result == {"ok": True}
    req = seen[0]
    assert req.method == "POST"
    assert req.url.params.multi_items() == [
        ("name", "n"), ("user-allocations", "p1"), ("user-allocations", "p2"),
    ]
    assert req.headers["authorization"] == "Basic abc"
    assert req.headers["x-extra"] == "1"


# ── Error classification ─────────────────────────────────────────


async def test_non_2xx_raises_http_error_without_decoding():
    executor = make_executor(lambda request: httpx.Response(401, text="{not json"))
    with pytest.raises(HttpError) as exc_info:
        await executor.request("version")
    exc = exc_info.value
    assert exc.status == 401
    assert exc.reason == "Unauthorized"
    assert str(exc) == "401: Unauthorized"
    assert exc.response.text == "{not json"


async def test_2xx_with_bad_json_is_decode_error():
    executor = make_executor(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(DecodeError) as exc_info:
        await executor.request("version")
    assert not isinstance(exc_info.value, HttpError)
    assert exc_info.value.payload == "<html>"


async def test_add_distinguishes_bad_body_from_http_failure():
    client = ClusterClient(
        "http://cluster.test",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="garbage")),
        ),
    )
    with pytest.raises(DecodeError, match="failed to parse response body from cluster add"):
        await client.add(FilePart(b"foo", "foo.txt"))

    failing = ClusterClient(
        "http://cluster.test",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
        ),
    )
    with pytest.raises(HttpError) as exc_info:
        await failing.add(FilePart(b"foo", "foo.txt"))
    assert exc_info.value.status == 500


# ── Cancellation ─────────────────────────────────────────────────


async def test_signal_aborts_in_flight_request():
    started = asyncio.Event()
    cancelled = False

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal cancelled
        started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            cancelled = True
            raise
        return httpx.Response(200, json={})

    executor = make_executor(handler)
    signal = asyncio.Event()

    async def abort():
        await started.wait()
        signal.set()

    aborter = asyncio.create_task(abort())
    with pytest.raises(RequestCancelledError):
        await asyncio.wait_for(executor.request("version", signal=signal), timeout=5)
    await aborter
    assert cancelled


async def test_signal_already_set_sends_nothing():
    calls = []
    executor = make_executor(lambda request: calls.append(request) or httpx.Response(200, json={}))
    signal = asyncio.Event()
    signal.set()
    with pytest.raises(RequestCancelledError):
        await executor.request("version", signal=signal)
    assert calls == []


async def test_unfired_signal_returns_result():
    executor = make_executor(lambda request: httpx.Response(200, json={"version": "1.0.8"}))
    assert await executor.request("version", signal=asyncio.Event()) == {"version": "1.0.8"}


async def test_outer_cancel_tears_down_inner_work():
    started = asyncio.Event()
    cleaned = False

    async def work():
        nonlocal cleaned
        started.set()
        try:
            await asyncio.sleep(30)
        finally:
            cleaned = True

    outer = asyncio.create_task(run_with_signal(work(), asyncio.Event()))
    await started.wait()
    outer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await outer
    assert cleaned


async def test_run_with_signal_propagates_errors():
    async def fail():
        raise ValueError("nope")

    with pytest.raises(ValueError):
        await run_with_signal(fail(), asyncio.Event())


# ── Streams ──────────────────────────────────────────────────────


def _ndjson(*records: dict) -> list[bytes]:
    return [json.dumps(r).encode() + b"\n" for r in records]


async def test_stream_released_on_early_exit():
    stream = TrackedStream(_ndjson(make_add_wire(CID_FOO, "a"), make_add_wire(CID_BAR, "b")))
    client = ClusterClient(
        "http://cluster.test",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, stream=stream)),
        ),
    )
    results = client.add_stream([FilePart(b"a", "a"), FilePart(b"b", "b")])
    async for result in results:
        assert result.cid == CID_FOO
        break
    await results.aclose()
    assert stream.closed


async def test_stream_released_on_cancel_between_chunks():
    stream = TrackedStream(_ndjson(make_add_wire(CID_FOO, "a"), make_add_wire(CID_BAR, "b")), stall_after=1)
    client = ClusterClient(
        "http://cluster.test",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, stream=stream)),
        ),
    )
    signal = asyncio.Event()
    received = []
    with pytest.raises(RequestCancelledError):
        async for result in client.add_stream([FilePart(b"a", "a")], signal=signal):
            received.append(result.cid)
            signal.set()
    assert received == [CID_FOO]
    assert stream.closed


async def test_stream_http_error_is_raised_and_released():
    stream = TrackedStream([b"forbidden"])
    executor = make_executor(lambda request: httpx.Response(403, stream=stream))
    with pytest.raises(HttpError) as exc_info:
        async with executor.stream("pins"):
            pass
    assert exc_info.value.status == 403
    assert stream.closed
