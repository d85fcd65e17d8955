"""HTTP request executor - one request per call against the cluster REST API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Mapping, Sequence, TypeVar

import httpx

from ipfs_cluster_client.errors import DecodeError, HttpError, RequestCancelledError

log = logging.getLogger(__name__)

T = TypeVar("T")

FileField = tuple[str, tuple[str, Any, str]]


async def run_with_signal(awaitable: Awaitable[T], signal: asyncio.Event | None) -> T:
    """Await ``awaitable`` unless ``signal`` fires first.

    When the signal wins, the in-flight work is cancelled and torn down before
    ``RequestCancelledError`` is raised; no partial result escapes.
    """
    if signal is None:
        return await awaitable
    if signal.is_set():
        close = getattr(awaitable, "close", None)
        if close is not None:
            close()
        raise RequestCancelledError("request aborted before it was sent")

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        await asyncio.gather(task, waiter, return_exceptions=True)
        raise
    waiter.cancel()
    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise RequestCancelledError("request aborted by caller")


def _query_value(value: Any) -> str | list[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]  # type: ignore[misc]
    return str(value)


def build_query(params: Mapping[str, Any] | None) -> dict[str, str | list[str]]:
    """Drop unset parameters; list values become repeated query keys."""
    return {k: _query_value(v) for k, v in (params or {}).items() if v is not None}


class RequestExecutor:
    """Issues single requests against a cluster endpoint.

    Holds only immutable configuration. When no ``http_client`` is injected a
    fresh ``httpx.AsyncClient`` is opened per call, without any timeout:
    callers bound a request with an abort signal instead.
    """

    def __init__(
        self,
        base_url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        base = str(base_url)
        if not base.endswith("/"):
            base += "/"
        self._base_url = httpx.URL(base)
        self._headers = dict(headers or {})
        self._http_client = http_client

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def url(self, path: str) -> httpx.URL:
        return self._base_url.join(path.lstrip("/"))

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=None) as client:
                yield client

    def _build(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        files: Sequence[FileField] | None,
        headers: Mapping[str, str] | None,
    ) -> httpx.Request:
        request = client.build_request(
            method,
            self.url(path),
            params=build_query(params),
            files=list(files) if files else None,
            headers={**self._headers, **(headers or {})},
        )
        log.debug("%s %s", method, request.url)
        return request

    @staticmethod
    def _check_status(response: httpx.Response) -> None:
        if not response.is_success:
            log.warning(
                "%s %s failed: HTTP %d %s",
                response.request.method, response.request.url.path,
                response.status_code, response.reason_phrase,
            )
            raise HttpError(response.status_code, response.reason_phrase, response)

    async def request(
        self,
        path: str,
        method: str = "GET",
        *,
        params: Mapping[str, Any] | None = None,
        files: Sequence[FileField] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        parse: bool = True,
    ) -> Any:
        """Perform one request and return the decoded JSON body.

        With ``parse=False`` the body is returned as text instead.
        """
        async with self._client() as client:
            req = self._build(client, method, path, params, files, headers)
            response = await run_with_signal(client.send(req), signal)

        self._check_status(response)
        if not parse:
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(
                f"{method} {path}: response body is not valid JSON", payload=response.text,
            ) from exc

    @asynccontextmanager
    async def stream(
        self,
        path: str,
        method: str = "GET",
        *,
        params: Mapping[str, Any] | None = None,
        files: Sequence[FileField] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Open a streaming response; it is released on every exit path."""
        async with self._client() as client:
            req = self._build(client, method, path, params, files, headers)
            response = await run_with_signal(client.send(req, stream=True), signal)
            try:
                if not response.is_success:
                    await response.aread()
                self._check_status(response)
                yield response
            finally:
                await response.aclose()

    @staticmethod
    async def iter_bytes(
        response: httpx.Response, signal: asyncio.Event | None = None
    ) -> AsyncIterator[bytes]:
        """Raw body chunks of a streaming response, abortable between chunks."""
        chunks = response.aiter_bytes()
        try:
            while True:
                try:
                    chunk = await run_with_signal(chunks.__anext__(), signal)
                except StopAsyncIteration:
                    return
                yield chunk
        finally:
            await chunks.aclose()
