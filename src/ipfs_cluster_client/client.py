"""IPFS Cluster REST API client."""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import json
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Iterable, Mapping
from urllib.parse import quote

import httpx

from ipfs_cluster_client.codec.decode import (
    decode_add_result,
    decode_cluster_info,
    decode_metric_names,
    decode_pin_response,
    decode_status,
    decode_version,
)
from ipfs_cluster_client.codec.ndjson import aiter_records, parse_records
from ipfs_cluster_client.codec.params import (
    encode_add_params,
    encode_pin_options,
    encode_status_params,
)
from ipfs_cluster_client.errors import DecodeError
from ipfs_cluster_client.models.config import ClientConfig
from ipfs_cluster_client.models.files import FilePart
from ipfs_cluster_client.models.options import (
    AddOptions,
    ArrayEncoding,
    PinOptions,
    StatusAllOptions,
    StatusOptions,
)
from ipfs_cluster_client.models.records import (
    AddResult,
    ClusterInfo,
    PinResponse,
    StatusResponse,
)
from ipfs_cluster_client.transport.executor import RequestExecutor

log = logging.getLogger(__name__)


def _pin_path(cid: str) -> str:
    """``pins/<cid>``; IPFS/IPNS paths are appended verbatim."""
    return f"pins{cid}" if cid.startswith("/") else f"pins/{quote(cid, safe='')}"


def _check_files(files: Iterable[FilePart]) -> list[FilePart]:
    parts = list(files)
    for f in parts:
        if not isinstance(f, FilePart):
            raise TypeError(f"invalid file: expected FilePart, got {type(f).__name__}")
    return parts


def _with_overrides(options: PinOptions | None, **overrides: Any) -> AddOptions:
    """Copy ``options`` into a new AddOptions; the caller's object is untouched."""
    values = (
        {f.name: getattr(options, f.name) for f in dataclasses.fields(options)}
        if options is not None else {}
    )
    values.update(overrides)
    return AddOptions(**values)


def _add_record(line: str) -> AddResult:
    return decode_add_result(json.loads(line))


def _status_records(line: str) -> list[StatusResponse]:
    # Older clusters answer /pins with one JSON array instead of NDJSON.
    data = json.loads(line)
    if isinstance(data, list):
        return [decode_status(item) for item in data]
    return [decode_status(data)]


class ClusterClient:
    """Async client for one IPFS Cluster REST endpoint.

    The instance only holds immutable configuration (base URL, default
    headers, array encoding), so concurrent calls need no coordination. Every
    operation accepts an optional ``signal`` (``asyncio.Event``); setting it
    aborts the in-flight request with ``RequestCancelledError``.
    """

    def __init__(
        self,
        url: str | httpx.URL = "http://127.0.0.1:9094",
        headers: Mapping[str, str] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        array_encoding: ArrayEncoding | str = ArrayEncoding.COMMA,
    ) -> None:
        self._executor = RequestExecutor(url, headers, http_client)
        self._array_encoding = ArrayEncoding(array_encoding)

    @classmethod
    def from_config(
        cls, cfg: ClientConfig, http_client: httpx.AsyncClient | None = None
    ) -> ClusterClient:
        headers = dict(cfg.headers)
        if cfg.has_credentials:
            token = base64.b64encode(f"{cfg.username}:{cfg.password}".encode("utf-8")).decode("ascii")
            headers.setdefault("Authorization", f"Basic {token}")
        return cls(
            cfg.url, headers, http_client=http_client, array_encoding=cfg.array_encoding,
        )

    @property
    def url(self) -> str:
        return str(self._executor.base_url)

    @property
    def array_encoding(self) -> ArrayEncoding:
        return self._array_encoding

    # ── Add ────────────────────────────────────────────

    async def add(
        self,
        file: FilePart,
        options: AddOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> AddResult:
        """Import a file. Defaults to CIDv1 with raw leaves."""
        (part,) = _check_files([file])
        params = encode_add_params(options, self._array_encoding)
        log.info("Adding %s to cluster %s", part.name, self.url)

        text = await self._executor.request(
            "add", "POST",
            params=params,
            files=[part.to_multipart()],
            signal=signal,
            parse=False,
        )
        # A 2xx with an unreadable body must not look like an HTTP failure.
        try:
            if params.get("stream-channels") == "true":
                records = parse_records(text)
            else:
                records = json.loads(text)
            return decode_add_result(records[0])
        except (DecodeError, ValueError, LookupError, TypeError) as exc:
            raise DecodeError(
                f"failed to parse response body from cluster add: {exc}", payload=text,
            ) from exc

    async def add_car(
        self,
        car: FilePart,
        options: AddOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> AddResult:
        return await self.add(car, _with_overrides(options, format="car"), signal=signal)

    async def add_directory(
        self,
        files: Iterable[FilePart],
        options: AddOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> list[AddResult]:
        """Import files under a wrapping directory, buffered.

        Entries come back in cluster order: the files, then the directory.
        """
        parts = _check_files(files)
        params = encode_add_params(options, self._array_encoding)
        params["stream-channels"] = "false"
        params["wrap-with-directory"] = "true"
        log.info("Adding directory of %d files to cluster %s", len(parts), self.url)

        data = await self._executor.request(
            "add", "POST",
            params=params,
            files=[p.to_multipart() for p in parts],
            signal=signal,
        )
        if not isinstance(data, list):
            raise DecodeError("expected a JSON array from cluster add", payload=data)
        return [decode_add_result(item) for item in data]

    async def add_stream(
        self,
        files: Iterable[FilePart],
        options: AddOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> AsyncIterator[AddResult]:
        """Import files and yield results as the cluster streams them back.

        Single pass. Breaking out early releases the underlying response.
        """
        parts = _check_files(files)
        params = encode_add_params(options, self._array_encoding)
        params["stream-channels"] = "true"

        async with self._executor.stream(
            "add", "POST",
            params=params,
            files=[p.to_multipart() for p in parts],
            signal=signal,
        ) as response:
            chunks = self._executor.iter_bytes(response, signal)
            async with aclosing(aiter_records(chunks, _add_record)) as records:
                async for result in records:
                    yield result

    # ── Pins ───────────────────────────────────────────

    async def pin(
        self,
        cid: str,
        options: PinOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> PinResponse:
        """Pin a CID, or an ``/ipfs/...`` / ``/ipns/...`` path."""
        log.info("Pinning %s", cid)
        data = await self._executor.request(
            _pin_path(cid), "POST",
            params=encode_pin_options(options, self._array_encoding),
            signal=signal,
        )
        return decode_pin_response(data)

    async def unpin(self, cid: str, *, signal: asyncio.Event | None = None) -> PinResponse:
        log.info("Unpinning %s", cid)
        data = await self._executor.request(_pin_path(cid), "DELETE", signal=signal)
        return decode_pin_response(data)

    async def status(
        self,
        cid: str,
        options: StatusOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> StatusResponse:
        data = await self._executor.request(
            f"pins/{quote(cid, safe='')}",
            params=encode_status_params(options, self._array_encoding),
            signal=signal,
        )
        return decode_status(data)

    async def iter_status_all(
        self,
        options: StatusAllOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> AsyncIterator[StatusResponse]:
        """Status of every tracked pin, one record at a time."""
        async with self._executor.stream(
            "pins",
            params=encode_status_params(options, self._array_encoding),
            signal=signal,
        ) as response:
            chunks = self._executor.iter_bytes(response, signal)
            async with aclosing(aiter_records(chunks, _status_records)) as batches:
                async for batch in batches:
                    for status in batch:
                        yield status

    async def status_all(
        self,
        options: StatusAllOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> list[StatusResponse]:
        return [s async for s in self.iter_status_all(options, signal=signal)]

    async def allocation(self, cid: str, *, signal: asyncio.Event | None = None) -> PinResponse:
        data = await self._executor.request(
            f"allocations/{quote(cid, safe='')}", signal=signal,
        )
        return decode_pin_response(data)

    async def recover(
        self,
        cid: str,
        options: StatusOptions | None = None,
        *,
        signal: asyncio.Event | None = None,
    ) -> StatusResponse:
        log.info("Recovering %s", cid)
        data = await self._executor.request(
            f"pins/{quote(cid, safe='')}/recover", "POST",
            params=encode_status_params(options, self._array_encoding),
            signal=signal,
        )
        return decode_status(data)

    # ── Cluster ────────────────────────────────────────

    async def metric_names(self, *, signal: asyncio.Event | None = None) -> list[str]:
        data = await self._executor.request("monitor/metrics", signal=signal)
        return decode_metric_names(data)

    async def version(self, *, signal: asyncio.Event | None = None) -> str:
        data = await self._executor.request("version", signal=signal)
        return decode_version(data)

    async def info(self, *, signal: asyncio.Event | None = None) -> ClusterInfo:
        data = await self._executor.request("id", signal=signal)
        return decode_cluster_info(data)
