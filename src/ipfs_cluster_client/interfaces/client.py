"""ClusterAPI protocol - the operations exposed by an IPFS Cluster client."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Iterable, Protocol

from ipfs_cluster_client.models.files import FilePart
from ipfs_cluster_client.models.options import (
    AddOptions,
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


class ClusterAPI(Protocol):
    """Request/response operations against one cluster REST endpoint."""

    async def add(
        self, file: FilePart, options: AddOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> AddResult:
        """Import a single file and pin the result."""
        ...

    async def add_car(
        self, car: FilePart, options: AddOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> AddResult:
        """Import a CAR archive as-is."""
        ...

    async def add_directory(
        self, files: Iterable[FilePart], options: AddOptions | None = None,
        *, signal: asyncio.Event | None = None,
    ) -> list[AddResult]:
        """Import files wrapped in a directory; the last entry is the directory."""
        ...

    def add_stream(
        self, files: Iterable[FilePart], options: AddOptions | None = None,
        *, signal: asyncio.Event | None = None,
    ) -> AsyncIterator[AddResult]:
        """Import files and yield each result as the cluster reports it."""
        ...

    async def pin(
        self, cid: str, options: PinOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> PinResponse:
        """Pin a CID or an /ipfs/ or /ipns/ path."""
        ...

    async def unpin(self, cid: str, *, signal: asyncio.Event | None = None) -> PinResponse:
        ...

    async def status(
        self, cid: str, options: StatusOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> StatusResponse:
        ...

    async def status_all(
        self, options: StatusAllOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> list[StatusResponse]:
        ...

    async def allocation(self, cid: str, *, signal: asyncio.Event | None = None) -> PinResponse:
        ...

    async def recover(
        self, cid: str, options: StatusOptions | None = None, *, signal: asyncio.Event | None = None
    ) -> StatusResponse:
        ...

    async def metric_names(self, *, signal: asyncio.Event | None = None) -> list[str]:
        ...

    async def version(self, *, signal: asyncio.Event | None = None) -> str:
        ...

    async def info(self, *, signal: asyncio.Event | None = None) -> ClusterInfo:
        ...
