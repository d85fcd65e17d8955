"""Caller-facing option sets. Every field is optional; unset fields never reach the wire."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ipfs_cluster_client.models.status import PinMode, TrackerStatus


class ArrayEncoding(str, Enum):
    """How list-valued options are placed in the query string."""

    COMMA = "comma"  # user-allocations=a,b
    REPEAT = "repeat"  # user-allocations=a&user-allocations=b


@dataclass
class PinOptions:
    """Options accepted by ``POST /pins/{cid}`` and, as a subset, by ``/add``."""

    replication_factor_min: int | None = None
    replication_factor_max: int | None = None
    name: str | None = None
    mode: PinMode | str | None = None
    shard_size: int | None = None
    user_allocations: list[str] | None = None  # peer IDs
    expire_at: datetime | None = None
    metadata: dict[str, str] | None = None
    pin_update: str | None = None  # CID of the pin being replaced
    origins: list[str] | None = None  # multiaddrs known to provide the data


@dataclass
class AddOptions(PinOptions):
    """Pin options plus the importer controls used when adding content."""

    local: bool | None = None
    recursive: bool | None = None
    hidden: bool | None = None
    wrap: bool | None = None
    shard: bool | None = None
    stream_channels: bool | None = None
    format: str | None = None  # "unixfs" or "car"

    # ipfs-adder (UnixFS DAG builder) parameters
    layout: str | None = None
    chunker: str | None = None
    raw_leaves: bool | None = None
    progress: bool | None = None
    cid_version: int | None = None
    hash_fun: str | None = None
    no_copy: bool | None = None


@dataclass
class StatusOptions:
    local: bool | None = None


@dataclass
class StatusAllOptions(StatusOptions):
    filter: list[TrackerStatus | str] | None = None
    cids: list[str] | None = None
