"""Typed results decoded from cluster responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ipfs_cluster_client.models.status import PinType, TrackerStatus


@dataclass
class AddResult:
    """One entry of an ``/add`` response (a file, or the wrapping directory)."""

    cid: str
    name: str | None = None
    size: int | str | None = None
    bytes: int | str | None = None
    allocations: list[str] | None = None


@dataclass
class PinResponse:
    """The stored pin as returned by pin, unpin and allocation calls."""

    cid: str
    replication_factor_min: int | None = None
    replication_factor_max: int | None = None
    name: str | None = None
    mode: str | None = None
    shard_size: int | None = None
    user_allocations: list[str] | None = None
    expire_at: datetime | None = None
    metadata: dict[str, str] | None = None
    pin_update: str | None = None
    type: PinType | int | None = None
    allocations: list[str] | None = None
    max_depth: int | None = None  # -1 means recursive
    reference: str | None = None


@dataclass
class PinInfo:
    """Tracking state of a pin on a single cluster peer."""

    peer_name: str | None
    status: TrackerStatus
    timestamp: datetime
    ipfs_peer_id: str | None = None
    error: str | None = None


@dataclass
class StatusResponse:
    cid: str
    name: str | None = None
    peer_map: dict[str, PinInfo] | None = None  # None when the cluster sent none


@dataclass
class PeerInfo:
    id: str
    addresses: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class ClusterInfo:
    """Identity of the cluster peer answering ``/id`` and its IPFS daemon."""

    id: str
    addresses: list[str] = field(default_factory=list)
    version: str = ""
    commit: str = ""
    peer_name: str = ""
    rpc_protocol_version: str = ""
    cluster_peers: list[str] = field(default_factory=list)
    cluster_peers_addresses: list[str] = field(default_factory=list)
    ipfs: PeerInfo | None = None
    error: str | None = None
