"""Response decoding - raw JSON values from the cluster to typed records.

Unknown wire fields are ignored everywhere; optional fields that are absent
stay ``None``. Shape violations on mandatory fields raise ``DecodeError``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from ipfs_cluster_client.errors import DecodeError
from ipfs_cluster_client.models.records import (
    AddResult,
    ClusterInfo,
    PeerInfo,
    PinInfo,
    PinResponse,
    StatusResponse,
)
from ipfs_cluster_client.models.status import PinType, TrackerStatus

# Go marshals time.Time with up to nanosecond precision; datetime holds micros.
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:?\d{2})?$"
)

# Pin fields whose wire name and attribute name coincide.
_PIN_PASSTHROUGH = (
    "replication_factor_min",
    "replication_factor_max",
    "name",
    "mode",
    "shard_size",
    "user_allocations",
    "metadata",
    "allocations",
    "max_depth",
)


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object for {what}, got {type(data).__name__}", payload=data)
    return data


def unwrap_cid(value: Any, field: str = "cid") -> str:
    """``{"/": "bafy..."}`` -> ``"bafy..."``."""
    if isinstance(value, dict) and isinstance(value.get("/"), str):
        return value["/"]
    raise DecodeError(f"field {field!r} is not a CID link object: {value!r}", payload=value)


def _optional_cid(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return unwrap_cid(value, field)


def parse_timestamp(value: Any, field: str = "timestamp") -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    if not isinstance(value, str):
        raise DecodeError(f"field {field!r} is not a timestamp string: {value!r}", payload=value)
    m = _TIMESTAMP_RE.match(value.strip())
    if m is None:
        raise DecodeError(f"field {field!r} is not an ISO-8601 timestamp: {value!r}", payload=value)

    text = m.group("base").replace("t", "T").replace(" ", "T")
    if frac := m.group("frac"):
        text += "." + frac[:6].ljust(6, "0")
    tz = m.group("tz")
    if tz is None or tz in ("Z", "z"):
        text += "+00:00"
    elif ":" not in tz:
        text += f"{tz[:3]}:{tz[3:]}"
    else:
        text += tz

    try:
        return datetime.fromisoformat(text).astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise DecodeError(f"field {field!r} is not a valid timestamp: {value!r}", payload=value) from exc


def decode_add_result(data: Any) -> AddResult:
    data = _require_mapping(data, "add result")
    return AddResult(
        cid=unwrap_cid(data.get("cid")),
        name=data.get("name"),
        size=data.get("size"),
        bytes=data.get("bytes"),
        allocations=data.get("allocations"),
    )


def decode_pin_response(data: Any) -> PinResponse:
    data = _require_mapping(data, "pin")
    fields: dict[str, Any] = {k: data.get(k) for k in _PIN_PASSTHROUGH}

    pin_type = data.get("type")
    if isinstance(pin_type, int) and not isinstance(pin_type, bool):
        try:
            pin_type = PinType(pin_type)
        except ValueError:
            pass  # newer cluster types are forwarded as plain ints

    expire_at = data.get("expire_at")
    return PinResponse(
        cid=unwrap_cid(data.get("cid")),
        type=pin_type,
        expire_at=parse_timestamp(expire_at, "expire_at") if expire_at is not None else None,
        pin_update=_optional_cid(data.get("pin_update"), "pin_update"),
        reference=_optional_cid(data.get("reference"), "reference"),
        **fields,
    )


def decode_pin_info(data: Any) -> PinInfo:
    data = _require_mapping(data, "peer map entry")
    raw_status = data.get("status")
    try:
        status = TrackerStatus(raw_status)
    except ValueError as exc:
        raise DecodeError(f"unknown tracker status {raw_status!r}", payload=data) from exc
    return PinInfo(
        peer_name=data.get("peername"),
        ipfs_peer_id=data.get("ipfs_peer_id"),
        status=status,
        timestamp=parse_timestamp(data.get("timestamp")),
        error=data.get("error"),
    )


def decode_status(data: Any) -> StatusResponse:
    data = _require_mapping(data, "pin status")
    peer_map = data.get("peer_map")
    if peer_map is not None:
        peer_map = {
            peer_id: decode_pin_info(info)
            for peer_id, info in _require_mapping(peer_map, "peer_map").items()
        }
    return StatusResponse(
        cid=unwrap_cid(data.get("cid")),
        name=data.get("name"),
        peer_map=peer_map,
    )


def decode_peer_info(data: Any) -> PeerInfo:
    data = _require_mapping(data, "peer info")
    return PeerInfo(
        id=data.get("id", ""),
        addresses=data.get("addresses") or [],
        error=data.get("error") or None,
    )


def decode_cluster_info(data: Any) -> ClusterInfo:
    data = _require_mapping(data, "cluster id")
    ipfs = data.get("ipfs")
    return ClusterInfo(
        id=data.get("id", ""),
        addresses=data.get("addresses") or [],
        version=data.get("version", ""),
        commit=data.get("commit", ""),
        peer_name=data.get("peername", ""),
        rpc_protocol_version=data.get("rpc_protocol_version", ""),
        cluster_peers=data.get("cluster_peers") or [],
        cluster_peers_addresses=data.get("cluster_peers_addresses") or [],
        ipfs=decode_peer_info(ipfs) if ipfs is not None else None,
        error=data.get("error") or None,
    )


def decode_metric_names(data: Any) -> list[str]:
    if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
        raise DecodeError("expected a JSON array of metric names", payload=data)
    return data


def decode_version(data: Any) -> str:
    version = _require_mapping(data, "version").get("version")
    if not isinstance(version, str):
        raise DecodeError("version response has no 'version' string", payload=data)
    return version
