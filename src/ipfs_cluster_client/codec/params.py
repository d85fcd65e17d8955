"""Option encoding - typed option sets to cluster query parameters.

Each option set is described by a table of ``_Field`` rows naming the
attribute, the wire key and the transform applied to its value. Unset
(``None``) attributes are skipped, so the result only ever carries the keys
the caller actually set, plus the documented add defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Union

from ipfs_cluster_client.models.options import (
    AddOptions,
    ArrayEncoding,
    PinOptions,
    StatusAllOptions,
    StatusOptions,
)

ParamValue = Union[str, list[str]]
Params = dict[str, ParamValue]

METADATA_PREFIX = "meta-"

# Applied by encode_add_params only when the caller left them unset.
ADD_DEFAULTS: dict[str, str] = {
    "stream-channels": "false",  # buffer the whole response before returning
    "raw-leaves": "true",
    "cid-version": "1",
}


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def _scalar(value: Any, _encoding: ArrayEncoding) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _array(value: Any, encoding: ArrayEncoding) -> ParamValue:
    items = [_scalar(v, encoding) for v in value]
    if encoding is ArrayEncoding.REPEAT:
        return items
    return ",".join(items)


def _date(value: datetime, _encoding: ArrayEncoding) -> str:
    return format_timestamp(value)


@dataclass(frozen=True)
class _Field:
    attr: str
    key: str
    transform: Callable[[Any, ArrayEncoding], ParamValue] = _scalar


PIN_FIELDS: tuple[_Field, ...] = (
    _Field("name", "name"),
    _Field("mode", "mode"),
    _Field("replication_factor_min", "replication-min"),
    _Field("replication_factor_max", "replication-max"),
    _Field("shard_size", "shard-size"),
    _Field("user_allocations", "user-allocations", _array),
    _Field("expire_at", "expire-at", _date),
    _Field("pin_update", "pin-update"),
    _Field("origins", "origins", _array),
)

ADD_FIELDS: tuple[_Field, ...] = (
    _Field("local", "local"),
    _Field("recursive", "recursive"),
    _Field("hidden", "hidden"),
    # the cluster /add handler reads wrap-with-directory, not wrap
    _Field("wrap", "wrap-with-directory"),
    _Field("shard", "shard"),
    _Field("stream_channels", "stream-channels"),
    _Field("format", "format"),
    _Field("layout", "layout"),
    _Field("chunker", "chunker"),
    _Field("raw_leaves", "raw-leaves"),
    _Field("progress", "progress"),
    _Field("cid_version", "cid-version"),
    _Field("hash_fun", "hash"),
    _Field("no_copy", "no-copy"),
)

STATUS_FIELDS: tuple[_Field, ...] = (
    _Field("local", "local"),
    _Field("filter", "filter", _array),
    _Field("cids", "cids", _array),
)


def _encode_fields(
    options: Any, fields: tuple[_Field, ...], encoding: ArrayEncoding
) -> Params:
    params: Params = {}
    for f in fields:
        value = getattr(options, f.attr, None)
        if value is not None:
            params[f.key] = f.transform(value, encoding)
    return params


def encode_metadata(metadata: dict[str, str] | None) -> Params:
    """``{"a": "1"}`` -> ``{"meta-a": "1"}``."""
    return {f"{METADATA_PREFIX}{k}": v for k, v in (metadata or {}).items()}


def encode_pin_options(
    options: PinOptions | None = None,
    array_encoding: ArrayEncoding = ArrayEncoding.COMMA,
) -> Params:
    if options is None:
        return {}
    params = _encode_fields(options, PIN_FIELDS, array_encoding)
    params.update(encode_metadata(options.metadata))
    return params


def encode_add_params(
    options: AddOptions | PinOptions | None = None,
    array_encoding: ArrayEncoding = ArrayEncoding.COMMA,
) -> Params:
    """Pin-level parameters plus the importer parameters and their defaults."""
    params = encode_pin_options(options, array_encoding)
    if options is not None:
        params.update(_encode_fields(options, ADD_FIELDS, array_encoding))
    for key, value in ADD_DEFAULTS.items():
        params.setdefault(key, value)
    return params


def encode_status_params(
    options: StatusOptions | StatusAllOptions | None = None,
    array_encoding: ArrayEncoding = ArrayEncoding.COMMA,
) -> Params:
    if options is None:
        return {}
    return _encode_fields(options, STATUS_FIELDS, array_encoding)
