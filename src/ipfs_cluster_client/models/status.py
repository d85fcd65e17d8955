"""Enumerations reported by the cluster for pins and their tracking state."""

from __future__ import annotations

from enum import Enum, IntEnum


class TrackerStatus(str, Enum):
    """Lifecycle state of a pin as tracked by one cluster peer."""

    UNDEFINED = "undefined"  # never reported, "all" when used as a filter
    CLUSTER_ERROR = "cluster_error"
    PIN_ERROR = "pin_error"
    UNPIN_ERROR = "unpin_error"
    PINNED = "pinned"
    PINNING = "pinning"
    UNPINNING = "unpinning"
    UNPINNED = "unpinned"
    REMOTE = "remote"
    PIN_QUEUED = "pin_queued"
    UNPIN_QUEUED = "unpin_queued"
    SHARDED = "sharded"
    UNEXPECTEDLY_UNPINNED = "unexpectedly_unpinned"


class PinType(IntEnum):
    """Which sort of pin object the cluster is describing.

    A sharded DAG is tracked as a META pin (cluster state only) referencing a
    CLUSTER_DAG pin, which in turn links every SHARD root. Shards are pinned
    with max depth 1; the blocks below them are not tracked individually.
    """

    BAD = 1  # indicates a bug anywhere it shows up
    DATA = 2  # regular, non-sharded, recursively pinned
    META = 3
    CLUSTER_DAG = 4
    SHARD = 5


class PinMode(str, Enum):
    RECURSIVE = "recursive"
    DIRECT = "direct"
