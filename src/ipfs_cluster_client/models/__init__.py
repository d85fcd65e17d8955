"""Data models for the cluster client."""

from ipfs_cluster_client.models.status import PinMode, PinType, TrackerStatus
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
    PeerInfo,
    PinInfo,
    PinResponse,
    StatusResponse,
)
from ipfs_cluster_client.models.files import FilePart
from ipfs_cluster_client.models.config import ClientConfig

__all__ = [
    "PinMode", "PinType", "TrackerStatus",
    "AddOptions", "ArrayEncoding", "PinOptions", "StatusAllOptions", "StatusOptions",
    "AddResult", "ClusterInfo", "PeerInfo", "PinInfo", "PinResponse", "StatusResponse",
    "FilePart",
    "ClientConfig",
]
