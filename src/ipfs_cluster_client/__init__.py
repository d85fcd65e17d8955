"""ipfs_cluster_client - async client for the IPFS Cluster REST API."""

from ipfs_cluster_client.client import ClusterClient
from ipfs_cluster_client.config import load_config
from ipfs_cluster_client.errors import (
    ClusterError,
    DecodeError,
    HttpError,
    RequestCancelledError,
)
from ipfs_cluster_client.models import (
    AddOptions,
    AddResult,
    ArrayEncoding,
    ClientConfig,
    ClusterInfo,
    FilePart,
    PeerInfo,
    PinInfo,
    PinMode,
    PinOptions,
    PinResponse,
    PinType,
    StatusAllOptions,
    StatusOptions,
    StatusResponse,
    TrackerStatus,
)

__all__ = [
    "ClusterClient", "load_config",
    "ClusterError", "DecodeError", "HttpError", "RequestCancelledError",
    "AddOptions", "AddResult", "ArrayEncoding", "ClientConfig", "ClusterInfo",
    "FilePart", "PeerInfo", "PinInfo", "PinMode", "PinOptions", "PinResponse",
    "PinType", "StatusAllOptions", "StatusOptions", "StatusResponse", "TrackerStatus",
]
