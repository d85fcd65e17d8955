"""Protocol interfaces for the cluster client."""

from ipfs_cluster_client.interfaces.client import ClusterAPI

__all__ = ["ClusterAPI"]
