"""HTTP transport for the cluster REST API."""

from ipfs_cluster_client.transport.executor import RequestExecutor, run_with_signal

__all__ = ["RequestExecutor", "run_with_signal"]
