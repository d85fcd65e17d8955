"""Live fixtures: a real IPFS Cluster peer on localhost."""

from __future__ import annotations

import os

import httpx
import pytest

from ipfs_cluster_client.client import ClusterClient
from ipfs_cluster_client.models.files import FilePart
from tests.conftest import LIVE_CLUSTER_URL, make_test_config


@pytest.fixture(scope="session")
def cluster_available():
    """Check if a cluster REST API answers. Skip live tests if not."""
    try:
        r = httpx.get(f"{LIVE_CLUSTER_URL}/version", timeout=3)
        if r.status_code in (200, 401):
            return True
        pytest.skip(f"IPFS Cluster not available at {LIVE_CLUSTER_URL}")
    except (httpx.ConnectError, httpx.TimeoutException):
        pytest.skip(f"IPFS Cluster not available at {LIVE_CLUSTER_URL}")


@pytest.fixture
def live_client(cluster_available):
    """Real ClusterClient using credentials from IPFS_CLUSTER_USERNAME/PASSWORD."""
    cfg = make_test_config(
        username=os.environ.get("IPFS_CLUSTER_USERNAME", ""),
        password=os.environ.get("IPFS_CLUSTER_PASSWORD", ""),
    )
    return ClusterClient.from_config(cfg)


@pytest.fixture
async def added_cid(live_client):
    """Add a small file, yield its CID, unpin on teardown."""
    result = await live_client.add(FilePart(b"foo", "foo.txt"))
    yield result.cid
    await live_client.unpin(result.cid)
