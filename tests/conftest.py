"""Shared fixtures for ipfs_cluster_client tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web
from pytest_metadata.plugin import metadata_key

from ipfs_cluster_client.client import ClusterClient
from ipfs_cluster_client.models.config import ClientConfig

from tests.mocks import MockCluster

LIVE_CLUSTER_URL = "http://127.0.0.1:9094"


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add cluster info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Live Cluster API"] = LIVE_CLUSTER_URL


def make_test_config(**overrides) -> ClientConfig:
    """Build a ClientConfig suitable for testing."""
    defaults = dict(
        url=LIVE_CLUSTER_URL,
        username="",
        password="",
        log_level="debug",
    )
    defaults.update(overrides)
    return ClientConfig(**defaults)


# ── Fake cluster REST API ────────────────────────────────────────


@dataclass
class RecordedRequest:
    method: str
    path: str
    raw_path: str
    query: list[tuple[str, str]]
    headers: dict[str, str]
    files: list[tuple[str, str | None, bytes]] = field(default_factory=list)

    def param(self, key: str) -> str | None:
        values = self.params(key)
        return values[0] if values else None

    def params(self, key: str) -> list[str]:
        return [v for k, v in self.query if k == key]

    @property
    def keys(self) -> set[str]:
        return {k for k, _ in self.query}


@dataclass
class FakeResponse:
    body: Any = None
    status: int = 200
    content_type: str = "application/json"


class FakeCluster:
    """aiohttp app answering canned responses and recording every request."""

    def __init__(self) -> None:
        self.url = ""
        self.requests: list[RecordedRequest] = []
        self.routes: dict[tuple[str, str], FakeResponse] = {}

    def respond(self, method: str, path: str, body: Any = None, status: int = 200,
                content_type: str = "application/json") -> None:
        self.routes[(method, path)] = FakeResponse(body, status, content_type)

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    async def handle(self, request: web.Request) -> web.Response:
        files: list[tuple[str, str | None, bytes]] = []
        if request.content_type.startswith("multipart/"):
            reader = await request.multipart()
            while True:
                part = await reader.next()
                if part is None:
                    break
                files.append((part.name, part.filename, await part.read()))

        self.requests.append(RecordedRequest(
            method=request.method,
            path=request.path,
            raw_path=request.raw_path,
            query=list(request.query.items()),
            headers={k.lower(): v for k, v in request.headers.items()},
            files=files,
        ))

        canned = self.routes.get((request.method, request.path)) or self.routes.get(
            (request.method, request.raw_path.split("?")[0])
        )
        if canned is None:
            return web.Response(status=404, text="not found")
        body = canned.body
        if not isinstance(body, (str, bytes)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        return web.Response(status=canned.status, body=body, content_type=canned.content_type)


@pytest.fixture
async def fake_cluster():
    """FakeCluster served on an ephemeral localhost port."""
    cluster = FakeCluster()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", cluster.handle)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    cluster.url = f"http://{host}:{port}"
    yield cluster
    await runner.cleanup()


@pytest.fixture
def client(fake_cluster):
    """ClusterClient pointed at the fake cluster."""
    return ClusterClient(fake_cluster.url, {"Authorization": "Basic dXNlcjpzZWNyZXQ="})


@pytest.fixture
def mock_cluster():
    return MockCluster()
