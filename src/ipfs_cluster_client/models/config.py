"""Configuration model for the client and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field

from ipfs_cluster_client.models.options import ArrayEncoding


@dataclass
class ClientConfig:
    """Complete client configuration."""

    # Cluster REST API
    url: str = "http://127.0.0.1:9094"
    username: str = ""
    password: str = ""  # loaded from env var IPFS_CLUSTER_PASSWORD
    headers: dict[str, str] = field(default_factory=dict)
    array_encoding: ArrayEncoding = ArrayEncoding.COMMA

    # Client
    log_level: str = "info"

    @property
    def has_credentials(self) -> bool:
        return bool(self.username or self.password)
