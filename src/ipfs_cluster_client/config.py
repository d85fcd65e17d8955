"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from ipfs_cluster_client.models.config import ClientConfig
from ipfs_cluster_client.models.options import ArrayEncoding


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "IPFS_CLUSTER_",
) -> ClientConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (IPFS_CLUSTER_URL, IPFS_CLUSTER_PASSWORD, etc.)
        2. TOML config file
        3. Defaults from ClientConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClientConfig()

    # ── Cluster section ────────────────────────────────────
    cluster = raw.get("cluster", {})
    if v := cluster.get("url"):
        cfg.url = str(v)
    if v := cluster.get("username"):
        cfg.username = str(v)
    if v := cluster.get("password"):
        cfg.password = str(v)
    if v := cluster.get("array_encoding"):
        cfg.array_encoding = ArrayEncoding(v)
    if headers := cluster.get("headers"):
        cfg.headers = {str(k): str(val) for k, val in headers.items()}

    # ── Client section ─────────────────────────────────────
    client = raw.get("client", {})
    if v := client.get("log_level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if url := os.environ.get(f"{env_prefix}URL"):
        cfg.url = url
    if user := os.environ.get(f"{env_prefix}USERNAME"):
        cfg.username = user
    if password := os.environ.get(f"{env_prefix}PASSWORD"):
        cfg.password = password
    if encoding := os.environ.get(f"{env_prefix}ARRAY_ENCODING"):
        cfg.array_encoding = ArrayEncoding(encoding)

    return cfg
