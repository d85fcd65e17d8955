"""CLI entry point for the IPFS Cluster client."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Callable, Coroutine

import click
import httpx

from ipfs_cluster_client.client import ClusterClient
from ipfs_cluster_client.config import load_config
from ipfs_cluster_client.errors import ClusterError
from ipfs_cluster_client.interfaces.client import ClusterAPI
from ipfs_cluster_client.models.files import FilePart
from ipfs_cluster_client.models.options import (
    AddOptions,
    PinOptions,
    StatusAllOptions,
    StatusOptions,
)
from ipfs_cluster_client.models.records import AddResult, PinResponse, StatusResponse
from ipfs_cluster_client.models.status import TrackerStatus


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a client coroutine, turning client failures into exit code 1."""
    try:
        return asyncio.run(coro)
    except ClusterError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except httpx.TransportError as exc:
        click.echo(f"Error: cannot reach cluster: {exc}", err=True)
        sys.exit(1)


def _client(ctx: click.Context) -> ClusterAPI:
    if (client := ctx.obj.get("client")) is not None:
        return client
    cfg = ctx.obj["config"]
    if ctx.obj.get("url"):
        cfg.url = ctx.obj["url"]
    return ClusterClient.from_config(cfg)


def _parse_meta(_ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]) -> dict[str, str] | None:
    meta: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}")
        meta[key] = value
    return meta or None


def pin_options(f: Callable) -> Callable:
    """Attach the options shared by ``pin`` and the add commands."""
    decorators = [
        click.option("--name", default=None, help="Human readable pin name"),
        click.option("--replication-min", type=int, default=None, help="Minimum replication factor"),
        click.option("--replication-max", type=int, default=None, help="Maximum replication factor"),
        click.option("--allocation", "allocations", multiple=True, help="Peer ID to allocate to (repeatable)"),
        click.option("--origin", "origins", multiple=True, help="Multiaddr known to provide the data (repeatable)"),
        click.option("--meta", "metadata", multiple=True, callback=_parse_meta, help="KEY=VALUE metadata (repeatable)"),
        click.option(
            "--expire-at", type=click.DateTime(["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]), default=None,
            help="Expiry time (UTC)",
        ),
    ]
    for decorator in reversed(decorators):
        f = decorator(f)
    return f


def _pin_fields(kw: dict[str, Any]) -> dict[str, Any]:
    return dict(
        name=kw.pop("name"),
        replication_factor_min=kw.pop("replication_min"),
        replication_factor_max=kw.pop("replication_max"),
        user_allocations=list(kw.pop("allocations")) or None,
        origins=list(kw.pop("origins")) or None,
        metadata=kw.pop("metadata"),
        expire_at=kw.pop("expire_at"),
    )


def _echo_add(result: AddResult) -> None:
    click.echo(f"{result.cid}  {result.name or ''}  {result.size if result.size is not None else '?'}")


def _echo_pin(pin: PinResponse) -> None:
    click.echo(f"CID:          {pin.cid}")
    click.echo(f"Name:         {pin.name or '(none)'}")
    click.echo(f"Replication:  {pin.replication_factor_min} .. {pin.replication_factor_max}")
    click.echo(f"Allocations:  {', '.join(pin.allocations or []) or '(any)'}")
    if pin.expire_at is not None and pin.expire_at.year > 1:
        click.echo(f"Expires:      {pin.expire_at.isoformat()}")
    for key, value in (pin.metadata or {}).items():
        click.echo(f"  meta {key} = {value}")


def _echo_status(status: StatusResponse) -> None:
    click.echo(f"{status.cid}  {status.name or ''}")
    if status.peer_map is None:
        click.echo("  (no peer information)")
        return
    for peer_id, info in status.peer_map.items():
        line = f"  {info.peer_name or peer_id}: {info.status.value} @ {info.timestamp.isoformat()}"
        if info.error:
            line += f"  error: {info.error}"
        click.echo(line)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("--url", default=None, help="Cluster REST API URL (overrides config)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, url: str | None, verbose: bool) -> None:
    """ipfs-cluster - client for the IPFS Cluster REST API."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg
    ctx.obj["url"] = url

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Add ────────────────────────────────────────────────


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@pin_options
@click.option("--cid-version", type=click.IntRange(0, 1), default=None, help="CID version (default 1)")
@click.option("--raw-leaves/--no-raw-leaves", default=None, help="Use raw leaves (default on)")
@click.option("--chunker", default=None, help="Chunking algorithm, e.g. size-262144")
@click.option("--local", is_flag=True, help="Add only on the contacted peer")
@click.pass_context
def add(ctx: click.Context, path: str, cid_version, raw_leaves, chunker, local, **kw) -> None:
    """Add a file to the cluster."""
    options = AddOptions(
        **_pin_fields(kw),
        cid_version=cid_version,
        raw_leaves=raw_leaves,
        chunker=chunker,
        local=True if local else None,
    )
    _echo_add(_run(_client(ctx).add(FilePart.from_path(path), options)))


@cli.command("add-car")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@pin_options
@click.pass_context
def add_car(ctx: click.Context, path: str, **kw) -> None:
    """Import a CAR archive."""
    options = AddOptions(**_pin_fields(kw))
    _echo_add(_run(_client(ctx).add_car(FilePart.from_path(path), options)))


@cli.command("add-dir")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@pin_options
@click.option("--stream", is_flag=True, help="Print results as the cluster streams them")
@click.pass_context
def add_dir(ctx: click.Context, paths: tuple[str, ...], stream: bool, **kw) -> None:
    """Add files wrapped in a directory."""
    options = AddOptions(**_pin_fields(kw))
    files = [FilePart.from_path(p) for p in paths]
    client = _client(ctx)

    async def _streamed() -> None:
        async for result in client.add_stream(files, options):
            _echo_add(result)

    if stream:
        _run(_streamed())
    else:
        for result in _run(client.add_directory(files, options)):
            _echo_add(result)


# ── Pins ───────────────────────────────────────────────


@cli.command()
@click.argument("cid")
@pin_options
@click.option("--mode", type=click.Choice(["recursive", "direct"]), default=None)
@click.pass_context
def pin(ctx: click.Context, cid: str, mode: str | None, **kw) -> None:
    """Pin a CID or /ipfs/ path."""
    options = PinOptions(**_pin_fields(kw), mode=mode)
    _echo_pin(_run(_client(ctx).pin(cid, options)))


@cli.command()
@click.argument("cid")
@click.pass_context
def unpin(ctx: click.Context, cid: str) -> None:
    """Unpin a CID or /ipfs/ path."""
    _echo_pin(_run(_client(ctx).unpin(cid)))


@cli.command()
@click.argument("cid")
@click.option("--local", is_flag=True, help="Only ask the contacted peer")
@click.pass_context
def status(ctx: click.Context, cid: str, local: bool) -> None:
    """Show per-peer tracking status of a pin."""
    options = StatusOptions(local=True if local else None)
    _echo_status(_run(_client(ctx).status(cid, options)))


@cli.command("status-all")
@click.option("--local", is_flag=True, help="Only ask the contacted peer")
@click.option(
    "--filter", "filters", multiple=True,
    type=click.Choice([s.value for s in TrackerStatus]),
    help="Only pins in this status (repeatable)",
)
@click.option("--cid", "cids", multiple=True, help="Restrict to this CID (repeatable)")
@click.pass_context
def status_all(ctx: click.Context, local: bool, filters: tuple[str, ...], cids: tuple[str, ...]) -> None:
    """Show tracking status of every pin."""
    options = StatusAllOptions(
        local=True if local else None,
        filter=list(filters) or None,
        cids=list(cids) or None,
    )
    for st in _run(_client(ctx).status_all(options)):
        _echo_status(st)


@cli.command()
@click.argument("cid")
@click.pass_context
def allocation(ctx: click.Context, cid: str) -> None:
    """Show the stored pin and its allocations."""
    _echo_pin(_run(_client(ctx).allocation(cid)))


@cli.command()
@click.argument("cid")
@click.option("--local", is_flag=True, help="Only recover on the contacted peer")
@click.pass_context
def recover(ctx: click.Context, cid: str, local: bool) -> None:
    """Re-trigger pin/unpin for an errored pin."""
    options = StatusOptions(local=True if local else None)
    _echo_status(_run(_client(ctx).recover(cid, options)))


# ── Cluster ────────────────────────────────────────────


@cli.command()
@click.pass_context
def metrics(ctx: click.Context) -> None:
    """List the metric names the cluster tracks."""
    for name in _run(_client(ctx).metric_names()):
        click.echo(name)


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show the cluster version."""
    click.echo(_run(_client(ctx).version()))


@cli.command("id")
@click.pass_context
def id_(ctx: click.Context) -> None:
    """Show identity of the cluster peer and its IPFS daemon."""
    info = _run(_client(ctx).info())
    click.echo(f"Peer ID:      {info.id}")
    click.echo(f"Peer name:    {info.peer_name}")
    click.echo(f"Version:      {info.version}")
    click.echo(f"RPC protocol: {info.rpc_protocol_version}")
    click.echo(f"Peers:        {len(info.cluster_peers)}")
    for addr in info.addresses:
        click.echo(f"  {addr}")
    if info.ipfs is not None:
        click.echo(f"IPFS peer:    {info.ipfs.id}")
        if info.ipfs.error:
            click.echo(f"IPFS error:   {info.ipfs.error}")
    if info.error:
        click.echo(f"Error:        {info.error}")


if __name__ == "__main__":
    cli()
