"""Typer-based CLI for tracing Aptos Move package dependencies."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config
from .cache import CachingProvider, MetadataCache
from .cli_groups import cache_grp, config_grp
from .config_manager import load_network_config, save_network_config
from .errors import MovetraceError
from .graph_export import export_dot, export_svg
from .output import format_json, format_table, format_tree
from .registry import AptosRegistryClient, MetadataProvider
from .tracer import trace_dependencies, trace_packages

console = Console()

app = typer.Typer(
    help="🔗 movetrace - trace the on-chain dependency tree of Aptos Move packages.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(cache_grp, name="cache")
app.add_typer(config_grp, name="config")

FORMATS = {"json", "table"}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"movetrace v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log registry lookups to stderr."),
):
    """movetrace: resolve package and module dependencies from on-chain registries."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s  %(name)-22s  %(levelname)-7s  %(message)s",
        )


def _build_provider(use_cache: bool) -> Tuple[MetadataProvider, Optional[MetadataCache]]:
    node_urls = {}
    if config.NODE_URL_OVERRIDE:
        node_urls[config.DEFAULT_NETWORK] = config.NODE_URL_OVERRIDE
    client = AptosRegistryClient(api_key=config.API_KEY or None, node_urls=node_urls)
    if not use_cache:
        return client, None
    cache = MetadataCache(config.CACHE_FILE).load()
    return CachingProvider(client, cache), cache


@app.command("trace")
def trace(
    package_ids: List[str] = typer.Argument(..., help="Package identifiers, <address>::<PackageName>."),
    fmt: str = typer.Option("json", "--format", "-f", help="Output format: json or table."),
    tree: bool = typer.Option(False, "--tree", help="Also print the dependency tree as ASCII."),
    module_tree: bool = typer.Option(False, "--module-tree", help="Also print the module tree as ASCII."),
    dedupe: bool = typer.Option(False, "--dedupe", help="Only report unique dependencies and modules."),
    network: str = typer.Option(config.DEFAULT_NETWORK, "--network", "-n", help="mainnet, testnet, devnet or local."),
    svg: Optional[Path] = typer.Option(None, "--svg", help="Write the dependency tree diagram to this SVG file."),
    dot: Optional[Path] = typer.Option(None, "--dot", help="Write the dependency graph to this DOT file."),
    use_cache: bool = typer.Option(True, "--cache/--no-cache", help="Use the local metadata cache."),
):
    """Trace every direct and transitive dependency of one or more packages."""
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise typer.BadParameter("Format must be one of: json, table")
    if network not in config.NETWORKS:
        raise typer.BadParameter(f"Network must be one of: {', '.join(config.NETWORKS)}")

    provider, cache = _build_provider(use_cache)
    try:
        if len(package_ids) == 1:
            result = trace_dependencies(package_ids[0], provider, network)
            results = [result]
        else:
            result = trace_packages(package_ids, provider, network)
            results = result.per_package
    except MovetraceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if fmt == "json":
        typer.echo(format_json(result, dedupe=dedupe))
    else:
        typer.echo(format_table(result))

    for r in results:
        if tree:
            typer.echo(f"\nDependency Tree ({r.package_id}):")
            typer.echo(format_tree(r), nl=False)
        if module_tree:
            typer.echo(f"\nModule Tree ({r.package_id}):")
            typer.echo(format_tree(r, modules=True), nl=False)

    if svg is not None:
        export_svg([r.dependency_tree for r in results], svg)
        typer.echo(f"Wrote diagram to {svg}", err=True)
    if dot is not None:
        export_dot([r.dependency_tree for r in results], dot)
        typer.echo(f"Wrote graph to {dot}", err=True)

    if cache is not None:
        cache.save()


@cache_grp.command("path")
def cache_path():
    """Print the metadata cache location."""
    typer.echo(str(config.CACHE_FILE))


@cache_grp.command("stats")
def cache_stats():
    """Show how many package entries are cached per network."""
    cache = MetadataCache(config.CACHE_FILE).load()
    if not len(cache):
        typer.echo("Cache is empty.")
        raise typer.Exit(code=0)

    counts = {}
    for key in cache.entries:
        network = key.split("::", 1)[0]
        counts[network] = counts.get(network, 0) + 1

    table = Table(title=f"Metadata cache ({config.CACHE_FILE})")
    table.add_column("Network", style="cyan")
    table.add_column("Packages", justify="right")
    for network, count in sorted(counts.items()):
        table.add_row(network, str(count))
    console.print(table)


@cache_grp.command("clear")
def cache_clear():
    """Delete all cached package metadata."""
    removed = MetadataCache(config.CACHE_FILE).load().clear()
    typer.echo(f"Removed {removed} cached package(s).")


@config_grp.command("show")
def config_show():
    """Print the effective network configuration."""
    settings = load_network_config()
    typer.echo(f"Config file: {config.CONFIG_FILE}")
    typer.echo(f"Default network: {settings.get('default', 'mainnet')}")
    typer.echo(f"API key: {'set' if settings.get('api_key') else 'not set'}")
    if settings.get("node_url"):
        typer.echo(f"Node URL: {settings['node_url']}")


@config_grp.command("set-network")
def config_set_network(network: str = typer.Argument(..., help="mainnet, testnet, devnet or local.")):
    """Set the network used when --network is not given."""
    if network not in config.NETWORKS:
        raise typer.BadParameter(f"Network must be one of: {', '.join(config.NETWORKS)}")
    path = save_network_config(default=network)
    typer.echo(f"Default network set to '{network}' in {path}")


@config_grp.command("set-api-key")
def config_set_api_key(api_key: str = typer.Argument(..., help="Aptos API key sent as a bearer token.")):
    """Store the API key used for fullnode requests."""
    path = save_network_config(api_key=api_key)
    typer.echo(f"API key saved to {path}")


if __name__ == "__main__":
    app()
