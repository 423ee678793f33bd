import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.traceback import install

from .cache import SearchCache
from .config import ShareConfig, get_config_path, load_config, save_config, update_config
from .decorators import handle_share_errors
from .vfs.navigation import encode_query, is_wildcard, normalize_path, split_pattern

# Initialize Rich Traceback for better error messages
install(show_locals=False)

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.INFO,  # Set to INFO by default, DEBUG if verbose
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger(__name__)

# Main app
app = typer.Typer()

# Command groups
cache_app = typer.Typer(help="Inspect the search cache")
config_app = typer.Typer(help="Show and change configuration")

app.add_typer(cache_app, name="cache")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file to use"),
):
    """
    torrentshare - browse torrent search results as a read-only file tree.

    Spell a query with letter folders, enter !SEARCH to run it, and open a
    result's Files folder to stream its contents.
    """
    config_path = config_file or get_config_path()
    config = load_config(config_path)
    ctx.obj = {"config": config, "config_path": config_path}

    if verbose or config.cli.verbose:
        logging.getLogger("torrentshare").setLevel(logging.DEBUG)
        console.print("[bold green]Verbose mode enabled.[/bold green]")


def _config(ctx: typer.Context) -> ShareConfig:
    return ctx.obj["config"]


def _share(config: ShareConfig):
    from .share import TorrentShare
    return TorrentShare.from_config("torrentshare", config)


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    for unit in ("KB", "MB", "GB"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} TB"


def _results_table(title: str, results) -> Table:
    table = Table(title=escape(title))
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Seeders", justify="right", style="green")
    table.add_column("Leechers", justify="right", style="red")
    table.add_column("Size", justify="right")
    table.add_column("Source")
    for i, result in enumerate(results, 1):
        table.add_row(
            str(i), escape(result.name), result.seeders, result.leechers, result.size, escape(result.source_name)
        )
    return table


# ============================================================================
# Core Commands
# ============================================================================

@app.command()
@handle_share_errors
def init(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(None, help="Cache store to create (default: from config)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing store"),
):
    """Create an empty search cache store."""
    store = path or Path(_config(ctx).cache.path)
    SearchCache.create(store, overwrite=force)
    console.print(f"[green]✓ Created empty cache store at {store}[/green]")


@app.command()
@handle_share_errors
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
    refresh: bool = typer.Option(False, "--refresh", help="Scrape even if the query is cached"),
):
    """Run a search, cache its results and show the tree path for it.

    Examples:
        torrentshare search "debian netinst"
    """
    from .scrapers.html import HtmlResultScraper

    config = _config(ctx)
    cache = SearchCache.load(config.cache.path)
    query = query.upper()

    results = None if refresh else cache.get(query)
    if results is None:
        scraper = HtmlResultScraper(config.scraper)

        async def run():
            try:
                return await scraper.search(query)
            finally:
                await scraper.close()

        results = asyncio.run(run())
        if results is None:
            console.print(f"[red]Search for '{query}' failed[/red]")
            raise typer.Exit(code=1)
        cache.put(query, results)

    console.print(_results_table(f"Results for '{query}'", results[:config.browse.max_results]))
    console.print(f"[dim]Browse at {encode_query(query)}[/dim]")


@app.command()
@handle_share_errors
def ls(
    ctx: typer.Context,
    path: str = typer.Argument("/", help="Folder to list, or a pattern such as /A/!SEARCH/*"),
):
    """List a folder of the tree.

    Examples:
        torrentshare ls /
        torrentshare ls "/D/E/B/I/A/N/!SEARCH"
        torrentshare ls "/D/E/B/I/A/N/!SEARCH/Debian 12/Files"
    """
    _, last = split_pattern(path)
    pattern = path if is_wildcard(last) else normalize_path(path).rstrip("/") + "/*"
    share = _share(_config(ctx))

    async def run():
        try:
            tree = await share.connect()
            return await tree.list(pattern)
        finally:
            await share.close()

    nodes = asyncio.run(run())

    table = Table(title=escape(pattern))
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="dim")
    table.add_column("Size", justify="right")
    for node in nodes:
        name = node.name + ("/" if node.is_directory() else "")
        size = _format_size(node.size()) if node.is_file() else ""
        table.add_row(escape(name), node.kind.value, size)
    console.print(table)
    console.print(f"[dim]{len(nodes)} entries[/dim]")


@app.command()
@handle_share_errors
def stat(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Node to describe"),
):
    """Show details for a single node."""
    share = _share(_config(ctx))

    async def run():
        try:
            tree = await share.connect()
            return await tree.open(path)
        finally:
            await share.close()

    node = asyncio.run(run())
    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in node.get_info().items():
        table.add_row(key, escape(str(value)))
    console.print(table)


@app.command()
@handle_share_errors
def cat(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File inside a result's Files folder"),
    offset: int = typer.Option(0, "--offset", help="Byte position to start at"),
    length: int = typer.Option(64 * 1024, "--length", help="Maximum bytes to read"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write bytes to file instead of stdout"),
):
    """Read a byte range from a file.

    The Files folder is listed first so the file's session exists.
    """
    share = _share(_config(ctx))
    parent, _ = split_pattern(path)

    async def run():
        try:
            tree = await share.connect()
            await tree.list(parent + "/*")
            node = await tree.open(path)
            buffer = bytearray(length)
            count = await node.read(buffer, 0, length, offset)
            return bytes(buffer[:count])
        finally:
            await share.close()

    data = asyncio.run(run())
    if output:
        output.write_bytes(data)
        console.print(f"[green]✓ Wrote {len(data)} bytes to {output}[/green]")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    if len(data) < length:
        logger.debug(f"Short read: {len(data)}/{length} bytes")


# ============================================================================
# Cache Commands
# ============================================================================

@cache_app.command(name="list")
@handle_share_errors
def cache_list(ctx: typer.Context):
    """List cached queries."""
    config = _config(ctx)
    cache = SearchCache.load(config.cache.path)

    if not len(cache):
        console.print("[yellow]Cache is empty[/yellow]")
        return

    table = Table(title=f"Cached searches ({config.cache.path})")
    table.add_column("Query", style="cyan")
    table.add_column("Results", justify="right")
    table.add_column("Path", style="dim")
    for query in cache.queries():
        table.add_row(escape(query), str(len(cache.get(query))), encode_query(query))
    console.print(table)


@cache_app.command(name="show")
@handle_share_errors
def cache_show(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Cached query"),
):
    """Show the cached results for a query."""
    cache = SearchCache.load(_config(ctx).cache.path)
    results = cache.get(query)
    if results is None:
        console.print(f"[red]'{query}' is not cached[/red]")
        raise typer.Exit(code=1)
    console.print(_results_table(f"Cached results for '{query}'", results))


# ============================================================================
# Config Commands
# ============================================================================

@config_app.command(name="show")
def config_show(ctx: typer.Context):
    """Print the active configuration."""
    console.print_json(json.dumps(_config(ctx).to_dict()))
    console.print(f"[dim]{ctx.obj['config_path']}[/dim]")


@config_app.command(name="set")
@handle_share_errors
def config_set(
    ctx: typer.Context,
    cache_path: Optional[str] = typer.Option(None, "--cache-path", help="Search cache store"),
    transfer_url: Optional[str] = typer.Option(None, "--transfer-url", help="qBittorrent WebUI URL"),
    transfer_username: Optional[str] = typer.Option(None, "--transfer-username", help="qBittorrent user"),
    transfer_password: Optional[str] = typer.Option(None, "--transfer-password", help="qBittorrent password"),
    staging_dir: Optional[str] = typer.Option(None, "--staging-dir", help="Download staging directory"),
    search_url: Optional[str] = typer.Option(None, "--search-url", help="Search URL template with {query}"),
    max_results: Optional[int] = typer.Option(None, "--max-results", help="Result folders per search"),
):
    """Update configuration values."""
    config_path = ctx.obj["config_path"]
    update_config(
        config_path,
        cache_path=cache_path,
        transfer_url=transfer_url,
        transfer_username=transfer_username,
        transfer_password=transfer_password,
        transfer_staging_dir=staging_dir,
        scraper_search_url=search_url,
        browse_max_results=max_results,
    )
    console.print(f"[green]✓ Configuration saved to {config_path}[/green]")


@config_app.command(name="init")
@handle_share_errors
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config file"),
):
    """Write a config file with default values."""
    config_path = ctx.obj["config_path"]
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        raise typer.Exit(code=1)
    save_config(ShareConfig(), config_path)
    console.print(f"[green]✓ Created default configuration at {config_path}[/green]")


if __name__ == "__main__":
    app()
