import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.traceback import install

from .base import ValueKind
from .decorators import handle_cfs_errors
from .root import Root
from .tokenizer import join

# Initialize Rich Traceback for better error messages
install(show_locals=True)

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

app = typer.Typer(help="Browse and edit an object graph as a file system")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
):
    """
    cfs - expose an object graph as a virtual file system.

    Every command takes the graph file (or a directory holding config.yaml)
    followed by a path inside the graph, e.g. `cfs cat site.yaml pages/about`.
    """
    from .config import load_config

    cli_config = load_config().cli
    console.no_color = not cli_config.color
    if verbose or cli_config.verbose:
        logging.getLogger("cfs").setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        if verbose:
            console.print("[bold green]Verbose mode enabled.[/bold green]")


def _graph_path(path: str) -> str:
    """Paths may be given with a leading separator, like URLs."""
    return path[1:] if path.startswith("/") else path


def _open(graph: Path) -> Root:
    return Root.from_file(str(graph), cached=False)


@app.command(name="ls")
@handle_cfs_errors
def ls(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    path: str = typer.Argument("", help="Path inside the graph (e.g., pages/)"),
    folder: bool = typer.Option(False, "--folder", help="Index into lists while resolving"),
):
    """List the entries of a folder.

    Examples:
        cfs ls site.yaml
        cfs ls site.yaml pages
        cfs ls site.yaml pages/static/css
    """
    root = _open(graph)
    node = root.get(_graph_path(path), folder)
    entries = node.list()
    if entries is None:
        console.print(f"[yellow]ls: {path}: Not a folder[/yellow]")
        raise typer.Exit(code=1)

    info = node.get_info()
    table = Table(show_header=True, header_style="bold cyan")
    if info["path"]:
        table.caption = f"{info['kind']} entry, leftover path {join(info['path'])}"
    table.add_column("Name")
    table.add_column("Kind", style="dim")
    for name in entries:
        # Handler listings name real entries, not graph values
        kind = node.item(name).get_info()["kind"] if node.kind is ValueKind.FOLDER else "file"
        # Escaped so the name can be pasted back as a path
        table.add_row(escape(join([name])), kind)
    console.print(table)


@app.command(name="cat")
@handle_cfs_errors
def cat(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    path: str = typer.Argument(..., help="Path inside the graph"),
    folder: bool = typer.Option(False, "--folder", help="Index into lists while resolving"),
):
    """Print the content of a node.

    Examples:
        cfs cat site.yaml pages/about
        cfs cat site.yaml 'a\\/b'
    """
    root = _open(graph)
    _print_content(root.get(_graph_path(path), folder).read(), path)


@app.command(name="url")
@handle_cfs_errors
def url(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    address: str = typer.Argument(..., help="URL whose path is resolved (query is ignored)"),
):
    """Print the node a URL maps to.

    Examples:
        cfs url site.yaml 'http://localhost/pages/about?x=1'
        cfs url site.yaml /pages/my%20page
    """
    root = _open(graph)
    _print_content(root.url_get(address).read(), address)


def _print_content(data, path: str) -> None:
    if data is None:
        console.print(f"[yellow]cat: {path}: No such entry[/yellow]")
        raise typer.Exit(code=1)
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    console.print(str(data), markup=False, highlight=False)


@app.command(name="write")
@handle_cfs_errors
def write(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    path: str = typer.Argument(..., help="Path inside the graph"),
    data: str = typer.Argument(..., help="New content"),
    folder: bool = typer.Option(False, "--folder", help="Index into lists while resolving"),
):
    """Overwrite a node and save the graph.

    Examples:
        cfs write site.yaml pages/about 'About us'
    """
    root = _open(graph)
    root.get(_graph_path(path), folder).write(data)
    root.save()
    console.print(f"[green]✓ Wrote {path}[/green]")


@app.command(name="append")
@handle_cfs_errors
def append(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    path: str = typer.Argument(..., help="Path inside the graph"),
    data: str = typer.Argument(..., help="Content to append"),
    folder: bool = typer.Option(False, "--folder", help="Index into lists while resolving"),
):
    """Append to a node and save the graph.

    Examples:
        cfs append site.yaml log 'new line'
    """
    root = _open(graph)
    root.get(_graph_path(path), folder).append(data)
    root.save()
    console.print(f"[green]✓ Appended to {path}[/green]")


@app.command(name="rm")
@handle_cfs_errors
def rm(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    path: str = typer.Argument(..., help="Path inside the graph"),
    keep_real: bool = typer.Option(False, "--keep-real", help="Do not remove real files behind delegates"),
    ignore_path: bool = typer.Option(False, "--ignore-path", help="Remove real files even below a delegate"),
):
    """Remove an entry from its folder and save the graph.

    Examples:
        cfs rm site.yaml pages/old
        cfs rm site.yaml pages/static --keep-real
    """
    root = _open(graph)
    if not root.get(_graph_path(path)).delete(not keep_real, ignore_path):
        console.print(f"[red]rm: {path}: Not removed[/red]")
        raise typer.Exit(code=1)
    root.save()
    console.print(f"[green]✓ Removed {path}[/green]")


@app.command(name="dump")
@handle_cfs_errors
def dump(
    graph: Path = typer.Argument(..., help="Graph file or directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout"),
):
    """Print (or copy) the serialized graph.

    Examples:
        cfs dump site.yaml
        cfs dump site.yaml -o backup.yaml
    """
    from .serializer import dumps

    root = _open(graph)
    if output:
        root.save(str(output))
        console.print(f"[green]✓ Saved graph to {output}[/green]")
    else:
        console.print(dumps(root.value), markup=False, highlight=False)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    init: bool = typer.Option(False, "--init", help="Initialize config file with defaults"),
    set_config_name: Optional[str] = typer.Option(None, "--config-name", help="Graph file looked up inside directories"),
    set_cached: Optional[bool] = typer.Option(None, "--cached/--no-cached", help="Reuse loaded graphs"),
    set_index_name: Optional[str] = typer.Option(None, "--index-name", help="Index file name for real directories"),
    set_ext: Optional[str] = typer.Option(None, "--ext", help="Extension appended to real files"),
    set_indent: Optional[int] = typer.Option(None, "--indent", help="YAML indentation"),
    set_verbose: Optional[bool] = typer.Option(None, "--cli-verbose/--no-cli-verbose", help="Enable verbose output by default"),
    set_color: Optional[bool] = typer.Option(None, "--cli-color/--no-cli-color", help="Enable colored output by default"),
):
    """
    View or edit cfs configuration.

    Configuration is stored at ~/.config/cfs/config.json (or ~/.cfs/config.json).

    Examples:
        cfs config --show
        cfs config --init
        cfs config --index-name index.html --ext ''
    """
    from .config import load_config, ensure_config_exists, update_config, get_config_path

    if init:
        config_path = ensure_config_exists()
        console.print(f"[green]Configuration initialized at {config_path}[/green]")
        return

    has_settings = any([
        set_config_name, set_cached is not None, set_index_name, set_ext is not None,
        set_indent, set_verbose is not None, set_color is not None,
    ])

    if show or not has_settings:
        current = load_config()
        console.print(f"\n[bold]cfs Configuration[/bold]")
        console.print(f"[dim]Location: {get_config_path()}[/dim]\n")

        console.print("[bold cyan]Loader Settings:[/bold cyan]")
        console.print(f"  Config Name: {current.loader.config_name}")
        console.print(f"  Cached:      {current.loader.cached}")

        console.print("\n[bold cyan]Delegate Settings:[/bold cyan]")
        console.print(f"  Index Name:  {current.delegate.index_name}")
        console.print(f"  Extension:   {current.delegate.ext or '[dim]none[/dim]'}")

        console.print("\n[bold cyan]Serializer Settings:[/bold cyan]")
        console.print(f"  Indent:      {current.serializer.indent}")

        console.print("\n[bold cyan]CLI Settings:[/bold cyan]")
        console.print(f"  Verbose:     {current.cli.verbose}")
        console.print(f"  Color:       {current.cli.color}")
        return

    update_config(
        loader_config_name=set_config_name,
        loader_cached=set_cached,
        delegate_index_name=set_index_name,
        delegate_ext=set_ext,
        serializer_indent=set_indent,
        cli_verbose=set_verbose,
        cli_color=set_color,
    )
    console.print("[green]✓ Configuration updated[/green]")
