"""RouteLens CLI - Typer-based command line interface."""

import re
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from routelens import __version__, USAGE_NOTICE
from routelens.config import DiscoveryConfig, load_config, merge_configs

app = typer.Typer(
    name="routelens",
    help="RouteLens - Visual exploration of front-end projects",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

SNAPSHOT_FILE = re.compile(r"^\d+__.+\.png$", re.IGNORECASE)


def show_banner() -> None:
    """Display the RouteLens banner."""
    console.print(
        Panel(
            "[bold]Discover → Explore → Capture → Compose[/]",
            title=f"[bold cyan]RouteLens v{__version__}[/]",
            border_style="cyan",
        )
    )


def _load(config_file: Path | None, overrides: dict[str, Any]) -> dict[str, Any]:
    try:
        config = load_config(config_file)
    except Exception as e:
        console.print(f"[red]Error loading config:[/] {e}")
        raise typer.Exit(1)
    return merge_configs(config, overrides)


@app.command()
def explore(
    project: Annotated[
        Path, typer.Option("--project", "-p", prompt="📂 Project path", help="Project root")
    ],
    url: Annotated[
        str,
        typer.Option(
            "--url", "-u", prompt="🌐 Base URL (e.g. http://localhost:3000)", help="Base URL"
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", prompt="📁 Where to save screenshots", help="Output dir"),
    ],
    columns: Annotated[int | None, typer.Option("--columns", help="Grid columns")] = None,
    padding: Annotated[int | None, typer.Option("--padding", help="Grid padding in pixels")] = None,
    max_elements: Annotated[
        int | None, typer.Option("--max-elements", help="Elements explored per route")
    ] = None,
    headed: Annotated[bool, typer.Option("--headed", help="Show the browser window")] = False,
    config_file: Annotated[Path | None, typer.Option("--config", help="Custom config file")] = None,
) -> None:
    """
    Explore every discovered route and build a contact sheet.

    Routes are inferred from the project's source layout, visited in a
    headless browser, and screenshotted before and after hovering and
    clicking interactive elements.
    """
    import asyncio

    from routelens.pipeline import run_pipeline
    from routelens.visual.explorer import SessionError

    show_banner()
    console.print(USAGE_NOTICE)

    overrides: dict[str, Any] = {}
    if columns is not None:
        overrides.setdefault("grid", {})["columns"] = columns
    if padding is not None:
        overrides.setdefault("grid", {})["padding"] = padding
    if max_elements is not None:
        overrides.setdefault("exploration", {})["max_elements"] = max_elements
    if headed:
        overrides.setdefault("exploration", {})["headless"] = False
    config = _load(config_file, overrides)

    if not url.startswith(("http://", "https://")):
        url = f"http://{url}"

    console.print(f"\n[bold]Project:[/] {project}")
    console.print(f"[bold]Base URL:[/] {url}")
    console.print(f"[bold]Output:[/] {output}\n")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("[cyan]Exploring routes...", total=None)
            summary = asyncio.run(run_pipeline(project, url, output, config, console=console))
            progress.update(
                task, description=f"[green]✓ Captured {summary.snapshot_count} screenshots"
            )
    except KeyboardInterrupt:
        console.print("\n[yellow]Exploration interrupted by user.[/]")
        raise typer.Exit(130)
    except SessionError as e:
        console.print(f"\n[red]Browser session failed:[/] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"\n[red]Exploration failed:[/] {e}")
        raise typer.Exit(1)

    _display_summary(summary)


def _display_summary(summary) -> None:
    """Display exploration summary."""
    console.print("\n" + "=" * 60)
    console.print("[bold cyan]Exploration Complete[/]")
    console.print("=" * 60)

    table = Table(title="Routes")
    table.add_column("Route", style="cyan")
    table.add_column("Elements", justify="right")
    table.add_column("Screenshots", justify="right")
    table.add_column("Status")

    for outcome in summary.result.routes:
        status = "[green]✓[/]" if outcome.ok else f"[red]✗[/] {outcome.error[:60]}"
        table.add_row(outcome.route, str(outcome.elements), str(outcome.snapshots), status)

    console.print(table)
    console.print(f"\n[bold]Screenshots:[/] {summary.snapshot_count}")
    if summary.grid_path:
        console.print(f"[bold green]✅ Grid saved to:[/] {summary.grid_path}")
    elif summary.grid_error:
        console.print(f"[yellow]Grid not created:[/] {summary.grid_error}")
    console.print(f"[bold]Review page:[/] {summary.gallery_path}")


@app.command()
def routes(
    project: Annotated[Path, typer.Option("--project", "-p", help="Project root")],
    config_file: Annotated[Path | None, typer.Option("--config", help="Custom config file")] = None,
) -> None:
    """List routes discovered in a project without launching a browser."""
    from routelens.discovery.routes import RouteDiscoverer

    config = _load(config_file, {})
    discoverer = RouteDiscoverer(project, DiscoveryConfig.from_config(config))
    found = discoverer.discover()

    table = Table(title=f"Routes in {project}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Route", style="cyan")
    for index, route in enumerate(found, start=1):
        table.add_row(str(index), route)
    console.print(table)

    if discoverer.skipped:
        console.print("\n[yellow]Skipped paths:[/]")
        for entry in discoverer.skipped:
            console.print(f"  • {entry.path}: {entry.reason}")

    if not found:
        console.print("[yellow]No routes found.[/]")


@app.command()
def grid(
    input_dir: Annotated[
        Path, typer.Option("--input", "-i", help="Folder of screenshots to tile")
    ],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output image")] = None,
    columns: Annotated[int, typer.Option("--columns", help="Grid columns")] = 3,
    padding: Annotated[int, typer.Option("--padding", help="Padding in pixels")] = 20,
) -> None:
    """Compose a contact sheet from existing screenshots."""
    from routelens.visual.grid import CompositionError, create_grid

    if not input_dir.is_dir():
        console.print(f"[red]Error:[/] {input_dir} is not a directory")
        raise typer.Exit(1)

    output = output or input_dir / "grid.png"
    images = sorted(
        str(p) for p in input_dir.iterdir() if p.is_file() and SNAPSHOT_FILE.match(p.name)
    )

    if not images:
        console.print("[yellow]No screenshots found.[/]")
        return

    try:
        path = create_grid(images, output, columns=columns, padding=padding)
    except CompositionError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    console.print(f"[bold green]✅ Grid of {len(images)} screenshots saved to:[/] {path}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"RouteLens v{__version__}")


@app.command()
def doctor() -> None:
    """Check system requirements and dependencies."""
    show_banner()
    console.print("\n[bold]Checking system requirements...[/]\n")

    checks = []

    py_version = sys.version_info
    py_ok = py_version >= (3, 11)
    checks.append(
        ("Python 3.11+", py_ok, f"{py_version.major}.{py_version.minor}.{py_version.micro}")
    )

    try:
        from playwright.async_api import async_playwright

        pw_ok = True
        pw_status = "Installed (run 'playwright install chromium' if launch fails)"
    except ImportError:
        pw_ok = False
        pw_status = "pip install playwright && playwright install chromium"
    checks.append(("Playwright", pw_ok, pw_status))

    try:
        import PIL

        pil_ok = True
        pil_status = f"Installed ({PIL.__version__})"
    except ImportError:
        pil_ok = False
        pil_status = "pip install Pillow"
    checks.append(("Pillow", pil_ok, pil_status))

    table = Table(title="System Check Results")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Details")

    for name, ok, details in checks:
        status = "[green]✓[/]" if ok else "[red]✗[/]"
        table.add_row(name, status, details)

    console.print(table)

    if not all(ok for _, ok, _ in checks):
        console.print("\n[yellow]Some checks failed. Install the missing components above.[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
