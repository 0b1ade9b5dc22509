"""Exploration pipeline orchestration."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from routelens.config import DiscoveryConfig, ExplorationConfig, GridConfig, SnapshotConfig
from routelens.discovery.routes import RouteDiscoverer
from routelens.discovery.walker import WalkEntry
from routelens.visual.explorer import BrowserSession, ExplorationOrchestrator, ExplorationResult
from routelens.visual.gallery import generate_gallery, generate_summary
from routelens.visual.grid import CompositionError, GridComposer
from routelens.visual.snapshot import SnapshotCapture

SNAPSHOT_DIRNAME = ".screenshots"


@dataclass
class RunSummary:
    """Artifacts and outcome of a pipeline run."""

    routes: list[str]
    result: ExplorationResult
    snapshot_dir: str
    skipped: list[WalkEntry] = field(default_factory=list)
    grid_path: Optional[str] = None
    grid_error: str = ""
    manifest_path: str = ""
    gallery_path: str = ""
    summary_path: str = ""

    @property
    def snapshot_count(self) -> int:
        return len(self.result.snapshots)


async def run_pipeline(
    project_path: Path | str,
    base_url: str,
    output_dir: Path | str,
    config: dict[str, Any],
    console: Optional[Console] = None,
    session: Any = None,
) -> RunSummary:
    """Run discovery, exploration, grid composition and reporting.

    Args:
        project_path: Front-end project root.
        base_url: URL of the running instance.
        output_dir: Directory that receives the snapshot folder.
        config: Full configuration.
        console: Rich console for output.
        session: Open browser session; a BrowserSession is started when None.

    Returns:
        RunSummary describing what was produced.

    Raises:
        SessionError: If the browser session cannot be started.
    """
    console = console or Console()
    started = datetime.now()
    snapshot_dir = Path(output_dir) / SNAPSHOT_DIRNAME
    snapshot_dir.mkdir(parents=True, exist_ok=True)

    # Step 1: Discovery
    console.print("[cyan]Step 1/4:[/] Discovering routes...")
    discoverer = RouteDiscoverer(project_path, DiscoveryConfig.from_config(config))
    routes = discoverer.discover()
    console.print(f"  ✓ Found {len(routes)} routes")
    for entry in discoverer.skipped:
        console.print(f"  [yellow]⚠ Skipped {entry.path}:[/] {entry.reason}")

    # Step 2: Exploration
    console.print("\n[cyan]Step 2/4:[/] Exploring routes...")
    exploration_config = ExplorationConfig.from_config(config)
    capture = SnapshotCapture(snapshot_dir, SnapshotConfig.from_config(config))

    if not routes:
        result = ExplorationResult()
    elif session is not None:
        result = await ExplorationOrchestrator(
            session, base_url, capture, exploration_config, console
        ).explore(routes)
    else:
        async with BrowserSession(exploration_config, console) as browser:
            result = await ExplorationOrchestrator(
                browser, base_url, capture, exploration_config, console
            ).explore(routes)

    console.print(
        f"\n  ✓ Captured {len(result.snapshots)} screenshots "
        f"({len(result.failed_routes)} routes failed)"
    )

    summary = RunSummary(
        routes=routes,
        result=result,
        snapshot_dir=str(snapshot_dir),
        skipped=list(discoverer.skipped),
    )

    # Step 3: Contact sheet
    console.print("\n[cyan]Step 3/4:[/] Composing contact sheet...")
    grid_config = GridConfig.from_config(config)
    try:
        summary.grid_path = GridComposer(grid_config).compose(
            result.paths, snapshot_dir / grid_config.filename
        )
    except CompositionError as e:
        summary.grid_error = str(e)
        console.print(f"  [red]Grid failed:[/] {e}")
        console.print("[yellow]Screenshots are kept; continuing with reports...[/]")

    if summary.grid_path:
        console.print(f"  ✓ Grid saved to {summary.grid_path}")
    elif not summary.grid_error:
        console.print("  • No screenshots to compose")

    # Step 4: Reports
    console.print("\n[cyan]Step 4/4:[/] Writing reports...")
    summary.manifest_path = write_manifest(summary, base_url, started)
    summary.gallery_path = generate_gallery(
        result, snapshot_dir / "index.html", grid_path=summary.grid_path
    )
    summary.summary_path = generate_summary(result, snapshot_dir / "summary.md")
    console.print(f"  ✓ Reports saved to {snapshot_dir}")

    return summary


def write_manifest(summary: RunSummary, base_url: str, started: datetime) -> str:
    """Write a JSON manifest of the run.

    Args:
        summary: Run summary.
        base_url: URL the routes were resolved against.
        started: Run start time.

    Returns:
        Path to the manifest file.
    """
    manifest = {
        "base_url": base_url,
        "start_time": started.isoformat(),
        "end_time": datetime.now().isoformat(),
        "routes": summary.routes,
        "skipped_paths": [
            {"path": str(entry.path), "reason": entry.reason} for entry in summary.skipped
        ],
        "outcomes": [
            {
                "route": outcome.route,
                "url": outcome.url,
                "elements": outcome.elements,
                "snapshots": outcome.snapshots,
                "skipped_stages": outcome.skipped_stages,
                "error": outcome.error,
            }
            for outcome in summary.result.routes
        ],
        "snapshots": [
            {
                "path": ss.path,
                "route": ss.route,
                "label": ss.label,
                "element_name": ss.element_name,
            }
            for ss in summary.result.snapshots
        ],
        "grid": summary.grid_path,
        "grid_error": summary.grid_error,
    }

    manifest_path = Path(summary.snapshot_dir) / "manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, default=str)

    return str(manifest_path)
