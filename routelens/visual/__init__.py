"""Visual module - Exploration, screenshots and contact sheets."""

from routelens.visual.explorer import (
    BrowserSession,
    ExplorationOrchestrator,
    ExplorationResult,
    RouteOutcome,
    SessionError,
)
from routelens.visual.gallery import generate_gallery, generate_summary
from routelens.visual.grid import CompositionError, GridComposer, GridLayout
from routelens.visual.snapshot import CaptureError, Snapshot, SnapshotCapture

__all__ = [
    "BrowserSession",
    "ExplorationOrchestrator",
    "ExplorationResult",
    "RouteOutcome",
    "SessionError",
    "generate_gallery",
    "generate_summary",
    "CompositionError",
    "GridComposer",
    "GridLayout",
    "CaptureError",
    "Snapshot",
    "SnapshotCapture",
]
