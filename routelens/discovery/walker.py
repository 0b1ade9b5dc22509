"""Lazy project tree traversal."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional


@dataclass(frozen=True)
class WalkEntry:
    """A file reached during traversal, or a node that had to be skipped."""

    path: Path
    kind: str = "file"
    reason: str = ""

    @property
    def skipped(self) -> bool:
        return self.kind == "skipped"


def walk_files(
    root: Path,
    ignored_dirs: Iterable[str] = (),
    _visited: Optional[set[Path]] = None,
) -> Iterator[WalkEntry]:
    """Recursively yield every file under root, in sorted order.

    Directories that cannot be listed are yielded as skipped entries instead
    of raising, so callers see what was missed without aborting the walk.
    A missing root yields a single skipped entry. Each real directory is
    walked once, so symlinks back into the tree are skipped.

    Args:
        root: Directory to walk.
        ignored_dirs: Directory names that are never descended into.

    Yields:
        WalkEntry for each file or skipped node.
    """
    ignored = set(ignored_dirs)
    visited = _visited if _visited is not None else set()
    try:
        visited.add(root.resolve())
    except (OSError, RuntimeError) as e:
        yield WalkEntry(path=root, kind="skipped", reason=str(e))
        return

    try:
        children = sorted(root.iterdir())
    except OSError as e:
        yield WalkEntry(path=root, kind="skipped", reason=e.strerror or str(e))
        return

    for child in children:
        try:
            is_dir = child.is_dir()
            real = child.resolve() if is_dir else None
        except (OSError, RuntimeError) as e:
            yield WalkEntry(path=child, kind="skipped", reason=str(e))
            continue

        if is_dir:
            if child.name in ignored:
                continue
            if real in visited:
                yield WalkEntry(path=child, kind="skipped", reason="directory already walked")
                continue
            yield from walk_files(child, ignored, visited)
        else:
            yield WalkEntry(path=child)
