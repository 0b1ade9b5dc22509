"""Route discovery from front-end project layouts.

Two heuristics are combined:

* File conventions: files under ``pages/``, ``app/``, ``src/pages/`` or
  ``src/routes/`` map to routes by their path (Next.js, Nuxt, SvelteKit,
  Astro style).
* Routing tables: ``*.routes.ts`` and ``*-routing.module.ts`` files under
  ``src/app`` are scanned for ``path: '...'`` literals (Angular style).

Neither heuristic parses source code. Dynamic path expressions, commented-out
routes and literals split across lines are misread or missed.
"""

import re
from pathlib import Path, PurePosixPath
from typing import Iterator

from routelens.config import DiscoveryConfig
from routelens.discovery.walker import WalkEntry, walk_files

PATH_LITERAL_PATTERN = re.compile(r"""path\s*:\s*['"]([^'"]*)['"]""")


def normalize_route(route: str) -> str:
    """Normalize a route to forward slashes with a single leading slash.

    Args:
        route: Raw route string.

    Returns:
        Normalized route.
    """
    route = route.replace("\\", "/")
    route = re.sub(r"/{2,}", "/", route)
    if not route.startswith("/"):
        route = "/" + route
    if len(route) > 1:
        route = route.rstrip("/") or "/"
    return route


def extract_route_paths(content: str) -> list[str]:
    """Extract route paths from routing table source text.

    Args:
        content: Source of a routing module.

    Returns:
        Routes in order of appearance; an empty literal maps to ``/``.
    """
    routes = []
    for match in PATH_LITERAL_PATTERN.finditer(content):
        literal = match.group(1)
        routes.append("/" if literal == "" else normalize_route(literal))
    return routes


class RouteDiscoverer:
    """Infer navigable routes from a project's source tree."""

    def __init__(self, project_path: Path | str, config: DiscoveryConfig):
        """Initialize route discoverer.

        Args:
            project_path: Project root directory.
            config: Naming conventions to apply.
        """
        self.project_path = Path(project_path)
        self.config = config
        self.skipped: list[WalkEntry] = []
        self._routing_file = re.compile(config.routing_file_pattern, re.IGNORECASE)

    def discover(self) -> list[str]:
        """Discover routes using both heuristics.

        Returns:
            Deduplicated routes in discovery order.
        """
        self.skipped = []
        routes: dict[str, None] = {}

        for route in self._scan_file_conventions():
            routes.setdefault(route, None)
        for route in self._scan_routing_tables():
            routes.setdefault(route, None)

        return list(routes)

    def route_for_file(self, relative: PurePosixPath) -> str | None:
        """Map a file path relative to a routing directory to its route.

        Args:
            relative: File path relative to the candidate directory.

        Returns:
            Route string, or None if the file does not define a route.
        """
        if relative.suffix.lower() not in self.config.extensions:
            return None

        name = relative.stem
        if name.startswith("_") or name in self.config.ignored_names:
            return None

        parent = relative.parent.as_posix()
        parent = "" if parent == "." else parent
        if name in self.config.index_names:
            return normalize_route(parent)
        return normalize_route(f"{parent}/{name}")

    def _scan_file_conventions(self) -> Iterator[str]:
        for candidate in self.config.candidate_dirs:
            base = self.project_path / candidate
            if not base.is_dir():
                continue

            for entry in self._walk(base):
                relative = PurePosixPath(entry.path.relative_to(base).as_posix())
                route = self.route_for_file(relative)
                if route is not None:
                    yield route

    def _scan_routing_tables(self) -> Iterator[str]:
        base = self.project_path / self.config.routing_root
        if not base.is_dir():
            return

        for entry in self._walk(base):
            if not self._routing_file.search(entry.path.name):
                continue

            try:
                content = entry.path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.skipped.append(WalkEntry(path=entry.path, kind="skipped", reason=str(e)))
                continue

            yield from extract_route_paths(content)

    def _walk(self, base: Path) -> Iterator[WalkEntry]:
        for entry in walk_files(base, self.config.ignored_dirs):
            if entry.skipped:
                self.skipped.append(entry)
            else:
                yield entry


def discover_routes(project_path: Path | str, config: DiscoveryConfig) -> list[str]:
    """Quick route discovery.

    Args:
        project_path: Project root directory.
        config: Discovery conventions.

    Returns:
        Deduplicated route list.
    """
    return RouteDiscoverer(project_path, config).discover()
