"""Discovery module - Route inference from project source layout."""

from routelens.discovery.routes import (
    RouteDiscoverer,
    discover_routes,
    extract_route_paths,
    normalize_route,
)
from routelens.discovery.walker import WalkEntry, walk_files

__all__ = [
    "RouteDiscoverer",
    "discover_routes",
    "extract_route_paths",
    "normalize_route",
    "WalkEntry",
    "walk_files",
]
