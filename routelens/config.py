"""Configuration loading and management."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATHS = [
    Path("routelens.yaml"),
    Path("configs/routelens.yaml"),
    Path.home() / ".routelens" / "config.yaml",
]


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from file.

    Values found in the file are merged over the defaults, so a config file
    only needs the keys it changes.

    Args:
        config_path: Optional path to config file. If not provided,
                    searches default locations.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
    """
    if config_path and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    paths_to_try = [config_path] if config_path else DEFAULT_CONFIG_PATHS

    for path in paths_to_try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
                return merge_configs(get_default_config(), config or {})

    return get_default_config()


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "discovery": {
            "candidate_dirs": ["pages", "app", "src/pages", "src/routes"],
            "extensions": [".js", ".jsx", ".ts", ".tsx", ".astro", ".svelte", ".html"],
            "ignored_names": ["layout", "error", "not-found", "_document", "_app"],
            "index_names": ["index", "page"],
            "routing_root": "src/app",
            "routing_file_pattern": r"routing\.module\.ts$|\.routes\.ts$",
            "ignored_dirs": [
                "node_modules",
                ".git",
                ".next",
                "build",
                "dist",
                "__pycache__",
                ".venv",
                "venv",
            ],
        },
        "exploration": {
            "selectors": [
                "button",
                "a[href]",
                "[role='button']",
                "[aria-haspopup]",
                ".modal-trigger",
            ],
            "max_elements": 6,
            "navigation_timeout_ms": 30000,
            "click_timeout_ms": 2000,
            "navigation_wait_ms": 2000,
            "settle_ms": 600,
            "label_text_length": 20,
            "headless": True,
            "viewport": {"width": 1280, "height": 800},
        },
        "snapshot": {
            "name_max_length": 40,
        },
        "grid": {
            "columns": 3,
            "padding": 20,
            "target_width": 400,
            "background": "white",
            "filename": "grid.png",
        },
    }


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries.

    Args:
        base: Base configuration.
        override: Override configuration (takes precedence).

    Returns:
        Merged configuration.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    return merge_configs(get_default_config()[name], config.get(name) or {})


@dataclass(frozen=True)
class DiscoveryConfig:
    """Naming conventions used to infer routes from a project tree."""

    candidate_dirs: tuple[str, ...]
    extensions: tuple[str, ...]
    ignored_names: tuple[str, ...]
    index_names: tuple[str, ...]
    routing_root: str
    routing_file_pattern: str
    ignored_dirs: tuple[str, ...]

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "DiscoveryConfig":
        section = _section(config, "discovery")
        return cls(
            candidate_dirs=tuple(section["candidate_dirs"]),
            extensions=tuple(ext.lower() for ext in section["extensions"]),
            ignored_names=tuple(section["ignored_names"]),
            index_names=tuple(section["index_names"]),
            routing_root=section["routing_root"],
            routing_file_pattern=section["routing_file_pattern"],
            ignored_dirs=tuple(section["ignored_dirs"]),
        )


@dataclass(frozen=True)
class ExplorationConfig:
    """Budgets and timeouts for the per-route exploration loop."""

    selectors: tuple[str, ...]
    max_elements: int
    navigation_timeout_ms: int
    click_timeout_ms: int
    navigation_wait_ms: int
    settle_ms: int
    label_text_length: int
    headless: bool
    viewport_width: int
    viewport_height: int

    @property
    def selector(self) -> str:
        """Selectors joined into one CSS selector list."""
        return ", ".join(self.selectors)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ExplorationConfig":
        section = _section(config, "exploration")
        viewport = section["viewport"]
        return cls(
            selectors=tuple(section["selectors"]),
            max_elements=int(section["max_elements"]),
            navigation_timeout_ms=int(section["navigation_timeout_ms"]),
            click_timeout_ms=int(section["click_timeout_ms"]),
            navigation_wait_ms=int(section["navigation_wait_ms"]),
            settle_ms=int(section["settle_ms"]),
            label_text_length=int(section["label_text_length"]),
            headless=bool(section["headless"]),
            viewport_width=int(viewport["width"]),
            viewport_height=int(viewport["height"]),
        )


@dataclass(frozen=True)
class SnapshotConfig:
    """Snapshot filename settings."""

    name_max_length: int = 40

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SnapshotConfig":
        section = _section(config, "snapshot")
        return cls(name_max_length=int(section["name_max_length"]))


@dataclass(frozen=True)
class GridConfig:
    """Contact sheet layout."""

    columns: int = 3
    padding: int = 20
    target_width: int = 400
    background: str = "white"
    filename: str = "grid.png"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "GridConfig":
        section = _section(config, "grid")
        columns = int(section["columns"])
        if columns < 1:
            raise ValueError(f"grid.columns must be at least 1, got {columns}")
        return cls(
            columns=columns,
            padding=int(section["padding"]),
            target_width=int(section["target_width"]),
            background=section["background"],
            filename=section["filename"],
        )
