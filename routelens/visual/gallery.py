"""Review report - HTML gallery and Markdown summary of an exploration run."""

import os
from pathlib import Path
from typing import Optional

from jinja2 import Environment, BaseLoader

from routelens.visual.explorer import ExplorationResult


GALLERY_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{{ title }}</title>
    <style>
        body { font-family: system-ui, sans-serif; margin: 24px; color: #222; }
        header p, .element { color: #666; }
        section { margin-top: 32px; }
        h2 { font-family: monospace; font-size: 18px; }
        .sheet img { max-width: 100%; border: 1px solid #ccc; }
        .states { display: flex; flex-wrap: wrap; gap: 12px; }
        figure { margin: 0; width: 280px; }
        figure img { width: 100%; height: 200px; object-fit: cover; object-position: top; border: 1px solid #ddd; }
        figcaption { font-size: 13px; }
        .stage { font-weight: bold; }
        .element { overflow: hidden; text-overflow: ellipsis; white-space: nowrap; }
        .error { color: #b00020; }
    </style>
</head>
<body>
    <header>
        <h1>{{ title }}</h1>
        <p>
            {{ routes|length }} routes, {{ total }} screenshots
            {%- if failed %}, {{ failed }} failed{% endif %}
        </p>
    </header>

    {% if grid_path %}
    <div class="sheet">
        <a href="{{ grid_path }}" target="_blank"><img src="{{ grid_path }}" alt="Contact sheet"></a>
    </div>
    {% endif %}

    {% for route in routes %}
    <section>
        <h2>{{ route.route }}</h2>
        {% if route.error %}
        <p class="error">{{ route.error }}</p>
        {% else %}
        <div class="states">
            {% for ss in route.snapshots %}
            <figure>
                <a href="{{ ss.path }}" target="_blank"><img src="{{ ss.path }}" alt="{{ ss.label }}"></a>
                <figcaption>
                    <div class="stage">{{ ss.label }}</div>
                    <div class="element">{{ ss.element_name or '-' }}</div>
                </figcaption>
            </figure>
            {% endfor %}
        </div>
        {% endif %}
    </section>
    {% endfor %}
</body>
</html>"""


def _relative(path: str, base: Path) -> str:
    """Make a file path relative to the report location when possible."""
    try:
        return Path(os.path.relpath(path, base)).as_posix()
    except ValueError:
        return path


def generate_gallery(
    result: ExplorationResult,
    output_path: Path | str = "index.html",
    grid_path: Optional[str] = None,
    title: str = "RouteLens Review",
) -> str:
    """Generate HTML review page for an exploration run.

    Args:
        result: Exploration result.
        output_path: Output HTML file path.
        grid_path: Optional contact sheet shown at the top.
        title: Page title.

    Returns:
        Path to generated HTML file.
    """
    output_path = Path(output_path)
    report_dir = output_path.parent

    routes = []
    for outcome in result.routes:
        routes.append(
            {
                "route": outcome.route,
                "error": outcome.error,
                "snapshots": [
                    {
                        "path": _relative(ss.path, report_dir),
                        "label": ss.label,
                        "element_name": ss.element_name if ss.label != "initial" else "",
                    }
                    for ss in result.snapshots
                    if ss.route == outcome.route
                ],
            }
        )

    env = Environment(loader=BaseLoader(), autoescape=True)
    template = env.from_string(GALLERY_TEMPLATE)
    html = template.render(
        title=title,
        routes=routes,
        total=len(result.snapshots),
        failed=len(result.failed_routes),
        grid_path=_relative(grid_path, report_dir) if grid_path else None,
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(html)

    return str(output_path)


def generate_summary(
    result: ExplorationResult,
    output_path: Path | str = "summary.md",
) -> str:
    """Generate Markdown summary of an exploration run.

    Args:
        result: Exploration result.
        output_path: Output Markdown file path.

    Returns:
        Path to generated file.
    """
    output_path = Path(output_path)

    lines = [
        "# Exploration Summary",
        "",
        f"**Routes:** {len(result.routes)}  ",
        f"**Screenshots:** {len(result.snapshots)}",
        "",
        "| Route | Elements | Screenshots | Skipped | Error |",
        "|-------|----------|-------------|---------|-------|",
    ]

    for outcome in result.routes:
        skipped = ", ".join(outcome.skipped_stages) or "-"
        error = outcome.error.replace("|", "\\|").splitlines()[0] if outcome.error else "-"
        lines.append(
            f"| {outcome.route} | {outcome.elements} | {outcome.snapshots} | {skipped} | {error} |"
        )

    content = "\n".join(lines)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(content)

    return str(output_path)
