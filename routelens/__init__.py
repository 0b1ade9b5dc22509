"""RouteLens - Visual exploration of front-end projects.

Discovers routes from a project's source tree, visits each one in a headless
browser, screenshots hover and click states, and tiles everything into a
single contact sheet for review.
"""

__version__ = "1.0.0"
__author__ = "RouteLens Team"

# Usage notice
USAGE_NOTICE = """
╔══════════════════════════════════════════════════════════════════╗
║  RouteLens clicks through every page it finds. Point it at a     ║
║  local or staging instance, never at production data.            ║
╚══════════════════════════════════════════════════════════════════╝
"""
