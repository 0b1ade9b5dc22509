"""Shared fixtures: temporary projects and Playwright doubles."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from PIL import Image

from routelens.config import ExplorationConfig


class FakeElement:
    """Stand-in for a Playwright ElementHandle."""

    def __init__(self, label: str = "", fail_hover: bool = False, fail_click: bool = False):
        self.label = label
        self.fail_hover = fail_hover
        self.fail_click = fail_click
        self.hovered = 0
        self.clicked = 0

    async def evaluate(self, script, arg=None):
        return self.label

    async def hover(self, timeout=None):
        if self.fail_hover:
            raise RuntimeError("Element is not visible")
        self.hovered += 1

    async def click(self, timeout=None):
        if self.fail_click:
            raise RuntimeError("Element is detached from DOM")
        self.clicked += 1


class FakePage:
    """Stand-in for a Playwright Page that writes real PNG screenshots."""

    def __init__(self, site: "FakeSite"):
        self.site = site
        self.url = ""
        self.closed = False
        self.screenshots: list[str] = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.url = url
        if url in self.site.failing:
            raise TimeoutError(f"Timeout {timeout}ms exceeded navigating to {url}")

    async def screenshot(self, path, full_page=False):
        self.site.screenshot_calls += 1
        if self.site.screenshot_calls in self.site.failing_shots:
            raise OSError("Screenshot write failed")
        if self.site.fail_screenshots:
            raise OSError("No space left on device")
        if self.site.corrupt_screenshots:
            Path(path).write_bytes(b"not a png")
            return
        Image.new("RGB", self.site.size, "steelblue").save(path)
        self.screenshots.append(path)

    async def query_selector_all(self, selector):
        self.site.selectors.append(selector)
        return self.site.elements.get(self.url, [])

    async def wait_for_event(self, event, timeout=None):
        await asyncio.sleep((timeout or 0) / 1000)
        raise TimeoutError(f"Timeout {timeout}ms exceeded waiting for {event}")

    async def wait_for_timeout(self, timeout):
        if self.url in self.site.closing:
            raise RuntimeError("Target page, context or browser has been closed")

    async def close(self):
        self.closed = True


class FakeSite:
    """Browser session double: hands out FakePages and remembers them."""

    def __init__(self, elements=None, failing=None, size=(400, 300)):
        self.elements: dict[str, list[FakeElement]] = elements or {}
        self.failing: set[str] = set(failing or ())
        # URLs whose page dies after a click
        self.closing: set[str] = set()
        # 1-based screenshot calls that fail
        self.failing_shots: set[int] = set()
        self.screenshot_calls = 0
        # 1-based page openings that fail
        self.failing_opens: set[int] = set()
        self.opens = 0
        self.size = size
        self.fail_screenshots = False
        self.corrupt_screenshots = False
        self.pages: list[FakePage] = []
        self.selectors: list[str] = []

    @asynccontextmanager
    async def page(self):
        self.opens += 1
        if self.opens in self.failing_opens:
            raise RuntimeError("Target closed while opening page")
        page = FakePage(self)
        self.pages.append(page)
        try:
            yield page
        finally:
            await page.close()


@pytest.fixture
def exploration_config():
    """Exploration config with short waits for fast tests."""
    return ExplorationConfig.from_config(
        {
            "exploration": {
                "max_elements": 3,
                "click_timeout_ms": 50,
                "navigation_wait_ms": 10,
                "settle_ms": 0,
            }
        }
    )


@pytest.fixture
def make_project(tmp_path):
    """Return a helper that creates files in a temporary project."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def fakes():
    """Playwright doubles, as ``fakes.Site`` and ``fakes.Element``."""

    class Fakes:
        Site = FakeSite
        Element = FakeElement

    return Fakes
