"""Route exploration with Playwright: navigate, hover, click, capture."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Optional
from urllib.parse import urljoin

from rich.console import Console

from routelens.config import ExplorationConfig
from routelens.visual.snapshot import CaptureError, Snapshot, SnapshotCapture

try:
    from playwright.async_api import async_playwright, Browser, BrowserContext

    HAS_PLAYWRIGHT = True
except ImportError:
    HAS_PLAYWRIGHT = False

LABEL_SCRIPT = """(e, limit) =>
    e.getAttribute('id') ||
    e.getAttribute('class') ||
    (e.textContent || '').trim().slice(0, limit)"""


class SessionError(RuntimeError):
    """Browser session could not be started."""


class NavigationError(RuntimeError):
    """Route failed to load within the navigation timeout."""


class InteractionError(RuntimeError):
    """Hover or click on an element failed."""


@dataclass
class RouteOutcome:
    """What happened while exploring one route."""

    route: str
    url: str
    snapshots: int = 0
    elements: int = 0
    error: str = ""
    skipped_stages: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class ExplorationResult:
    """Ordered snapshots of a run, plus per-route outcomes."""

    snapshots: list[Snapshot] = field(default_factory=list)
    routes: list[RouteOutcome] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [s.path for s in self.snapshots]

    @property
    def failed_routes(self) -> list[RouteOutcome]:
        return [r for r in self.routes if not r.ok]


async def first_completed(*aws: Awaitable[Any], timeout: float) -> Any:
    """Run awaitables concurrently and return the result of the first to finish.

    Every other awaitable is cancelled and awaited before returning, whether
    the race was won, lost to an exception or timed out.

    Args:
        aws: Awaitables to race.
        timeout: Upper bound in seconds for the whole race.

    Returns:
        Result of the first awaitable to complete.

    Raises:
        asyncio.TimeoutError: If none completes within the timeout.
        Exception: Whatever the winning awaitable raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, _ = await asyncio.wait(
            tasks, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    if not done:
        raise asyncio.TimeoutError(f"No operation completed within {timeout}s")

    winner = next(task for task in tasks if task in done)
    return winner.result()


class BrowserSession:
    """Headless Chromium session shared by a whole run."""

    def __init__(self, config: ExplorationConfig, console: Optional[Console] = None):
        """Initialize browser session.

        Args:
            config: Exploration settings (headless mode, viewport).
            console: Rich console for output.
        """
        self.config = config
        self.console = console or Console()
        self._playwright = None
        self._browser: Optional["Browser"] = None
        self._context: Optional["BrowserContext"] = None

    async def __aenter__(self) -> "BrowserSession":
        """Launch the browser and open a browsing context."""
        if not HAS_PLAYWRIGHT:
            raise SessionError(
                "Playwright not installed. Run: pip install playwright && playwright install chromium"
            )

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=[
                    "--no-sandbox",
                    "--disable-dev-shm-usage",
                    "--disable-gpu",
                ],
            )
            self._context = await self._browser.new_context(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                },
            )
        except Exception as e:
            await self.close()
            raise SessionError(f"Could not start browser session: {e}") from e

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close context, browser and driver."""
        await self.close()

    async def close(self) -> None:
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Any]:
        """Open a page that is closed on every exit path."""
        if not self._context:
            raise SessionError("Browser not initialized. Use 'async with' context.")

        page = await self._context.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                self.console.print(f"  [yellow]⚠ Could not close page:[/] {e}")


class ExplorationOrchestrator:
    """Visit routes one at a time and screenshot their interactive states.

    For each route: navigate, capture ``initial``, then for each of the first
    ``max_elements`` interactive elements hover and capture ``hover_<i>``,
    click and capture ``click_<i>``. Failures stay local to the route or
    stage they happen in.
    """

    def __init__(
        self,
        session: Any,
        base_url: str,
        capture: SnapshotCapture,
        config: ExplorationConfig,
        console: Optional[Console] = None,
    ):
        """Initialize orchestrator.

        Args:
            session: Object whose ``page()`` is an async context manager
                yielding a Playwright page (normally a BrowserSession).
            base_url: URL the routes are resolved against.
            capture: Snapshot writer.
            config: Exploration budgets and timeouts.
            console: Rich console for output.
        """
        self.session = session
        self.base_url = base_url
        self.capture = capture
        self.config = config
        self.console = console or Console()

    def resolve_url(self, route: str) -> str:
        return urljoin(self.base_url, route)

    async def explore(self, routes: list[str]) -> ExplorationResult:
        """Explore every route in order.

        Args:
            routes: Routes to visit.

        Returns:
            ExplorationResult with snapshots in capture order.
        """
        result = ExplorationResult()

        for route in routes:
            outcome = await self.explore_route(route, result)
            result.routes.append(outcome)

        return result

    async def explore_route(self, route: str, result: ExplorationResult) -> RouteOutcome:
        """Explore one route, appending its snapshots to result.

        Args:
            route: Route to visit.
            result: Run result to append snapshots to.

        Returns:
            RouteOutcome for this route.
        """
        url = self.resolve_url(route)
        outcome = RouteOutcome(route=route, url=url)
        self.console.print(f"\n[cyan]🌐 Visiting:[/] {url}")

        try:
            async with self.session.page() as page:
                await self._navigate(page, url)
                await self._record(page, result, outcome, "initial", route)

                elements = await self._enumerate(page)
                outcome.elements = len(elements)

                for index, element in enumerate(elements):
                    name = await self.element_label(element)
                    await self._hover(page, element, index, name, result, outcome)
                    await self._click(page, element, index, name, result, outcome)
        except SessionError:
            raise
        except Exception as e:
            # Navigation, initial capture, or the page itself going away
            outcome.error = str(e)
            self.console.print(f"  [yellow]⚠ Route abandoned:[/] {e}")

        return outcome

    async def element_label(self, element: Any) -> str:
        """Derive a display label: id, then class, then trimmed text."""
        try:
            label = await element.evaluate(LABEL_SCRIPT, self.config.label_text_length)
        except Exception:
            return ""
        return label or ""

    async def _navigate(self, page: Any, url: str) -> None:
        try:
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.navigation_timeout_ms,
            )
        except Exception as e:
            raise NavigationError(f"Error loading {url}: {e}") from e

    async def _enumerate(self, page: Any) -> list[Any]:
        try:
            elements = await page.query_selector_all(self.config.selector)
        except Exception as e:
            self.console.print(f"  [yellow]⚠ Could not query elements:[/] {e}")
            return []
        return list(elements[: self.config.max_elements])

    async def _hover(
        self,
        page: Any,
        element: Any,
        index: int,
        name: str,
        result: ExplorationResult,
        outcome: RouteOutcome,
    ) -> None:
        label = f"hover_{index}"
        try:
            try:
                await element.hover(timeout=self.config.click_timeout_ms)
            except Exception as e:
                raise InteractionError(f"{label} failed: {e}") from e
            await self._record(page, result, outcome, label, name)
        except (InteractionError, CaptureError) as e:
            self._skip(outcome, label, e)

    async def _click(
        self,
        page: Any,
        element: Any,
        index: int,
        name: str,
        result: ExplorationResult,
        outcome: RouteOutcome,
    ) -> None:
        label = f"click_{index}"
        bound = max(self.config.click_timeout_ms, self.config.navigation_wait_ms) / 1000 + 1.0
        try:
            try:
                await first_completed(
                    self._wait_for_navigation(page),
                    element.click(timeout=self.config.click_timeout_ms),
                    timeout=bound,
                )
                await page.wait_for_timeout(self.config.settle_ms)
            except Exception as e:
                raise InteractionError(f"{label} failed: {e}") from e
            await self._record(page, result, outcome, label, name)
        except (InteractionError, CaptureError) as e:
            self._skip(outcome, label, e)

    async def _wait_for_navigation(self, page: Any) -> Any:
        # A click that does not navigate is the common case, not a failure
        try:
            return await page.wait_for_event(
                "framenavigated", timeout=self.config.navigation_wait_ms
            )
        except Exception:
            return None

    async def _record(
        self,
        page: Any,
        result: ExplorationResult,
        outcome: RouteOutcome,
        label: str,
        name: str,
    ) -> None:
        path = await self.capture.capture(page, label, name)
        result.snapshots.append(
            Snapshot(path=path, label=label, element_name=name, route=outcome.route)
        )
        outcome.snapshots += 1
        self.console.print(f"  [dim]📸 {path}[/]")

    def _skip(self, outcome: RouteOutcome, label: str, error: Exception) -> None:
        outcome.skipped_stages.append(label)
        self.console.print(f"  [yellow]⚠ Skipped {label}:[/] {error}")
