"""Tests for route exploration."""

import asyncio
from pathlib import Path

import pytest
from rich.console import Console

from routelens.visual import explorer
from routelens.visual.explorer import (
    BrowserSession,
    ExplorationOrchestrator,
    ExplorationResult,
    SessionError,
    first_completed,
)
from routelens.visual.snapshot import SnapshotCapture

BASE_URL = "http://localhost:3000"


@pytest.fixture
def quiet_console():
    """Return a console that prints nothing."""
    return Console(quiet=True)


@pytest.fixture
def make_orchestrator(tmp_path, exploration_config, quiet_console):
    """Return a helper building an orchestrator over a fake site."""

    def _make(site):
        return ExplorationOrchestrator(
            session=site,
            base_url=BASE_URL,
            capture=SnapshotCapture(tmp_path / "shots"),
            config=exploration_config,
            console=quiet_console,
        )

    return _make


class TestFirstCompleted:
    """Tests for the race combinator."""

    @pytest.mark.asyncio
    async def test_returns_first_result_and_cancels_loser(self):
        """Test that the fastest result wins and the loser is cancelled."""
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def fast():
            return "clicked"

        assert await first_completed(slow(), fast(), timeout=1) == "clicked"
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_winner_exception_propagates(self):
        """Test that an exception from the first finisher is raised."""

        async def boom():
            raise ValueError("detached")

        async def slow():
            await asyncio.sleep(10)

        with pytest.raises(ValueError, match="detached"):
            await first_completed(slow(), boom(), timeout=1)

    @pytest.mark.asyncio
    async def test_timeout_cancels_everything(self):
        """Test that nothing finishing within the bound raises TimeoutError."""
        cancelled = []

        async def slow(name):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(name)
                raise

        with pytest.raises(asyncio.TimeoutError):
            await first_completed(slow("a"), slow("b"), timeout=0.05)
        assert sorted(cancelled) == ["a", "b"]


class TestExplorationOrchestrator:
    """Tests for ExplorationOrchestrator."""

    def test_resolve_url(self, make_orchestrator, fakes):
        """Test that routes are joined to the base URL."""
        orchestrator = make_orchestrator(fakes.Site())
        assert orchestrator.resolve_url("/about") == "http://localhost:3000/about"
        assert orchestrator.resolve_url("/") == "http://localhost:3000/"

    @pytest.mark.asyncio
    async def test_snapshot_order(self, make_orchestrator, fakes):
        """Test initial, then hover/click per element, in route order."""
        site = fakes.Site(
            elements={
                f"{BASE_URL}/": [fakes.Element("menu"), fakes.Element("cta")],
                f"{BASE_URL}/about": [fakes.Element("contact")],
            }
        )
        result = await make_orchestrator(site).explore(["/", "/about"])

        labels = [(s.route, s.label) for s in result.snapshots]
        assert labels == [
            ("/", "initial"),
            ("/", "hover_0"),
            ("/", "click_0"),
            ("/", "hover_1"),
            ("/", "click_1"),
            ("/about", "initial"),
            ("/about", "hover_0"),
            ("/about", "click_0"),
        ]
        assert all(Path(p).exists() for p in result.paths)

    @pytest.mark.asyncio
    async def test_navigation_failure_skips_route_only(self, make_orchestrator, fakes):
        """Test that a route that times out yields no snapshots and the run continues."""
        site = fakes.Site(
            elements={f"{BASE_URL}/ok": [fakes.Element("btn")]},
            failing={f"{BASE_URL}/slow"},
        )
        result = await make_orchestrator(site).explore(["/slow", "/ok"])

        slow, ok = result.routes
        assert slow.snapshots == 0
        assert "Timeout" in slow.error
        assert not any(s.route == "/slow" for s in result.snapshots)
        assert ok.ok
        assert ok.snapshots == 3
        assert result.failed_routes == [slow]

    @pytest.mark.asyncio
    async def test_pages_closed_on_every_path(self, make_orchestrator, fakes):
        """Test that each route's page is closed, including failed ones."""
        site = fakes.Site(failing={f"{BASE_URL}/broken"})
        await make_orchestrator(site).explore(["/broken", "/", "/other"])

        assert len(site.pages) == 3
        assert all(page.closed for page in site.pages)

    @pytest.mark.asyncio
    async def test_element_budget(self, make_orchestrator, fakes):
        """Test that no more than max_elements elements are explored."""
        elements = [fakes.Element(f"item-{i}") for i in range(10)]
        site = fakes.Site(elements={f"{BASE_URL}/": elements})
        result = await make_orchestrator(site).explore(["/"])

        assert result.routes[0].elements == 3
        assert sum(e.hovered for e in elements) == 3
        assert sum(e.clicked for e in elements) == 3
        assert all(e.hovered == 0 and e.clicked == 0 for e in elements[3:])
        assert len(result.snapshots) == 1 + 2 * 3

    @pytest.mark.asyncio
    async def test_selector_set(self, make_orchestrator, fakes):
        """Test that the configured selectors are queried as one list."""
        site = fakes.Site()
        await make_orchestrator(site).explore(["/"])
        assert site.selectors == [
            "button, a[href], [role='button'], [aria-haspopup], .modal-trigger"
        ]

    @pytest.mark.asyncio
    async def test_interaction_failures_are_skipped(self, make_orchestrator, fakes):
        """Test that hover and click failures skip only their stage."""
        site = fakes.Site(
            elements={
                f"{BASE_URL}/": [
                    fakes.Element("hidden", fail_hover=True),
                    fakes.Element("detached", fail_click=True),
                ]
            }
        )
        result = await make_orchestrator(site).explore(["/"])

        outcome = result.routes[0]
        assert outcome.ok
        assert outcome.skipped_stages == ["hover_0", "click_1"]
        assert [s.label for s in result.snapshots] == ["initial", "click_0", "hover_1"]

    @pytest.mark.asyncio
    async def test_initial_capture_failure_abandons_route(self, make_orchestrator, fakes):
        """Test that a failed initial capture skips the interaction loop."""
        element = fakes.Element("btn")
        site = fakes.Site(elements={f"{BASE_URL}/": [element]})
        site.fail_screenshots = True
        result = await make_orchestrator(site).explore(["/"])

        assert result.snapshots == []
        assert result.routes[0].error
        assert element.hovered == 0
        assert element.clicked == 0
        assert site.pages[0].closed

    @pytest.mark.asyncio
    async def test_duplicate_labels_distinct_files(self, make_orchestrator, fakes):
        """Test that elements with the same label produce distinct filenames."""
        site = fakes.Site(
            elements={f"{BASE_URL}/": [fakes.Element("btn"), fakes.Element("btn")]}
        )
        result = await make_orchestrator(site).explore(["/"])

        names = [Path(p).name for p in result.paths]
        assert len(names) == 5
        assert len(set(names)) == 5
        assert sum(name.endswith("__btn.png") for name in names) == 4

    @pytest.mark.asyncio
    async def test_initial_snapshot_named_after_route(self, make_orchestrator, fakes):
        """Test that the initial snapshot carries the route as its name."""
        result = await make_orchestrator(fakes.Site()).explore(["/pricing"])
        assert Path(result.paths[0]).name.endswith("__initial___pricing.png")

    @pytest.mark.asyncio
    async def test_no_routes(self, make_orchestrator, fakes):
        """Test that an empty route list opens no pages."""
        site = fakes.Site()
        result = await make_orchestrator(site).explore([])
        assert result == ExplorationResult()
        assert site.pages == []

    @pytest.mark.asyncio
    async def test_page_closed_by_click_does_not_stop_run(self, make_orchestrator, fakes):
        """Test that a page dying after a click skips that stage and later routes still run."""
        site = fakes.Site(
            elements={
                f"{BASE_URL}/": [fakes.Element("logout")],
                f"{BASE_URL}/next": [fakes.Element("btn")],
            }
        )
        site.closing = {f"{BASE_URL}/"}
        result = await make_orchestrator(site).explore(["/", "/next"])

        first, second = result.routes
        assert first.ok
        assert first.skipped_stages == ["click_0"]
        assert second.ok
        assert second.snapshots == 3
        assert [s.route for s in result.snapshots] == ["/", "/", "/next", "/next", "/next"]

    @pytest.mark.asyncio
    async def test_page_open_failure_isolated(self, make_orchestrator, fakes):
        """Test that a page that cannot be opened fails only its route."""
        site = fakes.Site()
        site.failing_opens = {1}
        result = await make_orchestrator(site).explore(["/", "/about"])

        broken, ok = result.routes
        assert "Target closed" in broken.error
        assert broken.snapshots == 0
        assert ok.ok
        assert [s.route for s in result.snapshots] == ["/about"]

    @pytest.mark.asyncio
    async def test_stage_capture_failure_skips_stage(self, make_orchestrator, fakes):
        """Test that a failed hover or click capture skips only that stage."""
        site = fakes.Site(
            elements={f"{BASE_URL}/": [fakes.Element("a"), fakes.Element("b")]}
        )
        # Captures: 1 initial, 2 hover_0, 3 click_0, 4 hover_1, 5 click_1
        site.failing_shots = {2, 5}
        result = await make_orchestrator(site).explore(["/"])

        outcome = result.routes[0]
        assert outcome.ok
        assert outcome.skipped_stages == ["hover_0", "click_1"]
        assert [s.label for s in result.snapshots] == ["initial", "click_0", "hover_1"]


class TestBrowserSession:
    """Tests for BrowserSession startup."""

    @pytest.mark.asyncio
    async def test_launch_failure_is_session_error(self, monkeypatch, exploration_config):
        """Test that a browser that cannot start raises SessionError."""

        class BrokenPlaywright:
            async def start(self):
                raise RuntimeError("Executable doesn't exist")

        monkeypatch.setattr(explorer, "HAS_PLAYWRIGHT", True)
        monkeypatch.setattr(explorer, "async_playwright", BrokenPlaywright, raising=False)

        with pytest.raises(SessionError, match="Executable doesn't exist"):
            async with BrowserSession(exploration_config, Console(quiet=True)):
                pass

    @pytest.mark.asyncio
    async def test_missing_playwright_is_session_error(self, monkeypatch, exploration_config):
        """Test that a missing Playwright install raises SessionError."""
        monkeypatch.setattr(explorer, "HAS_PLAYWRIGHT", False)

        with pytest.raises(SessionError, match="Playwright not installed"):
            async with BrowserSession(exploration_config, Console(quiet=True)):
                pass

    @pytest.mark.asyncio
    async def test_page_requires_open_session(self, exploration_config):
        """Test that pages cannot be opened before the session starts."""
        session = BrowserSession(exploration_config, Console(quiet=True))
        with pytest.raises(SessionError):
            async with session.page():
                pass

    @pytest.mark.asyncio
    async def test_orchestrator_propagates_session_error(self, tmp_path, exploration_config):
        """Test that a session error is not swallowed as a route failure."""
        session = BrowserSession(exploration_config, Console(quiet=True))
        orchestrator = ExplorationOrchestrator(
            session, BASE_URL, SnapshotCapture(tmp_path), exploration_config, Console(quiet=True)
        )
        with pytest.raises(SessionError):
            await orchestrator.explore(["/"])
