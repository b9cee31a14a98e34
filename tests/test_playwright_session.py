"""Playwright session adapter tests using mocked Playwright objects."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PWTimeoutError

from stepdriver.adapters.playwright import open_session
from stepdriver.adapters.playwright_session import (
    PlaywrightSession,
    classify_playwright_error,
    translate_playwright_error,
)
from stepdriver.config.settings import Settings
from stepdriver.core.errors import (
    BrowserProtocolError,
    ElementNotFoundError,
    ErrorKind,
    SessionInvalidError,
    StaleElementError,
    StepTimeoutError,
    WindowClosedError,
)


def _page() -> MagicMock:
    page = MagicMock(name="page")
    page.is_closed.return_value = False
    page.main_frame.parent_frame = None
    return page


@pytest.fixture
def page():
    return _page()


@pytest.fixture
def pw_session(page):
    context = MagicMock(name="context")
    context.pages = [page]
    return PlaywrightSession(context, page)


class TestClassification:
    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (PWTimeoutError("Timeout 30000ms exceeded."), ErrorKind.TIMEOUT),
            (
                PlaywrightError("Target page, context or browser has been closed"),
                ErrorKind.WINDOW_CLOSED,
            ),
            (PlaywrightError("Target closed"), ErrorKind.WINDOW_CLOSED),
            (PlaywrightError("Browser has been closed"), ErrorKind.SESSION_INVALID),
            (PlaywrightError("Connection closed"), ErrorKind.SESSION_INVALID),
            (PlaywrightError("Element is not attached to the DOM"), ErrorKind.STALE_ELEMENT),
            (PlaywrightError("Frame was detached"), ErrorKind.STALE_ELEMENT),
            (PlaywrightError("SyntaxError: Unexpected token"), ErrorKind.OTHER),
        ],
    )
    def test_classify(self, error, kind):
        assert classify_playwright_error(error) is kind

    def test_translate_picks_error_type_and_keeps_first_line(self):
        error = PlaywrightError("Element is not attached to the DOM\nCall log:\n  - waiting")
        translated = translate_playwright_error(error, "Click")
        assert isinstance(translated, StaleElementError)
        assert str(translated) == "Click failed: Element is not attached to the DOM"

    def test_translate_other(self):
        translated = translate_playwright_error(PlaywrightError("weird"), "Script execution")
        assert isinstance(translated, BrowserProtocolError)
        assert translated.kind is ErrorKind.OTHER


class TestLookup:
    def test_find_from_active_frame(self, pw_session, page):
        element = MagicMock(name="element")
        page.main_frame.query_selector.return_value = element
        assert pw_session.find("a.link") is element
        page.main_frame.query_selector.assert_called_once_with("a.link")

    def test_find_within_element(self, pw_session, page):
        scope = MagicMock(name="scope")
        child = MagicMock(name="child")
        scope.query_selector.return_value = child
        assert pw_session.find("a", within=scope) is child
        page.main_frame.query_selector.assert_not_called()

    def test_find_nothing_raises_not_found(self, pw_session, page):
        page.main_frame.query_selector.return_value = None
        with pytest.raises(ElementNotFoundError, match="a.missing"):
            pw_session.find("a.missing")

    def test_find_on_detached_scope_is_stale(self, pw_session):
        scope = MagicMock(name="scope")
        cause = PlaywrightError("Element is not attached to the DOM")
        scope.query_selector.side_effect = cause
        with pytest.raises(StaleElementError) as exc:
            pw_session.find("a", within=scope)
        assert exc.value.__cause__ is cause

    def test_wait_for_converts_seconds_to_ms(self, pw_session, page):
        pw_session.wait_for("p.ready", 2.5)
        page.main_frame.wait_for_selector.assert_called_once_with(
            "p.ready", state="attached", timeout=2500
        )

    def test_wait_for_timeout(self, pw_session, page):
        page.main_frame.wait_for_selector.side_effect = PWTimeoutError("Timeout 1000ms exceeded.")
        with pytest.raises(StepTimeoutError):
            pw_session.wait_for("p.ready", 1)

    @pytest.mark.parametrize("seconds", [0, -1])
    def test_wait_without_time_left_times_out_at_once(self, pw_session, page, seconds):
        with pytest.raises(StepTimeoutError, match="p.ready"):
            pw_session.wait_for("p.ready", seconds)
        page.main_frame.wait_for_selector.assert_not_called()

    def test_closed_window_is_reported(self, pw_session, page):
        page.is_closed.return_value = True
        with pytest.raises(WindowClosedError):
            pw_session.find("a")
        with pytest.raises(WindowClosedError):
            pw_session.current_url()


class TestInteraction:
    def test_click(self, pw_session):
        element = MagicMock()
        pw_session.click(element)
        element.click.assert_called_once_with()

    def test_click_on_closed_target(self, pw_session):
        element = MagicMock()
        element.click.side_effect = PlaywrightError("Target closed")
        with pytest.raises(WindowClosedError):
            pw_session.click(element)

    def test_send_keys_and_clear(self, pw_session):
        element = MagicMock()
        pw_session.send_keys(element, "hello")
        pw_session.clear(element)
        element.type.assert_called_once_with("hello")
        element.fill.assert_called_once_with("")

    def test_snapshots(self, pw_session, page):
        page.url = "https://example.com/"
        page.main_frame.content.return_value = "<html></html>"
        assert pw_session.current_url() == "https://example.com/"
        assert pw_session.current_page_source() == "<html></html>"

    def test_resize_and_script(self, pw_session, page):
        pw_session.resize_window(800, 600)
        page.set_viewport_size.assert_called_once_with({"width": 800, "height": 600})
        pw_session.execute_script("(s) => s", "x")
        page.main_frame.evaluate.assert_called_once_with("(s) => s", "x")


class TestWindowsAndFrames:
    def test_enter_and_leave_frame(self, pw_session, page):
        iframe = MagicMock(name="iframe")
        inner = MagicMock(name="inner_frame")
        inner.parent_frame = page.main_frame
        iframe.content_frame.return_value = inner

        pw_session.enter_frame(iframe)
        assert pw_session.frame is inner
        pw_session.enter_parent_frame()
        assert pw_session.frame is page.main_frame
        # leaving the top-level frame does nothing
        pw_session.enter_parent_frame()
        assert pw_session.frame is page.main_frame

    def test_enter_frame_on_non_frame_element(self, pw_session):
        div = MagicMock(name="div")
        div.content_frame.return_value = None
        with pytest.raises(BrowserProtocolError, match="not a frame"):
            pw_session.enter_frame(div)

    def test_navigate_returns_to_top_level_frame(self, pw_session, page):
        iframe = MagicMock()
        pw_session.enter_frame(iframe)
        pw_session.navigate("https://example.com")
        page.goto.assert_called_once_with("https://example.com")
        assert pw_session.frame is page.main_frame

    def test_switch_window(self, pw_session, page):
        popup = _page()
        pw_session._context.pages = [page, popup]
        assert pw_session.list_windows() == [page, popup]
        pw_session.switch_to_window(popup)
        popup.bring_to_front.assert_called_once_with()
        assert pw_session.page is popup
        assert pw_session.frame is popup.main_frame

    def test_switch_to_closed_window(self, pw_session):
        gone = _page()
        gone.is_closed.return_value = True
        with pytest.raises(WindowClosedError):
            pw_session.switch_to_window(gone)


class TestOpenSession:
    def _playwright(self, sync_playwright: MagicMock) -> MagicMock:
        p = MagicMock(name="playwright")
        sync_playwright.return_value.__enter__.return_value = p
        sync_playwright.return_value.__exit__.return_value = False
        return p

    def test_launches_and_always_closes(self):
        cfg = Settings(browser="firefox", browser_path="/opt/ff/firefox", headless=False)
        with patch("stepdriver.adapters.playwright.sync_playwright") as sp:
            p = self._playwright(sp)
            browser = p.firefox.launch.return_value
            context = browser.new_context.return_value
            context.pages = []

            with pytest.raises(RuntimeError):
                with open_session(cfg) as session:
                    assert isinstance(session, PlaywrightSession)
                    assert session.page is context.new_page.return_value
                    raise RuntimeError("boom")

        p.firefox.launch.assert_called_once_with(
            headless=False, executable_path="/opt/ff/firefox"
        )
        browser.close.assert_called_once_with()

    def test_connects_over_cdp(self):
        cfg = Settings(cdp_endpoint="http://localhost:9222")
        with patch("stepdriver.adapters.playwright.sync_playwright") as sp:
            p = self._playwright(sp)
            browser = p.chromium.connect_over_cdp.return_value
            existing = _page()
            browser.contexts = [MagicMock(pages=[existing])]

            with open_session(cfg) as session:
                assert session.page is existing

        p.chromium.connect_over_cdp.assert_called_once_with("http://localhost:9222")
        p.chromium.launch.assert_not_called()
        browser.close.assert_called_once_with()

    def test_launch_failure_is_session_error(self):
        with patch("stepdriver.adapters.playwright.sync_playwright") as sp:
            p = self._playwright(sp)
            p.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
            with pytest.raises(SessionInvalidError, match="Executable doesn't exist"):
                with open_session(Settings()):
                    pass

    def test_unknown_engine(self):
        with patch("stepdriver.adapters.playwright.sync_playwright") as sp:
            self._playwright(sp)
            with pytest.raises(ValueError, match="Unknown browser"):
                with open_session(Settings(browser="netscape")):
                    pass

    def test_window_open_failure_is_session_error_and_browser_closed(self):
        with patch("stepdriver.adapters.playwright.sync_playwright") as sp:
            p = self._playwright(sp)
            browser = p.chromium.launch.return_value
            context = browser.new_context.return_value
            context.pages = []
            context.new_page.side_effect = PlaywrightError(
                "Target page, context or browser has been closed"
            )
            with pytest.raises(SessionInvalidError, match="Could not open a window"):
                with open_session(Settings()):
                    pass
        browser.close.assert_called_once_with()
