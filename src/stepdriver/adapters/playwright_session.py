"""Playwright implementation of the browser session facade.

Windows are the pages of one ``BrowserContext``. The session tracks the
active page and the active frame inside it; element lookups, scripts and
page source all go through the active frame. Every Playwright error is turned
into a ``StepError`` so the interpreter can classify it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PWTimeoutError

from ..core.errors import (
    BrowserProtocolError,
    ElementNotFoundError,
    ErrorKind,
    SessionInvalidError,
    StaleElementError,
    StepError,
    StepTimeoutError,
    WindowClosedError,
)

if TYPE_CHECKING:
    from playwright.sync_api import BrowserContext, ElementHandle, Frame, Page

logger = logging.getLogger(__name__)

# Substrings of Playwright error messages, checked in order
_MESSAGE_KINDS: tuple[tuple[str, ErrorKind], ...] = (
    ("target page, context or browser has been closed", ErrorKind.WINDOW_CLOSED),
    ("page has been closed", ErrorKind.WINDOW_CLOSED),
    ("page closed", ErrorKind.WINDOW_CLOSED),
    ("target closed", ErrorKind.WINDOW_CLOSED),
    ("browser has been closed", ErrorKind.SESSION_INVALID),
    ("browser has disconnected", ErrorKind.SESSION_INVALID),
    ("connection closed", ErrorKind.SESSION_INVALID),
    ("not attached to the dom", ErrorKind.STALE_ELEMENT),
    ("element is not attached", ErrorKind.STALE_ELEMENT),
    ("frame was detached", ErrorKind.STALE_ELEMENT),
    ("execution context was destroyed", ErrorKind.STALE_ELEMENT),
)

_ERROR_TYPES: dict[ErrorKind, type[StepError]] = {
    ErrorKind.NOT_FOUND: ElementNotFoundError,
    ErrorKind.TIMEOUT: StepTimeoutError,
    ErrorKind.STALE_ELEMENT: StaleElementError,
    ErrorKind.SESSION_INVALID: SessionInvalidError,
    ErrorKind.WINDOW_CLOSED: WindowClosedError,
}


def classify_playwright_error(error: PlaywrightError) -> ErrorKind:
    """Map a Playwright error onto the interpreter's error kinds."""
    if isinstance(error, PWTimeoutError):
        return ErrorKind.TIMEOUT
    message = (getattr(error, "message", None) or str(error)).lower()
    for needle, kind in _MESSAGE_KINDS:
        if needle in message:
            return kind
    return ErrorKind.OTHER


def translate_playwright_error(error: PlaywrightError, action: str) -> StepError:
    kind = classify_playwright_error(error)
    error_type = _ERROR_TYPES.get(kind, BrowserProtocolError)
    first_line = str(error).strip().splitlines()[0] if str(error).strip() else type(error).__name__
    return error_type(f"{action} failed: {first_line}")


@contextmanager
def _protocol_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightError as e:
        raise translate_playwright_error(e, action) from e


class PlaywrightSession:
    """Browser session backed by a Playwright ``BrowserContext``."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context = context
        self._page = page
        self._frame: Frame = page.main_frame

    @property
    def page(self) -> Page:
        """Active window."""
        return self._page

    @property
    def frame(self) -> Frame:
        """Active frame of the active window."""
        return self._frame

    def _require_open_page(self) -> Page:
        if self._page.is_closed():
            raise WindowClosedError("The active window has been closed")
        return self._page

    # === Navigation and snapshots ===

    def navigate(self, url: str) -> None:
        page = self._require_open_page()
        with _protocol_errors(f"Navigation to {url}"):
            page.goto(url)
        self._frame = page.main_frame

    def current_url(self) -> str:
        return self._require_open_page().url

    def current_page_source(self) -> str:
        self._require_open_page()
        with _protocol_errors("Reading page source"):
            return self._frame.content()

    # === Element lookup ===

    def find(self, selector: str, within: ElementHandle | None = None) -> ElementHandle:
        self._require_open_page()
        root: Any = within if within is not None else self._frame
        with _protocol_errors(f"Lookup of {selector!r}"):
            element = root.query_selector(selector)
        if element is None:
            scope = " inside the current element" if within is not None else ""
            raise ElementNotFoundError(f"No element matches {selector!r}{scope}")
        return element

    def wait_for(self, selector: str, timeout: float) -> ElementHandle:
        self._require_open_page()
        # Playwright treats timeout=0 as "wait forever"
        if timeout <= 0:
            raise StepTimeoutError(f"Waiting for {selector!r} failed: no time left ({timeout:g}s)")
        with _protocol_errors(f"Waiting {timeout:g}s for {selector!r}"):
            element = self._frame.wait_for_selector(
                selector, state="attached", timeout=timeout * 1000
            )
        if element is None:
            raise ElementNotFoundError(f"No element matches {selector!r}")
        return element

    # === Element interaction ===

    def click(self, element: ElementHandle) -> None:
        with _protocol_errors("Click"):
            element.click()

    def send_keys(self, element: ElementHandle, text: str) -> None:
        with _protocol_errors("Typing"):
            element.type(text)

    def clear(self, element: ElementHandle) -> None:
        with _protocol_errors("Clearing field"):
            element.fill("")

    # === Windows and frames ===

    def list_windows(self) -> list[Page]:
        with _protocol_errors("Listing windows"):
            return list(self._context.pages)

    def switch_to_window(self, handle: Page) -> None:
        if handle.is_closed():
            raise WindowClosedError("The requested window has been closed")
        with _protocol_errors("Switching window"):
            handle.bring_to_front()
        self._page = handle
        self._frame = handle.main_frame
        logger.debug("Switched to window %s", handle.url)

    def enter_frame(self, element: ElementHandle) -> None:
        with _protocol_errors("Entering frame"):
            frame = element.content_frame()
        if frame is None:
            raise BrowserProtocolError("Entering frame failed: element is not a frame")
        self._frame = frame

    def enter_parent_frame(self) -> None:
        # Leaving the top-level frame is a no-op, as in WebDriver
        parent = self._frame.parent_frame
        if parent is not None:
            self._frame = parent

    def resize_window(self, width: int, height: int) -> None:
        page = self._require_open_page()
        with _protocol_errors("Resizing window"):
            page.set_viewport_size({"width": width, "height": height})

    def execute_script(self, script: str, arg: Any = None) -> Any:
        self._require_open_page()
        with _protocol_errors("Script execution"):
            return self._frame.evaluate(script, arg)
