"""Browser lifecycle: launch or attach, hand out a session, always close."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..config.settings import BROWSER_ENGINES, Settings
from ..core.errors import SessionInvalidError
from .playwright_session import PlaywrightSession

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Playwright

logger = logging.getLogger(__name__)


def _start_browser(p: Playwright, cfg: Settings) -> tuple[Browser, BrowserContext]:
    if cfg.cdp_endpoint:
        logger.info("Connecting to browser at %s", cfg.cdp_endpoint)
        browser = p.chromium.connect_over_cdp(cfg.cdp_endpoint)
        context = browser.contexts[0] if browser.contexts else browser.new_context()
        return browser, context

    if cfg.browser not in BROWSER_ENGINES:
        raise ValueError(f"Unknown browser {cfg.browser!r}; expected one of {BROWSER_ENGINES}")
    logger.info(
        "Launching %s (headless=%s, executable=%s)",
        cfg.browser,
        cfg.headless,
        cfg.browser_path or "bundled",
    )
    browser = getattr(p, cfg.browser).launch(
        headless=cfg.headless, executable_path=cfg.browser_path
    )
    return browser, browser.new_context()


@contextmanager
def open_session(cfg: Settings) -> Iterator[PlaywrightSession]:
    """Start (or attach to) a browser and yield a session on its first window.

    The browser is closed on exit, whether the body succeeded or raised.
    """
    with sync_playwright() as p:
        try:
            browser, context = _start_browser(p, cfg)
        except PlaywrightError as e:
            raise SessionInvalidError(f"Could not start the browser: {e.message}") from e
        try:
            try:
                page = context.pages[0] if context.pages else context.new_page()
            except PlaywrightError as e:
                raise SessionInvalidError(f"Could not open a window: {e.message}") from e
            yield PlaywrightSession(context, page)
        finally:
            try:
                browser.close()
            except PlaywrightError as e:
                logger.warning("Error closing browser: %s", e)
            logger.info("Browser stopped")
