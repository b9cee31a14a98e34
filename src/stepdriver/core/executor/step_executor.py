"""Single-step execution.

``execute_step`` takes the element context left by the previous step and
returns the context for the next one. Context-free kinds act on the session
and pass the context through; element kinds first resolve their selector
(inside the context element when there is one) and then act on the result.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable

from ..errors import MissingSelectorError, WindowIndexError
from ..ir.model import (
    AssertPresent,
    ClearField,
    Click,
    ClickUntilPageSourceChanges,
    ClickUntilUrlChanges,
    Descend,
    DumpPageSourceToLog,
    EnterFrame,
    LeaveFrame,
    Loop,
    NavigateTo,
    ResizeWindow,
    ScrollSelectorIntoView,
    SleepSeconds,
    Step,
    SwitchToWindowIndex,
    TypeText,
    WaitForSelector,
    kind_name,
    needs_element,
)

if TYPE_CHECKING:
    from ..session import BrowserSession

logger = logging.getLogger(__name__)

SCROLL_INTO_VIEW_SCRIPT = "(selector) => document.querySelector(selector).scrollIntoView()"


def _selector(step: Step) -> str:
    if step.selector is None:
        raise MissingSelectorError(kind_name(step.kind))
    return step.selector


# --- Context-free steps ---


def _execute_context_free(step: Step, session: BrowserSession, wait_timeout: float) -> None:
    kind = step.kind
    if isinstance(kind, NavigateTo):
        session.navigate(kind.url)
    elif isinstance(kind, Loop):
        from .loop import run_loop

        run_loop(kind.steps, session, wait_timeout=wait_timeout)
    elif isinstance(kind, ResizeWindow):
        session.resize_window(kind.width, kind.height)
    elif isinstance(kind, ScrollSelectorIntoView):
        session.execute_script(SCROLL_INTO_VIEW_SCRIPT, _selector(step))
    elif isinstance(kind, SleepSeconds):
        time.sleep(kind.seconds)
    elif isinstance(kind, SwitchToWindowIndex):
        windows = session.list_windows()
        if kind.index >= len(windows):
            raise WindowIndexError(kind.index, len(windows))
        session.switch_to_window(windows[kind.index])
    elif isinstance(kind, LeaveFrame):
        session.enter_parent_frame()
    elif isinstance(kind, DumpPageSourceToLog):
        logger.info("Page source:\n%s", session.current_page_source())
    elif isinstance(kind, WaitForSelector):
        timeout = kind.timeout if kind.timeout is not None else wait_timeout
        session.wait_for(_selector(step), timeout)
    else:
        raise TypeError(f"Unsupported step kind: {kind_name(kind)}")


# --- Element steps ---


def _click_until_changed(
    element: Any, selector: str, session: BrowserSession, snapshot: Callable[[], str]
) -> None:
    """Click until ``snapshot()`` differs from its value before the first click.

    The element is looked up again from the document root after every
    unsuccessful click since the old handle may have gone stale.
    """
    baseline = snapshot()
    attempt = 1
    while True:
        session.click(element)
        if snapshot() != baseline:
            logger.debug("Change observed after %d click(s) on %r", attempt, selector)
            return
        attempt += 1
        element = session.find(selector)


def _execute_with_element(
    context: Any | None, step: Step, session: BrowserSession
) -> Any | None:
    kind = step.kind
    selector = _selector(step)
    element = session.find(selector, within=context)

    if isinstance(kind, ClearField):
        session.clear(element)
    elif isinstance(kind, EnterFrame):
        session.enter_frame(element)
    elif isinstance(kind, ClickUntilUrlChanges):
        _click_until_changed(element, selector, session, session.current_url)
    elif isinstance(kind, ClickUntilPageSourceChanges):
        _click_until_changed(element, selector, session, session.current_page_source)
    elif isinstance(kind, Click):
        session.click(element)
    elif isinstance(kind, TypeText):
        session.send_keys(element, kind.text)
    elif isinstance(kind, Descend):
        return element
    elif isinstance(kind, AssertPresent):
        pass
    else:
        raise TypeError(f"Unsupported step kind: {kind_name(kind)}")
    return None


def execute_step(
    context: Any | None,
    step: Step,
    session: BrowserSession,
    *,
    wait_timeout: float | None = None,
) -> Any | None:
    """Execute ``step`` and return the element context for the next step.

    Args:
        context: Element found by the previous step (``Descend``), or None
        step: Step to execute
        session: Browser session all effects go through
        wait_timeout: Default bound in seconds for ``WaitForSelector`` steps
            without their own timeout; falls back to the configured setting

    Returns:
        The element for ``Descend``, None after other element steps, and the
        untouched ``context`` after context-free steps
    """
    if wait_timeout is None:
        from ...config.settings import settings

        wait_timeout = settings.wait_timeout

    logger.debug("Executing %s (selector=%r)", kind_name(step.kind), step.selector)
    if needs_element(step.kind):
        return _execute_with_element(context, step, session)
    _execute_context_free(step, session, wait_timeout)
    return context
