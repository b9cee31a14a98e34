"""Retry loop for ``Loop`` steps.

The body runs from its first step with a fresh element context until one
pass completes. Failures whose kind is fatal (closed window, dead session,
script defects) abort the run; anything else is logged and the whole body is
run again right away. There is no retry limit and no delay, and side effects
of a partially completed pass are not undone.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..errors import StepError, is_fatal
from ..ir.model import Step
from .runner import run_sequence

if TYPE_CHECKING:
    from ..session import BrowserSession

logger = logging.getLogger(__name__)


def run_loop(
    steps: Sequence[Step],
    session: BrowserSession,
    *,
    wait_timeout: float | None = None,
) -> int:
    """Run ``steps`` until a pass succeeds; return the number of passes."""
    attempt = 1
    while True:
        try:
            run_sequence(steps, session, wait_timeout=wait_timeout)
        except StepError as e:
            if is_fatal(e.kind):
                logger.error("A loop has failed on pass %d (%s): %s", attempt, e.kind.value, e)
                raise
            logger.warning(
                "Failed to finish a loop on pass %d (%s): %s; will retry...",
                attempt,
                e.kind.value,
                e,
            )
            attempt += 1
            continue
        if attempt > 1:
            logger.info("Loop finished after %d passes", attempt)
        return attempt
