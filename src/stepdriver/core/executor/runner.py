"""Sequence runner: executes steps in order and threads the element context."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from ..ir.model import Descend, Step, kind_name
from .step_executor import execute_step

if TYPE_CHECKING:
    from ..session import BrowserSession

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _descend_chain(step: Step) -> Iterator[Step]:
    """Yield ``step`` followed by its ``Descend`` children, outermost first."""
    current: Step | None = step
    while current is not None:
        yield current
        current = current.kind.child if isinstance(current.kind, Descend) else None


def run_sequence(
    steps: Iterable[Step],
    session: BrowserSession,
    *,
    wait_timeout: float | None = None,
) -> None:
    """Run ``steps`` in order, threading the element context between them.

    The context starts empty. The first error stops the sequence and is
    re-raised unchanged.
    """
    context: Any | None = None
    for step in steps:
        for link in _descend_chain(step):
            with tracer.start_as_current_span(
                f"step.{kind_name(link.kind)}",
                attributes={"stepdriver.selector": link.selector or ""},
            ):
                context = execute_step(context, link, session, wait_timeout=wait_timeout)


def run_script(
    steps: Iterable[Step],
    session: BrowserSession,
    *,
    wait_timeout: float | None = None,
) -> None:
    """Main entry point: run a whole script against ``session``."""
    steps = tuple(steps)
    logger.info("Running script with %d top-level step(s)", len(steps))
    with tracer.start_as_current_span("stepdriver.run", attributes={"stepdriver.steps": len(steps)}):
        run_sequence(steps, session, wait_timeout=wait_timeout)
    logger.info("Script finished")
