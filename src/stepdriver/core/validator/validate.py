"""Pre-flight checks run on a parsed script before a browser is started."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..ir.model import Descend, Loop, Step, kind_name, requires_selector


@dataclass
class SelectorIssue:
    path: str  # e.g. "$[2].Loop[0].Recursive"
    kind: str


def find_missing_selectors(steps: Iterable[Step], path: str = "$") -> list[SelectorIssue]:
    """Return every step in the tree that needs a selector but has none."""
    issues: list[SelectorIssue] = []
    for i, step in enumerate(steps):
        current: Step | None = step
        here = f"{path}[{i}]"
        while current is not None:
            if requires_selector(current.kind) and current.selector is None:
                issues.append(SelectorIssue(path=here, kind=kind_name(current.kind)))
            if isinstance(current.kind, Loop):
                issues.extend(find_missing_selectors(current.kind.steps, f"{here}.Loop"))
            if isinstance(current.kind, Descend):
                current = current.kind.child
                here = f"{here}.Recursive"
            else:
                current = None
    return issues
