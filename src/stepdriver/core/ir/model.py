"""Step IR definitions.

A script is an ordered list of ``Step`` records. Each step pairs an optional
CSS selector with one ``StepKind`` variant. Steps are frozen once parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# --- Context-free kinds ---


@dataclass(frozen=True)
class NavigateTo:
    url: str


@dataclass(frozen=True)
class Loop:
    """Re-run ``steps`` from the top until they all succeed."""

    steps: tuple[Step, ...]


@dataclass(frozen=True)
class ResizeWindow:
    width: int
    height: int


@dataclass(frozen=True)
class ScrollSelectorIntoView:
    pass


@dataclass(frozen=True)
class SleepSeconds:
    seconds: float


@dataclass(frozen=True)
class SwitchToWindowIndex:
    index: int


@dataclass(frozen=True)
class LeaveFrame:
    pass


@dataclass(frozen=True)
class DumpPageSourceToLog:
    pass


@dataclass(frozen=True)
class WaitForSelector:
    timeout: float | None = None  # None -> configured default


# --- Element-needing kinds ---


@dataclass(frozen=True)
class ClearField:
    pass


@dataclass(frozen=True)
class EnterFrame:
    pass


@dataclass(frozen=True)
class ClickUntilUrlChanges:
    pass


@dataclass(frozen=True)
class ClickUntilPageSourceChanges:
    pass


@dataclass(frozen=True)
class Click:
    pass


@dataclass(frozen=True)
class TypeText:
    text: str


@dataclass(frozen=True)
class Descend:
    """Make the found element the search scope of what follows.

    With a ``child`` the child runs right after this step inside the element;
    without one the element is handed to the next step of the sequence.
    """

    child: Step | None = None


@dataclass(frozen=True)
class AssertPresent:
    pass


StepKind = Union[
    NavigateTo,
    Loop,
    ResizeWindow,
    ScrollSelectorIntoView,
    SleepSeconds,
    SwitchToWindowIndex,
    LeaveFrame,
    DumpPageSourceToLog,
    WaitForSelector,
    ClearField,
    EnterFrame,
    ClickUntilUrlChanges,
    ClickUntilPageSourceChanges,
    Click,
    TypeText,
    Descend,
    AssertPresent,
]

ELEMENT_KINDS: tuple[type, ...] = (
    ClearField,
    EnterFrame,
    ClickUntilUrlChanges,
    ClickUntilPageSourceChanges,
    Click,
    TypeText,
    Descend,
    AssertPresent,
)

# Context-free kinds that still resolve a selector (via script or explicit wait)
SELECTOR_KINDS: tuple[type, ...] = (ScrollSelectorIntoView, WaitForSelector)


@dataclass(frozen=True)
class Step:
    kind: StepKind
    selector: str | None = None


def needs_element(kind: StepKind) -> bool:
    """True when executing ``kind`` goes through the element lookup pipeline."""
    return isinstance(kind, ELEMENT_KINDS)


def requires_selector(kind: StepKind) -> bool:
    return isinstance(kind, ELEMENT_KINDS + SELECTOR_KINDS)


def kind_name(kind: StepKind) -> str:
    return type(kind).__name__
