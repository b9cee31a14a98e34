"""Errors raised while interpreting a step script.

Every failure coming out of the browser session is a ``StepError`` carrying an
``ErrorKind``. The loop controller decides between retry and abort by looking
at the kind only, through ``is_fatal``.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    STALE_ELEMENT = "stale_element"
    SESSION_INVALID = "session_invalid"
    WINDOW_CLOSED = "window_closed"
    CONFIGURATION = "configuration"
    OTHER = "other"


_FATAL_KINDS = frozenset(
    {ErrorKind.SESSION_INVALID, ErrorKind.WINDOW_CLOSED, ErrorKind.CONFIGURATION}
)


def is_fatal(kind: ErrorKind) -> bool:
    """Return True when an error of ``kind`` must abort the run even inside a loop."""
    return kind in _FATAL_KINDS


class StepError(Exception):
    """Base error for step execution failures."""

    kind: ErrorKind = ErrorKind.OTHER

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ElementNotFoundError(StepError):
    """No element matched the selector."""

    kind = ErrorKind.NOT_FOUND


class StepTimeoutError(StepError):
    """An explicit wait ran out of time."""

    kind = ErrorKind.TIMEOUT


class StaleElementError(StepError):
    """The element handle no longer points into the document."""

    kind = ErrorKind.STALE_ELEMENT


class SessionInvalidError(StepError):
    """The browser or its connection is gone."""

    kind = ErrorKind.SESSION_INVALID


class WindowClosedError(StepError):
    """The active window was closed."""

    kind = ErrorKind.WINDOW_CLOSED


class MissingSelectorError(StepError):
    """A step that needs a selector has none."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, kind_name: str) -> None:
        super().__init__(f"A {kind_name} step needs a selector string")
        self.kind_name = kind_name


class WindowIndexError(StepError):
    """``SwitchToWindowIndex`` pointed past the open windows."""

    def __init__(self, index: int, available: int) -> None:
        super().__init__(f"Couldn't find the window {index} (only {available} open)")
        self.index = index
        self.available = available


class BrowserProtocolError(StepError):
    """Any other failure reported by the automation protocol."""


class ScriptFormatError(ValueError):
    """The step script could not be parsed."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
