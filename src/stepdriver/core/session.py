"""Browser session facade consumed by the interpreter.

The interpreter only talks to the browser through this protocol. Element and
window handles are opaque to it. Implementations raise ``StepError``
subclasses (see ``core.errors``) for every failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol


class BrowserSession(Protocol):
    def navigate(self, url: str) -> None: ...

    def current_url(self) -> str: ...

    def current_page_source(self) -> str: ...

    def find(self, selector: str, within: Any | None = None) -> Any:
        """Return the first element matching ``selector``.

        Searches inside ``within`` when given, from the active frame's
        document root otherwise. Raises ``ElementNotFoundError``.
        """
        ...

    def wait_for(self, selector: str, timeout: float) -> Any:
        """Block until ``selector`` matches or ``timeout`` seconds pass (``StepTimeoutError``)."""
        ...

    def click(self, element: Any) -> None: ...

    def send_keys(self, element: Any, text: str) -> None: ...

    def clear(self, element: Any) -> None: ...

    def list_windows(self) -> Sequence[Any]: ...

    def switch_to_window(self, handle: Any) -> None: ...

    def enter_frame(self, element: Any) -> None: ...

    def enter_parent_frame(self) -> None: ...

    def resize_window(self, width: int, height: int) -> None: ...

    def execute_script(self, script: str, arg: Any = None) -> Any: ...
