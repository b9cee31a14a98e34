"""YAML codec for step scripts.

A script is a YAML list of records::

    - selector: ~
      command_type:
        GoTo: "https://example.com"
    - selector: div.results
      command_type:
        Recursive:
          selector: a
          command_type: Click

``command_type`` is a bare tag for variants without payload and a single-key
mapping otherwise. Records are validated with pydantic before being turned
into frozen ``Step`` objects.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    StrictStr,
    TypeAdapter,
    ValidationError,
)

from ..errors import ScriptFormatError
from .model import (
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
    StepKind,
    SwitchToWindowIndex,
    TypeText,
    WaitForSelector,
)


class StepRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    selector: StrictStr | None = None
    command_type: StrictStr | dict[str, Any]


class WindowSize(BaseModel):
    model_config = ConfigDict(extra="forbid")

    width: NonNegativeInt
    height: NonNegativeInt


_SECONDS = TypeAdapter(NonNegativeFloat)
_TIMEOUT = TypeAdapter(PositiveFloat)
_INDEX = TypeAdapter(NonNegativeInt)
_TEXT = TypeAdapter(StrictStr)

_UNIT_TAGS: dict[str, Callable[[], StepKind]] = {
    "ScrollIntoView": ScrollSelectorIntoView,
    "LeaveFrame": LeaveFrame,
    "PrintSource": DumpPageSourceToLog,
    "Wait": WaitForSelector,
    "Clear": ClearField,
    "EnterFrame": EnterFrame,
    "ClickUntilNavigation": ClickUntilUrlChanges,
    "ClickUntilDomChanged": ClickUntilPageSourceChanges,
    "Click": Click,
    "Recursive": Descend,
    "Check": AssertPresent,
}

_TAG_BY_KIND: dict[type, str] = {
    NavigateTo: "GoTo",
    Loop: "Loop",
    ResizeWindow: "ChangeWindowSize",
    ScrollSelectorIntoView: "ScrollIntoView",
    SleepSeconds: "Sleep",
    SwitchToWindowIndex: "ChangeWindow",
    LeaveFrame: "LeaveFrame",
    DumpPageSourceToLog: "PrintSource",
    WaitForSelector: "Wait",
    ClearField: "Clear",
    EnterFrame: "EnterFrame",
    ClickUntilUrlChanges: "ClickUntilNavigation",
    ClickUntilPageSourceChanges: "ClickUntilDomChanged",
    Click: "Click",
    TypeText: "Input",
    Descend: "Recursive",
    AssertPresent: "Check",
}


def _validate(adapter: TypeAdapter, value: Any, path: str) -> Any:
    try:
        return adapter.validate_python(value)
    except ValidationError as e:
        raise ScriptFormatError(_summarize(e), path) from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


# --- Decoding ---


def _kind_with_payload(tag: str, payload: Any, selector: str | None, path: str) -> StepKind:
    """Build a payload-carrying variant from ``{tag: payload}``."""
    if tag == "GoTo":
        return NavigateTo(url=_validate(_TEXT, payload, path))
    if tag == "Loop":
        return Loop(steps=steps_from_data(payload, f"{path}.Loop"))
    if tag == "ChangeWindowSize":
        try:
            size = WindowSize.model_validate(payload)
        except ValidationError as e:
            raise ScriptFormatError(_summarize(e), path) from e
        return ResizeWindow(width=size.width, height=size.height)
    if tag == "Sleep":
        return SleepSeconds(seconds=_validate(_SECONDS, payload, path))
    if tag == "WaitForSeconds":
        # Legacy form: with a selector it is a bounded wait, without one a sleep
        seconds = _validate(_SECONDS, payload, path)
        if selector is not None:
            return WaitForSelector(timeout=seconds)
        return SleepSeconds(seconds=seconds)
    if tag == "Wait":
        return WaitForSelector(timeout=_validate(_TIMEOUT, payload, path))
    if tag == "ChangeWindow":
        return SwitchToWindowIndex(index=_validate(_INDEX, payload, path))
    if tag == "Input":
        return TypeText(text=_validate(_TEXT, payload, path))
    if tag == "Recursive":
        return Descend(child=step_from_data(payload, f"{path}.Recursive"))
    if tag in _UNIT_TAGS:
        raise ScriptFormatError(f"{tag} takes no payload", path)
    raise ScriptFormatError(f"unknown command type {tag!r}", path)


def _kind_from_command_type(
    command_type: str | dict[str, Any], selector: str | None, path: str
) -> StepKind:
    if isinstance(command_type, str):
        factory = _UNIT_TAGS.get(command_type)
        if factory is None:
            if command_type in _TAG_BY_KIND.values() or command_type == "WaitForSeconds":
                raise ScriptFormatError(f"{command_type} needs a payload", path)
            raise ScriptFormatError(f"unknown command type {command_type!r}", path)
        return factory()

    if len(command_type) != 1:
        raise ScriptFormatError(
            f"command_type mapping must have exactly one key, got {sorted(command_type)}", path
        )
    tag, payload = next(iter(command_type.items()))
    if payload is None and tag in _UNIT_TAGS:
        return _UNIT_TAGS[tag]()
    return _kind_with_payload(str(tag), payload, selector, f"{path}.command_type")


def step_from_data(data: Any, path: str = "$") -> Step:
    """Convert one decoded YAML record into a ``Step``."""
    try:
        record = StepRecord.model_validate(data)
    except ValidationError as e:
        raise ScriptFormatError(_summarize(e), path) from e
    kind = _kind_from_command_type(record.command_type, record.selector, path)
    return Step(kind=kind, selector=record.selector)


def steps_from_data(data: Any, path: str = "$") -> tuple[Step, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        raise ScriptFormatError(f"expected a list of steps, got {type(data).__name__}", path)
    return tuple(step_from_data(item, f"{path}[{i}]") for i, item in enumerate(data))


def steps_from_yaml(text: str) -> tuple[Step, ...]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ScriptFormatError(f"invalid YAML: {e}") from e
    return steps_from_data(data)


def load_steps(path: str | Path) -> tuple[Step, ...]:
    """Read and parse a step script from ``path``."""
    text = Path(path).read_text(encoding="utf-8")
    return steps_from_yaml(text)


# --- Encoding ---


def _command_type_to_data(kind: StepKind) -> str | dict[str, Any]:
    tag = _TAG_BY_KIND[type(kind)]
    if isinstance(kind, NavigateTo):
        return {tag: kind.url}
    if isinstance(kind, Loop):
        return {tag: steps_to_data(kind.steps)}
    if isinstance(kind, ResizeWindow):
        return {tag: {"width": kind.width, "height": kind.height}}
    if isinstance(kind, SleepSeconds):
        return {tag: kind.seconds}
    if isinstance(kind, SwitchToWindowIndex):
        return {tag: kind.index}
    if isinstance(kind, WaitForSelector):
        return tag if kind.timeout is None else {tag: kind.timeout}
    if isinstance(kind, TypeText):
        return {tag: kind.text}
    if isinstance(kind, Descend):
        return tag if kind.child is None else {tag: step_to_data(kind.child)}
    return tag


def step_to_data(step: Step) -> dict[str, Any]:
    return {"selector": step.selector, "command_type": _command_type_to_data(step.kind)}


def steps_to_data(steps: tuple[Step, ...] | list[Step]) -> list[dict[str, Any]]:
    return [step_to_data(step) for step in steps]


def steps_to_yaml(steps: tuple[Step, ...] | list[Step]) -> str:
    return yaml.safe_dump(
        steps_to_data(steps), sort_keys=False, default_flow_style=False, allow_unicode=True
    )


def dump_steps(steps: tuple[Step, ...] | list[Step], path: str | Path) -> None:
    Path(path).write_text(steps_to_yaml(steps), encoding="utf-8")
