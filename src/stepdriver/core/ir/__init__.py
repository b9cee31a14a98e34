"""Step vocabulary and its YAML codec."""

from __future__ import annotations

from .codec import dump_steps, load_steps, steps_from_yaml, steps_to_yaml
from .model import Step, StepKind, needs_element, requires_selector

__all__ = [
    "Step",
    "StepKind",
    "dump_steps",
    "load_steps",
    "needs_element",
    "requires_selector",
    "steps_from_yaml",
    "steps_to_yaml",
]
