"""Interpreter for declarative browser automation scripts."""

__version__ = "0.1.0"
