"""Resolution of the operator's validator selection."""

from .engine import Selection, SelectionMode, resolve_selection

__all__ = [
    "Selection",
    "SelectionMode",
    "resolve_selection",
]
