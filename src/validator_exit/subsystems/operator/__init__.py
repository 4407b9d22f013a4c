"""
Operator interaction: terminal console, rendering, and the interactive session.
"""

from .console import Console
from .session import ExitSession, TypedPhraseConfirmation

__all__ = [
    "Console",
    "ExitSession",
    "TypedPhraseConfirmation",
]
