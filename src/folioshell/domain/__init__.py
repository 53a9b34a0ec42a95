"""Domain models for folioshell.

This package contains the core data structures, enumerations, and value
objects shared by the server and the terminal engine. All models use
Pydantic v2 for validation and serialization.
"""

from folioshell.domain.models import (
    ClientConfig,
    Effect,
    KeyEvent,
    LineState,
    LinkSpec,
    MotdResponse,
    SudoDecision,
    SudoRequest,
    TerminalMode,
)

__all__ = [
    "ClientConfig",
    "Effect",
    "KeyEvent",
    "LineState",
    "LinkSpec",
    "MotdResponse",
    "SudoDecision",
    "SudoRequest",
    "TerminalMode",
]
