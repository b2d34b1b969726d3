"""Domain models for termbridge.

This package contains the core data structures and enumerations used
throughout the system. All models use Pydantic v2 for validation and
serialization.
"""

from termbridge.domain.models import (
    ChannelState,
    MessageKind,
    OutputSpan,
    SessionInfo,
    TerminalMessage,
    new_session_id,
)

__all__ = [
    "ChannelState",
    "MessageKind",
    "OutputSpan",
    "SessionInfo",
    "TerminalMessage",
    "new_session_id",
]
