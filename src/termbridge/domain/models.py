"""Core domain models for the termbridge system.

These models represent the data flowing through a terminal session:
wire messages exchanged with the backend, the connection state of a
session's channel, and the styled spans that make up the transcript.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class MessageKind(str, enum.Enum):
    """The closed set of message tags understood on the wire."""

    INPUT = "input"  # client -> backend, one submitted line
    OUTPUT = "output"  # plain command output
    ERROR = "error"
    SUCCESS = "success"
    WARNING = "warning"
    CLEAR = "clear"  # transcript reset directive
    PROMPT = "prompt"  # inline prompt text, no trailing break


class ChannelState(str, enum.Enum):
    """Lifecycle of a session's transport channel.

    CLOSED is terminal: a closed channel is never reopened.
    """

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


# ---------------------------------------------------------------------------
# Wire Models
# ---------------------------------------------------------------------------


class TerminalMessage(BaseModel):
    """One unit of wire communication.

    Serialized as a flat object with exactly two fields, ``type`` and
    ``content``. Instances are immutable once constructed. Built in code
    with ``kind=``; inbound frames go through ``protocol.codec.decode``,
    which only accepts the wire name ``type``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: MessageKind = Field(alias="type", description="Message tag")
    content: StrictStr = Field(description="Text payload, may be empty or multi-line")


# ---------------------------------------------------------------------------
# Session / Transcript Models
# ---------------------------------------------------------------------------


def new_session_id() -> str:
    """Generate an opaque client-side session identifier."""
    return uuid.uuid4().hex


class SessionInfo(BaseModel):
    """Identity of one terminal instance."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(default_factory=new_session_id, min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)


class OutputSpan(BaseModel):
    """A rendered unit of transcript text tagged with a style class."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Literal span content")
    style_class: str | None = Field(
        default=None, description="Style class, None for unstyled output"
    )
    inline: bool = Field(
        default=False, description="Rendered without a trailing separator (prompt spans)"
    )
