"""Wire codec for terminal messages.

Messages travel as JSON text frames holding a flat object with exactly
two fields::

    {"type": "input", "content": "ls -la"}

``type`` must be one of the :class:`MessageKind` values and ``content``
must be a string. Anything else fails to decode with :class:`DecodeError`;
a well-formed frame with an unrecognized ``type`` raises the narrower
:class:`UnknownKindError` so callers can still show its content.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, StrictStr, ValidationError

from termbridge.domain.models import MessageKind, TerminalMessage

logger = logging.getLogger(__name__)


def encode(kind: MessageKind | str, content: str) -> str:
    """Frame a message as wire text.

    Args:
        kind: Message tag. Plain strings are validated against MessageKind.
        content: Text payload.

    Raises:
        ValueError: If kind is not a recognized tag or content is not text.
    """
    try:
        message = TerminalMessage(kind=kind, content=content)
    except ValidationError as e:
        raise ValueError(f"Cannot encode message: {e}") from e
    return encode_message(message)


def encode_message(message: TerminalMessage) -> str:
    """Frame an already constructed message as wire text."""
    return message.model_dump_json(by_alias=True)


class _WireFrame(BaseModel):
    """Shape check for an inbound frame, before its tag is interpreted."""

    type: StrictStr
    content: StrictStr


def decode(wire: str | bytes) -> TerminalMessage:
    """Parse one wire frame into a TerminalMessage.

    The frame must carry ``type`` and ``content`` under those exact names.

    Raises:
        UnknownKindError: If the frame is well formed but its ``type`` is
            not a MessageKind. The error keeps the tag and content.
        DecodeError: If the frame is not valid JSON text, is missing
            ``type`` or ``content``, or either field is not a string.
    """
    try:
        frame = _WireFrame.model_validate_json(wire)
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'message'}: {err['msg']}"
            for err in e.errors()
        )
    except ValueError as e:
        # undecodable bytes
        detail = str(e)
    else:
        try:
            kind = MessageKind(frame.type)
        except ValueError:
            logger.debug("Inbound frame has unrecognized type %r", frame.type)
            raise UnknownKindError(frame.type, frame.content, raw=wire) from None
        return TerminalMessage(kind=kind, content=frame.content)
    logger.debug("Rejected inbound frame: %s", detail)
    raise DecodeError(detail, raw=wire)


class DecodeError(Exception):
    """Raised when an inbound frame cannot be decoded."""

    def __init__(self, message: str, raw: str | bytes = "") -> None:
        super().__init__(message)
        self.raw = raw


class UnknownKindError(DecodeError):
    """Raised for a well-formed frame whose tag is not recognized."""

    def __init__(self, kind: str, content: str, raw: str | bytes = "") -> None:
        super().__init__(f"type: unrecognized message type {kind!r}", raw=raw)
        self.kind = kind
        self.content = content
