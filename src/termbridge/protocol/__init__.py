"""Message protocol for termbridge.

Public API:
    encode -- Frame a (kind, content) pair as JSON wire text
    decode -- Parse wire text into a TerminalMessage
    DecodeError -- Raised on malformed inbound frames
    UnknownKindError -- Raised on well-formed frames with an unrecognized type
"""

from termbridge.protocol.codec import (
    DecodeError,
    UnknownKindError,
    decode,
    encode,
    encode_message,
)

__all__ = ["DecodeError", "UnknownKindError", "decode", "encode", "encode_message"]
