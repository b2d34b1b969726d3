"""Transport channel module for termbridge.

Carries framed messages between a terminal session and the backend.

Public API:
    TerminalChannel -- Abstract base class
    TransportError -- Socket-level failure
    WebSocketChannel -- websockets-backed channel
    build_endpoint_url -- Derive the ws(s):// endpoint for a session
    open_channel -- Create and open a WebSocketChannel
"""

from termbridge.transport.base import TerminalChannel, TransportError

__all__ = [
    "TerminalChannel",
    "TransportError",
    "WebSocketChannel",
    "build_endpoint_url",
    "open_channel",
]


def __getattr__(name: str) -> object:
    """Lazy import for the websocket implementation."""
    if name in ("WebSocketChannel", "build_endpoint_url", "open_channel"):
        from termbridge.transport import websocket
        return getattr(websocket, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
