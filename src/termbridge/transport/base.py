"""Abstract base class for a session's transport channel.

A channel owns one persistent bidirectional connection for exactly one
terminal session. Every channel follows the same lifecycle::

    CONNECTING -> OPEN -> CLOSED

Explicit close, remote close and transport failure all collapse into
CLOSED, which is terminal. There is no reconnect; a new session (and
therefore a new channel) must be created to retry.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

from termbridge.domain.models import ChannelState, TerminalMessage

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], None]
ErrorHandler = Callable[["TransportError"], None]
CloseHandler = Callable[[], None]


class TerminalChannel(ABC):
    """Abstract interface for the connection behind one terminal session.

    Implementations push raw inbound frames to the registered message
    handler one at a time, in receipt order. Decoding is left to the
    caller so that malformed frames can be reported per session.

    Example usage::

        channel = WebSocketChannel(session_id, base_url="https://host")
        channel.on_message(controller.on_inbound_message)
        channel.on_error(controller.on_transport_error)
        await channel.open()
        await channel.send(TerminalMessage(kind="input", content="ls"))
        await channel.close()
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._state = ChannelState.CONNECTING
        self._message_handler: MessageHandler | None = None
        self._error_handler: ErrorHandler | None = None
        self._close_handler: CloseHandler | None = None
        self._closed = asyncio.Event()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ChannelState.OPEN

    def on_message(self, handler: MessageHandler) -> None:
        """Register the handler that receives raw inbound frames."""
        self._message_handler = handler

    def on_error(self, handler: ErrorHandler) -> None:
        """Register the handler notified of transport-level failures."""
        self._error_handler = handler

    def on_close(self, handler: CloseHandler) -> None:
        """Register the handler notified once the channel reaches CLOSED."""
        self._close_handler = handler

    async def wait_closed(self) -> None:
        """Wait until the channel has reached CLOSED."""
        await self._closed.wait()

    @abstractmethod
    async def open(self) -> None:
        """Establish the connection.

        Moves the channel from CONNECTING to OPEN. A failed handshake is
        reported through the error handler and leaves the channel CLOSED;
        it is not raised to the caller. Calling open() on a channel that
        has left CONNECTING does nothing.
        """
        ...

    @abstractmethod
    async def send(self, message: TerminalMessage) -> None:
        """Send one message.

        Only effective while OPEN. In any other state the message is
        dropped and nothing is raised. Messages sent while CONNECTING are
        not queued and are lost.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the connection.

        Idempotent: safe to call repeatedly and on an already CLOSED
        channel. Does not wait for the backend to acknowledge anything
        beyond the transport's own close handshake.
        """
        ...

    async def __aenter__(self) -> TerminalChannel:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()

    # -- helpers for implementations ----------------------------------------

    def _set_open(self) -> None:
        self._state = ChannelState.OPEN
        logger.info("Terminal %s connected", self._session_id)

    def _mark_closed(self) -> bool:
        """Move to CLOSED. Returns False if the channel was already closed."""
        if self._state is ChannelState.CLOSED:
            return False
        self._state = ChannelState.CLOSED
        self._closed.set()
        logger.info("Terminal %s disconnected", self._session_id)
        if self._close_handler is not None:
            try:
                self._close_handler()
            except Exception:
                logger.exception("Close handler failed for terminal %s", self._session_id)
        return True

    def _deliver(self, raw: str) -> None:
        """Push one inbound frame to the message handler."""
        if self._message_handler is None:
            logger.debug("Terminal %s: no handler, frame dropped", self._session_id)
            return
        try:
            self._message_handler(raw)
        except Exception:
            logger.exception("Message handler failed for terminal %s", self._session_id)

    def _fail(self, error: TransportError) -> None:
        """Report a transport failure and collapse to CLOSED."""
        if self._state is ChannelState.CLOSED:
            logger.debug("Terminal %s: ignoring error after close: %s", self._session_id, error)
            return
        logger.error("Terminal %s error: %s", self._session_id, error)
        if self._error_handler is not None:
            try:
                self._error_handler(error)
            except Exception:
                logger.exception("Error handler failed for terminal %s", self._session_id)
        self._mark_closed()


class TransportError(Exception):
    """Raised (or reported) when the connection fails at the socket level."""

    def __init__(self, message: str, session_id: str = "") -> None:
        super().__init__(message)
        self.session_id = session_id
