"""Session controller tying a terminal's surfaces to its channel.

Drives the input/output state machine of one terminal session:
submitted lines go to history and out over the channel, inbound frames
are decoded and handed to the renderer.
"""

from __future__ import annotations

import logging
from typing import Callable

from termbridge.domain.models import ChannelState, MessageKind, SessionInfo, TerminalMessage
from termbridge.protocol.codec import DecodeError, UnknownKindError, decode
from termbridge.session.history import NEWER, OLDER, HistoryNavigator
from termbridge.session.renderer import OutputRenderer, Transcript
from termbridge.session.surface import InputLine, SessionHandle
from termbridge.transport.base import TerminalChannel, TransportError

logger = logging.getLogger(__name__)

CONNECTION_ERROR_TEXT = "Connection error occurred\n"


class TerminalSession:
    """Controller for one terminal session.

    Owns the session's history, renderer and channel. All methods are
    expected to run on the event loop that owns the channel.
    """

    def __init__(
        self,
        handle: SessionHandle,
        channel: TerminalChannel,
        on_closed: Callable[[str], None] | None = None,
    ) -> None:
        if channel.session_id != handle.session_id:
            raise ValueError(
                f"Channel belongs to session {channel.session_id!r}, not {handle.session_id!r}"
            )
        self._handle = handle
        self._info = SessionInfo(session_id=handle.session_id)
        self._channel = channel
        self._history = HistoryNavigator()
        self._renderer = OutputRenderer(handle.transcript)
        self._on_closed = on_closed
        self._attached = False
        self._closed = False

        channel.on_message(self.on_inbound_message)
        channel.on_error(self.on_transport_error)

    @property
    def session_id(self) -> str:
        return self._info.session_id

    @property
    def info(self) -> SessionInfo:
        return self._info

    @property
    def state(self) -> ChannelState:
        return self._channel.state

    @property
    def channel(self) -> TerminalChannel:
        return self._channel

    @property
    def history(self) -> HistoryNavigator:
        return self._history

    @property
    def input_line(self) -> InputLine:
        return self._handle.input_line

    @property
    def transcript(self) -> Transcript:
        return self._handle.transcript

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def attach(self) -> None:
        """Focus the input line and open the channel.

        Runs once per session; later calls (re-renders) do nothing.
        """
        if self._attached:
            return
        self._attached = True
        self._handle.input_line.focus()
        await self._channel.open()

    async def submit_current_input(self) -> None:
        """Submit the input line, as pressing Enter would.

        Non-blank commands are recorded in history. The raw text is always
        sent, blank lines included, and the input line is always cleared.
        """
        command = self._handle.input_line.value
        if command.strip():
            self._history.record_submission(command)
        self._handle.input_line.clear()
        await self._channel.send(TerminalMessage(kind=MessageKind.INPUT, content=command))

    def navigate_history(self, direction: int) -> str | None:
        """Recall a history entry into the input line.

        Returns the recalled command, or None if history is empty.
        """
        command = self._history.navigate(direction)
        if command is not None:
            self._handle.input_line.set_value(command)
        return command

    async def handle_key(self, key: str) -> bool:
        """Handle a special key. Returns True if the key was consumed."""
        if key == "Enter":
            await self.submit_current_input()
        elif key == "ArrowUp":
            self.navigate_history(OLDER)
        elif key == "ArrowDown":
            self.navigate_history(NEWER)
        else:
            return False
        return True

    def on_inbound_message(self, raw: str) -> None:
        """Decode one inbound frame and render it.

        A frame with an unrecognized type is shown as unstyled output.
        Other failures never propagate; they are rendered as an error line.
        """
        try:
            message = decode(raw)
            self._renderer.render(message.kind, message.content)
        except UnknownKindError as e:
            logger.info("Terminal %s: rendering unrecognized type %r unstyled", self.session_id, e.kind)
            self._render_safely(e.kind, e.content)
        except DecodeError as e:
            logger.warning("Terminal %s: bad message: %s", self.session_id, e)
            self._render_safely(MessageKind.ERROR, f"Error processing message: {e}\n")
        except Exception as e:
            logger.exception("Terminal %s: failed to render message", self.session_id)
            self._render_safely(MessageKind.ERROR, f"Error processing message: {e}\n")

    def on_transport_error(self, error: TransportError) -> None:
        self._render_safely(MessageKind.ERROR, CONNECTION_ERROR_TEXT)

    def _render_safely(self, kind: MessageKind | str, content: str) -> None:
        try:
            self._renderer.render(kind, content)
        except Exception:
            logger.exception("Terminal %s: could not render %s line", self.session_id, kind)

    async def close(self) -> None:
        """Close the channel and tell the host to remove the terminal.

        Safe to call more than once; only the first call does anything.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await self._channel.close()
        except Exception as e:
            logger.debug("Terminal %s: error closing channel: %s", self.session_id, e)

        for callback in (self._on_closed, self._handle.on_close):
            if callback is None:
                continue
            try:
                callback(self.session_id)
            except Exception as e:
                logger.debug("Terminal %s: close callback failed: %s", self.session_id, e)
        logger.info("Terminal %s closed", self.session_id)
