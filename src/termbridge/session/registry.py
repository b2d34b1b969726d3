"""Registry of live terminal sessions keyed by session id.

Owned by whatever composes several terminals (the console frontend, or
any embedding host). Sessions are inserted on creation, removed when
they close, and looked up by id whenever an inbound frame has to be
routed back to its controller.
"""

from __future__ import annotations

import logging
from typing import Callable

from termbridge.session.controller import TerminalSession
from termbridge.session.surface import SessionHandle
from termbridge.transport.base import TerminalChannel
from termbridge.transport.websocket import DEFAULT_ENDPOINT_PATH, WebSocketChannel

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[str], TerminalChannel]


class SessionRegistry:
    """Explicit map from session id to its TerminalSession."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        path: str = DEFAULT_ENDPOINT_PATH,
        channel_factory: ChannelFactory | None = None,
    ) -> None:
        self._base_url = base_url
        self._path = path
        self._channel_factory = channel_factory or self._websocket_channel
        self._sessions: dict[str, TerminalSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @property
    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def create(self, handle: SessionHandle | None = None) -> TerminalSession:
        """Create and register a session for the given host handle.

        The session is not attached yet; call ``attach()`` once its
        surfaces are visible.

        Raises:
            ValueError: If a live session already uses the handle's id.
        """
        handle = handle or SessionHandle()
        if handle.session_id in self._sessions:
            raise ValueError(f"Session {handle.session_id!r} already exists")
        channel = self._channel_factory(handle.session_id)
        session = TerminalSession(handle, channel, on_closed=self._remove)
        self._sessions[handle.session_id] = session
        logger.info("Registered terminal %s (%d active)", handle.session_id, len(self._sessions))
        return session

    def get(self, session_id: str) -> TerminalSession | None:
        return self._sessions.get(session_id)

    def dispatch(self, session_id: str, raw: str) -> bool:
        """Route an inbound frame to its session. Returns False if unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning("Dropping frame for unknown terminal %s", session_id)
            return False
        session.on_inbound_message(raw)
        return True

    async def close(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            await session.close()

    async def close_all(self) -> None:
        for session in list(self._sessions.values()):
            await session.close()

    def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        logger.info("Removed terminal %s (%d active)", session_id, len(self._sessions))

    def _websocket_channel(self, session_id: str) -> TerminalChannel:
        return WebSocketChannel(session_id, base_url=self._base_url, path=self._path)
