"""Shared test fixtures for the termbridge test suite.

Provides an in-memory channel double, host surfaces, and sessions wired
to them so controller and registry tests run without a network.
"""

from __future__ import annotations

from typing import Callable

import pytest
import pytest_asyncio

from termbridge.domain.models import ChannelState, TerminalMessage
from termbridge.session.controller import TerminalSession
from termbridge.session.surface import SessionHandle
from termbridge.transport.base import TerminalChannel, TransportError


class FakeChannel(TerminalChannel):
    """In-memory channel that records outbound messages."""

    def __init__(self, session_id: str = "test-session") -> None:
        super().__init__(session_id)
        self.sent: list[TerminalMessage] = []
        self.open_calls = 0
        self.close_calls = 0

    async def open(self) -> None:
        self.open_calls += 1
        if self.state is ChannelState.CONNECTING:
            self._set_open()

    async def send(self, message: TerminalMessage) -> None:
        if not self.is_open:
            return
        self.sent.append(message)

    async def close(self) -> None:
        self.close_calls += 1
        self._mark_closed()

    # -- simulation helpers -------------------------------------------------

    def receive(self, raw: str) -> None:
        self._deliver(raw)

    def remote_close(self) -> None:
        self._mark_closed()

    def fail(self, message: str = "connection reset") -> None:
        self._fail(TransportError(message, session_id=self.session_id))


# ---------------------------------------------------------------------------
# Channel Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def channel_factory() -> Callable[[str], FakeChannel]:
    """Factory building FakeChannels, one per session id."""
    return FakeChannel


@pytest.fixture
def channel() -> FakeChannel:
    """A fresh FakeChannel in CONNECTING state."""
    return FakeChannel("test-session")


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def closed_ids() -> list[str]:
    """Collects session ids passed to the host's on_close callback."""
    return []


@pytest.fixture
def handle(closed_ids: list[str]) -> SessionHandle:
    """Host surfaces for the test session."""
    return SessionHandle(session_id="test-session", on_close=closed_ids.append)


@pytest.fixture
def session(handle: SessionHandle, channel: FakeChannel) -> TerminalSession:
    """A TerminalSession bound to the fake channel, not yet attached."""
    return TerminalSession(handle, channel)


@pytest_asyncio.fixture
async def attached_session(session: TerminalSession) -> TerminalSession:
    """A TerminalSession whose channel is OPEN."""
    await session.attach()
    return session
