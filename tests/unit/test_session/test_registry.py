"""Tests for the session registry."""

from __future__ import annotations

import json

import pytest

from termbridge.domain.models import ChannelState
from termbridge.session.registry import SessionRegistry
from termbridge.session.surface import SessionHandle
from termbridge.transport.websocket import WebSocketChannel


@pytest.fixture
def registry(channel_factory) -> SessionRegistry:
    return SessionRegistry(channel_factory=channel_factory)


class TestCreate:
    def test_create_registers_by_id(self, registry: SessionRegistry) -> None:
        session = registry.create(SessionHandle(session_id="a"))
        assert "a" in registry
        assert registry.get("a") is session
        assert session.channel.session_id == "a"

    def test_create_without_handle_generates_id(self, registry: SessionRegistry) -> None:
        session = registry.create()
        assert registry.session_ids == [session.session_id]

    def test_duplicate_id_rejected(self, registry: SessionRegistry) -> None:
        registry.create(SessionHandle(session_id="a"))
        with pytest.raises(ValueError, match="already exists"):
            registry.create(SessionHandle(session_id="a"))

    def test_default_factory_builds_websocket_channels(self) -> None:
        registry = SessionRegistry(base_url="https://example.test")
        session = registry.create(SessionHandle(session_id="abc"))
        assert isinstance(session.channel, WebSocketChannel)
        assert session.channel.url == "wss://example.test/ws/terminal?sessionId=abc"


class TestDispatch:
    @pytest.mark.asyncio
    async def test_dispatch_routes_to_matching_session(self, registry: SessionRegistry) -> None:
        a = registry.create(SessionHandle(session_id="a"))
        b = registry.create(SessionHandle(session_id="b"))
        await a.attach()
        await b.attach()

        assert registry.dispatch("b", json.dumps({"type": "success", "content": "ok"})) is True

        assert len(a.transcript) == 0
        assert b.transcript.text == "ok"

    def test_dispatch_unknown_session(self, registry: SessionRegistry) -> None:
        assert registry.dispatch("nope", "{}") is False

    def test_dispatch_survives_failing_host_listener(self, registry: SessionRegistry) -> None:
        handle = SessionHandle(session_id="a")

        def broken(span) -> None:
            raise RuntimeError("listener broke")

        handle.transcript.subscribe(on_span=broken)
        session = registry.create(handle)

        assert registry.dispatch("a", json.dumps({"type": "output", "content": "x"})) is True
        assert registry.dispatch("a", "not json") is True
        assert [s.style_class for s in session.transcript.spans] == [None, "terminal-error"]


class TestIndependence:
    @pytest.mark.asyncio
    async def test_sessions_share_no_state(self, registry: SessionRegistry) -> None:
        a = registry.create(SessionHandle(session_id="a"))
        b = registry.create(SessionHandle(session_id="b"))
        await a.attach()
        await b.attach()

        a.input_line.set_value("ls")
        await a.submit_current_input()
        a.channel.remote_close()

        assert len(b.history) == 0
        assert b.state is ChannelState.OPEN
        assert b.input_line is not a.input_line


class TestClose:
    @pytest.mark.asyncio
    async def test_close_removes_and_notifies_host(self, registry: SessionRegistry) -> None:
        closed: list[str] = []
        registry.create(SessionHandle(session_id="a", on_close=closed.append))

        await registry.close("a")

        assert "a" not in registry
        assert closed == ["a"]

    @pytest.mark.asyncio
    async def test_session_close_removes_from_registry(self, registry: SessionRegistry) -> None:
        session = registry.create(SessionHandle(session_id="a"))
        await session.close()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_close_all(self, registry: SessionRegistry) -> None:
        for sid in ("a", "b", "c"):
            registry.create(SessionHandle(session_id=sid))
        await registry.close_all()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_close_unknown_is_noop(self, registry: SessionRegistry) -> None:
        await registry.close("missing")

    @pytest.mark.asyncio
    async def test_id_reusable_after_close(self, registry: SessionRegistry) -> None:
        first = registry.create(SessionHandle(session_id="a"))
        await first.close()
        second = registry.create(SessionHandle(session_id="a"))
        assert second is not first
        assert second.state is ChannelState.CONNECTING
