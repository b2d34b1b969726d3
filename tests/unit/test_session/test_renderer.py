"""Tests for the output renderer and transcript."""

from __future__ import annotations

import pytest

from termbridge.domain.models import MessageKind, OutputSpan
from termbridge.session.renderer import PROMPT_STYLE_CLASS, OutputRenderer, Transcript


@pytest.fixture
def transcript() -> Transcript:
    return Transcript()


@pytest.fixture
def renderer(transcript: Transcript) -> OutputRenderer:
    return OutputRenderer(transcript)


class TestStyledKinds:
    @pytest.mark.parametrize(
        ("kind", "style"),
        [
            ("error", "terminal-error"),
            ("success", "terminal-success"),
            ("warning", "terminal-warning"),
        ],
    )
    def test_styled_span(self, renderer: OutputRenderer, transcript: Transcript, kind: str, style: str) -> None:
        renderer.render(kind, "text\n")
        assert transcript.spans == [OutputSpan(text="text\n", style_class=style)]

    def test_error_keeps_literal_content(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        renderer.render(MessageKind.ERROR, "permission denied")
        assert len(transcript) == 1
        assert transcript.spans[0].text == "permission denied"
        assert transcript.spans[0].style_class == "terminal-error"


class TestDefaultKinds:
    @pytest.mark.parametrize("kind", ["output", "input", "something-new"])
    def test_unstyled_span(self, renderer: OutputRenderer, transcript: Transcript, kind: str) -> None:
        renderer.render(kind, "plain\n")
        assert transcript.spans == [OutputSpan(text="plain\n")]


class TestPrompt:
    def test_prompt_is_inline(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        renderer.render("output", "hello\n")
        renderer.render("prompt", "$ ")
        span = transcript.spans[-1]
        assert span.inline is True
        assert span.style_class == PROMPT_STYLE_CLASS
        assert transcript.text == "hello\n$ "
        assert transcript.is_scrolled_to_bottom


class TestClear:
    def test_clear_resets_to_zero_spans(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        for i in range(50):
            renderer.render("output", f"line {i}\n")
        renderer.render("clear", "ignored")
        assert len(transcript) == 0
        assert transcript.text == ""

    def test_clear_on_empty_transcript(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        renderer.render(MessageKind.CLEAR, "")
        assert transcript.spans == []


class TestScrolling:
    def test_every_append_scrolls_to_bottom(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        for kind in ("output", "error", "prompt", "warning"):
            renderer.render(kind, "x")
            assert transcript.scroll_offset == len(transcript)


class TestListeners:
    def test_listeners_see_appends_and_clears(self, renderer: OutputRenderer, transcript: Transcript) -> None:
        seen: list[OutputSpan] = []
        clears: list[bool] = []
        transcript.subscribe(on_span=seen.append, on_clear=lambda: clears.append(True))

        renderer.render("success", "ok\n")
        renderer.render("clear", "")

        assert seen == [OutputSpan(text="ok\n", style_class="terminal-success")]
        assert clears == [True]

    def test_failing_listener_does_not_break_rendering(
        self, renderer: OutputRenderer, transcript: Transcript
    ) -> None:
        def broken(span: OutputSpan) -> None:
            raise RuntimeError("listener broke")

        def broken_clear() -> None:
            raise RuntimeError("listener broke")

        seen: list[OutputSpan] = []
        transcript.subscribe(on_span=broken, on_clear=broken_clear)
        transcript.subscribe(on_span=seen.append)

        renderer.render("output", "x")
        assert transcript.text == "x"
        assert seen == [OutputSpan(text="x")]

        renderer.render("clear", "")
        assert len(transcript) == 0
