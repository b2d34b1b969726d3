"""Output rendering for a terminal transcript.

The transcript is an ordered, append-only sequence of styled spans. The
only way to remove spans is the ``clear`` directive, which empties it.
"""

from __future__ import annotations

import logging
from typing import Callable

from termbridge.domain.models import MessageKind, OutputSpan

logger = logging.getLogger(__name__)

STYLE_CLASSES: dict[str, str] = {
    MessageKind.ERROR.value: "terminal-error",
    MessageKind.SUCCESS.value: "terminal-success",
    MessageKind.WARNING.value: "terminal-warning",
}

PROMPT_STYLE_CLASS = "terminal-prompt-output"

SpanListener = Callable[[OutputSpan], None]
ClearListener = Callable[[], None]


class Transcript:
    """The visible transcript surface of one terminal.

    Holds the spans and the scroll position of the scrollable container
    they live in. ``scroll_offset`` counts spans scrolled past; the view
    is at the bottom when it equals the span count.
    """

    def __init__(self) -> None:
        self._spans: list[OutputSpan] = []
        self._scroll_offset = 0
        self._span_listeners: list[SpanListener] = []
        self._clear_listeners: list[ClearListener] = []

    @property
    def spans(self) -> list[OutputSpan]:
        return list(self._spans)

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def is_scrolled_to_bottom(self) -> bool:
        return self._scroll_offset == len(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    @property
    def text(self) -> str:
        """Plain text of the whole transcript."""
        return "".join(span.text for span in self._spans)

    def subscribe(
        self,
        on_span: SpanListener | None = None,
        on_clear: ClearListener | None = None,
    ) -> None:
        """Register listeners for appended spans and clears."""
        if on_span is not None:
            self._span_listeners.append(on_span)
        if on_clear is not None:
            self._clear_listeners.append(on_clear)

    def append(self, span: OutputSpan) -> None:
        self._spans.append(span)
        for listener in list(self._span_listeners):
            try:
                listener(span)
            except Exception:
                logger.exception("Transcript span listener failed")

    def clear(self) -> None:
        self._spans.clear()
        self._scroll_offset = 0
        for listener in list(self._clear_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Transcript clear listener failed")

    def scroll_to_bottom(self) -> None:
        self._scroll_offset = len(self._spans)


class OutputRenderer:
    """Applies per-kind rendering rules to a transcript.

    - ``error``, ``success``, ``warning``: one styled span.
    - ``clear``: empties the transcript.
    - ``prompt``: one inline span without a trailing break.
    - anything else: one unstyled span, so unexpected backend output is
      still shown.

    Every append scrolls the transcript to the bottom.
    """

    def __init__(self, transcript: Transcript) -> None:
        self._transcript = transcript

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    def render(self, kind: MessageKind | str, content: str) -> None:
        kind = kind.value if isinstance(kind, MessageKind) else str(kind)

        if kind == MessageKind.CLEAR.value:
            self._transcript.clear()
            logger.debug("Transcript cleared")
            return

        if kind == MessageKind.PROMPT.value:
            span = OutputSpan(text=content, style_class=PROMPT_STYLE_CLASS, inline=True)
        else:
            span = OutputSpan(text=content, style_class=STYLE_CLASSES.get(kind))

        self._transcript.append(span)
        self._transcript.scroll_to_bottom()
