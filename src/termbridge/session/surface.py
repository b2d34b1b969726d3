"""Host-supplied surfaces for a terminal session.

The hosting UI owns the visible input line and transcript; the session
controller only drives them through these objects.
"""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from termbridge.domain.models import new_session_id
from termbridge.session.renderer import Transcript


class InputLine:
    """The editable input field of a terminal."""

    def __init__(self, value: str = "") -> None:
        self._value = value
        self._cursor_position = len(value)
        self._focused = False

    @property
    def value(self) -> str:
        return self._value

    @property
    def cursor_position(self) -> int:
        return self._cursor_position

    @property
    def is_focused(self) -> bool:
        return self._focused

    def type_text(self, text: str) -> None:
        """Insert text at the cursor, as a keystroke would."""
        pos = self._cursor_position
        self._value = self._value[:pos] + text + self._value[pos:]
        self._cursor_position = pos + len(text)

    def set_value(self, value: str) -> None:
        """Replace the content and move the cursor to the end."""
        self._value = value
        self._cursor_position = len(value)

    def clear(self) -> None:
        self.set_value("")

    def focus(self) -> None:
        self._focused = True

    def blur(self) -> None:
        self._focused = False


class SessionHandle(BaseModel):
    """Everything the host supplies for one terminal session."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str = Field(default_factory=new_session_id, min_length=1)
    input_line: InputLine = Field(default_factory=InputLine)
    transcript: Transcript = Field(default_factory=Transcript)
    on_close: Callable[[str], None] | None = Field(
        default=None, description="Called once with the session id when the terminal should be removed"
    )
