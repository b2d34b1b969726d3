"""Command history with arrow-key style recall."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

OLDER = -1
NEWER = 1


class HistoryNavigator:
    """Append-only log of submitted commands plus a browsing cursor.

    The cursor is always in ``[0, len(entries)]``; ``len(entries)`` means
    the user is on a fresh input line and not browsing.

    Navigation clamps to ``[0, len(entries) - 1]``. Moving newer past the
    most recent entry keeps showing that entry rather than returning to an
    empty fresh line; only a new submission resets the cursor to fresh.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []
        self._cursor = 0

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_browsing(self) -> bool:
        return self._cursor < len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record_submission(self, command: str) -> None:
        """Append a command and reset the cursor to a fresh line.

        Duplicates are kept, including re-submissions of a recalled entry.
        """
        self._entries.append(command)
        self._cursor = len(self._entries)

    def navigate(self, direction: int) -> str | None:
        """Move the cursor and return the entry under it.

        Args:
            direction: ``OLDER`` (-1) or ``NEWER`` (+1).

        Returns:
            The recalled command, or None when there is no history.

        Raises:
            ValueError: If direction is not -1 or +1.
        """
        if direction not in (OLDER, NEWER):
            raise ValueError(f"direction must be -1 or +1, got {direction!r}")
        if not self._entries:
            return None
        self._cursor = max(0, min(self._cursor + direction, len(self._entries) - 1))
        logger.debug("History cursor at %d/%d", self._cursor, len(self._entries))
        return self._entries[self._cursor]
