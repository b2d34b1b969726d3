"""Terminal session module for termbridge.

Public API:
    TerminalSession -- Per-session controller
    SessionRegistry -- Session-id keyed registry of live sessions
    SessionHandle -- Host-supplied surfaces and close callback
    HistoryNavigator -- Command history with recall cursor
    OutputRenderer / Transcript -- Styled transcript rendering
"""

from termbridge.session.controller import TerminalSession
from termbridge.session.history import NEWER, OLDER, HistoryNavigator
from termbridge.session.registry import SessionRegistry
from termbridge.session.renderer import OutputRenderer, Transcript
from termbridge.session.surface import InputLine, SessionHandle

__all__ = [
    "NEWER",
    "OLDER",
    "HistoryNavigator",
    "InputLine",
    "OutputRenderer",
    "SessionHandle",
    "SessionRegistry",
    "TerminalSession",
    "Transcript",
]
