"""termbridge -- Interactive remote-terminal session bridge.

This package connects a terminal surface (an input line plus a styled
transcript) to a remote command-execution backend over a persistent
websocket, relaying submitted lines and classified output in order.
"""

__version__ = "0.1.0"
