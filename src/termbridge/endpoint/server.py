"""FastAPI server for the reference terminal endpoint.

Accepts terminal sessions on ``/ws/terminal?sessionId=<id>`` and speaks
the termbridge message protocol: ``input`` frames in, classified output
frames out. Commands other than the built-ins are run through a shell
subprocess in the session's working directory.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from termbridge.config.settings import DEFAULT_WELCOME, EndpointConfig, load_settings
from termbridge.domain.models import MessageKind
from termbridge.endpoint.shell import ShellCommandRunner, ShellError
from termbridge.protocol.codec import DecodeError, decode, encode
from termbridge.utils.logging import setup_logging

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Available commands:\r\n"
    "  cd <dir>                 - Change working directory\r\n"
    "  clear                    - Clear terminal\r\n"
    "  exit                     - Close terminal\r\n"
    "  help                     - Show this help\r\n"
    "  <anything else>          - Run through the shell\r\n\r\n"
)


class EndpointStatus(BaseModel):
    status: str = "ok"
    active_sessions: int = 0


class TerminalConnection:
    """Server-side state of one connected terminal."""

    def __init__(self, websocket: WebSocket, session_id: str, working_directory: str) -> None:
        self.websocket = websocket
        self.session_id = session_id
        self.working_directory = working_directory
        self.created_at = datetime.now()

    async def send(self, kind: MessageKind, content: str) -> None:
        await self.websocket.send_text(encode(kind, content))


def create_app(
    runner: ShellCommandRunner | None = None,
    prompt: str = "$ ",
    welcome: str = DEFAULT_WELCOME,
    working_directory: str | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="termbridge Endpoint",
        description="Reference command backend for termbridge terminals",
        version="0.1.0",
    )

    app.state.runner = runner or ShellCommandRunner()
    app.state.sessions = {}

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        return EndpointStatus(status="ok", active_sessions=len(app.state.sessions))

    @app.websocket("/ws/terminal")
    async def terminal_socket(
        websocket: WebSocket,
        session_id: str = Query(alias="sessionId", min_length=1),
    ) -> None:
        await websocket.accept()
        conn = TerminalConnection(
            websocket, session_id, working_directory or os.getcwd()
        )
        app.state.sessions[session_id] = conn
        logger.info("Terminal %s connected", session_id)

        try:
            await conn.send(MessageKind.OUTPUT, welcome)
            await conn.send(MessageKind.PROMPT, prompt)
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
                try:
                    message = decode(raw)
                except DecodeError as e:
                    await conn.send(MessageKind.ERROR, f"Invalid message: {e}\r\n")
                    continue
                if message.kind is not MessageKind.INPUT:
                    logger.debug("Terminal %s: ignoring %s frame", session_id, message.kind.value)
                    continue
                if not await _process_command(conn, app.state.runner, message.content, prompt):
                    await websocket.close()
                    break
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error("Terminal %s error: %s", session_id, e)
        finally:
            app.state.sessions.pop(session_id, None)
            logger.info("Terminal %s disconnected", session_id)

    return app


async def _process_command(
    conn: TerminalConnection,
    runner: ShellCommandRunner,
    command: str,
    prompt: str,
) -> bool:
    """Handle one submitted line. Returns False when the session should end."""
    if not command.strip():
        await conn.send(MessageKind.PROMPT, prompt)
        return True

    command = command.strip()
    name, _, arg = command.partition(" ")

    if command.lower() == "exit":
        await conn.send(MessageKind.OUTPUT, "Goodbye!\r\n")
        return False

    if command.lower() == "clear":
        await conn.send(MessageKind.CLEAR, "")
    elif command.lower() == "help":
        await conn.send(MessageKind.OUTPUT, HELP_TEXT)
    elif name == "cd":
        await _change_directory(conn, arg.strip())
    else:
        await _run_command(conn, runner, command)

    await conn.send(MessageKind.PROMPT, prompt)
    return True


async def _change_directory(conn: TerminalConnection, target: str) -> None:
    target = os.path.expanduser(target or "~")
    path = os.path.normpath(os.path.join(conn.working_directory, target))
    if not os.path.isdir(path):
        await conn.send(MessageKind.ERROR, f"cd: no such directory: {target}\r\n")
        return
    conn.working_directory = path
    await conn.send(MessageKind.OUTPUT, f"{path}\r\n")


async def _run_command(conn: TerminalConnection, runner: ShellCommandRunner, command: str) -> None:
    await conn.send(MessageKind.OUTPUT, f"$ {command}\r\n")

    async def on_stdout(line: str) -> None:
        await conn.send(MessageKind.OUTPUT, line + "\r\n")

    async def on_stderr(line: str) -> None:
        await conn.send(MessageKind.ERROR, line + "\r\n")

    try:
        exit_code = await runner.run(command, on_stdout, on_stderr, cwd=conn.working_directory)
    except ShellError as e:
        await conn.send(MessageKind.ERROR, f"Error executing command: {e}\r\n")
        return

    if exit_code is None:
        await conn.send(
            MessageKind.WARNING,
            f"Command timed out after {runner.timeout:.0f} seconds. "
            "This might be an interactive command.\r\n",
        )
    elif exit_code != 0:
        await conn.send(MessageKind.ERROR, f"Command failed with exit code {exit_code}\r\n")


def create_app_from_config(config: EndpointConfig) -> FastAPI:
    """Create the application from the endpoint section of the settings."""
    return create_app(
        runner=ShellCommandRunner(
            shell_command=config.shell_command,
            timeout=config.command_timeout,
        ),
        prompt=config.prompt,
        welcome=config.welcome,
        working_directory=config.working_directory,
    )


def main(config_path: str | None = None) -> None:
    """Entry point for running the endpoint server standalone."""
    settings = load_settings(config_path)
    setup_logging(settings.logging)
    app = create_app_from_config(settings.endpoint)
    uvicorn.run(app, host=settings.endpoint.host, port=settings.endpoint.port)


if __name__ == "__main__":
    main()
