"""Capabilities the connection flows need from the host application.

The flows never talk to a window, a git binary, or a config file directly.
They see four narrow protocols, so they can run against any host (the HTTP
bridge in ``bridge.py``, or an ``AsyncMock`` in tests):

- HostShell: run a named command, show a message, prompt for a secret.
- ConfigurationProvider: read and replace the active connection config.
- SourceControl / Repository: list repositories, read the current branch.

``HostCommands`` wraps a HostShell with the command ids from settings and
exposes the handful of operations the flows actually use.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from ibmi_sandbox.config import CommandsConfig
from ibmi_sandbox.models import ConnectionConfig, ConnectionRequest

logger = logging.getLogger(__name__)


class HostBridgeError(Exception):
    """The host application could not be reached or rejected a request."""


class HostShell(Protocol):
    """Requests to the interactive host shell.

    Message methods return once the request is delivered, not when the user
    dismisses the message.
    """

    async def execute_command(self, command: str, *args: Any) -> Any: ...

    async def show_info(
        self, message: str, *, modal: bool = False, detail: str | None = None
    ) -> None: ...

    async def show_error(
        self, message: str, *, modal: bool = False, detail: str | None = None
    ) -> None: ...

    async def prompt_password(self, *, title: str, prompt: str) -> str | None:
        """Ask for a masked value. Returns None when the user cancels."""
        ...


class ConfigurationProvider(Protocol):
    async def get_config(self) -> ConnectionConfig | None: ...

    async def update(self, config: ConnectionConfig) -> None: ...


class Repository(Protocol):
    async def current_branch_name(self) -> str | None: ...


class SourceControl(Protocol):
    async def get_repositories(self) -> Sequence[Repository]: ...


class HostCommands:
    """Named host commands used by the link and startup flows."""

    def __init__(self, shell: HostShell, commands: CommandsConfig | None = None):
        self.shell = shell
        self.commands = commands or CommandsConfig()

    async def connect(self, request: ConnectionRequest) -> bool:
        """Invoke the direct-connect command. Any non-truthy result is a failure."""
        logger.info(
            "Connecting to %s as %s (name=%s)", request.host, request.username, request.name
        )
        try:
            result = await self.shell.execute_command(
                self.commands.connect, request.to_payload()
            )
        except HostBridgeError as e:
            logger.warning("Connect command failed for %s: %s", request.host, e)
            return False
        connected = bool(result)
        logger.info("Connection to %s %s", request.host, "succeeded" if connected else "failed")
        return connected

    async def focus_view(self) -> None:
        await self.shell.execute_command(f"{self.commands.focus_view}.focus")

    async def refresh_library_list(self) -> None:
        await self.shell.execute_command(self.commands.refresh_library_list)

    async def refresh_object_browser(self) -> None:
        await self.shell.execute_command(self.commands.refresh_object_browser)
