"""Startup auto-connection to the sandbox.

Runs once when the host starts: resolves credentials from the SANDBOX_*
environment variables (and, in sandbox mode, from the checked-out branch
name), makes a single connection attempt and, on success, sets up the
user's library and object filters.
"""

from __future__ import annotations

import logging

from ibmi_sandbox.config import EnvironmentInputs, SandboxSettings, read_environment
from ibmi_sandbox.configurator import SandboxConfigurator
from ibmi_sandbox.connection import build_connection_request
from ibmi_sandbox.host import (
    ConfigurationProvider,
    HostBridgeError,
    HostCommands,
    HostShell,
    SourceControl,
)
from ibmi_sandbox.models import ResolutionInputs
from ibmi_sandbox.resolver import resolve_identity

logger = logging.getLogger(__name__)


async def current_branch_name(source_control: SourceControl | None) -> str | None:
    """Branch of the first registered repository, or None if there is none."""
    if source_control is None:
        return None
    repositories = await source_control.get_repositories()
    if not repositories:
        logger.debug("No repositories registered, skipping branch inference")
        return None
    return await repositories[0].current_branch_name()


class BootstrapResolver:
    """One-shot startup connection flow."""

    def __init__(
        self,
        shell: HostShell,
        commands: HostCommands,
        provider: ConfigurationProvider,
        source_control: SourceControl | None = None,
        settings: SandboxSettings | None = None,
        environment: EnvironmentInputs | None = None,
    ):
        self.shell = shell
        self.commands = commands
        self.provider = provider
        self.source_control = source_control
        self.settings = settings or SandboxSettings()
        self.environment = environment
        self.configurator = SandboxConfigurator(provider, commands)
        self._ran = False

    async def _branch_name(self) -> str | None:
        try:
            return await current_branch_name(self.source_control)
        except (HostBridgeError, OSError):
            logger.warning("Branch lookup failed, using environment only", exc_info=True)
            return None

    async def run(self) -> bool:
        """Run the startup flow. Returns True if a connection attempt was made.

        Only the first call does anything.
        """
        if self._ran:
            logger.debug("Startup flow already ran")
            return False
        self._ran = True

        env = self.environment or read_environment()
        branch_name = None
        if env.sandbox_mode:
            branch_name = await self._branch_name()
            if branch_name:
                logger.info("Sandbox mode: inferring connection from branch %s", branch_name)

        identity = resolve_identity(
            ResolutionInputs(
                server=env.server,
                username=env.username,
                password=env.password,
                sandbox_mode=env.sandbox_mode,
                branch_name=branch_name,
            )
        )
        if identity is None:
            logger.debug("No complete sandbox credentials, skipping auto-connect")
            return False

        request = build_connection_request(
            host=identity.server,
            name=f"Sandbox-{identity.username}",
            username=identity.username,
            password=identity.password,
            settings=self.settings,
        )

        if env.sandbox_mode:
            logger.info("Sandbox mode enabled.")
            try:
                await self.shell.show_info(
                    "Thanks for trying the Code for IBM i Sandbox!",
                    modal=True,
                    detail=(
                        "You are using this system at your own risk. "
                        "Do not share any sensitive or private information."
                    ),
                )
            except HostBridgeError as e:
                logger.warning("Could not show sandbox disclaimer: %s", e)

        if not await self.commands.connect(request):
            await self.shell.show_info(
                "Oh no! The sandbox is down.",
                modal=True,
                detail="Sorry, but the sandbox is offline right now. Try again another time.",
            )
            return True

        config = await self.provider.get_config()
        if config is not None:
            await self.configurator.configure(config, identity.username)
        else:
            logger.warning("No active connection config, skipping sandbox library setup")

        await self.commands.focus_view()
        return True
