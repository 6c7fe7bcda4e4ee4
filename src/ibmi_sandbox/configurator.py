"""Sandbox library list and object filter setup.

After the first successful startup connection for a user, the user's own
library is added to the connection's library list together with two object
filters scoped to it. The library list doubles as the marker: once the
username is in it, the merge is a no-op, so repeated startups for the same
user leave the configuration untouched.
"""

from __future__ import annotations

import logging

from ibmi_sandbox.host import ConfigurationProvider, HostCommands
from ibmi_sandbox.models import ConnectionConfig, ObjectFilter

logger = logging.getLogger(__name__)

SOURCES_FILTER_NAME = "Sandbox Sources"
OBJECTS_FILTER_NAME = "Sandbox Object Filters"


def sandbox_filters(username: str) -> tuple[ObjectFilter, ObjectFilter]:
    """The source-member filter and the all-objects filter for a user library."""
    return (
        ObjectFilter(
            name=SOURCES_FILTER_NAME,
            library=username,
            object="*",
            types=frozenset({"*SRCPF"}),
            member="*",
            member_type="",
        ),
        ObjectFilter(
            name=OBJECTS_FILTER_NAME,
            library=username,
            object="*",
            types=frozenset({"*ALL"}),
            member="*",
            member_type="",
        ),
    )


def apply_sandbox_config(config: ConnectionConfig, username: str) -> ConnectionConfig:
    """Return ``config`` with the user's library and filters merged in.

    The input snapshot is never modified. If the library list already holds
    ``username`` the same snapshot is returned.
    """
    if username in config.library_list:
        return config
    return config.model_copy(
        update={
            "library_list": (*config.library_list, username),
            "object_filters": (*config.object_filters, *sandbox_filters(username)),
        }
    )


class SandboxConfigurator:
    """Persists the sandbox merge and asks the host to refresh its views."""

    def __init__(self, provider: ConfigurationProvider, commands: HostCommands):
        self.provider = provider
        self.commands = commands

    async def configure(self, config: ConnectionConfig, username: str) -> bool:
        """Apply the merge once. Returns True if the configuration changed."""
        updated = apply_sandbox_config(config, username)
        if updated is config:
            logger.debug("Library list already contains %s, nothing to configure", username)
            return False

        await self.provider.update(updated)
        logger.info("Added sandbox library %s and its object filters", username)

        await self.commands.refresh_library_list()
        await self.commands.refresh_object_browser()
        return True
