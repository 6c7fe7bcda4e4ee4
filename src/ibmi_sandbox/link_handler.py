"""Link handler — connects from an externally triggered ``/connect`` link.

A link such as ``vscode://…/connect?server=host&user=ME&pass=U0VDUkVU``
carries the server, the user and optionally a base64-encoded password. When
the password is missing the user is prompted for it. Other link paths are
ignored so that newer link actions do not fail on older installs.
"""

from __future__ import annotations

import base64
import binascii
import logging
from urllib.parse import parse_qs

from ibmi_sandbox.config import SandboxSettings
from ibmi_sandbox.connection import build_connection_request
from ibmi_sandbox.host import HostCommands, HostShell
from ibmi_sandbox.models import LinkRequest

logger = logging.getLogger(__name__)

CONNECT_PATH = "/connect"


def parse_link_query(query: str) -> LinkRequest | None:
    """Extract server/user/pass from a link query string.

    Returns None unless both ``server`` and ``user`` are present and
    non-empty. Repeated keys keep their first value.
    """
    params = parse_qs(query)

    def first(key: str) -> str | None:
        values = params.get(key)
        return values[0] if values else None

    server = first("server")
    user = first("user")
    if not (server and user):
        return None
    return LinkRequest(server=server, user=user, encoded_password=first("pass"))


def decode_password(encoded: str) -> str | None:
    """Decode a base64 password field to text.

    Form decoding turns ``+`` into a space, so spaces are mapped back before
    decoding. Missing padding and the URL-safe alphabet are accepted. Returns
    None if the value is not valid base64 or not UTF-8.
    """
    value = encoded.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
    value += "=" * (-len(value) % 4)
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        logger.warning("Ignoring link password that is not valid base64")
        return None


class LinkHandler:
    """Handles ``/connect`` links delivered by the host."""

    def __init__(
        self,
        shell: HostShell,
        commands: HostCommands,
        settings: SandboxSettings | None = None,
    ):
        self.shell = shell
        self.commands = commands
        self.settings = settings or SandboxSettings()

    async def handle(self, path: str, query: str) -> bool:
        """Handle one link. Returns True if a connection attempt was made."""
        if path != CONNECT_PATH:
            logger.debug("Ignoring link with unhandled path %s", path)
            return False

        link = parse_link_query(query)
        if link is None:
            logger.debug("Ignoring connect link without server and user")
            return False

        if link.encoded_password:
            password = decode_password(link.encoded_password)
        else:
            password = await self.shell.prompt_password(
                title="Password for server",
                prompt=f"Enter password for {link.user}@{link.server}",
            )

        if not password:
            logger.info("No password for %s@%s, connection abandoned", link.user, link.server)
            await self.shell.show_error(
                f"Connection to {link.server} ended as no password was provided."
            )
            return False

        request = build_connection_request(
            host=link.server,
            name=link.server,
            username=link.user,
            password=password,
            settings=self.settings,
        )

        if await self.commands.connect(request):
            await self.commands.focus_view()
        else:
            await self.shell.show_error(
                "Failed to connect",
                modal=True,
                detail=f"Failed to connect to {link.server} as {link.user}.",
            )
        return True
