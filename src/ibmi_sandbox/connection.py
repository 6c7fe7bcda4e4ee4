"""Shared construction of connection requests."""

from __future__ import annotations

from ibmi_sandbox.config import SandboxSettings
from ibmi_sandbox.models import ConnectionRequest


def build_connection_request(
    *,
    host: str,
    name: str,
    username: str,
    password: str,
    settings: SandboxSettings | None = None,
) -> ConnectionRequest:
    """Build a password-authenticated request on the fixed port and keepalive.

    Raises:
        pydantic.ValidationError: If host, username or password is empty.
    """
    settings = settings or SandboxSettings()
    return ConnectionRequest(
        host=host,
        name=name,
        username=username,
        password=password,
        port=settings.port,
        private_key=None,
        keepalive_interval=settings.keepalive_interval_ms,
    )
