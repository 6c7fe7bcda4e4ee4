"""Configuration loading for the IBM i sandbox connector.

Settings come from an optional ``.ibmi-sandbox/config.yaml`` file validated by
pydantic, with environment variable overrides applied afterwards. The
connection inputs themselves (server, user, password, sandbox flag) are read
separately from the process environment by ``read_environment``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from ibmi_sandbox.models import DEFAULT_KEEPALIVE_INTERVAL_MS, DEFAULT_PORT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".ibmi-sandbox") / "config.yaml"

# Environment variables consulted by the startup flow.
ENV_SERVER = "SANDBOX_SERVER"
ENV_USER = "SANDBOX_USER"
ENV_PASS = "SANDBOX_PASS"
ENV_SANDBOX_MODE = "VSCODE_IBMI_SANDBOX"

_FALSY = {"", "0", "false", "no", "off"}


# ── Config Models ────────────────────────────────────────────────────────────


class CommandsConfig(BaseModel):
    """Host command identifiers invoked by the connection flows."""

    connect: str = "code-for-ibmi.connectDirect"
    focus_view: str = "helpView"
    refresh_library_list: str = "code-for-ibmi.refreshLibraryListView"
    refresh_object_browser: str = "code-for-ibmi.refreshObjectBrowser"


class BridgeConfig(BaseModel):
    """Where the host application's local command bridge listens."""

    url: str = "http://127.0.0.1:7357"
    timeout: float = 30.0


class SandboxSettings(BaseModel):
    port: int = DEFAULT_PORT
    keepalive_interval_ms: int = DEFAULT_KEEPALIVE_INTERVAL_MS
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)


class EnvironmentInputs(BaseModel):
    """Connection inputs taken from the process environment."""

    server: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    sandbox_mode: bool = False


# ── Loading ──────────────────────────────────────────────────────────────────


def load_settings(config_path: Path | None = None) -> SandboxSettings:
    """Load connector settings.

    Args:
        config_path: Explicit YAML file. Defaults to ``$IBMI_SANDBOX_CONFIG``
            or ``.ibmi-sandbox/config.yaml`` in the working directory.

    Returns:
        Validated SandboxSettings. A missing file yields the defaults.

    Raises:
        ValueError: If the file does not contain a mapping or fails validation.
    """
    if config_path is None:
        env_path = os.environ.get("IBMI_SANDBOX_CONFIG", "").strip()
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    raw: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Sandbox config must be a mapping: {config_path}")
        logger.info("Loaded sandbox settings from %s", config_path)
    else:
        logger.debug("No sandbox settings at %s, using defaults", config_path)

    settings = SandboxSettings(**raw)

    bridge_url = os.environ.get("IBMI_SANDBOX_BRIDGE_URL", "").strip()
    if bridge_url:
        settings.bridge.url = bridge_url

    return settings


def is_enabled(value: str | None) -> bool:
    """Interpret an environment flag. Unset, empty, 0, false, no, off are off."""
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


def read_environment(environ: Mapping[str, str] | None = None) -> EnvironmentInputs:
    """Read the SANDBOX_* connection inputs and the sandbox-mode flag.

    Empty values are treated as absent.
    """
    if environ is None:
        environ = os.environ
    return EnvironmentInputs(
        server=environ.get(ENV_SERVER) or None,
        username=environ.get(ENV_USER) or None,
        password=environ.get(ENV_PASS) or None,
        sandbox_mode=is_enabled(environ.get(ENV_SANDBOX_MODE)),
    )
