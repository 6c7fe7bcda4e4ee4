"""IBM i sandbox connector.

Resolves connection credentials for the shared IBM i sandbox and launches a
single connection through the host application:

- Link handler: ``/connect?server=…&user=…[&pass=<base64>]`` links.
- Startup flow: SANDBOX_SERVER / SANDBOX_USER / SANDBOX_PASS, plus
  ``host/user`` branch-name inference when VSCODE_IBMI_SANDBOX is set.
- Sandbox configurator: adds the user's library and object filters to the
  connection configuration once per user.
"""

from .bootstrap import BootstrapResolver
from .configurator import SandboxConfigurator, apply_sandbox_config
from .host import HostBridgeError, HostCommands
from .link_handler import LinkHandler
from .models import ConnectionConfig, ConnectionRequest, ObjectFilter
from .resolver import parse_branch_identity, resolve_identity

__all__ = [
    "BootstrapResolver",
    "ConnectionConfig",
    "ConnectionRequest",
    "HostBridgeError",
    "HostCommands",
    "LinkHandler",
    "ObjectFilter",
    "SandboxConfigurator",
    "apply_sandbox_config",
    "parse_branch_identity",
    "resolve_identity",
]
