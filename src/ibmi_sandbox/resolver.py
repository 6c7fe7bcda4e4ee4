"""Credential precedence rules for the startup connection.

Pure functions only: given the environment values, the sandbox-mode flag and
(optionally) the checked-out branch name, decide which server, username and
password to connect with.

Precedence, in order of application:

1. ``SANDBOX_SERVER`` / ``SANDBOX_USER`` / ``SANDBOX_PASS``.
2. In sandbox mode, a branch named ``host/user`` replaces both server and
   username (username upper-cased). A branch named ``user`` only fills in a
   username that is still missing. Any other shape changes nothing.
3. A missing password defaults to the upper-cased username (sandbox
   accounts share user and password).
4. The result is complete only if all three values are non-empty.
"""

from __future__ import annotations

from ibmi_sandbox.models import BranchIdentity, ResolutionInputs, ResolvedIdentity


def parse_branch_identity(branch_name: str | None) -> BranchIdentity | None:
    """Infer host/user candidates from a branch name.

    >>> parse_branch_identity("FOO/bar")
    BranchIdentity(host='FOO', username='BAR')
    >>> parse_branch_identity("alice")
    BranchIdentity(host=None, username='ALICE')
    >>> parse_branch_identity("a/b/c") is None
    True
    """
    if not branch_name:
        return None

    parts = branch_name.split("/")
    if len(parts) == 2:
        return BranchIdentity(host=parts[0], username=parts[1].upper())
    if len(parts) == 1:
        return BranchIdentity(username=parts[0].upper())
    return None


def apply_branch_identity(
    server: str | None, username: str | None, identity: BranchIdentity | None
) -> tuple[str | None, str | None]:
    """Overlay a branch identity on the server/username candidates."""
    if identity is None:
        return server, username
    if identity.host is not None:
        # host/user form: both candidates are replaced
        return identity.host, identity.username
    return server, username or identity.username


def resolve_identity(inputs: ResolutionInputs) -> ResolvedIdentity | None:
    """Resolve the startup credentials, or None if they are incomplete."""
    server = inputs.server
    username = inputs.username
    password = inputs.password

    if inputs.sandbox_mode:
        server, username = apply_branch_identity(
            server, username, parse_branch_identity(inputs.branch_name)
        )

    if username and not password:
        password = username.upper()

    if not (server and username and password):
        return None
    return ResolvedIdentity(server=server, username=username, password=password)
