"""Host collaborator fakes shared by the flow tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from ibmi_sandbox.config import CommandsConfig

CONNECT = CommandsConfig().connect


def make_shell(*, connected: bool = True, password: str | None = None) -> MagicMock:
    """Host shell whose connect command returns ``connected``."""
    shell = MagicMock()

    async def execute_command(command, *args):
        if command == CONNECT:
            return connected
        return None

    shell.execute_command = AsyncMock(side_effect=execute_command)
    shell.show_info = AsyncMock()
    shell.show_error = AsyncMock()
    shell.prompt_password = AsyncMock(return_value=password)
    return shell


def executed(shell: MagicMock) -> list[str]:
    """Names of the host commands run so far, in order."""
    return [c.args[0] for c in shell.execute_command.await_args_list]


def connect_payloads(shell: MagicMock) -> list[dict]:
    return [c.args[1] for c in shell.execute_command.await_args_list if c.args[0] == CONNECT]


def make_provider(config=None) -> MagicMock:
    provider = MagicMock()
    provider.get_config = AsyncMock(return_value=config)
    provider.update = AsyncMock()
    return provider


def make_source_control(*branches: str | None) -> MagicMock:
    """Source control with one repository per branch name given."""
    repos = []
    for branch in branches:
        repo = MagicMock()
        repo.current_branch_name = AsyncMock(return_value=branch)
        repos.append(repo)
    sc = MagicMock()
    sc.get_repositories = AsyncMock(return_value=repos)
    return sc
