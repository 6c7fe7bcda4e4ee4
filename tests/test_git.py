"""Tests for the git-backed source control adapter."""

import asyncio
import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from ibmi_sandbox.git import GitRepository, GitSourceControl

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        ["git", *args],
        cwd=str(repo),
        check=True,
        capture_output=True,
        env={
            **os.environ,
            "GIT_AUTHOR_NAME": "Test",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        },
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "checkout", "-q", "-b", "pub400.com/alice")
    (root / "README.md").write_text("sandbox\n")
    _git(root, "add", "README.md")
    _git(root, "commit", "-q", "-m", "init")
    return root


@requires_git
class TestGitRepository:
    @pytest.mark.asyncio
    async def test_current_branch(self, repo: Path):
        assert await GitRepository(repo).current_branch_name() == "pub400.com/alice"

    @pytest.mark.asyncio
    async def test_detached_head(self, repo: Path):
        _git(repo, "checkout", "-q", "--detach")
        assert await GitRepository(repo).current_branch_name() is None

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path: Path):
        assert await GitRepository(tmp_path).current_branch_name() is None


class TestGitSourceControl:
    @pytest.mark.asyncio
    async def test_keeps_registration_order(self, tmp_path: Path):
        sc = GitSourceControl([tmp_path / "a", tmp_path / "b"])
        repos = await sc.get_repositories()
        assert [r.root for r in repos] == [tmp_path / "a", tmp_path / "b"]

    @pytest.mark.asyncio
    async def test_missing_git_binary(self, tmp_path: Path):
        repo = GitRepository(tmp_path, git_exe="git-does-not-exist")
        assert await repo.current_branch_name() is None

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
    async def test_hung_git_is_killed(self, tmp_path: Path, monkeypatch):
        slow_git = tmp_path / "slow-git"
        slow_git.write_text("#!/bin/sh\nexec sleep 30\n")
        slow_git.chmod(0o755)

        spawned = []
        create = asyncio.create_subprocess_exec

        async def spawn(*args, **kwargs):
            proc = await create(*args, **kwargs)
            spawned.append(proc)
            return proc

        monkeypatch.setattr(asyncio, "create_subprocess_exec", spawn)

        repo = GitRepository(tmp_path, git_exe=str(slow_git), timeout=0.2)
        assert await repo.current_branch_name() is None
        assert len(spawned) == 1
        assert spawned[0].returncode is not None
