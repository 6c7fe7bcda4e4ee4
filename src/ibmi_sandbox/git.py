"""Source-control adapter backed by the ``git`` command line."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


class GitRepository:
    """A working tree whose checked-out branch can be queried."""

    def __init__(self, root: Path, git_exe: str = "git", timeout: float = 10):
        self.root = root
        self.git_exe = git_exe
        self.timeout = timeout

    async def current_branch_name(self) -> str | None:
        """Short name of the checked-out branch.

        Returns None on a detached HEAD, outside a repository, or if git
        cannot be run.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self.git_exe, "symbolic-ref", "--quiet", "--short", "HEAD",
                cwd=str(self.root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Could not read branch of %s: %s", self.root, e)
            return None
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("git timed out reading branch of %s", self.root)
            proc.kill()
            await proc.wait()
            return None
        if proc.returncode != 0:
            logger.debug(
                "No current branch in %s: %s", self.root, stderr.decode(errors="replace").strip()
            )
            return None
        return stdout.decode(errors="replace").strip() or None


class GitSourceControl:
    """Registered repositories, in registration order."""

    def __init__(self, roots: Sequence[Path] = (), git_exe: str = "git"):
        self._repositories = [GitRepository(Path(root), git_exe) for root in roots]

    async def get_repositories(self) -> Sequence[GitRepository]:
        return list(self._repositories)
