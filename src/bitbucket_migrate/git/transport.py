"""Repository transport: the git and filesystem operations of a migration."""

import asyncio
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from ..utils.text import mask_credentials
from .exceptions import GitCommandError

PLACEHOLDER_README = '# Restricted branch name\n'


class RepositoryTransport(ABC):
    """Operations the migration pipeline needs on a local repository."""

    @abstractmethod
    async def remove_path(self, path: str) -> None:
        """Delete a working copy, ignoring a missing path."""

    @abstractmethod
    async def clone_bare(self, url: str, path: str) -> None:
        """Clone ``url`` as a bare repository into ``<path>/.git``."""

    @abstractmethod
    async def convert_to_working_copy(self, path: str) -> None:
        """Turn the bare clone at ``path`` into a checked-out working copy."""

    @abstractmethod
    async def branch_exists(self, path: str, branch: str) -> bool:
        """Whether a local branch exists in the working copy."""

    @abstractmethod
    async def rename_branch(self, path: str, old: str, new: str) -> None:
        """Rename a local branch."""

    @abstractmethod
    async def create_placeholder_branch(
        self, path: str, branch: str, author: Dict[str, str], return_to: str
    ) -> None:
        """Create an orphan branch holding a single guard commit.

        The working copy is checked out on ``return_to`` afterwards.
        """

    @abstractmethod
    async def push_mirror(self, path: str, url: str) -> None:
        """Push every branch and tag to ``url``."""


class GitTransport(RepositoryTransport):
    """Repository transport backed by the ``git`` executable."""

    def __init__(self, timeout: int = 3600, executable: str = 'git'):
        """Initialize git transport.

        Args:
            timeout: Seconds each git invocation may run
            executable: Git executable name or path
        """
        self.timeout = timeout
        self.executable = executable
        self.logger = logger.bind(component='GitTransport')

    async def _run_git_command(
        self, args: List[str], work_dir: Optional[str] = None, check: bool = True
    ) -> int:
        """Run a git command.

        Args:
            args: Git arguments, without the executable
            work_dir: Working directory
            check: Raise on a non-zero exit status

        Returns:
            Process exit status

        Raises:
            GitCommandError: On timeout, or on failure when ``check`` is set
        """
        cmd = [self.executable, *args]
        masked_cmd = [mask_credentials(part) for part in cmd]
        self.logger.trace(f'Executing git command: {" ".join(masked_cmd)}')

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=work_dir,
        )

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            self.logger.error(f'Git command timed out after {self.timeout} seconds')
            raise GitCommandError(masked_cmd)
        finally:
            # Timeouts and cancellation must not leave the child running
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        if check and process.returncode != 0:
            error_output = mask_credentials(stderr.decode(errors='replace'))
            raise GitCommandError(masked_cmd, process.returncode, error_output)

        return process.returncode

    async def remove_path(self, path: str) -> None:
        """Delete a working copy recursively.

        Args:
            path: Working copy directory, may be missing
        """
        if os.path.lexists(path):
            shutil.rmtree(path)
            self.logger.trace(f'Removed {path}')

    async def clone_bare(self, url: str, path: str) -> None:
        """Clone every ref of a repository as the ``.git`` directory of ``path``.

        Args:
            url: Authenticated clone URL
            path: Working copy directory, created if missing
        """
        Path(path).mkdir(parents=True, exist_ok=True)
        await self._run_git_command(
            ['clone', '--quiet', '--bare', url, os.path.join(path, '.git')]
        )

    async def convert_to_working_copy(self, path: str) -> None:
        """Unset the bare flag and check out the default branch.

        Args:
            path: Working copy directory holding a bare ``.git``
        """
        await self._run_git_command(['config', '--bool', 'core.bare', 'false'], path)
        await self._run_git_command(['reset', '--quiet', '--hard'], path)

    async def branch_exists(self, path: str, branch: str) -> bool:
        """Check for a local branch.

        Args:
            path: Working copy directory
            branch: Branch name

        Returns:
            True if ``refs/heads/<branch>`` exists
        """
        returncode = await self._run_git_command(
            ['show-ref', '--verify', '--quiet', f'refs/heads/{branch}'],
            path,
            check=False,
        )
        return returncode == 0

    async def rename_branch(self, path: str, old: str, new: str) -> None:
        """Rename a local branch, moving HEAD along if it points at it."""
        await self._run_git_command(['branch', '-m', old, new], path)

    async def create_placeholder_branch(
        self, path: str, branch: str, author: Dict[str, str], return_to: str
    ) -> None:
        """Create an orphan branch with a single README commit.

        Args:
            path: Working copy directory
            branch: Name of the placeholder branch
            author: Commit identity with ``name`` and ``email`` keys
            return_to: Branch checked out afterwards
        """
        await self._run_git_command(['config', 'user.email', author['email']], path)
        await self._run_git_command(['config', 'user.name', author['name']], path)
        await self._run_git_command(['checkout', '--quiet', '--orphan', branch], path)
        await self._run_git_command(['reset', '--quiet', '--hard'], path)
        await self._run_git_command(['clean', '-xdf', '--quiet'], path)

        Path(path, 'README.md').write_text(PLACEHOLDER_README, encoding='utf-8')

        await self._run_git_command(['add', 'README.md'], path)
        await self._run_git_command(
            ['commit', '--quiet', '--no-verify', '-m', 'Initial commit'], path
        )
        await self._run_git_command(['checkout', '--quiet', '-f', return_to], path)

    async def push_mirror(self, path: str, url: str) -> None:
        """Push all branches and tags, mirroring the local refs.

        Args:
            path: Working copy directory
            url: Authenticated destination URL
        """
        await self._run_git_command(['push', '--quiet', '--mirror', url], path)
