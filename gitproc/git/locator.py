"""Discovery of a locally installed git.

When ``USE_LOCAL_GIT`` is enabled and no explicit ``LOCAL_GIT_DIRECTORY`` or
``GIT_EXEC_PATH`` is configured, the host is searched once for a git
executable. The result is kept on a :class:`GitLocator` and reused by every
later invocation, whether or not the search succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from typing import Optional

from gitproc.config import Settings

logger = logging.getLogger(__name__)

LOCAL_GIT_DIRECTORY = "LOCAL_GIT_DIRECTORY"
GIT_EXEC_PATH = "GIT_EXEC_PATH"


@dataclass
class BinaryLocation:
    """Where git was found.

    Attributes:
        git_dir: Directory containing ``bin/git``.
        git_exec_path: Git exec-path holding the helper programs.
        searched: Whether discovery has already been attempted.
    """

    git_dir: Optional[str] = None
    git_exec_path: Optional[str] = None
    searched: bool = False

    @property
    def found(self) -> bool:
        return self.git_dir is not None and self.git_exec_path is not None


@dataclass(frozen=True)
class DiscoveredGit:
    """A git executable found on the host."""

    path: str
    exec_path: str
    version: str


async def _run_for_output(*command: str) -> str:
    proc = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise RuntimeError(
            f"{' '.join(command)} exited with code {proc.returncode}: "
            f"{stderr.decode('utf-8', errors='replace').strip()}"
        )
    return stdout.decode("utf-8", errors="replace").strip()


async def find_git(git_binary: str = "git") -> DiscoveredGit:
    """Search the host for a git executable.

    Args:
        git_binary: Name or path of the binary to look up on PATH.

    Returns:
        The resolved executable, its exec-path and version string.

    Raises:
        FileNotFoundError: If no executable is found on PATH.
        RuntimeError: If the executable cannot report its exec-path.
    """
    path = shutil.which(git_binary)
    if path is None:
        raise FileNotFoundError(f"'{git_binary}' was not found on PATH")

    # Follow symlinks so the install directory is the real one
    path = os.path.realpath(path)
    exec_path = await _run_for_output(path, "--exec-path")
    version = await _run_for_output(path, "--version")
    return DiscoveredGit(path=path, exec_path=exec_path, version=version)


class GitLocator:
    """Owns the once-per-process git discovery result."""

    def __init__(self) -> None:
        self.location = BinaryLocation()
        self._lock = asyncio.Lock()

    async def resolve(self, settings: Settings) -> BinaryLocation:
        """Run discovery if enabled and not yet attempted.

        Discovery failures are logged and remembered; they are never retried.

        Args:
            settings: Settings deciding whether discovery is enabled.

        Returns:
            The current binary location.
        """
        if not settings.discovery_enabled or self.location.searched:
            return self.location

        async with self._lock:
            # Another caller may have finished discovery while we waited
            if self.location.searched:
                return self.location
            await self._discover(settings)

        return self.location

    async def _discover(self, settings: Settings) -> None:
        logger.info("USE_LOCAL_GIT is set. Trying to use the local git installation.")
        try:
            git = await find_git(settings.git_binary)
            # The git directory is two levels above the executable (<dir>/bin/git)
            git_dir = os.path.dirname(os.path.dirname(git.path))
            if not (os.path.exists(git_dir) and os.path.exists(git.exec_path)):
                raise FileNotFoundError(
                    f"Cannot find local git installation: {git.path} "
                    f"(exec-path {git.exec_path})"
                )
            self.location.git_dir = git_dir
            self.location.git_exec_path = git.exec_path
            logger.info(
                "Using local git executable. Git path: %s. Git exec-path: %s. [Version: %s]",
                git.path,
                git.exec_path,
                git.version,
            )
        except (OSError, RuntimeError) as e:
            logger.error("Cannot find local git executable: %s", e)
            self.location.git_dir = None
            self.location.git_exec_path = None
        finally:
            self.location.searched = True

    def environment(self, settings: Settings) -> dict[str, str]:
        """Get the git location variables for a child process.

        Explicitly configured values always win over discovered ones, and
        discovered values are only used when nothing was configured.

        Args:
            settings: Settings holding any explicit location.

        Returns:
            Mapping with ``LOCAL_GIT_DIRECTORY`` and/or ``GIT_EXEC_PATH``.
        """
        env: dict[str, str] = {}
        if settings.has_explicit_location:
            if settings.local_git_directory:
                env[LOCAL_GIT_DIRECTORY] = settings.local_git_directory
            if settings.git_exec_path:
                env[GIT_EXEC_PATH] = settings.git_exec_path
        elif settings.use_local_git and self.location.found:
            env[LOCAL_GIT_DIRECTORY] = self.location.git_dir  # type: ignore[assignment]
            env[GIT_EXEC_PATH] = self.location.git_exec_path  # type: ignore[assignment]
        return env

    def reset(self) -> None:
        """Forget the discovery result (useful for testing)."""
        self.location = BinaryLocation()


# Process-wide default instance
_locator: Optional[GitLocator] = None


def get_locator() -> GitLocator:
    """Get the shared locator, creating it if necessary."""
    global _locator
    if _locator is None:
        _locator = GitLocator()
    return _locator


def reset_locator() -> None:
    """Discard the shared locator (useful for testing)."""
    global _locator
    _locator = None
