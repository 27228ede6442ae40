"""Pytest configuration and fixtures for gitproc tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from gitproc.config import Settings, reset_settings
from gitproc.git import Git, GitLocator, reset_locator

# Variables that change how Settings and the locator behave
LOCATION_ENV_VARS = [
    "USE_LOCAL_GIT",
    "LOCAL_GIT_DIRECTORY",
    "GIT_EXEC_PATH",
    "GITPROC_GIT_BINARY",
    "GITPROC_MAX_BUFFER",
    "GITPROC_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean git location environment variables for every test."""
    original = {}
    for var in LOCATION_ENV_VARS:
        original[var] = os.environ.pop(var, None)

    reset_settings()
    reset_locator()

    yield

    # Restore original values
    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        else:
            os.environ.pop(var, None)

    reset_settings()
    reset_locator()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings() -> Settings:
    """Create settings that neither discover nor configure a git location."""
    return Settings()


@pytest.fixture
def exec_settings() -> Settings:
    """Create settings with an explicit git location, as exec functions require."""
    return Settings(
        local_git_directory="/opt/git",
        git_exec_path="/opt/git/libexec/git-core",
    )


@pytest.fixture
def locator() -> GitLocator:
    """Create a fresh locator."""
    return GitLocator()


@pytest.fixture
def runner(test_settings: Settings, locator: GitLocator) -> Git:
    """Create a runner with isolated settings and locator."""
    return Git(settings=test_settings, locator=locator)


@pytest.fixture
def exec_runner(exec_settings: Settings, locator: GitLocator) -> Git:
    """Create a runner configured for exec functions."""
    return Git(settings=exec_settings, locator=locator)


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c", "user.name=gitproc tests",
            "-c", "user.email=tests@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(temp_dir: Path) -> Path:
    """Create a real repository with one commit.

    Tracked files:
        README.md: UTF-8 text with a non-ASCII character.
        src/data.bin: Bytes that are not valid UTF-8.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = temp_dir / "repo"
    repo.mkdir()
    (repo / "README.md").write_bytes("# gitproc\n\nCafé line\n".encode("utf-8"))
    (repo / "src").mkdir()
    (repo / "src" / "data.bin").write_bytes(bytes(range(256)))

    _git(repo, "init", "-q")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "Initial commit")
    return repo
