"""Tests for local git discovery."""

import asyncio
import shutil
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from gitproc.config import Settings
from gitproc.git.locator import (
    GIT_EXEC_PATH,
    LOCAL_GIT_DIRECTORY,
    BinaryLocation,
    DiscoveredGit,
    GitLocator,
    find_git,
    get_locator,
    reset_locator,
)
from gitproc.utils.logging import LogCapture


@pytest.fixture
def fake_install(tmp_path: Path) -> DiscoveredGit:
    """Create a directory layout that looks like a git installation."""
    bin_dir = tmp_path / "git" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "git").write_text("")
    exec_path = tmp_path / "git" / "libexec" / "git-core"
    exec_path.mkdir(parents=True)
    return DiscoveredGit(
        path=str(bin_dir / "git"),
        exec_path=str(exec_path),
        version="git version 2.45.0",
    )


class TestBinaryLocation:
    """Tests for BinaryLocation."""

    def test_defaults(self):
        """Test a new location has not been searched."""
        location = BinaryLocation()
        assert location.searched is False
        assert location.found is False

    def test_found_requires_both_values(self):
        """Test found is only true with both paths."""
        assert BinaryLocation(git_dir="/opt/git").found is False
        assert BinaryLocation(git_dir="/opt/git", git_exec_path="/opt/x").found is True


class TestResolve:
    """Tests for GitLocator.resolve."""

    @pytest.mark.asyncio
    async def test_disabled_does_nothing(self):
        """Test no search happens without USE_LOCAL_GIT."""
        locator = GitLocator()
        with patch("gitproc.git.locator.find_git", new_callable=AsyncMock) as mock_find:
            location = await locator.resolve(Settings())

        mock_find.assert_not_called()
        assert location.searched is False

    @pytest.mark.asyncio
    async def test_explicit_location_skips_search(self):
        """Test no search happens when a location is configured."""
        locator = GitLocator()
        settings = Settings(use_local_git=True, local_git_directory="/opt/git")
        with patch("gitproc.git.locator.find_git", new_callable=AsyncMock) as mock_find:
            await locator.resolve(settings)

        mock_find.assert_not_called()

    @pytest.mark.asyncio
    async def test_discovery_success(self, fake_install):
        """Test a found installation is recorded."""
        locator = GitLocator()
        settings = Settings(use_local_git=True)
        with patch(
            "gitproc.git.locator.find_git",
            new_callable=AsyncMock,
            return_value=fake_install,
        ):
            location = await locator.resolve(settings)

        assert location.searched is True
        assert location.found is True
        assert location.git_dir == str(Path(fake_install.path).parent.parent)
        assert location.git_exec_path == fake_install.exec_path

    @pytest.mark.asyncio
    async def test_discovery_runs_once(self, fake_install):
        """Test later calls reuse the first result."""
        locator = GitLocator()
        settings = Settings(use_local_git=True)
        with patch(
            "gitproc.git.locator.find_git",
            new_callable=AsyncMock,
            return_value=fake_install,
        ) as mock_find:
            await locator.resolve(settings)
            await locator.resolve(settings)
            await locator.resolve(settings)

        assert mock_find.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_discovery_runs_once(self, fake_install):
        """Test simultaneous callers share a single search."""
        locator = GitLocator()
        settings = Settings(use_local_git=True)

        async def slow_find(binary):
            await asyncio.sleep(0.01)
            return fake_install

        with patch("gitproc.git.locator.find_git", side_effect=slow_find) as mock_find:
            results = await asyncio.gather(*(locator.resolve(settings) for _ in range(5)))

        assert mock_find.call_count == 1
        assert all(result.found for result in results)

    @pytest.mark.asyncio
    async def test_failure_is_remembered(self):
        """Test a failed search is logged and never retried."""
        locator = GitLocator()
        settings = Settings(use_local_git=True)

        with LogCapture() as capture:
            with patch(
                "gitproc.git.locator.find_git",
                new_callable=AsyncMock,
                side_effect=FileNotFoundError("'git' was not found on PATH"),
            ) as mock_find:
                first = await locator.resolve(settings)
                second = await locator.resolve(settings)

        assert mock_find.await_count == 1
        assert first.searched is True
        assert first.found is False
        assert second.found is False
        assert capture.has_message("Cannot find local git executable")

    @pytest.mark.asyncio
    async def test_missing_exec_path_is_failure(self, fake_install, tmp_path):
        """Test a reported exec-path that does not exist counts as not found."""
        locator = GitLocator()
        broken = DiscoveredGit(
            path=fake_install.path,
            exec_path=str(tmp_path / "nowhere"),
            version=fake_install.version,
        )
        with patch("gitproc.git.locator.find_git", new_callable=AsyncMock, return_value=broken):
            location = await locator.resolve(Settings(use_local_git=True))

        assert location.searched is True
        assert location.found is False

    @pytest.mark.asyncio
    async def test_runtime_error_is_failure(self):
        """Test git failing to report its exec-path counts as not found."""
        locator = GitLocator()
        with patch(
            "gitproc.git.locator.find_git",
            new_callable=AsyncMock,
            side_effect=RuntimeError("git --exec-path exited with code 1"),
        ):
            location = await locator.resolve(Settings(use_local_git=True))

        assert location.searched is True
        assert location.found is False


class TestEnvironment:
    """Tests for GitLocator.environment."""

    def test_empty_by_default(self):
        """Test nothing is set without configuration."""
        assert GitLocator().environment(Settings()) == {}

    def test_explicit_values(self):
        """Test configured values are passed through."""
        settings = Settings(
            local_git_directory="/opt/git",
            git_exec_path="/opt/git/libexec/git-core",
        )
        assert GitLocator().environment(settings) == {
            LOCAL_GIT_DIRECTORY: "/opt/git",
            GIT_EXEC_PATH: "/opt/git/libexec/git-core",
        }

    def test_partial_explicit_value(self):
        """Test only the configured value is set."""
        settings = Settings(git_exec_path="/opt/git/libexec/git-core")
        assert GitLocator().environment(settings) == {
            GIT_EXEC_PATH: "/opt/git/libexec/git-core",
        }

    def test_explicit_values_win_over_discovered(self):
        """Test discovered values never replace configured ones."""
        locator = GitLocator()
        locator.location = BinaryLocation(
            git_dir="/discovered", git_exec_path="/discovered/libexec", searched=True
        )
        settings = Settings(use_local_git=True, local_git_directory="/opt/git")
        assert locator.environment(settings) == {LOCAL_GIT_DIRECTORY: "/opt/git"}

    def test_discovered_values(self):
        """Test discovered values are used when nothing is configured."""
        locator = GitLocator()
        locator.location = BinaryLocation(
            git_dir="/discovered", git_exec_path="/discovered/libexec", searched=True
        )
        assert locator.environment(Settings(use_local_git=True)) == {
            LOCAL_GIT_DIRECTORY: "/discovered",
            GIT_EXEC_PATH: "/discovered/libexec",
        }

    def test_discovered_values_need_use_local_git(self):
        """Test a discovery result is ignored once USE_LOCAL_GIT is off."""
        locator = GitLocator()
        locator.location = BinaryLocation(
            git_dir="/discovered", git_exec_path="/discovered/libexec", searched=True
        )
        assert locator.environment(Settings()) == {}


class TestSharedLocator:
    """Tests for the process-wide locator."""

    def test_get_locator_is_shared(self):
        """Test the same instance is returned."""
        assert get_locator() is get_locator()

    def test_reset_locator(self):
        """Test reset creates a new instance."""
        first = get_locator()
        reset_locator()
        assert get_locator() is not first

    def test_reset_clears_result(self):
        """Test GitLocator.reset forgets a previous search."""
        locator = GitLocator()
        locator.location.searched = True
        locator.reset()
        assert locator.location.searched is False


class TestFindGit:
    """Tests for find_git."""

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        """Test a binary that is not on PATH raises."""
        with pytest.raises(FileNotFoundError):
            await find_git("definitely-not-a-git-binary")

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
    async def test_real_git(self):
        """Test the host git reports its exec-path and version."""
        discovered = await find_git("git")
        assert Path(discovered.path).is_absolute()
        assert discovered.exec_path
        assert discovered.version.startswith("git version")
