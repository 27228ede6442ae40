"""Tests for the gitproc exception hierarchy."""

import pytest

from gitproc.errors import (
    ConfigurationError,
    ExecFunctionConfigurationError,
    GitError,
    GitNotFoundError,
    GitProcError,
    OutputLimitExceededError,
    RepositoryDoesNotExistError,
)
from gitproc.git.classifier import GitErrorCode
from gitproc.git.process import GitResult


class TestGitProcError:
    """Tests for the base exception."""

    def test_message_only(self):
        """Test an error without a code."""
        error = GitProcError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.details == {}

    def test_with_code(self):
        """Test the code is shown in the string form."""
        error = GitProcError("Failed", code="SOME_CODE", details={"key": "value"})
        assert str(error) == "[SOME_CODE] Failed"
        assert error.to_dict() == {
            "error_type": "GitProcError",
            "message": "Failed",
            "code": "SOME_CODE",
            "details": {"key": "value"},
        }


class TestConfigurationErrors:
    """Tests for errors raised when git cannot be run."""

    @pytest.mark.parametrize(
        "error",
        [
            ExecFunctionConfigurationError("reason"),
            RepositoryDoesNotExistError("/missing"),
            GitNotFoundError("git"),
            OutputLimitExceededError(10),
        ],
        ids=lambda e: type(e).__name__,
    )
    def test_hierarchy(self, error):
        """Test every setup failure is a ConfigurationError."""
        assert isinstance(error, ConfigurationError)
        assert isinstance(error, GitProcError)
        assert not isinstance(error, GitError)

    def test_repository_does_not_exist(self):
        """Test the missing repository error carries the path."""
        error = RepositoryDoesNotExistError("/missing/repo")
        assert error.code == "RepositoryDoesNotExist"
        assert error.message == "Unable to find path to repository on disk."
        assert error.details == {"path": "/missing/repo"}

    def test_git_not_found(self):
        """Test the not-found error names the binary."""
        error = GitNotFoundError("/usr/bin/git")
        assert error.code == "GitNotFound"
        assert "/usr/bin/git" in error.message
        assert "LOCAL_GIT_DIRECTORY" not in error.message

    def test_git_not_found_with_directory(self):
        """Test the not-found error points at the configured directory."""
        error = GitNotFoundError("/opt/git/bin/git", "/opt/git")
        assert "LOCAL_GIT_DIRECTORY" in error.message
        assert error.details["git_dir"] == "/opt/git"

    def test_output_limit(self):
        """Test the size error explains how to raise the limit."""
        error = OutputLimitExceededError(1024, stream="stderr")
        assert error.code == "MAX_BUFFER_EXCEEDED"
        assert error.max_buffer == 1024
        assert error.stream == "stderr"
        assert "max_buffer" in error.message
        assert "1024" in error.message


class TestGitError:
    """Tests for GitError."""

    def test_classified(self):
        """Test a classified failure uses the description and code."""
        result = GitResult(
            stdout="",
            stderr="fatal: bad revision 'nope'",
            exit_code=128,
            git_error=GitErrorCode.BAD_REVISION,
            git_error_description="Bad revision.",
        )
        error = GitError(result, ["log", "nope"])

        assert error.message == "Bad revision."
        assert error.code == "BadRevision"
        assert error.exit_code == 128
        assert error.git_args == ("log", "nope")
        assert error.result is result
        assert error.details["stderr"] == "fatal: bad revision 'nope'"

    def test_unclassified_uses_stderr(self):
        """Test an unclassified failure falls back to stderr."""
        result = GitResult(stdout="out", stderr="error: odd", exit_code=1)
        error = GitError(result, ["frob"])
        assert error.message == "error: odd"
        assert error.code == "GIT_ERROR"

    def test_unclassified_uses_stdout(self):
        """Test stdout is used when stderr is empty."""
        result = GitResult(stdout="out", stderr="", exit_code=1)
        assert GitError(result, ["frob"]).message == "out"

    def test_no_output(self):
        """Test a failure without any output."""
        result = GitResult(stdout="", stderr="", exit_code=1)
        error = GitError(result, ["frob"])
        assert error.message == "Unknown error"
        assert "stderr" not in error.details

    def test_stderr_truncated_in_details(self):
        """Test long stderr is truncated in the details."""
        result = GitResult(stdout="", stderr="x" * 1000, exit_code=1)
        error = GitError(result, ["frob"])
        assert len(error.details["stderr"]) == 500
