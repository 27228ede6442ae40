"""Centralized exception hierarchy for gitproc.

All errors raised by gitproc derive from :class:`GitProcError`, so callers can
catch the whole family at once or pick out configuration problems and git
failures individually.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from gitproc.git.process import GitResult


class GitProcError(Exception):
    """Base exception for all gitproc errors.

    Attributes:
        message: Human-readable error message.
        code: Optional error code for programmatic handling.
        details: Optional dictionary with additional error context.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(GitProcError):
    """Raised when git cannot be run because of how it is set up."""
    pass


class ExecFunctionConfigurationError(ConfigurationError):
    """Raised when an exec function is supplied without the required setup."""

    def __init__(self, reason: str):
        super().__init__(
            message=reason,
            code="EXEC_FUNCTION_CONFIG",
        )


class RepositoryDoesNotExistError(ConfigurationError):
    """Raised when the working directory for a git command is missing."""

    def __init__(self, path: str):
        super().__init__(
            message="Unable to find path to repository on disk.",
            code="RepositoryDoesNotExist",
            details={"path": path},
        )


class GitNotFoundError(ConfigurationError):
    """Raised when the git executable cannot be spawned."""

    def __init__(self, binary: str, git_dir: Optional[str] = None):
        message = f"Git could not be found at the expected path: '{binary}'."
        if git_dir:
            message += (
                f" Confirm that LOCAL_GIT_DIRECTORY ('{git_dir}') contains bin/git."
            )
        super().__init__(
            message=message,
            code="GitNotFound",
            details={"binary": binary, "git_dir": git_dir},
        )


class GitSpawnError(ConfigurationError):
    """Raised when the git executable exists but cannot be started."""

    def __init__(self, binary: str, reason: str):
        super().__init__(
            message=f"Git could not be started from '{binary}': {reason}",
            code="GitSpawnFailed",
            details={"binary": binary, "reason": reason},
        )


class OutputLimitExceededError(ConfigurationError):
    """Raised when git produces more output than the buffer allows."""

    def __init__(self, max_buffer: int, stream: str = "stdout"):
        super().__init__(
            message=(
                f"The output from the command could not fit into the allocated "
                f"{stream} buffer. Set max_buffer to a larger value than "
                f"{max_buffer} bytes."
            ),
            code="MAX_BUFFER_EXCEEDED",
            details={"max_buffer": max_buffer, "stream": stream},
        )
        self.max_buffer = max_buffer
        self.stream = stream


# =============================================================================
# Git Errors
# =============================================================================

def _result_message(result: GitResult) -> str:
    if result.git_error_description:
        return result.git_error_description
    if result.stderr:
        return result.stderr
    if result.stdout:
        return result.stdout
    return "Unknown error"


class GitError(GitProcError):
    """Raised when git exits with a code or error the caller did not expect.

    Attributes:
        result: The full outcome of the failed command.
        git_args: The git arguments of the failed command.
    """

    def __init__(self, result: GitResult, args: Sequence[str]):
        code = result.git_error.value if result.git_error else "GIT_ERROR"
        details: dict[str, Any] = {"exit_code": result.exit_code}
        if result.stderr:
            details["stderr"] = result.stderr[:500]  # Truncate for logging
        super().__init__(_result_message(result), code, details)
        self.result = result
        self.git_args = tuple(args)

    @property
    def exit_code(self) -> int:
        return self.result.exit_code
