"""gitproc - typed access to the git command line."""

__version__ = "0.1.0"

from gitproc.commands import get_blob_contents, get_text_contents
from gitproc.errors import (
    ConfigurationError,
    ExecFunctionConfigurationError,
    GitError,
    GitNotFoundError,
    GitProcError,
    GitSpawnError,
    OutputLimitExceededError,
    RepositoryDoesNotExistError,
)
from gitproc.git import (
    ExecutionOptions,
    ExecutionRequest,
    Git,
    GitErrorCode,
    GitResult,
    git,
    git_version,
)

__all__ = [
    "__version__",
    "git",
    "git_version",
    "Git",
    "ExecutionOptions",
    "ExecutionRequest",
    "GitResult",
    "GitErrorCode",
    "get_text_contents",
    "get_blob_contents",
    "GitProcError",
    "ConfigurationError",
    "ExecFunctionConfigurationError",
    "GitError",
    "GitNotFoundError",
    "GitSpawnError",
    "OutputLimitExceededError",
    "RepositoryDoesNotExistError",
]
