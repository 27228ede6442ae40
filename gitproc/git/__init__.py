"""Git process execution for gitproc.

This package locates git, runs it and turns its raw output into typed
results and classified errors.
"""

from gitproc.git.classifier import (
    GIT_ERROR_PATTERNS,
    ClassifiedError,
    GitErrorCode,
    classify,
    get_description,
    parse_error,
)
from gitproc.git.executor import (
    ExecutionStrategy,
    ExternalExecStrategy,
    GitProcessResult,
    GitProcessStrategy,
    select_strategy,
)
from gitproc.git.locator import (
    BinaryLocation,
    GitLocator,
    find_git,
    get_locator,
    reset_locator,
)
from gitproc.git.process import (
    ExecutionOptions,
    ExecutionRequest,
    Git,
    GitResult,
    git,
    git_version,
)
from gitproc.git.utils import find_git_root, revision_spec, to_revision_path

__all__ = [
    # Entry points
    "git",
    "git_version",
    "Git",
    # Request and result types
    "ExecutionOptions",
    "ExecutionRequest",
    "GitResult",
    "GitProcessResult",
    # Classification
    "GIT_ERROR_PATTERNS",
    "ClassifiedError",
    "GitErrorCode",
    "classify",
    "get_description",
    "parse_error",
    # Strategies
    "ExecutionStrategy",
    "ExternalExecStrategy",
    "GitProcessStrategy",
    "select_strategy",
    # Binary location
    "BinaryLocation",
    "GitLocator",
    "find_git",
    "get_locator",
    "reset_locator",
    # Utility functions
    "find_git_root",
    "revision_spec",
    "to_revision_path",
]
