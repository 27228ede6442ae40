"""Running git and deciding whether its outcome is acceptable.

:func:`git` is the entry point every feature goes through. It locates git,
runs it, classifies unexpected failures and either returns a
:class:`GitResult` or raises :class:`~gitproc.errors.GitError`. Callers
describe what they consider success with two sets:

- ``success_exit_codes``: exit codes that are fine as they are;
- ``expected_errors``: classified failures that are fine regardless of the
  exit code git used to report them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from gitproc.config import Settings, get_settings
from gitproc.errors import GitError
from gitproc.git.classifier import GitErrorCode, classify
from gitproc.git.executor import (
    ExternalExecStrategy,
    GitProcessResult,
    select_strategy,
)
from gitproc.git.locator import GitLocator, get_locator

logger = logging.getLogger(__name__)

# exec_fn(args, cwd=..., env=...) -> (stdout, stderr), sync or async
ExecFunction = Callable[..., Union[tuple[Any, Any], Awaitable[tuple[Any, Any]]]]
ProcessCallback = Callable[[Any], None]


@dataclass(frozen=True)
class ExecutionOptions:
    """Options for a single git invocation.

    Attributes:
        success_exit_codes: Exit codes that indicate success to the caller.
        expected_errors: Classified errors the caller handles itself.
        exec_fn: Function run instead of the git binary. Requires
            ``LOCAL_GIT_DIRECTORY`` and ``GIT_EXEC_PATH``; only ``env`` is
            honored alongside it.
        env: Environment overrides for the child process.
        encoding: Decoding applied to stdout and stderr.
        process_callback: Called with the spawned process.
        stdin: Data written to git's standard input.
        max_buffer: Per-stream output ceiling in bytes; None uses the
            configured default.
    """

    success_exit_codes: frozenset[int] = frozenset({0})
    expected_errors: frozenset[GitErrorCode] = frozenset()
    exec_fn: Optional[ExecFunction] = None
    env: Mapping[str, str] = field(default_factory=dict)
    encoding: str = "utf-8"
    process_callback: Optional[ProcessCallback] = None
    stdin: Optional[Union[str, bytes]] = None
    max_buffer: Optional[int] = None

    def __post_init__(self) -> None:
        # Accept any iterable for the sets while keeping the record immutable
        object.__setattr__(self, "success_exit_codes", frozenset(self.success_exit_codes))
        object.__setattr__(self, "expected_errors", frozenset(self.expected_errors))
        object.__setattr__(self, "env", dict(self.env))
        if self.max_buffer is not None and self.max_buffer < 1:
            raise ValueError(f"max_buffer must be at least 1, got {self.max_buffer}")


@dataclass(frozen=True)
class ExecutionRequest:
    """A git invocation: arguments, working directory and options."""

    args: tuple[str, ...]
    path: str
    name: str
    options: ExecutionOptions = field(default_factory=ExecutionOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "path", str(self.path))

    @property
    def command_line(self) -> str:
        return " ".join(["git", *self.args])


@dataclass(frozen=True)
class GitResult:
    """Outcome of a git invocation the caller accepted.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        exit_code: Process exit code.
        git_error: Classified error; None when the exit code was a success
            code or the failure was not recognized.
        git_error_description: Human-readable text for ``git_error``.
    """

    stdout: str
    stderr: str
    exit_code: int
    git_error: Optional[GitErrorCode] = None
    git_error_description: Optional[str] = None


class Git:
    """Runs git requests against a locator and settings."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        locator: Optional[GitLocator] = None,
    ):
        """Initialize the runner.

        Args:
            settings: Settings to use; defaults to the loaded global settings.
            locator: Binary locator; defaults to the shared process-wide one.
        """
        self._settings = settings
        self.locator = locator or get_locator()

    @property
    def settings(self) -> Settings:
        return self._settings if self._settings is not None else get_settings()

    async def run(self, request: ExecutionRequest) -> GitProcessResult:
        """Run a request and return the raw process result."""
        settings = self.settings
        strategy = select_strategy(request, settings.git_binary)
        if not isinstance(strategy, ExternalExecStrategy):
            await self.locator.resolve(settings)
        env = self.locator.environment(settings)
        max_buffer = request.options.max_buffer
        if max_buffer is None:
            max_buffer = settings.max_buffer

        logger.debug("Running %s (%s) in %s", request.command_line, request.name, request.path)
        return await strategy.run(request, env, max_buffer)

    async def execute(self, request: ExecutionRequest) -> GitResult:
        """Run a request and apply the caller's acceptance rules.

        Returns:
            GitResult when the exit code or classified error is accepted.

        Raises:
            GitError: If neither the exit code nor the classified error is
                accepted.
            ConfigurationError: If git could not be run at all.
        """
        options = request.options
        raw = await self.run(request)

        if raw.exit_code in options.success_exit_codes:
            return GitResult(stdout=raw.stdout, stderr=raw.stderr, exit_code=raw.exit_code)

        classified = classify(raw.stderr, raw.stdout)
        result = GitResult(
            stdout=raw.stdout,
            stderr=raw.stderr,
            exit_code=raw.exit_code,
            git_error=classified.code if classified else None,
            git_error_description=classified.description if classified else None,
        )

        if result.git_error is not None and result.git_error in options.expected_errors:
            return result

        self._log_failure(request, result)
        raise GitError(result, request.args)

    def _log_failure(self, request: ExecutionRequest, result: GitResult) -> None:
        logger.error(
            "The command `%s` exited with an unexpected code: %s. "
            "The caller should either handle this error, or expect that exit code.",
            request.command_line,
            result.exit_code,
        )
        if result.stdout:
            logger.error(result.stdout)
        if result.stderr:
            logger.error(result.stderr)
        if result.git_error is not None:
            logger.error(
                "(The error was parsed as %s: %s)",
                result.git_error.value,
                result.git_error_description,
            )


async def git(
    args: Sequence[str],
    path: str,
    name: str,
    options: Optional[ExecutionOptions] = None,
    runner: Optional[Git] = None,
) -> GitResult:
    """Shell out to git with the given arguments, at the given path.

    Args:
        args: The arguments to pass to git.
        path: The working directory for the command.
        name: The caller's name for the command, used in diagnostics.
        options: Execution options; defaults accept only exit code 0.
        runner: Runner to use; defaults to one with global settings and the
            shared locator.

    Returns:
        GitResult for an accepted outcome.

    Raises:
        GitError: If the exit code or classified error is unexpected.
    """
    request = ExecutionRequest(
        args=tuple(args),
        path=str(path),
        name=name,
        options=options or ExecutionOptions(),
    )
    return await (runner or Git()).execute(request)


async def git_version(
    options: Optional[ExecutionOptions] = None,
    runner: Optional[Git] = None,
) -> str:
    """Get the output of ``git --version``."""
    request = ExecutionRequest(
        args=("--version",),
        path=".",
        name="gitVersion",
        options=options or ExecutionOptions(),
    )
    raw = await (runner or Git()).run(request)
    return raw.stdout.strip()
