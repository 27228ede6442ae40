"""Process execution strategies for git.

A strategy turns an :class:`~gitproc.git.process.ExecutionRequest` into a
raw :class:`GitProcessResult`. Git exiting with a non-zero code is a normal
result here; only failures to run git at all are raised.
"""

from __future__ import annotations

import asyncio
import errno
import functools
import inspect
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

from gitproc.errors import (
    ExecFunctionConfigurationError,
    GitNotFoundError,
    GitSpawnError,
    OutputLimitExceededError,
    RepositoryDoesNotExistError,
)
from gitproc.git.locator import GIT_EXEC_PATH, LOCAL_GIT_DIRECTORY

if TYPE_CHECKING:
    from gitproc.git.process import ExecutionRequest

logger = logging.getLogger(__name__)

# Read size when draining child output
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class GitProcessResult:
    """Raw outcome of one git invocation."""

    stdout: str
    stderr: str
    exit_code: int


def _encode_stdin(data: Any, encoding: str) -> Optional[bytes]:
    if data is None:
        return None
    if isinstance(data, bytes):
        return data
    return str(data).encode(encoding)


def _decode(data: bytes, encoding: str) -> str:
    return data.decode(encoding, errors="replace")


def _not_found_error(path: str, binary: str, env: Mapping[str, str]) -> Exception:
    """Pick the error for an ENOENT raised while starting git."""
    if not os.path.exists(path):
        return RepositoryDoesNotExistError(path)
    return GitNotFoundError(binary, env.get(LOCAL_GIT_DIRECTORY))


def resolve_git_binary(env: Mapping[str, str], default: str = "git") -> str:
    """Get the git executable to run.

    Args:
        env: Environment holding an optional ``LOCAL_GIT_DIRECTORY``.
        default: Binary used when no local directory is configured.

    Returns:
        ``$LOCAL_GIT_DIRECTORY/bin/git`` when set, otherwise ``default``.
    """
    git_dir = env.get(LOCAL_GIT_DIRECTORY)
    if git_dir:
        return os.path.join(git_dir, "bin", "git")
    return default


class ExecutionStrategy(ABC):
    """Abstract way of running a git command."""

    @abstractmethod
    async def run(
        self,
        request: ExecutionRequest,
        env: Mapping[str, str],
        max_buffer: int,
    ) -> GitProcessResult:
        """Run the request and collect its output.

        Args:
            request: The git invocation to perform.
            env: Git location variables merged into the child environment.
            max_buffer: Maximum bytes accepted on each output stream.

        Returns:
            GitProcessResult with decoded output and exit code.
        """


class GitProcessStrategy(ExecutionStrategy):
    """Spawn the git binary directly."""

    def __init__(self, git_binary: str = "git") -> None:
        self.git_binary = git_binary

    async def run(
        self,
        request: ExecutionRequest,
        env: Mapping[str, str],
        max_buffer: int,
    ) -> GitProcessResult:
        options = request.options
        binary = resolve_git_binary(env, self.git_binary)

        child_env = os.environ.copy()
        child_env.update(env)
        child_env.update(options.env)

        stdin = _encode_stdin(options.stdin, options.encoding)

        try:
            proc = await asyncio.create_subprocess_exec(
                binary,
                *request.args,
                cwd=request.path,
                env=child_env,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise _not_found_error(request.path, binary, env) from None
        except NotADirectoryError:
            raise RepositoryDoesNotExistError(request.path) from None
        except OSError as e:
            # Present but not runnable, e.g. missing execute permission
            raise GitSpawnError(binary, e.strerror or str(e)) from e

        if options.process_callback is not None:
            options.process_callback(proc)

        tasks = [
            asyncio.ensure_future(_drain(proc.stdout, max_buffer, "stdout")),
            asyncio.ensure_future(_drain(proc.stderr, max_buffer, "stderr")),
        ]
        if stdin is not None:
            tasks.append(asyncio.ensure_future(_feed(proc, stdin)))
        try:
            outputs = await asyncio.gather(*tasks)
        except OutputLimitExceededError:
            for task in tasks:
                task.cancel()
            if proc.returncode is None:
                proc.kill()
            await proc.wait()
            raise

        exit_code = await proc.wait()
        return GitProcessResult(
            stdout=_decode(outputs[0], options.encoding),
            stderr=_decode(outputs[1], options.encoding),
            exit_code=exit_code,
        )


async def _drain(stream: Optional[asyncio.StreamReader], limit: int, name: str) -> bytes:
    """Read a stream to EOF, failing once it exceeds ``limit`` bytes."""
    if stream is None:
        return b""
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise OutputLimitExceededError(limit, stream=name)
        chunks.append(chunk)
    return b"".join(chunks)


async def _feed(proc: asyncio.subprocess.Process, data: bytes) -> None:
    assert proc.stdin is not None
    try:
        proc.stdin.write(data)
        await proc.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # git exited without reading all of its input; its exit code tells why
        logger.debug("git closed stdin before all input was written")
    finally:
        proc.stdin.close()


class ExternalExecStrategy(ExecutionStrategy):
    """Delegate execution to a caller-supplied function.

    The function is called as ``exec_fn(args, cwd=path, env=env)`` and may be
    sync or async; sync functions run in the default thread pool. It returns
    ``(stdout, stderr)`` when git succeeds and raises otherwise; an exception
    carrying an integer ``returncode`` (such as
    :class:`subprocess.CalledProcessError`) is read as git's exit code. The
    caller is responsible for running the right git binary.
    """

    async def run(
        self,
        request: ExecutionRequest,
        env: Mapping[str, str],
        max_buffer: int,
    ) -> GitProcessResult:
        options = request.options
        if LOCAL_GIT_DIRECTORY not in env or GIT_EXEC_PATH not in env:
            raise ExecFunctionConfigurationError(
                f"{LOCAL_GIT_DIRECTORY} and {GIT_EXEC_PATH} must be specified "
                "when using an exec function."
            )
        if options.stdin is not None:
            raise ExecFunctionConfigurationError(
                "Standard input is not available when using an exec function."
            )
        assert options.exec_fn is not None

        child_env = dict(env)
        child_env.update(options.env)

        exec_fn = options.exec_fn
        call = functools.partial(exec_fn, list(request.args), cwd=request.path, env=child_env)

        try:
            if inspect.iscoroutinefunction(exec_fn):
                result = await call()
            else:
                # Sync functions run in the thread pool so other executions keep going
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(None, call)
            if inspect.isawaitable(result):
                result = await result
            stdout, stderr = result
            exit_code = 0
        except Exception as e:
            code = _exit_code_of(e)
            if code is None:
                if _is_enoent(e):
                    binary = resolve_git_binary(env)
                    raise _not_found_error(request.path, binary, env) from e
                raise
            exit_code = code
            stdout = _output_of(e, "stdout", "output")
            stderr = _output_of(e, "stderr")

        stdout = _as_text(stdout, options.encoding)
        stderr = _as_text(stderr, options.encoding)
        _check_size(stdout, options.encoding, max_buffer, "stdout")
        _check_size(stderr, options.encoding, max_buffer, "stderr")
        return GitProcessResult(stdout=stdout, stderr=stderr, exit_code=exit_code)


def _exit_code_of(error: Exception) -> Optional[int]:
    """Get a process exit code carried by an exception, if any."""
    for attr in ("returncode", "exit_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _is_enoent(error: Exception) -> bool:
    return isinstance(error, FileNotFoundError) or (
        isinstance(error, OSError) and error.errno == errno.ENOENT
    )


def _output_of(error: Exception, *attrs: str) -> Any:
    for attr in attrs:
        value = getattr(error, attr, None)
        if value is not None:
            return value
    return ""


def _as_text(value: Any, encoding: str) -> str:
    if isinstance(value, bytes):
        return _decode(value, encoding)
    return "" if value is None else str(value)


def _check_size(text: str, encoding: str, limit: int, name: str) -> None:
    if len(text.encode(encoding, errors="replace")) > limit:
        raise OutputLimitExceededError(limit, stream=name)


def select_strategy(request: ExecutionRequest, git_binary: str = "git") -> ExecutionStrategy:
    """Choose how to run a request based on its options."""
    if request.options.exec_fn is not None:
        return ExternalExecStrategy()
    return GitProcessStrategy(git_binary)
