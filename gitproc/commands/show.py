"""Reading file contents from a repository with ``git show``."""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Optional

from gitproc.git.process import ExecutionOptions, Git, git
from gitproc.git.utils import revision_spec, to_revision_path

# git show exits with 1 when the path is not present at the revision
SUCCESS_EXIT_CODES = frozenset({0, 1})
NOT_FOUND_EXIT_CODE = 1

TEXT_ENCODING = "utf-8"
# Maps every byte to one character, so the original bytes can be recovered
BINARY_ENCODING = "latin-1"


async def _show(
    repository_path: Path | str,
    commitish: str,
    path: Path | str,
    exit_codes: AbstractSet[int],
    encoding: str,
    name: str,
    runner: Optional[Git],
) -> Optional[bytes]:
    object_name = revision_spec(commitish, to_revision_path(repository_path, path))
    options = ExecutionOptions(success_exit_codes=frozenset(exit_codes), encoding=encoding)
    result = await git(["show", object_name], str(repository_path), name, options, runner=runner)
    if result.exit_code == NOT_FOUND_EXIT_CODE:
        return None
    return result.stdout.encode(encoding)


async def get_text_contents(
    repository_path: Path | str,
    commitish: str,
    path: Path | str,
    exit_codes: AbstractSet[int] = SUCCESS_EXIT_CODES,
    runner: Optional[Git] = None,
) -> Optional[bytes]:
    """Retrieve the UTF-8 text contents of a file at a revision.

    Args:
        repository_path: Root of the repository.
        commitish: Commit, branch or tree to read from. ``HEAD`` is the
            current commit; an empty string reads the index.
        path: File in the repository, absolute or repository-relative.
        exit_codes: Exit codes accepted from ``git show``.
        runner: Runner to use instead of the default one.

    Returns:
        The UTF-8 encoded contents, or None if the file does not exist at
        that revision.

    Raises:
        GitError: If git fails for any other reason.
    """
    return await _show(
        repository_path, commitish, path, exit_codes, TEXT_ENCODING, "getTextContents", runner
    )


async def get_blob_contents(
    repository_path: Path | str,
    commitish: str,
    path: Path | str,
    exit_codes: AbstractSet[int] = SUCCESS_EXIT_CODES,
    runner: Optional[Git] = None,
) -> Optional[bytes]:
    """Retrieve the exact bytes of a blob at a revision.

    Same arguments as :func:`get_text_contents`; the content is returned
    byte for byte, whatever its encoding.
    """
    return await _show(
        repository_path, commitish, path, exit_codes, BINARY_ENCODING, "getBlobContents", runner
    )
