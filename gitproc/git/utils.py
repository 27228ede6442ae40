"""Git path utility functions for gitproc."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path, PurePath
from typing import Optional


def find_git_root(start_path: Path | str) -> Optional[Path]:
    """Find the root of a git repository.

    Walks up the directory tree from start_path looking for a .git entry.

    Args:
        start_path: Path to start searching from.

    Returns:
        Path to the repository root, or None if not in a git repository.
    """
    path = Path(start_path).resolve()

    for parent in [path] + list(path.parents):
        if (parent / ".git").exists():
            return parent

    return None


def to_revision_path(repository_path: Path | str, path: Path | str) -> str:
    """Convert a file path to the form git expects after ``<rev>:``.

    Absolute paths are made relative to the repository; relative paths are
    taken as already relative to it. Separators are always ``/``.

    Args:
        repository_path: Root of the repository.
        path: File inside the repository.

    Returns:
        Normalized repository-relative path.
    """
    if os.path.isabs(path):
        relative = os.path.relpath(os.path.normpath(path), os.path.normpath(repository_path))
    else:
        relative = str(path)
    posix = PurePath(relative).as_posix().replace("\\", "/")
    normalized = posixpath.normpath(posix)
    return "" if normalized == "." else normalized


def revision_spec(commitish: str, path: str) -> str:
    """Build a ``<commitish>:<path>`` object name.

    An empty commitish addresses the index instead of a commit.
    """
    return f"{commitish}:{path}"
