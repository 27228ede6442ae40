"""Data types shared by gitproc consumers."""

from gitproc.models.commit import Commit, CommitIdentity
from gitproc.models.progress import (
    CheckoutProgress,
    CloneProgress,
    FetchProgress,
    GitProgress,
    PullProgress,
    PushProgress,
)

__all__ = [
    "Commit",
    "CommitIdentity",
    "GitProgress",
    "CheckoutProgress",
    "CloneProgress",
    "FetchProgress",
    "PullProgress",
    "PushProgress",
]
