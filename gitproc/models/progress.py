"""Progress event types for long-running git operations.

These describe what a progress reporter emits while git checks out, clones,
fetches, pulls or pushes. Parsing git's progress output into these events is
left to the reporter.
"""

from dataclasses import dataclass
from typing import ClassVar, Literal, Optional


@dataclass(frozen=True)
class GitProgress:
    """Base progress event.

    Attributes:
        value: Overall progress as a fraction between 0 and 1.
        title: High-level text such as 'Pushing origin'.
        description: Detailed text, usually the last raw line from git.
    """

    value: float
    title: str
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.value <= 1.0:
            raise ValueError(f"Progress value must be between 0 and 1, got {self.value}")

    @property
    def percent(self) -> int:
        return round(self.value * 100)


@dataclass(frozen=True)
class CheckoutProgress(GitProgress):
    """Progress of a branch checkout."""

    kind: ClassVar[Literal["checkout"]] = "checkout"
    target_branch: str = ""


@dataclass(frozen=True)
class CloneProgress(GitProgress):
    """Progress of a clone."""

    kind: ClassVar[Literal["clone"]] = "clone"


@dataclass(frozen=True)
class FetchProgress(GitProgress):
    """Progress of a fetch."""

    kind: ClassVar[Literal["fetch"]] = "fetch"
    remote: str = ""


@dataclass(frozen=True)
class PullProgress(GitProgress):
    """Progress of a pull."""

    kind: ClassVar[Literal["pull"]] = "pull"
    remote: str = ""


@dataclass(frozen=True)
class PushProgress(GitProgress):
    """Progress of a push."""

    kind: ClassVar[Literal["push"]] = "push"
    remote: str = ""
    branch: str = ""
