"""Commit data types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

# "NAME <EMAIL> SECONDS +HHMM", as printed by git var GIT_AUTHOR_IDENT
_IDENTITY_RE = re.compile(r"^(.*?) <(.*?)> (\d+) (\+|-)?(\d{2})(\d{2})")


@dataclass(frozen=True)
class CommitIdentity:
    """Name, email and date of a commit author or committer.

    Attributes:
        name: Name of the person.
        email: Email address.
        date: Moment of the commit, in UTC.
        tz_offset: Time-zone offset of the person, in minutes.
    """

    name: str
    email: str
    date: datetime
    tz_offset: int

    @classmethod
    def parse(cls, identity: str) -> Optional[CommitIdentity]:
        """Parse a git ident string.

        Args:
            identity: Ident with a raw date, e.g.
                ``Jane Doe <jane@example.com> 1475670580 +0200``.

        Returns:
            The parsed identity, or None if the string is not an ident.
        """
        match = _IDENTITY_RE.match(identity)
        if not match:
            return None

        name, email, seconds, sign, hours, minutes = match.groups()
        tz_minutes = int(hours) * 60 + int(minutes)
        tz_offset = -tz_minutes if sign == "-" else tz_minutes

        return cls(
            name=name,
            email=email,
            date=datetime.fromtimestamp(int(seconds), tz=timezone.utc),
            tz_offset=tz_offset,
        )

    @property
    def local_date(self) -> datetime:
        """The commit date in the person's own time zone."""
        return self.date.astimezone(timezone(timedelta(minutes=self.tz_offset)))


@dataclass(frozen=True)
class Commit:
    """A git commit."""

    sha: str
    summary: str  # First line of the message
    body: str
    author: CommitIdentity
    parent_shas: tuple[str, ...] = field(default_factory=tuple)

    @property
    def short_sha(self) -> str:
        return self.sha[:7]
