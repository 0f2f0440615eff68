from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Iterable

from portfolio_site.loader import LineRecord


@dataclass(frozen=True)
class CommitRecord:
    id: str
    url: str
    author: str
    date: datetime
    time: str
    timezone: str
    datetime: datetime
    hour_frac: float
    total_lines: int
    # Internal back-reference to the constituent rows. Never displayed or exported.
    lines: tuple[LineRecord, ...] = field(
        default=(), repr=False, compare=False, metadata={"internal": True}
    )

    def display_fields(self) -> dict[str, object]:
        """Every public attribute, in declaration order (excludes `lines`)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if not f.metadata.get("internal")
        }


def hour_fraction(ts: datetime) -> float:
    return ts.hour + ts.minute / 60


def commit_url(repo_url: str, commit_id: str) -> str:
    return f"{repo_url.rstrip('/')}/commit/{commit_id}"


def group_by_commit(rows: Iterable[LineRecord]) -> dict[str, list[LineRecord]]:
    groups: dict[str, list[LineRecord]] = {}
    for row in rows:
        groups.setdefault(row.commit, []).append(row)
    return groups


def process_commits(rows: Iterable[LineRecord], *, repo_url: str) -> list[CommitRecord]:
    """
    Collapse line rows into one record per commit, oldest first.

    Summary fields come from the first row of each group; the log repeats
    them on every row of a commit.
    """
    commits: list[CommitRecord] = []
    for commit_id, lines in group_by_commit(rows).items():
        first = lines[0]
        commits.append(
            CommitRecord(
                id=commit_id,
                url=commit_url(repo_url, commit_id),
                author=first.author,
                date=first.date,
                time=first.time,
                timezone=first.timezone,
                datetime=first.datetime,
                hour_frac=hour_fraction(first.datetime),
                total_lines=len(lines),
                lines=tuple(lines),
            )
        )
    commits.sort(key=lambda c: c.datetime)
    return commits


def lines_of(commits: Iterable[CommitRecord]) -> list[LineRecord]:
    return [line for c in commits for line in c.lines]


def distinct_files(rows: Iterable[LineRecord]) -> int:
    return len({r.file for r in rows})
