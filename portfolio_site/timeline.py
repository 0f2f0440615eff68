from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence, TypeVar

from portfolio_site.commits import CommitRecord, distinct_files
from portfolio_site.scales import TimeScale
from portfolio_site.scatter import format_long_datetime

SLIDER_MIN = 0
SLIDER_MAX = 100

_Timed = TypeVar("_Timed")


def format_cutoff(ts: datetime) -> str:
    # February 10, 2025 at 2:32 PM
    hour = ts.hour % 12 or 12
    return f"{ts:%B} {ts.day}, {ts.year} at {hour}:{ts:%M} {ts:%p}"


def filter_until(records: Sequence[_Timed], cutoff: datetime) -> list[_Timed]:
    """Records stamped at or before `cutoff`; the boundary is included."""
    return [r for r in records if r.datetime <= cutoff]  # type: ignore[attr-defined]


@dataclass(frozen=True)
class NarrativeStep:
    index: int
    commit: CommitRecord
    text: str


def narrative_text(index: int, commit: CommitRecord) -> str:
    what = "my first commit, and it was glorious" if index == 0 else "another glorious commit"
    files = distinct_files(commit.lines)
    return (
        f"On {format_long_datetime(commit.datetime)}, I made {what}. "
        f"I edited {commit.total_lines} lines across {files} files. "
        "Then I looked over all I had made, and I saw that it was very good."
    )


def narrative_steps(commits: Sequence[CommitRecord]) -> list[NarrativeStep]:
    ordered = sorted(commits, key=lambda c: c.datetime)
    return [NarrativeStep(index=i, commit=c, text=narrative_text(i, c)) for i, c in enumerate(ordered)]


class TimelineFilter:
    """Maps slider progress (0-100) and narration steps onto a cutoff time."""

    def __init__(self, commits: Sequence[CommitRecord]) -> None:
        if not commits:
            raise ValueError("timeline needs at least one commit")
        stamps = [c.datetime for c in commits]
        self.progress_scale = TimeScale((min(stamps), max(stamps)), (SLIDER_MIN, SLIDER_MAX))
        self.steps = narrative_steps(commits)

    @property
    def start(self) -> datetime:
        return self.progress_scale.domain[0]

    @property
    def end(self) -> datetime:
        return self.progress_scale.domain[1]

    def cutoff_for_progress(self, progress: float) -> datetime:
        progress = min(max(float(progress), SLIDER_MIN), SLIDER_MAX)
        # Ends are exact so float round-off never drops the oldest or newest commit.
        if progress <= SLIDER_MIN:
            return self.start
        if progress >= SLIDER_MAX:
            return self.end
        return self.progress_scale.invert(progress).astimezone(self.end.tzinfo)

    def progress_for(self, cutoff: datetime) -> float:
        return self.progress_scale(cutoff)

    def cutoff_for_step(self, index: int) -> datetime:
        return self.steps[index].commit.datetime
