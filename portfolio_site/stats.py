from __future__ import annotations

from dataclasses import dataclass, field
import math
from statistics import fmean
from typing import Sequence

from portfolio_site.commits import CommitRecord
from portfolio_site.loader import LineRecord


@dataclass(frozen=True)
class CommitStats:
    commits: int
    files: int
    total_loc: int
    max_depth: int | None
    avg_file_length: float | None
    max_line: int | None


@dataclass
class StatSlot:
    label: str
    title: str | None = None  # expansion shown on hover, e.g. for abbreviations
    text: str = ""


@dataclass
class StatsPanel:
    slots: dict[str, StatSlot] = field(default_factory=dict)

    @property
    def built(self) -> bool:
        return bool(self.slots)


# (key, label, abbreviation title)
STAT_SLOTS: tuple[tuple[str, str, str | None], ...] = (
    ("commits", "COMMITS", None),
    ("files", "FILES", None),
    ("total_loc", "TOTAL LOC", "Lines of code"),
    ("max_depth", "MAX DEPTH", None),
    ("avg_file_length", "AVG LINES", None),
    ("max_line", "MAX LINES", None),
)


def compute_stats(rows: Sequence[LineRecord], commits: Sequence[CommitRecord]) -> CommitStats:
    """Aggregate figures over any subset; the two inputs are filtered independently."""
    file_lengths: dict[str, int] = {}
    for r in rows:
        prev = file_lengths.get(r.file)
        if prev is None or r.line > prev:
            file_lengths[r.file] = r.line

    return CommitStats(
        commits=len(commits),
        files=len(file_lengths),
        total_loc=len(rows),
        max_depth=max((r.depth for r in rows), default=None),
        avg_file_length=fmean(file_lengths.values()) if file_lengths else None,
        max_line=max((r.line for r in rows), default=None),
    )


def display_values(stats: CommitStats) -> dict[str, str]:
    def text(v: int | None) -> str:
        return "" if v is None else str(v)

    # Half rounds up, as on the live page.
    avg = None if stats.avg_file_length is None else math.floor(stats.avg_file_length + 0.5)
    return {
        "commits": text(stats.commits),
        "files": text(stats.files),
        "total_loc": text(stats.total_loc),
        "max_depth": text(stats.max_depth),
        "avg_file_length": text(avg),
        "max_line": text(stats.max_line),
    }


def render_stats(panel: StatsPanel, stats: CommitStats) -> StatsPanel:
    # Slots are created once; later calls only rewrite their text.
    if not panel.built:
        for key, label, title in STAT_SLOTS:
            panel.slots[key] = StatSlot(label=label, title=title)
    for key, value in display_values(stats).items():
        panel.slots[key].text = value
    return panel
