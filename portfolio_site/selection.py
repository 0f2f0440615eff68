from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Sequence

from portfolio_site.commits import CommitRecord, lines_of

# ((x0, y0), (x1, y1)) in chart pixels; None when no rectangle is drawn.
Selection = tuple[tuple[float, float], tuple[float, float]]


@dataclass(frozen=True)
class LanguageShare:
    language: str
    lines: int
    share: float

    @property
    def percent_text(self) -> str:
        return f"{self.share:.1%}"

    @property
    def lines_text(self) -> str:
        return f"{self.lines} lines ({self.percent_text})"


def normalize_selection(selection: Selection) -> Selection:
    (ax, ay), (bx, by) = selection
    return (min(ax, bx), min(ay, by)), (max(ax, bx), max(ay, by))


def is_commit_selected(
    selection: Selection | None,
    commit: CommitRecord,
    position: Callable[[CommitRecord], tuple[float, float]],
) -> bool:
    if selection is None:
        return False
    (x0, y0), (x1, y1) = normalize_selection(selection)
    x, y = position(commit)
    return x0 <= x <= x1 and y0 <= y <= y1


def selected_commits(
    selection: Selection | None,
    commits: Sequence[CommitRecord],
    position: Callable[[CommitRecord], tuple[float, float]],
) -> list[CommitRecord]:
    if selection is None:
        return []
    return [c for c in commits if is_commit_selected(selection, c, position)]


def selection_count_text(count: int) -> str:
    return f"{count or 'No'} commits selected"


def language_breakdown(
    selected: Sequence[CommitRecord], all_commits: Sequence[CommitRecord]
) -> list[LanguageShare]:
    """
    Line counts per `type` for the selected commits.

    With nothing selected the breakdown covers every commit, even though the
    selection count still reads "No commits selected".
    """
    source = selected if selected else all_commits
    lines = lines_of(source)
    counts = Counter(line.type for line in lines)
    total = len(lines)
    return [
        LanguageShare(language=lang, lines=n, share=n / total)
        for lang, n in counts.items()
    ]


@dataclass
class LanguagePanel:
    entries: list[LanguageShare] = field(default_factory=list)

    def clear(self) -> None:
        self.entries = []

    def show(self, shares: list[LanguageShare]) -> None:
        self.entries = list(shares)


def render_language_breakdown(
    panel: LanguagePanel,
    selected: Sequence[CommitRecord],
    all_commits: Sequence[CommitRecord],
) -> LanguagePanel:
    if not selected:
        panel.clear()
    panel.show(language_breakdown(selected, all_commits))
    return panel
