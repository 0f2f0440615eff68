from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
import logging
from typing import Sequence

from portfolio_site.commits import CommitRecord
from portfolio_site.files import FilesPanel, render_files, type_color_scale
from portfolio_site.loader import LineRecord
from portfolio_site.scatter import ScatterRenderer, Tooltip
from portfolio_site.selection import (
    LanguagePanel,
    Selection,
    render_language_breakdown,
    selected_commits,
    selection_count_text,
)
from portfolio_site.stats import StatsPanel, compute_stats, render_stats
from portfolio_site.timeline import (
    SLIDER_MAX,
    NarrativeStep,
    TimelineFilter,
    filter_until,
    format_cutoff,
)

logger = logging.getLogger(__name__)


@dataclass
class DisplaySurface:
    """The fixed display slots of the meta page."""

    chart: ScatterRenderer
    stats: StatsPanel = field(default_factory=StatsPanel)
    tooltip: Tooltip = field(default_factory=Tooltip)
    selection_count: str = ""
    language_breakdown: LanguagePanel = field(default_factory=LanguagePanel)
    files: FilesPanel = field(default_factory=FilesPanel)
    slider: float = SLIDER_MAX
    selected_time: str = ""
    narrative: list[NarrativeStep] = field(default_factory=list)


@dataclass(frozen=True)
class ExplorerState:
    cutoff: datetime
    progress: float
    rows: tuple[LineRecord, ...]
    commits: tuple[CommitRecord, ...]
    selection: Selection | None = None
    active_step: int | None = None
    hovered: str | None = None


def with_cutoff(
    state: ExplorerState,
    cutoff: datetime,
    progress: float,
    all_rows: Sequence[LineRecord],
    all_commits: Sequence[CommitRecord],
) -> ExplorerState:
    return replace(
        state,
        cutoff=cutoff,
        progress=progress,
        rows=tuple(filter_until(all_rows, cutoff)),
        commits=tuple(filter_until(all_commits, cutoff)),
    )


class CommitExplorer:
    """
    Owns the filter state of the commit view and drives every renderer.

    Each `on_*` handler derives the next `ExplorerState` from the current one
    and the event payload, then repaints the affected slots in a fixed order.
    Renderers only read the state.
    """

    def __init__(
        self,
        rows: Sequence[LineRecord],
        commits: Sequence[CommitRecord],
        *,
        renderer: ScatterRenderer | None = None,
    ) -> None:
        self.all_rows = tuple(rows)
        self.all_commits = tuple(commits)
        self.timeline = TimelineFilter(self.all_commits)
        self.colors = type_color_scale(self.all_rows)
        self.surface = DisplaySurface(chart=renderer or ScatterRenderer())
        self.state = ExplorerState(
            cutoff=self.timeline.end,
            progress=SLIDER_MAX,
            rows=self.all_rows,
            commits=self.all_commits,
        )

    @property
    def renderer(self) -> ScatterRenderer:
        return self.surface.chart

    def commit(self, commit_id: str) -> CommitRecord:
        for c in self.all_commits:
            if c.id == commit_id:
                return c
        raise KeyError(commit_id)

    def initial_paint(self) -> DisplaySurface:
        s = self.surface
        render_stats(s.stats, compute_stats(self.state.rows, self.state.commits))
        self.renderer.render(self.state.commits)
        s.slider = self.state.progress
        s.selected_time = format_cutoff(self.state.cutoff)
        s.narrative = list(self.timeline.steps)
        render_files(s.files, self.state.rows, self.colors)
        self._paint_selection()
        logger.info(
            "Painted %d commits / %d lines", len(self.state.commits), len(self.state.rows)
        )
        return s

    def on_slider(self, value: float) -> ExplorerState:
        progress = min(max(float(value), 0.0), float(SLIDER_MAX))
        cutoff = self.timeline.cutoff_for_progress(progress)
        self.state = replace(
            with_cutoff(self.state, cutoff, progress, self.all_rows, self.all_commits),
            active_step=None,
        )
        self._paint_timeline()
        return self.state

    def on_step_enter(self, index: int) -> ExplorerState:
        cutoff = self.timeline.cutoff_for_step(index)
        progress = self.timeline.progress_for(cutoff)
        self.state = replace(
            with_cutoff(self.state, cutoff, progress, self.all_rows, self.all_commits),
            active_step=index,
        )
        self._paint_timeline()
        return self.state

    def on_brush(self, selection: Selection | None) -> ExplorerState:
        """Handles brush start, move and end alike."""
        self.state = replace(self.state, selection=selection)
        self._paint_selection()
        return self.state

    def on_hover(self, commit_id: str, pointer: tuple[float, float]) -> ExplorerState:
        if self.state.hovered not in (None, commit_id):
            self.on_hover_out()
        self.surface.tooltip = self.renderer.hover_in(self.commit(commit_id), pointer)
        self.state = replace(self.state, hovered=commit_id)
        return self.state

    def on_hover_out(self) -> ExplorerState:
        hovered = self.commit(self.state.hovered) if self.state.hovered else None
        self.surface.tooltip = self.renderer.hover_out(hovered)
        self.state = replace(self.state, hovered=None)
        return self.state

    def selected(self) -> list[CommitRecord]:
        return selected_commits(self.state.selection, self.state.commits, self.renderer.pixel_position)

    def _paint_timeline(self) -> None:
        s = self.surface
        s.slider = self.state.progress
        s.selected_time = format_cutoff(self.state.cutoff)
        render_stats(s.stats, compute_stats(self.state.rows, self.state.commits))
        self.renderer.update(self.state.commits)
        render_files(s.files, self.state.rows, self.colors)
        # Points moved with the x-domain; the brush keeps its rectangle.
        self._paint_selection()

    def _paint_selection(self) -> None:
        chosen = self.selected()
        self.renderer.set_selected({c.id for c in chosen})
        self.surface.selection_count = selection_count_text(len(chosen))
        render_language_breakdown(self.surface.language_breakdown, chosen, self.all_commits)
