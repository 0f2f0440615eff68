from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import io
import logging
from typing import Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.axes import Axes
from matplotlib.dates import AutoDateLocator, ConciseDateFormatter
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.ticker import FixedLocator, FuncFormatter

from portfolio_site.commits import CommitRecord
from portfolio_site.scales import LinearScale, SqrtScale, TimeScale

logger = logging.getLogger(__name__)

POINT_COLOR = "steelblue"
SELECTED_COLOR = "#ff6b6b"
DEFAULT_OPACITY = 0.7
HOVER_OPACITY = 1.0
RADIUS_RANGE = (2.0, 30.0)


@dataclass(frozen=True)
class ChartLayout:
    width: int = 1000
    height: int = 600
    top: int = 10
    right: int = 10
    bottom: int = 30
    left: int = 20

    @property
    def usable_width(self) -> int:
        return self.width - self.left - self.right

    @property
    def usable_height(self) -> int:
        return self.height - self.top - self.bottom


@dataclass
class Tooltip:
    visible: bool = False
    link_text: str = ""
    link_href: str = ""
    commit_id: str = ""
    date: str = ""
    x: float = 0.0
    y: float = 0.0


def format_long_datetime(ts: datetime) -> str:
    # Monday, February 10, 2025 at 2:32 PM
    hour = ts.hour % 12 or 12
    return f"{ts:%A, %B} {ts.day}, {ts.year} at {hour}:{ts:%M} {ts:%p}"


def format_hour_tick(value: float) -> str:
    return f"{int(value) % 24:02d}:00"


def time_extent(commits: Sequence[CommitRecord]) -> tuple[datetime, datetime]:
    stamps = [c.datetime for c in commits]
    return min(stamps), max(stamps)


class ScatterRenderer:
    """
    Commit scatterplot: x = commit time, y = hour of day, area ~ lines changed.

    The matplotlib axes sit exactly over the layout's usable area, so the
    scales' pixel outputs are positions in the rendered figure (origin top-left).
    """

    def __init__(self, layout: ChartLayout | None = None, *, ax: Axes | None = None, dpi: int = 100) -> None:
        self.layout = layout or ChartLayout()
        self.dpi = dpi
        if ax is None:
            lay = self.layout
            fig = Figure(figsize=(lay.width / dpi, lay.height / dpi), dpi=dpi)
            FigureCanvasAgg(fig)
            fig.patch.set_alpha(0)
            ax = fig.add_axes(
                (
                    lay.left / lay.width,
                    lay.bottom / lay.height,
                    lay.usable_width / lay.width,
                    lay.usable_height / lay.height,
                )
            )
        self.ax = ax
        self.figure = ax.figure
        self.x_scale: TimeScale | None = None
        self.y_scale: LinearScale | None = None
        self.r_scale: SqrtScale | None = None
        self.tooltip = Tooltip()
        self._points: dict[str, Line2D] = {}
        self._commits: dict[str, CommitRecord] = {}
        self._selected: set[str] = set()

    @property
    def bound_ids(self) -> list[str]:
        """Commit ids currently drawn, bottom-most first."""
        return sorted(self._points, key=lambda cid: self._points[cid].get_zorder())

    @property
    def selected_ids(self) -> set[str]:
        return set(self._selected)

    def point(self, commit_id: str) -> Line2D:
        return self._points[commit_id]

    def render(self, commits: Sequence[CommitRecord]) -> None:
        if not commits:
            raise ValueError("cannot build a chart from an empty commit list")
        lay = self.layout
        self.x_scale = TimeScale(time_extent(commits), (lay.left, lay.width - lay.right)).nice()
        self.y_scale = LinearScale((0, 24), (lay.height - lay.bottom, lay.top))
        totals = [c.total_lines for c in commits]
        self.r_scale = SqrtScale((min(totals), max(totals)), RADIUS_RANGE)

        self.ax.clear()
        self._points.clear()
        self._draw_gridlines()
        self._draw_x_axis()
        self._bind(commits)

    def update(self, commits: Sequence[CommitRecord]) -> None:
        """Re-bind a filtered subset; only the x-domain follows the subset."""
        if self.x_scale is None:
            raise RuntimeError("render() must run before update()")
        if commits:
            self.x_scale = TimeScale(time_extent(commits), self.x_scale.range)
        self._draw_x_axis()
        self._bind(commits)

    def _require_rendered(self) -> None:
        if self.x_scale is None or self.y_scale is None or self.r_scale is None:
            raise RuntimeError("render() must run first")

    def pixel_position(self, commit: CommitRecord) -> tuple[float, float]:
        self._require_rendered()
        return self.x_scale(commit.datetime), self.y_scale(commit.hour_frac)

    def radius(self, commit: CommitRecord) -> float:
        self._require_rendered()
        return self.r_scale(commit.total_lines)

    def hover_in(self, commit: CommitRecord, pointer: tuple[float, float]) -> Tooltip:
        point = self._points.get(commit.id)
        if point is not None:
            point.set_alpha(HOVER_OPACITY)
        self.tooltip = Tooltip(
            visible=True,
            link_text=commit.url,
            link_href=commit.url,
            commit_id=commit.id,
            date=format_long_datetime(commit.datetime),
            x=float(pointer[0]),
            y=float(pointer[1]),
        )
        return self.tooltip

    def hover_out(self, commit: CommitRecord | None = None) -> Tooltip:
        if commit is not None and commit.id in self._points:
            self._points[commit.id].set_alpha(DEFAULT_OPACITY)
        self.tooltip.visible = False
        return self.tooltip

    def set_selected(self, commit_ids: set[str]) -> None:
        self._selected = set(commit_ids)
        self._apply_selection()

    def commit_at(self, event) -> CommitRecord | None:
        """Top-most commit under a matplotlib mouse event, if any."""
        for cid in reversed(self.bound_ids):
            hit, _ = self._points[cid].contains(event)
            if hit:
                return self._commits[cid]
        return None

    def to_svg(self) -> str:
        buf = io.StringIO()
        self.figure.savefig(buf, format="svg")
        return buf.getvalue()

    def _draw_gridlines(self) -> None:
        self._require_rendered()
        ax = self.ax
        ax.yaxis.set_major_locator(FixedLocator(self.y_scale.ticks(12)))
        ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: format_hour_tick(v)))
        ax.set_ylim(*self.y_scale.domain)
        ax.grid(axis="y", color="#888888", alpha=0.25, linewidth=0.8)
        ax.set_axisbelow(True)
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)

    def _draw_x_axis(self) -> None:
        self._require_rendered()
        lo, hi = self.x_scale.domain
        if lo == hi:
            # Single instant: pad symmetrically so it stays centred.
            lo, hi = lo - timedelta(hours=1), hi + timedelta(hours=1)
        self.ax.set_xlim(lo, hi)
        locator = AutoDateLocator()
        self.ax.xaxis.set_major_locator(locator)
        self.ax.xaxis.set_major_formatter(ConciseDateFormatter(locator))

    def _make_point(self, commit: CommitRecord) -> Line2D:
        diameter_pt = 2 * self.radius(commit) * 72 / self.dpi
        (point,) = self.ax.plot(
            [commit.datetime],
            [commit.hour_frac],
            marker="o",
            linestyle="none",
            markersize=diameter_pt,
            color=POINT_COLOR,
            alpha=DEFAULT_OPACITY,
        )
        point.set_gid(f"commit-{commit.id}")
        return point

    def _bind(self, commits: Sequence[CommitRecord]) -> None:
        # Largest first so that small commits end up on top and stay hoverable.
        ordered = sorted(commits, key=lambda c: -c.total_lines)
        keep = {c.id for c in ordered}
        for cid in [cid for cid in self._points if cid not in keep]:
            self._points.pop(cid).remove()

        for rank, commit in enumerate(ordered):
            point = self._points.get(commit.id)
            if point is None:
                point = self._make_point(commit)
                self._points[commit.id] = point
            point.set_zorder(2 + rank / len(ordered))

        self._commits = {c.id: c for c in ordered}
        self._selected &= keep
        self._apply_selection()
        logger.debug("Bound %d commits to the chart", len(ordered))

    def _apply_selection(self) -> None:
        for cid, point in self._points.items():
            point.set_color(SELECTED_COLOR if cid in self._selected else POINT_COLOR)
