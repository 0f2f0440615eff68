from __future__ import annotations

import logging
import textwrap
from typing import Sequence

from matplotlib.dates import date2num, num2date

from portfolio_site.commits import CommitRecord
from portfolio_site.explorer_state import CommitExplorer
from portfolio_site.loader import LineRecord
from portfolio_site.scatter import ChartLayout, ScatterRenderer
from portfolio_site.selection import Selection
from portfolio_site.stats import STAT_SLOTS

logger = logging.getLogger(__name__)

TOP_FILES_SHOWN = 8


def describe(explorer: CommitExplorer) -> str:
    """Text for the side panel: stats, cutoff, selection, languages, story step, files."""
    s = explorer.surface
    out: list[str] = []
    for key, label, _title in STAT_SLOTS:
        out.append(f"{label:<10} {s.stats.slots[key].text}")
    out.append("")
    out.append(f"Until: {s.selected_time}")
    out.append(s.selection_count)
    for share in s.language_breakdown.entries:
        out.append(f"  {share.language:<8} {share.lines_text}")
    step = explorer.state.active_step
    if step is not None:
        out.append("")
        out.extend(textwrap.wrap(s.narrative[step].text, width=48))
    out.append("")
    for name in s.files.order[:TOP_FILES_SHOWN]:
        out.append(f"{name}  ({s.files.rows[name].label})")
    return "\n".join(out)


def selection_from_drag(renderer: ScatterRenderer, x0: float, y0: float, x1: float, y1: float) -> Selection | None:
    """Turn a drag in data coordinates (date numbers, hours) into a pixel rectangle."""
    if renderer.x_scale is None or renderer.y_scale is None:
        raise RuntimeError("the chart must be rendered before it can be brushed")
    if x0 == x1 or y0 == y1:
        return None
    p0 = (renderer.x_scale(num2date(x0)), renderer.y_scale(y0))
    p1 = (renderer.x_scale(num2date(x1)), renderer.y_scale(y1))
    return p0, p1


def scroll_step(current: int | None, button: str, count: int) -> int:
    """Story step to activate after one wheel notch; "down" moves forward in time."""
    last = count - 1
    if current is None:
        return 0 if button == "down" else last
    current += 1 if button == "down" else -1
    return min(max(current, 0), last)


class BrushDrag:
    """Re-brushes the chart on press, on every move while dragging, and on release."""

    def __init__(self, explorer: CommitExplorer) -> None:
        self.explorer = explorer
        self.anchor: tuple[float, float] | None = None

    @property
    def dragging(self) -> bool:
        return self.anchor is not None

    def press(self, x: float, y: float) -> None:
        self.anchor = (x, y)
        self.explorer.on_brush(None)

    def move(self, x: float, y: float) -> None:
        if self.anchor is None:
            return
        x0, y0 = self.anchor
        self.explorer.on_brush(selection_from_drag(self.explorer.renderer, x0, y0, x, y))

    def release(self, x: float | None, y: float | None) -> None:
        # Released outside the chart: keep whatever the last move selected.
        if x is not None and y is not None:
            self.move(x, y)
        self.anchor = None


def launch(
    rows: Sequence[LineRecord],
    commits: Sequence[CommitRecord],
    *,
    layout: ChartLayout | None = None,
) -> None:
    """Open the commit explorer window (brush, time slider, hover, scroll-wheel story)."""
    import matplotlib.pyplot as plt
    from matplotlib.widgets import RectangleSelector, Slider

    fig = plt.figure(figsize=(15, 8))
    fig.canvas.manager.set_window_title("Commit explorer")
    chart_ax = fig.add_axes((0.05, 0.22, 0.6, 0.72))
    slider_ax = fig.add_axes((0.12, 0.07, 0.48, 0.03))
    info_ax = fig.add_axes((0.68, 0.05, 0.3, 0.9))
    info_ax.axis("off")

    explorer = CommitExplorer(rows, commits, renderer=ScatterRenderer(layout, ax=chart_ax))
    explorer.initial_paint()
    renderer = explorer.renderer

    info = info_ax.text(0, 1, "", va="top", family="monospace", fontsize=8)
    tip = chart_ax.annotate(
        "",
        xy=(0, 0),
        xytext=(12, 12),
        textcoords="offset points",
        fontsize=8,
        bbox={"boxstyle": "round", "fc": "white", "alpha": 0.9},
        zorder=100,
        visible=False,
    )

    def refresh() -> None:
        info.set_text(describe(explorer))
        fig.canvas.draw_idle()

    drag = BrushDrag(explorer)

    def on_press(event) -> None:
        if event.inaxes is chart_ax and event.button == 1:
            drag.press(event.xdata, event.ydata)
            refresh()

    def on_release(event) -> None:
        if drag.dragging:
            drag.release(event.xdata, event.ydata)
            refresh()

    def on_slider(value: float) -> None:
        explorer.on_slider(value)
        refresh()

    def on_scroll(event) -> None:
        explorer.on_step_enter(
            scroll_step(explorer.state.active_step, event.button, len(explorer.surface.narrative))
        )
        refresh()

    def on_move(event) -> None:
        if drag.dragging:
            if event.inaxes is chart_ax:
                drag.move(event.xdata, event.ydata)
                refresh()
            return
        commit = renderer.commit_at(event) if event.inaxes is chart_ax else None
        if commit is not None:
            explorer.on_hover(commit.id, (event.x, fig.bbox.height - event.y))
            tooltip = explorer.surface.tooltip
            tip.xy = (date2num(commit.datetime), commit.hour_frac)
            tip.set_text(f"{tooltip.commit_id}\n{tooltip.date}\n{tooltip.link_text}")
            tip.set_visible(True)
            fig.canvas.draw_idle()
        elif explorer.state.hovered is not None:
            explorer.on_hover_out()
            tip.set_visible(False)
            fig.canvas.draw_idle()

    slider = Slider(slider_ax, "Show commits until", 0, 100, valinit=explorer.state.progress)
    slider.valtext.set_visible(False)
    slider.on_changed(on_slider)
    # Draws the rectangle only; the selection itself follows the drag handlers.
    selector = RectangleSelector(chart_ax, lambda _press, _release: refresh(), useblit=True, button=[1])
    fig.canvas.mpl_connect("button_press_event", on_press)
    fig.canvas.mpl_connect("button_release_event", on_release)
    fig.canvas.mpl_connect("scroll_event", on_scroll)
    fig.canvas.mpl_connect("motion_notify_event", on_move)

    refresh()
    logger.info("Explorer open with %d commits", len(commits))
    plt.show()
