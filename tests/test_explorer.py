from __future__ import annotations

from matplotlib.dates import date2num
import pytest

from portfolio_site.commits import process_commits
from portfolio_site.explorer import BrushDrag, describe, scroll_step, selection_from_drag
from portfolio_site.explorer_state import CommitExplorer
from portfolio_site.scatter import ScatterRenderer

REPO_URL = "https://github.com/alex/portfolio"


def _explorer(rows) -> CommitExplorer:
    ex = CommitExplorer(rows, process_commits(rows, repo_url=REPO_URL))
    ex.initial_paint()
    return ex


def test_drag_in_data_coordinates_selects_commit(three_commit_rows) -> None:
    ex = _explorer(three_commit_rows)
    c3 = ex.all_commits[2]
    x = date2num(c3.datetime)

    # dragged right-to-left, top-to-bottom
    selection = selection_from_drag(ex.renderer, x + 0.01, c3.hour_frac + 0.5, x - 0.01, c3.hour_frac - 0.5)
    ex.on_brush(selection)

    assert ex.renderer.selected_ids == {"c3"}


def test_click_without_drag_clears_selection(three_commit_rows) -> None:
    ex = _explorer(three_commit_rows)
    assert selection_from_drag(ex.renderer, 1.0, 2.0, 1.0, 2.0) is None


def test_side_panel_text(three_commit_rows) -> None:
    ex = _explorer(three_commit_rows)
    ex.on_step_enter(0)
    text = describe(ex)

    assert "COMMITS    1" in text
    assert "Until: February 10, 2025 at 9:30 AM" in text
    assert "No commits selected" in text
    assert "my first commit" in text
    assert "a.js  (1 lines)" in text


def test_brush_updates_while_dragging(three_commit_rows) -> None:
    ex = _explorer(three_commit_rows)
    c3 = ex.all_commits[2]
    x = date2num(c3.datetime)
    drag = BrushDrag(ex)

    drag.press(x - 0.01, c3.hour_frac - 0.5)
    assert ex.surface.selection_count == "No commits selected"

    drag.move(x + 0.01, c3.hour_frac + 0.5)
    assert drag.dragging
    assert ex.surface.selection_count == "1 commits selected"
    assert ex.renderer.selected_ids == {"c3"}

    drag.release(None, None)
    assert not drag.dragging
    assert ex.surface.selection_count == "1 commits selected"


def test_move_without_press_does_nothing(three_commit_rows) -> None:
    ex = _explorer(three_commit_rows)
    c3 = ex.all_commits[2]
    BrushDrag(ex).move(date2num(c3.datetime), c3.hour_frac)
    assert ex.surface.selection_count == "No commits selected"


def test_scroll_step_starts_at_either_end() -> None:
    assert scroll_step(None, "down", 3) == 0
    assert scroll_step(None, "up", 3) == 2


def test_scroll_step_moves_one_and_clamps() -> None:
    assert scroll_step(0, "down", 3) == 1
    assert scroll_step(2, "up", 3) == 1
    assert scroll_step(0, "up", 3) == 0
    assert scroll_step(2, "down", 3) == 2


def test_drag_on_unrendered_chart_is_an_error() -> None:
    with pytest.raises(RuntimeError):
        selection_from_drag(ScatterRenderer(), 1.0, 2.0, 3.0, 4.0)
