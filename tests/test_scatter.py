from __future__ import annotations

from datetime import datetime

import pytest

from portfolio_site.commits import process_commits
from portfolio_site.scatter import (
    DEFAULT_OPACITY,
    HOVER_OPACITY,
    RADIUS_RANGE,
    SELECTED_COLOR,
    ScatterRenderer,
    format_hour_tick,
    format_long_datetime,
)

REPO_URL = "https://github.com/alex/portfolio"


@pytest.fixture
def commits(three_commit_rows):
    return process_commits(three_commit_rows, repo_url=REPO_URL)


def test_later_hour_is_drawn_higher(make_row) -> None:
    rows = [
        make_row("morning", when="2025-02-10T09:30:00-08:00"),
        make_row("night", when="2025-02-11T22:00:00-08:00"),
    ]
    morning, night = process_commits(rows, repo_url=REPO_URL)
    chart = ScatterRenderer()
    chart.render([morning, night])

    assert chart.pixel_position(night)[1] < chart.pixel_position(morning)[1]
    assert chart.y_scale is not None
    assert chart.y_scale(24) == chart.layout.top
    assert chart.y_scale(0) == chart.layout.height - chart.layout.bottom


def test_render_scales_and_draw_order(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)

    assert chart.x_scale is not None and chart.r_scale is not None
    lo, hi = chart.x_scale.domain
    assert lo <= commits[0].datetime and hi >= commits[-1].datetime
    assert chart.x_scale.range == (20.0, 990.0)
    # biggest commit first so small ones sit on top
    assert chart.bound_ids == ["c2", "c1", "c3"]
    assert chart.radius(commits[1]) == RADIUS_RANGE[1]
    assert chart.radius(commits[2]) == RADIUS_RANGE[0]
    assert chart.point("c1").get_alpha() == DEFAULT_OPACITY


def test_update_rebinds_by_commit_id(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)
    c1_point = chart.point("c1")
    y_scale, r_scale = chart.y_scale, chart.r_scale

    chart.update(commits[:2])

    assert chart.point("c1") is c1_point
    assert set(chart.bound_ids) == {"c1", "c2"}
    assert chart.x_scale is not None
    assert chart.x_scale.domain == (commits[0].datetime, commits[1].datetime)
    assert chart.y_scale is y_scale and chart.r_scale is r_scale

    chart.update(commits)
    assert set(chart.bound_ids) == {"c1", "c2", "c3"}
    assert chart.point("c1") is c1_point


def test_update_with_single_commit_keeps_it_centred(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)
    chart.update(commits[:1])

    x, _ = chart.pixel_position(commits[0])
    lay = chart.layout
    assert x == pytest.approx(lay.left + lay.usable_width / 2)


def test_update_before_render_is_an_error(commits) -> None:
    with pytest.raises(RuntimeError):
        ScatterRenderer().update(commits)
    with pytest.raises(RuntimeError):
        ScatterRenderer().pixel_position(commits[0])
    with pytest.raises(RuntimeError):
        ScatterRenderer().radius(commits[0])


def test_hover_shows_and_hides_tooltip(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)
    c2 = commits[1]

    tip = chart.hover_in(c2, (120, 45))
    assert tip.visible
    assert tip.link_text == tip.link_href == c2.url
    assert tip.commit_id == "c2"
    assert tip.date == "Tuesday, February 11, 2025 at 10:00 PM"
    assert (tip.x, tip.y) == (120, 45)
    assert chart.point("c2").get_alpha() == HOVER_OPACITY

    chart.hover_out(c2)
    assert not chart.tooltip.visible
    assert chart.point("c2").get_alpha() == DEFAULT_OPACITY


def test_selected_points_change_colour(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)
    chart.set_selected({"c3"})

    assert chart.point("c3").get_color() == SELECTED_COLOR
    assert chart.point("c1").get_color() != SELECTED_COLOR

    chart.update(commits[:2])
    assert chart.selected_ids == set()


def test_svg_output_carries_commit_ids(commits) -> None:
    chart = ScatterRenderer()
    chart.render(commits)
    svg = chart.to_svg()
    assert "<svg" in svg
    assert 'id="commit-c1"' in svg


def test_formatters() -> None:
    assert format_hour_tick(0) == "00:00"
    assert format_hour_tick(8) == "08:00"
    assert format_hour_tick(24) == "00:00"
    assert format_long_datetime(datetime(2025, 2, 10, 14, 32)) == "Monday, February 10, 2025 at 2:32 PM"
    assert format_long_datetime(datetime(2025, 2, 10, 0, 5)) == "Monday, February 10, 2025 at 12:05 AM"


def test_render_needs_commits() -> None:
    with pytest.raises(ValueError):
        ScatterRenderer().render([])
