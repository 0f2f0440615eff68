from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from portfolio_site.commits import process_commits
from portfolio_site.timeline import TimelineFilter, filter_until, format_cutoff, narrative_steps

REPO_URL = "https://github.com/alex/portfolio"


@pytest.fixture
def commits(three_commit_rows):
    return process_commits(three_commit_rows, repo_url=REPO_URL)


def test_cutoff_is_inclusive(commits, three_commit_rows) -> None:
    cutoff = commits[1].datetime
    assert [c.id for c in filter_until(commits, cutoff)] == ["c1", "c2"]
    assert [c.id for c in filter_until(commits, cutoff - timedelta(seconds=1))] == ["c1"]
    assert {r.commit for r in filter_until(three_commit_rows, cutoff)} == {"c1", "c2"}


def test_slider_ends_hit_first_and_last_commit(commits) -> None:
    timeline = TimelineFilter(commits)
    assert timeline.cutoff_for_progress(0) == commits[0].datetime
    assert timeline.cutoff_for_progress(100) == commits[-1].datetime
    assert timeline.cutoff_for_progress(250) == commits[-1].datetime


def test_slider_is_linear_in_time(commits) -> None:
    timeline = TimelineFilter(commits)
    start, end = commits[0].datetime, commits[-1].datetime
    midpoint = timeline.cutoff_for_progress(50)
    assert midpoint == start + (end - start) / 2
    assert timeline.progress_for(midpoint) == pytest.approx(50)
    assert midpoint.utcoffset() == end.utcoffset()


def test_step_cutoff_is_the_commit_time(commits) -> None:
    timeline = TimelineFilter(commits)
    assert timeline.cutoff_for_step(1) == commits[1].datetime


def test_narrative_wording(commits) -> None:
    steps = narrative_steps(list(reversed(commits)))

    assert [s.commit.id for s in steps] == ["c1", "c2", "c3"]
    assert "my first commit, and it was glorious" in steps[0].text
    assert "another glorious commit" in steps[1].text
    assert "another glorious commit" in steps[2].text
    assert "I edited 2 lines across 2 files" in steps[0].text
    assert "I edited 3 lines across 1 files" in steps[1].text
    assert steps[0].text.startswith("On Monday, February 10, 2025 at 9:30 AM")


def test_format_cutoff() -> None:
    assert format_cutoff(datetime(2025, 2, 10, 14, 32)) == "February 10, 2025 at 2:32 PM"


def test_timeline_needs_commits() -> None:
    with pytest.raises(ValueError):
        TimelineFilter([])
