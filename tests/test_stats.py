from __future__ import annotations

from portfolio_site.commits import process_commits
from portfolio_site.stats import StatsPanel, compute_stats, display_values, render_stats

REPO_URL = "https://github.com/alex/portfolio"


def test_stats_over_full_data(three_commit_rows) -> None:
    commits = process_commits(three_commit_rows, repo_url=REPO_URL)
    stats = compute_stats(three_commit_rows, commits)

    assert stats.commits == 3
    assert stats.files == 4
    assert stats.total_loc == 6
    assert stats.max_depth == 3
    assert stats.max_line == 7
    # max line per file: a.js 1, b.js 3, style.css 1, index.html 7
    assert stats.avg_file_length == 3.0


def test_stats_of_empty_subset_are_absent() -> None:
    stats = compute_stats([], [])
    assert stats.commits == 0
    assert stats.files == 0
    assert stats.total_loc == 0
    assert stats.max_depth is None
    assert stats.max_line is None
    assert display_values(stats)["max_line"] == ""


def test_average_rounds_half_up(make_row) -> None:
    rows = [make_row(file="a.js", line=1), make_row(file="b.js", line=2)]
    assert display_values(compute_stats(rows, []))["avg_file_length"] == "2"


def test_render_stats_builds_slots_once(three_commit_rows) -> None:
    commits = process_commits(three_commit_rows, repo_url=REPO_URL)
    panel = StatsPanel()
    render_stats(panel, compute_stats(three_commit_rows, commits))
    slots = dict(panel.slots)
    assert [s.label for s in slots.values()] == [
        "COMMITS",
        "FILES",
        "TOTAL LOC",
        "MAX DEPTH",
        "AVG LINES",
        "MAX LINES",
    ]
    assert panel.slots["commits"].text == "3"

    render_stats(panel, compute_stats(commits[0].lines, commits[:1]))
    assert all(panel.slots[k] is slots[k] for k in slots)
    assert panel.slots["commits"].text == "1"
    assert panel.slots["total_loc"].text == "2"
