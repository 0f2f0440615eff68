from __future__ import annotations

from collections import Counter

from portfolio_site.commits import process_commits
from portfolio_site.stats import compute_stats

REPO_URL = "https://github.com/alex/portfolio"


def test_one_record_per_commit_with_line_totals(three_commit_rows) -> None:
    commits = process_commits(three_commit_rows, repo_url=REPO_URL)

    expected = Counter(r.commit for r in three_commit_rows)
    assert {c.id: c.total_lines for c in commits} == dict(expected)
    for c in commits:
        assert c.total_lines == len(c.lines)
        assert all(line.commit == c.id for line in c.lines)


def test_commits_sorted_oldest_first_and_idempotent(three_commit_rows) -> None:
    first = process_commits(three_commit_rows, repo_url=REPO_URL)
    second = process_commits(three_commit_rows, repo_url=REPO_URL)

    assert [c.id for c in first] == ["c1", "c2", "c3"]
    assert first == second
    assert [c.lines for c in first] == [c.lines for c in second]


def test_commit_fields(three_commit_rows) -> None:
    c2 = process_commits(three_commit_rows, repo_url=REPO_URL + "/")[1]

    assert c2.url == "https://github.com/alex/portfolio/commit/c2"
    assert c2.author == "Alex"
    assert c2.hour_frac == 22.0
    assert c2.timezone == "-08:00"


def test_hour_fraction_includes_minutes(make_row) -> None:
    (commit,) = process_commits([make_row(when="2025-02-10T09:30:00-08:00")], repo_url=REPO_URL)
    assert commit.hour_frac == 9.5


def test_back_reference_is_not_a_display_field(three_commit_rows) -> None:
    commit = process_commits(three_commit_rows, repo_url=REPO_URL)[0]
    shown = commit.display_fields()

    assert "lines" not in shown
    assert list(shown) == [
        "id",
        "url",
        "author",
        "date",
        "time",
        "timezone",
        "datetime",
        "hour_frac",
        "total_lines",
    ]
    assert ", lines=" not in repr(commit)


def test_three_lines_of_one_file_end_to_end(make_row) -> None:
    rows = [make_row("abc", file="a.js", line=n) for n in (1, 2, 3)]
    (commit,) = process_commits(rows, repo_url=REPO_URL)
    assert commit.id == "abc"
    assert commit.total_lines == 3

    stats = compute_stats(rows, [commit])
    assert stats.commits == 1
    assert stats.files == 1
    assert stats.total_loc == 3
    assert stats.max_line == 3
