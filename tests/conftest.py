from __future__ import annotations

from datetime import datetime

import matplotlib
import pytest

matplotlib.use("Agg")

from portfolio_site.loader import LineRecord  # noqa: E402

REPO_URL = "https://github.com/alex/portfolio"


def _row(
    commit: str = "abc",
    *,
    file: str = "a.js",
    type: str = "js",
    line: int = 1,
    depth: int = 0,
    length: int = 10,
    when: str = "2025-02-10T14:32:00-08:00",
    author: str = "Alex",
) -> LineRecord:
    ts = datetime.fromisoformat(when)
    return LineRecord(
        commit=commit,
        file=file,
        type=type,
        line=line,
        depth=depth,
        length=length,
        date=ts.replace(hour=0, minute=0, second=0),
        time=ts.strftime("%H:%M:%S"),
        timezone=when[-6:],
        datetime=ts,
        author=author,
    )


@pytest.fixture
def make_row():
    return _row


@pytest.fixture
def three_commit_rows() -> list[LineRecord]:
    """c1 (2 lines, js+css), c2 (3 lines, js), c3 (1 line, html), oldest first."""
    return [
        _row("c2", file="b.js", line=1, depth=1, when="2025-02-11T22:00:00-08:00"),
        _row("c1", file="a.js", line=1, when="2025-02-10T09:30:00-08:00"),
        _row("c2", file="b.js", line=2, depth=2, when="2025-02-11T22:00:00-08:00"),
        _row("c1", file="style.css", type="css", line=1, when="2025-02-10T09:30:00-08:00"),
        _row("c3", file="index.html", type="html", line=7, depth=3, when="2025-02-12T12:00:00-08:00"),
        _row("c2", file="b.js", line=3, when="2025-02-11T22:00:00-08:00"),
    ]
