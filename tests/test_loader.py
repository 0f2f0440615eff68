from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from portfolio_site.errors import LogLoadError
from portfolio_site.loader import load_rows

HEADER = "file,line,type,commit,author,date,time,timezone,datetime,depth,length\n"


def _write_csv(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "loc.csv"
    path.write_text(HEADER + body, encoding="utf-8")
    return path


def test_load_rows_coerces_numbers_and_both_timestamps(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "index.html,12,html,8f2a1c3,Alex Doe,2025-01-14,09:30:12,-08:00,2025-01-14T09:30:12-08:00,3,40\n",
    )
    (row,) = load_rows(path)

    assert (row.line, row.depth, row.length) == (12, 3, 40)
    assert row.commit == "8f2a1c3"
    assert row.type == "html"
    pst = timezone(timedelta(hours=-8))
    assert row.date == datetime(2025, 1, 14, 0, 0, tzinfo=pst)
    assert row.datetime == datetime(2025, 1, 14, 9, 30, 12, tzinfo=pst)


def test_naive_datetime_takes_the_row_timezone(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "a.js,1,js,abc,Alex,2025-01-14,09:30:12,+02:00,2025-01-14T09:30:12,0,5\n",
    )
    (row,) = load_rows(path)
    assert row.datetime.utcoffset() == timedelta(hours=2)


def test_load_keeps_source_order(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "b.js,2,js,abc,Alex,2025-01-14,09:30:12,-08:00,2025-01-14T09:30:12-08:00,0,5\n"
        "a.js,1,js,abc,Alex,2025-01-14,09:30:12,-08:00,2025-01-14T09:30:12-08:00,0,5\n",
    )
    assert [r.file for r in load_rows(path)] == ["b.js", "a.js"]


def test_missing_source_fails_the_load(tmp_path: Path) -> None:
    with pytest.raises(LogLoadError):
        load_rows(tmp_path / "nope.csv")


def test_unparsable_number_fails_the_whole_load(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "a.js,1,js,abc,Alex,2025-01-14,09:30:12,-08:00,2025-01-14T09:30:12-08:00,0,5\n"
        "a.js,two,js,abc,Alex,2025-01-14,09:30:12,-08:00,2025-01-14T09:30:12-08:00,0,5\n",
    )
    with pytest.raises(LogLoadError):
        load_rows(path)


def test_missing_column_fails_the_load(tmp_path: Path) -> None:
    path = tmp_path / "loc.csv"
    path.write_text("file,line\na.js,1\n", encoding="utf-8")
    with pytest.raises(LogLoadError, match="missing columns"):
        load_rows(path)
