from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from pathlib import Path

import pandas as pd

from portfolio_site.errors import LogLoadError

logger = logging.getLogger(__name__)

LOC_COLUMNS: tuple[str, ...] = (
    "commit",
    "file",
    "type",
    "line",
    "depth",
    "length",
    "date",
    "time",
    "timezone",
    "datetime",
    "author",
)


@dataclass(frozen=True)
class LineRecord:
    """One tracked line of code, as it stood at `commit`."""

    commit: str
    file: str
    type: str
    line: int
    depth: int
    length: int
    date: datetime  # midnight of the commit day in `timezone`
    time: str
    timezone: str
    datetime: datetime
    author: str


def _parse_timestamp(text: str, tz_offset: str) -> datetime:
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        # Values without an offset are local to the row's recorded timezone.
        ts = datetime.fromisoformat(f"{text}{tz_offset}")
    return ts


def parse_row(row: dict[str, str]) -> LineRecord:
    tz_offset = row["timezone"].strip()
    return LineRecord(
        commit=row["commit"],
        file=row["file"],
        type=row["type"],
        line=int(row["line"]),
        depth=int(row["depth"]),
        length=int(row["length"]),
        date=_parse_timestamp(f"{row['date'].strip()}T00:00", tz_offset),
        time=row["time"],
        timezone=tz_offset,
        datetime=_parse_timestamp(row["datetime"].strip(), tz_offset),
        author=row["author"],
    )


def read_loc_frame(source: str | Path) -> pd.DataFrame:
    """Read the raw log as text columns. `source` may be a path or a URL."""
    frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    missing = [c for c in LOC_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")
    return frame


def load_rows(source: str | Path) -> list[LineRecord]:
    """
    Load the per-line commit log into typed records.

    The whole load fails on the first problem (unreachable source, bad CSV,
    missing column, unparsable number or timestamp); no partial result is
    ever returned, so nothing downstream runs on half a data set.
    """
    try:
        frame = read_loc_frame(source)
        rows = [parse_row(r) for r in frame.to_dict(orient="records")]
    except Exception as e:
        logger.error("Failed to load commit log from %s: %s", source, e)
        raise LogLoadError(f"could not load {source}: {e}") from e

    logger.info("Loaded %d lines from %s", len(rows), source)
    return rows
