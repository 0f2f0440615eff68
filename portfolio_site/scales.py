from __future__ import annotations

from datetime import datetime, timezone
import math
from typing import Sequence

import matplotlib
from matplotlib.colors import to_hex
from matplotlib.ticker import MaxNLocator
import pandas as pd


def _normalize(value: float, d0: float, d1: float) -> float:
    span = d1 - d0
    if span == 0:
        # A degenerate domain maps everything onto the middle of the range.
        return 0.5
    return (value - d0) / span


def _interpolate(t: float, r0: float, r1: float) -> float:
    return r0 + t * (r1 - r0)


class LinearScale:
    def __init__(self, domain: Sequence[float], range: Sequence[float]) -> None:
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range[0]), float(range[1]))

    def __call__(self, value: float) -> float:
        return _interpolate(_normalize(float(value), *self.domain), *self.range)

    def invert(self, px: float) -> float:
        return _interpolate(_normalize(float(px), *self.range), *self.domain)

    def ticks(self, count: int = 10) -> list[float]:
        lo, hi = sorted(self.domain)
        locs = MaxNLocator(nbins=count, steps=[1, 2, 5, 10]).tick_values(lo, hi)
        return [float(v) for v in locs if lo <= v <= hi]

    def nice(self, count: int = 10) -> LinearScale:
        lo, hi = sorted(self.domain)
        locs = MaxNLocator(nbins=count, steps=[1, 2, 5, 10]).tick_values(lo, hi)
        lo, hi = float(locs[0]), float(locs[-1])
        self.domain = (lo, hi) if self.domain[0] <= self.domain[1] else (hi, lo)
        return self


class SqrtScale(LinearScale):
    """Maps through sqrt so that the *area* of a mark is linear in the value."""

    @staticmethod
    def _sqrt(v: float) -> float:
        return math.copysign(math.sqrt(abs(v)), v)

    def __call__(self, value: float) -> float:
        d0, d1 = (self._sqrt(d) for d in self.domain)
        return _interpolate(_normalize(self._sqrt(float(value)), d0, d1), *self.range)

    def invert(self, px: float) -> float:
        d0, d1 = (self._sqrt(d) for d in self.domain)
        v = _interpolate(_normalize(float(px), *self.range), d0, d1)
        return math.copysign(v * v, v)


# Fixed-length intervals (pandas offset alias, seconds), smallest first.
_FIXED_INTERVALS: tuple[tuple[str, int], ...] = (
    ("1s", 1),
    ("5s", 5),
    ("15s", 15),
    ("30s", 30),
    ("1min", 60),
    ("5min", 300),
    ("15min", 900),
    ("30min", 1800),
    ("1h", 3600),
    ("3h", 3 * 3600),
    ("6h", 6 * 3600),
    ("12h", 12 * 3600),
    ("1D", 86400),
    ("2D", 2 * 86400),
    ("7D", 7 * 86400),
)


def _utc(ts: datetime) -> pd.Timestamp:
    stamp = pd.Timestamp(ts)
    if stamp.tzinfo is None:
        return stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC")


def _floor_period(stamp: pd.Timestamp, freq: str) -> pd.Timestamp:
    return stamp.tz_localize(None).to_period(freq).start_time.tz_localize("UTC")


def _ceil_period(stamp: pd.Timestamp, freq: str) -> pd.Timestamp:
    floor = _floor_period(stamp, freq)
    if floor == stamp:
        return floor
    return (stamp.tz_localize(None).to_period(freq) + 1).start_time.tz_localize("UTC")


def nice_time_interval(d0: datetime, d1: datetime, count: int = 10) -> str:
    """Pick the calendar interval whose ticks best cover [d0, d1] in about `count` steps."""
    span = abs((d1 - d0).total_seconds())
    for alias, seconds in _FIXED_INTERVALS:
        if seconds * count >= span:
            return alias
    if span <= count * 31 * 86400:
        return "M"
    return "Y"


class TimeScale:
    """Linear scale over absolute timestamps. Domain values are aware datetimes."""

    def __init__(self, domain: Sequence[datetime], range: Sequence[float]) -> None:
        self.domain = (domain[0], domain[1])
        self.range = (float(range[0]), float(range[1]))

    def __call__(self, value: datetime) -> float:
        t = _normalize(value.timestamp(), self.domain[0].timestamp(), self.domain[1].timestamp())
        return _interpolate(t, *self.range)

    def invert(self, px: float) -> datetime:
        secs = _interpolate(
            _normalize(float(px), *self.range), self.domain[0].timestamp(), self.domain[1].timestamp()
        )
        return datetime.fromtimestamp(secs, tz=timezone.utc)

    def nice(self, count: int = 10) -> TimeScale:
        lo, hi = _utc(self.domain[0]), _utc(self.domain[1])
        alias = nice_time_interval(lo, hi, count)
        if alias in ("M", "Y"):
            lo, hi = _floor_period(lo, alias), _ceil_period(hi, alias)
        else:
            lo, hi = lo.floor(alias), hi.ceil(alias)
        self.domain = (lo.to_pydatetime(), hi.to_pydatetime())
        return self


def tableau_palette() -> list[str]:
    return [to_hex(c) for c in matplotlib.colormaps["tab10"].colors]


class OrdinalColorScale:
    """
    Stable category -> colour mapping.

    Categories passed up front keep their position; unseen ones are appended in
    the order they are first asked for, wrapping around the palette.
    """

    def __init__(self, domain: Sequence[str] = (), palette: Sequence[str] | None = None) -> None:
        self.palette = list(palette or tableau_palette())
        self._index: dict[str, int] = {}
        for value in domain:
            self._index.setdefault(value, len(self._index))

    @property
    def domain(self) -> list[str]:
        return list(self._index)

    def __call__(self, value: str) -> str:
        idx = self._index.setdefault(value, len(self._index))
        return self.palette[idx % len(self.palette)]
