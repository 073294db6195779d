"""Synthetic experiment calendar: minute offsets, day numbers and the estrus cycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

MINUTES_PER_DAY = 1440
DEFAULT_EXPERIMENT_START = pd.Timestamp(2023, 1, 1)
DEFAULT_EXPERIMENT_DAYS = 14

# Estrus recurs every four days starting on day 2.
ESTRUS_PERIOD_DAYS = 4
ESTRUS_FIRST_DAY = 2


def day_number(minutes):
    """Return the 1-based experiment day for minute offset(s) from the start."""
    days = np.floor_divide(minutes, MINUTES_PER_DAY) + 1
    if np.ndim(days) == 0:
        return int(days)
    return days.astype(np.int64)


def is_estrus(minutes):
    """Return whether the given minute offset(s) fall on an estrus day.

    A day ``d`` is an estrus day when ``(d - 2) mod 4 == 0`` (days 2, 6, 10, 14).
    Accepts a scalar (returns ``bool``) or an array (returns a boolean array).
    """
    flags = (np.asarray(day_number(minutes)) - ESTRUS_FIRST_DAY) % ESTRUS_PERIOD_DAYS == 0
    if np.ndim(flags) == 0:
        return bool(flags)
    return flags


def day_label(day: int) -> str:
    return f"Day {int(day):02d}"


def parse_start(value) -> pd.Timestamp:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_EXPERIMENT_START
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Cannot parse experiment start {value!r}") from exc
    if pd.isna(ts):
        raise ValueError(f"Cannot parse experiment start {value!r}")
    return ts.floor("min")


@dataclass(frozen=True)
class ExperimentCalendar:
    """Minute-granular calendar anchored at ``start`` (minute 0)."""

    start: pd.Timestamp = DEFAULT_EXPERIMENT_START
    days: int = DEFAULT_EXPERIMENT_DAYS

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", parse_start(self.start))
        if int(self.days) <= 0:
            raise ValueError(f"Experiment must span at least one day, got {self.days}")
        object.__setattr__(self, "days", int(self.days))

    @classmethod
    def from_row_count(cls, rows: int, start=None) -> "ExperimentCalendar":
        """Build a calendar covering ``rows`` minutes (must be whole days)."""
        if rows <= 0 or rows % MINUTES_PER_DAY:
            raise ValueError(f"{rows} rows do not make up whole days")
        return cls(start=parse_start(start), days=rows // MINUTES_PER_DAY)

    @property
    def total_minutes(self) -> int:
        return self.days * MINUTES_PER_DAY

    @property
    def end(self) -> pd.Timestamp:
        return self.time_at(self.total_minutes)

    def minutes(self) -> np.ndarray:
        return np.arange(self.total_minutes, dtype=np.int64)

    def time_at(self, minute) -> pd.Timestamp:
        return self.start + pd.Timedelta(minutes=float(minute))

    def times(self, minutes) -> pd.DatetimeIndex:
        return self.start + pd.to_timedelta(np.asarray(minutes), unit="min")

    def minute_of(self, ts) -> float:
        return (pd.Timestamp(ts) - self.start) / pd.Timedelta(minutes=1)

    def day_bounds(self, day: int) -> Tuple[int, int]:
        """Inclusive first/last minute offsets of 1-based ``day``."""
        first = (int(day) - 1) * MINUTES_PER_DAY
        return first, first + MINUTES_PER_DAY - 1
