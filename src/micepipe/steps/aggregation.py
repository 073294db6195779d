"""Cross-subject means and range/day summaries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..config import Settings
from ..errors import AlignmentError
from ..series import Aggregate, Series
from ..utils.calendar import ExperimentCalendar, day_number, is_estrus, MINUTES_PER_DAY
from ..utils.nanstats import nanmean_sem, stack_aligned

log = logging.getLogger("micepipe.aggregation")


@dataclass(frozen=True)
class RangeSummary:
    min: float
    max: float
    mean: float
    count: int

    def format(self, unit: str = "") -> str:
        return f"min {self.min:.2f}{unit}, max {self.max:.2f}{unit}, mean {self.mean:.2f}{unit}"


@dataclass(frozen=True)
class NoDataInRange:
    """Summary result for a range holding no measured points.

    Falsy so callers can write ``if summary:``; it has no numeric fields on
    purpose, so it can never be formatted as ``0``.
    """

    start: float
    end: float

    def __bool__(self) -> bool:
        return False

    def format(self, unit: str = "") -> str:
        return "no data"


Summary = Union[RangeSummary, NoDataInRange]


def _common(values):
    distinct = set(values)
    return distinct.pop() if len(distinct) == 1 else None


def mean_series(series_list: Sequence[Series], group_key: Optional[str] = None) -> Series:
    """Pointwise mean across ``series_list``.

    Every input must share the same timestamps; NaN readings are skipped and a
    minute where no subject has a reading stays NaN.

    Raises
    ------
    AlignmentError
        Inputs differ in length, minute offsets or start time.
    """
    if not series_list:
        raise ValueError("mean_series requires at least one series")

    first = series_list[0]
    for other in series_list[1:]:
        if len(other) != len(first):
            raise AlignmentError(
                f"{other.label} has {len(other)} points, {first.label} has {len(first)}"
            )
        if other.start != first.start or not np.array_equal(other.minutes, first.minutes):
            raise AlignmentError(f"{other.label} is not on the time base of {first.label}")

    mean, _ = nanmean_sem(stack_aligned([s.values for s in series_list]))
    return Series(
        kind=Aggregate(group_key or "mean"),
        minutes=first.minutes,
        values=mean,
        sex=_common(s.sex for s in series_list),
        estrus_type=_common(s.estrus_type for s in series_list),
        start=first.start,
    )


def range_summary(series: Series, start: float, end: float) -> Summary:
    """Min/max/mean of measured points with ``start <= minute <= end``."""
    part = series.between(start, end).values
    finite = part[np.isfinite(part)]
    if finite.size == 0:
        return NoDataInRange(start=start, end=end)
    return RangeSummary(
        min=float(finite.min()),
        max=float(finite.max()),
        mean=float(finite.mean()),
        count=int(finite.size),
    )


def narrative_range(calendar: ExperimentCalendar, current_minute: float) -> Tuple[int, int]:
    """Range summarised while the clock sits at ``current_minute``.

    The current day while the clock is inside the experiment, the whole
    experiment once it has reached the end.
    """
    day = day_number(int(current_minute))
    if day > calendar.days:
        return 0, calendar.total_minutes - 1
    return calendar.day_bounds(day)


def daily_summary(series: Series) -> pd.DataFrame:
    """One row per experiment day: ``day, min, max, mean, estrus``."""
    frame = pd.DataFrame({"day": day_number(series.minutes), "value": series.values})
    if frame.empty:
        return pd.DataFrame(columns=["day", "min", "max", "mean", "estrus"])
    stats = frame.groupby("day")["value"].agg(["min", "max", "mean"]).reset_index()
    stats["estrus"] = is_estrus((stats["day"].to_numpy() - 1) * MINUTES_PER_DAY)
    return stats


def _subject_days(series: Series, prefix: str) -> pd.DataFrame:
    stats = daily_summary(series).rename(
        columns={"min": f"{prefix}_min", "max": f"{prefix}_max", "mean": f"{prefix}_mean"}
    )
    stats.insert(0, "subject", series.label)
    stats.insert(1, "sex", series.sex.value if series.sex else "")
    return stats


def main(cfg: Settings) -> None:
    from .loader import DatasetKind, load_dataset

    temperature = load_dataset(cfg, DatasetKind.TEMPERATURE)
    activity = load_dataset(cfg, DatasetKind.ACTIVITY)

    temp_rows = pd.concat(
        [_subject_days(s, "temperature") for s in (*temperature.male, *temperature.female)],
        ignore_index=True,
    )
    act_rows = pd.concat(
        [_subject_days(s, "activity") for s in (*activity.male, *activity.female)],
        ignore_index=True,
    ).drop(columns=["estrus"])
    table = temp_rows.merge(act_rows, on=["subject", "sex", "day"], how="outer")

    out_dir = Path(cfg.output_directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "day_summaries.csv"
    table.to_csv(out_path, index=False)
    log.info("Wrote %d subject-day rows → %s", len(table), out_path)
