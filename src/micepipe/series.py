"""Core data model: per-subject minute series, segments and series tagging."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Union

import numpy as np
import pandas as pd

from .utils.calendar import DEFAULT_EXPERIMENT_START


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


class EstrusType(str, Enum):
    ESTRUS = "estrus"
    NON_ESTRUS = "non-estrus"


@dataclass(frozen=True)
class Individual:
    """A series measured on one animal, e.g. ``m3`` or ``f11``."""

    subject_id: str


@dataclass(frozen=True)
class Aggregate:
    """A series derived from several animals, keyed by its group."""

    group_key: str


SeriesKind = Union[Individual, Aggregate]


class TimePoint(NamedTuple):
    time: pd.Timestamp
    value: float


@dataclass(frozen=True, eq=False)
class Series:
    """Ordered minute-resolution readings.

    ``minutes`` holds integer offsets from ``start``; ``values`` the readings
    (``NaN`` where nothing was measured). Both arrays are made read-only.
    """

    kind: SeriesKind
    minutes: np.ndarray
    values: np.ndarray
    sex: Optional[Sex] = None
    estrus_type: Optional[EstrusType] = None
    start: pd.Timestamp = DEFAULT_EXPERIMENT_START

    def __post_init__(self) -> None:
        minutes = np.array(self.minutes, dtype=np.int64)
        values = np.array(self.values, dtype=np.float64)
        if minutes.ndim != 1 or values.ndim != 1:
            raise ValueError("Series minutes and values must be 1-D")
        if minutes.shape != values.shape:
            raise ValueError(
                f"Series has {minutes.size} timestamps but {values.size} values"
            )
        minutes.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "minutes", minutes)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "start", pd.Timestamp(self.start))

    def __len__(self) -> int:
        return int(self.values.size)

    @property
    def subject_id(self) -> Optional[str]:
        return self.kind.subject_id if isinstance(self.kind, Individual) else None

    @property
    def is_aggregate(self) -> bool:
        return isinstance(self.kind, Aggregate)

    @property
    def label(self) -> str:
        if isinstance(self.kind, Individual):
            return self.kind.subject_id
        return self.kind.group_key

    @property
    def times(self) -> pd.DatetimeIndex:
        return self.start + pd.to_timedelta(self.minutes, unit="min")

    def points(self) -> List[TimePoint]:
        return [TimePoint(t, float(v)) for t, v in zip(self.times, self.values)]

    def with_values(self, values) -> "Series":
        return replace(self, values=values)

    def take(self, lo_idx: int, hi_idx: int) -> "Series":
        return replace(
            self,
            minutes=self.minutes[lo_idx:hi_idx],
            values=self.values[lo_idx:hi_idx],
        )

    def between(self, lo: float, hi: float) -> "Series":
        """Points with ``lo <= minute <= hi``."""
        lo_idx = int(np.searchsorted(self.minutes, lo, side="left"))
        hi_idx = int(np.searchsorted(self.minutes, hi, side="right"))
        return self.take(lo_idx, max(lo_idx, hi_idx))

    def equals(self, other: "Series") -> bool:
        return (
            np.array_equal(self.minutes, other.minutes)
            and np.array_equal(self.values, other.values, equal_nan=True)
            and self.start == other.start
        )


@dataclass(frozen=True, eq=False)
class Segment:
    """Maximal run of a female series sharing one estrus state."""

    estrus: bool
    data: Series

    def __len__(self) -> int:
        return len(self.data)
