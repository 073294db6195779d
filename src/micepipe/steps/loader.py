"""Turn per-minute wide CSVs (one column per animal) into per-subject series."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from ..config import Settings
from ..errors import MalformedInputError
from ..series import Individual, Series, Sex
from ..utils.calendar import MINUTES_PER_DAY, ExperimentCalendar
from ..utils.columns import (
    FEMALE_PREFIX,
    MALE_PREFIX,
    find_subject_columns,
    parse_subject_id,
    subject_key,
)
from ..utils.csvs import require_dataset_csv

log = logging.getLogger("micepipe.loader")


class DatasetKind(str, Enum):
    TEMPERATURE = "temperature"
    ACTIVITY = "activity"

    @property
    def fallback(self) -> float:
        """Value substituted for missing or non-numeric cells."""
        # An unreadable temperature is unknown; an unreadable activity count is no movement.
        return float("nan") if self is DatasetKind.TEMPERATURE else 0.0

    @property
    def unit(self) -> str:
        return "°C" if self is DatasetKind.TEMPERATURE else ""


def read_dataset_csv(path: Path | str) -> pd.DataFrame:
    df = pd.read_csv(path)
    df.columns = df.columns.astype(str).str.strip()
    return df


def _check_rows(rows: int, calendar: Optional[ExperimentCalendar]) -> ExperimentCalendar:
    if rows <= 0 or rows % MINUTES_PER_DAY:
        raise MalformedInputError(
            f"Expected a positive multiple of {MINUTES_PER_DAY} rows (whole days), got {rows}"
        )
    if calendar is None:
        return ExperimentCalendar.from_row_count(rows)
    if rows != calendar.total_minutes:
        raise MalformedInputError(
            f"Dataset covers {rows // MINUTES_PER_DAY} days but the experiment is "
            f"configured for {calendar.days}"
        )
    return calendar


def load_subject_series(
    frame: pd.DataFrame,
    prefix: str,
    *,
    kind: DatasetKind,
    calendar: Optional[ExperimentCalendar] = None,
) -> List[Series]:
    """Build one series per ``prefix`` column, ``value[i]`` taken from row ``i``.

    Row ``i`` is minute ``i`` after ``calendar.start``. When ``calendar`` is
    omitted it is inferred from the row count.

    Raises
    ------
    MalformedInputError
        Partial days, a row count that disagrees with ``calendar`` or no
        ``prefix`` columns at all.
    """
    calendar = _check_rows(len(frame), calendar)
    columns = find_subject_columns(frame, prefix)
    if not columns:
        raise MalformedInputError(
            f"No subject columns with prefix {prefix!r} among {list(frame.columns)}"
        )

    sex = Sex.MALE if prefix.lower() == MALE_PREFIX else Sex.FEMALE
    minutes = calendar.minutes()
    out: List[Series] = []
    for col in columns:
        _, number = parse_subject_id(col)
        raw = pd.to_numeric(frame[col], errors="coerce")
        missing = int(raw.isna().sum())
        if missing:
            log.info(
                "%s: %d missing/non-numeric %s readings replaced with %s",
                col, missing, kind.value, kind.fallback,
            )
        values = raw.fillna(kind.fallback).to_numpy(dtype=np.float64)
        out.append(
            Series(
                kind=Individual(subject_key(prefix, number)),
                minutes=minutes,
                values=values,
                sex=sex,
                start=calendar.start,
            )
        )
    return out


@dataclass(frozen=True)
class MouseDataset:
    """Male and female series for one measurement kind."""

    kind: DatasetKind
    calendar: ExperimentCalendar
    male: Tuple[Series, ...]
    female: Tuple[Series, ...]

    def subject(self, subject_id: str) -> Series:
        wanted = subject_id.strip().lower()
        for series in (*self.male, *self.female):
            if series.subject_id == wanted:
                return series
        raise KeyError(f"No subject {subject_id!r} in {self.kind.value} dataset")

    def pair(self, number: int) -> Tuple[Series, Series]:
        """The male and female series sharing subject ``number``."""
        return (
            self.subject(subject_key(MALE_PREFIX, number)),
            self.subject(subject_key(FEMALE_PREFIX, number)),
        )


def dataset_files(cfg: Settings, kind: DatasetKind) -> Tuple[str, str]:
    if kind is DatasetKind.TEMPERATURE:
        return cfg.files.male_temperature, cfg.files.female_temperature
    return cfg.files.male_activity, cfg.files.female_activity


def build_dataset(
    kind: DatasetKind,
    male_frame: pd.DataFrame,
    female_frame: pd.DataFrame,
    calendar: Optional[ExperimentCalendar] = None,
) -> MouseDataset:
    if len(male_frame) != len(female_frame):
        raise MalformedInputError(
            f"Male and female {kind.value} tables differ in length "
            f"({len(male_frame)} vs {len(female_frame)} rows)"
        )
    calendar = _check_rows(len(male_frame), calendar)
    male = load_subject_series(male_frame, MALE_PREFIX, kind=kind, calendar=calendar)
    female = load_subject_series(female_frame, FEMALE_PREFIX, kind=kind, calendar=calendar)
    return MouseDataset(kind=kind, calendar=calendar, male=tuple(male), female=tuple(female))


def load_dataset(cfg: Settings, kind: DatasetKind) -> MouseDataset:
    male_name, female_name = dataset_files(cfg, kind)
    male_path = require_dataset_csv(cfg.data_directory, male_name)
    female_path = require_dataset_csv(cfg.data_directory, female_name)
    log.info("Loading %s data from %s and %s", kind.value, male_path.name, female_path.name)
    calendar = cfg.calendar() if cfg.validate_calendar else None
    dataset = build_dataset(
        kind, read_dataset_csv(male_path), read_dataset_csv(female_path), calendar
    )
    log.info(
        "%s: %d male and %d female subjects over %d days",
        kind.value, len(dataset.male), len(dataset.female), dataset.calendar.days,
    )
    return dataset


def main(cfg: Settings) -> None:
    for kind in DatasetKind:
        load_dataset(cfg, kind)
    log.info("All datasets in %s loaded cleanly", Path(cfg.data_directory).expanduser())
