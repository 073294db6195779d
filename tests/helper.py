"""Builders for synthetic per-minute mouse tables used across the tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pandas as pd

MINUTES_PER_DAY = 1440


def wide_table(
    prefix: str,
    *,
    days: int = 14,
    subjects: int = 13,
    value: float | Callable[[np.ndarray, int], np.ndarray] = 37.0,
    index_column: Optional[str] = "minute",
) -> pd.DataFrame:
    """One row per minute, one ``{prefix}{n}`` column per subject.

    ``value`` is a constant or ``f(minutes, subject_number) -> values``.
    """
    minutes = np.arange(days * MINUTES_PER_DAY)
    data = {}
    if index_column:
        data[index_column] = minutes + 1
    for n in range(1, subjects + 1):
        if callable(value):
            data[f"{prefix}{n}"] = value(minutes, n)
        else:
            data[f"{prefix}{n}"] = np.full(minutes.size, float(value))
    return pd.DataFrame(data)


def write_datasets(
    data_dir: Path,
    *,
    days: int = 14,
    subjects: int = 3,
    temperature: float | Callable = 37.0,
    activity: float | Callable = 5.0,
) -> Path:
    data_dir.mkdir(parents=True, exist_ok=True)
    wide_table("m", days=days, subjects=subjects, value=temperature).to_csv(data_dir / "male_temp.csv", index=False)
    wide_table("f", days=days, subjects=subjects, value=temperature).to_csv(data_dir / "fem_temp.csv", index=False)
    wide_table("m", days=days, subjects=subjects, value=activity).to_csv(data_dir / "male_act.csv", index=False)
    wide_table("f", days=days, subjects=subjects, value=activity).to_csv(data_dir / "fem_act.csv", index=False)
    return data_dir
