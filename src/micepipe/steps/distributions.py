"""Temperature histograms per sex (the pie-chart distribution view)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Sequence

import numpy as np
import pandas as pd

from ..config import Settings
from ..series import Series


log = logging.getLogger("micepipe.distributions")


def bin_edges(low: float, high: float, width: float) -> np.ndarray:
    if width <= 0 or high <= low:
        raise ValueError(f"Invalid bin layout low={low} high={high} width={width}")
    count = int(round((high - low) / width))
    return low + width * np.arange(count + 1)


def bin_label(lo: float, hi: float) -> str:
    return f"{lo:.1f}-{hi:.1f}"


def temperature_bins(
    values, low: float = 35.0, high: float = 40.0, width: float = 0.5
) -> Dict[str, int]:
    """Count readings in half-open bins ``[lo, hi)`` from ``low`` up to ``high``.

    Readings outside ``[low, high)`` and NaN are not counted.
    """
    edges = bin_edges(low, high, width)
    data = pd.Series(np.ravel(np.asarray(values, dtype=np.float64))).dropna()
    binned = pd.cut(data, bins=edges, right=False)
    counts = binned.value_counts(sort=False)
    return {
        bin_label(interval.left, interval.right): int(count)
        for interval, count in counts.items()
    }


def bin_fractions(bins: Dict[str, int]) -> Dict[str, float]:
    total = sum(bins.values())
    if total == 0:
        return {key: 0.0 for key in bins}
    return {key: count / total for key, count in bins.items()}


def sex_distributions(
    male: Sequence[Series],
    female: Sequence[Series],
    low: float = 35.0,
    high: float = 40.0,
    width: float = 0.5,
) -> Dict[str, Dict[str, int]]:
    def _pool(group: Sequence[Series]) -> np.ndarray:
        if not group:
            return np.empty(0)
        return np.concatenate([s.values for s in group])

    return {
        "male": temperature_bins(_pool(male), low, high, width),
        "female": temperature_bins(_pool(female), low, high, width),
    }


def main(cfg: Settings) -> None:
    from .loader import DatasetKind, load_dataset

    dataset = load_dataset(cfg, DatasetKind.TEMPERATURE)
    dist = cfg.distribution
    bins = sex_distributions(dataset.male, dataset.female, dist.low, dist.high, dist.bin_width)
    out_dir = Path(cfg.output_directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "temperature_distribution.json"
    payload = {
        sex: {"counts": counts, "fractions": bin_fractions(counts)}
        for sex, counts in bins.items()
    }
    with open(out_path, "w", encoding="utf-8") as fp:
        json.dump(payload, fp, indent=2)
    log.info("Wrote temperature distribution → %s", out_path)
