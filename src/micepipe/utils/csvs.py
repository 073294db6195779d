"""Helpers for locating the four per-minute dataset CSVs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

log = logging.getLogger("micepipe.csvs")

# Alternate spellings used by other exports of the same recordings.
_FILE_ALIASES: Dict[str, tuple[str, ...]] = {
    "male_temp.csv": ("MaleTemp.csv", "male_temperature.csv"),
    "fem_temp.csv": ("FemTemp.csv", "female_temp.csv", "female_temperature.csv"),
    "male_act.csv": ("MaleAct.csv", "male_activity.csv"),
    "fem_act.csv": ("FemAct.csv", "female_act.csv", "female_activity.csv"),
}

__all__ = ["find_dataset_csv", "require_dataset_csv"]


def _candidates(name: str) -> Iterable[str]:
    yield name
    yield from _FILE_ALIASES.get(name, ())


def find_dataset_csv(data_dir: Path | str, name: str) -> Optional[Path]:
    """Return the CSV for ``name`` under ``data_dir`` (case-insensitive), if any."""

    base = Path(data_dir).expanduser()
    if not base.is_dir():
        return None
    by_lower = {p.name.lower(): p for p in base.iterdir() if p.is_file()}
    for candidate in _candidates(name):
        hit = by_lower.get(candidate.lower())
        if hit is not None:
            if hit.name != name:
                log.debug("Using %s for requested dataset %s", hit.name, name)
            return hit
    return None


def require_dataset_csv(data_dir: Path | str, name: str) -> Path:
    path = find_dataset_csv(data_dir, name)
    if path is None:
        tried = ", ".join(_candidates(name))
        raise FileNotFoundError(
            f"Dataset {name!r} not found in {Path(data_dir).expanduser()} "
            f"(looked for: {tried})"
        )
    return path
