"""Average daily cycles (minute-of-day profiles) and the group line selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import Settings
from ..series import Aggregate, EstrusType, Individual, Series, Sex
from ..utils.calendar import MINUTES_PER_DAY, day_number, is_estrus
from .aggregation import mean_series
from .smoothing import smooth

log = logging.getLogger("micepipe.profiles")


class ProfileGroup(str, Enum):
    MALE = "male"
    ESTRUS = "estrus"
    NON_ESTRUS = "non-estrus"


def profile_group(series: Series) -> Optional[ProfileGroup]:
    if series.sex is Sex.MALE:
        return ProfileGroup.MALE
    if series.estrus_type is EstrusType.ESTRUS:
        return ProfileGroup.ESTRUS
    if series.estrus_type is EstrusType.NON_ESTRUS:
        return ProfileGroup.NON_ESTRUS
    return None


def daily_profile(series: Series, *, days: Optional[Iterable[int]] = None) -> Series:
    """Mean value at each minute of the day over the selected days (default all)."""
    day_of = day_number(series.minutes)
    minute_of_day = np.mod(series.minutes, MINUTES_PER_DAY)
    mask = np.ones(len(series), dtype=bool)
    if days is not None:
        mask = np.isin(day_of, list(days))
    if not mask.any():
        raise ValueError(f"{series.label}: no readings on the requested days")

    sums = np.bincount(minute_of_day[mask], weights=series.values[mask], minlength=MINUTES_PER_DAY)
    counts = np.bincount(minute_of_day[mask], minlength=MINUTES_PER_DAY)
    with np.errstate(invalid="ignore", divide="ignore"):
        profile = sums / counts
    return Series(
        kind=series.kind,
        minutes=np.arange(MINUTES_PER_DAY),
        values=profile,
        sex=series.sex,
        estrus_type=series.estrus_type,
        start=series.start,
    )


def subject_profiles(series: Series) -> List[Series]:
    """One profile for a male; an estrus and a non-estrus profile for a female.

    A female profile is only produced if at least one day of that kind exists.
    """
    if series.sex is not Sex.FEMALE:
        return [daily_profile(series)]

    days = np.unique(day_number(series.minutes))
    estrus_days = [int(d) for d in days if is_estrus((int(d) - 1) * MINUTES_PER_DAY)]
    other_days = [int(d) for d in days if int(d) not in estrus_days]
    out = []
    for estrus_type, chosen in ((EstrusType.ESTRUS, estrus_days), (EstrusType.NON_ESTRUS, other_days)):
        if not chosen:
            continue
        profile = daily_profile(series, days=chosen)
        out.append(
            Series(
                kind=Individual(f"{series.label}-{estrus_type.value}"),
                minutes=profile.minutes,
                values=profile.values,
                sex=series.sex,
                estrus_type=estrus_type,
                start=series.start,
            )
        )
    return out


def group_profiles(profiles: Sequence[Series]) -> Dict[ProfileGroup, Series]:
    grouped: Dict[ProfileGroup, List[Series]] = {}
    for profile in profiles:
        group = profile_group(profile)
        if group is not None:
            grouped.setdefault(group, []).append(profile)
    return {
        group: mean_series(members, group_key=f"{group.value}-avg")
        for group, members in grouped.items()
    }


@dataclass
class ProfileSelection:
    """Which groups are shown and whether each shows its average or its members."""

    enabled: Dict[ProfileGroup, bool] = field(
        default_factory=lambda: {g: True for g in ProfileGroup}
    )
    expanded: Dict[ProfileGroup, bool] = field(
        default_factory=lambda: {g: False for g in ProfileGroup}
    )

    def toggle(self, group: ProfileGroup) -> None:
        self.expanded[group] = not self.expanded.get(group, False)

    def activate(self, series: Series) -> Optional[str]:
        """Handle a click on a drawn line.

        Clicking an average expands/collapses its group; clicking an individual
        returns the subject id to open in the detail view.
        """
        if isinstance(series.kind, Aggregate):
            group = profile_group(series)
            if group is not None:
                self.toggle(group)
            return None
        return series.label.split("-", 1)[0]

    def chart_data(
        self,
        profiles: Sequence[Series],
        averages: Dict[ProfileGroup, Series],
    ) -> List[Series]:
        lines: List[Series] = []
        for group in ProfileGroup:
            if not self.enabled.get(group, True):
                continue
            if self.expanded.get(group, False):
                lines.extend(p for p in profiles if profile_group(p) is group)
            elif group in averages:
                lines.append(averages[group])
        return lines


def profile_table(lines: Sequence[Series], window: int) -> pd.DataFrame:
    table = pd.DataFrame({"minute_of_day": np.arange(MINUTES_PER_DAY)})
    for line in lines:
        table[line.label] = smooth(line, window).values
    return table


def main(cfg: Settings) -> None:
    from .loader import DatasetKind, load_dataset

    out_dir = Path(cfg.output_directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    selection = ProfileSelection(expanded={g: True for g in ProfileGroup})
    for kind in DatasetKind:
        dataset = load_dataset(cfg, kind)
        profiles = [p for s in (*dataset.male, *dataset.female) for p in subject_profiles(s)]
        averages = group_profiles(profiles)
        lines = list(averages.values()) + selection.chart_data(profiles, averages)
        table = profile_table(lines, cfg.smoothing.profile_window)
        out_path = out_dir / f"daily_profiles_{kind.value}.csv"
        table.to_csv(out_path, index=False)
        log.info("Wrote %d profile lines → %s", len(lines), out_path)
