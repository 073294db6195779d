"""Interfaces between the playback core and whatever draws it."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from ..series import Segment, Series
from ..steps.aggregation import Summary
from ..utils.calendar import day_label
from .machine import Phase

log = logging.getLogger("micepipe.bridge")


class RenderBridge:
    """Receives frames from :class:`~micepipe.playback.view.DetailView`.

    Subclasses override what they need; the defaults do nothing.
    """

    def on_tick(
        self,
        current_time: pd.Timestamp,
        phase: Phase,
        visible_male: Series,
        visible_female_segments: Sequence[Segment],
        window_range: Tuple[pd.Timestamp, pd.Timestamp],
    ) -> None:
        pass

    def on_summary(self, male_summary: Summary, female_summary: Summary) -> None:
        pass

    def on_phase_change(self, phase: Phase) -> None:
        pass


class NarrativeBridge(RenderBridge):
    """Builds the running text narrative shown beside the detail chart.

    One line is kept per experiment day reached (plus one for the final
    full-range view), e.g.
    ``Day 03 | male m3: max 37.41°C, min 36.02°C | female f3: ...``.
    """

    def __init__(self, male_label: str, female_label: str, start: pd.Timestamp, days: int, unit: str = "") -> None:
        self.male_label = male_label
        self.female_label = female_label
        self.start = pd.Timestamp(start)
        self.days = days
        self.unit = unit
        self.lines: List[str] = []
        self.phase_changes: List[Phase] = []
        self._heading: Optional[str] = None
        self._last_heading: Optional[str] = None

    def _describe(self, label: str, summary: Summary) -> str:
        if not summary:
            return f"{label}: no data"
        return f"{label}: max {summary.max:.2f}{self.unit}, min {summary.min:.2f}{self.unit}"

    def on_tick(self, current_time, phase, visible_male, visible_female_segments, window_range):
        day = int((pd.Timestamp(current_time) - self.start) // pd.Timedelta(days=1)) + 1
        self._heading = "All data" if day > self.days else day_label(day)

    def on_summary(self, male_summary, female_summary):
        if self._heading is None or self._heading == self._last_heading:
            return
        line = " | ".join(
            (
                self._heading,
                self._describe(f"male {self.male_label}", male_summary),
                self._describe(f"female {self.female_label}", female_summary),
            )
        )
        self.lines.append(line)
        self._last_heading = self._heading
        log.info(line)

    def on_phase_change(self, phase):
        self.phase_changes.append(phase)
        log.info("Phase → %s", phase.value)
