"""Detail view: one male/female pair animated through the experiment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from ..config import PlaybackSettings
from ..series import Segment, Series
from ..steps.aggregation import Summary, narrative_range, range_summary
from ..steps.segmentation import clip_segments, segment
from ..steps.smoothing import smooth
from ..utils.calendar import ExperimentCalendar
from .bridge import RenderBridge
from .machine import (
    Brush,
    Command,
    EndScrub,
    Pause,
    Phase,
    PlaybackMachine,
    Restart,
    ResetScope,
    Resize,
    Resume,
    Scrub,
    SkipToEnd,
    Transition,
)
from .scheduler import Scheduler, TimerHandle
from .windowing import ViewWindow, WindowingPolicy, policy_from_settings

log = logging.getLogger("micepipe.playback.view")


@dataclass(frozen=True)
class Frame:
    current_minute: float
    current_time: pd.Timestamp
    phase: Phase
    window: ViewWindow
    window_range: Tuple[pd.Timestamp, pd.Timestamp]
    male: Series
    female_segments: List[Segment]
    male_summary: Summary
    female_summary: Summary


class DetailView:
    """Owns the smoothed series, segments, clock and tick timer of one view.

    Every accepted command or tick produces a :class:`Frame` that is pushed to
    each bridge. A bridge that raises is logged and skipped; the clock and the
    tick schedule are unaffected.
    """

    def __init__(
        self,
        male: Series,
        female: Series,
        *,
        calendar: ExperimentCalendar,
        scheduler: Scheduler,
        settings: Optional[PlaybackSettings] = None,
        smoothing_window: int = 15,
        bridges: Sequence[RenderBridge] = (),
        policy: Optional[WindowingPolicy] = None,
    ) -> None:
        settings = settings or PlaybackSettings()
        self.calendar = calendar
        self.scheduler = scheduler
        self.tick_interval = settings.tick_interval_ms / 1000.0
        self.bridges: List[RenderBridge] = list(bridges)

        self.male = smooth(male, smoothing_window)
        self.female = smooth(female, smoothing_window)
        self.segments = segment(self.female)

        self.machine = PlaybackMachine(
            calendar.total_minutes,
            window_duration=settings.window_duration_minutes,
            step_minutes=settings.step_minutes,
            policy=policy or policy_from_settings(settings),
        )
        self._timer: Optional[TimerHandle] = None
        self.ticks = 0

    # ------------------------------------------------------------------
    # lifecycle

    def start(self) -> Frame:
        frame = self.render()
        self._sync_timer()
        return frame

    def close(self) -> None:
        self._cancel_timer()

    # ------------------------------------------------------------------
    # bridge → core

    def pause(self) -> Transition:
        return self.dispatch(Pause())

    def resume(self) -> Transition:
        return self.dispatch(Resume())

    def skip_to_end(self) -> Transition:
        return self.dispatch(SkipToEnd())

    def restart(self) -> Transition:
        return self.dispatch(Restart())

    def scrub(self, pointer_fraction: float) -> Transition:
        return self.dispatch(Scrub(pointer_fraction))

    def end_scrub(self) -> Transition:
        return self.dispatch(EndScrub())

    def brush(self, start_fraction: float, end_fraction: float) -> Transition:
        return self.dispatch(Brush(start_fraction, end_fraction))

    def reset_scope(self) -> Transition:
        return self.dispatch(ResetScope())

    def resize(self) -> Transition:
        return self.dispatch(Resize())

    def dispatch(self, command: Command) -> Transition:
        if isinstance(command, Restart):
            self._cancel_timer()
        transition = self.machine.dispatch(command)
        self._apply(transition)
        return transition

    # ------------------------------------------------------------------
    # internals

    def _apply(self, transition: Transition) -> None:
        # Timer follows machine state before any bridge runs.
        self._sync_timer()
        if transition.phase_changed:
            self._notify_phase(self.machine.phase)
        if transition.accepted:
            self.render()

    def _on_timer(self) -> None:
        self._timer = None
        transition = self.machine.tick()
        if transition.accepted:
            self.ticks += 1
        self._apply(transition)

    def _sync_timer(self) -> None:
        if self.machine.running:
            if self._timer is None:
                self._timer = self.scheduler.call_later(self.tick_interval, self._on_timer)
        else:
            self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify_phase(self, phase: Phase) -> None:
        for bridge in self.bridges:
            try:
                bridge.on_phase_change(phase)
            except Exception:
                log.exception("Render bridge %r failed on phase change", bridge)

    def frame(self) -> Frame:
        machine = self.machine
        window = machine.window()
        visible = machine.visible_range()
        lo, hi = narrative_range(self.calendar, machine.current)
        return Frame(
            current_minute=machine.current,
            current_time=self.calendar.time_at(machine.current),
            phase=machine.phase,
            window=window,
            window_range=(self.calendar.time_at(window.start), self.calendar.time_at(window.end)),
            male=self.male.between(visible.start, visible.end),
            female_segments=clip_segments(self.segments, visible.start, visible.end),
            male_summary=range_summary(self.male, lo, hi),
            female_summary=range_summary(self.female, lo, hi),
        )

    def render(self) -> Frame:
        frame = self.frame()
        for bridge in self.bridges:
            try:
                bridge.on_tick(
                    frame.current_time,
                    frame.phase,
                    frame.male,
                    frame.female_segments,
                    frame.window_range,
                )
                bridge.on_summary(frame.male_summary, frame.female_summary)
            except Exception:
                log.exception("Render bridge %r failed at minute %s", bridge, frame.current_minute)
        return frame
