"""Playback state machine for the per-mouse detail view.

The machine owns the simulation clock (minutes since the experiment start),
the phase and the interaction sub-states. It is pure state: it never renders,
never sleeps and never schedules anything. :class:`~micepipe.playback.view.DetailView`
drives it from a scheduler and pushes frames to render bridges.

Phases
======
``ANIMATING``
    Ticks advance the clock by ``step_minutes``; data up to the clock is
    revealed progressively inside a sliding window.
``FINAL``
    Reached when the clock hits the experiment end (or on skip). The whole
    experiment is shown; brushing a sub-range is allowed.

Command precedence
==================
* Scrubbing pauses ticking; releasing the scrub leaves playback paused.
* Scrubbing is ignored while a brush override is active.
* Brushing is ignored outside ``FINAL``.
* Restart clears everything and resumes ticking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .windowing import FullRange, TrailingEdge, ViewWindow, WindowingPolicy, sliding_window

log = logging.getLogger("micepipe.playback")

DEFAULT_STEP_MINUTES = 20


class Phase(str, Enum):
    ANIMATING = "animating"
    FINAL = "final"


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class SkipToEnd:
    pass


@dataclass(frozen=True)
class Scrub:
    fraction: float


@dataclass(frozen=True)
class EndScrub:
    pass


@dataclass(frozen=True)
class Brush:
    start_fraction: float
    end_fraction: float


@dataclass(frozen=True)
class ResetScope:
    pass


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class Resize:
    pass


Command = Union[Tick, Pause, Resume, SkipToEnd, Scrub, EndScrub, Brush, ResetScope, Restart, Resize]


@dataclass(frozen=True)
class Transition:
    """Outcome of one command: whether it was applied and whether the phase moved."""

    accepted: bool
    phase_changed: bool = False


IGNORED = Transition(accepted=False)


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class PlaybackMachine:
    def __init__(
        self,
        total_minutes: int,
        *,
        window_duration: int,
        step_minutes: int = DEFAULT_STEP_MINUTES,
        policy: Optional[WindowingPolicy] = None,
    ) -> None:
        if total_minutes <= 0:
            raise ValueError("total_minutes must be positive")
        if window_duration <= 0 or step_minutes <= 0:
            raise ValueError("window_duration and step_minutes must be positive")
        self.total_minutes = int(total_minutes)
        self.window_duration = int(window_duration)
        self.step_minutes = int(step_minutes)
        self.policy = policy or TrailingEdge()

        self.current: float = 0
        self.phase = Phase.ANIMATING
        self.paused = False
        self.scrubbing = False
        self.brush_window: Optional[ViewWindow] = None

    # ------------------------------------------------------------------
    # queries

    @property
    def running(self) -> bool:
        """Whether ticks should currently be scheduled."""
        return self.phase is Phase.ANIMATING and not self.paused and not self.scrubbing

    @property
    def brush_active(self) -> bool:
        return self.brush_window is not None

    @property
    def progressive(self) -> bool:
        """Data is revealed up to the clock rather than sliced by the window."""
        return self.phase is Phase.ANIMATING and self.brush_window is None

    def window(self) -> ViewWindow:
        if self.brush_window is not None:
            return self.brush_window
        if self.phase is Phase.FINAL:
            return FullRange().window(self.current, self.window_duration, self.total_minutes)
        return sliding_window(self.policy, self.current, self.window_duration, self.total_minutes)

    def visible_range(self) -> ViewWindow:
        """Minute range whose data points are shown right now."""
        if self.progressive:
            return ViewWindow(0, self.current)
        return self.window()

    # ------------------------------------------------------------------
    # commands

    def tick(self) -> Transition:
        if not self.running:
            return IGNORED
        self.current = self.current + self.step_minutes
        if self.current >= self.total_minutes:
            self.current = self.total_minutes
            self.phase = Phase.FINAL
            log.info("Playback reached the experiment end; switching to final view")
            return Transition(accepted=True, phase_changed=True)
        return Transition(accepted=True)

    def pause(self) -> Transition:
        if self.paused:
            return IGNORED
        self.paused = True
        return Transition(accepted=True)

    def resume(self) -> Transition:
        if not self.paused and not self.scrubbing:
            return IGNORED
        self.paused = False
        self.scrubbing = False
        return Transition(accepted=True)

    def skip_to_end(self) -> Transition:
        changed = self.phase is Phase.ANIMATING
        self.current = self.total_minutes
        self.phase = Phase.FINAL
        self.scrubbing = False
        return Transition(accepted=True, phase_changed=changed)

    def scrub(self, fraction: float) -> Transition:
        """Set the clock from a pointer position across the full experiment."""
        if self.brush_window is not None:
            log.debug("Scrub ignored while a brushed range is shown")
            return IGNORED
        self.scrubbing = True
        self.paused = True
        self.current = round(_clamp01(fraction) * self.total_minutes)
        return Transition(accepted=True)

    def end_scrub(self) -> Transition:
        if not self.scrubbing:
            return IGNORED
        self.scrubbing = False
        return Transition(accepted=True)

    def brush(self, start_fraction: float, end_fraction: float) -> Transition:
        """Zoom into a sub-range given as fractions of the current window."""
        if self.phase is not Phase.FINAL:
            log.debug("Brush ignored during animation")
            return IGNORED
        lo, hi = sorted((_clamp01(start_fraction), _clamp01(end_fraction)))
        if hi <= lo:
            return IGNORED
        current_window = self.window()
        self.brush_window = ViewWindow(current_window.at_fraction(lo), current_window.at_fraction(hi))
        return Transition(accepted=True)

    def reset_scope(self) -> Transition:
        if self.brush_window is None:
            return IGNORED
        self.brush_window = None
        return Transition(accepted=True)

    def restart(self) -> Transition:
        changed = self.phase is Phase.FINAL
        self.current = 0
        self.phase = Phase.ANIMATING
        self.paused = False
        self.scrubbing = False
        self.brush_window = None
        return Transition(accepted=True, phase_changed=changed)

    def resize(self) -> Transition:
        return Transition(accepted=True)

    def dispatch(self, command: Command) -> Transition:
        if isinstance(command, Tick):
            return self.tick()
        if isinstance(command, Pause):
            return self.pause()
        if isinstance(command, Resume):
            return self.resume()
        if isinstance(command, SkipToEnd):
            return self.skip_to_end()
        if isinstance(command, Scrub):
            return self.scrub(command.fraction)
        if isinstance(command, EndScrub):
            return self.end_scrub()
        if isinstance(command, Brush):
            return self.brush(command.start_fraction, command.end_fraction)
        if isinstance(command, ResetScope):
            return self.reset_scope()
        if isinstance(command, Restart):
            return self.restart()
        if isinstance(command, Resize):
            return self.resize()
        raise TypeError(f"Unknown playback command {command!r}")
