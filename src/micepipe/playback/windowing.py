"""Visible-window policies for the detail playback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..config import PlaybackSettings


@dataclass(frozen=True)
class ViewWindow:
    """Inclusive ``[start, end]`` in minutes since the experiment start."""

    start: float
    end: float

    @property
    def width(self) -> float:
        return self.end - self.start

    def at_fraction(self, fraction: float) -> float:
        return self.start + self.width * min(max(float(fraction), 0.0), 1.0)

    def as_tuple(self) -> Tuple[float, float]:
        return self.start, self.end


class WindowingPolicy:
    """Where the sliding window sits relative to the playback clock."""

    name = "base"

    def window(self, current: float, duration: float, total: float) -> ViewWindow:
        raise NotImplementedError


class TrailingEdge(WindowingPolicy):
    """Current time is the right edge of the window."""

    name = "trailing_edge"

    def window(self, current, duration, total):
        return ViewWindow(current - duration, current)


@dataclass(frozen=True)
class OffsetFraction(WindowingPolicy):
    """Current time is held at ``fraction`` of the window width."""

    fraction: float = 0.6
    name = "offset_fraction"

    def __post_init__(self) -> None:
        if not 0.0 <= self.fraction <= 1.0:
            raise ValueError(f"offset fraction must lie in [0, 1], got {self.fraction}")

    def window(self, current, duration, total):
        lead = duration * self.fraction
        return ViewWindow(current - lead, current - lead + duration)


class FullRange(WindowingPolicy):
    name = "full_range"

    def window(self, current, duration, total):
        return ViewWindow(0, total)


def sliding_window(
    policy: WindowingPolicy, current: float, duration: float, total: float
) -> ViewWindow:
    """Apply ``policy``, pinning the window to ``[0, duration]`` during the lead-in.

    The lead-in lasts while the clock is below ``duration``, whatever the policy.
    """
    if current < duration:
        return ViewWindow(0, duration)
    return policy.window(current, duration, total)


def policy_from_settings(settings: PlaybackSettings) -> WindowingPolicy:
    if settings.windowing == "offset_fraction":
        return OffsetFraction(settings.offset_fraction)
    if settings.windowing == "full_range":
        return FullRange()
    return TrailingEdge()
