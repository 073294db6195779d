"""Detail-view playback: state machine, windowing, scheduling and render bridges."""

from .bridge import NarrativeBridge, RenderBridge
from .machine import Phase, PlaybackMachine, Transition
from .scheduler import AsyncioScheduler, ManualScheduler
from .view import DetailView, Frame
from .windowing import FullRange, OffsetFraction, TrailingEdge, ViewWindow

__all__ = [
    "AsyncioScheduler",
    "DetailView",
    "Frame",
    "FullRange",
    "ManualScheduler",
    "NarrativeBridge",
    "OffsetFraction",
    "Phase",
    "PlaybackMachine",
    "RenderBridge",
    "TrailingEdge",
    "Transition",
    "ViewWindow",
]
