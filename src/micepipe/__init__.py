"""Mouse temperature/activity pipeline and detail-view playback engine."""

__version__ = "0.1.0"
