"""Split female series into runs of constant estrus state."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

import numpy as np

from ..series import Segment, Series
from ..utils.calendar import is_estrus


def segment(series: Series) -> List[Segment]:
    """Partition ``series`` into maximal runs sharing one estrus state.

    Adjacent segments always alternate state, and concatenating the segments'
    data in order gives back ``series``. An empty series yields no segments.
    """
    if len(series) == 0:
        return []

    flags = is_estrus(series.minutes)
    starts = np.concatenate(([0], np.flatnonzero(np.diff(flags.astype(np.int8))) + 1))
    ends = np.concatenate((starts[1:], [len(series)]))
    return [
        Segment(estrus=bool(flags[lo]), data=series.take(int(lo), int(hi)))
        for lo, hi in zip(starts, ends)
    ]


def concat_segments(segments: Sequence[Segment]) -> Series:
    """Rejoin segments produced by :func:`segment` into a single series."""
    if not segments:
        raise ValueError("concat_segments requires at least one segment")
    return replace(
        segments[0].data,
        minutes=np.concatenate([s.data.minutes for s in segments]),
        values=np.concatenate([s.data.values for s in segments]),
    )


def clip_segments(segments: Sequence[Segment], lo: float, hi: float) -> List[Segment]:
    """Restrict each segment to ``lo <= minute <= hi``, dropping empty ones."""
    clipped = []
    for seg in segments:
        part = seg.data.between(lo, hi)
        if len(part):
            clipped.append(Segment(estrus=seg.estrus, data=part))
    return clipped
