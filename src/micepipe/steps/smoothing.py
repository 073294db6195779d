from __future__ import annotations

import numpy as np
import pandas as pd

from ..series import Series


def centered_window(window_size: int) -> int:
    """Span actually averaged for ``window_size``.

    The window reaches ``window_size // 2`` points to each side, so even sizes
    average one extra point (a 4-minute window covers 5 minutes).
    """
    if int(window_size) != window_size or window_size < 1:
        raise ValueError(f"Smoothing window must be a positive integer, got {window_size!r}")
    return 2 * (int(window_size) // 2) + 1


def smooth_values(values: np.ndarray, window_size: int) -> np.ndarray:
    span = centered_window(window_size)
    values = np.asarray(values, dtype=np.float64)
    if span == 1:
        return values.copy()
    # Edges use whatever part of the window exists; NaN readings are skipped.
    rolled = pd.Series(values).rolling(window=span, center=True, min_periods=1).mean()
    return rolled.to_numpy(dtype=np.float64)


def smooth(series: Series, window_size: int) -> Series:
    """Centered moving average; timestamps and tagging pass through unchanged."""
    return series.with_values(smooth_values(series.values, window_size))
