"""NaN-aware stacking and mean/SEM aggregation across subjects."""

from __future__ import annotations

import warnings
from typing import Sequence

import numpy as np

from ..errors import AlignmentError


def stack_aligned(arrays: Sequence[np.ndarray]) -> np.ndarray:
    """Stack equal-length 1-D arrays into a 2-D array.

    Parameters
    ----------
    arrays : sequence of 1-D ndarrays
        Per-subject traces sharing one time base.

    Returns
    -------
    np.ndarray
        Shape ``(len(arrays), length)`` with dtype ``float64``.

    Raises
    ------
    ValueError
        If *arrays* is empty.
    AlignmentError
        If the arrays differ in length.
    """
    if not arrays:
        raise ValueError("stack_aligned requires at least one array")

    lengths = {len(a) for a in arrays}
    if len(lengths) != 1:
        raise AlignmentError(f"Cannot stack traces of differing lengths {sorted(lengths)}")
    return np.vstack([np.asarray(a, dtype=np.float64) for a in arrays])


def nanmean_sem(stacked: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Compute pointwise NaN-aware mean and SEM across axis 0.

    Parameters
    ----------
    stacked : np.ndarray
        2-D array of shape ``(n_subjects, n_timepoints)``.

    Returns
    -------
    mean : np.ndarray
        Shape ``(n_timepoints,)``. ``NaN`` where no subject has a reading.
    sem : np.ndarray
        Shape ``(n_timepoints,)``.  Where *n* <= 1 the SEM is set to 0.
    """
    with warnings.catch_warnings(), np.errstate(all="ignore"):
        warnings.simplefilter("ignore", category=RuntimeWarning)
        mean = np.nanmean(stacked, axis=0)
        n = np.sum(np.isfinite(stacked), axis=0)
        std = np.nanstd(stacked, axis=0, ddof=0)
        sem = np.where(n > 1, std / np.sqrt(n), 0.0)
    return mean, sem

