from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

import pandas as pd

MALE_PREFIX = "m"
FEMALE_PREFIX = "f"

_SUBJECT_PATTERN = re.compile(r"^(?P<prefix>[mf])(?P<number>\d+)$")

# Row-index columns seen in exports; never treated as subjects.
_INDEX_ALIASES = (
    "minute",
    "minuteIndex",
    "minute_index",
    "time (min)",
    "time",
    "index",
    "Unnamed: 0",
)


def _normalise(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(name).lower())


def _resolve_column(df: pd.DataFrame, aliases: Iterable[str]) -> Optional[str]:
    lookup = {_normalise(col): col for col in df.columns}
    for alias in aliases:
        key = _normalise(alias)
        if key in lookup:
            return lookup[key]
    return None


def parse_subject_id(name: str) -> Optional[Tuple[str, int]]:
    """Return ``(prefix, number)`` for column names such as ``m3`` or ``F12``."""

    match = _SUBJECT_PATTERN.match(_normalise(name))
    if not match:
        return None
    return match.group("prefix"), int(match.group("number"))


def find_index_column(df: pd.DataFrame) -> Optional[str]:
    return _resolve_column(df, _INDEX_ALIASES)


def find_subject_columns(df: pd.DataFrame, prefix: str) -> List[str]:
    """Subject columns for ``prefix`` ordered by subject number."""

    prefix = prefix.lower()
    index_col = find_index_column(df)
    found: List[Tuple[int, str]] = []
    for col in df.columns:
        if col == index_col:
            continue
        parsed = parse_subject_id(col)
        if parsed and parsed[0] == prefix:
            found.append((parsed[1], col))
    return [col for _, col in sorted(found)]


def subject_key(prefix: str, number: int) -> str:
    return f"{prefix.lower()}{int(number)}"


__all__ = [
    "MALE_PREFIX",
    "FEMALE_PREFIX",
    "parse_subject_id",
    "find_index_column",
    "find_subject_columns",
    "subject_key",
]
