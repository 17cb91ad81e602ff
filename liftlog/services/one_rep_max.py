"""Estimated one-rep max from weight, reps and RPE.

effective_reps = clamp(reps + RPE - 10 rounded half up, 1, 12), RPE defaulting to 10,
then 1RM = weight / multiplier(effective_reps). Invalid input yields 0 rather
than raising, so callers can treat 0 as "no estimate".
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from liftlog.core.constants import MAX_RPE, MIN_RPE
from liftlog.core.enums import SetType

# Effective reps -> fraction of 1RM
REPS_MULTIPLIER: dict[int, float] = {
    1: 1.00,
    2: 0.94,
    3: 0.91,
    4: 0.88,
    5: 0.86,
    6: 0.83,
    7: 0.82,
    8: 0.78,
    9: 0.77,
    10: 0.75,
    11: 0.73,
    12: 0.72,
}
DEFAULT_MULTIPLIER = 0.72

# Percent of 1RM -> approximate reps achievable at that load
PERCENTAGE_REPS: dict[int, str] = {
    100: "1",
    95: "2",
    90: "3-4",
    85: "5-6",
    80: "7-8",
    75: "9-10",
    70: "11-12",
    65: "13-15",
    60: "16-18",
    55: "19-22",
    50: "23+",
}


def effective_reps(reps: int, rpe: float | None = None) -> int:
    """Reps adjusted for reps left in reserve, clamped to the table range.

    Half-RPE values land on .5; those round up, so 5 reps @ 7.5 counts as 3.
    """
    rpe_value = MAX_RPE if rpe is None else rpe
    return max(1, min(12, math.floor(reps + rpe_value - MAX_RPE + 0.5)))


def estimate_1rm(weight: float | None, reps: int | None, rpe: float | None = None) -> float:
    """Estimated 1RM, or 0.0 when weight/reps are missing or non-positive or RPE is out of range."""
    if weight is None or reps is None or weight <= 0 or reps <= 0:
        return 0.0
    if rpe is not None and not (MIN_RPE <= rpe <= MAX_RPE):
        return 0.0
    multiplier = REPS_MULTIPLIER.get(effective_reps(reps, rpe), DEFAULT_MULTIPLIER)
    return weight / multiplier


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def find_best_1rm(sets: Iterable[Any]) -> float:
    """Best estimate over REGULAR sets that have a weight and positive reps; 0.0 if none qualify.

    Accepts any objects (or dicts) exposing set_type, weight, reps and rpe.
    """
    best = 0.0
    for s in sets:
        set_type = _field(s, "set_type")
        weight = _field(s, "weight")
        reps = _field(s, "reps")
        if set_type is not None and SetType(set_type) != SetType.REGULAR:
            continue
        if weight is None or reps is None or reps <= 0:
            continue
        best = max(best, estimate_1rm(weight, reps, _field(s, "rpe")))
    return best


def one_rm_history(sets: Iterable[Any]) -> list[tuple[datetime, float]]:
    """Best estimate per session, oldest first. Sessions without an estimate are dropped.

    Each item needs session_id and session_date besides the set fields.
    """
    by_session: dict[Any, tuple[datetime, list[Any]]] = {}
    for s in sets:
        key = _field(s, "session_id")
        date = _field(s, "session_date")
        by_session.setdefault(key, (date, []))[1].append(s)

    points = []
    for date, session_sets in by_session.values():
        best = find_best_1rm(session_sets)
        if best > 0:
            points.append((date, best))
    points.sort(key=lambda p: p[0])
    return points


def percentage_table(one_rm: float) -> list[tuple[int, float, str]]:
    """(percent, weight, approximate reps) rows from 100% down to 50%."""
    if one_rm <= 0:
        return []
    return [(pct, round(one_rm * pct / 100, 1), reps) for pct, reps in PERCENTAGE_REPS.items()]
