"""Estimated 1RM: formula, sentinel values, history and percentage table."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from liftlog.core.enums import SetType
from liftlog.schemas.workout import HistoricalSet
from liftlog.services.one_rep_max import (
    effective_reps,
    estimate_1rm,
    find_best_1rm,
    one_rm_history,
    percentage_table,
)


def test_estimate_known_values():
    assert estimate_1rm(100, 5, 10) == pytest.approx(100 / 0.86)
    assert estimate_1rm(100, 5, 10) == pytest.approx(116.3, abs=0.05)
    assert estimate_1rm(100, 1, 10) == 100
    assert estimate_1rm(100, 1) == 100


@pytest.mark.parametrize(
    "weight,reps,rpe",
    [(0, 5, 10), (-20, 5, None), (100, 0, None), (100, -3, 8), (None, 5, None), (100, None, None)],
)
def test_invalid_input_returns_zero(weight, reps, rpe):
    assert estimate_1rm(weight, reps, rpe) == 0


@pytest.mark.parametrize("rpe", [0.5, 10.5, 11])
def test_rpe_out_of_range_returns_zero(rpe):
    assert estimate_1rm(100, 5, rpe) == 0


def test_rpe_reduces_effective_reps():
    # 5 reps at RPE 8 ~ 3 reps to failure
    assert effective_reps(5, 8) == 3
    assert estimate_1rm(100, 5, 8) == pytest.approx(100 / 0.91)


@pytest.mark.parametrize(
    "reps,rpe,expected",
    [(5, 7.5, 3), (5, 8.5, 4), (4, 8.5, 3), (3, 9.5, 3), (6, 6.5, 3), (1, 9.5, 1)],
)
def test_half_rpe_rounds_up(reps, rpe, expected):
    assert effective_reps(reps, rpe) == expected


def test_half_rpe_estimates_are_monotonic():
    estimates = [estimate_1rm(100, 5, rpe) for rpe in (7, 7.5, 8, 8.5, 9, 9.5, 10)]
    assert estimates == sorted(estimates)
    assert estimate_1rm(100, 5, 7.5) == pytest.approx(100 / 0.91)


def test_effective_reps_clamped():
    assert effective_reps(20) == 12
    assert effective_reps(1, 5) == 1
    assert estimate_1rm(60, 20) == pytest.approx(60 / 0.72)


def test_find_best_uses_regular_sets_only():
    sets = [
        {"set_type": SetType.WARMUP, "weight": 200, "reps": 5},
        {"set_type": SetType.REGULAR, "weight": 100, "reps": 5},
        {"set_type": SetType.REGULAR, "weight": 110, "reps": 1},
        {"set_type": SetType.DROP, "weight": 150, "reps": 8},
        {"set_type": SetType.REGULAR, "weight": None, "reps": 8},
        {"set_type": SetType.REGULAR, "weight": 90, "reps": 0},
    ]
    assert find_best_1rm(sets) == pytest.approx(116.28, abs=0.01)


def test_find_best_without_qualifying_sets():
    assert find_best_1rm([]) == 0
    assert find_best_1rm([{"set_type": SetType.WARMUP, "weight": 60, "reps": 10}]) == 0


def test_history_is_best_per_session_oldest_first():
    now = datetime.now(timezone.utc)
    older, newer, warmup_only = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    sets = [
        HistoricalSet(session_id=newer, session_date=now, set_number=1, weight=105, reps=5),
        HistoricalSet(session_id=newer, session_date=now, set_number=2, weight=100, reps=5),
        HistoricalSet(session_id=warmup_only, session_date=now - timedelta(days=3), set_number=1,
                      set_type=SetType.WARMUP, weight=60, reps=10),
        HistoricalSet(session_id=older, session_date=now - timedelta(days=7), set_number=1, weight=100, reps=3),
    ]

    history = one_rm_history(sets)

    assert [d for d, _ in history] == [now - timedelta(days=7), now]
    assert history[0][1] == pytest.approx(100 / 0.91)
    assert history[1][1] == pytest.approx(105 / 0.86)


def test_percentage_table():
    rows = percentage_table(200)
    assert rows[0] == (100, 200.0, "1")
    assert rows[-1] == (50, 100.0, "23+")
    assert len(rows) == 11
    assert percentage_table(0) == []
