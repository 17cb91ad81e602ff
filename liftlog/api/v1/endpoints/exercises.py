"""Exercise catalog, custom exercises and estimated one-rep max."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.api.deps import get_registry
from liftlog.db.session import get_db
from liftlog.models.exercise import CustomExercise
from liftlog.schemas.analytics import OneRepMaxPoint, OneRepMaxReport, PercentageRow
from liftlog.schemas.exercise import CustomExerciseCreate, CustomExerciseRead, ExerciseCatalog
from liftlog.services.exercise_library import MUSCLE_CATEGORIES, default_library
from liftlog.services.one_rep_max import find_best_1rm, one_rm_history, percentage_table
from liftlog.services.registry import SessionRegistry

router = APIRouter()


@router.get("", response_model=ExerciseCatalog)
async def list_exercises(db: AsyncSession = Depends(get_db)):
    """Built-in exercises by primary muscle, plus custom exercises."""
    categories = {c: default_library.by_category(c) for c in MUSCLE_CATEGORIES}
    result = await db.execute(select(CustomExercise).order_by(CustomExercise.name))
    return ExerciseCatalog(
        categories={c: exercises for c, exercises in categories.items() if exercises},
        custom=[CustomExerciseRead.model_validate(c) for c in result.scalars().all()],
    )


@router.post("/custom", response_model=CustomExerciseRead, status_code=201)
async def create_custom_exercise(
    payload: CustomExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    if default_library.lookup(payload.name) is not None:
        raise HTTPException(status_code=409, detail="Exercise already exists in the library")
    existing = await db.execute(select(CustomExercise).where(CustomExercise.name == payload.name))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Custom exercise already exists")
    ex = CustomExercise(
        name=payload.name,
        primary_muscle=payload.primary_muscle,
        auxiliary_muscles=", ".join(m.strip() for m in payload.auxiliary_muscles if m.strip()),
    )
    db.add(ex)
    await db.flush()
    return CustomExerciseRead.model_validate(ex)


@router.get("/{exercise_name}/one-rep-max", response_model=OneRepMaxReport)
async def one_rep_max(
    exercise_name: str,
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Estimated 1RM for an exercise from completed workouts:
    - best estimate over all regular sets
    - best estimate per workout, oldest first
    - working weights at 100%..50% of the best estimate
    """
    sets = await registry.storage.get_historical_sets_for_exercise(exercise_name)
    best = find_best_1rm(sets)
    return OneRepMaxReport(
        exercise_name=exercise_name,
        best_1rm=round(best, 1),
        history=[OneRepMaxPoint(date=d, estimated_1rm=round(v, 1)) for d, v in one_rm_history(sets)],
        percentages=[PercentageRow(percent=p, weight=w, reps=r) for p, w, r in percentage_table(best)],
    )
