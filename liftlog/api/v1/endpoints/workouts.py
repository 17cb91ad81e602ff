"""The live workout: start, edit exercises and sets, rest timer, finish or cancel.

All handlers are coroutines so the engine runs on the event loop; each returns
the session snapshot taken right after the mutation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from liftlog.api.deps import get_active_session, get_registry
from liftlog.core.enums import SetType
from liftlog.schemas.session import WorkoutSnapshot
from liftlog.schemas.workout import (
    AddExerciseRequest,
    ExerciseNoteUpdate,
    ReorderExercisesRequest,
    SetUpdate,
    StartWorkoutRequest,
)
from liftlog.services.active_session import ActiveWorkoutSession, TemplateNotFoundError
from liftlog.services.registry import SessionRegistry, WorkoutAlreadyActiveError

router = APIRouter()


@router.post("/active", response_model=WorkoutSnapshot, status_code=201)
async def start_workout(
    payload: StartWorkoutRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Start an empty workout, or one expanded from a template."""
    try:
        session = await registry.start(template_id=payload.template_id)
    except WorkoutAlreadyActiveError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail="Template not found") from e
    return session.snapshot()


@router.get("/active", response_model=WorkoutSnapshot)
async def get_active_workout(session: ActiveWorkoutSession = Depends(get_active_session)):
    return session.snapshot()


@router.post("/active/finish", response_model=WorkoutSnapshot)
async def finish_workout(session: ActiveWorkoutSession = Depends(get_active_session)):
    return await session.finish_workout()


@router.post("/active/cancel", status_code=204)
async def cancel_workout(session: ActiveWorkoutSession = Depends(get_active_session)):
    """Discard the workout and everything logged in it."""
    await session.cancel_workout()
    return None


# Exercises


@router.post("/active/exercises", response_model=WorkoutSnapshot)
async def add_exercise(
    payload: AddExerciseRequest,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    """Append an exercise; adding one already in the workout changes nothing."""
    session.add_exercise(payload.exercise_name)
    return session.snapshot()


@router.post("/active/exercises/reorder", response_model=WorkoutSnapshot)
async def reorder_exercises(
    payload: ReorderExercisesRequest,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.reorder_exercises(payload.from_index, payload.to_index)
    return session.snapshot()


@router.delete("/active/exercises/{exercise_index}", response_model=WorkoutSnapshot)
async def remove_exercise(
    exercise_index: int,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.remove_exercise(exercise_index)
    return session.snapshot()


@router.put("/active/exercises/{exercise_index}/note", response_model=WorkoutSnapshot)
async def update_exercise_note(
    exercise_index: int,
    payload: ExerciseNoteUpdate,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.update_exercise_note(exercise_index, payload.note)
    return session.snapshot()


@router.post("/active/exercises/{exercise_index}/toggle-rpe", response_model=WorkoutSnapshot)
async def toggle_rpe(
    exercise_index: int,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.toggle_rpe(exercise_index)
    return session.snapshot()


# Sets


@router.post("/active/exercises/{exercise_index}/sets", response_model=WorkoutSnapshot)
async def add_set(
    exercise_index: int,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.add_set(exercise_index)
    return session.snapshot()


@router.delete("/active/exercises/{exercise_index}/sets/{set_id}", response_model=WorkoutSnapshot)
async def remove_set(
    exercise_index: int,
    set_id: int,
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    """Remove a set by its id; undo stays available until confirmed or the window passes."""
    session.remove_set(exercise_index, set_id)
    return session.snapshot()


@router.patch("/active/exercises/{exercise_index}/sets/{set_number}", response_model=WorkoutSnapshot)
async def update_set(
    exercise_index: int,
    set_number: int,
    payload: SetUpdate,
    set_type: SetType = Query(SetType.REGULAR),
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    """Edit the set numbered set_number among sets of set_type. Type changes apply last."""
    fields = payload.model_fields_set
    if "weight" in fields:
        session.update_set_weight(exercise_index, set_number, payload.weight, set_type=set_type)
    if "reps" in fields:
        session.update_set_reps(exercise_index, set_number, payload.reps, set_type=set_type)
    if "rest_seconds" in fields:
        session.update_set_rest(exercise_index, set_number, payload.rest_seconds, set_type=set_type)
    if "rpe" in fields:
        session.update_set_rpe(exercise_index, set_number, payload.rpe, set_type=set_type)
    if "set_type" in fields and payload.set_type is not None:
        session.update_set_type(exercise_index, set_number, payload.set_type, set_type=set_type)
    return session.snapshot()


@router.post("/active/exercises/{exercise_index}/sets/{set_number}/complete", response_model=WorkoutSnapshot)
async def complete_set(
    exercise_index: int,
    set_number: int,
    set_type: SetType = Query(SetType.REGULAR),
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    """Toggle completion; completing may start the rest timer."""
    session.complete_set(exercise_index, set_number, set_type=set_type)
    return session.snapshot()


@router.post("/active/exercises/{exercise_index}/sets/{set_number}/cycle-type", response_model=WorkoutSnapshot)
async def cycle_set_type(
    exercise_index: int,
    set_number: int,
    set_type: SetType = Query(SetType.REGULAR),
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.cycle_set_type(exercise_index, set_number, set_type=set_type)
    return session.snapshot()


@router.post("/active/undo", response_model=WorkoutSnapshot)
async def undo_set_removal(session: ActiveWorkoutSession = Depends(get_active_session)):
    session.undo_set_removal()
    return session.snapshot()


@router.post("/active/undo/confirm", response_model=WorkoutSnapshot)
async def confirm_set_removal(session: ActiveWorkoutSession = Depends(get_active_session)):
    session.confirm_set_removal()
    return session.snapshot()


# Rest timer


@router.post("/active/timer/pause", response_model=WorkoutSnapshot)
async def pause_timer(session: ActiveWorkoutSession = Depends(get_active_session)):
    session.pause_timer()
    return session.snapshot()


@router.post("/active/timer/resume", response_model=WorkoutSnapshot)
async def resume_timer(session: ActiveWorkoutSession = Depends(get_active_session)):
    session.resume_timer()
    return session.snapshot()


@router.post("/active/timer/skip", response_model=WorkoutSnapshot)
async def skip_timer(session: ActiveWorkoutSession = Depends(get_active_session)):
    session.skip_timer()
    return session.snapshot()


@router.post("/active/timer/add", response_model=WorkoutSnapshot)
async def add_timer_time(
    seconds: int | None = Query(None, ge=1),
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    """Extend the countdown (default step from settings)."""
    session.add_timer_time(seconds)
    return session.snapshot()


@router.post("/active/timer/subtract", response_model=WorkoutSnapshot)
async def subtract_timer_time(
    seconds: int | None = Query(None, ge=1),
    session: ActiveWorkoutSession = Depends(get_active_session),
):
    session.subtract_timer_time(seconds)
    return session.snapshot()
