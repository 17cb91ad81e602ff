"""Storage row schemas for sessions, exercise logs and set logs.

These are the full-row payloads the engine hands to storage; every write is an
upsert of one of them.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from liftlog.core.enums import SetType


class WorkoutSessionRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    template_id: UUID | None = None
    template_name: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    is_completed: bool = False


class ExerciseLogRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    exercise_name: str
    order_index: int = 0
    show_rpe: bool = False
    note: str | None = None


class SetLogRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    exercise_log_id: UUID
    position: int = 0
    set_number: int = 1
    set_type: SetType = SetType.REGULAR
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    completed_at: datetime | None = None


class ExerciseLogWithSets(ExerciseLogRow):
    sets: list[SetLogRow] = []


class WorkoutSessionDetails(WorkoutSessionRow):
    """Session with its exercises (by order_index) and their sets (by position)."""

    exercises: list[ExerciseLogWithSets] = []


class PreviousSet(BaseModel):
    """A set from the most recent earlier session, used for "last time" display."""

    set_number: int
    set_type: SetType = SetType.REGULAR
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = None


class HistoricalSet(BaseModel):
    """One completed set of an exercise in a finished session."""

    session_id: UUID
    session_date: datetime
    set_number: int
    set_type: SetType = SetType.REGULAR
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = None


# API payloads for the live workout


class StartWorkoutRequest(BaseModel):
    template_id: UUID | None = None


class AddExerciseRequest(BaseModel):
    exercise_name: str = Field(..., min_length=1, max_length=255)


class ReorderExercisesRequest(BaseModel):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class ExerciseNoteUpdate(BaseModel):
    note: str | None = None


class SetUpdate(BaseModel):
    """Partial set edit; only the fields present in the request are applied."""

    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)
    rpe: float | None = Field(default=None, ge=1, le=10)
    set_type: SetType | None = None
