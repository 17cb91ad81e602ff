"""Workout template schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from liftlog.core.enums import SetType


class TemplateSetBase(BaseModel):
    set_number: int = Field(default=1, ge=1)
    set_type: SetType = SetType.REGULAR
    target_weight: float | None = Field(default=None, ge=0)
    target_reps: int | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)


class TemplateSetCreate(TemplateSetBase):
    pass


class TemplateSetRead(TemplateSetBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID


class TemplateExerciseBase(BaseModel):
    exercise_name: str = Field(..., min_length=1, max_length=255)
    order_index: int = 0
    rest_seconds: int | None = Field(default=None, ge=0)
    show_rpe: bool = False
    note: str | None = None


class TemplateExerciseCreate(TemplateExerciseBase):
    sets: list[TemplateSetCreate] = []


class TemplateExerciseRead(TemplateExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    template_id: UUID
    sets: list[TemplateSetRead] = []


class WorkoutTemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class WorkoutTemplateCreate(WorkoutTemplateBase):
    exercises: list[TemplateExerciseCreate] = []


class WorkoutTemplateRead(WorkoutTemplateBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    created_at: datetime
    exercises: list[TemplateExerciseRead] = []
