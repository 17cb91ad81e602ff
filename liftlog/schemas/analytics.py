"""Analytics report schemas: program volume, durations, estimated 1RM."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SetCountsRead(BaseModel):
    warmup: int = 0
    regular: int = 0
    drop: int = 0
    total: int = 0


class MuscleReportRow(BaseModel):
    muscle: str
    primary: SetCountsRead
    auxiliary: SetCountsRead
    total_sets: int
    effective_sets: float


class TemplateDurationRow(BaseModel):
    template_name: str
    total_seconds: int
    total_sets: int
    lifting_seconds: int
    rest_seconds: int
    exercise_count: int
    formatted: str


class ProgramReport(BaseModel):
    """Program analysis as displayed; flags record which settings produced it."""

    template_names: list[str]
    total_exercises: int
    total_sets: int
    count_warmup_as_effective: bool
    count_drop_set_as_effective: bool
    seconds_per_set: int
    muscles: list[MuscleReportRow]
    templates: list[TemplateDurationRow]


class ProgramAnalysisRequest(BaseModel):
    """Templates to analyze; unset flags fall back to current settings."""

    template_ids: list[UUID] = Field(..., min_length=1)
    count_warmup_as_effective: bool | None = None
    count_drop_set_as_effective: bool | None = None
    seconds_per_set: int | None = Field(default=None, ge=0)


class OneRepMaxPoint(BaseModel):
    date: datetime
    estimated_1rm: float


class PercentageRow(BaseModel):
    percent: int
    weight: float
    reps: str


class OneRepMaxReport(BaseModel):
    exercise_name: str
    best_1rm: float
    history: list[OneRepMaxPoint] = []
    percentages: list[PercentageRow] = []
