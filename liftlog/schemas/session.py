"""Immutable snapshots of a live workout, handed to the UI/API after each mutation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

from liftlog.core.enums import SessionEventKind, SetType, TimerStatus


class SetRef(BaseModel):
    """Which set a rest countdown was started for (display only)."""

    model_config = ConfigDict(frozen=True)

    exercise_key: int
    set_id: int


class SetSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    row_id: UUID
    set_number: int
    set_type: SetType
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    completed_at: datetime | None = None
    previous_weight: float | None = None
    previous_reps: int | None = None
    previous_rpe: float | None = None

    @computed_field
    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class ExerciseSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: int
    row_id: UUID
    exercise_name: str
    order_index: int
    show_rpe: bool = False
    note: str | None = None
    sets: tuple[SetSnapshot, ...] = ()


class TimerSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: TimerStatus = TimerStatus.IDLE
    remaining_seconds: int = 0
    total_seconds: int = 0
    set_ref: SetRef | None = None

    @computed_field
    @property
    def progress(self) -> float:
        """Fraction of the countdown still remaining (1.0 at start), clamped to [0, 1].

        subtract_time floors total at 1 while remaining may exceed it.
        """
        if self.total_seconds <= 0:
            return 0.0
        return min(1.0, max(0.0, self.remaining_seconds / self.total_seconds))

    @computed_field
    @property
    def formatted(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"


class PendingRemovalSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    exercise_index: int
    position: int
    set: SetSnapshot


class WorkoutSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: UUID
    template_id: UUID | None = None
    template_name: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    exercises: tuple[ExerciseSnapshot, ...] = ()
    timer: TimerSnapshot = TimerSnapshot()
    pending_removal: PendingRemovalSnapshot | None = None
    is_terminal: bool = False


class SessionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: SessionEventKind
    snapshot: WorkoutSnapshot
    message: str | None = None
