"""Collaborator interfaces (ports) the session engine and analytics depend on.

Implementations: SqlAlchemyStorage for storage, Settings for the training
flags, LoggingNotifier for timer expiry. Tests substitute fakes.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

from liftlog.core.enums import PreviousLiftSource
from liftlog.schemas.workout import (
    ExerciseLogRow,
    HistoricalSet,
    PreviousSet,
    SetLogRow,
    WorkoutSessionDetails,
    WorkoutSessionRow,
)

logger = logging.getLogger(__name__)


class WorkoutStorage(Protocol):
    """Durable store for sessions, exercise logs and set logs.

    All methods are coroutines and may raise; the engine treats failures as
    non-fatal. Writes take full rows and behave as upserts.
    """

    async def create_session(self, session: WorkoutSessionRow) -> None: ...

    async def get_session(self, session_id: UUID) -> WorkoutSessionDetails | None: ...

    async def update_session(self, session: WorkoutSessionRow) -> None: ...

    async def delete_session(self, session_id: UUID) -> None: ...

    async def insert_exercise_log(self, exercise_log: ExerciseLogRow) -> None: ...

    async def update_exercise_log(self, exercise_log: ExerciseLogRow) -> None: ...

    async def delete_exercise_log(self, exercise_log_id: UUID) -> None: ...

    async def insert_set_log(self, set_log: SetLogRow) -> None: ...

    async def update_set_log(self, set_log: SetLogRow) -> None: ...

    async def delete_set_log(self, set_log_id: UUID) -> None: ...

    async def get_previous_sets(
        self,
        exercise_name: str,
        current_session_id: UUID,
        template_id: UUID | None = None,
    ) -> list[PreviousSet]: ...

    async def get_historical_sets_for_exercise(self, exercise_name: str) -> list[HistoricalSet]: ...

    async def get_template(self, template_id: UUID) -> Any | None: ...

    async def get_templates(self, template_ids: list[UUID]) -> list[Any]: ...

    async def list_custom_exercises(self) -> list[Any]: ...


class TrainingSettings(Protocol):
    """Read-only flags; re-read on every query so changes apply immediately."""

    count_warmup_as_effective: bool
    count_drop_set_as_effective: bool
    seconds_per_set: int
    default_rest_seconds: int
    default_sets_per_exercise: int
    show_rpe_by_default: bool
    previous_lift_source: PreviousLiftSource
    timer_adjust_seconds: int
    undo_window_seconds: float


class Notifier(Protocol):
    def on_timer_expired(self) -> None: ...


class LoggingNotifier:
    """Default notifier: the surrounding app replaces it with sound/vibration."""

    def on_timer_expired(self) -> None:
        logger.info("Rest timer expired")
