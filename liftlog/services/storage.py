"""SQLAlchemy-backed storage for live and historical workouts and templates."""

from __future__ import annotations

import logging
import uuid

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from liftlog.models.exercise import CustomExercise
from liftlog.models.template import TemplateExercise, WorkoutTemplate
from liftlog.models.workout import ExerciseLog, SetLog, WorkoutSession
from liftlog.schemas.workout import (
    ExerciseLogRow,
    HistoricalSet,
    PreviousSet,
    SetLogRow,
    WorkoutSessionDetails,
    WorkoutSessionRow,
)

logger = logging.getLogger(__name__)


def _columns(row: BaseModel, row_type: type[BaseModel]) -> dict:
    """Column values only; nested children of detail rows are not written."""
    return row.model_dump(include=set(row_type.model_fields))


class SqlAlchemyStorage:
    """One short transaction per call; row writes are merges (upserts)."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    # Sessions

    async def create_session(self, session: WorkoutSessionRow) -> None:
        async with self._session_maker() as db, db.begin():
            db.add(WorkoutSession(**_columns(session, WorkoutSessionRow)))

    async def get_session(self, session_id: uuid.UUID) -> WorkoutSessionDetails | None:
        async with self._session_maker() as db:
            result = await db.execute(
                select(WorkoutSession)
                .where(WorkoutSession.id == session_id)
                .options(selectinload(WorkoutSession.exercises).selectinload(ExerciseLog.sets))
            )
            session = result.scalar_one_or_none()
            if session is None:
                return None
            return WorkoutSessionDetails.model_validate(session)

    async def get_active_session_id(self) -> uuid.UUID | None:
        """Most recent session that was started but never completed (crash recovery)."""
        async with self._session_maker() as db:
            result = await db.execute(
                select(WorkoutSession.id)
                .where(WorkoutSession.is_completed.is_(False))
                .order_by(WorkoutSession.started_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def update_session(self, session: WorkoutSessionRow) -> None:
        async with self._session_maker() as db, db.begin():
            await db.merge(WorkoutSession(**_columns(session, WorkoutSessionRow)))

    async def delete_session(self, session_id: uuid.UUID) -> None:
        """Hard delete the session with all its exercise and set rows."""
        log_ids = select(ExerciseLog.id).where(ExerciseLog.session_id == session_id)
        async with self._session_maker() as db, db.begin():
            await db.execute(delete(SetLog).where(SetLog.exercise_log_id.in_(log_ids)))
            await db.execute(delete(ExerciseLog).where(ExerciseLog.session_id == session_id))
            await db.execute(delete(WorkoutSession).where(WorkoutSession.id == session_id))
        logger.debug("Deleted session %s", session_id)

    # Exercise logs

    async def insert_exercise_log(self, exercise_log: ExerciseLogRow) -> None:
        async with self._session_maker() as db, db.begin():
            await db.merge(ExerciseLog(**_columns(exercise_log, ExerciseLogRow)))

    async def update_exercise_log(self, exercise_log: ExerciseLogRow) -> None:
        await self.insert_exercise_log(exercise_log)

    async def delete_exercise_log(self, exercise_log_id: uuid.UUID) -> None:
        async with self._session_maker() as db, db.begin():
            await db.execute(delete(SetLog).where(SetLog.exercise_log_id == exercise_log_id))
            await db.execute(delete(ExerciseLog).where(ExerciseLog.id == exercise_log_id))

    # Set logs

    async def insert_set_log(self, set_log: SetLogRow) -> None:
        async with self._session_maker() as db, db.begin():
            await db.merge(SetLog(**_columns(set_log, SetLogRow)))

    async def update_set_log(self, set_log: SetLogRow) -> None:
        await self.insert_set_log(set_log)

    async def delete_set_log(self, set_log_id: uuid.UUID) -> None:
        async with self._session_maker() as db, db.begin():
            await db.execute(delete(SetLog).where(SetLog.id == set_log_id))

    # History

    async def get_previous_sets(
        self,
        exercise_name: str,
        current_session_id: uuid.UUID,
        template_id: uuid.UUID | None = None,
    ) -> list[PreviousSet]:
        """Sets of the exercise from the most recent other completed session.

        With template_id, only sessions started from that template count.
        """
        async with self._session_maker() as db:
            latest = (
                select(WorkoutSession.id)
                .join(ExerciseLog, ExerciseLog.session_id == WorkoutSession.id)
                .where(
                    ExerciseLog.exercise_name == exercise_name,
                    WorkoutSession.is_completed.is_(True),
                    WorkoutSession.id != current_session_id,
                )
                .order_by(WorkoutSession.completed_at.desc())
                .limit(1)
            )
            if template_id is not None:
                latest = latest.where(WorkoutSession.template_id == template_id)
            session_id = (await db.execute(latest)).scalar_one_or_none()
            if session_id is None:
                return []

            result = await db.execute(
                select(SetLog)
                .join(ExerciseLog, ExerciseLog.id == SetLog.exercise_log_id)
                .where(
                    ExerciseLog.session_id == session_id,
                    ExerciseLog.exercise_name == exercise_name,
                )
                .order_by(SetLog.position, SetLog.set_number)
            )
            return [
                PreviousSet(
                    set_number=s.set_number,
                    set_type=s.set_type,
                    weight=s.weight,
                    reps=s.reps,
                    rpe=s.rpe,
                )
                for s in result.scalars().all()
            ]

    async def get_historical_sets_for_exercise(self, exercise_name: str) -> list[HistoricalSet]:
        """All sets of the exercise in completed sessions, newest session first."""
        async with self._session_maker() as db:
            result = await db.execute(
                select(SetLog, WorkoutSession.id, WorkoutSession.completed_at)
                .join(ExerciseLog, ExerciseLog.id == SetLog.exercise_log_id)
                .join(WorkoutSession, WorkoutSession.id == ExerciseLog.session_id)
                .where(
                    ExerciseLog.exercise_name == exercise_name,
                    WorkoutSession.is_completed.is_(True),
                    WorkoutSession.completed_at.isnot(None),
                )
                .order_by(WorkoutSession.completed_at.desc(), SetLog.position)
            )
            return [
                HistoricalSet(
                    session_id=session_id,
                    session_date=completed_at,
                    set_number=s.set_number,
                    set_type=s.set_type,
                    weight=s.weight,
                    reps=s.reps,
                    rpe=s.rpe,
                )
                for s, session_id, completed_at in result.all()
            ]

    # Templates

    def _template_query(self):
        return select(WorkoutTemplate).options(
            selectinload(WorkoutTemplate.exercises).selectinload(TemplateExercise.sets)
        )

    async def get_template(self, template_id: uuid.UUID) -> WorkoutTemplate | None:
        async with self._session_maker() as db:
            result = await db.execute(self._template_query().where(WorkoutTemplate.id == template_id))
            return result.scalar_one_or_none()

    async def get_templates(self, template_ids: list[uuid.UUID]) -> list[WorkoutTemplate]:
        """Templates in the requested order; unknown ids are skipped."""
        async with self._session_maker() as db:
            result = await db.execute(self._template_query().where(WorkoutTemplate.id.in_(template_ids)))
            by_id = {t.id: t for t in result.scalars().all()}
        return [by_id[i] for i in template_ids if i in by_id]

    # Custom exercises

    async def list_custom_exercises(self) -> list[CustomExercise]:
        async with self._session_maker() as db:
            result = await db.execute(select(CustomExercise).order_by(CustomExercise.name))
            return list(result.scalars().all())
