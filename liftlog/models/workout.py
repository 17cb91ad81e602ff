"""WorkoutSession, ExerciseLog and SetLog models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liftlog.core.enums import SetType
from liftlog.db.base import Base


class WorkoutSession(Base):
    """One workout, live while completed_at is null, historical afterwards."""

    __tablename__ = "workout_sessions"
    __table_args__ = (Index("ix_workout_sessions_started_at", "started_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    template_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    exercises: Mapped[list["ExerciseLog"]] = relationship(
        "ExerciseLog",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ExerciseLog.order_index",
    )


class ExerciseLog(Base):
    """An exercise performed in a session; order_index is contiguous per session."""

    __tablename__ = "exercise_logs"
    __table_args__ = (Index("ix_exercise_logs_session_id", "session_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False
    )
    exercise_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    show_rpe: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="exercises")
    sets: Mapped[list["SetLog"]] = relationship(
        "SetLog",
        back_populates="exercise_log",
        cascade="all, delete-orphan",
        order_by="SetLog.position",
    )


class SetLog(Base):
    """One set. set_number counts within its set_type; position is display order."""

    __tablename__ = "set_logs"
    __table_args__ = (Index("ix_set_logs_exercise_log_id", "exercise_log_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exercise_log_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exercise_logs.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    set_number: Mapped[int] = mapped_column(Integer, default=1)
    set_type: Mapped[SetType] = mapped_column(Enum(SetType), default=SetType.REGULAR, nullable=False)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rpe: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    exercise_log: Mapped["ExerciseLog"] = relationship("ExerciseLog", back_populates="sets")
