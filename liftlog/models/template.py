"""Workout template - reusable blueprint of exercises and target sets."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liftlog.core.enums import SetType
from liftlog.db.base import Base


class WorkoutTemplate(Base):
    """Saved workout structure (name + exercises in order, each with target sets)."""

    __tablename__ = "workout_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    exercises: Mapped[list["TemplateExercise"]] = relationship(
        "TemplateExercise",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateExercise.order_index",
    )


class TemplateExercise(Base):
    """Exercise in a template; rest_seconds is the exercise-level default."""

    __tablename__ = "template_exercises"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_name: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    show_rpe: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    template: Mapped["WorkoutTemplate"] = relationship("WorkoutTemplate", back_populates="exercises")
    sets: Mapped[list["TemplateSet"]] = relationship(
        "TemplateSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by="TemplateSet.set_number",
    )


class TemplateSet(Base):
    """Target set; seeds one uncompleted set when a workout starts from the template."""

    __tablename__ = "template_sets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_exercise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("template_exercises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    set_number: Mapped[int] = mapped_column(Integer, default=1)
    set_type: Mapped[SetType] = mapped_column(Enum(SetType), default=SetType.REGULAR, nullable=False)
    target_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    exercise: Mapped["TemplateExercise"] = relationship("TemplateExercise", back_populates="sets")
