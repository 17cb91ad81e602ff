"""Workout templates - reusable blueprints a workout can be started from."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from liftlog.db.session import get_db
from liftlog.models.template import TemplateExercise, TemplateSet, WorkoutTemplate
from liftlog.schemas.template import WorkoutTemplateCreate, WorkoutTemplateRead

router = APIRouter()


def _with_exercises():
    return selectinload(WorkoutTemplate.exercises).selectinload(TemplateExercise.sets)


@router.get("", response_model=list[WorkoutTemplateRead])
async def list_templates(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 50,
):
    """List all workout templates, newest first."""
    result = await db.execute(
        select(WorkoutTemplate)
        .options(_with_exercises())
        .order_by(WorkoutTemplate.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


@router.post("", response_model=WorkoutTemplateRead, status_code=201)
async def create_template(
    payload: WorkoutTemplateCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a template with its exercises and target sets (exercise order preserved)."""
    t = WorkoutTemplate(name=payload.name)
    for i, ex in enumerate(payload.exercises):
        sets = [TemplateSet(**s.model_dump()) for s in ex.sets]
        # Exercises without an explicit order keep request order
        t.exercises.append(
            TemplateExercise(
                exercise_name=ex.exercise_name,
                order_index=ex.order_index or i,
                rest_seconds=ex.rest_seconds,
                show_rpe=ex.show_rpe,
                note=ex.note,
                sets=sets,
            )
        )
    db.add(t)
    await db.flush()
    result = await db.execute(
        select(WorkoutTemplate).options(_with_exercises()).where(WorkoutTemplate.id == t.id)
    )
    return result.scalar_one()


@router.get("/{template_id}", response_model=WorkoutTemplateRead)
async def get_template(
    template_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(WorkoutTemplate).options(_with_exercises()).where(WorkoutTemplate.id == template_id)
    )
    t = result.scalar_one_or_none()
    if not t:
        raise HTTPException(status_code=404, detail="Template not found")
    return t


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a template. Workouts already started from it keep their own copy."""
    result = await db.execute(
        select(WorkoutTemplate).options(_with_exercises()).where(WorkoutTemplate.id == template_id)
    )
    t = result.scalar_one_or_none()
    if not t:
        raise HTTPException(status_code=404, detail="Template not found")
    await db.delete(t)
    return None
