"""Custom exercise model - user-defined exercises outside the built-in library."""

from __future__ import annotations

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.db.base import Base


class CustomExercise(Base):
    """User-defined exercise with a primary muscle and comma-separated auxiliary muscles."""

    __tablename__ = "custom_exercises"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    primary_muscle: Mapped[str] = mapped_column(String(100), nullable=False)
    auxiliary_muscles: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    @property
    def auxiliary_muscle_list(self) -> list[str]:
        return [m.strip() for m in (self.auxiliary_muscles or "").split(",") if m.strip()]
