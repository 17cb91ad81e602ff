"""Exercise reference schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ExerciseInfo(BaseModel):
    """Library entry: the muscle attribution the analyzer needs."""

    model_config = ConfigDict(frozen=True)

    name: str
    primary_muscle: str
    auxiliary_muscles: tuple[str, ...] = ()
    is_bodyweight: bool = False

    @property
    def all_muscles(self) -> tuple[str, ...]:
        return (self.primary_muscle, *self.auxiliary_muscles)


class CustomExerciseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    primary_muscle: str = Field(..., min_length=1, max_length=100)
    auxiliary_muscles: list[str] = []


class CustomExerciseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    name: str
    primary_muscle: str
    auxiliary_muscles: list[str] = Field(default_factory=list, validation_alias="auxiliary_muscle_list")


class ExerciseCatalog(BaseModel):
    """Built-in library grouped by primary muscle, plus the user's custom exercises."""

    categories: dict[str, list[ExerciseInfo]]
    custom: list[CustomExerciseRead] = []
