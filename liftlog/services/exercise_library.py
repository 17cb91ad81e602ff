"""Exercise reference library: maps an exercise name to its primary and auxiliary muscles."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from liftlog.schemas.exercise import ExerciseInfo

MUSCLE_CATEGORIES = (
    "Chest",
    "Back",
    "Lower Back",
    "Trapezius",
    "Shoulders",
    "Biceps",
    "Triceps",
    "Forearms",
    "Quads",
    "Hamstrings",
    "Glutes",
    "Calves",
    "Abductors",
    "Adductors",
    "Core",
    "Full Body",
    "Cardio",
)


def _ex(name: str, primary: str, *auxiliary: str, bodyweight: bool = False) -> ExerciseInfo:
    return ExerciseInfo(
        name=name,
        primary_muscle=primary,
        auxiliary_muscles=tuple(auxiliary),
        is_bodyweight=bodyweight,
    )


BUILTIN_EXERCISES: tuple[ExerciseInfo, ...] = (
    # Chest
    _ex("Bench Press", "Chest", "Triceps", "Shoulders"),
    _ex("Incline Bench Press", "Chest", "Shoulders", "Triceps"),
    _ex("Dumbbell Bench Press", "Chest", "Triceps", "Shoulders"),
    _ex("Dumbbell Fly", "Chest"),
    _ex("Cable Crossover", "Chest"),
    _ex("Push-ups", "Chest", "Triceps", "Shoulders", "Core", bodyweight=True),
    _ex("Dips (Chest)", "Chest", "Triceps", "Shoulders", bodyweight=True),
    # Back
    _ex("Pull-ups", "Back", "Biceps", "Forearms", bodyweight=True),
    _ex("Chin-ups", "Back", "Biceps", "Forearms", bodyweight=True),
    _ex("Lat Pulldown", "Back", "Biceps"),
    _ex("Barbell Row", "Back", "Biceps", "Lower Back", "Trapezius"),
    _ex("Dumbbell Row", "Back", "Biceps", "Lower Back"),
    _ex("Seated Cable Row", "Back", "Biceps", "Trapezius"),
    _ex("Face Pull", "Back", "Shoulders", "Trapezius"),
    _ex("Back Extension", "Lower Back", "Glutes", "Hamstrings"),
    _ex("Barbell Shrug", "Trapezius", "Forearms"),
    # Shoulders / arms
    _ex("Overhead Press", "Shoulders", "Triceps", "Core"),
    _ex("Arnold Press", "Shoulders", "Triceps"),
    _ex("Lateral Raise", "Shoulders"),
    _ex("Barbell Curl", "Biceps", "Forearms"),
    _ex("Dumbbell Curl", "Biceps", "Forearms"),
    _ex("Hammer Curl", "Biceps", "Forearms"),
    _ex("Skull Crushers", "Triceps"),
    _ex("Tricep Pushdown", "Triceps"),
    _ex("Wrist Curl", "Forearms"),
    # Legs
    _ex("Squat", "Quads", "Glutes", "Adductors", "Core", "Lower Back"),
    _ex("Front Squat", "Quads", "Core", "Glutes"),
    _ex("Leg Press", "Quads", "Glutes"),
    _ex("Leg Extension", "Quads"),
    _ex("Walking Lunges", "Quads", "Glutes", "Hamstrings"),
    _ex("Deadlift", "Hamstrings", "Lower Back", "Glutes", "Trapezius", "Forearms"),
    _ex("Romanian Deadlift", "Hamstrings", "Glutes", "Lower Back"),
    _ex("Lying Leg Curl", "Hamstrings"),
    _ex("Hip Thrust", "Glutes", "Hamstrings"),
    _ex("Bulgarian Split Squat", "Glutes", "Quads"),
    _ex("Standing Calf Raise", "Calves"),
    _ex("Seated Calf Raise", "Calves"),
    _ex("Cable Hip Abduction", "Abductors"),
    _ex("Copenhagen Plank", "Adductors", "Core", bodyweight=True),
    # Core / conditioning
    _ex("Plank", "Core", "Shoulders", bodyweight=True),
    _ex("Cable Crunch", "Core"),
    _ex("Ab Wheel Rollout", "Core", "Shoulders"),
    _ex("Thrusters", "Full Body", "Quads", "Shoulders", "Glutes", "Core"),
    _ex("Jump Rope", "Cardio", "Calves", "Shoulders", bodyweight=True),
)


class StaticExerciseLibrary:
    """In-process library, looked up by exact name."""

    def __init__(self, exercises: Iterable[ExerciseInfo] = BUILTIN_EXERCISES) -> None:
        self._by_name = {e.name: e for e in exercises}

    def lookup(self, name: str) -> ExerciseInfo | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return sorted(self._by_name)

    def by_category(self, category: str) -> list[ExerciseInfo]:
        return [e for e in self._by_name.values() if e.primary_muscle == category]


class CompositeExerciseLibrary:
    """Built-in library first, then user-defined custom exercises."""

    def __init__(self, base: StaticExerciseLibrary, custom_exercises: Iterable[Any] = ()) -> None:
        self._base = base
        self._custom: dict[str, ExerciseInfo] = {}
        for c in custom_exercises:
            aux = c.auxiliary_muscle_list if hasattr(c, "auxiliary_muscle_list") else list(c.auxiliary_muscles)
            self._custom[c.name] = ExerciseInfo(
                name=c.name,
                primary_muscle=c.primary_muscle,
                auxiliary_muscles=tuple(aux),
            )

    def lookup(self, name: str) -> ExerciseInfo | None:
        return self._base.lookup(name) or self._custom.get(name)


default_library = StaticExerciseLibrary()
