"""ORM models - import all so Base.metadata is complete for migrations."""

from liftlog.models.exercise import CustomExercise
from liftlog.models.template import TemplateExercise, TemplateSet, WorkoutTemplate
from liftlog.models.workout import ExerciseLog, SetLog, WorkoutSession

__all__ = [
    "CustomExercise",
    "ExerciseLog",
    "SetLog",
    "TemplateExercise",
    "TemplateSet",
    "WorkoutSession",
    "WorkoutTemplate",
]
