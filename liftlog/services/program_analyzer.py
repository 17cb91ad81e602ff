"""Program analysis: effective-set volume per muscle and time per template.

Works on any template-shaped objects (ORM rows or WorkoutTemplateRead):
``name``, ``exercises[*].exercise_name``, ``exercises[*].rest_seconds`` and
``exercises[*].sets[*].set_type / rest_seconds``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from liftlog.core.constants import TEMPLATE_FALLBACK_REST_SECONDS, UNKNOWN_MUSCLE
from liftlog.schemas.analytics import MuscleReportRow, ProgramReport
from liftlog.schemas.exercise import ExerciseInfo
from liftlog.services.duration import TemplateTimeAnalysis
from liftlog.services.exercise_library import CompositeExerciseLibrary, default_library
from liftlog.services.volume import MuscleSetAnalysis, VolumeAggregator, sort_by_effective_sets

logger = logging.getLogger(__name__)


class ExerciseLookup(Protocol):
    def lookup(self, name: str) -> ExerciseInfo | None: ...


class ProgramAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    template_names: tuple[str, ...]
    muscles: dict[str, MuscleSetAnalysis]
    total_exercises: int
    total_sets: int
    templates: tuple[TemplateTimeAnalysis, ...] = ()

    @property
    def sorted_by_total_sets(self) -> list[MuscleSetAnalysis]:
        return sorted(self.muscles.values(), key=lambda a: (-a.total_sets, a.muscle))

    @property
    def sorted_by_name(self) -> list[MuscleSetAnalysis]:
        return sorted(self.muscles.values(), key=lambda a: a.muscle)

    def sorted_by_effective_sets(self, count_warmup: bool = False, count_drop: bool = True) -> list[MuscleSetAnalysis]:
        return sort_by_effective_sets(list(self.muscles.values()), count_warmup, count_drop)

    def report(
        self,
        count_warmup: bool = False,
        count_drop: bool = True,
        seconds_per_set: int = 30,
    ) -> ProgramReport:
        """Serializable view for the given flags; the same analysis can be re-reported under other flags."""
        return ProgramReport(
            template_names=list(self.template_names),
            total_exercises=self.total_exercises,
            total_sets=self.total_sets,
            count_warmup_as_effective=count_warmup,
            count_drop_set_as_effective=count_drop,
            seconds_per_set=seconds_per_set,
            muscles=[
                MuscleReportRow(
                    muscle=a.muscle,
                    primary=a.primary.to_read(),
                    auxiliary=a.auxiliary.to_read(),
                    total_sets=a.total_sets,
                    effective_sets=a.effective_sets(count_warmup, count_drop),
                )
                for a in self.sorted_by_effective_sets(count_warmup, count_drop)
            ],
            templates=[t.to_row(seconds_per_set) for t in self.templates],
        )


def analyze_program(
    templates: Iterable[Any],
    library: ExerciseLookup | None = None,
    custom_exercises: Iterable[Any] = (),
) -> ProgramAnalysis:
    """Count every template set toward its exercise's muscles.

    Exercises missing from the library are attributed to the "Unknown" bucket
    as primary so the rest of the program is still analyzed.
    """
    if library is None:
        library = CompositeExerciseLibrary(default_library, custom_exercises)

    aggregator = VolumeAggregator()
    names: list[str] = []
    timings: list[TemplateTimeAnalysis] = []
    total_exercises = 0
    total_sets = 0

    for template in templates:
        names.append(template.name)
        template_sets = 0
        template_rest = 0
        exercise_count = 0

        for exercise in template.exercises:
            total_exercises += 1
            exercise_count += 1
            info = library.lookup(exercise.exercise_name)
            if info is None:
                logger.info("Exercise %r not in library, counting as %s", exercise.exercise_name, UNKNOWN_MUSCLE)
                primary, auxiliary = UNKNOWN_MUSCLE, ()
            else:
                primary, auxiliary = info.primary_muscle, info.auxiliary_muscles

            for s in exercise.sets:
                total_sets += 1
                template_sets += 1
                rest = s.rest_seconds
                if rest is None:
                    rest = exercise.rest_seconds
                if rest is None:
                    rest = TEMPLATE_FALLBACK_REST_SECONDS
                template_rest += rest
                aggregator.add_set(s.set_type, primary, auxiliary)

        timings.append(
            TemplateTimeAnalysis(
                template_name=template.name,
                total_sets=template_sets,
                total_rest_seconds=template_rest,
                exercise_count=exercise_count,
            )
        )

    return ProgramAnalysis(
        template_names=tuple(names),
        muscles=aggregator.muscles,
        total_exercises=total_exercises,
        total_sets=total_sets,
        templates=tuple(timings),
    )
