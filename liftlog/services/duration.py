"""Workout duration estimate: total rest plus a fixed execution time per set."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from liftlog.schemas.analytics import TemplateDurationRow


def estimate_total_seconds(set_count: int, rest_seconds: int | Iterable[int], seconds_per_set: int) -> int:
    """sum(rest per set) + set_count * seconds_per_set.

    rest_seconds may be the already-summed rest or the per-set values.
    """
    total_rest = rest_seconds if isinstance(rest_seconds, int) else sum(rest_seconds)
    return total_rest + set_count * seconds_per_set


def format_duration(total_seconds: int) -> str:
    """Human-readable duration: "45m", "1h" or "1h 15m"."""
    hours, rem = divmod(max(0, total_seconds), 3600)
    minutes = rem // 60
    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"


class TemplateTimeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    template_name: str
    total_sets: int
    total_rest_seconds: int
    exercise_count: int

    def lifting_seconds(self, seconds_per_set: int) -> int:
        return self.total_sets * seconds_per_set

    def total_seconds(self, seconds_per_set: int) -> int:
        return estimate_total_seconds(self.total_sets, self.total_rest_seconds, seconds_per_set)

    def to_row(self, seconds_per_set: int) -> TemplateDurationRow:
        total = self.total_seconds(seconds_per_set)
        return TemplateDurationRow(
            template_name=self.template_name,
            total_seconds=total,
            total_sets=self.total_sets,
            lifting_seconds=self.lifting_seconds(seconds_per_set),
            rest_seconds=self.total_rest_seconds,
            exercise_count=self.exercise_count,
            formatted=format_duration(total),
        )
