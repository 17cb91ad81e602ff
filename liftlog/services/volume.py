"""Effective-set volume per muscle.

A muscle's effective sets are its primary effective count plus half its
auxiliary effective count, where each count is REGULAR sets plus WARMUP and
DROP sets only when the matching flag is on. Counts are stored raw; the flags
are applied at query time so one analysis can produce different totals as
settings change.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from liftlog.core.constants import AUXILIARY_SET_WEIGHT
from liftlog.core.enums import SetType
from liftlog.schemas.analytics import SetCountsRead


class SetCountsByType(BaseModel):
    model_config = ConfigDict(frozen=True)

    warmup: int = 0
    regular: int = 0
    drop: int = 0

    @property
    def total(self) -> int:
        return self.warmup + self.regular + self.drop

    def add(self, set_type: SetType, count: int = 1) -> "SetCountsByType":
        if set_type == SetType.WARMUP:
            return self.model_copy(update={"warmup": self.warmup + count})
        if set_type == SetType.DROP:
            return self.model_copy(update={"drop": self.drop + count})
        return self.model_copy(update={"regular": self.regular + count})

    def effective_count(self, count_warmup: bool = False, count_drop: bool = True) -> int:
        """Regular sets always count; warmup and drop sets only when enabled."""
        count = self.regular
        if count_warmup:
            count += self.warmup
        if count_drop:
            count += self.drop
        return count

    def __add__(self, other: "SetCountsByType") -> "SetCountsByType":
        return SetCountsByType(
            warmup=self.warmup + other.warmup,
            regular=self.regular + other.regular,
            drop=self.drop + other.drop,
        )

    def to_read(self) -> SetCountsRead:
        return SetCountsRead(warmup=self.warmup, regular=self.regular, drop=self.drop, total=self.total)


class MuscleSetAnalysis(BaseModel):
    """Set counts attributed to one muscle, split by primary/auxiliary involvement."""

    model_config = ConfigDict(frozen=True)

    muscle: str
    primary: SetCountsByType = SetCountsByType()
    auxiliary: SetCountsByType = SetCountsByType()

    @property
    def total_primary_sets(self) -> int:
        return self.primary.total

    @property
    def total_auxiliary_sets(self) -> int:
        return self.auxiliary.total

    @property
    def total_sets(self) -> int:
        return self.total_primary_sets + self.total_auxiliary_sets

    def effective_sets(self, count_warmup: bool = False, count_drop: bool = True) -> float:
        primary = self.primary.effective_count(count_warmup, count_drop)
        auxiliary = self.auxiliary.effective_count(count_warmup, count_drop)
        return primary + AUXILIARY_SET_WEIGHT * auxiliary

    def __add__(self, other: "MuscleSetAnalysis") -> "MuscleSetAnalysis":
        if self.muscle != other.muscle:
            raise ValueError("Cannot combine different muscles")
        return MuscleSetAnalysis(
            muscle=self.muscle,
            primary=self.primary + other.primary,
            auxiliary=self.auxiliary + other.auxiliary,
        )


class VolumeAggregator:
    """Accumulates per-muscle set counts; one call to add_set per logged/planned set."""

    def __init__(self) -> None:
        self._muscles: dict[str, MuscleSetAnalysis] = {}

    def _get(self, muscle: str) -> MuscleSetAnalysis:
        return self._muscles.get(muscle) or MuscleSetAnalysis(muscle=muscle)

    def add_set(
        self,
        set_type: SetType,
        primary_muscle: str,
        auxiliary_muscles: tuple[str, ...] | list[str] = (),
    ) -> None:
        current = self._get(primary_muscle)
        self._muscles[primary_muscle] = current.model_copy(
            update={"primary": current.primary.add(set_type)}
        )
        # Once per auxiliary muscle per set
        for muscle in auxiliary_muscles:
            current = self._get(muscle)
            self._muscles[muscle] = current.model_copy(
                update={"auxiliary": current.auxiliary.add(set_type)}
            )

    @property
    def muscles(self) -> dict[str, MuscleSetAnalysis]:
        return dict(self._muscles)


def sort_by_effective_sets(
    analyses: list[MuscleSetAnalysis] | tuple[MuscleSetAnalysis, ...],
    count_warmup: bool = False,
    count_drop: bool = True,
) -> list[MuscleSetAnalysis]:
    """Descending effective sets, ties broken by muscle name ascending."""
    return sorted(analyses, key=lambda a: (-a.effective_sets(count_warmup, count_drop), a.muscle))
