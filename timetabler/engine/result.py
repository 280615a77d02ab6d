"""Result types produced by a generation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .demands import Demand
from .grid import TimetableGrid


class Layer(str, Enum):
    """Placement strategy that produced a placement."""
    BALANCED = "balanced"
    RELAXED = "relaxed"
    UNCONSTRAINED = "unconstrained"


@dataclass(frozen=True)
class Placement:
    """One atomic placement: a teacher booked for one or two periods on a day."""
    day: str
    periods: tuple[int, ...]
    teacher_id: str
    layer: Layer

    @property
    def hours(self) -> int:
        return len(self.periods)

    @property
    def is_pair(self) -> bool:
        return len(self.periods) == 2


@dataclass
class DemandOutcome:
    """How much of a demand was placed, and where."""
    demand: Demand
    placements: list[Placement] = field(default_factory=list)

    @property
    def hours_allocated(self) -> int:
        return sum(p.hours for p in self.placements)

    @property
    def shortfall(self) -> int:
        return self.demand.hours_needed - self.hours_allocated

    @property
    def is_satisfied(self) -> bool:
        return self.shortfall == 0

    def hours_by_layer(self) -> dict[Layer, int]:
        counts: dict[Layer, int] = {}
        for p in self.placements:
            counts[p.layer] = counts.get(p.layer, 0) + p.hours
        return counts


@dataclass(frozen=True)
class ShortfallRecord:
    """A demand that could not be fully placed."""
    section_id: str
    subject_id: str
    needed: int
    allocated: int

    @property
    def shortfall(self) -> int:
        return self.needed - self.allocated

    @classmethod
    def from_outcome(cls, outcome: DemandOutcome) -> ShortfallRecord:
        return cls(
            section_id=outcome.demand.section_id,
            subject_id=outcome.demand.subject_id,
            needed=outcome.demand.hours_needed,
            allocated=outcome.hours_allocated,
        )

    def __str__(self) -> str:
        return (
            f"{self.subject_id} in {self.section_id}: allocated {self.allocated} "
            f"of {self.needed} periods (short by {self.shortfall})"
        )


@dataclass
class GenerationResult:
    """
    Outcome of a generation run.

    The grid is always usable, even when some demands fell short; the
    shortfalls are listed in ``warnings``.
    """
    grid: TimetableGrid
    warnings: list[ShortfallRecord] = field(default_factory=list)
    outcomes: list[DemandOutcome] = field(default_factory=list)
    teacher_hours: dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def is_complete(self) -> bool:
        return not self.warnings

    @property
    def total_shortfall(self) -> int:
        return sum(w.shortfall for w in self.warnings)

    @property
    def hours_allocated(self) -> int:
        return sum(o.hours_allocated for o in self.outcomes)

    @property
    def hours_needed(self) -> int:
        return sum(o.demand.hours_needed for o in self.outcomes)
