"""
Teacher availability and workload bookkeeping for one generation run.

The tracker is the single source of truth for whether a teacher is free at
a (day, period) and how many periods they have been given so far. It is
created fresh per run and mutated only by the slot allocator.
"""

from __future__ import annotations

from typing import Iterable

from ..data.models import Teacher
from ..errors import SlotConflictError


class AvailabilityTracker:
    """
    Dense teacher x day x period busy table plus per-teacher hour counters.

    Usage:
        tracker = AvailabilityTracker(teachers, days, periods_per_day)
        if tracker.can_take("T1", "Monday", [3, 4]):
            tracker.assign("T1", "Monday", [3, 4])
    """

    def __init__(self, teachers: list[Teacher], days: list[str], periods_per_day: int):
        self.days = list(days)
        self.periods_per_day = periods_per_day
        self._day_index = {day: i for i, day in enumerate(self.days)}
        self._max_hours = {t.id: t.max_hours for t in teachers}

        # busy[teacher_id][day_index][period - 1]
        self._busy: dict[str, list[list[bool]]] = {
            t.id: [[False] * periods_per_day for _ in self.days]
            for t in teachers
        }
        self._assigned: dict[str, int] = {t.id: 0 for t in teachers}

    def _cell(self, teacher_id: str, day: str, period: int) -> tuple[list[bool], int]:
        if teacher_id not in self._busy:
            raise KeyError(f"Unknown teacher: {teacher_id}")
        if day not in self._day_index:
            raise KeyError(f"Unknown day: {day}")
        if not 1 <= period <= self.periods_per_day:
            raise KeyError(f"Period out of range: {period}")
        return self._busy[teacher_id][self._day_index[day]], period - 1

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_free(self, teacher_id: str, day: str, period: int) -> bool:
        row, idx = self._cell(teacher_id, day, period)
        return not row[idx]

    def assigned_hours(self, teacher_id: str) -> int:
        return self._assigned[teacher_id]

    def remaining_capacity(self, teacher_id: str) -> int:
        """Periods a teacher can still take before reaching their cap."""
        return self._max_hours[teacher_id] - self._assigned[teacher_id]

    def can_take(self, teacher_id: str, day: str, periods: Iterable[int]) -> bool:
        """Whether the teacher is free in every period and has capacity for all of them."""
        periods = list(periods)
        if self.remaining_capacity(teacher_id) < len(periods):
            return False
        return all(self.is_free(teacher_id, day, p) for p in periods)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def mark_busy(self, teacher_id: str, day: str, period: int) -> None:
        """
        Flag a teacher busy at one (day, period).

        Raises:
            SlotConflictError: If the teacher is already busy there
        """
        row, idx = self._cell(teacher_id, day, period)
        if row[idx]:
            raise SlotConflictError(f"Teacher {teacher_id} already busy on {day} period {period}")
        row[idx] = True

    def assign(self, teacher_id: str, day: str, periods: Iterable[int]) -> None:
        """
        Book a teacher for the given periods and count them against the cap.

        Either every period is booked or nothing changes.

        Raises:
            SlotConflictError: If a period is busy or the cap would be exceeded
        """
        periods = list(periods)
        if self.remaining_capacity(teacher_id) < len(periods):
            raise SlotConflictError(
                f"Teacher {teacher_id} has {self.remaining_capacity(teacher_id)} periods left, "
                f"cannot take {len(periods)}"
            )
        for period in periods:
            if not self.is_free(teacher_id, day, period):
                raise SlotConflictError(f"Teacher {teacher_id} already busy on {day} period {period}")

        for period in periods:
            self.mark_busy(teacher_id, day, period)
        self._assigned[teacher_id] += len(periods)

    def snapshot_hours(self) -> dict[str, int]:
        """Copy of the per-teacher assigned-hour counters."""
        return dict(self._assigned)
