"""
Weekly timetable grid.

The grid maps section id -> day name -> period number -> optional Slot.
Each cell holds at most one slot; placing into an occupied cell raises.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..data.models import Slot
from ..errors import SlotConflictError


class TimetableGrid:
    """
    Per-section weekly grid of (day, period) cells.

    Usage:
        grid = TimetableGrid(["S1", "S2"], ["Monday", "Tuesday"], 8)
        grid.place("S1", "Monday", 1, Slot(teacher_id="T1", subject_id="MATH"))
        grid.get("S1", "Monday", 1)
    """

    def __init__(self, section_ids: list[str], days: list[str], periods_per_day: int):
        self.section_ids = list(section_ids)
        self.days = list(days)
        self.periods_per_day = periods_per_day
        self.cells: dict[str, dict[str, dict[int, Optional[Slot]]]] = {}
        self.reset()

    @property
    def periods(self) -> range:
        return range(1, self.periods_per_day + 1)

    def reset(self) -> None:
        """Empty every cell."""
        self.cells = {
            section_id: {
                day: {period: None for period in self.periods}
                for day in self.days
            }
            for section_id in self.section_ids
        }

    # -------------------------------------------------------------------------
    # Cell access
    # -------------------------------------------------------------------------

    def get(self, section_id: str, day: str, period: int) -> Optional[Slot]:
        """Return the slot at a cell, or None if empty.

        Raises:
            KeyError: If the section, day or period is not part of the grid
        """
        return self.cells[section_id][day][period]

    def is_free(self, section_id: str, day: str, period: int) -> bool:
        return self.get(section_id, day, period) is None

    def place(self, section_id: str, day: str, period: int, slot: Slot) -> None:
        """
        Write a slot into an empty cell.

        Raises:
            SlotConflictError: If the cell already holds a slot
        """
        current = self.get(section_id, day, period)
        if current is not None:
            raise SlotConflictError(
                f"Section {section_id} {day} period {period} already holds "
                f"{current.subject_id} ({current.teacher_id})"
            )
        self.cells[section_id][day][period] = slot

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def filled_count(self, section_id: str, day: str) -> int:
        """Number of filled cells for a section on a day."""
        return sum(1 for slot in self.cells[section_id][day].values() if slot is not None)

    def iter_slots(self) -> Iterator[tuple[str, str, int, Slot]]:
        """Yield (section_id, day, period, slot) for every filled cell, in grid order."""
        for section_id in self.section_ids:
            for day in self.days:
                for period in self.periods:
                    slot = self.cells[section_id][day][period]
                    if slot is not None:
                        yield section_id, day, period, slot

    def teacher_hours(self) -> dict[str, int]:
        """Periods assigned to each teacher across the whole grid."""
        hours: dict[str, int] = {}
        for _, _, _, slot in self.iter_slots():
            hours[slot.teacher_id] = hours.get(slot.teacher_id, 0) + 1
        return hours

    def count_filled(self) -> int:
        return sum(1 for _ in self.iter_slots())

    @property
    def total_cells(self) -> int:
        return len(self.section_ids) * len(self.days) * self.periods_per_day

    def to_dict(self) -> dict[str, Any]:
        """Nested plain dict (camelCase slot fields, None for empty cells)."""
        return {
            section_id: {
                day: {
                    period: (slot.model_dump(by_alias=True, mode="json") if slot is not None else None)
                    for period, slot in periods.items()
                }
                for day, periods in days.items()
            }
            for section_id, days in self.cells.items()
        }


def reset_timetable(section_ids: list[str], days: list[str], periods_per_day: int) -> TimetableGrid:
    """Return an empty grid with every cell set to None."""
    return TimetableGrid(section_ids, days, periods_per_day)
