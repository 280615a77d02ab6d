"""
Greedy slot allocation.

Demands are placed one at a time, in priority order, against a shared grid
and availability tracker. Each demand goes through up to three layers:

1. Balanced days: spread sessions across the week with a per-day cap,
   least-loaded day first. Labs take adjacent period pairs taught by one
   teacher.
2. Relaxed (labs only): single periods anywhere, no per-day caps.
3. Unconstrained (lectures only): single periods anywhere, no per-day cap.

Whatever is still missing after the last layer is a shortfall. Placements
of earlier demands are never undone.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from ..data.models import GenerationConfig, Slot, TeacherSelection, validate_lab_pair
from .availability import AvailabilityTracker
from .demands import Demand
from .grid import TimetableGrid
from .result import DemandOutcome, Layer, Placement

logger = logging.getLogger(__name__)


def daily_session_cap(hours_needed: int, num_days: int, max_sessions_per_day: int = 2) -> int:
    """Sessions of one demand allowed per day in the balanced layer."""
    return min(max_sessions_per_day, math.ceil(hours_needed / num_days))


class SlotAllocator:
    """
    Places demands into a grid while keeping the tracker consistent.

    The allocator owns the grid and tracker for the duration of a run; they
    must not be shared with another allocator.

    Usage:
        allocator = SlotAllocator(grid, tracker, config)
        outcomes = allocator.allocate_all(order_demands(demands))
    """

    def __init__(self, grid: TimetableGrid, tracker: AvailabilityTracker, config: GenerationConfig):
        self.grid = grid
        self.tracker = tracker
        self.config = config

        self.days = list(grid.days)
        if config.shuffle_seed is not None:
            random.Random(config.shuffle_seed).shuffle(self.days)
        self._day_order = {day: i for i, day in enumerate(self.days)}

        # Lab sessions placed per (section, day)
        self._lab_sessions: dict[tuple[str, str], int] = {}
        # Round-robin start index per (section, subject)
        self._rotation: dict[tuple[str, str], int] = {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def allocate_all(self, demands: list[Demand]) -> list[DemandOutcome]:
        """Allocate demands strictly in the given order."""
        return [self.allocate(demand) for demand in demands]

    def allocate(self, demand: Demand) -> DemandOutcome:
        """Place as many periods of a demand as the layers allow."""
        outcome = DemandOutcome(demand=demand)

        self._place_balanced(demand, outcome)

        if not outcome.is_satisfied:
            layer = Layer.RELAXED if demand.is_lab else Layer.UNCONSTRAINED
            logger.debug("%s: %d periods left after balanced layer, trying %s",
                         demand, outcome.shortfall, layer.value)
            self._place_single_pass(demand, outcome, layer)

        if not outcome.is_satisfied:
            logger.warning("Could not fully place %s: %d of %d periods allocated",
                           demand, outcome.hours_allocated, demand.hours_needed)

        return outcome

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    def _place_balanced(self, demand: Demand, outcome: DemandOutcome) -> None:
        cap = daily_session_cap(demand.hours_needed, len(self.days), self.config.max_sessions_per_day)
        day_counts = {day: 0 for day in self.days}

        for _ in range(self.config.max_attempts):
            remaining = outcome.shortfall
            if remaining <= 0:
                return
            size = min(2, remaining) if demand.is_lab else 1

            candidates = [
                day for day in self.days
                if day_counts[day] < cap and self._lab_allowed(demand, day)
            ]
            candidates.sort(key=lambda d: (
                day_counts[d],
                self.grid.filled_count(demand.section_id, d),
                self._day_order[d],
            ))

            found = None
            for day in candidates:
                block = self._find_block(demand, day, size)
                if block is not None:
                    found = (day, *block)
                    break

            if found is None:
                return

            day, periods, teacher_id = found
            self._commit(demand, outcome, day, periods, teacher_id, Layer.BALANCED)
            day_counts[day] += 1

    def _place_single_pass(self, demand: Demand, outcome: DemandOutcome, layer: Layer) -> None:
        """One pass over every cell in fixed order, one period at a time."""
        for day in self.days:
            for period in self.grid.periods:
                if outcome.is_satisfied:
                    return
                if not self.grid.is_free(demand.section_id, day, period):
                    continue
                teacher_id = self._pick_teacher(demand, day, (period,))
                if teacher_id is not None:
                    self._commit(demand, outcome, day, (period,), teacher_id, layer)

    # -------------------------------------------------------------------------
    # Search helpers
    # -------------------------------------------------------------------------

    def _lab_allowed(self, demand: Demand, day: str) -> bool:
        if not demand.is_lab:
            return True
        return self._lab_sessions.get((demand.section_id, day), 0) < self.config.max_labs_per_day

    def _find_block(
        self, demand: Demand, day: str, size: int
    ) -> Optional[tuple[tuple[int, ...], str]]:
        """First run of ``size`` free periods on a day with a teacher able to take all of them."""
        for start in self.grid.periods:
            periods = tuple(range(start, start + size))
            if periods[-1] > self.grid.periods_per_day:
                break
            if size == 2 and not validate_lab_pair(start, self.grid.periods_per_day, self.config.break_after):
                continue
            if not all(self.grid.is_free(demand.section_id, day, p) for p in periods):
                continue
            teacher_id = self._pick_teacher(demand, day, periods)
            if teacher_id is not None:
                return periods, teacher_id
        return None

    def _pick_teacher(self, demand: Demand, day: str, periods: tuple[int, ...]) -> Optional[str]:
        candidates = demand.eligible_teacher_ids
        if self.config.teacher_selection == TeacherSelection.ROUND_ROBIN:
            start = self._rotation.get((demand.section_id, demand.subject_id), 0)
            candidates = candidates[start:] + candidates[:start]

        for teacher_id in candidates:
            if self.tracker.can_take(teacher_id, day, periods):
                return teacher_id
        return None

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def _commit(
        self,
        demand: Demand,
        outcome: DemandOutcome,
        day: str,
        periods: tuple[int, ...],
        teacher_id: str,
        layer: Layer,
    ) -> None:
        """Write the slot, book the teacher and record the placement together."""
        slot = Slot(
            teacher_id=teacher_id,
            subject_id=demand.subject_id,
            type=demand.session_type,
            location=demand.location,
        )

        # Cells were checked free during the search; assign() checks the
        # teacher side before mutating anything.
        self.tracker.assign(teacher_id, day, periods)
        for period in periods:
            self.grid.place(demand.section_id, day, period, slot)

        outcome.placements.append(Placement(day=day, periods=periods, teacher_id=teacher_id, layer=layer))

        if demand.is_lab:
            key = (demand.section_id, day)
            self._lab_sessions[key] = self._lab_sessions.get(key, 0) + 1

        if self.config.teacher_selection == TeacherSelection.ROUND_ROBIN:
            eligible = demand.eligible_teacher_ids
            self._rotation[(demand.section_id, demand.subject_id)] = (eligible.index(teacher_id) + 1) % len(eligible)

        logger.debug("Placed %s on %s periods %s with %s (%s)",
                     demand.subject_id, day, list(periods), teacher_id, layer.value)
