"""
Timetable generation engine.

Greedy, single-threaded allocation of teachers and periods to section
demands. Each call to ``generate`` builds its own grid and availability
tracker.
"""

from .allocator import SlotAllocator, daily_session_cap
from .availability import AvailabilityTracker
from .demands import Demand, extract_demands, order_demands, priority_key
from .grid import TimetableGrid, reset_timetable
from .result import (
    DemandOutcome,
    GenerationResult,
    Layer,
    Placement,
    ShortfallRecord,
)
from .runner import check_preconditions, generate, generate_from_input

__all__ = [
    # Run entry points
    "generate",
    "generate_from_input",
    "check_preconditions",
    # Demands
    "Demand",
    "extract_demands",
    "order_demands",
    "priority_key",
    # State
    "TimetableGrid",
    "reset_timetable",
    "AvailabilityTracker",
    # Allocation
    "SlotAllocator",
    "daily_session_cap",
    # Results
    "Layer",
    "Placement",
    "DemandOutcome",
    "ShortfallRecord",
    "GenerationResult",
]
