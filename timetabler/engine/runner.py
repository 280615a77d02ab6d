"""Entry point for a timetable generation run."""

from __future__ import annotations

import logging
import time
from typing import Optional

from pydantic import ValidationError

from ..data.models import (
    GenerationConfig,
    Section,
    Subject,
    Teacher,
    TimetableInput,
    find_reference_errors,
)
from ..errors import DataValidationError, PreconditionError
from .allocator import SlotAllocator
from .availability import AvailabilityTracker
from .demands import extract_demands, order_demands
from .grid import TimetableGrid
from .result import GenerationResult, ShortfallRecord

logger = logging.getLogger(__name__)


def check_preconditions(
    teachers: list[Teacher],
    subjects: list[Subject],
    sections: list[Section],
) -> None:
    """
    Reject inputs no run can start from.

    Raises:
        PreconditionError: If sections, subjects or teachers are empty
        DataValidationError: If ids are duplicated or references dangle
    """
    if not sections:
        raise PreconditionError(
            "missing_sections",
            "Please add at least one section before generating a timetable.",
        )
    if not subjects:
        raise PreconditionError(
            "missing_subjects",
            "Please add at least one subject before generating a timetable.",
        )
    if not teachers:
        raise PreconditionError(
            "missing_teachers",
            "Please add at least one teacher before generating a timetable.",
        )

    errors = find_reference_errors(teachers, subjects, sections)
    if errors:
        raise DataValidationError("; ".join(errors))


def generate(
    teachers: list[Teacher],
    subjects: list[Subject],
    sections: list[Section],
    days: Optional[list[str]] = None,
    periods_per_day: Optional[int] = None,
    config: Optional[GenerationConfig] = None,
) -> GenerationResult:
    """
    Generate a weekly timetable.

    Args:
        teachers: Teachers with qualifications and weekly caps
        subjects: Subjects with per-section weekly hours
        sections: Sections, each getting its own grid
        days: Day names (overrides ``config.days``)
        periods_per_day: Periods per day (overrides ``config.periods_per_day``)
        config: Generation settings (defaults if None)

    Returns:
        GenerationResult with the grid and any shortfall warnings. The grid
        is returned even when some demands could not be fully placed.

    Raises:
        PreconditionError: Empty input collections, or a subject/section
            pair with no eligible teacher (NoEligibleTeacherError)
        DataValidationError: Duplicate ids, dangling references, or an invalid
            days/periods_per_day override
    """
    config = config or GenerationConfig()
    overrides = {}
    if days is not None:
        overrides["days"] = list(days)
    if periods_per_day is not None:
        overrides["periods_per_day"] = periods_per_day
    if overrides:
        try:
            config = GenerationConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            raise DataValidationError(str(e)) from e

    check_preconditions(teachers, subjects, sections)

    started = time.perf_counter()
    logger.info(
        "Generating timetable: %d sections, %d subjects, %d teachers, %d days x %d periods",
        len(sections), len(subjects), len(teachers), config.num_days, config.periods_per_day,
    )

    demands = order_demands(extract_demands(teachers, subjects, sections))

    # Fresh state for every run
    grid = TimetableGrid([s.id for s in sections], config.days, config.periods_per_day)
    tracker = AvailabilityTracker(teachers, config.days, config.periods_per_day)
    allocator = SlotAllocator(grid, tracker, config)

    outcomes = allocator.allocate_all(demands)

    warnings = [ShortfallRecord.from_outcome(o) for o in outcomes if not o.is_satisfied]
    for record in warnings:
        logger.warning("Shortfall: %s", record)

    result = GenerationResult(
        grid=grid,
        warnings=warnings,
        outcomes=outcomes,
        teacher_hours=tracker.snapshot_hours(),
        elapsed_seconds=time.perf_counter() - started,
    )

    logger.info(
        "Generation finished: %d/%d periods placed, %d shortfall warnings",
        result.hours_allocated, result.hours_needed, len(warnings),
    )
    return result


def generate_from_input(input_data: TimetableInput) -> GenerationResult:
    """Run ``generate`` on a validated TimetableInput."""
    return generate(
        input_data.teachers,
        input_data.subjects,
        input_data.sections,
        config=input_data.config,
    )
