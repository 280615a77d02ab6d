"""Input data models, loading and sample data."""

from .models import (
    DAYS,
    LAB_LOCATIONS,
    PERIODS_PER_DAY,
    GenerationConfig,
    Section,
    SessionType,
    Slot,
    Subject,
    Teacher,
    TeacherSelection,
    TimetableInput,
    find_reference_errors,
    validate_hours,
    validate_lab_pair,
)
from .loader import load_timetable_input, parse_timetable_input, save_timetable_input
from .generator import (
    GeneratorConfig,
    generate_sample_school,
    generate_small_school,
    generate_medium_school,
    get_generation_stats,
)

__all__ = [
    # Models
    "DAYS",
    "LAB_LOCATIONS",
    "PERIODS_PER_DAY",
    "GenerationConfig",
    "Section",
    "SessionType",
    "Slot",
    "Subject",
    "Teacher",
    "TeacherSelection",
    "TimetableInput",
    "find_reference_errors",
    "validate_hours",
    "validate_lab_pair",
    # Loader
    "load_timetable_input",
    "parse_timetable_input",
    "save_timetable_input",
    # Generator
    "GeneratorConfig",
    "generate_sample_school",
    "generate_small_school",
    "generate_medium_school",
    "get_generation_stats",
]
