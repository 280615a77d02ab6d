"""Timetabler - greedy weekly timetable generation for school sections."""

from .data.models import GenerationConfig, Section, Subject, Teacher, TimetableInput
from .engine.result import GenerationResult
from .engine.runner import generate, generate_from_input
from .engine.grid import reset_timetable
from .errors import (
    DataValidationError,
    NoEligibleTeacherError,
    PreconditionError,
    SlotConflictError,
    TimetableError,
)
from .cli import app as cli_app

__all__ = [
    # Entities
    "Teacher",
    "Subject",
    "Section",
    "GenerationConfig",
    "TimetableInput",
    # Generation
    "generate",
    "generate_from_input",
    "reset_timetable",
    "GenerationResult",
    # Errors
    "TimetableError",
    "PreconditionError",
    "NoEligibleTeacherError",
    "DataValidationError",
    "SlotConflictError",
    # CLI
    "cli_app",
]
