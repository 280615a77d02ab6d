"""Exception hierarchy for timetable generation.

Precondition and validation errors abort a generation run and no grid is
produced. Allocation shortfalls are not exceptions; they are reported as
warnings on the result.
"""

from __future__ import annotations


class TimetableError(Exception):
    """Base class for all timetabler errors."""
    pass


class PreconditionError(TimetableError):
    """Raised when a generation run cannot start.

    Attributes:
        kind: Machine-readable error kind (e.g. 'missing_teachers')
        message: Human-readable description
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message


class NoEligibleTeacherError(PreconditionError):
    """Raised when a subject assigned to a section has no qualified teacher."""

    def __init__(self, subject_id: str, section_id: str, subject_name: str | None = None,
                 section_name: str | None = None):
        super().__init__(
            "no_eligible_teacher",
            f"No teacher available for subject {subject_name or subject_id} "
            f"in section {section_name or section_id}",
        )
        self.subject_id = subject_id
        self.section_id = section_id


class DataValidationError(TimetableError):
    """Raised when input data fails validation (dangling references, bad values)."""
    pass


class SlotConflictError(TimetableError):
    """Raised when a placement would break a grid or availability invariant."""
    pass
