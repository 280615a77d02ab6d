"""
Pydantic models for the timetabler data model.

Wire format uses camelCase field names (``maxHours``, ``hoursPerWeek``,
``periodsPerDay``); Python code uses snake_case. Both are accepted on input.

Grid conventions:
- Days are named (e.g. "Monday") and ordered as given in the configuration
- Periods are numbered from 1 to ``periods_per_day``
- One period is one teaching hour; a lab pair counts as two
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# Constants and Enums
# =============================================================================

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
PERIODS_PER_DAY = 8
LAB_LOCATIONS = [
    "DBMS LAB A-420",
    "S/W LAB A-406",
    "N/W LAB A-402",
    "H/W LAB A-417",
    "PL-II LAB A-413",
]


class SessionType(str, Enum):
    """How a subject is taught: single-period lectures or double-period labs."""
    LECTURE = "lecture"
    LAB = "lab"


class TeacherSelection(str, Enum):
    """Tie-break among several eligible, free, under-cap teachers."""
    FIRST_AVAILABLE = "first_available"
    ROUND_ROBIN = "round_robin"


def _model_config() -> ConfigDict:
    return ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_hours(value: int) -> int:
    """Ensure an hours-per-week value is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"hours-per-week value must be a positive integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"hours-per-week value must be a positive integer, got {value}")
    return value


def validate_lab_pair(
    start_period: int,
    periods_per_day: int,
    break_after: list[int] | tuple[int, ...] = (),
) -> bool:
    """
    Check that a lab pair starting at ``start_period`` fits inside one block.

    The pair occupies ``start_period`` and ``start_period + 1``. It must not
    run past the last period of the day and must not straddle a boundary
    listed in ``break_after``.

    Returns:
        True if the pair is a legal placement
    """
    if start_period < 1 or start_period + 1 > periods_per_day:
        return False
    return start_period not in break_after


def find_reference_errors(
    teachers: list[Teacher],
    subjects: list[Subject],
    sections: list[Section],
) -> list[str]:
    """Collect duplicate-id and dangling-reference problems across entities."""
    errors: list[str] = []

    def check_duplicates(items: list, entity_name: str) -> None:
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                errors.append(f"Duplicate {entity_name} ID: '{item.id}'")
            seen.add(item.id)

    check_duplicates(teachers, "teacher")
    check_duplicates(subjects, "subject")
    check_duplicates(sections, "section")

    subject_ids = {s.id for s in subjects}
    section_ids = {s.id for s in sections}

    for teacher in teachers:
        for subject_id in teacher.subjects:
            if subject_id not in subject_ids:
                errors.append(f"Teacher {teacher.id}: unknown subject '{subject_id}'")

    for subject in subjects:
        for section_id in subject.sections:
            if section_id not in section_ids:
                errors.append(f"Subject {subject.id}: unknown section '{section_id}'")

    return errors


# =============================================================================
# Core Entity Models
# =============================================================================

class Teacher(BaseModel):
    """Teacher qualified for a set of subjects, with a weekly workload cap."""
    model_config = _model_config()

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Display name")
    subjects: list[str] = Field(default_factory=list, description="Subject IDs this teacher can teach")
    max_hours: int = Field(default=20, ge=1, le=60, description="Max periods per week")

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Subject(BaseModel):
    """Subject taught to one or more sections."""
    model_config = _model_config()

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Subject name")
    sections: list[str] = Field(default_factory=list, description="Section IDs taking this subject")
    hours_per_week: dict[str, int] = Field(
        default_factory=dict,
        description="Weekly periods required, per section ID",
    )
    type: SessionType = Field(default=SessionType.LECTURE, description="Session type")
    location: Optional[str] = Field(default=None, description="Fixed location (labs only)")

    @field_validator("hours_per_week", mode="before")
    @classmethod
    def validate_hours_values(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {sid: validate_hours(hours) for sid, hours in v.items()}
        return v

    @model_validator(mode="after")
    def validate_hours_sections(self) -> "Subject":
        """Every hours entry must belong to a section this subject is taught to."""
        unknown = [sid for sid in self.hours_per_week if sid not in self.sections]
        if unknown:
            raise ValueError(
                f"hours_per_week references sections not in sections list: {', '.join(unknown)}"
            )
        return self

    @property
    def is_lab(self) -> bool:
        return self.type == SessionType.LAB

    def hours_for(self, section_id: str) -> int:
        """Weekly hours required for a section (0 if not taught there)."""
        return self.hours_per_week.get(section_id, 0)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Section(BaseModel):
    """Student cohort with its own weekly grid."""
    model_config = _model_config()

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Section name")

    def __str__(self) -> str:
        return self.name


class Slot(BaseModel):
    """An assignment occupying one (day, period) cell of a section grid."""
    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    teacher_id: str
    subject_id: str
    type: SessionType = SessionType.LECTURE
    location: Optional[str] = None


# =============================================================================
# Configuration Models
# =============================================================================

class GenerationConfig(BaseModel):
    """Day/period space and tunables for a generation run."""
    model_config = _model_config()

    days: list[str] = Field(default_factory=lambda: list(DAYS), min_length=1, description="Ordered day names")
    periods_per_day: int = Field(default=PERIODS_PER_DAY, ge=1, le=12, description="Periods per day")
    break_after: list[int] = Field(
        default_factory=list,
        description="Periods after which a break falls; lab pairs may not straddle them",
    )
    max_labs_per_day: int = Field(default=1, ge=1, description="Lab sessions per section per day (balanced layer)")
    max_sessions_per_day: int = Field(default=2, ge=1, description="Upper bound of the balanced per-day cap")
    teacher_selection: TeacherSelection = Field(
        default=TeacherSelection.FIRST_AVAILABLE,
        description="Tie-break among eligible teachers",
    )
    shuffle_seed: Optional[int] = Field(default=None, description="Seed for randomised day ordering")
    max_attempts: int = Field(default=100, ge=1, description="Attempt bound per demand in the balanced layer")

    @field_validator("days")
    @classmethod
    def validate_days(cls, days: list[str]) -> list[str]:
        if any(not d.strip() for d in days):
            raise ValueError("day names must be non-empty")
        if len(set(days)) != len(days):
            raise ValueError(f"day names must be unique: {days}")
        return days

    @model_validator(mode="after")
    def validate_break_after(self) -> "GenerationConfig":
        """Break boundaries must fall between two periods of the day."""
        for period in self.break_after:
            if not 1 <= period < self.periods_per_day:
                raise ValueError(
                    f"break_after period {period} must be between 1 and {self.periods_per_day - 1}"
                )
        return self

    @property
    def num_days(self) -> int:
        return len(self.days)

    @property
    def periods(self) -> range:
        return range(1, self.periods_per_day + 1)

    @property
    def cells_per_section(self) -> int:
        return self.num_days * self.periods_per_day


# =============================================================================
# Main Input Model
# =============================================================================

class TimetableInput(BaseModel):
    """
    Complete input for one generation run.

    Empty collections are accepted here; ``generate`` reports them as
    precondition errors.
    """
    model_config = _model_config()

    config: GenerationConfig = Field(default_factory=GenerationConfig, description="Generation configuration")
    teachers: list[Teacher] = Field(default_factory=list, description="Teachers")
    subjects: list[Subject] = Field(default_factory=list, description="Subjects")
    sections: list[Section] = Field(default_factory=list, description="Sections")

    # Lookup caches (populated after validation)
    _teacher_map: dict[str, Teacher] = {}
    _subject_map: dict[str, Subject] = {}

    def model_post_init(self, __context: Any) -> None:
        """Build lookup maps after model initialization."""
        self._teacher_map = {t.id: t for t in self.teachers}
        self._subject_map = {s.id: s for s in self.subjects}

    @model_validator(mode="after")
    def validate_references(self) -> "TimetableInput":
        """Validate ids are unique and cross-entity references resolve."""
        errors = find_reference_errors(self.teachers, self.subjects, self.sections)
        if errors:
            raise ValueError("Reference validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
        return self

    # -------------------------------------------------------------------------
    # Lookup Methods
    # -------------------------------------------------------------------------

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teacher_map.get(teacher_id)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return self._subject_map.get(subject_id)

    def get_qualified_teachers(self, subject_id: str) -> list[Teacher]:
        """Teachers qualified for a subject, in input order."""
        return [t for t in self.teachers if subject_id in t.subjects]

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    @property
    def total_hours_required(self) -> int:
        """Total weekly periods required across all sections."""
        return sum(sum(s.hours_per_week.values()) for s in self.subjects)

    @property
    def total_teacher_capacity(self) -> int:
        """Sum of all teacher weekly caps."""
        return sum(t.max_hours for t in self.teachers)

    def section_hours(self, section_id: str) -> int:
        """Weekly periods required by one section."""
        return sum(s.hours_for(section_id) for s in self.subjects)

    def capacity_warnings(self) -> list[str]:
        """
        Warnings for inputs that cannot be fully scheduled.

        These never block generation; they predict shortfalls.
        """
        warnings: list[str] = []
        cells = self.config.cells_per_section

        for section in self.sections:
            needed = self.section_hours(section.id)
            if needed > cells:
                warnings.append(
                    f"Section '{section.name}' needs {needed} periods but its grid has only {cells} cells"
                )

        for subject in self.subjects:
            qualified = self.get_qualified_teachers(subject.id)
            needed = sum(subject.hours_per_week.values())
            if not qualified:
                if subject.sections:
                    warnings.append(f"Subject '{subject.name}' has no qualified teacher")
                continue
            capacity = sum(t.max_hours for t in qualified)
            if needed > capacity:
                warnings.append(
                    f"Subject '{subject.name}' needs {needed} periods but its qualified "
                    f"teachers can take at most {capacity}"
                )

        if self.total_hours_required > self.total_teacher_capacity:
            warnings.append(
                f"Total periods required ({self.total_hours_required}) exceeds total "
                f"teacher capacity ({self.total_teacher_capacity})"
            )

        return warnings

    def summary(self) -> dict[str, Any]:
        """Get a summary of the input data."""
        return {
            "teachers": len(self.teachers),
            "subjects": len(self.subjects),
            "lab_subjects": sum(1 for s in self.subjects if s.is_lab),
            "sections": len(self.sections),
            "days": self.config.num_days,
            "periods_per_day": self.config.periods_per_day,
            "total_hours_required": self.total_hours_required,
            "total_teacher_capacity": self.total_teacher_capacity,
        }
