"""
Output schema for generated timetables.

This module defines the JSON-serializable output format for a generation
run: the nested section/day/period grid, a flat slot list, shortfall
warnings and pre-computed views by section and by teacher.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field

from timetabler.data.models import SessionType, Slot

if TYPE_CHECKING:
    from timetabler.data.models import TimetableInput
    from timetabler.engine.result import GenerationResult, ShortfallRecord


# =============================================================================
# Enums
# =============================================================================

class OutputStatus(str, Enum):
    """Overall run status."""
    COMPLETE = "complete"
    PARTIAL = "partial"


# =============================================================================
# Slot Output
# =============================================================================

class SlotOutput(BaseModel):
    """A single filled cell in the output."""
    section_id: str = Field(alias="sectionId")
    day: str
    period: int
    teacher_id: str = Field(alias="teacherId")
    subject_id: str = Field(alias="subjectId")
    type: SessionType = SessionType.LECTURE
    location: Optional[str] = None

    # Optional enriched data
    section_name: Optional[str] = Field(default=None, alias="sectionName")
    teacher_name: Optional[str] = Field(default=None, alias="teacherName")
    subject_name: Optional[str] = Field(default=None, alias="subjectName")

    model_config = {"populate_by_name": True}

    @property
    def is_lab(self) -> bool:
        return self.type == SessionType.LAB


# =============================================================================
# Warnings
# =============================================================================

class ShortfallOutput(BaseModel):
    """A demand that was not fully placed."""
    section_id: str = Field(alias="sectionId")
    subject_id: str = Field(alias="subjectId")
    needed: int
    allocated: int
    shortfall: int
    section_name: Optional[str] = Field(default=None, alias="sectionName")
    subject_name: Optional[str] = Field(default=None, alias="subjectName")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(
        cls,
        record: ShortfallRecord,
        section_name: str | None = None,
        subject_name: str | None = None,
    ) -> ShortfallOutput:
        return cls(
            sectionId=record.section_id,
            subjectId=record.subject_id,
            needed=record.needed,
            allocated=record.allocated,
            shortfall=record.shortfall,
            sectionName=section_name,
            subjectName=subject_name,
        )


# =============================================================================
# Views
# =============================================================================

class EntitySchedule(BaseModel):
    """Schedule for a section or a teacher."""
    id: str
    name: str
    slots: list[SlotOutput]
    by_day: dict[str, list[SlotOutput]] = Field(
        default_factory=dict,
        alias="byDay"
    )

    model_config = {"populate_by_name": True}


class TimetableViews(BaseModel):
    """Pre-computed views of the timetable for convenience."""
    by_section: dict[str, EntitySchedule] = Field(
        default_factory=dict,
        alias="bySection"
    )
    by_teacher: dict[str, EntitySchedule] = Field(
        default_factory=dict,
        alias="byTeacher"
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Complete Output
# =============================================================================

class TimetableOutput(BaseModel):
    """Complete output for a generated timetable."""
    status: OutputStatus
    generation_time_seconds: float = Field(alias="generationTimeSeconds")
    days: list[str]
    periods_per_day: int = Field(alias="periodsPerDay")
    timetable: dict[str, dict[str, dict[int, Optional[Slot]]]]
    slots: list[SlotOutput]
    warnings: list[ShortfallOutput] = Field(default_factory=list)
    teacher_hours: dict[str, int] = Field(default_factory=dict, alias="teacherHours")
    views: TimetableViews = Field(default_factory=TimetableViews)

    model_config = {"populate_by_name": True}

    @property
    def is_complete(self) -> bool:
        return self.status == OutputStatus.COMPLETE

    @property
    def total_shortfall(self) -> int:
        return sum(w.shortfall for w in self.warnings)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(by_alias=True, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Conversion Functions
# =============================================================================

def create_timetable_output(
    result: GenerationResult,
    input_data: TimetableInput | None = None,
) -> TimetableOutput:
    """
    Create a TimetableOutput from a GenerationResult.

    Args:
        result: The generation result
        input_data: Optional input, used to attach display names

    Returns:
        TimetableOutput with all views populated
    """
    teacher_names: dict[str, str] = {}
    subject_names: dict[str, str] = {}
    section_names: dict[str, str] = {}
    if input_data is not None:
        teacher_names = {t.id: t.name for t in input_data.teachers}
        subject_names = {s.id: s.name for s in input_data.subjects}
        section_names = {s.id: s.name for s in input_data.sections}

    grid = result.grid
    slots = [
        SlotOutput(
            sectionId=section_id,
            day=day,
            period=period,
            teacherId=slot.teacher_id,
            subjectId=slot.subject_id,
            type=slot.type,
            location=slot.location,
            sectionName=section_names.get(section_id),
            teacherName=teacher_names.get(slot.teacher_id),
            subjectName=subject_names.get(slot.subject_id),
        )
        for section_id, day, period, slot in grid.iter_slots()
    ]

    warnings = [
        ShortfallOutput.from_record(
            record,
            section_name=section_names.get(record.section_id),
            subject_name=subject_names.get(record.subject_id),
        )
        for record in result.warnings
    ]

    views = _create_views(slots, grid.days, grid.section_ids, section_names, teacher_names)

    return TimetableOutput(
        status=OutputStatus.COMPLETE if result.is_complete else OutputStatus.PARTIAL,
        generationTimeSeconds=result.elapsed_seconds,
        days=grid.days,
        periodsPerDay=grid.periods_per_day,
        timetable=grid.cells,
        slots=slots,
        warnings=warnings,
        teacherHours=dict(result.teacher_hours),
        views=views,
    )


def _create_views(
    slots: list[SlotOutput],
    days: list[str],
    section_ids: list[str],
    section_names: dict[str, str],
    teacher_names: dict[str, str],
) -> TimetableViews:
    """Create pre-computed views from slots."""
    day_order = {day: i for i, day in enumerate(days)}

    def sort_slots(slot_list: list[SlotOutput]) -> list[SlotOutput]:
        return sorted(slot_list, key=lambda s: (day_order.get(s.day, len(days)), s.period))

    by_section: dict[str, list[SlotOutput]] = {sid: [] for sid in section_ids}
    by_teacher: dict[str, list[SlotOutput]] = {}

    for slot in slots:
        by_section.setdefault(slot.section_id, []).append(slot)
        by_teacher.setdefault(slot.teacher_id, []).append(slot)

    section_schedules = {
        section_id: EntitySchedule(
            id=section_id,
            name=section_names.get(section_id) or section_id,
            slots=sort_slots(section_slots),
            byDay=_group_by_day(sort_slots(section_slots)),
        )
        for section_id, section_slots in by_section.items()
    }

    teacher_schedules = {
        teacher_id: EntitySchedule(
            id=teacher_id,
            name=teacher_names.get(teacher_id) or teacher_id,
            slots=sort_slots(teacher_slots),
            byDay=_group_by_day(sort_slots(teacher_slots)),
        )
        for teacher_id, teacher_slots in by_teacher.items()
    }

    return TimetableViews(bySection=section_schedules, byTeacher=teacher_schedules)


def _group_by_day(slots: list[SlotOutput]) -> dict[str, list[SlotOutput]]:
    """Group slots by day name, preserving order."""
    by_day: dict[str, list[SlotOutput]] = {}
    for slot in slots:
        by_day.setdefault(slot.day, []).append(slot)
    return by_day


# =============================================================================
# Convenience Functions
# =============================================================================

def result_to_json(
    result: GenerationResult,
    input_data: TimetableInput | None = None,
    indent: int = 2,
) -> str:
    """Convert a GenerationResult directly to a JSON string."""
    return create_timetable_output(result, input_data).to_json(indent=indent)


def result_to_dict(
    result: GenerationResult,
    input_data: TimetableInput | None = None,
) -> dict[str, Any]:
    """Convert a GenerationResult directly to a dictionary."""
    return create_timetable_output(result, input_data).to_dict()
