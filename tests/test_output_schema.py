"""Tests for the output schema."""

from __future__ import annotations

import json

import pytest

from timetabler.engine.runner import generate_from_input
from timetabler.output.schema import (
    OutputStatus,
    TimetableOutput,
    create_timetable_output,
    result_to_dict,
    result_to_json,
)


@pytest.fixture
def math_output(math_input) -> TimetableOutput:
    return create_timetable_output(generate_from_input(math_input), math_input)


@pytest.fixture
def shortfall_output(shortfall_input) -> TimetableOutput:
    return create_timetable_output(generate_from_input(shortfall_input), shortfall_input)


class TestCreateTimetableOutput:
    """Tests for create_timetable_output."""

    def test_complete_status(self, math_output):
        assert math_output.status == OutputStatus.COMPLETE
        assert math_output.is_complete
        assert math_output.total_shortfall == 0
        assert math_output.warnings == []

    def test_grid_shape(self, math_output):
        assert math_output.days == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
        assert math_output.periods_per_day == 7
        assert list(math_output.timetable) == ["S"]
        assert list(math_output.timetable["S"]["Monday"]) == list(range(1, 8))

    def test_slots_carry_names(self, math_output):
        assert len(math_output.slots) == 3
        slot = math_output.slots[0]
        assert slot.section_id == "S"
        assert slot.teacher_name == "Mr T"
        assert slot.subject_name == "Math"
        assert slot.section_name == "Section S"

    def test_names_optional(self, math_input):
        output = create_timetable_output(generate_from_input(math_input))
        assert output.slots[0].teacher_name is None
        assert output.views.by_teacher["T"].name == "T"

    def test_teacher_hours(self, math_output):
        assert math_output.teacher_hours == {"T": 3}

    def test_partial_status_with_warnings(self, shortfall_output):
        assert shortfall_output.status == OutputStatus.PARTIAL
        assert shortfall_output.total_shortfall == 2
        warning = shortfall_output.warnings[0]
        assert warning.needed == 4
        assert warning.allocated == 2
        assert warning.subject_name == "Physics"


class TestViews:
    """Tests for pre-computed views."""

    def test_section_view(self, math_output):
        schedule = math_output.views.by_section["S"]
        assert schedule.name == "Section S"
        assert len(schedule.slots) == 3
        assert list(schedule.by_day) == ["Monday", "Tuesday", "Wednesday"]

    def test_teacher_view(self, math_output):
        schedule = math_output.views.by_teacher["T"]
        assert schedule.name == "Mr T"
        assert [s.day for s in schedule.slots] == ["Monday", "Tuesday", "Wednesday"]

    def test_section_with_no_slots_listed(self, two_section_input):
        data = two_section_input.model_copy(deep=True)
        data.sections.append(data.sections[0].model_copy(update={"id": "S3", "name": "Section C"}))
        output = create_timetable_output(generate_from_input(data), data)
        assert output.views.by_section["S3"].slots == []

    def test_teacher_view_sorted_by_day_then_period(self, two_section_input):
        output = create_timetable_output(generate_from_input(two_section_input), two_section_input)
        day_order = {d: i for i, d in enumerate(output.days)}
        for schedule in output.views.by_teacher.values():
            keys = [(day_order[s.day], s.period) for s in schedule.slots]
            assert keys == sorted(keys)


class TestSerialization:
    """Tests for JSON output."""

    def test_camel_case_keys(self, math_output):
        data = json.loads(math_output.to_json())
        for key in ("status", "generationTimeSeconds", "periodsPerDay", "timetable",
                    "slots", "warnings", "teacherHours", "views"):
            assert key in data
        assert "bySection" in data["views"]
        assert "byTeacher" in data["views"]
        assert data["slots"][0]["teacherId"] == "T"

    def test_nested_grid_with_nulls(self, math_output):
        data = json.loads(math_output.to_json())
        monday = data["timetable"]["S"]["Monday"]
        assert monday["1"] == {"teacherId": "T", "subjectId": "math", "type": "lecture", "location": None}
        assert monday["2"] is None

    def test_reload_from_json(self, math_output):
        reloaded = TimetableOutput.model_validate(json.loads(math_output.to_json()))
        assert reloaded.status == OutputStatus.COMPLETE
        assert len(reloaded.slots) == 3
        assert reloaded.timetable["S"]["Monday"][1].teacher_id == "T"

    def test_convenience_functions(self, math_input):
        result = generate_from_input(math_input)
        assert json.loads(result_to_json(result, math_input))["status"] == "complete"
        assert result_to_dict(result)["periodsPerDay"] == 7
