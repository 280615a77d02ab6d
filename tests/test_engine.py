"""End-to-end tests for timetable generation."""

from __future__ import annotations

import pytest

from timetabler.data.generator import generate_medium_school, generate_small_school
from timetabler.data.models import (
    GenerationConfig,
    Section,
    SessionType,
    Subject,
    Teacher,
    TimetableInput,
)
from timetabler.engine.result import Layer
from timetabler.engine.runner import check_preconditions, generate, generate_from_input
from timetabler.errors import DataValidationError, NoEligibleTeacherError, PreconditionError

FIVE_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def assert_valid_timetable(result, input_data: TimetableInput) -> None:
    """Check every hard constraint on a generated grid."""
    grid = result.grid

    # No teacher in two sections at the same time
    booked: set[tuple[str, str, int]] = set()
    for _, day, period, slot in grid.iter_slots():
        key = (slot.teacher_id, day, period)
        assert key not in booked, f"teacher overlap at {key}"
        booked.add(key)

    # Workload caps and tracker agreement
    grid_hours = grid.teacher_hours()
    for teacher in input_data.teachers:
        assert grid_hours.get(teacher.id, 0) <= teacher.max_hours
        assert result.teacher_hours[teacher.id] == grid_hours.get(teacher.id, 0)

    # Qualified teachers, never more than needed
    counts: dict[tuple[str, str], int] = {}
    for section_id, _, _, slot in grid.iter_slots():
        assert slot.subject_id in input_data.get_teacher(slot.teacher_id).subjects
        key = (section_id, slot.subject_id)
        counts[key] = counts.get(key, 0) + 1
    for (section_id, subject_id), count in counts.items():
        assert count <= input_data.get_subject(subject_id).hours_for(section_id)

    # Shortfall accounting
    assert result.hours_allocated + result.total_shortfall == result.hours_needed
    assert result.hours_allocated == grid.count_filled()


class TestScenarios:
    """Small hand-checked scenarios."""

    def test_math_three_distinct_days(self, math_input):
        result = generate(
            math_input.teachers, math_input.subjects, math_input.sections,
            days=FIVE_DAYS, periods_per_day=7,
        )
        cells = [(day, period, slot) for _, day, period, slot in result.grid.iter_slots()]
        assert len(cells) == 3
        assert all(slot.teacher_id == "T" and slot.subject_id == "math" for _, _, slot in cells)
        assert len({day for day, _, _ in cells}) == 3
        assert result.warnings == []
        assert result.is_complete

    def test_lab_adjacent_pair(self, lab_input):
        result = generate_from_input(lab_input)
        cells = [(day, period, slot) for _, day, period, slot in result.grid.iter_slots()]
        assert len(cells) == 2
        (day_a, period_a, slot_a), (day_b, period_b, slot_b) = cells
        assert day_a == day_b
        assert period_b == period_a + 1
        for slot in (slot_a, slot_b):
            assert slot.teacher_id == "T2"
            assert slot.subject_id == "lab1"
            assert slot.type == SessionType.LAB
            assert slot.location == "Room A"

    def test_shortfall_reported(self, shortfall_input):
        result = generate_from_input(shortfall_input)
        assert result.hours_allocated == 2
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert (warning.section_id, warning.subject_id) == ("S", "phy")
        assert warning.needed == 4
        assert warning.allocated == 2
        assert warning.shortfall == 2
        assert result.teacher_hours["T"] == 2
        assert result.grid.count_filled() == 2
        assert not result.is_complete

    def test_lab_and_lecture_share_section(self, seven_period_config):
        input_data = TimetableInput(
            config=seven_period_config,
            teachers=[
                Teacher(id="T", name="Mr T", subjects=["math"], max_hours=3),
                Teacher(id="T2", name="Ms Lab", subjects=["lab1"], max_hours=2),
            ],
            subjects=[
                Subject(id="math", name="Math", sections=["S"], hours_per_week={"S": 3}),
                Subject(id="lab1", name="Lab1", sections=["S"], hours_per_week={"S": 2},
                        type=SessionType.LAB, location="Room A"),
            ],
            sections=[Section(id="S", name="Section S")],
        )
        result = generate_from_input(input_data)

        assert result.is_complete
        assert result.grid.get("S", "Monday", 1).subject_id == "lab1"
        assert result.grid.get("S", "Monday", 2).subject_id == "lab1"
        math_days = {day for _, day, _, slot in result.grid.iter_slots() if slot.subject_id == "math"}
        assert math_days == {"Tuesday", "Wednesday", "Thursday"}

    def test_outcomes_follow_priority_order(self, two_section_input):
        result = generate_from_input(two_section_input)
        order = [(o.demand.section_id, o.demand.subject_id) for o in result.outcomes]
        assert order[:2] == [("S1", "dbl"), ("S2", "dbl")]
        assert_valid_timetable(result, two_section_input)


class TestPreconditions:
    """Runs that cannot start."""

    def test_missing_sections_checked_first(self):
        with pytest.raises(PreconditionError) as exc_info:
            generate([], [], [])
        assert exc_info.value.kind == "missing_sections"
        assert "at least one section" in str(exc_info.value)

    def test_missing_subjects(self):
        with pytest.raises(PreconditionError) as exc_info:
            generate([Teacher(id="T1", name="A")], [], [Section(id="S1", name="A")])
        assert exc_info.value.kind == "missing_subjects"

    def test_missing_teachers(self, math_input):
        with pytest.raises(PreconditionError) as exc_info:
            generate([], math_input.subjects, math_input.sections)
        assert exc_info.value.kind == "missing_teachers"

    def test_no_eligible_teacher(self, math_input):
        other = Teacher(id="T9", name="Other", subjects=[])
        with pytest.raises(NoEligibleTeacherError):
            generate([other], math_input.subjects, math_input.sections)

    def test_dangling_reference(self, math_input):
        ghost = Teacher(id="T9", name="Ghost", subjects=["ghost"])
        with pytest.raises(DataValidationError, match="unknown subject"):
            check_preconditions([ghost], math_input.subjects, math_input.sections)

    def test_duplicate_ids(self, math_input):
        sections = [Section(id="S", name="A"), Section(id="S", name="B")]
        with pytest.raises(DataValidationError, match="Duplicate section"):
            generate(math_input.teachers, math_input.subjects, sections)


class TestConfigOverrides:
    """Explicit arguments override the config copy."""

    def test_days_and_periods_override(self, math_input):
        result = generate(
            math_input.teachers, math_input.subjects, math_input.sections,
            days=["Mon", "Tue"], periods_per_day=4, config=math_input.config,
        )
        assert result.grid.days == ["Mon", "Tue"]
        assert result.grid.periods_per_day == 4
        assert math_input.config.periods_per_day == 7

    def test_invalid_override_rejected(self, math_input):
        with pytest.raises(DataValidationError):
            generate(math_input.teachers, math_input.subjects, math_input.sections, periods_per_day=0)
        with pytest.raises(DataValidationError):
            generate(math_input.teachers, math_input.subjects, math_input.sections, days=["Mon", "Mon"])

    def test_defaults_without_config(self, math_input):
        result = generate(math_input.teachers, math_input.subjects, math_input.sections)
        assert result.grid.days == FIVE_DAYS
        assert result.grid.periods_per_day == 8


class TestResetAndRegenerate:
    """Fresh state per run."""

    def test_reset_then_regenerate(self, two_section_input):
        first = generate_from_input(two_section_input)
        placed = first.grid.to_dict()
        assert first.grid.count_filled() > 0

        first.grid.reset()
        assert first.grid.count_filled() == 0

        second = generate_from_input(two_section_input)
        assert_valid_timetable(second, two_section_input)
        assert second.grid.to_dict() == placed

    def test_runs_do_not_share_state(self, math_input):
        first = generate_from_input(math_input)
        second = generate_from_input(math_input)
        assert first.grid is not second.grid
        assert first.teacher_hours == second.teacher_hours == {"T": 3}

    def test_seeded_runs_repeat(self, two_section_input):
        seeded = two_section_input.model_copy(
            update={"config": GenerationConfig(days=FIVE_DAYS, periods_per_day=7, shuffle_seed=5)}
        )
        assert generate_from_input(seeded).grid.to_dict() == generate_from_input(seeded).grid.to_dict()


class TestGeneratedSchools:
    """Hard constraints hold on generated inputs."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_small_school(self, seed):
        school = generate_small_school(seed=seed)
        assert_valid_timetable(generate_from_input(school), school)

    @pytest.mark.parametrize("seed", [1, 42])
    def test_medium_school(self, seed):
        school = generate_medium_school(seed=seed)
        assert_valid_timetable(generate_from_input(school), school)

    def test_balanced_labs_are_adjacent_pairs(self):
        school = generate_medium_school(seed=7)
        result = generate_from_input(school)
        for outcome in result.outcomes:
            demand = outcome.demand
            if not demand.is_lab or not outcome.is_satisfied:
                continue
            if set(outcome.hours_by_layer()) != {Layer.BALANCED}:
                continue
            for placement in outcome.placements:
                assert placement.is_pair
                first, second = placement.periods
                assert second == first + 1
                a = result.grid.get(demand.section_id, placement.day, first)
                b = result.grid.get(demand.section_id, placement.day, second)
                assert a.teacher_id == b.teacher_id
                assert a.location == b.location == demand.location

    def test_round_robin_school(self):
        school = generate_small_school(seed=4)
        school = school.model_copy(
            update={"config": GenerationConfig(teacher_selection="round_robin")}
        )
        assert_valid_timetable(generate_from_input(school), school)
