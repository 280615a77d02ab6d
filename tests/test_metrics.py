"""Tests for quality metrics calculator."""

from __future__ import annotations

import pytest

from timetabler.data.models import Section, Subject, Teacher, TimetableInput
from timetabler.engine.runner import generate_from_input
from timetabler.output.metrics import (
    BalanceMetrics,
    DistributionMetrics,
    LabMetrics,
    MetricsReport,
    QualityMetricsCalculator,
    calculate_all_metrics,
    find_violations,
    generate_report,
)
from timetabler.output.schema import SlotOutput, TimetableOutput, create_timetable_output


def build_output(input_data: TimetableInput) -> TimetableOutput:
    return create_timetable_output(generate_from_input(input_data), input_data)


@pytest.fixture
def calculator() -> QualityMetricsCalculator:
    return QualityMetricsCalculator()


@pytest.fixture
def shared_teacher_input(seven_period_config) -> TimetableInput:
    """Two sections, 1h of Math each, one teacher who can also take English."""
    return TimetableInput(
        config=seven_period_config,
        teachers=[
            Teacher(id="T", name="Mr T", subjects=["math"], max_hours=3),
            Teacher(id="E", name="Ms E", subjects=["eng"], max_hours=3),
        ],
        subjects=[
            Subject(id="math", name="Math", sections=["S1", "S2"], hours_per_week={"S1": 1, "S2": 1}),
            Subject(id="eng", name="English", sections=["S1"], hours_per_week={"S1": 1}),
        ],
        sections=[Section(id="S1", name="A"), Section(id="S2", name="B")],
    )


class TestFindViolations:
    """Tests for the hard-constraint audit."""

    def test_generated_output_is_clean(self, two_section_input):
        assert find_violations(build_output(two_section_input), two_section_input) == []

    def test_teacher_overlap(self, shared_teacher_input):
        output = build_output(shared_teacher_input)
        first = next(s for s in output.slots if s.section_id == "S1" and s.subject_id == "math")
        output.slots.append(SlotOutput(
            sectionId="S2", day=first.day, period=first.period, teacherId="T", subjectId="math",
        ))
        kinds = {v.kind for v in find_violations(output, shared_teacher_input)}
        assert "teacher_overlap" in kinds
        assert "over_allocated" in kinds

    def test_workload_exceeded(self, shared_teacher_input):
        output = build_output(shared_teacher_input)
        for period in (5, 6):
            output.slots.append(SlotOutput(
                sectionId="S2", day="Friday", period=period, teacherId="T", subjectId="math",
            ))
        messages = [v.message for v in find_violations(output, shared_teacher_input) if v.kind == "workload_exceeded"]
        assert messages == ["Teacher T has 4 periods but max is 3"]

    def test_unqualified_teacher(self, shared_teacher_input):
        output = build_output(shared_teacher_input)
        output.slots.append(SlotOutput(
            sectionId="S1", day="Friday", period=7, teacherId="E", subjectId="math",
        ))
        kinds = [v.kind for v in find_violations(output, shared_teacher_input)]
        assert "unqualified_teacher" in kinds


class TestDistributionMetrics:
    """Tests for spread across days."""

    def test_math_fully_spread(self, calculator, math_input):
        metrics = calculator.calculate_distribution_metrics(build_output(math_input))
        assert metrics.well_distributed_count == 1
        assert metrics.total_multi_session_subjects == 1
        assert metrics.score == 100.0

    def test_single_lab_pair_not_counted(self, calculator, lab_input):
        metrics = calculator.calculate_distribution_metrics(build_output(lab_input))
        assert metrics.total_multi_session_subjects == 0
        assert metrics.score == 100.0

    def test_bunched_subject_flagged(self, calculator, math_input):
        output = build_output(math_input)
        for slot in output.slots:
            slot.day = "Monday"
        metrics = calculator.calculate_distribution_metrics(output)
        assert metrics.well_distributed_count == 0
        assert metrics.poorly_distributed == ["math in S: 1 days for 3 sessions"]


class TestLabMetrics:
    """Tests for lab adjacency."""

    def test_pair_detected(self, calculator, lab_input):
        metrics = calculator.calculate_lab_metrics(build_output(lab_input))
        assert metrics.total_lab_periods == 2
        assert metrics.paired_lab_periods == 2
        assert metrics.adjacency_percentage == 100.0
        assert metrics.split_labs == []

    def test_no_labs(self, calculator, math_input):
        metrics = calculator.calculate_lab_metrics(build_output(math_input))
        assert metrics.total_lab_periods == 0
        assert metrics.score == 100.0

    def test_split_lab(self, calculator, lab_input):
        output = build_output(lab_input)
        output.slots[1].day = "Friday"
        metrics = calculator.calculate_lab_metrics(output)
        assert metrics.paired_lab_periods == 0
        assert metrics.split_labs == ["lab1 in S"]


class TestBalanceMetrics:
    """Tests for daily load evenness."""

    def test_math_balance(self, calculator, math_input):
        metrics = calculator.calculate_daily_balance_metrics(build_output(math_input))
        assert metrics.section_balance == {"S": 0.49}
        assert metrics.average_std_dev == 0.49

    def test_score_bounds(self):
        assert BalanceMetrics(average_std_dev=0.0, max_std_dev=0.0).score == 100.0
        assert BalanceMetrics(average_std_dev=3.5, max_std_dev=3.5).score == 0.0


class TestUtilizationMetrics:
    """Tests for coverage and utilisation."""

    def test_full_coverage(self, calculator, math_input):
        metrics = calculator.calculate_utilization_metrics(build_output(math_input), math_input)
        assert metrics.coverage == 100.0
        assert metrics.teacher_utilization == 100.0
        assert metrics.total_cells == 35
        assert metrics.cell_utilization == pytest.approx(8.57)

    def test_partial_coverage(self, calculator, shortfall_input):
        metrics = calculator.calculate_utilization_metrics(build_output(shortfall_input), shortfall_input)
        assert metrics.hours_needed == 4
        assert metrics.hours_allocated == 2
        assert metrics.coverage == 50.0


class TestCalculateAll:
    """Tests for the complete report."""

    def test_report_for_clean_run(self, calculator, math_input):
        report = calculator.calculate_all(build_output(math_input), math_input)
        assert isinstance(report, MetricsReport)
        assert report.hard_constraints_satisfied
        assert report.total_shortfall == 0
        assert report.total_slots == 3
        assert report.total_teachers == 1
        assert report.total_sections == 1
        assert report.grade == "A"
        assert report.overall_score > 90

    def test_shortfall_suggests_improvement(self, calculator, shortfall_input):
        report = calculator.calculate_all(build_output(shortfall_input), shortfall_input)
        assert report.total_shortfall == 2
        assert any("Place missing periods" in area for area in report.improvement_areas)

    def test_to_dict(self, calculator, lab_input):
        data = calculator.calculate_all(build_output(lab_input), lab_input).to_dict()
        assert data["hardConstraintsSatisfied"] is True
        assert data["labs"]["pairedLabPeriods"] == 2
        assert data["utilization"]["coverage"] == 100.0
        assert set(data) >= {"overallScore", "grade", "distribution", "balance", "improvementAreas"}

    @pytest.mark.parametrize("score,grade", [
        (95, "A"), (90, "A"), (85, "B"), (72, "C"), (60, "D"), (10, "F"),
    ])
    def test_score_to_grade(self, calculator, score, grade):
        assert calculator._score_to_grade(score) == grade

    def test_custom_targets(self, math_input):
        strict = QualityMetricsCalculator(targets={"daily_balance": 0.1})
        report = strict.calculate_all(build_output(math_input), math_input)
        assert any("Balance daily load" in area for area in report.improvement_areas)


class TestReport:
    """Tests for the text report."""

    def test_generate_report(self, math_input):
        text = generate_report(build_output(math_input), math_input)
        assert "TIMETABLE QUALITY REPORT" in text
        assert "Hard Constraints: SATISFIED" in text
        assert "Coverage: 100.0%" in text

    def test_report_lists_violations(self, calculator, shared_teacher_input):
        output = build_output(shared_teacher_input)
        output.slots.append(SlotOutput(
            sectionId="S1", day="Friday", period=7, teacherId="E", subjectId="math",
        ))
        text = calculator.generate_report(calculator.calculate_all(output, shared_teacher_input))
        assert "Hard Constraints: VIOLATED" in text
        assert "[unqualified_teacher]" in text

    def test_convenience_function(self, math_input):
        report = calculate_all_metrics(build_output(math_input), math_input)
        assert isinstance(report.distribution_metrics, DistributionMetrics)
        assert isinstance(report.lab_metrics, LabMetrics)
