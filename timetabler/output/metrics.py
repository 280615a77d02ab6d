"""
Quality metrics calculator for evaluating generated timetables.

This module audits a timetable against its hard constraints and scores the
soft preferences: subjects spread across the week, labs held as adjacent
double periods, even daily load per section, and how much of the required
teaching was actually placed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timetabler.data.models import TimetableInput
    from .schema import TimetableOutput, SlotOutput


# Target thresholds for quality assessment
DEFAULT_TARGETS = {
    "distribution_score": 80.0,   # Min % well-distributed
    "daily_balance": 1.5,         # Max std dev of periods per day
    "lab_adjacency": 90.0,        # Min % of lab periods in adjacent pairs
    "coverage": 100.0,            # Min % of required periods placed
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Violation:
    """A broken hard constraint."""
    kind: str
    message: str


@dataclass
class DistributionMetrics:
    """How well each subject is spread across the days of the week."""
    well_distributed_count: int
    total_multi_session_subjects: int
    percentage_well_distributed: float
    poorly_distributed: list[str] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Higher is better. Returns percentage."""
        return round(self.percentage_well_distributed, 2)


@dataclass
class LabMetrics:
    """How many lab periods were placed as adjacent same-teacher pairs."""
    total_lab_periods: int
    paired_lab_periods: int
    split_labs: list[str] = field(default_factory=list)

    @property
    def adjacency_percentage(self) -> float:
        if self.total_lab_periods == 0:
            return 100.0
        return round(self.paired_lab_periods / self.total_lab_periods * 100, 2)

    @property
    def score(self) -> float:
        return self.adjacency_percentage


@dataclass
class BalanceMetrics:
    """Evenness of each section's periods across the days."""
    average_std_dev: float
    max_std_dev: float
    section_balance: dict[str, float] = field(default_factory=dict)
    unbalanced_sections: list[str] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Lower std dev is better. Returns 100 - normalized deviation."""
        # Normalize: 0 std dev = 100, 3+ std dev = 0
        normalized = max(0, 100 - (self.average_std_dev / 3) * 100)
        return round(normalized, 2)


@dataclass
class UtilizationMetrics:
    """Coverage of required periods and use of teachers and cells."""
    hours_needed: int
    hours_allocated: int
    teacher_utilization: float
    cell_utilization: float
    total_cells: int
    teacher_load: dict[str, int] = field(default_factory=dict)

    @property
    def coverage(self) -> float:
        if self.hours_needed == 0:
            return 100.0
        return round(self.hours_allocated / self.hours_needed * 100, 2)


@dataclass
class MetricsReport:
    """Complete metrics report for a generated timetable."""
    distribution_metrics: DistributionMetrics
    lab_metrics: LabMetrics
    balance_metrics: BalanceMetrics
    utilization_metrics: UtilizationMetrics

    # Overall scores
    overall_score: float
    grade: str

    # Constraint satisfaction
    violations: list[Violation]
    total_shortfall: int

    # Summary statistics
    total_slots: int
    total_teachers: int
    total_sections: int

    # Improvement suggestions
    improvement_areas: list[str] = field(default_factory=list)

    @property
    def hard_constraints_satisfied(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "overallScore": self.overall_score,
            "grade": self.grade,
            "hardConstraintsSatisfied": self.hard_constraints_satisfied,
            "violations": [{"kind": v.kind, "message": v.message} for v in self.violations],
            "totalShortfall": self.total_shortfall,
            "totalSlots": self.total_slots,
            "totalTeachers": self.total_teachers,
            "totalSections": self.total_sections,
            "distribution": {
                "score": self.distribution_metrics.score,
                "wellDistributedPercent": self.distribution_metrics.percentage_well_distributed,
                "poorlyDistributed": self.distribution_metrics.poorly_distributed,
            },
            "labs": {
                "score": self.lab_metrics.score,
                "totalLabPeriods": self.lab_metrics.total_lab_periods,
                "pairedLabPeriods": self.lab_metrics.paired_lab_periods,
                "splitLabs": self.lab_metrics.split_labs,
            },
            "balance": {
                "score": self.balance_metrics.score,
                "averageStdDev": self.balance_metrics.average_std_dev,
                "maxStdDev": self.balance_metrics.max_std_dev,
                "unbalancedSections": self.balance_metrics.unbalanced_sections,
            },
            "utilization": {
                "coverage": self.utilization_metrics.coverage,
                "hoursNeeded": self.utilization_metrics.hours_needed,
                "hoursAllocated": self.utilization_metrics.hours_allocated,
                "teacherUtilization": self.utilization_metrics.teacher_utilization,
                "cellUtilization": self.utilization_metrics.cell_utilization,
            },
            "improvementAreas": self.improvement_areas,
        }


# =============================================================================
# Hard Constraint Audit
# =============================================================================

def find_violations(output: TimetableOutput, input_data: TimetableInput) -> list[Violation]:
    """
    Check a timetable against its hard constraints.

    Detects teachers booked in two sections at once, teachers over their
    weekly cap, unqualified teachers, and subjects given more periods than
    a section requires.
    """
    violations: list[Violation] = []

    # Teacher in two places at once
    seen: dict[tuple[str, str, int], str] = {}
    for slot in output.slots:
        key = (slot.teacher_id, slot.day, slot.period)
        if key in seen:
            violations.append(Violation(
                "teacher_overlap",
                f"Teacher {slot.teacher_id} is in sections {seen[key]} and {slot.section_id} "
                f"on {slot.day} period {slot.period}",
            ))
        else:
            seen[key] = slot.section_id

    # Workload cap and qualification
    load: dict[str, int] = {}
    for slot in output.slots:
        load[slot.teacher_id] = load.get(slot.teacher_id, 0) + 1
        teacher = input_data.get_teacher(slot.teacher_id)
        if teacher is None:
            violations.append(Violation("unknown_teacher", f"Unknown teacher {slot.teacher_id}"))
        elif slot.subject_id not in teacher.subjects:
            violations.append(Violation(
                "unqualified_teacher",
                f"Teacher {slot.teacher_id} is not qualified for {slot.subject_id} "
                f"({slot.section_id} {slot.day} period {slot.period})",
            ))

    for teacher_id, hours in load.items():
        teacher = input_data.get_teacher(teacher_id)
        if teacher is not None and hours > teacher.max_hours:
            violations.append(Violation(
                "workload_exceeded",
                f"Teacher {teacher_id} has {hours} periods but max is {teacher.max_hours}",
            ))

    # Over-allocation beyond the requirement
    counts: dict[tuple[str, str], int] = {}
    for slot in output.slots:
        key = (slot.section_id, slot.subject_id)
        counts[key] = counts.get(key, 0) + 1
    for (section_id, subject_id), count in counts.items():
        subject = input_data.get_subject(subject_id)
        needed = subject.hours_for(section_id) if subject else 0
        if count > needed:
            violations.append(Violation(
                "over_allocated",
                f"{subject_id} in {section_id} has {count} periods but needs {needed}",
            ))

    return violations


# =============================================================================
# Quality Metrics Calculator
# =============================================================================

class QualityMetricsCalculator:
    """
    Calculator for timetable quality metrics.

    Usage:
        calculator = QualityMetricsCalculator()
        report = calculator.calculate_all(output, input_data)
        print(calculator.generate_report(report))
    """

    def __init__(self, targets: dict[str, float] | None = None):
        """
        Initialize the calculator.

        Args:
            targets: Custom target thresholds (optional)
        """
        self.targets = {**DEFAULT_TARGETS, **(targets or {})}

    def calculate_all(
        self,
        output: TimetableOutput,
        input_data: TimetableInput,
    ) -> MetricsReport:
        """
        Calculate all quality metrics for a generated timetable.

        Args:
            output: The generated timetable
            input_data: The input it was generated from

        Returns:
            MetricsReport with all metrics calculated
        """
        distribution = self.calculate_distribution_metrics(output)
        labs = self.calculate_lab_metrics(output)
        balance = self.calculate_daily_balance_metrics(output)
        utilization = self.calculate_utilization_metrics(output, input_data)

        overall_score = self._calculate_overall_score(distribution, labs, balance, utilization)

        return MetricsReport(
            distribution_metrics=distribution,
            lab_metrics=labs,
            balance_metrics=balance,
            utilization_metrics=utilization,
            overall_score=overall_score,
            grade=self._score_to_grade(overall_score),
            violations=find_violations(output, input_data),
            total_shortfall=output.total_shortfall,
            total_slots=len(output.slots),
            total_teachers=len(output.views.by_teacher),
            total_sections=len(output.timetable),
            improvement_areas=self._identify_improvements(distribution, labs, balance, utilization),
        )

    def calculate_distribution_metrics(self, output: TimetableOutput) -> DistributionMetrics:
        """
        Score how evenly each (section, subject) is spread across days.

        Lab pairs count as one session. A subject is well distributed when
        it uses as many distinct days as its session count allows.
        """
        num_days = len(output.days)
        groups = _group_slots(output.slots, lambda s: (s.section_id, s.subject_id))

        well = 0
        total = 0
        poorly: list[str] = []
        for (section_id, subject_id), slots in groups.items():
            is_lab = any(s.is_lab for s in slots)
            sessions = math.ceil(len(slots) / 2) if is_lab else len(slots)
            if sessions < 2:
                continue
            total += 1
            days_used = len({s.day for s in slots})
            ideal = min(sessions, num_days)
            if days_used >= ideal:
                well += 1
            else:
                poorly.append(f"{subject_id} in {section_id}: {days_used} days for {sessions} sessions")

        percentage = (well / total * 100) if total else 100.0
        return DistributionMetrics(
            well_distributed_count=well,
            total_multi_session_subjects=total,
            percentage_well_distributed=round(percentage, 2),
            poorly_distributed=poorly,
        )

    def calculate_lab_metrics(self, output: TimetableOutput) -> LabMetrics:
        """Count lab periods that sit next to a same-subject, same-teacher period."""
        lab_slots = [s for s in output.slots if s.is_lab]
        index = {(s.section_id, s.day, s.period): s for s in lab_slots}

        paired = 0
        split: set[str] = set()
        for slot in lab_slots:
            neighbours = [
                index.get((slot.section_id, slot.day, slot.period - 1)),
                index.get((slot.section_id, slot.day, slot.period + 1)),
            ]
            if any(
                n is not None and n.subject_id == slot.subject_id and n.teacher_id == slot.teacher_id
                for n in neighbours
            ):
                paired += 1
            else:
                split.add(f"{slot.subject_id} in {slot.section_id}")

        return LabMetrics(
            total_lab_periods=len(lab_slots),
            paired_lab_periods=paired,
            split_labs=sorted(split),
        )

    def calculate_daily_balance_metrics(self, output: TimetableOutput) -> BalanceMetrics:
        """Standard deviation of filled periods per day, per section."""
        section_balance: dict[str, float] = {}
        unbalanced: list[str] = []

        for section_id, days in output.timetable.items():
            per_day = [sum(1 for slot in periods.values() if slot is not None) for periods in days.values()]
            if not any(per_day):
                continue
            std_dev = self._calculate_std_dev(per_day)
            section_balance[section_id] = round(std_dev, 2)
            if std_dev > self.targets["daily_balance"]:
                unbalanced.append(f"{section_id}: std dev {std_dev:.2f}")

        values = list(section_balance.values())
        return BalanceMetrics(
            average_std_dev=round(sum(values) / len(values), 2) if values else 0.0,
            max_std_dev=max(values) if values else 0.0,
            section_balance=section_balance,
            unbalanced_sections=unbalanced,
        )

    def calculate_utilization_metrics(
        self,
        output: TimetableOutput,
        input_data: TimetableInput,
    ) -> UtilizationMetrics:
        """Coverage of required periods, teacher load and grid fill."""
        hours_needed = input_data.total_hours_required
        hours_allocated = len(output.slots)

        teacher_load: dict[str, int] = {}
        for slot in output.slots:
            teacher_load[slot.teacher_id] = teacher_load.get(slot.teacher_id, 0) + 1

        capacity = input_data.total_teacher_capacity
        total_cells = len(output.timetable) * len(output.days) * output.periods_per_day

        return UtilizationMetrics(
            hours_needed=hours_needed,
            hours_allocated=hours_allocated,
            teacher_utilization=round(hours_allocated / capacity * 100, 2) if capacity else 0.0,
            cell_utilization=round(hours_allocated / total_cells * 100, 2) if total_cells else 0.0,
            total_cells=total_cells,
            teacher_load=teacher_load,
        )

    def generate_report(self, metrics: MetricsReport) -> str:
        """
        Generate a human-readable report with all metrics.

        Args:
            metrics: The calculated MetricsReport

        Returns:
            Formatted string report
        """
        lines = []

        lines.append("=" * 70)
        lines.append("TIMETABLE QUALITY REPORT")
        lines.append("=" * 70)
        lines.append("")

        lines.append(f"Overall Score: {metrics.overall_score:.1f}/100 (Grade: {metrics.grade})")
        lines.append(f"Hard Constraints: {'SATISFIED' if metrics.hard_constraints_satisfied else 'VIOLATED'}")
        lines.append(f"Total Shortfall: {metrics.total_shortfall} periods")
        lines.append("")

        if metrics.violations:
            lines.append("-" * 40)
            lines.append("VIOLATIONS")
            lines.append("-" * 40)
            for v in metrics.violations:
                lines.append(f"  - [{v.kind}] {v.message}")
            lines.append("")

        lines.append("-" * 40)
        lines.append("SUMMARY")
        lines.append("-" * 40)
        lines.append(f"Periods Scheduled: {metrics.total_slots}")
        lines.append(f"Teachers with Schedules: {metrics.total_teachers}")
        lines.append(f"Sections: {metrics.total_sections}")
        lines.append("")

        lines.append("-" * 40)
        lines.append("DISTRIBUTION (Subjects spread across days)")
        lines.append("-" * 40)
        dist = metrics.distribution_metrics
        lines.append(f"Score: {dist.score}/100")
        lines.append(f"Well-Distributed: {dist.well_distributed_count}/{dist.total_multi_session_subjects}")
        target = self.targets["distribution_score"]
        status = "GOOD" if dist.percentage_well_distributed >= target else "NEEDS IMPROVEMENT"
        lines.append(f"Target: >={target:.0f}% | Status: {status}")
        if dist.poorly_distributed:
            lines.append("Poorly distributed subjects:")
            for item in dist.poorly_distributed[:5]:
                lines.append(f"  - {item}")
        lines.append("")

        lines.append("-" * 40)
        lines.append("LABS (Adjacent double periods)")
        lines.append("-" * 40)
        labs = metrics.lab_metrics
        lines.append(f"Score: {labs.score}/100")
        lines.append(f"Paired Lab Periods: {labs.paired_lab_periods}/{labs.total_lab_periods}")
        if labs.split_labs:
            lines.append("Split labs:")
            for item in labs.split_labs[:5]:
                lines.append(f"  - {item}")
        lines.append("")

        lines.append("-" * 40)
        lines.append("DAILY BALANCE (Section load evenness)")
        lines.append("-" * 40)
        balance = metrics.balance_metrics
        lines.append(f"Score: {balance.score}/100")
        lines.append(f"Average Std Dev: {balance.average_std_dev:.2f}")
        lines.append(f"Maximum Std Dev: {balance.max_std_dev:.2f}")
        lines.append("")

        lines.append("-" * 40)
        lines.append("UTILIZATION")
        lines.append("-" * 40)
        util = metrics.utilization_metrics
        lines.append(f"Coverage: {util.coverage:.1f}% ({util.hours_allocated}/{util.hours_needed} periods)")
        lines.append(f"Teacher Utilization: {util.teacher_utilization:.1f}%")
        lines.append(f"Cell Utilization: {util.cell_utilization:.1f}%")
        lines.append("")

        if metrics.improvement_areas:
            lines.append("-" * 40)
            lines.append("AREAS FOR IMPROVEMENT")
            lines.append("-" * 40)
            for area in metrics.improvement_areas:
                lines.append(f"  * {area}")
            lines.append("")

        lines.append("=" * 70)

        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _calculate_std_dev(self, values: list[int | float]) -> float:
        """Calculate standard deviation of a list of values."""
        if not values:
            return 0.0
        n = len(values)
        mean = sum(values) / n
        variance = sum((x - mean) ** 2 for x in values) / n
        return math.sqrt(variance)

    def _calculate_overall_score(
        self,
        dist: DistributionMetrics,
        labs: LabMetrics,
        balance: BalanceMetrics,
        util: UtilizationMetrics,
    ) -> float:
        """Calculate weighted overall score."""
        weights = {
            "distribution": 0.25,
            "labs": 0.20,
            "balance": 0.15,
            "coverage": 0.40,
        }

        score = (
            weights["distribution"] * dist.score +
            weights["labs"] * labs.score +
            weights["balance"] * balance.score +
            weights["coverage"] * min(100.0, util.coverage)
        )

        return round(score, 1)

    def _score_to_grade(self, score: float) -> str:
        """Convert numeric score to letter grade."""
        if score >= 90:
            return "A"
        elif score >= 80:
            return "B"
        elif score >= 70:
            return "C"
        elif score >= 60:
            return "D"
        else:
            return "F"

    def _identify_improvements(
        self,
        dist: DistributionMetrics,
        labs: LabMetrics,
        balance: BalanceMetrics,
        util: UtilizationMetrics,
    ) -> list[str]:
        """Identify areas that need improvement."""
        improvements = []

        if util.coverage < self.targets["coverage"]:
            improvements.append(
                f"Place missing periods: {util.coverage:.0f}% of required periods scheduled; "
                f"add qualified teachers or raise workload caps"
            )

        if dist.percentage_well_distributed < self.targets["distribution_score"]:
            improvements.append(
                f"Improve subject distribution: {dist.percentage_well_distributed:.0f}% well-distributed "
                f"is below target ({self.targets['distribution_score']:.0f}%)"
            )

        if labs.adjacency_percentage < self.targets["lab_adjacency"]:
            improvements.append(
                f"Keep labs together: {labs.adjacency_percentage:.0f}% of lab periods are paired "
                f"(target {self.targets['lab_adjacency']:.0f}%)"
            )

        if balance.average_std_dev > self.targets["daily_balance"]:
            improvements.append(
                f"Balance daily load: std dev ({balance.average_std_dev:.2f}) "
                f"exceeds target ({self.targets['daily_balance']:.1f})"
            )

        return improvements


def _group_slots(slots: list[SlotOutput], key) -> dict:
    groups: dict = {}
    for slot in slots:
        groups.setdefault(key(slot), []).append(slot)
    return groups


# =============================================================================
# Convenience Functions
# =============================================================================

def calculate_all_metrics(
    output: TimetableOutput,
    input_data: TimetableInput,
    targets: dict[str, float] | None = None,
) -> MetricsReport:
    """Calculate all quality metrics for a generated timetable."""
    return QualityMetricsCalculator(targets).calculate_all(output, input_data)


def generate_report(
    output: TimetableOutput,
    input_data: TimetableInput,
    targets: dict[str, float] | None = None,
) -> str:
    """Calculate metrics and render them as a text report."""
    calculator = QualityMetricsCalculator(targets)
    return calculator.generate_report(calculator.calculate_all(output, input_data))
