"""Timetable output schema, formatting and quality metrics."""

from .schema import (
    OutputStatus,
    SlotOutput,
    ShortfallOutput,
    EntitySchedule,
    TimetableViews,
    TimetableOutput,
    create_timetable_output,
    result_to_json,
    result_to_dict,
)
from .formatters import (
    # Formatter classes
    JSONFormatter,
    CSVFormatter,
    SectionGridFormatter,
    TeacherViewFormatter,
    # Convenience functions
    format_json,
    format_csv,
    format_section_grid,
    format_all_sections,
    format_teacher_view,
    format_all_teachers,
    # File utilities
    save_json,
    save_csv,
)
from .metrics import (
    # Data classes
    Violation,
    DistributionMetrics,
    LabMetrics,
    BalanceMetrics,
    UtilizationMetrics,
    MetricsReport,
    # Calculator class
    QualityMetricsCalculator,
    # Functions
    find_violations,
    calculate_all_metrics,
    generate_report,
)

__all__ = [
    # Schema models
    "OutputStatus",
    "SlotOutput",
    "ShortfallOutput",
    "EntitySchedule",
    "TimetableViews",
    "TimetableOutput",
    # Schema conversion functions
    "create_timetable_output",
    "result_to_json",
    "result_to_dict",
    # Formatter classes
    "JSONFormatter",
    "CSVFormatter",
    "SectionGridFormatter",
    "TeacherViewFormatter",
    # Formatter convenience functions
    "format_json",
    "format_csv",
    "format_section_grid",
    "format_all_sections",
    "format_teacher_view",
    "format_all_teachers",
    # File utilities
    "save_json",
    "save_csv",
    # Metrics data classes
    "Violation",
    "DistributionMetrics",
    "LabMetrics",
    "BalanceMetrics",
    "UtilizationMetrics",
    "MetricsReport",
    # Metrics calculator
    "QualityMetricsCalculator",
    # Metrics functions
    "find_violations",
    "calculate_all_metrics",
    "generate_report",
]
