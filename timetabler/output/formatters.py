"""
Output formatters for generated timetables.

This module provides formatters for different output formats:
- JSON: Complete output with grid, slots, warnings and views
- CSV: One row per filled cell, for spreadsheets
- Section grid: Period-by-day grid for one section
- Teacher view: Day-ordered list of a teacher's periods
"""

from __future__ import annotations

import csv
import json
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from .schema import EntitySchedule, SlotOutput, TimetableOutput


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter:
    """Formats timetable output as JSON."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """
        Initialize JSON formatter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If True, escape non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def format(self, output: TimetableOutput) -> str:
        """Format output as a JSON string."""
        return output.to_json(indent=self.indent)

    def format_compact(self, output: TimetableOutput) -> str:
        """Format as compact single-line JSON."""
        return json.dumps(output.to_dict(), ensure_ascii=self.ensure_ascii, separators=(',', ':'))

    def format_grid_only(self, output: TimetableOutput) -> str:
        """Format only the section/day/period grid as JSON."""
        grid = output.to_dict()["timetable"]
        return json.dumps(grid, indent=self.indent, ensure_ascii=self.ensure_ascii)


def format_json(output: TimetableOutput, indent: int = 2) -> str:
    """Convenience function for JSON formatting."""
    return JSONFormatter(indent=indent).format(output)


# =============================================================================
# CSV Formatter
# =============================================================================

class CSVFormatter:
    """Formats timetable output as CSV, one row per filled cell."""

    DEFAULT_COLUMNS = [
        'section_id', 'section_name', 'day', 'period',
        'subject_id', 'subject_name', 'teacher_id', 'teacher_name',
        'type', 'location',
    ]

    MINIMAL_COLUMNS = ['section_id', 'day', 'period', 'subject_id', 'teacher_id']

    def __init__(
        self,
        columns: list[str] | None = None,
        include_header: bool = True,
        delimiter: str = ',',
    ):
        """
        Initialize CSV formatter.

        Args:
            columns: List of columns to include (None = all)
            include_header: Whether to include header row
            delimiter: Field delimiter
        """
        self.columns = columns or self.DEFAULT_COLUMNS
        self.include_header = include_header
        self.delimiter = delimiter

    def format(self, output: TimetableOutput) -> str:
        """Format output as a CSV string."""
        buffer = StringIO()
        self.write(output, buffer)
        return buffer.getvalue()

    def write(self, output: TimetableOutput, file: TextIO) -> None:
        """
        Write CSV to file-like object.

        Args:
            output: TimetableOutput to format
            file: File-like object to write to
        """
        writer = csv.writer(file, delimiter=self.delimiter)

        if self.include_header:
            writer.writerow(self.columns)

        for slot in output.slots:
            writer.writerow(self._slot_to_row(slot))

    def _slot_to_row(self, slot: SlotOutput) -> list[str]:
        field_map = {
            'section_id': slot.section_id,
            'section_name': slot.section_name or '',
            'day': slot.day,
            'period': str(slot.period),
            'subject_id': slot.subject_id,
            'subject_name': slot.subject_name or '',
            'teacher_id': slot.teacher_id,
            'teacher_name': slot.teacher_name or '',
            'type': slot.type.value,
            'location': slot.location or '',
        }
        return [field_map.get(col, '') for col in self.columns]


def format_csv(
    output: TimetableOutput,
    columns: list[str] | None = None,
    minimal: bool = False,
) -> str:
    """Convenience function for CSV formatting."""
    if minimal:
        columns = CSVFormatter.MINIMAL_COLUMNS
    return CSVFormatter(columns=columns).format(output)


# =============================================================================
# Section Grid Formatter
# =============================================================================

class SectionGridFormatter:
    """Formats one section's week as a period-by-day grid."""

    def __init__(self, use_colors: bool = True, width: int = 120):
        """
        Initialize section grid formatter.

        Args:
            use_colors: Render with a rich table instead of plain text
            width: Console width for rich rendering
        """
        self.use_colors = use_colors
        self.width = width

    def format(self, output: TimetableOutput, section_id: str) -> str:
        """Format the grid for a specific section."""
        if section_id not in output.timetable:
            return f"No timetable found for section: {section_id}"

        schedule = output.views.by_section.get(section_id)
        name = schedule.name if schedule else section_id

        if self.use_colors:
            return self._format_rich(output, section_id, name)
        return self._format_plain(output, section_id, name)

    def format_all(self, output: TimetableOutput) -> str:
        """Format grids for all sections in input order."""
        lines = []
        for section_id in output.timetable:
            lines.append(self.format(output, section_id))
            lines.append("")
        return '\n'.join(lines)

    def _cell_text(self, output: TimetableOutput, section_id: str, day: str, period: int) -> str:
        slot = output.timetable[section_id][day].get(period)
        if slot is None:
            return "-"
        text = f"{slot.subject_id} ({slot.teacher_id})"
        if slot.type.value == "lab":
            text += " lab"
        return text

    def _format_plain(self, output: TimetableOutput, section_id: str, name: str) -> str:
        col_width = 20
        lines = []
        lines.append("=" * (8 + len(output.days) * col_width))
        lines.append(f"SECTION: {name} ({section_id})")
        lines.append("=" * (8 + len(output.days) * col_width))

        header = "Period".ljust(8) + "".join(day[:col_width - 2].center(col_width) for day in output.days)
        lines.append(header)
        lines.append("-" * (8 + len(output.days) * col_width))

        for period in range(1, output.periods_per_day + 1):
            row = str(period).ljust(8)
            for day in output.days:
                cell = self._cell_text(output, section_id, day, period)
                row += cell[:col_width - 2].center(col_width)
            lines.append(row)

        return '\n'.join(lines)

    def _format_rich(self, output: TimetableOutput, section_id: str, name: str) -> str:
        console = Console(record=True, width=self.width)

        table = Table(title=f"{name} ({section_id})", show_header=True, header_style="bold cyan")
        table.add_column("Period", style="dim")
        for day in output.days:
            table.add_column(day, justify="center")

        for period in range(1, output.periods_per_day + 1):
            row = [str(period)]
            for day in output.days:
                slot = output.timetable[section_id][day].get(period)
                if slot is None:
                    row.append("[dim]-[/dim]")
                elif slot.type.value == "lab":
                    row.append(f"[bold magenta]{slot.subject_id}[/bold magenta]\n{slot.teacher_id}")
                else:
                    row.append(f"[bold]{slot.subject_id}[/bold]\n{slot.teacher_id}")
            table.add_row(*row)

        console.print(table)
        return console.export_text()


def format_section_grid(output: TimetableOutput, section_id: str, use_colors: bool = True) -> str:
    """Format the grid for a specific section."""
    return SectionGridFormatter(use_colors=use_colors).format(output, section_id)


def format_all_sections(output: TimetableOutput, use_colors: bool = True) -> str:
    """Format grids for all sections."""
    return SectionGridFormatter(use_colors=use_colors).format_all(output)


# =============================================================================
# Teacher View Formatter
# =============================================================================

class TeacherViewFormatter:
    """Formats individual teacher timetables."""

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

    def format(self, output: TimetableOutput, teacher_id: str) -> str:
        """
        Format timetable for a specific teacher.

        Args:
            output: TimetableOutput
            teacher_id: Teacher ID to format

        Returns:
            Formatted string
        """
        schedule = output.views.by_teacher.get(teacher_id)
        if not schedule:
            return f"No schedule found for teacher: {teacher_id}"

        hours = output.teacher_hours.get(teacher_id, len(schedule.slots))
        if self.use_colors:
            return self._format_rich(schedule, hours)
        return self._format_plain(schedule, hours)

    def format_all(self, output: TimetableOutput) -> str:
        """Format timetables for all teachers."""
        lines = []
        for teacher_id in sorted(output.views.by_teacher.keys()):
            lines.append(self.format(output, teacher_id))
            lines.append("")
        return '\n'.join(lines)

    def _format_plain(self, schedule: EntitySchedule, hours: int) -> str:
        lines = []
        lines.append(f"{'=' * 50}")
        lines.append(f"TEACHER: {schedule.name} ({schedule.id}) - {hours} periods")
        lines.append(f"{'=' * 50}")

        for day, slots in schedule.by_day.items():
            lines.append(f"\n{day}:")
            for slot in slots:
                where = f" @ {slot.location}" if slot.location else ""
                lines.append(
                    f"  P{slot.period}: "
                    f"{slot.subject_name or slot.subject_id} "
                    f"({slot.section_name or slot.section_id}){where}"
                )

        return '\n'.join(lines)

    def _format_rich(self, schedule: EntitySchedule, hours: int) -> str:
        console = Console(record=True, width=100)

        console.print(Panel(
            f"[bold]{schedule.name}[/bold] ({schedule.id})",
            title="Teacher Schedule",
            subtitle=f"{hours} periods",
        ))

        table = Table(show_header=True, header_style="bold")
        table.add_column("Day", style="cyan")
        table.add_column("Period")
        table.add_column("Subject")
        table.add_column("Section")
        table.add_column("Location")

        for day, slots in schedule.by_day.items():
            for slot in slots:
                table.add_row(
                    day,
                    str(slot.period),
                    slot.subject_name or slot.subject_id,
                    slot.section_name or slot.section_id,
                    slot.location or "",
                )

        console.print(table)
        return console.export_text()


def format_teacher_view(output: TimetableOutput, teacher_id: str, use_colors: bool = True) -> str:
    """Format timetable for a specific teacher."""
    return TeacherViewFormatter(use_colors=use_colors).format(output, teacher_id)


def format_all_teachers(output: TimetableOutput, use_colors: bool = True) -> str:
    """Format timetables for all teachers."""
    return TeacherViewFormatter(use_colors=use_colors).format_all(output)


# =============================================================================
# File Writing Utilities
# =============================================================================

def save_json(output: TimetableOutput, filepath: str | Path, indent: int = 2) -> None:
    """
    Save output as JSON file.

    Args:
        output: TimetableOutput to save
        filepath: Path to save to
        indent: JSON indentation
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(JSONFormatter(indent=indent).format(output), encoding='utf-8')


def save_csv(
    output: TimetableOutput,
    filepath: str | Path,
    columns: list[str] | None = None,
    minimal: bool = False,
) -> None:
    """
    Save output as CSV file.

    Args:
        output: TimetableOutput to save
        filepath: Path to save to
        columns: Columns to include
        minimal: Use minimal column set
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    if minimal:
        columns = CSVFormatter.MINIMAL_COLUMNS

    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        CSVFormatter(columns=columns).write(output, f)
