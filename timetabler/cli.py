"""
Command-line interface for the timetable generator.

Usage:
    python -m timetabler generate input.json -o output.json --csv slots.csv
    python -m timetabler validate input.json
    python -m timetabler view output.json --section S1
    python -m timetabler metrics output.json --input input.json
    python -m timetabler sample -o input.json --size medium --seed 42
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .data.generator import generate_medium_school, generate_small_school, get_generation_stats
from .data.loader import load_timetable_input, save_timetable_input
from .data.models import TimetableInput
from .engine.runner import generate_from_input
from .errors import DataValidationError, PreconditionError
from .output.formatters import SectionGridFormatter, TeacherViewFormatter, save_csv
from .output.metrics import QualityMetricsCalculator
from .output.schema import TimetableOutput, create_timetable_output

# Create Typer app
app = typer.Typer(
    name="timetabler",
    help="Weekly school timetable generator using greedy layered allocation.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

# Exit code for a run that finished with unplaced periods under --strict
EXIT_SHORTFALL = 2


# =============================================================================
# Helper Functions
# =============================================================================

def configure_logging(verbose: bool) -> None:
    """Route library logging through rich when verbose output is requested."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def load_input(input_path: Path) -> TimetableInput:
    """Load and validate input data."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(code=1)

    try:
        return load_timetable_input(input_path)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON:[/red] {e}")
        raise typer.Exit(code=1)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading input:[/red] {e}")
        raise typer.Exit(code=1)
    except DataValidationError as e:
        console.print("[red]Error loading input:[/red]")
        for line in str(e).split("\n"):
            console.print(f"  {line}")
        raise typer.Exit(code=1)


def load_output(output_path: Path) -> TimetableOutput:
    """Load output JSON file."""
    if not output_path.exists():
        console.print(f"[red]Error:[/red] Output file not found: {output_path}")
        raise typer.Exit(code=1)

    try:
        with open(output_path, encoding="utf-8") as f:
            data = json.load(f)
        return TimetableOutput.model_validate(data)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading output:[/red] {e}")
        raise typer.Exit(code=1)


def print_summary(output: TimetableOutput) -> None:
    """Print run summary to console."""
    status_color = "green" if output.is_complete else "yellow"
    status_text = Text(output.status.value.upper(), style=f"bold {status_color}")

    console.print(Panel(
        status_text,
        title="Generation Status",
        subtitle=f"Generated in {output.generation_time_seconds:.3f}s"
    ))

    table = Table(title="Summary", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Sections", str(len(output.timetable)))
    table.add_row("Teachers Scheduled", str(len(output.views.by_teacher)))
    table.add_row("Days", str(len(output.days)))
    table.add_row("Periods per Day", str(output.periods_per_day))
    table.add_row("Periods Placed", str(len(output.slots)))
    table.add_row("Shortfall", str(output.total_shortfall))

    console.print(table)


def print_shortfalls(output: TimetableOutput) -> None:
    """Print a table of demands that were not fully placed."""
    if not output.warnings:
        return

    table = Table(title="Shortfalls", show_header=True, header_style="bold yellow")
    table.add_column("Section")
    table.add_column("Subject")
    table.add_column("Needed", justify="right")
    table.add_column("Allocated", justify="right")
    table.add_column("Missing", justify="right", style="red")

    for warning in output.warnings:
        table.add_row(
            warning.section_name or warning.section_id,
            warning.subject_name or warning.subject_id,
            str(warning.needed),
            str(warning.allocated),
            str(warning.shortfall),
        )

    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def generate(
    input_file: Path = typer.Argument(
        ...,
        help="Path to input JSON file with teachers, subjects and sections",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Path to write output JSON file",
    ),
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Path to write a CSV with one row per placed period",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 2 if any period could not be placed",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
) -> None:
    """
    Generate a weekly timetable.

    Loads the input data, runs the allocator and prints a summary with any
    shortfalls.

    Example:
        python -m timetabler generate input.json -o output.json
    """
    configure_logging(verbose)

    console.print(f"\n[bold]Loading input from:[/bold] {input_file}")
    input_data = load_input(input_file)

    console.print(f"[green]Loaded:[/green] {len(input_data.sections)} sections, "
                  f"{len(input_data.subjects)} subjects, {len(input_data.teachers)} teachers")

    try:
        result = generate_from_input(input_data)
    except PreconditionError as e:
        console.print(f"[red]Cannot generate:[/red] {e}")
        raise typer.Exit(code=1)
    except DataValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(code=1)

    timetable_output = create_timetable_output(result, input_data)

    console.print()
    print_summary(timetable_output)
    print_shortfalls(timetable_output)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            f.write(timetable_output.to_json())
        console.print(f"\n[green]Timetable saved to:[/green] {output}")

    if csv_path:
        save_csv(timetable_output, csv_path)
        console.print(f"[green]CSV saved to:[/green] {csv_path}")

    console.print()

    if strict and not timetable_output.is_complete:
        console.print(f"[yellow]{timetable_output.total_shortfall} period(s) could not be placed.[/yellow]")
        raise typer.Exit(code=EXIT_SHORTFALL)


@app.command()
def validate(
    input_file: Path = typer.Argument(
        ...,
        help="Path to input JSON file to validate",
    ),
) -> None:
    """
    Validate input data.

    Checks for:
    - Valid JSON structure
    - Schema compliance
    - Reference integrity (subject and section ids)
    - Capacity (grid cells and teacher caps)

    Example:
        python -m timetabler validate input.json
    """
    console.print(f"\n[bold]Validating:[/bold] {input_file}\n")

    if not input_file.exists():
        console.print(f"[red]Error:[/red] File not found: {input_file}")
        raise typer.Exit(code=1)

    # Step 1: JSON parsing
    console.print("[cyan]1. Checking JSON syntax...[/cyan]")
    try:
        with open(input_file, encoding="utf-8") as f:
            json.load(f)
        console.print("   [green]JSON syntax is valid[/green]")
    except json.JSONDecodeError as e:
        console.print(f"   [red]Invalid JSON:[/red] {e}")
        raise typer.Exit(code=1)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"   [red]Cannot read file:[/red] {e}")
        raise typer.Exit(code=1)

    # Step 2: Schema and references
    console.print("[cyan]2. Validating schema and references...[/cyan]")
    try:
        input_data = load_timetable_input(input_file)
        console.print("   [green]Schema validation passed[/green]")
    except DataValidationError as e:
        console.print("   [red]Schema validation failed:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {line}")
        raise typer.Exit(code=1)

    # Step 3: Capacity
    console.print("[cyan]3. Checking capacity...[/cyan]")
    warnings = input_data.capacity_warnings()
    if warnings:
        console.print("   [yellow]Warnings found:[/yellow]")
        for w in warnings:
            console.print(f"   - {w}")
    else:
        console.print("   [green]No capacity issues[/green]")

    # Summary
    console.print("\n[bold]Summary:[/bold]")
    table = Table(show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")

    summary = input_data.summary()
    table.add_row("Teachers", str(summary["teachers"]))
    table.add_row("Subjects", str(summary["subjects"]))
    table.add_row("Lab subjects", str(summary["lab_subjects"]))
    table.add_row("Sections", str(summary["sections"]))
    table.add_row("Days x periods", f"{summary['days']} x {summary['periods_per_day']}")
    table.add_row("Periods required", str(summary["total_hours_required"]))
    table.add_row("Teacher capacity", str(summary["total_teacher_capacity"]))

    console.print(table)
    console.print("\n[green]Validation complete.[/green]\n")


@app.command()
def view(
    output_file: Path = typer.Argument(
        ...,
        help="Path to output JSON file",
    ),
    section: Optional[str] = typer.Option(
        None,
        "--section", "-S",
        help="Show the grid for a specific section ID",
    ),
    teacher: Optional[str] = typer.Option(
        None,
        "--teacher", "-T",
        help="Show schedule for a specific teacher ID",
    ),
    all_sections: bool = typer.Option(
        False,
        "--all-sections",
        help="Show grids for all sections",
    ),
) -> None:
    """
    Display views of a generated timetable.

    Examples:
        python -m timetabler view output.json --section S1
        python -m timetabler view output.json --teacher T1
        python -m timetabler view output.json --all-sections
    """
    output = load_output(output_file)

    if section:
        if section not in output.timetable:
            console.print(f"[red]Error:[/red] Section '{section}' not found")
            console.print(f"Available sections: {', '.join(output.timetable.keys())}")
            raise typer.Exit(code=1)
        console.print(SectionGridFormatter(width=console.width).format(output, section), markup=False)
    elif teacher:
        if teacher not in output.views.by_teacher:
            console.print(f"[red]Error:[/red] Teacher '{teacher}' not found")
            console.print(f"Available teachers: {', '.join(output.views.by_teacher.keys())}")
            raise typer.Exit(code=1)
        console.print(TeacherViewFormatter().format(output, teacher), markup=False)
    elif all_sections:
        console.print(SectionGridFormatter(width=console.width).format_all(output), markup=False)
    else:
        print_summary(output)
        print_shortfalls(output)


@app.command()
def metrics(
    output_file: Path = typer.Argument(
        ...,
        help="Path to output JSON file",
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Path to input JSON file (for detailed metrics)",
    ),
    format: str = typer.Option(
        "table",
        "--format", "-f",
        help="Output format: table, report, or json",
    ),
) -> None:
    """
    Calculate and display quality metrics for a generated timetable.

    Examples:
        python -m timetabler metrics output.json
        python -m timetabler metrics output.json --input input.json --format report
    """
    if format not in ("table", "report", "json"):
        console.print(f"[red]Error:[/red] Unknown format '{format}' (use table, report or json)")
        raise typer.Exit(code=1)

    output = load_output(output_file)

    input_data = None
    if input_file:
        input_data = load_input(input_file)

    if format == "json":
        _show_metrics_json(output, input_data)
    elif format == "report" and input_data:
        calculator = QualityMetricsCalculator()
        console.print(calculator.generate_report(calculator.calculate_all(output, input_data)), markup=False)
    else:
        _show_metrics_table(output, input_data)


def _show_metrics_table(output: TimetableOutput, input_data: Optional[TimetableInput]) -> None:
    """Show metrics as a table."""
    console.print(Panel("[bold]Timetable Quality Metrics[/bold]"))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_column("Status")

    status_color = "green" if output.is_complete else "yellow"
    table.add_row(
        "Generation Status",
        output.status.value.upper(),
        f"[{status_color}]{'PASS' if output.is_complete else 'PARTIAL'}[/{status_color}]"
    )
    table.add_row("Periods Placed", str(len(output.slots)), "[green]OK[/green]")
    shortfall_color = "green" if output.total_shortfall == 0 else "red"
    table.add_row(
        "Shortfall",
        str(output.total_shortfall),
        f"[{shortfall_color}]{'NONE' if output.total_shortfall == 0 else 'MISSING'}[/{shortfall_color}]"
    )

    console.print(table)

    if not input_data:
        console.print("\n[dim]Provide --input for detailed analysis[/dim]")
        return

    console.print("\n[bold]Detailed Analysis:[/bold]")
    report = QualityMetricsCalculator().calculate_all(output, input_data)

    detail_table = Table(show_header=True, header_style="bold cyan")
    detail_table.add_column("Metric")
    detail_table.add_column("Score")
    detail_table.add_column("Details")

    def colored(score: float) -> str:
        color = "green" if score >= 80 else "yellow" if score >= 60 else "red"
        return f"[{color}]{score}/100[/{color}]"

    hc_color = "green" if report.hard_constraints_satisfied else "red"
    detail_table.add_row(
        "Hard Constraints",
        f"[{hc_color}]{'Satisfied' if report.hard_constraints_satisfied else 'Violated'}[/{hc_color}]",
        f"{len(report.violations)} violation(s)"
    )

    dist = report.distribution_metrics
    detail_table.add_row(
        "Distribution",
        colored(dist.score),
        f"{dist.well_distributed_count}/{dist.total_multi_session_subjects} well-distributed"
    )

    labs = report.lab_metrics
    detail_table.add_row(
        "Lab Adjacency",
        colored(labs.score),
        f"{labs.paired_lab_periods}/{labs.total_lab_periods} lab periods paired"
    )

    balance = report.balance_metrics
    detail_table.add_row(
        "Daily Balance",
        colored(balance.score),
        f"Avg std dev: {balance.average_std_dev:.2f}"
    )

    util = report.utilization_metrics
    detail_table.add_row(
        "Coverage",
        colored(util.coverage),
        f"{util.hours_allocated}/{util.hours_needed} periods"
    )

    overall_color = "green" if report.overall_score >= 80 else "yellow" if report.overall_score >= 60 else "red"
    detail_table.add_row(
        "[bold]Overall Score[/bold]",
        f"[bold {overall_color}]{report.overall_score}/100 ({report.grade})[/bold {overall_color}]",
        ""
    )

    console.print(detail_table)

    if report.improvement_areas:
        console.print("\n[bold yellow]Areas for Improvement:[/bold yellow]")
        for area in report.improvement_areas:
            console.print(f"  [yellow]*[/yellow] {area}")


def _show_metrics_json(output: TimetableOutput, input_data: Optional[TimetableInput]) -> None:
    """Show metrics as JSON."""
    if input_data:
        data = QualityMetricsCalculator().calculate_all(output, input_data).to_dict()
    else:
        data = {
            "status": output.status.value,
            "periodsPlaced": len(output.slots),
            "totalShortfall": output.total_shortfall,
            "teacherHours": output.teacher_hours,
        }

    console.print_json(json.dumps(data, indent=2))


@app.command()
def sample(
    output: Path = typer.Option(
        Path("sample_input.json"),
        "--output", "-o",
        help="Path to write the generated input JSON",
    ),
    size: str = typer.Option(
        "small",
        "--size",
        help="School size: small or medium",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducible data",
    ),
) -> None:
    """
    Write a sample input file.

    Example:
        python -m timetabler sample -o input.json --size medium --seed 42
    """
    generators = {
        "small": generate_small_school,
        "medium": generate_medium_school,
    }
    if size not in generators:
        console.print(f"[red]Error:[/red] Unknown size '{size}' (use small or medium)")
        raise typer.Exit(code=1)

    school = generators[size](seed=seed)
    save_timetable_input(school, output)

    stats = get_generation_stats(school)
    console.print(f"[green]Sample input saved to:[/green] {output}")
    console.print(
        f"  {stats['sections']} sections, {stats['subjects']} subjects "
        f"({stats['lab_subjects']} labs), {stats['teachers']} teachers, "
        f"{stats['total_hours_required']} periods required"
    )


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
