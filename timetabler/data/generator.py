"""
Sample data generator for exercising the timetable engine.

This module generates school input data of configurable size, with lecture
and lab subjects, qualified teachers and weekly caps sized so that most
demands can be placed.

Usage:
    from timetabler.data.generator import generate_sample_school, generate_small_school

    # Generate with custom config
    school = generate_sample_school(GeneratorConfig(num_sections=6))

    # Quick test data
    small_school = generate_small_school(seed=42)
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional

from .models import (
    DAYS,
    LAB_LOCATIONS,
    PERIODS_PER_DAY,
    GenerationConfig,
    Section,
    SessionType,
    Subject,
    Teacher,
    TimetableInput,
)


# =============================================================================
# Name Data
# =============================================================================

FIRST_NAMES = [
    "Anita", "Rahul", "Priya", "Vikram", "Sneha", "Arjun", "Meera", "Karan",
    "Divya", "Suresh", "Kavita", "Rohan", "Pooja", "Amit", "Neha", "Sanjay",
    "Lakshmi", "Nikhil", "Shreya", "Manoj", "Asha", "Deepak", "Ritu", "Ajay",
]

LAST_NAMES = [
    "Shankar", "Patil", "Kulkarni", "Deshpande", "Joshi", "Rao", "Iyer", "Nair",
    "Mehta", "Kapoor", "Gupta", "Sharma", "Verma", "Reddy", "Menon", "Pillai",
]


# =============================================================================
# Subject Definitions
# =============================================================================

LECTURE_SUBJECTS = [
    {"id": "dm", "name": "Discrete Mathematics", "hours": 4},
    {"id": "ds", "name": "Data Structures", "hours": 4},
    {"id": "oop", "name": "Object Oriented Programming", "hours": 3},
    {"id": "coa", "name": "Computer Organization", "hours": 3},
    {"id": "dbms", "name": "Database Management Systems", "hours": 4},
    {"id": "cn", "name": "Computer Networks", "hours": 3},
    {"id": "os", "name": "Operating Systems", "hours": 3},
    {"id": "toc", "name": "Theory of Computation", "hours": 2},
]

LAB_SUBJECTS = [
    {"id": "dbms-lab", "name": "DBMS Lab", "hours": 2},
    {"id": "dsal", "name": "Data Structures Lab", "hours": 2},
    {"id": "cn-lab", "name": "Networks Lab", "hours": 2},
    {"id": "mpl", "name": "Microprocessor Lab", "hours": 2},
    {"id": "pbl", "name": "Project Based Learning", "hours": 2},
]


# =============================================================================
# Generator Configuration
# =============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for data generation.

    Note: teacher caps are derived from the total demand so that overall
    capacity exceeds the required periods by ``capacity_margin``. A grid
    per section holds ``len(DAYS) * periods_per_day`` cells, so keep the
    subjects' hours well below that.
    """
    num_sections: int = 4
    num_lecture_subjects: int = 6
    num_lab_subjects: int = 2
    teachers_per_subject: int = 2
    periods_per_day: int = PERIODS_PER_DAY
    capacity_margin: float = 1.25
    max_teacher_hours: int = 30
    seed: Optional[int] = None


# =============================================================================
# Generator Functions
# =============================================================================

def generate_sample_school(config: GeneratorConfig | None = None) -> TimetableInput:
    """
    Generate sample timetable input.

    Args:
        config: Generator configuration (uses defaults if None)

    Returns:
        TimetableInput with generated data
    """
    if config is None:
        config = GeneratorConfig()

    rng = random.Random(config.seed)

    sections = _generate_sections(config)
    subjects = _generate_subjects(config, sections, rng)
    teachers = _generate_teachers(config, subjects, rng)

    return TimetableInput(
        config=GenerationConfig(days=list(DAYS), periods_per_day=config.periods_per_day),
        teachers=teachers,
        subjects=subjects,
        sections=sections,
    )


def generate_small_school(seed: int | None = None) -> TimetableInput:
    """
    Generate a small school for quick testing.

    - 2 sections
    - 4 lecture subjects and 1 lab
    - 2 teachers per subject
    """
    config = GeneratorConfig(
        num_sections=2,
        num_lecture_subjects=4,
        num_lab_subjects=1,
        seed=seed,
    )
    return generate_sample_school(config)


def generate_medium_school(seed: int | None = None) -> TimetableInput:
    """
    Generate a medium-sized school for standard testing.

    - 6 sections
    - 8 lecture subjects and 3 labs
    - 2 teachers per subject
    """
    config = GeneratorConfig(
        num_sections=6,
        num_lecture_subjects=8,
        num_lab_subjects=3,
        seed=seed,
    )
    return generate_sample_school(config)


# =============================================================================
# Private Generator Helpers
# =============================================================================

def _generate_sections(config: GeneratorConfig) -> list[Section]:
    return [
        Section(id=f"S{i + 1}", name=f"Section {chr(ord('A') + i)}" if i < 26 else f"Section {i + 1}")
        for i in range(config.num_sections)
    ]


def _generate_subjects(
    config: GeneratorConfig,
    sections: list[Section],
    rng: random.Random,
) -> list[Subject]:
    """Lecture subjects go to every section; labs to every section with a fixed location."""
    subjects = []
    section_ids = [s.id for s in sections]

    for data in LECTURE_SUBJECTS[:config.num_lecture_subjects]:
        subjects.append(Subject(
            id=data["id"],
            name=data["name"],
            sections=section_ids,
            hours_per_week={sid: data["hours"] for sid in section_ids},
            type=SessionType.LECTURE,
        ))

    locations = rng.sample(LAB_LOCATIONS, min(config.num_lab_subjects, len(LAB_LOCATIONS)))
    for i, data in enumerate(LAB_SUBJECTS[:config.num_lab_subjects]):
        subjects.append(Subject(
            id=data["id"],
            name=data["name"],
            sections=section_ids,
            hours_per_week={sid: data["hours"] for sid in section_ids},
            type=SessionType.LAB,
            location=locations[i % len(locations)] if locations else None,
        ))

    return subjects


def _generate_teachers(
    config: GeneratorConfig,
    subjects: list[Subject],
    rng: random.Random,
) -> list[Teacher]:
    """Give every subject ``teachers_per_subject`` qualified teachers with shared load."""
    teachers: list[Teacher] = []
    used_names: set[str] = set()

    for subject in subjects:
        demand = sum(subject.hours_per_week.values())
        per_teacher = math.ceil(demand * config.capacity_margin / config.teachers_per_subject)
        max_hours = max(1, min(config.max_teacher_hours, per_teacher))

        for _ in range(config.teachers_per_subject):
            name = _unique_name(rng, used_names)
            teachers.append(Teacher(
                id=f"T{len(teachers) + 1}",
                name=name,
                subjects=[subject.id],
                max_hours=max_hours,
            ))

    return teachers


def _unique_name(rng: random.Random, used_names: set[str]) -> str:
    for _ in range(100):
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
        if name not in used_names:
            used_names.add(name)
            return name
    name = f"Teacher {len(used_names) + 1}"
    used_names.add(name)
    return name


def get_generation_stats(school: TimetableInput) -> dict:
    """
    Get statistics about generated school data.

    Args:
        school: Generated TimetableInput

    Returns:
        Dictionary with statistics
    """
    total_hours = school.total_hours_required
    capacity = school.total_teacher_capacity
    cells = school.config.cells_per_section * len(school.sections)
    max_section_hours = max((school.section_hours(s.id) for s in school.sections), default=0)

    return {
        "teachers": len(school.teachers),
        "subjects": len(school.subjects),
        "lab_subjects": sum(1 for s in school.subjects if s.is_lab),
        "sections": len(school.sections),
        "total_hours_required": total_hours,
        "total_teacher_capacity": capacity,
        "total_cells": cells,
        "fill_percent": round(total_hours / cells * 100, 1) if cells else 0,
        "max_section_hours": max_section_hours,
        "cells_per_section": school.config.cells_per_section,
        "is_feasible": capacity >= total_hours and max_section_hours <= school.config.cells_per_section,
    }
