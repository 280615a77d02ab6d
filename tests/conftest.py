"""Shared fixtures: small hand-built schools with known outcomes."""

from __future__ import annotations

import pytest

from timetabler.data.models import (
    GenerationConfig,
    Section,
    SessionType,
    Subject,
    Teacher,
    TimetableInput,
)

FIVE_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


@pytest.fixture
def seven_period_config() -> GenerationConfig:
    """Five days of seven periods."""
    return GenerationConfig(days=FIVE_DAYS, periods_per_day=7)


@pytest.fixture
def math_input(seven_period_config) -> TimetableInput:
    """One section, 3h of Math, one teacher capped at 3."""
    return TimetableInput(
        config=seven_period_config,
        teachers=[Teacher(id="T", name="Mr T", subjects=["math"], max_hours=3)],
        subjects=[Subject(
            id="math", name="Math", sections=["S"], hours_per_week={"S": 3},
        )],
        sections=[Section(id="S", name="Section S")],
    )


@pytest.fixture
def lab_input(seven_period_config) -> TimetableInput:
    """One section, a 2h lab in Room A, one teacher capped at 2."""
    return TimetableInput(
        config=seven_period_config,
        teachers=[Teacher(id="T2", name="Ms Lab", subjects=["lab1"], max_hours=2)],
        subjects=[Subject(
            id="lab1", name="Lab1", sections=["S"], hours_per_week={"S": 2},
            type=SessionType.LAB, location="Room A",
        )],
        sections=[Section(id="S", name="Section S")],
    )


@pytest.fixture
def shortfall_input(seven_period_config) -> TimetableInput:
    """4h needed but the only teacher is capped at 2."""
    return TimetableInput(
        config=seven_period_config,
        teachers=[Teacher(id="T", name="Mr T", subjects=["phy"], max_hours=2)],
        subjects=[Subject(
            id="phy", name="Physics", sections=["S"], hours_per_week={"S": 4},
        )],
        sections=[Section(id="S", name="Section S")],
    )


@pytest.fixture
def two_section_input(seven_period_config) -> TimetableInput:
    """Two sections sharing teachers, with lectures and a lab."""
    return TimetableInput(
        config=seven_period_config,
        teachers=[
            Teacher(id="T1", name="Anita Rao", subjects=["math", "phy"], max_hours=12),
            Teacher(id="T2", name="Rahul Iyer", subjects=["math"], max_hours=10),
            Teacher(id="T3", name="Priya Nair", subjects=["dbl"], max_hours=8),
        ],
        subjects=[
            Subject(id="math", name="Math", sections=["S1", "S2"], hours_per_week={"S1": 4, "S2": 4}),
            Subject(id="phy", name="Physics", sections=["S1", "S2"], hours_per_week={"S1": 2, "S2": 3}),
            Subject(
                id="dbl", name="DBMS Lab", sections=["S1", "S2"], hours_per_week={"S1": 2, "S2": 2},
                type=SessionType.LAB, location="DBMS LAB A-420",
            ),
        ],
        sections=[
            Section(id="S1", name="Section A"),
            Section(id="S2", name="Section B"),
        ],
    )
