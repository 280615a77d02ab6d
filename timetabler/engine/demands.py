"""
Demand extraction and priority ordering.

A demand asks for N weekly periods of one subject for one section. Demands
are derived fresh for every run and ordered so that the hardest to place
go first. The ordering is a greedy heuristic; it does not guarantee that a
feasible timetable is found when one exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..data.models import Section, SessionType, Subject, Teacher
from ..errors import NoEligibleTeacherError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Demand:
    """Request to place ``hours_needed`` periods of a subject for a section."""
    section_id: str
    subject_id: str
    hours_needed: int
    eligible_teacher_ids: tuple[str, ...]
    session_type: SessionType = SessionType.LECTURE
    location: Optional[str] = None

    @property
    def is_lab(self) -> bool:
        return self.session_type == SessionType.LAB

    def __str__(self) -> str:
        return f"{self.subject_id}/{self.section_id} ({self.hours_needed}h {self.session_type.value})"


def extract_demands(
    teachers: list[Teacher],
    subjects: list[Subject],
    sections: list[Section],
) -> list[Demand]:
    """
    Build one demand per (section, subject) pair with a positive hour requirement.

    Sections are visited in input order, then subjects in input order.

    Raises:
        NoEligibleTeacherError: If a subject taught to a section has no
            qualified teacher. No search strategy could place it, so the
            whole run fails.
    """
    demands: list[Demand] = []

    for section in sections:
        for subject in subjects:
            if section.id not in subject.sections:
                continue

            hours = subject.hours_for(section.id)
            if hours <= 0:
                logger.warning(
                    "Subject %s lists section %s without an hours requirement; skipping",
                    subject.id, section.id,
                )
                continue

            eligible = tuple(t.id for t in teachers if subject.id in t.subjects)
            if not eligible:
                raise NoEligibleTeacherError(
                    subject.id, section.id,
                    subject_name=subject.name, section_name=section.name,
                )

            demands.append(Demand(
                section_id=section.id,
                subject_id=subject.id,
                hours_needed=hours,
                eligible_teacher_ids=eligible,
                session_type=subject.type,
                location=subject.location if subject.is_lab else None,
            ))

    logger.debug("Extracted %d demands", len(demands))
    return demands


def priority_key(demand: Demand) -> tuple[int, int, int]:
    """Sort key: labs first, then fewest eligible teachers, then most hours."""
    return (
        0 if demand.is_lab else 1,
        len(demand.eligible_teacher_ids),
        -demand.hours_needed,
    )


def order_demands(demands: list[Demand]) -> list[Demand]:
    """Return demands in placement order (stable: ties keep input order)."""
    return sorted(demands, key=priority_key)
