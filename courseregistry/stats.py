"""
Dashboard statistics.

Small aggregations over the registry collections:
- total counts per collection
- registered students per offering (and the most popular offering)
- how students are distributed across course types
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Optional

from courseregistry.model import CourseOffering, CourseType
from courseregistry.registry import Registry


@dataclass
class Summary:
    course_types: int
    courses: int
    course_offerings: int
    students: int


@dataclass
class CourseTypeShare:
    """
    Offerings and students that belong to one course type.
    """

    course_type: CourseType
    offerings: int
    students: int
    percent: float


def summary(registry: Registry) -> Summary:
    return Summary(
        course_types=len(registry.course_types),
        courses=len(registry.courses),
        course_offerings=len(registry.course_offerings),
        students=len(registry.students),
    )


def student_counts_by_offering(registry: Registry) -> list[tuple[CourseOffering, int]]:
    """
    Number of registered students for each offering, in collection order.
    """
    counts = Counter(s.course_offering_id for s in registry.students)
    return [(o, counts.get(o.id, 0)) for o in registry.course_offerings]


def most_popular_offering(registry: Registry) -> Optional[tuple[CourseOffering, int]]:
    """
    Offering with the most students, or None if there are no offerings.

    Ties are resolved in favour of the earliest offering.
    """
    best: Optional[tuple[CourseOffering, int]] = None
    for offering, count in student_counts_by_offering(registry):
        if best is None or count > best[1]:
            best = (offering, count)
    return best


def course_type_distribution(registry: Registry) -> list[CourseTypeShare]:
    total_students = len(registry.students)
    counts = Counter(s.course_offering_id for s in registry.students)

    out: list[CourseTypeShare] = []
    for ct in registry.course_types:
        offerings = registry.get_course_offerings_by_course_type(ct.id)
        n_students = sum(counts.get(o.id, 0) for o in offerings)
        percent = (n_students / total_students) * 100 if total_students else 0.0
        out.append(CourseTypeShare(course_type=ct, offerings=len(offerings), students=n_students, percent=percent))
    return out
