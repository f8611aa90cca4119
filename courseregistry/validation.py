"""
Input validation for the presentation layer.

The registry stores whatever strings it is given, so the CLI and the
interactive menu run these checks before calling it. Every check either
returns the cleaned value or raises ValidationError with a message that can
be shown to the user as-is.
"""

from __future__ import annotations

import re
from typing import Optional

from courseregistry.registry import Registry

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationError(ValueError):
    pass


def require_name(value: Optional[str], label: str) -> str:
    """
    Return the stripped name, or raise if it is blank.

    `label` is used in the message, e.g. "Course name is required".
    """
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{label} is required")
    return name


def require_email(value: Optional[str]) -> str:
    email = (value or "").strip()
    if not email:
        raise ValidationError("Student email is required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    return email


def require_offering_selection(registry: Registry, course_id: Optional[str], course_type_id: Optional[str]) -> tuple[str, str]:
    """
    Check the course / course type picked for an offering.

    Both must be given and must exist in the registry.
    """
    cid = (course_id or "").strip()
    tid = (course_type_id or "").strip()

    if not cid:
        raise ValidationError("Please select a course")
    if not tid:
        raise ValidationError("Please select a course type")
    if registry.get_course_by_id(cid) is None:
        raise ValidationError(f"Course not found: {cid}")
    if registry.get_course_type_by_id(tid) is None:
        raise ValidationError(f"Course type not found: {tid}")
    return cid, tid


def require_offering(registry: Registry, offering_id: Optional[str]) -> str:
    oid = (offering_id or "").strip()
    if not oid:
        raise ValidationError("Please select a course offering")
    if registry.get_course_offering_by_id(oid) is None:
        raise ValidationError(f"Course offering not found: {oid}")
    return oid
