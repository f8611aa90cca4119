"""
Central data model definitions used across the project.

This module defines the four record types held by the registry:

    CourseType, Course, CourseOffering, Student

Records are frozen dataclasses: the registry never mutates a record in place,
it replaces it with an updated copy.

The JSON shape of each record (to_dict / from_dict) uses camelCase keys,
so every storage slot holds a plain list of objects like:

    [{"id": "...", "courseId": "...", "courseTypeId": "..."}]
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any


def new_id() -> str:
    """
    Return a fresh, collision-resistant record id.
    """
    return uuid.uuid4().hex


def _field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Record field {key!r} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class CourseType:
    """
    A category describing the mode of a course (e.g. individual, group).
    """

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CourseType:
        return cls(id=_field(data, "id"), name=_field(data, "name"))


@dataclass(frozen=True)
class Course:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Course:
        return cls(id=_field(data, "id"), name=_field(data, "name"))


@dataclass(frozen=True)
class CourseOffering:
    """
    One specific pairing of a Course with a CourseType.

    Students register against an offering, never against a bare course.
    """

    id: str
    course_id: str
    course_type_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "courseId": self.course_id, "courseTypeId": self.course_type_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CourseOffering:
        return cls(
            id=_field(data, "id"),
            course_id=_field(data, "courseId"),
            course_type_id=_field(data, "courseTypeId"),
        )


@dataclass(frozen=True)
class Student:
    """
    One student registration (a student belongs to exactly one offering).
    """

    id: str
    name: str
    email: str
    course_offering_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "courseOfferingId": self.course_offering_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Student:
        return cls(
            id=_field(data, "id"),
            name=_field(data, "name"),
            email=_field(data, "email"),
            course_offering_id=_field(data, "courseOfferingId"),
        )
