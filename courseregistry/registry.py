"""
The registry store.

Registry owns the four collections (course types, courses, offerings and
students), keeps them referentially consistent through cascading deletes,
and answers the derived lookups used by the CLI and the interactive menu.

Cascade rules:
- deleting a course or a course type removes every offering that uses it
- deleting an offering removes every student registered to it

By default a course / course type delete stops at the offerings, so students
of those offerings stay behind with a dangling course_offering_id
(see get_orphaned_students). Pass cascade_students=True to remove them too.

A delete always sweeps the child collection, even when the parent record
itself is already gone, so dangling children can still be cleaned up.

Every mutation updates all affected collections in memory, writes the
changed ones to storage and then notifies subscribers. Lookups never raise for unknown ids: they return
None or an empty list.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

from courseregistry.model import Course, CourseOffering, CourseType, Student, new_id

logger = logging.getLogger(__name__)

SLOT_COURSE_TYPES = "courseTypes"
SLOT_COURSES = "courses"
SLOT_COURSE_OFFERINGS = "courseOfferings"
SLOT_STUDENTS = "students"

UNKNOWN = "Unknown"

R = TypeVar("R", CourseType, Course, CourseOffering, Student)


class Storage(Protocol):
    def load(self, slot: str, default: Any) -> Any: ...

    def save(self, slot: str, value: Any) -> None: ...


def _find(records: list[R], record_id: str) -> Optional[R]:
    for r in records:
        if r.id == record_id:
            return r
    return None


class Registry:
    """
    In-memory registry backed by a key-value storage.

    Instantiate once at application start and hand it to the presentation
    layer; there is no module-level instance.
    """

    def __init__(self, storage: Storage, cascade_students: bool = False) -> None:
        self.storage = storage
        self.cascade_students = cascade_students
        self._subscribers: list[Callable[[Registry], None]] = []

        self._course_types: list[CourseType] = self._load(SLOT_COURSE_TYPES, CourseType.from_dict)
        self._courses: list[Course] = self._load(SLOT_COURSES, Course.from_dict)
        self._course_offerings: list[CourseOffering] = self._load(SLOT_COURSE_OFFERINGS, CourseOffering.from_dict)
        self._students: list[Student] = self._load(SLOT_STUDENTS, Student.from_dict)

    # ------------------------------------------------------------------
    # Collections (read-only views, in insertion order)
    # ------------------------------------------------------------------

    @property
    def course_types(self) -> tuple[CourseType, ...]:
        return tuple(self._course_types)

    @property
    def courses(self) -> tuple[Course, ...]:
        return tuple(self._courses)

    @property
    def course_offerings(self) -> tuple[CourseOffering, ...]:
        return tuple(self._course_offerings)

    @property
    def students(self) -> tuple[Student, ...]:
        return tuple(self._students)

    # ------------------------------------------------------------------
    # Persistence + change notification
    # ------------------------------------------------------------------

    def _load(self, slot: str, from_dict: Callable[[dict[str, Any]], R]) -> list[R]:
        raw = self.storage.load(slot, [])
        if not isinstance(raw, list):
            logger.warning("Slot %s does not hold a list, starting empty", slot)
            return []

        try:
            records = [from_dict(item) for item in raw if isinstance(item, dict)]
        except ValueError as exc:
            logger.warning("Slot %s holds an invalid record, starting empty: %s", slot, exc)
            return []

        if len(records) != len(raw):
            logger.warning("Slot %s holds non-object entries, starting empty", slot)
            return []
        return records

    def _save(self, slot: str, records: list[R]) -> None:
        self.storage.save(slot, [r.to_dict() for r in records])

    def subscribe(self, callback: Callable[[Registry], None]) -> Callable[[], None]:
        """
        Register a callback invoked after every state change.

        Returns a function that removes the subscription again.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    # ------------------------------------------------------------------
    # Course types
    # ------------------------------------------------------------------

    def add_course_type(self, name: str) -> CourseType:
        course_type = CourseType(id=new_id(), name=name)
        self._course_types = self._course_types + [course_type]
        self._save(SLOT_COURSE_TYPES, self._course_types)
        self._notify()
        return course_type

    def update_course_type(self, course_type_id: str, name: str) -> Optional[CourseType]:
        current = _find(self._course_types, course_type_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, name=name)
        self._course_types = [updated if ct.id == course_type_id else ct for ct in self._course_types]
        self._save(SLOT_COURSE_TYPES, self._course_types)
        self._notify()
        return updated

    def delete_course_type(self, course_type_id: str) -> bool:
        course_types = [ct for ct in self._course_types if ct.id != course_type_id]
        offerings, students = self._without_offerings(lambda o: o.course_type_id == course_type_id)
        return self._apply_removals(course_types=course_types, course_offerings=offerings, students=students)

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def add_course(self, name: str) -> Course:
        course = Course(id=new_id(), name=name)
        self._courses = self._courses + [course]
        self._save(SLOT_COURSES, self._courses)
        self._notify()
        return course

    def update_course(self, course_id: str, name: str) -> Optional[Course]:
        current = _find(self._courses, course_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, name=name)
        self._courses = [updated if c.id == course_id else c for c in self._courses]
        self._save(SLOT_COURSES, self._courses)
        self._notify()
        return updated

    def delete_course(self, course_id: str) -> bool:
        courses = [c for c in self._courses if c.id != course_id]
        offerings, students = self._without_offerings(lambda o: o.course_id == course_id)
        return self._apply_removals(courses=courses, course_offerings=offerings, students=students)

    def _without_offerings(
        self, predicate: Callable[[CourseOffering], bool]
    ) -> tuple[list[CourseOffering], list[Student]]:
        """
        Offerings left after removing the matching ones, and the students left with them.

        Students only follow their offering when cascade_students is set.
        """
        offerings = [o for o in self._course_offerings if not predicate(o)]
        if not self.cascade_students:
            return offerings, self._students

        kept_ids = {o.id for o in offerings}
        removed_ids = {o.id for o in self._course_offerings} - kept_ids
        students = [s for s in self._students if s.course_offering_id not in removed_ids]
        return offerings, students

    def _apply_removals(
        self,
        course_types: Optional[list[CourseType]] = None,
        courses: Optional[list[Course]] = None,
        course_offerings: Optional[list[CourseOffering]] = None,
        students: Optional[list[Student]] = None,
    ) -> bool:
        """
        Swap in the filtered collections, then save the ones that shrank.

        All collections change in memory before the first write, so a failing
        save never leaves the live store half-cascaded. Returns False if
        nothing was removed.
        """
        candidates = [
            (SLOT_COURSE_TYPES, "_course_types", course_types),
            (SLOT_COURSES, "_courses", courses),
            (SLOT_COURSE_OFFERINGS, "_course_offerings", course_offerings),
            (SLOT_STUDENTS, "_students", students),
        ]
        changes = [
            (slot, attr, records)
            for slot, attr, records in candidates
            if records is not None and len(records) != len(getattr(self, attr))
        ]
        if not changes:
            return False

        for slot, attr, records in changes:
            logger.info("Removing %d record(s) from %s", len(getattr(self, attr)) - len(records), slot)
            setattr(self, attr, records)

        try:
            for slot, attr, records in changes:
                self._save(slot, records)
        finally:
            self._notify()
        return True

    # ------------------------------------------------------------------
    # Course offerings
    # ------------------------------------------------------------------

    def add_course_offering(self, course_id: str, course_type_id: str) -> CourseOffering:
        # no existence check: callers only offer ids from their own selection lists
        offering = CourseOffering(id=new_id(), course_id=course_id, course_type_id=course_type_id)
        self._course_offerings = self._course_offerings + [offering]
        self._save(SLOT_COURSE_OFFERINGS, self._course_offerings)
        self._notify()
        return offering

    def update_course_offering(
        self, offering_id: str, course_id: str, course_type_id: str
    ) -> Optional[CourseOffering]:
        current = _find(self._course_offerings, offering_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, course_id=course_id, course_type_id=course_type_id)
        self._course_offerings = [updated if o.id == offering_id else o for o in self._course_offerings]
        self._save(SLOT_COURSE_OFFERINGS, self._course_offerings)
        self._notify()
        return updated

    def delete_course_offering(self, offering_id: str) -> bool:
        offerings = [o for o in self._course_offerings if o.id != offering_id]
        students = [s for s in self._students if s.course_offering_id != offering_id]
        return self._apply_removals(course_offerings=offerings, students=students)

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    def add_student(self, name: str, email: str, course_offering_id: str) -> Student:
        student = Student(id=new_id(), name=name, email=email, course_offering_id=course_offering_id)
        self._students = self._students + [student]
        self._save(SLOT_STUDENTS, self._students)
        self._notify()
        return student

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_course_by_id(self, course_id: str) -> Optional[Course]:
        return _find(self._courses, course_id)

    def get_course_type_by_id(self, course_type_id: str) -> Optional[CourseType]:
        return _find(self._course_types, course_type_id)

    def get_course_offering_by_id(self, offering_id: str) -> Optional[CourseOffering]:
        return _find(self._course_offerings, offering_id)

    def get_student_by_id(self, student_id: str) -> Optional[Student]:
        return _find(self._students, student_id)

    def get_students_by_course_offering(self, offering_id: str) -> list[Student]:
        return [s for s in self._students if s.course_offering_id == offering_id]

    def get_course_offerings_by_course_type(self, course_type_id: str) -> list[CourseOffering]:
        return [o for o in self._course_offerings if o.course_type_id == course_type_id]

    def get_full_course_offering_name(self, offering_id: str) -> str:
        """
        Display name of an offering: "<CourseTypeName> - <CourseName>".

        Unresolvable parts read "Unknown"; an unknown offering is just "Unknown".
        """
        offering = self.get_course_offering_by_id(offering_id)
        if offering is None:
            return UNKNOWN

        course = self.get_course_by_id(offering.course_id)
        course_type = self.get_course_type_by_id(offering.course_type_id)

        type_name = course_type.name if course_type is not None and course_type.name else UNKNOWN
        course_name = course.name if course is not None and course.name else UNKNOWN
        return f"{type_name} - {course_name}"

    def get_orphaned_students(self) -> list[Student]:
        """
        Students whose offering no longer exists.
        """
        offering_ids = {o.id for o in self._course_offerings}
        return [s for s in self._students if s.course_offering_id not in offering_ids]
