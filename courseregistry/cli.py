"""
CLI (Command Line Interface).

This module provides quick terminal commands for scripting and for testing, e.g.:

    courseregistry types add "Group"
    courseregistry courses add "Math"
    courseregistry offerings add <course_id> <course_type_id>
    courseregistry students register <offering_id> "Ana" ana@x.com
    courseregistry offerings list --type <course_type_id>
    courseregistry dashboard
    courseregistry interactive

Note:
- The interactive UI lives in courseregistry/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
- Input is validated here, the registry itself stores whatever it is given
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from courseregistry import stats
from courseregistry.config import Settings, load_settings
from courseregistry.log import setup_logging
from courseregistry.registry import Registry
from courseregistry.storage import JsonFileStorage, StorageError
from courseregistry.validation import (
    ValidationError,
    require_email,
    require_name,
    require_offering,
    require_offering_selection,
)

logger = logging.getLogger(__name__)


def _not_found(entity: str, record_id: str) -> int:
    print(f"{entity} not found: {record_id}")
    return 1


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


# ----------------------------------------------------------------------
# Course types
# ----------------------------------------------------------------------


def _cmd_types(args: argparse.Namespace, registry: Registry) -> int:
    if args.action == "list":
        if not registry.course_types:
            print("No course types yet.")
            return 0
        for ct in registry.course_types:
            n = len(registry.get_course_offerings_by_course_type(ct.id))
            print(f"{ct.id} | {ct.name} | {_plural(n, 'offering')}")
        return 0

    if args.action == "add":
        name = require_name(args.name, "Course type name")
        ct = registry.add_course_type(name)
        print(f"Added course type: {ct.name} ({ct.id})")
        return 0

    if args.action == "rename":
        name = require_name(args.name, "Course type name")
        updated = registry.update_course_type(args.id, name)
        if updated is None:
            return _not_found("Course type", args.id)
        print(f"Renamed course type {updated.id} to: {updated.name}")
        return 0

    if args.action == "delete":
        n_offerings = len(registry.get_course_offerings_by_course_type(args.id))
        return _delete_with_cascade(registry, "Course type", args.id, registry.delete_course_type, n_offerings)

    return 2


# ----------------------------------------------------------------------
# Courses
# ----------------------------------------------------------------------


def _cmd_courses(args: argparse.Namespace, registry: Registry) -> int:
    if args.action == "list":
        if not registry.courses:
            print("No courses yet.")
            return 0
        for c in registry.courses:
            print(f"{c.id} | {c.name}")
        return 0

    if args.action == "add":
        name = require_name(args.name, "Course name")
        c = registry.add_course(name)
        print(f"Added course: {c.name} ({c.id})")
        return 0

    if args.action == "rename":
        name = require_name(args.name, "Course name")
        updated = registry.update_course(args.id, name)
        if updated is None:
            return _not_found("Course", args.id)
        print(f"Renamed course {updated.id} to: {updated.name}")
        return 0

    if args.action == "delete":
        n_offerings = len([o for o in registry.course_offerings if o.course_id == args.id])
        return _delete_with_cascade(registry, "Course", args.id, registry.delete_course, n_offerings)

    return 2


def _delete_with_cascade(registry: Registry, entity: str, record_id: str, delete_fn, n_offerings: int) -> int:
    """
    Run a course / course type delete and report what the cascade removed.
    """
    orphans_before = len(registry.get_orphaned_students())
    students_before = len(registry.students)

    if not delete_fn(record_id):
        return _not_found(entity, record_id)

    print(f"Deleted {entity.lower()}: {record_id} (removed {_plural(n_offerings, 'offering')})")

    removed_students = students_before - len(registry.students)
    if removed_students:
        print(f"Removed {_plural(removed_students, 'student registration')}")

    new_orphans = len(registry.get_orphaned_students()) - orphans_before
    if new_orphans > 0:
        print(f"Warning: {_plural(new_orphans, 'student')} now registered to a deleted offering")
    return 0


# ----------------------------------------------------------------------
# Course offerings
# ----------------------------------------------------------------------


def _cmd_offerings(args: argparse.Namespace, registry: Registry) -> int:
    if args.action == "list":
        if args.type:
            if registry.get_course_type_by_id(args.type) is None:
                return _not_found("Course type", args.type)
            offerings = registry.get_course_offerings_by_course_type(args.type)
        else:
            offerings = list(registry.course_offerings)

        if not offerings:
            print("No course offerings.")
            return 0

        for o in offerings:
            n = len(registry.get_students_by_course_offering(o.id))
            print(f"{o.id} | {registry.get_full_course_offering_name(o.id)} | {_plural(n, 'student')}")
        return 0

    if args.action == "add":
        course_id, course_type_id = require_offering_selection(registry, args.course_id, args.course_type_id)
        o = registry.add_course_offering(course_id, course_type_id)
        print(f"Added course offering: {registry.get_full_course_offering_name(o.id)} ({o.id})")
        return 0

    if args.action == "update":
        if registry.get_course_offering_by_id(args.id) is None:
            return _not_found("Course offering", args.id)
        course_id, course_type_id = require_offering_selection(registry, args.course_id, args.course_type_id)
        o = registry.update_course_offering(args.id, course_id, course_type_id)
        if o is None:
            return _not_found("Course offering", args.id)
        print(f"Updated course offering {o.id}: {registry.get_full_course_offering_name(o.id)}")
        return 0

    if args.action == "delete":
        name = registry.get_full_course_offering_name(args.id)
        n_students = len(registry.get_students_by_course_offering(args.id))
        if not registry.delete_course_offering(args.id):
            return _not_found("Course offering", args.id)
        print(f"Deleted course offering: {name} (removed {_plural(n_students, 'student registration')})")
        return 0

    return 2


# ----------------------------------------------------------------------
# Students
# ----------------------------------------------------------------------


def _cmd_students(args: argparse.Namespace, registry: Registry) -> int:
    if args.action == "list":
        if args.offering:
            if registry.get_course_offering_by_id(args.offering) is None:
                return _not_found("Course offering", args.offering)
            students = registry.get_students_by_course_offering(args.offering)
        else:
            students = list(registry.students)

        if not students:
            print("No students registered.")
            return 0

        for s in students:
            print(f"{s.id} | {s.name} | {s.email} | {registry.get_full_course_offering_name(s.course_offering_id)}")
        return 0

    if args.action == "register":
        offering_id = require_offering(registry, args.offering_id)
        name = require_name(args.name, "Student name")
        email = require_email(args.email)
        s = registry.add_student(name, email, offering_id)
        print(f"Registered {s.name} <{s.email}> for {registry.get_full_course_offering_name(offering_id)} ({s.id})")
        return 0

    return 2


# ----------------------------------------------------------------------
# Dashboard / reset
# ----------------------------------------------------------------------


def _cmd_dashboard(args: argparse.Namespace, registry: Registry) -> int:
    """
    Print totals, the most popular offering and the course type distribution.
    """
    s = stats.summary(registry)
    print(f"Course types: {s.course_types}")
    print(f"Courses: {s.courses}")
    print(f"Course offerings: {s.course_offerings}")
    print(f"Students: {s.students}")

    popular = stats.most_popular_offering(registry)
    if popular is None:
        print("Most popular offering: -")
    else:
        offering, count = popular
        print(f"Most popular offering: {registry.get_full_course_offering_name(offering.id)} ({_plural(count, 'student')})")

    shares = stats.course_type_distribution(registry)
    if shares:
        print("Students by course type:")
        for share in shares:
            print(
                f"- {share.course_type.name}: {_plural(share.offerings, 'offering')}, "
                f"{_plural(share.students, 'student')} ({share.percent:.0f}%)"
            )
    return 0


def _cmd_reset(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    if not args.yes:
        print("Refusing to delete all data without --yes.")
        return 1
    n = storage.clear()
    print(f"Removed {n} data files from: {storage.data_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="courseregistry", description="Course registry CLI")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory with the stored data files")
    parser.add_argument(
        "--cascade-students",
        action="store_true",
        help="When deleting a course or course type, also remove students of the removed offerings",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    # types
    p_types = sub.add_parser("types", help="Manage course types")
    types_sub = p_types.add_subparsers(dest="action", required=True)
    types_sub.add_parser("list", help="List course types")
    p = types_sub.add_parser("add", help="Add a course type")
    p.add_argument("name", type=str, help="Course type name (e.g. Group)")
    p = types_sub.add_parser("rename", help="Rename a course type")
    p.add_argument("id", type=str, help="Course type id")
    p.add_argument("name", type=str, help="New name")
    p = types_sub.add_parser("delete", help="Delete a course type and its offerings")
    p.add_argument("id", type=str, help="Course type id")

    # courses
    p_courses = sub.add_parser("courses", help="Manage courses")
    courses_sub = p_courses.add_subparsers(dest="action", required=True)
    courses_sub.add_parser("list", help="List courses")
    p = courses_sub.add_parser("add", help="Add a course")
    p.add_argument("name", type=str, help="Course name (e.g. Math)")
    p = courses_sub.add_parser("rename", help="Rename a course")
    p.add_argument("id", type=str, help="Course id")
    p.add_argument("name", type=str, help="New name")
    p = courses_sub.add_parser("delete", help="Delete a course and its offerings")
    p.add_argument("id", type=str, help="Course id")

    # offerings
    p_offerings = sub.add_parser("offerings", help="Manage course offerings")
    offerings_sub = p_offerings.add_subparsers(dest="action", required=True)
    p = offerings_sub.add_parser("list", help="List course offerings")
    p.add_argument("--type", type=str, default=None, help="Only offerings of this course type id")
    p = offerings_sub.add_parser("add", help="Add a course offering")
    p.add_argument("course_id", type=str, help="Course id")
    p.add_argument("course_type_id", type=str, help="Course type id")
    p = offerings_sub.add_parser("update", help="Change course / course type of an offering")
    p.add_argument("id", type=str, help="Course offering id")
    p.add_argument("course_id", type=str, help="Course id")
    p.add_argument("course_type_id", type=str, help="Course type id")
    p = offerings_sub.add_parser("delete", help="Delete an offering and its student registrations")
    p.add_argument("id", type=str, help="Course offering id")

    # students
    p_students = sub.add_parser("students", help="Student registrations")
    students_sub = p_students.add_subparsers(dest="action", required=True)
    p = students_sub.add_parser("list", help="List registered students")
    p.add_argument("--offering", type=str, default=None, help="Only students of this course offering id")
    p = students_sub.add_parser("register", help="Register a student for a course offering")
    p.add_argument("offering_id", type=str, help="Course offering id")
    p.add_argument("name", type=str, help="Student name")
    p.add_argument("email", type=str, help="Student email")

    sub.add_parser("dashboard", help="Show totals and popular offerings")

    p_reset = sub.add_parser("reset", help="Delete all stored data")
    p_reset.add_argument("--yes", action="store_true", help="Confirm deletion")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.data_dir:
        settings.data_dir = Path(args.data_dir)
    if args.cascade_students:
        settings.cascade_students = True
    if args.verbose:
        settings.log_level = "DEBUG"
    return settings


COMMANDS = {
    "types": _cmd_types,
    "courses": _cmd_courses,
    "offerings": _cmd_offerings,
    "students": _cmd_students,
    "dashboard": _cmd_dashboard,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = _resolve_settings(args)
    setup_logging(settings.log_level, settings.log_file)

    storage = JsonFileStorage(settings.data_dir)
    logger.debug("Using data directory %s", storage.data_dir)

    if args.command == "reset":
        try:
            code = _cmd_reset(args, storage)
        except StorageError as exc:
            print(f"Error: {exc}")
            code = 1
        raise SystemExit(code)

    registry = Registry(storage, cascade_students=settings.cascade_students)

    if args.command == "interactive":
        from courseregistry.interactive import run_interactive

        run_interactive(registry)
        raise SystemExit(0)

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args, registry)
    except ValidationError as exc:
        print(str(exc))
        code = 1
    except StorageError as exc:
        print(f"Error: {exc}")
        code = 1
    raise SystemExit(code)
