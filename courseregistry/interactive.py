from __future__ import annotations

from typing import Callable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from courseregistry import stats
from courseregistry.model import Course, CourseOffering, CourseType
from courseregistry.registry import Registry
from courseregistry.storage import StorageError
from courseregistry.validation import (
    ValidationError,
    require_email,
    require_name,
    require_offering_selection,
)


class Session:
    """
    Console + prompt used by all menu flows.

    Tests pass their own console (recording into a buffer) and a scripted prompt.
    """

    def __init__(
        self, registry: Registry, console: Optional[Console] = None, prompt_fn: Optional[Callable[[str], str]] = None
    ) -> None:
        self.registry = registry
        self.console = console if console is not None else Console()
        self._prompt_fn = prompt_fn

    def println(self, msg: str = "") -> None:
        self.console.print(msg)

    def prompt(self, msg: str) -> str:
        if self._prompt_fn is not None:
            return self._prompt_fn(msg)
        return self.console.input(escape(msg))

    def confirm(self, msg: str) -> bool:
        return self.prompt(f"{msg} [y/N]: ").strip().lower() == "y"


def run_interactive(
    registry: Registry, console: Optional[Console] = None, prompt_fn: Optional[Callable[[str], str]] = None
) -> None:
    """
    Interactive menu loop.
    """
    session = Session(registry, console=console, prompt_fn=prompt_fn)

    while True:
        _print_header(session)

        choice = session.prompt(
            "\n[1] Dashboard\n"
            "[2] Course types\n"
            "[3] Courses\n"
            "[4] Course offerings\n"
            "[5] Register student\n"
            "[6] Students by offering\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            session.println("Bye.")
            return

        try:
            if choice == "1":
                _flow_dashboard(session)
            elif choice == "2":
                _flow_course_types(session)
            elif choice == "3":
                _flow_courses(session)
            elif choice == "4":
                _flow_offerings(session)
            elif choice == "5":
                _flow_register_student(session)
            elif choice == "6":
                _flow_students_by_offering(session)
            else:
                session.println("Invalid choice.")
        except StorageError as exc:
            session.println(f"[red]Could not save: {escape(str(exc))}[/]")


def _print_header(session: Session) -> None:
    s = stats.summary(session.registry)
    session.println("\n=== Course Registry (interactive) ===")
    session.println(
        f"Course types: {s.course_types} | Courses: {s.courses} | "
        f"Offerings: {s.course_offerings} | Students: {s.students}"
    )


def _pick(session: Session, count: int, msg: str) -> Optional[int]:
    """
    Ask for a 1-based number in [1, count]; returns a 0-based index or None.
    """
    pick = session.prompt(msg).strip()
    if not pick:
        return None
    if not pick.isdigit():
        session.println("Not a number.")
        return None
    i = int(pick)
    if not (1 <= i <= count):
        session.println("Out of range.")
        return None
    return i - 1


def _show_named(session: Session, title: str, records: Sequence[CourseType | Course]) -> None:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Id", style="dim")
    for i, r in enumerate(records, start=1):
        table.add_row(str(i), escape(r.name), escape(r.id))
    session.console.print(table)


def _show_offerings(session: Session, title: str, offerings: Sequence[CourseOffering]) -> None:
    registry = session.registry
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Offering")
    table.add_column("Students", justify="right")
    for i, o in enumerate(offerings, start=1):
        n = len(registry.get_students_by_course_offering(o.id))
        table.add_row(str(i), f"[bold cyan]{escape(registry.get_full_course_offering_name(o.id))}[/]", f"[yellow]{n}[/]")
    session.console.print(table)


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------


def _flow_dashboard(session: Session) -> None:
    registry = session.registry
    s = stats.summary(registry)

    table = Table(title="Dashboard", box=box.SIMPLE)
    table.add_column("Collection")
    table.add_column("Total", justify="right")
    table.add_row("Course types", str(s.course_types))
    table.add_row("Courses", str(s.courses))
    table.add_row("Course offerings", str(s.course_offerings))
    table.add_row("Students", str(s.students))
    session.console.print(table)

    popular = stats.most_popular_offering(registry)
    if popular is not None:
        offering, count = popular
        session.println(
            f"Most popular offering: [bold cyan]{escape(registry.get_full_course_offering_name(offering.id))}[/] "
            f"([yellow]{count}[/] students)"
        )

    if not registry.course_offerings:
        session.println("No course offerings yet.")
        return
    if not registry.students:
        session.println("No students registered yet.")
        return

    dist = Table(title="Students by course type", box=box.SIMPLE)
    dist.add_column("Course type")
    dist.add_column("Offerings", justify="right")
    dist.add_column("Students", justify="right")
    dist.add_column("Share", justify="right")
    for share in stats.course_type_distribution(registry):
        dist.add_row(escape(share.course_type.name), str(share.offerings), str(share.students), f"{share.percent:.0f}%")
    session.console.print(dist)


# ----------------------------------------------------------------------
# Course types / courses (same shape: add, rename, delete)
# ----------------------------------------------------------------------


def _flow_course_types(session: Session) -> None:
    registry = session.registry
    _flow_named(
        session,
        title="Course types",
        label="Course type name",
        records_fn=lambda: registry.course_types,
        add_fn=registry.add_course_type,
        update_fn=registry.update_course_type,
        delete_fn=registry.delete_course_type,
    )


def _flow_courses(session: Session) -> None:
    registry = session.registry
    _flow_named(
        session,
        title="Courses",
        label="Course name",
        records_fn=lambda: registry.courses,
        add_fn=registry.add_course,
        update_fn=registry.update_course,
        delete_fn=registry.delete_course,
    )


def _flow_named(session: Session, title, label, records_fn, add_fn, update_fn, delete_fn) -> None:
    while True:
        records = records_fn()
        if records:
            _show_named(session, title, records)
        else:
            session.println(f"No {title.lower()} yet.")

        action = session.prompt("[a] Add  [r] Rename  [d] Delete  [blank = back]: ").strip().lower()
        if not action:
            return

        if action == "a":
            try:
                name = require_name(session.prompt(f"{label}: "), label)
            except ValidationError as exc:
                session.println(f"[red]{escape(str(exc))}[/]")
                continue
            add_fn(name)
            session.println(f"Added: {escape(name)}")
        elif action in ("r", "d"):
            if not records:
                continue
            idx = _pick(session, len(records), "Enter number: ")
            if idx is None:
                continue
            record = records[idx]
            if action == "r":
                try:
                    name = require_name(session.prompt(f"New {label.lower()}: "), label)
                except ValidationError as exc:
                    session.println(f"[red]{escape(str(exc))}[/]")
                    continue
                update_fn(record.id, name)
                session.println(f"Renamed: {escape(record.name)} -> {escape(name)}")
            else:
                if not session.confirm(f"Delete {record.name} and all of its course offerings?"):
                    continue
                delete_fn(record.id)
                session.println(f"Deleted: {escape(record.name)}")
        else:
            session.println("Invalid choice.")


# ----------------------------------------------------------------------
# Course offerings
# ----------------------------------------------------------------------


def _select_course_and_type(session: Session) -> Optional[tuple[str, str]]:
    registry = session.registry
    if not registry.courses or not registry.course_types:
        session.println("Add at least one course and one course type first.")
        return None

    _show_named(session, "Courses", registry.courses)
    c_idx = _pick(session, len(registry.courses), "Course number: ")
    _show_named(session, "Course types", registry.course_types)
    t_idx = _pick(session, len(registry.course_types), "Course type number: ")

    course_id = registry.courses[c_idx].id if c_idx is not None else ""
    course_type_id = registry.course_types[t_idx].id if t_idx is not None else ""
    try:
        return require_offering_selection(registry, course_id, course_type_id)
    except ValidationError as exc:
        session.println(f"[red]{escape(str(exc))}[/]")
        return None


def _flow_offerings(session: Session) -> None:
    registry = session.registry
    while True:
        offerings = registry.course_offerings
        if offerings:
            _show_offerings(session, "Course offerings", offerings)
        else:
            session.println("No course offerings yet.")

        action = session.prompt(
            "[a] Add  [e] Edit  [d] Delete  [s] Students  [blank = back]: "
        ).strip().lower()
        if not action:
            return

        if action == "a":
            picked = _select_course_and_type(session)
            if picked is None:
                continue
            o = registry.add_course_offering(*picked)
            session.println(f"Added: {escape(registry.get_full_course_offering_name(o.id))}")
            continue

        if action not in ("e", "d", "s"):
            session.println("Invalid choice.")
            continue
        if not offerings:
            continue
        idx = _pick(session, len(offerings), "Enter offering number: ")
        if idx is None:
            continue
        offering = offerings[idx]

        if action == "e":
            picked = _select_course_and_type(session)
            if picked is None:
                continue
            registry.update_course_offering(offering.id, *picked)
            session.println(f"Updated: {escape(registry.get_full_course_offering_name(offering.id))}")
        elif action == "d":
            name = registry.get_full_course_offering_name(offering.id)
            if not session.confirm(f"Delete {name} and its student registrations?"):
                continue
            registry.delete_course_offering(offering.id)
            session.println(f"Deleted: {escape(name)}")
        else:
            _show_students(session, offering)


# ----------------------------------------------------------------------
# Students
# ----------------------------------------------------------------------


def _show_students(session: Session, offering: CourseOffering) -> None:
    registry = session.registry
    students = registry.get_students_by_course_offering(offering.id)
    title = registry.get_full_course_offering_name(offering.id)
    if not students:
        session.println(f"No students registered for {escape(title)}.")
        return

    table = Table(title=f"{escape(title)} ({len(students)} students)", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Email", style="magenta")
    for i, s in enumerate(students, start=1):
        table.add_row(str(i), escape(s.name), escape(s.email))
    session.console.print(table)


def _flow_register_student(session: Session) -> None:
    registry = session.registry
    offerings = registry.course_offerings
    if not offerings:
        session.println("No course offerings yet.")
        return

    _show_offerings(session, "Register for", offerings)
    idx = _pick(session, len(offerings), "Enter offering number [blank = back]: ")
    if idx is None:
        return
    offering = offerings[idx]

    try:
        name = require_name(session.prompt("Student name: "), "Student name")
        email = require_email(session.prompt("Student email: "))
    except ValidationError as exc:
        session.println(f"[red]{escape(str(exc))}[/]")
        return

    registry.add_student(name, email, offering.id)
    session.println(f"Registered {escape(name)} for {escape(registry.get_full_course_offering_name(offering.id))}")


def _flow_students_by_offering(session: Session) -> None:
    """
    Students grouped by offering, optionally filtered by course type.
    """
    registry = session.registry
    if not registry.course_offerings:
        session.println("No course offerings yet.")
        return

    offerings: Sequence[CourseOffering] = registry.course_offerings
    if registry.course_types:
        _show_named(session, "Filter by course type", registry.course_types)
        t_idx = _pick(session, len(registry.course_types), "Course type number [blank = all]: ")
        if t_idx is not None:
            offerings = registry.get_course_offerings_by_course_type(registry.course_types[t_idx].id)

    if not offerings:
        session.println("No course offerings for this course type.")
        return

    for o in offerings:
        _show_students(session, o)
