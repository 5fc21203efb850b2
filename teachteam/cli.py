"""
TeachTeam Command Line Interface

Operator commands for the selection subsystem: database setup, applicant
search, selection and ranking changes, comments and statistics.
"""

from typing import NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from teachteam.core.exceptions import NotFound, PersistenceFailure, SelectionError
from teachteam.utils.constants import ApplicationStatus, SessionType, SortDirection, SortField, UserRole

app = typer.Typer(
    name="teachteam",
    help="TeachTeam tutor selection CLI",
    add_completion=False,
)
console = Console()

STATUS_COLORS = {
    ApplicationStatus.PENDING.value: "yellow",
    ApplicationStatus.SELECTED.value: "green",
    ApplicationStatus.REJECTED.value: "red",
}


@app.callback()
def main():
    """TeachTeam tutor selection CLI."""
    from teachteam.utils.logger import setup_logging

    setup_logging()


def _require_connection() -> None:
    from teachteam.data.database import get_database_manager

    if not get_database_manager().check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB. Run 'init-db' first.[/red]")
        raise typer.Exit(1)


def _get_service():
    """Selection service over MongoDB; exits when the database is unreachable."""
    from teachteam.core.selection import get_selection_service

    _require_connection()
    return get_selection_service()


def _get_courses():
    """Course repository over MongoDB; exits when the database is unreachable."""
    from teachteam.data.repositories import get_course_repository

    _require_connection()
    return get_course_repository()


def _lecturer_session(email: str):
    """Session limited to the courses assigned to a lecturer."""
    from teachteam.core.session import ReviewerSession

    courses = _get_courses().get_for_lecturer(email)
    course_ids = [key for course in courses for key in (course.id_str, course.code) if key]
    return ReviewerSession.login(email, UserRole.LECTURER, course_ids)


def _truncate(value: str, width: int) -> str:
    return value[:width] + "..." if len(value) > width else value


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show application version."""
    from teachteam import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from teachteam.utils.config import get_settings

    settings = get_settings()

    table = Table(title="TeachTeam Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Strict Ranking", str(settings.selection.strict_ranking))
    table.add_row("List Limit", str(settings.selection.list_limit))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required collections and indexes."""
    from teachteam.data.database import get_database_manager

    console.print("[yellow]Initializing database...[/yellow]")

    db_manager = get_database_manager()

    console.print("  Checking database connection...")
    if not db_manager.check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)

    console.print("  [green]✓[/green] Connected to MongoDB")

    console.print("  Creating indexes...")
    try:
        db_manager.ensure_indexes()
    except PersistenceFailure as e:
        db_manager.close_all()
        _fail(str(e))
    console.print("  [green]✓[/green] Indexes created")

    db_manager.close_all()
    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def list_applicants(
    course: Optional[str] = typer.Option(None, "--course", "-c", help="Course code or name contains"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Candidate name contains"),
    availability: Optional[str] = typer.Option(None, "--availability", "-a", help="fulltime or parttime"),
    skill: Optional[str] = typer.Option(None, "--skill", "-s", help="Any skill contains"),
    role: Optional[str] = typer.Option(None, "--role", "-r", help="tutor or lab_assistant"),
    course_id: Optional[str] = typer.Option(None, "--course-id", help="Only this course id"),
    sort_by: SortField = typer.Option(SortField.NONE, "--sort", help="Sort field"),
    direction: SortDirection = typer.Option(SortDirection.ASC, "--direction", help="asc or desc"),
    lecturer: Optional[str] = typer.Option(None, "--lecturer", "-l", help="Only courses assigned to this lecturer"),
):
    """Search applicants with the review screen filters."""
    service = _get_service()
    session = _lecturer_session(lecturer) if lecturer else None
    criteria = {
        "course_name": course,
        "candidate_name": name,
        "availability": availability,
        "skill_set": skill,
        "session_type": role,
    }
    try:
        applications = service.list_applications(criteria, sort_by, direction, course_id=course_id, session=session)
    except PermissionError as e:
        _fail(str(e))

    if not applications:
        console.print("[yellow]No applicants found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Applicants ({len(applications)} total)")
    table.add_column("ID", style="dim", width=24)
    table.add_column("Candidate", style="cyan")
    table.add_column("Course")
    table.add_column("Role")
    table.add_column("Availability")
    table.add_column("Skills")
    table.add_column("Status", justify="center")
    table.add_column("Rank", justify="right")

    for application in applications:
        color = STATUS_COLORS.get(application.status, "white")
        table.add_row(
            application.id,
            _truncate(application.candidate_name, 30),
            f"{application.course_code} {_truncate(application.course_name, 25)}",
            application.session_type,
            application.availability,
            _truncate(", ".join(application.skills), 30),
            f"[{color}]{application.status}[/{color}]",
            str(application.ranking) if application.ranking is not None else "-",
        )

    console.print(table)


def _change_status(application_id: str, status: ApplicationStatus, rank: Optional[int] = None) -> None:
    service = _get_service()
    try:
        result = service.change_status(application_id, status, rank=rank)
    except SelectionError as e:
        _fail(str(e))
    if not result:
        _fail(result.reason or "Status change refused")
    console.print(
        f"[green]✓[/green] Application [cyan]{application_id}[/cyan] is now {status.value}"
        + (f" at rank {result.rank}" if status == ApplicationStatus.SELECTED else "")
    )
    if result.changed:
        console.print(f"[dim]{len(result.changed)} application(s) updated[/dim]")


@app.command()
def select(
    application_id: str = typer.Argument(..., help="Application ID"),
    rank: Optional[int] = typer.Option(None, "--rank", help="Insert at this rank instead of last"),
):
    """Mark an application Selected."""
    _change_status(application_id, ApplicationStatus.SELECTED, rank)


@app.command()
def reject(application_id: str = typer.Argument(..., help="Application ID")):
    """Mark an application Rejected."""
    _change_status(application_id, ApplicationStatus.REJECTED)


@app.command()
def reset(application_id: str = typer.Argument(..., help="Application ID")):
    """Return an application to Pending."""
    _change_status(application_id, ApplicationStatus.PENDING)


@app.command()
def rank(
    application_id: str = typer.Argument(..., help="Application ID"),
    position: int = typer.Argument(..., help="New rank (1 = top)"),
):
    """Move a Selected application to a new rank in its course."""
    service = _get_service()
    try:
        service.set_ranking(application_id, position, strict=True)
    except SelectionError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Application [cyan]{application_id}[/cyan] ranked {position}")


@app.command()
def comment(
    application_id: str = typer.Argument(..., help="Application ID"),
    text: str = typer.Argument(..., help="Comment text (3-500 characters)"),
):
    """Add a reviewer comment to an application."""
    service = _get_service()
    try:
        comments = service.add_comment(application_id, text)
    except ValidationError as e:
        _fail(e.errors()[0]["msg"])
    except SelectionError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Comment added ({len(comments)} total)")


def _print_statistics(stats, title: str) -> None:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Total applicants", str(stats.total_applicants))
    table.add_row("Selected", str(stats.selected_count))
    table.add_row("Pending", str(stats.pending_count))
    table.add_row("Rejected", str(stats.rejected_count))
    most, least = stats.most_selected, stats.least_selected
    table.add_row("Most selected", f"{most.name} ({most.count})" if most else "-")
    table.add_row("Least selected", f"{least.name} ({least.count})" if least else "-")
    for field in ("tutor_count", "lab_assistant_count", "fulltime_count", "parttime_count"):
        if hasattr(stats, field):
            table.add_row(field.replace("_count", "").replace("_", " ").title(), str(getattr(stats, field)))

    console.print(table)

    if stats.unselected_applicants:
        names = ", ".join(ref.name for ref in stats.unselected_applicants)
        console.print(f"[dim]Not selected:[/dim] {names}")


@app.command()
def stats(
    course: Optional[str] = typer.Option(None, "--course", "-c", help="Course code or name contains"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Candidate name contains"),
    availability: Optional[str] = typer.Option(None, "--availability", "-a", help="fulltime or parttime"),
    skill: Optional[str] = typer.Option(None, "--skill", "-s", help="Any skill contains"),
):
    """Show selection statistics for the (filtered) applicant list."""
    service = _get_service()
    criteria = {
        "course_name": course,
        "candidate_name": name,
        "availability": availability,
        "skill_set": skill,
    }
    _print_statistics(service.refresh_statistics(criteria), "Selection Statistics")


@app.command()
def course_stats(course_id: str = typer.Argument(..., help="Course ID or code")):
    """Show statistics for one course with role and availability breakdowns."""
    service = _get_service()
    _print_statistics(service.course_statistics(course_id), f"Course {course_id}")


@app.command()
def normalize_ranks(
    course_id: str = typer.Argument(..., help="Course ID or code"),
    role: Optional[SessionType] = typer.Option(None, "--role", "-r", help="Only this role"),
):
    """Renumber a course's rankings to 1..n, repairing gaps and duplicates."""
    service = _get_service()
    try:
        result = service.normalize_course(course_id, role)
    except (NotFound, PersistenceFailure) as e:
        _fail(str(e))
    if not result.changed:
        console.print("[green]Rankings already contiguous.[/green]")
        return
    console.print(f"[green]✓[/green] Renumbered {len(result.changed)} application(s)")


@app.command()
def report():
    """Administrator reports: chosen per course, multi-course and unchosen candidates."""
    from teachteam.utils.constants import MULTIPLE_COURSES_THRESHOLD

    service = _get_service()
    result = service.selection_report()

    table = Table(title="Candidates Chosen per Course")
    table.add_column("Course", style="cyan")
    table.add_column("Candidate")
    table.add_column("Email", style="dim")
    table.add_column("Role")
    table.add_column("Rank", justify="right")
    for application in result.chosen_per_course:
        table.add_row(
            f"{application.course_code} {_truncate(application.course_name, 25)}",
            application.candidate_name,
            application.candidate_email,
            application.session_type,
            str(application.ranking) if application.ranking is not None else "-",
        )
    console.print(table)

    table = Table(title=f"Chosen for More Than {MULTIPLE_COURSES_THRESHOLD} Courses")
    table.add_column("Candidate", style="cyan")
    table.add_column("Email", style="dim")
    table.add_column("Courses", justify="right")
    table.add_column("Course List")
    for candidate in result.chosen_for_multiple_courses:
        table.add_row(candidate.name, candidate.email, str(candidate.course_count), "\n".join(candidate.courses))
    console.print(table)

    table = Table(title="Not Chosen for Any Course")
    table.add_column("Candidate", style="cyan")
    table.add_column("Email", style="dim")
    table.add_column("Applications", justify="right")
    for candidate in result.not_chosen:
        table.add_row(candidate.name, candidate.email, str(candidate.application_count))
    console.print(table)


@app.command()
def add_course(
    code: str = typer.Argument(..., help="Course code, e.g. COSC2758"),
    name: str = typer.Argument(..., help="Course name"),
    semester: str = typer.Option("Semester 1", "--semester", help="Teaching period"),
    year: int = typer.Option(2025, "--year", help="Teaching year"),
):
    """Add a course to the catalog."""
    from teachteam.data.models import CourseCreate

    try:
        data = CourseCreate(code=code, name=name, semester=semester, year=year)
    except ValidationError as e:
        _fail(e.errors()[0]["msg"])
    courses = _get_courses()
    try:
        if courses.get_by_code(data.code) is not None:
            _fail(f"Course {data.code} already exists")
        course = courses.create_course(data)
    except PersistenceFailure as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Added [cyan]{course.code}[/cyan] {course.name} ({course.id})")


@app.command()
def assign_lecturer(
    course_id: str = typer.Argument(..., help="Course ID or code"),
    email: str = typer.Argument(..., help="Lecturer email"),
):
    """Assign a lecturer to a course."""
    try:
        assigned = _get_courses().assign_lecturer(course_id, email)
    except PersistenceFailure as e:
        _fail(str(e))
    if not assigned:
        _fail(f"Course not found: {course_id}")
    console.print(f"[green]✓[/green] {email.strip().lower()} assigned to [cyan]{course_id}[/cyan]")


if __name__ == "__main__":
    app()
