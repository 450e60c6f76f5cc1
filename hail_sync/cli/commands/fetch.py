"""
Fetch queue commands.
"""
import typer
from rich.console import Console
from rich.table import Table

from hail_sync.core.database import create_db_and_tables, get_session_context
from hail_sync.core.exceptions import FetchJobFailedError
from hail_sync.core.logging_config import setup_logging
from hail_sync.hail.fetch_queue import FetchQueueProcessor
from hail_sync.models.enums import JobStatus
from hail_sync.services.fetch_job_service import FetchJobService

console = Console()

STATUS_STYLES = {
    JobStatus.STARTING: "cyan",
    JobStatus.RUNNING: "yellow",
    JobStatus.DONE: "green",
    JobStatus.ERROR: "red",
}


def init_db():
    """Create or migrate the database schema."""
    setup_logging()
    create_db_and_tables()
    console.print("[green]Database ready[/green]")


def process_queue():
    """Run every queued fetch job. Exits with code 1 when a job fails."""
    setup_logging()
    with get_session_context() as session:
        try:
            jobs = FetchQueueProcessor(session).run()
        except FetchJobFailedError as e:
            console.print(f"[red]Fetch job {e.job_id} failed after {e.units_done} unit(s):[/red] {e.message}")
            raise typer.Exit(code=1)

        if not jobs:
            console.print("No fetch jobs waiting")
            return
        for job in jobs:
            console.print(
                f"[green]Job {job.id}[/green] ({job.to_fetch}) {job.status.value}: "
                f"{job.global_done}/{job.global_total} unit(s)"
            )


def enqueue(
    to_fetch: str = typer.Argument("*", help='Hail object type to fetch, or "*" for everything'),
):
    """Queue a fetch job."""
    with get_session_context() as session:
        try:
            job = FetchJobService(session).enqueue(to_fetch)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=2)
        console.print(f"Fetch job {job.id} queued for {job.to_fetch}")


def list_jobs(limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of jobs to show")):
    """Show recent fetch jobs."""
    with get_session_context() as session:
        jobs = FetchJobService(session).list_jobs(limit)

        table = Table(title="Fetch jobs")
        table.add_column("ID", justify="right")
        table.add_column("Target")
        table.add_column("Status")
        table.add_column("Progress", justify="right")
        table.add_column("Current")
        table.add_column("Created")
        table.add_column("Error")
        for job in jobs:
            style = STATUS_STYLES.get(job.status, "white")
            current = f"{job.current_type} {job.current_done}/{job.current_total}" if job.current_type else ""
            table.add_row(
                str(job.id),
                job.to_fetch,
                f"[{style}]{job.status.value}[/{style}]",
                f"{job.global_done}/{job.global_total} ({job.progress_percent}%)",
                current,
                job.created_at.strftime("%Y-%m-%d %H:%M"),
                job.error_message or "",
            )
        console.print(table)
