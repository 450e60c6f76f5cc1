"""
Main CLI application using Typer.

Entry point: python -m hail_sync.cli
CLI Name: hail-sync
"""
import typer

from hail_sync import __version__ as app_version

app = typer.Typer(
    name="hail-sync",
    help="hail-sync CLI - fetch Hail content and manage the Hail connection",
    no_args_is_help=True,
)


@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"hail-sync version {app_version}")


# Register commands
from hail_sync.cli.commands import auth, fetch  # noqa: E402

app.command("init-db")(fetch.init_db)
app.command("process-queue")(fetch.process_queue)
app.command("enqueue")(fetch.enqueue)
app.command("jobs")(fetch.list_jobs)
app.command("authorize-url")(auth.authorize_url)
app.command("exchange-code")(auth.exchange_code)
app.command("set-orgs")(auth.set_organisations)
app.command("status")(auth.status)
