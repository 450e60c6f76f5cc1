"""
Hail connection commands: OAuth authorisation, organisations and status.
"""
from typing import List

import typer
from rich.console import Console

from hail_sync.core.database import get_session_context
from hail_sync.core.time_utils import serialize_datetime
from hail_sync.hail.service import build_hail_client
from hail_sync.services.hail_config_service import HailConfigService

console = Console()


def authorize_url():
    """Print the URL to open to authorise hail-sync with Hail."""
    with get_session_context() as session, build_hail_client(session) as client:
        if not client.tokens.is_ready_to_authorise():
            console.print("[red]Set HAIL_CLIENT_ID and HAIL_CLIENT_SECRET first[/red]")
            raise typer.Exit(code=1)
        console.print(client.tokens.get_authorization_url())


def exchange_code(code: str = typer.Argument(..., help="Authorization code from the Hail redirect")):
    """Exchange an authorization code for tokens and store the Hail user."""
    with get_session_context() as session, build_hail_client(session) as client:
        if not client.tokens.fetch_access_token(code):
            for notice in client.notices.drain():
                console.print(f"[red]{notice.message}[/red]")
            raise typer.Exit(code=1)

        user_id = client.set_user_id()
        console.print(f"[green]Hail authorised[/green] (user {user_id or 'unknown'})")

        organisations = client.get_available_organisations(as_simple_array=True)
        if organisations:
            console.print("Available organisations:")
            for org_id, name in organisations.items():
                console.print(f"  {org_id}  {name}")


def set_organisations(organisation_ids: List[str] = typer.Argument(..., help="Hail organisation ids")):
    """Set the Hail organisations to fetch."""
    with get_session_context() as session:
        config = HailConfigService(session).set_organisation_ids(organisation_ids)
        console.print(f"Organisations: {', '.join(config.organisation_ids) or 'none'}")


def status():
    """Show Hail authorisation and API status."""
    with get_session_context() as session, build_hail_client(session) as client:
        config_service = HailConfigService(session)
        config = config_service.get_or_create()
        state = client.tokens.state

        authorised = "[green]yes[/green]" if client.tokens.is_authorised() else "[red]no[/red]"
        console.print(f"Authorised:       {authorised}")
        console.print(f"Credentials set:  {'yes' if client.tokens.is_ready_to_authorise() else 'no'}")
        console.print(f"User:             {state.user_id or '-'}")
        console.print(f"Token expires:    {serialize_datetime(state.access_token_expire) or '-'}")
        console.print(f"Organisations:    {', '.join(state.organisation_ids) or '-'}")
        api_style = "red" if config_service.is_api_down() else "green"
        console.print(
            f"API status:       [{api_style}]{config.api_status_current or 'unknown'}[/{api_style}]"
            f" (checked {serialize_datetime(config.api_status_checked_at) or 'never'})"
        )
