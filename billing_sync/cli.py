"""CLI for Billing Sync using Typer."""

import asyncio
import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from billing_sync.config import get_settings
from billing_sync.constants import OPERATION_CUSTOMERS, OPERATION_REPLAY, OPERATION_WEBHOOKS
from billing_sync.errors import BillingSyncError
from billing_sync.utils import setup_logging

# CLI styles
STYLE_HEADER = "bold blue"
STYLE_SUCCESS = "bold green"
STYLE_WARNING = "bold yellow"
STYLE_ERROR = "bold red"

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="billing-sync",
    help="Billing Sync - keep profiles in step with Stripe subscriptions.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on")] = 8000,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
):
    """Run the HTTP service."""
    import uvicorn

    uvicorn.run("billing_sync.app:app", host=host, port=port, reload=reload)


@app.command("check-config")
def check_config():
    """Show which operations have every setting they need."""
    settings = get_settings()

    table = Table(title="Billing Sync configuration", header_style=STYLE_HEADER)
    table.add_column("Operation")
    table.add_column("Status")
    table.add_column("Missing")

    all_ok = True
    for operation in (OPERATION_CUSTOMERS, OPERATION_WEBHOOKS, OPERATION_REPLAY):
        missing = settings.missing_for(operation)
        if missing:
            all_ok = False
            table.add_row(operation, f"[{STYLE_ERROR}]unavailable[/{STYLE_ERROR}]", ", ".join(missing))
        else:
            table.add_row(operation, f"[{STYLE_SUCCESS}]ready[/{STYLE_SUCCESS}]", "")

    console.print(table)
    console.print(f"Profile store backend: {settings.profile_store_backend}")
    if not all_ok:
        raise typer.Exit(1)


async def _replay(event_id: str):
    from billing_sync.http_client import close_http_client
    from billing_sync.services.billing_service import init_stripe, retrieve_event
    from billing_sync.services.profile_store import open_profile_store
    from billing_sync.services.webhook_service import process_event

    init_stripe()
    try:
        event = await retrieve_event(event_id)
        async with open_profile_store() as store:
            return await process_event(event, store)
    finally:
        await close_http_client()


@app.command()
def replay(
    event_id: Annotated[str, typer.Argument(help="Stripe event id (evt_...)")],
    verbose: Annotated[Optional[bool], typer.Option(help="Verbose output")] = None,
):
    """
    Re-apply a Stripe event fetched from the Stripe API.

    Useful after fixing a provisioning gap: the event is read back from
    Stripe's event log, so no webhook signature is involved.
    """
    settings = get_settings()
    setup_logging(settings.log_level, verbose=bool(verbose))

    missing = settings.missing_for(OPERATION_REPLAY)
    if missing:
        console.print(f"[{STYLE_ERROR}]Missing settings: {', '.join(missing)}[/{STYLE_ERROR}]")
        raise typer.Exit(1)

    try:
        outcome = asyncio.run(_replay(event_id))
    except BillingSyncError as e:
        console.print(f"[{STYLE_ERROR}]Replay failed: {e.message}[/{STYLE_ERROR}]")
        raise typer.Exit(1)

    if outcome.applied:
        console.print(
            f"[{STYLE_SUCCESS}]{outcome.event_kind}: customer {outcome.customer_id} "
            f"is now {outcome.status}[/{STYLE_SUCCESS}]"
        )
    else:
        console.print(f"[{STYLE_WARNING}]{outcome.event_kind}: no profile change. {outcome.detail}[/{STYLE_WARNING}]")


if __name__ == "__main__":
    app()
