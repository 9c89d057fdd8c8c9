"""Command-line interface for pipedrive-deals."""

import json
import logging
import os
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .api import PipedriveClient
from .config import API_BASE_URL, DEAL_STATUSES, VISIBLE_TO_VALUES
from .exceptions import PipedriveError

console = Console()


def get_api_token() -> str:
    """Get API token from environment."""
    token = os.environ.get("PIPEDRIVE_API_TOKEN")
    if not token:
        raise click.ClickException(
            "PIPEDRIVE_API_TOKEN environment variable not set.\n"
            "Set it with: export PIPEDRIVE_API_TOKEN=your_token"
        )
    return token


def configure_logging(verbose: bool) -> None:
    """Route library logs through rich when --verbose is given."""
    if not verbose:
        return
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    root.setLevel(logging.DEBUG)
    root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    # httpx logs the wire URL, which carries api_token on reads
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def call_api(ctx: click.Context, action: Callable[[PipedriveClient], Any]) -> Any:
    """Open a client from the group options and run one API call."""
    token = get_api_token()
    base_url = os.environ.get("PIPEDRIVE_BASE_URL", API_BASE_URL)
    try:
        with PipedriveClient(token, base_url=base_url, debug=ctx.obj["debug"]) as client:
            return action(client)
    except PipedriveError as e:
        raise click.ClickException(str(e))


def unwrap(result: Any, debug: bool) -> Any:
    """Extract the data payload, failing on an unsuccessful API response."""
    if debug:
        return result
    if not isinstance(result, dict):
        raise click.ClickException(f"Unexpected API response: {result!r}")
    if not result.get("success"):
        raise click.ClickException(f"API error: {result.get('error', 'Unknown error')}")
    return result.get("data")


def parse_field_assignment(value: str) -> tuple[str, Any]:
    """Parse KEY=VALUE, decoding the value as JSON when possible."""
    if "=" not in value:
        raise click.BadParameter(f"Expected KEY=VALUE, got '{value}'")
    key, raw = value.split("=", 1)
    key = key.strip()
    if not key:
        raise click.BadParameter(f"Empty field key in '{value}'")
    try:
        return key, json.loads(raw)
    except ValueError:
        return key, raw


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option(
    "--debug",
    is_flag=True,
    help="Print the outgoing request and transport info instead of the response",
)
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP requests")
@click.pass_context
def main(ctx: click.Context, debug: bool, verbose: bool) -> None:
    """Pipedrive deals CLI - Read and create deals in Pipedrive CRM."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    configure_logging(verbose)


@main.group()
def deals() -> None:
    """List, show and create deals."""
    pass


@deals.command("list")
@click.option("--filter-id", type=int, default=None, help="ID of the filter to use")
@click.option("--start", type=int, default=None, help="Number of items to skip")
@click.option("--limit", type=int, default=None, help="Maximum number of items in response")
@click.option("--sort", default=None, help="Sort fields, e.g. 'title ASC, value DESC'")
@click.option("--owned-by-you", is_flag=True, help="Only deals owned by the user")
@click.option("--json", "-j", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_deals_cmd(
    ctx: click.Context,
    filter_id: int | None,
    start: int | None,
    limit: int | None,
    sort: str | None,
    owned_by_you: bool,
    output_json: bool,
) -> None:
    """List deals.

    Examples:

        pipedrive-deals deals list --limit 10

        pipedrive-deals deals list --filter-id 5 --sort "title ASC"
    """
    options = {
        "filter_id": filter_id,
        "start": start,
        "limit": limit,
        "sort": sort,
        "owned_by_you": 1 if owned_by_you else None,
    }
    result = call_api(ctx, lambda client: client.get_deals(options))
    debug = ctx.obj["debug"]
    data = unwrap(result, debug) or []

    if output_json or debug:
        print_json(data)
        return

    table = Table(title="Deals")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Value", style="yellow")
    table.add_column("Status", style="dim")

    for deal in data:
        value = deal.get("value")
        currency = deal.get("currency") or ""
        table.add_row(
            str(deal.get("id", "")),
            deal.get("title") or "",
            f"{value} {currency}".strip() if value is not None else "",
            deal.get("status") or "",
        )

    console.print(table)
    console.print(f"[dim]Total: {len(data)} deals[/dim]")


@deals.command("get")
@click.argument("deal_id")
@click.option("--json", "-j", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def get_deal_cmd(ctx: click.Context, deal_id: str, output_json: bool) -> None:
    """Show a single deal."""
    result = call_api(ctx, lambda client: client.get_deal(deal_id))
    debug = ctx.obj["debug"]
    data = unwrap(result, debug)

    if output_json or debug or not isinstance(data, dict):
        print_json(data)
        return

    table = Table(title=f"Deal {deal_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, default=str)
        table.add_row(key, "" if value is None else str(value))

    console.print(table)


@deals.command("create")
@click.argument("title")
@click.option("--value", default=None, help="Value of the deal")
@click.option("--currency", default=None, help="Three letter currency code")
@click.option("--user-id", type=int, default=None, help="Owner user ID")
@click.option("--person-id", type=int, default=None, help="Linked person ID")
@click.option("--org-id", type=int, default=None, help="Linked organization ID")
@click.option("--stage-id", type=int, default=None, help="Pipeline stage ID")
@click.option("--status", type=click.Choice(DEAL_STATUSES), default=None, help="Deal status")
@click.option("--lost-reason", default=None, help="Why the deal was lost")
@click.option("--add-time", default=None, help="Creation time in UTC (YYYY-MM-DD HH:MM:SS)")
@click.option(
    "--visible-to",
    type=click.Choice([str(v) for v in VISIBLE_TO_VALUES]),
    default=None,
    help="1 = private, 3 = shared",
)
@click.option(
    "--field",
    "-f",
    "extra_fields",
    multiple=True,
    help="Extra field as KEY=VALUE (custom fields, repeatable)",
)
@click.pass_context
def create_deal_cmd(
    ctx: click.Context,
    title: str,
    value: str | None,
    currency: str | None,
    user_id: int | None,
    person_id: int | None,
    org_id: int | None,
    stage_id: int | None,
    status: str | None,
    lost_reason: str | None,
    add_time: str | None,
    visible_to: str | None,
    extra_fields: tuple[str, ...],
) -> None:
    """Create a deal.

    Examples:

        pipedrive-deals deals create "Big contract" --value 5000 --currency EUR

        pipedrive-deals deals create "Renewal" -f 9dc80c5cb1d9=Gold --visible-to 3
    """
    fields: dict[str, Any] = dict(parse_field_assignment(f) for f in extra_fields)
    fields.update(
        {
            key: val
            for key, val in {
                "value": value,
                "currency": currency,
                "user_id": user_id,
                "person_id": person_id,
                "org_id": org_id,
                "stage_id": stage_id,
                "status": status,
                "lost_reason": lost_reason,
                "add_time": add_time,
                "visible_to": int(visible_to) if visible_to else None,
            }.items()
            if val is not None
        }
    )

    result = call_api(ctx, lambda client: client.create_deal(title, fields))
    debug = ctx.obj["debug"]
    data = unwrap(result, debug)

    if debug:
        print_json(data)
        return

    deal_id = data.get("id") if isinstance(data, dict) else None
    console.print(f"[green]Created deal {deal_id}:[/green] {title}")


@main.group()
def fields() -> None:
    """Inspect deal field definitions."""
    pass


@fields.command("list")
@click.option("--custom-only", is_flag=True, help="Show only custom fields (edit_flag=True)")
@click.option("--json", "-j", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_fields_cmd(ctx: click.Context, custom_only: bool, output_json: bool) -> None:
    """List deal fields."""
    result = call_api(ctx, lambda client: client.get_deal_fields())
    debug = ctx.obj["debug"]
    data = unwrap(result, debug) or []

    # Filter custom fields if requested
    if custom_only and not debug:
        data = [f for f in data if f.get("edit_flag")]

    if output_json or debug:
        print_json(data)
        return

    table = Table(title="Deal Fields")
    table.add_column("ID", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Type", style="yellow")
    if not custom_only:
        table.add_column("Custom", style="dim")

    for field_def in data:
        row = [
            str(field_def.get("id", "")),
            field_def.get("key", ""),
            field_def.get("name", ""),
            field_def.get("field_type", ""),
        ]
        if not custom_only:
            row.append("Yes" if field_def.get("edit_flag") else "")
        table.add_row(*row)

    console.print(table)
    console.print(f"[dim]Total: {len(data)} fields[/dim]")


@fields.command("get")
@click.argument("field_id")
@click.option("--json", "-j", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def get_field_cmd(ctx: click.Context, field_id: str, output_json: bool) -> None:
    """Show a single deal field, including enum options."""
    result = call_api(ctx, lambda client: client.get_deal_field(field_id))
    debug = ctx.obj["debug"]
    data = unwrap(result, debug)

    if output_json or debug or not isinstance(data, dict):
        print_json(data)
        return

    console.print(f"[bold]{data.get('name', '')}[/bold] [dim]({data.get('key', '')})[/dim]")
    console.print(f"Type: [yellow]{data.get('field_type', '')}[/yellow]")

    options = data.get("options") or []
    if options:
        table = Table(title="Options")
        table.add_column("ID", style="dim")
        table.add_column("Label", style="white")
        for option in options:
            table.add_row(str(option.get("id", "")), option.get("label", ""))
        console.print(table)
