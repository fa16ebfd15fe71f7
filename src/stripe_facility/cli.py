"""stripe-facility CLI - Command line interface."""

from __future__ import annotations

import json
import logging
import sys

import click
import structlog
from rich.console import Console
from rich.table import Table

from stripe_facility.core.exceptions import FacilityError, format_error_for_user

console = Console()

BANNER = "stripe-facility :: Stripe webhooks, verified"


def _configure_logging(log_level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    help="Log level (default: info, use --verbose for debug)",
)
def main(verbose: bool, log_level: str):
    """stripe-facility - Stripe resource clients and webhook verification."""
    _configure_logging("debug" if verbose else log_level)


@main.command()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to YAML or TOML config file",
)
@click.option("--host", default=None, help="Bind host (default: STRIPE_FACILITY_HOST or 127.0.0.1)")
@click.option("--port", "-p", type=int, default=None, help="Bind port (default: STRIPE_FACILITY_PORT or 8000)")
def serve(config_file: str | None, host: str | None, port: int | None):
    """Serve the webhook endpoints.

    Examples:

        stripe-facility serve --port 8000

        stripe-facility serve --config facility.yaml
    """
    from stripe_facility.core.config import get_settings, settings_from_file
    from stripe_facility.server import run_server

    try:
        settings = settings_from_file(config_file) if config_file else get_settings()
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        settings = settings.model_copy(update=overrides)

    console.print(BANNER, style="cyan")
    console.print(
        f"Listening on http://{settings.host}:{settings.port} "
        f"([bold]{settings.environment.value}[/bold])",
        style="yellow",
    )

    try:
        run_server(settings)
    except FacilityError as e:
        console.print(f"[red]Error:[/red] {format_error_for_user(e)}")
        sys.exit(1)


@main.command()
@click.argument("payload_file", type=click.File("rb"))
@click.option(
    "--secret",
    envvar="STRIPE_FACILITY_WEBHOOK_SECRET_CLI",
    required=True,
    help="Webhook signing secret",
)
@click.option("--timestamp", "-t", type=int, default=None, help="Signing time (default: now)")
def sign(payload_file, secret: str, timestamp: int | None):
    """Print a Stripe-Signature header for a payload file.

    Use "-" to read the payload from stdin.

    Examples:

        stripe-facility sign event.json --secret whsec_test

        curl -H "Stripe-Signature: $(stripe-facility sign event.json)" \\
             --data-binary @event.json http://127.0.0.1:8000/webhooks/invoice
    """
    from stripe_facility.webhooks.verifier import generate_signature_header

    payload = payload_file.read()
    click.echo(generate_signature_header(payload, secret, timestamp))


@main.command()
@click.argument("payload_file", type=click.File("rb"))
@click.option("--header", "-H", "signature_header", default=None, help="Stripe-Signature header value")
@click.option(
    "--secret",
    envvar="STRIPE_FACILITY_WEBHOOK_SECRET_CLI",
    required=True,
    help="Webhook signing secret",
)
@click.option("--tolerance", type=click.IntRange(min=0), default=300, help="Timestamp tolerance in seconds (default: 300)")
@click.option("--now", type=int, default=None, help="Current time override (Unix seconds)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def verify(
    payload_file,
    signature_header: str | None,
    secret: str,
    tolerance: int,
    now: int | None,
    json_output: bool,
):
    """Verify a payload file against a Stripe-Signature header.

    Exits with status 1 when verification fails.

    Examples:

        stripe-facility verify event.json -H "t=1700000000,v1=..." --secret whsec_test
    """
    from stripe_facility.webhooks.verifier import Verified, verify_signature

    payload = payload_file.read()
    result = verify_signature(payload, signature_header, secret, tolerance, now=now)

    if isinstance(result, Verified):
        output = {
            "status": result.status.value,
            "event_id": result.event.event_id,
            "event_type": result.event.event_type,
        }
    else:
        output = {"status": result.status.value, "reason": result.reason}

    if json_output:
        click.echo(json.dumps(output))
    elif result:
        console.print(
            f"[green]valid[/green] {output['event_type'] or '-'} ({output['event_id'] or '-'})"
        )
    else:
        console.print(f"[red]{output['status']}[/red]: {output['reason']}")

    if not result:
        sys.exit(1)


@main.command()
def version():
    """Show version information."""
    from stripe_facility import __version__

    console.print(BANNER, style="cyan")
    console.print(f"[bold]Version:[/bold] {__version__}")
    console.print(f"[bold]Python:[/bold] {sys.version}")


@main.group()
def config():
    """View configuration settings.

    All settings can be configured via environment variables with the
    STRIPE_FACILITY_ prefix. Secrets are always redacted.

    Examples:

        stripe-facility config show

        stripe-facility config show --json
    """
    pass


@config.command("show")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--section", "-s", help="Show only specific section (credentials, webhooks, api, server)")
def config_show(json_output: bool, section: str | None):
    """Show current configuration settings.

    Values come from environment variables, a .env file or defaults.
    """
    from stripe_facility.core.config import get_settings

    try:
        display = get_settings().to_display_dict()
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    environment = display.pop("environment")
    if section:
        section = section.lower()
        if section not in display:
            console.print(f"[red]Unknown section:[/red] {section}")
            console.print(f"[dim]Available: {', '.join(display.keys())}[/dim]")
            sys.exit(1)
        display = {section: display[section]}

    if json_output:
        click.echo(json.dumps({"environment": environment, **display}, indent=2))
        return

    console.print(f"[bold]Environment:[/bold] {environment}\n")

    for section_name, settings in display.items():
        table = Table(title=section_name.title())
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        table.add_column("Env Variable", style="dim")

        for key, value in settings.items():
            table.add_row(key, str(value), f"STRIPE_FACILITY_{key.upper()}")

        console.print(table)
        console.print()


if __name__ == "__main__":
    main()
