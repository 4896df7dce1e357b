"""Zendesk connector CLI — Typer app with all subcommands."""

from __future__ import annotations

import json
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from zendesk_connector import __version__

console = Console(stderr=True)

app = typer.Typer(
    name="zendesk-connector",
    help=(
        "Zendesk connector — sync users, groups, organizations and roles into an access graph.\n\n"
        "Credentials come from ZENDESK_SUBDOMAIN, ZENDESK_EMAIL and ZENDESK_API_TOKEN "
        "or the matching global options."
    ),
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    epilog=(
        "Common commands:\n"
        "  zendesk-connector validate\n"
        "  zendesk-connector sync --output sync.json\n"
        "  zendesk-connector grant --resource-type group --resource-id 42 --slug member --principal-id 7\n"
        "  zendesk-connector revoke --resource-type org --resource-id 9 --slug agent --principal-id 7\n"
    ),
)

_state: dict = {}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]zendesk-connector[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    subdomain: Optional[str] = typer.Option(None, "--subdomain", help="Zendesk subdomain. ($ZENDESK_SUBDOMAIN)"),
    email: Optional[str] = typer.Option(None, "--email", help="Zendesk account email. ($ZENDESK_EMAIL)"),
    api_token: Optional[str] = typer.Option(None, "--api-token", help="Zendesk API token. ($ZENDESK_API_TOKEN)"),
    org: Optional[List[str]] = typer.Option(
        None, "--org", help="Organization name to sync; repeatable. ($ZENDESK_ORGS)"
    ),
    sync_users: Optional[bool] = typer.Option(
        None, "--sync-users/--no-sync-users", help="Also sync every account as a plain user."
    ),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="text or json. ($ZENDESK_LOG_FORMAT)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logs and full tracebacks."),
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit.",
        callback=_version_callback, is_eager=True,
    ),
) -> None:
    """Zendesk connector."""
    _state.clear()
    _state.update(
        subdomain=subdomain,
        email=email,
        api_token=api_token,
        orgs=list(org) if org else None,
        sync_users=sync_users,
        log_format=log_format,
        verbose=verbose,
    )


def _settings():
    from zendesk_connector.config import load_settings, validate_settings
    from zendesk_connector.logs import configure_logging

    overrides = {k: v for k, v in _state.items() if k != "verbose"}
    if _state.get("verbose"):
        overrides["log_level"] = "DEBUG"
    settings = load_settings(**overrides)
    validate_settings(settings)
    configure_logging(settings.log_level, settings.log_format)
    return settings


def _connector():
    from zendesk_connector.connector.connector import Connector

    return Connector.from_settings(_settings())


# ── validate ─────────────────────────────────────────────────────

@app.command()
def validate() -> None:
    """Check that the configured credentials can reach Zendesk.

    Example:
      zendesk-connector validate
    """
    _run_safe(_validate_impl)


def _validate_impl() -> None:
    connector = _connector()
    try:
        email = connector.validate()
    finally:
        connector.close()
    console.print(f"[green]Credentials OK[/green] — authenticated as {email}")


# ── sync ─────────────────────────────────────────────────────────

@app.command()
def sync(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the resource graph as JSON to this file (default: stdout)."
    ),
) -> None:
    """Run one full sync pass and emit resources, entitlements and grants.

    Exit code 1 when any resource type failed; its error is listed in the output.

    Example:
      zendesk-connector sync --output sync.json
    """
    _run_safe(lambda: _sync_impl(output))


def _sync_impl(output: Optional[Path]) -> None:
    from zendesk_connector.connector.sync import SyncRunner

    connector = _connector()
    try:
        result = SyncRunner(connector).run()
    finally:
        connector.close()

    payload = json.dumps(result.to_dict(), indent=2, sort_keys=True)
    if output:
        output.write_text(payload + "\n", encoding="utf-8")
    else:
        sys.stdout.write(payload + "\n")

    table = Table(title="Sync summary", border_style="blue")
    table.add_column("Resource type")
    table.add_column("Resources", justify="right")
    table.add_column("Entitlements", justify="right")
    table.add_column("Grants", justify="right")
    for resource_type, counts in sorted(result.summary().items()):
        table.add_row(
            resource_type,
            str(counts["resources"]),
            str(counts["entitlements"]),
            str(counts["grants"]),
        )
    console.print(table)

    for failure in result.errors:
        console.print(f"[red bold]Failed:[/red bold] {failure.resource_type}: {failure.message}")
    if not result.ok:
        raise SystemExit(1)


# ── grant / revoke ───────────────────────────────────────────────

_RESOURCE_TYPE_OPT = typer.Option(..., "--resource-type", help="Type owning the entitlement: group or org.")
_RESOURCE_ID_OPT = typer.Option(..., "--resource-id", help="Upstream id of the group or organization.")
_SLUG_OPT = typer.Option(..., "--slug", help="Entitlement slug, e.g. member, admin, agent.")
_PRINCIPAL_TYPE_OPT = typer.Option("team_member", "--principal-type", help="Principal resource type.")
_PRINCIPAL_ID_OPT = typer.Option(..., "--principal-id", help="Upstream id of the principal.")


@app.command()
def grant(
    resource_type: str = _RESOURCE_TYPE_OPT,
    resource_id: str = _RESOURCE_ID_OPT,
    slug: str = _SLUG_OPT,
    principal_type: str = _PRINCIPAL_TYPE_OPT,
    principal_id: str = _PRINCIPAL_ID_OPT,
) -> None:
    """Grant an entitlement to a principal upstream.

    Example:
      zendesk-connector grant --resource-type group --resource-id 42 --slug member --principal-id 7
    """
    _run_safe(lambda: _mutate_impl("grant", resource_type, resource_id, slug, principal_type, principal_id))


@app.command()
def revoke(
    resource_type: str = _RESOURCE_TYPE_OPT,
    resource_id: str = _RESOURCE_ID_OPT,
    slug: str = _SLUG_OPT,
    principal_type: str = _PRINCIPAL_TYPE_OPT,
    principal_id: str = _PRINCIPAL_ID_OPT,
) -> None:
    """Revoke a principal's entitlement upstream.

    Example:
      zendesk-connector revoke --resource-type org --resource-id 9 --slug agent --principal-id 7
    """
    _run_safe(lambda: _mutate_impl("revoke", resource_type, resource_id, slug, principal_type, principal_id))


def _mutate_impl(
    action: str,
    resource_type: str,
    resource_id: str,
    slug: str,
    principal_type: str,
    principal_id: str,
) -> None:
    from zendesk_connector.connector.resources import Entitlement, Grant, Resource, ResourceId

    resource = Resource(id=ResourceId(resource_type, resource_id), display_name="")
    principal = Resource(id=ResourceId(principal_type, principal_id), display_name="")

    connector = _connector()
    try:
        if action == "grant":
            result = connector.grant(principal, Entitlement(resource=resource, slug=slug))
        else:
            result = connector.revoke(Grant(resource=resource, entitlement_slug=slug, principal_id=principal.id))
    finally:
        connector.close()

    if result.already_applied:
        console.print(f"[yellow]Nothing to {action}[/yellow] — {result.entitlement_id} for {result.principal_id}")
    else:
        console.print(
            f"[green]{action.capitalize()} applied[/green] — {result.entitlement_id} for {result.principal_id}"
            f" (upstream id {result.upstream_id})"
        )


# ── version ──────────────────────────────────────────────────────

@app.command()
def version() -> None:
    """Show connector version, Python version, and platform."""
    import platform

    table = Table(show_header=False, border_style="blue", title="zendesk-connector", title_style="bold")
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Version", __version__)
    table.add_row("Python", platform.python_version())
    table.add_row("Platform", f"{platform.system()} {platform.machine()}")

    c = Console()
    c.print(table)


def _run_safe(fn) -> None:
    """Run a function with clean error handling."""
    verbose = bool(_state.get("verbose"))
    try:
        fn()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise SystemExit(130)
    except Exception as e:
        console.print(f"\n[red bold]Error:[/red bold] {e}")
        if verbose:
            console.print(traceback.format_exc())
        else:
            console.print("[dim]Run with --verbose for full traceback.[/dim]")
        raise SystemExit(1)
