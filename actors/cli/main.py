"""Module Update Router command-line interface implemented with Typer."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from packages.router_core.main import CONFIG_FILE_ENV, serve
from packages.router_shared.config import RouterSettings, load_settings
from packages.router_shared.identity import (
    DEFAULT_ACCOUNT_NUMBER,
    Principal,
    associate_principal,
    encode_identity,
    internal_principal,
    system_principal,
    user_principal,
)
from resources.substrates.database import DatabaseConnectionError
from services.state.update_store import MigrationExecutionError

SUCCESS_EXIT_CODE = 0
STARTUP_ERROR_EXIT_CODE = 1
CONFIG_ERROR_EXIT_CODE = 2


@dataclass(frozen=True)
class IdentityOptions:
    """Options shared by every identity subcommand."""

    type: str | None
    auth_type: str | None
    account_number: str
    encode: bool


def _set_nested(target: dict[str, Any], section: str, key: str, value: Any) -> None:
    """Record one override when the flag was given."""
    if value is None:
        return
    target.setdefault(section, {})[key] = value


def _emit_principal(principal: Principal, options: IdentityOptions) -> None:
    """Print one principal as JSON, or as a ready-to-use header value."""
    if options.type:
        identity = principal.identity.model_copy(update={"type": options.type})
        principal = principal.model_copy(update={"identity": identity})
    if options.encode:
        typer.echo(encode_identity(principal))
        return
    typer.echo(principal.model_dump_json(by_alias=True, exclude_none=True))


def _require_identity_options(ctx: typer.Context) -> IdentityOptions:
    """Return identity options stored by the group callback."""
    options = ctx.obj
    if not isinstance(options, IdentityOptions):
        raise typer.BadParameter("identity options were not initialized")
    return options


app = typer.Typer(no_args_is_help=True, help="Module Update Router command-line interface")
identity_app = typer.Typer(
    no_args_is_help=True, help="Generate X-Rh-Identity payloads for testing"
)


@app.command("serve")
def serve_command(
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar=CONFIG_FILE_ENV,
        help="YAML settings file",
    ),
    host: str | None = typer.Option(None, help="Listen host"),
    port: int | None = typer.Option(None, help="Listen port"),
    path_prefix: str | None = typer.Option(
        None, help="Comma-separated API path prefixes"
    ),
    app_name: str | None = typer.Option(None, help="Application name path segment"),
    api_version: str | None = typer.Option(None, help="API version path segment"),
    db_url: str | None = typer.Option(None, help="SQLAlchemy database URL"),
    db_driver: str | None = typer.Option(
        None, help="Database driver when no URL is given (sqlite|postgresql)"
    ),
    reset: bool | None = typer.Option(
        None, "--reset/--no-reset", help="Drop all tables before migrating"
    ),
    seed_path: Path | None = typer.Option(None, help="SQL file to run after migrating"),
    log_level: str | None = typer.Option(None, help="Log level"),
    log_json: bool | None = typer.Option(
        None, "--log-json/--log-text", help="Log output format"
    ),
    event_bus: bool | None = typer.Option(
        None, "--event-bus/--no-event-bus", help="Mirror events to Redis"
    ),
    event_bus_url: str | None = typer.Option(None, help="Redis URL for the mirror"),
    topic: str | None = typer.Option(None, help="Redis list receiving events"),
    event_buffer: int | None = typer.Option(None, help="Local mirror buffer size"),
) -> None:
    """Run the HTTP router until interrupted."""
    overrides: dict[str, Any] = {}
    _set_nested(overrides, "http", "host", host)
    _set_nested(overrides, "http", "port", port)
    _set_nested(overrides, "http", "path_prefix", path_prefix)
    _set_nested(overrides, "http", "app_name", app_name)
    _set_nested(overrides, "http", "api_version", api_version)
    _set_nested(overrides, "database", "url", db_url)
    _set_nested(overrides, "database", "driver", db_driver)
    _set_nested(overrides, "database", "reset", reset)
    _set_nested(overrides, "database", "seed_path", seed_path)
    _set_nested(overrides, "logging", "level", log_level)
    _set_nested(overrides, "logging", "json_output", log_json)
    _set_nested(overrides, "event_bus", "enabled", event_bus)
    _set_nested(overrides, "event_bus", "url", event_bus_url)
    _set_nested(overrides, "event_bus", "topic", topic)
    _set_nested(overrides, "event_bus", "event_buffer", event_buffer)

    try:
        settings: RouterSettings = load_settings(config_path=config, **overrides)
    except ValidationError as exc:
        typer.echo(f"error: invalid configuration: {exc}", err=True)
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE) from exc

    try:
        serve(settings)
    except (
        DatabaseConnectionError,
        MigrationExecutionError,
        SQLAlchemyError,
        sqlite3.Error,
        OSError,
    ) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=STARTUP_ERROR_EXIT_CODE) from exc
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


@identity_app.callback()
def identity_main(
    ctx: typer.Context,
    type: str | None = typer.Option(
        None, "--type", help="Override the identity.type field"
    ),
    auth_type: str | None = typer.Option(
        None, "--auth-type", help="Set the identity.auth_type field"
    ),
    account_number: str = typer.Option(
        DEFAULT_ACCOUNT_NUMBER,
        "--account-number",
        help="Set the identity.account_number field",
    ),
    encode: bool = typer.Option(
        False, "--encode", help="Emit the base64 header value instead of JSON"
    ),
) -> None:
    """Store options shared by identity subcommands."""
    ctx.obj = IdentityOptions(
        type=type,
        auth_type=auth_type,
        account_number=account_number,
        encode=encode,
    )


@identity_app.command("user")
def identity_user(
    ctx: typer.Context,
    is_active: bool = typer.Option(True, "--is-active/--not-active"),
    locale: str = typer.Option("en_US", "--locale"),
    is_org_admin: bool = typer.Option(False, "--is-org-admin/--not-org-admin"),
    username: str = typer.Option("test@redhat.com", "--username"),
    email: str = typer.Option("test@redhat.com", "--email"),
    first_name: str = typer.Option("test", "--firstname"),
    last_name: str = typer.Option("user", "--lastname"),
    is_internal: bool = typer.Option(True, "--is-internal/--not-internal"),
) -> None:
    """Generate a user identity."""
    options = _require_identity_options(ctx)
    principal = user_principal(
        account_number=options.account_number,
        auth_type=options.auth_type or "basic-auth",
        is_active=is_active,
        locale=locale,
        is_org_admin=is_org_admin,
        username=username,
        email=email,
        first_name=first_name,
        last_name=last_name,
        is_internal=is_internal,
    )
    _emit_principal(principal, options)


@identity_app.command("internal")
def identity_internal(
    ctx: typer.Context,
    org_id: str = typer.Option("10001", "--orgid"),
) -> None:
    """Generate an internal identity."""
    options = _require_identity_options(ctx)
    principal = internal_principal(
        account_number=options.account_number,
        auth_type=options.auth_type,
        org_id=org_id,
    )
    _emit_principal(principal, options)


@identity_app.command("system")
def identity_system(
    ctx: typer.Context,
    cn: str = typer.Option("760e4a9b-c0cc-4538-8b8c-09d1a6335dd2", "--cn"),
) -> None:
    """Generate a system identity."""
    options = _require_identity_options(ctx)
    principal = system_principal(
        account_number=options.account_number,
        auth_type=options.auth_type or "cert-auth",
        cn=cn,
    )
    _emit_principal(principal, options)


@identity_app.command("associate")
def identity_associate(
    ctx: typer.Context,
    role: list[str] | None = typer.Option(
        None, "--role", help="Associate role; repeat for several"
    ),
    email: str = typer.Option("test@redhat.com", "--email"),
    given_name: str = typer.Option("test", "--givenname"),
    rhat_uuid: str = typer.Option("204f8e50-40b4-45d2-aa84-4bd7382e94d3", "--rhatuuid"),
    surname: str = typer.Option("user", "--surname"),
) -> None:
    """Generate an associate identity."""
    options = _require_identity_options(ctx)
    principal = associate_principal(
        account_number=options.account_number,
        auth_type=options.auth_type or "basic-auth",
        roles=role or (),
        email=email,
        given_name=given_name,
        rhat_uuid=rhat_uuid,
        surname=surname,
    )
    _emit_principal(principal, options)


app.add_typer(identity_app, name="identity")


def run() -> None:
    """Console-script entrypoint."""
    app()


if __name__ == "__main__":
    app()
