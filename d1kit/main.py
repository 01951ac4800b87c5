from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Any, Callable, Generator, List, Optional

import typer

from d1kit.config import get_settings
from d1kit.domain.models import DatabaseSettings, Envelope, ReplicationMode
from d1kit.errors import ConfigurationError, D1Error
from d1kit.factory import available_backends, open_session
from d1kit.reporter import print_databases, print_errors, print_query_results
from d1kit.sessions.abstract import AbstractD1Session
from d1kit.sessions.local import LocalSession
from d1kit.utils.logging import configure_logging

app = typer.Typer(help="Manage and query D1 databases, remote or emulated locally.")


@app.callback()
def _configure(
    ctx: typer.Context,
    backend: Optional[str] = typer.Option(
        None,
        "--backend",
        "-b",
        help="Backend to use (local, remote). Defaults to D1_BACKEND.",
    ),
) -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    ctx.obj = {"backend": backend}


@contextmanager
def _session(ctx: typer.Context) -> Generator[AbstractD1Session, None, None]:
    """
    Open the selected backend for one command.

    The local registry does not outlive a process, so local sessions re-attach
    every database file under the storage root first.
    """
    try:
        session = open_session(ctx.obj["backend"])
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(2)
    with session:
        try:
            if isinstance(session, LocalSession):
                session.attach_existing()
            yield session
        except D1Error as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1)


def _resolve(session: AbstractD1Session, ref: str) -> str:
    """Accept either a registered name or an identifier."""
    if ref in session.registry:
        return session.database_id(ref)
    return ref


def _parse_param(raw: str) -> Any:
    """JSON scalars (42, 1.5, null, "quoted") are decoded; anything else is text."""
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def _emit(envelope: Envelope, as_json: bool, render: Callable[[Any], None]) -> None:
    if as_json:
        typer.echo(envelope.model_dump_json(indent=2))
    elif envelope.success:
        render(envelope.result)
    else:
        print_errors(envelope.errors)
    if not envelope.success:
        raise typer.Exit(1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    token = "set" if settings.api_token else "missing"
    typer.echo(
        f"backend={settings.backend} | account={settings.account_id or '-'} token={token} "
        f"api={settings.api_base_url} | local_path={settings.local_path} "
        f"region={settings.local_region}"
    )


@app.command()
def backends() -> None:
    """List available backends."""
    typer.echo("Available backends: " + ", ".join(available_backends()))


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the new database."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """Create a database."""
    with _session(ctx) as session:
        res = session.create_database(name)
        _emit(res, as_json, lambda rec: print_databases([rec]))


@app.command()
def get(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name or UUID."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """Show one database."""
    with _session(ctx) as session:
        res = session.get_database(_resolve(session, database))
        _emit(res, as_json, lambda rec: print_databases([rec]))


@app.command("list")
def list_(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """List databases."""
    with _session(ctx) as session:
        res = session.list_databases()
        _emit(res, as_json, print_databases)


@app.command()
def delete(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name or UUID."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """Delete a database."""
    with _session(ctx) as session:
        db_id = _resolve(session, database)
        res = session.delete_database(db_id)
        _emit(res, as_json, lambda _: typer.echo(f"Deleted {db_id}"))


@app.command()
def update(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name or UUID."),
    replication: ReplicationMode = typer.Option(..., "--replication", "-r", help="Read replication mode."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """Change a database's read replication mode (remote only)."""
    with _session(ctx) as session:
        res = session.update_database(_resolve(session, database), DatabaseSettings(replication=replication))
        _emit(res, as_json, lambda rec: print_databases([rec]))


@app.command()
def query(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name or UUID."),
    sql: str = typer.Argument(..., help="SQL statement to execute."),
    params: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="Positional parameter; repeat for each '?'."
    ),
    raw: bool = typer.Option(False, "--raw", help="Use the raw (columnar) endpoint."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope."),
) -> None:
    """Execute one SQL statement."""
    values = [_parse_param(p) for p in params or []]
    with _session(ctx) as session:
        db_id = _resolve(session, database)
        execute = session.execute_query_raw if raw else session.execute_query
        res = execute(db_id, sql, *values)
        _emit(res, as_json, print_query_results)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
