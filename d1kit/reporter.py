from __future__ import annotations

from typing import Any, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from d1kit.domain.models import ApiError, DatabaseRecord, QueryResult


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    return escape(str(value))


def print_databases(records: Sequence[DatabaseRecord], console: Optional[Console] = None) -> None:
    """
    Render database records as a rich table, newest first.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No databases.[/yellow]")
        return

    table = Table(title="D1 Databases", box=box.ROUNDED)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("UUID", style="magenta", no_wrap=True)
    table.add_column("Created", style="green")
    table.add_column("Size (bytes)", justify="right", style="yellow")
    table.add_column("Tables", justify="right", style="blue")
    table.add_column("Replication", style="red")
    table.add_column("Version")

    for rec in sorted(records, key=lambda r: r.created_at, reverse=True):
        table.add_row(
            escape(rec.name) if rec.name else "[dim]-[/dim]",
            rec.uuid,
            rec.created_at,
            f"{rec.file_size:,}",
            str(rec.num_tables),
            rec.read_replication.mode.value,
            rec.version,
        )

    console.print(table)


def print_query_results(results: Sequence[QueryResult], console: Optional[Console] = None) -> None:
    """
    Render each statement's rows as a table followed by a one-line metadata summary.

    Row-map results (a list of dicts) get one column per key of the first row;
    columnar raw results (``{"columns": [...], "rows": [[...]]}``) use their
    declared columns.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results.[/yellow]")
        return

    for index, res in enumerate(results, start=1):
        columns, rows = _tabulate(res.results)
        if columns:
            table = Table(title=f"Statement {index}", box=box.SIMPLE_HEAVY)
            for column in columns:
                table.add_column(escape(str(column)))
            for row in rows:
                table.add_row(*(_cell(v) for v in row))
            console.print(table)

        meta = res.meta
        console.print(
            f"[dim]rows read={meta.rows_read} written={meta.rows_written} "
            f"last_row_id={meta.last_row_id} changed_db={meta.changed_db} "
            f"duration={meta.duration:.3f}ms region={meta.served_by_region or '-'}[/dim]"
        )


def _tabulate(payload: Any) -> tuple[List[str], List[List[Any]]]:
    if isinstance(payload, dict) and "columns" in payload:
        return list(payload.get("columns") or []), [list(r) for r in payload.get("rows") or []]
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        columns = list(payload[0].keys())
        return columns, [[row.get(c) for c in columns] for row in payload]
    return [], []


def print_errors(errors: Sequence[ApiError], console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    for err in errors:
        console.print(f"[bold red]error {err.code}:[/bold red] {escape(err.message)}")


__all__ = ["print_databases", "print_errors", "print_query_results"]
