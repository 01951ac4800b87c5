"""
Sample data generation and loading for d1kit.

Produces deterministic pseudo-random `records` rows and loads them into a D1
database through any session backend, one INSERT per row (the session contract
executes exactly one statement per call). Handy for trying the CLI or
comparing remote and local answers to the same queries.
"""

from __future__ import annotations

import csv
import json
import random
import sys
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, List, Tuple

import typer

from d1kit.errors import D1Error
from d1kit.factory import open_session
from d1kit.sessions.abstract import AbstractD1Session
from d1kit.sessions.local import LocalSession

app = typer.Typer(help="Generate sample rows and load them into a D1 database.")

COLUMNS = ["created_at", "category", "payload", "amount", "is_active", "source"]

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS records ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "created_at TEXT NOT NULL, "
    "category TEXT NOT NULL, "
    "payload TEXT NOT NULL, "
    "amount REAL NOT NULL, "
    "is_active INTEGER NOT NULL, "
    "source TEXT NOT NULL)"
)
INSERT_SQL = (
    "INSERT INTO records (created_at, category, payload, amount, is_active, source) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)

Row = Tuple[Any, ...]


def _generate_rows(rows: int, seed: int) -> List[Row]:
    rng = random.Random(seed)
    categories = ["alpha", "beta", "gamma", "delta"]
    now = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    generated: List[Row] = []
    for _ in range(rows):
        payload = {
            "user_id": rng.randint(1, 1_000_000),
            "action": rng.choice(["view", "click", "purchase", "impression"]),
            "meta": {"session": rng.randint(1, 1_000_000)},
        }
        generated.append(
            (
                now,
                rng.choice(categories),
                json.dumps(payload),
                round(rng.uniform(1, 10_000), 2),
                int(rng.choice([True, False])),
                "generator",
            )
        )
    return generated


def _write_csv(csv_path: Path, rows: List[Row]) -> None:
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)
        writer.writerows(rows)


def _load_rows(session: AbstractD1Session, db_id: str, rows: List[Row]) -> int:
    """
    Create the `records` table if needed and insert `rows`.

    Returns the number of rows written. Stops at the first statement the
    backend rejects and reports its error.
    """
    res = session.execute_query(db_id, CREATE_TABLE_SQL)
    if not res.success:
        raise RuntimeError(f"Cannot create records table: {res.errors[0].message}")

    written = 0
    for row in rows:
        res = session.execute_query(db_id, INSERT_SQL, *row)
        if not res.success:
            raise RuntimeError(f"Insert {written + 1} failed: {res.errors[0].message}")
        written += res.result[0].meta.rows_written
    return written


@app.command()
def main(
    rows: int = typer.Option(1_000, "--rows", "-r", help="Number of rows to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    backend: str | None = typer.Option(None, "--backend", "-b", help="Backend (local, remote)."),
    name: str = typer.Option("sample", "--name", "-n", help="Name for a newly created database."),
    database_id: str | None = typer.Option(
        None, "--database-id", help="Load into this existing database instead of creating one."
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Also write the rows to this CSV."),
) -> None:
    """
    Generate sample rows and insert them through a session.
    """
    start = time.perf_counter()
    generated = _generate_rows(rows, seed)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        _write_csv(output, generated)
        typer.echo(f"Wrote {len(generated):,} rows -> {output}")

    try:
        with open_session(backend) as session:
            if database_id:
                if isinstance(session, LocalSession):
                    session.attach(database_id)
                db_id = database_id
            else:
                created = session.create_database(name)
                if not created.success:
                    raise RuntimeError(f"Create failed: {created.errors[0].message}")
                db_id = created.result.uuid
            written = _load_rows(session, db_id, generated)
    except (D1Error, RuntimeError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    duration = time.perf_counter() - start
    typer.echo(f"Loaded {written:,} rows into {db_id} in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
