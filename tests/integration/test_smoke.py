"""
End-to-end scenarios run against both backends.

The local backend always runs. The remote backend talks to the real D1 API and
only runs when explicitly enabled:

Run with: RUN_INTEGRATION_TESTS=1 D1_ACCOUNT_ID=... D1_API_TOKEN=... pytest tests/integration/
"""

from __future__ import annotations

import os
import uuid
from typing import Generator

import pytest

from d1kit.config import Settings
from d1kit.factory import open_session
from d1kit.sessions.abstract import AbstractD1Session

REMOTE_ENABLED = (
    os.getenv("RUN_INTEGRATION_TESTS", "0") == "1"
    and bool(os.getenv("D1_ACCOUNT_ID"))
    and bool(os.getenv("D1_API_TOKEN"))
)

BACKENDS = [
    "local",
    pytest.param(
        "remote",
        marks=pytest.mark.skipif(
            not REMOTE_ENABLED,
            reason="Remote tests require RUN_INTEGRATION_TESTS=1 and D1 credentials",
        ),
    ),
]


@pytest.fixture(params=BACKENDS)
def session(request, tmp_path) -> Generator[AbstractD1Session, None, None]:
    settings = Settings(local_path=str(tmp_path / "d1"), local_region="test-region")
    with open_session(request.param, settings=settings) as opened:
        yield opened


@pytest.fixture
def database(session: AbstractD1Session) -> Generator[str, None, None]:
    name = f"d1kit-smoke-{uuid.uuid4().hex[:8]}"
    created = session.create_database(name)
    assert created.success, created.errors
    db_id = created.result.uuid
    yield db_id
    session.delete_database(db_id)


class TestScenario:
    """The same sequence of calls must read the same on either backend."""

    def test_create_is_registered_and_listed(self, session, database):
        assert database in session.registry.ids()
        listed = session.list_databases()
        assert listed.success
        assert database in [rec.uuid for rec in listed.result]

    def test_table_lifecycle(self, session, database):
        ddl = session.execute_query(
            database, "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER)"
        )
        assert ddl.success

        insert = session.execute_query(database, "INSERT INTO users (name, age) VALUES (?, ?)", "ada", 36)
        assert insert.success
        assert insert.result[0].meta.changes == 1
        assert insert.result[0].meta.last_row_id == 1
        assert insert.result[0].meta.changed_db is True

        rows = session.execute_query(database, "SELECT name, age FROM users WHERE id = ?", 1)
        assert rows.success
        assert rows.result[0].results == [{"name": "ada", "age": 36}]
        assert rows.result[0].meta.rows_read >= 1

        record = session.get_database(database).result
        assert record.num_tables == 1
        assert record.file_size > 0

    def test_invalid_sql_is_a_failed_envelope(self, session, database):
        res = session.execute_query(database, "SELEC oops")

        assert res.success is False
        assert len(res.errors) == 1

    def test_delete_removes_database(self, session):
        created = session.create_database(f"d1kit-smoke-{uuid.uuid4().hex[:8]}")
        db_id = created.result.uuid

        assert session.delete_database(db_id).success
        listed = session.list_databases()
        assert db_id not in [rec.uuid for rec in listed.result]
