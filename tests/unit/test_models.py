from __future__ import annotations

from typing import List

import pytest
from pydantic import ValidationError

from d1kit.domain.models import (
    DatabaseEnvelope,
    DatabaseRecord,
    DatabaseSettings,
    Envelope,
    QueryEnvelope,
    QueryResult,
    ReadReplication,
    ReplicationMode,
)
from d1kit.errors import APPLICATION_ERROR_CODE
from tests.payloads import DB_ID, database_json, envelope, query_json


@pytest.mark.parametrize(
    ("raw", "mode"),
    [
        ("auto", ReplicationMode.AUTO),
        ("disabled", ReplicationMode.DISABLED),
        ("AUTO", ReplicationMode.DISABLED),
        ("sometimes", ReplicationMode.DISABLED),
        (None, ReplicationMode.DISABLED),
        (ReplicationMode.AUTO, ReplicationMode.AUTO),
    ],
)
def test_replication_mode_parse(raw, mode):
    assert ReplicationMode.parse(raw) is mode
    assert ReadReplication(mode=raw).mode is mode


def test_settings_request_body():
    assert DatabaseSettings(replication="auto").to_request_body() == {"read_replication": {"mode": "auto"}}
    assert DatabaseSettings().to_request_body() == {"read_replication": {"mode": "disabled"}}


def test_database_record_wire_shape():
    record = DatabaseRecord.model_validate(database_json())

    assert record.model_dump(mode="json") == database_json()


def test_database_record_requires_uuid():
    with pytest.raises(ValidationError):
        DatabaseRecord.model_validate({"name": "t1"})


def test_query_result_wire_keys():
    result = QueryResult.model_validate(query_json([{"id": 1}], rows_read=1))

    dumped = result.model_dump(mode="json")
    assert set(dumped) == {"meta", "results", "success"}
    assert set(dumped["meta"]) == {
        "changed_db",
        "changes",
        "duration",
        "last_row_id",
        "rows_read",
        "rows_written",
        "served_by_primary",
        "served_by_region",
        "size_after",
        "timings",
    }


def test_envelope_wire_keys():
    dumped = DatabaseEnvelope.ok(DatabaseRecord(uuid=DB_ID)).model_dump(mode="json")

    assert set(dumped) == {"result", "success", "messages", "errors"}
    assert dumped["errors"] == []


def test_ok_and_fail_constructors():
    ok = QueryEnvelope.ok([])
    failed = QueryEnvelope.fail(APPLICATION_ERROR_CODE, "no such table: t", result=[])

    assert ok.success and ok.errors == []
    assert not failed.success
    assert failed.result == []
    assert failed.errors[0].code == 1000
    assert failed.errors[0].message == "no such table: t"


def test_success_with_errors_is_rejected():
    body = envelope(None, success=True, errors=[{"code": 1, "message": "x"}])
    with pytest.raises(ValidationError):
        DatabaseEnvelope.model_validate(body)


def test_failure_without_errors_is_rejected():
    with pytest.raises(ValidationError):
        Envelope[List[QueryResult]](success=False)


def test_null_messages_and_errors_parse_as_empty():
    parsed = DatabaseEnvelope.model_validate(
        {"result": database_json(), "success": True, "messages": None, "errors": None}
    )

    assert parsed.messages == []
    assert parsed.errors == []
    assert parsed.result.name == "t1"
