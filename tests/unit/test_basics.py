import csv
import json
from pathlib import Path
from time import sleep

import pytest

from d1kit import config
from d1kit.errors import ConfigurationError
from d1kit.factory import available_backends, open_session
from d1kit.sessions.local import LocalSession
from d1kit.sessions.remote import RemoteSession
from d1kit.utils import profiler
from scripts import generate_data


def test_get_settings_defaults(monkeypatch, clear_settings_cache):
    for var in ("D1_BACKEND", "D1_LOCAL_PATH", "D1_LOCAL_REGION", "D1_TRANSPORT_RETRIES"):
        monkeypatch.delenv(var, raising=False)
    settings = config.Settings(_env_file=None)
    assert settings.backend == "local"
    assert settings.local_path == ".d1"
    assert settings.local_region == "local"
    assert settings.api_base_url == "https://api.cloudflare.com/client/v4"
    assert settings.request_timeout_seconds > 0
    assert settings.transport_retries > 0
    assert settings.local_statement_timeout_ms > 0


def test_settings_read_environment(monkeypatch, clear_settings_cache, tmp_path: Path):
    monkeypatch.setenv("D1_BACKEND", "remote")
    monkeypatch.setenv("D1_LOCAL_PATH", str(tmp_path))
    monkeypatch.setenv("D1_TRANSPORT_RETRIES", "5")

    settings = config.get_settings()

    assert settings.backend == "remote"
    assert settings.local_path == str(tmp_path)
    assert settings.transport_retries == 5
    assert config.get_settings() is settings


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.label == "sleep"
    assert stats.duration_seconds >= 0.05
    assert stats.duration_ms == pytest.approx(stats.duration_seconds * 1000.0)


def test_profile_block_records_duration_when_block_raises():
    with pytest.raises(ZeroDivisionError):
        with profiler.profile_block("boom") as stats:
            1 / 0
    assert stats.end_ts >= stats.start_ts > 0


def test_available_backends_contains_known_entries():
    names = available_backends()
    assert names == ["local", "remote"]


def test_open_session_builds_requested_backend(test_settings):
    with open_session("LOCAL", settings=test_settings) as session:
        assert isinstance(session, LocalSession)
    with open_session("remote", settings=test_settings) as session:
        assert isinstance(session, RemoteSession)


def test_open_session_defaults_to_configured_backend(test_settings):
    with open_session(settings=test_settings) as session:
        assert session.backend == "local"


def test_open_session_rejects_unknown_backend(test_settings):
    with pytest.raises(ConfigurationError, match="Unknown backend"):
        open_session("postgres", settings=test_settings)


def test_open_remote_without_credentials_fails(test_settings):
    settings = test_settings.model_copy(update={"account_id": "", "api_token": ""})
    with pytest.raises(ConfigurationError):
        open_session("remote", settings=settings)


def test_generate_data_writes_csv(tmp_path: Path):
    csv_path = tmp_path / "records.csv"
    rows = generate_data._generate_rows(5, seed=123)
    generate_data._write_csv(csv_path, rows)
    assert csv_path.exists()
    with csv_path.open("r", newline="", encoding="utf-8") as f:
        lines = list(csv.reader(f))
    # header + 5 rows
    assert len(lines) == 6
    assert lines[0] == generate_data.COLUMNS
    json.loads(lines[1][2])


def test_generate_data_is_deterministic():
    first = generate_data._generate_rows(3, seed=7)
    second = generate_data._generate_rows(3, seed=7)
    # created_at is wall-clock; everything else follows the seed
    assert [row[1:] for row in first] == [row[1:] for row in second]


def test_generate_data_loads_rows(local_session: LocalSession):
    db_id = local_session.create_database("sample").result.uuid
    rows = generate_data._generate_rows(4, seed=1)

    written = generate_data._load_rows(local_session, db_id, rows)

    assert written == 4
    res = local_session.execute_query(db_id, "SELECT COUNT(*) AS n FROM records")
    assert res.result[0].results == [{"n": 4}]


def test_generate_data_stops_on_rejected_insert(local_session: LocalSession):
    db_id = local_session.create_database("sample").result.uuid
    bad_row = (None, "alpha", "{}", 1.0, 1, "generator")

    with pytest.raises(RuntimeError, match="Insert 1 failed"):
        generate_data._load_rows(local_session, db_id, [bad_row])
