from datetime import datetime

import pytest

from logout_calculator.db import (
    build_history_entry,
    clear_history,
    database_connection,
    delete_history_entry,
    fetch_history,
    save_history_entry,
)
from logout_calculator.schedule import calculate, calculate_manual

NOW = datetime(2024, 3, 1, 16, 0)
LOG = "09:00:00\n01 Mar 2024\n12:00:00 pm\n01 Mar 2024\n12:30:00 pm\n01 Mar 2024\n03:00:00 pm\n01 Mar 2024"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "history.sqlite3"


def test_entry_from_timestamp_result_uses_login_date():
    result = calculate(text=LOG, now=datetime(2024, 3, 2, 1, 0))
    entry = build_history_entry(result)
    assert entry.date_label == "01 Mar 2024"


def test_entry_from_manual_result_uses_today():
    result = calculate_manual("09:00", 6, 30, now=NOW)
    entry = build_history_entry(result, today=datetime(2024, 3, 5))
    assert entry.date_label == "05 Mar 2024"
    assert entry.break_minutes == 30
    assert entry.logout_time == "15:30"
    assert entry.active_hours == "6.5"


def test_save_and_fetch_newest_first(db_path):
    with database_connection(db_path) as conn:
        first = save_history_entry(conn, calculate(text=LOG, now=NOW))
        second = save_history_entry(conn, calculate_manual("08:00", now=NOW))
        entries = fetch_history(conn)

    assert [entry.id for entry in entries] == [second.id, first.id]
    saved = entries[1]
    assert saved.date_label == "01 Mar 2024"
    assert saved.active_hours == "5.5"
    assert saved.break_minutes == 90
    assert saved.logout_time == "16:30"
    assert saved.created_at == NOW


def test_history_survives_reopen(db_path):
    with database_connection(db_path) as conn:
        save_history_entry(conn, calculate(text=LOG, now=NOW))
    with database_connection(db_path) as conn:
        assert len(fetch_history(conn)) == 1


def test_delete_and_clear(db_path):
    with database_connection(db_path) as conn:
        entry = save_history_entry(conn, calculate(text=LOG, now=NOW))
        save_history_entry(conn, calculate(text=LOG, now=NOW))
        delete_history_entry(conn, entry.id)
        assert len(fetch_history(conn)) == 1
        with pytest.raises(ValueError):
            delete_history_entry(conn, entry.id)
        assert clear_history(conn) == 1
        assert fetch_history(conn) == []


def test_data_dir_override(tmp_path, monkeypatch):
    from logout_calculator.paths import get_db_path

    target = tmp_path / "calc-data"
    monkeypatch.setenv("LOGOUT_CALCULATOR_DATA_DIR", str(target))
    assert get_db_path() == target / "history.sqlite3"
    assert target.is_dir()


def test_entry_break_minutes_round_half_up():
    result = calculate_manual("09:00", now=NOW)
    result.total_break_minutes = 2.5
    assert build_history_entry(result).break_minutes == 3
