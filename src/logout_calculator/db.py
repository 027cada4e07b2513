"""SQLite storage for saved work-day calculations."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from .models import HistoryEntry, ScheduleResult
from .reporting import format_clock
from .schedule import round_half_up


DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"
DATE_LABEL_FMT = "%d %b %Y"


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS history_entries (
            id INTEGER PRIMARY KEY,
            date_label TEXT NOT NULL,
            active_hours TEXT NOT NULL,
            break_minutes INTEGER NOT NULL DEFAULT 0,
            logout_time TEXT NOT NULL,
            created_at TEXT NOT NULL
        );
        """
    )


def build_history_entry(
    result: ScheduleResult, today: Optional[datetime] = None
) -> HistoryEntry:
    """Shape a result into a history row, dated by the logged login when there is one."""
    day = result.login if result.mode == "timestamps" else (today or result.now)
    return HistoryEntry(
        id=None,
        date_label=day.strftime(DATE_LABEL_FMT),
        active_hours=f"{result.active_minutes / 60:.1f}",
        break_minutes=round_half_up(result.total_break_minutes),
        logout_time=format_clock(result.projected_logout),
        created_at=result.now,
    )


def insert_history_entry(conn: sqlite3.Connection, entry: HistoryEntry) -> HistoryEntry:
    created_at = entry.created_at or datetime.now()
    cur = conn.execute(
        """
        INSERT INTO history_entries (
            date_label,
            active_hours,
            break_minutes,
            logout_time,
            created_at
        ) VALUES (?, ?, ?, ?, ?)
        """,
        (
            entry.date_label,
            entry.active_hours,
            entry.break_minutes,
            entry.logout_time,
            created_at.strftime(DATETIME_FMT),
        ),
    )
    return HistoryEntry(
        id=cur.lastrowid,
        date_label=entry.date_label,
        active_hours=entry.active_hours,
        break_minutes=entry.break_minutes,
        logout_time=entry.logout_time,
        created_at=created_at,
    )


def save_history_entry(
    conn: sqlite3.Connection, result: ScheduleResult, today: Optional[datetime] = None
) -> HistoryEntry:
    return insert_history_entry(conn, build_history_entry(result, today))


def fetch_history(conn: sqlite3.Connection) -> list[HistoryEntry]:
    """Return saved entries, newest first."""
    rows = conn.execute(
        """
        SELECT id, date_label, active_hours, break_minutes, logout_time, created_at
        FROM history_entries
        ORDER BY id DESC;
        """
    )
    return [_row_to_entry(row) for row in rows]


def delete_history_entry(conn: sqlite3.Connection, entry_id: int) -> None:
    cur = conn.execute("DELETE FROM history_entries WHERE id = ?", (entry_id,))
    if cur.rowcount == 0:
        raise ValueError(f"No history entry found for id={entry_id}")


def clear_history(conn: sqlite3.Connection) -> int:
    cur = conn.execute("DELETE FROM history_entries")
    return cur.rowcount


def _row_to_entry(row: sqlite3.Row) -> HistoryEntry:
    return HistoryEntry(
        id=row["id"],
        date_label=row["date_label"],
        active_hours=row["active_hours"],
        break_minutes=row["break_minutes"],
        logout_time=row["logout_time"],
        created_at=datetime.strptime(row["created_at"], DATETIME_FMT),
    )
