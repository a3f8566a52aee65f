from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

GAME_START = "game_start"
LEVEL_START = "level_start"
ATTEMPT_RESULT = "attempt_result"
HINT_USED = "hint_used"
LEVEL_COMPLETE = "level_complete"
GAME_END = "game_end"


@dataclass(frozen=True, slots=True)
class AnalyticsEvent:
    type: str
    timestamp: int  # epoch milliseconds
    data: dict[str, Any] = field(default_factory=dict)


def make_event(event_type: str, **data: Any) -> AnalyticsEvent:
    return AnalyticsEvent(type=event_type, timestamp=time.time_ns() // 1_000_000, data=data)


class AnalyticsSink(Protocol):
    def emit(self, event: AnalyticsEvent) -> None: ...


class LoggingAnalyticsSink:
    """Default sink: one log line per event."""

    def emit(self, event: AnalyticsEvent) -> None:
        logger.info("Analytics: %s %s", event.type, json.dumps(event.data, sort_keys=True, default=str))


class MemoryAnalyticsSink:
    def __init__(self) -> None:
        self.events: list[AnalyticsEvent] = []

    def emit(self, event: AnalyticsEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.type for e in self.events]


# Each entry upgrades the schema from version N to N + 1.
_MIGRATIONS: tuple[tuple[str, ...], ...] = (
    (
        """
        CREATE TABLE IF NOT EXISTS play_session (
            id INTEGER PRIMARY KEY,
            started_at_utc TEXT NOT NULL
        );
        """,
        """
        CREATE TABLE IF NOT EXISTS analytics_event (
            id INTEGER PRIMARY KEY,
            session_id INTEGER NOT NULL REFERENCES play_session(id) ON DELETE CASCADE,
            seq INTEGER NOT NULL,
            type TEXT NOT NULL,
            timestamp_ms INTEGER NOT NULL,
            data_json TEXT NOT NULL
        );
        """,
        "CREATE INDEX IF NOT EXISTS idx_analytics_event_session_seq ON analytics_event(session_id, seq);",
    ),
)

SCHEMA_VERSION = len(_MIGRATIONS)


def connect_analytics_db(path: Path) -> sqlite3.Connection:
    """Open (creating if needed) an analytics database at the current schema."""

    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA journal_mode=WAL;")
    _upgrade_schema(conn)
    return conn


def _upgrade_schema(conn: sqlite3.Connection) -> None:
    (version,) = conn.execute("PRAGMA user_version;").fetchone()
    for target, statements in enumerate(_MIGRATIONS[int(version) :], start=int(version) + 1):
        with conn:
            for sql in statements:
                conn.execute(sql)
            conn.execute(f"PRAGMA user_version={target};")
        logger.debug("Analytics schema upgraded to version %s", target)


def _session_stamp() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


class SqliteAnalyticsSink:
    """Append-only event log: one ``play_session`` row per sink, events under it."""

    def __init__(self, path: Path) -> None:
        self._conn = connect_analytics_db(path)
        self._seq = 0
        with self._conn:
            cur = self._conn.execute("INSERT INTO play_session(started_at_utc) VALUES (?)", (_session_stamp(),))
        self._session_id = int(cur.lastrowid)

    @property
    def session_id(self) -> int:
        return self._session_id

    def emit(self, event: AnalyticsEvent) -> None:
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO analytics_event(session_id, seq, type, timestamp_ms, data_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    self._session_id,
                    self._seq,
                    str(event.type),
                    int(event.timestamp),
                    json.dumps(event.data, sort_keys=True, default=str),
                ),
            )
        self._seq += 1

    def close(self) -> None:
        self._conn.close()


def read_session_events(path: Path, session_id: int) -> list[AnalyticsEvent]:
    conn = connect_analytics_db(path)
    try:
        rows = conn.execute(
            "SELECT type, timestamp_ms, data_json FROM analytics_event WHERE session_id = ? ORDER BY seq",
            (session_id,),
        ).fetchall()
    finally:
        conn.close()
    return [AnalyticsEvent(type=t, timestamp=int(ts), data=json.loads(d)) for t, ts, d in rows]
