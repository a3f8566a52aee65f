from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import pytest

from fraction_quest.analytics import (
    ATTEMPT_RESULT,
    GAME_START,
    SCHEMA_VERSION,
    LoggingAnalyticsSink,
    MemoryAnalyticsSink,
    SqliteAnalyticsSink,
    make_event,
    read_session_events,
)


def test_make_event_carries_data_and_timestamp() -> None:
    e = make_event(ATTEMPT_RESULT, problemId="l1_5", correct=True)
    assert e.type == "attempt_result"
    assert e.data == {"problemId": "l1_5", "correct": True}
    assert e.timestamp > 0


def test_memory_sink() -> None:
    sink = MemoryAnalyticsSink()
    sink.emit(make_event(GAME_START, difficulty="medium"))
    assert sink.types() == ["game_start"]


def test_logging_sink_logs_event(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="fraction_quest.analytics")
    LoggingAnalyticsSink().emit(make_event(GAME_START, difficulty="easy"))
    assert "game_start" in caplog.text
    assert '"difficulty": "easy"' in caplog.text


def test_sqlite_sink_round_trip(tmp_path: Path) -> None:
    db = tmp_path / "analytics.sqlite3"

    sink = SqliteAnalyticsSink(db)
    sink.emit(make_event(GAME_START, difficulty="medium"))
    sink.emit(make_event(ATTEMPT_RESULT, problemId="l2_9", correct=False, scoreDelta=-3))
    first_session = sink.session_id
    sink.close()

    second = SqliteAnalyticsSink(db)
    assert second.session_id != first_session
    second.emit(make_event(GAME_START, difficulty="hard"))
    second.close()

    events = read_session_events(db, first_session)
    assert [e.type for e in events] == ["game_start", "attempt_result"]
    assert events[1].data == {"problemId": "l2_9", "correct": False, "scoreDelta": -3}

    conn = sqlite3.connect(db)
    try:
        (ver,) = conn.execute("PRAGMA user_version;").fetchone()
        (count,) = conn.execute("SELECT COUNT(*) FROM analytics_event").fetchone()
        (sessions,) = conn.execute("SELECT COUNT(*) FROM play_session").fetchone()
    finally:
        conn.close()
    assert ver == SCHEMA_VERSION
    assert count == 3
    assert sessions == 2
