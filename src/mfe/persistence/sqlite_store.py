from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from pathlib import Path
from typing import Any

from mfe.contracts import Match, MatchEvent
from mfe.persistence.migrations import MigrationRunner


class MatchStore:
    """Authoritative SQLite store: match state, ordered event log, awards."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> list[int]:
        with self.connect() as conn:
            return MigrationRunner(conn).apply()

    def append_event(self, event: MatchEvent) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO match_events(sequence, match_id, event_type, event_time, payload_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    event.sequence,
                    event.match_id,
                    event.event_type.value,
                    event.time.isoformat(),
                    json.dumps(event.payload, default=str, sort_keys=True),
                ),
            )

    def save_match(self, match: Match) -> None:
        state_json = json.dumps(asdict(match), default=str)
        with self.connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO matches(
                    match_id, status, initiator, referee_strictness, current_segment, home_score, away_score,
                    last_request_id, created_at, concluded_at, failed_at, state_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    match.match_id,
                    match.status.value,
                    match.initiator,
                    match.referee_strictness,
                    match.current_segment,
                    match.home.score,
                    match.away.score,
                    match.last_request_id,
                    match.created_at.isoformat(),
                    match.concluded_at.isoformat() if match.concluded_at else None,
                    match.failed_at.isoformat() if match.failed_at else None,
                    state_json,
                ),
            )
            conn.execute("DELETE FROM experience_awards WHERE match_id = ?", (match.match_id,))
            conn.executemany(
                """
                INSERT INTO experience_awards(match_id, player_id, owner, side, amount, goals, result_bonus)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (match.match_id, a.player_id, a.owner, a.side.value, a.amount, a.goals, a.result_bonus)
                    for a in match.awards
                ],
            )

    def load_match_state(self, match_id: str) -> dict[str, Any] | None:
        with self.connect() as conn:
            row = conn.execute("SELECT status, state_json FROM matches WHERE match_id = ?", (match_id,)).fetchone()
        if not row:
            return None
        return {"status": row[0], "state": json.loads(row[1])}

    def list_events(self, match_id: str | None = None) -> list[dict[str, Any]]:
        with self.connect() as conn:
            if match_id is None:
                rows = conn.execute(
                    "SELECT sequence, match_id, event_type, event_time, payload_json FROM match_events ORDER BY sequence"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT sequence, match_id, event_type, event_time, payload_json FROM match_events WHERE match_id = ? ORDER BY sequence",
                    (match_id,),
                ).fetchall()
        return [
            {
                "sequence": r[0],
                "match_id": r[1],
                "event_type": r[2],
                "time": r[3],
                "payload": json.loads(r[4]),
            }
            for r in rows
        ]

    def list_awards(self, match_id: str) -> list[dict[str, Any]]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT player_id, owner, side, amount, goals, result_bonus FROM experience_awards WHERE match_id = ? ORDER BY side, player_id",
                (match_id,),
            ).fetchall()
        return [
            {"player_id": r[0], "owner": r[1], "side": r[2], "amount": r[3], "goals": r[4], "result_bonus": r[5]}
            for r in rows
        ]

    def last_sequence(self) -> int:
        with self.connect() as conn:
            row = conn.execute("SELECT COALESCE(MAX(sequence), 0) FROM match_events").fetchone()
        return int(row[0])
