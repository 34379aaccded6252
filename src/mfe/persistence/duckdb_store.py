from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

import duckdb


class AnalyticsStore:
    """DuckDB marts derived from the authoritative SQLite store."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> Any:
        return duckdb.connect(str(self.db_path))

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS mart_match_summaries (
                    match_id VARCHAR PRIMARY KEY,
                    status VARCHAR,
                    home_score INTEGER,
                    away_score INTEGER,
                    segments INTEGER,
                    shots INTEGER,
                    goals INTEGER,
                    referee_strictness INTEGER
                );

                CREATE TABLE IF NOT EXISTS mart_scorers (
                    match_id VARCHAR,
                    player_id VARCHAR,
                    side VARCHAR,
                    goals INTEGER,
                    PRIMARY KEY(match_id, player_id)
                );

                CREATE TABLE IF NOT EXISTS mart_player_xp (
                    player_id VARCHAR PRIMARY KEY,
                    matches INTEGER,
                    total_xp INTEGER,
                    total_goals INTEGER
                );
                """
            )

    def refresh_from_sqlite(self, sqlite_path: Path) -> None:
        self.initialize_schema()
        with sqlite3.connect(sqlite_path) as sconn, self.connect() as dconn:
            match_rows = sconn.execute(
                "SELECT match_id, status, home_score, away_score, current_segment, referee_strictness FROM matches"
            ).fetchall()
            event_rows = sconn.execute(
                "SELECT match_id, event_type, payload_json FROM match_events ORDER BY sequence"
            ).fetchall()
            award_rows = sconn.execute(
                """
                SELECT player_id, COUNT(*) AS matches, SUM(amount) AS total_xp, SUM(goals) AS total_goals
                FROM experience_awards
                GROUP BY player_id
                """
            ).fetchall()

            shots: dict[str, int] = {}
            scorers: dict[tuple[str, str], list[Any]] = {}
            for match_id, event_type, payload_json in event_rows:
                payload = json.loads(payload_json)
                if event_type == "segment_resolved" and payload.get("success_rate") is not None:
                    shots[match_id] = shots.get(match_id, 0) + 1
                elif event_type == "goal_scored":
                    key = (match_id, payload["scorer_id"])
                    if key not in scorers:
                        scorers[key] = [payload["side"], 0]
                    scorers[key][1] += 1

            summaries = []
            for match_id, status, home_score, away_score, segments, strictness in match_rows:
                summaries.append(
                    (match_id, status, home_score, away_score, segments, shots.get(match_id, 0), home_score + away_score, strictness)
                )

            dconn.execute("DELETE FROM mart_match_summaries")
            if summaries:
                dconn.executemany("INSERT INTO mart_match_summaries VALUES (?, ?, ?, ?, ?, ?, ?, ?)", summaries)
            dconn.execute("DELETE FROM mart_scorers")
            if scorers:
                dconn.executemany(
                    "INSERT INTO mart_scorers VALUES (?, ?, ?, ?)",
                    [(k[0], k[1], v[0], v[1]) for k, v in scorers.items()],
                )
            dconn.execute("DELETE FROM mart_player_xp")
            if award_rows:
                dconn.executemany("INSERT INTO mart_player_xp VALUES (?, ?, ?, ?)", award_rows)

    def match_summary(self, match_id: str) -> dict[str, Any] | None:
        with self.connect() as conn:
            row = conn.execute(
                """
                SELECT match_id, status, home_score, away_score, segments, shots, goals, referee_strictness
                FROM mart_match_summaries WHERE match_id = ?
                """,
                [match_id],
            ).fetchone()
        if row is None:
            return None
        keys = ("match_id", "status", "home_score", "away_score", "segments", "shots", "goals", "referee_strictness")
        return dict(zip(keys, row))

    def top_scorers(self, limit: int = 10) -> list[tuple[str, int]]:
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT player_id, SUM(goals) AS goals
                FROM mart_scorers
                GROUP BY player_id
                ORDER BY goals DESC, player_id
                LIMIT ?
                """,
                [limit],
            ).fetchall()
        return [(r[0], int(r[1])) for r in rows]

    def player_xp(self, player_id: str) -> int:
        with self.connect() as conn:
            row = conn.execute("SELECT total_xp FROM mart_player_xp WHERE player_id = ?", [player_id]).fetchone()
        return int(row[0]) if row else 0
