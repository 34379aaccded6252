from __future__ import annotations

import sqlite3

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS matches (
            match_id TEXT PRIMARY KEY,
            status TEXT NOT NULL,
            initiator TEXT NOT NULL,
            referee_strictness INTEGER NOT NULL,
            current_segment INTEGER NOT NULL,
            home_score INTEGER NOT NULL,
            away_score INTEGER NOT NULL,
            last_request_id TEXT,
            created_at TEXT NOT NULL,
            concluded_at TEXT,
            failed_at TEXT,
            state_json TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS match_events (
            sequence INTEGER PRIMARY KEY,
            match_id TEXT NOT NULL,
            event_type TEXT NOT NULL,
            event_time TEXT NOT NULL,
            payload_json TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS experience_awards (
            match_id TEXT NOT NULL,
            player_id TEXT NOT NULL,
            owner TEXT NOT NULL,
            side TEXT NOT NULL,
            amount INTEGER NOT NULL,
            goals INTEGER NOT NULL,
            result_bonus INTEGER NOT NULL,
            PRIMARY KEY (match_id, player_id),
            FOREIGN KEY (match_id) REFERENCES matches(match_id) ON DELETE CASCADE
        );
        """,
    ),
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_match_events_match ON match_events(match_id, sequence);
        CREATE INDEX IF NOT EXISTS idx_matches_status ON matches(status);
        """,
    ),
]


class MigrationRunner:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def apply(self) -> list[int]:
        self.conn.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT DEFAULT CURRENT_TIMESTAMP)")
        applied = {
            row[0]
            for row in self.conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        newly_applied: list[int] = []
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            self.conn.executescript(sql)
            self.conn.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
            newly_applied.append(version)
        self.conn.commit()
        return newly_applied
