from __future__ import annotations

from pathlib import Path

from mfe.persistence.duckdb_store import AnalyticsStore


def run_match_etl(sqlite_path: Path, duckdb_path: Path) -> AnalyticsStore:
    store = AnalyticsStore(duckdb_path)
    store.refresh_from_sqlite(sqlite_path)
    return store
