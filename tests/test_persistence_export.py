from __future__ import annotations

import sqlite3

from mfe.persistence import MatchStore, MigrationRunner
from mfe.simulation import MatchRuntime
from tests.helpers import FOUL_WORDS, HOME_GOAL_WORDS, scenario_a_registry
from tests.test_runtime import _create


def test_migrations_are_idempotent(tmp_path):
    store = MatchStore(tmp_path / "m.sqlite3")
    assert store.initialize_schema() == [1, 2]
    assert store.initialize_schema() == []
    with sqlite3.connect(store.db_path) as conn:
        assert MigrationRunner(conn).apply() == []
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"matches", "match_events", "experience_awards"} <= tables


def test_analytics_marts_reflect_finished_matches(tmp_path):
    runtime = MatchRuntime(root=tmp_path, registry=scenario_a_registry(), seed=1)
    goals_id = _create(runtime).data["match_id"]
    for _ in range(10):
        token = runtime.controller.get_match(goals_id).last_request_id
        runtime.gateway.supply_randomness(token, HOME_GOAL_WORDS)

    quiet_id = _create(runtime).data["match_id"]
    for _ in range(10):
        token = runtime.controller.get_match(quiet_id).last_request_id
        runtime.gateway.supply_randomness(token, FOUL_WORDS)

    analytics = runtime.refresh_analytics()
    summary = analytics.match_summary(goals_id)
    assert summary["status"] == "concluded"
    assert (summary["home_score"], summary["away_score"]) == (10, 0)
    assert summary["shots"] == 10
    assert analytics.match_summary(quiet_id)["shots"] == 0
    assert analytics.top_scorers(1) == [("H1", 10)]
    assert analytics.player_xp("H1") == 1150 + 120
    assert analytics.player_xp("nobody") == 0

    # Refresh replaces rather than duplicates rows.
    analytics = runtime.refresh_analytics()
    assert analytics.top_scorers(5) == [("H1", 10)]
