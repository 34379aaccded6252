from __future__ import annotations

from mfe.contracts import MatchStatus
from mfe.core import seeded_random
from mfe.registry import build_demo_squads
from tests.helpers import ADMIN, make_harness


def _run(seed: int):
    registry, home_ids, away_ids = build_demo_squads(seeded_random(seed).spawn("squads"), squad_size=5)
    harness = make_harness(registry, seed=seed)
    match_id = harness.controller.create_match(ADMIN, home_ids, away_ids, "aggressive", "defensive", 2)
    while harness.oracle.deliver_next():
        pass
    match = harness.controller.get_match(match_id)
    return (
        match.status,
        match.scoreline,
        [s.scorer_id for s in match.segments if s.goal],
        [(s.attacking_side, s.event_type, s.success_rate) for s in match.segments],
        {p: registry.experience_of(p) for p in home_ids + away_ids},
    )


def test_same_words_reproduce_identical_match():
    first = _run(2024)
    second = _run(2024)
    assert first == second
    assert first[0] is MatchStatus.CONCLUDED
    assert len(first[3]) == 10


def test_experience_totals_are_consistent_with_score():
    status, (home, away), scorers, _, xp = _run(77)
    assert status is MatchStatus.CONCLUDED
    assert len(scorers) == home + away
    assert sum(xp.values()) == 10 * 10 * 10 + 100 * (home + away) + (
        20 * 10 if home == away else 50 * 5
    )
