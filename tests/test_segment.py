from __future__ import annotations

import copy

import pytest

from mfe.contracts import PlayerSnapshot, SegmentEventType, ShotAccuracy, Side, TacticalStyle, TeamRoster
from mfe.football import SegmentEventSimulator, TeamPower, shot_success_rate
from mfe.football.fixed_point import tdiv
from mfe.football.segment import attack_advantage, classify_event, save_probability, shot_accuracy
from tests.helpers import HOME_GOAL_WORDS, attrs


def _roster(prefix: str, size: int = 1) -> TeamRoster:
    players = [PlayerSnapshot(player_id=f"{prefix}{i}", owner="o", attributes=attrs(100, 100)) for i in range(size)]
    return TeamRoster(players=players, tactical_style=TacticalStyle.BALANCED)


def _simulate(words, home_power, away_power, *, home_size=1, away_size=1, strictness=0):
    home, away = _roster("H", home_size), _roster("A", away_size)
    return SegmentEventSimulator().simulate(
        words,
        segment_index=1,
        home=home,
        away=away,
        home_power=home_power,
        away_power=away_power,
        referee_strictness=strictness,
    )


SCENARIO_HOME = TeamPower(attack=210, defense=105)
SCENARIO_AWAY = TeamPower(attack=100, defense=200)


def test_truncating_division_rounds_toward_zero():
    assert tdiv(7, 5) == 1
    assert tdiv(-7, 5) == -1
    assert tdiv(-7, -5) == 1
    assert tdiv(7, -5) == -1


def test_advantage_uses_truncation_for_negative_differences():
    # (93 - 100) / 5 truncates to -1, a floor would give -2.
    assert attack_advantage(TeamPower(93, 100), TeamPower(100, 100)) == 49
    assert attack_advantage(SCENARIO_HOME, SCENARIO_AWAY) == 53


def test_advantage_is_clamped():
    assert attack_advantage(TeamPower(2000, 2000), TeamPower(0, 0)) == 100
    assert attack_advantage(TeamPower(0, 0), TeamPower(2000, 2000)) == 0


@pytest.mark.parametrize(
    "word,expected",
    [
        (0, SegmentEventType.SHOT),
        (34, SegmentEventType.SHOT),
        (35, SegmentEventType.FOUL),
        (54, SegmentEventType.FOUL),
        (55, SegmentEventType.POSSESSION_CHANGE),
        (84, SegmentEventType.POSSESSION_CHANGE),
        (85, SegmentEventType.CORNER),
        (99, SegmentEventType.CORNER),
        (10**70 + 40, SegmentEventType.FOUL),
    ],
)
def test_event_classification_buckets(word, expected):
    assert classify_event(word) == expected


def test_success_rate_clamps_to_lower_bound():
    # 300 + (0 - 1000) / 2 = -200 -> 50, then * 0.9 = 45 -> 50
    assert shot_success_rate(attack=0, defense=1000, referee_strictness=0, jitter_word=0) == 50


def test_success_rate_clamps_to_upper_bound():
    # 300 + 1999 / 2 = 1299 -> 700, then * 1.1 = 770 -> 700
    assert shot_success_rate(attack=2000, defense=0, referee_strictness=0, jitter_word=200) == 700


def test_success_rate_applies_referee_and_jitter():
    # effective defense 200 + 10 * 5 = 250; 300 + 50 / 2 = 325; jitter 1000
    assert shot_success_rate(attack=300, defense=200, referee_strictness=10, jitter_word=100) == 325
    # jitter word wraps modulo 201
    assert shot_success_rate(attack=300, defense=200, referee_strictness=10, jitter_word=301) == 325


def test_accuracy_and_save_bands():
    assert shot_accuracy(59) is ShotAccuracy.ON_TARGET
    assert shot_accuracy(60) is ShotAccuracy.OFF_TARGET
    assert shot_accuracy(89) is ShotAccuracy.OFF_TARGET
    assert shot_accuracy(90) is ShotAccuracy.WOODWORK
    assert save_probability(0) == 0
    assert save_probability(200) == 66
    assert save_probability(300) == 85


def test_home_goal_words_score_for_home():
    outcome = _simulate(HOME_GOAL_WORDS, SCENARIO_HOME, SCENARIO_AWAY)
    assert outcome.attacking_side is Side.HOME
    assert outcome.event_type is SegmentEventType.SHOT
    assert outcome.success_rate == 335
    assert outcome.accuracy is ShotAccuracy.ON_TARGET
    assert outcome.save_probability == 66
    assert outcome.goal
    assert outcome.scorer_id == "H0"


def test_momentum_above_advantage_gives_ball_to_away():
    words = [99, 0, 200, 0, 0, 99, 4]
    outcome = _simulate(words, SCENARIO_HOME, SCENARIO_AWAY, away_size=3)
    assert outcome.attacking_side is Side.AWAY
    assert outcome.goal
    assert outcome.scorer_index == 1
    assert outcome.scorer_id == "A1"


def test_corner_also_attempts_a_shot():
    words = [0, 90, 200, 0, 0, 99, 0]
    outcome = _simulate(words, SCENARIO_HOME, SCENARIO_AWAY)
    assert outcome.event_type is SegmentEventType.CORNER
    assert outcome.shot_attempted
    assert outcome.goal


@pytest.mark.parametrize("event_word", [40, 70])
def test_foul_and_possession_change_end_segment(event_word):
    words = [0, event_word, 200, 0, 0, 99, 0]
    outcome = _simulate(words, SCENARIO_HOME, SCENARIO_AWAY)
    assert not outcome.shot_attempted
    assert outcome.success_rate is None
    assert not outcome.goal


def test_missed_threat_stops_before_accuracy():
    words = [0, 0, 200, 999, 0, 99, 0]
    outcome = _simulate(words, SCENARIO_HOME, SCENARIO_AWAY)
    assert outcome.shot_attempted
    assert not outcome.threatening
    assert outcome.accuracy is None


def test_woodwork_and_saves_do_not_score():
    woodwork = _simulate([0, 0, 200, 0, 95, 99, 0], SCENARIO_HOME, SCENARIO_AWAY)
    assert woodwork.accuracy is ShotAccuracy.WOODWORK and not woodwork.goal
    saved = _simulate([0, 0, 200, 0, 0, 65, 0], SCENARIO_HOME, SCENARIO_AWAY)
    assert saved.accuracy is ShotAccuracy.ON_TARGET and not saved.goal
    assert saved.scorer_id is None


def test_simulation_does_not_mutate_rosters():
    home, away = _roster("H"), _roster("A")
    before = (copy.deepcopy(home), copy.deepcopy(away))
    SegmentEventSimulator().simulate(
        HOME_GOAL_WORDS,
        segment_index=1,
        home=home,
        away=away,
        home_power=SCENARIO_HOME,
        away_power=SCENARIO_AWAY,
        referee_strictness=0,
    )
    assert (home, away) == before


def test_wrong_word_count_is_a_programming_error():
    with pytest.raises(ValueError):
        _simulate([1, 2, 3], SCENARIO_HOME, SCENARIO_AWAY)
