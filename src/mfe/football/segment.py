"""Single-segment resolution from one batch of seven random words.

Word roles are fixed by position: momentum, event type, expected-goals
jitter, goal-threat roll, accuracy, save check, scorer pick. All ratios are
scaled integers with truncating division so a fixed word sequence always
reproduces the same outcome.
"""
from __future__ import annotations

from typing import Sequence

from mfe.contracts import SegmentEventType, SegmentOutcome, ShotAccuracy, Side, TeamRoster
from mfe.football.fixed_point import PER_MILLE, PERCENT, clamp, tdiv
from mfe.football.power import TeamPower

WORDS_PER_SEGMENT = 7
W_MOMENTUM, W_EVENT, W_JITTER, W_THREAT, W_ACCURACY, W_SAVE, W_SCORER = range(WORDS_PER_SEGMENT)

ADVANTAGE_BASE = 50
ADVANTAGE_DIVISOR = 5

# Cumulative order matters: rolls are bucketed in this sequence.
EVENT_WEIGHTS: tuple[tuple[SegmentEventType, int], ...] = (
    (SegmentEventType.SHOT, 35),
    (SegmentEventType.FOUL, 20),
    (SegmentEventType.POSSESSION_CHANGE, 30),
    (SegmentEventType.CORNER, 15),
)
EVENT_TOTAL_WEIGHT = sum(w for _, w in EVENT_WEIGHTS)
SHOT_EVENTS = frozenset({SegmentEventType.SHOT, SegmentEventType.CORNER})

STRICTNESS_DEFENSE_BONUS = 5
JITTER_BASE = 900
JITTER_SPAN = 201
SUCCESS_BASE = 300
SUCCESS_MIN = 50
SUCCESS_MAX = 700

ON_TARGET_BELOW = 60
OFF_TARGET_BELOW = 90

SAVE_CAP = 85
SAVE_DEFENSE_DIVISOR = 300


def batch_problem(words: Sequence[object]) -> str | None:
    """Describe what is wrong with a word batch, or return None if it is usable."""
    if len(words) != WORDS_PER_SEGMENT:
        return f"expected {WORDS_PER_SEGMENT} random words, got {len(words)}"
    for position, word in enumerate(words):
        if isinstance(word, bool) or not isinstance(word, int):
            return f"random word {position} is {type(word).__name__}, not an integer"
        if word < 0:
            return f"random word {position} is negative"
    return None


def attack_advantage(home: TeamPower, away: TeamPower) -> int:
    raw = (
        ADVANTAGE_BASE
        + tdiv(home.attack - away.defense, ADVANTAGE_DIVISOR)
        - tdiv(away.attack - home.defense, ADVANTAGE_DIVISOR)
    )
    return clamp(raw, 0, PERCENT)


def classify_event(word: int) -> SegmentEventType:
    roll = word % EVENT_TOTAL_WEIGHT
    cumulative = 0
    for event_type, weight in EVENT_WEIGHTS:
        cumulative += weight
        if roll < cumulative:
            return event_type
    raise AssertionError("event weights do not cover the roll range")


def shot_success_rate(attack: int, defense: int, referee_strictness: int, jitter_word: int) -> int:
    """Goal-threat rate in tenths of a percent, clamped to 5%..70%."""
    effective_defense = max(1, defense + referee_strictness * STRICTNESS_DEFENSE_BONUS)
    jitter = JITTER_BASE + jitter_word % JITTER_SPAN
    rate = clamp(SUCCESS_BASE + tdiv(attack - effective_defense, 2), SUCCESS_MIN, SUCCESS_MAX)
    rate = tdiv(rate * jitter, PER_MILLE)
    return clamp(rate, SUCCESS_MIN, SUCCESS_MAX)


def shot_accuracy(word: int) -> ShotAccuracy:
    roll = word % PERCENT
    if roll < ON_TARGET_BELOW:
        return ShotAccuracy.ON_TARGET
    if roll < OFF_TARGET_BELOW:
        return ShotAccuracy.OFF_TARGET
    return ShotAccuracy.WOODWORK


def save_probability(defense: int) -> int:
    return min(SAVE_CAP, tdiv(defense * PERCENT, SAVE_DEFENSE_DIVISOR))


class SegmentEventSimulator:
    """Resolves one segment. Pure: rosters are read, never mutated."""

    def simulate(
        self,
        words: Sequence[int],
        *,
        segment_index: int,
        home: TeamRoster,
        away: TeamRoster,
        home_power: TeamPower,
        away_power: TeamPower,
        referee_strictness: int,
    ) -> SegmentOutcome:
        problem = batch_problem(words)
        if problem is not None:
            raise ValueError(problem)

        advantage = attack_advantage(home_power, away_power)
        if words[W_MOMENTUM] % PERCENT < advantage:
            side, attackers, attack_power, defense_power = Side.HOME, home, home_power, away_power
        else:
            side, attackers, attack_power, defense_power = Side.AWAY, away, away_power, home_power

        event_type = classify_event(words[W_EVENT])
        if event_type not in SHOT_EVENTS:
            return SegmentOutcome(
                segment_index=segment_index,
                attacking_side=side,
                advantage=advantage,
                event_type=event_type,
                shot_attempted=False,
            )

        rate = shot_success_rate(attack_power.attack, defense_power.defense, referee_strictness, words[W_JITTER])
        threatening = words[W_THREAT] % PER_MILLE < rate
        if not threatening:
            return SegmentOutcome(
                segment_index=segment_index,
                attacking_side=side,
                advantage=advantage,
                event_type=event_type,
                shot_attempted=True,
                success_rate=rate,
            )

        accuracy = shot_accuracy(words[W_ACCURACY])
        if accuracy is not ShotAccuracy.ON_TARGET:
            return SegmentOutcome(
                segment_index=segment_index,
                attacking_side=side,
                advantage=advantage,
                event_type=event_type,
                shot_attempted=True,
                success_rate=rate,
                threatening=True,
                accuracy=accuracy,
            )

        save_pct = save_probability(defense_power.defense)
        goal = words[W_SAVE] % PERCENT >= save_pct
        scorer_index = None
        scorer_id = None
        if goal:
            scorer_index = words[W_SCORER] % len(attackers.players)
            scorer_id = attackers.players[scorer_index].player_id
        return SegmentOutcome(
            segment_index=segment_index,
            attacking_side=side,
            advantage=advantage,
            event_type=event_type,
            shot_attempted=True,
            success_rate=rate,
            threatening=True,
            accuracy=accuracy,
            save_probability=save_pct,
            goal=goal,
            scorer_index=scorer_index,
            scorer_id=scorer_id,
        )
