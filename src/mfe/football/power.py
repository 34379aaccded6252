from __future__ import annotations

from dataclasses import dataclass

from mfe.contracts import PlayerSnapshot, TacticalStyle, TeamRoster
from mfe.football.fixed_point import PER_MILLE, PERCENT, scale

FORM_NEUTRAL = 50
FORM_STEP = 5
HOME_ADVANTAGE_PCT = 105

# (attack %, defense %)
TACTIC_MODIFIERS: dict[TacticalStyle, tuple[int, int]] = {
    TacticalStyle.BALANCED: (100, 100),
    TacticalStyle.AGGRESSIVE: (110, 85),
    TacticalStyle.DEFENSIVE: (85, 110),
}


@dataclass(frozen=True, slots=True)
class TeamPower:
    attack: int
    defense: int


def form_factor(form: int) -> int:
    return PER_MILLE + (form - FORM_NEUTRAL) * FORM_STEP


def team_power(players: list[PlayerSnapshot], style: TacticalStyle, is_home: bool) -> TeamPower:
    if not players:
        raise ValueError("team power requires at least one player")

    attack_total = 0
    defense_total = 0
    for player in players:
        factor = form_factor(player.attributes.form)
        attack_total += scale(player.attributes.attack, factor, PER_MILLE)
        defense_total += scale(player.attributes.defense, factor, PER_MILLE)
    attack = attack_total // len(players)
    defense = defense_total // len(players)

    attack_pct, defense_pct = TACTIC_MODIFIERS[style]
    attack = scale(attack, attack_pct, PERCENT)
    defense = scale(defense, defense_pct, PERCENT)

    if is_home:
        attack = scale(attack, HOME_ADVANTAGE_PCT, PERCENT)
        defense = scale(defense, HOME_ADVANTAGE_PCT, PERCENT)
    return TeamPower(attack=max(0, attack), defense=max(0, defense))


class TeamPowerCalculator:
    def compute(self, roster: TeamRoster, is_home: bool) -> TeamPower:
        return team_power(roster.players, roster.tactical_style, is_home)

    def refresh(self, roster: TeamRoster, is_home: bool) -> TeamPower:
        power = self.compute(roster, is_home)
        roster.attack_power = power.attack
        roster.defense_power = power.defense
        return power
