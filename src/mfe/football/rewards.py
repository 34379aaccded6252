from __future__ import annotations

from mfe.contracts import ExperienceAward, Match, MatchEventType, PlayerRegistry, Side
from mfe.core.events import EventBus

XP_PER_SEGMENT = 10
XP_PER_GOAL = 100
DRAW_BONUS = 20
WIN_BONUS = 50


def result_bonus(own_score: int, other_score: int) -> int:
    if own_score == other_score:
        return DRAW_BONUS
    if own_score > other_score:
        return WIN_BONUS
    return 0


def compute_awards(match: Match, segments_played: int) -> list[ExperienceAward]:
    awards: list[ExperienceAward] = []
    for side in (Side.HOME, Side.AWAY):
        roster = match.roster(side)
        other = match.roster(Side.AWAY if side is Side.HOME else Side.HOME)
        bonus = result_bonus(roster.score, other.score)
        for player in roster.players:
            awards.append(
                ExperienceAward(
                    player_id=player.player_id,
                    owner=player.owner,
                    side=side,
                    amount=segments_played * XP_PER_SEGMENT + player.goals_scored * XP_PER_GOAL + bonus,
                    goals=player.goals_scored,
                    result_bonus=bonus,
                )
            )
    return awards


class RewardSubmissionError(RuntimeError):
    """The registry rejected an experience write partway through a payout."""

    def __init__(self, award: ExperienceAward, paid: list[str], unpaid: list[str]) -> None:
        super().__init__(f"registry rejected {award.amount} xp for '{award.player_id}'")
        self.award = award
        self.paid = paid
        self.unpaid = unpaid


class RewardDistributor:
    """Submits experience deltas to the registry. Tier thresholds stay with the registry."""

    def __init__(self, registry: PlayerRegistry, event_bus: EventBus) -> None:
        self._registry = registry
        self._event_bus = event_bus

    def distribute(self, match: Match, segments_played: int) -> list[ExperienceAward]:
        awards = compute_awards(match, segments_played)
        self.submit(match, awards)
        return awards

    def submit(self, match: Match, awards: list[ExperienceAward]) -> None:
        payable = [a for a in awards if a.amount != 0]
        paid: list[str] = []
        for award in payable:
            try:
                self._registry.add_experience(award.player_id, award.amount)
            except Exception as exc:
                unpaid = [a.player_id for a in payable[len(paid):]]
                raise RewardSubmissionError(award, paid, unpaid) from exc
            paid.append(award.player_id)
            self._event_bus.publish(
                MatchEventType.EXPERIENCE_AWARDED,
                match.match_id,
                player_id=award.player_id,
                owner=award.owner,
                side=award.side.value,
                amount=award.amount,
                goals=award.goals,
                result_bonus=award.result_bonus,
            )
