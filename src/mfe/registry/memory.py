from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from mfe.contracts import PlayerAttributes


class PlayerTier(str, Enum):
    ROOKIE = "rookie"
    PRO = "pro"
    VETERAN = "veteran"
    LEGEND = "legend"


TIER_THRESHOLDS: tuple[tuple[PlayerTier, int], ...] = (
    (PlayerTier.LEGEND, 5000),
    (PlayerTier.VETERAN, 1500),
    (PlayerTier.PRO, 500),
    (PlayerTier.ROOKIE, 0),
)


def tier_for_experience(experience: int) -> PlayerTier:
    for tier, threshold in TIER_THRESHOLDS:
        if experience >= threshold:
            return tier
    return PlayerTier.ROOKIE


@dataclass(slots=True)
class PlayerRecord:
    player_id: str
    owner: str
    attributes: PlayerAttributes
    experience: int = 0
    tier: PlayerTier = PlayerTier.ROOKIE
    tier_history: list[PlayerTier] = field(default_factory=list)


class InMemoryPlayerRegistry:
    """Reference player ledger: ownership, attributes, experience and tiers."""

    def __init__(self) -> None:
        self._records: dict[str, PlayerRecord] = {}

    def register(self, player_id: str, owner: str, attributes: PlayerAttributes) -> PlayerRecord:
        if player_id in self._records:
            raise ValueError(f"player '{player_id}' already registered")
        record = PlayerRecord(player_id=player_id, owner=owner, attributes=attributes)
        self._records[player_id] = record
        return record

    def update_attributes(self, player_id: str, attributes: PlayerAttributes) -> None:
        self._record(player_id).attributes = attributes

    def exists(self, player_id: str) -> bool:
        return player_id in self._records

    def owner_of(self, player_id: str) -> str:
        return self._record(player_id).owner

    def get_attributes(self, player_id: str) -> PlayerAttributes:
        return self._record(player_id).attributes

    def add_experience(self, player_id: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("experience delta must not be negative")
        record = self._record(player_id)
        record.experience += amount
        tier = tier_for_experience(record.experience)
        if tier is not record.tier:
            record.tier_history.append(record.tier)
            record.tier = tier

    def experience_of(self, player_id: str) -> int:
        return self._record(player_id).experience

    def tier_of(self, player_id: str) -> PlayerTier:
        return self._record(player_id).tier

    def _record(self, player_id: str) -> PlayerRecord:
        try:
            return self._records[player_id]
        except KeyError:
            raise KeyError(f"unknown player '{player_id}'") from None
