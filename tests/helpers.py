from __future__ import annotations

from dataclasses import dataclass

from mfe.contracts import CallerIdentity, EngineConfig, PlayerAttributes, ProgressionPolicy, Role
from mfe.core import EventBus, default_engine_config, seeded_random
from mfe.football import MatchLifecycleController
from mfe.oracle import LocalRandomnessOracle, RandomnessGateway
from mfe.registry import InMemoryPlayerRegistry

ADMIN = CallerIdentity("admin", frozenset({Role.ADMIN}))
ORACLE = CallerIdentity("oracle", frozenset({Role.ORACLE}))
STRANGER = CallerIdentity("mallory", frozenset())

# momentum 0 -> home attacks, event 0 -> shot, max jitter, threat 0 -> threatening,
# accuracy 0 -> on target, save roll 99 -> beats any save probability, scorer 0.
HOME_GOAL_WORDS = [0, 0, 200, 0, 0, 99, 0]
# event roll 40 -> foul, no shot attempted regardless of the other words.
FOUL_WORDS = [0, 40, 0, 0, 0, 0, 0]
POSSESSION_WORDS = [77, 60, 5, 5, 5, 5, 5]


def attrs(attack: int, defense: int, form: int = 50, stamina: int = 70, morale: int = 70) -> PlayerAttributes:
    return PlayerAttributes(attack=attack, defense=defense, stamina=stamina, form=form, morale=morale)


def build_registry(players: dict[str, PlayerAttributes], owner: str = "owner_1") -> InMemoryPlayerRegistry:
    registry = InMemoryPlayerRegistry()
    for player_id, attributes in players.items():
        registry.register(player_id, owner, attributes)
    return registry


@dataclass
class Harness:
    registry: InMemoryPlayerRegistry
    oracle: LocalRandomnessOracle
    gateway: RandomnessGateway
    event_bus: EventBus
    controller: MatchLifecycleController


def make_harness(
    registry: InMemoryPlayerRegistry,
    progression: ProgressionPolicy = ProgressionPolicy.AUTO,
    seed: int = 11,
    config: EngineConfig | None = None,
) -> Harness:
    oracle = LocalRandomnessOracle(seeded_random(seed))
    config = config or default_engine_config(progression)
    gateway = RandomnessGateway(oracle, config.randomness)
    oracle.gateway = gateway
    bus = EventBus()
    controller = MatchLifecycleController(registry, gateway, event_bus=bus, config=config)
    return Harness(registry=registry, oracle=oracle, gateway=gateway, event_bus=bus, controller=controller)


def scenario_a_registry() -> InMemoryPlayerRegistry:
    return build_registry({"H1": attrs(200, 100), "A1": attrs(100, 200)})


def mirrored_registry(size: int = 3) -> tuple[InMemoryPlayerRegistry, list[str], list[str]]:
    players: dict[str, PlayerAttributes] = {}
    home_ids, away_ids = [], []
    for i in range(size):
        players[f"H{i}"] = attrs(120 + i * 10, 110, form=40 + i * 10)
        players[f"A{i}"] = attrs(120 + i * 10, 110, form=40 + i * 10)
        home_ids.append(f"H{i}")
        away_ids.append(f"A{i}")
    return build_registry(players), home_ids, away_ids


def play_out(harness: Harness, match_id: str, words: list[int], segments: int | None = None) -> None:
    count = segments if segments is not None else harness.controller.config.segment_count
    for _ in range(count):
        token = harness.controller.get_match(match_id).last_request_id
        harness.controller.fulfill(ORACLE, token, words)


class FailingWriteRegistry(InMemoryPlayerRegistry):
    """Registry whose experience writes start failing after ``allowed_writes`` succeed."""

    def __init__(self, allowed_writes: int) -> None:
        super().__init__()
        self.allowed_writes = allowed_writes
        self.writes = 0

    def add_experience(self, player_id: str, amount: int) -> None:
        if self.writes >= self.allowed_writes:
            raise ConnectionError("registry unavailable")
        self.writes += 1
        super().add_experience(player_id, amount)
