from __future__ import annotations

from mfe.contracts import PlayerAttributes, RandomSource
from mfe.registry.memory import InMemoryPlayerRegistry


def demo_attributes(random_source: RandomSource) -> PlayerAttributes:
    return PlayerAttributes(
        attack=random_source.randint(60, 140),
        defense=random_source.randint(60, 140),
        stamina=random_source.randint(40, 100),
        form=random_source.randint(30, 80),
        morale=random_source.randint(40, 100),
    )


def build_demo_squads(
    random_source: RandomSource,
    squad_size: int = 11,
    registry: InMemoryPlayerRegistry | None = None,
) -> tuple[InMemoryPlayerRegistry, list[str], list[str]]:
    registry = registry or InMemoryPlayerRegistry()
    squads: dict[str, list[str]] = {"H": [], "A": []}
    for prefix, ids in squads.items():
        owner = f"owner_{prefix.lower()}"
        for index in range(1, squad_size + 1):
            player_id = f"{prefix}{index:02d}"
            registry.register(player_id, owner, demo_attributes(random_source))
            ids.append(player_id)
    return registry, squads["H"], squads["A"]
