from .demo import build_demo_squads, demo_attributes
from .memory import InMemoryPlayerRegistry, PlayerRecord, PlayerTier, TIER_THRESHOLDS, tier_for_experience

__all__ = [
    "InMemoryPlayerRegistry",
    "build_demo_squads",
    "demo_attributes",
    "PlayerRecord",
    "PlayerTier",
    "TIER_THRESHOLDS",
    "tier_for_experience",
]
