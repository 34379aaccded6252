from .types import (
    ActionRequest,
    ActionResult,
    ActionType,
    CallerIdentity,
    EngineConfig,
    ExperienceAward,
    ForensicArtifact,
    Match,
    MatchEvent,
    MatchEventType,
    MatchStatus,
    PlayerAttributes,
    PlayerRegistry,
    PlayerSnapshot,
    ProgressionPolicy,
    RandomnessConfig,
    RandomnessOracle,
    RandomSource,
    Role,
    SegmentEventType,
    SegmentOutcome,
    ShotAccuracy,
    Side,
    TacticalStyle,
    TeamRoster,
    ValidationError,
    ValidationIssue,
)

__all__ = [
    "ActionRequest",
    "ActionResult",
    "ActionType",
    "CallerIdentity",
    "EngineConfig",
    "ExperienceAward",
    "ForensicArtifact",
    "Match",
    "MatchEvent",
    "MatchEventType",
    "MatchStatus",
    "PlayerAttributes",
    "PlayerRegistry",
    "PlayerSnapshot",
    "ProgressionPolicy",
    "RandomnessConfig",
    "RandomnessOracle",
    "RandomSource",
    "Role",
    "SegmentEventType",
    "SegmentOutcome",
    "ShotAccuracy",
    "Side",
    "TacticalStyle",
    "TeamRoster",
    "ValidationError",
    "ValidationIssue",
]
