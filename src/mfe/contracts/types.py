from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence


class MatchStatus(str, Enum):
    PENDING = "pending"
    SETUP = "setup"
    ACTIVE = "active"
    COOLDOWN = "cooldown"
    CONCLUDED = "concluded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (MatchStatus.CONCLUDED, MatchStatus.FAILED)


class TacticalStyle(int, Enum):
    BALANCED = 0
    AGGRESSIVE = 1
    DEFENSIVE = 2


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


class SegmentEventType(str, Enum):
    SHOT = "shot"
    FOUL = "foul"
    POSSESSION_CHANGE = "possession_change"
    CORNER = "corner"


class ShotAccuracy(str, Enum):
    ON_TARGET = "on_target"
    OFF_TARGET = "off_target"
    WOODWORK = "woodwork"


class ProgressionPolicy(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class Role(str, Enum):
    ADMIN = "admin"
    ORACLE = "oracle"


class ActionType(str, Enum):
    CREATE_MATCH = "create_match"
    FULFILL_RANDOMNESS = "fulfill_randomness"
    TRIGGER_NEXT_SEGMENT = "trigger_next_segment"
    FORCE_FAIL = "force_fail"
    CONFIGURE_RANDOMNESS = "configure_randomness"
    GET_MATCH = "get_match"
    LIST_MATCHES = "list_matches"
    GET_PENDING_REQUESTS = "get_pending_requests"


class MatchEventType(str, Enum):
    MATCH_CREATED = "match_created"
    RANDOMNESS_REQUESTED = "randomness_requested"
    SEGMENT_SIMULATION_STARTED = "segment_simulation_started"
    SEGMENT_RESOLVED = "segment_resolved"
    GOAL_SCORED = "goal_scored"
    MATCH_CONCLUDED = "match_concluded"
    EXPERIENCE_AWARDED = "experience_awarded"
    RANDOMNESS_REQUEST_FAILED = "randomness_request_failed"


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...

    def randbits(self, k: int) -> int: ...

    def spawn(self, substream_id: str) -> RandomSource: ...


class PlayerRegistry(Protocol):
    def exists(self, player_id: str) -> bool: ...

    def owner_of(self, player_id: str) -> str: ...

    def get_attributes(self, player_id: str) -> PlayerAttributes: ...

    def add_experience(self, player_id: str, amount: int) -> None: ...


class RandomnessOracle(Protocol):
    def request(self, key_hash: str, confirmations: int, callback_limit: int, word_count: int) -> str: ...


@dataclass(frozen=True, slots=True)
class PlayerAttributes:
    attack: int
    defense: int
    stamina: int
    form: int
    morale: int


@dataclass(slots=True)
class PlayerSnapshot:
    player_id: str
    owner: str
    attributes: PlayerAttributes
    goals_scored: int = 0


@dataclass(slots=True)
class TeamRoster:
    players: list[PlayerSnapshot]
    tactical_style: TacticalStyle
    attack_power: int = 0
    defense_power: int = 0
    score: int = 0

    def player_ids(self) -> list[str]:
        return [p.player_id for p in self.players]


@dataclass(frozen=True, slots=True)
class SegmentOutcome:
    segment_index: int
    attacking_side: Side
    advantage: int
    event_type: SegmentEventType
    shot_attempted: bool
    success_rate: int | None = None
    threatening: bool = False
    accuracy: ShotAccuracy | None = None
    save_probability: int | None = None
    goal: bool = False
    scorer_index: int | None = None
    scorer_id: str | None = None


@dataclass(frozen=True, slots=True)
class ExperienceAward:
    player_id: str
    owner: str
    side: Side
    amount: int
    goals: int
    result_bonus: int


@dataclass(slots=True)
class Match:
    match_id: str
    home: TeamRoster
    away: TeamRoster
    initiator: str
    created_at: datetime
    referee_strictness: int
    status: MatchStatus = MatchStatus.SETUP
    current_segment: int = 0
    last_request_id: str | None = None
    segments: list[SegmentOutcome] = field(default_factory=list)
    awards: list[ExperienceAward] = field(default_factory=list)
    concluded_at: datetime | None = None
    failed_at: datetime | None = None

    def roster(self, side: Side) -> TeamRoster:
        return self.home if side is Side.HOME else self.away

    @property
    def scoreline(self) -> tuple[int, int]:
        return (self.home.score, self.away.score)


@dataclass(slots=True)
class MatchEvent:
    sequence: int
    event_type: MatchEventType
    match_id: str
    time: datetime
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CallerIdentity:
    caller_id: str
    roles: frozenset[Role] = frozenset()


@dataclass(slots=True)
class RandomnessConfig:
    key_hash: str = "local-key"
    confirmations: int = 3
    callback_limit: int = 500_000
    word_count: int = 7

    def validate(self) -> None:
        if not self.key_hash:
            raise ValueError("randomness key_hash must not be empty")
        if self.confirmations < 1:
            raise ValueError("randomness confirmations must be at least 1")
        if self.callback_limit <= 0:
            raise ValueError("randomness callback_limit must be positive")
        if self.word_count != 7:
            raise ValueError(f"segment simulation consumes exactly 7 words, got {self.word_count}")


@dataclass(slots=True)
class EngineConfig:
    segment_count: int = 10
    min_roster_size: int = 1
    max_roster_size: int = 11
    max_referee_strictness: int = 10
    progression: ProgressionPolicy = ProgressionPolicy.AUTO
    randomness: RandomnessConfig = field(default_factory=RandomnessConfig)
    role_grants: dict[str, list[Role]] = field(default_factory=dict)

    def validate(self) -> None:
        if self.segment_count < 1:
            raise ValueError("segment_count must be positive")
        if not 1 <= self.min_roster_size <= self.max_roster_size:
            raise ValueError("roster bounds must satisfy 1 <= min <= max")
        if self.max_referee_strictness < 0:
            raise ValueError("max_referee_strictness must not be negative")
        self.randomness.validate()


@dataclass(slots=True)
class ActionRequest:
    request_id: str
    action_type: ActionType | str
    payload: dict[str, Any]
    caller_id: str


@dataclass(slots=True)
class ActionResult:
    request_id: str
    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ValidationIssue:
    code: str
    severity: str
    field_path: str
    entity_id: str
    message: str


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        message = "; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues)
        super().__init__(message)
        self.issues = issues


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]
