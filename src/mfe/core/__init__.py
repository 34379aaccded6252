from .access import AccessPolicy
from .config import DEFAULT_ADMIN_ID, DEFAULT_ORACLE_ID, default_engine_config, engine_config_from_dict, load_engine_config
from .errors import (
    AccessDeniedError,
    CorrelationError,
    EngineIntegrityError,
    MatchEngineError,
    StateError,
    TerminalStateError,
    build_forensic_artifact,
    persist_forensic_artifact,
)
from .events import EventBus
from .ids import make_id, now_utc
from .randomness import SeededRandomSource, entropy_random, seeded_random

__all__ = [
    "AccessDeniedError",
    "AccessPolicy",
    "CorrelationError",
    "DEFAULT_ADMIN_ID",
    "DEFAULT_ORACLE_ID",
    "EngineIntegrityError",
    "EventBus",
    "MatchEngineError",
    "SeededRandomSource",
    "StateError",
    "TerminalStateError",
    "build_forensic_artifact",
    "default_engine_config",
    "engine_config_from_dict",
    "entropy_random",
    "load_engine_config",
    "make_id",
    "now_utc",
    "persist_forensic_artifact",
    "seeded_random",
]
