from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mfe.contracts import EngineConfig, ProgressionPolicy, RandomnessConfig, Role

DEFAULT_ADMIN_ID = "admin"
DEFAULT_ORACLE_ID = "oracle"

_KNOWN_KEYS = {
    "segment_count",
    "min_roster_size",
    "max_roster_size",
    "max_referee_strictness",
    "progression",
    "randomness",
    "role_grants",
}


def default_engine_config(progression: ProgressionPolicy = ProgressionPolicy.AUTO) -> EngineConfig:
    return EngineConfig(
        progression=progression,
        randomness=RandomnessConfig(),
        role_grants={
            DEFAULT_ADMIN_ID: [Role.ADMIN],
            DEFAULT_ORACLE_ID: [Role.ORACLE],
        },
    )


def engine_config_from_dict(data: dict[str, Any]) -> EngineConfig:
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"unknown engine config keys: {sorted(unknown)}")

    base = default_engine_config()
    randomness_raw = data.get("randomness", {})
    if not isinstance(randomness_raw, dict):
        raise ValueError("randomness config must be an object")
    randomness = RandomnessConfig(
        key_hash=str(randomness_raw.get("key_hash", base.randomness.key_hash)),
        confirmations=int(randomness_raw.get("confirmations", base.randomness.confirmations)),
        callback_limit=int(randomness_raw.get("callback_limit", base.randomness.callback_limit)),
        word_count=int(randomness_raw.get("word_count", base.randomness.word_count)),
    )
    grants_raw = data.get("role_grants")
    if grants_raw is None:
        grants = base.role_grants
    else:
        grants = {str(caller): [Role(r) for r in roles] for caller, roles in grants_raw.items()}

    config = EngineConfig(
        segment_count=int(data.get("segment_count", base.segment_count)),
        min_roster_size=int(data.get("min_roster_size", base.min_roster_size)),
        max_roster_size=int(data.get("max_roster_size", base.max_roster_size)),
        max_referee_strictness=int(data.get("max_referee_strictness", base.max_referee_strictness)),
        progression=ProgressionPolicy(data.get("progression", base.progression.value)),
        randomness=randomness,
        role_grants=grants,
    )
    config.validate()
    return config


def load_engine_config(path: Path) -> EngineConfig:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"engine config at {path} must be a JSON object")
    return engine_config_from_dict(raw)
