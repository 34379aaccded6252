from __future__ import annotations

import json

import pytest

from mfe.contracts import ActionType, EngineConfig, ProgressionPolicy, Role
from mfe.core import AccessDeniedError, AccessPolicy, default_engine_config, engine_config_from_dict, load_engine_config


def test_default_config_is_valid():
    config = default_engine_config()
    config.validate()
    assert config.segment_count == 10
    assert config.progression is ProgressionPolicy.AUTO
    assert config.role_grants["admin"] == [Role.ADMIN]


def test_config_from_dict_overrides_and_validates():
    config = engine_config_from_dict(
        {
            "progression": "manual",
            "randomness": {"key_hash": "0xabc", "confirmations": 5},
            "role_grants": {"ops": ["admin"], "vrf": ["oracle"]},
        }
    )
    assert config.progression is ProgressionPolicy.MANUAL
    assert config.randomness.key_hash == "0xabc"
    assert config.randomness.confirmations == 5
    assert config.role_grants == {"ops": [Role.ADMIN], "vrf": [Role.ORACLE]}


@pytest.mark.parametrize(
    "raw",
    [
        {"segment_count": 0},
        {"min_roster_size": 5, "max_roster_size": 2},
        {"randomness": {"word_count": 6}},
        {"progression": "sometimes"},
        {"overtime": True},
    ],
)
def test_invalid_config_rejected(raw):
    with pytest.raises(ValueError):
        engine_config_from_dict(raw)


def test_load_engine_config_from_file(tmp_path):
    path = tmp_path / "engine_config.json"
    path.write_text(json.dumps({"max_referee_strictness": 5}), encoding="utf-8")
    assert load_engine_config(path).max_referee_strictness == 5

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_engine_config(path)


def test_access_policy_table():
    policy = AccessPolicy(EngineConfig(role_grants={"ops": [Role.ADMIN]}).role_grants)
    ops = policy.identity("ops")
    nobody = policy.identity("nobody")
    policy.require(ops, ActionType.CREATE_MATCH)
    policy.require(nobody, ActionType.GET_MATCH)
    with pytest.raises(AccessDeniedError):
        policy.require(nobody, ActionType.FORCE_FAIL)
    with pytest.raises(AccessDeniedError):
        policy.require(ops, ActionType.FULFILL_RANDOMNESS)
