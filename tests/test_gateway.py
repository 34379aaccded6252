from __future__ import annotations

import pytest

from mfe.contracts import RandomnessConfig
from mfe.core import CorrelationError, StateError, seeded_random
from mfe.oracle import LocalRandomnessOracle, RandomnessGateway


def _gateway() -> tuple[RandomnessGateway, LocalRandomnessOracle, list]:
    oracle = LocalRandomnessOracle(seeded_random(5))
    gateway = RandomnessGateway(oracle, RandomnessConfig(key_hash="kh", confirmations=2, callback_limit=1000))
    oracle.gateway = gateway
    received: list = []
    gateway.bind(lambda token, words: received.append((gateway.consume(token), list(words))))
    return gateway, oracle, received


def test_request_forwards_configuration_to_oracle():
    gateway, oracle, _ = _gateway()
    token = gateway.request_randomness("M1", "segment:1")
    request = oracle.requests[0]
    assert request.token == token
    assert (request.key_hash, request.confirmations, request.callback_limit, request.word_count) == ("kh", 2, 1000, 7)
    assert gateway.lookup(token) == "M1"
    assert gateway.outstanding_for("M1") == token


def test_token_is_single_use():
    gateway, _, _ = _gateway()
    token = gateway.request_randomness("M1", "segment:1")
    assert gateway.consume(token) == "M1"
    with pytest.raises(CorrelationError):
        gateway.consume(token)
    with pytest.raises(CorrelationError):
        gateway.lookup(token)
    assert gateway.outstanding_for("M1") is None


def test_one_outstanding_request_per_match():
    gateway, _, _ = _gateway()
    gateway.request_randomness("M1", "segment:1")
    with pytest.raises(StateError):
        gateway.request_randomness("M1", "segment:1")
    gateway.request_randomness("M2", "segment:1")
    assert {p.match_id for p in gateway.pending()} == {"M1", "M2"}


def test_purge_only_matches_own_token():
    gateway, _, _ = _gateway()
    token = gateway.request_randomness("M1", "segment:1")
    assert gateway.purge(token, "M2") is False
    assert gateway.purge(None, "M1") is False
    assert gateway.purge(token, "M1") is True
    assert gateway.purge(token, "M1") is False
    assert gateway.pending() == []


def test_supply_for_unknown_token_is_silent_noop():
    gateway, oracle, received = _gateway()
    token = gateway.request_randomness("M1", "segment:1")

    assert oracle.deliver(token) is True
    assert len(received) == 1
    assert received[0][0] == "M1"
    assert len(received[0][1]) == 7

    assert gateway.supply_randomness(token, [1] * 7) is False
    assert gateway.supply_randomness("never-issued", [1] * 7) is False
    assert len(received) == 1


def test_supply_requires_bound_consumer():
    gateway = RandomnessGateway(LocalRandomnessOracle(seeded_random(1)))
    with pytest.raises(RuntimeError):
        gateway.supply_randomness("t", [0] * 7)


def test_configure_validates():
    gateway, _, _ = _gateway()
    with pytest.raises(ValueError):
        gateway.configure(RandomnessConfig(word_count=8))
    with pytest.raises(ValueError):
        gateway.configure(RandomnessConfig(key_hash=""))
    gateway.configure(RandomnessConfig(key_hash="other", confirmations=10))
    assert gateway.config.confirmations == 10


def test_local_oracle_words_are_seeded_per_token():
    first = LocalRandomnessOracle(seeded_random(42))
    second = LocalRandomnessOracle(seeded_random(42))
    assert first.words_for("vrf_000001", 7) == second.words_for("vrf_000001", 7)
    assert first.words_for("vrf_000001", 7) != first.words_for("vrf_000002", 7)
    assert all(0 <= w < 2**256 for w in first.words_for("vrf_000003", 7))
