from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from mfe.contracts import RandomSource
from mfe.core.ids import make_id, sequential_id
from mfe.oracle.gateway import RandomnessGateway

WORD_BITS = 256


@dataclass(slots=True)
class OracleRequest:
    token: str
    key_hash: str
    confirmations: int
    callback_limit: int
    word_count: int
    delivered: bool = False


@dataclass(slots=True)
class LocalRandomnessOracle:
    """In-process oracle. Requests queue until ``deliver`` is called.

    Words for a token come from ``random_source.spawn(token)``, so with a
    seeded source and deterministic tokens the delivered sequence is fixed.
    """

    random_source: RandomSource
    gateway: RandomnessGateway | None = None
    requests: list[OracleRequest] = field(default_factory=list)
    _counter: int = 0
    deterministic_tokens: bool = True

    def request(self, key_hash: str, confirmations: int, callback_limit: int, word_count: int) -> str:
        self._counter += 1
        token = sequential_id("vrf", self._counter) if self.deterministic_tokens else make_id("vrf")
        self.requests.append(OracleRequest(token, key_hash, confirmations, callback_limit, word_count))
        return token

    def words_for(self, token: str, word_count: int) -> list[int]:
        source = self.random_source.spawn(f"words:{token}")
        return [source.randbits(WORD_BITS) for _ in range(word_count)]

    def undelivered(self) -> list[OracleRequest]:
        return [r for r in self.requests if not r.delivered]

    def deliver(self, token: str, words: Sequence[int] | None = None) -> bool:
        if self.gateway is None:
            raise RuntimeError("local oracle is not attached to a gateway")
        request = next((r for r in self.requests if r.token == token), None)
        if words is None:
            if request is None:
                raise KeyError(f"oracle never issued token '{token}'")
            words = self.words_for(token, request.word_count)
        if request is not None:
            request.delivered = True
        return self.gateway.supply_randomness(token, list(words))

    def deliver_next(self) -> bool:
        pending = self.undelivered()
        if not pending:
            return False
        return self.deliver(pending[0].token)
