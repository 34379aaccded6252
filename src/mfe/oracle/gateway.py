from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from mfe.contracts import RandomnessConfig, RandomnessOracle
from mfe.core.errors import CorrelationError, StateError
from mfe.core.ids import now_utc

logger = logging.getLogger(__name__)

RandomnessConsumer = Callable[[str, Sequence[int]], object]


@dataclass(frozen=True, slots=True)
class PendingRequest:
    token: str
    match_id: str
    purpose: str
    issued_at: datetime


class RandomnessGateway:
    """Two-phase request/supply protocol over a provider-agnostic oracle.

    Each issued token correlates to exactly one match until it is consumed by
    the first fulfilment or purged by a forced failure; after that the token
    is never read again.
    """

    def __init__(self, oracle: RandomnessOracle, config: RandomnessConfig | None = None) -> None:
        self._oracle = oracle
        self._config = config or RandomnessConfig()
        self._config.validate()
        self._pending: dict[str, PendingRequest] = {}
        self._by_match: dict[str, str] = {}
        self._lock = threading.Lock()
        self._consumer: RandomnessConsumer | None = None

    @property
    def config(self) -> RandomnessConfig:
        return self._config

    def configure(self, config: RandomnessConfig) -> None:
        config.validate()
        self._config = config

    def bind(self, consumer: RandomnessConsumer) -> None:
        self._consumer = consumer

    def request_randomness(self, match_id: str, purpose: str) -> str:
        with self._lock:
            if match_id in self._by_match:
                raise StateError(f"match '{match_id}' already has an outstanding randomness request")
            token = self._oracle.request(
                self._config.key_hash,
                self._config.confirmations,
                self._config.callback_limit,
                self._config.word_count,
            )
            if token in self._pending:
                raise StateError(f"oracle reissued live token '{token}'")
            self._pending[token] = PendingRequest(token=token, match_id=match_id, purpose=purpose, issued_at=now_utc())
            self._by_match[match_id] = token
        logger.info("randomness requested token=%s match=%s purpose=%s", token, match_id, purpose)
        return token

    def lookup(self, token: str) -> str:
        with self._lock:
            pending = self._pending.get(token)
        if pending is None:
            raise CorrelationError(f"unknown or consumed randomness token '{token}'")
        return pending.match_id

    def consume(self, token: str) -> str:
        with self._lock:
            pending = self._pending.pop(token, None)
            if pending is None:
                raise CorrelationError(f"unknown or consumed randomness token '{token}'")
            self._by_match.pop(pending.match_id, None)
        return pending.match_id

    def purge(self, token: str | None, match_id: str) -> bool:
        """Drop the correlation if ``token`` is still live for ``match_id``."""
        with self._lock:
            pending = self._pending.get(token) if token is not None else None
            if pending is None or pending.match_id != match_id:
                return False
            del self._pending[pending.token]
            self._by_match.pop(match_id, None)
        logger.info("randomness request purged token=%s match=%s", token, match_id)
        return True

    def outstanding_for(self, match_id: str) -> str | None:
        with self._lock:
            return self._by_match.get(match_id)

    def issued_at(self, token: str) -> datetime | None:
        with self._lock:
            pending = self._pending.get(token)
        return pending.issued_at if pending else None

    def pending(self) -> list[PendingRequest]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda p: p.issued_at)

    def supply_randomness(self, token: str, words: Sequence[int]) -> bool:
        """Inbound delivery from the oracle. Unknown or consumed tokens are a no-op."""
        if self._consumer is None:
            raise RuntimeError("randomness gateway has no bound consumer")
        try:
            self._consumer(token, words)
        except CorrelationError:
            logger.warning("ignored fulfilment for unknown or consumed token=%s", token)
            return False
        return True
