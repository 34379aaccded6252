from __future__ import annotations

import hashlib
import random

from mfe.contracts import RandomSource

SEED_BYTES = 8


def derive_seed(parent_seed: int, label: str) -> int:
    digest = hashlib.sha256(f"{parent_seed}/{label}".encode("utf-8")).digest()
    return int.from_bytes(digest[:SEED_BYTES], "big")


class SeededRandomSource(RandomSource):
    """Word and attribute draws for the local oracle and demo squads.

    Each labelled substream gets its own seed derived from the parent, so the
    words delivered for one token never depend on how many other tokens were
    served first. An unseeded source yields unseeded children.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def randbits(self, k: int) -> int:
        return self._rng.getrandbits(k)

    def spawn(self, substream_id: str) -> SeededRandomSource:
        if self.seed is None:
            return SeededRandomSource()
        return SeededRandomSource(derive_seed(self.seed, substream_id))


def entropy_random() -> SeededRandomSource:
    return SeededRandomSource()


def seeded_random(seed: int) -> SeededRandomSource:
    return SeededRandomSource(seed)
