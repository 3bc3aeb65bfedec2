from __future__ import annotations

import hashlib
import logging
import random
from dataclasses import dataclass
from typing import Protocol, Union

logger = logging.getLogger(__name__)


class SupportsRandom(Protocol):
    """The two draws the battle engine needs from a random source.

    ``random.Random`` satisfies this directly, as does :class:`RandomSource`.
    Tests may pass any object exposing the same two methods.
    """

    def random(self) -> float:  # pragma: no cover - protocol
        ...

    def randint(self, a: int, b: int) -> int:  # pragma: no cover - protocol
        ...


def derive_seed(source: str) -> int:
    """Derive a 32-bit integer seed from an arbitrary string using SHA256."""
    digest = hashlib.sha256(source.encode("utf-8")).digest()
    val = int.from_bytes(digest[:8], "big", signed=False)
    return val & 0xFFFFFFFF


@dataclass
class RandomSource:
    """
    A thin wrapper around random.Random to:
    - centralize RNG handling for one battle
    - accept int or string seeds so battles can be replayed from a label
    - never touch the global random state
    """

    seed: Union[int, str, None] = None

    def __post_init__(self) -> None:
        if self.seed is None:
            self._rng = random.Random()
            self.effective_seed = None
            logger.debug("Initialized RandomSource with non-deterministic seed")
            return
        if isinstance(self.seed, int):
            self.effective_seed = self.seed
        else:
            self.effective_seed = derive_seed(str(self.seed))
        self._rng = random.Random(self.effective_seed)
        logger.debug("Initialized RandomSource with seed=%r (effective=%d)", self.seed, self.effective_seed)

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


__all__ = ["RandomSource", "SupportsRandom", "derive_seed"]
