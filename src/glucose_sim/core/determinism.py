"""
Determinism helpers.

Every random decision in the core (board generation, refill, offers) takes an
explicit ``random.Random``. These helpers build them:
- a seeded RNG for a session
- stable sub-streams derived from a base seed, so board and offer generation
  do not consume each other's sequence

Non-goals:
- Cryptographic security
- Reproducibility across Python versions
"""

import random
import zlib
from typing import Optional


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Return a new RNG, seeded when ``seed`` is given."""
    if seed is None:
        return random.Random()
    return random.Random(int(seed) & 0xFFFFFFFF)


def derive_seed(seed: int, tag: str) -> int:
    # Stable hashing (NEVER the built-in hash(), which is randomized per process).
    crc = zlib.crc32(tag.encode("utf-8")) & 0xFFFFFFFF
    return (int(seed) ^ crc) & 0xFFFFFFFF


def derive_rng(seed: int, tag: str) -> random.Random:
    """Independent RNG stream for one subsystem, derived from a base seed."""
    return random.Random(derive_seed(seed, str(tag)))
