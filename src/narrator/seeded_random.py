"""
Deterministic pseudo-random stream keyed by a project id.

The string is folded into a 32-bit integer (``hash * 31 + code_unit``) and used
to seed a Mulberry32 generator. All arithmetic is masked to 32 bits so the
stream matches other Mulberry32 implementations bit for bit.
"""

from collections.abc import Callable

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def hash_seed(seed: str) -> int:
    """Fold ``seed`` into an unsigned 32-bit integer over its UTF-16 code units."""
    h = 0
    data = seed.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + code_unit) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def create_seeded_random(seed: str) -> Callable[[], float]:
    """Return a Mulberry32 generator producing floats in [0, 1)."""
    state = hash_seed(seed)

    def _next() -> float:
        nonlocal state
        state = (state + _GOLDEN) & _MASK32
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    return _next


def constant_random() -> float:
    """Stand-in generator when randomization is disabled: always the midpoint."""
    return 0.5
