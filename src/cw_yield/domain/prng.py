"""Portable seeded randomness for the yield simulator.

`seeded_unit` is a pure function of its integer seed (SplitMix64 finalizer, top 53
bits scaled into [0, 1)). It never touches the `random` module's global state, so
the same seed yields the same float in every process and on every platform.
"""

_MASK64 = (1 << 64) - 1
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def splitmix64(seed: int) -> int:
    z = (seed + _GOLDEN_GAMMA) & _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def seeded_unit(seed: int) -> float:
    return (splitmix64(seed) >> 11) * (1.0 / (1 << 53))


def generate_seed(user_id: int, major: int, minor: int) -> int:
    """user·1_000_000 + major·100 + minor (e.g. major = day of year, minor = hour)."""
    return user_id * 1_000_000 + major * 100 + minor
