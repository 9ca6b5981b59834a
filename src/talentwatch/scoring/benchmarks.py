"""Benchmark reference tables and noise sources.

Peer averages can carry bounded jitter. The jitter comes from an
injectable NoiseSource so evaluation stays deterministic with ZeroNoise.
"""

import random
from typing import Protocol

from talentwatch.config.settings import Settings, get_settings
from talentwatch.scoring.types import BenchmarkComparison
from talentwatch.subjects import TestType

PEER_BASELINES: dict[TestType, float] = {
    TestType.SPEED: 68,
    TestType.AGILITY: 65,
    TestType.STRENGTH: 70,
    TestType.ENDURANCE: 72,
    TestType.FLEXIBILITY: 60,
    TestType.BALANCE: 66,
}

ELITE_LEVELS: dict[TestType, float] = {
    TestType.SPEED: 88,
    TestType.AGILITY: 85,
    TestType.STRENGTH: 90,
    TestType.ENDURANCE: 92,
    TestType.FLEXIBILITY: 82,
    TestType.BALANCE: 87,
}

SPORT_AVERAGE_OFFSET = 5.0


class NoiseSource(Protocol):
    """Produces an additive offset for a peer benchmark."""

    def sample(self, test_type: TestType) -> float: ...


class ZeroNoise:
    """No jitter; benchmarks equal the base table."""

    def sample(self, test_type: TestType) -> float:
        return 0.0


class UniformNoise:
    """Uniform jitter in ``[-amplitude, amplitude]``."""

    def __init__(self, amplitude: float = 3.0, seed: int | None = None):
        if amplitude < 0:
            raise ValueError("amplitude must be non-negative")
        self.amplitude = amplitude
        self._rng = random.Random(seed)

    def sample(self, test_type: TestType) -> float:
        return self._rng.uniform(-self.amplitude, self.amplitude)


def create_noise_source(settings: Settings | None = None) -> NoiseSource:
    """Build the noise source configured in settings."""
    settings = settings or get_settings()
    if not settings.benchmark_jitter_enabled or settings.benchmark_jitter == 0:
        return ZeroNoise()
    return UniformNoise(settings.benchmark_jitter, seed=settings.benchmark_seed)


def compare_to_benchmarks(test_type: TestType, noise: NoiseSource) -> BenchmarkComparison:
    """Peer, sport and elite levels for a test type.

    The sport average is the peer average plus a fixed offset, so both
    share one noise sample.
    """
    peer = PEER_BASELINES[test_type] + noise.sample(test_type)
    return BenchmarkComparison(
        peer_average=round(peer, 1),
        sport_average=round(peer + SPORT_AVERAGE_OFFSET, 1),
        elite_level=ELITE_LEVELS[test_type],
    )
