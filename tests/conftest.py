"""Pytest configuration and shared fixtures."""

import math

import numpy as np
import pytest

from curvecloud.config import EngineConfig
from curvecloud.core.gesture import FINGER_BASES, FINGER_TIPS, HandLandmark
from curvecloud.engine import ParticleEngine


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source."""
    return np.random.default_rng(42)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def small_config() -> EngineConfig:
    """A small particle count keeps engine tests fast."""
    return EngineConfig(particle_count=500, seed=7)


@pytest.fixture
def engine(small_config, clock) -> ParticleEngine:
    return ParticleEngine(small_config, clock=clock)


def make_hand(openness: float = 1.0, palm: float = 0.15, angle: float = 0.0, center=(0.5, 0.6)):
    """
    Build a (21, 2) frame where every finger base sits ``palm`` from the
    wrist and every tip sits ``2 * palm * openness`` along the same ray.
    """
    center = np.asarray(center, dtype=np.float64)
    lm = np.tile(center, (21, 1))
    fan = (-0.9, -0.25, 0.0, 0.25, 0.5)
    for offset, base, tip in zip(fan, FINGER_BASES, FINGER_TIPS):
        a = angle + offset
        direction = np.array([math.sin(a), -math.cos(a)])
        for idx in range(base, tip + 1):
            frac = (idx - base) / (tip - base)
            reach = palm + (2.0 * palm * openness - palm) * frac
            lm[idx] = center + direction * reach
    lm[HandLandmark.THUMB_CMC] = center + np.array([-0.05, -0.02])
    return lm


@pytest.fixture
def open_hand() -> np.ndarray:
    return make_hand(openness=1.0)


@pytest.fixture
def fist() -> np.ndarray:
    return make_hand(openness=0.0)


@pytest.fixture
def hand():
    """Factory fixture for synthetic landmark frames."""
    return make_hand
