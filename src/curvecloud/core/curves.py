"""
Parametric curve point sets.

Every curve family maps a particle count to a flat float32 position buffer
(x0, y0, z0, x1, y1, z1, ...). Particle i samples the curve at
t = (i / count) * 2pi; most families add an independent random azimuth t2
and a small multiplicative jitter so the cloud has volume instead of being
a one-pixel line.

Families:
  lissajous    3:4:5 frequency ratio, pi/2 phase on x, half-depth z
  heart        classic polynomial heart, thickened along z by sin(t2)
  butterfly    Fay's transcendental butterfly at 6x the base angle
  archimedean  linear-radius spiral climbing in z (corkscrew)
  catenary     cosh profile swept around a full revolution
  lemniscate   Bernoulli figure-eight with a z wobble
  rose         five-petal rose r = cos(5t)
  torusKnot    (3, 7) torus knot
  lorenz       explicit-Euler Lorenz trajectory, one state per particle
  galaxy       four logarithmic-ish spiral arms, dense core
"""

import enum
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from curvecloud.config import MAX_PARTICLE_COUNT, validate_particle_count
from curvecloud.errors import InvalidArgumentError

# World-space scale applied to every axis of every curve
CURVE_SCALE: float = 150.0

# Half-width of the per-particle multiplicative jitter
NOISE_AMPLITUDE: float = 0.05

# Lorenz system
LORENZ_SIGMA: float = 10.0
LORENZ_RHO: float = 28.0
LORENZ_BETA: float = 8.0 / 3.0
LORENZ_DT: float = 0.005
LORENZ_MAX_STEPS: int = 5000
LORENZ_START: Tuple[float, float, float] = (0.1, 0.0, 0.0)
LORENZ_OUTPUT_SCALE: float = 0.03
LORENZ_Z_OFFSET: float = 25.0

GALAXY_ARMS: int = 4


class CurveId(enum.Enum):
    """The ten curve families, in cycling order."""

    LISSAJOUS = "lissajous"
    HEART = "heart"
    BUTTERFLY = "butterfly"
    ARCHIMEDEAN = "archimedean"
    CATENARY = "catenary"
    LEMNISCATE = "lemniscate"
    ROSE = "rose"
    TORUS_KNOT = "torusKnot"
    LORENZ = "lorenz"
    GALAXY = "galaxy"

    @property
    def index(self) -> int:
        return CURVE_ORDER.index(self)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_index(cls, index: int) -> "CurveId":
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise InvalidArgumentError(f"curve index must be an int, got {index!r}")
        if not 0 <= index < len(CURVE_ORDER):
            raise InvalidArgumentError(
                f"curve index {index} out of range [0, {len(CURVE_ORDER)})"
            )
        return CURVE_ORDER[int(index)]

    @classmethod
    def parse(cls, value: Union["CurveId", str]) -> "CurveId":
        """Accept a CurveId, its value ("torusKnot") or its name ("TORUS_KNOT")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
            member = cls.__members__.get(value.upper())
            if member is not None:
                return member
        raise InvalidArgumentError(f"unknown curve id: {value!r}")


CURVE_ORDER: Tuple[CurveId, ...] = tuple(CurveId)

_DISPLAY_NAMES: Dict[CurveId, str] = {
    CurveId.LISSAJOUS: "Lissajous Curve",
    CurveId.HEART: "Heart Curve",
    CurveId.BUTTERFLY: "Butterfly Curve",
    CurveId.ARCHIMEDEAN: "Archimedean Spiral",
    CurveId.CATENARY: "Catenary",
    CurveId.LEMNISCATE: "Lemniscate",
    CurveId.ROSE: "Rose Curve",
    CurveId.TORUS_KNOT: "Torus Knot",
    CurveId.LORENZ: "Lorenz Attractor",
    CurveId.GALAXY: "Galaxy Spiral",
}


# ---------------------------------------------------------------------------
# Lorenz integration
# ---------------------------------------------------------------------------

def lorenz_trajectory(
    steps: int,
    dt: float = LORENZ_DT,
    sigma: float = LORENZ_SIGMA,
    rho: float = LORENZ_RHO,
    beta: float = LORENZ_BETA,
    start: Tuple[float, float, float] = LORENZ_START,
) -> np.ndarray:
    """Explicit Euler states of the Lorenz system.

    Returns an array of shape (steps + 1, 3); row k is the state after k
    steps, so row 0 is ``start``.
    """
    states = np.empty((steps + 1, 3), dtype=np.float64)
    x, y, z = start
    states[0] = (x, y, z)
    for k in range(1, steps + 1):
        dx = sigma * (y - x)
        dy = x * (rho - z) - y
        dz = x * y - beta * z
        x += dx * dt
        y += dy * dt
        z += dz * dt
        states[k] = (x, y, z)
    return states


# ---------------------------------------------------------------------------
# Curve families
#
# Each takes (u, t2, noise, rng) where u = i / count in [0, 1), t2 is an
# independent azimuth in [0, 2pi) and noise is in [-0.05, 0.05). Each
# returns unscaled (x, y, z).
# ---------------------------------------------------------------------------

Coords = Tuple[np.ndarray, np.ndarray, np.ndarray]


def _lissajous(u, t2, noise, rng) -> Coords:
    t = u * 2.0 * math.pi
    a, b, c = 3.0, 4.0, 5.0
    delta = math.pi / 2.0
    j = 1.0 + noise
    return (
        np.sin(a * t + delta) * j,
        np.sin(b * t) * j,
        np.sin(c * t) * 0.5 * j,
    )


def _heart(u, t2, noise, rng) -> Coords:
    t = u * 2.0 * math.pi
    x = 16.0 * np.sin(t) ** 3 * 0.08
    y = (13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)) * 0.08
    z = np.sin(t2) * np.sin(t) * 0.3 * (1.0 + noise)
    return x, y, z


def _butterfly(u, t2, noise, rng) -> Coords:
    bt = u * 2.0 * math.pi * 6.0
    r = np.exp(np.cos(bt)) - 2.0 * np.cos(4.0 * bt) - np.sin(bt / 12.0) ** 5
    j = 1.0 + noise
    return (
        np.sin(bt) * r * 0.3 * j,
        np.cos(bt) * r * 0.3 * j,
        np.sin(bt * 0.5) * 0.3 * j,
    )


def _archimedean(u, t2, noise, rng) -> Coords:
    at = u * 2.0 * math.pi * 4.0
    r = 0.1 + at * 0.05
    j = 1.0 + noise
    return r * np.cos(at) * j, r * np.sin(at) * j, at * 0.1 * j


def _catenary(u, t2, noise, rng) -> Coords:
    # Profile parameter runs over [-3, 3) along the axis of revolution
    ct = (u - 0.5) * 6.0
    r = np.cosh(ct) * 0.3
    j = 1.0 + noise
    return r * np.cos(t2) * j, ct * 0.3 * j, r * np.sin(t2) * j


def _lemniscate(u, t2, noise, rng) -> Coords:
    t = u * 2.0 * math.pi
    cos_t = np.cos(t)
    sin_t = np.sin(t)
    denom = 1.0 + sin_t * sin_t
    j = 1.0 + noise
    return cos_t / denom * j, sin_t * cos_t / denom * j, np.sin(t2) * 0.3 / denom * j


def _rose(u, t2, noise, rng) -> Coords:
    t = u * 2.0 * math.pi
    k = 5.0
    r = np.cos(k * t)
    j = 1.0 + noise
    return r * np.cos(t) * j, r * np.sin(t) * j, np.sin(k * t * 0.5) * 0.3 * j


def _torus_knot(u, t2, noise, rng) -> Coords:
    t = u * 2.0 * math.pi
    p, q = 3.0, 7.0
    phi = t * p
    theta = t * q
    tube = 0.5 + 0.3 * np.cos(theta)
    j = 1.0 + noise
    return tube * np.cos(phi) * j, tube * np.sin(phi) * j, 0.3 * np.sin(theta) * j


def _lorenz(u, t2, noise, rng) -> Coords:
    count = len(u)
    # Integer floor(5000 * i / count); every particle restarts from LORENZ_START
    steps = (np.arange(count, dtype=np.int64) * LORENZ_MAX_STEPS) // max(count, 1)
    max_steps = int(steps[-1]) if count else 0
    states = lorenz_trajectory(max_steps)[steps]
    jitter = noise * 0.5
    return (
        states[:, 0] * LORENZ_OUTPUT_SCALE + jitter,
        states[:, 1] * LORENZ_OUTPUT_SCALE + jitter,
        (states[:, 2] - LORENZ_Z_OFFSET) * LORENZ_OUTPUT_SCALE + jitter,
    )


def _galaxy(u, t2, noise, rng) -> Coords:
    count = len(u)
    arm = rng.integers(0, GALAXY_ARMS, count)
    arm_angle = arm / GALAXY_ARMS * 2.0 * math.pi
    # sqrt biases particles toward the core
    distance = np.sqrt(rng.random(count))
    angle = arm_angle + distance * 4.0 + (rng.random(count) - 0.5) * 0.5
    j = 1.0 + noise
    return (
        distance * np.cos(angle) * j,
        (rng.random(count) - 0.5) * 0.15 * (1.0 - distance) * j,
        distance * np.sin(angle) * j,
    )


_CURVE_FUNCS: Dict[CurveId, Callable[..., Coords]] = {
    CurveId.LISSAJOUS: _lissajous,
    CurveId.HEART: _heart,
    CurveId.BUTTERFLY: _butterfly,
    CurveId.ARCHIMEDEAN: _archimedean,
    CurveId.CATENARY: _catenary,
    CurveId.LEMNISCATE: _lemniscate,
    CurveId.ROSE: _rose,
    CurveId.TORUS_KNOT: _torus_knot,
    CurveId.LORENZ: _lorenz,
    CurveId.GALAXY: _galaxy,
}


def generate(
    curve_id: Union[CurveId, str],
    count: int,
    rng: Optional[np.random.Generator] = None,
    limit: int = MAX_PARTICLE_COUNT,
) -> np.ndarray:
    """
    Sample ``count`` particles on one curve family.

    Args:
        curve_id: CurveId member or its string value.
        count: Number of particles (>= 0).
        rng: Random source for the jitter terms (default: fresh generator).
        limit: Largest accepted count.

    Returns:
        Flat float32 array of length 3 * count.
    """
    curve = CurveId.parse(curve_id)
    count = validate_particle_count(count, limit)
    if count == 0:
        return np.zeros(0, dtype=np.float32)

    rng = rng if rng is not None else np.random.default_rng()
    u = np.arange(count, dtype=np.float64) / count
    t2 = rng.random(count) * 2.0 * math.pi
    noise = (rng.random(count) - 0.5) * (2.0 * NOISE_AMPLITUDE)

    x, y, z = _CURVE_FUNCS[curve](u, t2, noise, rng)

    positions = np.empty((count, 3), dtype=np.float32)
    positions[:, 0] = x * CURVE_SCALE
    positions[:, 1] = y * CURVE_SCALE
    positions[:, 2] = z * CURVE_SCALE
    return positions.reshape(-1)


# ---------------------------------------------------------------------------
# Precomputed sets
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class CurveLibrary:
    """Read-only position buffers for every curve at one particle count."""

    count: int
    buffers: Mapping[CurveId, np.ndarray]

    def __getitem__(self, curve: Union[CurveId, str]) -> np.ndarray:
        return self.buffers[CurveId.parse(curve)]

    def __len__(self) -> int:
        return len(self.buffers)

    def bounds(self, curve: Union[CurveId, str]) -> np.ndarray:
        """Per-axis (min, max) as a (3, 2) array; zeros for an empty library."""
        pts = self[curve].reshape(-1, 3)
        if len(pts) == 0:
            return np.zeros((3, 2), dtype=np.float32)
        return np.stack([pts.min(axis=0), pts.max(axis=0)], axis=1)


def generate_library(
    count: int,
    rng: Optional[np.random.Generator] = None,
    limit: int = MAX_PARTICLE_COUNT,
) -> CurveLibrary:
    """Generate all ten curves at ``count`` particles."""
    count = validate_particle_count(count, limit)
    rng = rng if rng is not None else np.random.default_rng()
    buffers = {}
    for curve in CURVE_ORDER:
        buf = generate(curve, count, rng, limit)
        buf.setflags(write=False)
        buffers[curve] = buf
    return CurveLibrary(count=count, buffers=MappingProxyType(buffers))


@dataclass(frozen=True, eq=False)
class ParticleAuxData:
    """Per-particle scalars fixed for the lifetime of a particle count."""

    random: np.ndarray  # uniform [0, 1)
    delay: np.ndarray  # uniform [0, 1), drives staggered convergence

    @classmethod
    def create(
        cls,
        count: int,
        rng: Optional[np.random.Generator] = None,
        limit: int = MAX_PARTICLE_COUNT,
    ) -> "ParticleAuxData":
        count = validate_particle_count(count, limit)
        rng = rng if rng is not None else np.random.default_rng()
        random = rng.random(count, dtype=np.float32)
        delay = rng.random(count, dtype=np.float32)
        random.setflags(write=False)
        delay.setflags(write=False)
        return cls(random=random, delay=delay)

    def __len__(self) -> int:
        return len(self.delay)

    def transition_speed(self, base: float, delay_speed: float) -> np.ndarray:
        """Per-particle convergence rate: base + delay * delay_speed."""
        return (base + self.delay.astype(np.float64) * delay_speed).astype(np.float32)
