"""
Engine configuration.

Every tuning constant the engine uses lives here so that tests and the
CLI can override it without touching module globals.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from curvecloud.errors import InvalidArgumentError

# Upper bound on particles per curve buffer
MAX_PARTICLE_COUNT: int = 1_000_000


@dataclass
class EngineConfig:
    """Configuration for a ParticleEngine."""

    # Particles
    particle_count: int = 30000
    max_particle_count: int = MAX_PARTICLE_COUNT
    seed: Optional[int] = None

    # Curve selection
    initial_curve: int = 0
    auto_switch: bool = True
    switch_interval_ms: float = 8000.0  # 8s between automatic switches

    # Staggered convergence: speed_i = base + delay_i * delay_speed
    base_transition_speed: float = 0.03
    delay_transition_speed: float = 0.02
    settle_epsilon: float = 1e-3  # world units

    # Gesture control
    gesture_sensitivity: float = 5.0
    spread_rate: float = 0.08
    scale_rate: float = 0.08
    rotation_rate: float = 0.05

    def validate(self) -> "EngineConfig":
        """Raise InvalidArgumentError on any out-of-range field."""
        validate_particle_count(self.particle_count, self.max_particle_count)
        validate_interval(self.switch_interval_ms)
        validate_sensitivity(self.gesture_sensitivity)
        for name in ("spread_rate", "scale_rate", "rotation_rate"):
            validate_rate(getattr(self, name), name)
        speed_max = self.base_transition_speed + self.delay_transition_speed
        if self.base_transition_speed <= 0 or self.delay_transition_speed < 0 or speed_max > 1:
            raise InvalidArgumentError(
                f"transition speeds must satisfy 0 < base and base + delay <= 1, "
                f"got base={self.base_transition_speed}, delay={self.delay_transition_speed}"
            )
        if self.settle_epsilon <= 0:
            raise InvalidArgumentError(f"settle_epsilon must be positive, got {self.settle_epsilon}")
        return self


def validate_particle_count(count, limit: int = MAX_PARTICLE_COUNT) -> int:
    # bool is an int subclass but never a meaningful count
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidArgumentError(f"particle count must be an int, got {count!r}")
    if count < 0:
        raise InvalidArgumentError(f"particle count must be non-negative, got {count}")
    if count > limit:
        raise InvalidArgumentError(f"particle count {count} exceeds limit {limit}")
    return int(count)


def _as_float(value, name: str) -> float:
    if isinstance(value, (str, bytes)):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}") from e


def validate_interval(interval_ms: float) -> float:
    interval_ms = _as_float(interval_ms, "switch interval")
    if not interval_ms > 0:
        raise InvalidArgumentError(f"switch interval must be positive, got {interval_ms}")
    return interval_ms


def validate_sensitivity(sensitivity: float) -> float:
    sensitivity = _as_float(sensitivity, "gesture sensitivity")
    if not sensitivity > 0:
        raise InvalidArgumentError(f"gesture sensitivity must be positive, got {sensitivity}")
    return sensitivity


def validate_rate(rate: float, name: str = "rate") -> float:
    rate = _as_float(rate, name)
    if not 0.0 < rate <= 1.0:
        raise InvalidArgumentError(f"{name} must be in (0, 1], got {rate}")
    return rate
