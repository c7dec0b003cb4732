"""
Exponential-approach smoothing for control signals.

Applies a first-order filter per frame so gesture-driven values glide
instead of jumping with every noisy tracker sample.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from curvecloud.config import validate_rate
from curvecloud.errors import InvalidArgumentError

# Target ranges
SPREAD_RANGE = (0.2, 4.0)
SCALE_RANGE = (0.3, 2.3)

# Rest values used when no hand is tracked
REST_SPREAD: float = 1.0
REST_SCALE: float = 1.0
REST_ROTATION: float = 0.0

DEFAULT_SPREAD_RATE: float = 0.08
DEFAULT_SCALE_RATE: float = 0.08
DEFAULT_ROTATION_RATE: float = 0.05


def lerp(current: float, target: float, factor: float) -> float:
    return current + (target - current) * factor


class ParameterSmoother:
    """
    A scalar that relaxes toward a target by a fixed fraction per update.

    The target is clamped into [low, high] when bounds are given; the
    current value is only ever moved by update().
    """

    def __init__(
        self,
        current: float = 0.0,
        target: Optional[float] = None,
        rate: float = 0.08,
        low: Optional[float] = None,
        high: Optional[float] = None,
    ):
        if low is not None and high is not None and low > high:
            raise InvalidArgumentError(f"low bound {low} exceeds high bound {high}")
        self.low = low
        self.high = high
        self.rate = rate
        self.current = float(current)
        self._target = self.current
        self.set_target(self.current if target is None else target)

    @property
    def rate(self) -> float:
        return self._rate

    @rate.setter
    def rate(self, value: float):
        self._rate = validate_rate(value)

    @property
    def target(self) -> float:
        return self._target

    def set_target(self, value: float) -> float:
        value = float(value)
        if self.low is not None:
            value = max(self.low, value)
        if self.high is not None:
            value = min(self.high, value)
        self._target = value
        return value

    def update(self) -> float:
        """Advance one frame and return the new current value."""
        self.current = lerp(self.current, self._target, self._rate)
        return self.current

    def snap(self):
        """Jump straight to the target."""
        self.current = self._target

    def __repr__(self) -> str:
        return (
            f"ParameterSmoother(current={self.current:.4f}, "
            f"target={self._target:.4f}, rate={self._rate})"
        )


@dataclass
class ControlSignals:
    """The three gesture-driven drive signals consumed by the renderer."""

    spread: ParameterSmoother = field(
        default_factory=lambda: ParameterSmoother(REST_SPREAD, rate=DEFAULT_SPREAD_RATE, low=SPREAD_RANGE[0], high=SPREAD_RANGE[1])
    )
    scale: ParameterSmoother = field(
        default_factory=lambda: ParameterSmoother(REST_SCALE, rate=DEFAULT_SCALE_RATE, low=SCALE_RANGE[0], high=SCALE_RANGE[1])
    )
    rotation: ParameterSmoother = field(
        default_factory=lambda: ParameterSmoother(REST_ROTATION, rate=DEFAULT_ROTATION_RATE)
    )

    @classmethod
    def with_rates(
        cls,
        spread_rate: float = DEFAULT_SPREAD_RATE,
        scale_rate: float = DEFAULT_SCALE_RATE,
        rotation_rate: float = DEFAULT_ROTATION_RATE,
    ) -> "ControlSignals":
        signals = cls()
        signals.spread.rate = spread_rate
        signals.scale.rate = scale_rate
        signals.rotation.rate = rotation_rate
        return signals

    def set_targets(self, spread: float, scale: float, rotation: float):
        self.spread.set_target(spread)
        self.scale.set_target(scale)
        self.rotation.set_target(rotation)

    def reset_targets(self):
        """Point every target at its rest value."""
        self.set_targets(REST_SPREAD, REST_SCALE, REST_ROTATION)

    def update(self):
        self.spread.update()
        self.scale.update()
        self.rotation.update()

    def as_dict(self) -> Dict[str, float]:
        return {
            "spread": self.spread.current,
            "scale": self.scale.current,
            "rotation": self.rotation.current,
        }

    def targets(self) -> Dict[str, float]:
        return {
            "spread": self.spread.target,
            "scale": self.scale.target,
            "rotation": self.rotation.target,
        }
