"""
Particle transition engine.

Owns the precomputed curve buffers, the live position buffer and the
control signals, and advances all of them once per rendered frame.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from curvecloud.config import (
    EngineConfig,
    validate_interval,
    validate_particle_count,
    validate_rate,
)
from curvecloud.core.curves import (
    CURVE_ORDER,
    CurveId,
    CurveLibrary,
    ParticleAuxData,
    generate_library,
)
from curvecloud.core.gesture import GestureMapper, HandFeatures, gesture_targets
from curvecloud.core.handoff import LandmarkMailbox
from curvecloud.core.smoother import ControlSignals
from curvecloud.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


@dataclass
class FrameState:
    """What the renderer needs after a tick.

    ``positions`` is the engine's live buffer, not a copy; it is mutated
    in place by the next tick.
    """

    positions: np.ndarray
    spread: float
    scale: float
    rotation: float
    curve: CurveId
    switched: bool
    time_ms: float


class ParticleEngine:
    """
    Morphs a point cloud between the ten curve families.

    Each particle converges toward its slot in the target curve at its own
    fixed rate (0.03 + 0.02 * delay), so a switch settles as a staggered
    wave rather than all at once. Convergence is asymptotic; "settled" is
    judged against ``settle_epsilon``.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the engine and generate every curve buffer.

        Args:
            config: Engine configuration (validated here).
            clock: Millisecond time source (default: perf_counter).
            rng: Random source for curve jitter and per-particle data.
        """
        self.cfg = (config or EngineConfig()).validate()
        self.rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)
        self.clock = clock or _perf_ms

        self._lock = threading.RLock()
        self.mailbox = LandmarkMailbox()
        self.gesture = GestureMapper(self.cfg.gesture_sensitivity)
        self.signals = ControlSignals.with_rates(
            spread_rate=self.cfg.spread_rate,
            scale_rate=self.cfg.scale_rate,
            rotation_rate=self.cfg.rotation_rate,
        )
        self.last_features: Optional[HandFeatures] = None

        self.auto_switch = bool(self.cfg.auto_switch)
        self.switch_interval_ms = self.cfg.switch_interval_ms
        self._curve = CurveId.from_index(self.cfg.initial_curve)

        library, aux = self._generate(self.cfg.particle_count)
        self._install(library, aux)
        self.last_switch_ms = self.clock()

    # ------------------------------------------------------------------
    # Buffers
    # ------------------------------------------------------------------

    def _generate(self, count: int):
        t0 = time.perf_counter()
        library = generate_library(count, self.rng, self.cfg.max_particle_count)
        aux = ParticleAuxData.create(count, self.rng, self.cfg.max_particle_count)
        logger.info(
            "Generated %d curves x %d particles in %.1f ms",
            len(library), count, (time.perf_counter() - t0) * 1000.0,
        )
        return library, aux

    def _install(self, library: CurveLibrary, aux: ParticleAuxData):
        """Swap in a complete buffer set; live positions jump to the target."""
        with self._lock:
            self._library = library
            self._target = library[self._curve]
            self._positions = self._target.copy()
            self.aux = aux

    @property
    def aux(self) -> ParticleAuxData:
        return self._aux

    @aux.setter
    def aux(self, aux: ParticleAuxData):
        if len(aux) != self.count:
            raise InvalidArgumentError(
                f"aux data covers {len(aux)} particles, engine has {self.count}"
            )
        self._aux = aux
        self._speed = aux.transition_speed(
            self.cfg.base_transition_speed, self.cfg.delay_transition_speed
        )

    @property
    def library(self) -> CurveLibrary:
        return self._library

    @property
    def count(self) -> int:
        return self._library.count

    @property
    def positions(self) -> np.ndarray:
        """Live flat position buffer (mutated in place every tick)."""
        return self._positions

    @property
    def target_positions(self) -> np.ndarray:
        """Read-only alias of the selected curve's precomputed buffer."""
        return self._target

    @property
    def current_curve(self) -> CurveId:
        return self._curve

    @property
    def current_index(self) -> int:
        return self._curve.index

    # ------------------------------------------------------------------
    # Curve selection
    # ------------------------------------------------------------------

    def select_curve(self, index: int, now: Optional[float] = None) -> Optional[str]:
        """
        Retarget every particle at curve ``index``.

        Live positions are left alone; they converge over the next ticks.
        An invalid index is logged and ignored.

        Returns:
            The curve's display name, or None if the index was rejected.
        """
        try:
            curve = CurveId.from_index(index)
        except InvalidArgumentError as e:
            logger.warning("Ignoring curve selection: %s", e)
            return None

        with self._lock:
            self._curve = curve
            self._target = self._library[curve]
            self.last_switch_ms = self.clock() if now is None else float(now)
        logger.info("Switched to %s", curve.display_name)
        return curve.display_name

    def select_next_curve(self, now: Optional[float] = None) -> str:
        return self.select_curve((self.current_index + 1) % len(CURVE_ORDER), now=now)

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_auto_switch(self, enabled: bool, now: Optional[float] = None):
        """Turning auto-switch on restarts the interval from ``now``."""
        enabled = bool(enabled)
        with self._lock:
            if enabled and not self.auto_switch:
                self.last_switch_ms = self.clock() if now is None else float(now)
            self.auto_switch = enabled

    def set_switch_interval(self, interval_ms: float):
        self.switch_interval_ms = validate_interval(interval_ms)

    def set_sensitivity(self, sensitivity: float):
        self.gesture.sensitivity = sensitivity

    def set_spread_rate(self, rate: float):
        self.signals.spread.rate = validate_rate(rate, "spread rate")

    def set_scale_rate(self, rate: float):
        self.signals.scale.rate = validate_rate(rate, "scale rate")

    def set_rotation_rate(self, rate: float):
        self.signals.rotation.rate = validate_rate(rate, "rotation rate")

    def set_particle_count(self, count: int):
        """
        Regenerate every curve and the per-particle data at a new count.

        The new set is built before the swap, so a concurrent tick sees
        either the old set or the new one. Live positions are reset onto
        the selected curve with no transition.
        """
        count = validate_particle_count(count, self.cfg.max_particle_count)
        library, aux = self._generate(count)
        self._install(library, aux)

    # ------------------------------------------------------------------
    # Gesture input
    # ------------------------------------------------------------------

    def submit_landmarks(self, landmarks) -> int:
        """Producer side: hand the newest tracker frame (or None) to the tick."""
        return self.mailbox.post(landmarks)

    def apply_landmarks(self, landmarks):
        """Map a frame and update the control targets right away."""
        features = self.gesture.features(landmarks)
        with self._lock:
            self.last_features = features
            if features is None:
                self.signals.reset_targets()
            else:
                self.signals.set_targets(*gesture_targets(features, self.gesture.sensitivity))

    def _consume_gesture(self):
        observation = self.mailbox.take()
        if observation is not None:
            self.apply_landmarks(observation.landmarks)

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> FrameState:
        """Advance one frame."""
        with self._lock:
            now = self.clock() if now is None else float(now)
            self._consume_gesture()

            switched = False
            if self.auto_switch and now - self.last_switch_ms > self.switch_interval_ms:
                self.select_next_curve(now=now)
                switched = True

            self.signals.update()

            pts = self._positions.reshape(-1, 3)
            target = self._target.reshape(-1, 3)
            pts += (target - pts) * self._speed[:, np.newaxis]

            return FrameState(
                positions=self._positions,
                spread=self.signals.spread.current,
                scale=self.signals.scale.current,
                rotation=self.signals.rotation.current,
                curve=self._curve,
                switched=switched,
                time_ms=now,
            )

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def max_delta(self) -> float:
        """Largest per-axis distance between live and target positions."""
        if self.count == 0:
            return 0.0
        return float(np.abs(self._target - self._positions).max())

    @property
    def is_transitioning(self) -> bool:
        return self.max_delta() > self.cfg.settle_epsilon

    def settled_fraction(self) -> float:
        """Share of particles within settle_epsilon of target on every axis."""
        if self.count == 0:
            return 1.0
        delta = np.abs(self._target - self._positions).reshape(-1, 3)
        return float((delta.max(axis=1) <= self.cfg.settle_epsilon).mean())
