"""Tests for the ParameterSmoother and ControlSignals."""

import pytest

from curvecloud.core.smoother import ControlSignals, ParameterSmoother, lerp
from curvecloud.errors import InvalidArgumentError


class TestParameterSmoother:
    """Tests for single-signal exponential smoothing."""

    def test_single_update(self):
        """Each update closes the gap by the rate."""
        s = ParameterSmoother(current=0.0, target=10.0, rate=0.08)
        assert s.update() == pytest.approx(0.8)
        assert s.update() == pytest.approx(0.8 + 9.2 * 0.08)

    def test_converges_without_overshoot(self):
        """The value approaches the target monotonically."""
        s = ParameterSmoother(current=1.0, target=3.0, rate=0.05)
        prev = s.current
        for _ in range(500):
            value = s.update()
            assert prev <= value <= 3.0
            prev = value
        assert s.current == pytest.approx(3.0, abs=1e-6)

    def test_target_defaults_to_current(self):
        """With no target the smoother holds still."""
        s = ParameterSmoother(current=2.5)
        assert s.target == 2.5
        assert s.update() == 2.5

    def test_target_clamped(self):
        """Targets are clamped into [low, high]."""
        s = ParameterSmoother(current=1.0, rate=0.1, low=0.2, high=4.0)
        assert s.set_target(9.0) == 4.0
        assert s.set_target(-1.0) == 0.2
        assert s.target == 0.2

    def test_unbounded_target(self):
        """Without bounds any target is kept."""
        s = ParameterSmoother(current=0.0, rate=0.05)
        assert s.set_target(-42.0) == -42.0

    def test_snap(self):
        """snap() jumps straight to the target."""
        s = ParameterSmoother(current=0.0, target=5.0, rate=0.1)
        s.snap()
        assert s.current == 5.0

    @pytest.mark.parametrize("rate", [0.0, -0.1, 1.5, "fast", None])
    def test_rejects_bad_rate(self, rate):
        """Rates outside (0, 1] or non-numeric are invalid."""
        with pytest.raises(InvalidArgumentError):
            ParameterSmoother(rate=rate)

    def test_rate_is_tunable(self):
        """The rate can be changed and is re-validated."""
        s = ParameterSmoother(current=0.0, target=1.0, rate=0.08)
        s.rate = 0.5
        assert s.update() == pytest.approx(0.5)
        with pytest.raises(InvalidArgumentError):
            s.rate = 2.0

    def test_rejects_inverted_bounds(self):
        """low greater than high is invalid."""
        with pytest.raises(InvalidArgumentError):
            ParameterSmoother(low=2.0, high=1.0)

    def test_lerp(self):
        """lerp() interpolates linearly."""
        assert lerp(2.0, 4.0, 0.25) == pytest.approx(2.5)


class TestControlSignals:
    """Tests for the spread/scale/rotation bundle."""

    def test_rest_defaults(self):
        """Signals start at rest with their default rates."""
        signals = ControlSignals()
        assert signals.as_dict() == {"spread": 1.0, "scale": 1.0, "rotation": 0.0}
        assert signals.spread.rate == 0.08
        assert signals.scale.rate == 0.08
        assert signals.rotation.rate == 0.05

    def test_target_ranges(self):
        """Spread and scale clamp; rotation does not."""
        signals = ControlSignals()
        signals.set_targets(10.0, 10.0, 10.0)
        assert signals.targets() == {"spread": 4.0, "scale": 2.3, "rotation": 10.0}
        signals.set_targets(0.0, 0.0, -10.0)
        assert signals.targets() == {"spread": 0.2, "scale": 0.3, "rotation": -10.0}

    def test_update_uses_distinct_rates(self):
        """Each signal advances at its own rate."""
        signals = ControlSignals()
        signals.set_targets(2.0, 2.0, 1.0)
        signals.update()
        assert signals.spread.current == pytest.approx(1.08)
        assert signals.scale.current == pytest.approx(1.08)
        assert signals.rotation.current == pytest.approx(0.05)

    def test_reset_targets(self):
        """reset_targets() points every target at rest."""
        signals = ControlSignals()
        signals.set_targets(3.0, 2.0, 1.5)
        signals.reset_targets()
        assert signals.targets() == {"spread": 1.0, "scale": 1.0, "rotation": 0.0}

    def test_with_rates(self):
        """with_rates() overrides all three rates."""
        signals = ControlSignals.with_rates(0.2, 0.3, 0.4)
        assert (signals.spread.rate, signals.scale.rate, signals.rotation.rate) == (0.2, 0.3, 0.4)

    def test_instances_are_independent(self):
        """Instances do not share smoothers."""
        a, b = ControlSignals(), ControlSignals()
        a.set_targets(3.0, 2.0, 1.0)
        assert b.targets() == {"spread": 1.0, "scale": 1.0, "rotation": 0.0}
