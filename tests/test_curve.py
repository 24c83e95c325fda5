"""
Tests for the ISDA curve classes.
"""

import math

import numpy as np
import pytest
from cds_analytics import CreditCurve, CurveError, IsdaCurve, YieldCurve


@pytest.fixture
def curve():
    """Four knot yield curve."""
    return YieldCurve([0.5, 1.0, 2.0, 5.0], [0.02, 0.025, 0.03, 0.028])


class TestConstruction:
    """Tests for building curves."""

    def test_rt_at_knots(self):
        """RT is stored as rate times time."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        assert c.rt_values.tolist() == [0.05, 0.12]
        assert c.num_knots == 2

    def test_non_ascending_knots(self):
        """Knot times must be strictly ascending."""
        with pytest.raises(CurveError):
            IsdaCurve([1.0, 1.0], [0.05, 0.06])

    def test_negative_first_knot(self):
        """The first knot cannot be negative."""
        with pytest.raises(CurveError):
            IsdaCurve([-0.1, 1.0], [0.05, 0.06])

    @pytest.mark.parametrize('t', [[0.0], [0.0, 1.0]])
    def test_knot_at_base_time(self, t):
        """A knot at time zero carries no rate."""
        with pytest.raises(CurveError):
            IsdaCurve(t, [0.05] * len(t))
        with pytest.raises(CurveError):
            IsdaCurve.from_rt(t, [0.0] * len(t))

    def test_length_mismatch(self):
        """Times and rates must match in length."""
        with pytest.raises(CurveError):
            IsdaCurve([1.0, 2.0], [0.05])

    def test_arrays_are_read_only(self):
        """Knot arrays cannot be modified in place."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        with pytest.raises(ValueError):
            c.times[0] = 0.5

    def test_from_forward_rates(self):
        """Piecewise forwards accumulate into RT."""
        c = IsdaCurve.from_forward_rates([1.0, 2.0], [0.05, 0.07])
        assert np.allclose(c.zero_rates, [0.05, 0.06], atol=1e-15)


class TestValues:
    """Tests for interpolation and extrapolation."""

    def test_linear_rt_between_knots(self):
        """RT is linear between knots."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        assert abs(c.rt(1.5) - 0.085) < 1e-15
        assert abs(c.zero_rate(1.5) - 0.085 / 1.5) < 1e-15
        assert abs(c.discount_factor(1.5) - math.exp(-0.085)) < 1e-15

    def test_flat_zero_rate_before_first_knot(self):
        """The first zero rate applies before the first knot."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        assert abs(c.rt(0.5) - 0.025) < 1e-15
        assert c.zero_rate(0.5) == 0.05
        assert c.discount_factor(0.0) == 1.0

    def test_flat_forward_after_last_knot(self):
        """The last forward rate continues past the last knot."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        assert abs(c.forward_rate(3.0) - 0.07) < 1e-15
        assert abs(c.rt(3.0) - 0.19) < 1e-15

    def test_single_knot_is_flat(self):
        """A single knot curve has a constant zero rate."""
        c = YieldCurve([1.0], [0.05])
        for t in (0.1, 1.0, 10.0):
            assert abs(c.zero_rate(t) - 0.05) < 1e-15

    def test_forward_rate(self):
        """The forward rate is piecewise constant."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        assert abs(c.forward_rate(1.5) - 0.07) < 1e-15
        assert c.forward_rate(0.5) == 0.05

    def test_negative_time(self):
        """Zero rates are not defined for negative times."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        with pytest.raises(ValueError):
            c.zero_rate(-0.1)

    def test_first_derivative(self, curve):
        """first_derivative is d(zero rate)/dt."""
        h = 1e-6
        t = 1.5
        fd = (curve.zero_rate(t + h) - curve.zero_rate(t - h)) / (2 * h)
        assert abs(curve.first_derivative(t) - fd) < 1e-8


class TestModifiers:
    """Tests for curve modifiers."""

    def test_with_rate_does_not_mutate(self):
        """with_rate returns a new curve and leaves the source alone."""
        c = CreditCurve([1.0, 2.0], [0.02, 0.03])
        bumped = c.with_rate(0.04, 1)
        assert c.zero_rate_at(1) == 0.03
        assert abs(bumped.zero_rate_at(1) - 0.04) < 1e-15
        assert isinstance(bumped, CreditCurve)

    def test_with_rates(self, curve):
        """with_rates replaces every zero rate."""
        bumped = curve.with_rates(curve.zero_rates + 0.001)
        assert np.allclose(bumped.zero_rates - curve.zero_rates, 0.001, atol=1e-15)
        assert isinstance(bumped, YieldCurve)

    def test_with_discount_factor(self, curve):
        """with_discount_factor sets the knot's discount factor."""
        c = curve.with_discount_factor(0.9, 2)
        assert abs(c.discount_factor(2.0) - 0.9) < 1e-15

    def test_with_rate_bad_index(self, curve):
        """Out of range knots are rejected."""
        with pytest.raises(ValueError):
            curve.with_rate(0.01, 4)

    @pytest.mark.parametrize('offset', [0.3, 0.7, 2.0, 6.0])
    def test_offset_identity(self, curve, offset):
        """new.rt(t) == old.rt(t + offset) - old.rt(offset)."""
        shifted = curve.with_offset(offset)
        base = curve.rt(offset)
        # before the first knot, at knots, between knots and past the last knot
        points = [0.05, 0.3, 1.0, 1.3, 2.5, 4.3, 10.0]
        for t in points:
            assert abs(shifted.rt(t) - (curve.rt(t + offset) - base)) < 1e-14


class TestNodeSensitivity:
    """Tests for sensitivities to the knot zero rates."""

    def test_node_sensitivity_weights(self):
        """Between knots the zero rate depends on the two neighbours."""
        c = IsdaCurve([1.0, 2.0], [0.05, 0.06])
        res = c.node_sensitivity(1.5)
        assert np.allclose(res, [1.0 / 3.0, 2.0 / 3.0], atol=1e-15)

    def test_node_sensitivity_at_knot(self, curve):
        """At a knot only that knot matters."""
        res = curve.node_sensitivity(2.0)
        assert res.tolist() == [0.0, 0.0, 1.0, 0.0]

    @pytest.mark.parametrize('t', [0.25, 0.75, 2.0, 3.0, 7.0])
    def test_discount_factor_sensitivity(self, curve, t):
        """Analytic discount factor sensitivities match finite differences."""
        h = 1e-7
        for node in range(curve.num_knots):
            r = curve.zero_rate_at(node)
            up = curve.with_rate(r + h, node).discount_factor(t)
            down = curve.with_rate(r - h, node).discount_factor(t)
            fd = (up - down) / (2 * h)
            assert abs(curve.single_node_discount_factor_sensitivity(t, node) - fd) < 1e-7

    def test_single_node_sensitivity_consistent(self, curve):
        """single_node_sensitivity agrees with node_sensitivity."""
        for t in (0.3, 1.5, 4.0, 6.0):
            vec = curve.node_sensitivity(t)
            for node in range(curve.num_knots):
                assert abs(curve.single_node_sensitivity(t, node) - vec[node]) < 1e-15

    def test_rt_and_sensitivity(self, curve):
        """rt_and_sensitivity returns RT and its node derivative together."""
        rt, sense = curve.rt_and_sensitivity(1.5, 2)
        assert abs(rt - curve.rt(1.5)) < 1e-15
        assert abs(sense - curve.single_node_rt_sensitivity(1.5, 2)) < 1e-15


class TestCreditCurve:
    """Tests for CreditCurve specifics."""

    def test_survival_probability(self):
        """Survival probability is exp(-RT)."""
        c = CreditCurve([1.0, 2.0], [0.02, 0.03])
        assert abs(c.survival_probability(2.0) - math.exp(-0.06)) < 1e-15

    def test_forward_hazard_rates(self):
        """Forward hazards are the slopes of RT."""
        c = CreditCurve([1.0, 2.0], [0.02, 0.03])
        assert np.allclose(c.forward_hazard_rates, [0.02, 0.04], atol=1e-15)
        assert abs(c.hazard_rate(1.5) - 0.04) < 1e-15
