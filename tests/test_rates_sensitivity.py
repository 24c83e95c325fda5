"""
Tests for IR01.
"""

import numpy as np
import pytest
from cds_analytics import AccrualOnDefaultFormula, CdsAnalytic, FiniteDifferenceType
from cds_analytics import InterestRateSensitivityCalculator, PriceType

from conftest import RATES

COUPON = 0.01


@pytest.fixture(scope='module')
def calculator():
    return InterestRateSensitivityCalculator()


class TestZeroRateBumps:
    """Tests for bumps of the yield curve zero rates."""

    def test_parallel_is_sum_of_buckets(self, calculator, trade, yield_curve, credit_curve):
        """To first order a parallel bump is the sum of single node bumps."""
        central = FiniteDifferenceType.CENTRAL
        parallel = calculator.parallel_ir01(trade, COUPON, credit_curve, yield_curve, fd_type=central)
        buckets = calculator.bucketed_ir01(trade, COUPON, credit_curve, yield_curve, fd_type=central)
        assert buckets.shape == (21,)
        assert buckets.sum() == pytest.approx(parallel, rel=1e-5)

    def test_central_is_average(self, calculator, trade, yield_curve, credit_curve):
        """CENTRAL averages FORWARD and BACKWARD."""

        def ir01(fd_type):
            return calculator.parallel_ir01(trade, COUPON, credit_curve, yield_curve, fd_type=fd_type)

        forward = ir01(FiniteDifferenceType.FORWARD)
        backward = ir01(FiniteDifferenceType.BACKWARD)
        assert abs(ir01(FiniteDifferenceType.CENTRAL) - 0.5 * (forward + backward)) < 1e-17

    def test_scales_with_bump(self, calculator, trade, yield_curve, credit_curve):
        """Values are not divided by the bump."""
        one = calculator.parallel_ir01(trade, COUPON, credit_curve, yield_curve, fd_type=FiniteDifferenceType.CENTRAL)
        two = calculator.parallel_ir01(
            trade, COUPON, credit_curve, yield_curve, 2e-4, FiniteDifferenceType.CENTRAL
        )
        assert two == pytest.approx(2.0 * one, rel=1e-6)

    def test_nodes_after_maturity(self, calculator, trade, yield_curve, credit_curve):
        """Knots past the first one beyond maturity have no effect."""
        buckets = calculator.bucketed_ir01(trade, COUPON, credit_curve, yield_curve)
        assert np.all(buckets[11:] == 0.0)

    def test_expired(self, calculator, yield_curve, credit_curve):
        cds = CdsAnalytic.from_dates('2011-06-19', '2011-06-20', '2011-06-22', '2011-03-21', '2011-06-01')
        assert calculator.parallel_ir01(cds, COUPON, credit_curve, yield_curve) == 0.0


class TestAnalyticIR01:
    """Tests for analytic_bucketed_ir01."""

    def test_matches_central_difference(self, trade, yield_curve, credit_curve):
        """MARKIT_FIX gives the first order IR01 with accrual on default."""
        calculator = InterestRateSensitivityCalculator(AccrualOnDefaultFormula.MARKIT_FIX)
        analytic = calculator.analytic_bucketed_ir01(trade, COUPON, credit_curve, yield_curve)
        fd = calculator.bucketed_ir01(trade, COUPON, credit_curve, yield_curve, fd_type=FiniteDifferenceType.CENTRAL)
        assert analytic == pytest.approx(fd, rel=1e-5, abs=1e-12)

    def test_without_accrual_on_default(self, factory, yield_curve, credit_curve):
        """ORIGINAL_ISDA works when accrual on default is not paid."""
        cds = factory.with_pay_acc_on_default(False).make_imm_cds('2011-06-19', '5Y')
        calculator = InterestRateSensitivityCalculator()
        analytic = calculator.analytic_bucketed_ir01(cds, COUPON, credit_curve, yield_curve)
        fd = calculator.bucketed_ir01(cds, COUPON, credit_curve, yield_curve, fd_type=FiniteDifferenceType.CENTRAL)
        assert analytic == pytest.approx(fd, rel=1e-5, abs=1e-12)

    def test_not_implemented(self, calculator, trade, yield_curve, credit_curve):
        with pytest.raises(NotImplementedError):
            calculator.analytic_bucketed_ir01(trade, COUPON, credit_curve, yield_curve)


class TestInstrumentBumps:
    """Tests for bumps of the market instrument rates."""

    def test_parallel_is_sum_of_buckets(self, calculator, trade, credit_curve, yield_curve_builder):
        """To first order a parallel bump is the sum of single instrument bumps."""
        central = FiniteDifferenceType.CENTRAL
        parallel = calculator.parallel_ir01_from_instruments(
            trade, COUPON, credit_curve, yield_curve_builder, RATES, fd_type=central
        )
        buckets = calculator.bucketed_ir01_from_instruments(
            trade, COUPON, credit_curve, yield_curve_builder, RATES, fd_type=central
        )
        assert buckets.shape == (21,)
        assert buckets.sum() == pytest.approx(parallel, rel=1e-5)

    def test_long_swaps_have_no_effect(self, calculator, trade, credit_curve, yield_curve_builder):
        """Swaps maturing well after the trade do not move its PV."""
        buckets = calculator.bucketed_ir01_from_instruments(trade, COUPON, credit_curve, yield_curve_builder, RATES)
        assert np.all(buckets[11:] == 0.0)

    def test_dirty_price_type(self, trade, credit_curve, yield_curve_builder):
        """The accrued does not depend on rates when settlement is discounted away."""
        clean = InterestRateSensitivityCalculator(price_type=PriceType.CLEAN)
        dirty = InterestRateSensitivityCalculator(price_type=PriceType.DIRTY)
        a = clean.parallel_ir01_from_instruments(trade, COUPON, credit_curve, yield_curve_builder, RATES)
        b = dirty.parallel_ir01_from_instruments(trade, COUPON, credit_curve, yield_curve_builder, RATES)
        assert a == pytest.approx(b, rel=1e-9, abs=1e-15)


class TestValidation:
    """Bumps too small to difference are rejected before any repricing."""

    @pytest.mark.parametrize('bump', [0.0, 1e-10, -1e-11])
    def test_zero_rate_bumps(self, calculator, trade, yield_curve, credit_curve, bump):
        with pytest.raises(ValueError):
            calculator.parallel_ir01(trade, COUPON, credit_curve, yield_curve, bump)
        with pytest.raises(ValueError):
            calculator.bucketed_ir01(trade, COUPON, credit_curve, yield_curve, bump)

    def test_analytic(self, trade, yield_curve, credit_curve):
        calculator = InterestRateSensitivityCalculator(AccrualOnDefaultFormula.MARKIT_FIX)
        with pytest.raises(ValueError):
            calculator.analytic_bucketed_ir01(trade, COUPON, credit_curve, yield_curve, 0.0)

    def test_instrument_bumps(self, trade, credit_curve, yield_curve_builder, monkeypatch):
        """The yield curve is never rebuilt for a rejected bump."""
        calculator = InterestRateSensitivityCalculator()
        builds = []
        original = type(yield_curve_builder).build

        def counting_build(self, rates):
            builds.append(rates)
            return original(self, rates)

        monkeypatch.setattr(type(yield_curve_builder), 'build', counting_build)
        with pytest.raises(ValueError):
            calculator.parallel_ir01_from_instruments(trade, COUPON, credit_curve, yield_curve_builder, RATES, 0.0)
        with pytest.raises(ValueError):
            calculator.bucketed_ir01_from_instruments(trade, COUPON, credit_curve, yield_curve_builder, RATES, 0.0)
        assert builds == []
