"""
Tests for analytic CS01.
"""

import numpy as np
import pytest
from cds_analytics import AccrualOnDefaultFormula, AnalyticSpreadSensitivityCalculator
from cds_analytics import FiniteDifferenceSpreadSensitivityCalculator, ParSpread

COUPON = 0.01


def central_bucketed_cs01(formula, trade, yield_curve, pillars, spreads, bump=1e-4):
    fd = FiniteDifferenceSpreadSensitivityCalculator(formula)
    up = fd.bucketed_cs01_from_par_spreads(trade, COUPON, yield_curve, pillars, spreads, bump)
    down = fd.bucketed_cs01_from_par_spreads(trade, COUPON, yield_curve, pillars, spreads, -bump)
    return 0.5 * (up + down)


class TestAnalyticCS01:
    """Tests for AnalyticSpreadSensitivityCalculator."""

    @pytest.mark.parametrize('formula', [AccrualOnDefaultFormula.ORIGINAL_ISDA, AccrualOnDefaultFormula.MARKIT_FIX])
    def test_matches_finite_difference(self, formula, trade, yield_curve, pillars, spreads):
        """Bucketed CS01 agrees with a central finite difference."""
        calculator = AnalyticSpreadSensitivityCalculator(formula)
        analytic = calculator.bucketed_cs01_from_parspreads(trade, COUPON, pillars, spreads, yield_curve)
        fd = central_bucketed_cs01(formula, trade, yield_curve, pillars, spreads)
        assert analytic == pytest.approx(fd, rel=1e-5, abs=1e-8)

    def test_parallel_is_sum(self, trade, yield_curve, pillars, credit_curve):
        """Parallel CS01 is the sum of the buckets."""
        calculator = AnalyticSpreadSensitivityCalculator()
        buckets = calculator.bucketed_cs01(trade, COUPON, pillars, yield_curve, credit_curve)
        parallel = calculator.parallel_cs01(trade, COUPON, pillars, credit_curve, yield_curve)
        assert abs(parallel - buckets.sum()) < 1e-14

    def test_parallel_from_quotes(self, trade, yield_curve, pillars, spreads, credit_curve):
        """Quotes are calibrated before differentiating."""
        calculator = AnalyticSpreadSensitivityCalculator()
        from_quotes = calculator.parallel_cs01(trade, COUPON, pillars, [ParSpread(s) for s in spreads], yield_curve)
        from_curve = calculator.parallel_cs01(trade, COUPON, pillars, credit_curve, yield_curve)
        assert from_quotes == pytest.approx(from_curve, rel=1e-9)

    def test_pillar_is_its_own_bucket(self, pillars, spreads, yield_curve, credit_curve):
        """A pillar is only sensitive to its own par spread."""
        calculator = AnalyticSpreadSensitivityCalculator()
        spread = spreads[3]
        res = calculator.bucketed_cs01(pillars[3], spread, pillars, yield_curve, credit_curve)
        annuity = calculator.pricer.annuity(pillars[3], yield_curve, credit_curve)
        assert np.allclose(np.delete(res, 3), 0.0, atol=1e-10)
        assert res[3] == pytest.approx(annuity, rel=1e-9)

    def test_many(self, trade, factory, yield_curve, pillars, credit_curve):
        """Several trades share one Jacobian."""
        calculator = AnalyticSpreadSensitivityCalculator()
        other = factory.make_imm_cds('2011-06-19', '7Y')
        many = calculator.bucketed_cs01_many([trade, other], [COUPON, 0.05], pillars, yield_curve, credit_curve)
        assert many.shape == (2, 6)
        single = calculator.bucketed_cs01(other, 0.05, pillars, yield_curve, credit_curve)
        assert np.allclose(many[1], single, rtol=1e-12, atol=0.0)

    def test_pillar_count_mismatch(self, trade, yield_curve, pillars, credit_curve):
        calculator = AnalyticSpreadSensitivityCalculator()
        with pytest.raises(ValueError):
            calculator.bucketed_cs01(trade, COUPON, pillars[:-1], yield_curve, credit_curve)

    def test_coupon_count_mismatch(self, trade, yield_curve, pillars, credit_curve):
        calculator = AnalyticSpreadSensitivityCalculator()
        with pytest.raises(ValueError):
            calculator.bucketed_cs01_many([trade], [COUPON, COUPON], pillars, yield_curve, credit_curve)
