"""
Analytic credit spread sensitivities.

Instead of bumping and recalibrating, the PV sensitivity to each credit
curve node (dPV/dh) and the pillar par-spread Jacobian (dS/dh) are taken
from the pricer's closed forms. Since the calibrated curve reprices the
pillars, the chain rule gives

    dPV/dS = (dS/dh)^-T dPV/dh

which is the bucketed CS01 with respect to pillar par spreads. The
parallel CS01 is the sum of the buckets.
"""

from collections.abc import Sequence

import numpy as np

from .calibrator import CreditCurveCalibrator
from .cds import CdsAnalytic
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula
from .pricer import AnalyticCdsPricer
from .quotes import QuoteConvention


class AnalyticSpreadSensitivityCalculator:
    """
    CS01 through the analytic node sensitivities of the pricer.

    Args:
        formula: Accrual-on-default formula used for pricing and calibration
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self.pricer = AnalyticCdsPricer(formula)
        self.calibrator = CreditCurveCalibrator(formula)

    def parallel_cs01(
        self,
        cds: CdsAnalytic,
        coupon: float,
        pillars: Sequence[CdsAnalytic],
        market: Sequence[QuoteConvention] | CreditCurve,
        yield_curve: YieldCurve,
    ) -> float:
        """
        Sensitivity of the PV to a parallel shift of the pillar par spreads.

        Args:
            cds: The trade
            coupon: Its running coupon
            pillars: Calibration CDSs
            market: Either one quote per pillar, or an already calibrated credit curve
            yield_curve: Discount curve
        """
        curve = self._curve(pillars, market, yield_curve)
        return float(np.sum(self.bucketed_cs01(cds, coupon, pillars, yield_curve, curve)))

    def bucketed_cs01(
        self,
        cds: CdsAnalytic,
        coupon: float,
        pillars: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """
        Sensitivity of the PV to each pillar par spread.

        The credit curve must have one knot per pillar (as produced by
        calibrating to those pillars).

        Returns
            Array with one CS01 per pillar, per unit spread

        Raises
            ValueError: If the number of pillars and curve knots differ
        """
        return self.bucketed_cs01_many([cds], [coupon], pillars, yield_curve, credit_curve)[0]

    def bucketed_cs01_from_parspreads(
        self,
        cds: CdsAnalytic,
        coupon: float,
        pillars: Sequence[CdsAnalytic],
        par_spreads: Sequence[float],
        yield_curve: YieldCurve,
    ) -> np.ndarray:
        """Calibrate to the pillar par spreads, then bucketed_cs01."""
        curve = self.calibrator.calibrate_from_spreads(pillars, par_spreads, yield_curve)
        return self.bucketed_cs01(cds, coupon, pillars, yield_curve, curve)

    def bucketed_cs01_many(
        self,
        cdss: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        pillars: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """
        Bucketed CS01 of several trades against the same pillars.

        The Jacobian is factorised once and reused for every trade.

        Returns
            Array of shape (n_trades, n_pillars)
        """
        if isinstance(coupons, (int, float)):
            coupons = [coupons] * len(cdss)
        if len(coupons) != len(cdss):
            raise ValueError('number of coupons does not match number of CDSs')
        n = credit_curve.num_knots
        if len(pillars) != n:
            raise ValueError(f'{len(pillars)} pillars but the credit curve has {n} knots')

        # jac_t[i, j] = dS_j / dh_i
        jac_t = np.array([
            [self.pricer.par_spread_credit_sensitivity(p, yield_curve, credit_curve, i) for p in pillars]
            for i in range(n)
        ])
        v_lambda = np.array([
            [self.pricer.pv_credit_sensitivity(c, yield_curve, credit_curve, s, i) for i in range(n)]
            for c, s in zip(cdss, coupons)
        ]).reshape(len(cdss), n)
        if len(cdss) == 0:
            return v_lambda
        return np.linalg.solve(jac_t, v_lambda.T).T

    def _curve(self, pillars, market, yield_curve) -> CreditCurve:
        if isinstance(market, CreditCurve):
            return market
        return self.calibrator.calibrate(pillars, market, yield_curve)
