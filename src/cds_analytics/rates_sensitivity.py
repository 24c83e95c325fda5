"""
Interest rate sensitivities (IR01) of a CDS.

The credit curve is held fixed while the yield curve moves. Two ways of
moving it are supported:
- bump the zero rates at the yield curve knots directly
- bump the market instrument rates and rebuild the curve with a
  YieldCurveBuilder

Values are PV changes per unit notional for a bump of `bump` (1bp by
default); they are not divided by the bump.
"""

import logging
from collections.abc import Sequence

import numpy as np

from .cds import CdsAnalytic
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, FiniteDifferenceType, PriceType
from .pricer import AnalyticCdsPricer
from .spread_sensitivity import check_bump
from .yield_curve import YieldCurveBuilder

logger = logging.getLogger(__name__)

ONE_BP = 1e-4


def _difference(price, base: float, bump: float, fd_type: FiniteDifferenceType) -> float:
    """Finite difference of `price(shift)` scaled to a move of `bump`."""
    if fd_type == FiniteDifferenceType.FORWARD:
        return price(bump) - base
    if fd_type == FiniteDifferenceType.BACKWARD:
        return base - price(-bump)
    if fd_type == FiniteDifferenceType.CENTRAL:
        return 0.5 * (price(bump) - price(-bump))
    raise ValueError(f'unknown finite difference type: {fd_type}')


class InterestRateSensitivityCalculator:
    """
    Yield curve sensitivities with the credit curve held fixed.

    Args:
        formula: Accrual-on-default formula used for pricing
        price_type: Whether the CLEAN or DIRTY PV is differenced
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        price_type: PriceType = PriceType.CLEAN,
    ):
        self.pricer = AnalyticCdsPricer(formula)
        self.price_type = price_type

    def _pv(self, cds, yield_curve, credit_curve, coupon) -> float:
        return self.pricer.pv(cds, yield_curve, credit_curve, coupon, self.price_type)

    # ------------------------------------------------------------------
    # Zero rate bumps

    def parallel_ir01(
        self,
        cds: CdsAnalytic,
        coupon: float,
        credit_curve: CreditCurve,
        yield_curve: YieldCurve,
        bump: float = ONE_BP,
        fd_type: FiniteDifferenceType = FiniteDifferenceType.FORWARD,
    ) -> float:
        """PV change for a parallel shift of every yield curve zero rate."""
        check_bump(bump)
        base = self._pv(cds, yield_curve, credit_curve, coupon)
        rates = yield_curve.zero_rates

        def price(shift):
            return self._pv(cds, yield_curve.with_rates(rates + shift), credit_curve, coupon)

        return _difference(price, base, bump, fd_type)

    def bucketed_ir01(
        self,
        cds: CdsAnalytic,
        coupon: float,
        credit_curve: CreditCurve,
        yield_curve: YieldCurve,
        bump: float = ONE_BP,
        fd_type: FiniteDifferenceType = FiniteDifferenceType.FORWARD,
    ) -> np.ndarray:
        """PV change for a shift of each yield curve zero rate in turn."""
        check_bump(bump)
        base = self._pv(cds, yield_curve, credit_curve, coupon)
        res = np.zeros(yield_curve.num_knots)
        for i in range(yield_curve.num_knots):
            rate = yield_curve.zero_rate_at(i)

            def price(shift, i=i, rate=rate):
                return self._pv(cds, yield_curve.with_rate(rate + shift, i), credit_curve, coupon)

            res[i] = _difference(price, base, bump, fd_type)
        return res

    def analytic_bucketed_ir01(
        self,
        cds: CdsAnalytic,
        coupon: float,
        credit_curve: CreditCurve,
        yield_curve: YieldCurve,
        bump: float = ONE_BP,
    ) -> np.ndarray:
        """
        First order bucketed IR01 from the analytic yield node sensitivities.

        Raises
            ValueError: If the bump is too small
            NotImplementedError: If accrual on default is paid and the formula
                is not MARKIT_FIX
        """
        check_bump(bump)
        return np.array([
            bump * self.pricer.pv_yield_sensitivity(cds, yield_curve, credit_curve, coupon, i)
            for i in range(yield_curve.num_knots)
        ])

    # ------------------------------------------------------------------
    # Market instrument bumps

    def parallel_ir01_from_instruments(
        self,
        cds: CdsAnalytic,
        coupon: float,
        credit_curve: CreditCurve,
        builder: YieldCurveBuilder,
        market_rates: Sequence[float],
        bump: float = ONE_BP,
        fd_type: FiniteDifferenceType = FiniteDifferenceType.FORWARD,
    ) -> float:
        """PV change when every market rate is shifted and the yield curve rebuilt."""
        check_bump(bump)
        rates = np.asarray(market_rates, dtype=float)
        base = self._pv(cds, builder.build(rates), credit_curve, coupon)

        def price(shift):
            return self._pv(cds, builder.build(rates + shift), credit_curve, coupon)

        return _difference(price, base, bump, fd_type)

    def bucketed_ir01_from_instruments(
        self,
        cds: CdsAnalytic,
        coupon: float,
        credit_curve: CreditCurve,
        builder: YieldCurveBuilder,
        market_rates: Sequence[float],
        bump: float = ONE_BP,
        fd_type: FiniteDifferenceType = FiniteDifferenceType.FORWARD,
    ) -> np.ndarray:
        """PV change when each market rate in turn is shifted and the yield curve rebuilt."""
        check_bump(bump)
        rates = np.asarray(market_rates, dtype=float)
        base = self._pv(cds, builder.build(rates), credit_curve, coupon)
        res = np.zeros(len(rates))
        for i in range(len(rates)):

            def price(shift, i=i):
                bumped = rates.copy()
                bumped[i] += shift
                return self._pv(cds, builder.build(bumped), credit_curve, coupon)

            res[i] = _difference(price, base, bump, fd_type)
            logger.debug('instrument %d (%s): ir01=%.10g', i, builder.tenors[i], res[i])
        return res
