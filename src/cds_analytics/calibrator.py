"""
Credit curve bootstrap.

Builds a CreditCurve, pillar by pillar, that reprices a strip of CDSs to
their market quotes. The knot times are the pillars' protection ends and
the unknown at each step is the zero hazard rate of the newest knot, which
fixes the (constant) forward hazard rate on the latest interval.

The price of pillar i is increasing in its hazard rate, so each step is a
one-dimensional root search: bracket, then Newton (EXACT_JACOBIAN uses the
analytic node sensitivity, FAST a secant slope) or Brent (SIMPLE).

If the quote of pillar i can only be matched with a negative forward hazard
rate on (t[i-1], t[i]], the ArbitrageHandling decides:
- IGNORE: accept it (the survival curve then increases on that interval)
- FAIL: raise ArbitrageError
- ZERO_HAZARD_RATE: set the forward hazard rate to zero and carry on
"""

import logging
from collections.abc import Sequence

from .cds import CdsAnalytic
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, ArbitrageHandling, CalibrationMethod
from .enums import PriceType
from .exceptions import ArbitrageError, BootstrapError, ConvergenceError
from .pricer import AnalyticCdsPricer
from .quotes import ParSpread, PointsUpFront, QuoteConvention, QuotedSpread
from .root_finding import bracket_root, brent, newton_bracketed

logger = logging.getLogger(__name__)


class CreditCurveCalibrator:
    """
    Bootstraps credit curves from CDS quotes.

    Args:
        formula: Accrual-on-default formula used for pricing
        arbitrage_handling: What to do when a negative forward hazard is required
        method: Root search strategy
        tol: Absolute tolerance on each knot's zero hazard rate
        max_iter: Iteration limit of the root search
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        arbitrage_handling: ArbitrageHandling = ArbitrageHandling.IGNORE,
        method: CalibrationMethod = CalibrationMethod.FAST,
        tol: float = 1e-12,
        max_iter: int = 100,
    ):
        self.pricer = AnalyticCdsPricer(formula)
        self.arbitrage_handling = arbitrage_handling
        self.method = method
        self.tol = tol
        self.max_iter = max_iter

    @property
    def formula(self) -> AccrualOnDefaultFormula:
        return self.pricer.formula

    def __repr__(self) -> str:
        return (
            f'CreditCurveCalibrator({self.formula.name}, '
            f'{self.arbitrage_handling.name}, {self.method.name})'
        )

    # ------------------------------------------------------------------
    # Public entry points

    def calibrate(
        self,
        pillars: Sequence[CdsAnalytic],
        quotes: Sequence[QuoteConvention],
        yield_curve: YieldCurve,
    ) -> CreditCurve:
        """
        Bootstrap a credit curve from a strip of quoted CDSs.

        Args:
            pillars: Calibration CDSs, strictly ascending in protection end
            quotes: One quote per pillar (ParSpread, QuotedSpread or PointsUpFront)
            yield_curve: Discount curve

        Returns
            CreditCurve with one knot per pillar

        Raises
            ValueError: On mismatched lengths, unsorted or expired pillars
            ArbitrageError: Under FAIL, when a negative forward hazard is needed
            BootstrapError: When a pillar cannot be solved
        """
        if len(pillars) != len(quotes):
            raise ValueError(f'{len(pillars)} pillars but {len(quotes)} quotes')
        coupons = []
        pufs = []
        for cds, quote in zip(pillars, quotes):
            coupon, puf = self._to_upfront(cds, quote, yield_curve)
            coupons.append(coupon)
            pufs.append(puf)
        return self._bootstrap(pillars, coupons, pufs, yield_curve)

    def calibrate_from_spreads(
        self,
        pillars: Sequence[CdsAnalytic],
        spreads: Sequence[float],
        yield_curve: YieldCurve,
    ) -> CreditCurve:
        """Bootstrap from par spreads (zero upfront at each pillar)."""
        if len(pillars) != len(spreads):
            raise ValueError(f'{len(pillars)} pillars but {len(spreads)} spreads')
        return self._bootstrap(pillars, list(spreads), [0.0] * len(spreads), yield_curve)

    def calibrate_from_upfront(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: Sequence[float],
        pufs: Sequence[float],
        yield_curve: YieldCurve,
    ) -> CreditCurve:
        """Bootstrap from points upfront with per-pillar running coupons."""
        if not len(pillars) == len(coupons) == len(pufs):
            raise ValueError('pillars, coupons and pufs must have the same length')
        return self._bootstrap(pillars, list(coupons), list(pufs), yield_curve)

    def calibrate_single(self, cds: CdsAnalytic, quote: QuoteConvention, yield_curve: YieldCurve) -> CreditCurve:
        """Flat (single knot) credit curve that reprices one CDS to its quote."""
        return self.calibrate([cds], [quote], yield_curve)

    # ------------------------------------------------------------------

    def _to_upfront(self, cds: CdsAnalytic, quote: QuoteConvention, yield_curve: YieldCurve) -> tuple[float, float]:
        if isinstance(quote, ParSpread):
            return quote.coupon, 0.0
        if isinstance(quote, PointsUpFront):
            return quote.coupon, quote.puf
        if isinstance(quote, QuotedSpread):
            flat = self.calibrate_single(cds, ParSpread(quote.quoted_spread), yield_curve)
            return quote.coupon, self.pricer.pv(cds, yield_curve, flat, quote.coupon, PriceType.CLEAN)
        raise TypeError(f'unknown quote convention: {type(quote).__name__}')

    def _validate(self, pillars: Sequence[CdsAnalytic]) -> list[float]:
        if len(pillars) == 0:
            raise ValueError('need at least one pillar')
        times = [cds.protection_end for cds in pillars]
        for i, cds in enumerate(pillars):
            if cds.is_expired():
                raise ValueError(f'pillar {i} has expired')
        for i in range(1, len(times)):
            if times[i] <= times[i - 1]:
                raise ValueError(f'pillars must be strictly ascending in maturity (pillar {i})')
        return times

    def _bootstrap(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: list[float],
        pufs: list[float],
        yield_curve: YieldCurve,
    ) -> CreditCurve:
        times = self._validate(pillars)
        rt = []

        for i, cds in enumerate(pillars):
            knots = times[: i + 1]
            coupon = coupons[i]
            puf = pufs[i]

            def curve_at(h, knots=knots):
                return CreditCurve.from_rt(knots, rt + [h * knots[-1]])

            def objective(h, cds=cds, coupon=coupon, puf=puf):
                return self.pricer.pv(cds, yield_curve, curve_at(h), coupon, PriceType.CLEAN) - puf

            # zero rate of knot i that makes the forward hazard on the last interval zero
            floor = rt[-1] / times[i] if i > 0 else 0.0
            lower = None
            if self.arbitrage_handling != ArbitrageHandling.IGNORE:
                f_floor = objective(floor)
                if f_floor > 0.0:
                    if self.arbitrage_handling == ArbitrageHandling.FAIL:
                        raise ArbitrageError(
                            f'pillar {i} (t={times[i]:.6f}) needs a negative forward hazard rate', pillar=i
                        )
                    logger.warning(
                        'pillar %d (t=%.6f) needs a negative forward hazard rate; setting it to zero',
                        i, times[i],
                    )
                    rt.append(rt[-1] if rt else 0.0)
                    continue
                lower = floor

            guess = self._guess(cds, coupon, puf, rt, times, i)
            if lower is not None:
                guess = max(guess, lower)
            try:
                h = self._solve(objective, curve_at, cds, yield_curve, coupon, guess, lower, i)
            except ConvergenceError as e:
                raise BootstrapError(f'failed to calibrate pillar {i} (t={times[i]:.6f}): {e}', pillar=i) from e

            logger.debug('pillar %d: t=%.6f, zero hazard rate=%.12f', i, times[i], h)
            value = h * times[i]
            if lower is not None and rt:
                # h >= lower, but the product can round below the previous knot
                value = max(value, rt[-1])
            rt.append(value)
            if i > 0 and rt[-1] < rt[-2]:
                logger.warning('pillar %d (t=%.6f) has a negative forward hazard rate', i, times[i])

        return CreditCurve.from_rt(times, rt)

    @staticmethod
    def _guess(cds, coupon, puf, rt, times, i) -> float:
        # forward hazard implied by the credit triangle, turned into a zero rate
        fwd = (coupon + puf / cds.protection_end) / cds.lgd if cds.lgd > 0.0 else coupon
        if i == 0:
            return fwd
        return (rt[-1] + fwd * (times[i] - times[i - 1])) / times[i]

    def _solve(self, objective, curve_at, cds, yield_curve, coupon, guess, lower, i) -> float:
        width = max(0.5 * abs(guess), 1e-3)
        x1 = guess - width if lower is None else lower
        x2 = guess + width
        if x2 <= x1:
            x2 = x1 + width
        a, b = bracket_root(objective, x1, x2, lower=lower)

        if self.method == CalibrationMethod.SIMPLE:
            return brent(objective, a, b, tol=self.tol, max_iter=self.max_iter)

        derivative = None
        if self.method == CalibrationMethod.EXACT_JACOBIAN:
            def derivative(h):
                curve = curve_at(h)
                sense = self.pricer.pv_credit_sensitivity(cds, yield_curve, curve, coupon, i)
                # the clean PV also carries the accrued, conditional on survival to protection start
                if cds.effective_protection_start != 0.0:
                    sense += coupon * cds.accrued_year_fraction * curve.single_node_discount_factor_sensitivity(
                        cds.effective_protection_start, i
                    )
                return sense

        return newton_bracketed(objective, a, b, x0=guess, df=derivative, tol=self.tol, max_iter=self.max_iter)
