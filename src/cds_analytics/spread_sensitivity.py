"""
Finite-difference credit spread sensitivities (CS01).

Every calculation follows the same recipe: bump market quotes, recalibrate
the credit curve, reprice, and divide the PV change by the bump. The
variants differ only in what is bumped:
- parallel: all pillar quotes by the same amount
- bucketed: one pillar quote at a time
- from a credit curve: the par spreads implied by the curve at the pillars

Results are per unit notional and per unit spread (multiply by 1e-4 for a
1bp CS01).
"""

import bisect
import logging
from collections.abc import Sequence

import numpy as np

from .calibrator import CreditCurveCalibrator
from .cds import CdsAnalytic
from .converter import MarketQuoteConverter
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, FiniteDifferenceType, PriceType
from .enums import ShiftType
from .pricer import AnalyticCdsPricer
from .quotes import ParSpread, PointsUpFront, QuoteConvention, QuotedSpread

logger = logging.getLogger(__name__)

MIN_BUMP = 1e-10


def check_bump(amount: float) -> None:
    """Reject bumps too small to give a meaningful finite difference."""
    if abs(amount) <= MIN_BUMP:
        raise ValueError(f'bump amount too small: {amount}')


def _check_lengths(a: Sequence, b: Sequence, what: str) -> None:
    if len(b) == 0:
        raise ValueError(f'{what} must not be empty')
    if len(a) != len(b):
        raise ValueError(f'{what} length ({len(b)}) does not match number of CDSs ({len(a)})')


def make_bumped_spreads(
    spreads: Sequence[float],
    amount: float,
    shift_type: ShiftType = ShiftType.ABSOLUTE,
    index: int | None = None,
) -> list[float]:
    """
    Bump all spreads, or only the one at `index`.

    Args:
        spreads: Spreads to bump
        amount: Bump size (absolute, or a fraction for RELATIVE)
        shift_type: ABSOLUTE adds amount; RELATIVE scales by (1 + amount)
        index: Bump only this position (None bumps all)
    """
    res = list(spreads)
    if index is None:
        return [shift_type.apply_shift(s, amount) for s in res]
    res[index] = shift_type.apply_shift(res[index], amount)
    return res


class FiniteDifferenceSpreadSensitivityCalculator:
    """
    Bump-and-recalibrate CS01 calculator.

    Args:
        formula: Accrual-on-default formula used for pricing and calibration
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self.converter = MarketQuoteConverter(formula)
        self.calibrator = CreditCurveCalibrator(formula)
        self.pricer = AnalyticCdsPricer(formula)

    # ------------------------------------------------------------------
    # Parallel CS01 from the CDS's own quote

    def parallel_cs01(
        self,
        cds: CdsAnalytic,
        quote: QuoteConvention,
        yield_curve: YieldCurve,
        bump: float,
    ) -> float:
        """Parallel CS01 of a CDS from its own market quote (any convention)."""
        if not isinstance(quote, (ParSpread, QuotedSpread, PointsUpFront)):
            raise TypeError(f'unknown quote convention: {type(quote).__name__}')
        check_bump(bump)
        if cds.is_expired():
            return 0.0
        if isinstance(quote, QuotedSpread):
            return self.parallel_cs01_from_par_spreads(
                cds, quote.coupon, yield_curve, [cds], [quote.quoted_spread], bump, ShiftType.ABSOLUTE
            )
        if isinstance(quote, PointsUpFront):
            return self.parallel_cs01_from_puf(cds, quote.coupon, yield_curve, quote.puf, bump)
        return self.parallel_cs01_from_par_spreads(
            cds, quote.coupon, yield_curve, [cds], [quote.coupon], bump, ShiftType.ABSOLUTE
        )

    def parallel_cs01_from_puf(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        puf: float,
        bump: float,
    ) -> float:
        """Bump the quoted spread implied by the PUF and reprice on a flat curve."""
        check_bump(bump)
        if cds.is_expired():
            return 0.0
        bumped = self.converter.puf_to_quoted_spread(cds, coupon, yield_curve, puf) + bump
        curve = self.calibrator.calibrate_single(cds, ParSpread(bumped), yield_curve)
        price = self.pricer.pv(cds, yield_curve, curve, coupon)
        return (price - puf) / bump

    def parallel_cs01_from_spread(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        market_spread: float,
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> float:
        """Parallel CS01 when the CDS itself is quoted at `market_spread`."""
        check_bump(bump)
        if cds.is_expired():
            return 0.0
        return self.parallel_cs01_from_par_spreads(
            cds, coupon, yield_curve, [cds], [market_spread], bump, shift_type
        )

    def parallel_cs01_from_quoted_spread(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        reference_cds: CdsAnalytic,
        quoted_spread: float,
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> float:
        """Parallel CS01 of `cds` from the quoted spread of a (possibly different) reference CDS."""
        check_bump(bump)
        return self.parallel_cs01_from_par_spreads(
            cds, coupon, yield_curve, [reference_cds], [quoted_spread], bump, shift_type
        )

    # ------------------------------------------------------------------
    # Parallel CS01 from a strip of pillar quotes

    def parallel_cs01_from_pillar_quotes(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        quotes: Sequence[QuoteConvention],
        bump: float,
    ) -> float:
        """Bump every pillar quote (in its own convention) and reprice."""
        check_bump(bump)
        _check_lengths(pillars, quotes, 'quotes')
        base_curve = self.calibrator.calibrate(pillars, quotes, yield_curve)
        base = self.pricer.pv(cds, yield_curve, base_curve, coupon)
        bumped_quotes = self.bump_quotes(pillars, quotes, yield_curve, bump)
        bumped_curve = self.calibrator.calibrate(pillars, bumped_quotes, yield_curve)
        price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
        return (price - base) / bump

    def parallel_cs01_from_par_spreads(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        par_spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> float:
        """Bump every pillar par spread and reprice (dirty PV)."""
        _check_lengths(pillars, par_spreads, 'spreads')
        check_bump(bump)
        bumped = make_bumped_spreads(par_spreads, bump, shift_type)
        diff = self._pv_difference(cds, coupon, pillars, bumped, par_spreads, yield_curve, PriceType.DIRTY)
        return diff / bump

    def parallel_cs01_from_credit_curve(
        self,
        cds: CdsAnalytic,
        coupon: float,
        pillars: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        bump: float,
    ) -> float:
        """Bump the par spreads implied by `credit_curve` at the pillars and reprice."""
        check_bump(bump)
        spreads = self._implied_spreads(pillars, yield_curve, credit_curve)
        base_curve = self.calibrator.calibrate_from_spreads(pillars, spreads, yield_curve)
        base = self.pricer.pv(cds, yield_curve, base_curve, coupon)
        bumped_curve = self.calibrator.calibrate_from_spreads(
            pillars, make_bumped_spreads(spreads, bump), yield_curve
        )
        price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
        return (price - base) / bump

    # ------------------------------------------------------------------
    # Bucketed CS01

    def bucketed_cs01_from_pillar_quotes(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        quotes: Sequence[QuoteConvention],
        bump: float,
    ) -> np.ndarray:
        """Bump each pillar quote in turn."""
        check_bump(bump)
        _check_lengths(pillars, quotes, 'quotes')
        base_curve = self.calibrator.calibrate(pillars, quotes, yield_curve)
        base = self.pricer.pv(cds, yield_curve, base_curve, coupon)
        res = np.zeros(len(pillars))
        for i in range(len(pillars)):
            bumped_quotes = list(quotes)
            bumped_quotes[i] = self.bump_quote(pillars[i], quotes[i], yield_curve, bump)
            curve = self.calibrator.calibrate(pillars, bumped_quotes, yield_curve)
            res[i] = (self.pricer.pv(cds, yield_curve, curve, coupon) - base) / bump
        return res

    def bucketed_cs01_from_par_spreads(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        par_spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> np.ndarray:
        """Bump each pillar par spread in turn (dirty PV)."""
        _check_lengths(pillars, par_spreads, 'spreads')
        check_bump(bump)
        base_curve = self.calibrator.calibrate_from_spreads(pillars, par_spreads, yield_curve)
        base = self.pricer.pv(cds, yield_curve, base_curve, coupon, PriceType.DIRTY)
        res = np.zeros(len(pillars))
        for i in range(len(pillars)):
            bumped = make_bumped_spreads(par_spreads, bump, shift_type, i)
            curve = self.calibrator.calibrate_from_spreads(pillars, bumped, yield_curve)
            res[i] = (self.pricer.pv(cds, yield_curve, curve, coupon, PriceType.DIRTY) - base) / bump
            logger.debug('bucket %d: cs01=%.10g', i, res[i])
        return res

    def bucketed_cs01_from_quoted_spreads(
        self,
        cds: CdsAnalytic | Sequence[CdsAnalytic],
        coupon: float,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        quoted_spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> np.ndarray:
        """
        Bump each pillar's quoted spread in turn.

        All pillars are assumed to pay `coupon`. Each bumped quoted spread is
        turned into a PUF and the curve is recalibrated from the PUFs.

        Returns
            Array of length n_pillars for a single CDS, or of shape
            (n_trades, n_pillars) when a sequence of CDSs is given
        """
        _check_lengths(pillars, quoted_spreads, 'spreads')
        check_bump(bump)
        trades = [cds] if isinstance(cds, CdsAnalytic) else list(cds)
        n = len(pillars)
        coupons = [coupon] * n
        pufs = self.converter.quoted_spreads_to_puf(pillars, coupons, yield_curve, quoted_spreads)
        base_curve = self.calibrator.calibrate_from_upfront(pillars, coupons, pufs, yield_curve)
        base = [self.pricer.pv(c, yield_curve, base_curve, coupon, PriceType.DIRTY) for c in trades]

        res = np.zeros((len(trades), n))
        for i in range(n):
            bumped_pufs = list(pufs)
            bumped_spread = shift_type.apply_shift(quoted_spreads[i], bump)
            bumped_pufs[i] = self.converter.quoted_spread_to_puf(pillars[i], coupon, yield_curve, bumped_spread)
            curve = self.calibrator.calibrate_from_upfront(pillars, coupons, bumped_pufs, yield_curve)
            for j, trade in enumerate(trades):
                res[j, i] = (self.pricer.pv(trade, yield_curve, curve, coupon, PriceType.DIRTY) - base[j]) / bump
        return res[0] if isinstance(cds, CdsAnalytic) else res

    def bucketed_cs01_from_credit_curve(
        self,
        cds: CdsAnalytic,
        coupon: float,
        bucket_cdss: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        bump: float,
    ) -> np.ndarray:
        """
        Bump, one at a time, the par spreads implied by `credit_curve` at the bucket CDSs.

        Buckets beyond the first one maturing at or after the CDS have no
        sensitivity and are left at zero.
        """
        check_bump(bump)
        spreads = self._implied_spreads(bucket_cdss, yield_curve, credit_curve)
        n = len(bucket_cdss)
        times = [c.protection_end for c in bucket_cdss]
        index = min(bisect.bisect_left(times, cds.protection_end), n - 1)

        base_curve = self.calibrator.calibrate_from_spreads(bucket_cdss, spreads, yield_curve)
        base = self.pricer.pv(cds, yield_curve, base_curve, coupon)
        res = np.zeros(n)
        for i in range(index + 1):
            bumped = make_bumped_spreads(spreads, bump, ShiftType.ABSOLUTE, i)
            curve = self.calibrator.calibrate_from_spreads(bucket_cdss, bumped, yield_curve)
            res[i] = (self.pricer.pv(cds, yield_curve, curve, coupon) - base) / bump
        return res

    def bucketed_cs01_from_par_spreads_with_buckets(
        self,
        cds: CdsAnalytic,
        coupon: float,
        bucket_cdss: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        pillar_spreads: Sequence[float],
        bump: float,
    ) -> np.ndarray:
        """Calibrate to the pillar spreads, then bucket against a different set of CDSs."""
        check_bump(bump)
        _check_lengths(pillars, pillar_spreads, 'pillar spreads')
        curve = self.calibrator.calibrate_from_spreads(pillars, pillar_spreads, yield_curve)
        return self.bucketed_cs01_from_credit_curve(cds, coupon, bucket_cdss, yield_curve, curve, bump)

    def bucketed_cs01_from_puf(
        self,
        cds: CdsAnalytic,
        puf: PointsUpFront,
        yield_curve: YieldCurve,
        bucket_cdss: Sequence[CdsAnalytic],
        bump: float,
    ) -> np.ndarray:
        """Flat curve from the CDS's PUF quote, bucketed against `bucket_cdss`."""
        check_bump(bump)
        if cds.is_expired():
            return np.zeros(len(bucket_cdss))
        curve = self.calibrator.calibrate_single(cds, puf, yield_curve)
        return self.bucketed_cs01_from_credit_curve(cds, puf.coupon, bucket_cdss, yield_curve, curve, bump)

    # ------------------------------------------------------------------
    # Generic finite difference

    def finite_difference_spread_sensitivity(
        self,
        cds: CdsAnalytic,
        coupon: float,
        price_type: PriceType,
        yield_curve: YieldCurve,
        pillars: Sequence[CdsAnalytic],
        spreads: Sequence[float],
        delta_spreads: Sequence[float],
        fd_type: FiniteDifferenceType,
    ) -> float:
        """
        PV difference for a per-pillar spread bump (not divided by the bump).

        CENTRAL returns pv(s + d) - pv(s - d), FORWARD pv(s + d) - pv(s) and
        BACKWARD pv(s) - pv(s - d).

        Raises
            ValueError: If spreads are not positive, deltas are not positive, or a
                delta is not smaller than its spread (except for FORWARD)
        """
        _check_lengths(pillars, spreads, 'spreads')
        _check_lengths(pillars, delta_spreads, 'delta spreads')
        for s, d in zip(spreads, delta_spreads):
            if s <= 0.0:
                raise ValueError('spreads must be positive')
            if d <= MIN_BUMP:
                raise ValueError(f'delta spreads must be greater than {MIN_BUMP}, got {d}')
            if fd_type != FiniteDifferenceType.FORWARD and d >= s:
                raise ValueError('delta spread must be less than spread, unless forward difference is used')

        up = [s + d for s, d in zip(spreads, delta_spreads)]
        down = [s - d for s, d in zip(spreads, delta_spreads)]
        if fd_type == FiniteDifferenceType.CENTRAL:
            return self._pv_difference(cds, coupon, pillars, up, down, yield_curve, price_type)
        if fd_type == FiniteDifferenceType.FORWARD:
            return self._pv_difference(cds, coupon, pillars, up, spreads, yield_curve, price_type)
        if fd_type == FiniteDifferenceType.BACKWARD:
            return self._pv_difference(cds, coupon, pillars, spreads, down, yield_curve, price_type)
        raise ValueError(f'unknown finite difference type: {fd_type}')

    # ------------------------------------------------------------------
    # Quote bumping

    def bump_quote(
        self,
        cds: CdsAnalytic,
        quote: QuoteConvention,
        yield_curve: YieldCurve,
        eps: float,
    ) -> QuoteConvention:
        """
        Bump a quote by `eps` of spread.

        Par and quoted spreads are bumped directly; a PUF quote is converted
        to a quoted spread, bumped, and converted back.
        """
        if isinstance(quote, ParSpread):
            return ParSpread(quote.coupon + eps)
        if isinstance(quote, QuotedSpread):
            return QuotedSpread(quote.coupon, quote.quoted_spread + eps)
        if isinstance(quote, PointsUpFront):
            qs = self.converter.puf_to_quoted_spread(cds, quote.coupon, yield_curve, quote.puf) + eps
            return PointsUpFront(quote.coupon, self.converter.quoted_spread_to_puf(cds, quote.coupon, yield_curve, qs))
        raise TypeError(f'unknown quote convention: {type(quote).__name__}')

    def bump_quotes(
        self,
        cdss: Sequence[CdsAnalytic],
        quotes: Sequence[QuoteConvention],
        yield_curve: YieldCurve,
        eps: float,
    ) -> list[QuoteConvention]:
        """bump_quote for every CDS."""
        _check_lengths(cdss, quotes, 'quotes')
        return [self.bump_quote(c, q, yield_curve, eps) for c, q in zip(cdss, quotes)]

    # ------------------------------------------------------------------

    def _implied_spreads(self, pillars, yield_curve, credit_curve) -> list[float]:
        spreads = []
        for i, c in enumerate(pillars):
            if i > 0 and c.protection_end <= pillars[i - 1].protection_end:
                raise ValueError('pillars must be ascending')
            spreads.append(self.pricer.par_spread(c, yield_curve, credit_curve))
        return spreads

    def _pv_difference(self, cds, coupon, pillars, spreads_up, spreads_down, yield_curve, price_type) -> float:
        curve_up = self.calibrator.calibrate_from_spreads(pillars, spreads_up, yield_curve)
        curve_down = self.calibrator.calibrate_from_spreads(pillars, spreads_down, yield_curve)
        up = self.pricer.pv(cds, yield_curve, curve_up, coupon, price_type)
        down = self.pricer.pv(cds, yield_curve, curve_down, coupon, price_type)
        return up - down
