"""
Conversion between CDS market quote conventions.

Par spreads, quoted spreads and points upfront (PUF) are different ways of
stating the same credit risk:
- PUF is the clean PV per unit notional of a CDS paying a standard coupon
- The quoted spread is the flat spread which, through a single-knot credit
  curve, reproduces that PUF
- Par spreads come from a full term structure calibrated to all pillars

Quoted spreads and PUF convert one instrument at a time. Conversions
involving par spreads calibrate one curve across all the given pillars.
"""

import logging
from collections.abc import Sequence

from .calibrator import CreditCurveCalibrator
from .cds import CdsAnalytic
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .pricer import AnalyticCdsPricer
from .quotes import ParSpread, PointsUpFront, QuoteConvention, QuotedSpread

logger = logging.getLogger(__name__)


def _broadcast(values: Sequence[float] | float, n: int, name: str) -> list[float]:
    if isinstance(values, (int, float)):
        return [float(values)] * n
    if len(values) != n:
        raise ValueError(f'expected {n} {name}, got {len(values)}')
    return list(values)


class MarketQuoteConverter:
    """
    Converts between par spread, quoted spread and points upfront.

    Args:
        formula: Accrual-on-default formula used for pricing and calibration
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self.pricer = AnalyticCdsPricer(formula)
        self.calibrator = CreditCurveCalibrator(formula)

    # ------------------------------------------------------------------
    # Prices

    @staticmethod
    def clean_price(puf: float) -> float:
        """Clean price (1 - PUF) as a fraction of notional."""
        return 1.0 - puf

    def clean_price_from_curves(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
    ) -> float:
        """Clean price implied by the curves for a CDS paying `coupon`."""
        return self.clean_price(self.points_upfront(cds, coupon, yield_curve, credit_curve))

    def principal(
        self,
        notional: float,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
    ) -> float:
        """Cash exchanged at settlement, excluding accrued (notional times the clean PV)."""
        return notional * self.pricer.pv(cds, yield_curve, credit_curve, coupon, PriceType.CLEAN)

    def points_upfront(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> float:
        """PUF of a CDS paying `coupon`, given the curves."""
        return self.pricer.pv(cds, yield_curve, credit_curve, coupon, PriceType.CLEAN)

    def points_upfronts(
        self,
        cdss: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> list[float]:
        """PUF of several CDSs, with one shared coupon or one coupon each."""
        coupons = _broadcast(coupons, len(cdss), 'coupons')
        return [self.points_upfront(c, s, yield_curve, credit_curve) for c, s in zip(cdss, coupons)]

    def par_spreads(
        self,
        cdss: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> list[float]:
        """Par spreads implied by the curves."""
        return self.pricer.par_spreads(cdss, yield_curve, credit_curve)

    # ------------------------------------------------------------------
    # Quoted spread <-> PUF (single-knot curves)

    def quoted_spread_to_puf(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        quoted_spread: float,
    ) -> float:
        """PUF of a CDS paying `coupon` whose flat (quoted) spread is `quoted_spread`."""
        curve = self.calibrator.calibrate_single(cds, ParSpread(quoted_spread), yield_curve)
        return self.points_upfront(cds, coupon, yield_curve, curve)

    def puf_to_quoted_spread(
        self,
        cds: CdsAnalytic,
        coupon: float,
        yield_curve: YieldCurve,
        puf: float,
    ) -> float:
        """Quoted spread of a CDS paying `coupon` and trading at `puf`."""
        curve = self.calibrator.calibrate_single(cds, PointsUpFront(coupon, puf), yield_curve)
        return self.pricer.par_spread(cds, yield_curve, curve)

    def quoted_spreads_to_puf(
        self,
        cdss: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        quoted_spreads: Sequence[float],
    ) -> list[float]:
        """quoted_spread_to_puf for each CDS."""
        coupons = _broadcast(coupons, len(cdss), 'coupons')
        if len(quoted_spreads) != len(cdss):
            raise ValueError('number of quoted spreads does not match number of CDSs')
        return [
            self.quoted_spread_to_puf(c, s, yield_curve, q) for c, s, q in zip(cdss, coupons, quoted_spreads)
        ]

    def puf_to_quoted_spreads(
        self,
        cdss: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        pufs: Sequence[float],
    ) -> list[float]:
        """puf_to_quoted_spread for each CDS."""
        coupons = _broadcast(coupons, len(cdss), 'coupons')
        if len(pufs) != len(cdss):
            raise ValueError('number of PUFs does not match number of CDSs')
        return [self.puf_to_quoted_spread(c, s, yield_curve, p) for c, s, p in zip(cdss, coupons, pufs)]

    def convert(
        self,
        cds: CdsAnalytic | Sequence[CdsAnalytic],
        quote: QuoteConvention | Sequence[QuoteConvention],
        yield_curve: YieldCurve,
    ) -> QuoteConvention | list[QuoteConvention]:
        """
        Convert a QuotedSpread to PointsUpFront, or PointsUpFront to QuotedSpread.

        Args:
            cds: A CDS, or a sequence of CDSs
            quote: The matching quote, or one quote per CDS
            yield_curve: Discount curve

        Returns
            The quote in the other convention (a list for sequence input)
        """
        if isinstance(cds, CdsAnalytic):
            return self._convert_one(cds, quote, yield_curve)
        if len(cds) != len(quote):
            raise ValueError('number of quotes does not match number of CDSs')
        return [self._convert_one(c, q, yield_curve) for c, q in zip(cds, quote)]

    def _convert_one(self, cds: CdsAnalytic, quote: QuoteConvention, yield_curve: YieldCurve) -> QuoteConvention:
        if isinstance(quote, QuotedSpread):
            puf = self.quoted_spread_to_puf(cds, quote.coupon, yield_curve, quote.quoted_spread)
            return PointsUpFront(quote.coupon, puf)
        if isinstance(quote, PointsUpFront):
            qs = self.puf_to_quoted_spread(cds, quote.coupon, yield_curve, quote.puf)
            return QuotedSpread(quote.coupon, qs)
        raise TypeError(f'cannot convert {type(quote).__name__}; expected QuotedSpread or PointsUpFront')

    # ------------------------------------------------------------------
    # Par spreads (term structure)

    def par_spreads_to_puf(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        par_spreads: Sequence[float],
    ) -> list[float]:
        """PUF of each pillar (paying its coupon) on the curve calibrated to the par spreads."""
        coupons = _broadcast(coupons, len(pillars), 'coupons')
        curve = self.calibrator.calibrate_from_spreads(pillars, par_spreads, yield_curve)
        return self.points_upfronts(pillars, coupons, yield_curve, curve)

    def puf_to_par_spreads(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        pufs: Sequence[float],
    ) -> list[float]:
        """Par spreads of the pillars on the curve calibrated to their PUF quotes."""
        coupons = _broadcast(coupons, len(pillars), 'coupons')
        curve = self.calibrator.calibrate_from_upfront(pillars, coupons, pufs, yield_curve)
        return self.par_spreads(pillars, yield_curve, curve)

    def par_spreads_to_quoted_spreads(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        par_spreads: Sequence[float],
    ) -> list[float]:
        """Quoted spreads of the pillars implied by a term structure of par spreads."""
        coupons = _broadcast(coupons, len(pillars), 'coupons')
        pufs = self.par_spreads_to_puf(pillars, coupons, yield_curve, par_spreads)
        logger.debug('par spreads %s -> PUF %s', list(par_spreads), pufs)
        return self.puf_to_quoted_spreads(pillars, coupons, yield_curve, pufs)

    def quoted_spread_to_par_spreads(
        self,
        pillars: Sequence[CdsAnalytic],
        coupons: Sequence[float] | float,
        yield_curve: YieldCurve,
        quoted_spreads: Sequence[float],
    ) -> list[float]:
        """Par spreads implied by per-pillar quoted spreads."""
        coupons = _broadcast(coupons, len(pillars), 'coupons')
        pufs = self.quoted_spreads_to_puf(pillars, coupons, yield_curve, quoted_spreads)
        logger.debug('quoted spreads %s -> PUF %s', list(quoted_spreads), pufs)
        return self.puf_to_par_spreads(pillars, coupons, yield_curve, pufs)
