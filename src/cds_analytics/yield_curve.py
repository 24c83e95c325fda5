"""
Yield curve bootstrapping from market instruments.

Builds an ISDA-style YieldCurve from:
- Money market rates (simple interest, ACT/360 by default)
- Par swap rates (fixed leg 30/360, annual by default)

The curve is piecewise flat forward (linear RT) with knots at the
instrument maturities, so it has the same shape the credit curve uses.
Each swap is solved for the zero rate of its own knot with Brent's method;
fixed coupons that fall between the previous knot and the new one are
interpolated with the knot being solved for.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from opendate import Date

from .curve import YieldCurve
from .dates import DateLike, adjust_date, time_from, to_date, year_fraction
from .enums import BadDayConvention, DayCountConvention, InstrumentType
from .exceptions import BootstrapError, ConvergenceError
from .root_finding import bracket_root, brent
from .schedule import unadjusted_dates
from .tenor import Tenor, parse_tenor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YieldCurveBuilder:
    """
    Conventions and instrument set for an ISDA yield curve.

    Build once per trade date and instrument set, then call build() with
    the market rates; IR01 rebuilds the curve this way after bumping rates.

    Attributes
        trade_date: Curve base date (time zero)
        instrument_types: 'M' (money market) or 'S' (swap) per instrument
        tenors: Instrument tenors, ascending
        mm_day_count: Money market accrual day count
        fixed_day_count: Swap fixed leg day count
        fixed_interval: Swap fixed leg payment interval
        curve_day_count: Day count for curve times
        bad_day: Business day adjustment of maturities and payment dates

    Example:
        >>> builder = YieldCurveBuilder('2011-06-19', ['M', 'M', 'S'], ['6M', '1Y', '5Y'])
        >>> curve = builder.build([0.012, 0.0177, 0.0209])
    """

    trade_date: Date
    instrument_types: tuple[InstrumentType, ...]
    tenors: tuple[Tenor, ...]
    mm_day_count: DayCountConvention = DayCountConvention.ACT_360
    fixed_day_count: DayCountConvention = DayCountConvention.THIRTY_360
    fixed_interval: Tenor = Tenor(1, 'Y')
    curve_day_count: DayCountConvention = DayCountConvention.ACT_365F
    bad_day: BadDayConvention = BadDayConvention.MODIFIED_FOLLOWING

    def __init__(
        self,
        trade_date: DateLike,
        instrument_types: Sequence[str | InstrumentType],
        tenors: Sequence[str | Tenor],
        mm_day_count: DayCountConvention = DayCountConvention.ACT_360,
        fixed_day_count: DayCountConvention = DayCountConvention.THIRTY_360,
        fixed_interval: str | Tenor = '1Y',
        curve_day_count: DayCountConvention = DayCountConvention.ACT_365F,
        bad_day: BadDayConvention = BadDayConvention.MODIFIED_FOLLOWING,
    ):
        if len(instrument_types) != len(tenors):
            raise ValueError('instrument_types and tenors must have the same length')
        if len(tenors) == 0:
            raise ValueError('need at least one instrument')
        types = tuple(t if isinstance(t, InstrumentType) else InstrumentType.from_string(t) for t in instrument_types)
        object.__setattr__(self, 'trade_date', to_date(trade_date))
        object.__setattr__(self, 'instrument_types', types)
        object.__setattr__(self, 'tenors', tuple(parse_tenor(t) for t in tenors))
        object.__setattr__(self, 'mm_day_count', mm_day_count)
        object.__setattr__(self, 'fixed_day_count', fixed_day_count)
        object.__setattr__(self, 'fixed_interval', parse_tenor(fixed_interval))
        object.__setattr__(self, 'curve_day_count', curve_day_count)
        object.__setattr__(self, 'bad_day', bad_day)

        times = self.knot_times
        if any(b <= a for a, b in zip(times, times[1:])):
            raise ValueError('instrument maturities must be strictly ascending')

    @property
    def maturities(self) -> list[Date]:
        """Adjusted maturity of each instrument."""
        return [adjust_date(t.add_to(self.trade_date), self.bad_day) for t in self.tenors]

    @property
    def knot_times(self) -> list[float]:
        """Curve knot times (one per instrument)."""
        return [time_from(self.trade_date, d, self.curve_day_count) for d in self.maturities]

    def __len__(self) -> int:
        return len(self.tenors)

    def _swap_leg(self, tenor: Tenor) -> tuple[list[float], list[float]]:
        """Payment times and fixed-leg year fractions of a par swap."""
        end = tenor.add_to(self.trade_date)
        dates = unadjusted_dates(self.trade_date, end, self.fixed_interval)
        adjusted = [self.trade_date] + [adjust_date(d, self.bad_day) for d in dates[1:]]
        times = [time_from(self.trade_date, d, self.curve_day_count) for d in adjusted[1:]]
        fracs = [year_fraction(a, b, self.fixed_day_count) for a, b in zip(adjusted, adjusted[1:])]
        return times, fracs

    def build(self, rates: Sequence[float]) -> YieldCurve:
        """
        Bootstrap the curve from market rates.

        Args:
            rates: One rate per instrument (0.01 = 1%)

        Returns
            YieldCurve with one knot per instrument

        Raises
            ValueError: If the number of rates does not match the instruments
            BootstrapError: If a swap cannot be solved
        """
        if len(rates) != len(self.tenors):
            raise ValueError(f'{len(self.tenors)} instruments but {len(rates)} rates')

        times = self.knot_times
        maturities = self.maturities
        rt = []
        for i, (kind, tenor, rate) in enumerate(zip(self.instrument_types, self.tenors, rates)):
            if kind == InstrumentType.MONEY_MARKET:
                yf = year_fraction(self.trade_date, maturities[i], self.mm_day_count)
                rt.append(math.log1p(rate * yf))
                continue

            pay_times, fracs = self._swap_leg(tenor)
            knots = times[: i + 1]

            def objective(z, knots=knots, pay_times=pay_times, fracs=fracs, rate=rate):
                curve = YieldCurve.from_rt(knots, rt + [z * knots[-1]])
                annuity = sum(f * curve.discount_factor(t) for t, f in zip(pay_times, fracs))
                return rate * annuity + curve.discount_factor(pay_times[-1]) - 1.0

            guess = rt[-1] / times[i - 1] if i > 0 else rate
            try:
                a, b = bracket_root(objective, guess - 0.01, guess + 0.01)
                z = brent(objective, a, b, tol=1e-14)
            except ConvergenceError as e:
                raise BootstrapError(f'failed to bootstrap swap {tenor}: {e}', pillar=i) from e
            logger.debug('swap %s: t=%.6f, zero rate=%.12f', tenor, times[i], z)
            rt.append(z * times[i])

        return YieldCurve.from_rt(times, rt)


def build_yield_curve(
    trade_date: DateLike,
    instrument_types: Sequence[str | InstrumentType],
    tenors: Sequence[str | Tenor],
    rates: Sequence[float],
    **conventions,
) -> YieldCurve:
    """Shortcut for YieldCurveBuilder(trade_date, instrument_types, tenors, **conventions).build(rates)."""
    return YieldCurveBuilder(trade_date, instrument_types, tenors, **conventions).build(rates)
