"""
Factory for CdsAnalytic instruments under market conventions.

The factory carries the conventions (step-in lag, settlement lag, coupon
interval, stub, day counts, recovery) and turns trade dates plus tenors or
maturities into CdsAnalytic instances. Standard single-name contracts mature
on IMM dates and accrue from the previous IMM date; index contracts
(CDX/iTraxx) roll on March 20 and September 20.

Example:
    >>> factory = CdsAnalyticFactory(recovery_rate=0.4)
    >>> pillars = factory.make_imm_cds('2011-06-19', ['6M', '1Y', '5Y'])
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from .cds import CdsAnalytic
from .dates import DateLike, add_business_days, add_days, adjust_date, to_date
from .enums import BadDayConvention, DayCountConvention, StubMethod
from .imm import imm_dates_between, next_imm_date, next_index_roll_date
from .imm import previous_imm_date
from .tenor import Tenor, parse_tenor

TenorLike = str | Tenor


def _is_many(x) -> bool:
    return isinstance(x, Sequence) and not isinstance(x, str)


@dataclass(frozen=True)
class CdsAnalyticFactory:
    """
    Market conventions for building CDS instruments.

    Defaults are the ISDA standard contract: T+1 calendar step-in, T+3
    business day cash settlement, quarterly coupons with a short front stub,
    protection from the start of day, accrual paid on default, 40% recovery,
    following business-day adjustment, ACT/360 accrual and ACT/365F curve
    times.
    """

    step_in_days: int = 1
    cash_settle_days: int = 3
    pay_acc_on_default: bool = True
    coupon_interval: TenorLike = '3M'
    stub: StubMethod = StubMethod.FRONT_SHORT
    protect_start: bool = True
    recovery_rate: float = 0.4
    bad_day: BadDayConvention = BadDayConvention.FOLLOWING
    accrual_day_count: DayCountConvention = DayCountConvention.ACT_360
    curve_day_count: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self):
        if not 0.0 <= self.recovery_rate <= 1.0:
            raise ValueError(f'recovery rate must be in [0, 1], got {self.recovery_rate}')
        if self.step_in_days < 0 or self.cash_settle_days < 0:
            raise ValueError('step-in and cash settle lags must be non-negative')

    # ------------------------------------------------------------------
    # Convention modifiers

    def with_recovery_rate(self, recovery_rate: float) -> 'CdsAnalyticFactory':
        return replace(self, recovery_rate=recovery_rate)

    def with_step_in(self, days: int) -> 'CdsAnalyticFactory':
        return replace(self, step_in_days=days)

    def with_cash_settle(self, days: int) -> 'CdsAnalyticFactory':
        return replace(self, cash_settle_days=days)

    def with_pay_acc_on_default(self, pay: bool) -> 'CdsAnalyticFactory':
        return replace(self, pay_acc_on_default=pay)

    def with_coupon_interval(self, interval: TenorLike) -> 'CdsAnalyticFactory':
        return replace(self, coupon_interval=interval)

    def with_stub(self, stub: StubMethod) -> 'CdsAnalyticFactory':
        return replace(self, stub=stub)

    def with_protection_start(self, protect_start: bool) -> 'CdsAnalyticFactory':
        return replace(self, protect_start=protect_start)

    def with_bad_day(self, bad_day: BadDayConvention) -> 'CdsAnalyticFactory':
        return replace(self, bad_day=bad_day)

    def with_accrual_day_count(self, day_count: DayCountConvention) -> 'CdsAnalyticFactory':
        return replace(self, accrual_day_count=day_count)

    def with_curve_day_count(self, day_count: DayCountConvention) -> 'CdsAnalyticFactory':
        return replace(self, curve_day_count=day_count)

    # ------------------------------------------------------------------
    # Builders

    def _build(self, trade_date, step_in, cash_settle, acc_start, maturity) -> CdsAnalytic:
        return CdsAnalytic.from_dates(
            trade_date,
            step_in,
            cash_settle,
            acc_start,
            maturity,
            pay_acc_on_default=self.pay_acc_on_default,
            coupon_interval=self.coupon_interval,
            stub=self.stub,
            protect_start=self.protect_start,
            recovery_rate=self.recovery_rate,
            bad_day=self.bad_day,
            accrual_day_count=self.accrual_day_count,
            curve_day_count=self.curve_day_count,
        )

    def _settlement(self, start):
        return add_days(start, self.step_in_days), add_business_days(start, self.cash_settle_days)

    def _imm_acc_start(self, d):
        return adjust_date(previous_imm_date(d), self.bad_day)

    def make_cds(
        self,
        trade_date: DateLike,
        acc_start: DateLike,
        maturity: DateLike | Sequence[DateLike],
        step_in: DateLike | None = None,
        cash_settle: DateLike | None = None,
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """
        Build a CDS (or one per maturity) with explicit dates.

        Args:
            trade_date: Trade date
            acc_start: Accrual start date
            maturity: Maturity date, or a sequence of maturities
            step_in: Step-in date (defaults to trade date plus the step-in lag)
            cash_settle: Cash settlement date (defaults to trade date plus the settlement lag)

        Returns
            CdsAnalytic, or a list of them when several maturities are given
        """
        trade_date = to_date(trade_date)
        default_step_in, default_cash_settle = self._settlement(trade_date)
        step_in = default_step_in if step_in is None else step_in
        cash_settle = default_cash_settle if cash_settle is None else cash_settle
        if _is_many(maturity):
            return [self._build(trade_date, step_in, cash_settle, acc_start, m) for m in maturity]
        return self._build(trade_date, step_in, cash_settle, acc_start, maturity)

    def make_imm_cds(
        self,
        trade_date: DateLike,
        tenor: TenorLike | Sequence[TenorLike],
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """
        Standard single-name CDS maturing on IMM dates.

        Accrual starts on the (adjusted) IMM date before the trade date and
        maturity is the next IMM date plus the tenor.
        """
        trade_date = to_date(trade_date)
        acc_start = self._imm_acc_start(trade_date)
        start = next_imm_date(trade_date)
        if _is_many(tenor):
            maturities = [parse_tenor(t).add_to(start) for t in tenor]
        else:
            maturities = parse_tenor(tenor).add_to(start)
        return self.make_cds(trade_date, acc_start, maturities)

    def make_cdx(
        self,
        trade_date: DateLike,
        tenor: TenorLike | Sequence[TenorLike],
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """
        Index CDS: maturity is the next index roll date less 3M plus the tenor.

        A 5Y CDX traded in January 2014 therefore matures on 20 December 2018.
        """
        trade_date = to_date(trade_date)
        acc_start = self._imm_acc_start(trade_date)
        start = parse_tenor('3M').subtract_from(next_index_roll_date(trade_date))
        if _is_many(tenor):
            maturities = [parse_tenor(t).add_to(start) for t in tenor]
        else:
            maturities = parse_tenor(tenor).add_to(start)
        return self.make_cds(trade_date, acc_start, maturities)

    def make_forward_starting_cds(
        self,
        trade_date: DateLike,
        forward_start_date: DateLike,
        maturity: DateLike | Sequence[DateLike],
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """
        A CDS that starts on a future date, valued at the trade date.

        Step-in and cash settlement are measured from the forward start and
        accrual begins on the IMM date before it.
        """
        trade_date = to_date(trade_date)
        forward_start_date = to_date(forward_start_date)
        if forward_start_date < trade_date:
            raise ValueError('forward start date must not be before the trade date')
        step_in, cash_settle = self._settlement(forward_start_date)
        acc_start = self._imm_acc_start(forward_start_date)
        return self.make_cds(trade_date, acc_start, maturity, step_in, cash_settle)

    def make_forward_starting_imm_cds(
        self,
        trade_date: DateLike,
        forward_start_date: DateLike,
        tenor: TenorLike | Sequence[TenorLike],
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """Forward starting CDS maturing on the IMM date after the forward start plus the tenor."""
        start = next_imm_date(forward_start_date)
        if _is_many(tenor):
            maturities = [parse_tenor(t).add_to(start) for t in tenor]
        else:
            maturities = parse_tenor(tenor).add_to(start)
        return self.make_forward_starting_cds(trade_date, forward_start_date, maturities)

    def make_forward_starting_cdx(
        self,
        trade_date: DateLike,
        forward_start_date: DateLike,
        tenor: TenorLike | Sequence[TenorLike],
    ) -> CdsAnalytic | list[CdsAnalytic]:
        """Forward starting index CDS, using the index roll of the forward start date."""
        start = parse_tenor('3M').subtract_from(next_index_roll_date(forward_start_date))
        if _is_many(tenor):
            maturities = [parse_tenor(t).add_to(start) for t in tenor]
        else:
            maturities = parse_tenor(tenor).add_to(start)
        return self.make_forward_starting_cds(trade_date, forward_start_date, maturities)

    def make_multi_imm_cds(
        self,
        trade_date: DateLike,
        first_tenor: TenorLike,
        last_tenor: TenorLike,
    ) -> list[CdsAnalytic]:
        """
        Standard CDSs on every IMM maturity between two tenors.

        Args:
            trade_date: Trade date
            first_tenor: Tenor of the shortest contract, measured from the next IMM date
            last_tenor: Tenor of the longest contract

        Returns
            One CDS per consecutive IMM maturity, shortest first
        """
        trade_date = to_date(trade_date)
        start = next_imm_date(trade_date)
        first = parse_tenor(first_tenor).add_to(start)
        last = parse_tenor(last_tenor).add_to(start)
        if last < first:
            raise ValueError('last tenor must not be shorter than first tenor')
        return self.make_cds(trade_date, self._imm_acc_start(trade_date), imm_dates_between(first, last))
