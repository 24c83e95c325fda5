"""
Enumeration types for the ISDA CDS analytics library.

Market conventions (day counts, business-day rules, stubs) sit next to the
model choices that change numeric behaviour: the accrual-on-default formula,
the arbitrage policy of the credit-curve calibrator and the bump styles used
by the sensitivity calculators.
"""

from enum import Enum, auto


def _normalise(s: str) -> str:
    return s.upper().replace(' ', '').replace('_', '').replace('-', '')


def _lookup(kind: str, s: str, mapping: dict):
    key = _normalise(s)
    for k, v in mapping.items():
        if key == _normalise(k):
            return v
    raise ValueError(f'Unknown {kind}: {s}')


class DayCountConvention(Enum):
    """Day count conventions for calculating year fractions.

    Values correspond to the opendate Interval.yearfrac() basis parameter:
    - 0 = US (NASD) 30/360
    - 2 = Actual/360
    - 3 = Actual/365 Fixed
    """

    ACT_360 = 2
    ACT_365F = 3
    THIRTY_360 = 0

    @classmethod
    def from_string(cls, s: str) -> 'DayCountConvention':
        """Parse a day count convention from string."""
        return _lookup('day count convention', s, {
            'ACT/360': cls.ACT_360,
            'A360': cls.ACT_360,
            'ACT/365F': cls.ACT_365F,
            'ACT/365': cls.ACT_365F,
            'A365F': cls.ACT_365F,
            'A365': cls.ACT_365F,
            '30/360': cls.THIRTY_360,
            '30U/360': cls.THIRTY_360,
        })


class BadDayConvention(Enum):
    """Business day adjustment conventions."""

    NONE = auto()
    FOLLOWING = auto()
    MODIFIED_FOLLOWING = auto()
    PRECEDING = auto()
    MODIFIED_PRECEDING = auto()

    @classmethod
    def from_string(cls, s: str) -> 'BadDayConvention':
        """Parse a bad day convention from string."""
        return _lookup('bad day convention', s, {
            'NONE': cls.NONE,
            'N': cls.NONE,
            'FOLLOWING': cls.FOLLOWING,
            'F': cls.FOLLOWING,
            'MODIFIED_FOLLOWING': cls.MODIFIED_FOLLOWING,
            'MODFOLLOWING': cls.MODIFIED_FOLLOWING,
            'MF': cls.MODIFIED_FOLLOWING,
            'PRECEDING': cls.PRECEDING,
            'P': cls.PRECEDING,
            'MODIFIED_PRECEDING': cls.MODIFIED_PRECEDING,
            'MODPRECEDING': cls.MODIFIED_PRECEDING,
            'MP': cls.MODIFIED_PRECEDING,
        })


class StubMethod(Enum):
    """Stub period conventions for premium leg schedules."""

    FRONT_SHORT = auto()    # ISDA standard
    FRONT_LONG = auto()
    BACK_SHORT = auto()
    BACK_LONG = auto()

    @property
    def is_front(self) -> bool:
        return self in {StubMethod.FRONT_SHORT, StubMethod.FRONT_LONG}

    @property
    def is_long(self) -> bool:
        return self in {StubMethod.FRONT_LONG, StubMethod.BACK_LONG}

    @classmethod
    def from_string(cls, s: str) -> 'StubMethod':
        """Parse a stub method from string (e.g. 'f/s', 'SHORT_INITIAL')."""
        return _lookup('stub method', s, {
            'FRONT_SHORT': cls.FRONT_SHORT,
            'SHORT_INITIAL': cls.FRONT_SHORT,
            'F/S': cls.FRONT_SHORT,
            'FRONT_LONG': cls.FRONT_LONG,
            'LONG_INITIAL': cls.FRONT_LONG,
            'F/L': cls.FRONT_LONG,
            'BACK_SHORT': cls.BACK_SHORT,
            'SHORT_FINAL': cls.BACK_SHORT,
            'B/S': cls.BACK_SHORT,
            'BACK_LONG': cls.BACK_LONG,
            'LONG_FINAL': cls.BACK_LONG,
            'B/L': cls.BACK_LONG,
        })


class AccrualOnDefaultFormula(Enum):
    """Closed-form approximation used for premium accrued on default.

    ORIGINAL_ISDA reproduces the ISDA standard model (including its half-day
    offset), MARKIT_FIX reproduces the Markit patch of that model, and CORRECT
    is the exact integral without the half-day bias.
    """

    ORIGINAL_ISDA = auto()
    MARKIT_FIX = auto()
    CORRECT = auto()

    @classmethod
    def from_string(cls, s: str) -> 'AccrualOnDefaultFormula':
        """Parse an accrual-on-default formula from string."""
        return _lookup('accrual on default formula', s, {
            'ORIGINAL_ISDA': cls.ORIGINAL_ISDA,
            'ISDA': cls.ORIGINAL_ISDA,
            'MARKIT_FIX': cls.MARKIT_FIX,
            'MARKIT': cls.MARKIT_FIX,
            'CORRECT': cls.CORRECT,
        })


class ArbitrageHandling(Enum):
    """What the calibrator does when a pillar implies a negative forward hazard rate."""

    IGNORE = auto()            # accept the negative forward rate
    FAIL = auto()              # raise ArbitrageError
    ZERO_HAZARD_RATE = auto()  # clamp the forward hazard rate to zero

    @classmethod
    def from_string(cls, s: str) -> 'ArbitrageHandling':
        """Parse an arbitrage handling policy from string."""
        return _lookup('arbitrage handling', s, {
            'IGNORE': cls.IGNORE,
            'FAIL': cls.FAIL,
            'ZERO_HAZARD_RATE': cls.ZERO_HAZARD_RATE,
            'ZERO': cls.ZERO_HAZARD_RATE,
        })


class CalibrationMethod(Enum):
    """Root-finding strategy used for each pillar of the credit curve bootstrap."""

    EXACT_JACOBIAN = auto()  # Newton with the analytic node sensitivity
    FAST = auto()            # Newton with a secant slope
    SIMPLE = auto()          # Brent on the bracket

    @classmethod
    def from_string(cls, s: str) -> 'CalibrationMethod':
        """Parse a calibration method from string."""
        return _lookup('calibration method', s, {
            'EXACT_JACOBIAN': cls.EXACT_JACOBIAN,
            'NEWTON': cls.EXACT_JACOBIAN,
            'FAST': cls.FAST,
            'SIMPLE': cls.SIMPLE,
            'BRENT': cls.SIMPLE,
        })


class PriceType(Enum):
    """Whether a price includes the premium accrued at step-in."""

    CLEAN = auto()
    DIRTY = auto()


class FiniteDifferenceType(Enum):
    """Finite difference scheme for bump-and-reprice sensitivities."""

    FORWARD = auto()
    BACKWARD = auto()
    CENTRAL = auto()


class ShiftType(Enum):
    """How a bump amount is applied to a quote."""

    ABSOLUTE = auto()
    RELATIVE = auto()

    def apply_shift(self, value: float, amount: float) -> float:
        """Return value shifted by amount (additively or proportionally)."""
        if self is ShiftType.ABSOLUTE:
            return value + amount
        return value * (1.0 + amount)


class InstrumentType(Enum):
    """Yield curve instrument: money market deposit or par swap."""

    MONEY_MARKET = 'M'
    SWAP = 'S'

    @classmethod
    def from_string(cls, s: str) -> 'InstrumentType':
        """Parse an instrument type from string ('M', 'S', 'MM', 'SWAP')."""
        return _lookup('instrument type', s, {
            'M': cls.MONEY_MARKET,
            'MM': cls.MONEY_MARKET,
            'MONEY_MARKET': cls.MONEY_MARKET,
            'DEPOSIT': cls.MONEY_MARKET,
            'S': cls.SWAP,
            'SWAP': cls.SWAP,
        })
