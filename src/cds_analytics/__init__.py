"""
ISDA CDS analytics - Pure Python Implementation

Pricing, credit curve calibration, quote conversion and risk for single
name CDS under the ISDA Standard Model.

Basic Usage:
    >>> from cds_analytics import CdsAnalyticFactory, CreditCurveCalibrator
    >>> from cds_analytics import AnalyticCdsPricer, build_yield_curve
    >>>
    >>> yc = build_yield_curve(
    ...     '2011-06-19',
    ...     ['M', 'M', 'S', 'S'],
    ...     ['6M', '1Y', '5Y', '10Y'],
    ...     [0.0120, 0.0177, 0.0209, 0.0309],
    ... )
    >>> factory = CdsAnalyticFactory(recovery_rate=0.4)
    >>> pillars = factory.make_imm_cds('2011-06-19', ['1Y', '3Y', '5Y', '10Y'])
    >>> cc = CreditCurveCalibrator().calibrate_from_spreads(pillars, [0.006, 0.008, 0.01, 0.012], yc)
    >>>
    >>> trade = factory.make_imm_cds('2011-06-19', '5Y')
    >>> print(f"PUF: {AnalyticCdsPricer().pv(trade, yc, cc, 0.01):.6f}")
"""

__version__ = '1.0.0'

from .analytic_sensitivity import AnalyticSpreadSensitivityCalculator
# Calibration
from .calibrator import CreditCurveCalibrator
# Instruments
from .cds import CdsAnalytic, CdsCoupon
from .converter import MarketQuoteConverter
from .credit_risk import CreditRiskCalculator, JumpToDefault
# Curves
from .curve import CreditCurve, IsdaCurve, YieldCurve
# Date utilities
from .dates import add_business_days, add_days, add_months, add_years
from .dates import adjust_date, is_business_day, to_date, year_fraction
# Enumerations
from .enums import AccrualOnDefaultFormula, ArbitrageHandling, BadDayConvention
from .enums import CalibrationMethod, DayCountConvention, FiniteDifferenceType
from .enums import InstrumentType, PriceType, ShiftType
from .enums import StubMethod
from .exceptions import ArbitrageError, BootstrapError, CDSError
from .exceptions import ConvergenceError, CurveError
from .factory import CdsAnalyticFactory
# IMM dates
from .imm import imm_date_set, is_imm_date, next_imm_date, next_index_roll_date
from .imm import previous_imm_date
from .integration import get_integration_points
# Pricing
from .pricer import AnalyticCdsPricer
from .quotes import ParSpread, PointsUpFront, QuoteConvention, QuotedSpread
from .rates_sensitivity import InterestRateSensitivityCalculator
# Schedule
from .schedule import CouponPeriod, PremiumLegSchedule
# Risk
from .spread_sensitivity import FiniteDifferenceSpreadSensitivityCalculator
# Tenor parsing
from .tenor import Tenor, parse_tenor
from .yield_curve import YieldCurveBuilder, build_yield_curve

__all__ = [
    '__version__',
    # Instruments
    'CdsAnalytic',
    'CdsCoupon',
    'CdsAnalyticFactory',
    'CouponPeriod',
    'PremiumLegSchedule',
    # Curves
    'IsdaCurve',
    'YieldCurve',
    'CreditCurve',
    'YieldCurveBuilder',
    'build_yield_curve',
    'get_integration_points',
    # Pricing and calibration
    'AnalyticCdsPricer',
    'CreditCurveCalibrator',
    'MarketQuoteConverter',
    'ParSpread',
    'QuotedSpread',
    'PointsUpFront',
    'QuoteConvention',
    # Risk
    'AnalyticSpreadSensitivityCalculator',
    'FiniteDifferenceSpreadSensitivityCalculator',
    'InterestRateSensitivityCalculator',
    'CreditRiskCalculator',
    'JumpToDefault',
    # Enums
    'AccrualOnDefaultFormula',
    'ArbitrageHandling',
    'BadDayConvention',
    'CalibrationMethod',
    'DayCountConvention',
    'FiniteDifferenceType',
    'InstrumentType',
    'PriceType',
    'ShiftType',
    'StubMethod',
    # Exceptions
    'CDSError',
    'CurveError',
    'BootstrapError',
    'ArbitrageError',
    'ConvergenceError',
    # Dates
    'to_date',
    'add_days',
    'add_months',
    'add_years',
    'add_business_days',
    'adjust_date',
    'is_business_day',
    'year_fraction',
    'is_imm_date',
    'next_imm_date',
    'previous_imm_date',
    'next_index_roll_date',
    'imm_date_set',
    'Tenor',
    'parse_tenor',
]
