"""
Shared test fixtures for CDS analytics tests.
"""

import os
import sys

import pytest
import pathlib

# Add src to path for imports
sys.path.insert(0, os.path.join(pathlib.Path(__file__).parent, '..', 'src'))

from cds_analytics import CdsAnalyticFactory, CreditCurveCalibrator, YieldCurve, YieldCurveBuilder  # noqa: E402
from cds_analytics.tenor import parse_tenor  # noqa: E402

TRADE_DATE = '2011-06-19'

RATES = [
    0.00445, 0.009488, 0.012337, 0.017762, 0.01935, 0.020838, 0.01652, 0.02018, 0.023033, 0.02525, 0.02696,
    0.02825, 0.02931, 0.03017, 0.03092, 0.0316, 0.03231, 0.03367, 0.03419, 0.03411, 0.03412,
]

INSTRUMENT_TYPES = ['M'] * 6 + ['S'] * 15

INSTRUMENT_TENORS = [
    '1M', '2M', '3M', '6M', '9M', '1Y', '2Y', '3Y', '4Y', '5Y', '6Y', '7Y', '8Y', '9Y', '10Y',
    '11Y', '12Y', '15Y', '20Y', '25Y', '30Y',
]

PILLAR_TENORS = ['6M', '1Y', '3Y', '5Y', '7Y', '10Y']


@pytest.fixture(scope='session')
def trade_date():
    """Trade date of the calibration fixtures (a Sunday)."""
    return TRADE_DATE


@pytest.fixture(scope='session')
def market_rates():
    """Money market and swap rates for the yield curve."""
    return list(RATES)


@pytest.fixture(scope='session')
def yield_curve_builder():
    """Builder for the 21-instrument yield curve."""
    return YieldCurveBuilder(TRADE_DATE, INSTRUMENT_TYPES, INSTRUMENT_TENORS)


@pytest.fixture(scope='session')
def yield_curve(yield_curve_builder):
    """Yield curve bootstrapped from RATES."""
    return yield_curve_builder.build(RATES)


@pytest.fixture(scope='session')
def flat_yield_curve():
    """Single knot yield curve, flat at 5%."""
    return YieldCurve([1.0], [0.05])


@pytest.fixture(scope='session')
def factory():
    """Standard conventions, 40% recovery."""
    return CdsAnalyticFactory(recovery_rate=0.4)


@pytest.fixture(scope='session')
def pillars(factory):
    """Calibration CDSs: accrual from 2011-03-21, maturities 2011-06-20 plus 6M to 10Y."""
    maturities = [parse_tenor(t).add_to('2011-06-20') for t in PILLAR_TENORS]
    return factory.make_cds(TRADE_DATE, '2011-03-21', maturities)


@pytest.fixture(scope='session')
def spreads():
    """Par spreads of the pillars (upward sloping)."""
    return [0.00886315689995649, 0.00886315689995649, 0.0133044689825873, 0.0171490070952563,
            0.0183903639181293, 0.0194721890639724]


@pytest.fixture(scope='session')
def trade(factory):
    """A 5Y standard CDS traded on the fixture date."""
    return factory.make_imm_cds(TRADE_DATE, '5Y')


@pytest.fixture(scope='session')
def credit_curve(pillars, spreads, yield_curve):
    """Credit curve calibrated to the pillar par spreads."""
    return CreditCurveCalibrator().calibrate_from_spreads(pillars, spreads, yield_curve)
