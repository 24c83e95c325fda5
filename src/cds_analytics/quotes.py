"""
Market quote conventions for CDS.

A CDS trades either at its par spread, or at a standard running coupon
with an upfront payment. The upfront may be quoted directly (points
upfront) or as a quoted spread: the flat spread that, through a
single-knot credit curve, gives the same upfront.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParSpread:
    """A par spread quote; the coupon is the par spread itself."""

    coupon: float

    @property
    def par_spread(self) -> float:
        return self.coupon


@dataclass(frozen=True)
class QuotedSpread:
    """
    A quoted (flat) spread on a contract paying a standard coupon.

    Attributes
        coupon: Standard running coupon (e.g. 0.01 or 0.05)
        quoted_spread: Flat spread used to imply the upfront
    """

    coupon: float
    quoted_spread: float


@dataclass(frozen=True)
class PointsUpFront:
    """
    Points upfront on a contract paying a standard coupon.

    Attributes
        coupon: Standard running coupon
        puf: Clean upfront as a fraction of notional (0.02 = 2 points)
    """

    coupon: float
    puf: float


QuoteConvention = ParSpread | QuotedSpread | PointsUpFront
