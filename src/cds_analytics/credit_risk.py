"""
Default-event risk measures of a CDS: jump to default, recovery01 and
expected loss.

All measures are from the protection buyer's side and scale with the
notional; a negative notional is a protection seller. Expired contracts
have no risk and return zero.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .cds import CdsAnalytic
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .pricer import AnalyticCdsPricer


@dataclass(frozen=True)
class JumpToDefault:
    """
    Value change on immediate default, keyed by legal entity.

    Indexing by legal entity id gives its amount.
    """

    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    def __getitem__(self, key: str) -> float:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    @property
    def total(self) -> float:
        """Sum over all legal entities."""
        return sum(self.values.values())

    def combined_with(self, other: 'JumpToDefault') -> 'JumpToDefault':
        """Add the amounts of another result, entity by entity."""
        values = dict(self.values)
        for key, amount in other.values.items():
            values[key] = values.get(key, 0.0) + amount
        return JumpToDefault(values)


class CreditRiskCalculator:
    """
    Args:
        formula: Accrual-on-default formula used for pricing
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self.pricer = AnalyticCdsPricer(formula)

    def jump_to_default(
        self,
        legal_entity: str,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
        notional: float = 1.0,
    ) -> JumpToDefault:
        """
        Value gained by the protection buyer if the entity defaults now.

        On default the buyer receives the loss given default and the
        contract (worth its clean PV) disappears.
        """
        if cds.is_expired():
            return JumpToDefault({legal_entity: 0.0})
        pv = self.pricer.pv(cds, yield_curve, credit_curve, coupon, PriceType.CLEAN)
        return JumpToDefault({legal_entity: notional * (cds.lgd - pv)})

    def recovery01(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        notional: float = 1.0,
    ) -> float:
        """Sensitivity of the PV to the recovery rate: minus the protection leg before the LGD factor."""
        if cds.is_expired():
            return 0.0
        full = self.pricer.protection_leg(cds.with_recovery_rate(0.0), yield_curve, credit_curve)
        return -notional * full

    def expected_loss(
        self,
        cds: CdsAnalytic,
        credit_curve: CreditCurve,
        notional: float = 1.0,
    ) -> float:
        """Undiscounted expected default payment over the life of the contract; never negative."""
        if cds.is_expired():
            return 0.0
        q = credit_curve.survival_probability(cds.protection_end)
        return abs(notional) * cds.lgd * (1.0 - q)
