"""
Tests for CdsAnalyticFactory.
"""

import pytest
from cds_analytics import CdsAnalytic, CdsAnalyticFactory
from cds_analytics.dates import time_from


@pytest.fixture
def factory():
    """Standard conventions."""
    return CdsAnalyticFactory()


class TestFactory:
    """Tests for the CDS builders."""

    def test_make_cds_defaults(self, factory):
        """Default step-in is T+1 and cash settlement T+3 business days."""
        cds = factory.make_cds('2013-06-12', '2013-03-20', '2018-06-20')
        expected = CdsAnalytic.from_dates('2013-06-12', '2013-06-13', '2013-06-17', '2013-03-20', '2018-06-20')
        assert cds == expected

    def test_make_imm_cds(self, factory):
        """A 5Y IMM CDS accrues from the previous IMM date and matures 5Y after the next one."""
        cds = factory.make_imm_cds('2013-06-12', '5Y')
        expected = factory.make_cds('2013-06-12', '2013-03-20', '2018-06-20')
        assert cds == expected
        assert abs(cds.protection_end - 1834 / 365) < 1e-15

    def test_make_imm_cds_many(self, factory):
        """A list of tenors gives one CDS per tenor, ascending."""
        cdss = factory.make_imm_cds('2013-06-12', ['6M', '1Y', '5Y'])
        assert len(cdss) == 3
        ends = [c.protection_end for c in cdss]
        assert ends == sorted(ends)

    def test_make_cdx(self, factory):
        """A 5Y index traded in January 2014 matures on 2018-12-20."""
        cds = factory.make_cdx('2014-01-15', '5Y')
        assert abs(cds.protection_end - time_from('2014-01-15', '2018-12-20')) < 1e-15

    def test_forward_starting(self, factory):
        """Protection of a forward starting CDS begins at the forward date."""
        cds = factory.make_forward_starting_cds('2013-06-12', '2013-09-25', '2018-12-20')
        assert abs(cds.effective_protection_start - 105 / 365) < 1e-15
        assert abs(cds.cash_settle_time - time_from('2013-06-12', '2013-09-30')) < 1e-15

    def test_forward_start_before_trade(self, factory):
        """The forward start cannot precede the trade date."""
        with pytest.raises(ValueError):
            factory.make_forward_starting_cds('2013-06-12', '2013-06-01', '2018-12-20')

    def test_forward_starting_imm(self, factory):
        """The maturity is measured from the IMM date after the forward start."""
        cds = factory.make_forward_starting_imm_cds('2013-06-12', '2013-09-25', '5Y')
        assert abs(cds.protection_end - time_from('2013-06-12', '2018-12-20')) < 1e-15

    def test_make_multi_imm_cds(self, factory):
        """Every IMM maturity between 1Y and 2Y is covered."""
        cdss = factory.make_multi_imm_cds('2013-06-12', '1Y', '2Y')
        assert len(cdss) == 5
        assert abs(cdss[0].protection_end - time_from('2013-06-12', '2014-06-20')) < 1e-15
        assert abs(cdss[-1].protection_end - time_from('2013-06-12', '2015-06-20')) < 1e-15


class TestConventions:
    """Tests for the convention modifiers."""

    def test_with_recovery_rate(self, factory):
        """Modifiers return a new factory."""
        other = factory.with_recovery_rate(0.25)
        assert other.recovery_rate == 0.25
        assert factory.recovery_rate == 0.4
        assert abs(other.make_imm_cds('2013-06-12', '5Y').lgd - 0.75) < 1e-15

    def test_invalid_recovery(self):
        """Recovery outside [0, 1] is rejected."""
        with pytest.raises(ValueError):
            CdsAnalyticFactory(recovery_rate=1.2)

    def test_without_accrual_on_default(self, factory):
        """with_pay_acc_on_default flows through to the CDS."""
        cds = factory.with_pay_acc_on_default(False).make_imm_cds('2013-06-12', '5Y')
        assert not cds.pay_acc_on_default

    def test_semi_annual_coupons(self, factory):
        """A 6M coupon interval halves the number of coupons."""
        cds = factory.with_coupon_interval('6M').make_cds('2013-06-12', '2013-06-20', '2018-06-20')
        assert cds.num_payments == 10
