"""
Unit Tests for Credit Utilization Analysis

Tests the credit utilization and payment behavior analysis.
"""

import pytest

from personasense.features.base import TimeWindow
from personasense.features.credit import detect_credit, utilization_bucket
from personasense.ingest.schema import Account, Apr, Liability


def create_credit_account(account_id: str, balance: float, limit: float) -> Account:
    """Helper to create a credit card account."""
    return Account(
        account_id=account_id,
        type="credit",
        subtype="credit card",
        mask=account_id[-4:],
        balance_current=balance,
        credit_limit=limit,
    )


def create_liability(account_id: str, min_payment: float = 25.0, last_payment: float = 200.0,
                     apr: float = 0.0, is_overdue: bool = False) -> Liability:
    """Helper to create a liability record."""
    return Liability(
        account_id=account_id,
        type="credit",
        aprs=(Apr(apr_type="purchase_apr", apr_percentage=apr),),
        minimum_payment_amount=min_payment,
        last_payment_amount=last_payment,
        is_overdue=is_overdue,
    )


class TestUtilizationBucket:
    """Tests for the 30/50/80 bucket boundaries."""

    @pytest.mark.parametrize("percent,bucket", [
        (0.0, 'under_30'),
        (29.99, 'under_30'),
        (30.0, '30_to_50'),
        (49.99, '30_to_50'),
        (50.0, '50_to_80'),
        (79.99, '50_to_80'),
        (80.0, 'over_80'),
        (120.0, 'over_80'),
    ])
    def test_boundaries(self, percent, bucket):
        assert utilization_bucket(percent) == bucket


class TestCreditUtilization:
    """Tests for credit utilization calculation."""

    def test_no_credit_cards(self):
        """Test user with no credit cards."""
        checking = Account(account_id="chk", type="depository", subtype="checking", balance_current=500.0)

        result = detect_credit([checking], [], TimeWindow.DAYS_30)

        assert result.detected is False
        assert result.evidence.accounts == ()
        assert result.evidence.max_utilization == 0.0
        assert result.evidence.overall_utilization.percent == 0.0

    def test_high_utilization(self):
        """Balance 1500 on a 2000 limit is 75% and detected."""
        account = create_credit_account("cc_0001", balance=1500.0, limit=2000.0)

        result = detect_credit([account], [create_liability("cc_0001")], TimeWindow.DAYS_30)

        card = result.evidence.accounts[0]
        assert card.utilization_percent == 75.0
        assert card.utilization_bucket == '50_to_80'
        assert result.detected is True

    def test_low_utilization_without_liability(self):
        """Balance 200 on a 2000 limit with no liability is not detected."""
        account = create_credit_account("cc_0001", balance=200.0, limit=2000.0)

        result = detect_credit([account], [], TimeWindow.DAYS_30)

        card = result.evidence.accounts[0]
        assert card.utilization_percent == 10.0
        assert card.utilization_bucket == 'under_30'
        assert card.minimum_payment_only is False
        assert card.has_interest_charges is False
        assert card.is_overdue is False
        assert result.detected is False

    def test_minimum_payment_only(self):
        """Last payment within $1 of the minimum."""
        account = create_credit_account("cc_0001", balance=200.0, limit=2000.0)
        liability = create_liability("cc_0001", min_payment=25.0, last_payment=25.5)

        result = detect_credit([account], [liability], TimeWindow.DAYS_30)

        assert result.evidence.accounts[0].minimum_payment_only is True
        assert result.detected is True

    def test_unknown_last_payment_is_not_minimum_only(self):
        account = create_credit_account("cc_0001", balance=200.0, limit=2000.0)
        liability = Liability(account_id="cc_0001", minimum_payment_amount=25.0)

        result = detect_credit([account], [liability], TimeWindow.DAYS_30)

        assert result.evidence.accounts[0].minimum_payment_only is False

    def test_interest_charges(self):
        """A positive first APR means the card carries interest."""
        account = create_credit_account("cc_0001", balance=200.0, limit=2000.0)
        liability = create_liability("cc_0001", apr=22.9)

        result = detect_credit([account], [liability], TimeWindow.DAYS_30)

        assert result.evidence.accounts[0].has_interest_charges is True
        assert result.detected is True

    def test_overdue(self):
        account = create_credit_account("cc_0001", balance=200.0, limit=2000.0)
        liability = create_liability("cc_0001", is_overdue=True)

        result = detect_credit([account], [liability], TimeWindow.DAYS_180)

        assert result.evidence.accounts[0].is_overdue is True
        assert result.detected is True
        assert result.window is TimeWindow.DAYS_180

    def test_overall_utilization(self):
        """Overall utilization is total balance over total limit."""
        accounts = [
            create_credit_account("cc_0001", balance=500.0, limit=1000.0),
            create_credit_account("cc_0002", balance=100.0, limit=1000.0),
        ]

        result = detect_credit(accounts, [], TimeWindow.DAYS_30)

        overall = result.evidence.overall_utilization
        assert overall.percent == 30.0
        assert overall.bucket == '30_to_50'
        assert overall.total_balance == 600.0
        assert overall.total_limit == 2000.0
        assert result.evidence.max_utilization == 50.0
        assert result.evidence.avg_utilization == 30.0

    def test_zero_limit(self):
        """Cards without a limit report zero utilization instead of dividing by zero."""
        account = create_credit_account("cc_0001", balance=300.0, limit=0.0)

        result = detect_credit([account], [], TimeWindow.DAYS_30)

        assert result.evidence.accounts[0].utilization_percent == 0.0
        assert result.evidence.overall_utilization.percent == 0.0

    def test_non_credit_accounts_ignored(self):
        """Only type 'credit' accounts are analyzed."""
        accounts = [
            create_credit_account("cc_0001", balance=100.0, limit=1000.0),
            Account(account_id="loan", type="loan", subtype="student", balance_current=9000.0),
        ]

        result = detect_credit(accounts, [], TimeWindow.DAYS_30)

        assert len(result.evidence.accounts) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
