"""
Unit Tests for Income Stability Analysis

Tests deposit cadence, payment frequency and cash-flow buffer.
"""

import pytest
from datetime import date, timedelta

from personasense.features.base import TimeWindow
from personasense.features.income import detect_income
from personasense.ingest.schema import Account, Transaction

REFERENCE_DATE = date(2025, 6, 30)


def create_checking_account(balance: float = 3000.0) -> Account:
    """Helper to create a checking account."""
    return Account(account_id="acc_checking", type="depository", subtype="checking",
                   balance_current=balance)


def create_deposit(days_ago: int, amount: float = 2000.0) -> Transaction:
    """Helper to create a payroll deposit (negative amount = inflow)."""
    txn_date = REFERENCE_DATE - timedelta(days=days_ago)
    return Transaction(
        transaction_id=f"dep_{txn_date.isoformat()}",
        account_id="acc_checking",
        date=txn_date,
        amount=-amount,
        name="ACME PAYROLL",
        category_primary="INCOME",
    )


def create_purchase(days_ago: int, amount: float) -> Transaction:
    """Helper to create an outflow."""
    txn_date = REFERENCE_DATE - timedelta(days=days_ago)
    return Transaction(
        transaction_id=f"pur_{txn_date.isoformat()}_{amount}",
        account_id="acc_checking",
        date=txn_date,
        amount=amount,
        merchant_name="Grocery Mart",
        category_primary="FOOD_AND_DRINK",
    )


class TestIncomeDetection:
    """Tests for income cadence detection."""

    def test_no_income(self):
        """No deposits means no signal and zero evidence."""
        result = detect_income([], [], TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False
        assert result.evidence.deposit_count == 0
        assert result.evidence.average_income == 0.0
        assert result.evidence.median_pay_gap == 0.0
        assert result.evidence.cash_flow_buffer == 0.0
        assert result.evidence.payroll_transactions == ()
        assert result.evidence.income_buckets == ()

    def test_monthly_income(self):
        """Deposits about 30 days apart are monthly and not variable."""
        txns = [create_deposit(days_ago) for days_ago in (150, 120, 90, 60, 30, 0)]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_180,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.frequency == 'monthly'
        assert result.evidence.median_pay_gap == 30
        assert result.evidence.deposit_count == 6
        assert result.detected is False

    def test_biweekly_income(self):
        txns = [create_deposit(days_ago) for days_ago in (70, 56, 42, 28, 14, 0)]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_180,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.frequency == 'biweekly'
        assert result.detected is False

    def test_irregular_income(self):
        """Median gap over 45 days is irregular and detected."""
        txns = [create_deposit(days_ago) for days_ago in (120, 60, 0)]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_180,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.median_pay_gap == 60
        assert result.evidence.frequency == 'irregular'
        assert result.detected is True

    def test_single_deposit_is_irregular(self):
        """One deposit has no gaps, so no cadence can match."""
        result = detect_income([create_checking_account()], [create_deposit(10)], TimeWindow.DAYS_30,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.frequency == 'irregular'
        assert result.evidence.deposit_count == 1
        assert result.detected is True

    def test_average_income_uses_absolute_amounts(self):
        txns = [create_deposit(60, amount=1000.0), create_deposit(30, amount=3000.0), create_deposit(0, amount=2000.0)]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_180,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.average_income == 2000.0
        assert result.evidence.total_income == 6000.0

    def test_payroll_transactions_sorted(self):
        """Deposits are reported oldest first regardless of input order."""
        txns = [create_deposit(0), create_deposit(60), create_deposit(30)]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_180,
                               reference_date=REFERENCE_DATE)

        dates = [deposit.date for deposit in result.evidence.payroll_transactions]
        assert dates == sorted(dates)

    def test_cash_flow_buffer(self):
        """Buffer is checking balance over monthly-normalized window spending."""
        txns = [create_deposit(10), create_purchase(5, 600.0), create_purchase(3, 400.0)]

        result = detect_income([create_checking_account(balance=3000.0)], txns, TimeWindow.DAYS_30,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.cash_flow_buffer == pytest.approx(3.0)

    def test_cash_flow_buffer_without_spending(self):
        """No spending gives a zero buffer instead of dividing by zero."""
        result = detect_income([create_checking_account()], [create_deposit(10)], TimeWindow.DAYS_30,
                               reference_date=REFERENCE_DATE)

        assert result.evidence.cash_flow_buffer == 0.0


class TestIncomeBuckets:
    """Tests for 15-day income buckets."""

    def test_only_non_empty_buckets(self):
        """Deposits are summed per 15-day bucket from the window start."""
        txns = [
            create_deposit(29, amount=1000.004),
            create_deposit(25, amount=500.0),
            create_deposit(0, amount=200.0),
        ]

        result = detect_income([create_checking_account()], txns, TimeWindow.DAYS_30,
                               reference_date=REFERENCE_DATE)

        buckets = result.evidence.income_buckets
        assert len(buckets) == 2
        assert buckets[0].start_date == date(2025, 5, 31)
        assert buckets[0].end_date == date(2025, 6, 14)
        assert buckets[0].total_income == 1500.0
        assert buckets[1].start_date == REFERENCE_DATE
        assert buckets[1].total_income == 200.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
