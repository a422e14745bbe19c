"""
Unit Tests for Eligibility Metrics

Tests the projection of detected signals into offer eligibility metrics.
"""

import pytest
from datetime import date, timedelta

from personasense.features.signals import detect_all_signals
from personasense.ingest.schema import Account, Apr, Liability, Transaction, UserFinancialData
from personasense.recommend.eligibility import (
    EligibilityMetrics,
    calculate_eligibility_metrics,
    estimate_monthly_expenses,
)

REFERENCE_DATE = date(2025, 6, 30)
MONTHLY = (150, 120, 90, 60, 30, 0)


def create_transaction(txn_id: str, account_id: str, days_ago: int, amount: float,
                       merchant: str = None, category: str = None) -> Transaction:
    """Helper to create a transaction."""
    return Transaction(
        transaction_id=txn_id,
        account_id=account_id,
        date=REFERENCE_DATE - timedelta(days=days_ago),
        amount=amount,
        merchant_name=merchant,
        category_primary=category,
    )


def create_saver() -> UserFinancialData:
    """Monthly pay of $2,000, $1,000 monthly rent and $6,000 in savings."""
    accounts = (
        Account(account_id="chk", type="depository", subtype="checking", balance_current=2000.0),
        Account(account_id="sav", type="depository", subtype="savings", balance_current=6000.0),
    )
    transactions = []
    for days_ago in MONTHLY:
        transactions.append(create_transaction(f"pay_{days_ago}", "chk", days_ago, -2000.0, category="INCOME"))
        transactions.append(create_transaction(f"rent_{days_ago}", "chk", days_ago, 1000.0, merchant="Rent Co"))
    return UserFinancialData(accounts=accounts, transactions=tuple(transactions))


def create_borrower() -> UserFinancialData:
    """Two credit cards, one carrying interest, and a money market account."""
    accounts = (
        Account(account_id="card_1", type="credit", subtype="credit card", balance_current=600.0,
                credit_limit=1000.0),
        Account(account_id="card_2", type="credit", subtype="credit card", balance_current=200.0,
                credit_limit=1000.0),
        Account(account_id="mm", type="depository", subtype="money market", balance_current=3000.0),
    )
    liabilities = (
        Liability(account_id="card_1", aprs=(Apr(apr_type="purchase_apr", apr_percentage=22.9),)),
    )
    return UserFinancialData(accounts=accounts, liabilities=liabilities)


class TestEligibilityMetrics:
    """Tests for calculate_eligibility_metrics."""

    def test_saver(self):
        data = create_saver()
        signals = detect_all_signals(data, reference_date=REFERENCE_DATE)

        metrics = calculate_eligibility_metrics(signals, data.accounts)

        assert metrics.total_savings_balance == 6000.0
        assert metrics.estimated_monthly_income == 2000.0
        assert metrics.income_stability == 'stable'
        assert metrics.has_checking_account is True
        assert metrics.has_savings_account is True
        assert metrics.has_credit_card is False
        assert metrics.max_credit_utilization == 0.0

    def test_coverage_uses_income_based_expenses(self):
        """Coverage divides savings by the larger of subscription cost and 70% of income."""
        signals = detect_all_signals(create_saver(), reference_date=REFERENCE_DATE)

        metrics = calculate_eligibility_metrics(signals)

        assert estimate_monthly_expenses(signals) == pytest.approx(1400.0)
        assert metrics.emergency_fund_coverage == pytest.approx(6000.0 / 1400.0)

    def test_coverage_differs_from_savings_signal(self):
        """The savings detector's spending-based coverage is a separate figure."""
        signals = detect_all_signals(create_saver(), reference_date=REFERENCE_DATE)

        metrics = calculate_eligibility_metrics(signals)

        assert signals.savings.window_180d.evidence.emergency_fund_coverage == pytest.approx(6.0)
        assert metrics.emergency_fund_coverage != pytest.approx(6.0)

    def test_borrower(self):
        data = create_borrower()
        signals = detect_all_signals(data, reference_date=REFERENCE_DATE)

        metrics = calculate_eligibility_metrics(signals, data.accounts)

        assert metrics.max_credit_utilization == pytest.approx(60.0)
        assert metrics.avg_credit_utilization == pytest.approx(40.0)
        assert metrics.total_credit_balance == 800.0
        assert metrics.total_credit_limit == 2000.0
        assert metrics.total_interest_paid == 50.0
        assert metrics.has_credit_card is True
        assert metrics.has_money_market is True
        assert metrics.has_hsa is False
        assert metrics.has_checking_account is False

    def test_checking_flag_comes_from_accounts(self):
        """Only the accounts passed in decide has_checking_account."""
        data = create_saver()
        signals = detect_all_signals(data, reference_date=REFERENCE_DATE)

        assert calculate_eligibility_metrics(signals, data.accounts).has_checking_account is True
        assert calculate_eligibility_metrics(signals).has_checking_account is False

    def test_no_income_is_variable(self):
        """Without deposits the income frequency is irregular."""
        signals = detect_all_signals(create_borrower(), reference_date=REFERENCE_DATE)

        metrics = calculate_eligibility_metrics(signals)

        assert metrics.estimated_monthly_income == 0.0
        assert metrics.income_stability == 'variable'
        assert metrics.emergency_fund_coverage == 0.0

    def test_to_dict(self):
        data = EligibilityMetrics(has_hsa=True).to_dict()

        assert data['has_hsa'] is True
        assert data['income_stability'] == 'unknown'
        assert set(data) >= {'max_credit_utilization', 'emergency_fund_coverage', 'has_checking_account'}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
