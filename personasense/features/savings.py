"""
Savings Behavior Module

Analyzes savings balances, inflows and emergency fund coverage.

Features computed:
- Net inflow per savings-like account (savings, money market, HSA)
- Estimated start balance and growth rate
- Monthly-normalized net inflow across accounts
- Emergency fund coverage (total savings / monthly expenses)
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from personasense.ingest.schema import Account, Transaction
from .base import Signal, TimeWindow
from .thresholds import (
    DAYS_PER_MONTH,
    GROWTH_RATE_THRESHOLD,
    MONTHLY_INFLOW_THRESHOLD,
    SAVINGS_SUBTYPES,
)
from .window_utils import transactions_in_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavingsAccountEvidence:
    account_id: str
    type: str  # account subtype: savings, money market, hsa
    start_balance: float
    end_balance: float
    growth_rate: float
    net_inflow: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account_id': self.account_id,
            'type': self.type,
            'start_balance': self.start_balance,
            'end_balance': self.end_balance,
            'growth_rate': self.growth_rate,
            'net_inflow': self.net_inflow,
        }


@dataclass(frozen=True)
class SavingsEvidence:
    accounts: Tuple[SavingsAccountEvidence, ...] = ()
    total_savings: float = 0.0
    emergency_fund_coverage: float = 0.0  # months
    monthly_net_inflow: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accounts': [acc.to_dict() for acc in self.accounts],
            'total_savings': self.total_savings,
            'emergency_fund_coverage': self.emergency_fund_coverage,
            'monthly_net_inflow': self.monthly_net_inflow,
        }


@dataclass(frozen=True)
class SavingsSignal(Signal):
    evidence: SavingsEvidence


def detect_savings(
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    window: TimeWindow,
    reference_date: Optional[date] = None,
    growth_rate_threshold: float = GROWTH_RATE_THRESHOLD,
    monthly_inflow_threshold: float = MONTHLY_INFLOW_THRESHOLD
) -> SavingsSignal:
    """
    Calculate savings growth and coverage for a window.

    Start balance is estimated as current balance minus the window's net
    inflow, since only a balance snapshot is available.

    Args:
        accounts: All user accounts
        transactions: All user transactions
        window: Window to analyze
        reference_date: Window end date (defaults to today)
        growth_rate_threshold: Growth percent that counts as saving
        monthly_inflow_threshold: Monthly net inflow that counts as saving

    Returns:
        SavingsSignal, detected if any account grew >= 2% or monthly net
        inflow is >= $200
    """
    savings_accounts = [acc for acc in accounts if acc.subtype in SAVINGS_SUBTYPES]

    if not savings_accounts:
        return SavingsSignal(detected=False, evidence=SavingsEvidence(), window=window)

    days = window.days
    window_txns = transactions_in_window(transactions, days, reference_date)

    account_data = []
    for account in savings_accounts:
        # Negative amount = money in, so net inflow is the negated sum
        net_inflow = -sum(txn.amount for txn in window_txns if txn.account_id == account.account_id)

        end_balance = account.balance_current
        start_balance = end_balance - net_inflow
        growth_rate = ((end_balance - start_balance) / start_balance) * 100 if start_balance > 0 else 0.0

        account_data.append(SavingsAccountEvidence(
            account_id=account.account_id,
            type=account.subtype,
            start_balance=start_balance,
            end_balance=end_balance,
            growth_rate=growth_rate,
            net_inflow=net_inflow
        ))

    total_savings = sum(acc.balance_current for acc in savings_accounts)

    avg_monthly_expenses = _calculate_avg_monthly_expenses(window_txns, days)
    emergency_fund_coverage = total_savings / avg_monthly_expenses if avg_monthly_expenses > 0 else 0.0

    monthly_net_inflow = sum((acc.net_inflow / days) * DAYS_PER_MONTH for acc in account_data)

    has_positive_growth = any(acc.growth_rate >= growth_rate_threshold for acc in account_data)
    has_significant_inflow = monthly_net_inflow >= monthly_inflow_threshold
    detected = has_positive_growth or has_significant_inflow

    logger.debug(
        "savings[%s]: %d accounts, monthly net inflow %.2f, detected=%s",
        window.value, len(account_data), monthly_net_inflow, detected
    )

    return SavingsSignal(
        detected=detected,
        evidence=SavingsEvidence(
            accounts=tuple(account_data),
            total_savings=total_savings,
            emergency_fund_coverage=emergency_fund_coverage,
            monthly_net_inflow=monthly_net_inflow
        ),
        window=window
    )


def _calculate_avg_monthly_expenses(window_txns: Sequence[Transaction], window_days: int) -> float:
    """Average monthly spending across all accounts in the window."""
    total_spending = sum(txn.amount for txn in window_txns if txn.amount > 0)
    return (total_spending / window_days) * DAYS_PER_MONTH
