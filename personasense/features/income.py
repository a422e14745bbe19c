"""
Income Stability Module

Analyzes income deposit cadence and cash flow.

Features computed:
- Income deposits (primary category INCOME)
- Median gap between deposits and payment frequency
- Average deposit amount
- Cash-flow buffer in months (checking balance / monthly expenses)
- 15-day income buckets
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from personasense.ingest.schema import Account, Transaction
from .base import Signal, TimeWindow
from .thresholds import CADENCES, Cadence, INCOME_BUCKET_DAYS, IRREGULAR_PAY_GAP_DAYS
from .transaction_utils import is_income_transaction
from .window_utils import average, consecutive_gaps, median, transactions_in_window

logger = logging.getLogger(__name__)

IRREGULAR = 'irregular'


@dataclass(frozen=True)
class IncomeDeposit:
    date: date
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'amount': self.amount}


@dataclass(frozen=True)
class IncomeBucket:
    start_date: date
    end_date: date
    total_income: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'total_income': self.total_income,
        }


@dataclass(frozen=True)
class IncomeEvidence:
    """Income cadence and cash-flow buffer."""
    payroll_transactions: Tuple[IncomeDeposit, ...] = ()
    income_buckets: Tuple[IncomeBucket, ...] = ()
    frequency: str = IRREGULAR  # weekly, biweekly, monthly, irregular
    median_pay_gap: float = 0.0
    average_income: float = 0.0
    total_income: float = 0.0
    deposit_count: int = 0
    cash_flow_buffer: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payroll_transactions': [d.to_dict() for d in self.payroll_transactions],
            'income_buckets': [b.to_dict() for b in self.income_buckets],
            'frequency': self.frequency,
            'median_pay_gap': self.median_pay_gap,
            'average_income': self.average_income,
            'total_income': self.total_income,
            'deposit_count': self.deposit_count,
            'cash_flow_buffer': self.cash_flow_buffer,
        }


@dataclass(frozen=True)
class IncomeSignal(Signal):
    evidence: IncomeEvidence


def detect_income(
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    window: TimeWindow,
    reference_date: Optional[date] = None,
    cadences: Sequence[Cadence] = CADENCES,
    irregular_gap_days: float = IRREGULAR_PAY_GAP_DAYS
) -> IncomeSignal:
    """
    Calculate income cadence and cash-flow buffer for a window.

    Args:
        accounts: All user accounts (checking balances feed the buffer)
        transactions: All user transactions
        window: Window to analyze
        reference_date: Window end date (defaults to today)
        cadences: Frequencies to match the median gap against
        irregular_gap_days: Median gap above which income is variable

    Returns:
        IncomeSignal, detected if deposits exist and the median gap exceeds
        45 days or no frequency matches
    """
    if reference_date is None:
        reference_date = date.today()

    days = window.days
    window_txns = transactions_in_window(transactions, days, reference_date)
    checking_accounts = [acc for acc in accounts if acc.subtype == 'checking']

    income_txns = sorted(
        (txn for txn in window_txns if is_income_transaction(txn)),
        key=lambda txn: txn.date
    )

    if not income_txns:
        return IncomeSignal(
            detected=False,
            evidence=IncomeEvidence(),
            window=window
        )

    median_gap = median(consecutive_gaps([txn.date for txn in income_txns]))
    frequency = _determine_payment_frequency(median_gap, cadences)

    amounts = [abs(txn.amount) for txn in income_txns]

    total_checking = sum(acc.balance_current for acc in checking_accounts)
    avg_monthly_expenses = _calculate_avg_monthly_expenses(window_txns, days)
    cash_flow_buffer = total_checking / avg_monthly_expenses if avg_monthly_expenses > 0 else 0.0

    detected = median_gap > irregular_gap_days or frequency == IRREGULAR

    logger.debug(
        "income[%s]: %d deposits, median gap %.1f days (%s), detected=%s",
        window.value, len(income_txns), median_gap, frequency, detected
    )

    return IncomeSignal(
        detected=detected,
        evidence=IncomeEvidence(
            payroll_transactions=tuple(
                IncomeDeposit(date=txn.date, amount=abs(txn.amount)) for txn in income_txns
            ),
            income_buckets=tuple(_income_buckets(income_txns, days, reference_date)),
            frequency=frequency,
            median_pay_gap=median_gap,
            average_income=average(amounts),
            total_income=sum(amounts),
            deposit_count=len(income_txns),
            cash_flow_buffer=cash_flow_buffer
        ),
        window=window
    )


def _determine_payment_frequency(median_gap_days: float, cadences: Sequence[Cadence]) -> str:
    """First cadence whose tolerance contains the median gap, else 'irregular'."""
    for cadence in cadences:
        if cadence.matches(median_gap_days):
            return cadence.name
    return IRREGULAR


def _calculate_avg_monthly_expenses(window_txns: Sequence[Transaction], window_days: int) -> float:
    """
    Calculate average monthly expenses from transactions.

    Args:
        window_txns: All transactions in the window
        window_days: Size of the time window

    Returns:
        (sum of outflows / window days) * 30
    """
    total_spending = sum(txn.amount for txn in window_txns if txn.amount > 0)
    return (total_spending / window_days) * 30


def _income_buckets(
    income_txns: Sequence[Transaction],
    window_days: int,
    reference_date: date
) -> List[IncomeBucket]:
    """
    Sum income into consecutive 15-day buckets from the window start.

    Only buckets that received income are returned.
    """
    window_start = reference_date - timedelta(days=window_days)
    # Window bounds are inclusive, so it spans window_days + 1 calendar days
    num_buckets = -(-(window_days + 1) // INCOME_BUCKET_DAYS)

    buckets = []
    for i in range(num_buckets):
        bucket_start = window_start + timedelta(days=i * INCOME_BUCKET_DAYS)
        bucket_end = min(bucket_start + timedelta(days=INCOME_BUCKET_DAYS - 1), reference_date)

        bucket_income = sum(
            abs(txn.amount) for txn in income_txns
            if bucket_start <= txn.date <= bucket_end
        )
        if bucket_income > 0:
            buckets.append(IncomeBucket(
                start_date=bucket_start,
                end_date=bucket_end,
                total_income=round(bucket_income, 2)
            ))

    return buckets
