"""
Overdraft Pattern Module

Detects negative checking balances and overdraft/NSF fee transactions.

Features computed:
- Incidents (negative balance today, overdraft fees, NSF fees), sorted by date
- Incident counts over the trailing 30 and 180 days
- Total fees paid
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from personasense.ingest.schema import Account, Transaction
from .base import Signal, TimeWindow
from .thresholds import OVERDRAFT_MIN_COUNT_180D, OVERDRAFT_MIN_COUNT_30D, OVERDRAFT_PATTERNS
from .transaction_utils import is_overdraft_fee
from .window_utils import get_date_range, transactions_in_window

logger = logging.getLogger(__name__)

NEGATIVE_BALANCE = 'negative_balance'
NSF_FEE = 'nsf_fee'
OVERDRAFT_FEE = 'overdraft_fee'


@dataclass(frozen=True)
class OverdraftIncident:
    date: date
    amount: float
    type: str  # negative_balance, nsf_fee, overdraft_fee

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'amount': self.amount, 'type': self.type}


@dataclass(frozen=True)
class OverdraftEvidence:
    """Overdraft incidents and the counts the verdict is based on."""
    incidents: Tuple[OverdraftIncident, ...] = ()
    count_30d: int = 0
    count_180d: int = 0
    total_fees: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'incidents': [incident.to_dict() for incident in self.incidents],
            'count_30d': self.count_30d,
            'count_180d': self.count_180d,
            'total_fees': self.total_fees,
        }


@dataclass(frozen=True)
class OverdraftSignal(Signal):
    evidence: OverdraftEvidence


def detect_overdrafts(
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    window: TimeWindow,
    reference_date: Optional[date] = None,
    patterns: Sequence[str] = OVERDRAFT_PATTERNS,
    min_count_30d: int = OVERDRAFT_MIN_COUNT_30D,
    min_count_180d: int = OVERDRAFT_MIN_COUNT_180D
) -> OverdraftSignal:
    """
    Detect overdraft incidents.

    Balances are a snapshot, so a negative checking balance is recorded as a
    single incident dated ``reference_date``. Fee incidents are looked up over
    the full 180-day horizon for both windows.

    Args:
        accounts: All user accounts
        transactions: All user transactions
        window: Window this signal is reported for
        reference_date: Evaluation date (defaults to today)

    Returns:
        OverdraftSignal, detected if count_30d >= 1 or count_180d >= 2
    """
    if reference_date is None:
        reference_date = date.today()

    incidents = []

    for account in accounts:
        if account.subtype != 'checking':
            continue
        available_negative = account.balance_available is not None and account.balance_available < 0
        if account.balance_current < 0 or available_negative:
            incidents.append(OverdraftIncident(
                date=reference_date,
                amount=abs(account.balance_current),
                type=NEGATIVE_BALANCE
            ))

    for txn in transactions_in_window(transactions, TimeWindow.DAYS_180.days, reference_date):
        if is_overdraft_fee(txn, patterns):
            description = (txn.name or txn.merchant_name or '').upper()
            incidents.append(OverdraftIncident(
                date=txn.date,
                amount=txn.amount,
                type=NSF_FEE if 'NSF' in description else OVERDRAFT_FEE
            ))

    incidents.sort(key=lambda incident: incident.date)

    start_30d, _ = get_date_range(TimeWindow.DAYS_30.days, reference_date)
    count_30d = sum(1 for incident in incidents if incident.date >= start_30d)
    count_180d = len(incidents)

    total_fees = sum(
        incident.amount for incident in incidents if incident.type != NEGATIVE_BALANCE
    )

    detected = count_30d >= min_count_30d or count_180d >= min_count_180d

    logger.debug(
        "overdrafts[%s]: %d incidents (30d=%d), detected=%s",
        window.value, count_180d, count_30d, detected
    )

    return OverdraftSignal(
        detected=detected,
        evidence=OverdraftEvidence(
            incidents=tuple(incidents),
            count_30d=count_30d,
            count_180d=count_180d,
            total_fees=total_fees
        ),
        window=window
    )
