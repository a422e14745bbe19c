"""
Banking Activity Module

Detects low-use banking patterns from outbound payment activity.

Features computed:
- Outbound payment count over the trailing 30 days
- Outbound payment count in the window
- Unique payment merchants in the window
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence

from personasense.ingest.schema import Transaction
from .base import Signal, TimeWindow
from .thresholds import LOW_USE_MAX_MERCHANTS, LOW_USE_MAX_PAYMENTS_180D, LOW_USE_MAX_PAYMENTS_30D
from .transaction_utils import merchant_key
from .window_utils import transactions_in_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BankingActivityEvidence:
    outbound_payment_count_30d: int = 0
    outbound_payment_count_180d: int = 0
    unique_payment_merchants: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'outbound_payment_count_30d': self.outbound_payment_count_30d,
            'outbound_payment_count_180d': self.outbound_payment_count_180d,
            'unique_payment_merchants': self.unique_payment_merchants,
        }


@dataclass(frozen=True)
class BankingActivitySignal(Signal):
    evidence: BankingActivityEvidence


def detect_banking_activity(
    transactions: Sequence[Transaction],
    window: TimeWindow,
    reference_date: Optional[date] = None,
    max_payments_180d: int = LOW_USE_MAX_PAYMENTS_180D,
    max_payments_30d: int = LOW_USE_MAX_PAYMENTS_30D,
    max_merchants: int = LOW_USE_MAX_MERCHANTS
) -> BankingActivitySignal:
    """
    Detect low banking usage.

    ``outbound_payment_count_180d`` counts outflows in the requested window,
    so for the 30-day window both counts are equal.

    Returns:
        BankingActivitySignal, detected if fewer than 10 payments in the
        window, fewer than 5 in the last 30 days and fewer than 5 merchants.
        An empty transaction set is no signal at all.
    """
    if not transactions:
        return BankingActivitySignal(detected=False, evidence=BankingActivityEvidence(), window=window)

    outbound = [
        txn for txn in transactions_in_window(transactions, window.days, reference_date)
        if txn.amount > 0
    ]
    unique_merchants = {merchant_key(txn) for txn in outbound}

    if window is TimeWindow.DAYS_30:
        count_30d = len(outbound)
    else:
        count_30d = sum(
            1 for txn in transactions_in_window(transactions, TimeWindow.DAYS_30.days, reference_date)
            if txn.amount > 0
        )
    count_180d = len(outbound)

    detected = (
        count_180d < max_payments_180d
        and count_30d < max_payments_30d
        and len(unique_merchants) < max_merchants
    )

    logger.debug(
        "banking_activity[%s]: %d payments (30d=%d), %d merchants, detected=%s",
        window.value, count_180d, count_30d, len(unique_merchants), detected
    )

    return BankingActivitySignal(
        detected=detected,
        evidence=BankingActivityEvidence(
            outbound_payment_count_30d=count_30d,
            outbound_payment_count_180d=count_180d,
            unique_payment_merchants=len(unique_merchants)
        ),
        window=window
    )
