"""
Subscription Detection Module

Detects recurring subscription payments based on merchant, amount consistency
and cadence.

Features computed:
- Recurring streams reported by the data provider (active, priced, in window)
- Recurring merchants (>= 3 charges, cadence match, consistent amounts)
- Total outflow spend in the window
- Subscription share of spend (cadence-normalized monthly cost / total spend)
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from personasense.ingest.schema import RecurringStream, Transaction
from .base import Signal, TimeWindow
from .thresholds import (
    AMOUNT_CONSISTENCY_TOLERANCE,
    CADENCES,
    Cadence,
    MIN_SUBSCRIPTION_OCCURRENCES,
)
from .transaction_utils import group_by_merchant, is_amount_consistent, normalize_merchant
from .window_utils import consecutive_gaps, median, transactions_in_window

logger = logging.getLogger(__name__)

# Provider frequencies we treat as subscriptions; ANNUALLY and UNKNOWN are skipped
STREAM_FREQUENCY_CADENCES = {
    'WEEKLY': 'weekly',
    'BIWEEKLY': 'biweekly',
    'SEMI_MONTHLY': 'biweekly',
    'MONTHLY': 'monthly',
}

_MONTHLY_MULTIPLIERS = {cadence.name: cadence.monthly_multiplier for cadence in CADENCES}


@dataclass(frozen=True)
class Subscription:
    merchant: str
    amount: float
    cadence: str  # weekly, biweekly, monthly
    last_charge_date: Optional[date]
    count: int

    @property
    def monthly_amount(self) -> float:
        """Amount normalized to one month of charges."""
        return self.amount * _MONTHLY_MULTIPLIERS.get(self.cadence, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'merchant': self.merchant,
            'amount': self.amount,
            'cadence': self.cadence,
            'last_charge_date': self.last_charge_date.isoformat() if self.last_charge_date else None,
            'count': self.count,
        }


@dataclass(frozen=True)
class SubscriptionEvidence:
    subscriptions: Tuple[Subscription, ...] = ()
    total_monthly_spend: float = 0.0
    subscription_share_of_spend: float = 0.0

    @property
    def monthly_subscription_cost(self) -> float:
        return sum(sub.monthly_amount for sub in self.subscriptions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subscriptions': [sub.to_dict() for sub in self.subscriptions],
            'total_monthly_spend': self.total_monthly_spend,
            'subscription_share_of_spend': self.subscription_share_of_spend,
        }


@dataclass(frozen=True)
class SubscriptionSignal(Signal):
    evidence: SubscriptionEvidence


def detect_subscriptions(
    transactions: Sequence[Transaction],
    window: TimeWindow,
    recurring_streams: Sequence[RecurringStream] = (),
    reference_date: Optional[date] = None,
    cadences: Sequence[Cadence] = CADENCES,
    min_occurrences: int = MIN_SUBSCRIPTION_OCCURRENCES,
    amount_tolerance: float = AMOUNT_CONSISTENCY_TOLERANCE
) -> SubscriptionSignal:
    """
    Detect recurring subscriptions in a window.

    Provider-reported streams are taken first; merchant grouping then picks up
    any recurring merchant the provider missed.

    Args:
        transactions: All user transactions
        window: Window to analyze
        recurring_streams: Provider-detected recurring streams, if any
        reference_date: Window end date (defaults to today)
        cadences: Frequencies a median charge gap can match
        min_occurrences: Minimum charges (and consistent amounts) per merchant
        amount_tolerance: Max relative deviation from the median amount

    Returns:
        SubscriptionSignal, detected if at least one subscription was found
    """
    window_txns = transactions_in_window(transactions, window.days, reference_date)
    debit_txns = [txn for txn in window_txns if txn.amount > 0]

    subscriptions = _subscriptions_from_streams(recurring_streams, debit_txns)
    reported_merchants = {normalize_merchant(sub.merchant) for sub in subscriptions}

    for merchant, txns in group_by_merchant(debit_txns).items():
        if merchant in reported_merchants:
            continue
        subscription = _detect_merchant_subscription(
            merchant, txns, cadences, min_occurrences, amount_tolerance
        )
        if subscription is not None:
            subscriptions.append(subscription)

    total_spend = sum(txn.amount for txn in debit_txns)
    subscription_spend = sum(sub.monthly_amount for sub in subscriptions)
    share = (subscription_spend / total_spend) * 100 if total_spend > 0 else 0.0

    logger.debug(
        "subscriptions[%s]: %d found, share of spend %.1f%%",
        window.value, len(subscriptions), share
    )

    return SubscriptionSignal(
        detected=len(subscriptions) > 0,
        evidence=SubscriptionEvidence(
            subscriptions=tuple(subscriptions),
            total_monthly_spend=total_spend,
            subscription_share_of_spend=share
        ),
        window=window
    )


def _subscriptions_from_streams(
    recurring_streams: Sequence[RecurringStream],
    debit_txns: Sequence[Transaction]
) -> List[Subscription]:
    """Active, positively priced streams with a mapped cadence and a charge in the window."""
    debit_ids = {txn.transaction_id for txn in debit_txns}

    subscriptions = []
    for stream in recurring_streams:
        if not stream.is_active or stream.average_amount <= 0:
            continue
        if not any(txn_id in debit_ids for txn_id in stream.transaction_ids):
            continue
        cadence = STREAM_FREQUENCY_CADENCES.get(stream.frequency)
        if cadence is None:
            continue

        subscriptions.append(Subscription(
            merchant=stream.merchant_name or stream.description,
            amount=stream.average_amount,
            cadence=cadence,
            last_charge_date=stream.last_date,
            count=len(stream.transaction_ids)
        ))

    return subscriptions


def _detect_merchant_subscription(
    merchant: str,
    txns: Sequence[Transaction],
    cadences: Sequence[Cadence],
    min_occurrences: int,
    amount_tolerance: float
) -> Optional[Subscription]:
    if len(txns) < min_occurrences:
        return None

    ordered = sorted(txns, key=lambda txn: txn.date)

    median_gap = median(consecutive_gaps([txn.date for txn in ordered]))
    cadence = next((c for c in cadences if c.matches(median_gap)), None)
    if cadence is None:
        return None

    amounts = [txn.amount for txn in ordered]
    median_amount = median(amounts)
    consistent = [amt for amt in amounts if is_amount_consistent(amt, median_amount, amount_tolerance)]
    if len(consistent) < min_occurrences:
        return None

    return Subscription(
        merchant=merchant,
        amount=median_amount,
        cadence=cadence.name,
        last_charge_date=ordered[-1].date,
        count=len(ordered)
    )
