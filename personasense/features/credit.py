"""
Credit Utilization Module

Analyzes credit card usage and payment behavior from balances and
liability records.

Features computed:
- Per-card utilization (balance / limit) and utilization bucket
- Overall utilization across all cards (sum of balances / sum of limits)
- Minimum-payment-only detection (last payment within $1 of the minimum)
- Interest charges present (first APR above zero)
- Overdue status
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from personasense.ingest.schema import Account, Liability
from .base import Signal, TimeWindow
from .thresholds import (
    MINIMUM_PAYMENT_TOLERANCE,
    UTILIZATION_HIGH,
    UTILIZATION_LOW,
    UTILIZATION_MEDIUM,
)
from .window_utils import average

logger = logging.getLogger(__name__)

UNDER_30 = 'under_30'
BETWEEN_30_AND_50 = '30_to_50'
BETWEEN_50_AND_80 = '50_to_80'
OVER_80 = 'over_80'

HIGH_UTILIZATION_BUCKETS = (BETWEEN_50_AND_80, OVER_80)


def utilization_bucket(percent: float) -> str:
    """Bucket a utilization percentage by the 30/50/80 boundaries."""
    if percent < UTILIZATION_LOW:
        return UNDER_30
    if percent < UTILIZATION_MEDIUM:
        return BETWEEN_30_AND_50
    if percent < UTILIZATION_HIGH:
        return BETWEEN_50_AND_80
    return OVER_80


@dataclass(frozen=True)
class CreditAccountEvidence:
    """Utilization and payment flags for one credit account."""
    account_id: str
    mask: str
    utilization_percent: float
    utilization_bucket: str
    balance: float
    limit: float
    minimum_payment_only: bool
    has_interest_charges: bool
    is_overdue: bool

    @property
    def is_problematic(self) -> bool:
        """High utilization, interest, minimum-only payments or overdue."""
        return (
            self.utilization_bucket in HIGH_UTILIZATION_BUCKETS
            or self.has_interest_charges
            or self.minimum_payment_only
            or self.is_overdue
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account_id': self.account_id,
            'mask': self.mask,
            'utilization_percent': self.utilization_percent,
            'utilization_bucket': self.utilization_bucket,
            'balance': self.balance,
            'limit': self.limit,
            'minimum_payment_only': self.minimum_payment_only,
            'has_interest_charges': self.has_interest_charges,
            'is_overdue': self.is_overdue,
        }


@dataclass(frozen=True)
class OverallUtilization:
    percent: float = 0.0
    bucket: str = UNDER_30
    total_balance: float = 0.0
    total_limit: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'percent': self.percent,
            'bucket': self.bucket,
            'total_balance': self.total_balance,
            'total_limit': self.total_limit,
        }


@dataclass(frozen=True)
class CreditEvidence:
    accounts: Tuple[CreditAccountEvidence, ...] = ()
    overall_utilization: OverallUtilization = OverallUtilization()
    max_utilization: float = 0.0
    avg_utilization: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accounts': [acc.to_dict() for acc in self.accounts],
            'overall_utilization': self.overall_utilization.to_dict(),
            'max_utilization': self.max_utilization,
            'avg_utilization': self.avg_utilization,
        }


@dataclass(frozen=True)
class CreditSignal(Signal):
    evidence: CreditEvidence


def detect_credit(
    accounts: Sequence[Account],
    liabilities: Sequence[Liability],
    window: TimeWindow,
    minimum_payment_tolerance: float = MINIMUM_PAYMENT_TOLERANCE
) -> CreditSignal:
    """
    Calculate credit utilization and payment behavior for every credit account.

    Balances and liabilities are snapshots, so both windows see the same data.

    Args:
        accounts: All user accounts (only type 'credit' is used)
        liabilities: Liability records, matched to accounts by account_id
        window: Window this signal is reported for
        minimum_payment_tolerance: Max dollar gap between last and minimum payment

    Returns:
        CreditSignal, detected if any account is problematic
    """
    credit_accounts = [acc for acc in accounts if acc.type == 'credit']

    if not credit_accounts:
        return CreditSignal(detected=False, evidence=CreditEvidence(), window=window)

    liabilities_by_account = {}
    for liability in liabilities:
        liabilities_by_account.setdefault(liability.account_id, liability)

    account_data = []
    for account in credit_accounts:
        balance = account.balance_current
        limit = account.credit_limit or 0.0
        utilization = (balance / limit) * 100 if limit > 0 else 0.0

        liability = liabilities_by_account.get(account.account_id)

        account_data.append(CreditAccountEvidence(
            account_id=account.account_id,
            mask=account.mask,
            utilization_percent=utilization,
            utilization_bucket=utilization_bucket(utilization),
            balance=balance,
            limit=limit,
            minimum_payment_only=_is_minimum_payment_only(liability, minimum_payment_tolerance),
            has_interest_charges=_has_interest_charges(liability),
            is_overdue=bool(liability is not None and liability.is_overdue)
        ))

    utilizations = [acc.utilization_percent for acc in account_data]

    total_balance = sum(acc.balance for acc in account_data)
    total_limit = sum(acc.limit for acc in account_data)
    overall_percent = (total_balance / total_limit) * 100 if total_limit > 0 else 0.0

    detected = any(acc.is_problematic for acc in account_data)

    logger.debug(
        "credit[%s]: %d cards, overall utilization %.1f%%, detected=%s",
        window.value, len(account_data), overall_percent, detected
    )

    return CreditSignal(
        detected=detected,
        evidence=CreditEvidence(
            accounts=tuple(account_data),
            overall_utilization=OverallUtilization(
                percent=overall_percent,
                bucket=utilization_bucket(overall_percent),
                total_balance=total_balance,
                total_limit=total_limit
            ),
            max_utilization=max(utilizations + [0.0]),
            avg_utilization=average(utilizations)
        ),
        window=window
    )


def _is_minimum_payment_only(liability: Optional[Liability], tolerance: float) -> bool:
    """
    Last payment approximately equal to the minimum payment.

    Unknown when either amount is missing, which never counts as minimum-only.
    """
    if liability is None:
        return False
    if liability.last_payment_amount is None or liability.minimum_payment_amount is None:
        return False
    return abs(liability.last_payment_amount - liability.minimum_payment_amount) < tolerance


def _has_interest_charges(liability: Optional[Liability]) -> bool:
    """An interest-bearing first APR indicates the card carries interest."""
    if liability is None or not liability.aprs:
        return False
    return liability.aprs[0].apr_percentage > 0
