"""
Transaction Utilities

Merchant normalization and transaction classification shared by detectors.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from personasense.ingest.schema import Transaction
from .thresholds import AMOUNT_CONSISTENCY_TOLERANCE, OVERDRAFT_PATTERNS


def normalize_merchant(name: str) -> str:
    return name.lower().strip()


def merchant_key(txn: Transaction) -> str:
    """Normalized merchant name, falling back to the raw description."""
    return normalize_merchant(txn.merchant_name or txn.name or '')


def group_by_merchant(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    """Group transactions by normalized merchant, preserving input order."""
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        groups[merchant_key(txn)].append(txn)
    return dict(groups)


def is_amount_consistent(
    amount: float,
    median_amount: float,
    tolerance: float = AMOUNT_CONSISTENCY_TOLERANCE
) -> bool:
    """True if amount deviates from the median by at most ``tolerance`` (relative)."""
    if median_amount == 0:
        return amount == 0
    return abs(amount - median_amount) / abs(median_amount) <= tolerance


def is_income_transaction(txn: Transaction) -> bool:
    return (txn.category_primary or '').upper() == 'INCOME'


def is_overdraft_fee(txn: Transaction, patterns: Sequence[str] = OVERDRAFT_PATTERNS) -> bool:
    """Case-insensitive substring match of the description against overdraft/NSF patterns."""
    description = (txn.name or txn.merchant_name or '').upper()
    return any(pattern in description for pattern in patterns)
