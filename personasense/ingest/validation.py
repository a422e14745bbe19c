"""
Structural validation of a record set before signal detection.

The engine assumes these invariants and does not check them again.
"""

import logging

from personasense.exceptions import IngestValidationError
from .schema import UserFinancialData

logger = logging.getLogger(__name__)


def validate_financial_data(data: UserFinancialData) -> None:
    """
    Check the cross-record invariants of a parsed record set.

    - At least one account is present
    - Every transaction references a known account id
    - Every liability references a known account id

    Args:
        data: Parsed record set

    Raises:
        IngestValidationError: listing every violation found
    """
    errors = []

    if not data.accounts:
        errors.append("No accounts found in data. At least one account is required.")

    account_ids = {acc.account_id for acc in data.accounts}

    for txn in data.transactions:
        if txn.account_id not in account_ids:
            errors.append(
                f"Transaction {txn.transaction_id} references unknown account {txn.account_id}"
            )

    for liability in data.liabilities:
        if liability.account_id not in account_ids:
            errors.append(f"Liability references unknown account {liability.account_id}")

    if errors:
        logger.warning("Rejected record set with %d violation(s)", len(errors))
        raise IngestValidationError(errors[0], errors)
