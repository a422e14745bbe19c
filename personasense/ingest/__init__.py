"""
Ingest Boundary

Parses and validates the record set handed to the engine.

Modules:
    - schema: Account, Transaction, Liability, RecurringStream records
    - validation: Cross-record invariants (account references)
    - json_loader: JSON files to records
"""

from .schema import Account, Apr, Liability, RecurringStream, Transaction, UserFinancialData
from .validation import validate_financial_data
from .json_loader import load_financial_data, parse_financial_data

__all__ = [
    'Account',
    'Apr',
    'Liability',
    'RecurringStream',
    'Transaction',
    'UserFinancialData',
    'validate_financial_data',
    'load_financial_data',
    'parse_financial_data',
]
