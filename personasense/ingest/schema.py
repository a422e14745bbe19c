"""
Input record definitions for personasense.

Records are immutable snapshots produced by the ingestion collaborator.
Both the flat field names and Plaid's nested shapes (``balances``,
``personal_finance_category``, ``average_amount``) are accepted.
"""

from datetime import date
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Account(_Record):
    """One bank, credit, loan or investment account."""
    account_id: str
    type: str  # depository, credit, loan, investment
    subtype: str  # checking, savings, credit card, money market, hsa, ...
    name: str = ""
    mask: str = ""
    balance_current: float
    balance_available: Optional[float] = None
    credit_limit: Optional[float] = None
    iso_currency_code: str = "USD"

    @model_validator(mode="before")
    @classmethod
    def _flatten_balances(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("balances"), dict):
            balances = data["balances"]
            data = {k: v for k, v in data.items() if k != "balances"}
            data.setdefault("balance_current", balances.get("current"))
            data.setdefault("balance_available", balances.get("available"))
            data.setdefault("credit_limit", balances.get("limit"))
            if balances.get("iso_currency_code"):
                data.setdefault("iso_currency_code", balances["iso_currency_code"])
        return data


class Transaction(_Record):
    """A posted or pending movement. Positive amount = outflow, negative = inflow."""
    transaction_id: str
    account_id: str
    date: date
    amount: float
    name: str = ""  # raw description from the institution
    merchant_name: Optional[str] = None
    category_primary: Optional[str] = None
    category_detailed: Optional[str] = None
    pending: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten_category(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("personal_finance_category"), dict):
            category = data["personal_finance_category"]
            data = {k: v for k, v in data.items() if k != "personal_finance_category"}
            data.setdefault("category_primary", category.get("primary"))
            data.setdefault("category_detailed", category.get("detailed"))
        return data


class Apr(_Record):
    apr_type: Optional[str] = None
    apr_percentage: float = 0.0


class Liability(_Record):
    """Servicing facts for a credit or loan account. Missing fields mean unknown."""
    account_id: str
    type: Optional[str] = None  # credit, student, mortgage
    aprs: Tuple[Apr, ...] = ()
    minimum_payment_amount: Optional[float] = None
    last_payment_amount: Optional[float] = None
    is_overdue: Optional[bool] = None
    next_payment_due_date: Optional[date] = None
    last_statement_balance: Optional[float] = None
    interest_rate: Optional[float] = None


class RecurringStream(_Record):
    """A recurring outflow stream detected upstream by the data provider."""
    stream_id: str
    description: str = ""
    merchant_name: Optional[str] = None
    status: str = "UNKNOWN"  # ACTIVE, INACTIVE, USER_DETECTED
    frequency: str = "UNKNOWN"  # WEEKLY, BIWEEKLY, SEMI_MONTHLY, MONTHLY, ANNUALLY, UNKNOWN
    average_amount: float = 0.0
    is_active: bool = False
    transaction_ids: Tuple[str, ...] = ()
    first_date: Optional[date] = None
    last_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_amount(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("average_amount"), dict):
            data = dict(data)
            data["average_amount"] = data["average_amount"].get("amount", 0.0)
        return data


class UserFinancialData(_Record):
    """Batch snapshot of one user's records at a single point in time."""
    accounts: Tuple[Account, ...]
    transactions: Tuple[Transaction, ...] = ()
    liabilities: Tuple[Liability, ...] = ()
    recurring_streams: Tuple[RecurringStream, ...] = Field(default=())
