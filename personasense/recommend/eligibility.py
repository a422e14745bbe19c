"""
Eligibility Metrics Module

Projects detected signals into the flat metrics record that partner offer
requirements are checked against. Historical (180-day) signals are used
throughout, except where noted.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from personasense.features.income import IRREGULAR
from personasense.features.signals import DetectedSignals
from personasense.ingest.schema import Account

logger = logging.getLogger(__name__)

# Placeholder interest estimate per interest-bearing card
INTEREST_ESTIMATE_PER_ACCOUNT = 50.0

# Share of income assumed to go to expenses
EXPENSE_SHARE_OF_INCOME = 0.7


@dataclass(frozen=True)
class EligibilityMetrics:
    """Flat financial profile used for offer eligibility."""
    # Credit
    max_credit_utilization: float = 0.0
    avg_credit_utilization: float = 0.0
    total_credit_balance: float = 0.0
    total_credit_limit: float = 0.0
    total_interest_paid: float = 0.0

    # Savings
    total_savings_balance: float = 0.0
    emergency_fund_coverage: float = 0.0  # months

    # Income
    estimated_monthly_income: float = 0.0
    income_stability: str = 'unknown'  # stable, variable, unknown

    # Existing accounts
    has_checking_account: bool = False
    has_savings_account: bool = False
    has_credit_card: bool = False
    has_money_market: bool = False
    has_hsa: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_eligibility_metrics(
    signals: DetectedSignals,
    accounts: Sequence[Account] = ()
) -> EligibilityMetrics:
    """
    Calculate eligibility metrics from detected signals.

    Args:
        signals: Signals for both windows
        accounts: User accounts, read only for account flags no signal carries

    Returns:
        EligibilityMetrics
    """
    credit_accounts = signals.credit.window_180d.evidence.accounts
    utilizations = [acc.utilization_percent for acc in credit_accounts]

    savings_accounts = signals.savings.window_180d.evidence.accounts
    total_savings = sum(acc.end_balance for acc in savings_accounts)

    monthly_expenses = estimate_monthly_expenses(signals)
    coverage = total_savings / monthly_expenses if monthly_expenses > 0 else 0.0

    income = signals.income.window_180d.evidence
    savings_types = {acc.type for acc in savings_accounts}

    metrics = EligibilityMetrics(
        max_credit_utilization=max(utilizations) if utilizations else 0.0,
        avg_credit_utilization=sum(utilizations) / len(utilizations) if utilizations else 0.0,
        total_credit_balance=sum(acc.balance for acc in credit_accounts),
        total_credit_limit=sum(acc.limit for acc in credit_accounts),
        total_interest_paid=(
            sum(1 for acc in credit_accounts if acc.has_interest_charges) * INTEREST_ESTIMATE_PER_ACCOUNT
        ),
        total_savings_balance=total_savings,
        emergency_fund_coverage=coverage,
        # Average deposit, not a monthly-normalized figure
        estimated_monthly_income=income.average_income,
        income_stability='variable' if income.frequency == IRREGULAR else 'stable',
        has_checking_account=any(acc.subtype == 'checking' for acc in accounts),
        has_savings_account=len(savings_accounts) > 0,
        has_credit_card=len(credit_accounts) > 0,
        has_money_market='money market' in savings_types,
        has_hsa='hsa' in savings_types,
    )

    logger.debug(
        "Eligibility metrics: max utilization %.1f%%, savings %.2f, coverage %.1f months",
        metrics.max_credit_utilization, metrics.total_savings_balance, metrics.emergency_fund_coverage
    )
    return metrics


def estimate_monthly_expenses(signals: DetectedSignals) -> float:
    """
    Rough monthly expense estimate for emergency fund coverage.

    The larger of the monthly cost of 180-day subscriptions and 70% of the
    average income deposit. Independent of the spending-based estimate the
    income and savings detectors use, so the two can disagree.
    """
    subscriptions = signals.subscriptions.window_180d.evidence
    income = signals.income.window_180d.evidence
    return max(
        subscriptions.monthly_subscription_cost,
        income.average_income * EXPENSE_SHARE_OF_INCOME
    )
