"""
Main Signals Orchestrator

Runs every signal detector over both the 30-day and 180-day windows and
returns the complete DetectedSignals bundle.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from personasense.ingest.schema import UserFinancialData
from .banking_activity import BankingActivitySignal, detect_banking_activity
from .base import Signal, TimeWindow
from .credit import CreditSignal, detect_credit
from .income import IncomeSignal, detect_income
from .overdraft import OverdraftSignal, detect_overdrafts
from .savings import SavingsSignal, detect_savings
from .subscriptions import SubscriptionSignal, detect_subscriptions

logger = logging.getLogger(__name__)

SIGNAL_KINDS = ('overdrafts', 'credit', 'income', 'subscriptions', 'savings', 'banking_activity')


@dataclass(frozen=True)
class WindowedSignal:
    """The 30-day and 180-day results of one detector."""
    window_30d: Signal
    window_180d: Signal

    def __getitem__(self, window: TimeWindow) -> Signal:
        return self.window_30d if TimeWindow(window) is TimeWindow.DAYS_30 else self.window_180d

    @property
    def detected_in_any_window(self) -> bool:
        return self.window_30d.detected or self.window_180d.detected

    def to_dict(self) -> Dict[str, Any]:
        return {
            TimeWindow.DAYS_30.value: self.window_30d.to_dict(),
            TimeWindow.DAYS_180.value: self.window_180d.to_dict(),
        }


@dataclass(frozen=True)
class DetectedSignals:
    """
    Complete set of behavioral signals for a user.

    Six signal kinds, each evaluated over both windows.
    """
    subscriptions: WindowedSignal
    savings: WindowedSignal
    credit: WindowedSignal
    income: WindowedSignal
    overdrafts: WindowedSignal
    banking_activity: WindowedSignal

    def detected_kinds(self) -> List[str]:
        """Signal kinds detected in at least one window."""
        return [kind for kind in SIGNAL_KINDS if getattr(self, kind).detected_in_any_window]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'subscriptions': self.subscriptions.to_dict(),
            'savings': self.savings.to_dict(),
            'credit': self.credit.to_dict(),
            'income': self.income.to_dict(),
            'overdrafts': self.overdrafts.to_dict(),
            'banking_activity': self.banking_activity.to_dict(),
        }

    def summary(self) -> str:
        """Get a human-readable summary of the signals personas are decided on."""
        subscriptions: SubscriptionSignal = self.subscriptions.window_30d
        savings: SavingsSignal = self.savings.window_180d
        credit: CreditSignal = self.credit.window_30d
        income: IncomeSignal = self.income.window_180d
        overdrafts: OverdraftSignal = self.overdrafts.window_180d
        activity: BankingActivitySignal = self.banking_activity.window_180d

        lines = [
            "Signal Summary",
            "=" * 70,
            "Subscriptions (30d):",
            f"  - Recurring merchants: {len(subscriptions.evidence.subscriptions)}",
            f"  - Subscription share: {subscriptions.evidence.subscription_share_of_spend:.1f}%",
            "Savings (180d):",
            f"  - Monthly net inflow: ${savings.evidence.monthly_net_inflow:.2f}",
            f"  - Emergency fund: {savings.evidence.emergency_fund_coverage:.1f} months",
            "Credit (30d):",
            f"  - Cards: {len(credit.evidence.accounts)}",
            f"  - Max utilization: {credit.evidence.max_utilization:.1f}%",
            "Income (180d):",
            f"  - Frequency: {income.evidence.frequency}",
            f"  - Cash buffer: {income.evidence.cash_flow_buffer:.1f} months",
            "Overdrafts (180d):",
            f"  - Incidents: {overdrafts.evidence.count_180d}",
            "Banking activity (180d):",
            f"  - Outbound payments: {activity.evidence.outbound_payment_count_180d}",
        ]
        return "\n".join(lines)


def detect_all_signals(
    data: UserFinancialData,
    reference_date: Optional[date] = None
) -> DetectedSignals:
    """
    Calculate all behavioral signals for a user.

    Args:
        data: Validated record set for one user
        reference_date: End date for both windows (defaults to today)

    Returns:
        DetectedSignals with every detector run for both windows
    """
    if reference_date is None:
        reference_date = date.today()

    accounts = data.accounts
    transactions = data.transactions

    def both_windows(detect, *args, **kwargs) -> WindowedSignal:
        return WindowedSignal(
            window_30d=detect(*args, TimeWindow.DAYS_30, **kwargs),
            window_180d=detect(*args, TimeWindow.DAYS_180, **kwargs),
        )

    signals = DetectedSignals(
        subscriptions=both_windows(
            detect_subscriptions, transactions,
            recurring_streams=data.recurring_streams, reference_date=reference_date
        ),
        savings=both_windows(detect_savings, accounts, transactions, reference_date=reference_date),
        credit=both_windows(detect_credit, accounts, data.liabilities),
        income=both_windows(detect_income, accounts, transactions, reference_date=reference_date),
        overdrafts=both_windows(detect_overdrafts, accounts, transactions, reference_date=reference_date),
        banking_activity=both_windows(detect_banking_activity, transactions, reference_date=reference_date),
    )

    logger.debug(
        "Detected signals as of %s: %s",
        reference_date.isoformat(), ', '.join(signals.detected_kinds()) or 'none'
    )

    return signals
