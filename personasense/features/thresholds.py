"""
Detection Policy Constants

Every threshold used by the signal detectors and persona rules. Detectors
accept the relevant constant as a keyword argument so each one can be
overridden in isolation.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Cadence:
    """A recurring interval and the day tolerance that still counts as a match."""
    name: str  # 'weekly', 'biweekly', 'monthly'
    avg_days: int
    tolerance: int
    monthly_multiplier: int  # charges per month used to normalize cost

    def matches(self, gap_days: float) -> bool:
        return abs(gap_days - self.avg_days) <= self.tolerance


WEEKLY = Cadence('weekly', avg_days=7, tolerance=2, monthly_multiplier=4)
BIWEEKLY = Cadence('biweekly', avg_days=14, tolerance=3, monthly_multiplier=2)
MONTHLY = Cadence('monthly', avg_days=30, tolerance=5, monthly_multiplier=1)

# Checked in order; the first cadence whose tolerance contains the gap wins
CADENCES: Tuple[Cadence, ...] = (WEEKLY, BIWEEKLY, MONTHLY)

# Overdraft
OVERDRAFT_PATTERNS: Tuple[str, ...] = ('OVERDRAFT', 'NSF', 'INSUFFICIENT FUNDS')
OVERDRAFT_MIN_COUNT_30D = 1
OVERDRAFT_MIN_COUNT_180D = 2

# Credit
UTILIZATION_LOW = 30.0
UTILIZATION_MEDIUM = 50.0
UTILIZATION_HIGH = 80.0
MINIMUM_PAYMENT_TOLERANCE = 1.0  # dollars

# Income
IRREGULAR_PAY_GAP_DAYS = 45.0
INCOME_BUCKET_DAYS = 15
LOW_CASH_FLOW_BUFFER_MONTHS = 1.0

# Subscriptions
MIN_SUBSCRIPTION_OCCURRENCES = 3
AMOUNT_CONSISTENCY_TOLERANCE = 0.15
SUBSCRIPTION_HEAVY_MIN_COUNT = 3
SUBSCRIPTION_HEAVY_MIN_MONTHLY_SPEND = 50.0
SUBSCRIPTION_HEAVY_MIN_SHARE = 10.0

# Savings
SAVINGS_SUBTYPES: Tuple[str, ...] = ('savings', 'money market', 'hsa')
GROWTH_RATE_THRESHOLD = 2.0  # percent
MONTHLY_INFLOW_THRESHOLD = 200.0  # dollars

# Banking activity (low use)
LOW_USE_MAX_PAYMENTS_180D = 10
LOW_USE_MAX_PAYMENTS_30D = 5
LOW_USE_MAX_MERCHANTS = 5

# Days used to normalize a window total to a monthly figure
DAYS_PER_MONTH = 30
