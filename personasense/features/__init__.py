"""
Feature Engineering Module

Behavioral signal detection. Every detector is evaluated for both the
30-day and 180-day windows.

Modules:
    - signals: Orchestrator that runs every detector for both windows
    - overdraft: Negative balances and overdraft/NSF fees
    - credit: Credit utilization and payment pattern analysis
    - income: Income cadence and cash flow analysis
    - subscriptions: Recurring merchant and subscription detection
    - savings: Savings growth and emergency fund analysis
    - banking_activity: Low-use banking patterns
    - window_utils: Date range and time window utilities
    - thresholds: Detection policy constants
"""

from .base import Signal, TimeWindow
from .signals import DetectedSignals, WindowedSignal, detect_all_signals

__all__ = ['Signal', 'TimeWindow', 'DetectedSignals', 'WindowedSignal', 'detect_all_signals']
