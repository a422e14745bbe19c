"""
Time Window Utilities

Helper functions for trailing 30-day and 180-day windows and the small
statistics the detectors share. Nothing here raises on empty input.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from personasense.ingest.schema import Transaction


def get_date_range(days: int, reference_date: Optional[date] = None) -> Tuple[date, date]:
    """
    Get start and end dates for a time window.

    Args:
        days: Number of days in the window (30 or 180)
        reference_date: End date of the window (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive
    """
    if reference_date is None:
        reference_date = date.today()

    return reference_date - timedelta(days=days), reference_date


def transactions_in_window(
    transactions: Iterable[Transaction],
    days: int,
    reference_date: Optional[date] = None
) -> List[Transaction]:
    """
    Filter transactions to those dated within the trailing window.

    Args:
        transactions: Transactions to filter (not modified)
        days: Number of days in the window
        reference_date: End date of the window (defaults to today)

    Returns:
        New list of transactions with start <= date <= end
    """
    start_date, end_date = get_date_range(days, reference_date)
    return [txn for txn in transactions if start_date <= txn.date <= end_date]


def days_between(first: date, second: date) -> int:
    """Absolute number of calendar days between two dates."""
    return abs((second - first).days)


def consecutive_gaps(dates: Sequence[date]) -> List[int]:
    """Day gaps between consecutive entries of an ascending date sequence."""
    return [days_between(dates[i - 1], dates[i]) for i in range(1, len(dates))]


def median(values: Sequence[float]) -> float:
    """Median of the values, 0 when empty."""
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def average(values: Sequence[float]) -> float:
    """Arithmetic mean of the values, 0 when empty."""
    if not values:
        return 0.0
    return sum(values) / len(values)
