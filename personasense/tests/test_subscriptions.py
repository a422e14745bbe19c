"""
Unit Tests for Subscription Detection

Tests recurring merchant detection, provider recurring streams and
subscription share of spend.
"""

import pytest
from datetime import date, timedelta

from personasense.features.base import TimeWindow
from personasense.features.subscriptions import detect_subscriptions
from personasense.ingest.schema import RecurringStream, Transaction

REFERENCE_DATE = date(2025, 6, 30)


def create_charge(merchant: str, days_ago: int, amount: float) -> Transaction:
    """Helper to create a card charge."""
    txn_date = REFERENCE_DATE - timedelta(days=days_ago)
    return Transaction(
        transaction_id=f"txn_{merchant}_{txn_date.isoformat()}",
        account_id="acc_checking",
        date=txn_date,
        amount=amount,
        merchant_name=merchant,
    )


def create_stream(stream_id: str, merchant: str, transaction_ids, frequency: str = "MONTHLY",
                  amount: float = 9.99, is_active: bool = True) -> RecurringStream:
    """Helper to create a provider-detected recurring stream."""
    return RecurringStream(
        stream_id=stream_id,
        description=merchant.upper(),
        merchant_name=merchant,
        frequency=frequency,
        average_amount=amount,
        is_active=is_active,
        status="ACTIVE" if is_active else "INACTIVE",
        transaction_ids=tuple(transaction_ids),
        last_date=REFERENCE_DATE,
    )


class TestMerchantSubscriptions:
    """Tests for subscriptions found by grouping transactions by merchant."""

    def test_empty_input(self):
        result = detect_subscriptions([], TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False
        assert result.evidence.subscriptions == ()
        assert result.evidence.total_monthly_spend == 0.0
        assert result.evidence.subscription_share_of_spend == 0.0

    def test_three_monthly_charges(self):
        """Three consistent monthly charges make one monthly subscription."""
        txns = [create_charge("Netflix", days_ago, 15.99) for days_ago in (60, 30, 0)]

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is True
        assert len(result.evidence.subscriptions) == 1
        sub = result.evidence.subscriptions[0]
        assert sub.merchant == "netflix"
        assert sub.cadence == 'monthly'
        assert sub.count == 3
        assert sub.amount == 15.99
        assert sub.last_charge_date == REFERENCE_DATE

    def test_two_charges_not_enough(self):
        txns = [create_charge("Netflix", days_ago, 15.99) for days_ago in (30, 0)]

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False
        assert result.evidence.subscriptions == ()

    def test_inconsistent_amounts(self):
        """Fewer than three amounts near the median is not a subscription."""
        txns = [
            create_charge("Corner Store", 60, 10.0),
            create_charge("Corner Store", 30, 30.0),
            create_charge("Corner Store", 0, 50.0),
        ]

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False

    def test_amounts_within_fifteen_percent(self):
        """Charges 12% off the median still count; 20% off do not."""
        close = [
            create_charge("Utility Co", 60, 8.8),
            create_charge("Utility Co", 30, 10.0),
            create_charge("Utility Co", 0, 11.2),
        ]
        far = [
            create_charge("Water Co", 60, 8.0),
            create_charge("Water Co", 30, 10.0),
            create_charge("Water Co", 0, 12.0),
        ]

        assert detect_subscriptions(close, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE).detected is True
        assert detect_subscriptions(far, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE).detected is False

    def test_irregular_cadence(self):
        """Charges with no matching cadence are ignored."""
        txns = [create_charge("Gym", days_ago, 40.0) for days_ago in (100, 50, 0)]

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False

    def test_weekly_share_of_spend(self):
        """Weekly charges count four times toward the monthly share."""
        txns = [create_charge("Spotify", days_ago, 5.0) for days_ago in (21, 14, 7, 0)]
        txns.append(create_charge("Grocery Mart", 3, 80.0))

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, reference_date=REFERENCE_DATE)

        assert result.evidence.subscriptions[0].cadence == 'weekly'
        assert result.evidence.total_monthly_spend == 100.0
        assert result.evidence.subscription_share_of_spend == pytest.approx(20.0)

    def test_refunds_ignored(self):
        """Inflows are not subscription charges."""
        txns = [create_charge("Netflix", days_ago, -15.99) for days_ago in (60, 30, 0)]

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, reference_date=REFERENCE_DATE)

        assert result.detected is False
        assert result.evidence.total_monthly_spend == 0.0


class TestRecurringStreams:
    """Tests for provider-detected recurring streams."""

    def test_active_stream_with_charge_in_window(self):
        txns = [create_charge("Hulu", 10, 9.99)]
        stream = create_stream("s1", "Hulu", [txns[0].transaction_id, "older_txn_1", "older_txn_2"])

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert result.detected is True
        sub = result.evidence.subscriptions[0]
        assert sub.merchant == "Hulu"
        assert sub.amount == 9.99
        assert sub.cadence == 'monthly'
        assert sub.count == 3

    def test_stream_merchant_not_counted_twice(self):
        """Merchants already reported by a stream are skipped by merchant grouping."""
        txns = [create_charge("Hulu", days_ago, 9.99) for days_ago in (60, 30, 0)]
        stream = create_stream("s1", "Hulu", [txn.transaction_id for txn in txns])

        result = detect_subscriptions(txns, TimeWindow.DAYS_180, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert len(result.evidence.subscriptions) == 1

    @pytest.mark.parametrize("frequency,cadence", [
        ("WEEKLY", "weekly"),
        ("BIWEEKLY", "biweekly"),
        ("SEMI_MONTHLY", "biweekly"),
        ("MONTHLY", "monthly"),
    ])
    def test_frequency_mapping(self, frequency, cadence):
        txns = [create_charge("Gym", 5, 20.0)]
        stream = create_stream("s1", "Gym", [txns[0].transaction_id], frequency=frequency)

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert result.evidence.subscriptions[0].cadence == cadence

    def test_annual_stream_skipped(self):
        txns = [create_charge("Prime", 5, 139.0)]
        stream = create_stream("s1", "Prime", [txns[0].transaction_id], frequency="ANNUALLY")

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert result.detected is False

    def test_inactive_stream_skipped(self):
        txns = [create_charge("Hulu", 5, 9.99)]
        stream = create_stream("s1", "Hulu", [txns[0].transaction_id], is_active=False)

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert result.detected is False

    def test_stream_without_charge_in_window_skipped(self):
        txns = [create_charge("Hulu", 90, 9.99)]
        stream = create_stream("s1", "Hulu", [txns[0].transaction_id])

        result = detect_subscriptions(txns, TimeWindow.DAYS_30, recurring_streams=[stream],
                                      reference_date=REFERENCE_DATE)

        assert result.detected is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
