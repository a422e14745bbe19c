"""
Persona Criteria Evaluation

Contains one checker per ranked persona. Each checker takes the full
DetectedSignals bundle and returns a DecisionNode: whether the persona
matched, the criteria explaining the outcome, and the evidence used.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from personasense.features.credit import HIGH_UTILIZATION_BUCKETS, UNDER_30
from personasense.features.signals import DetectedSignals
from personasense.features.thresholds import (
    GROWTH_RATE_THRESHOLD,
    IRREGULAR_PAY_GAP_DAYS,
    LOW_CASH_FLOW_BUFFER_MONTHS,
    LOW_USE_MAX_MERCHANTS,
    LOW_USE_MAX_PAYMENTS_180D,
    LOW_USE_MAX_PAYMENTS_30D,
    MONTHLY_INFLOW_THRESHOLD,
    OVERDRAFT_MIN_COUNT_180D,
    OVERDRAFT_MIN_COUNT_30D,
    SUBSCRIPTION_HEAVY_MIN_COUNT,
    SUBSCRIPTION_HEAVY_MIN_MONTHLY_SPEND,
    SUBSCRIPTION_HEAVY_MIN_SHARE,
)
from .priority import PersonaType

# Near-threshold matches are flagged borderline in the evidence
BORDERLINE_PAY_GAP_DAYS = 50.0
BORDERLINE_CASH_FLOW_BUFFER = 0.8
BORDERLINE_SUBSCRIPTION_SPEND = 60.0
BORDERLINE_SUBSCRIPTION_SHARE = 12.0


@dataclass(frozen=True)
class DecisionNode:
    """Outcome of evaluating one persona rule."""
    persona: PersonaType
    matched: bool
    criteria: Tuple[str, ...] = ()
    evidence: Dict[str, Any] = field(default_factory=dict)
    checked: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'persona': self.persona.value,
            'checked': self.checked,
            'matched': self.matched,
            'criteria': list(self.criteria),
            'evidence': dict(self.evidence),
        }


def check_overdraft_vulnerable(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches Overdraft-Vulnerable

    Criteria:
    - At least 1 overdraft incident in the last 30 days OR
    - At least 2 overdraft incidents in the last 180 days
    """
    overdraft_30d = signals.overdrafts.window_30d.evidence
    overdraft_180d = signals.overdrafts.window_180d.evidence

    criteria = []
    evidence = {}

    if overdraft_30d.count_30d >= OVERDRAFT_MIN_COUNT_30D:
        criteria.append(f"{overdraft_30d.count_30d} overdraft(s) in last 30 days")
        evidence['count_30d'] = overdraft_30d.count_30d
        evidence['incidents_30d'] = [incident.to_dict() for incident in overdraft_30d.incidents]

    if overdraft_180d.count_180d >= OVERDRAFT_MIN_COUNT_180D:
        criteria.append(f"{overdraft_180d.count_180d} overdraft(s) in last 180 days")
        evidence['count_180d'] = overdraft_180d.count_180d
        evidence['incidents_180d'] = [incident.to_dict() for incident in overdraft_180d.incidents]

    matched = bool(criteria)

    if matched and overdraft_180d.total_fees > 0:
        criteria.append(f"${overdraft_180d.total_fees:.2f} in fees")
        evidence['total_fees'] = overdraft_180d.total_fees

    if not matched:
        criteria.append(
            f"{overdraft_30d.count_30d} overdraft(s) in last 30 days (<{OVERDRAFT_MIN_COUNT_30D}) "
            f"and {overdraft_180d.count_180d} in last 180 days (<{OVERDRAFT_MIN_COUNT_180D})"
        )

    return DecisionNode(
        persona=PersonaType.OVERDRAFT_VULNERABLE,
        matched=matched,
        criteria=tuple(criteria),
        evidence=evidence
    )


def check_high_utilization(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches High Utilization

    Criteria (any 30-day credit account):
    - Utilization bucket 50_to_80 or over_80 OR
    - Interest charges OR
    - Minimum-payment-only OR
    - Overdue
    """
    credit = signals.credit.window_30d

    if not credit.evidence.accounts:
        return DecisionNode(
            persona=PersonaType.HIGH_UTILIZATION,
            matched=False,
            criteria=("No credit accounts detected",)
        )

    problematic = [acc for acc in credit.evidence.accounts if acc.is_problematic]

    if not problematic:
        return DecisionNode(
            persona=PersonaType.HIGH_UTILIZATION,
            matched=False,
            criteria=(
                f"All {len(credit.evidence.accounts)} card(s) under 50% utilization "
                f"with no interest, minimum-only or overdue payments",
            )
        )

    criteria = []
    evidence: Dict[str, Any] = {}

    high_util = [acc for acc in problematic if acc.utilization_bucket in HIGH_UTILIZATION_BUCKETS]
    if high_util:
        max_util = max(acc.utilization_percent for acc in high_util)
        criteria.append(f"{len(high_util)} card(s) with 50%+ utilization (max: {max_util:.0f}%)")
        evidence['high_utilization_accounts'] = [
            {'mask': acc.mask, 'utilization': acc.utilization_percent, 'bucket': acc.utilization_bucket}
            for acc in high_util
        ]

    interest = [acc for acc in problematic if acc.has_interest_charges]
    if interest:
        criteria.append(f"{len(interest)} card(s) carrying interest charges")
        evidence['has_interest_charges'] = True

    minimum_only = [acc for acc in problematic if acc.minimum_payment_only]
    if minimum_only:
        criteria.append(f"{len(minimum_only)} card(s) with minimum payment only")
        evidence['minimum_payment_only'] = True

    overdue = [acc for acc in problematic if acc.is_overdue]
    if overdue:
        criteria.append(f"{len(overdue)} overdue card(s)")
        evidence['has_overdue'] = True

    evidence['accounts_affected'] = len(problematic)
    evidence['total_balance'] = sum(acc.balance for acc in problematic)
    evidence['overall_utilization'] = credit.evidence.overall_utilization.percent

    return DecisionNode(
        persona=PersonaType.HIGH_UTILIZATION,
        matched=True,
        criteria=tuple(criteria),
        evidence=evidence
    )


def check_variable_income_budgeter(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches Variable Income Budgeter

    Criteria (180-day income):
    - Median pay gap > 45 days AND
    - Cash-flow buffer < 1 month
    """
    income = signals.income.window_180d

    if not income.detected:
        reason = "No income detected" if income.evidence.deposit_count == 0 else (
            f"Regular {income.evidence.frequency} income "
            f"(median pay gap {income.evidence.median_pay_gap:.0f} days)"
        )
        return DecisionNode(
            persona=PersonaType.VARIABLE_INCOME_BUDGETER,
            matched=False,
            criteria=(reason,)
        )

    pay_gap = income.evidence.median_pay_gap
    buffer = income.evidence.cash_flow_buffer

    pay_gap_high = pay_gap > IRREGULAR_PAY_GAP_DAYS
    buffer_low = buffer < LOW_CASH_FLOW_BUFFER_MONTHS

    if not (pay_gap_high and buffer_low):
        criteria = []
        if not pay_gap_high:
            criteria.append(f"Median pay gap of {pay_gap:.0f} days (≤45 days)")
        if not buffer_low:
            criteria.append(f"Cash flow buffer of {buffer:.1f} months (≥1 month)")
        return DecisionNode(
            persona=PersonaType.VARIABLE_INCOME_BUDGETER,
            matched=False,
            criteria=tuple(criteria)
        )

    evidence = {
        'median_pay_gap': pay_gap,
        'cash_flow_buffer': buffer,
        'frequency': income.evidence.frequency,
        'average_income': income.evidence.average_income,
    }
    if pay_gap < BORDERLINE_PAY_GAP_DAYS or buffer > BORDERLINE_CASH_FLOW_BUFFER:
        evidence['borderline'] = True

    return DecisionNode(
        persona=PersonaType.VARIABLE_INCOME_BUDGETER,
        matched=True,
        criteria=(
            f"Median pay gap of {pay_gap:.0f} days (>45 days)",
            f"Cash flow buffer of {buffer:.1f} months (<1 month)",
        ),
        evidence=evidence
    )


def check_subscription_heavy(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches Subscription-Heavy

    Criteria (30-day subscriptions):
    - At least 3 recurring subscriptions AND
    - Total spend ≥ $50 OR subscription share of spend ≥ 10%
    """
    subscriptions = signals.subscriptions.window_30d.evidence
    count = len(subscriptions.subscriptions)
    spend = subscriptions.total_monthly_spend
    share = subscriptions.subscription_share_of_spend

    if count == 0:
        return DecisionNode(
            persona=PersonaType.SUBSCRIPTION_HEAVY,
            matched=False,
            criteria=("No subscriptions detected",)
        )

    spend_high = spend >= SUBSCRIPTION_HEAVY_MIN_MONTHLY_SPEND
    share_high = share >= SUBSCRIPTION_HEAVY_MIN_SHARE

    if count < SUBSCRIPTION_HEAVY_MIN_COUNT or not (spend_high or share_high):
        criteria = []
        if count < SUBSCRIPTION_HEAVY_MIN_COUNT:
            criteria.append(f"Only {count} recurring subscription(s) (<3)")
        if not (spend_high or share_high):
            criteria.append(f"${spend:.2f}/month total spend (<$50) and {share:.1f}% of spending (<10%)")
        return DecisionNode(
            persona=PersonaType.SUBSCRIPTION_HEAVY,
            matched=False,
            criteria=tuple(criteria)
        )

    criteria = [f"{count} recurring subscriptions detected"]
    if spend_high:
        criteria.append(f"${spend:.2f}/month total spend")
    if share_high:
        criteria.append(f"{share:.1f}% of total spending")

    evidence = {
        'subscription_count': count,
        'total_monthly_spend': spend,
        'subscription_share_of_spend': share,
        'subscriptions': [
            {'merchant': sub.merchant, 'amount': sub.amount, 'cadence': sub.cadence}
            for sub in subscriptions.subscriptions
        ],
    }
    if (count == SUBSCRIPTION_HEAVY_MIN_COUNT
            and spend < BORDERLINE_SUBSCRIPTION_SPEND
            and share < BORDERLINE_SUBSCRIPTION_SHARE):
        evidence['borderline'] = True

    return DecisionNode(
        persona=PersonaType.SUBSCRIPTION_HEAVY,
        matched=True,
        criteria=tuple(criteria),
        evidence=evidence
    )


def check_savings_builder(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches Savings Builder

    Criteria:
    - Some 180-day savings account with growth ≥ 2% or net inflow ≥ $200 AND
    - 30-day overall credit utilization under 30%, or no credit accounts
    """
    savings = signals.savings.window_180d.evidence
    credit = signals.credit.window_30d.evidence

    if not savings.accounts:
        return DecisionNode(
            persona=PersonaType.SAVINGS_BUILDER,
            matched=False,
            criteria=("No savings accounts",)
        )

    positive_accounts = [
        acc for acc in savings.accounts
        if acc.growth_rate >= GROWTH_RATE_THRESHOLD or acc.net_inflow >= MONTHLY_INFLOW_THRESHOLD
    ]
    has_credit = bool(credit.accounts)
    credit_ok = not has_credit or credit.overall_utilization.bucket == UNDER_30

    if not positive_accounts or not credit_ok:
        criteria = []
        if not positive_accounts:
            criteria.append("No savings account with growth ≥2% or net inflow ≥$200")
        if not credit_ok:
            criteria.append(
                f"Credit utilization of {credit.overall_utilization.percent:.0f}% (≥30%)"
            )
        return DecisionNode(
            persona=PersonaType.SAVINGS_BUILDER,
            matched=False,
            criteria=tuple(criteria)
        )

    criteria = []

    growth_accounts = [acc for acc in positive_accounts if acc.growth_rate >= GROWTH_RATE_THRESHOLD]
    if growth_accounts:
        max_growth = max(acc.growth_rate for acc in growth_accounts)
        criteria.append(f"Savings growth of {max_growth:.1f}% (≥2%)")

    inflow_accounts = [acc for acc in positive_accounts if acc.net_inflow >= MONTHLY_INFLOW_THRESHOLD]
    if inflow_accounts:
        total_inflow = sum(acc.net_inflow for acc in inflow_accounts)
        criteria.append(f"Net inflow of ${total_inflow:.2f} (≥$200)")

    if has_credit:
        criteria.append(f"Credit utilization under 30% ({credit.overall_utilization.percent:.0f}%)")
    else:
        criteria.append("No credit card debt")

    evidence = {
        'savings_accounts': [
            {
                'type': acc.type,
                'growth_rate': acc.growth_rate,
                'net_inflow': acc.net_inflow,
                'end_balance': acc.end_balance,
            }
            for acc in positive_accounts
        ],
        'total_savings': savings.total_savings,
        'emergency_fund_coverage': savings.emergency_fund_coverage,
    }
    if has_credit:
        evidence['credit_utilization'] = credit.overall_utilization.percent

    return DecisionNode(
        persona=PersonaType.SAVINGS_BUILDER,
        matched=True,
        criteria=tuple(criteria),
        evidence=evidence
    )


def check_low_use(signals: DetectedSignals) -> DecisionNode:
    """
    Check if user matches Low-Use

    Criteria (180-day banking activity):
    - Fewer than 10 outbound payments in 180 days AND
    - Fewer than 5 outbound payments in 30 days AND
    - Fewer than 5 unique payment merchants
    """
    activity = signals.banking_activity.window_180d

    if not activity.detected:
        evidence = activity.evidence
        if evidence.outbound_payment_count_180d == 0:
            reason = "No banking activity signal"
        else:
            reason = (
                f"{evidence.outbound_payment_count_180d} payments in 180 days, "
                f"{evidence.outbound_payment_count_30d} in 30 days, "
                f"{evidence.unique_payment_merchants} unique merchants"
            )
        return DecisionNode(
            persona=PersonaType.LOW_USE,
            matched=False,
            criteria=(reason,)
        )

    count_180d = activity.evidence.outbound_payment_count_180d
    count_30d = activity.evidence.outbound_payment_count_30d
    merchants = activity.evidence.unique_payment_merchants

    matched = (
        count_180d < LOW_USE_MAX_PAYMENTS_180D
        and count_30d < LOW_USE_MAX_PAYMENTS_30D
        and merchants < LOW_USE_MAX_MERCHANTS
    )
    if not matched:
        return DecisionNode(
            persona=PersonaType.LOW_USE,
            matched=False,
            criteria=("Banking activity above low-use limits",)
        )

    return DecisionNode(
        persona=PersonaType.LOW_USE,
        matched=True,
        criteria=(
            f"Only {count_180d} payments in 180 days (<10)",
            f"Only {count_30d} payments in 30 days (<5)",
            f"Only {merchants} unique merchants (<5)",
        ),
        evidence={
            'outbound_payment_count_180d': count_180d,
            'outbound_payment_count_30d': count_30d,
            'unique_payment_merchants': merchants,
        }
    )
