"""
Offer Matching Module

Filters partner offers by active dates, targeted persona and eligibility
requirements, then ranks the survivors by the persona's priority.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .eligibility import EligibilityMetrics
from .offers import EligibilityRequirements, PartnerOffer

logger = logging.getLogger(__name__)

# Priority for offers that do not rank the persona
MISSING_PRIORITY = 999

PREDATORY_KEYWORDS: Tuple[str, ...] = (
    'payday',
    'cash advance',
    'title loan',
    'rent-to-own',
    'subprime',
    'guaranteed approval',
    'no credit check loan',
)


@dataclass(frozen=True)
class EligibilityResult:
    """Result of eligibility check for an offer."""
    eligible: bool
    reasons: Tuple[str, ...]  # Reasons why eligible or not eligible
    failed_checks: Tuple[str, ...]  # Specific checks that failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'eligible': self.eligible,
            'reasons': list(self.reasons),
            'failed_checks': list(self.failed_checks),
        }


def normalize_persona(persona: str) -> str:
    """Lower-case, with runs of whitespace replaced by underscores."""
    return '_'.join(persona.lower().split())


def targets_persona(offer: PartnerOffer, persona: str) -> bool:
    normalized = normalize_persona(persona)
    return any(normalize_persona(target) == normalized for target in offer.targeted_personas)


def check_requirements(
    metrics: EligibilityMetrics,
    requirements: EligibilityRequirements
) -> List[Tuple[str, str]]:
    """
    Check every set requirement against the metrics.

    Bounds are inclusive.

    Returns:
        List of (check_name, reason) for each failed requirement
    """
    failures = []

    if (requirements.max_credit_utilization is not None
            and metrics.max_credit_utilization > requirements.max_credit_utilization):
        failures.append(('max_credit_utilization', (
            f"Utilization {metrics.max_credit_utilization:.1f}% exceeds maximum "
            f"{requirements.max_credit_utilization}%"
        )))

    if (requirements.min_credit_utilization is not None
            and metrics.max_credit_utilization < requirements.min_credit_utilization):
        failures.append(('min_credit_utilization', (
            f"Utilization {metrics.max_credit_utilization:.1f}% below minimum "
            f"{requirements.min_credit_utilization}%"
        )))

    if (requirements.min_savings_balance is not None
            and metrics.total_savings_balance < requirements.min_savings_balance):
        failures.append(('min_savings_balance', (
            f"Savings ${metrics.total_savings_balance:.2f} below minimum "
            f"${requirements.min_savings_balance:.2f}"
        )))

    if (requirements.min_emergency_fund_coverage is not None
            and metrics.emergency_fund_coverage < requirements.min_emergency_fund_coverage):
        failures.append(('min_emergency_fund_coverage', (
            f"Emergency fund {metrics.emergency_fund_coverage:.1f} months below minimum "
            f"{requirements.min_emergency_fund_coverage} months"
        )))

    if (requirements.min_monthly_income is not None
            and metrics.estimated_monthly_income < requirements.min_monthly_income):
        failures.append(('min_monthly_income', (
            f"Income ${metrics.estimated_monthly_income:.2f} below minimum "
            f"${requirements.min_monthly_income:.2f}"
        )))

    if (requirements.income_stability
            and requirements.income_stability != 'any'
            and metrics.income_stability != requirements.income_stability):
        failures.append(('income_stability', (
            f"Income is {metrics.income_stability}, offer requires {requirements.income_stability}"
        )))

    if requirements.requires_no_savings_account and metrics.has_savings_account:
        failures.append(('requires_no_savings_account', "User already has a savings account"))

    if requirements.requires_no_credit_card and metrics.has_credit_card:
        failures.append(('requires_no_credit_card', "User already has a credit card"))

    if requirements.requires_no_money_market and metrics.has_money_market:
        failures.append(('requires_no_money_market', "User already has a money market account"))

    if requirements.requires_no_hsa and metrics.has_hsa:
        failures.append(('requires_no_hsa', "User already has an HSA"))

    return failures


def check_offer_eligibility(
    offer: PartnerOffer,
    metrics: EligibilityMetrics,
    persona: str,
    now: Optional[date] = None
) -> EligibilityResult:
    """
    Check if a user is eligible for a specific offer.

    Args:
        offer: PartnerOffer to check
        metrics: User's eligibility metrics
        persona: Persona the offer must target
        now: Evaluation date for active dates (defaults to today)

    Returns:
        EligibilityResult with eligibility status and reasons
    """
    if now is None:
        now = date.today()

    failures = []

    if offer.active_date_start > now:
        failures.append(('not_yet_active', f"Offer starts {offer.active_date_start.isoformat()}"))
    elif offer.active_date_end is not None and offer.active_date_end < now:
        failures.append(('expired', f"Offer ended {offer.active_date_end.isoformat()}"))

    if not targets_persona(offer, persona):
        failures.append(('persona', f"Offer does not target {persona}"))

    failures.extend(check_requirements(metrics, offer.eligibility_reqs))

    if failures:
        for check, reason in failures:
            logger.debug("Offer %s rejected (%s): %s", offer.id, check, reason)
        return EligibilityResult(
            eligible=False,
            reasons=tuple(reason for _, reason in failures),
            failed_checks=tuple(check for check, _ in failures)
        )

    return EligibilityResult(eligible=True, reasons=("All eligibility criteria met",), failed_checks=())


def persona_priority(offer: PartnerOffer, persona: str) -> int:
    """
    Offer priority for a persona, looked up exactly, then normalized.

    Offers that do not rank the persona get MISSING_PRIORITY.
    """
    if persona in offer.priority_per_persona:
        return offer.priority_per_persona[persona]

    normalized = normalize_persona(persona)
    for key, priority in offer.priority_per_persona.items():
        if normalize_persona(key) == normalized:
            return priority

    return MISSING_PRIORITY


def _ranking_key(offer: PartnerOffer, persona: str) -> Tuple[int, int, int]:
    # Open-ended offers first, then later end dates
    if offer.active_date_end is None:
        return persona_priority(offer, persona), 0, 0
    return persona_priority(offer, persona), 1, -offer.active_date_end.toordinal()


def match_offers(
    offers: Sequence[PartnerOffer],
    metrics: EligibilityMetrics,
    persona: str,
    now: Optional[date] = None
) -> List[PartnerOffer]:
    """
    Filter offers to those the user is eligible for, best first.

    Args:
        offers: Offer catalog
        metrics: User's eligibility metrics
        persona: Persona to match offers for
        now: Evaluation date for active dates (defaults to today)

    Returns:
        Eligible offers sorted by persona priority (lower first); ties go to
        offers without an end date, then to the offer ending later
    """
    if now is None:
        now = date.today()

    eligible = [
        offer for offer in offers
        if check_offer_eligibility(offer, metrics, persona, now).eligible
    ]

    logger.debug("%d of %d offers eligible for %s", len(eligible), len(offers), persona)

    return sorted(eligible, key=lambda offer: _ranking_key(offer, persona))


def select_offer(
    offers: Sequence[PartnerOffer],
    metrics: EligibilityMetrics,
    persona: str,
    now: Optional[date] = None
) -> Optional[PartnerOffer]:
    """Top-ranked eligible offer, or None."""
    matched = match_offers(offers, metrics, persona, now)
    return matched[0] if matched else None


def is_predatory_offer(offer: PartnerOffer) -> bool:
    """
    Flag offers whose name or pitch mentions a predatory product.

    Advisory only; matching does not exclude flagged offers.
    """
    name = offer.offer_name.lower()
    pitch = offer.offer_pitch.lower()
    return any(keyword in name or keyword in pitch for keyword in PREDATORY_KEYWORDS)
