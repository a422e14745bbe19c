"""
Assessment Pipeline

Runs the full engine for one user: signals, personas, eligibility metrics
and offers matched for the primary persona.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from personasense.features.signals import DetectedSignals, detect_all_signals
from personasense.ingest.schema import UserFinancialData
from personasense.personas.assignment import PersonaAssignmentResult, assign_personas
from personasense.recommend.eligibility import EligibilityMetrics, calculate_eligibility_metrics
from personasense.recommend.matcher import is_predatory_offer, match_offers
from personasense.recommend.offers import PartnerOffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assessment:
    """Everything the engine derived for one user at one instant."""
    signals: DetectedSignals
    persona_result: PersonaAssignmentResult
    eligibility_metrics: EligibilityMetrics
    matched_offers: Tuple[PartnerOffer, ...] = ()
    flagged_offer_ids: Tuple[str, ...] = ()  # matched offers that look predatory

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'signals': self.signals.to_dict(),
            'personas': self.persona_result.to_dict(),
            'eligibility_metrics': self.eligibility_metrics.to_dict(),
            'matched_offers': [offer.to_dict() for offer in self.matched_offers],
            'flagged_offer_ids': list(self.flagged_offer_ids),
        }


def build_assessment(
    data: UserFinancialData,
    offers: Sequence[PartnerOffer] = (),
    reference_date: Optional[date] = None,
    now: Optional[date] = None
) -> Assessment:
    """
    Build an assessment for one user.

    Args:
        data: Validated record set
        offers: Partner offer catalog (may be empty)
        reference_date: End date for signal windows (defaults to today)
        now: Evaluation date for offer active dates (defaults to reference_date)

    Returns:
        Assessment
    """
    if reference_date is None:
        reference_date = date.today()
    if now is None:
        now = reference_date

    signals = detect_all_signals(data, reference_date=reference_date)
    persona_result = assign_personas(signals)
    metrics = calculate_eligibility_metrics(signals, data.accounts)

    primary = persona_result.primary.persona
    matched = match_offers(offers, metrics, primary.value, now=now)
    flagged = [offer.id for offer in matched if is_predatory_offer(offer)]

    if flagged:
        logger.warning("Matched offers flagged as predatory: %s", ', '.join(flagged))

    logger.info(
        "Assessment built: primary persona %s, %d persona(s), %d of %d offers matched",
        primary.value, len(persona_result.personas), len(matched), len(offers)
    )

    return Assessment(
        signals=signals,
        persona_result=persona_result,
        eligibility_metrics=metrics,
        matched_offers=tuple(matched),
        flagged_offer_ids=tuple(flagged)
    )
