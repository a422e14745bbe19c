"""
Partner Offer Catalog Module

Offer and eligibility requirement definitions, and loading of offer
catalogs from JSON.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ConfigDict, TypeAdapter, ValidationError, with_config
from pydantic.alias_generators import to_camel

from personasense.exceptions import IngestValidationError
from personasense.ingest.json_loader import format_validation_errors, read_json

logger = logging.getLogger(__name__)

# Catalogs may spell keys offer_name or offerName
CATALOG_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@with_config(CATALOG_CONFIG)
@dataclass(frozen=True)
class EligibilityRequirements:
    """Eligibility criteria for an offer. Unset criteria always pass."""
    max_credit_utilization: Optional[float] = None  # user max utilization must be <= this
    min_credit_utilization: Optional[float] = None  # user max utilization must be >= this
    min_savings_balance: Optional[float] = None
    min_emergency_fund_coverage: Optional[float] = None  # months
    min_monthly_income: Optional[float] = None
    income_stability: Optional[str] = None  # stable, variable, any
    requires_no_savings_account: bool = False
    requires_no_credit_card: bool = False
    requires_no_money_market: bool = False
    requires_no_hsa: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_credit_utilization': self.max_credit_utilization,
            'min_credit_utilization': self.min_credit_utilization,
            'min_savings_balance': self.min_savings_balance,
            'min_emergency_fund_coverage': self.min_emergency_fund_coverage,
            'min_monthly_income': self.min_monthly_income,
            'income_stability': self.income_stability,
            'requires_no_savings_account': self.requires_no_savings_account,
            'requires_no_credit_card': self.requires_no_credit_card,
            'requires_no_money_market': self.requires_no_money_market,
            'requires_no_hsa': self.requires_no_hsa,
        }


@with_config(CATALOG_CONFIG)
@dataclass(frozen=True)
class PartnerOffer:
    """Partner offer definition."""
    id: str
    offer_name: str
    offer_pitch: str
    targeted_personas: Tuple[str, ...]
    active_date_start: date
    priority_per_persona: Dict[str, int] = field(default_factory=dict)  # lower = higher priority
    eligibility_reqs: EligibilityRequirements = field(default_factory=EligibilityRequirements)
    active_date_end: Optional[date] = None  # None = no expiration

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'offer_name': self.offer_name,
            'offer_pitch': self.offer_pitch,
            'targeted_personas': list(self.targeted_personas),
            'priority_per_persona': dict(self.priority_per_persona),
            'eligibility_reqs': self.eligibility_reqs.to_dict(),
            'active_date_start': self.active_date_start.isoformat(),
            'active_date_end': self.active_date_end.isoformat() if self.active_date_end else None,
        }


_OFFER_LIST_ADAPTER = TypeAdapter(List[PartnerOffer])


def parse_offers(payload: Any) -> List[PartnerOffer]:
    """
    Parse a decoded offer catalog.

    Args:
        payload: List of offer dicts, or a dict with an ``offers`` list

    Returns:
        List of PartnerOffer in catalog order

    Raises:
        IngestValidationError: If any offer is malformed
    """
    if isinstance(payload, dict) and 'offers' in payload:
        payload = payload['offers']

    try:
        offers = _OFFER_LIST_ADAPTER.validate_python(payload)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise IngestValidationError(f"Malformed offer catalog: {errors[0]}", errors) from e

    logger.debug("Parsed %d partner offers", len(offers))
    return offers


def load_offers(path: Union[str, Path]) -> List[PartnerOffer]:
    """Load an offer catalog from a JSON file."""
    return parse_offers(read_json(path))
