"""
Recommendation Module

Eligibility metrics and partner offer matching.

Modules:
    - eligibility: Signals to flat eligibility metrics
    - offers: Partner offer and requirement definitions, catalog loading
    - matcher: Offer filtering, ranking and predatory-offer flags
"""

from .eligibility import EligibilityMetrics, calculate_eligibility_metrics, estimate_monthly_expenses
from .matcher import (
    EligibilityResult,
    check_offer_eligibility,
    is_predatory_offer,
    match_offers,
    select_offer,
)
from .offers import EligibilityRequirements, PartnerOffer, load_offers, parse_offers

__all__ = [
    'EligibilityMetrics',
    'calculate_eligibility_metrics',
    'estimate_monthly_expenses',
    'EligibilityResult',
    'check_offer_eligibility',
    'match_offers',
    'select_offer',
    'is_predatory_offer',
    'EligibilityRequirements',
    'PartnerOffer',
    'load_offers',
    'parse_offers',
]
