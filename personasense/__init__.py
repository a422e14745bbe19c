"""
personasense - Financial signal detection and persona assignment.

Derives behavioral signals from a user's accounts, transactions and
liabilities, assigns personas with a full decision trail, and matches
partner offers against eligibility metrics.
"""

__version__ = "0.1.0"

from personasense.assessment import Assessment, build_assessment
from personasense.exceptions import IngestValidationError, PersonaSenseError
from personasense.features.signals import DetectedSignals, detect_all_signals
from personasense.personas.assignment import PersonaAssignmentResult, assign_personas
from personasense.recommend.eligibility import EligibilityMetrics, calculate_eligibility_metrics
from personasense.recommend.matcher import match_offers

__all__ = [
    'Assessment',
    'build_assessment',
    'DetectedSignals',
    'detect_all_signals',
    'PersonaAssignmentResult',
    'assign_personas',
    'EligibilityMetrics',
    'calculate_eligibility_metrics',
    'match_offers',
    'PersonaSenseError',
    'IngestValidationError',
]
