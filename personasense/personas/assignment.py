"""
Main Persona Assignment Logic

Evaluates every persona rule in priority order against the detected
signals, keeps all matches, and records a decision tree explaining each
outcome. The first match is the primary persona; Steady is assigned only
when no other persona matches.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from personasense.features.signals import DetectedSignals
from .criteria import (
    DecisionNode,
    check_high_utilization,
    check_low_use,
    check_overdraft_vulnerable,
    check_savings_builder,
    check_subscription_heavy,
    check_variable_income_budgeter,
)
from .priority import PERSONA_LABELS, PersonaType

logger = logging.getLogger(__name__)

PersonaChecker = Callable[[DetectedSignals], DecisionNode]

# Evaluated in this order; position is priority
PERSONA_RULES: Tuple[Tuple[PersonaType, PersonaChecker], ...] = (
    (PersonaType.OVERDRAFT_VULNERABLE, check_overdraft_vulnerable),
    (PersonaType.HIGH_UTILIZATION, check_high_utilization),
    (PersonaType.VARIABLE_INCOME_BUDGETER, check_variable_income_budgeter),
    (PersonaType.SUBSCRIPTION_HEAVY, check_subscription_heavy),
    (PersonaType.SAVINGS_BUILDER, check_savings_builder),
    (PersonaType.LOW_USE, check_low_use),
)

STEADY_REASONING = 'No specific financial patterns detected - maintaining steady state'
STEADY_CRITERIA = 'Default assignment - no other personas matched'


@dataclass(frozen=True)
class PersonaAssignment:
    """A matched persona with the criteria that matched."""
    persona: PersonaType
    reasoning: Tuple[str, ...]
    evidence: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return PERSONA_LABELS[self.persona]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'persona': self.persona.value,
            'label': self.label,
            'reasoning': list(self.reasoning),
            'evidence': dict(self.evidence),
        }


@dataclass(frozen=True)
class DecisionTree:
    """Audit trail of every persona evaluation."""
    signals_detected: Tuple[str, ...]
    personas_evaluated: Tuple[DecisionNode, ...]
    primary_persona: PersonaType
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'signals_detected': list(self.signals_detected),
            'personas_evaluated': [node.to_dict() for node in self.personas_evaluated],
            'primary_persona': self.primary_persona.value,
            'reasoning': self.reasoning,
        }


@dataclass(frozen=True)
class PersonaAssignmentResult:
    """All matched personas, ordered by priority (index 0 is primary)."""
    personas: Tuple[PersonaAssignment, ...]
    decision_tree: DecisionTree

    @property
    def primary(self) -> PersonaAssignment:
        return self.personas[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'personas': [assignment.to_dict() for assignment in self.personas],
            'decision_tree': self.decision_tree.to_dict(),
        }


def assign_personas(signals: DetectedSignals) -> PersonaAssignmentResult:
    """
    Assign personas based on detected signals.

    Every rule is evaluated; a user can match zero, one or many ranked
    personas. Repeated calls with equal signals return equal results.

    Args:
        signals: Signals for both windows

    Returns:
        PersonaAssignmentResult with at least one persona
    """
    nodes: List[DecisionNode] = []
    matched: List[PersonaAssignment] = []

    for persona, check in PERSONA_RULES:
        node = check(signals)
        nodes.append(node)
        if node.matched:
            matched.append(PersonaAssignment(
                persona=persona,
                reasoning=node.criteria,
                evidence=dict(node.evidence)
            ))

    if not matched:
        matched.append(PersonaAssignment(
            persona=PersonaType.STEADY,
            reasoning=(STEADY_REASONING,)
        ))
        nodes.append(DecisionNode(
            persona=PersonaType.STEADY,
            matched=True,
            criteria=(STEADY_CRITERIA,)
        ))

    primary = matched[0]
    decision_tree = DecisionTree(
        signals_detected=tuple(signals.detected_kinds()),
        personas_evaluated=tuple(nodes),
        primary_persona=primary.persona,
        reasoning=_build_reasoning(primary, nodes)
    )

    logger.debug(
        "Assigned personas %s (primary %s)",
        [assignment.persona.value for assignment in matched], primary.persona.value
    )

    return PersonaAssignmentResult(personas=tuple(matched), decision_tree=decision_tree)


def _build_reasoning(primary: PersonaAssignment, nodes: List[DecisionNode]) -> str:
    """One sentence naming the primary persona, its priority and its criteria."""
    node: Optional[DecisionNode] = next((n for n in nodes if n.persona == primary.persona), None)
    if node is None:
        return 'Default assignment - no specific patterns detected'

    priority = nodes.index(node) + 1
    return f"Assigned {primary.persona.value} (priority {priority}) based on: {', '.join(node.criteria)}"
