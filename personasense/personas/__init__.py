"""
Persona Assignment Module

Classifies a user into one or more personas from their detected signals.
Personas are evaluated in a fixed priority order and every match is kept.

Modules:
    - criteria: Persona criteria evaluation functions
    - assignment: Main persona assignment logic and decision tree
    - priority: Persona types, priority order and display names
"""

from .assignment import (
    PERSONA_RULES,
    DecisionTree,
    PersonaAssignment,
    PersonaAssignmentResult,
    assign_personas,
)
from .criteria import DecisionNode
from .priority import PERSONA_DESCRIPTIONS, PERSONA_LABELS, PERSONA_PRIORITY, PersonaType

__all__ = [
    'assign_personas',
    'PERSONA_RULES',
    'DecisionNode',
    'DecisionTree',
    'PersonaAssignment',
    'PersonaAssignmentResult',
    'PersonaType',
    'PERSONA_LABELS',
    'PERSONA_DESCRIPTIONS',
    'PERSONA_PRIORITY',
]
