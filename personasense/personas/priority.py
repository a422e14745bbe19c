"""
Persona Priority Order

Personas are evaluated in a fixed order and every match is kept. Order is
rank: the first matched persona is the primary one.

Priority Order:
1. Overdraft-Vulnerable (most urgent financial risk)
2. High Utilization (credit stress)
3. Variable Income Budgeter (cash flow instability)
4. Subscription-Heavy (actionable savings opportunity)
5. Savings Builder (positive reinforcement)
6. Low-Use (little banking activity)
7. Steady (default when nothing else matches)
"""

from enum import Enum
from typing import Dict


class PersonaType(str, Enum):
    OVERDRAFT_VULNERABLE = 'overdraft_vulnerable'
    HIGH_UTILIZATION = 'high_utilization'
    VARIABLE_INCOME_BUDGETER = 'variable_income_budgeter'
    SUBSCRIPTION_HEAVY = 'subscription_heavy'
    SAVINGS_BUILDER = 'savings_builder'
    LOW_USE = 'low_use'
    STEADY = 'steady'


# Persona priority mapping (lower number = higher priority)
PERSONA_PRIORITY: Dict[PersonaType, int] = {
    persona: index for index, persona in enumerate(PersonaType, start=1)
}

# Persona display names
PERSONA_LABELS: Dict[PersonaType, str] = {
    PersonaType.OVERDRAFT_VULNERABLE: 'Overdraft-Vulnerable',
    PersonaType.HIGH_UTILIZATION: 'High Utilization',
    PersonaType.VARIABLE_INCOME_BUDGETER: 'Variable Income Budgeter',
    PersonaType.SUBSCRIPTION_HEAVY: 'Subscription-Heavy',
    PersonaType.SAVINGS_BUILDER: 'Savings Builder',
    PersonaType.LOW_USE: 'Low-Use',
    PersonaType.STEADY: 'Steady',
}

PERSONA_DESCRIPTIONS: Dict[PersonaType, str] = {
    PersonaType.OVERDRAFT_VULNERABLE: 'Recent overdrafts or insufficient-funds fees on checking.',
    PersonaType.HIGH_UTILIZATION: 'Credit cards carry high balances, interest or missed payments.',
    PersonaType.VARIABLE_INCOME_BUDGETER: 'Income arrives irregularly and the cash buffer is thin.',
    PersonaType.SUBSCRIPTION_HEAVY: 'Several recurring subscriptions take a notable share of spend.',
    PersonaType.SAVINGS_BUILDER: 'Savings are growing while credit use stays low.',
    PersonaType.LOW_USE: 'Few payments to few merchants over the last six months.',
    PersonaType.STEADY: 'No specific financial patterns stand out.',
}
