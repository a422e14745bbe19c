"""
Exceptions raised by personasense.

Signal detection, persona assignment and offer matching never raise on
well-formed input. The only failure category is malformed input, which is
rejected at the ingest boundary before the engine runs.
"""

from typing import List, Optional


class PersonaSenseError(Exception):
    """Base class for all personasense errors."""


class IngestValidationError(PersonaSenseError, ValueError):
    """Input record set violates a structural invariant."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]
