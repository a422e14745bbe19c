"""
Shared signal types: time windows and the Signal base class.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TimeWindow(str, Enum):
    """Trailing period a signal is computed over."""
    DAYS_30 = '30d'
    DAYS_180 = '180d'

    @property
    def days(self) -> int:
        return 30 if self is TimeWindow.DAYS_30 else 180


@dataclass(frozen=True)
class Signal:
    """
    A detector verdict for one window.

    Subclasses narrow ``evidence`` to a detector-specific dataclass that
    exposes every value the ``detected`` decision was computed from.
    """
    detected: bool
    evidence: Any
    window: TimeWindow

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'detected': self.detected,
            'evidence': self.evidence.to_dict(),
            'window': self.window.value,
        }
