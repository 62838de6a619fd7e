"""Claim period data models."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict


@dataclass(frozen=True)
class ClaimPeriod:
    """
    Start and end dates bounding the claim being evaluated.

    Attributes:
        start: First day of the claim period
        end: Last day of the claim period (must be after start)
    """
    start: date
    end: date

    @property
    def is_valid(self) -> bool:
        return self.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class ClaimNotificationPeriod:
    """
    Window during which a PNF filing remains valid for a claim period.

    Attributes:
        start: Same as the claim period start
        end: Claim period end plus the CNP extension (six calendar months)
    """
    start: date
    end: date

    def contains(self, value: date) -> bool:
        """Inclusive at both edges."""
        return self.start <= value <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}
