"""Decision outcome data models."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional


class Outcome(Enum):
    """Result of evaluating a last filing date against a claim period."""

    PNF_REQUIRED = "PNF Required"
    NO_PNF_REQUIRED = "No PNF Required"
    NEEDS_FOLLOW_UP = "Needs Follow-Up"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.NEEDS_FOLLOW_UP


@dataclass(frozen=True)
class Verdict:
    """
    Final answer of a walkthrough.

    Attributes:
        outcome: PNF_REQUIRED or NO_PNF_REQUIRED
        cnp_start: CNP start (the claim period start), when a CNP was computed
        cnp_end: CNP end, i.e. the date the PNF must be submitted by
    """
    outcome: Outcome
    cnp_start: Optional[date] = None
    cnp_end: Optional[date] = None

    def __post_init__(self):
        if not self.outcome.is_terminal:
            raise ValueError(f"{self.outcome.value} is not a terminal verdict")

    @property
    def pnf_required(self) -> bool:
        return self.outcome is Outcome.PNF_REQUIRED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "pnf_required": self.pnf_required,
            "cnp_start": self.cnp_start.isoformat() if self.cnp_start else None,
            "cnp_end": self.cnp_end.isoformat() if self.cnp_end else None,
        }
