"""PNF decision rules."""

from .decision_engine import ClaimDecisionEngine, decide, secondary_outcome

__all__ = ['ClaimDecisionEngine', 'decide', 'secondary_outcome']
