"""Data models for claim periods and decisions."""

from .claim import ClaimPeriod, ClaimNotificationPeriod
from .decision import Outcome, Verdict

__all__ = ['ClaimPeriod', 'ClaimNotificationPeriod', 'Outcome', 'Verdict']
