"""Prenotification form (PNF) checker for R&D tax relief claims."""

from .checker import calculate_cnp, evaluate_claim, get_engine, new_flow, run_walkthrough

__all__ = [
    'calculate_cnp',
    'evaluate_claim',
    'get_engine',
    'new_flow',
    'run_walkthrough',
]
