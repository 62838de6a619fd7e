"""Walkthrough orchestration for the PNF questions."""

from .flow import DecisionFlow, FlowState, Question, SubmissionType, Transition, YesNo

__all__ = [
    "DecisionFlow",
    "FlowState",
    "Question",
    "SubmissionType",
    "Transition",
    "YesNo"
]
