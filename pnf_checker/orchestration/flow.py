"""Question-by-question walkthrough deciding whether a PNF is needed."""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..engine.decision_engine import ClaimDecisionEngine
from ..models.claim import ClaimNotificationPeriod, ClaimPeriod
from ..models.decision import Outcome, Verdict
from ..utils.errors import ErrorContext, FlowError, invalid_answer, invalid_date

logger = logging.getLogger(__name__)

EARLIER_CLAIM_PROMPT = "Please enter the date for the claim made before the one you just described"


class Question(Enum):
    """Questions of the walkthrough, by display index."""

    EVER_CLAIMED = 0
    LAST_FILING_DATE = 1
    CLAIM_PERIOD = 2
    SUBMISSION_TYPE = 3
    PRIOR_CLAIM_CHECK = 4


class YesNo(Enum):
    YES = "yes"
    NO = "no"


class SubmissionType(Enum):
    ORIGINAL = "original"
    AMENDED = "amended"


@dataclass
class FlowState:
    """
    Accumulated answers of one walkthrough.

    Attributes:
        question: Question currently asked, None once a verdict is reached
        last_filing_date: Date the previous claim was filed
        claim_period: Claim period being evaluated
        cnp: Claim Notification Period derived from claim_period
        verdict: Terminal verdict, if reached
    """
    question: Optional[Question] = Question.EVER_CLAIMED
    last_filing_date: Optional[date] = None
    claim_period: Optional[ClaimPeriod] = None
    cnp: Optional[ClaimNotificationPeriod] = None
    verdict: Optional[Verdict] = None

    @property
    def is_terminal(self) -> bool:
        return self.verdict is not None

    @property
    def question_index(self) -> Optional[int]:
        return self.question.value if self.question is not None else None

    def clear_answers(self) -> None:
        self.last_filing_date = None
        self.claim_period = None
        self.cnp = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question.name if self.question else None,
            "question_index": self.question_index,
            "terminal": self.is_terminal,
            "last_filing_date": self.last_filing_date.isoformat() if self.last_filing_date else None,
            "claim_period": self.claim_period.to_dict() if self.claim_period else None,
            "cnp": self.cnp.to_dict() if self.cnp else None,
            "verdict": self.verdict.to_dict() if self.verdict else None,
        }


@dataclass(frozen=True)
class Transition:
    """
    Outcome of handling one answer.

    Attributes:
        state: Snapshot of the flow state after the answer
        error: Recoverable validation failure; the flow stayed on its question
        prompt: Optional message the caller should show with the next question
    """
    state: FlowState
    error: Optional[ErrorContext] = None
    prompt: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "error": self.error.to_dict() if self.error else None,
            "prompt": self.prompt,
        }


ClaimPeriodAnswer = Union[ClaimPeriod, Tuple[Optional[date], Optional[date]], None]


class DecisionFlow:
    """
    State machine sequencing the five walkthrough questions.

    Each answer is dispatched to the handler of the current question. A
    handler either moves to another question, ends the walkthrough with a
    verdict, or stays put and reports a recoverable error.
    """

    def __init__(self, engine: ClaimDecisionEngine, walkthrough_id: Optional[str] = None):
        self.engine = engine
        self.walkthrough_id = walkthrough_id or f"WT-{uuid.uuid4().hex[:8].upper()}"
        self._state = FlowState()
        self._handlers: Dict[Question, Callable[[Any], Transition]] = {
            Question.EVER_CLAIMED: self._on_ever_claimed,
            Question.LAST_FILING_DATE: self._on_last_filing_date,
            Question.CLAIM_PERIOD: self._on_claim_period,
            Question.SUBMISSION_TYPE: self._on_submission_type,
            Question.PRIOR_CLAIM_CHECK: self._on_prior_claim_check,
        }
        self._log(logging.INFO, "Walkthrough started")

    @property
    def state(self) -> FlowState:
        """Copy of the current state."""
        return replace(self._state)

    @property
    def current_question(self) -> Optional[Question]:
        return self._state.question

    def restart(self) -> Transition:
        """Discard every answer and return to the first question."""
        self._state = FlowState()
        self._log(logging.INFO, "Walkthrough restarted")
        return self._transition()

    def answer(self, value: Any) -> Transition:
        """
        Handle an answer to the current question.

        Args:
            value: Yes/no token, submission type, a date, or a
                (start, end) claim period, depending on the question

        Returns:
            Transition with the new state, or the unchanged state and an error

        Raises:
            FlowError: If the walkthrough already reached a verdict
        """
        if self._state.is_terminal:
            raise FlowError.already_terminal(self._state.verdict.outcome.value)
        return self._handlers[self._state.question](value)

    # Named entry points for each question

    def answer_ever_claimed(self, value: Union[YesNo, bool, str]) -> Transition:
        return self.answer(value)

    def submit_last_filing_date(self, value: Optional[date]) -> Transition:
        return self.answer(value)

    def submit_claim_period(self, start: Optional[date], end: Optional[date]) -> Transition:
        return self.answer((start, end))

    def answer_submission_type(self, value: Union[SubmissionType, str]) -> Transition:
        return self.answer(value)

    def answer_prior_claim(self, value: Union[YesNo, bool, str]) -> Transition:
        return self.answer(value)

    # Handlers

    def _on_ever_claimed(self, value: Any) -> Transition:
        answer = _coerce_yes_no(value)
        if answer is None:
            return self._reject(invalid_answer(Question.EVER_CLAIMED.name, value))
        if answer is YesNo.NO:
            return self._finish(Verdict(outcome=Outcome.PNF_REQUIRED))
        self._state.clear_answers()
        return self._goto(Question.LAST_FILING_DATE)

    def _on_last_filing_date(self, value: Any) -> Transition:
        if not _is_calendar_date(value):
            return self._reject(invalid_date("Please enter the date you filed the last claim."))
        self._state.last_filing_date = value
        self._state.claim_period = None
        self._state.cnp = None
        return self._goto(Question.CLAIM_PERIOD)

    def _on_claim_period(self, value: ClaimPeriodAnswer) -> Transition:
        if isinstance(value, ClaimPeriod):
            start, end = value.start, value.end
        elif isinstance(value, tuple) and len(value) == 2:
            start, end = value
        elif value is None:
            start = end = None
        else:
            return self._reject(invalid_answer(Question.CLAIM_PERIOD.name, value))

        if not _is_calendar_date(start):
            return self._reject(invalid_date("Please enter the claim period start date."))
        if not _is_calendar_date(end):
            return self._reject(invalid_date("Please enter the claim period end date."))

        period_result = self.engine.validate_claim_period(start, end)
        if not period_result.ok:
            return self._reject(period_result.error)

        claim_period = period_result.value
        self._state.claim_period = claim_period
        self._state.cnp = self.engine.compute_cnp(claim_period).unwrap()

        outcome = self.engine.decide(self._state.last_filing_date, claim_period)
        if outcome is Outcome.NEEDS_FOLLOW_UP:
            return self._goto(Question.SUBMISSION_TYPE)
        return self._finish(self.engine.verdict_for(outcome, claim_period))

    def _on_submission_type(self, value: Any) -> Transition:
        submission = _coerce_enum(SubmissionType, value)
        if submission is None:
            return self._reject(invalid_answer(Question.SUBMISSION_TYPE.name, value))
        if submission is SubmissionType.ORIGINAL:
            return self._finish(Verdict(outcome=Outcome.NO_PNF_REQUIRED))
        return self._goto(Question.PRIOR_CLAIM_CHECK)

    def _on_prior_claim_check(self, value: Any) -> Transition:
        answer = _coerce_yes_no(value)
        if answer is None:
            return self._reject(invalid_answer(Question.PRIOR_CLAIM_CHECK.name, value))
        if answer is YesNo.NO:
            return self._finish(Verdict(outcome=Outcome.PNF_REQUIRED))
        self._state.clear_answers()
        return self._goto(Question.LAST_FILING_DATE, prompt=EARLIER_CLAIM_PROMPT)

    # Transition helpers

    def _goto(self, question: Question, prompt: Optional[str] = None) -> Transition:
        self._log(logging.DEBUG, f"{self._state.question.name} -> {question.name}")
        self._state.question = question
        return self._transition(prompt=prompt)

    def _finish(self, verdict: Verdict) -> Transition:
        self._log(logging.INFO, f"Verdict reached at {self._state.question.name}: {verdict.outcome.value}")
        self._state.question = None
        self._state.verdict = verdict
        return self._transition()

    def _reject(self, error: ErrorContext) -> Transition:
        self._log(logging.WARNING, f"Stayed on {self._state.question.name}: {error.message}")
        return self._transition(error=error)

    def _transition(self, error: Optional[ErrorContext] = None, prompt: Optional[str] = None) -> Transition:
        return Transition(state=self.state, error=error, prompt=prompt)

    def _log(self, level: int, message: str) -> None:
        logger.log(level, message, extra={"walkthrough_id": self.walkthrough_id})


def _is_calendar_date(value: Any) -> bool:
    # datetime is a date subclass but carries a time component
    return isinstance(value, date) and not isinstance(value, datetime)


def _coerce_yes_no(value: Any) -> Optional[YesNo]:
    if isinstance(value, bool):
        return YesNo.YES if value else YesNo.NO
    return _coerce_enum(YesNo, value)


def _coerce_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None
