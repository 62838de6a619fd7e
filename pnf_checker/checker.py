"""
Main entry points for PNF checks.

This module wires configuration, logging and the decision engine together and
exposes plain-dict functions for the HTTP layer and other callers.
"""

from __future__ import annotations
import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from .engine.decision_engine import ClaimDecisionEngine
from .models.decision import Outcome
from .orchestration.flow import DecisionFlow, Question
from .utils.config import Config
from .utils.errors import ConfigurationError
from .utils.logging import clear_context, set_context, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Global instances (initialized on first use)
_config: Optional[Config] = None
_engine: Optional[ClaimDecisionEngine] = None


def _initialize_system(config_path: Optional[str] = None) -> None:
    """
    Initialize configuration, logging and the decision engine.

    Called lazily on first use. When no config file exists the built-in
    defaults are used; a config file with a bad cutover date is fatal.

    Raises:
        ConfigurationError: If the configuration cannot produce an engine
    """
    global _config, _engine

    if _config is not None:
        return

    path = config_path or os.getenv("PNF_CONFIG_PATH", "config.yaml")
    try:
        config = Config.load(path)
        source = path
    except FileNotFoundError:
        config = Config.default()
        source = "defaults"

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file
    )
    if source == "defaults":
        logger.warning(f"Config file '{path}' not found, using built-in defaults")

    _engine = ClaimDecisionEngine.from_config(config)
    _config = config
    logger.info(f"PNF checker initialized from {source}: cutover={config.rules.cutover_date.isoformat()}")


def configure(config: Config) -> None:
    """Use an explicit configuration instead of loading config.yaml."""
    global _config, _engine
    _engine = ClaimDecisionEngine.from_config(config)
    _config = config


def reset_system() -> None:
    """Forget the initialized configuration and engine."""
    global _config, _engine
    _config = None
    _engine = None


def get_engine() -> ClaimDecisionEngine:
    _initialize_system()
    return _engine


def new_flow(walkthrough_id: Optional[str] = None) -> DecisionFlow:
    return DecisionFlow(get_engine(), walkthrough_id=walkthrough_id)


def calculate_cnp(claim_period_start: date, claim_period_end: date) -> Dict[str, Any]:
    """
    Calculate the Claim Notification Period for a claim period.

    Args:
        claim_period_start: Claim period start date
        claim_period_end: Claim period end date

    Returns:
        Dictionary with keys:
            - cnp: {start, end} in ISO format, or None
            - error: Error context dict when the period is invalid, else None
    """
    engine = get_engine()
    period_result = engine.validate_claim_period(claim_period_start, claim_period_end)
    if not period_result.ok:
        return {"cnp": None, "error": period_result.error.to_dict()}

    cnp = engine.compute_cnp(period_result.value).unwrap()
    return {"cnp": cnp.to_dict(), "error": None}


def evaluate_claim(
    last_filing_date: date,
    claim_period_start: date,
    claim_period_end: date,
) -> Dict[str, Any]:
    """
    Decide whether a PNF is required for one claim period.

    Args:
        last_filing_date: Date the previous claim was filed
        claim_period_start: Claim period start date
        claim_period_end: Claim period end date

    Returns:
        Dictionary with keys:
            - outcome: Outcome value, or None on invalid input
            - pnf_required: True/False, or None when a follow-up is needed
            - next_question: Question to ask next when a follow-up is needed
            - cnp: {start, end} in ISO format
            - error: Error context dict when the period is invalid, else None

    Raises:
        ConfigurationError: If the engine cannot evaluate validated inputs
    """
    engine = get_engine()
    period_result = engine.validate_claim_period(claim_period_start, claim_period_end)
    if not period_result.ok:
        return {
            "outcome": None,
            "pnf_required": None,
            "next_question": None,
            "cnp": None,
            "error": period_result.error.to_dict(),
        }

    claim_period = period_result.value
    cnp = engine.compute_cnp(claim_period).unwrap()
    outcome = engine.decide(last_filing_date, claim_period)
    logger.info(
        f"Evaluated filing {last_filing_date.isoformat()} against claim period "
        f"{claim_period.start.isoformat()}..{claim_period.end.isoformat()}: {outcome.value}"
    )

    follow_up = outcome is Outcome.NEEDS_FOLLOW_UP
    return {
        "outcome": outcome.value,
        "pnf_required": None if follow_up else outcome is Outcome.PNF_REQUIRED,
        "next_question": Question.SUBMISSION_TYPE.name if follow_up else None,
        "cnp": cnp.to_dict(),
        "error": None,
    }


def _answer_value(payload: Dict[str, Any]) -> Any:
    """Pick the answer for a question out of a walkthrough payload."""
    if "claim_period_start" in payload or "claim_period_end" in payload:
        return (payload.get("claim_period_start"), payload.get("claim_period_end"))
    if "last_filing_date" in payload:
        return payload.get("last_filing_date")
    return payload.get("answer")


def run_walkthrough(answers: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Replay a sequence of answers through a fresh walkthrough.

    Replay stops at the first answer the current question rejects; the
    returned state is the question the user must answer again.

    Args:
        answers: Ordered payloads, each holding one of:
            - answer: "yes"/"no"/"original"/"amended" or a bool
            - last_filing_date: date the previous claim was filed
            - claim_period_start/claim_period_end: claim period bounds

    Returns:
        Dictionary with keys:
            - walkthrough_id: Identifier used in log records
            - state: Flow state after the last accepted answer
            - answers_consumed: Number of answers accepted
            - prompt: Message to show with the current question, if any
            - error: Error context dict for the rejected answer, else None

    Raises:
        FlowError: If answers continue after a verdict was reached
        ConfigurationError: If the engine cannot evaluate validated inputs
    """
    flow = new_flow()
    set_context(walkthrough_id=flow.walkthrough_id)
    try:
        transition = None
        consumed = 0
        for payload in answers:
            transition = flow.answer(_answer_value(payload))
            if not transition.ok:
                break
            consumed += 1

        state = transition.state if transition else flow.state
        return {
            "walkthrough_id": flow.walkthrough_id,
            "state": state.to_dict(),
            "answers_consumed": consumed,
            "prompt": transition.prompt if transition else None,
            "error": transition.error.to_dict() if transition and transition.error else None,
        }
    except ConfigurationError:
        logger.error("Walkthrough aborted by configuration error", exc_info=True)
        raise
    finally:
        clear_context()
