"""Temporal rules deciding whether a prenotification form is required."""

import logging
from datetime import date
from functools import lru_cache
from typing import Optional

from ..models.claim import ClaimNotificationPeriod, ClaimPeriod
from ..models.decision import Outcome, Verdict
from ..utils.config import Config, DEFAULT_CNP_EXTENSION_MONTHS, DEFAULT_RELEVANCE_WINDOW_YEARS
from ..utils.dates import add_days, add_months, subtract_years, today_utc
from ..utils.errors import (
    ConfigurationError,
    Result,
    handle_configuration_error,
    invalid_period,
)

logger = logging.getLogger(__name__)


class ClaimDecisionEngine:
    """
    Evaluates a last filing date against a claim period.

    Provides functions for:
    - Claim Notification Period (CNP) derivation
    - Filing relevance checks against today's date
    - The ordered PNF rules, including the legacy follow-up evaluation

    All methods are pure; the only state is the immutable rule constants
    given at construction.
    """

    def __init__(
        self,
        cutover_date: Optional[date],
        cnp_extension_months: int = DEFAULT_CNP_EXTENSION_MONTHS,
        relevance_window_years: int = DEFAULT_RELEVANCE_WINDOW_YEARS
    ):
        """
        Initialize the decision engine.

        Args:
            cutover_date: Legal transition date between old and new regimes
            cnp_extension_months: Months added to the claim period end for the CNP
            relevance_window_years: Years before the CNP end a filing stays relevant

        Raises:
            ConfigurationError: If the cutover date is not set
        """
        if cutover_date is None:
            logger.error("Cannot build decision engine without a cutover date")
            raise ConfigurationError.cutover_missing()

        self._cutover_date = cutover_date
        self._cnp_extension_months = cnp_extension_months
        self._relevance_window_years = relevance_window_years

        logger.debug(
            f"Initialized ClaimDecisionEngine: cutover={cutover_date.isoformat()}, "
            f"cnp_extension_months={cnp_extension_months}, "
            f"relevance_window_years={relevance_window_years}"
        )

    @classmethod
    def from_config(cls, config: Config) -> "ClaimDecisionEngine":
        return cls(
            cutover_date=config.rules.cutover_date,
            cnp_extension_months=config.rules.cnp_extension_months,
            relevance_window_years=config.rules.relevance_window_years
        )

    @property
    def cutover_date(self) -> date:
        return self._cutover_date

    # Claim period and CNP

    def validate_claim_period(
        self,
        start: Optional[date],
        end: Optional[date]
    ) -> Result[ClaimPeriod]:
        """
        Build a claim period, checking that it starts before it ends.

        Args:
            start: Claim period start date
            end: Claim period end date

        Returns:
            Result holding the ClaimPeriod, or an INVALID_PERIOD error context
        """
        if start is None or end is None:
            logger.warning(f"Incomplete claim period: start={start}, end={end}")
            return Result.failure(invalid_period(start, end))

        period = ClaimPeriod(start=start, end=end)
        if not period.is_valid:
            logger.warning(f"Invalid claim period: start={start}, end={end}")
            return Result.failure(invalid_period(start, end))
        return Result.success(period)

    def compute_cnp(self, claim_period: ClaimPeriod) -> Result[ClaimNotificationPeriod]:
        """
        Derive the Claim Notification Period for a claim period.

        Args:
            claim_period: Claim period with start before end

        Returns:
            Result holding the CNP, or an INVALID_PERIOD error context
        """
        if not claim_period.is_valid:
            logger.warning(
                f"compute_cnp: claim period start {claim_period.start} "
                f"is not before end {claim_period.end}"
            )
            return Result.failure(invalid_period(claim_period.start, claim_period.end))

        cnp = ClaimNotificationPeriod(
            start=claim_period.start,
            end=self._cnp_end(claim_period.end)
        )
        logger.debug(f"Computed CNP {cnp.start} to {cnp.end}")
        return Result.success(cnp)

    def is_filing_relevant(
        self,
        filing_date: Optional[date],
        today: Optional[date] = None
    ) -> bool:
        """
        Check whether a filing date still matters for a claim made today.

        A filing is relevant when the CNP it implies (filing date plus the CNP
        extension) has not expired and the filing is within the relevance
        window before today.

        Args:
            filing_date: Date the last R&D claim was filed
            today: Reference date, defaults to the current UTC date

        Returns:
            True if both conditions hold, False otherwise
        """
        if filing_date is None:
            return False
        today = today or today_utc()

        try:
            assumed_cnp_end = add_months(filing_date, self._cnp_extension_months)
            min_relevant_date = subtract_years(today, self._relevance_window_years)
        except (OverflowError, ValueError) as e:
            logger.warning(f"is_filing_relevant: bound could not be computed: {e}")
            return False

        return filing_date >= min_relevant_date and assumed_cnp_end >= today

    # Rules

    def decide(self, last_filing_date: date, claim_period: ClaimPeriod) -> Outcome:
        """
        Apply the PNF rules in order; the first matching rule wins.

        Filing dates equal to either CNP edge fall through to the
        within-window rule.

        Args:
            last_filing_date: Date the previous claim was filed
            claim_period: Claim period being evaluated

        Returns:
            PNF_REQUIRED, NO_PNF_REQUIRED or NEEDS_FOLLOW_UP

        Raises:
            ConfigurationError: If the claim period does not yield a CNP
        """
        cnp_result = self.compute_cnp(claim_period)
        if not cnp_result.ok:
            logger.error("decide called with a claim period that yields no CNP")
            raise ConfigurationError(cnp_result.error)
        cnp = cnp_result.value

        if last_filing_date < cnp.start:
            return self._matched("before-window", Outcome.PNF_REQUIRED)

        if not cnp.contains(last_filing_date):
            if last_filing_date < self._cutover_date:
                return self._matched("after-window pre-cutover filing", Outcome.NO_PNF_REQUIRED)
            if claim_period.start < self._cutover_date:
                return self._matched("after-window transitional claim period", Outcome.NEEDS_FOLLOW_UP)
            return self._matched("after-window post-cutover claim period", Outcome.NO_PNF_REQUIRED)

        if last_filing_date < self._window_floor(cnp.end):
            return self._matched("within-window stale filing", Outcome.PNF_REQUIRED)

        return self._matched("within-window", self._cutover_branch(claim_period.start))

    def secondary_outcome(
        self,
        last_filing_date: date,
        claim_period_start: date,
        claim_period_end: date
    ) -> Outcome:
        """
        Legacy follow-up evaluation.

        Only checks the stale-filing floor, the CNP end and the cutover
        branch; filings after the CNP end always need a PNF here.

        Args:
            last_filing_date: Date the previous claim was filed
            claim_period_start: Claim period start date
            claim_period_end: Claim period end date

        Returns:
            PNF_REQUIRED, NO_PNF_REQUIRED or NEEDS_FOLLOW_UP
        """
        cnp_end = self._cnp_end(claim_period_end)

        if last_filing_date < self._window_floor(cnp_end) or last_filing_date > cnp_end:
            return self._matched("legacy outside relevance window", Outcome.PNF_REQUIRED)

        return self._matched("legacy within relevance window", self._cutover_branch(claim_period_start))

    def verdict_for(self, outcome: Outcome, claim_period: ClaimPeriod) -> Verdict:
        """
        Attach CNP bounds to a terminal outcome.

        Raises:
            ValueError: If the outcome is NEEDS_FOLLOW_UP
        """
        cnp = self.compute_cnp(claim_period).unwrap()
        return Verdict(outcome=outcome, cnp_start=cnp.start, cnp_end=cnp.end)

    # Helpers

    def _cnp_end(self, claim_period_end: date) -> date:
        try:
            return add_months(claim_period_end, self._cnp_extension_months)
        except (OverflowError, ValueError) as e:
            handle_configuration_error(
                e,
                "CNP end calculation",
                logger,
                details={"claim_period_end": claim_period_end.isoformat()}
            )

    def _window_floor(self, cnp_end: date) -> date:
        """First day a filing counts as relevant for a CNP ending on ``cnp_end``."""
        try:
            return add_days(subtract_years(cnp_end, self._relevance_window_years), 1)
        except (OverflowError, ValueError) as e:
            handle_configuration_error(
                e,
                "relevance window calculation",
                logger,
                details={"cnp_end": cnp_end.isoformat()}
            )

    def _cutover_branch(self, claim_period_start: date) -> Outcome:
        if claim_period_start < self._cutover_date:
            return Outcome.NEEDS_FOLLOW_UP
        return Outcome.NO_PNF_REQUIRED

    @staticmethod
    def _matched(rule: str, outcome: Outcome) -> Outcome:
        logger.debug(f"Rule matched: {rule} -> {outcome.value}")
        return outcome


@lru_cache(maxsize=8)
def _engine_for(cutover: date) -> ClaimDecisionEngine:
    """Engine with default rule constants, shared per cutover date."""
    return ClaimDecisionEngine(cutover_date=cutover)


def decide(last_filing_date: date, claim_period: ClaimPeriod, cutover: date) -> Outcome:
    """Evaluate the PNF rules with an explicit cutover date."""
    return _engine_for(cutover).decide(last_filing_date, claim_period)


def secondary_outcome(
    last_filing_date: date,
    claim_period_start: date,
    claim_period_end: date,
    cutover: date
) -> Outcome:
    """Legacy follow-up evaluation with an explicit cutover date."""
    return _engine_for(cutover).secondary_outcome(
        last_filing_date, claim_period_start, claim_period_end
    )
