"""Tests for the PNF decision rules."""

from datetime import date, timedelta

import pytest

from pnf_checker.engine.decision_engine import (
    ClaimDecisionEngine,
    _engine_for,
    decide,
    secondary_outcome,
)
from pnf_checker.models.claim import ClaimPeriod
from pnf_checker.models.decision import Outcome
from pnf_checker.utils.errors import ConfigurationError, ErrorType

CUTOVER = date(2023, 4, 1)

PNF = Outcome.PNF_REQUIRED
NO_PNF = Outcome.NO_PNF_REQUIRED
FOLLOW_UP = Outcome.NEEDS_FOLLOW_UP


@pytest.fixture
def engine():
    return ClaimDecisionEngine(cutover_date=CUTOVER)


def _period(start, end):
    return ClaimPeriod(start=start, end=end)


def test_engine_requires_cutover():
    with pytest.raises(ConfigurationError) as excinfo:
        ClaimDecisionEngine(cutover_date=None)

    assert excinfo.value.context.error_type == ErrorType.CONFIG_MISSING
    assert excinfo.value.context.recoverable is False


def test_compute_cnp_adds_six_months_to_end(engine):
    result = engine.compute_cnp(_period(date(2023, 1, 15), date(2023, 6, 30)))

    assert result.ok
    assert result.value.start == date(2023, 1, 15)
    assert result.value.end == date(2023, 12, 30)


@pytest.mark.parametrize("start,end", [
    (date(2023, 6, 30), date(2023, 6, 30)),
    (date(2023, 7, 1), date(2023, 6, 30)),
])
def test_compute_cnp_rejects_non_increasing_period(engine, start, end):
    result = engine.compute_cnp(_period(start, end))

    assert not result.ok
    assert result.error.error_type == ErrorType.INVALID_PERIOD
    assert result.error.recoverable is True


def test_validate_claim_period(engine):
    assert engine.validate_claim_period(date(2023, 1, 1), date(2023, 12, 31)).ok
    assert not engine.validate_claim_period(date(2023, 1, 1), date(2023, 1, 1)).ok
    assert not engine.validate_claim_period(None, date(2023, 1, 1)).ok


def test_claim_period_is_valid():
    assert _period(date(2023, 1, 1), date(2023, 1, 2)).is_valid
    assert not _period(date(2023, 1, 1), date(2023, 1, 1)).is_valid
    assert not _period(date(2023, 1, 2), date(2023, 1, 1)).is_valid


def test_cnp_contains_both_edges(engine):
    cnp = engine.compute_cnp(_period(date(2023, 1, 1), date(2023, 6, 30))).value

    assert cnp.contains(date(2023, 1, 1))
    assert cnp.contains(date(2023, 12, 30))
    assert not cnp.contains(date(2022, 12, 31))
    assert not cnp.contains(date(2023, 12, 31))


def test_decide_with_invalid_period_is_fatal(engine):
    with pytest.raises(ConfigurationError):
        engine.decide(date(2023, 1, 1), _period(date(2023, 6, 30), date(2023, 1, 1)))


@pytest.mark.parametrize("last_filing,period,expected", [
    # Before the window
    (date(2022, 12, 31), _period(date(2023, 1, 1), date(2023, 12, 31)), PNF),
    # After the window, filed before the cutover
    (date(2022, 7, 2), _period(date(2021, 1, 1), date(2021, 12, 31)), NO_PNF),
    # After the window, filed after the cutover, transitional claim period
    (date(2024, 1, 1), _period(date(2023, 3, 31), date(2023, 4, 30)), FOLLOW_UP),
    # After the window, filed after the cutover, post-cutover claim period
    (date(2024, 1, 1), _period(date(2023, 4, 1), date(2023, 4, 30)), NO_PNF),
    # Within the window, pre-cutover claim period
    (date(2023, 6, 1), _period(date(2023, 1, 1), date(2023, 12, 31)), FOLLOW_UP),
    # Within the window, post-cutover claim period
    (date(2023, 6, 1), _period(date(2023, 5, 1), date(2024, 4, 30)), NO_PNF),
])
def test_decide_rules(engine, last_filing, period, expected):
    assert engine.decide(last_filing, period) == expected


def test_cnp_start_is_inside_the_window(engine):
    period = _period(date(2023, 1, 1), date(2023, 12, 31))

    assert engine.decide(date(2022, 12, 31), period) == PNF
    assert engine.decide(date(2023, 1, 1), period) == FOLLOW_UP


def test_cnp_end_is_inside_the_window(engine):
    """A filing on the CNP end uses the window rule, not the grandfathering rule."""
    period = _period(date(2021, 6, 1), date(2022, 6, 30))
    cnp_end = engine.compute_cnp(period).value.end
    assert cnp_end == date(2022, 12, 30)

    assert engine.decide(cnp_end, period) == FOLLOW_UP
    assert engine.decide(cnp_end + timedelta(days=1), period) == NO_PNF


def test_stale_filing_floor(engine):
    period = _period(date(2021, 1, 1), date(2023, 12, 30))
    assert engine.compute_cnp(period).value.end == date(2024, 6, 30)

    assert engine.decide(date(2021, 6, 30), period) == PNF
    assert engine.decide(date(2021, 7, 1), period) == FOLLOW_UP


def test_month_end_claim_period_rolls_cnp_end_forward(engine):
    """A claim period ending on the 31st gives a CNP ending on the 1st, six months on."""
    period = _period(date(2021, 4, 1), date(2022, 3, 31))
    assert engine.compute_cnp(period).value.end == date(2022, 10, 1)

    assert engine.decide(date(2022, 10, 1), period) == FOLLOW_UP
    assert engine.decide(date(2022, 10, 2), period) == NO_PNF


def test_cutover_partition(engine):
    last_filing = date(2024, 1, 1)

    transitional = _period(date(2023, 3, 31), date(2023, 4, 30))
    post_cutover = _period(date(2023, 4, 1), date(2023, 4, 30))

    assert engine.decide(last_filing, transitional) == FOLLOW_UP
    assert engine.decide(last_filing, post_cutover) == NO_PNF


def test_outcomes_follow_rule_order_as_filing_date_increases(engine):
    """Sweeping the filing date changes outcome only at the rule boundaries."""
    period = _period(date(2020, 1, 1), date(2021, 12, 31))
    cnp = engine.compute_cnp(period).value
    assert cnp.end == date(2022, 7, 1)

    changes = []
    day = date(2019, 6, 1)
    previous = None
    while day <= date(2024, 6, 1):
        outcome = engine.decide(day, period)
        if outcome != previous:
            changes.append((day, outcome))
            previous = outcome
        day += timedelta(days=1)

    assert changes == [
        (date(2019, 6, 1), PNF),
        (cnp.start, FOLLOW_UP),
        (cnp.end + timedelta(days=1), NO_PNF),
        (CUTOVER, FOLLOW_UP),
    ]


def test_decide_is_idempotent(engine):
    period = _period(date(2023, 1, 1), date(2023, 12, 31))

    first = engine.decide(date(2023, 2, 1), period)
    second = engine.decide(date(2023, 2, 1), period)

    assert first == second


def test_module_level_decide_takes_cutover():
    period = _period(date(2020, 1, 1), date(2020, 12, 31))
    last_filing = date(2020, 6, 1)

    assert decide(last_filing, period, CUTOVER) == FOLLOW_UP
    assert decide(last_filing, period, date(2019, 1, 1)) == NO_PNF


def test_module_level_engines_are_shared_per_cutover():
    assert _engine_for(CUTOVER) is _engine_for(CUTOVER)
    assert _engine_for(CUTOVER) is not _engine_for(date(2019, 1, 1))


@pytest.mark.parametrize("last_filing,start,end,expected", [
    (date(2021, 6, 30), date(2021, 1, 1), date(2023, 12, 30), PNF),
    (date(2021, 7, 1), date(2021, 1, 1), date(2023, 12, 30), FOLLOW_UP),
    (date(2024, 7, 1), date(2021, 1, 1), date(2023, 12, 30), PNF),
    (date(2023, 5, 1), date(2023, 3, 31), date(2023, 4, 30), FOLLOW_UP),
    (date(2023, 5, 1), date(2023, 4, 1), date(2023, 4, 30), NO_PNF),
])
def test_secondary_outcome(last_filing, start, end, expected):
    assert secondary_outcome(last_filing, start, end, CUTOVER) == expected


def test_secondary_outcome_matches_decide_inside_window(engine):
    period = _period(date(2021, 1, 1), date(2023, 12, 30))
    for last_filing in (date(2021, 6, 30), date(2021, 7, 1), date(2024, 6, 30)):
        assert engine.secondary_outcome(last_filing, period.start, period.end) == engine.decide(last_filing, period)


@pytest.mark.parametrize("filing,today,expected", [
    (date(2024, 1, 1), date(2024, 6, 15), True),
    (date(2023, 12, 15), date(2024, 6, 15), True),
    (date(2023, 12, 14), date(2024, 6, 15), False),
    (None, date(2024, 6, 15), False),
])
def test_is_filing_relevant(engine, filing, today, expected):
    assert engine.is_filing_relevant(filing, today) is expected


def test_is_filing_relevant_checks_lower_bound():
    engine = ClaimDecisionEngine(cutover_date=CUTOVER, relevance_window_years=0)

    assert engine.is_filing_relevant(date(2024, 6, 14), date(2024, 6, 15)) is False
    assert engine.is_filing_relevant(date(2024, 6, 15), date(2024, 6, 15)) is True


def test_verdict_for_attaches_cnp(engine):
    period = _period(date(2023, 1, 1), date(2023, 12, 31))

    verdict = engine.verdict_for(PNF, period)

    assert verdict.cnp_start == date(2023, 1, 1)
    assert verdict.cnp_end == date(2024, 7, 1)
    assert verdict.to_dict()["cnp_end"] == "2024-07-01"

    with pytest.raises(ValueError):
        engine.verdict_for(FOLLOW_UP, period)
