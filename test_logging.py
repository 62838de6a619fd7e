"""Tests for the logging context helpers."""

import logging

from pnf_checker.utils import logging as pnf_logging
from pnf_checker.utils.logging import ContextFilter, clear_context, set_context


def _record():
    return logging.LogRecord("pnf", logging.INFO, __file__, 1, "message", None, None)


def test_filter_fills_default_walkthrough_id():
    record = _record()

    assert ContextFilter().filter(record) is True
    assert record.walkthrough_id == "-"


def test_filter_keeps_explicit_extra():
    record = _record()
    record.walkthrough_id = "WT-0001"

    ContextFilter().filter(record)

    assert record.walkthrough_id == "WT-0001"


def test_set_context_stamps_records_until_cleared():
    set_context(walkthrough_id="WT-1A2B3C4D")
    stamped = _record()
    pnf_logging._context_filter.filter(stamped)

    clear_context()
    plain = _record()
    pnf_logging._context_filter.filter(plain)

    assert stamped.walkthrough_id == "WT-1A2B3C4D"
    assert plain.walkthrough_id == "-"
