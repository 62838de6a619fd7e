"""FastAPI surface for the PNF checker."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pnf_checker.checker import calculate_cnp, evaluate_claim, run_walkthrough
from pnf_checker.utils.errors import ConfigurationError, FlowError


APP_TITLE = "PNF Checker - Do I need a prenotification form?"

logger = logging.getLogger(__name__)


class ClaimPeriodRequest(BaseModel):
    """Claim period bounds in YYYY-MM-DD format."""

    claim_period_start: date
    claim_period_end: date


class EvaluateRequest(ClaimPeriodRequest):
    """Last filing date plus the claim period to check it against."""

    last_filing_date: date


class WalkthroughAnswer(BaseModel):
    """One answer; only the field matching the current question is set."""

    answer: Optional[Union[bool, str]] = None
    last_filing_date: Optional[date] = None
    claim_period_start: Optional[date] = None
    claim_period_end: Optional[date] = None


class WalkthroughRequest(BaseModel):
    answers: List[WalkthroughAnswer] = Field(default_factory=list)


app = FastAPI(title=APP_TITLE)


def _validation_failure(payload: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=422, content=payload)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(_request, exc: ConfigurationError) -> JSONResponse:
    logger.error(f"Configuration failure: {exc}")
    return JSONResponse(status_code=500, content={"error": exc.to_dict()})


@app.post("/api/pnf/cnp")
async def claim_notification_period(request: ClaimPeriodRequest) -> JSONResponse:
    result = calculate_cnp(request.claim_period_start, request.claim_period_end)
    if result["error"]:
        return _validation_failure(result)
    return JSONResponse(result)


@app.post("/api/pnf/evaluate")
async def evaluate(request: EvaluateRequest) -> JSONResponse:
    result = evaluate_claim(
        last_filing_date=request.last_filing_date,
        claim_period_start=request.claim_period_start,
        claim_period_end=request.claim_period_end,
    )
    if result["error"]:
        return _validation_failure(result)
    return JSONResponse(result)


@app.post("/api/pnf/walkthrough")
async def walkthrough(request: WalkthroughRequest) -> JSONResponse:
    """Replay answers; a rejected answer is reported with the question to retry."""

    answers = [item.model_dump(exclude_none=True) for item in request.answers]
    try:
        result = run_walkthrough(answers)
    except FlowError as exc:
        raise HTTPException(status_code=409, detail=exc.to_dict()) from exc

    if result["error"]:
        return _validation_failure(result)
    return JSONResponse(result)


@app.get("/healthz")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    from pnf_checker.utils.config import Config

    try:
        server_config = Config.load().server
    except FileNotFoundError:
        server_config = Config.default().server
    uvicorn.run(app, host=server_config.host, port=server_config.port)
