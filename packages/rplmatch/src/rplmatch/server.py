"""FastAPI server exposing column detection and fuzzy lookup."""

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from rplmatch.columns import detect_fields, discover_fields
from rplmatch.config import MatchConfig
from rplmatch.errors import CallerContractViolation
from rplmatch.insights import Summarizer
from rplmatch.io import tier_counts
from rplmatch.session import MatchSession, run_session
from rplmatch.types import FieldSelector

log = structlog.get_logger()

CellValue = str | int | float | bool | None


class ColumnsRequest(BaseModel):
    records: list[dict[str, CellValue]]


class ColumnsResponse(BaseModel):
    fields: list[str]
    customer_field: str | None
    reference_field: str | None


class MatchRequest(BaseModel):
    """Request body for a fuzzy lookup run."""

    records: list[dict[str, CellValue]]
    customer_field: str | None = None
    reference_field: str | None = None
    insights: bool = False


class MatchResultModel(BaseModel):
    customer_text: str
    original_reference_text: str
    matched_reference_text: str
    similarity_percent: float
    tier: str
    source_index: int


class MatchResponse(BaseModel):
    customer_field: str
    reference_field: str
    results: list[MatchResultModel]
    counts: dict[str, int]
    insights: str | None = None


def create_app(
    config: MatchConfig | None = None,
    summarizer: Summarizer | None = None,
) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(title="RPL Fuzzy Lookup")
    config = config or MatchConfig()

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/columns")
    async def columns(req: ColumnsRequest) -> ColumnsResponse:
        """List fields and the auto-detected column mapping."""
        fields = discover_fields(req.records)
        if not fields:
            return ColumnsResponse(fields=[], customer_field=None, reference_field=None)
        selector = detect_fields(fields)
        return ColumnsResponse(
            fields=fields,
            customer_field=selector.customer_field,
            reference_field=selector.reference_field,
        )

    @app.post("/api/match")
    def run_match(req: MatchRequest) -> MatchResponse:
        """Match all records; missing field names fall back to auto-detection."""
        fields = discover_fields(req.records)
        try:
            detected = detect_fields(fields) if fields else None
            selector = FieldSelector(
                customer_field=req.customer_field or (detected.customer_field if detected else ""),
                reference_field=req.reference_field or (detected.reference_field if detected else ""),
            )
            session = MatchSession(records=req.records, columns=fields, selector=selector)
            run_session(
                session,
                config,
                summarizer=summarizer if req.insights else None,
            )
        except CallerContractViolation as e:
            log.info("match_request_rejected", error=str(e))
            raise HTTPException(status_code=400, detail=str(e)) from e

        return MatchResponse(
            customer_field=selector.customer_field,
            reference_field=selector.reference_field,
            results=[MatchResultModel(**r.to_dict()) for r in session.results],
            counts=tier_counts(session.results),
            insights=session.insights,
        )

    return app
