"""
Scoring API Router
assessment_scoring/routers/scoring.py

Endpoints:
  POST /api/v1/scores/calculate                        : Score one lead (ComputeScore)
  GET  /api/v1/scores/{lead_id}                        : Stored score of a lead
  POST /api/v1/assessments/{assessment_id}/recalculate : Re-score every completed lead

Every error body is {"error": "<message>"}.

Register in main.py:
    from assessment_scoring.routers.scoring import router as scoring_router
    app.include_router(scoring_router)
"""

import asyncio
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from assessment_scoring.core.dependencies import get_score_repository, get_scoring_engine
from assessment_scoring.core.exceptions import (
    EntityNotFoundException,
    RepositoryException,
    ScoringFailedError,
)
from assessment_scoring.models.score import (
    ErrorResponse,
    RecalculationResult,
    ScoreCalculationRequest,
    ScoreRecord,
    ScoreResult,
)
from assessment_scoring.repositories.score_repository import ScoreRepository
from assessment_scoring.scoring.engine import ScoringEngine

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Scoring"])

LEAD_ID_REQUIRED = "lead_id required"


# =====================================================================
# Exception handlers (registered in main.py)
# =====================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies become 400 {"error": ...}."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    if any("lead_id" in [str(p) for p in e.get("loc", ())] for e in errors):
        message = LEAD_ID_REQUIRED
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def not_found_exception_handler(request: Request, exc: EntityNotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


async def scoring_failed_exception_handler(request: Request, exc: ScoringFailedError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": exc.message},
    )


async def repository_exception_handler(request: Request, exc: RepositoryException):
    logger.error("repository_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database error"},
    )


# =====================================================================
# POST /api/v1/scores/calculate
# =====================================================================

@router.post(
    "/scores/calculate",
    response_model=ScoreResult,
    responses={
        400: {"model": ErrorResponse, "description": "lead_id missing"},
        404: {"model": ErrorResponse, "description": "Lead not found"},
        500: {"model": ErrorResponse, "description": "Scoring failed"},
    },
    summary="Calculate and persist a lead's score",
)
async def calculate_score(
    payload: Optional[ScoreCalculationRequest] = None,
    engine: ScoringEngine = Depends(get_scoring_engine),
):
    if payload is None or not payload.lead_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": LEAD_ID_REQUIRED},
        )
    return await engine.compute_score(payload.lead_id)


# =====================================================================
# GET /api/v1/scores/{lead_id}
# =====================================================================

@router.get(
    "/scores/{lead_id}",
    response_model=ScoreRecord,
    responses={404: {"model": ErrorResponse, "description": "Lead has no score"}},
    summary="Get the stored score of a lead",
)
async def get_score(
    lead_id: str,
    repo: ScoreRepository = Depends(get_score_repository),
):
    record = await asyncio.to_thread(repo.get_by_lead, lead_id)
    if record is None:
        raise EntityNotFoundException("Score for lead", lead_id)
    return record


# =====================================================================
# POST /api/v1/assessments/{assessment_id}/recalculate
# =====================================================================

@router.post(
    "/assessments/{assessment_id}/recalculate",
    response_model=RecalculationResult,
    summary="Re-score every completed lead of an assessment",
    description="""
    Re-runs the scoring pipeline for each completed lead, e.g. after option
    points or tiers were edited. Failures are collected per lead; the batch
    always runs to the end. With `dry_run=true` nothing is written.
    """,
)
async def recalculate_assessment(
    assessment_id: str,
    dry_run: bool = Query(default=False, description="Compute without persisting"),
    engine: ScoringEngine = Depends(get_scoring_engine),
):
    return await engine.recalculate_assessment(assessment_id, dry_run=dry_run)
