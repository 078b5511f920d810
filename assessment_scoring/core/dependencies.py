"""
Dependencies - Assessment Scoring Engine
assessment_scoring/core/dependencies.py

FastAPI dependency injection for repositories and the scoring engine.
"""

from functools import lru_cache

from assessment_scoring.repositories.assessment_repository import AssessmentRepository
from assessment_scoring.repositories.lead_repository import LeadRepository
from assessment_scoring.repositories.response_repository import ResponseRepository
from assessment_scoring.repositories.score_repository import ScoreRepository
from assessment_scoring.repositories.scoring_error_repository import ScoringErrorRepository
from assessment_scoring.scoring.engine import ScoringEngine
from assessment_scoring.services.dispatch_queue import get_dispatch_queue


@lru_cache()
def get_lead_repository() -> LeadRepository:
    """Get cached LeadRepository instance."""
    return LeadRepository()


@lru_cache()
def get_assessment_repository() -> AssessmentRepository:
    """Get cached AssessmentRepository instance."""
    return AssessmentRepository()


@lru_cache()
def get_response_repository() -> ResponseRepository:
    """Get cached ResponseRepository instance."""
    return ResponseRepository()


@lru_cache()
def get_score_repository() -> ScoreRepository:
    """Get cached ScoreRepository instance."""
    return ScoreRepository()


@lru_cache()
def get_scoring_error_repository() -> ScoringErrorRepository:
    """Get cached ScoringErrorRepository instance."""
    return ScoringErrorRepository()


@lru_cache()
def get_scoring_engine() -> ScoringEngine:
    """Get cached ScoringEngine wired to the shared repositories and dispatch queue."""
    return ScoringEngine(
        lead_repo=get_lead_repository(),
        assessment_repo=get_assessment_repository(),
        response_repo=get_response_repository(),
        score_repo=get_score_repository(),
        error_repo=get_scoring_error_repository(),
        queue=get_dispatch_queue(),
    )
