"""
Repositories Package - Assessment Scoring Engine
assessment_scoring/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from assessment_scoring.repositories.base import BaseRepository
from assessment_scoring.repositories.assessment_repository import AssessmentRepository
from assessment_scoring.repositories.lead_repository import LeadRepository
from assessment_scoring.repositories.response_repository import ResponseRepository
from assessment_scoring.repositories.score_repository import ScoreRepository
from assessment_scoring.repositories.scoring_error_repository import ScoringErrorRepository

__all__ = [
    "BaseRepository",
    "AssessmentRepository",
    "LeadRepository",
    "ResponseRepository",
    "ScoreRepository",
    "ScoringErrorRepository",
]
