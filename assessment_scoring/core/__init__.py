"""
Core Package - Assessment Scoring Engine
assessment_scoring/core/__init__.py

Core infrastructure: exceptions, logging. FastAPI dependencies live in
assessment_scoring.core.dependencies (imported directly by routers).
"""

from assessment_scoring.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    RepositoryException,
    ScoringException,
    ScoringFailedError,
)
from assessment_scoring.core.logging import configure_logging

__all__ = [
    # Exceptions
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "RepositoryException",
    "ScoringException",
    "ScoringFailedError",
    # Logging
    "configure_logging",
]
