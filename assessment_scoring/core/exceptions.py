"""
Custom Exceptions - Assessment Scoring Engine
assessment_scoring/core/exceptions.py

Custom exception classes for repository and scoring operations.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in database."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class ScoringException(Exception):
    """Base exception for scoring operations."""

    pass


class ScoringFailedError(ScoringException):
    """Scoring run failed; details were recorded in the diagnostics sink."""

    def __init__(self, lead_id: str, message: str = "Scoring failed"):
        self.lead_id = lead_id
        self.message = message
        super().__init__(message)
