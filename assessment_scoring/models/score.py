from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from assessment_scoring.models.assessment import ScoreTier


class QuestionScore(BaseModel):
    """
    Resolved (points, possible) pair for one question.
    """

    model_config = ConfigDict(frozen=True)

    points: int = 0
    possible: int = 0


class CategoryResult(BaseModel):
    """
    Aggregated result for one category, also used for the overall result.
    Stored in the Score's ``category_scores`` map keyed by category id.
    """

    points: int
    possible: int
    percentage: Optional[int] = Field(
        default=None,
        description="round(points / possible * 100), null when possible is 0"
    )
    tier_id: Optional[str] = None
    tier_label: Optional[str] = None
    tier_colour: Optional[str] = None

    @classmethod
    def build(cls, points: int, possible: int, percentage: Optional[int], tier: Optional[ScoreTier]) -> "CategoryResult":
        return cls(
            points=points,
            possible=possible,
            percentage=percentage,
            tier_id=tier.id if tier else None,
            tier_label=tier.label if tier else None,
            tier_colour=tier.colour if tier else None,
        )


class ScoreRecord(BaseModel):
    """
    Persisted score for one lead. Exactly one row per lead_id.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str
    assessment_id: str
    total_points: int = 0
    total_possible: int = 0
    percentage: Optional[int] = None
    tier_id: Optional[str] = None
    category_scores: Dict[str, CategoryResult] = Field(default_factory=dict)
    calculated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Time of the last (re)computation (UTC)"
    )


class ScoreResult(BaseModel):
    """
    Returned by ComputeScore and the /scores/calculate endpoint.
    """

    score: ScoreRecord
    categories: Dict[str, CategoryResult]
    overall_percentage: Optional[int] = None
    overall_tier: Optional[ScoreTier] = None


class ScoreCalculationRequest(BaseModel):
    lead_id: Optional[str] = None


class RecalculationResult(BaseModel):
    """
    Summary of a batch recomputation over one assessment's completed leads.
    """

    assessment_id: str
    leads_total: int
    leads_scored: int
    leads_failed: int
    failures: Dict[str, str] = Field(default_factory=dict)
    dry_run: bool = False


class ErrorResponse(BaseModel):
    """
    Error body returned on any failed scoring request.
    """

    error: str = Field(..., examples=["Scoring failed"])


class ScoringErrorRecord(BaseModel):
    """
    Diagnostics row written when a scoring run fails unexpectedly.
    """

    id: str
    lead_id: Optional[str] = None
    error_message: str
    error_details: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScoreCompletedEvent(BaseModel):
    """
    Message emitted onto the dispatch queue after a score is persisted.
    """

    lead_id: str
    score_id: str
    assessment_id: str
    percentage: Optional[int] = None
    tier_id: Optional[str] = None
    emitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
