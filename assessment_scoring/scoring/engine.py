"""
Scoring Engine
assessment_scoring/scoring/engine.py

Orchestrates one scoring run for a lead:

    1. Load the lead and confirm its assessment exists
       (EntityNotFoundException if either is absent, no side effects)
    2. Load responses, questions, categories and tiers concurrently,
       then the answer options of the loaded questions
    3. ScoreCalculator: resolve → aggregate → classify (pure)
    4. ScoreRepository.save_result: score upsert, response points,
       lead completion in one transaction
    5. Publish ScoreCompletedEvent for downstream delivery

Any failure other than a missing lead or assessment is written to the
SCORING_ERRORS sink and surfaced as ScoringFailedError. A failed publish is
logged and never fails the run.
"""

import asyncio
import traceback
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from assessment_scoring.core.exceptions import (
    EntityNotFoundException,
    ScoringFailedError,
)
from assessment_scoring.models.assessment import Lead
from assessment_scoring.models.score import (
    RecalculationResult,
    ScoreCompletedEvent,
    ScoreResult,
)
from assessment_scoring.repositories.assessment_repository import AssessmentRepository
from assessment_scoring.repositories.lead_repository import LeadRepository
from assessment_scoring.repositories.response_repository import ResponseRepository
from assessment_scoring.repositories.score_repository import ScoreRepository
from assessment_scoring.repositories.scoring_error_repository import ScoringErrorRepository
from assessment_scoring.scoring.calculator import (
    ScoreCalculator,
    ScoreComputation,
    ScoringInputs,
)
from assessment_scoring.scoring.tier_classifier import find_partition_issues

logger = structlog.get_logger(__name__)


class ScoringEngine:
    """ComputeScore and batch recalculation over Snowflake-backed repositories."""

    def __init__(
        self,
        lead_repo: Optional[LeadRepository] = None,
        assessment_repo: Optional[AssessmentRepository] = None,
        response_repo: Optional[ResponseRepository] = None,
        score_repo: Optional[ScoreRepository] = None,
        error_repo: Optional[ScoringErrorRepository] = None,
        queue=None,
        calculator: Optional[ScoreCalculator] = None,
    ):
        self.lead_repo = lead_repo or LeadRepository()
        self.assessment_repo = assessment_repo or AssessmentRepository()
        self.response_repo = response_repo or ResponseRepository()
        self.score_repo = score_repo or ScoreRepository()
        self.error_repo = error_repo or ScoringErrorRepository()
        self.queue = queue
        self.calculator = calculator or ScoreCalculator()

    # ------------------------------------------------------------------
    # ComputeScore
    # ------------------------------------------------------------------

    async def compute_score(self, lead_id: str, publish: bool = True) -> ScoreResult:
        """
        Score one lead and persist the result.

        Args:
            lead_id: ID of the lead to score
            publish: Emit a ScoreCompletedEvent after persisting

        Raises:
            EntityNotFoundException: the lead or its assessment does not exist
            ScoringFailedError: any other failure (recorded in SCORING_ERRORS)
        """
        log = logger.bind(lead_id=lead_id)
        try:
            lead = await self._load_lead(lead_id)
            computation = await self._compute(lead)

            points_by_response = {
                response.id: computation.question_scores[question_id].points
                for question_id, response in computation.responses_by_question.items()
                if question_id in computation.question_scores
            }
            record = await asyncio.to_thread(
                self.score_repo.save_result,
                lead.id,
                lead.assessment_id,
                computation.overall,
                computation.categories,
                points_by_response,
                datetime.now(timezone.utc),
            )
        except EntityNotFoundException:
            raise
        except Exception as e:
            log.error("scoring_failed", error=str(e), exc_info=True)
            await self._record_failure(lead_id, e)
            raise ScoringFailedError(lead_id) from e

        if publish:
            await self._publish(
                ScoreCompletedEvent(
                    lead_id=record.lead_id,
                    score_id=record.id,
                    assessment_id=record.assessment_id,
                    percentage=record.percentage,
                    tier_id=record.tier_id,
                )
            )

        return ScoreResult(
            score=record,
            categories=computation.categories,
            overall_percentage=computation.overall.percentage,
            overall_tier=computation.overall_tier,
        )

    async def preview_score(self, lead_id: str) -> ScoreComputation:
        """Compute a lead's score without writing anything."""
        lead = await self._load_lead(lead_id)
        return await self._compute(lead)

    async def _load_lead(self, lead_id: str) -> Lead:
        lead = await asyncio.to_thread(self.lead_repo.get_by_id, lead_id)
        if lead is None:
            raise EntityNotFoundException("Lead", lead_id)
        found = await asyncio.to_thread(self.assessment_repo.exists, lead.assessment_id)
        if not found:
            raise EntityNotFoundException("Assessment", lead.assessment_id)
        return lead

    async def _compute(self, lead: Lead) -> ScoreComputation:
        responses, questions, categories, tiers = await asyncio.gather(
            asyncio.to_thread(self.response_repo.list_for_lead, lead.id),
            asyncio.to_thread(self.assessment_repo.get_questions, lead.assessment_id),
            asyncio.to_thread(self.assessment_repo.get_categories, lead.assessment_id),
            asyncio.to_thread(self.assessment_repo.get_tiers, lead.assessment_id),
        )
        options = await asyncio.to_thread(
            self.assessment_repo.get_options, [q.id for q in questions]
        )

        issues = find_partition_issues(tiers)
        if issues:
            logger.warning(
                "tier_partition_invalid",
                assessment_id=lead.assessment_id,
                issues=issues,
            )

        return self.calculator.calculate(
            ScoringInputs(
                lead=lead,
                questions=questions,
                categories=categories,
                tiers=tiers,
                responses=responses,
                options=options,
            )
        )

    async def _record_failure(self, lead_id: str, error: Exception) -> None:
        """Write the failure to SCORING_ERRORS. Never raises."""
        details = {
            "type": type(error).__name__,
            "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
        try:
            await asyncio.to_thread(self.error_repo.record, lead_id, str(error), details)
        except Exception as record_error:
            logger.error(
                "scoring_error_not_recorded",
                lead_id=lead_id,
                error=str(record_error),
            )

    async def _publish(self, event: ScoreCompletedEvent) -> None:
        if self.queue is None:
            return
        try:
            await asyncio.to_thread(self.queue.publish, event)
        except Exception as e:
            logger.warning(
                "dispatch_publish_failed",
                lead_id=event.lead_id,
                score_id=event.score_id,
                error=str(e),
            )

    # ------------------------------------------------------------------
    # Recalculation
    # ------------------------------------------------------------------

    async def recalculate_assessment(
        self, assessment_id: str, dry_run: bool = False
    ) -> RecalculationResult:
        """
        Re-score every completed lead of an assessment.

        Leads are processed one at a time; a failing lead is counted and the
        batch continues. Recalculation does not publish completion events.

        Args:
            assessment_id: Assessment whose completed leads are re-scored
            dry_run: Compute only; nothing is written
        """
        lead_ids: List[str] = await asyncio.to_thread(
            self.lead_repo.list_completed_ids, assessment_id
        )
        failures: Dict[str, str] = {}
        scored = 0

        for lead_id in lead_ids:
            try:
                if dry_run:
                    await self.preview_score(lead_id)
                else:
                    await self.compute_score(lead_id, publish=False)
                scored += 1
            except Exception as e:
                failures[lead_id] = str(e)

        logger.info(
            "assessment_recalculated",
            assessment_id=assessment_id,
            leads_total=len(lead_ids),
            leads_scored=scored,
            leads_failed=len(failures),
            dry_run=dry_run,
        )
        return RecalculationResult(
            assessment_id=assessment_id,
            leads_total=len(lead_ids),
            leads_scored=scored,
            leads_failed=len(failures),
            failures=failures,
            dry_run=dry_run,
        )
