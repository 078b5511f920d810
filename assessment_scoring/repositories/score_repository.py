"""
Score Repository - Assessment Scoring Engine
assessment_scoring/repositories/score_repository.py

Persistence for computed scores.

Tables:
  - SCORES     one row per LEAD_ID, replaced in place on recomputation
  - RESPONSES  POINTS_AWARDED cache written back per response
  - LEADS      completion status, timestamp and SCORE_ID link

The score upsert is a single MERGE keyed on LEAD_ID, so duplicate
concurrent runs for the same lead converge to one row (last writer wins).
All three writes share one transaction.
"""

import json
from datetime import datetime
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

import structlog

from assessment_scoring.models.enumerations import LeadStatus
from assessment_scoring.models.score import CategoryResult, ScoreRecord
from assessment_scoring.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class ScoreRepository(BaseRepository):
    """Repository for Score persistence."""

    TABLE_NAME = "SCORES"

    UPSERT_SQL = """
        MERGE INTO SCORES t
        USING (SELECT %s AS LEAD_ID) s
        ON t.LEAD_ID = s.LEAD_ID
        WHEN MATCHED THEN UPDATE SET
            ASSESSMENT_ID = %s,
            TOTAL_POINTS = %s,
            TOTAL_POSSIBLE = %s,
            PERCENTAGE = %s,
            TIER_ID = %s,
            CATEGORY_SCORES_JSON = PARSE_JSON(%s),
            CALCULATED_AT = %s
        WHEN NOT MATCHED THEN INSERT (
            ID, LEAD_ID, ASSESSMENT_ID, TOTAL_POINTS, TOTAL_POSSIBLE,
            PERCENTAGE, TIER_ID, CATEGORY_SCORES_JSON, CALCULATED_AT
        ) VALUES (
            %s, %s, %s, %s, %s,
            %s, %s, PARSE_JSON(%s), %s
        )
    """

    SELECT_SQL = """
        SELECT ID, LEAD_ID, ASSESSMENT_ID, TOTAL_POINTS, TOTAL_POSSIBLE,
               PERCENTAGE, TIER_ID, CATEGORY_SCORES_JSON, CALCULATED_AT
        FROM SCORES
        WHERE LEAD_ID = %s
    """

    UPDATE_RESPONSE_POINTS_SQL = """
        UPDATE RESPONSES
        SET POINTS_AWARDED = %s
        WHERE ID = %s
    """

    COMPLETE_LEAD_SQL = """
        UPDATE LEADS
        SET SCORE_ID = %s, STATUS = %s, COMPLETED_AT = COALESCE(COMPLETED_AT, %s)
        WHERE ID = %s
    """

    def save_result(
        self,
        lead_id: str,
        assessment_id: str,
        overall: CategoryResult,
        categories: Mapping[str, CategoryResult],
        points_by_response: Mapping[str, int],
        calculated_at: datetime,
    ) -> ScoreRecord:
        """
        Upsert the lead's score, cache per-response points and mark the
        lead completed, all in one transaction.

        Args:
            lead_id: ID of the lead being scored
            assessment_id: ID of the lead's assessment
            overall: Overall result (included categories only)
            categories: Category id -> category result
            points_by_response: Response id -> resolved points
            calculated_at: Computation timestamp; also the completion time
                when the lead has none yet

        Returns:
            The stored ScoreRecord
        """
        categories_json = json.dumps(
            {cid: result.model_dump() for cid, result in categories.items()}
        )
        params = (
            lead_id,
            # UPDATE values
            assessment_id, overall.points, overall.possible,
            overall.percentage, overall.tier_id, categories_json, calculated_at,
            # INSERT values
            str(uuid4()), lead_id, assessment_id, overall.points, overall.possible,
            overall.percentage, overall.tier_id, categories_json, calculated_at,
        )

        with self.transaction() as cursor:
            cursor.execute(self.UPSERT_SQL, params)
            cursor.execute(self.SELECT_SQL, (lead_id,))
            row = cursor.fetchone()

            if points_by_response:
                cursor.executemany(
                    self.UPDATE_RESPONSE_POINTS_SQL,
                    [(points, response_id) for response_id, points in points_by_response.items()],
                )

            cursor.execute(
                self.COMPLETE_LEAD_SQL,
                (row["ID"], LeadStatus.COMPLETED.value, calculated_at, lead_id),
            )

        record = self._row_to_record(row)
        logger.info(
            "score_persisted",
            lead_id=lead_id,
            score_id=record.id,
            responses_updated=len(points_by_response),
        )
        return record

    def get_by_lead(self, lead_id: str) -> Optional[ScoreRecord]:
        """
        Retrieve the stored score of a lead.

        Returns:
            ScoreRecord or None if the lead was never scored
        """
        row = self.execute_query(self.SELECT_SQL, (lead_id,), fetch_one=True)
        if not row:
            return None
        return self._row_to_record(row)

    def _row_to_record(self, row: Dict[str, Any]) -> ScoreRecord:
        """Convert Snowflake row to ScoreRecord."""
        categories = self.parse_variant(row["CATEGORY_SCORES_JSON"], {}) or {}
        return ScoreRecord(
            id=row["ID"],
            lead_id=row["LEAD_ID"],
            assessment_id=row["ASSESSMENT_ID"],
            total_points=row["TOTAL_POINTS"],
            total_possible=row["TOTAL_POSSIBLE"],
            percentage=row["PERCENTAGE"],
            tier_id=row["TIER_ID"],
            category_scores={cid: CategoryResult(**data) for cid, data in categories.items()},
            calculated_at=self.normalize_timestamp(row["CALCULATED_AT"]),
        )
