"""
Scoring Error Repository - Assessment Scoring Engine
assessment_scoring/repositories/scoring_error_repository.py

Diagnostics sink for failed scoring runs, keyed by lead id for triage.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from assessment_scoring.models.score import ScoringErrorRecord
from assessment_scoring.repositories.base import BaseRepository


class ScoringErrorRepository(BaseRepository):
    """Repository for SCORING_ERRORS rows."""

    TABLE_NAME = "SCORING_ERRORS"

    def record(
        self,
        lead_id: Optional[str],
        error_message: str,
        error_details: Optional[Dict[str, Any]] = None,
    ) -> ScoringErrorRecord:
        """
        Insert one diagnostics row.

        Args:
            lead_id: Lead whose scoring failed (None if unknown)
            error_message: Exception message
            error_details: Extra detail, e.g. {"type": ..., "stack": ...}
        """
        record = ScoringErrorRecord(
            id=str(uuid4()),
            lead_id=lead_id,
            error_message=error_message,
            error_details=error_details or {},
            created_at=datetime.now(timezone.utc),
        )
        sql = """
            INSERT INTO SCORING_ERRORS (ID, LEAD_ID, ERROR_MESSAGE, ERROR_DETAILS, CREATED_AT)
            SELECT %s, %s, %s, PARSE_JSON(%s), %s
        """
        params = (
            record.id,
            record.lead_id,
            record.error_message,
            json.dumps(record.error_details, default=str),
            record.created_at,
        )
        self.execute_query(sql, params, commit=True)
        return record

    def list_for_lead(self, lead_id: str, limit: int = 50) -> List[ScoringErrorRecord]:
        """Most recent diagnostics rows for a lead."""
        sql = """
            SELECT ID, LEAD_ID, ERROR_MESSAGE, ERROR_DETAILS, CREATED_AT
            FROM SCORING_ERRORS
            WHERE LEAD_ID = %s
            ORDER BY CREATED_AT DESC
            LIMIT %s
        """
        rows = self.execute_query(sql, (lead_id, limit), fetch_all=True)
        records = []
        for row in self.rows_to_dicts(rows):
            row["error_details"] = self.parse_variant(row.get("error_details"), {}) or {}
            row["created_at"] = self.normalize_timestamp(row["created_at"])
            records.append(ScoringErrorRecord(**row))
        return records
