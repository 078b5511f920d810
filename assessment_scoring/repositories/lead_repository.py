"""
Lead Repository - Assessment Scoring Engine
assessment_scoring/repositories/lead_repository.py

Read access for respondent attempts (leads).
"""

from typing import Any, Dict, List, Optional

from assessment_scoring.models.assessment import Lead
from assessment_scoring.models.enumerations import LeadStatus
from assessment_scoring.repositories.base import BaseRepository


class LeadRepository(BaseRepository):
    """Repository for Lead lookups."""

    TABLE_NAME = "LEADS"

    def get_by_id(self, lead_id: str) -> Optional[Lead]:
        """
        Retrieve a lead by ID.

        Args:
            lead_id: ID of the lead

        Returns:
            Lead or None if not found
        """
        sql = """
            SELECT ID, ASSESSMENT_ID, ORG_ID, EMAIL, STATUS, SCORE_ID, COMPLETED_AT
            FROM LEADS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (lead_id,), fetch_one=True)

        if not row:
            return None

        return self._row_to_lead(row)

    def list_completed_ids(self, assessment_id: str) -> List[str]:
        """
        IDs of every completed lead of an assessment, oldest completion first.
        """
        sql = """
            SELECT ID
            FROM LEADS
            WHERE ASSESSMENT_ID = %s AND STATUS = %s
            ORDER BY COMPLETED_AT ASC, ID ASC
        """
        rows = self.execute_query(
            sql, (assessment_id, LeadStatus.COMPLETED.value), fetch_all=True
        ) or []
        return [row["ID"] for row in rows]

    def _row_to_lead(self, row: Dict[str, Any]) -> Lead:
        """Convert Snowflake row to Lead."""
        return Lead(
            id=row["ID"],
            assessment_id=row["ASSESSMENT_ID"],
            org_id=row["ORG_ID"],
            email=row["EMAIL"],
            status=LeadStatus(row["STATUS"]),
            score_id=row["SCORE_ID"],
            completed_at=self.normalize_timestamp(row["COMPLETED_AT"]),
        )
