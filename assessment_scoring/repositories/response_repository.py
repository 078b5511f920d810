"""
Response Repository - Assessment Scoring Engine
assessment_scoring/repositories/response_repository.py

Read access for a lead's answers.
"""

from typing import List

from assessment_scoring.models.assessment import Response
from assessment_scoring.repositories.base import BaseRepository


class ResponseRepository(BaseRepository):
    """Repository for Response lookups."""

    TABLE_NAME = "RESPONSES"

    def list_for_lead(self, lead_id: str) -> List[Response]:
        """
        All responses of a lead, oldest first.

        Args:
            lead_id: ID of the lead

        Returns:
            List of Response (empty if the lead answered nothing)
        """
        sql = """
            SELECT ID, LEAD_ID, QUESTION_ID, SELECTED_OPTION_IDS, OPEN_TEXT_VALUE, POINTS_AWARDED
            FROM RESPONSES
            WHERE LEAD_ID = %s
            ORDER BY RESPONDED_AT, ID
        """
        rows = self.execute_query(sql, (lead_id,), fetch_all=True)
        responses = []
        for row in self.rows_to_dicts(rows):
            selected = self.parse_variant(row.get("selected_option_ids"))
            row["selected_option_ids"] = [str(s) for s in selected] if isinstance(selected, list) else None
            row["points_awarded"] = row.get("points_awarded") or 0
            responses.append(Response(**row))
        return responses
