"""
Assessment Repository - Assessment Scoring Engine
assessment_scoring/repositories/assessment_repository.py

Read access for the authored content of an assessment: existence check,
categories, questions, answer options and score tiers.
"""

from typing import List, Sequence

from assessment_scoring.models.assessment import (
    AnswerOption,
    Category,
    Question,
    ScoreTier,
)
from assessment_scoring.repositories.base import BaseRepository


class AssessmentRepository(BaseRepository):
    """Repository for assessment content used by the scoring engine."""

    def exists(self, assessment_id: str) -> bool:
        """True when the ASSESSMENTS table holds the given ID."""
        sql = """
            SELECT ID
            FROM ASSESSMENTS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (assessment_id,), fetch_one=True)
        return row is not None

    def get_categories(self, assessment_id: str) -> List[Category]:
        """Categories ordered by SORT_ORDER."""
        sql = """
            SELECT ID, ASSESSMENT_ID, NAME, SORT_ORDER, INCLUDE_IN_TOTAL
            FROM CATEGORIES
            WHERE ASSESSMENT_ID = %s
            ORDER BY SORT_ORDER, ID
        """
        rows = self.execute_query(sql, (assessment_id,), fetch_all=True)
        return [Category(**row) for row in self.rows_to_dicts(rows)]

    def get_questions(self, assessment_id: str) -> List[Question]:
        """Questions with their raw SETTINGS_JSON parsed into typed settings."""
        sql = """
            SELECT ID, ASSESSMENT_ID, CATEGORY_ID, TYPE, TEXT, SORT_ORDER, SETTINGS_JSON
            FROM QUESTIONS
            WHERE ASSESSMENT_ID = %s
            ORDER BY SORT_ORDER, ID
        """
        rows = self.execute_query(sql, (assessment_id,), fetch_all=True)
        questions = []
        for row in self.rows_to_dicts(rows):
            row["settings_json"] = self.parse_variant(row.get("settings_json"), {})
            questions.append(Question(**row))
        return questions

    def get_tiers(self, assessment_id: str) -> List[ScoreTier]:
        """Score tiers ordered by MIN_PCT (ties by SORT_ORDER)."""
        sql = """
            SELECT ID, ASSESSMENT_ID, LABEL, MIN_PCT, MAX_PCT, COLOUR, DESCRIPTION, SORT_ORDER
            FROM SCORE_TIERS
            WHERE ASSESSMENT_ID = %s
            ORDER BY MIN_PCT, SORT_ORDER
        """
        rows = self.execute_query(sql, (assessment_id,), fetch_all=True)
        return [ScoreTier(**row) for row in self.rows_to_dicts(rows)]

    def get_options(self, question_ids: Sequence[str]) -> List[AnswerOption]:
        """Answer options of the given questions ordered by SORT_ORDER."""
        if not question_ids:
            return []
        sql = f"""
            SELECT ID, QUESTION_ID, TEXT, POINTS, SORT_ORDER
            FROM ANSWER_OPTIONS
            WHERE QUESTION_ID IN ({self.placeholders(question_ids)})
            ORDER BY SORT_ORDER, ID
        """
        rows = self.execute_query(sql, tuple(question_ids), fetch_all=True)
        return [AnswerOption(**row) for row in self.rows_to_dicts(rows)]
