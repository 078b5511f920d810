"""
Repository Tests - Assessment Scoring Engine
tests/test_repositories.py

SQL-level tests for the Snowflake repositories with the connection mocked.
"""
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from snowflake.connector.errors import ProgrammingError

from assessment_scoring.core.exceptions import RepositoryException
from assessment_scoring.models.enumerations import LeadStatus, QuestionType
from assessment_scoring.models.score import CategoryResult
from assessment_scoring.repositories.assessment_repository import AssessmentRepository
from assessment_scoring.repositories.lead_repository import LeadRepository
from assessment_scoring.repositories.response_repository import ResponseRepository
from assessment_scoring.repositories.score_repository import ScoreRepository
from assessment_scoring.repositories.scoring_error_repository import ScoringErrorRepository

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db():
    """Patch the Snowflake connection factory; yields (connection, cursor)."""
    conn = MagicMock()
    cursor = MagicMock()
    cursor.connection = conn
    conn.cursor.return_value = cursor
    with patch("assessment_scoring.repositories.base.get_snowflake_connection", return_value=conn):
        yield conn, cursor


def _sql(call):
    return " ".join(call.args[0].split())


# =============================================================================
# READ REPOSITORIES
# =============================================================================

class TestLeadRepository:

    def test_get_by_id(self, db):
        conn, cursor = db
        cursor.fetchone.return_value = {
            "ID": "lead-1", "ASSESSMENT_ID": "asm-1", "ORG_ID": "org-1", "EMAIL": "a@example.com",
            "STATUS": "completed", "SCORE_ID": "score-1", "COMPLETED_AT": datetime(2026, 3, 1, 12, 0),
        }
        lead = LeadRepository().get_by_id("lead-1")

        assert lead.status == LeadStatus.COMPLETED
        assert lead.completed_at.tzinfo is not None
        assert cursor.execute.call_args.args[1] == ("lead-1",)
        conn.close.assert_called_once()

    def test_get_by_id_missing(self, db):
        _, cursor = db
        cursor.fetchone.return_value = None
        assert LeadRepository().get_by_id("nope") is None

    def test_list_completed_ids(self, db):
        _, cursor = db
        cursor.fetchall.return_value = [{"ID": "l1"}, {"ID": "l2"}]
        assert LeadRepository().list_completed_ids("asm-1") == ["l1", "l2"]
        assert cursor.execute.call_args.args[1] == ("asm-1", "completed")


class TestAssessmentRepository:

    def test_exists(self, db):
        _, cursor = db
        cursor.fetchone.return_value = {"ID": "asm-1"}
        assert AssessmentRepository().exists("asm-1") is True
        assert "FROM ASSESSMENTS" in _sql(cursor.execute.call_args)
        assert cursor.execute.call_args.args[1] == ("asm-1",)

    def test_exists_missing(self, db):
        _, cursor = db
        cursor.fetchone.return_value = None
        assert AssessmentRepository().exists("asm-deleted") is False

    def test_questions_parse_settings_variant(self, db):
        _, cursor = db
        cursor.fetchall.return_value = [{
            "ID": "q1", "ASSESSMENT_ID": "asm-1", "CATEGORY_ID": "c1", "TYPE": "sliding_scale",
            "TEXT": "How ready?", "SORT_ORDER": 1, "SETTINGS_JSON": '{"max": 20, "lowLabel": "Not at all"}',
        }]
        [question] = AssessmentRepository().get_questions("asm-1")
        assert question.type == QuestionType.SLIDING_SCALE
        assert question.settings.max == 20
        assert question.settings.min_label == "Not at all"

    def test_questions_null_settings(self, db):
        _, cursor = db
        cursor.fetchall.return_value = [{
            "ID": "q1", "ASSESSMENT_ID": "asm-1", "CATEGORY_ID": "c1", "TYPE": "rating_scale",
            "TEXT": None, "SORT_ORDER": 0, "SETTINGS_JSON": None,
        }]
        [question] = AssessmentRepository().get_questions("asm-1")
        assert question.settings.scale_max == 5

    def test_options_in_clause(self, db):
        _, cursor = db
        cursor.fetchall.return_value = [
            {"ID": "o1", "QUESTION_ID": "q1", "TEXT": "Yes", "POINTS": 1, "SORT_ORDER": 0},
        ]
        options = AssessmentRepository().get_options(["q1", "q2"])
        assert options[0].points == 1
        assert "IN (%s, %s)" in _sql(cursor.execute.call_args)
        assert cursor.execute.call_args.args[1] == ("q1", "q2")

    def test_options_empty_ids_skip_query(self, db):
        conn, _ = db
        assert AssessmentRepository().get_options([]) == []
        conn.cursor.assert_not_called()

    def test_tiers_ordered_query(self, db):
        _, cursor = db
        cursor.fetchall.return_value = []
        AssessmentRepository().get_tiers("asm-1")
        assert "ORDER BY MIN_PCT, SORT_ORDER" in _sql(cursor.execute.call_args)


class TestResponseRepository:

    def test_selected_ids_decoded(self, db):
        _, cursor = db
        cursor.fetchall.return_value = [
            {"ID": "r1", "LEAD_ID": "l", "QUESTION_ID": "q1", "SELECTED_OPTION_IDS": '["a", "b"]',
             "OPEN_TEXT_VALUE": None, "POINTS_AWARDED": 3},
            {"ID": "r2", "LEAD_ID": "l", "QUESTION_ID": "q2", "SELECTED_OPTION_IDS": "[7]",
             "OPEN_TEXT_VALUE": None, "POINTS_AWARDED": None},
            {"ID": "r3", "LEAD_ID": "l", "QUESTION_ID": "q3", "SELECTED_OPTION_IDS": None,
             "OPEN_TEXT_VALUE": "free text", "POINTS_AWARDED": 0},
        ]
        r1, r2, r3 = ResponseRepository().list_for_lead("l")
        assert r1.selected_option_ids == ["a", "b"]
        assert r2.selected_option_ids == ["7"]
        assert r2.points_awarded == 0
        assert r3.selected_option_ids is None
        assert r3.open_text_value == "free text"


# =============================================================================
# SCORE PERSISTENCE
# =============================================================================

class TestScoreRepository:

    def _stored_row(self):
        return {
            "ID": "score-1", "LEAD_ID": "lead-1", "ASSESSMENT_ID": "asm-1",
            "TOTAL_POINTS": 11, "TOTAL_POSSIBLE": 18, "PERCENTAGE": 61, "TIER_ID": "tier-mid",
            "CATEGORY_SCORES_JSON": json.dumps({"c1": {"points": 11, "possible": 18, "percentage": 61,
                                                        "tier_id": "tier-mid", "tier_label": "Developing",
                                                        "tier_colour": None}}),
            "CALCULATED_AT": NOW,
        }

    def _save(self):
        overall = CategoryResult(points=11, possible=18, percentage=61, tier_id="tier-mid", tier_label="Developing")
        return ScoreRepository().save_result(
            lead_id="lead-1",
            assessment_id="asm-1",
            overall=overall,
            categories={"c1": overall},
            points_by_response={"r1": 2, "r2": 9},
            calculated_at=NOW,
        )

    def test_save_result_single_transaction(self, db):
        conn, cursor = db
        cursor.fetchone.return_value = self._stored_row()

        record = self._save()

        statements = [_sql(c) for c in cursor.execute.call_args_list]
        assert statements[0] == "BEGIN"
        assert statements[1].startswith("MERGE INTO SCORES t USING (SELECT %s AS LEAD_ID) s ON t.LEAD_ID = s.LEAD_ID")
        assert statements[2].startswith("SELECT ID, LEAD_ID")
        assert statements[3].startswith("UPDATE LEADS")
        cursor.executemany.assert_called_once()
        assert cursor.executemany.call_args.args[1] == [(2, "r1"), (9, "r2")]
        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()

        assert record.id == "score-1"
        assert record.category_scores["c1"].tier_label == "Developing"

    def test_merge_parameters(self, db):
        _, cursor = db
        cursor.fetchone.return_value = self._stored_row()
        self._save()

        params = cursor.execute.call_args_list[1].args[1]
        assert params[0] == "lead-1"
        assert json.loads(params[6])["c1"]["percentage"] == 61
        assert params[9] == "lead-1"

        lead_params = cursor.execute.call_args_list[3].args[1]
        assert lead_params == ("score-1", "completed", NOW, "lead-1")

    def test_completion_time_only_set_once(self, db):
        _, cursor = db
        cursor.fetchone.return_value = self._stored_row()
        self._save()

        statement = _sql(cursor.execute.call_args_list[3])
        assert "COMPLETED_AT = COALESCE(COMPLETED_AT, %s)" in statement

    def test_rollback_on_failure(self, db):
        conn, cursor = db
        cursor.execute.side_effect = [None, ProgrammingError("warehouse suspended")]

        with pytest.raises(RepositoryException):
            self._save()

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_get_by_lead(self, db):
        _, cursor = db
        cursor.fetchone.return_value = self._stored_row()
        record = ScoreRepository().get_by_lead("lead-1")
        assert record.percentage == 61
        assert record.calculated_at == NOW

    def test_get_by_lead_missing(self, db):
        _, cursor = db
        cursor.fetchone.return_value = None
        assert ScoreRepository().get_by_lead("lead-1") is None


class TestScoringErrorRepository:

    def test_record_inserts_and_commits(self, db):
        conn, cursor = db
        record = ScoringErrorRepository().record("lead-1", "boom", {"stack": "Traceback..."})

        sql = _sql(cursor.execute.call_args)
        params = cursor.execute.call_args.args[1]
        assert sql.startswith("INSERT INTO SCORING_ERRORS")
        assert "PARSE_JSON(%s)" in sql
        assert params[1:3] == ("lead-1", "boom")
        assert json.loads(params[3]) == {"stack": "Traceback..."}
        conn.commit.assert_called_once()
        assert record.lead_id == "lead-1"
