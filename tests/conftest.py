# tests/conftest.py

"""
Pytest Fixtures - Shared test data and in-memory repositories for the scoring engine

FIXTURE ASSESSMENT (ids are short strings for readability):
- Assessment: asm-1
- Categories: cat-strategy (included), cat-ops (included), cat-bonus (excluded from total)
- Tiers:      tier-low 0-39, tier-mid 40-69, tier-high 70-100
- Lead:       lead-1 (answers), lead-2 (no answers), lead-missing (does not exist)
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import pytest

from assessment_scoring.models.assessment import (
    AnswerOption,
    Category,
    Lead,
    Question,
    Response,
    ScoreTier,
)
from assessment_scoring.models.enumerations import LeadStatus
from assessment_scoring.models.score import ScoreCompletedEvent, ScoreRecord, ScoringErrorRecord
from assessment_scoring.scoring.engine import ScoringEngine
from assessment_scoring.shutdown import reset_shutdown


ASSESSMENT_ID = "asm-1"


# =============================================================================
# MODEL BUILDERS
# =============================================================================

def make_question(qid, qtype, category_id="cat-strategy", settings=None, sort_order=0):
    return Question(
        id=qid,
        assessment_id=ASSESSMENT_ID,
        category_id=category_id,
        type=qtype,
        sort_order=sort_order,
        settings_json=settings or {},
    )


def make_option(oid, question_id, points, sort_order=0):
    return AnswerOption(id=oid, question_id=question_id, points=points, sort_order=sort_order)


def make_response(question_id, selected=None, lead_id="lead-1", points_awarded=0, rid=None):
    return Response(
        id=rid or f"resp-{lead_id}-{question_id}",
        lead_id=lead_id,
        question_id=question_id,
        selected_option_ids=selected,
        points_awarded=points_awarded,
    )


def make_tier(tid, label, min_pct, max_pct, sort_order=0, colour=None):
    return ScoreTier(
        id=tid,
        assessment_id=ASSESSMENT_ID,
        label=label,
        min_pct=min_pct,
        max_pct=max_pct,
        colour=colour,
        sort_order=sort_order,
    )


def make_category(cid, sort_order=0, include_in_total=True):
    return Category(
        id=cid,
        assessment_id=ASSESSMENT_ID,
        name=cid,
        sort_order=sort_order,
        include_in_total=include_in_total,
    )


# =============================================================================
# IN-MEMORY REPOSITORIES
# =============================================================================

class InMemoryStore:
    """Tables shared by the fake repositories."""

    def __init__(self):
        self.assessments: Set[str] = set()
        self.leads: Dict[str, Lead] = {}
        self.categories: List[Category] = []
        self.questions: List[Question] = []
        self.options: List[AnswerOption] = []
        self.tiers: List[ScoreTier] = []
        self.responses: List[Response] = []
        self.scores: Dict[str, ScoreRecord] = {}
        self.errors: List[ScoringErrorRecord] = []
        self.events: List[ScoreCompletedEvent] = []
        self.save_calls = 0


class FakeLeadRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def get_by_id(self, lead_id: str) -> Optional[Lead]:
        return self.store.leads.get(lead_id)

    def list_completed_ids(self, assessment_id: str) -> List[str]:
        return [
            lead.id for lead in self.store.leads.values()
            if lead.assessment_id == assessment_id and lead.status == LeadStatus.COMPLETED
        ]


class FakeAssessmentRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def exists(self, assessment_id):
        return assessment_id in self.store.assessments

    def get_categories(self, assessment_id):
        return sorted(
            [c for c in self.store.categories if c.assessment_id == assessment_id],
            key=lambda c: c.sort_order,
        )

    def get_questions(self, assessment_id):
        return [q for q in self.store.questions if q.assessment_id == assessment_id]

    def get_tiers(self, assessment_id):
        return sorted(
            [t for t in self.store.tiers if t.assessment_id == assessment_id],
            key=lambda t: (t.min_pct, t.sort_order),
        )

    def get_options(self, question_ids):
        ids = set(question_ids)
        return [o for o in self.store.options if o.question_id in ids]


class FakeResponseRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def list_for_lead(self, lead_id):
        return [r for r in self.store.responses if r.lead_id == lead_id]


class FakeScoreRepository:
    """Mirrors ScoreRepository.save_result: one row per lead, updated in place."""

    def __init__(self, store: InMemoryStore, fail_with: Optional[Exception] = None):
        self.store = store
        self.fail_with = fail_with

    def save_result(self, lead_id, assessment_id, overall, categories, points_by_response, calculated_at):
        self.store.save_calls += 1
        if self.fail_with is not None:
            raise self.fail_with

        existing = self.store.scores.get(lead_id)
        record = ScoreRecord(
            id=existing.id if existing else f"score-{lead_id}",
            lead_id=lead_id,
            assessment_id=assessment_id,
            total_points=overall.points,
            total_possible=overall.possible,
            percentage=overall.percentage,
            tier_id=overall.tier_id,
            category_scores=dict(categories),
            calculated_at=calculated_at,
        )
        self.store.scores[lead_id] = record

        for i, response in enumerate(self.store.responses):
            if response.id in points_by_response:
                self.store.responses[i] = response.model_copy(
                    update={"points_awarded": points_by_response[response.id]}
                )

        lead = self.store.leads[lead_id]
        self.store.leads[lead_id] = lead.model_copy(update={
            "status": LeadStatus.COMPLETED,
            "score_id": record.id,
            "completed_at": lead.completed_at or calculated_at,
        })
        return record

    def get_by_lead(self, lead_id):
        return self.store.scores.get(lead_id)


class FakeErrorRepository:
    def __init__(self, store: InMemoryStore, fail: bool = False):
        self.store = store
        self.fail = fail

    def record(self, lead_id, error_message, error_details=None):
        if self.fail:
            raise RuntimeError("diagnostics table unavailable")
        record = ScoringErrorRecord(
            id=f"err-{len(self.store.errors) + 1}",
            lead_id=lead_id,
            error_message=error_message,
            error_details=error_details or {},
            created_at=datetime.now(timezone.utc),
        )
        self.store.errors.append(record)
        return record


class FakeQueue:
    def __init__(self, store: InMemoryStore, fail: bool = False):
        self.store = store
        self.fail = fail

    def publish(self, event):
        if self.fail:
            raise ConnectionError("redis down")
        self.store.events.append(event)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def _clear_shutdown_flag():
    """The API shutdown hook sets the process-wide flag; start each test clean."""
    reset_shutdown()
    yield
    reset_shutdown()


@pytest.fixture
def standard_tiers():
    return [
        make_tier("tier-low", "Beginner", 0, 39, colour="#d9534f"),
        make_tier("tier-mid", "Developing", 40, 69, colour="#f0ad4e"),
        make_tier("tier-high", "Leading", 70, 100, colour="#5cb85c"),
    ]


@pytest.fixture
def store(standard_tiers):
    """
    lead-1 answers:
      q-mc    multiple choice A(3) B(2) C(1)      -> B       = 2/3
      q-cb    checkbox P(+2) Q(+3) R(0)           -> P, R    = 2/5
      q-slide sliding scale max 10                -> "7"     = 7/10
      q-open  open text                           -> ignored
      q-yn    yes/no Yes(1) No(0), bonus category -> Yes     = 1/1
    strategy = 4/8 (50), ops = 7/10 (70), bonus = 1/1 excluded
    overall  = 11/18 -> 61
    """
    s = InMemoryStore()
    s.assessments = {ASSESSMENT_ID}
    s.leads = {
        "lead-1": Lead(id="lead-1", assessment_id=ASSESSMENT_ID, email="a@example.com"),
        "lead-2": Lead(id="lead-2", assessment_id=ASSESSMENT_ID),
    }
    s.categories = [
        make_category("cat-strategy", sort_order=1),
        make_category("cat-ops", sort_order=2),
        make_category("cat-bonus", sort_order=3, include_in_total=False),
    ]
    s.questions = [
        make_question("q-mc", "multiple_choice", "cat-strategy", sort_order=1),
        make_question("q-cb", "checkbox_select", "cat-strategy", sort_order=2),
        make_question("q-slide", "sliding_scale", "cat-ops", {"max": 10}, sort_order=3),
        make_question("q-open", "open_text", "cat-ops", sort_order=4),
        make_question("q-yn", "yes_no", "cat-bonus", sort_order=5),
    ]
    s.options = [
        make_option("opt-a", "q-mc", 3, 1),
        make_option("opt-b", "q-mc", 2, 2),
        make_option("opt-c", "q-mc", 1, 3),
        make_option("opt-p", "q-cb", 2, 1),
        make_option("opt-q", "q-cb", 3, 2),
        make_option("opt-r", "q-cb", 0, 3),
        make_option("opt-yes", "q-yn", 1, 1),
        make_option("opt-no", "q-yn", 0, 2),
    ]
    s.tiers = list(standard_tiers)
    s.responses = [
        make_response("q-mc", ["opt-b"]),
        make_response("q-cb", ["opt-p", "opt-r"]),
        make_response("q-slide", ["7"]),
        make_response("q-open", None),
        make_response("q-yn", ["opt-yes"]),
    ]
    return s


def build_engine(store, score_fail=None, error_fail=False, queue_fail=False):
    return ScoringEngine(
        lead_repo=FakeLeadRepository(store),
        assessment_repo=FakeAssessmentRepository(store),
        response_repo=FakeResponseRepository(store),
        score_repo=FakeScoreRepository(store, fail_with=score_fail),
        error_repo=FakeErrorRepository(store, fail=error_fail),
        queue=FakeQueue(store, fail=queue_fail),
    )


@pytest.fixture
def engine(store):
    return build_engine(store)
