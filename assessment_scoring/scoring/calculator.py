"""
Score Calculator
assessment_scoring/scoring/calculator.py

Pure computation from loaded assessment data to per-question, per-category
and overall results. No I/O; the same inputs always give the same output.

Pipeline:
    1. QuestionScoringResolver  → QuestionScore per question
    2. CategoryAggregator       → CategoryResult per category
    3. OverallAggregator        → overall CategoryResult (included categories)
    4. TierClassifier           → tiers for both levels
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import structlog

from assessment_scoring.models.assessment import (
    AnswerOption,
    Category,
    Lead,
    Question,
    Response,
    ScoreTier,
)
from assessment_scoring.models.score import CategoryResult, QuestionScore
from assessment_scoring.scoring.aggregation import CategoryAggregator, OverallAggregator
from assessment_scoring.scoring.question_resolver import QuestionScoringResolver
from assessment_scoring.scoring.tier_classifier import TierClassifier

logger = structlog.get_logger(__name__)


@dataclass
class ScoringInputs:
    """Everything a scoring run reads from storage."""
    lead: Lead
    questions: List[Question]
    categories: List[Category]
    tiers: List[ScoreTier]
    responses: List[Response] = field(default_factory=list)
    options: List[AnswerOption] = field(default_factory=list)


@dataclass
class ScoreComputation:
    """Output of ScoreCalculator.calculate()."""
    question_scores: Dict[str, QuestionScore]     # question_id → (points, possible)
    categories: Dict[str, CategoryResult]         # category_id → result, in category order
    overall: CategoryResult                       # included categories only
    overall_tier: Optional[ScoreTier]
    responses_by_question: Dict[str, Response]


class ScoreCalculator:
    """Compute category and overall scores for one lead."""

    def __init__(self, resolver: Optional[QuestionScoringResolver] = None):
        self.resolver = resolver or QuestionScoringResolver()

    def calculate(self, inputs: ScoringInputs) -> ScoreComputation:
        options_by_question: Dict[str, List[AnswerOption]] = {}
        for option in sorted(inputs.options, key=lambda o: o.sort_order):
            options_by_question.setdefault(option.question_id, []).append(option)

        responses_by_question = {r.question_id: r for r in inputs.responses}

        # 1. Per-question scores
        question_scores: Dict[str, QuestionScore] = {}
        for question in inputs.questions:
            question_scores[question.id] = self.resolver.resolve(
                question,
                options_by_question.get(question.id, []),
                responses_by_question.get(question.id),
            )

        # 2. Per-category aggregation
        classifier = TierClassifier(inputs.tiers)
        category_aggregator = CategoryAggregator(classifier)
        categories = sorted(inputs.categories, key=lambda c: c.sort_order)

        category_results: Dict[str, CategoryResult] = {}
        for category in categories:
            category_results[category.id] = category_aggregator.aggregate(
                question_scores[q.id] for q in inputs.questions if q.category_id == category.id
            )

        # 3. Overall aggregation
        overall = OverallAggregator(classifier).aggregate(categories, category_results)
        overall_tier = classifier.classify(overall.percentage)

        logger.info(
            "score_calculated",
            lead_id=inputs.lead.id,
            questions=len(inputs.questions),
            categories=len(category_results),
            total_points=overall.points,
            total_possible=overall.possible,
            percentage=overall.percentage,
            tier=overall.tier_label,
        )

        return ScoreComputation(
            question_scores=question_scores,
            categories=category_results,
            overall=overall,
            overall_tier=overall_tier,
            responses_by_question=responses_by_question,
        )
