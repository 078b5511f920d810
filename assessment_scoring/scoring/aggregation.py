"""
Category & Overall Aggregation
assessment_scoring/scoring/aggregation.py

Category:
    points     = Σ question points
    possible   = Σ question possible
    percentage = round(points / possible × 100), None when possible == 0
    tier       = TierClassifier(percentage)

Overall:
    Same four fields, summed over categories with include_in_total = true
    only. Excluded categories add to neither numerator nor denominator.
"""

from typing import Iterable, Mapping, Sequence

from assessment_scoring.models.assessment import Category
from assessment_scoring.models.score import CategoryResult, QuestionScore
from assessment_scoring.scoring.tier_classifier import TierClassifier
from assessment_scoring.scoring.utils import percentage


def _result(points: int, possible: int, classifier: TierClassifier) -> CategoryResult:
    pct = percentage(points, possible)
    return CategoryResult.build(points, possible, pct, classifier.classify(pct))


class CategoryAggregator:
    """Aggregate resolved question scores within one category."""

    def __init__(self, classifier: TierClassifier):
        self.classifier = classifier

    def aggregate(self, question_scores: Iterable[QuestionScore]) -> CategoryResult:
        points = 0
        possible = 0
        for qs in question_scores:
            points += qs.points
            possible += qs.possible
        return _result(points, possible, self.classifier)


class OverallAggregator:
    """Aggregate category results into the assessment-wide result."""

    def __init__(self, classifier: TierClassifier):
        self.classifier = classifier

    def aggregate(
        self,
        categories: Sequence[Category],
        category_results: Mapping[str, CategoryResult],
    ) -> CategoryResult:
        """
        Args:
            categories: All categories of the assessment.
            category_results: Category id -> aggregated result. Categories
                without an entry are skipped.
        """
        points = 0
        possible = 0
        for category in categories:
            result = category_results.get(category.id)
            if result is None or not category.include_in_total:
                continue
            points += result.points
            possible += result.possible
        return _result(points, possible, self.classifier)

