"""
Question Scoring Resolver
assessment_scoring/scoring/question_resolver.py

Computes the (points, possible) pair for one question from its type,
settings, answer options and the lead's response.

Rules by type:
    open_text                          (0, 0), never contributes
    yes_no / multiple_choice /
    image_select                       possible = max option points
                                       points   = points of the selected option
    checkbox_select                    possible = Σ positive option points
                                       points   = Σ points of selected options
    sliding_scale                      possible = settings.max
                                       points   = int(selected value)
    rating_scale                       single-select rules when options exist,
                                       else possible = settings.scale_max and
                                       points = selected value in [0, scale_max]

Missing responses, unknown option ids and unparsable values all score 0.
"""

from typing import Callable, Dict, List, Optional, Sequence

import structlog

from assessment_scoring.config import settings
from assessment_scoring.models.assessment import AnswerOption, Question, Response
from assessment_scoring.models.enumerations import QuestionType
from assessment_scoring.models.score import QuestionScore
from assessment_scoring.scoring.utils import parse_int

logger = structlog.get_logger(__name__)

ZERO = QuestionScore(points=0, possible=0)


class QuestionScoringResolver:
    """Resolve per-question scores for every supported question type."""

    def __init__(self, use_cached_points: Optional[bool] = None):
        """
        Args:
            use_cached_points: For scale questions, fall back to the response's
                previously stored ``points_awarded`` when the selection does not
                carry a numeric value. Defaults to SCALE_USE_CACHED_POINTS.
        """
        if use_cached_points is None:
            use_cached_points = settings.SCALE_USE_CACHED_POINTS
        self.use_cached_points = use_cached_points

        self._handlers: Dict[QuestionType, Callable[..., QuestionScore]] = {
            QuestionType.OPEN_TEXT: self._resolve_open_text,
            QuestionType.YES_NO: self._resolve_single_select,
            QuestionType.MULTIPLE_CHOICE: self._resolve_single_select,
            QuestionType.IMAGE_SELECT: self._resolve_single_select,
            QuestionType.CHECKBOX_SELECT: self._resolve_checkbox,
            QuestionType.SLIDING_SCALE: self._resolve_sliding_scale,
            QuestionType.RATING_SCALE: self._resolve_rating_scale,
        }
        missing = set(QuestionType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No scoring rule for question types: {sorted(missing)}")

    def resolve(
        self,
        question: Question,
        options: Sequence[AnswerOption],
        response: Optional[Response],
    ) -> QuestionScore:
        """
        Resolve one question.

        Args:
            question: Question with parsed settings.
            options: The question's answer options (any order).
            response: The lead's response, or None when unanswered.

        Returns:
            QuestionScore(points, possible)

        Examples:
            >>> # options A(3) B(2) C(1), B selected
            >>> resolver.resolve(question, options, response)
            QuestionScore(points=2, possible=3)
        """
        handler = self._handlers[question.type]
        return handler(question, list(options), response)

    # ------------------------------------------------------------------
    # Per-type rules
    # ------------------------------------------------------------------

    def _resolve_open_text(self, question, options, response) -> QuestionScore:
        return ZERO

    def _resolve_single_select(
        self, question: Question, options: List[AnswerOption], response: Optional[Response]
    ) -> QuestionScore:
        possible = max((o.points for o in options), default=0)
        points = 0
        selected_id = response.first_selection if response else None
        if selected_id is not None:
            selected = next((o for o in options if o.id == selected_id), None)
            points = selected.points if selected else 0
        return QuestionScore(points=points, possible=possible)

    def _resolve_checkbox(
        self, question: Question, options: List[AnswerOption], response: Optional[Response]
    ) -> QuestionScore:
        possible = sum(o.points for o in options if o.points > 0)
        points = 0
        if response and response.selected_option_ids:
            selected_ids = set(response.selected_option_ids)
            points = sum(o.points for o in options if o.id in selected_ids)
        return QuestionScore(points=points, possible=possible)

    def _resolve_sliding_scale(
        self, question: Question, options: List[AnswerOption], response: Optional[Response]
    ) -> QuestionScore:
        possible = question.settings.max
        return QuestionScore(points=self._scale_value(response), possible=possible)

    def _resolve_rating_scale(
        self, question: Question, options: List[AnswerOption], response: Optional[Response]
    ) -> QuestionScore:
        if options:
            return self._resolve_single_select(question, options, response)

        scale_max = question.settings.scale_max
        points = max(0, min(scale_max, self._scale_value(response)))
        return QuestionScore(points=points, possible=scale_max)

    def _scale_value(self, response: Optional[Response]) -> int:
        """Numeric value encoded in the first selected identifier."""
        if response is None:
            return 0
        value = parse_int(response.first_selection)
        if value is None and self.use_cached_points:
            logger.debug(
                "scale_value_from_cache",
                response_id=response.id,
                points_awarded=response.points_awarded,
            )
            return response.points_awarded
        return value if value is not None else 0
