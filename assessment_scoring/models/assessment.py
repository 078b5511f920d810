from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Any, List, Optional

from assessment_scoring.models.enumerations import QuestionType, LeadStatus
from assessment_scoring.models.question_settings import (
    QuestionSettings,
    parse_question_settings,
)


class Category(BaseModel):
    """
    A scoring dimension of an assessment.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    assessment_id: str
    name: str = ""
    sort_order: int = 0
    include_in_total: bool = Field(
        default=True,
        description="Whether this category contributes to the overall score"
    )


class AnswerOption(BaseModel):
    """
    A selectable answer for a choice-based question.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    question_id: str
    text: Optional[str] = None
    points: int = 0
    sort_order: int = 0


class Question(BaseModel):
    """
    A question belonging to exactly one category.

    ``settings`` is derived from the raw ``settings_json`` blob according to
    ``type``, so the variant always matches the question type.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    assessment_id: str
    category_id: str
    type: QuestionType
    text: Optional[str] = None
    sort_order: int = 0
    settings: QuestionSettings

    @model_validator(mode="before")
    @classmethod
    def build_settings(cls, data: Any) -> Any:
        if isinstance(data, dict) and not isinstance(data.get("settings"), BaseModel):
            raw = data.get("settings", data.get("settings_json"))
            data = {**data, "settings": parse_question_settings(data.get("type"), raw)}
        return data


class Response(BaseModel):
    """
    One lead's answer to one question.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str
    question_id: str
    selected_option_ids: Optional[List[str]] = None
    open_text_value: Optional[str] = None
    points_awarded: int = 0

    @property
    def first_selection(self) -> Optional[str]:
        """First selected identifier, or None when nothing was selected."""
        return self.selected_option_ids[0] if self.selected_option_ids else None


class ScoreTier(BaseModel):
    """
    Inclusive percentage band [min_pct, max_pct] with a label and colour.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    assessment_id: str
    label: str
    min_pct: int
    max_pct: int
    colour: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0


class Lead(BaseModel):
    """
    One respondent's attempt at an assessment.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    assessment_id: str
    org_id: Optional[str] = None
    email: Optional[str] = None
    status: LeadStatus = LeadStatus.STARTED
    score_id: Optional[str] = None
    completed_at: Optional[datetime] = None
