"""
Question Settings - Assessment Scoring Engine
assessment_scoring/models/question_settings.py

Per-question configuration as a discriminated union, one variant per
question family. Raw ``settings_json`` blobs are parsed leniently: a field
that is missing or malformed falls back to its default, never raises.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from assessment_scoring.config import settings as app_settings
from assessment_scoring.models.enumerations import QuestionType, SINGLE_SELECT_TYPES
from assessment_scoring.scoring.utils import parse_int


class ChoiceSettings(BaseModel):
    """Single-select questions (yes/no, multiple choice, image select)."""

    kind: Literal["choice"] = "choice"


class CheckboxSettings(BaseModel):
    """Multi-select limits. Informational only; scoring ignores them."""

    kind: Literal["checkbox"] = "checkbox"
    min_select: Optional[int] = Field(default=None, ge=0)
    max_select: Optional[int] = Field(default=None, ge=1)


class SlidingScaleSettings(BaseModel):
    kind: Literal["sliding_scale"] = "sliding_scale"
    min: int = 0
    max: int = Field(default_factory=lambda: app_settings.SLIDING_SCALE_DEFAULT_MAX, ge=0)
    min_label: Optional[str] = None
    max_label: Optional[str] = None


class RatingScaleSettings(BaseModel):
    kind: Literal["rating_scale"] = "rating_scale"
    scale_max: int = Field(default_factory=lambda: app_settings.RATING_SCALE_DEFAULT_MAX, ge=1)


class OpenTextSettings(BaseModel):
    kind: Literal["open_text"] = "open_text"
    multiline: bool = True
    char_limit: Optional[int] = Field(default=None, ge=1)


QuestionSettings = Annotated[
    Union[
        ChoiceSettings,
        CheckboxSettings,
        SlidingScaleSettings,
        RatingScaleSettings,
        OpenTextSettings,
    ],
    Field(discriminator="kind"),
]


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _bounded(value: Any, minimum: int) -> Optional[int]:
    parsed = parse_int(value)
    if parsed is None or parsed < minimum:
        return None
    return parsed


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def parse_question_settings(question_type: QuestionType, raw: Any) -> QuestionSettings:
    """
    Build the settings variant for a question type from a raw JSON blob.

    Both the builder's camelCase keys (``scaleMax``, ``lowLabel``) and
    snake_case keys are accepted.
    """
    raw = raw if isinstance(raw, dict) else {}
    question_type = QuestionType(question_type)

    if question_type in SINGLE_SELECT_TYPES:
        return ChoiceSettings()

    if question_type == QuestionType.CHECKBOX_SELECT:
        return CheckboxSettings(**_drop_none({
            "min_select": _bounded(raw.get("min_select", raw.get("minSelect")), 0),
            "max_select": _bounded(raw.get("max_select", raw.get("maxSelect")), 1),
        }))

    if question_type == QuestionType.SLIDING_SCALE:
        return SlidingScaleSettings(**_drop_none({
            "min": parse_int(raw.get("min")),
            "max": _bounded(raw.get("max"), 0),
            "min_label": _str_or_none(raw.get("min_label", raw.get("lowLabel"))),
            "max_label": _str_or_none(raw.get("max_label", raw.get("highLabel"))),
        }))

    if question_type == QuestionType.RATING_SCALE:
        scale_max = raw.get("scaleMax", raw.get("scale_max", raw.get("max")))
        return RatingScaleSettings(**_drop_none({"scale_max": _bounded(scale_max, 1)}))

    if question_type == QuestionType.OPEN_TEXT:
        multiline = raw.get("multiline")
        return OpenTextSettings(**_drop_none({
            "multiline": multiline if isinstance(multiline, bool) else None,
            "char_limit": _bounded(raw.get("char_limit", raw.get("charLimit")), 1),
        }))

    raise ValueError(f"Unhandled question type: {question_type}")
