from enum import Enum

class QuestionType(str, Enum):
    YES_NO = "yes_no"                    # Two options, single select
    MULTIPLE_CHOICE = "multiple_choice"  # N options, single select
    IMAGE_SELECT = "image_select"        # N image options, single select
    CHECKBOX_SELECT = "checkbox_select"  # N options, multi select
    SLIDING_SCALE = "sliding_scale"      # Numeric value encoded in the selection
    RATING_SCALE = "rating_scale"        # 1..N rating
    OPEN_TEXT = "open_text"              # Free text, never scored

class LeadStatus(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"


SINGLE_SELECT_TYPES = frozenset({
    QuestionType.YES_NO,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.IMAGE_SELECT,
})
