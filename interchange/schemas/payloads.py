"""
Pydantic schemas for the JSON interchange payloads

Unknown keys are ignored so that an exported file (which carries extra
fields such as timestamps or option ids) can be imported again unchanged.
"""
from pydantic import BaseModel, conint, field_validator
from typing import List, Optional

from interchange.models.enums import Difficulty, FlashcardDifficulty, Role

# SQLite INTEGER is a signed 64-bit value
SQLITE_MAX_INTEGER = 2**63 - 1

RecordId = conint(ge=1, le=SQLITE_MAX_INTEGER)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_list(value):
    return [] if value is None else value


class SubjectPayload(BaseModel):
    name: str


class CategoryPayload(BaseModel):
    name: str
    subject_id: RecordId


class OptionPayload(BaseModel):
    text: str
    is_correct: bool


class PairPayload(BaseModel):
    left: str
    right: str


class QuestionPayload(BaseModel):
    """Question nested in a quiz; options and pairs are always present"""
    content: str
    type: str
    image_url: Optional[str] = None
    explanation: Optional[str] = None
    options: List[OptionPayload] = []
    pairs: List[PairPayload] = []

    @field_validator("options", "pairs", mode="before")
    @classmethod
    def default_children(cls, value):
        return _none_to_list(value)


class QuizPayload(BaseModel):
    title: str
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    time_limit: Optional[conint(ge=0, le=SQLITE_MAX_INTEGER)] = None
    is_exam_mode: Optional[bool] = None
    subject_id: RecordId
    category_id: RecordId
    questions: List[QuestionPayload] = []

    @field_validator("difficulty", mode="before")
    @classmethod
    def blank_difficulty(cls, value):
        return _blank_to_none(value)

    @field_validator("questions", mode="before")
    @classmethod
    def default_questions(cls, value):
        return _none_to_list(value)


class FlashcardPayload(BaseModel):
    front: str
    back: str
    difficulty: Optional[FlashcardDifficulty] = None
    category_id: RecordId
    user_id: RecordId

    @field_validator("difficulty", mode="before")
    @classmethod
    def blank_difficulty(cls, value):
        return _blank_to_none(value)


class UserPayload(BaseModel):
    email: str
    password: str
    name: str
    role: Optional[Role] = None

    @field_validator("role", mode="before")
    @classmethod
    def blank_role(cls, value):
        return _blank_to_none(value)
