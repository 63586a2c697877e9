"""
Payload codec: wire JSON <-> intermediate records

Import direction: raw upload bytes are parsed, normalized to a list of
objects and validated per entity kind. The resulting records only carry
the fields present in the source, so column defaults apply to the rest.

Export direction: ORM rows are projected onto fixed field lists. Nested
children never carry their parent's foreign key.
"""
import enum
import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Type

from pydantic import BaseModel, ValidationError

from interchange.schemas.payloads import (
    SubjectPayload, CategoryPayload, QuizPayload, FlashcardPayload, UserPayload
)
from interchange.utils.errors import InterchangeError

logger = logging.getLogger(__name__)

PAYLOAD_SCHEMAS: Dict[str, Type[BaseModel]] = {
    "subject": SubjectPayload,
    "category": CategoryPayload,
    "quiz": QuizPayload,
    "flashcard": FlashcardPayload,
    "user": UserPayload,
}

# Export projections, in output key order
EXPORT_FIELDS: Dict[str, tuple] = {
    "subject": ("name",),
    "category": ("name", "subject_id"),
    "flashcard": ("front", "back", "difficulty", "category_id", "user_id"),
    "user": ("name", "email", "password", "role"),
    "quiz": (
        "title", "description", "difficulty", "time_limit", "is_exam_mode",
        "created_at", "updated_at", "subject_id", "category_id",
    ),
}
QUESTION_FIELDS = ("content", "type", "image_url", "explanation")
OPTION_FIELDS = ("option_id", "text", "is_correct")
PAIR_FIELDS = ("left", "right")


def parse_payload(raw: bytes, require_array: bool = False) -> List[Dict[str, Any]]:
    """
    Parse an uploaded JSON document into a list of objects

    A single object is treated as a list of one unless `require_array`
    is set.

    Raises:
        InterchangeError: invalid_json on unparsable text, invalid_payload
            when the document is not an object or an array of objects
    """
    try:
        data = json.loads(raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw)
    except UnicodeDecodeError as e:
        raise InterchangeError("invalid_json", f"File is not UTF-8 text: {e}")
    except json.JSONDecodeError as e:
        raise InterchangeError("invalid_json", f"Malformed JSON: {e}")

    if require_array and not isinstance(data, list):
        raise InterchangeError("invalid_payload", "The file must contain a JSON array")

    items = data if isinstance(data, list) else [data]
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InterchangeError(
                "invalid_payload",
                f"Record {index}: expected a JSON object, got {type(item).__name__}",
            )
    return items


def decode_records(kind: str, items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Validate and clean every item for an entity kind

    Returns plain dicts ready to be passed as ORM constructor kwargs
    (quiz records still contain nested question/option/pair dicts).
    """
    schema = PAYLOAD_SCHEMAS[kind]
    records = []
    for index, item in enumerate(items):
        try:
            payload = schema.model_validate(item)
        except ValidationError as e:
            raise _validation_error(kind, index, e)
        records.append(payload.model_dump(exclude_none=True))
    return records


def _validation_error(kind: str, index: int, exc: ValidationError) -> InterchangeError:
    problems = exc.errors()
    code = "invalid_enum" if any(p["type"] == "enum" for p in problems) else "invalid_payload"
    details = "; ".join(
        f"{'.'.join(str(part) for part in p['loc'])}: {p['msg']}" for p in problems
    )
    logger.warning(f"Rejected {kind} record {index}: {details}")
    return InterchangeError(code, f"Invalid {kind} record {index}: {details}")


def encode_value(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def encode_row(row: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Project a result row mapping onto a fixed list of fields"""
    return {field: encode_value(row[field]) for field in fields}


def _encode_object(obj: Any, fields: Iterable[str]) -> Dict[str, Any]:
    return {field: encode_value(getattr(obj, field)) for field in fields}


def encode_quiz(quiz: Any) -> Dict[str, Any]:
    """Serialize a quiz with its nested questions, options and pairs"""
    data = _encode_object(quiz, EXPORT_FIELDS["quiz"])
    data["questions"] = [
        {
            **_encode_object(question, QUESTION_FIELDS),
            "options": [_encode_object(o, OPTION_FIELDS) for o in question.options],
            "pairs": [_encode_object(p, PAIR_FIELDS) for p in question.pairs],
        }
        for question in quiz.questions
    ]
    return data
