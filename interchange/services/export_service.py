"""
Bulk entity export service
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from interchange.config import settings
from interchange.models import Subject, Category, Flashcard, User, Quiz, Question
from interchange.services.archive_service import archive_service
from interchange.services.codec import EXPORT_FIELDS, encode_row, encode_quiz
from interchange.utils.cache import cache_service
from interchange.utils.errors import InterchangeError

logger = logging.getLogger(__name__)


class ExportService:
    """Service for fixed-projection exports of whole entity tables"""

    KINDS = ("subject", "category", "quiz", "flashcard", "user")

    FLAT_MODELS = {
        "subject": Subject,
        "category": Category,
        "flashcard": Flashcard,
        "user": User,
    }

    def export_json(self, db: Session, kind: str) -> List[Dict[str, Any]]:
        """
        Export every record of an entity kind

        Raises:
            InterchangeError: unknown_kind when strict kind checking is on
        """
        if kind not in self.KINDS:
            if settings.EXPORT_STRICT_KIND:
                raise InterchangeError(
                    "unknown_kind",
                    f"Unknown export type '{kind}', expected one of: {', '.join(self.KINDS)}",
                )
            logger.warning(f"Unknown export type '{kind}', returning an empty list")
            return []

        cached = cache_service.get(kind)
        if cached is not None:
            return cached

        data = self._query(db, kind)
        cache_service.set(kind, data)
        logger.info(f"Exported {len(data)} {kind} records")
        return data

    def _query(self, db: Session, kind: str) -> List[Dict[str, Any]]:
        if kind == "quiz":
            stmt = (
                select(Quiz)
                .options(
                    selectinload(Quiz.questions).selectinload(Question.options),
                    selectinload(Quiz.questions).selectinload(Question.pairs),
                )
                .order_by(Quiz.quiz_id)
            )
            return [encode_quiz(quiz) for quiz in db.scalars(stmt).all()]

        model = self.FLAT_MODELS[kind]
        fields = EXPORT_FIELDS[kind]
        primary_key = model.__mapper__.primary_key[0]
        stmt = select(*(getattr(model, field) for field in fields)).order_by(primary_key)
        return [encode_row(row._mapping, fields) for row in db.execute(stmt)]

    @staticmethod
    def render_json(data: List[Dict[str, Any]]) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)

    def database_file(self) -> Path:
        """Path of the live database file, for download"""
        path = settings.database_path
        if not path.is_file():
            raise InterchangeError("not_found", f"Database file not found: {path}", status_code=404)
        return path

    def question_images_zip(self) -> Iterator[bytes]:
        return archive_service.iter_directory_zip(settings.resolve(settings.QUESTION_IMAGES_DIR))


# Global instance
export_service = ExportService()
