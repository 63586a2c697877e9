"""
Bulk entity import service

Flat kinds (subject, category, flashcard, user) are inserted as one batch
in a single transaction: one bad record rolls back the whole file.
Quizzes are deep-created one by one, each with its questions, options and
pairs in its own transaction.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interchange.config import settings
from interchange.models import (
    Subject, Category, Flashcard, User, Quiz, Question, Option, MatchingPair
)
from interchange.services.archive_service import archive_service
from interchange.services.codec import parse_payload, decode_records
from interchange.utils.cache import cache_service
from interchange.utils.errors import InterchangeError, from_store_error

logger = logging.getLogger(__name__)


class ImportService:
    """Service for importing uploaded JSON files and image archives"""

    FLAT_MODELS = {
        "subject": Subject,
        "category": Category,
        "flashcard": Flashcard,
        "user": User,
    }

    MESSAGES = {
        "subject": "Subjects imported",
        "category": "Categories imported",
        "flashcard": "Flashcards imported",
        "user": "Users imported",
        "quiz": "Quizzes imported",
    }

    def import_json(self, db: Session, kind: str, raw: bytes) -> int:
        """
        Import a JSON upload for any entity kind

        Returns:
            Number of top-level records created
        """
        records = decode_records(kind, parse_payload(raw))
        if kind == "quiz":
            return self.import_quizzes(db, records)
        return self.bulk_insert(db, kind, records)

    def bulk_insert(self, db: Session, kind: str, records: List[Dict[str, Any]]) -> int:
        """Insert every record of a flat kind in one transaction"""
        model = self.FLAT_MODELS[kind]
        if not records:
            return 0

        try:
            db.add_all([model(**record) for record in records])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Bulk insert of {len(records)} {kind} records failed: {str(e)}")
            raise from_store_error(e, f"Import of {kind} failed")

        cache_service.invalidate(kind)
        logger.info(f"Imported {len(records)} {kind} records")
        return len(records)

    def import_quizzes(self, db: Session, records: List[Dict[str, Any]]) -> int:
        """
        Deep-create quizzes one at a time

        Quizzes created before a failing one stay committed; the error
        message says how many got through.
        """
        created = 0
        for index, record in enumerate(records):
            try:
                self.create_quiz_graph(db, record)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Quiz {index} ({record.get('title')}) import failed: {str(e)}")
                raise from_store_error(
                    e, f"Quiz {index} failed after {created} quizzes were imported"
                )
            created += 1

        if created:
            cache_service.invalidate("quiz")
        logger.info(f"Imported {created} quizzes")
        return created

    def create_quiz_graph(self, db: Session, record: Dict[str, Any]) -> Quiz:
        """Create a quiz with all nested children in a single transaction"""
        fields = {k: v for k, v in record.items() if k != "questions"}
        quiz = Quiz(**fields)

        for item in record.get("questions", []):
            question = Question(
                **{k: v for k, v in item.items() if k not in ("options", "pairs")}
            )
            question.options = [Option(**option) for option in item.get("options", [])]
            question.pairs = [MatchingPair(**pair) for pair in item.get("pairs", [])]
            quiz.questions.append(question)

        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    def import_flashcards_json(self, db: Session, raw: bytes) -> int:
        """Legacy flashcard import: the file must hold a JSON array"""
        records = decode_records("flashcard", parse_payload(raw, require_array=True))
        return self.bulk_insert(db, "flashcard", records)

    async def import_question_images(self, content: bytes) -> int:
        """Extract an uploaded zip of question images into the images directory"""
        destination = settings.resolve(settings.QUESTION_IMAGES_DIR)
        return await archive_service.extract_zip(
            content, destination, concurrency=settings.ZIP_EXTRACT_CONCURRENCY
        )


def require_upload(file) -> None:
    """Reject requests without an uploaded file"""
    if file is None or not getattr(file, "filename", None):
        raise InterchangeError("missing_file", "No file received")


# Global instance
import_service = ImportService()
