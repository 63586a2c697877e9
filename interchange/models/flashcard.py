"""
Flashcard model
"""
from sqlalchemy import Column, Integer, Text, DateTime, Enum, ForeignKey, func
from interchange.database import Base
from interchange.models.enums import FlashcardDifficulty


class Flashcard(Base):
    """
    Flashcards table - references a category and the owning user by id
    """
    __tablename__ = "flashcards"

    flashcard_id = Column(Integer, primary_key=True, autoincrement=True)
    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)
    difficulty = Column(
        Enum(FlashcardDifficulty, native_enum=False, length=20),
        nullable=False,
        default=FlashcardDifficulty.NOUVEAU,
    )
    category_id = Column(Integer, ForeignKey("categories.category_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Flashcard(flashcard_id={self.flashcard_id}, difficulty={self.difficulty})>"
