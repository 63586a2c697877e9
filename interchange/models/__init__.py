"""
Database models package
"""
from interchange.models.enums import Difficulty, FlashcardDifficulty, Role
from interchange.models.subject import Subject
from interchange.models.category import Category
from interchange.models.quiz import Quiz, Question, Option, MatchingPair
from interchange.models.flashcard import Flashcard
from interchange.models.user import User

__all__ = [
    "Difficulty", "FlashcardDifficulty", "Role",
    "Subject", "Category", "Quiz", "Question", "Option", "MatchingPair",
    "Flashcard", "User",
]
