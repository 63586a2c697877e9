"""
Quiz model and its owned question graph
"""
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Enum, ForeignKey, func
)
from sqlalchemy.orm import relationship
from interchange.database import Base
from interchange.models.enums import Difficulty


class Quiz(Base):
    """
    Quizzes table - owns questions, which own options and matching pairs
    """
    __tablename__ = "quizzes"

    quiz_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    difficulty = Column(
        Enum(Difficulty, native_enum=False, length=20),
        nullable=False,
        default=Difficulty.MOYEN,
    )
    time_limit = Column(Integer)  # minutes
    is_exam_mode = Column(Boolean, nullable=False, default=False)
    subject_id = Column(Integer, ForeignKey("subjects.subject_id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.category_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.question_id",
    )

    def __repr__(self):
        return f"<Quiz(quiz_id={self.quiz_id}, title={self.title}, difficulty={self.difficulty})>"


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.quiz_id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # SINGLE, MULTIPLE, MATCHING
    image_url = Column(String(500))
    explanation = Column(Text)

    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Option.option_id",
    )
    pairs = relationship(
        "MatchingPair",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="MatchingPair.pair_id",
    )

    def __repr__(self):
        return f"<Question(question_id={self.question_id}, quiz_id={self.quiz_id}, type={self.type})>"


class Option(Base):
    __tablename__ = "options"

    option_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")


class MatchingPair(Base):
    __tablename__ = "matching_pairs"

    pair_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    left = Column(Text, nullable=False)
    right = Column(Text, nullable=False)

    question = relationship("Question", back_populates="pairs")
