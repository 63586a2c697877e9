"""
Subject model - root classification node
"""
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from interchange.database import Base


class Subject(Base):
    """
    Subjects table - referenced by categories and quizzes
    """
    __tablename__ = "subjects"

    subject_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    categories = relationship("Category", back_populates="subject")

    def __repr__(self):
        return f"<Subject(subject_id={self.subject_id}, name={self.name})>"
