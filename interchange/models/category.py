"""
Category model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from interchange.database import Base


class Category(Base):
    """
    Categories table - each category belongs to one subject
    """
    __tablename__ = "categories"

    category_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.subject_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    subject = relationship("Subject", back_populates="categories")

    def __repr__(self):
        return f"<Category(category_id={self.category_id}, name={self.name}, subject_id={self.subject_id})>"
