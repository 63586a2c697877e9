"""
User model
"""
from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from interchange.database import Base
from interchange.models.enums import Role


class User(Base):
    """
    Users table - password holds the stored (hashed) value verbatim
    """
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(Role, native_enum=False, length=10), nullable=False, default=Role.USER)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(user_id={self.user_id}, email={self.email}, role={self.role})>"
