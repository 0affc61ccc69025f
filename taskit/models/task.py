from sqlalchemy import Column, Integer, Text, Boolean, DateTime
from ..core.database import Base
from . import utcnow


class Task(Base):
    """Task model for database"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False, index=True)

    # Owning account. Not a foreign key: the owner is not checked at write
    # time, and account deletion removes owned tasks explicitly.
    owner_id = Column(Integer, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"Task(id={self.id}, owner={self.owner_id}, completed={self.completed})"
