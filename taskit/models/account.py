from sqlalchemy import Column, Integer, String, Text, DateTime, LargeBinary, ForeignKey
from sqlalchemy.orm import relationship
from ..core.database import Base
from . import utcnow


class Account(Base):
    """Account model for database"""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # Stored trimmed and lowercased, which makes uniqueness case-insensitive
    email = Column(String(254), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    age = Column(Integer, default=0, nullable=False)
    avatar = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Active session tokens, oldest first
    tokens = relationship(
        "AccountToken",
        back_populates="account",
        order_by="AccountToken.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"Account(id={self.id}, email={self.email})"


class AccountToken(Base):
    """One active session token; an account may hold several at once"""
    __tablename__ = "account_tokens"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    token = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    account = relationship("Account", back_populates="tokens")
