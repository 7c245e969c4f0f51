"""SQLAlchemy model for application users."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, false, func

from bookhub.models.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    is_admin = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    created_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )


__all__ = ["User"]
