"""User, session and one-time token models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from greenpoll.database import Base, utcnow


class User(Base):
    """Application user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(63), unique=True, nullable=False, index=True)
    email = Column(String(63), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    join_time = Column(DateTime, nullable=False, default=utcnow)
    # Time of the last successful verification, NULL until the first.
    verify_time = Column(DateTime, nullable=True)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete")
    polls = relationship("Poll", back_populates="user", cascade="all, delete")
    votes = relationship("PollVote", back_populates="user", cascade="all, delete")


class UserSession(Base):
    """Login session, identified by the opaque ``session_id`` cookie value."""

    __tablename__ = "user_session"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    create_time = Column(DateTime, nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="sessions")


class Verification(Base):
    """Pending email verification token."""

    __tablename__ = "verification"

    id = Column(String(64), primary_key=True)
    email = Column(String(63), unique=True, nullable=False, index=True)
    create_time = Column(DateTime, nullable=False, default=utcnow)


class PasswordReset(Base):
    """Pending password reset token."""

    __tablename__ = "password_reset"

    id = Column(String(64), primary_key=True)
    email = Column(String(63), unique=True, nullable=False, index=True)
    create_time = Column(DateTime, nullable=False, default=utcnow)
