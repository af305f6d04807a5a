"""Poll, option and vote models."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from greenpoll.database import Base, utcnow


class Poll(Base):
    """A poll owned by a user."""

    __tablename__ = "poll"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1023), nullable=False, default="")
    create_time = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="polls")
    options = relationship("PollOption", back_populates="poll", cascade="all, delete", order_by="PollOption.id")
    votes = relationship("PollVote", back_populates="poll", cascade="all, delete")


class PollOption(Base):
    """One answer a voter can pick."""

    __tablename__ = "poll_option"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("poll.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String(255), nullable=False)

    poll = relationship("Poll", back_populates="options")
    votes = relationship("PollVote", back_populates="poll_option", cascade="all, delete")


class PollVote(Base):
    """A user's ballot on a poll. One per (user, poll)."""

    __tablename__ = "poll_vote"
    __table_args__ = (UniqueConstraint("user_id", "poll_id", name="uq_poll_vote_user_poll"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    poll_id = Column(Integer, ForeignKey("poll.id", ondelete="CASCADE"), nullable=False, index=True)
    poll_option_id = Column(Integer, ForeignKey("poll_option.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_time = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="votes")
    poll = relationship("Poll", back_populates="votes")
    poll_option = relationship("PollOption", back_populates="votes")
