"""Poll vote service."""

from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from greenpoll.database import atomic, utcnow
from greenpoll.errors import NotFoundError
from greenpoll.models.poll import Poll, PollOption, PollVote
from greenpoll.services.poll import get_poll_service
from greenpoll.services.poll_option import get_poll_option_service


@dataclass
class OptionTally:
    """Vote count for one option of a poll."""

    poll_option_id: int
    value: str
    votes: int


class PollVoteService:
    """Records ballots. A user holds at most one vote per poll."""

    def vote(self, db: Session, user_id: int, poll_option_id: int) -> PollVote:
        """Cast a vote, replacing any earlier vote by the same user on the same poll."""
        option = get_poll_option_service().get_poll_option(db, poll_option_id)

        with atomic(db, "Failed to record vote", conflict_message="Vote was changed concurrently"):
            db.query(PollVote).filter(PollVote.user_id == user_id, PollVote.poll_id == option.poll_id).delete(
                synchronize_session=False
            )
            vote = PollVote(user_id=user_id, poll_id=option.poll_id, poll_option_id=option.id, vote_time=utcnow())
            db.add(vote)

        db.refresh(vote)
        return vote

    def unvote(self, db: Session, user_id: int, poll_id: int) -> None:
        """Remove the user's vote on a poll, if any."""
        with atomic(db, "Failed to remove vote"):
            db.query(PollVote).filter(PollVote.user_id == user_id, PollVote.poll_id == poll_id).delete(
                synchronize_session=False
            )

    def get_poll_vote(self, db: Session, poll_vote_id: int) -> PollVote:
        vote = db.query(PollVote).filter(PollVote.id == poll_vote_id).first()
        if not vote:
            raise NotFoundError("Poll vote does not exist")
        return vote

    def get_poll_vote_poll(self, db: Session, poll_vote_id: int) -> Poll:
        """Get the poll a vote was cast on."""
        poll = db.query(Poll).join(PollVote, PollVote.poll_id == Poll.id).filter(PollVote.id == poll_vote_id).first()
        if not poll:
            raise NotFoundError("Poll vote does not exist")
        return poll

    def get_user_vote(self, db: Session, user_id: int, poll_id: int) -> PollVote:
        vote = db.query(PollVote).filter(PollVote.user_id == user_id, PollVote.poll_id == poll_id).first()
        if not vote:
            raise NotFoundError("You have not voted on this poll")
        return vote

    def get_poll_results(self, db: Session, poll_id: int) -> list[OptionTally]:
        """Count votes per option, including options nobody picked."""
        poll = get_poll_service().get_poll(db, poll_id)
        rows = (
            db.query(PollOption.id, PollOption.value, func.count(PollVote.id))
            .outerjoin(PollVote, PollVote.poll_option_id == PollOption.id)
            .filter(PollOption.poll_id == poll.id)
            .group_by(PollOption.id, PollOption.value)
            .order_by(PollOption.id)
            .all()
        )
        return [OptionTally(poll_option_id=row[0], value=row[1], votes=row[2]) for row in rows]


_poll_vote_service: PollVoteService | None = None


def get_poll_vote_service() -> PollVoteService:
    """Get singleton poll vote service instance."""
    global _poll_vote_service
    if _poll_vote_service is None:
        _poll_vote_service = PollVoteService()
    return _poll_vote_service
