"""Poll service."""

from sqlalchemy.orm import Session

from greenpoll.database import atomic, utcnow
from greenpoll.errors import AuthError, NotFoundError
from greenpoll.models.poll import Poll
from greenpoll.models.user import User
from greenpoll.services.validation import POLL_DESCRIPTION_LENGTH, POLL_TITLE_LENGTH, check_length

PERMISSION_DENIED = "You do not have permission to edit this poll"


def require_owner(caller: User, poll: Poll) -> Poll:
    """Raise AuthError unless ``caller`` owns ``poll``."""
    if caller.id != poll.user_id:
        raise AuthError(PERMISSION_DENIED)
    return poll


class PollService:
    """Handles poll creation, lookup and owner-only changes."""

    def create_poll(self, db: Session, owner: User, title: str, description: str = "") -> Poll:
        check_length("Title", title, POLL_TITLE_LENGTH)
        check_length("Description", description, POLL_DESCRIPTION_LENGTH)

        poll = Poll(user_id=owner.id, title=title, description=description, create_time=utcnow())
        with atomic(db, "Failed to create new poll"):
            db.add(poll)
        db.refresh(poll)
        return poll

    def get_poll(self, db: Session, poll_id: int) -> Poll:
        poll = db.query(Poll).filter(Poll.id == poll_id).first()
        if not poll:
            raise NotFoundError("Poll does not exist")
        return poll

    def get_user_polls(self, db: Session, user_id: int) -> list[Poll]:
        """Get all polls created by a user, newest first."""
        return db.query(Poll).filter(Poll.user_id == user_id).order_by(Poll.create_time.desc(), Poll.id.desc()).all()

    def set_title(self, db: Session, caller: User, poll_id: int, title: str) -> Poll:
        check_length("Title", title, POLL_TITLE_LENGTH)
        poll = require_owner(caller, self.get_poll(db, poll_id))
        with atomic(db, "Failed to set poll title"):
            poll.title = title
        return poll

    def set_description(self, db: Session, caller: User, poll_id: int, description: str) -> Poll:
        check_length("Description", description, POLL_DESCRIPTION_LENGTH)
        poll = require_owner(caller, self.get_poll(db, poll_id))
        with atomic(db, "Failed to set poll description"):
            poll.description = description
        return poll

    def delete_poll(self, db: Session, caller: User, poll_id: int) -> None:
        """Delete a poll together with its options and votes."""
        poll = require_owner(caller, self.get_poll(db, poll_id))
        with atomic(db, "Failed to delete poll"):
            db.delete(poll)


_poll_service: PollService | None = None


def get_poll_service() -> PollService:
    """Get singleton poll service instance."""
    global _poll_service
    if _poll_service is None:
        _poll_service = PollService()
    return _poll_service
