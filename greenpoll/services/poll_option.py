"""Poll option service."""

from sqlalchemy.orm import Session

from greenpoll.database import atomic
from greenpoll.errors import CapacityError, NotFoundError
from greenpoll.models.poll import Poll, PollOption
from greenpoll.models.user import User
from greenpoll.services.poll import get_poll_service, require_owner
from greenpoll.services.validation import POLL_OPTION_VALUE_LENGTH, check_length

MAX_POLL_OPTIONS = 16


class PollOptionService:
    """Handles the answers attached to a poll."""

    def create_poll_option(self, db: Session, caller: User, poll_id: int, value: str) -> PollOption:
        check_length("Option value", value, POLL_OPTION_VALUE_LENGTH)
        poll = require_owner(caller, get_poll_service().get_poll(db, poll_id))

        with atomic(db, "Failed to create new poll option"):
            count = db.query(PollOption).filter(PollOption.poll_id == poll.id).count()
            if count >= MAX_POLL_OPTIONS:
                raise CapacityError(f"Polls cannot have more than {MAX_POLL_OPTIONS} options")
            option = PollOption(poll_id=poll.id, value=value)
            db.add(option)

        db.refresh(option)
        return option

    def poll_option_exists(self, db: Session, poll_option_id: int) -> bool:
        return db.query(PollOption).filter(PollOption.id == poll_option_id).count() == 1

    def get_poll_option(self, db: Session, poll_option_id: int) -> PollOption:
        option = db.query(PollOption).filter(PollOption.id == poll_option_id).first()
        if not option:
            raise NotFoundError("Poll option does not exist")
        return option

    def get_poll_option_poll(self, db: Session, poll_option_id: int) -> Poll:
        """Get the poll an option belongs to."""
        poll = db.query(Poll).join(PollOption, PollOption.poll_id == Poll.id).filter(PollOption.id == poll_option_id).first()
        if not poll:
            raise NotFoundError("Poll option does not exist")
        return poll

    def get_poll_options(self, db: Session, poll_id: int) -> list[PollOption]:
        """Get the options of a poll in creation order."""
        poll = get_poll_service().get_poll(db, poll_id)
        return db.query(PollOption).filter(PollOption.poll_id == poll.id).order_by(PollOption.id).all()

    def set_poll_option_value(self, db: Session, caller: User, poll_option_id: int, value: str) -> PollOption:
        check_length("Option value", value, POLL_OPTION_VALUE_LENGTH)
        option = self.get_poll_option(db, poll_option_id)
        require_owner(caller, option.poll)
        with atomic(db, "Failed to set poll option value"):
            option.value = value
        return option

    def delete_poll_option(self, db: Session, caller: User, poll_option_id: int) -> None:
        """Delete an option and the votes cast for it."""
        option = self.get_poll_option(db, poll_option_id)
        require_owner(caller, option.poll)
        with atomic(db, "Failed to delete poll option"):
            db.delete(option)


_poll_option_service: PollOptionService | None = None


def get_poll_option_service() -> PollOptionService:
    """Get singleton poll option service instance."""
    global _poll_option_service
    if _poll_option_service is None:
        _poll_option_service = PollOptionService()
    return _poll_option_service
