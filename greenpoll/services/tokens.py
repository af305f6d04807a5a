"""Shared lifecycle for one-time email tokens (verification, password reset)."""

import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from greenpoll.database import atomic, utcnow
from greenpoll.errors import ConflictError, NotFoundError
from greenpoll.models.user import PasswordReset, User, Verification

logger = logging.getLogger("greenpoll")


def generate_token() -> str:
    """Opaque, unguessable identifier for sessions and one-time tokens."""
    return secrets.token_urlsafe(32)


class OneTimeTokenService:
    """Issues, looks up and prunes single-use tokens keyed by email.

    At most one live token exists per email. Expiry is checked in every lookup,
    so a token is rejected as soon as it is older than ``expire_minutes``
    whether or not a prune has run since.
    """

    model: type[Verification] | type[PasswordReset]
    label: str = "token"

    @property
    def expire_minutes(self) -> int:
        raise NotImplementedError

    def cutoff(self) -> datetime:
        """Tokens created at or before this instant are expired."""
        return utcnow() - timedelta(minutes=self.expire_minutes)

    def _live(self, db: Session):
        return db.query(self.model).filter(self.model.create_time > self.cutoff())

    def prune(self, db: Session) -> int:
        """Delete expired tokens. Returns the number of rows removed."""
        with atomic(db, f"Failed to prune {self.label} records"):
            count = db.query(self.model).filter(self.model.create_time <= self.cutoff()).delete(synchronize_session=False)
        if count:
            logger.info("Pruned %d expired %s record(s)", count, self.label)
        return count

    def add(self, db: Session, email: str) -> Verification | PasswordReset:
        """Stage a token for ``email`` in the caller's transaction, reusing a live one.

        The caller commits.
        """
        existing = self._live(db).filter(self.model.email == email).first()
        if existing:
            return existing
        db.query(self.model).filter(self.model.email == email).delete(synchronize_session=False)
        record = self.model(id=generate_token(), email=email, create_time=utcnow())
        db.add(record)
        db.flush()
        return record

    def create(self, db: Session, email: str) -> Verification | PasswordReset:
        """Return the live token for ``email``, creating one if none is pending."""
        self.prune(db)
        try:
            with atomic(db, f"Failed to create new {self.label} record", conflict_message=f"Duplicate {self.label}"):
                record = self.add(db, email)
        except ConflictError:
            # Lost a race with a concurrent request for the same email.
            record = self.get_for_email(db, email)
        return record

    def exists(self, db: Session, token: str) -> bool:
        return self._live(db).filter(self.model.id == token).count() == 1

    def get(self, db: Session, token: str) -> Verification | PasswordReset:
        record = self._live(db).filter(self.model.id == token).first()
        if not record:
            raise NotFoundError(f"{self.label.capitalize()} record does not exist")
        return record

    def get_for_email(self, db: Session, email: str) -> Verification | PasswordReset:
        record = self._live(db).filter(self.model.email == email).first()
        if not record:
            raise NotFoundError(f"{self.label.capitalize()} record does not exist for given email")
        return record

    def get_user(self, db: Session, token: str) -> User | None:
        """Return the user a live token was issued for, or None."""
        return (
            db.query(User)
            .join(self.model, self.model.email == User.email)
            .filter(self.model.id == token, self.model.create_time > self.cutoff())
            .first()
        )

    def delete(self, db: Session, token: str) -> None:
        with atomic(db, f"Failed to delete {self.label} record"):
            db.query(self.model).filter(self.model.id == token).delete(synchronize_session=False)

    def delete_for_email(self, db: Session, email: str) -> None:
        """Stage deletion of every token for ``email``. The caller commits."""
        db.query(self.model).filter(self.model.email == email).delete(synchronize_session=False)
