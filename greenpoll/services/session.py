"""Login session service."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import atomic, utcnow
from greenpoll.errors import AuthError, NotFoundError
from greenpoll.models.user import User, UserSession
from greenpoll.services.tokens import generate_token

logger = logging.getLogger("greenpoll")


class SessionService:
    """Creates, resolves and evicts login sessions.

    A user keeps at most ``MAX_USER_SESSIONS`` sessions; creating another
    evicts the oldest. Sessions older than ``SESSION_EXPIRE_DAYS`` are treated
    as absent.
    """

    def cutoff(self) -> datetime:
        return utcnow() - timedelta(days=get_settings().SESSION_EXPIRE_DAYS)

    def _live(self, db: Session):
        return db.query(UserSession).filter(UserSession.create_time > self.cutoff())

    def create_session(self, db: Session, user_id: int) -> UserSession:
        """Create a session for ``user_id`` and evict any beyond the most recent few."""
        max_sessions = get_settings().MAX_USER_SESSIONS
        session = UserSession(id=generate_token(), user_id=user_id, create_time=utcnow())

        with atomic(db, "Failed to create new session"):
            db.add(session)
            db.flush()
            keep = [
                row.id
                for row in db.query(UserSession.id)
                .filter(UserSession.user_id == user_id, UserSession.id != session.id)
                .order_by(UserSession.create_time.desc())
                .limit(max_sessions - 1)
            ]
            keep.append(session.id)
            evicted = (
                db.query(UserSession)
                .filter(UserSession.user_id == user_id, UserSession.id.notin_(keep))
                .delete(synchronize_session=False)
            )

        if evicted:
            logger.info("Evicted %d old session(s) for user %d", evicted, user_id)
        db.refresh(session)
        return session

    def session_exists(self, db: Session, session_id: str) -> bool:
        return self._live(db).filter(UserSession.id == session_id).count() == 1

    def get_session(self, db: Session, session_id: str) -> UserSession:
        session = self._live(db).filter(UserSession.id == session_id).first()
        if not session:
            raise NotFoundError("Session does not exist")
        return session

    def get_user_by_session(self, db: Session, session_id: str) -> User:
        """Return the owner of a live session. Raises AuthError otherwise."""
        user = (
            db.query(User)
            .join(UserSession, UserSession.user_id == User.id)
            .filter(UserSession.id == session_id, UserSession.create_time > self.cutoff())
            .first()
        )
        if not user:
            raise AuthError("Not logged in")
        return user

    def get_user_sessions(self, db: Session, user_id: int) -> list[UserSession]:
        """Live sessions for a user, newest first."""
        return self._live(db).filter(UserSession.user_id == user_id).order_by(UserSession.create_time.desc()).all()

    def delete_session(self, db: Session, session_id: str) -> None:
        with atomic(db, "Failed to delete session"):
            db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)

    def delete_user_sessions(self, db: Session, user_id: int) -> None:
        with atomic(db, "Failed to delete user sessions"):
            db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)

    def prune_sessions(self, db: Session) -> int:
        """Delete expired sessions. Returns the number of rows removed."""
        with atomic(db, "Failed to prune sessions"):
            count = (
                db.query(UserSession).filter(UserSession.create_time <= self.cutoff()).delete(synchronize_session=False)
            )
        if count:
            logger.info("Pruned %d expired session(s)", count)
        return count


_session_service: SessionService | None = None


def get_session_service() -> SessionService:
    """Get singleton session service instance."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service
