"""Tests for the login session service."""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from conftest import register_verified
from greenpoll.database import utcnow
from greenpoll.errors import AuthError, NotFoundError
from greenpoll.models.user import UserSession
from greenpoll.services.session import SessionService


@pytest.fixture(name="user")
def user_fixture(db_session: Session):
    return register_verified(db_session, "sessionuser", "session@example.com", "password123")


class TestSessionService:
    """Tests for SessionService."""

    def test_create_and_resolve(self, db_session: Session, user):
        service = SessionService()
        session = service.create_session(db_session, user.id)

        assert len(session.id) >= 32
        assert service.session_exists(db_session, session.id)
        assert service.get_user_by_session(db_session, session.id).id == user.id

    def test_session_ids_are_unique(self, db_session: Session, user):
        service = SessionService()
        ids = {service.create_session(db_session, user.id).id for _ in range(3)}
        assert len(ids) == 3

    def test_unknown_session(self, db_session: Session):
        service = SessionService()
        assert not service.session_exists(db_session, "missing")
        with pytest.raises(AuthError, match="Not logged in"):
            service.get_user_by_session(db_session, "missing")
        with pytest.raises(NotFoundError):
            service.get_session(db_session, "missing")

    def test_cap_evicts_oldest(self, db_session: Session, user):
        """Opening a fifth session removes the oldest one."""
        service = SessionService()
        created = []
        for i in range(5):
            session = service.create_session(db_session, user.id)
            # Distinct, increasing creation times regardless of clock resolution.
            session.create_time = utcnow() - timedelta(minutes=10 - i)
            db_session.commit()
            created.append(session.id)

        remaining = [s.id for s in service.get_user_sessions(db_session, user.id)]
        assert len(remaining) == 4
        assert created[0] not in remaining
        assert remaining == list(reversed(created[1:]))

    def test_new_session_always_kept(self, db_session: Session, user):
        """A new session survives even when older rows carry later timestamps."""
        service = SessionService()
        for _ in range(4):
            session = service.create_session(db_session, user.id)
            session.create_time = utcnow() + timedelta(minutes=5)
            db_session.commit()

        newest = service.create_session(db_session, user.id)
        assert service.session_exists(db_session, newest.id)
        assert db_session.query(UserSession).filter(UserSession.user_id == user.id).count() == 4

    def test_cap_is_per_user(self, db_session: Session, user):
        other = register_verified(db_session, "otheruser", "other@example.com", "password123")
        service = SessionService()
        for _ in range(4):
            service.create_session(db_session, user.id)
        for _ in range(4):
            service.create_session(db_session, other.id)

        assert len(service.get_user_sessions(db_session, user.id)) == 4
        assert len(service.get_user_sessions(db_session, other.id)) == 4

    def test_expired_session_is_rejected(self, db_session: Session, user):
        service = SessionService()
        session = service.create_session(db_session, user.id)
        session.create_time = utcnow() - timedelta(days=31)
        db_session.commit()

        assert not service.session_exists(db_session, session.id)
        with pytest.raises(AuthError):
            service.get_user_by_session(db_session, session.id)

    def test_prune_sessions(self, db_session: Session, user):
        service = SessionService()
        stale = service.create_session(db_session, user.id)
        fresh = service.create_session(db_session, user.id)
        stale.create_time = utcnow() - timedelta(days=31)
        db_session.commit()
        stale_id = stale.id

        assert service.prune_sessions(db_session) == 1
        assert db_session.query(UserSession).filter(UserSession.id == stale_id).count() == 0
        assert service.session_exists(db_session, fresh.id)

    def test_delete_session(self, db_session: Session, user):
        service = SessionService()
        keep = service.create_session(db_session, user.id)
        drop = service.create_session(db_session, user.id)
        drop_id = drop.id

        service.delete_session(db_session, drop_id)

        assert not service.session_exists(db_session, drop_id)
        assert service.session_exists(db_session, keep.id)

    def test_delete_user_sessions(self, db_session: Session, user):
        service = SessionService()
        for _ in range(3):
            service.create_session(db_session, user.id)

        service.delete_user_sessions(db_session, user.id)
        assert service.get_user_sessions(db_session, user.id) == []
