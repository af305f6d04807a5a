"""Tests for verification and password reset tokens and the prune sweep."""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from conftest import register_verified
from greenpoll.database import utcnow
from greenpoll.errors import NotFoundError, ValidationError
from greenpoll.models.user import PasswordReset, User, UserSession, Verification
from greenpoll.services import maintenance
from greenpoll.services.password_reset import PasswordResetService
from greenpoll.services.session import SessionService
from greenpoll.services.user import UserService
from greenpoll.services.verification import VerificationService


def _age(record, **delta) -> None:
    record.create_time = utcnow() - timedelta(**delta)


class TestVerificationTokens:
    """Tests for VerificationService."""

    def test_create_is_idempotent(self, db_session: Session):
        service = VerificationService()
        first = service.create(db_session, "a@example.com")
        second = service.create(db_session, "a@example.com")

        assert first.id == second.id
        assert db_session.query(Verification).count() == 1

    def test_expired_token_is_replaced(self, db_session: Session):
        service = VerificationService()
        first = service.create(db_session, "a@example.com")
        first_id = first.id
        _age(first, hours=2)
        db_session.commit()

        second = service.create(db_session, "a@example.com")
        assert second.id != first_id
        assert db_session.query(Verification).count() == 1

    def test_lookup_rejects_expired_without_prune(self, db_session: Session):
        """Lookups check the age themselves."""
        service = VerificationService()
        record = service.create(db_session, "a@example.com")
        token = record.id
        _age(record, minutes=61)
        db_session.commit()

        assert not service.exists(db_session, token)
        with pytest.raises(NotFoundError, match="Verification record does not exist"):
            service.get(db_session, token)
        with pytest.raises(NotFoundError):
            service.get_for_email(db_session, "a@example.com")

    def test_get_user(self, db_session: Session):
        registration = UserService().register(db_session, "alice", "alice@example.com", "password123")
        service = VerificationService()

        assert service.get_user(db_session, registration.verification.id).id == registration.user.id
        assert service.get_user(db_session, "bogus") is None

    def test_verify_user(self, db_session: Session):
        registration = UserService().register(db_session, "alice", "alice@example.com", "password123")
        user = VerificationService().verify_user(db_session, registration.verification.id)

        assert user.verified is True
        assert db_session.query(Verification).count() == 0

    def test_delete(self, db_session: Session):
        service = VerificationService()
        token = service.create(db_session, "a@example.com").id
        service.delete(db_session, token)
        assert not service.exists(db_session, token)

    def test_prune(self, db_session: Session):
        service = VerificationService()
        stale = service.create(db_session, "old@example.com")
        service.create(db_session, "new@example.com")
        _age(stale, hours=2)
        db_session.commit()

        assert service.prune(db_session) == 1
        assert [r.email for r in db_session.query(Verification).all()] == ["new@example.com"]


class TestPasswordResetTokens:
    """Tests for PasswordResetService."""

    def test_request_for_unknown_email(self, db_session: Session):
        assert PasswordResetService().request_password_reset(db_session, "nobody@example.com") is None
        assert db_session.query(PasswordReset).count() == 0

    def test_request_normalizes_email(self, db_session: Session):
        register_verified(db_session, "alice", "alice@example.com", "password123")
        record = PasswordResetService().request_password_reset(db_session, " ALICE@example.com ")
        assert record.email == "alice@example.com"

    def test_reset_password_consumes_token(self, db_session: Session):
        user = register_verified(db_session, "alice", "alice@example.com", "password123")
        SessionService().create_session(db_session, user.id)
        service = PasswordResetService()
        token = service.request_password_reset(db_session, "alice@example.com").id

        service.reset_password(db_session, token, "brandnewpass")

        assert UserService().check_password("brandnewpass", user.password_hash)
        assert not service.exists(db_session, token)
        assert db_session.query(UserSession).count() == 0

    def test_reset_rejects_short_password(self, db_session: Session):
        register_verified(db_session, "alice", "alice@example.com", "password123")
        service = PasswordResetService()
        token = service.request_password_reset(db_session, "alice@example.com").id

        with pytest.raises(ValidationError):
            service.reset_password(db_session, token, "short")
        assert service.exists(db_session, token)

    def test_reset_with_unknown_token(self, db_session: Session):
        with pytest.raises(NotFoundError, match="Invalid password reset ID"):
            PasswordResetService().reset_password(db_session, "bogus", "brandnewpass")


class TestPruning:
    """Tests for unverified account cleanup and the periodic sweep."""

    def test_prune_unverified_users(self, db_session: Session):
        service = UserService()
        stale = service.register(db_session, "stale", "stale@example.com", "password123").user
        fresh = service.register(db_session, "fresh", "fresh@example.com", "password123").user
        stale_id, fresh_id = stale.id, fresh.id
        stale.join_time = utcnow() - timedelta(hours=2)
        db_session.commit()

        assert service.prune_unverified_users(db_session) == 1
        assert db_session.get(User, stale_id) is None
        assert db_session.get(User, fresh_id) is not None
        assert db_session.query(Verification).filter(Verification.email == "stale@example.com").count() == 0

    def test_prune_unverified_users_removes_reset_tokens(self, db_session: Session):
        service = UserService()
        stale = service.register(db_session, "stale", "stale@example.com", "password123").user
        PasswordResetService().create(db_session, "stale@example.com")
        stale.join_time = utcnow() - timedelta(hours=2)
        db_session.commit()

        assert service.prune_unverified_users(db_session) == 1
        assert db_session.query(PasswordReset).count() == 0

    def test_verified_users_are_never_pruned(self, db_session: Session):
        user = register_verified(db_session, "alice", "alice@example.com", "password123")
        user.join_time = utcnow() - timedelta(days=365)
        db_session.commit()

        assert UserService().prune_unverified_users(db_session) == 0
        assert db_session.get(User, user.id) is not None

    def test_pruned_username_can_be_reused(self, db_session: Session):
        service = UserService()
        stale = service.register(db_session, "alice", "alice@example.com", "password123").user
        stale.join_time = utcnow() - timedelta(hours=2)
        db_session.commit()

        registration = service.register(db_session, "alice", "alice@example.com", "password123")
        assert registration.user.username == "alice"

    def test_prune_all(self, db_session: Session):
        user = register_verified(db_session, "alice", "alice@example.com", "password123")
        session = SessionService().create_session(db_session, user.id)
        reset = PasswordResetService().request_password_reset(db_session, "alice@example.com")
        verification = VerificationService().create(db_session, "pending@example.com")
        _age(session, days=31)
        _age(reset, hours=2)
        _age(verification, hours=2)
        db_session.commit()

        counts = maintenance.prune_all(db_session)

        assert counts == {"verifications": 1, "password_resets": 1, "sessions": 1, "unverified_users": 0}

    def test_prune_job_uses_session_factory(self, db_session: Session, monkeypatch):
        VerificationService().create(db_session, "pending@example.com")
        _age(db_session.query(Verification).one(), hours=2)
        db_session.commit()
        monkeypatch.setattr(maintenance, "_session_factory", lambda: db_session)

        maintenance.prune_job()

        assert db_session.query(Verification).count() == 0

    def test_scheduler_disabled_when_interval_is_zero(self):
        maintenance.start_scheduler()
        assert not maintenance.get_scheduler().running
        maintenance.stop_scheduler()
