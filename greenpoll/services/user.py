"""User account service: registration, login and profile changes."""

import base64
import hashlib
import logging
from dataclasses import dataclass
from datetime import timedelta

import bcrypt
from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import atomic, utcnow
from greenpoll.errors import AuthError, ConflictError, InternalError, NotFoundError
from greenpoll.models.user import PasswordReset, User, UserSession, Verification
from greenpoll.services.session import get_session_service
from greenpoll.services.validation import normalize_email, validate_email, validate_password, validate_username
from greenpoll.services.verification import get_verification_service

logger = logging.getLogger("greenpoll")


@dataclass
class Registration:
    """A newly created account and the token to email for verifying it."""

    user: User
    verification: Verification


class UserService:
    """Handles user registration, authentication and account changes."""

    @staticmethod
    def _prehash(password: str) -> bytes:
        # bcrypt only reads 72 bytes and newer releases reject longer input.
        return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())

    def hash_password(self, password: str) -> str:
        try:
            salt = bcrypt.gensalt(rounds=get_settings().BCRYPT_ROUNDS)
            return bcrypt.hashpw(self._prehash(password), salt).decode("utf-8")
        except ValueError as e:
            logger.exception("Password hashing failed")
            raise InternalError("Failed to hash password") from e

    def check_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._prehash(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    def _delete_tokens_for_email(self, db: Session, email: str) -> None:
        db.query(Verification).filter(Verification.email == email).delete(synchronize_session=False)
        db.query(PasswordReset).filter(PasswordReset.email == email).delete(synchronize_session=False)

    def prune_unverified_users(self, db: Session) -> int:
        """Delete accounts that never verified within the retention window.

        Accounts that verified once and are waiting to confirm a changed email
        are kept.
        """
        cutoff = utcnow() - timedelta(minutes=get_settings().UNVERIFIED_USER_RETENTION_MINUTES)
        with atomic(db, "Failed to prune unverified users"):
            stale = (
                db.query(User)
                .filter(User.verified.is_(False), User.verify_time.is_(None), User.join_time <= cutoff)
                .all()
            )
            for user in stale:
                self._delete_tokens_for_email(db, user.email)
                db.delete(user)
        if stale:
            logger.info("Pruned %d unverified user(s)", len(stale))
        return len(stale)

    def _prune(self, db: Session) -> None:
        get_verification_service().prune(db)
        self.prune_unverified_users(db)

    def register(self, db: Session, username: str, email: str, password: str) -> Registration:
        """Create an unverified account and its verification token."""
        self._prune(db)

        username = validate_username(username)
        email = validate_email(email)
        validate_password(password)

        if self.get_user_by_username(db, username):
            raise ConflictError("Username already in use")
        if self.get_user_by_email(db, email):
            raise ConflictError("Email already in use")

        password_hash = self.hash_password(password)
        with atomic(db, "Failed to create new user", conflict_message="Username or email already in use"):
            user = User(username=username, email=email, password_hash=password_hash, verified=False, join_time=utcnow())
            db.add(user)
            db.flush()
            verification = get_verification_service().add(db, email)

        db.refresh(user)
        db.refresh(verification)
        logger.info("Registered user %d (%s)", user.id, user.username)
        return Registration(user=user, verification=verification)

    def login(self, db: Session, email: str, password: str) -> UserSession:
        """Check credentials and open a new session."""
        self._prune(db)

        user = self.get_user_by_email(db, email)
        if not user or not self.check_password(password, user.password_hash):
            raise AuthError("Invalid login")

        return get_session_service().create_session(db, user.id)

    def resend_verification(self, db: Session, email: str) -> tuple[User, Verification]:
        """Return the pending verification token for an unverified account."""
        self._prune(db)

        user = self.get_user_by_email(db, email)
        if not user or user.verified:
            raise NotFoundError("No unverified account for given email")
        return user, get_verification_service().create(db, user.email)

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User does not exist")
        return user

    def get_user_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def get_user_by_username(self, db: Session, username: str) -> User | None:
        return db.query(User).filter(User.username == username.strip()).first()

    def set_username(self, db: Session, user: User, new_username: str) -> User:
        new_username = validate_username(new_username)
        existing = self.get_user_by_username(db, new_username)
        if existing and existing.id != user.id:
            raise ConflictError("Username already in use")

        with atomic(db, "Failed to set username", conflict_message="Username already in use"):
            user.username = new_username
        return user

    def set_email(self, db: Session, user: User, new_email: str) -> Verification | None:
        """Change the account email and require it to be verified again.

        Returns the verification token to send to the new address, or None if
        the email is unchanged.
        """
        new_email = validate_email(new_email)
        if new_email == user.email:
            return None
        if self.get_user_by_email(db, new_email):
            raise ConflictError("Email already in use")

        with atomic(db, "Failed to set email", conflict_message="Email already in use"):
            self._delete_tokens_for_email(db, user.email)
            user.email = new_email
            user.verified = False
            db.flush()
            verification = get_verification_service().add(db, new_email)

        db.refresh(verification)
        logger.info("User %d changed email, verification pending", user.id)
        return verification

    def set_password(self, db: Session, user: User, new_password: str) -> User:
        validate_password(new_password)
        password_hash = self.hash_password(new_password)
        with atomic(db, "Failed to set password"):
            user.password_hash = password_hash
        return user

    def set_verified(self, db: Session, user: User, verified: bool) -> User:
        with atomic(db, "Failed to set verified status"):
            user.verified = verified
        return user

    def delete_user(self, db: Session, user: User, password: str) -> None:
        """Delete an account with everything it owns. Requires the current password."""
        if not self.check_password(password, user.password_hash):
            raise AuthError("Invalid login")

        with atomic(db, "Failed to delete user"):
            self._delete_tokens_for_email(db, user.email)
            db.delete(user)
        logger.info("Deleted user %d", user.id)


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
