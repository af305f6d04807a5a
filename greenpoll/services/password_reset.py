"""Password reset service."""

from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import atomic
from greenpoll.errors import NotFoundError
from greenpoll.models.user import PasswordReset, User, UserSession
from greenpoll.services.tokens import OneTimeTokenService
from greenpoll.services.user import get_user_service
from greenpoll.services.validation import normalize_email, validate_password


class PasswordResetService(OneTimeTokenService):
    """Issues and consumes password reset tokens."""

    model = PasswordReset
    label = "password reset"

    @property
    def expire_minutes(self) -> int:
        return get_settings().PASSWORD_RESET_EXPIRE_MINUTES

    def request_password_reset(self, db: Session, email: str) -> PasswordReset | None:
        """Return the pending reset token for ``email``, creating one if needed.

        Returns None when no account uses the email. Callers should not reveal
        which case occurred.
        """
        email = normalize_email(email)
        if get_user_service().get_user_by_email(db, email) is None:
            self.prune(db)
            return None
        return self.create(db, email)

    def reset_password(self, db: Session, reset_id: str, new_password: str) -> User:
        """Set a new password for the token's user and consume the token."""
        self.prune(db)
        validate_password(new_password)

        user_service = get_user_service()
        password_hash = user_service.hash_password(new_password)

        with atomic(db, "Failed to reset password"):
            user = self.get_user(db, reset_id)
            if not user:
                raise NotFoundError("Invalid password reset ID")
            user.password_hash = password_hash
            db.query(UserSession).filter(UserSession.user_id == user.id).delete(synchronize_session=False)
            self.delete_for_email(db, user.email)

        db.refresh(user)
        return user


_password_reset_service: PasswordResetService | None = None


def get_password_reset_service() -> PasswordResetService:
    """Get singleton password reset service instance."""
    global _password_reset_service
    if _password_reset_service is None:
        _password_reset_service = PasswordResetService()
    return _password_reset_service
