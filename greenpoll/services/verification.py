"""Email verification service."""

from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import atomic, utcnow
from greenpoll.errors import NotFoundError
from greenpoll.models.user import User, Verification
from greenpoll.services.tokens import OneTimeTokenService


class VerificationService(OneTimeTokenService):
    """Issues and consumes account verification tokens."""

    model = Verification
    label = "verification"

    @property
    def expire_minutes(self) -> int:
        return get_settings().VERIFICATION_EXPIRE_MINUTES

    def verify_user(self, db: Session, verify_id: str) -> User:
        """Mark the token's user as verified and consume the token."""
        self.prune(db)

        with atomic(db, "Failed to verify account"):
            user = self.get_user(db, verify_id)
            if not user:
                raise NotFoundError("Invalid verify ID")
            user.verified = True
            user.verify_time = utcnow()
            self.delete_for_email(db, user.email)

        db.refresh(user)
        return user


_verification_service: VerificationService | None = None


def get_verification_service() -> VerificationService:
    """Get singleton verification service instance."""
    global _verification_service
    if _verification_service is None:
        _verification_service = VerificationService()
    return _verification_service
