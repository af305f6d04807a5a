"""Account lifecycle endpoints: registration, verification, login and password reset."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from greenpoll.database import get_db
from greenpoll.dependencies import clear_session_cookie, get_session_id, set_session_cookie
from greenpoll.rate_limit import limiter
from greenpoll.schemas.common import ExistsResponse, SuccessResponse
from greenpoll.schemas.user import UserResponse
from greenpoll.services.mailer import get_mailer
from greenpoll.services.password_reset import get_password_reset_service
from greenpoll.services.session import get_session_service
from greenpoll.services.user import get_user_service
from greenpoll.services.verification import get_verification_service

logger = logging.getLogger("greenpoll")

router = APIRouter(tags=["Authentication"])


@router.get("/register", response_model=UserResponse)
@limiter.limit("5/minute")
def register(
    request: Request,
    username: str,
    email: str,
    password: str,
    db: Session = Depends(get_db),
) -> UserResponse:
    """Create an account and email its verification link."""
    registration = get_user_service().register(db, username, email, password)
    get_mailer().send_verification_email(
        registration.user.email,
        registration.user.username,
        registration.verification.id,
    )
    return UserResponse.model_validate(registration.user)


@router.get("/verify_account", response_model=SuccessResponse)
def verify_account(verify_id: str, db: Session = Depends(get_db)) -> SuccessResponse:
    """Consume a verification token."""
    get_verification_service().verify_user(db, verify_id)
    return SuccessResponse()


@router.get("/resend_verification", response_model=SuccessResponse)
@limiter.limit("3/minute")
def resend_verification(request: Request, email: str, db: Session = Depends(get_db)) -> SuccessResponse:
    """Send the pending verification link again."""
    user, verification = get_user_service().resend_verification(db, email)
    get_mailer().send_verification_email(user.email, user.username, verification.id)
    return SuccessResponse()


@router.get("/login", response_model=SuccessResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    email: str,
    password: str,
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Check credentials and set the session cookie."""
    session = get_user_service().login(db, email, password)
    set_session_cookie(response, session.id)
    return SuccessResponse()


@router.get("/logout", response_model=SuccessResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> SuccessResponse:
    """End the current session."""
    session_id = get_session_id(request)
    if session_id:
        get_session_service().delete_session(db, session_id)
        clear_session_cookie(response)
    return SuccessResponse()


@router.get("/logout_everywhere", response_model=SuccessResponse)
def logout_everywhere(request: Request, response: Response, db: Session = Depends(get_db)) -> SuccessResponse:
    """End every session of the current user."""
    session_id = get_session_id(request)
    if session_id:
        session_service = get_session_service()
        user = session_service.get_user_by_session(db, session_id)
        session_service.delete_user_sessions(db, user.id)
        clear_session_cookie(response)
    return SuccessResponse()


@router.get("/request_password_reset", response_model=SuccessResponse)
@limiter.limit("3/minute")
def request_password_reset(request: Request, email: str, db: Session = Depends(get_db)) -> SuccessResponse:
    """Email a password reset link. Succeeds whether or not the account exists."""
    password_reset = get_password_reset_service().request_password_reset(db, email)
    if password_reset:
        get_mailer().send_password_reset_email(password_reset.email, password_reset.id)
    else:
        logger.info("Password reset requested for unknown email")
    return SuccessResponse()


@router.get("/password_reset_exists", response_model=ExistsResponse)
def password_reset_exists(reset_id: str, db: Session = Depends(get_db)) -> ExistsResponse:
    """Check whether a reset token is still usable."""
    return ExistsResponse(exists=get_password_reset_service().exists(db, reset_id))


@router.get("/reset_password", response_model=SuccessResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    reset_id: str,
    new_password: str,
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Set a new password using a reset token."""
    get_password_reset_service().reset_password(db, reset_id, new_password)
    return SuccessResponse()
