"""User profile endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from greenpoll.database import get_db
from greenpoll.dependencies import clear_session_cookie, get_current_user
from greenpoll.models.user import User
from greenpoll.schemas.common import SuccessResponse
from greenpoll.schemas.poll import PollResponse
from greenpoll.schemas.user import PublicUserResponse, UserResponse
from greenpoll.services.mailer import get_mailer
from greenpoll.services.poll import get_poll_service
from greenpoll.services.user import get_user_service

router = APIRouter(tags=["Users"])


@router.get("/get_user_info", response_model=UserResponse)
def get_user_info(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the logged-in user's details."""
    return UserResponse.model_validate(user)


@router.get("/get_specific_user_info", response_model=PublicUserResponse)
def get_specific_user_info(user_id: int, db: Session = Depends(get_db)) -> PublicUserResponse:
    """Return another user's public details."""
    return PublicUserResponse.model_validate(get_user_service().get_user(db, user_id))


@router.get("/set_username", response_model=SuccessResponse)
def set_username(
    new_username: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change the account username."""
    get_user_service().set_username(db, user, new_username)
    return SuccessResponse()


@router.get("/set_email", response_model=SuccessResponse)
def set_email(
    new_email: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change the account email and send a verification link to it."""
    verification = get_user_service().set_email(db, user, new_email)
    if verification:
        get_mailer().send_verification_email(verification.email, user.username, verification.id)
    return SuccessResponse()


@router.get("/set_password", response_model=SuccessResponse)
def set_password(
    new_password: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change the account password."""
    get_user_service().set_password(db, user, new_password)
    return SuccessResponse()


@router.get("/get_user_polls", response_model=list[PollResponse])
def get_user_polls(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[PollResponse]:
    """List the logged-in user's polls, newest first."""
    polls = get_poll_service().get_user_polls(db, user.id)
    return [PollResponse.model_validate(p) for p in polls]


@router.get("/delete_user", response_model=SuccessResponse)
def delete_user(
    response: Response,
    password: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Delete the logged-in account and everything it owns."""
    get_user_service().delete_user(db, user, password)
    clear_session_cookie(response)
    return SuccessResponse()
