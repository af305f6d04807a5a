"""Poll option endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from greenpoll.database import get_db
from greenpoll.dependencies import get_current_user
from greenpoll.models.user import User
from greenpoll.schemas.common import SuccessResponse
from greenpoll.schemas.poll import PollOptionResponse, PollResponse
from greenpoll.services.poll_option import get_poll_option_service

router = APIRouter(tags=["Poll Options"])


@router.get("/create_poll_option", response_model=PollOptionResponse)
def create_poll_option(
    poll_id: int,
    value: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PollOptionResponse:
    """Add an option to a poll. Owner only."""
    option = get_poll_option_service().create_poll_option(db, user, poll_id, value)
    return PollOptionResponse.model_validate(option)


@router.get("/get_poll_option_info", response_model=PollOptionResponse)
def get_poll_option_info(poll_option_id: int, db: Session = Depends(get_db)) -> PollOptionResponse:
    """Return a poll option."""
    return PollOptionResponse.model_validate(get_poll_option_service().get_poll_option(db, poll_option_id))


@router.get("/get_poll_option_poll", response_model=PollResponse)
def get_poll_option_poll(poll_option_id: int, db: Session = Depends(get_db)) -> PollResponse:
    """Return the poll an option belongs to."""
    return PollResponse.model_validate(get_poll_option_service().get_poll_option_poll(db, poll_option_id))


@router.get("/set_poll_option_value", response_model=SuccessResponse)
def set_poll_option_value(
    poll_option_id: int,
    new_value: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change an option value. Owner only."""
    get_poll_option_service().set_poll_option_value(db, user, poll_option_id, new_value)
    return SuccessResponse()


@router.get("/delete_poll_option", response_model=SuccessResponse)
def delete_poll_option(
    poll_option_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Delete an option and its votes. Owner only."""
    get_poll_option_service().delete_poll_option(db, user, poll_option_id)
    return SuccessResponse()
