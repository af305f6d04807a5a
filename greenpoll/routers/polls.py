"""Poll endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from greenpoll.database import get_db
from greenpoll.dependencies import get_current_user
from greenpoll.models.user import User
from greenpoll.schemas.common import SuccessResponse
from greenpoll.schemas.poll import OptionTallyResponse, PollOptionResponse, PollResponse
from greenpoll.services.poll import get_poll_service
from greenpoll.services.poll_option import get_poll_option_service
from greenpoll.services.poll_vote import get_poll_vote_service

router = APIRouter(tags=["Polls"])


@router.get("/create_poll", response_model=PollResponse)
def create_poll(
    title: str,
    description: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PollResponse:
    """Create a poll owned by the logged-in user."""
    poll = get_poll_service().create_poll(db, user, title, description)
    return PollResponse.model_validate(poll)


@router.get("/get_poll_info", response_model=PollResponse)
def get_poll_info(poll_id: int, db: Session = Depends(get_db)) -> PollResponse:
    """Return a poll."""
    return PollResponse.model_validate(get_poll_service().get_poll(db, poll_id))


@router.get("/set_poll_title", response_model=SuccessResponse)
def set_poll_title(
    poll_id: int,
    title: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Rename a poll. Owner only."""
    get_poll_service().set_title(db, user, poll_id, title)
    return SuccessResponse()


@router.get("/set_poll_description", response_model=SuccessResponse)
def set_poll_description(
    poll_id: int,
    description: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change a poll description. Owner only."""
    get_poll_service().set_description(db, user, poll_id, description)
    return SuccessResponse()


@router.get("/delete_poll", response_model=SuccessResponse)
def delete_poll(
    poll_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Delete a poll with its options and votes. Owner only."""
    get_poll_service().delete_poll(db, user, poll_id)
    return SuccessResponse()


@router.get("/get_poll_options", response_model=list[PollOptionResponse])
def get_poll_options(poll_id: int, db: Session = Depends(get_db)) -> list[PollOptionResponse]:
    """List a poll's options in creation order."""
    options = get_poll_option_service().get_poll_options(db, poll_id)
    return [PollOptionResponse.model_validate(o) for o in options]


@router.get("/get_poll_results", response_model=list[OptionTallyResponse])
def get_poll_results(poll_id: int, db: Session = Depends(get_db)) -> list[OptionTallyResponse]:
    """Vote count per option."""
    tallies = get_poll_vote_service().get_poll_results(db, poll_id)
    return [OptionTallyResponse.model_validate(t) for t in tallies]
