"""Poll vote endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from greenpoll.database import get_db
from greenpoll.dependencies import get_current_user
from greenpoll.models.user import User
from greenpoll.schemas.common import SuccessResponse
from greenpoll.schemas.poll import PollResponse, PollVoteResponse
from greenpoll.services.poll_vote import get_poll_vote_service

router = APIRouter(tags=["Poll Votes"])


@router.get("/poll_vote", response_model=PollVoteResponse)
def poll_vote(
    poll_option_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PollVoteResponse:
    """Vote for an option, replacing any earlier vote on the same poll."""
    vote = get_poll_vote_service().vote(db, user.id, poll_option_id)
    return PollVoteResponse.model_validate(vote)


@router.get("/poll_unvote", response_model=SuccessResponse)
def poll_unvote(
    poll_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Remove the logged-in user's vote on a poll."""
    get_poll_vote_service().unvote(db, user.id, poll_id)
    return SuccessResponse()


@router.get("/get_poll_vote_poll", response_model=PollResponse)
def get_poll_vote_poll(poll_vote_id: int, db: Session = Depends(get_db)) -> PollResponse:
    """Return the poll a vote was cast on."""
    return PollResponse.model_validate(get_poll_vote_service().get_poll_vote_poll(db, poll_vote_id))


@router.get("/get_user_vote", response_model=PollVoteResponse)
def get_user_vote(
    poll_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PollVoteResponse:
    """Return the logged-in user's vote on a poll."""
    return PollVoteResponse.model_validate(get_poll_vote_service().get_user_vote(db, user.id, poll_id))
