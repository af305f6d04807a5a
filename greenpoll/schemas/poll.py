"""Pydantic schemas for poll, option and vote endpoints."""

from pydantic import BaseModel

from greenpoll.schemas.common import Timestamp


class PollResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    create_time: Timestamp

    model_config = {"from_attributes": True}


class PollOptionResponse(BaseModel):
    id: int
    poll_id: int
    value: str

    model_config = {"from_attributes": True}


class PollVoteResponse(BaseModel):
    id: int
    user_id: int
    poll_id: int
    poll_option_id: int
    vote_time: Timestamp

    model_config = {"from_attributes": True}


class OptionTallyResponse(BaseModel):
    poll_option_id: int
    value: str
    votes: int

    model_config = {"from_attributes": True}
