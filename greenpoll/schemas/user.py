"""Pydantic schemas for user endpoints."""

from pydantic import BaseModel

from greenpoll.schemas.common import Timestamp


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    verified: bool
    join_time: Timestamp

    model_config = {"from_attributes": True}


class PublicUserResponse(BaseModel):
    """A user as seen by other users."""

    id: int
    username: str
    join_time: Timestamp

    model_config = {"from_attributes": True}
