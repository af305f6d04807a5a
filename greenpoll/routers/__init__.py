"""API routers."""

from greenpoll.routers.auth import router as auth_router
from greenpoll.routers.poll_options import router as poll_options_router
from greenpoll.routers.poll_votes import router as poll_votes_router
from greenpoll.routers.polls import router as polls_router
from greenpoll.routers.users import router as users_router

__all__ = ["auth_router", "users_router", "polls_router", "poll_options_router", "poll_votes_router"]
