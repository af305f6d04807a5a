"""Authentication dependencies for FastAPI routes."""

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import get_db
from greenpoll.errors import AuthError
from greenpoll.models.user import User
from greenpoll.services.session import get_session_service

SESSION_COOKIE_NAME = "session_id"


def get_session_id(request: Request) -> str | None:
    """Return the session cookie value, if any."""
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the user owning the request's session cookie. Raises AuthError if invalid."""
    session_id = get_session_id(request)
    if not session_id:
        raise AuthError("Not logged in")
    return get_session_service().get_user_by_session(db, session_id)


def set_session_cookie(response: Response, session_id: str) -> None:
    """Set the session cookie."""
    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response) -> None:
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/", httponly=True, secure=settings.COOKIE_SECURE)
