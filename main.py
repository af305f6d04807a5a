"""GreenPoll - polling and voting backend."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from greenpoll.config import get_settings
from greenpoll.errors import InternalError, ServiceError
from greenpoll.rate_limit import limiter
from greenpoll.routers import auth_router, poll_options_router, poll_votes_router, polls_router, users_router
from greenpoll.services.maintenance import start_scheduler, stop_scheduler

# Logging
logger = logging.getLogger("greenpoll")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log configuration warnings and run the prune sweep for the app's lifetime."""
    for warning in settings.validate():
        logger.warning("Config: %s", warning)
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="GreenPoll", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        if not request.url.path.startswith(("/docs", "/openapi.json")):
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {
        "/register",
        "/login",
        "/logout",
        "/logout_everywhere",
        "/verify_account",
        "/request_password_reset",
        "/reset_password",
        "/set_email",
        "/set_password",
        "/delete_user",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log sensitive operations
        path = request.url.path
        if path in self.AUDIT_PATHS:
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                request.method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# API routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(polls_router)
app.include_router(poll_options_router)
app.include_router(poll_votes_router)


# Errors are reported in the JSON body; the status code is always 200.
def error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=200, content={"error": message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors as JSON."""
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render missing or ill-typed query parameters as JSON."""
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "query")
        problems.append(f"{field}: {err.get('msg', 'invalid')}" if field else err.get("msg", "invalid"))
    return error_response("Invalid request parameters - " + "; ".join(problems))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return error_response("Rate limit exceeded. Try again later.")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Catch storage failures that escaped the service layer."""
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(InternalError.default_message)


# --- Health check ---
@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "greenpoll", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
