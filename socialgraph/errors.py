"""
Domain error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as:

    {"error": <stable code>, "error_description": <text>,
     "timestamp": <iso8601>, "path": <request path>}

Request validation failures additionally carry an "errors" list with one
entry per offending field.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SocialGraphError(Exception):
    """Base class for every typed, user-facing failure."""

    error = "internal_server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, description: str, error: Optional[str] = None):
        super().__init__(description)
        self.description = description
        if error is not None:
            self.error = error


# ─────────────────────────── Taxonomy ─────────────────────────────────────

class NotFound(SocialGraphError):
    error = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(SocialGraphError):
    error = "conflict"
    status_code = status.HTTP_409_CONFLICT


class Unauthenticated(SocialGraphError):
    error = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(SocialGraphError):
    error = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class RateLimited(SocialGraphError):
    error = "rate_limited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class ValidationFailed(SocialGraphError):
    error = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class Internal(SocialGraphError):
    pass


# ─────────────────────────── Domain conditions ────────────────────────────

class UserNotFound(NotFound):
    def __init__(self, user: Optional[str] = None):
        description = f"User '{user}' not found" if user else "User not found"
        super().__init__(description, error="user_not_found")
        self.user = user


class PostNotFound(NotFound):
    def __init__(self, post_id: Optional[str] = None):
        description = f"Post '{post_id}' not found" if post_id else "Post not found"
        super().__init__(description, error="post_not_found")
        self.post_id = post_id


class KeyNotFound(NotFound):
    def __init__(self, description: str = "Public key not found"):
        super().__init__(description, error="key_not_found")


class SelfFollowError(Conflict):
    def __init__(self):
        super().__init__("Cannot follow yourself", error="cannot_follow")


class SelfUnfollowError(Conflict):
    def __init__(self):
        super().__init__("Cannot unfollow yourself", error="cannot_unfollow")


class AlreadyFollowingError(Conflict):
    def __init__(self, actor_uid: str, target_uid: str):
        super().__init__(
            f"User '{actor_uid}' is already following '{target_uid}'",
            error="cannot_follow",
        )
        self.actor_uid = actor_uid
        self.target_uid = target_uid


class NotFollowingError(Conflict):
    def __init__(self, actor_uid: str, target_uid: str):
        super().__init__(
            f"User '{actor_uid}' is not following '{target_uid}'",
            error="cannot_unfollow",
        )
        self.actor_uid = actor_uid
        self.target_uid = target_uid


class UsernameTaken(Conflict):
    def __init__(self, username: str):
        super().__init__(
            f"Username '{username}' already registered", error="cannot_register"
        )
        self.username = username


class InvalidCredentials(Unauthenticated):
    def __init__(self):
        super().__init__("Invalid username or password", error="invalid_grant")


class InvalidToken(Unauthenticated):
    def __init__(self, description: str = "Invalid or malformed token"):
        super().__init__(description, error="invalid_token")


class AccountBanned(Forbidden):
    def __init__(self):
        super().__init__("User banned", error="cannot_login")


class TemporaryLockout(RateLimited):
    def __init__(self):
        super().__init__("Temporary lockout", error="cannot_login")


class IncompleteRequest(ValidationFailed):
    def __init__(self, description: str):
        super().__init__(description, error="incomplete_request")


# ─────────────────────────── Rendering ────────────────────────────────────

def error_body(
    error: str,
    description: str,
    path: str,
    errors: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "error": error,
        "error_description": description,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": path,
    }
    if errors is not None:
        body["errors"] = errors
    return body


async def handle_domain_error(request: Request, exc: SocialGraphError) -> JSONResponse:
    logger.debug("API error on %s: %s — %s", request.url.path, exc.error, exc.description)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.description, request.url.path),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field_errors.append(
            {
                "field": ".".join(loc),
                "message": err.get("msg"),
                "rejected_value": err.get("input"),
            }
        )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable(
            error_body(
                "validation_error",
                "Request validation failed",
                request.url.path,
                errors=field_errors,
            )
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "internal_server_error", "An unexpected error occurred", request.url.path
        ),
    )


def jsonable(body: dict[str, Any]) -> dict[str, Any]:
    # rejected values may be arbitrary objects (bytes, models)
    return jsonable_encoder(body, custom_encoder={bytes: lambda b: b.decode("utf-8", "replace")})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SocialGraphError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
