from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, PersistenceError, ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error, please try again"


def json_body() -> Any:
    """Parsed JSON body, or None when the request carries no (valid) JSON."""
    return request.get_json(silent=True)


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def error_response(exc: Exception):
    if isinstance(exc, ValidationError):
        return jsonify({"message": str(exc), "errors": exc.errors}), exc.http_status
    if isinstance(exc, DomainError):
        return jsonify({"message": str(exc)}), exc.http_status
    return jsonify({"message": SERVER_ERROR_MESSAGE}), 500


def api_view(view: Callable) -> Callable:
    """Turn domain exceptions raised by a view into JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            logger.info(
                "request rejected",
                extra={"path": request.path, "status": e.http_status, "error": type(e).__name__, "detail": str(e)},
            )
            return error_response(e)
        except PersistenceError as e:
            logger.error("storage failure", extra={"path": request.path, "detail": str(e)})
            return error_response(e)
        except Exception as e:
            logger.exception("unexpected error", extra={"path": request.path})
            return error_response(e)

    return wrapper


def make_token_required(auth_service) -> Callable:
    """Decorator factory: resolve the bearer token and expose the caller on ``g``."""

    def token_required(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = auth_service.resolve_token(bearer_token())
            g.current_user = user
            g.owner_id = user.user_id
            return view(*args, **kwargs)

        return wrapper

    return token_required


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"message": e.description or e.name}), e.code
