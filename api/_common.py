"""Shared request handling for the serverless endpoints (not routed by Vercel)."""

import asyncio
import json
from typing import Any, Awaitable, Callable

from field_catalog.services.session import AuthGateway, SessionContext
from field_catalog.utils.errors import (
    FieldCatalogError,
    InvalidTransition,
    LimitExceeded,
    NotAuthenticated,
    NotAuthorized,
    NotFound,
    SupabaseError,
)
from field_catalog.utils.logging import (
    correlation_context,
    get_structured_logger,
    mask_sensitive_data,
    setup_logging,
)
from field_catalog.utils.logging_config import LoggingConfig

setup_logging()
logger = get_structured_logger(__name__)

CORRELATION_HEADER = LoggingConfig.LOG_CORRELATION_ID_HEADER.lower()


def json_response(status_code: int, payload: Any) -> dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload, default=str),
    }


def parse_body(request: dict) -> dict:
    body = request.get("body") or {}
    if isinstance(body, (bytes, str)):
        try:
            body = json.loads(body) if body else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def _header(request: dict, name: str) -> str:
    for key, value in (request.get("headers") or {}).items():
        if key.lower() == name:
            return value or ""
    return ""


async def open_session(request: dict) -> SessionContext:
    """Resolve the bearer token on the request to a bound session."""
    authorization = _header(request, "authorization")
    if not authorization.lower().startswith("bearer "):
        raise NotAuthenticated("Missing bearer token")

    principal = AuthGateway().principal_for_token(authorization[7:].strip())
    session = SessionContext()
    await session.sign_in(principal)
    return session


def _status_for(error: Exception) -> int:
    if isinstance(error, NotAuthorized):
        return 401 if isinstance(error, NotAuthenticated) else 403
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, InvalidTransition):
        return 409
    if isinstance(error, (LimitExceeded, ValueError)):
        return 400
    if isinstance(error, SupabaseError):
        return 502
    return 500


def run_endpoint(
    request: dict,
    action: Callable[[SessionContext], Awaitable[Any]],
    success_status: int = 200,
) -> dict:
    """Open a session, run ``action`` and map failures onto HTTP status codes."""
    with correlation_context(_header(request, CORRELATION_HEADER) or None) as correlation_id:
        async def _run() -> Any:
            session = await open_session(request)
            return await action(session)

        try:
            result = asyncio.run(_run())
            return json_response(success_status, result)
        except (FieldCatalogError, ValueError) as e:
            status_code = _status_for(e)
            logger.warning(
                "Request failed",
                path=request.get("path"),
                status_code=status_code,
                error=mask_sensitive_data(str(e)),
                error_type=type(e).__name__,
            )
            return json_response(status_code, {"error": str(e), "correlation_id": correlation_id})
        except Exception as e:
            logger.error(f"Unhandled error: {e}", exc_info=True, path=request.get("path"))
            return json_response(500, {"error": "internal server error", "correlation_id": correlation_id})
