"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from core.models.errors import ImageServiceError
from core.utils.constants import get_max_file_size_mb
from core.utils.response import ResponseBuilder

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]


def _get_user_friendly_message(exc: Exception) -> str:
    """
    Convert technical exception messages into user-friendly ones.

    Preserves specific validation messages while making generic errors friendly.
    """
    exc_str = str(exc)

    # Messages that already read as user-facing are kept as they are
    friendly_prefixes = (
        "Invalid",
        "Missing",
        "Required",
        "Must",
        "Cannot",
        "Unable to",
        "Image",
        "File",
    )

    if exc_str and any(exc_str.startswith(prefix) for prefix in friendly_prefixes):
        return exc_str

    if isinstance(exc, ValueError):
        return "The provided data is invalid. Please check your input and try again."

    if isinstance(exc, (KeyError, AttributeError)):
        return "A required field is missing. Please ensure all required fields are provided."

    if isinstance(exc, TypeError):
        return "The data format is incorrect. Please check the request format."

    return "We encountered an issue processing your request. Please try again."


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if level == "exception":
        # logger.exception automatically includes traceback
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


# (exception types, status, message, log level) checked in order.
# PermissionError and TimeoutError precede OSError, which they subclass.
_RUNTIME_ERROR_RESPONSES: tuple[tuple[tuple[type[BaseException], ...], HTTPStatus, str, str], ...] = (
    (
        (PermissionError,),
        HTTPStatus.FORBIDDEN,
        "You don't have permission to perform this action.",
        "warning",
    ),
    (
        (MemoryError,),
        HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
        f"The file is too large to process. Maximum size is {get_max_file_size_mb()}MB.",
        "warning",
    ),
    (
        (TimeoutError,),
        HTTPStatus.GATEWAY_TIMEOUT,
        "The request took too long to process. Please try again.",
        "exception",
    ),
    (
        (ConnectionError, OSError),
        HTTPStatus.SERVICE_UNAVAILABLE,
        "Unable to connect to required services. Please try again later.",
        "exception",
    ),
)


def _runtime_error_response(
    exc: Exception,
    *,
    handler_name: str,
    request_id: str | None,
    cors_origin: str | None,
) -> JsonDict:
    for exc_types, status, message, level in _RUNTIME_ERROR_RESPONSES:
        if isinstance(exc, exc_types):
            _log_error(
                f"{type(exc).__name__} in handler",
                handler_name=handler_name,
                request_id=request_id,
                exc=exc,
                level=level,
            )
            return ResponseBuilder.error(
                status=status,
                message=message,
                request_id=request_id,
                cors_origin=cors_origin,
            )

    _log_error(
        "Unexpected error in handler",
        handler_name=handler_name,
        request_id=request_id,
        exc=exc,
        level="exception",
    )
    return ResponseBuilder.internal_error(
        "We're experiencing technical difficulties. Please try again in a few moments.",
        request_id=request_id,
        cors_origin=cors_origin,
    )


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Automatic CORS preflight (OPTIONS) handling
    - Centralized exception handling and error responses
    - Request ID tracking and structured logging

    Domain errors that a handler does not translate itself are reported
    as 500 with their stable message; store internals never reach the body.

    Example:
        @api_gateway_handler
        def handler(event, context):
            return {"statusCode": 200, "body": "Success"}
    """

    @wraps(func)
    def wrapper(
        event: Any,
        context: Any,
        *,
        cors_origin: str | None = None,
    ) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content(cors_origin=cors_origin)

        request_id = getattr(context, "aws_request_id", None)

        try:
            return func(event, context)

        except ImageServiceError as exc:
            _log_error(
                "Unhandled domain error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                exc.message,
                error=exc.error_code,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            _log_error(
                "Validation error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.bad_request(
                _get_user_friendly_message(exc),
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except Exception as exc:
            return _runtime_error_response(
                exc,
                handler_name=func.__name__,
                request_id=request_id,
                cors_origin=cors_origin,
            )

    return wrapper
