"""FastAPI exception handlers for converting BackofficeError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Validation/business rule violations
- 401 Unauthorized: Authentication required or failed
- 403 Forbidden: Authorization failures
- 404 Not Found: Resource not found
- 500 Internal Server Error: Payment provider and configuration failures

Usage:
    from backoffice_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from backoffice.models.errors import (
    ERROR_MESSAGES,
    BackofficeError,
    ErrorCode,
    ErrorResponse,
    validation_details,
)

logger = logging.getLogger(__name__)

# Codes not listed here map to 400
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Authentication errors -> 401 Unauthorized
    ErrorCode.AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_CREDENTIALS: HTTP_401_UNAUTHORIZED,
    # Authorization errors -> 403 Forbidden
    ErrorCode.FORBIDDEN: HTTP_403_FORBIDDEN,
    # Not found errors -> 404 Not Found
    ErrorCode.BOOKING_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.ORDER_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.PRODUCT_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.CONTACT_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.SUBSCRIPTION_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.PAYMENT_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Provider and configuration errors -> 500
    ErrorCode.STRIPE_API_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.WEBHOOK_NOT_CONFIGURED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content=exc.to_response().model_dump(mode="json", exclude_none=True),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return request validation errors as 400 with one message per field."""
    body = ErrorResponse(
        error_code=ErrorCode.VALIDATION_FAILED,
        message=ERROR_MESSAGES[ErrorCode.VALIDATION_FAILED],
        details=validation_details(exc),
    )
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic error response.

    The exception text is only included outside production.
    """
    logger.exception("Unhandled exception: %s", exc)

    settings = getattr(request.app.state, "settings", None)
    message = ERROR_MESSAGES[ErrorCode.INTERNAL]
    if settings is not None and not settings.is_production:
        message = f"{message}: {exc}"

    body = ErrorResponse(error_code=ErrorCode.INTERNAL, message=message)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(BackofficeError, backoffice_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
