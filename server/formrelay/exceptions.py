# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again later."
RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


# ── Exception hierarchy ──────────────────────────────────────────────────────


class FormRelayError(Exception):
    """Base exception for all form relay errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SubmissionValidationError(FormRelayError):
    """Raised when a submission is missing fields or has a malformed email.

    The message is safe to show to the caller verbatim.
    """

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class RateLimitExceededError(FormRelayError):
    """Raised when a source address exhausts its fixed-window budget.

    retry_after_seconds is the time left in the current window; the handler
    sends it as a Retry-After header.
    """

    def __init__(self, retry_after_seconds: float = 0.0):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(RATE_LIMIT_MESSAGE, status_code=429)


class DeliveryError(FormRelayError):
    """Raised when the email provider rejects or fails to send a message.

    The provider detail is logged; callers only see GENERIC_FAILURE_MESSAGE.
    """

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} delivery failed: {reason}", status_code=500)


class TemplateReadError(FormRelayError):
    """Raised by a template store when a resource is missing or unreadable."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Template '{name}' could not be read: {reason}", status_code=500)


# ── Handler registration ────────────────────────────────────────────────────


def error_body(message: str) -> dict[str, object]:
    """JSON envelope shared by every non-success response."""
    return {"success": False, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Dependencies and endpoints raise FormRelayError subclasses; these
    handlers turn them into the {success, message} envelope.
    """

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
        """429 with Retry-After header."""
        retry_after = max(1, int(exc.retry_after_seconds))
        logger.warning(
            "rate_limit_exceeded",
            path=request.url.path,
            method=request.method,
            retry_after=retry_after,
        )
        return JSONResponse(
            status_code=429,
            content=error_body(exc.message),
            headers={"Retry-After": str(retry_after)},
        )

    @app.exception_handler(SubmissionValidationError)
    async def validation_handler(request: Request, exc: SubmissionValidationError) -> JSONResponse:
        logger.info("submission_rejected", path=request.url.path, reason=exc.message)
        return JSONResponse(status_code=400, content=error_body(exc.message))

    @app.exception_handler(FormRelayError)
    async def form_relay_error_handler(request: Request, exc: FormRelayError) -> JSONResponse:
        logger.error("form_relay_error", error=exc.message, error_type=type(exc).__name__, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content=error_body(GENERIC_FAILURE_MESSAGE))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=exc)
        return JSONResponse(status_code=500, content=error_body(GENERIC_FAILURE_MESSAGE))
