# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# ─────────────────────────────────────────────────────────────────────────────

import json

from fastapi import Depends, Request
from pydantic import ValidationError

from formrelay.config import Settings
from formrelay.exceptions import RateLimitExceededError, SubmissionValidationError
from formrelay.rate_limit import FixedWindowRateLimiter, client_address
from formrelay.schemas import Submission
from formrelay.services.metrics import SubmissionMetrics
from formrelay.services.pipeline import FormSubmissionPipeline


def get_settings_dep(request: Request) -> Settings:
    """Inject Settings into endpoints via Depends()."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    """Inject the process-wide FixedWindowRateLimiter via Depends()."""
    return request.app.state.rate_limiter  # type: ignore[no-any-return]


def get_metrics(request: Request) -> SubmissionMetrics:
    """Inject SubmissionMetrics into endpoints via Depends()."""
    return request.app.state.metrics  # type: ignore[no-any-return]


def get_form_pipeline(request: Request) -> FormSubmissionPipeline:
    """Inject FormSubmissionPipeline into endpoints via Depends()."""
    return request.app.state.form_pipeline  # type: ignore[no-any-return]


def enforce_rate_limit(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings_dep),
    metrics: SubmissionMetrics = Depends(get_metrics),
) -> None:
    """Route dependency: count the request, raise 429 once the window is spent."""
    key = client_address(request, settings.trust_proxy_hops)
    if not limiter.admit(key):
        metrics.record_rate_limited()
        raise RateLimitExceededError(limiter.retry_after(key))


async def parse_submission(request: Request) -> Submission:
    """Read a Submission from a JSON or form-encoded body.

    A body that cannot be parsed counts as empty, so it fails the pipeline's
    presence check like any other incomplete submission.
    """
    content_type = request.headers.get("content-type", "")
    data: object
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        data = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        body = await request.body()
        try:
            data = json.loads(body) if body else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = {}

    if not isinstance(data, dict):
        data = {}
    try:
        return Submission.model_validate(data)
    except ValidationError as e:
        raise SubmissionValidationError("All fields are required") from e
