# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────

import os

import pytest
from fastapi.testclient import TestClient

from formrelay.config import Settings
from formrelay.delivery.protocol import OutgoingEmail
from formrelay.exceptions import DeliveryError
from formrelay.main import create_app
from formrelay.pipeline.rendering import FileTemplateStore
from formrelay.rate_limit import FixedWindowRateLimiter
from formrelay.services.metrics import SubmissionMetrics
from formrelay.services.pipeline import FormSubmissionPipeline

ADMIN_EMAIL = "owner@example.com"
FROM_EMAIL = "Site <noreply@example.com>"


class RecordingSender:
    """EmailSender that records every send and can fail on chosen calls.

    fail_on holds 1-based call numbers that raise DeliveryError. A failed
    call is still recorded, so tests can assert it was attempted.
    """

    name = "recording"

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.sent: list[OutgoingEmail] = []
        self.fail_on = fail_on or set()
        self.closed = False

    async def send(self, email: OutgoingEmail) -> None:
        self.sent.append(email)
        if len(self.sent) in self.fail_on:
            raise DeliveryError(self.name, "simulated provider rejection")

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing — no provider credentials, console logs."""
    return Settings(
        admin_email=ADMIN_EMAIL,
        from_email=FROM_EMAIL,
        rate_limit_max_requests=5,
        rate_limit_window_seconds=900,
        trust_proxy_hops=1,
        video_editor_url="https://example.github.io/video-editor",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def template_store(test_settings: Settings) -> FileTemplateStore:
    """The templates shipped with the package."""
    return FileTemplateStore(test_settings.templates_dir)


@pytest.fixture
def metrics() -> SubmissionMetrics:
    return SubmissionMetrics()


@pytest.fixture
def pipeline(
    sender: RecordingSender,
    template_store: FileTemplateStore,
    test_settings: Settings,
    metrics: SubmissionMetrics,
) -> FormSubmissionPipeline:
    return FormSubmissionPipeline(sender, template_store, test_settings, metrics=metrics)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(test_settings: Settings, clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        max_requests=test_settings.rate_limit_max_requests,
        window_seconds=test_settings.rate_limit_window_seconds,
        clock=clock,
    )


@pytest.fixture
def client(
    test_settings: Settings,
    sender: RecordingSender,
    template_store: FileTemplateStore,
    metrics: SubmissionMetrics,
    pipeline: FormSubmissionPipeline,
    rate_limiter: FixedWindowRateLimiter,
) -> TestClient:
    """FastAPI TestClient with the real pipeline wired to a RecordingSender.

    The lifespan does not run (no `with` block), so app.state is filled in
    directly with test doubles — no provider, no network.
    """
    from formrelay.config import get_settings

    get_settings.cache_clear()

    env_overrides = {
        "LOG_JSON": "false",
        "LOG_LEVEL": "DEBUG",
        "CORS_ORIGIN": "https://site.example.com",
    }
    for k, v in env_overrides.items():
        os.environ[k] = v

    try:
        app = create_app()
        client = TestClient(app)

        app.state.settings = test_settings
        app.state.email_sender = sender
        app.state.template_store = template_store
        app.state.metrics = metrics
        app.state.rate_limiter = rate_limiter
        app.state.form_pipeline = pipeline

        return client
    finally:
        for k in env_overrides:
            os.environ.pop(k, None)
        get_settings.cache_clear()
