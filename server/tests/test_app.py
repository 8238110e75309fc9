# ─────────────────────────────────────────────────────────────────────────────
# Tests — application factory, lifespan wiring, settings, exception handlers
# ─────────────────────────────────────────────────────────────────────────────


import pytest
from fastapi.testclient import TestClient

from formrelay.config import DEFAULT_TEMPLATES_DIR, Settings, get_settings
from formrelay.delivery import SmtpSender
from formrelay.exceptions import FormRelayError
from formrelay.main import _parse_origins, create_app
from formrelay.rate_limit import FixedWindowRateLimiter
from formrelay.services.pipeline import FormSubmissionPipeline


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch):
    """Set env vars for one test with a fresh settings cache."""
    get_settings.cache_clear()

    def _set(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield _set
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        for var in ("PORT", "RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_WINDOW_SECONDS", "EMAIL_PROVIDER"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 3000
        assert settings.rate_limit_max_requests == 5
        assert settings.rate_limit_window_seconds == 900
        assert settings.email_provider == "resend"
        assert settings.templates_dir == DEFAULT_TEMPLATES_DIR

    def test_reads_environment(self, env):
        env(PORT="8080", ADMIN_EMAIL="me@example.org", RATE_LIMIT_MAX_REQUESTS="2", SMTP_PASS="hunter2")
        settings = get_settings()
        assert settings.port == 8080
        assert settings.admin_email == "me@example.org"
        assert settings.rate_limit_max_requests == 2
        assert "hunter2" not in repr(settings)
        assert settings.smtp_pass.get_secret_value() == "hunter2"


class TestLifespan:
    def test_builds_state_from_settings(self, env):
        env(
            EMAIL_PROVIDER="smtp",
            RATE_LIMIT_MAX_REQUESTS="3",
            RATE_LIMIT_WINDOW_SECONDS="60",
            LOG_JSON="false",
        )
        app = create_app()

        with TestClient(app) as client:
            assert isinstance(app.state.email_sender, SmtpSender)
            assert isinstance(app.state.form_pipeline, FormSubmissionPipeline)
            limiter = app.state.rate_limiter
            assert isinstance(limiter, FixedWindowRateLimiter)
            assert limiter.max_requests == 3
            assert limiter.window_seconds == 60
            assert client.get("/").text == "OK"

    def test_limit_applies_through_real_wiring(self, env):
        env(EMAIL_PROVIDER="smtp", RATE_LIMIT_MAX_REQUESTS="1", LOG_JSON="false")
        app = create_app()

        with TestClient(app) as client:
            assert client.post("/homepage-form", json={}).status_code == 400
            assert client.post("/homepage-form", json={}).status_code == 429

    def test_unknown_provider_fails_startup(self, env):
        env(EMAIL_PROVIDER="fax", LOG_JSON="false")
        app = create_app()

        with pytest.raises(ValueError, match="Unknown EMAIL_PROVIDER"):
            with TestClient(app):
                pass


class TestExceptionHandlers:
    def test_unexpected_error_is_generic_500(self, client):
        @client.app.get("/boom")
        async def boom() -> None:
            raise RuntimeError("secret internals")

        raw = TestClient(client.app, raise_server_exceptions=False)
        response = raw.get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Something went wrong. Please try again later.",
        }
        assert "secret" not in response.text

    def test_form_relay_error_hides_detail(self, client):
        @client.app.get("/relay-error")
        async def relay_error() -> None:
            raise FormRelayError("provider said no", status_code=502)

        response = client.get("/relay-error")

        assert response.status_code == 502
        assert response.json()["message"] == "Something went wrong. Please try again later."


class TestParseOrigins:
    def test_wildcard(self):
        assert _parse_origins("*") == ["*"]

    def test_comma_separated(self):
        assert _parse_origins("https://a.example, https://b.example ,") == [
            "https://a.example",
            "https://b.example",
        ]

    def test_empty_denies_all(self):
        assert _parse_origins("  ") == []

    def test_env_default_is_wildcard(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("CORS_ORIGIN", raising=False)
        assert Settings(_env_file=None).cors_origin == "*"
