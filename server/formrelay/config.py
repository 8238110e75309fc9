# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class Settings(BaseSettings):
    """Server configuration sourced from environment variables.

    Read once at process start. Uses pydantic-settings v2 (separate package
    from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ── Server ───────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # Comma-separated origins for CORS. "*" allows any origin.
    cors_origin: str = "*"

    # Reverse proxies in front of the app (Render, nginx). The source address
    # is taken this many entries from the right of X-Forwarded-For.
    # 0 = ignore the header and use the socket peer.
    trust_proxy_hops: int = 1

    # ── Email delivery ───────────────────────────────────────────────────────
    email_provider: str = "resend"  # "resend" | "smtp"

    # SecretStr keeps keys out of logs, repr(), and model_dump().
    resend_api_key: SecretStr = SecretStr("")
    resend_api_url: str = "https://api.resend.com"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_secure: bool = True  # implicit TLS; False = STARTTLS
    smtp_user: str = ""
    smtp_pass: SecretStr = SecretStr("")

    email_timeout_seconds: float = 20.0

    from_email: str = "Form Relay <onboarding@resend.dev>"
    admin_email: str = "admin@example.com"

    # ── Templates ────────────────────────────────────────────────────────────
    templates_dir: Path = DEFAULT_TEMPLATES_DIR
    notification_template: str = "email_notification_template.html"
    confirmation_template: str = "email_template.html"

    # ── Rate limiting ────────────────────────────────────────────────────────
    rate_limit_window_seconds: float = 15 * 60
    rate_limit_max_requests: int = 5

    # ── Redirects ────────────────────────────────────────────────────────────
    video_editor_url: str = "https://example.github.io/video-editor"

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
