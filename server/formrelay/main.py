# FastAPI application factory with lifespan management.
# Entrypoint: uvicorn formrelay.main:create_app --factory --host 0.0.0.0 --port 3000
#         or: formrelay  (console script → serve())

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formrelay.config import get_settings
from formrelay.delivery import build_sender
from formrelay.exceptions import register_exception_handlers
from formrelay.logging_config import configure_logging
from formrelay.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from formrelay.pipeline.rendering import FileTemplateStore
from formrelay.rate_limit import FixedWindowRateLimiter
from formrelay.routes import forms, health
from formrelay.routes import metrics as metrics_routes
from formrelay.services.metrics import SubmissionMetrics
from formrelay.services.pipeline import FormSubmissionPipeline

logger = structlog.get_logger(__name__)

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider


def _configure_otel(exporter_type: str) -> "TracerProvider | None":
    """Configure OpenTelemetry tracing. Only the console exporter is wired."""
    if exporter_type != "console":
        logger.warning("unknown_otel_exporter", exporter=exporter_type)
        return None

    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

    provider = TracerProvider()
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    logger.info("otel_configured", exporter=exporter_type)
    return provider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the sender, limiter and pipeline once; close the sender on shutdown."""
    import os

    settings = get_settings()

    otel_provider = None
    otel_exporter = os.environ.get("OTEL_EXPORTER", "")
    if otel_exporter:
        otel_provider = _configure_otel(otel_exporter)

    sender = build_sender(settings)
    templates = FileTemplateStore(settings.templates_dir)
    metrics = SubmissionMetrics()
    limiter = FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.state.settings = settings
    app.state.email_sender = sender
    app.state.template_store = templates
    app.state.metrics = metrics
    app.state.rate_limiter = limiter
    app.state.form_pipeline = FormSubmissionPipeline(sender, templates, settings, metrics=metrics)

    logger.info(
        "form_relay_started",
        provider=sender.name,
        admin_email=settings.admin_email,
        templates_dir=str(templates.directory),
        rate_limit=f"{settings.rate_limit_max_requests}/{int(settings.rate_limit_window_seconds)}s",
    )

    yield

    await sender.aclose()

    if otel_provider is not None:
        otel_provider.shutdown()


def _parse_origins(cors_origin: str) -> list[str]:
    """Parse comma-separated CORS origins. "*" allows any; empty denies all."""
    origins = [origin.strip() for origin in cors_origin.split(",") if origin.strip()]
    if not origins:
        logger.warning(
            "cors_no_origins_configured",
            hint="Set CORS_ORIGIN. Cross-origin requests will be rejected.",
        )
    return origins


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn formrelay.main:create_app --factory"""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Form Relay",
        description="Contact form backend: validates submissions and relays them by email",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware order (Starlette applies in reverse): CORS → SecurityHeaders → RequestContext
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_origins(settings.cors_origin),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(forms.router, tags=["forms"])
    app.include_router(metrics_routes.router, tags=["metrics"])

    return app


def serve() -> None:
    """Console-script entrypoint: run uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "formrelay.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,  # configure_logging() owns the root logger
    )
