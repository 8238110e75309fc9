# ─────────────────────────────────────────────────────────────────────────────
# Metrics Endpoints — JSON and Prometheus text exposition
# ─────────────────────────────────────────────────────────────────────────────
# GET /metrics            → SubmissionMetrics.to_dict()
# GET /metrics/prometheus → same counters, text/plain Prometheus format
# ─────────────────────────────────────────────────────────────────────────────

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CollectorRegistry, Gauge, generate_latest

from formrelay.dependencies import get_metrics, get_rate_limiter
from formrelay.rate_limit import FixedWindowRateLimiter
from formrelay.services.metrics import SubmissionMetrics

router = APIRouter()

# ── Prometheus metrics (custom registry to avoid default process metrics) ─────
# Gauges mirror the SubmissionMetrics counters on each scrape; the source of
# truth stays in SubmissionMetrics so the JSON and text views always agree.

_registry = CollectorRegistry()

_submissions = Gauge(
    "formrelay_submissions",
    "Form submissions handled by the pipeline, by outcome",
    ["outcome"],
    registry=_registry,
)

_rate_limited = Gauge(
    "formrelay_rate_limited_requests",
    "Requests rejected by the per-address rate limiter",
    registry=_registry,
)

_tracked_addresses = Gauge(
    "formrelay_rate_limit_tracked_addresses",
    "Distinct source addresses held in the rate-limit table",
    registry=_registry,
)

_uptime = Gauge(
    "formrelay_uptime_seconds",
    "Seconds since the process started",
    registry=_registry,
)


def _sync_metrics(metrics: SubmissionMetrics, limiter: FixedWindowRateLimiter) -> None:
    """Copy SubmissionMetrics into the Prometheus gauges."""
    data = metrics.to_dict()
    _submissions.labels(outcome="delivered").set(data["delivered_total"])
    _submissions.labels(outcome="invalid").set(data["validation_failures"])
    _submissions.labels(outcome="delivery_failed").set(data["delivery_failures"])
    _submissions.labels(outcome="error").set(data["errors_total"])
    _rate_limited.set(data["rate_limited_total"])
    _tracked_addresses.set(len(limiter))
    _uptime.set(data["uptime_seconds"])


@router.get("/metrics")
async def metrics_endpoint(metrics: SubmissionMetrics = Depends(get_metrics)) -> dict[str, Any]:
    """Submission outcome counters."""
    return metrics.to_dict()


@router.get("/metrics/prometheus")
async def prometheus_metrics(
    metrics: SubmissionMetrics = Depends(get_metrics),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> Response:
    """Prometheus text exposition format metrics endpoint."""
    _sync_metrics(metrics, limiter)
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
