# ─────────────────────────────────────────────────────────────────────────────
# Health Check Routes
# ─────────────────────────────────────────────────────────────────────────────
#   /        → plain "OK" for uptime monitors and platform health checks.
#   /health  → liveness probe, JSON. No dependencies, no I/O.
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from formrelay.schemas import LivenessResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "OK"


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe — is the process alive?"""
    return LivenessResponse(status="ok")
