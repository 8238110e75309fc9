# ─────────────────────────────────────────────────────────────────────────────
# Contact form routes (THIN)
# ─────────────────────────────────────────────────────────────────────────────
# Both POST routes share one handler. Rate limiting runs as a route-level
# dependency, before the body is read; a rejected request never reaches the
# pipeline.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from formrelay.config import Settings
from formrelay.dependencies import (
    enforce_rate_limit,
    get_form_pipeline,
    get_settings_dep,
    parse_submission,
)
from formrelay.schemas import FormResponse, Submission
from formrelay.services.pipeline import FormSubmissionPipeline

router = APIRouter()

_rate_limited = [Depends(enforce_rate_limit)]


async def submit_form(
    submission: Submission = Depends(parse_submission),
    pipeline: FormSubmissionPipeline = Depends(get_form_pipeline),
) -> JSONResponse:
    """Validate a submission and send the admin and confirmation emails."""
    outcome = await pipeline.handle(submission)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body.model_dump())


router.add_api_route(
    "/homepage-form",
    submit_form,
    methods=["POST"],
    dependencies=_rate_limited,
    response_model=FormResponse,
    name="homepage_form",
)

router.add_api_route(
    "/video-editor-form",
    submit_form,
    methods=["POST"],
    dependencies=_rate_limited,
    response_model=FormResponse,
    name="video_editor_form",
)


@router.get("/video-editor-form")
async def video_editor_redirect(settings: Settings = Depends(get_settings_dep)) -> RedirectResponse:
    """The editor lives on the static site; send browsers there."""
    return RedirectResponse(settings.video_editor_url, status_code=302)
