# Form submission pipeline: validate → render → notify admin → confirm to user.
# The two sends are sequential and both gate success; the confirmation is
# never attempted if the admin notification fails.


from dataclasses import dataclass

import structlog
from opentelemetry import trace

from formrelay.config import Settings
from formrelay.delivery.protocol import EmailSender, OutgoingEmail
from formrelay.exceptions import GENERIC_FAILURE_MESSAGE, DeliveryError, SubmissionValidationError
from formrelay.pipeline.rendering import TemplateStore, build_replacements, render_template
from formrelay.pipeline.validation import validate_submission
from formrelay.schemas import FormResponse, Submission
from formrelay.services.metrics import Outcome, SubmissionMetrics

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

SUCCESS_MESSAGE = "Form submitted successfully! We will contact you soon."
CONFIRMATION_SUBJECT = "Thank you for your inquiry"


def notification_subject(project: str) -> str:
    return f"New Contact Form Submission: {' '.join(project.splitlines())}"


@dataclass(frozen=True)
class FormOutcome:
    """HTTP status plus the response envelope for one submission."""

    status_code: int
    body: FormResponse


class FormSubmissionPipeline:
    """Turns a Submission into two delivered emails, or an error envelope."""

    def __init__(
        self,
        sender: EmailSender,
        templates: TemplateStore,
        settings: Settings,
        metrics: SubmissionMetrics | None = None,
    ) -> None:
        self._sender = sender
        self._templates = templates
        self._settings = settings
        self._metrics = metrics

    async def handle(self, submission: Submission) -> FormOutcome:
        """Run the whole pipeline. Never raises; every failure becomes an outcome."""
        with tracer.start_as_current_span("form_submission") as span:
            try:
                await self._deliver(submission)
            except SubmissionValidationError as e:
                span.set_attribute("outcome", Outcome.invalid.value)
                self._record(Outcome.invalid)
                logger.info("submission_rejected", reason=e.message)
                return FormOutcome(400, FormResponse(success=False, message=e.message))
            except DeliveryError as e:
                span.set_attribute("outcome", Outcome.delivery_failed.value)
                self._record(Outcome.delivery_failed)
                logger.error(
                    "delivery_failed",
                    provider=e.provider,
                    reason=e.reason,
                    project=submission.project,
                )
                return FormOutcome(500, FormResponse(success=False, message=GENERIC_FAILURE_MESSAGE))
            except Exception as e:
                span.record_exception(e)
                span.set_attribute("outcome", Outcome.error.value)
                self._record(Outcome.error)
                logger.exception("submission_failed", error_type=type(e).__name__)
                return FormOutcome(500, FormResponse(success=False, message=GENERIC_FAILURE_MESSAGE))

            span.set_attribute("outcome", Outcome.delivered.value)
            self._record(Outcome.delivered)
            logger.info("submission_delivered", project=submission.project)
            return FormOutcome(200, FormResponse(success=True, message=SUCCESS_MESSAGE))

    async def _deliver(self, submission: Submission) -> None:
        validate_submission(submission)
        replacements = build_replacements(submission)
        settings = self._settings

        notification = OutgoingEmail(
            sender=settings.from_email,
            to=settings.admin_email,
            subject=notification_subject(submission.project),
            html=render_template(self._templates, settings.notification_template, replacements),
            reply_to=submission.email,
        )
        with tracer.start_as_current_span("send_notification"):
            await self._sender.send(notification)

        confirmation = OutgoingEmail(
            sender=settings.from_email,
            to=submission.email,
            subject=CONFIRMATION_SUBJECT,
            html=render_template(self._templates, settings.confirmation_template, replacements),
        )
        with tracer.start_as_current_span("send_confirmation"):
            await self._sender.send(confirmation)

    def _record(self, outcome: Outcome) -> None:
        if self._metrics:
            self._metrics.record_submission(outcome)
