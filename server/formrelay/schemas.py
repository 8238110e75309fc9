# ─────────────────────────────────────────────────────────────────────────────
# Pydantic v2 Request / Response Schemas
# ─────────────────────────────────────────────────────────────────────────────


from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Submission(BaseModel):
    """A contact-form submission, as posted by the website.

    Fields default to "" so that a missing field reaches the pipeline's
    presence check instead of failing schema parsing. Presence and email
    syntax are enforced by pipeline.validation, not here.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    project: str = ""
    message: str = ""

    @field_validator("name", "email", "project", "message", mode="before")
    @classmethod
    def scalar_to_str(cls, v: Any) -> Any:
        """Form posts are strings already; JSON may carry numbers, booleans or null.

        Falsy scalars (null, false, 0) become "" so the presence check rejects
        them. Others are rendered the way a JSON client would write them.
        """
        if v is None or (isinstance(v, bool | int | float) and not v):
            return ""
        if isinstance(v, bool):
            return "true"
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, int | float):
            return str(v)
        return v


class FormResponse(BaseModel):
    """Envelope returned by every form endpoint."""

    success: bool
    message: str = Field(..., description="Human-readable outcome")


class LivenessResponse(BaseModel):
    """Liveness probe — minimal, near-zero cost."""

    status: str = "ok"
