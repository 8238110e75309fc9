# Submission gates: every field present, then a local@domain.tld-shaped email.


import re

from formrelay.exceptions import SubmissionValidationError
from formrelay.schemas import Submission

REQUIRED_FIELDS: tuple[str, ...] = ("name", "email", "project", "message")

# Deliberately loose: one "@", no whitespace, a dot somewhere after the "@".
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def validate_submission(submission: Submission) -> None:
    """Raise SubmissionValidationError on the first failed gate."""
    if any(not getattr(submission, field) for field in REQUIRED_FIELDS):
        raise SubmissionValidationError("All fields are required")
    if not is_valid_email(submission.email):
        raise SubmissionValidationError("Invalid email address")
