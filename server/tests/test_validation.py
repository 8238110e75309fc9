# ─────────────────────────────────────────────────────────────────────────────
# Tests — submission validation + Submission schema coercion
# ─────────────────────────────────────────────────────────────────────────────

import pytest

from formrelay.exceptions import SubmissionValidationError
from formrelay.pipeline.validation import is_valid_email, validate_submission
from formrelay.schemas import Submission

_VALID = {"name": "Ada", "email": "ada@example.com", "project": "Site", "message": "Hi"}


class TestValidateSubmission:
    def test_valid_submission_passes(self):
        validate_submission(Submission(**_VALID))

    @pytest.mark.parametrize("missing", ["name", "email", "project", "message"])
    def test_each_field_is_required(self, missing: str):
        data = {**_VALID, missing: ""}
        with pytest.raises(SubmissionValidationError, match="All fields are required") as exc_info:
            validate_submission(Submission(**data))
        assert exc_info.value.status_code == 400

    def test_presence_checked_before_email_syntax(self):
        data = {**_VALID, "email": "not-an-email", "message": ""}
        with pytest.raises(SubmissionValidationError, match="All fields are required"):
            validate_submission(Submission(**data))

    def test_bad_email_rejected(self):
        data = {**_VALID, "email": "ada@example"}
        with pytest.raises(SubmissionValidationError, match="Invalid email address"):
            validate_submission(Submission(**data))

    def test_whitespace_only_field_counts_as_present(self):
        """Only empty strings are missing; content is not trimmed."""
        validate_submission(Submission(**{**_VALID, "project": " "}))


class TestIsValidEmail:
    @pytest.mark.parametrize(
        "value",
        ["ada@example.com", "a.b+tag@sub.example.co.uk", "x@y.z", "first.last@domain.io"],
    )
    def test_accepts(self, value: str):
        assert is_valid_email(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "ada",
            "ada@example",
            "@example.com",
            "ada@.com",
            "ada@@example.com",
            "ada @example.com",
            "ada@exa mple.com",
            "ada@example.com\n",
            "ada@example.",
        ],
    )
    def test_rejects(self, value: str):
        assert not is_valid_email(value)


class TestSubmissionSchema:
    def test_missing_fields_default_to_empty(self):
        submission = Submission.model_validate({"name": "Ada"})
        assert submission.email == ""
        assert submission.project == ""

    def test_extra_fields_ignored(self):
        submission = Submission.model_validate({**_VALID, "company": "bot-trap"})
        assert not hasattr(submission, "company")

    def test_null_becomes_empty(self):
        assert Submission.model_validate({**_VALID, "name": None}).name == ""

    def test_numbers_coerced_to_str(self):
        assert Submission.model_validate({**_VALID, "project": 42}).project == "42"

    @pytest.mark.parametrize("value", [False, 0, 0.0])
    def test_falsy_scalars_become_empty(self, value):
        assert Submission.model_validate({**_VALID, "name": value}).name == ""

    def test_bools_and_whole_floats_render_like_json(self):
        submission = Submission.model_validate({**_VALID, "name": True, "project": 7.0, "message": 2.5})
        assert submission.name == "true"
        assert submission.project == "7"
        assert submission.message == "2.5"
