# ─────────────────────────────────────────────────────────────────────────────
# Email body rendering — template store + literal $placeholder substitution
# ─────────────────────────────────────────────────────────────────────────────
# Not a template language: no conditionals, loops, or escaping. Each $key in
# the template is replaced by its value, everywhere it occurs. A template that
# cannot be read degrades to a one-line fallback so a broken deploy still
# sends something.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from formrelay.exceptions import TemplateReadError
from formrelay.schemas import Submission

logger = structlog.get_logger(__name__)

LINE_BREAK = "<br>"


@runtime_checkable
class TemplateStore(Protocol):
    """Source of template text by resource name."""

    def read(self, name: str) -> str: ...


class FileTemplateStore:
    """Reads UTF-8 templates from a directory on disk."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).resolve()

    @property
    def directory(self) -> Path:
        return self._directory

    def read(self, name: str) -> str:
        path = (self._directory / name).resolve()
        if not path.is_relative_to(self._directory):
            raise TemplateReadError(name, "path escapes the template directory")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateReadError(name, str(e)) from e


def normalize_message(text: str) -> str:
    """Turn every newline into an HTML line break."""
    return text.replace("\n", LINE_BREAK)


def build_replacements(submission: Submission) -> dict[str, str]:
    """Placeholder values for both templates, message already normalized."""
    return {
        "name": submission.name,
        "email": submission.email,
        "project": submission.project,
        "message": normalize_message(submission.message),
    }


def substitute(content: str, replacements: Mapping[str, str]) -> str:
    """Replace each literal $key with its value, in mapping order."""
    for key, value in replacements.items():
        content = content.replace(f"${key}", value)
    return content


def fallback_body(replacements: Mapping[str, str]) -> str:
    return f"<p>Hi {replacements.get('name') or 'there'}, thank you for your message!</p>"


def render_template(store: TemplateStore, name: str, replacements: Mapping[str, str]) -> str:
    """Render a named template, or the fallback body if it cannot be read.

    Never raises for a read failure.
    """
    try:
        content = store.read(name)
    except TemplateReadError as e:
        logger.error("template_read_failed", template=name, error=e.message)
        return fallback_body(replacements)
    return substitute(content, replacements)
