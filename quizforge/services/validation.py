"""Checks on a generation request, run before anything is sent upstream."""
from __future__ import annotations

from typing import Optional, Sequence

from ..schemas import QUIZ_TYPES
from ..settings import settings


class InputError(ValueError):
    """A malformed request parameter (reported as HTTP 400)."""


def validate_quiz_type(value: Optional[str]) -> str:
    if value not in QUIZ_TYPES:
        raise InputError("Invalid quiz type.")
    return value


def validate_question_count(value) -> int:
    message = f"Question count must be {settings.MIN_QUESTIONS}-{settings.MAX_QUESTIONS}."
    try:
        count = int(str(value).strip())
    except (TypeError, ValueError):
        raise InputError(message)
    if count < settings.MIN_QUESTIONS or count > settings.MAX_QUESTIONS:
        raise InputError(message)
    return count


def normalize_difficulty(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def validate_file_count(count: int) -> None:
    if count == 0:
        raise InputError("At least one file is required.")
    if count > settings.MAX_FILES:
        raise InputError(f"Max {settings.MAX_FILES} files allowed.")


def validate_file_sizes(files: Sequence) -> None:
    """``files`` are stored uploads with ``.filename`` and ``.size``."""
    for f in files:
        if f.size > settings.max_upload_bytes:
            raise InputError(f"{f.filename} exceeds {settings.MAX_UPLOAD_MB}MB limit.")
