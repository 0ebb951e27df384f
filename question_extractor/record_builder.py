"""
Question Record Builder
=======================
Merges parsed or normalized candidates with caller defaults and
extraction metadata.

Field priority: candidate value → caller override → hard default.

    course      candidate → caller          (required, no default)
    difficulty  candidate → caller → "medium"
    points      candidate → 10
    is_active   True only under auto-approval, otherwise False
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from .exceptions import InvalidShapeError, MissingCourseError
from .models import (
    Difficulty,
    ParsedQuestion,
    QuestionRecord,
    RecordDefaults,
    RecordMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = Difficulty.MEDIUM.value
DEFAULT_POINTS = 10

# Keys the builder owns; candidate values for these are resolved or replaced
_MANAGED_KEYS = frozenset({
    "course",
    "difficulty",
    "points",
    "is_active",
    "isActive",
    "metadata",
})

Candidate = Union[ParsedQuestion, dict]


def build_records(
    candidates: Iterable[Candidate],
    document_name: str,
    defaults: Optional[RecordDefaults] = None,
    extracted_at: Optional[datetime] = None,
) -> tuple[QuestionRecord, ...]:
    """
    Build one immutable record per candidate, preserving order.

    Args:
        candidates: ParsedQuestion models or JSON question objects.
        document_name: Original name of the uploaded document.
        defaults: Caller overrides (course, difficulty, auto-approval).
        extracted_at: Timestamp for every record; defaults to now (UTC).

    Returns:
        Tuple of QuestionRecord, same order as ``candidates``.

    Raises:
        MissingCourseError: A candidate has no course and no default exists.
        InvalidShapeError: A JSON candidate is not an object, or holds
            values that cannot form a record.
    """
    defaults = defaults or RecordDefaults()
    metadata = RecordMetadata(
        document_name=document_name,
        extracted_at=extracted_at or datetime.now(timezone.utc),
    )

    records = tuple(
        _build_record(index, candidate, defaults, metadata)
        for index, candidate in enumerate(candidates)
    )

    logger.debug(
        f"Built {len(records)} records for {document_name} "
        f"(auto_approve={defaults.auto_approve})"
    )
    return records


def _build_record(
    index: int,
    candidate: Candidate,
    defaults: RecordDefaults,
    metadata: RecordMetadata,
) -> QuestionRecord:
    fields = _candidate_fields(index, candidate)

    course = fields.get("course") or defaults.course
    if not course:
        raise MissingCourseError(index)

    caller_difficulty = defaults.difficulty.value if defaults.difficulty else None
    payload: dict[str, Any] = {
        key: value for key, value in fields.items() if key not in _MANAGED_KEYS
    }
    payload.update(
        course=course,
        difficulty=(
            fields.get("difficulty") or caller_difficulty or DEFAULT_DIFFICULTY
        ),
        points=fields.get("points") or DEFAULT_POINTS,
        is_active=defaults.auto_approve,
        metadata=metadata,
    )

    try:
        return QuestionRecord.model_validate(payload)
    except ValidationError as e:
        raise InvalidShapeError(f"Question {index + 1}: {e}") from e


def _candidate_fields(index: int, candidate: Candidate) -> dict[str, Any]:
    if isinstance(candidate, ParsedQuestion):
        return candidate.model_dump()
    if isinstance(candidate, dict):
        return candidate
    raise InvalidShapeError(
        f"Question {index + 1} must be an object, "
        f"got {type(candidate).__name__}"
    )
