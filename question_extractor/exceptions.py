"""
Exceptions
==========
Hard failures surfaced by the extraction pipeline.

Blocks that fail to parse are never errors: they are dropped and counted
in the extraction report. Only the cases below abort a call.
"""

from __future__ import annotations


class QuestionExtractorError(Exception):
    """Base class for all extraction failures."""


class UnsupportedTypeError(QuestionExtractorError):
    """The declared document type is not one of pdf, docx, txt, json."""

    def __init__(self, declared_type: str):
        self.declared_type = declared_type
        super().__init__(f"Unsupported file type: {declared_type!r}")


class ExtractionError(QuestionExtractorError):
    """The source document could not be read or decoded."""

    def __init__(self, document_type: str, message: str):
        self.document_type = document_type
        self.message = message
        super().__init__(f"{document_type.upper()} extraction failed: {message}")


class InvalidShapeError(QuestionExtractorError):
    """JSON input is neither a list nor an object with a ``questions`` list."""

    def __init__(self, message: str = (
        "Invalid JSON format. Expected array of questions or "
        "{\"questions\": [...]}"
    )):
        super().__init__(message)


class MissingCourseError(QuestionExtractorError):
    """Neither the candidate nor the caller supplied a course."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Question {index + 1} has no course and no default course was given"
        )
