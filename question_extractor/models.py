"""
Data Models
===========
Pydantic models for extracted question candidates.
All models are serializable to JSON for the review/approval workflow.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from .exceptions import UnsupportedTypeError

MIN_OPTIONS = 2
MAX_OPTIONS = 6


# ─── Enums ────────────────────────────────────────────────────────────────────


class DocumentType(str, Enum):
    """Declared type of an uploaded document."""
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    JSON = "json"

    @classmethod
    def from_declared(cls, declared: str) -> "DocumentType":
        """
        Resolve a declared type tag or file extension.

        Accepts ``"pdf"``, ``"PDF"`` and ``".pdf"`` alike.

        Raises:
            UnsupportedTypeError: If the tag names no supported type.
        """
        if isinstance(declared, cls):
            return declared
        normalized = (declared or "").strip().lower().lstrip(".")
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedTypeError(declared) from None


class Difficulty(str, Enum):
    """Difficulty levels accepted as a caller default."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RejectionReason(str, Enum):
    """Why a text block produced no question."""
    MISSING_STEM = "missing_stem"
    TOO_FEW_OPTIONS = "too_few_options"
    TOO_MANY_OPTIONS = "too_many_options"
    MISSING_ANSWER = "missing_answer"
    UNKNOWN_ANSWER_LETTER = "unknown_answer_letter"


# ─── Question Models ──────────────────────────────────────────────────────────


class QuestionMetadata(BaseModel):
    """Provenance attached by the block parser."""
    model_config = ConfigDict(frozen=True)

    source: str = "document"


class ParsedQuestion(BaseModel):
    """
    A single multiple-choice question recovered from a text block.

    ``explanation`` is ``None`` when the block had no explanation line and
    ``""`` when the line was present but empty.
    """
    model_config = ConfigDict(frozen=True)

    stem: str = Field(min_length=1)
    options: tuple[str, ...]
    correct_answer_index: int = Field(ge=0)
    explanation: Optional[str] = None
    has_latex: bool = False
    metadata: QuestionMetadata = Field(default_factory=QuestionMetadata)

    @model_validator(mode="after")
    def _check_options(self) -> "ParsedQuestion":
        if not MIN_OPTIONS <= len(self.options) <= MAX_OPTIONS:
            raise ValueError(
                f"Must have between {MIN_OPTIONS} and {MAX_OPTIONS} options, "
                f"got {len(self.options)}"
            )
        if self.correct_answer_index >= len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} out of range "
                f"for {len(self.options)} options"
            )
        return self


class RecordMetadata(BaseModel):
    """Extraction metadata stamped on every record."""
    model_config = ConfigDict(frozen=True)

    source: str = "document"
    document_name: str
    extracted_at: datetime


class QuestionRecord(BaseModel):
    """
    A candidate question ready for review or auto-approval.

    Carries the candidate's own fields (``stem``/``options``/... for parsed
    text, whatever keys the author used for JSON input) as extras, plus the
    resolved defaults below.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    course: str
    difficulty: str = Difficulty.MEDIUM.value
    points: int = 10
    is_active: bool = False
    metadata: RecordMetadata


class RecordDefaults(BaseModel):
    """Caller-supplied overrides for one upload."""
    course: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    auto_approve: bool = False


# ─── Report / Result Models ───────────────────────────────────────────────────


class ExtractionReport(BaseModel):
    """Post-extraction summary of kept and dropped blocks."""
    blocks_detected: int = 0
    questions_extracted: int = 0
    blocks_dropped: int = 0
    rejection_breakdown: dict[str, int] = Field(default_factory=dict)
    questions_with_latex: int = 0
    questions_missing_explanation: int = 0

    @computed_field
    @property
    def success_rate(self) -> float:
        if self.blocks_detected == 0:
            return 0.0
        return round(
            self.questions_extracted / self.blocks_detected * 100,
            2
        )


class ExtractionResult(BaseModel):
    """
    Complete output of one extraction call.
    A result with zero questions is a success, not a failure.
    """
    document_name: str
    document_type: DocumentType
    extractor_version: str = "1.0.0"
    extracted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    questions: tuple[QuestionRecord, ...] = ()
    report: ExtractionReport = Field(default_factory=ExtractionReport)

    @computed_field
    @property
    def total_extracted(self) -> int:
        return len(self.questions)

    def records_as_dicts(self) -> list[dict[str, Any]]:
        """JSON-ready list of the extracted records."""
        return [q.model_dump(mode="json") for q in self.questions]
