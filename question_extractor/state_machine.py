"""
State Machine Parser
====================
Deterministic state machine that turns one numbered text block into a
multiple-choice question, or rejects it.

    IDLE ──stem──▶ HAVE_STEM ──options──▶ COLLECTING_OPTIONS ──answer──▶ RESOLVED
      │                                        │
      └───────────────▶ REJECTED ◀─────────────┘

Rejections are silent: the block is dropped and its reason recorded on the
outcome so the caller can count it.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from .models import (
    MAX_OPTIONS,
    MIN_OPTIONS,
    ParsedQuestion,
    RejectionReason,
)
from .segmenter import split_blocks

logger = logging.getLogger(__name__)

# ─── Anchor Patterns ──────────────────────────────────────────────────────────

# Matches "1. What is ...", "12 What is ..." on the block's first line
STEM_PATTERN = re.compile(r"^\d+[.\s]+(.+)$")

# Matches "A) 3", "b] text", "F. text"; letters beyond F are not options
OPTION_PATTERN = re.compile(r"^([A-F])[)\].]\s*(.+)$", re.IGNORECASE)

# Matches the "Answer:" / "Correct:" label line
ANSWER_LABEL_PATTERN = re.compile(r"^(?:Answer|Correct)\s*:", re.IGNORECASE)

# Letter following the label: "Answer: B", "Correct: c)"
ANSWER_LETTER_PATTERN = re.compile(
    r"^(?:Answer|Correct)\s*:\s*([A-F])\b", re.IGNORECASE
)

# Matches "Explanation: ..." and captures the remainder
EXPLANATION_PATTERN = re.compile(r"^Explanation\s*:(.*)$", re.IGNORECASE)

# Non-empty span between a pair of dollar signs: "$x^2$"
LATEX_PATTERN = re.compile(r"\$[^$]+\$")


class ParserState(Enum):
    """States of a single block parse."""
    IDLE = "IDLE"
    HAVE_STEM = "HAVE_STEM"
    COLLECTING_OPTIONS = "COLLECTING_OPTIONS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class BlockOutcome(BaseModel):
    """Terminal state of one block parse."""
    model_config = ConfigDict(frozen=True)

    state: ParserState
    question: Optional[ParsedQuestion] = None
    rejection: Optional[RejectionReason] = None

    @property
    def accepted(self) -> bool:
        return self.state == ParserState.RESOLVED


def has_latex(text: str) -> bool:
    """True if ``text`` holds a non-empty ``$...$`` span."""
    return bool(LATEX_PATTERN.search(text))


class StateMachineParser:
    """
    Parses question blocks of the form::

        1. Question text?
        A) Option 1
        B) Option 2
        Answer: A
        Explanation: ... (optional)

    The parser keeps no state between blocks; every call to
    :meth:`parse_block` starts from ``IDLE``.
    """

    def parse_block(self, block: str) -> BlockOutcome:
        """Run one block through the state machine."""
        lines = [line.strip() for line in block.strip().split("\n")]

        # ── IDLE → HAVE_STEM ──
        stem = self._extract_stem(lines[0])
        if stem is None:
            return self._reject(RejectionReason.MISSING_STEM, lines[0])
        self._transition(ParserState.IDLE, ParserState.HAVE_STEM, stem)

        # ── HAVE_STEM → COLLECTING_OPTIONS ──
        body = lines[1:]
        options, letter_map = self._collect_options(body)
        if len(options) < MIN_OPTIONS:
            return self._reject(RejectionReason.TOO_FEW_OPTIONS, stem)
        if len(options) > MAX_OPTIONS:
            return self._reject(RejectionReason.TOO_MANY_OPTIONS, stem)
        self._transition(
            ParserState.HAVE_STEM,
            ParserState.COLLECTING_OPTIONS,
            f"{len(options)} options",
        )

        # ── COLLECTING_OPTIONS → RESOLVED ──
        answer_line = self._first_match(ANSWER_LABEL_PATTERN, body)
        if answer_line is None:
            return self._reject(RejectionReason.MISSING_ANSWER, stem)

        letter_match = ANSWER_LETTER_PATTERN.match(answer_line)
        if not letter_match:
            return self._reject(RejectionReason.UNKNOWN_ANSWER_LETTER, stem)
        letter = letter_match.group(1).upper()
        if letter not in letter_map:
            return self._reject(RejectionReason.UNKNOWN_ANSWER_LETTER, stem)

        question = ParsedQuestion(
            stem=stem,
            options=tuple(options),
            correct_answer_index=letter_map[letter],
            explanation=self._extract_explanation(body),
            has_latex=has_latex(stem) or any(has_latex(o) for o in options),
        )
        self._transition(
            ParserState.COLLECTING_OPTIONS,
            ParserState.RESOLVED,
            f"answer {letter} -> index {question.correct_answer_index}",
        )
        return BlockOutcome(state=ParserState.RESOLVED, question=question)

    def parse_blocks(self, blocks: Iterable[str]) -> tuple[BlockOutcome, ...]:
        """Parse every block, keeping outcomes in block order."""
        return tuple(self.parse_block(block) for block in blocks)

    # ─── Transitions ──────────────────────────────────────────────────────────

    @staticmethod
    def _extract_stem(first_line: str) -> Optional[str]:
        match = STEM_PATTERN.match(first_line)
        if not match:
            return None
        stem = match.group(1).strip()
        return stem or None

    @staticmethod
    def _collect_options(lines: list[str]) -> tuple[list[str], dict[str, int]]:
        """
        Collect option lines in order. Non-option lines are skipped.
        A repeated letter points at its latest occurrence.
        """
        options: list[str] = []
        letter_map: dict[str, int] = {}
        for line in lines:
            match = OPTION_PATTERN.match(line)
            if not match:
                continue
            text = match.group(2).strip()
            if not text:
                continue
            letter_map[match.group(1).upper()] = len(options)
            options.append(text)
        return options, letter_map

    @staticmethod
    def _first_match(pattern: re.Pattern, lines: list[str]) -> Optional[str]:
        # First labelled line wins; later duplicates are ignored.
        for line in lines:
            if pattern.match(line):
                return line
        return None

    @classmethod
    def _extract_explanation(cls, lines: list[str]) -> Optional[str]:
        line = cls._first_match(EXPLANATION_PATTERN, lines)
        if line is None:
            return None
        return EXPLANATION_PATTERN.match(line).group(1).strip()

    @staticmethod
    def _transition(source: ParserState, target: ParserState, detail: str):
        logger.debug(f"{source.value} -> {target.value}: {detail}")

    @staticmethod
    def _reject(reason: RejectionReason, context: str) -> BlockOutcome:
        logger.debug(f"Block rejected ({reason.value}): {context[:60]!r}")
        return BlockOutcome(state=ParserState.REJECTED, rejection=reason)


def extract_questions_from_text(text: str) -> tuple[ParsedQuestion, ...]:
    """Segment ``text`` and return the questions that parsed, in order."""
    parser = StateMachineParser()
    return tuple(
        outcome.question
        for outcome in parser.parse_blocks(split_blocks(text))
        if outcome.accepted
    )
