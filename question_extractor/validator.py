"""
Validation Engine
=================
Post-extraction reporting.

After each document, summarizes:
    - Blocks Detected
    - Questions Extracted
    - Blocks Dropped, by rejection reason
    - Questions with LaTeX notation
    - Questions Missing Explanation

Dropped blocks never fail a call, so this report is where they show up.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from .models import ExtractionReport
from .state_machine import BlockOutcome

logger = logging.getLogger(__name__)


class ValidationEngine:
    """
    Builds an ExtractionReport from block outcomes or JSON candidates.
    """

    def validate(self, outcomes: Iterable[BlockOutcome]) -> ExtractionReport:
        """
        Summarize the outcomes of one text extraction.

        Args:
            outcomes: Block outcomes in document order.

        Returns:
            ExtractionReport with per-reason rejection counts.
        """
        outcomes = tuple(outcomes)
        report = ExtractionReport(blocks_detected=len(outcomes))

        if not outcomes:
            logger.warning("No question blocks detected")
            return report

        questions = [o.question for o in outcomes if o.accepted]
        rejections = Counter(
            o.rejection.value for o in outcomes if o.rejection is not None
        )

        report.questions_extracted = len(questions)
        report.blocks_dropped = len(outcomes) - len(questions)
        report.rejection_breakdown = dict(rejections)
        report.questions_with_latex = sum(1 for q in questions if q.has_latex)
        report.questions_missing_explanation = sum(
            1 for q in questions if q.explanation is None
        )

        self._log_summary(report)
        return report

    def validate_json(self, candidates: list) -> ExtractionReport:
        """JSON candidates are taken as-is; every entry counts as extracted."""
        report = ExtractionReport(
            blocks_detected=len(candidates),
            questions_extracted=len(candidates),
            questions_missing_explanation=sum(
                1 for c in candidates
                if isinstance(c, dict) and c.get("explanation") is None
            ),
        )
        self._log_summary(report)
        return report

    def _log_summary(self, report: ExtractionReport):
        logger.info("=" * 60)
        logger.info("EXTRACTION REPORT")
        logger.info("=" * 60)
        logger.info(f"Blocks Detected: {report.blocks_detected}")
        logger.info(
            f"Questions Extracted: {report.questions_extracted} "
            f"({report.success_rate}%)"
        )
        logger.info(f"Blocks Dropped: {report.blocks_dropped}")
        logger.info(f"Questions with LaTeX: {report.questions_with_latex}")
        logger.info(
            f"Questions Missing Explanation: "
            f"{report.questions_missing_explanation}"
        )

        if report.rejection_breakdown:
            logger.info("Rejection Breakdown:")
            for reason, count in sorted(report.rejection_breakdown.items()):
                logger.info(f"  • {reason}: {count}")

        logger.info("=" * 60)
