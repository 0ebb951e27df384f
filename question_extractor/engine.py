"""
Question Extraction Engine
==========================
Main orchestrator that combines document reading, block parsing or JSON
normalization, record building and reporting into one extraction call.

Usage:
    engine = ExtractionEngine(config)
    result = engine.extract(data, "pdf", "biology.pdf", RecordDefaults(course="Bio"))
    # result is an ExtractionResult; result.total_extracted may be 0

Architecture:
    bytes → DocumentReader → text → split_blocks → StateMachineParser ─┐
                           → JSON → normalize_json ────────────────────┴→
    build_records → ValidationEngine → ExtractionResult
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from . import __version__
from .document_reader import DocumentReader
from .json_normalizer import normalize_json
from .models import (
    DocumentType,
    ExtractionResult,
    RecordDefaults,
)
from .record_builder import build_records
from .segmenter import split_blocks
from .state_machine import StateMachineParser
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExtractorConfig:
    """Configuration for the extraction engine."""

    # Decoding for txt/json documents
    text_encoding: str = "utf-8-sig"

    # Output settings
    output_dir: str = "output"
    save_output: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ExtractionEngine:
    """
    Question extraction engine.

    Orchestrates the pipeline for one document per call:
        1. Document reading (bytes → text or JSON)
        2. Block segmentation and state machine parsing, or JSON normalization
        3. Record building (defaults, metadata, approval flag)
        4. Reporting

    Holds configuration only, so one engine can serve concurrent calls.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self.reader = DocumentReader(text_encoding=self.config.text_encoding)
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("question_extractor")
        package_logger.setLevel(log_level)

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_path = Path(self.config.log_file)
            already_attached = any(
                isinstance(h, logging.FileHandler)
                and Path(h.baseFilename) == log_path.resolve()
                for h in package_logger.handlers
            )
            if not already_attached:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_path, encoding="utf-8")
                file_handler.setLevel(log_level)
                file_handler.setFormatter(
                    logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
                )
                package_logger.addHandler(file_handler)

    def extract(
        self,
        data: bytes,
        declared_type: Union[str, DocumentType],
        document_name: str,
        defaults: Optional[RecordDefaults] = None,
    ) -> ExtractionResult:
        """
        Extract question candidates from an in-memory document.

        Args:
            data: Raw document bytes.
            declared_type: "pdf", "docx", "txt" or "json".
            document_name: Original file name, stamped on every record.
            defaults: Caller overrides (course, difficulty, auto-approval).

        Returns:
            ExtractionResult; zero questions is a valid result.

        Raises:
            UnsupportedTypeError: If the declared type is unknown.
            ExtractionError: If the document cannot be read.
            InvalidShapeError: If JSON input has neither accepted shape.
            MissingCourseError: If a record ends up without a course.
        """
        doc_type = DocumentType.from_declared(declared_type)
        start_time = time.time()
        logger.info(f"Starting extraction of: {document_name}")

        # ── Step 1: Read document ─────────────────────────────────────
        logger.info("Phase 1: Document reading")
        content = self.reader.read(data, doc_type)

        # ── Step 2-4: Parse, build, report ────────────────────────────
        if doc_type == DocumentType.JSON:
            result = self.extract_json(content, document_name, defaults)
        else:
            result = self.extract_text(content, document_name, defaults, doc_type)

        elapsed = time.time() - start_time
        logger.info(
            f"Extraction complete in {elapsed:.2f}s, "
            f"{result.total_extracted} questions extracted"
        )
        if result.total_extracted == 0:
            logger.warning(f"No questions found in {document_name}")

        return result

    def extract_text(
        self,
        text: str,
        document_name: str,
        defaults: Optional[RecordDefaults] = None,
        document_type: DocumentType = DocumentType.TXT,
    ) -> ExtractionResult:
        """Run the text path on already extracted plain text."""
        logger.info("Phase 2: Block parsing")
        parser = StateMachineParser()
        outcomes = parser.parse_blocks(split_blocks(text))
        questions = [o.question for o in outcomes if o.accepted]

        logger.info("Phase 3: Record building")
        extracted_at = datetime.now(timezone.utc)
        records = build_records(questions, document_name, defaults, extracted_at)

        logger.info("Phase 4: Reporting")
        report = ValidationEngine().validate(outcomes)

        return ExtractionResult(
            document_name=document_name,
            document_type=document_type,
            extractor_version=__version__,
            extracted_at=extracted_at,
            questions=records,
            report=report,
        )

    def extract_json(
        self,
        value: Any,
        document_name: str,
        defaults: Optional[RecordDefaults] = None,
    ) -> ExtractionResult:
        """Run the JSON path on an already parsed JSON value."""
        logger.info("Phase 2: JSON normalization")
        candidates = normalize_json(value)

        logger.info("Phase 3: Record building")
        extracted_at = datetime.now(timezone.utc)
        records = build_records(candidates, document_name, defaults, extracted_at)

        logger.info("Phase 4: Reporting")
        report = ValidationEngine().validate_json(candidates)

        return ExtractionResult(
            document_name=document_name,
            document_type=DocumentType.JSON,
            extractor_version=__version__,
            extracted_at=extracted_at,
            questions=records,
            report=report,
        )

    def extract_file(
        self,
        path: str,
        defaults: Optional[RecordDefaults] = None,
        declared_type: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Extract questions from a file on disk.

        The type defaults to the file extension.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        path = os.path.abspath(path)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Document not found: {path}")

        declared_type = declared_type or Path(path).suffix
        with open(path, "rb") as f:
            data = f.read()

        result = self.extract(data, declared_type, os.path.basename(path), defaults)

        if self.config.save_output:
            output_dir = Path(self.config.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            self._save_json(result, output_dir / f"{Path(path).stem}_questions.json")

        return result

    def _save_json(self, result: ExtractionResult, filepath: Path):
        """Save ExtractionResult to a JSON file."""
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(
                    result.model_dump(mode="json"),
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
            logger.info(f"Saved JSON output: {filepath}")
        except OSError as e:
            logger.error(f"Failed to save JSON: {e}")
