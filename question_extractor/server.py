"""
HTTP Microservice
=================
Flask-based HTTP API for the question extraction engine.

Uploads are read in memory and never written to disk; persisting approved
questions is the caller's job.

Endpoints:
    POST   /api/questions/upload  → Extract question candidates from a document
    GET    /api/health            → Health check
    GET    /api/info              → Extractor version info
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from . import __version__
from .engine import ExtractionEngine, ExtractorConfig
from .exceptions import (
    ExtractionError,
    InvalidShapeError,
    MissingCourseError,
    UnsupportedTypeError,
)
from .models import Difficulty, DocumentType, RecordDefaults

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

_TRUTHY = {"true", "1", "yes", "on"}


def create_app(config: dict = None) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    CORS(app)

    # Flask ships MAX_CONTENT_LENGTH = None
    if app.config.get("MAX_CONTENT_LENGTH") is None:
        app.config["MAX_CONTENT_LENGTH"] = int(
            os.environ.get("MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)
        )
    app.config.setdefault("EXTRACTOR_LOG_LEVEL", "INFO")
    if config:
        app.config.update(config)

    app.extensions["question_extractor"] = ExtractionEngine(
        ExtractorConfig(log_level=app.config["EXTRACTOR_LOG_LEVEL"])
    )

    _register_routes(app)
    return app


def _engine() -> ExtractionEngine:
    return current_app.extensions["question_extractor"]


def _register_routes(app: Flask):

    # ─── Health Check ─────────────────────────────────────────────────────

    @app.route("/api/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/api/info", methods=["GET"])
    def info():
        """Extractor version and capabilities."""
        return jsonify({
            "name": "question-extractor",
            "version": __version__,
            "supported_types": [t.value for t in DocumentType],
            "difficulties": [d.value for d in Difficulty],
            "max_file_size": app.config["MAX_CONTENT_LENGTH"],
        })

    # ─── Upload Endpoint ──────────────────────────────────────────────────

    @app.route("/api/questions/upload", methods=["POST"])
    def upload_document():
        """
        Extract question candidates from an uploaded document.

        Form fields:
            file:        pdf, docx, txt or json document (required)
            course:      default course for questions without one
            difficulty:  easy | medium | hard
            autoApprove: "true" marks questions active without review
        """
        file = request.files.get("file")
        if file is None or not file.filename:
            return jsonify({"success": False, "message": "No file uploaded"}), 400

        difficulty = request.form.get("difficulty") or None
        if difficulty and difficulty not in {d.value for d in Difficulty}:
            return jsonify({
                "success": False,
                "message": f"Invalid difficulty: {difficulty}",
            }), 400

        auto_approve = request.form.get("autoApprove", "").lower() in _TRUTHY
        defaults = RecordDefaults(
            course=request.form.get("course") or None,
            difficulty=difficulty,
            auto_approve=auto_approve,
        )
        filename = file.filename
        declared_type = Path(filename).suffix

        try:
            result = _engine().extract(file.read(), declared_type, filename, defaults)
        except UnsupportedTypeError as e:
            return jsonify({
                "success": False,
                "message": "Only PDF, DOCX, TXT, and JSON files are allowed",
                "error": str(e),
            }), 415
        except (ExtractionError, InvalidShapeError) as e:
            logger.error(f"Extraction failed for {filename}: {e}")
            return jsonify({
                "success": False,
                "message": f"Extraction failed: {e}",
            }), 422
        except MissingCourseError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        if result.total_extracted == 0:
            message = "No questions found in document."
        elif auto_approve:
            message = "Questions extracted and approved."
        else:
            message = "Questions extracted successfully. Review and approve to save."

        return jsonify({
            "success": True,
            "message": message,
            "fileName": filename,
            "totalExtracted": result.total_extracted,
            "autoApproved": auto_approve,
            "extractedQuestions": result.records_as_dicts(),
            "report": result.report.model_dump(mode="json"),
        }), 200


def run_server(
    host: str = "0.0.0.0",
    port: int = 5000,
    debug: bool = False,
):
    """Start the microservice server."""
    app = create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_server(debug=True)
