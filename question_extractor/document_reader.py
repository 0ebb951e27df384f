"""
Document Reader
===============
Converts uploaded document bytes into plain text (pdf, docx, txt) or a
parsed JSON value (json).

PDF text comes from PyMuPDF (fitz), DOCX paragraphs from python-docx.
Layout, images and OCR are out of scope: only the text layer is read.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Union

import docx
import fitz  # PyMuPDF

from .exceptions import ExtractionError
from .models import DocumentType

logger = logging.getLogger(__name__)

# Plain text, or whatever JSON value the document held
ExtractedContent = Any


class DocumentReader:
    """
    Reads a single in-memory document.

    Holds only its text encoding; safe to share between threads.
    """

    def __init__(self, text_encoding: str = "utf-8-sig"):
        self.text_encoding = text_encoding

    def read(self, data: bytes, declared_type: Union[str, DocumentType]) -> ExtractedContent:
        """
        Extract the content of a document.

        Args:
            data: Raw document bytes.
            declared_type: "pdf", "docx", "txt" or "json" (or a DocumentType).

        Returns:
            Plain text for pdf/docx/txt, the parsed JSON value for json.

        Raises:
            UnsupportedTypeError: If the declared type is unknown.
            ExtractionError: If the bytes cannot be read as that type.
        """
        doc_type = DocumentType.from_declared(declared_type)
        logger.info(f"Reading {doc_type.value.upper()} document ({len(data)} bytes)")

        readers = {
            DocumentType.PDF: self._read_pdf,
            DocumentType.DOCX: self._read_docx,
            DocumentType.TXT: self._read_txt,
            DocumentType.JSON: self._read_json,
        }
        return readers[doc_type](data)

    def _read_pdf(self, data: bytes) -> str:
        """Concatenate the text layer of every page."""
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                pages = [page.get_text("text") for page in doc]
        except Exception as e:
            logger.error(f"Error reading PDF: {e}")
            raise ExtractionError(DocumentType.PDF.value, str(e)) from e

        logger.debug(f"Read {len(pages)} PDF pages")
        return "\n".join(pages)

    def _read_docx(self, data: bytes) -> str:
        """One line per paragraph, in document order."""
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as e:
            logger.error(f"Error reading DOCX: {e}")
            raise ExtractionError(DocumentType.DOCX.value, str(e)) from e

        return "\n".join(para.text for para in document.paragraphs)

    def _read_txt(self, data: bytes) -> str:
        try:
            return data.decode(self.text_encoding)
        except UnicodeDecodeError as e:
            logger.error(f"Error decoding TXT: {e}")
            raise ExtractionError(DocumentType.TXT.value, str(e)) from e

    def _read_json(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode(self.text_encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Error parsing JSON: {e}")
            raise ExtractionError(DocumentType.JSON.value, str(e)) from e
