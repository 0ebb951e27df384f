"""
Shared fixtures: sample documents built in memory with the same libraries
the reader uses (PyMuPDF for PDF, python-docx for DOCX).
"""

from __future__ import annotations

import logging

import pytest

from .documents import make_docx_bytes, make_pdf_bytes

SAMPLE_TEXT = """1. What is 2+2?
A) 3
B) 4
C) 5
Answer: B
Explanation: Basic arithmetic.
2. Broken block with no answer
A) x
B) y
"""


@pytest.fixture(autouse=True, scope="session")
def _quiet_package_logger():
    """Keep the engine from attaching its console handler during tests."""
    package_logger = logging.getLogger("question_extractor")
    handler = logging.NullHandler()
    package_logger.addHandler(handler)
    yield
    package_logger.removeHandler(handler)


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture
def pdf_bytes(sample_text) -> bytes:
    return make_pdf_bytes(sample_text)


@pytest.fixture
def docx_bytes(sample_text) -> bytes:
    return make_docx_bytes(sample_text)
