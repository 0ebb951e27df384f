"""
Question Extractor
==================
Document ingestion pipeline that turns uploaded quiz material into
structured multiple-choice question candidates.

Architecture:
    - Document Reader: Converts raw bytes (pdf, docx, txt, json) into text or JSON
    - Segmenter: Splits plain text into numbered question blocks
    - State Machine: Parses each block into a stem, options, answer, explanation
    - JSON Normalizer: Flattens machine-authored JSON into the same candidates
    - Record Builder: Applies caller defaults and extraction metadata
    - Validator: Summarizes kept and dropped blocks for review

Version: 1.0.0
"""

__version__ = "1.0.0"
