"""
JSON Normalizer
===============
Accepts already-structured question JSON in one of two shapes:

    [ {...}, {...} ]
    { "questions": [ {...}, {...} ] }

JSON input is machine-authored, so any other shape is a hard failure.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import InvalidShapeError

logger = logging.getLogger(__name__)


def normalize_json(value: Any) -> list:
    """
    Return the question list carried by ``value``.

    Raises:
        InvalidShapeError: If ``value`` is neither a list nor an object
            with a ``questions`` list.
    """
    if isinstance(value, list):
        return value

    if isinstance(value, dict) and isinstance(value.get("questions"), list):
        return value["questions"]

    logger.debug(f"Rejected JSON of type {type(value).__name__}")
    raise InvalidShapeError()
