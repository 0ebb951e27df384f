"""
Block Segmenter
===============
Splits extracted plain text into numbered question blocks.

A new block starts at every line that begins with a question number
("1.", "12 ", "3\t"). Blocks are yielded lazily, in document order.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

logger = logging.getLogger(__name__)

# Zero-width split point before "12." / "12 " at the start of a line
BLOCK_START_PATTERN = re.compile(r"^(?=\d+(?:\.|[ \t]))", re.MULTILINE)


def split_blocks(text: str) -> Iterator[str]:
    """
    Yield trimmed, non-empty question blocks from ``text``.

    Whatever precedes the first numbered line (a title, instructions) is
    yielded as a leading block of its own. It never has a stem, so the
    block parser rejects it; it is still yielded so that block counts in
    the extraction report reflect the document as written.
    """
    if not text:
        return

    text = text.replace("\r\n", "\n").replace("\r", "\n")

    start = 0
    for match in BLOCK_START_PATTERN.finditer(text):
        if match.start() == start:
            continue
        block = text[start:match.start()].strip()
        start = match.start()
        if block:
            yield block

    block = text[start:].strip()
    if block:
        yield block
