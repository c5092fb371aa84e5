"""
LatexAI — Cursor Context Classifier
===================================
Decides whether a cursor offset sits inside inline (``$...$``) or display
(``$$...$$``) math by scanning backwards from the cursor.

This is a nearest-delimiter scan, not a LaTeX parser:
  - ``\\$`` is treated as a real delimiter
  - mixed ``$`` / ``$$`` nesting is not resolved; the scan stops at the
    second delimiter it meets
"""

from __future__ import annotations

from latexai.state import PLAIN_TEXT, CursorContext


def classify(text: str, cursor: int) -> CursorContext:
    """
    Classify the math-mode state of ``text`` at ``cursor``.

    Walks backwards from ``cursor - 1``. The first delimiter found is the
    candidate opener. Meeting a second delimiter before the start of the
    buffer means the nearest region is already closed, so the cursor is in
    plain text and the scan exits early.
    """
    cursor = max(0, min(cursor, len(text)))

    math_start = -1
    dollar_count = 0
    i = cursor - 1

    while i >= 0:
        if text[i] == "$":
            width = 2 if i > 0 and text[i - 1] == "$" else 1
            if math_start != -1:
                return PLAIN_TEXT
            math_start = i - width + 1
            dollar_count = width
            i -= width - 1
        i -= 1

    if math_start == -1:
        return PLAIN_TEXT

    return CursorContext(
        in_math_mode=True,
        is_inline=dollar_count == 1,
        math_fragment=text[math_start + dollar_count : cursor],
        math_fragment_start=math_start,
        dollar_count=dollar_count,
    )


def count_open_braces(fragment: str) -> int:
    """Return how many ``{`` in ``fragment`` are still waiting for a ``}``."""
    open_braces = 0
    for char in fragment:
        if char == "{":
            open_braces += 1
        elif char == "}":
            open_braces -= 1
    return open_braces
