"""
LatexAI — Editor State Definitions
==================================
Plain dataclasses shared by the classifier, the reconciler, the editing
session and the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CursorContext:
    """
    Math-mode classification of a cursor position.

    Attributes
    ----------
    in_math_mode : bool
        True when the cursor sits after an unmatched ``$`` or ``$$``.

    is_inline : bool
        True for ``$...$``; False for ``$$...$$`` and for plain text.

    math_fragment : str
        Text between the opening delimiter and the cursor.

    math_fragment_start : int
        Offset of the opening delimiter, or -1 outside math mode.

    dollar_count : int
        Width of the opening delimiter (1 or 2), or 0 outside math mode.
    """

    in_math_mode: bool = False
    is_inline: bool = False
    math_fragment: str = ""
    math_fragment_start: int = -1
    dollar_count: int = 0


PLAIN_TEXT = CursorContext()


@dataclass(frozen=True)
class PendingSuggestion:
    request_id: str
    start_offset: int
    current_offset: int
    suggestion: Optional[str] = None
    text_at_request: str = ""


@dataclass
class EditSuggestion:
    visible: bool = False
    replacement_text: str = ""
    selection_start: int = 0
    selection_end: int = 0
    original_text: str = ""


@dataclass(frozen=True)
class SuggestionResult:
    suggestion: str
    text_at_request: str
    cursor_at_request: int

    def to_wire(self) -> dict:
        return {
            "suggestion": self.suggestion,
            "textAtRequest": self.text_at_request,
            "cursorAtRequest": self.cursor_at_request,
        }
