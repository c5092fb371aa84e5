"""
LatexAI — Model Output Post-Processor
=====================================
Heuristics applied to raw model text before it reaches the editor:

  Completions  → clean_suggestion(), is_duplicate(), wrap_math(),
                 add_leading_space(), strip_repeated_prefix()
  Edits        → extract_replacement(), is_incomplete(), finalize_edit()

``requires_math_mode`` classifies the *output* text; it complements the
input-side classifier in ``latexai.math_context``.
"""

from __future__ import annotations

import regex as re

from latexai.config import DUPLICATE_LOOKAHEAD
from latexai.state import CursorContext

NO_CHANGES_MESSAGE = "No changes suggested. Try a different query."
INCOMPLETE_MESSAGE = (
    "Received incomplete suggestion. Please try again with a more specific query."
)

# Characters after which the model's text can be glued on without a space.
_NO_SPACE_AFTER = {" ", "\n", "{", "\\"}
_NO_SPACE_BEFORE = ("$", "\\", "{")

_MATH_PATTERNS = [
    re.compile(r"\\texttt\{[^}]*[0-9_^\\]"),
    re.compile(r"[0-9]+"),
    re.compile(r"[+\-*/=]"),
    re.compile(r"\\(?:alpha|beta|gamma|delta|sum|prod|frac|sqrt)"),
    re.compile(r"[_^]"),
]

_WORD_SPLIT = re.compile(r"[\s{}$]+")
_SUGGESTION_TAG = re.compile(r"</?Suggestion>", re.IGNORECASE)
_EDIT_PREAMBLE = re.compile(
    r"^(?:here is |this is )?"
    r"(?:(?:the|your|updated|new|suggested|replacement) )*"
    r"(?:text|version|content|portion|suggestion)(?: that)?"
    r"(?: replaces| for| should be)?\s*[:-]\s*",
    re.IGNORECASE,
)
_INCOMPLETE_END = re.compile(r"[a-zA-Z0-9,;:]$")


# ──────────────────────────────────────────────
# COMPLETIONS
# ──────────────────────────────────────────────


def requires_math_mode(text: str) -> bool:
    """True if ``text`` contains digits, operators, scripts or math commands."""
    return any(pattern.search(text) for pattern in _MATH_PATTERNS)


def wrap_math(suggestion: str, context: CursorContext) -> str:
    """Wrap a plain-text-mode suggestion in ``$...$`` when it needs math mode."""
    if context.in_math_mode or not suggestion:
        return suggestion
    if requires_math_mode(suggestion):
        return f"${suggestion}$"
    return suggestion


def clean_suggestion(raw: str | None) -> str:
    """Strip quotes, backticks and echoed ``<Suggestion>`` tags."""
    if not raw:
        return ""
    suggestion = _SUGGESTION_TAG.sub("", raw.strip())
    for char in ("`", '"', "'"):
        suggestion = suggestion.replace(char, "")
    return suggestion.strip()


def last_word(prefix: str) -> str:
    return _WORD_SPLIT.split(prefix)[-1] if prefix else ""


def is_duplicate(suggestion: str, word: str, next_chars: str) -> bool:
    """
    True if the suggestion repeats the last typed word or text the user
    already has right after the cursor.
    """
    return suggestion == word or suggestion in next_chars


def needs_leading_space(last_char: str) -> bool:
    return bool(last_char) and last_char not in _NO_SPACE_AFTER


def add_leading_space(suggestion: str, last_char: str, raw: str | None = None) -> str:
    """
    Prepend a single space when the text before the cursor ends in a word
    character or punctuation.

    ``raw`` is the suggestion before math wrapping; the ``$`` added by
    ``wrap_math`` must not suppress the space.
    """
    probe = suggestion if raw is None else raw
    if not suggestion or not needs_leading_space(last_char):
        return suggestion
    if probe.startswith(_NO_SPACE_BEFORE):
        return suggestion
    return " " + suggestion


def strip_repeated_prefix(suggestion: str, prefix: str) -> str:
    """Drop a case-insensitive copy of the already-typed text from the front."""
    if prefix and suggestion.lower().startswith(prefix.lower()):
        return suggestion[len(prefix) :]
    return suggestion


def postprocess_completion(
    raw: str | None,
    prefix: str,
    next_chars: str,
    context: CursorContext,
) -> str:
    """
    Full completion pipeline.

    ``prefix`` is the text window before the cursor and ``next_chars`` the
    text right after it. Returns ``""`` when the suggestion should be
    suppressed.
    """
    suggestion = clean_suggestion(raw)
    if not suggestion:
        return ""

    if is_duplicate(suggestion, last_word(prefix), next_chars[:DUPLICATE_LOOKAHEAD]):
        return ""

    wrapped = wrap_math(suggestion, context)
    spaced = add_leading_space(wrapped, prefix[-1:], raw=suggestion)
    return strip_repeated_prefix(spaced, prefix)


# ──────────────────────────────────────────────
# EDITS
# ──────────────────────────────────────────────


def is_incomplete(text: str) -> bool:
    """
    Best-effort truncation check: the text stops on a letter, digit or
    clause punctuation instead of a sentence end.
    """
    return bool(_INCOMPLETE_END.search(text)) and not text.endswith(".")


def extract_replacement(raw: str, context_before: str, context_after: str) -> str:
    """
    Reduce a model edit response to just the replacement text.

    Removes "Here is the updated text:"-style preambles. If the model echoed
    the surrounding document, the last non-empty line is kept.
    """
    suggestion = _EDIT_PREAMBLE.sub("", raw.strip(), count=1)

    echoed = (context_before.strip() and context_before.strip() in suggestion) or (
        context_after.strip() and context_after.strip() in suggestion
    )
    if echoed:
        lines = [line for line in suggestion.split("\n") if line.strip()]
        if lines:
            suggestion = lines[-1]
    return suggestion.strip()


def finalize_edit(
    raw: str | None,
    selected_text: str,
    context_before: str = "",
    context_after: str = "",
) -> str:
    """
    Turn a model edit response into the text shown for accept/decline.

    Empty or unchanged responses and truncated ones become fixed messages.
    """
    if not raw or not raw.strip():
        return NO_CHANGES_MESSAGE

    replacement = extract_replacement(raw, context_before, context_after)
    if not replacement or replacement == selected_text:
        return NO_CHANGES_MESSAGE
    if is_incomplete(replacement):
        return INCOMPLETE_MESSAGE
    return replacement
