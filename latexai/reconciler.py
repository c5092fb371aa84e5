"""
LatexAI — Suggestion Reconciler
===============================
Keeps an async autocomplete suggestion honest against a document that kept
changing while the request was in flight.

A suggestion stays valid only while the *meaningful content* (the text up to
the request cursor, trailing whitespace removed) is unchanged. Everything
here is pure: functions take a ``PendingSuggestion`` and return a new one or
``None``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import regex as re

from latexai.state import PendingSuggestion

_LAST_MEANINGFUL = re.compile(r"\S(?=\s*\Z)")


def meaningful_content(text: str, cursor: int) -> str:
    """
    Return ``text[:cursor]`` with trailing whitespace removed.

    The cut point is the last non-whitespace character followed only by
    whitespace; an all-whitespace prefix yields ``""``.
    """
    prefix = text[: max(cursor, 0)]
    match = _LAST_MEANINGFUL.search(prefix)
    if match is None:
        return ""
    return prefix[: match.start() + 1]


def content_matches(pending: PendingSuggestion, current_text: str) -> bool:
    """True if the text before the request cursor still reads the same."""
    at_request = meaningful_content(pending.text_at_request, pending.start_offset)
    now = meaningful_content(current_text, pending.start_offset)
    return at_request == now


def reconcile(
    pending: Optional[PendingSuggestion],
    current_text: str,
    current_cursor: int,
) -> Optional[PendingSuggestion]:
    """
    Re-validate ``pending`` against the current document and caret.

    Returns ``None`` when the suggestion no longer applies: the caret moved
    back before the request point, or the text before it was edited.
    Otherwise returns the suggestion tracking ``current_cursor``.
    """
    if pending is None:
        return None
    if current_cursor < pending.start_offset:
        return None
    if not content_matches(pending, current_text):
        return None
    if pending.current_offset == current_cursor:
        return pending
    return replace(pending, current_offset=current_cursor)


def should_request(previous_text: str, new_text: str, cursor: int) -> bool:
    """
    Decide whether a keystroke should schedule a new model request.

    Spaces and deletions only re-validate the current suggestion.
    """
    if len(new_text) < len(previous_text):
        return False
    typed = new_text[cursor - 1 : cursor] if cursor > 0 else ""
    return typed != " "


def is_current(pending: Optional[PendingSuggestion], request_id: str) -> bool:
    return pending is not None and pending.request_id == request_id


def accept_response(
    pending: Optional[PendingSuggestion],
    request_id: str,
    suggestion: str,
    current_text: str,
    current_cursor: int,
) -> Optional[PendingSuggestion]:
    """
    Attach a model response to the pending request, or drop it.

    The response is accepted only if ``request_id`` is still the latest
    outstanding request and the meaningful content has not changed since the
    request was issued. Returns ``None`` when the response is dropped.
    """
    if not is_current(pending, request_id):
        return None
    current = reconcile(pending, current_text, current_cursor)
    if current is None:
        return None
    return replace(current, suggestion=suggestion)


def split_suggestion(
    pending: Optional[PendingSuggestion],
    current_text: str,
) -> Optional[tuple[str, str]]:
    """
    Split a suggestion into the part already typed and the part still to
    insert. ``None`` if there is nothing to show or the user typed past it
    with different text.
    """
    if pending is None or not pending.suggestion:
        return None
    typed_part = current_text[pending.start_offset : pending.current_offset]
    if not pending.suggestion.startswith(typed_part):
        return None
    return typed_part, pending.suggestion[len(typed_part) :]


def accept_suggestion(
    pending: Optional[PendingSuggestion],
    current_text: str,
) -> Optional[tuple[str, int]]:
    """
    Tab acceptance: splice the untyped remainder in at the caret.

    Returns ``(new_text, new_cursor)``, or ``None`` when the suggestion does
    not match what was typed and nothing is inserted.
    """
    split = split_suggestion(pending, current_text)
    if split is None:
        return None
    _, remaining = split
    offset = pending.current_offset
    new_text = current_text[:offset] + remaining + current_text[offset:]
    return new_text, offset + len(remaining)
