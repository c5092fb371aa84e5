"""
LatexAI — Editing Session
=========================
Client-side state machine for one open document:

    keystroke → debounce timer → fetch suggestion → reconcile → overlay / Tab

The session owns the request-generation counter and the debounce timer, so
staleness is decided per session. A response is applied only if it belongs
to the latest request and the text before the request cursor is unchanged.

``fetch_suggestion`` is any ``async (text, cursor) -> SuggestionResult | str``;
in production it is ``latexai.assistant.get_latex_suggestion`` or an HTTP
client for ``POST /api/latex-suggestion``.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, Optional, Union

from latexai.config import SUGGESTION_DEBOUNCE_MS
from latexai.post_processor import INCOMPLETE_MESSAGE, NO_CHANGES_MESSAGE, finalize_edit
from latexai.reconciler import (
    accept_response,
    accept_suggestion,
    is_current,
    reconcile,
    should_request,
    split_suggestion,
)
from latexai.state import EditSuggestion, PendingSuggestion, SuggestionResult

FetchSuggestion = Callable[[str, int], Awaitable[Union[SuggestionResult, str]]]
FetchEdit = Callable[[str, str, str, str], Awaitable[str]]

EDIT_ERROR_MESSAGE = "Error getting suggestion. Please try again."
_NOT_A_REPLACEMENT = {NO_CHANGES_MESSAGE, INCOMPLETE_MESSAGE, EDIT_ERROR_MESSAGE}


class DebounceTimer:
    """Runs ``callback`` once, ``delay`` seconds after the last ``schedule()``."""

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]):
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Cancel a not-yet-fired timer. A callback already running is left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def running(self) -> int:
        """Number of fired callbacks that have not finished yet."""
        return len(self._tasks)

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._callback())
        # The loop keeps only weak references to tasks.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> None:
        """Await every fired callback that is still running."""
        if self._tasks:
            await asyncio.gather(*self._tasks)


class EditingSession:
    def __init__(
        self,
        fetch_suggestion: FetchSuggestion,
        text: str = "",
        debounce_seconds: float = SUGGESTION_DEBOUNCE_MS / 1000,
    ):
        self.text = text
        self.cursor = len(text)
        self.pending: Optional[PendingSuggestion] = None
        self.edit = EditSuggestion()
        self.generation = 0
        self._fetch_suggestion = fetch_suggestion
        self.timer = DebounceTimer(debounce_seconds, self.fire)

    # ──────────────────────────────────────────
    # AUTOCOMPLETE
    # ──────────────────────────────────────────
    def on_text_change(self, new_text: str, cursor: int) -> None:
        """
        Record a keystroke. Always re-validates the current suggestion; only
        qualifying keystrokes (not spaces or deletions) restart the debounce.
        """
        previous = self.text
        self.text = new_text
        self.cursor = cursor
        self.pending = reconcile(self.pending, new_text, cursor)

        if should_request(previous, new_text, cursor):
            self.timer.schedule()

    async def fire(self) -> None:
        """Issue one suggestion request for the current text and caret."""
        self.generation += 1
        request_id = f"{self.generation}-{uuid.uuid4().hex[:8]}"
        text, cursor = self.text, self.cursor
        self.pending = PendingSuggestion(
            request_id=request_id,
            start_offset=cursor,
            current_offset=cursor,
            suggestion=None,
            text_at_request=text,
        )

        try:
            result = await self._fetch_suggestion(text, cursor)
        except Exception as e:
            print(f"[Session] ⚠️ Suggestion request {request_id} failed: {e}")
            return

        suggestion = result.suggestion if isinstance(result, SuggestionResult) else result
        self.receive(request_id, suggestion or "")

    def receive(self, request_id: str, suggestion: str) -> bool:
        """Apply a response; returns False if it was dropped as stale."""
        if not is_current(self.pending, request_id):
            print(f"[Session] 🗑️ Dropped stale response {request_id}")
            return False
        self.pending = accept_response(
            self.pending, request_id, suggestion, self.text, self.cursor
        )
        return self.pending is not None

    def overlay(self) -> Optional[tuple[str, str]]:
        """``(typed_part, remaining)`` for rendering the ghost text."""
        return split_suggestion(self.pending, self.text)

    def press_tab(self) -> bool:
        """Accept the visible suggestion. Returns True if text was inserted."""
        if self.pending is None or not self.pending.suggestion:
            return False
        accepted = accept_suggestion(self.pending, self.text)
        self.pending = None
        if accepted is None:
            return False
        self.text, self.cursor = accepted
        return True

    # ──────────────────────────────────────────
    # SELECTION REWRITE
    # ──────────────────────────────────────────
    async def request_edit(
        self,
        selection_start: int,
        selection_end: int,
        query: str,
        fetch_edit: FetchEdit,
    ) -> EditSuggestion:
        """Ask for a rewrite of ``text[selection_start:selection_end]``."""
        selected = self.text[selection_start:selection_end]
        if not selected or not query:
            return self.edit

        before = self.text[:selection_start]
        after = self.text[selection_end:]
        try:
            raw = await fetch_edit(selected, query, before, after)
            replacement = finalize_edit(raw, selected, before, after)
        except Exception as e:
            print(f"[Session] ⚠️ Edit request failed: {e}")
            replacement = EDIT_ERROR_MESSAGE

        self.edit = EditSuggestion(
            visible=True,
            replacement_text=replacement,
            selection_start=selection_start,
            selection_end=selection_end,
            original_text=selected,
        )
        return self.edit

    def accept_edit(self) -> bool:
        """Splice the rewrite into the document. Status messages are never inserted."""
        edit = self.edit
        if not edit.visible:
            return False
        edit.visible = False
        if edit.replacement_text in _NOT_A_REPLACEMENT:
            return False
        self.text = (
            self.text[: edit.selection_start]
            + edit.replacement_text
            + self.text[edit.selection_end :]
        )
        self.cursor = edit.selection_start + len(edit.replacement_text)
        self.pending = None
        return True

    def decline_edit(self) -> None:
        self.edit.visible = False
