"""
LatexAI — Model Calls
=====================
One async function per editor feature, all routed through litellm so the
vendor is only a ``DEFAULT_MODEL`` string (``groq/...``, ``openai/...``,
``ollama/...``).

    get_latex_suggestion  → inline autocomplete (math-aware)
    get_edit_suggestion   → rewrite of a selected span
    answer_query          → document Q&A
    stream_query          → document Q&A, streamed token by token

Failures never propagate: each call logs the error and degrades to a fixed
fallback value. There are no retries.
"""

from __future__ import annotations

from typing import AsyncIterator

import litellm

from latexai import config
from latexai.math_context import classify, count_open_braces
from latexai.post_processor import needs_leading_space, postprocess_completion
from latexai.prompts import render_prompt
from latexai.state import SuggestionResult

QUERY_FALLBACK = "Failed to get response"


def _messages(system: str, user: str) -> list[dict]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def _extract_content(response) -> str:
    """Return the first choice's text, or ``""`` for an empty/odd response."""
    if not response or not hasattr(response, "choices") or not response.choices:
        return ""
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, KeyError) as e:
        print(f"[Assistant] ⚠️ Failed to extract content from response: {e}")
        return ""
    return (content or "").strip()


async def _complete(messages: list[dict], max_tokens: int, **kwargs):
    return await litellm.acompletion(
        model=config.get_model(),
        messages=messages,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=max_tokens,
        timeout=config.LLM_TIMEOUT,
        api_key=config.get_api_key(),
        **kwargs,
    )


def _log_failure(tag: str, error: Exception) -> None:
    error_msg = str(error)
    print(f"[{tag}] ❌ LLM call failed: {error_msg}")
    if "401" in error_msg or "authentication" in error_msg.lower():
        print(f"[{tag}] 💡 Authentication error - check your API key")
    elif "429" in error_msg or "rate limit" in error_msg.lower():
        print(f"[{tag}] 💡 Rate limit hit - the request was dropped")


# ──────────────────────────────────────────────
# 1. AUTOCOMPLETE
# ──────────────────────────────────────────────
def build_completion_messages(text: str, cursor: int) -> list[dict]:
    """Pick the math or text prompt for ``cursor`` and fill it in."""
    before = text[max(0, cursor - config.SUGGESTION_CONTEXT_BEFORE) : cursor]
    after = text[cursor : cursor + config.SUGGESTION_CONTEXT_AFTER]
    last_char = before[-1:]
    context = classify(text, cursor)

    if context.in_math_mode:
        system = render_prompt(
            "completion_math",
            math_kind="inline" if context.is_inline else "display",
            delimiter="single $" if context.is_inline else "double $$",
            open_braces=count_open_braces(context.math_fragment),
            math_fragment=context.math_fragment,
        )
        user = render_prompt("completion_user_math", math_fragment=context.math_fragment)
    else:
        system = render_prompt(
            "completion_text",
            last_char=last_char,
            needs_space=str(needs_leading_space(last_char)).lower(),
        )
        user = render_prompt("completion_user_text", text_before=before, text_after=after)

    return _messages(system, user)


async def get_latex_suggestion(text: str, cursor: int) -> SuggestionResult:
    """
    Ask the model for an inline completion at ``cursor``.

    The result echoes the request text and cursor so the caller can
    reconcile it against what was typed in the meantime.
    """
    cursor = max(0, min(cursor, len(text)))
    result = SuggestionResult(suggestion="", text_at_request=text, cursor_at_request=cursor)

    before = text[max(0, cursor - config.SUGGESTION_CONTEXT_BEFORE) : cursor]
    if not before.strip():
        return result

    try:
        response = await _complete(
            build_completion_messages(text, cursor),
            max_tokens=config.SUGGESTION_MAX_TOKENS,
        )
    except Exception as e:
        _log_failure("Suggest", e)
        return result

    raw = _extract_content(response)
    after = text[cursor : cursor + config.SUGGESTION_CONTEXT_AFTER]
    suggestion = postprocess_completion(raw, before, after, classify(text, cursor))
    if raw and not suggestion:
        print(f"[Suggest] 🧹 Suppressed suggestion '{raw[:40]}'")

    return SuggestionResult(
        suggestion=suggestion, text_at_request=text, cursor_at_request=cursor
    )


# ──────────────────────────────────────────────
# 2. SELECTION REWRITE
# ──────────────────────────────────────────────
async def get_edit_suggestion(
    selected_text: str,
    query: str,
    context_before: str = "",
    context_after: str = "",
) -> str:
    """Rewrite ``selected_text`` per ``query``; the original text on failure."""
    messages = _messages(
        render_prompt("edit_system"),
        render_prompt(
            "edit_user",
            context_before=context_before,
            selected_text=selected_text,
            context_after=context_after,
            query=query,
        ),
    )
    try:
        response = await _complete(messages, max_tokens=config.EDIT_MAX_TOKENS)
    except Exception as e:
        _log_failure("Edit", e)
        return selected_text

    return _extract_content(response) or selected_text


# ──────────────────────────────────────────────
# 3. DOCUMENT Q&A
# ──────────────────────────────────────────────
def _query_messages(query: str, content: str) -> list[dict]:
    return _messages(
        render_prompt("query_system"),
        render_prompt("query_user", content=content, query=query),
    )


async def answer_query(query: str, content: str) -> str:
    try:
        response = await _complete(
            _query_messages(query, content), max_tokens=config.QUERY_MAX_TOKENS
        )
    except Exception as e:
        _log_failure("Query", e)
        return QUERY_FALLBACK

    return _extract_content(response) or QUERY_FALLBACK


async def stream_query(query: str, content: str) -> AsyncIterator[str]:
    """
    Yield the answer as text deltas.

    A failure before the first delta yields the fixed fallback answer; a
    failure mid-stream ends the stream with what was already sent.
    """
    sent_any = False
    try:
        stream = await _complete(
            _query_messages(query, content),
            max_tokens=config.QUERY_MAX_TOKENS,
            stream=True,
        )
        async for chunk in stream:
            try:
                delta = chunk.choices[0].delta.content
            except (AttributeError, IndexError, KeyError):
                delta = None
            if delta:
                sent_any = True
                yield delta
    except Exception as e:
        _log_failure("Query", e)
        if not sent_any:
            yield QUERY_FALLBACK
        return

    if not sent_any:
        yield QUERY_FALLBACK
