"""Pytest configuration for tests."""
from __future__ import annotations

from types import SimpleNamespace

import pytest


def make_response(content):
    """Shape of a litellm chat completion with one choice."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.fixture
def fake_llm(monkeypatch):
    """
    Replace ``litellm.acompletion`` with a recorder.

    Set ``fake_llm.reply`` to the text to return, or ``fake_llm.error`` to an
    exception to raise. Calls are recorded in ``fake_llm.calls``.
    """
    import litellm

    state = SimpleNamespace(reply="", error=None, calls=[])

    async def _acompletion(**kwargs):
        state.calls.append(kwargs)
        if state.error is not None:
            raise state.error
        return make_response(state.reply)

    monkeypatch.setattr(litellm, "acompletion", _acompletion)
    return state
