import asyncio

from latexai import assistant
from latexai.assistant import QUERY_FALLBACK, build_completion_messages


def test_empty_prefix_skips_model(fake_llm):
    result = asyncio.run(assistant.get_latex_suggestion("   ", 3))
    assert result.suggestion == ""
    assert fake_llm.calls == []


def test_suggestion_is_post_processed(fake_llm):
    fake_llm.reply = "x > 0."
    text = "Error occurs when "
    cursor = len("Error occurs when")
    result = asyncio.run(assistant.get_latex_suggestion(text, cursor))
    assert result.suggestion == " $x > 0.$"
    assert result.text_at_request == text
    assert result.cursor_at_request == cursor
    assert len(fake_llm.calls) == 1


def test_math_prompt_selected_inside_math():
    messages = build_completion_messages(r"We have $\frac{a", 16)
    system = messages[0]["content"]
    assert "LaTeX math assistant" in system
    assert "inline" in system
    assert "Current number of unclosed braces: 1" in system
    assert messages[1]["content"].endswith(r"\frac{a")


def test_text_prompt_selected_outside_math():
    messages = build_completion_messages("The result is", 13)
    system = messages[0]["content"]
    assert "LaTeX math assistant" not in system
    assert "Space needed: true" in system


def test_model_error_degrades_to_empty_suggestion(fake_llm):
    fake_llm.error = RuntimeError("429 rate limit")
    result = asyncio.run(assistant.get_latex_suggestion("Some text", 9))
    assert result.suggestion == ""


def test_edit_returns_model_text(fake_llm):
    fake_llm.reply = "  A clearer sentence.  "
    out = asyncio.run(assistant.get_edit_suggestion("old", "clarify", "before ", " after"))
    assert out == "A clearer sentence."
    user = fake_llm.calls[0]["messages"][1]["content"]
    assert "before <selection>old</selection> after" in user
    assert "The user wants to: clarify" in user


def test_edit_error_returns_original(fake_llm):
    fake_llm.error = RuntimeError("boom")
    assert asyncio.run(assistant.get_edit_suggestion("old", "q")) == "old"


def test_edit_empty_reply_returns_original(fake_llm):
    fake_llm.reply = ""
    assert asyncio.run(assistant.get_edit_suggestion("old", "q")) == "old"


def test_query_answer_and_fallback(fake_llm):
    fake_llm.reply = "It defines a theorem."
    assert asyncio.run(assistant.answer_query("what?", "doc")) == "It defines a theorem."

    fake_llm.error = RuntimeError("down")
    assert asyncio.run(assistant.answer_query("what?", "doc")) == QUERY_FALLBACK


def test_stream_query_yields_fallback_on_error(fake_llm):
    fake_llm.error = RuntimeError("down")

    async def collect():
        return [delta async for delta in assistant.stream_query("q", "doc")]

    assert asyncio.run(collect()) == [QUERY_FALLBACK]
