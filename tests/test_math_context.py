import pytest

from latexai.math_context import classify, count_open_braces


def test_inline_math_at_end():
    ctx = classify("a $x", 4)
    assert ctx.in_math_mode is True
    assert ctx.is_inline is True
    assert ctx.math_fragment == "x"
    assert ctx.math_fragment_start == 2
    assert ctx.dollar_count == 1


def test_display_math_inside_first_double_dollar():
    text = "a $$x$$ b"
    ctx = classify(text, 5)  # right after "x"
    assert ctx.in_math_mode is True
    assert ctx.dollar_count == 2
    assert ctx.is_inline is False
    assert ctx.math_fragment == "x"
    assert ctx.math_fragment_start == 2


def test_cursor_right_after_opening_double_dollar():
    ctx = classify("see $$", 6)
    assert ctx.in_math_mode is True
    assert ctx.is_inline is False
    assert ctx.math_fragment == ""


@pytest.mark.parametrize(
    "text",
    [
        "plain text only",
        "$a$ then text",
        "$a$ and $b$ done",
        "$$x^2$$ after",
        "",
    ],
)
def test_even_dollars_before_cursor_is_plain_text(text):
    ctx = classify(text, len(text))
    assert ctx.in_math_mode is False
    assert ctx.is_inline is False
    assert ctx.math_fragment == ""
    assert ctx.math_fragment_start == -1


def test_after_closed_display_math_is_plain_text():
    text = "a $$x$$ b"
    assert classify(text, len(text)).in_math_mode is False


def test_fragment_spans_from_delimiter_to_cursor():
    text = r"Let $\frac{a}{b} + c = d$ hold"
    cursor = text.index("=")
    ctx = classify(text, cursor)
    assert ctx.in_math_mode is True
    assert ctx.math_fragment == r"\frac{a}{b} + c "


def test_cursor_is_clamped():
    assert classify("a $x", 99).math_fragment == "x"
    assert classify("a $x", -5).in_math_mode is False


def test_escaped_dollar_is_treated_as_delimiter():
    # Known boundary: ``\$`` is not special-cased, so a price opens "math".
    ctx = classify(r"costs \$5 today", 15)
    assert ctx.in_math_mode is True
    assert ctx.math_fragment == "5 today"


def test_inner_dollar_in_display_math_exits_early():
    # Known boundary: the scan stops at the second delimiter it meets, so an
    # inner ``$`` inside an open ``$$`` region reads as closed math.
    text = "$$a $b"
    assert classify(text, len(text)).in_math_mode is False


def test_count_open_braces():
    assert count_open_braces(r"\frac{a}{b") == 1
    assert count_open_braces(r"\sqrt{x}") == 0
    assert count_open_braces("") == 0
