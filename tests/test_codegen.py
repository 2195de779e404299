import logging

import pytest
from hypothesis import given, strategies as st

from litgen.codegen import TextBuilder
from litgen.errors import NegativeIndent


def test_nl_fixes_prefix_of_next_line() -> None:
    b: TextBuilder = TextBuilder()
    b.write("<ul>")
    b.indent()
    b.nl()
    b.write("<li>b</li>")
    b.unindent()
    b.nl()
    b.write("</ul>")
    assert b.finish() == "<ul>\n    <li>b</li>\n</ul>\n"


def test_unindent_at_zero_faults() -> None:
    b: TextBuilder = TextBuilder()
    b.indent()
    b.unindent()
    with pytest.raises(NegativeIndent):
        b.unindent()


def test_blank_lines_carry_no_prefix() -> None:
    b: TextBuilder = TextBuilder()
    b.indent()
    b.nl()
    b.nl()
    b.write("x")
    b.unindent()
    assert b.finish() == "\n\n    x\n"


def test_finish_single_terminating_newline() -> None:
    b: TextBuilder = TextBuilder()
    b.write_text("a\nb\n")
    assert b.finish() == "a\nb\n"
    assert TextBuilder().finish() == ""


def test_indent_width_is_configurable() -> None:
    b: TextBuilder = TextBuilder(indent_width=2)
    b.indent()
    b.nl()
    b.write("x")
    assert b.current_line == "  x"


def test_trailing_indent_is_legal_but_logged(caplog: pytest.LogCaptureFixture) -> None:
    b: TextBuilder = TextBuilder()
    b.indent()
    b.write("x")
    with caplog.at_level(logging.WARNING, logger="litgen.codegen"):
        assert b.finish() == "x\n"
    assert "open indent" in caplog.text


def test_getvalue_does_not_flush() -> None:
    b: TextBuilder = TextBuilder()
    b.write_text("a\nb")
    assert b.getvalue() == "a\nb"
    assert b.lines == ["a"]


@given(st.text(alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="\r")))
def test_write_text_preserves_text_at_level_zero(text: str) -> None:
    b: TextBuilder = TextBuilder()
    b.write_text(text)
    assert b.getvalue() == text
