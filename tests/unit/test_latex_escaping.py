"""Unit tests for LaTeX escaping of user-derived text."""

import re

import pytest

from cvsmith.contexts.templating.latex_escaping import LATEX_SPECIAL_CHARS, escape_latex


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, escaped",
    [
        ("R&D", r"R\&D"),
        ("50%", r"50\%"),
        ("$1M", r"\$1M"),
        ("#1", r"\#1"),
        ("snake_case", r"snake\_case"),
        ("{x}", r"\{x\}"),
        ("~home", r"\textasciitilde{}home"),
        ("x^2", r"x\textasciicircum{}2"),
        ("C:\\path", r"C:\textbackslash{}path"),
    ],
)
def test_escape_each_special_character(raw, escaped):
    assert escape_latex(raw) == escaped


@pytest.mark.unit
def test_backslash_replacement_is_not_re_escaped():
    """Replacement braces from \\textbackslash{} must survive untouched."""
    assert escape_latex("\\{") == r"\textbackslash{}\{"


@pytest.mark.unit
def test_none_and_empty():
    assert escape_latex(None) == ""
    assert escape_latex("") == ""


@pytest.mark.unit
def test_plain_text_unchanged():
    text = "Delivered 500 packages across 12 planets (on time!)"
    assert escape_latex(text) == text


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "100% of $5 & #3 under_score {braces} ~tilde ^caret \\backslash",
        "\\input{/etc/passwd}",
        "&&&%%%$$$",
        "}{\\}{",
    ],
)
def test_escaped_text_has_no_bare_special_characters(raw):
    """After removing the escape sequences themselves, no special character remains."""
    escaped = escape_latex(raw)
    stripped = re.sub(r"\\textbackslash\{\}|\\textasciitilde\{\}|\\textasciicircum\{\}", "", escaped)
    stripped = re.sub(r"\\[&%$#_{}]", "", stripped)

    for char in LATEX_SPECIAL_CHARS:
        assert char not in stripped


@pytest.mark.unit
def test_escaped_command_cannot_execute():
    """A user-supplied control word becomes literal text."""
    assert escape_latex("\\input{x}") == r"\textbackslash{}input\{x\}"
