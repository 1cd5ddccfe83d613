"""
LaTeX escaping for user-derived text.

Templates are trusted and never escaped; every value that originates from a
user (profile fields, AI-rewritten text) passes through escape_latex() before
it reaches the document.
"""

import re

# Mapping applied in a single pass, so replacement text is never re-escaped
LATEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}

LATEX_SPECIAL_PATTERN = re.compile("|".join(re.escape(char) for char in LATEX_SPECIAL_CHARS))


def escape_latex(text) -> str:
    r"""
    Escape LaTeX special characters in user-derived text.

    None and empty values become ''. Non-string values are converted with str().

    Examples:
        >>> escape_latex("R&D: 50% of $1M")
        'R\\&D: 50\\% of \\$1M'
        >>> escape_latex("C:\\path_{x}")
        'C:\\textbackslash{}path\\_\\{x\\}'
    """
    if text is None:
        return ""
    return LATEX_SPECIAL_PATTERN.sub(lambda m: LATEX_SPECIAL_CHARS[m.group(0)], str(text))
