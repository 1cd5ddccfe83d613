"""
Command denylist for rendered LaTeX.

Strips primitives that read or write files before a document reaches the
compiler. Only whole control words are removed, so \\input goes but
\\inputencoding and \\includegraphics stay.
"""

import re

DANGEROUS_COMMANDS = (
    "input",
    "include",
    "write",
    "immediate",
    "openout",
    "closeout",
    "read",
    "openin",
    "closein",
    "readline",
    "@input",
    "@@input",
    "InputIfFileExists",
)

DANGEROUS_COMMAND_PATTERN = re.compile(
    r"\\(?:" + "|".join(re.escape(command) for command in DANGEROUS_COMMANDS) + r")(?![a-zA-Z])",
    re.IGNORECASE,
)


def sanitize_latex(latex: str) -> str:
    r"""
    Remove denylisted commands from rendered LaTeX.

    Examples:
        >>> sanitize_latex(r"\input{/etc/passwd}")
        '{/etc/passwd}'
        >>> sanitize_latex(r"\usepackage[utf8]{inputenc}\includegraphics{a}")
        '\\usepackage[utf8]{inputenc}\\includegraphics{a}'
    """
    return DANGEROUS_COMMAND_PATTERN.sub("", latex)


def find_dangerous_commands(latex: str) -> list[str]:
    """Denylisted commands present in latex, in order of appearance."""
    return [match.group(0) for match in DANGEROUS_COMMAND_PATTERN.finditer(latex)]
