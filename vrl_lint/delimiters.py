"""
Delimiter balance scanner.

A single pass over the whole document tracks paren / brace / bracket depth.
A closer that drives its counter negative is reported immediately at its
exact position and the counter is reset to zero, so one stray closer does not
hide later problems.  Openers still unresolved at the end are reported once
per delimiter kind on the last line of the document.

Limitation: comments and string literals are scanned verbatim, so delimiter
characters inside them are counted.
"""

from typing import Dict, List

from vrl_lint.diagnostics import Diagnostic, Range, Severity

# closer -> (kind, opener, singular, plural)
_CLOSERS = {
    ")": ("paren", "(", "parenthesis", "parentheses"),
    "}": ("brace", "{", "brace", "braces"),
    "]": ("bracket", "[", "bracket", "brackets"),
}
_OPENERS = {info[1]: info[0] for info in _CLOSERS.values()}
_NAMES = {info[0]: (closer, info[2], info[3]) for closer, info in _CLOSERS.items()}


def scan_delimiters(text: str) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    depth: Dict[str, int] = {"paren": 0, "brace": 0, "bracket": 0}

    line = 0
    col = 0
    for ch in text:
        if ch == "\n":
            line += 1
            col = 0
            continue

        kind = _OPENERS.get(ch)
        if kind is not None:
            depth[kind] += 1
        elif ch in _CLOSERS:
            kind, opener, _singular, _plural = _CLOSERS[ch]
            depth[kind] -= 1
            if depth[kind] < 0:
                diagnostics.append(Diagnostic(
                    range=Range.on_line(line, col, col + 1),
                    message=f"Unexpected closing '{ch}': no matching opening '{opener}'",
                    severity=Severity.ERROR,
                    code=f"unmatched-closing-{kind}",
                ))
                depth[kind] = 0
        col += 1

    lines = text.split("\n")
    last_line = len(lines) - 1
    last_len = len(lines[-1])
    for kind in ("paren", "brace", "bracket"):
        missing = depth[kind]
        if missing <= 0:
            continue
        closer, singular, plural = _NAMES[kind]
        noun = singular if missing == 1 else plural
        diagnostics.append(Diagnostic(
            range=Range.on_line(last_line, 0, last_len),
            message=f"Missing {missing} closing {noun} '{closer}'",
            severity=Severity.ERROR,
            code=f"missing-closing-{kind}",
        ))
    return diagnostics
