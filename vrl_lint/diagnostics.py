"""
Diagnostic value objects and the diagnostic-code catalog.

Every check in the analyzer produces ``Diagnostic`` instances.  They are
immutable once created; positions are 0-based (line, character) pairs so a
caller can hand them to an editor without re-deriving offsets.

The catalog below documents each code the analyzer can emit: severity,
title, rationale, and non-compliant / compliant VRL examples.
"""

from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Severity(IntEnum):
    """LSP DiagnosticSeverity values."""
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start_char: int, end_char: int) -> "Range":
        return cls(
            start=Position(line=line, character=start_char),
            end=Position(line=line, character=end_char),
        )


class RelatedInformation(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: Range
    message: str


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: Range
    message: str
    severity: Severity
    code: str
    source: str = "vrl"
    related_information: Tuple[RelatedInformation, ...] = ()
    suggestions: Tuple[str, ...] = ()

    @property
    def line(self) -> int:
        return self.range.start.line

    def to_lsp(self) -> Dict:
        """Return the LSP ``Diagnostic`` JSON shape."""
        out = {
            "range": self.range.model_dump(),
            "message": self.message,
            "severity": int(self.severity),
            "code": self.code,
            "source": self.source,
        }
        if self.related_information:
            out["relatedInformation"] = [
                {"location": {"range": r.range.model_dump()}, "message": r.message}
                for r in self.related_information
            ]
        if self.suggestions:
            out["data"] = {"suggestions": list(self.suggestions)}
        return out

    def to_markdown_row(self) -> str:
        start = self.range.start
        msg = self.message.replace("|", "\\|")
        return (
            f"| {start.line + 1}:{start.character + 1} | {self.severity.label} "
            f"| `{self.code}` | {msg} |"
        )


# ═══════════════════════════════════════════════════════════════════════
#  Codes
# ═══════════════════════════════════════════════════════════════════════

UNMATCHED_CLOSING_PAREN = "unmatched-closing-paren"
UNMATCHED_CLOSING_BRACE = "unmatched-closing-brace"
UNMATCHED_CLOSING_BRACKET = "unmatched-closing-bracket"
MISSING_CLOSING_PAREN = "missing-closing-paren"
MISSING_CLOSING_BRACE = "missing-closing-brace"
MISSING_CLOSING_BRACKET = "missing-closing-bracket"
MISSING_ERROR_HANDLING = "missing-error-handling"
UNKNOWN_FUNCTION = "unknown-function"
ELSE_SAME_LINE = "vrl-else-same-line"
DEL_ROOT_EVENT = "del-root-event"
SUGGEST_NULL_COALESCING = "suggest-null-coalescing"
REGEX_PERFORMANCE = "regex-performance"


class CodeInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    severity: Severity
    title: str
    rationale: str
    non_compliant: str
    compliant: str


_CODES: Dict[str, CodeInfo] = {}

def _add(info: CodeInfo):
    _CODES[info.code] = info


# (kind, opener, closer, balanced example, unclosed example)
_DELIMITER_EXAMPLES = (
    ("paren", "(", ")", ".x = upcase(.y)", ".x = upcase(.y"),
    ("brace", "{", "}", "if .a == 1 {\n  .b = 2\n}", "if .a == 1 {\n  .b = 2"),
    ("bracket", "[", "]", ".x = [1, 2]", ".x = [1, 2"),
)

for _kind, _open, _close, _balanced, _unclosed in _DELIMITER_EXAMPLES:
    _add(CodeInfo(
        code=f"unmatched-closing-{_kind}",
        severity=Severity.ERROR,
        title=f"Unexpected closing '{_close}'",
        rationale=(
            f"A '{_close}' appears before any matching '{_open}' in the document.  "
            "The whole document is scanned, so constructs spanning several lines "
            "are balanced correctly."
        ),
        non_compliant=f"{_balanced}{_close}",
        compliant=_balanced,
    ))
    _add(CodeInfo(
        code=f"missing-closing-{_kind}",
        severity=Severity.ERROR,
        title=f"Missing closing '{_close}'",
        rationale=(
            f"At least one '{_open}' is never closed before the end of the document.  "
            "The diagnostic is reported on the last line with the number of missing closers."
        ),
        non_compliant=_unclosed,
        compliant=_balanced,
    ))

_add(CodeInfo(
    code=MISSING_ERROR_HANDLING,
    severity=Severity.ERROR,
    title="Fallible function called without error handling",
    rationale=(
        "Fallible functions (parsers, coercions, decoders) can fail at runtime.  "
        "VRL refuses to compile a program that ignores such an error, so the call "
        "must abort on failure, supply a fallback, or capture the error explicitly."
    ),
    non_compliant=".result = parse_json(.message)",
    compliant=(
        ".result = parse_json!(.message)\n"
        ".result = parse_json(.message) ?? {}\n"
        "result, err = parse_json(.message)"
    ),
))
_add(CodeInfo(
    code=UNKNOWN_FUNCTION,
    severity=Severity.ERROR,
    title="Unknown function",
    rationale=(
        "The called name is not part of the VRL standard library.  Close matches "
        "from the function registry are offered as suggestions."
    ),
    non_compliant=".data = pars_json!(.message)",
    compliant=".data = parse_json!(.message)",
))
_add(CodeInfo(
    code=ELSE_SAME_LINE,
    severity=Severity.ERROR,
    title="else must follow the closing brace on the same line",
    rationale=(
        "VRL's grammar requires `else` and `else if` to appear on the same line "
        "as the `}` that closes the preceding block."
    ),
    non_compliant='if .a == 1 {\n  .b = 2\n}\nelse {\n  .b = 3\n}',
    compliant='if .a == 1 {\n  .b = 2\n} else {\n  .b = 3\n}',
))
_add(CodeInfo(
    code=DEL_ROOT_EVENT,
    severity=Severity.WARNING,
    title="Deleting the entire event",
    rationale="`del(.)` removes every field and leaves an empty event.",
    non_compliant="del(.)",
    compliant="del(.password)",
))
_add(CodeInfo(
    code=SUGGEST_NULL_COALESCING,
    severity=Severity.HINT,
    title="Consider a fallback instead of aborting",
    rationale=(
        "The abort form drops the event on failure.  A `??` fallback keeps the "
        "event flowing with a default value."
    ),
    non_compliant=".n = to_int!(.count)",
    compliant=".n = to_int(.count) ?? 0",
))
_add(CodeInfo(
    code=REGEX_PERFORMANCE,
    severity=Severity.INFORMATION,
    title="Unbounded wildcard in regex",
    rationale="Patterns containing `.*` can backtrack heavily on large inputs.",
    non_compliant=". = parse_regex!(.message, r'^(?P<head>.*) end')",
    compliant=". = parse_regex!(.message, r'^(?P<head>[^ ]+) end')",
))


# ═══════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════

def get_code_info(code: str) -> Optional[CodeInfo]:
    return _CODES.get(code)


def get_all_codes() -> Dict[str, CodeInfo]:
    return dict(_CODES)


def explain_code(code: str) -> str:
    """Return a human-readable explanation of a diagnostic code."""
    info = get_code_info(code)
    if info is None:
        return f"Unknown diagnostic code: {code}"

    return f"""## {info.code} — {info.title}
**Severity**: {info.severity.label}

### Rationale
{info.rationale}

### Non-Compliant Example
```vrl
{info.non_compliant}
```

### Compliant Example
```vrl
{info.compliant}
```"""


def summarize(diagnostics: List[Diagnostic]) -> Dict[str, Dict[str, int]]:
    """Count diagnostics by severity label and by code."""
    by_severity: Dict[str, int] = {}
    by_code: Dict[str, int] = {}
    for d in diagnostics:
        by_severity[d.severity.label] = by_severity.get(d.severity.label, 0) + 1
        by_code[d.code] = by_code.get(d.code, 0) + 1
    return {"by_severity": by_severity, "by_code": by_code}


def format_diagnostics_markdown(diagnostics: List[Diagnostic], title: str = "document") -> str:
    if not diagnostics:
        return f"No problems found in {title}."

    counts = summarize(diagnostics)["by_severity"]
    parts = [f"{n} {label.lower()}" for label, n in counts.items()]
    md = f"**{len(diagnostics)} problem(s) in {title}** ({', '.join(parts)}):\n\n"
    md += "| Position | Severity | Code | Message |\n"
    md += "|----------|----------|------|---------|\n"
    md += "\n".join(d.to_markdown_row() for d in diagnostics)
    return md + "\n"
