"""
VRL Analyzer — heuristic diagnostics for Vector Remap Language scripts.

Checks performed on every ``validate_document`` call:
  • Delimiter balance over the whole document (parens, braces, brackets)
  • else / else-if placement relative to the preceding closing brace
  • Fallible function calls without error handling (``!``, ``??``, ``a, b =``)
  • Calls to functions missing from the registry, with "did you mean" hints
  • Best-practice advisories: ``del(.)``, abort form without fallback,
    unbounded wildcards in regex-matching calls

The analyzer is line-oriented and does not build a syntax tree.  Each check
is a plain function so a real tokenizer can replace the text scans without
changing the Diagnostic contract.  No state survives between calls except
the read-only function registry.
"""

import re
import logging
from typing import Callable, Iterable, List, Optional
from dataclasses import dataclass

from vrl_lint.delimiters import scan_delimiters
from vrl_lint.diagnostics import (
    Diagnostic, Range, RelatedInformation, Severity,
    MISSING_ERROR_HANDLING, UNKNOWN_FUNCTION, ELSE_SAME_LINE,
    DEL_ROOT_EVENT, SUGGEST_NULL_COALESCING, REGEX_PERFORMANCE,
)
from vrl_lint.function_registry import FunctionRegistry, default_registry
from vrl_lint.fuzzy import suggest_similar

logger = logging.getLogger(__name__)

# Words that may precede "(" without being function calls
KEYWORDS = frozenset({
    "if", "else", "and", "or", "not", "true", "false", "null", "abort", "return",
})

PATTERN_MATCH_FUNCTIONS = frozenset({"parse_regex", "parse_regex_all", "match"})
UNBOUNDED_WILDCARD = ".*"
DEL_ROOT_PATTERN = "del(.)"

_CALL_SITE = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)(!?)\s*\(")
_DESTRUCTURE = re.compile(r"\b[A-Za-z_]\w*\s*,\s*[A-Za-z_]\w*\s*=(?!=)")
_ELSE_LINE = re.compile(r"^else\b")


# ═══════════════════════════════════════════════════════════════════════
#  Call-site tokenizer
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class CallSite:
    """A ``name(`` or ``name!(`` occurrence on a single line."""
    name: str
    abort: bool             # written as name!(...)
    start: int              # column of the first character of the name
    end: int                # column just past the opening paren

    @property
    def name_end(self) -> int:
        return self.start + len(self.name)


def find_call_sites(line: str) -> List[CallSite]:
    return [
        CallSite(name=m.group(1), abort=bool(m.group(2)), start=m.start(1), end=m.end())
        for m in _CALL_SITE.finditer(line)
    ]


def _destructured_before(line: str, column: int) -> bool:
    return any(m.end() <= column for m in _DESTRUCTURE.finditer(line))


# ═══════════════════════════════════════════════════════════════════════
#  Line checks
# ═══════════════════════════════════════════════════════════════════════

def check_fallible_calls(line: str, line_no: int, registry: FunctionRegistry) -> List[Diagnostic]:
    """One Error per fallible call with no abort form, no ``??`` and no ``a, b =`` binding."""
    diagnostics: List[Diagnostic] = []
    has_fallback = "??" in line
    for site in find_call_sites(line):
        spec = registry.get(site.name)
        if spec is None or not spec.fallible:
            continue
        if site.abort or has_fallback or _destructured_before(line, site.start):
            continue

        name = site.name
        diagnostics.append(Diagnostic(
            range=Range.on_line(line_no, site.start, site.name_end),
            message=(
                f"Fallible function '{name}' requires error handling: "
                f"use '{name}!(...)' to abort on error, add a '?? <default>' fallback, "
                f"or capture the error with 'result, err = {name}(...)'"
            ),
            severity=Severity.ERROR,
            code=MISSING_ERROR_HANDLING,
            related_information=(RelatedInformation(
                range=Range.on_line(line_no, site.start, site.end),
                message=f"'{name}' can fail at runtime and its error is not handled here",
            ),),
        ))
    return diagnostics


def check_unknown_functions(line: str, line_no: int, registry: FunctionRegistry) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    for site in find_call_sites(line):
        if site.name in registry or site.name in KEYWORDS:
            continue
        suggestions = suggest_similar(site.name, registry.names)
        message = f"Unknown function '{site.name}'"
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        diagnostics.append(Diagnostic(
            range=Range.on_line(line_no, site.start, site.name_end),
            message=message,
            severity=Severity.ERROR,
            code=UNKNOWN_FUNCTION,
            suggestions=tuple(suggestions),
        ))
    return diagnostics


def check_del_root(line: str, line_no: int, registry: FunctionRegistry) -> List[Diagnostic]:
    idx = line.find(DEL_ROOT_PATTERN)
    if idx == -1:
        return []
    return [Diagnostic(
        range=Range.on_line(line_no, idx, idx + len(DEL_ROOT_PATTERN)),
        message="Deleting the entire event (del(.)) will result in an empty event",
        severity=Severity.WARNING,
        code=DEL_ROOT_EVENT,
    )]


def check_abort_without_fallback(line: str, line_no: int, registry: FunctionRegistry) -> List[Diagnostic]:
    if "??" in line:
        return []
    for site in find_call_sites(line):
        spec = registry.get(site.name)
        if site.abort and spec is not None and spec.fallible:
            return [Diagnostic(
                range=Range.on_line(line_no, site.start, site.name_end + 1),
                message="Consider using null coalescing (??) for more graceful error handling",
                severity=Severity.HINT,
                code=SUGGEST_NULL_COALESCING,
            )]
    return []


def check_regex_performance(line: str, line_no: int, registry: FunctionRegistry) -> List[Diagnostic]:
    if UNBOUNDED_WILDCARD not in line:
        return []
    if not any(site.name in PATTERN_MATCH_FUNCTIONS for site in find_call_sites(line)):
        return []
    return [Diagnostic(
        range=Range.on_line(line_no, 0, len(line)),
        message="Regex patterns with .* can be slow on large inputs",
        severity=Severity.INFORMATION,
        code=REGEX_PERFORMANCE,
    )]


# ═══════════════════════════════════════════════════════════════════════
#  Document checks
# ═══════════════════════════════════════════════════════════════════════

def check_else_placement(lines: List[str]) -> List[Diagnostic]:
    """Flag ``else`` / ``else if`` lines that directly follow a line ending in ``}``."""
    diagnostics: List[Diagnostic] = []
    for i in range(1, len(lines)):
        stripped = lines[i].strip()
        if not _ELSE_LINE.match(stripped):
            continue
        if not lines[i - 1].strip().endswith("}"):
            continue
        col = len(lines[i]) - len(lines[i].lstrip())
        diagnostics.append(Diagnostic(
            range=Range.on_line(i, col, col + len("else")),
            message=(
                "'else' or 'else if' must be on the same line as the closing brace; "
                "use '} else {'"
            ),
            severity=Severity.ERROR,
            code=ELSE_SAME_LINE,
        ))
    return diagnostics


LineCheck = Callable[[str, int, FunctionRegistry], List[Diagnostic]]

LINE_CHECKS: List[LineCheck] = [
    check_fallible_calls,
    check_unknown_functions,
    check_del_root,
    check_abort_without_fallback,
    check_regex_performance,
]


# ═══════════════════════════════════════════════════════════════════════
#  Analyzer
# ═══════════════════════════════════════════════════════════════════════

class VrlAnalyzer:
    """Runs every check against a document snapshot and returns its diagnostics."""

    def __init__(self, registry: Optional[FunctionRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    def validate_document(self, text: str, disabled_codes: Iterable[str] = ()) -> List[Diagnostic]:
        """
        Return all diagnostics for ``text`` in discovery order: delimiter
        scan, else placement, then per-line checks in line order.

        Blank lines and full-line ``#`` comments are skipped by the line
        checks but not by the delimiter scan.
        """
        text = text or ""
        lines = [ln[:-1] if ln.endswith("\r") else ln for ln in text.split("\n")]

        diagnostics: List[Diagnostic] = []
        diagnostics.extend(self._run_check(scan_delimiters, text))
        diagnostics.extend(self._run_check(check_else_placement, lines))

        for line_no, line in enumerate(lines):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            for check in LINE_CHECKS:
                diagnostics.extend(self._run_check(check, line, line_no, self.registry))

        disabled = set(disabled_codes)
        if disabled:
            diagnostics = [d for d in diagnostics if d.code not in disabled]

        logger.debug("Validated %d lines: %d diagnostics", len(lines), len(diagnostics))
        return diagnostics

    @staticmethod
    def _run_check(check: Callable, *args) -> List[Diagnostic]:
        """Run one check in isolation; a failure is logged and yields nothing."""
        try:
            return list(check(*args))
        except Exception as e:
            logger.warning("Check %s failed: %s", getattr(check, "__name__", check), e)
            return []


def validate_document(text: str, registry: Optional[FunctionRegistry] = None) -> List[Diagnostic]:
    """Convenience wrapper: analyze ``text`` against ``registry`` (default: built-ins)."""
    return VrlAnalyzer(registry).validate_document(text)
