"""
Hover documentation for VRL scripts: functions, keywords, operators and
event field paths.
"""

import re
from typing import Optional
from dataclasses import dataclass

from vrl_lint.diagnostics import Range
from vrl_lint.function_registry import (
    FunctionRegistry, default_registry, format_function_signature,
)

KEYWORD_DOCS = {
    "if": "Conditional statement for executing code blocks based on conditions.",
    "else": "Alternative branch for if statements. Must follow the closing `}` on the same line.",
    "and": "Logical AND operator.",
    "or": "Logical OR operator.",
    "not": "Logical NOT operator.",
    "true": "Boolean true literal.",
    "false": "Boolean false literal.",
    "null": "Null literal representing absence of value.",
    "abort": "Aborts processing and drops the event.",
}

OPERATOR_DOCS = {
    "!": "Error propagation operator: aborts on error from a fallible function",
    "??": "Null coalescing operator: provides a default value for null or error",
    "==": "Equality comparison operator",
    "!=": "Inequality comparison operator",
    "&&": "Logical AND operator",
    "||": "Logical OR operator",
}

_WORD_CHARS = re.compile(r"[A-Za-z0-9_]")
_OPERATOR_CHARS = set("!?=&|")
_FIELD_PATH = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)")


@dataclass
class Hover:
    contents: str               # markdown
    range: Range

    def to_dict(self) -> dict:
        return {"contents": {"kind": "markdown", "value": self.contents},
                "range": self.range.model_dump()}


def _span(line_text: str, character: int, accept) -> Optional[tuple]:
    """Expand around ``character`` while ``accept(ch)`` holds; return (start, end)."""
    if not 0 <= character <= len(line_text):
        return None
    start = character
    while start > 0 and accept(line_text[start - 1]):
        start -= 1
    end = character
    while end < len(line_text) and accept(line_text[end]):
        end += 1
    if start == end:
        return None
    return start, end


def provide_hover(
    text: str, line: int, character: int, registry: Optional[FunctionRegistry] = None
) -> Optional[Hover]:
    registry = registry if registry is not None else default_registry()
    lines = text.split("\n")
    if not 0 <= line < len(lines):
        return None
    line_text = lines[line]

    word_span = _span(line_text, character, lambda ch: bool(_WORD_CHARS.match(ch)))
    if word_span is not None:
        start, end = word_span
        word = line_text[start:end]
        word_range = Range.on_line(line, start, end)

        spec = registry.get(word)
        if spec is not None:
            md = f"```vrl\n{format_function_signature(spec)}\n```\n{spec.description}"
            if spec.fallible:
                md += "\n\n*Fallible: requires `!`, `??` or `result, err =` handling.*"
            if spec.example:
                md += f"\n\n**Example:**\n```vrl\n{spec.example}\n```"
            return Hover(contents=md, range=word_range)

        if word in KEYWORD_DOCS:
            return Hover(contents=f"**{word}** - {KEYWORD_DOCS[word]}", range=word_range)

        for m in _FIELD_PATH.finditer(line_text):
            if m.start(1) <= start and end <= m.end(1):
                return Hover(
                    contents=(
                        f"**Field Path:** `.{m.group(1)}`\n\n"
                        "Accesses a field in the event data structure."
                    ),
                    range=word_range,
                )
        return None

    op_span = _span(line_text, character, lambda ch: ch in _OPERATOR_CHARS)
    if op_span is not None:
        start, end = op_span
        op = line_text[start:end]
        if op in OPERATOR_DOCS:
            return Hover(
                contents=f"**Operator:** `{op}`\n\n{OPERATOR_DOCS[op]}",
                range=Range.on_line(line, start, end),
            )
    return None
