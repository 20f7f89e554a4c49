"""
Completion provider for VRL scripts.

Offers registry functions (with snippet insert text), keywords, type names
and, after a ``.``, event field paths: a fixed set of common observability
fields plus every field already referenced in the document.
"""

import re
from typing import List, Optional
from dataclasses import dataclass

from vrl_lint.function_registry import (
    FunctionRegistry, FunctionSpec, default_registry, format_function_signature,
)

KEYWORDS = ["if", "else", "and", "or", "not", "true", "false", "null", "abort"]

TYPES = ["string", "int", "float", "bool", "array", "object", "timestamp", "null", "regex"]

COMMON_FIELDS = [
    "message", "timestamp", "level", "host", "source", "service",
    "kubernetes", "docker", "metadata", "labels", "tags",
    "user", "method", "path", "status", "duration", "error",
    "pod_name", "namespace", "container_name", "node_name",
]

_FIELD_REF = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class CompletionItem:
    label: str
    kind: str                       # "function" | "keyword" | "type" | "field"
    detail: str = ""
    documentation: str = ""
    insert_text: Optional[str] = None
    is_snippet: bool = False

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "kind": self.kind,
            "detail": self.detail,
            "documentation": self.documentation,
            "insertText": self.insert_text or self.label,
            "isSnippet": self.is_snippet,
        }


def function_snippet(spec: FunctionSpec) -> str:
    """Snippet with one tab stop per required parameter; fallible calls use the abort form."""
    placeholders = ", ".join(
        f"${{{i}:{p.name}}}" for i, p in enumerate(spec.required_parameters, start=1)
    )
    bang = "!" if spec.fallible else ""
    return f"{spec.name}{bang}({placeholders})"


def _line_prefix(text: str, line: int, character: int) -> str:
    lines = text.split("\n")
    if not 0 <= line < len(lines):
        return ""
    return lines[line][:max(0, character)]


def field_completions(text: str) -> List[CompletionItem]:
    items = [
        CompletionItem(label=f, kind="field", detail=f"Event field: {f}")
        for f in COMMON_FIELDS
    ]
    seen = set(COMMON_FIELDS)
    for m in _FIELD_REF.finditer(text):
        name = m.group(1)
        if name in seen:
            continue
        seen.add(name)
        items.append(CompletionItem(label=name, kind="field", detail=f"Referenced field: {name}"))
    return items


def provide_completions(
    text: str, line: int, character: int, registry: Optional[FunctionRegistry] = None
) -> List[CompletionItem]:
    registry = registry if registry is not None else default_registry()
    prefix = _line_prefix(text, line, character)

    # Field access: only paths make sense after a dot
    if prefix.endswith("."):
        return field_completions(text)

    items: List[CompletionItem] = []
    for spec in registry:
        items.append(CompletionItem(
            label=spec.name,
            kind="function",
            detail=format_function_signature(spec),
            documentation=spec.description,
            insert_text=function_snippet(spec),
            is_snippet=True,
        ))
    items.extend(CompletionItem(label=k, kind="keyword") for k in KEYWORDS)
    items.extend(CompletionItem(label=t, kind="type") for t in TYPES)
    return items
