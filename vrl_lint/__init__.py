"""Heuristic diagnostics, completion and hover for Vector Remap Language (VRL) scripts."""

from vrl_lint.vrl_analyzer import VrlAnalyzer, validate_document
from vrl_lint.function_registry import FunctionRegistry, default_registry

__all__ = ["VrlAnalyzer", "validate_document", "FunctionRegistry", "default_registry"]
