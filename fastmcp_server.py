"""
VRL Language Tools — MCP Server

Exposes tools to editor assistants via the Model Context Protocol:

  1.  load_config          — load a JSON config and rebuild the function registry
  2.  validate_document    — run all diagnostics on a script and store the result
  3.  validate_file        — validate a .vrl file from disk
  4.  get_diagnostics      — stored diagnostics for a document, as LSP JSON
  5.  schedule_validation  — debounced validation into the diagnostics store
  6.  explain_diagnostic   — explanation and examples for a diagnostic code
  7.  list_functions       — registry listing, grouped by category
  8.  explain_function     — full documentation for one function
  9.  complete             — completion items at a position
 10.  hover                — hover documentation at a position
 11.  format_document      — re-indent a script by brace depth
 12.  playground_link      — VRL playground URL pre-filled with a script
"""

from mcp.server.fastmcp import FastMCP
import json
import logging
import os
import sys

# Ensure vrl_lint is importable when run as a script
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from vrl_lint.config import LinterConfig, config_from_env, load_config as read_config
from vrl_lint.completion import provide_completions
from vrl_lint.diagnostics import explain_code, format_diagnostics_markdown
from vrl_lint.document_store import Debouncer, DiagnosticStore
from vrl_lint.formatter import format_vrl, playground_url
from vrl_lint.function_registry import (
    FunctionRegistry, default_registry, format_function_explanation,
    format_function_signature, load_functions_file,
)
from vrl_lint.fuzzy import suggest_similar
from vrl_lint.hover import provide_hover
from vrl_lint.vrl_analyzer import VrlAnalyzer

logger = logging.getLogger(__name__)

MAX_FILE_BYTES = 5_000_000  # safety cap for validate_file

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("VRL Language Tools")

config: LinterConfig = LinterConfig()
registry: FunctionRegistry = default_registry()
analyzer = VrlAnalyzer(registry)
store = DiagnosticStore()
debouncer = Debouncer(config.debounce_seconds)


def _configure(new_config: LinterConfig) -> str:
    """Install ``new_config``: rebuild registry, analyzer and debouncer."""
    global config, registry, analyzer, debouncer

    new_registry = default_registry()
    extra_count = 0
    if new_config.extra_functions_path:
        extra = load_functions_file(new_config.extra_functions_path)
        extra_count = len(extra)
        new_registry = new_registry.merged_with(extra)

    pending = debouncer.cancel_all()
    config = new_config
    registry = new_registry
    analyzer = VrlAnalyzer(registry)
    debouncer = Debouncer(config.debounce_seconds)

    # Pending validations run again under the new configuration
    for uri, fn in pending.items():
        logger.info("Rescheduling pending validation of %s", uri)
        debouncer.schedule(uri, fn)

    return (
        f"Registry: {len(registry)} functions ({len(registry.fallible_names)} fallible, "
        f"{extra_count} extra).\n"
        f"Disabled codes: {', '.join(config.disabled_codes) or 'none'}.\n"
        f"Debounce: {config.debounce_seconds}s."
    )


def _validate(text: str, uri: str):
    diagnostics = analyzer.validate_document(text, disabled_codes=config.disabled_codes)
    store.set(uri, diagnostics)
    logger.info("Validated %s: %d diagnostics", uri, len(diagnostics))
    return diagnostics


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1: Load Config
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def load_config(config_path: str) -> str:
    """
    Loads a JSON configuration file and rebuilds the function registry.

    Args:
        config_path: Path to the JSON config (disabled_codes, debounce_seconds,
                     extra_functions_path, playground_url, indent_size).
    """
    if not os.path.exists(config_path):
        return f"Error: Config file not found at {config_path}"
    try:
        summary = _configure(read_config(config_path))
        return f"Configuration loaded from {config_path}.\n{summary}"
    except Exception as e:
        return f"Error loading config: {e}"


# ═══════════════════════════════════════════════════════════════════════
#  Tool 2: Validate Document
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def validate_document(text: str, uri: str = "untitled:document") -> str:
    """
    Runs every VRL check on a script and returns the problems found.

    The result replaces any diagnostics previously stored for ``uri``.

    Args:
        text: Full text of the VRL script.
        uri:  Document identity used to key the stored diagnostics.
    """
    try:
        diagnostics = _validate(text, uri)
    except Exception as e:
        return f"Error validating document: {e}"
    return format_diagnostics_markdown(diagnostics, title=f"`{uri}`")


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3: Validate File
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def validate_file(file_path: str) -> str:
    """
    Reads a VRL file from disk and validates it.

    Args:
        file_path: Absolute path of the .vrl file.
    """
    if not os.path.isfile(file_path):
        return f"Error: File not found at {file_path}"
    try:
        with open(file_path, "rb") as f:
            raw = f.read(MAX_FILE_BYTES + 1)
    except OSError as e:
        logger.error("Error reading %s: %s", file_path, e)
        return f"Error: Cannot read {file_path}: {e}"

    if b"\x00" in raw[:8192]:
        logger.warning("Skipping binary file: %s", file_path)
        return f"Error: {file_path} looks like a binary file"
    if len(raw) > MAX_FILE_BYTES:
        return f"Error: {file_path} exceeds {MAX_FILE_BYTES} bytes"

    text = raw.decode("utf-8", errors="replace")
    return validate_document(text, uri=file_path)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 4: Get Diagnostics
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_diagnostics(uri: str) -> str:
    """
    Returns the diagnostics currently stored for a document as LSP JSON.

    Args:
        uri: Document identity passed to validate_document / schedule_validation.
    """
    return json.dumps([d.to_lsp() for d in store.get(uri)], indent=2)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 5: Schedule Validation (debounced)
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def schedule_validation(text: str, uri: str) -> str:
    """
    Schedules validation after the configured quiet period.  A newer call
    for the same ``uri`` replaces any pending one.

    Args:
        text: Full text of the VRL script.
        uri:  Document identity.
    """
    debouncer.schedule(uri, lambda: _validate(text, uri))
    return f"Validation of `{uri}` scheduled in {debouncer.delay}s."


# ═══════════════════════════════════════════════════════════════════════
#  Tool 6: Explain Diagnostic
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def explain_diagnostic(code: str) -> str:
    """
    Returns the explanation of a diagnostic code with compliant and
    non-compliant examples.

    Args:
        code: Diagnostic code (e.g. 'missing-error-handling').
    """
    return explain_code(code)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 7: List Functions
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_functions(category: str = "") -> str:
    """
    Lists registry functions grouped by category.  Fallible functions are
    shown with a trailing '!'.

    Args:
        category: Optional category filter (e.g. 'parse', 'string').
    """
    categories = registry.categories()
    if category:
        categories = [c for c in categories if c.value == category]
        if not categories:
            valid = ", ".join(c.value for c in registry.categories())
            return f"Unknown category `{category}`. Available: {valid}"

    result = f"# VRL Functions ({len(registry)} total)\n"
    for cat in categories:
        specs = registry.by_category(cat)
        result += f"\n## {cat.value} ({len(specs)})\n"
        for spec in specs:
            result += f"- `{format_function_signature(spec)}`: {spec.description}\n"
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Tool 8: Explain Function
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def explain_function(name: str) -> str:
    """
    Returns signature, description, fallibility and example for a function.

    Args:
        name: Function name (e.g. 'parse_json').
    """
    if name in registry:
        return format_function_explanation(name, registry)
    suggestions = suggest_similar(name, registry.names)
    msg = f"Unknown function: {name}"
    if suggestions:
        msg += f"\nDid you mean: {', '.join(suggestions)}?"
    return msg


# ═══════════════════════════════════════════════════════════════════════
#  Tools 9, 10: Completion and Hover
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def complete(text: str, line: int, character: int) -> str:
    """
    Returns completion items at a 0-based position as JSON.

    Args:
        text:      Full text of the VRL script.
        line:      0-based line of the cursor.
        character: 0-based column of the cursor.
    """
    items = provide_completions(text, line, character, registry)
    return json.dumps([item.to_dict() for item in items], indent=2)


@mcp.tool()
def hover(text: str, line: int, character: int) -> str:
    """
    Returns hover documentation (markdown) at a 0-based position.

    Args:
        text:      Full text of the VRL script.
        line:      0-based line of the cursor.
        character: 0-based column of the cursor.
    """
    result = provide_hover(text, line, character, registry)
    if result is None:
        return "No documentation at this position."
    return result.contents


# ═══════════════════════════════════════════════════════════════════════
#  Tools 11, 12: Format and Playground
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def format_document(text: str) -> str:
    """
    Re-indents a VRL script by brace depth.

    Args:
        text: Full text of the VRL script.
    """
    formatted = format_vrl(text, indent_size=config.indent_size)
    if formatted == text:
        return "Document is already formatted."
    return formatted


@mcp.tool()
def playground_link(text: str = "") -> str:
    """
    Returns a VRL playground URL pre-filled with the script.

    Args:
        text: Script to open in the playground (optional).
    """
    return playground_url(text, config.playground_url)


_configure(config_from_env())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    try:
        if hasattr(mcp, "_tool_manager") and hasattr(mcp._tool_manager, "_tools"):
            tools = mcp._tool_manager._tools.keys()
            print(f"DEBUG: VRL tools starting with {len(tools)} tools: {list(tools)}", file=sys.stderr)
        else:
            print("DEBUG: VRL tools starting (cannot inspect tools)", file=sys.stderr)
    except Exception as e:
        print(f"DEBUG: Error inspecting tools: {e}", file=sys.stderr)

    mcp.run()
