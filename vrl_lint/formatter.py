"""
Brace-depth indentation formatter for VRL scripts.

Only leading whitespace is rewritten.  A line starting with ``}`` is dedented
before it is written; a line ending with ``{`` indents the lines after it.
"""

import logging
from urllib.parse import quote
from typing import List

logger = logging.getLogger(__name__)


def format_vrl(text: str, indent_size: int = 2) -> str:
    lines = text.split("\n")
    out: List[str] = []
    level = 0

    for line in lines:
        stripped = line.strip()
        if not stripped:
            out.append("")
            continue

        if stripped.startswith("}"):
            level = max(0, level - 1)

        out.append(" " * (level * indent_size) + stripped)

        if stripped.endswith("{"):
            level += 1

    if level > 0:
        logger.debug("format_vrl: %d block(s) left open at end of document", level)
    return "\n".join(out)


def playground_url(text: str, base_url: str = "https://playground.vrl.dev/") -> str:
    """Link to the VRL playground, pre-filled with ``text`` when it is not blank."""
    if not text.strip():
        return base_url
    return f"{base_url}?script={quote(text, safe='')}"
