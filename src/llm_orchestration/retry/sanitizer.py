"""
Sanitation of string-list model output.

Models asked for "a JSON array of strings" still produce numbered lists,
bullets, quoted items, multi-line entries and section headers. The
sanitizer reduces such output to clean, independent entries.
"""

import json
import re
from typing import Any

import structlog

from llm_orchestration.retry.validators import ValidationError

logger = structlog.get_logger(__name__)

_BULLET_PREFIX = re.compile(r"^[-*•]\s*")
_NUMBER_PREFIX = re.compile(r"^[0-9]+[.)]\s*")
_WRAPPING_QUOTES = re.compile(r'^"|"$')
_HEADER_LINE = re.compile(
    r"^(\*\*.*\*\*|#+\s|Individual Suggestions:|Integration Suggestions:)",
    re.IGNORECASE,
)


def _is_header(line: str) -> bool:
    return bool(_HEADER_LINE.match(line))


def sanitize_instruction_suggestions(raw: Any) -> list[str]:
    """
    Normalize model output into a flat list of instruction strings.

    Steps:
    1. Parse string input as JSON when possible (non-arrays become one item)
    2. Split multi-line entries into separate lines; drop non-string items
    3. Drop header-like lines (bold text, markdown headings, section titles)
    4. Strip bullet and numbering prefixes and wrapping quotes
    5. Drop empty lines

    Examples:
        >>> sanitize_instruction_suggestions(["1. Do X", "- Do Y", '"Do Z"', "**Header**"])
        ['Do X', 'Do Y', 'Do Z']
    """
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            items: list[Any] = [raw]
        else:
            items = parsed if isinstance(parsed, list) else [parsed]
    elif isinstance(raw, list):
        items = raw
    elif raw is not None:
        items = [str(raw)]
    else:
        items = []

    lines = [
        line.strip()
        for item in items
        if isinstance(item, str)
        for line in item.splitlines()
    ]

    sanitized = []
    for line in lines:
        if _is_header(line):
            continue
        line = _BULLET_PREFIX.sub("", line, count=1)
        line = _NUMBER_PREFIX.sub("", line, count=1)
        line = _WRAPPING_QUOTES.sub("", line).strip()
        if line and not _is_header(line):
            sanitized.append(line)

    return sanitized


def sanitized_string_list(value: Any) -> list[str]:
    """
    Validator wrapper: sanitize, and reject output that leaves nothing usable.

    Raises:
        ValidationError: Sanitation produced zero items
    """
    sanitized = sanitize_instruction_suggestions(value)
    if not sanitized:
        logger.warning("Sanitization returned no valid items")
        raise ValidationError(
            "Sanitization failed or returned no valid instructions",
            details={"raw_items": len(value) if isinstance(value, list) else 1},
        )
    return sanitized
