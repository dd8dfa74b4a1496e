"""
Parsing of structured model replies.

Models sometimes wrap the JSON payload in prose or markdown fences
("Here is the result: ```json ... ```"). Everything before the first
opening bracket and after the last closing bracket is dropped before
parsing; a reply with no brackets at all (scalar root) is parsed as is.
A reply that still does not parse is a hard failure.
"""

import json
import re
from typing import Any

import structlog

from llm_orchestration.llm.exceptions import LLMParseError


logger = structlog.get_logger(__name__)

_LEADING_PROSE = re.compile(r"^[^\[{]*")
_TRAILING_PROSE = re.compile(r"[^}\]]*$")


def strip_surrounding_prose(content: str) -> str:
    """
    Trim any text around the outermost JSON object or array.

    Examples:
        >>> strip_surrounding_prose('Sure! {"a": 1} Hope this helps.')
        '{"a": 1}'
        >>> strip_surrounding_prose('```json\\n["x"]\\n```')
        '["x"]'
    """
    content = _LEADING_PROSE.sub("", content, count=1)
    return _TRAILING_PROSE.sub("", content, count=1)


def parse_json_response(content: str | None) -> Any:
    """
    Parse a structured reply into a Python value.

    Args:
        content: Raw reply text from the vendor

    Returns:
        The decoded JSON value (dict, list, ...)

    Raises:
        LLMParseError: If the reply is empty or not valid JSON after
            prose stripping
    """
    if not content or not content.strip():
        raise LLMParseError(
            "Model reply is empty or whitespace-only",
            raw_content=content,
            parse_error="Empty content",
        )

    # Bare scalar replies ("text", 42, true) have no brackets to anchor on
    payload = strip_surrounding_prose(content) or content.strip()

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error("JSON parsing error", error=e.msg, line=e.lineno, column=e.colno)
        raise LLMParseError(
            f"Failed to parse JSON response: {e.msg}",
            raw_content=content,
            parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
        ) from e

    logger.debug("Parsed structured reply", value_type=type(parsed).__name__)
    return parsed
