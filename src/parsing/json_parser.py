# src/parsing/json_parser.py — v1
"""Structured JSON extraction from raw model text.

Models asked for JSON still occasionally wrap the object in prose or
markdown fences, and the prose itself may contain stray braces. Every
``{`` is tried as the start of an object, left to right; the first one
that decodes wins, so an enclosing object is preferred over its members.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from vidlearn.core.errors import MissingFieldError, ParseError, ParseErrorKind

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> dict[str, Any]:
    """Locate and parse the outermost JSON object in ``text``.

    Args:
        text: Raw model output, possibly surrounded by prose or fences.

    Returns:
        The decoded object.

    Raises:
        ParseError: kind MalformedJSON if no object parses.
    """
    if not text or not text.strip():
        raise ParseError(ParseErrorKind.MALFORMED_JSON, "Malformed JSON response: empty text")

    start = text.find("{")
    if start == -1:
        raise ParseError(
            ParseErrorKind.MALFORMED_JSON,
            "Malformed JSON response: no JSON object found",
        )

    last_error: json.JSONDecodeError | None = None
    while start != -1:
        try:
            parsed, _end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            last_error = exc
            start = text.find("{", start + 1)
            continue
        return parsed

    logger.debug("No brace position decoded as a JSON object: %s", last_error)
    raise ParseError(ParseErrorKind.MALFORMED_JSON, f"Malformed JSON response: {last_error}")


def extract_field(text: str, field: str) -> str:
    """Extract the JSON object from ``text`` and return its string ``field``.

    Raises:
        ParseError: If no object can be parsed.
        MissingFieldError: If the field is absent or not a string.
    """
    obj = extract_json_object(text)
    value = obj.get(field)
    if not isinstance(value, str):
        raise MissingFieldError(field)
    return value
