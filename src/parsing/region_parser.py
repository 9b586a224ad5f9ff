# src/parsing/region_parser.py — v1
"""Delimited-region extraction.

Stage 2 output is prose wrapped around the generated document; the prompt
asks the model to put the document between two literal markers.
"""

from __future__ import annotations

from vidlearn.core.errors import ParseError, ParseErrorKind


def extract_delimited(text: str, opener: str, closer: str) -> str:
    """Return the trimmed text between the first ``opener`` and the next ``closer``.

    Args:
        text: Raw model output.
        opener: Literal opening marker.
        closer: Literal closing marker.

    Returns:
        Substring strictly between the markers, whitespace-trimmed.

    Raises:
        ValueError: If either marker is empty.
        ParseError: DelimiterNotFound if a marker is absent, OrderViolation
            if the closer only occurs before the opener.
    """
    if not opener or not closer:
        raise ValueError("opener and closer must be non-empty strings")

    open_idx = text.find(opener)
    if open_idx == -1:
        raise ParseError(
            ParseErrorKind.DELIMITER_NOT_FOUND,
            f"Could not find opening marker {opener!r} in model response",
        )

    body_start = open_idx + len(opener)
    close_idx = text.find(closer, body_start)
    if close_idx == -1:
        if closer in text[:open_idx]:
            raise ParseError(
                ParseErrorKind.ORDER_VIOLATION,
                f"Closing marker {closer!r} appears before opening marker {opener!r}",
            )
        raise ParseError(
            ParseErrorKind.DELIMITER_NOT_FOUND,
            f"Could not find closing marker {closer!r} in model response",
        )

    return text[body_start:close_idx].strip()
