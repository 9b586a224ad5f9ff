# src/core/errors.py — v1
"""Error taxonomy shared by the generation client, parsers and orchestrator.

Every error's message is what the orchestrator surfaces as ErrorDetail,
so messages are written for the end user.
"""

from __future__ import annotations

from enum import Enum


class VidlearnError(Exception):
    """Base class for all vidlearn errors."""


# === GENERATION CLIENT ===


class ClientErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing-credential"
    BLOCKED_PROMPT = "blocked-prompt"
    NO_CANDIDATES = "no-candidates"
    ABNORMAL_STOP = "abnormal-stop"


class GenerationClientError(VidlearnError):
    """Classified failure of a generation call."""

    def __init__(self, kind: ClientErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


class MissingCredentialError(GenerationClientError):
    def __init__(self, variable: str = "GOOGLE_API_KEY"):
        super().__init__(
            ClientErrorKind.MISSING_CREDENTIAL,
            f"API key is missing or empty. Make sure to set the {variable} "
            "environment variable.",
        )


class PromptBlockedError(GenerationClientError):
    """Upstream content policy rejected the prompt itself."""

    def __init__(self, block_reason: str):
        self.block_reason = block_reason
        super().__init__(
            ClientErrorKind.BLOCKED_PROMPT,
            f"Content generation failed: Prompt blocked (reason: {block_reason})",
        )


class NoCandidatesError(GenerationClientError):
    def __init__(self) -> None:
        super().__init__(
            ClientErrorKind.NO_CANDIDATES,
            "Content generation failed: No candidates returned.",
        )


class AbnormalStopError(GenerationClientError):
    """Generation stopped for a reason other than normal completion."""

    def __init__(self, finish_reason: str):
        self.finish_reason = finish_reason
        self.is_safety = finish_reason == "SAFETY"
        if self.is_safety:
            message = "Content generation failed: Response blocked due to safety settings."
        else:
            message = f"Content generation failed: Stopped due to {finish_reason}."
        super().__init__(ClientErrorKind.ABNORMAL_STOP, message)


# === RESPONSE PARSING ===


class ParseErrorKind(str, Enum):
    MALFORMED_JSON = "MalformedJSON"
    DELIMITER_NOT_FOUND = "DelimiterNotFound"
    ORDER_VIOLATION = "OrderViolation"


class ParseError(VidlearnError):
    """Raw model text could not be turned into the expected artifact."""

    def __init__(self, kind: ParseErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


class MissingFieldError(ParseError):
    """JSON object was found but lacks the required string field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            ParseErrorKind.MALFORMED_JSON,
            f"Malformed JSON response: missing string field {field!r}",
        )


# === ORCHESTRATOR ===


class InvalidTransitionError(VidlearnError):
    """A user action was attempted while its affordance is disabled."""

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while in state {state!r}")
