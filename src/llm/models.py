# src/llm/models.py — v1
"""Generation client types: GenerationRequest, GenerationResponse."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TEMPERATURE = 0.75


class GenerationRequest(BaseModel):
    """One call to a generative text/vision model."""

    model_name: str
    prompt: str
    video_url: str | None = None
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    wants_json: bool = False


class GenerationResponse(BaseModel):
    """Normalized successful response from any provider."""

    content: str
    model: str
    provider: str
    latency_ms: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str | None = None
    raw_response: Any = Field(default=None, exclude=True)
