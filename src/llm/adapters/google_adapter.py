# src/llm/adapters/google_adapter.py — v2
"""Google Gemini adapter implementing BaseGenerationClient.

Uses the google-generativeai SDK. A video reference (e.g. a YouTube URL)
is passed as a ``file_data`` part next to the prompt text, which Gemini
fetches server-side.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from vidlearn.core.errors import (
    AbnormalStopError,
    MissingCredentialError,
    NoCandidatesError,
    PromptBlockedError,
)
from vidlearn.llm.base_client import BaseGenerationClient
from vidlearn.llm.models import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)

VIDEO_MIME_TYPE = "video/mp4"

# Finish reasons that mean the model completed normally.
_NORMAL_FINISH_REASONS = frozenset({"", "STOP", "FINISH_REASON_UNSPECIFIED"})
_NO_BLOCK_REASONS = frozenset({"", "BLOCK_REASON_UNSPECIFIED"})


def _reason_name(value: Any) -> str:
    """Normalize an SDK enum, int or string reason to its upper-case name."""
    if value is None:
        return ""
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name.upper()
    if isinstance(value, int):
        return "" if value == 0 else str(value)
    return str(value).upper()


class GoogleAdapter(BaseGenerationClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-2.5-flash", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    @property
    def provider_name(self) -> str:
        return "google"

    def _build_contents(self, request: GenerationRequest) -> Any:
        if not request.video_url:
            return request.prompt
        return [
            {
                "role": "user",
                "parts": [
                    {"text": request.prompt},
                    {
                        "file_data": {
                            "mime_type": VIDEO_MIME_TYPE,
                            "file_uri": request.video_url,
                        }
                    },
                ],
            }
        ]

    def _build_config(self, request: GenerationRequest) -> dict[str, Any]:
        gen_config: dict[str, Any] = {"temperature": request.temperature}
        if request.wants_json:
            gen_config["response_mime_type"] = "application/json"
        return gen_config

    async def _call_model(self, model_name: str, contents: Any, gen_config: dict[str, Any]) -> Any:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(model_name)
        return await model.generate_content_async(contents, generation_config=gen_config)

    def _check_response(self, resp: Any) -> str:
        """Classify the raw SDK response, returning the first candidate's text.

        Raises:
            PromptBlockedError: Prompt rejected by content policy.
            NoCandidatesError: Upstream returned zero candidates.
            AbnormalStopError: First candidate stopped for a reason other than STOP.
        """
        feedback = getattr(resp, "prompt_feedback", None)
        block_reason = _reason_name(getattr(feedback, "block_reason", None))
        if block_reason not in _NO_BLOCK_REASONS:
            raise PromptBlockedError(block_reason)

        candidates = getattr(resp, "candidates", None)
        if not candidates:
            raise NoCandidatesError()

        finish_reason = _reason_name(getattr(candidates[0], "finish_reason", None))
        if finish_reason not in _NORMAL_FINISH_REASONS:
            raise AbnormalStopError(finish_reason)

        return resp.text or ""

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        if not self._api_key:
            raise MissingCredentialError()

        model_name = request.model_name or self._model
        contents = self._build_contents(request)
        gen_config = self._build_config(request)

        t0 = time.monotonic()
        try:
            resp = await self._call_model(model_name, contents, gen_config)
            text = self._check_response(resp)
        except Exception as exc:
            logger.error(
                "Gemini call failed (model=%s, video=%s): %s",
                model_name, bool(request.video_url), exc,
            )
            raise
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        finish_reason = _reason_name(getattr(resp.candidates[0], "finish_reason", None))
        logger.debug("Gemini call succeeded in %dms (model=%s)", latency, model_name)
        return GenerationResponse(
            content=text,
            model=model_name,
            provider="google",
            latency_ms=latency,
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0 if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0 if usage else 0,
            finish_reason=finish_reason or None,
            raw_response=resp,
        )
