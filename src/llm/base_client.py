# src/llm/base_client.py — v1
"""Abstract generation client interface.

The core only ever needs "generate text, optionally given a video
reference, optionally requesting JSON". Adapters translate that into a
provider SDK call and classify provider failures into
``GenerationClientError`` subclasses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vidlearn.llm.models import DEFAULT_TEMPERATURE, GenerationRequest, GenerationResponse


class BaseGenerationClient(ABC):
    """Unified interface for all generation providers."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation request.

        Raises:
            GenerationClientError: On any classified provider failure.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, ...)."""

    async def generate_text(
        self,
        model_name: str,
        prompt: str,
        video_url: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        wants_json: bool = False,
    ) -> str:
        """Convenience wrapper returning only the response text."""
        response = await self.generate(
            GenerationRequest(
                model_name=model_name,
                prompt=prompt,
                video_url=video_url,
                temperature=temperature,
                wants_json=wants_json,
            )
        )
        return response.content
