# src/generation/base_stage.py — v1
"""Standard interface for the generation stages.

A stage composes a prompt, makes exactly one generation call and parses
the raw response into a strict artifact. Stages never retry; any failure
propagates to the caller unchanged.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from vidlearn.llm.base_client import BaseGenerationClient


class StageMetadata(BaseModel):
    """Metadata about a stage execution, attached to every StageOutput."""

    stage_name: str
    stage_version: str
    execution_time_ms: int
    model: str
    provider: str
    prompt_hash: str | None = None


class StageOutput(BaseModel):
    """Standard return type for all BaseStage.run() calls."""

    text: str
    metadata: StageMetadata


class BaseStage(ABC):
    """One model call plus its response contract."""

    def __init__(
        self,
        client: BaseGenerationClient,
        model_name: str,
        temperature: float = 0.75,
    ) -> None:
        self._client = client
        self._model_name = model_name
        self._temperature = temperature

    @property
    @abstractmethod
    def name(self) -> str:
        """Stage identifier used in logs and metadata."""

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this stage does."""

    @property
    def model_name(self) -> str:
        return self._model_name

    @abstractmethod
    async def run(self, value: str) -> StageOutput:
        """Execute the stage against its input artifact.

        Raises:
            GenerationClientError: On client failure.
            ParseError: If the response does not satisfy the stage contract.
        """

    @staticmethod
    def _hash_prompt(prompt: str) -> str:
        return hashlib.sha256(prompt.encode()).hexdigest()[:16]
