# src/generation/stages.py — v1
"""The two generation stages.

Stage 1 (SpecFromBasisStage) watches the source video and writes a spec
for an interactive learning app. Stage 2 (CodeFromSpecStage) sends that
spec verbatim as the prompt and pulls the HTML document out of the reply.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from vidlearn.generation.base_stage import BaseStage, StageMetadata, StageOutput
from vidlearn.generation.prompts import (
    CODE_REGION_CLOSER,
    CODE_REGION_OPENER,
    SPEC_ADDENDUM,
    SPEC_FIELD,
    SPEC_FROM_VIDEO_PROMPT,
)
from vidlearn.llm.models import GenerationRequest
from vidlearn.logging.context import set_stage_context
from vidlearn.parsing.json_parser import extract_field
from vidlearn.parsing.region_parser import extract_delimited

if TYPE_CHECKING:
    from vidlearn.llm.base_client import BaseGenerationClient

logger = logging.getLogger(__name__)


class SpecFromBasisStage(BaseStage):
    """Stage 1: content basis (video URL) → spec text with addendum."""

    def __init__(
        self,
        client: BaseGenerationClient,
        model_name: str,
        temperature: float = 0.75,
        prompt: str = SPEC_FROM_VIDEO_PROMPT,
        addendum: str = SPEC_ADDENDUM,
    ) -> None:
        super().__init__(client, model_name, temperature)
        self._prompt = prompt
        self._addendum = addendum

    @property
    def name(self) -> str:
        return "spec_from_basis"

    @property
    def description(self) -> str:
        return "Generate an interactive-app spec from a source video"

    async def run(self, value: str) -> StageOutput:
        set_stage_context(self.name)
        start = time.monotonic()
        logger.info("Generating spec from %s", value)

        response = await self._client.generate(
            GenerationRequest(
                model_name=self._model_name,
                prompt=self._prompt,
                video_url=value,
                temperature=self._temperature,
                wants_json=True,
            )
        )
        try:
            spec = extract_field(response.content, SPEC_FIELD)
        except Exception as exc:
            logger.warning("Spec response could not be parsed: %s", exc)
            raise

        spec += self._addendum
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Spec generated: %d chars in %dms", len(spec), elapsed_ms)

        return StageOutput(
            text=spec,
            metadata=StageMetadata(
                stage_name=self.name,
                stage_version=self.version,
                execution_time_ms=elapsed_ms,
                model=response.model,
                provider=response.provider,
                prompt_hash=self._hash_prompt(self._prompt),
            ),
        )


class CodeFromSpecStage(BaseStage):
    """Stage 2: spec text → self-contained HTML document.

    The spec is the whole prompt. No instructional wrapper is added; the
    spec already carries its own output instructions (see SPEC_ADDENDUM).
    """

    def __init__(
        self,
        client: BaseGenerationClient,
        model_name: str,
        temperature: float = 0.75,
        opener: str = CODE_REGION_OPENER,
        closer: str = CODE_REGION_CLOSER,
    ) -> None:
        super().__init__(client, model_name, temperature)
        self._opener = opener
        self._closer = closer

    @property
    def name(self) -> str:
        return "code_from_spec"

    @property
    def description(self) -> str:
        return "Generate a renderable HTML document from a spec"

    async def run(self, value: str) -> StageOutput:
        set_stage_context(self.name)
        start = time.monotonic()
        logger.info("Generating code from spec (%d chars)", len(value))

        response = await self._client.generate(
            GenerationRequest(
                model_name=self._model_name,
                prompt=value,
                temperature=self._temperature,
            )
        )
        try:
            code = extract_delimited(response.content, self._opener, self._closer)
        except Exception as exc:
            logger.warning("Code response could not be parsed: %s", exc)
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Code generated: %d chars in %dms", len(code), elapsed_ms)

        return StageOutput(
            text=code,
            metadata=StageMetadata(
                stage_name=self.name,
                stage_version=self.version,
                execution_time_ms=elapsed_ms,
                model=response.model,
                provider=response.provider,
                prompt_hash=self._hash_prompt(value),
            ),
        )
