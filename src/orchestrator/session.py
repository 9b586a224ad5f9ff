# src/orchestrator/session.py — v1
"""Activation source: hands out orchestrators and the generation token.

Only the most recently activated orchestrator is live. Activating again
(new basis, or the same basis with a new reload token) bumps the
generation counter, which silently invalidates any stage call still in
flight for the previous orchestrator. Nothing is cached across
activations.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vidlearn.config.settings import Settings
from vidlearn.generation.stages import CodeFromSpecStage, SpecFromBasisStage
from vidlearn.llm.client_factory import create_generation_client
from vidlearn.orchestrator.content_orchestrator import ContentOrchestrator
from vidlearn.orchestrator.state import Seed

if TYPE_CHECKING:
    from vidlearn.generation.base_stage import BaseStage
    from vidlearn.llm.base_client import BaseGenerationClient

logger = logging.getLogger(__name__)


class ContentSession:
    """Owns the live orchestrator for one user-facing session."""

    def __init__(self, spec_stage: BaseStage, code_stage: BaseStage) -> None:
        self._spec_stage = spec_stage
        self._code_stage = code_stage
        self._generation = 0
        self._reload_counter = 0
        self._current: ContentOrchestrator | None = None

    @property
    def current(self) -> ContentOrchestrator | None:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_busy(self) -> bool:
        return self._current is not None and self._current.is_busy

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def activate(
        self,
        basis: str,
        seed: Seed | None = None,
        reload_token: int | None = None,
    ) -> ContentOrchestrator:
        """Start a fresh activation for ``basis``.

        Without an explicit ``reload_token`` a new one is issued, so the
        same basis submitted twice always runs again. An explicit token
        equal to the live activation's key returns that orchestrator
        unchanged.

        Returns:
            The new live orchestrator; the caller awaits its ``run()``.
        """
        if (
            reload_token is not None
            and self._current is not None
            and self._current.activation_key == (basis, reload_token)
        ):
            return self._current

        if reload_token is None:
            self._reload_counter += 1
            reload_token = self._reload_counter
        else:
            self._reload_counter = max(self._reload_counter, reload_token)

        if self._current is not None:
            logger.info(
                "Superseding activation %s (generation %d)",
                self._current.activation_key, self._current.generation,
            )
        self._generation += 1

        self._current = ContentOrchestrator(
            basis,
            self._spec_stage,
            self._code_stage,
            reload_token=reload_token,
            generation=self._generation,
            is_current=self.is_current,
            seed=seed,
        )
        logger.debug("Activated %s as generation %d", self._current.activation_key, self._generation)
        return self._current

    def retire(self) -> None:
        """Abandon the live orchestrator without starting a new one."""
        if self._current is None:
            return
        self._generation += 1
        logger.info("Retired activation %s", self._current.activation_key)
        self._current = None


def create_session(
    settings: Settings | None = None,
    client: BaseGenerationClient | None = None,
) -> ContentSession:
    """Build a session with both stages wired to the configured model.

    Args:
        settings: Application settings. Loaded from .env if None.
        client: Generation client; created from settings if None.
    """
    settings = settings or Settings()
    if client is None:
        if not settings.has_credentials:
            logger.warning("No API key configured; every stage call will fail")
        client = create_generation_client(
            settings.llm_provider, settings.llm_model, settings=settings,
        )
    return ContentSession(
        spec_stage=SpecFromBasisStage(client, settings.llm_model, settings.llm_temperature),
        code_stage=CodeFromSpecStage(client, settings.llm_model, settings.llm_temperature),
    )
