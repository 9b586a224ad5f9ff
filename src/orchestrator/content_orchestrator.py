# src/orchestrator/content_orchestrator.py — v1
"""Content orchestrator: the generation state machine for one activation.

    loading-spec ──Stage 1 ok──▶ loading-code ──Stage 2 ok──▶ ready
         │                           │                       │  ▲
         └──────── failure ──────────┴──▶ error              │  │ edit_code
                                            │                ▼  │
                          commit_spec_edit ─┴──▶ loading-code ◀─┘ (changed spec)

An instance is created per activation (content basis + reload token) and
is never reused. Every state application first checks that the instance's
generation token is still current; once a newer activation exists, late
stage results are dropped and observers are not notified.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Callable

from vidlearn.core.errors import InvalidTransitionError, VidlearnError
from vidlearn.logging.context import set_activation_context, set_stage_context
from vidlearn.orchestrator.state import ContentState, RunState, Seed, SpecEditSession

if TYPE_CHECKING:
    from vidlearn.generation.base_stage import BaseStage

logger = logging.getLogger(__name__)

StateObserver = Callable[[ContentState], None]

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"
URL_SCHEME_HINT = "URL must begin with http:// or https://"


def _error_message(exc: BaseException) -> str:
    return str(exc) or UNKNOWN_ERROR_MESSAGE


class ContentOrchestrator:
    """Drives Spec-From-Basis then Code-From-Spec and owns the resulting state.

    Args:
        basis: Source video reference; fixed for the instance's lifetime.
        spec_stage: Stage 1 implementation.
        code_stage: Stage 2 implementation.
        reload_token: Token distinguishing repeated activations of one basis.
        generation: Generation token captured at activation.
        is_current: Callable answering whether a generation token is still live.
        seed: Optional spec/code pair; when complete, generation is skipped.
    """

    def __init__(
        self,
        basis: str,
        spec_stage: BaseStage,
        code_stage: BaseStage,
        *,
        reload_token: int = 0,
        generation: int = 0,
        is_current: Callable[[int], bool] | None = None,
        seed: Seed | None = None,
    ) -> None:
        self._basis = basis
        self._spec_stage = spec_stage
        self._code_stage = code_stage
        self._reload_token = reload_token
        self._generation = generation
        self._is_current = is_current or (lambda _generation: True)
        self._seed = seed if seed is not None and seed.is_complete else None
        self._activation_id = uuid.uuid4().hex[:12]
        self._observers: list[StateObserver] = []
        self._started = False
        self.spec_edit = SpecEditSession()

        if self._seed is not None:
            self._state = ContentState.ready(self._seed.spec or "", self._seed.code or "")
        else:
            self._state = ContentState.loading_spec()

    # --- Accessors ---

    @property
    def basis(self) -> str:
        return self._basis

    @property
    def reload_token(self) -> int:
        return self._reload_token

    @property
    def activation_key(self) -> tuple[str, int]:
        return (self._basis, self._reload_token)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> ContentState:
        return self._state

    @property
    def spec(self) -> str:
        return self._state.spec

    @property
    def code(self) -> str:
        return self._state.code

    @property
    def is_busy(self) -> bool:
        return self._state.is_busy

    @property
    def is_live(self) -> bool:
        return self._is_current(self._generation)

    @property
    def error_hint(self) -> str | None:
        """Extra guidance shown next to the error for scheme-less input."""
        if self._state.kind is not RunState.ERROR:
            return None
        if self._basis.startswith(("http://", "https://")):
            return None
        return URL_SCHEME_HINT

    # --- Observers ---

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register ``observer`` for every state transition.

        Returns:
            A callable that removes the observer.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _apply(self, new_state: ContentState) -> bool:
        """Install ``new_state`` if this instance is still live."""
        if not self.is_live:
            logger.debug(
                "Discarding %s result of superseded generation %d",
                new_state.kind.value, self._generation,
            )
            return False
        previous = self._state.kind
        self._state = new_state
        logger.debug("State %s → %s", previous.value, new_state.kind.value)
        for observer in list(self._observers):
            observer(new_state)
        return True

    def _fail(self, exc: Exception, spec: str = "") -> None:
        message = _error_message(exc)
        if isinstance(exc, VidlearnError):
            logger.error("Generation failed: %s", message)
        else:
            logger.exception("Unexpected error during generation")
        self._apply(ContentState.failed(message, spec=spec))

    # --- Pipeline ---

    async def run(self) -> ContentState:
        """Run the activation: seed adoption, or Stage 1 followed by Stage 2.

        Failures end in the ERROR state and are never retried here.
        """
        self._mark_started()

        if self._seed is not None:
            logger.info("Seeded spec and code present; skipping generation")
            # Edits committed before run() stand; observers get the current state.
            self._apply(self._state)
            return self._state

        logger.info("Starting generation for %s", self._basis)
        if not self._apply(ContentState.loading_spec()):
            return self._state

        try:
            spec_output = await self._spec_stage.run(self._basis)
        except Exception as exc:
            self._fail(exc)
            return self._state
        finally:
            set_stage_context(None)

        if not self._apply(ContentState.loading_code(spec_output.text)):
            return self._state

        await self._generate_code(spec_output.text)
        return self._state

    async def run_from_spec(self, spec: str) -> ContentState:
        """Run the activation from a caller-supplied spec: Stage 2 only.

        Used in place of ``run()`` when the spec already exists outside a
        seed, e.g. read from a file. The spec is used verbatim (trimmed).

        Raises:
            ValueError: If the spec is blank.
        """
        trimmed = spec.strip()
        if not trimmed:
            raise ValueError("Spec must not be empty")
        self._mark_started()

        logger.info("Generating code from supplied spec")
        if not self._apply(ContentState.loading_code(trimmed)):
            return self._state

        await self._generate_code(trimmed)
        return self._state

    def _mark_started(self) -> None:
        if self._started:
            raise RuntimeError("ContentOrchestrator may only be run once")
        self._started = True
        set_activation_context(self._activation_id, self._generation)

    async def _generate_code(self, spec: str) -> None:
        try:
            code_output = await self._code_stage.run(spec)
        except Exception as exc:
            self._fail(exc, spec=spec)
            return
        finally:
            set_stage_context(None)

        if self._apply(ContentState.ready(spec, code_output.text)):
            logger.info("Content ready (%d chars of code)", len(code_output.text))

    # --- User edits ---

    def begin_spec_edit(self) -> str:
        """Open the spec edit buffer, seeded with the current spec."""
        if not self._state.accepts_spec_edit:
            raise InvalidTransitionError(self._state.kind.value, "edit the spec")
        self.spec_edit.begin(self._state.spec)
        return self.spec_edit.buffer

    def cancel_spec_edit(self) -> None:
        self.spec_edit.cancel()

    async def commit_spec_edit(self, text: str | None = None) -> ContentState:
        """Commit an edited spec and regenerate code from it.

        Args:
            text: New spec text; defaults to the open edit buffer.

        Returns:
            The state after the commit (unchanged if the spec did not change).

        Raises:
            InvalidTransitionError: If a generation is in progress.
            ValueError: If the edited spec is blank.
        """
        if not self._state.accepts_spec_edit:
            raise InvalidTransitionError(self._state.kind.value, "commit a spec edit")

        buffered = self.spec_edit.take()
        if text is None:
            text = buffered

        trimmed = text.strip()
        if trimmed == self._state.spec:
            logger.info("Spec unchanged; skipping regeneration")
            return self._state
        if not trimmed:
            raise ValueError("Edited spec must not be empty")

        set_activation_context(self._activation_id, self._generation)
        logger.info("Spec edited; regenerating code")
        if not self._apply(ContentState.loading_code(trimmed)):
            return self._state

        await self._generate_code(trimmed)
        return self._state

    def edit_code(self, code: str | None) -> ContentState:
        """Replace the code directly. No model call; the state stays READY.

        The stored spec is left as is, so spec and code may diverge.
        """
        if self._state.kind is not RunState.READY:
            raise InvalidTransitionError(self._state.kind.value, "edit the code")
        self._apply(self._state.with_code(code or ""))
        return self._state
