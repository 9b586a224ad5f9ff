# src/orchestrator/state.py — v1
"""Content state: the single value the orchestrator transitions.

ContentState is frozen. Each transition builds a new value through one of
the named constructors below, so a half-updated state is never observable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

CODE_EDIT_NOTICE = "HTML updated. Changes will appear in the Render tab."


class RunState(str, Enum):
    LOADING_SPEC = "loading-spec"
    LOADING_CODE = "loading-code"
    READY = "ready"
    ERROR = "error"


class ContentState(BaseModel):
    """Tagged union of {kind, spec, code, error}.

    ``error`` is set only when kind is ERROR. ``notice`` carries the
    transient message shown after a direct code edit.
    """

    model_config = ConfigDict(frozen=True)

    kind: RunState
    spec: str = ""
    code: str = ""
    error: str | None = None
    notice: str | None = None

    # --- Transitions ---

    @classmethod
    def loading_spec(cls) -> ContentState:
        return cls(kind=RunState.LOADING_SPEC)

    @classmethod
    def loading_code(cls, spec: str) -> ContentState:
        return cls(kind=RunState.LOADING_CODE, spec=spec)

    @classmethod
    def ready(cls, spec: str, code: str) -> ContentState:
        return cls(kind=RunState.READY, spec=spec, code=code)

    @classmethod
    def failed(cls, message: str, spec: str = "") -> ContentState:
        """Error state. A previously obtained spec stays inspectable."""
        return cls(kind=RunState.ERROR, spec=spec, error=message)

    def with_code(self, code: str) -> ContentState:
        """Hand-edited code; only meaningful in READY."""
        return self.model_copy(update={"code": code, "notice": CODE_EDIT_NOTICE})

    # --- Derived ---

    @property
    def is_busy(self) -> bool:
        return self.kind in (RunState.LOADING_SPEC, RunState.LOADING_CODE)

    @property
    def is_code_trusted(self) -> bool:
        """Code is safe to render only once the run is ready."""
        return self.kind is RunState.READY

    @property
    def accepts_spec_edit(self) -> bool:
        return self.kind in (RunState.READY, RunState.ERROR)


class Seed(BaseModel):
    """Pre-existing spec/code pair that bypasses generation when complete."""

    spec: str | None = None
    code: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.spec) and bool(self.code)


@dataclass
class SpecEditSession:
    """UI-local working copy of the spec while the user composes an edit.

    Not part of ContentState until committed through the orchestrator.
    """

    active: bool = False
    buffer: str = ""

    def begin(self, spec: str) -> None:
        self.active = True
        self.buffer = spec

    def update(self, text: str) -> None:
        if not self.active:
            raise RuntimeError("No spec edit in progress")
        self.buffer = text

    def cancel(self) -> None:
        self.active = False
        self.buffer = ""

    def take(self) -> str:
        """Return the buffer and close the session."""
        text = self.buffer
        self.cancel()
        return text
