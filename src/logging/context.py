# src/logging/context.py — v1
"""Contextual logging: attach activation, generation token and stage to records.

Context variables are per asyncio task, so concurrent activations (a live
one and an abandoned one still awaiting its model call) keep their own
values.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass


_activation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "activation_id", default=None
)
_generation: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "generation", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    activation_id: str | None = None
    generation: int | None = None
    stage: str | None = None


def get_context() -> LogContext:
    return LogContext(
        activation_id=_activation_id.get(),
        generation=_generation.get(),
        stage=_stage.get(),
    )


def set_activation_context(activation_id: str, generation: int) -> None:
    """Set activation-level context (once per orchestrator run)."""
    _activation_id.set(activation_id)
    _generation.set(generation)


def set_stage_context(stage: str | None) -> None:
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _activation_id.set(None)
    _generation.set(None)
    _stage.set(None)
