"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class TraceConfig:
    """Groups trace-building limits.

    ``max_steps`` truncates the trace handed to callers, ``loop_guard`` bounds
    condition-driven loops, and ``max_engine_steps`` stops an engine that
    would record more entries than any caller could use.
    """

    max_steps: int = constants.DEFAULT_MAX_STEPS
    loop_guard: int = constants.DEFAULT_LOOP_GUARD
    max_engine_steps: int = constants.DEFAULT_MAX_ENGINE_STEPS


@dataclass(frozen=True)
class DetectedDialect:
    """Classifier verdict for a snippet."""

    id: str
    label: str
    runnable: str | None = None
