"""Per-run mutable state threaded through an engine's recursive block walk."""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from . import constants
from .messages import translate
from .run_types import TraceConfig
from .trace_types import Operation, TraceEntry

logger = logging.getLogger(__name__)


class TraceLimitReached(Exception):
    """Raised by :meth:`RunState.record` once ``max_engine_steps`` is hit."""


@dataclass(frozen=True)
class Snapshot:
    """Store and output contents captured just before a statement runs."""

    variables: dict[str, Any]
    outputs: list[str]


@dataclass
class RunState:
    """Mutable store and recorded trace of a single build.

    A fresh instance is created for each build and passed explicitly through
    every recursive call, so nothing is shared between runs.
    """

    config: TraceConfig
    locale: str = constants.DEFAULT_LOCALE
    lines: list[Any] = field(default_factory=list)
    block_map: dict[int, int] = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    outputs: list[str] = field(default_factory=list)
    trace: list[TraceEntry] = field(default_factory=list)
    _silence_depth: int = 0

    def t(self, key: str, **kwargs) -> str:
        return translate(self.locale, key, **kwargs)

    def snapshot(self) -> Snapshot:
        return Snapshot(variables=copy.deepcopy(self.variables), outputs=list(self.outputs))

    @contextmanager
    def silenced(self) -> Iterator[None]:
        """Apply statements (loop init/update) without recording entries."""
        self._silence_depth += 1
        try:
            yield
        finally:
            self._silence_depth -= 1

    def record(
        self,
        source_line: str,
        action: str,
        before: Snapshot,
        operation: Operation | None = None,
        output_line: str | None = None,
    ) -> None:
        if self._silence_depth:
            return
        if len(self.trace) >= self.config.max_engine_steps:
            raise TraceLimitReached(len(self.trace))
        self.trace.append(
            TraceEntry(
                step=len(self.trace) + 1,
                source_line=source_line,
                action=action,
                before=before.variables,
                after=copy.deepcopy(self.variables),
                outputs_before=before.outputs,
                outputs_after=list(self.outputs),
                operation=operation,
                output_line=output_line,
            )
        )
