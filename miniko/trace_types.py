"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel

Number = Union[int, float]
Value = Union[int, float, str, list]


class Operation(BaseModel):
    """Arithmetic performed by a step: ``target = left operator right``."""

    left: str
    operator: str
    right: str
    result: Union[int, float]
    target: str


@dataclass(frozen=True)
class TraceEntry:
    """A single step in a dialect trace.

    ``before``/``after`` and the output lists are deep-copied snapshots taken
    when the step was recorded; later mutation of the live run never reaches
    them.
    """

    step: int
    source_line: str
    action: str
    before: dict[str, Any]
    after: dict[str, Any]
    outputs_before: list[str]
    outputs_after: list[str]
    operation: Operation | None = None
    output_line: str | None = None

    @property
    def state_text(self) -> str:
        from .render import format_state

        return format_state(self.before)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "step": self.step,
            "source_line": self.source_line,
            "action": self.action,
            "before": self.before,
            "after": self.after,
            "outputs_before": self.outputs_before,
            "outputs_after": self.outputs_after,
        }
        if self.operation is not None:
            d["operation"] = self.operation.model_dump()
        if self.output_line is not None:
            d["output_line"] = self.output_line
        return d


@dataclass(frozen=True)
class ToyTraceEntry:
    """A single executed toy-script instruction."""

    step: int
    line: str
    note: str
    variables: dict[str, Number]

    @property
    def state_text(self) -> str:
        from .render import format_state

        return format_state(self.variables)


@dataclass(frozen=True)
class ToyRunResult:
    """Output log and trace of a toy-script run."""

    output: list[str] = field(default_factory=list)
    trace: list[ToyTraceEntry] = field(default_factory=list)
