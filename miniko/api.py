"""Composable API functions for the trace pipelines.

Each function is one step a caller (a UI, a notebook, a test) strings
together: detect the dialect, build a bounded trace, read its final output,
or run the snippet for real where a sandbox supports it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import constants
from .classifier import detect_dialect
from .engines import get_engine
from .run_types import DetectedDialect, TraceConfig
from .trace_types import TraceEntry

if TYPE_CHECKING:
    from .sandbox import SandboxResult, ScriptSandbox

logger = logging.getLogger(__name__)


def build_trace(
    source: str,
    dialect_id: str,
    locale: str = constants.DEFAULT_LOCALE,
    config: TraceConfig = TraceConfig(),
) -> list[TraceEntry]:
    """Execute *source* as *dialect_id* and return its step trace.

    Args:
        source: The snippet text.
        dialect_id: A dialect id from :func:`detect_dialect`; ids without a
            dedicated engine run on the generic one.
        locale: ``"en"`` or ``"es"``; only note/label text depends on it.
        config: Trace limits; the result holds at most ``config.max_steps``
            entries.

    Returns:
        The (possibly empty) trace. Malformed input never raises.
    """
    if dialect_id == constants.DIALECT_EMPTY or not source.strip():
        return []
    logger.info("Building trace (%s, locale=%s)", dialect_id, locale)
    trace = get_engine(dialect_id, config).build(source, locale)
    if len(trace) > config.max_steps:
        logger.debug("Truncating trace from %d to %d steps", len(trace), config.max_steps)
    return trace[: config.max_steps]


def trace_source(
    source: str,
    locale: str = constants.DEFAULT_LOCALE,
    config: TraceConfig = TraceConfig(),
) -> tuple[DetectedDialect, list[TraceEntry]]:
    """Detect the dialect of *source* and build its trace in one call."""
    detected = detect_dialect(source, locale)
    return detected, build_trace(source, detected.id, locale, config)


def final_output(trace: list[TraceEntry]) -> list[str]:
    """Output log after the last recorded step (empty for an empty trace)."""
    if not trace:
        return []
    return list(trace[-1].outputs_after)


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def is_possibly_incomplete(source: str, dialect_id: str) -> bool:
    """Advisory check for snippets that look cut off.

    Python: a line ending in ``:`` whose next non-blank line is not indented
    deeper. Brace dialects: unbalanced ``{``/``}``. Empty source counts as
    incomplete.
    """
    if not source.strip():
        return True
    if dialect_id == constants.DIALECT_PYTHON:
        lines = source.split("\n")
        for i, line in enumerate(lines):
            if not line.strip().endswith(":"):
                continue
            following = [candidate for candidate in lines[i + 1 :] if candidate.strip()]
            if not following or _indent_width(following[0]) <= _indent_width(line):
                return True
    if dialect_id in constants.BRACE_DIALECTS and dialect_id not in (
        constants.DIALECT_JAVASCRIPT,
        constants.DIALECT_TYPESCRIPT,
    ):
        return source.count("{") != source.count("}")
    return False


def execute_real_output(
    source: str,
    sandbox: ScriptSandbox,
    timeout_ms: int = constants.DEFAULT_SANDBOX_TIMEOUT_MS,
) -> SandboxResult | None:
    """Run *source* in *sandbox* when its dialect is runnable, else None."""
    detected = detect_dialect(source)
    if detected.runnable != sandbox.runnable:
        logger.debug("Dialect %s is not runnable by %s", detected.id, type(sandbox).__name__)
        return None
    return sandbox.execute(source, timeout_ms)
