"""Miniko: heuristic multi-dialect step tracer."""

from .api import (  # noqa: F401
    build_trace,
    trace_source,
    final_output,
    is_possibly_incomplete,
    execute_real_output,
)
from .classifier import detect_dialect  # noqa: F401
from .run_types import DetectedDialect, TraceConfig  # noqa: F401
from .toy_script import run_toy_script  # noqa: F401
