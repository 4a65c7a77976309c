"""BraceEngine — blocks recovered from ``{``/``}`` matching.

Source is first normalized to one statement per line (see
:func:`~miniko.blocks.split_statements`), then a single brace map answers
where every block closes.  Program scaffolding (class and ``main``
wrappers, imports, includes) is skipped so its body runs as top-level code.
"""

from __future__ import annotations

import logging
import re

from .. import constants
from ..blocks import block_end, build_brace_map, find_else_block, split_statements, strip_comment
from ..run_types import TraceConfig
from ..state import RunState
from ._base import BaseEngine, first_match

logger = logging.getLogger(__name__)

_IF = re.compile(r"^if\b\s*(?P<cond>.+)$")
_ELSE_IF = re.compile(r"^else\s+if\b\s*(?P<cond>.+)$")
_PAREN_IF = re.compile(r"^(?:else\s+)?if\s*\(.*\)$")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")


class BraceEngine(BaseEngine):
    """Brace-delimited execution; dialect modules supply the pattern tables."""

    SCAFFOLDING: tuple[re.Pattern, ...] = ()

    THREE_CLAUSE_PATTERNS = (
        re.compile(r"^for\s*\((?P<init>[^;]*);(?P<cond>[^;]*);(?P<update>.*)\)$"),
    )
    WHILE_PATTERNS = (re.compile(r"^while\s*(?P<cond>\(.*\))$"),)

    def __init__(self, config: TraceConfig | None = None):
        super().__init__(config)
        self._CONTROL_DISPATCH = [
            self._conditional,
            self._three_clause,
            self._for_each,
            self._for_range_call,
            self._for_span,
            self._while,
        ]

    def _prepare(self, state: RunState, source: str) -> None:
        statements: list[str] = []
        for raw in source.splitlines():
            text = _BLOCK_COMMENT.sub("", raw)
            for marker in self.COMMENT_MARKERS:
                text = strip_comment(text, marker)
            text = text.strip()
            if not text:
                continue
            for statement in split_statements(text):
                # Allman style: a lone "{" belongs to the header above it.
                if statement == "{" and statements and not statements[-1].endswith((";", "{", "}")):
                    statements[-1] = f"{statements[-1]} {{"
                    continue
                statements.append(statement)
        state.lines = statements
        state.block_map = build_brace_map(statements)

    def _line_text(self, state: RunState, index: int) -> str:
        return state.lines[index]

    def _header_text(self, text: str) -> str:
        header = text
        if header.startswith("}"):
            header = header[1:].lstrip()
        if header.endswith("{"):
            header = header[:-1].rstrip()
        return header

    def _skip_line(self, text: str) -> bool:
        if text in constants.BRACE_ONLY_LINES:
            return True
        return first_match(self.SCAFFOLDING, text) is not None

    def _block_bounds(self, state: RunState, index: int) -> tuple[int, int, int]:
        line_count = len(state.lines)
        if state.lines[index].endswith("{"):
            close = block_end(state.block_map, index, line_count)
            return index + 1, close, close + 1
        # Unbraced body: the single statement that follows the header.
        after = min(index + 2, line_count)
        return index + 1, after, after

    def _opens_body(self, state: RunState, index: int, header: str) -> bool:
        return state.lines[index].endswith("{") or _PAREN_IF.match(header) is not None

    def _conditional(self, state: RunState, index: int, header: str) -> int | None:
        match = _IF.match(header)
        if match is None or not self._opens_body(state, index, header):
            return None
        condition: str | None = match.group("cond")
        cursor = index
        taken = False
        while True:
            body_start, body_end, next_index = self._block_bounds(state, cursor)
            if condition is None:
                if not taken:
                    self._run_block(state, body_start, body_end)
                return next_index
            if not taken:
                taken = self._branch(state, cursor, condition, body_start, body_end)
            else_block = find_else_block(state.lines, state.block_map, body_end)
            if else_block is None:
                return next_index
            cursor = else_block.opener
            chained = _ELSE_IF.match(self._header_text(state.lines[cursor]))
            condition = chained.group("cond") if chained else None
