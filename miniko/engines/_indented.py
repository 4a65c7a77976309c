"""IndentedEngine — blocks recovered from indentation depth.

Also serves as the generic engine for snippets whose dialect has no engine of
its own (``sql``, ``unknown``): it understands ``print(...)`` and
``console.log(...)`` and the shared assignment forms.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..blocks import (
    IndentedLine,
    find_block_end,
    find_elif_index,
    find_else_index,
    strip_comment,
)
from ..render import render_concat_args
from ..run_types import TraceConfig
from ..state import RunState
from ._base import IDENT, BaseEngine

logger = logging.getLogger(__name__)

_IF = re.compile(r"^if\b\s*(?P<cond>.+)$")
_ELIF = re.compile(r"^elif\b\s*(?P<cond>.+)$")
_PRINT_CALL = re.compile(r"^(?:print|console\.log)\s*\((?P<args>.*)\)$")


class IndentedEngine(BaseEngine):
    """Indentation-delimited execution shared by Python and the generic fallback."""

    COMMENT_MARKERS = ("#", "//")
    TAB_SIZE = 4

    LIST_PATTERNS = (
        (re.compile(rf"^(?P<name>{IDENT})\s*=\s*\[(?P<items>.*)\]$"), "list_assignment"),
    )
    RANGE_CALL_PATTERNS = (
        re.compile(rf"^for\s+(?P<item>{IDENT})\s+in\s+range\s*\((?P<args>.*)\)$"),
    )
    FOR_EACH_PATTERNS = (
        re.compile(rf"^for\s+(?P<item>{IDENT})\s+in\s+(?P<items>{IDENT})$"),
    )
    WHILE_PATTERNS = (re.compile(r"^while\b\s*(?P<cond>.+)$"),)

    def __init__(self, config: TraceConfig | None = None):
        super().__init__(config)
        self._CONTROL_DISPATCH = [
            self._conditional,
            self._for_range_call,
            self._for_each,
            self._while,
        ]

    def _prepare(self, state: RunState, source: str) -> None:
        records: list[IndentedLine] = []
        for raw in source.splitlines():
            stripped = raw.expandtabs(self.TAB_SIZE)
            for marker in self.COMMENT_MARKERS:
                stripped = strip_comment(stripped, marker)
            text = stripped.strip()
            if not text:
                continue
            indent = len(stripped) - len(stripped.lstrip())
            records.append(IndentedLine(raw=raw, text=text, indent=indent))
        state.lines = records

    def _line_text(self, state: RunState, index: int) -> str:
        return state.lines[index].text

    def _header_text(self, text: str) -> str:
        return text[:-1].rstrip() if text.endswith(":") else text

    def _block_bounds(self, state: RunState, index: int) -> tuple[int, int, int]:
        end = find_block_end(state.lines, index + 1, state.lines[index].indent)
        return index + 1, end, end

    def _conditional(self, state: RunState, index: int, header: str) -> int | None:
        match = _IF.match(header)
        if match is None:
            return None
        lines = state.lines
        indent = lines[index].indent
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
            elif_index = find_elif_index(lines, next_index, indent)
            if elif_index != -1:
                cursor = elif_index
                condition = _ELIF.match(self._header_text(lines[cursor].text)).group("cond")
                continue
            else_index = find_else_index(lines, next_index, indent)
            if else_index == -1:
                return next_index
            cursor = else_index
            condition = None

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINT_CALL.match(statement)
        if match is None:
            return None
        return render_concat_args(match.group("args"), variables)
