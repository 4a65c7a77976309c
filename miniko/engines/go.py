"""GoEngine — ``:=`` bindings, slice literals, the ``for`` family and ``fmt``."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import render_concat_args, render_printf
from ._base import IDENT, PLAIN_ASSIGNMENT
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_PRINTLN = re.compile(r"^fmt\.Print(?:ln)?\s*\((?P<args>.*)\)$")
_PRINTF = re.compile(r"^fmt\.Printf\s*\((?P<args>.*)\)$")


class GoEngine(BraceEngine):
    """Executes the body of ``func main`` as top-level code."""

    SCAFFOLDING = (
        re.compile(r"^package\b"),
        re.compile(r"^import\b"),
        re.compile(r'^"[^"]*"$'),
        re.compile(r"^\)$"),
        re.compile(r"^func\s+main\s*\(\s*\)"),
    )

    LIST_PATTERNS = (
        (
            re.compile(
                rf"^(?:var\s+)?(?P<name>{IDENT})\s*:?=\s*\[\d*\]\w+\s*\{{(?P<items>.*)\}}$"
            ),
            "list_declaration",
        ),
    )
    ASSIGNMENT_PATTERNS = (
        (re.compile(rf"^(?P<name>{IDENT})\s*:=\s*(?P<expr>.+)$"), True),
        (
            re.compile(rf"^var\s+(?P<name>{IDENT})(?:\s+[\w\[\]]+)?(?:\s*=\s*(?P<expr>.+))?$"),
            True,
        ),
        (PLAIN_ASSIGNMENT, False),
    )
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^for\s+(?:_|{IDENT})\s*,\s*(?P<item>{IDENT})\s*:=\s*range\s+(?P<items>{IDENT})$"
        ),
    )
    THREE_CLAUSE_PATTERNS = (
        re.compile(r"^for\s+(?P<init>[^;]*);(?P<cond>[^;]*);(?P<update>.*)$"),
    )
    WHILE_PATTERNS = (
        re.compile(r"^for$"),
        re.compile(r"^for\s+(?P<cond>[^;]+)$"),
    )

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINTF.match(statement)
        if match:
            return render_printf(match.group("args"), variables)
        match = _PRINTLN.match(statement)
        if match:
            return render_concat_args(match.group("args"), variables)
        return None
