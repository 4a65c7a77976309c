"""RustEngine — ``let`` bindings, ``vec!``, range loops and ``println!``."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import render_brace_format
from ._base import IDENT, PLAIN_ASSIGNMENT
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_PRINT_MACRO = re.compile(r"^print(?:ln)?!\s*\((?P<args>.*)\)$")
_LET = rf"^let\s+(?:mut\s+)?(?P<name>{IDENT})(?:\s*:\s*[^=]+?)?"


class RustEngine(BraceEngine):
    """Executes the body of ``fn main`` as top-level code."""

    SCAFFOLDING = (
        re.compile(r"^fn\s+main\s*\(\s*\)"),
        re.compile(r"^use\b"),
    )

    LIST_PATTERNS = (
        (re.compile(rf"{_LET}\s*=\s*vec!\s*\[(?P<items>.*)\]$"), "vector_declaration"),
        (re.compile(rf"{_LET}\s*=\s*\[(?P<items>.*)\]$"), "array_declaration"),
    )
    ASSIGNMENT_PATTERNS = (
        (re.compile(rf"{_LET}(?:\s*=(?!=)\s*(?P<expr>.+))?$"), True),
        (PLAIN_ASSIGNMENT, False),
    )
    SPAN_PATTERNS = (
        re.compile(
            rf"^for\s+(?P<item>{IDENT})\s+in\s+\(?\s*(?P<low>[^.]+?)\s*\.\.(?P<inclusive>=?)"
            rf"\s*(?P<high>[^)]+?)\s*\)?$"
        ),
    )
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^for\s+(?P<item>{IDENT})\s+in\s+&?(?:mut\s+)?(?P<items>{IDENT})(?:\.iter\(\))?$"
        ),
    )
    THREE_CLAUSE_PATTERNS = ()
    WHILE_PATTERNS = (
        re.compile(r"^loop$"),
        re.compile(r"^while\s+(?P<cond>.+)$"),
    )

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINT_MACRO.match(statement)
        if match is None:
            return None
        return render_brace_format(match.group("args"), variables)
