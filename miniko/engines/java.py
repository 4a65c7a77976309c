"""JavaEngine — typed declarations, array initializers and ``System.out``."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import render_plus_concat, render_printf
from ._base import IDENT, PLAIN_ASSIGNMENT, TYPED_DECLARATION
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_PRINTLN = re.compile(r"^System\.out\.print(?:ln)?\((?P<args>.*)\)$")
_PRINTF = re.compile(r"^System\.out\.(?:printf|format)\((?P<args>.*)\)$")


class JavaEngine(BraceEngine):
    """Executes the body of a Java ``main`` as top-level code."""

    SCAFFOLDING = (
        re.compile(r"^(?:(?:public|private|protected|final|abstract)\s+)*class\b"),
        re.compile(r"^(?:public\s+)?static\s+void\s+main\b"),
        re.compile(r"^(?:import|package)\b"),
    )

    LIST_PATTERNS = (
        (
            re.compile(
                rf"^(?:final\s+)?\w+\s*\[\s*\]\s*(?P<name>{IDENT})\s*=\s*"
                rf"(?:new\s+\w+\s*\[\s*\]\s*)?\{{(?P<items>.*)\}}$"
            ),
            "array_declaration",
        ),
    )
    ASSIGNMENT_PATTERNS = ((TYPED_DECLARATION, True), (PLAIN_ASSIGNMENT, False))
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^for\s*\(\s*(?:final\s+)?[\w<>\[\]]+\s+(?P<item>{IDENT})\s*:\s*(?P<items>{IDENT})\s*\)$"
        ),
    )

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINTLN.match(statement)
        if match:
            return render_plus_concat(match.group("args"), variables)
        match = _PRINTF.match(statement)
        if match:
            return render_printf(match.group("args"), variables)
        return None
