"""CEngine — ``int a[] = {..}`` arrays and ``printf``/``puts`` output."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import render_printf, render_value
from ._base import IDENT, PLAIN_ASSIGNMENT, TYPED_DECLARATION
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_PRINTF = re.compile(r"^printf\s*\((?P<args>.*)\)$")
_PUTS = re.compile(r"^puts\s*\((?P<arg>.*)\)$")

C_ARRAY = re.compile(
    rf"^(?:(?:const|static|unsigned|long|short)\s+)*\w+\s+(?P<name>{IDENT})\s*"
    rf"\[[^\]]*\]\s*=\s*\{{(?P<items>.*)\}}$"
)


class CEngine(BraceEngine):
    """Executes the body of ``main`` as top-level code."""

    SCAFFOLDING = (
        re.compile(r"^#"),
        re.compile(r"^(?:int|void)\s+main\s*\("),
        re.compile(r"^return\s+0$|^return\s+0;$"),
    )

    LIST_PATTERNS = ((C_ARRAY, "array_declaration"),)
    ASSIGNMENT_PATTERNS = ((TYPED_DECLARATION, True), (PLAIN_ASSIGNMENT, False))

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINTF.match(statement)
        if match:
            return render_printf(match.group("args"), variables)
        match = _PUTS.match(statement)
        if match:
            return render_value(match.group("arg"), variables)
        return None
