"""CppEngine — C plus ``std::vector`` initializers and ``std::cout`` streams."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import render_stream
from ._base import IDENT
from .c import C_ARRAY, CEngine

logger = logging.getLogger(__name__)

_COUT = re.compile(r"^(?:std::)?cout\s*<<\s*(?P<chain>.*)$")


class CppEngine(CEngine):
    """Executes C++ snippets."""

    SCAFFOLDING = CEngine.SCAFFOLDING + (
        re.compile(r"^using\s+namespace\b"),
        re.compile(r"^(?:class|struct)\b"),
    )

    LIST_PATTERNS = (
        (
            re.compile(
                rf"^(?:const\s+)?(?:std::)?vector\s*<[^>]+>\s*(?P<name>{IDENT})\s*=?\s*\{{(?P<items>.*)\}}$"
            ),
            "vector_declaration",
        ),
        (C_ARRAY, "array_declaration"),
    )
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^for\s*\(\s*(?:const\s+)?[\w:<>]+\s*&?\s*(?P<item>{IDENT})\s*:\s*(?P<items>{IDENT})\s*\)$"
        ),
    )

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _COUT.match(statement)
        if match:
            return render_stream(match.group("chain"), variables)
        return super()._render_print(statement, variables)
