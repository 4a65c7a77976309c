"""CSharpEngine — ``foreach``, collection initializers and ``Console.Write*``."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import (
    interpolate,
    render_brace_format,
    render_concat_args,
    render_plus_concat,
    split_args,
    unquote,
)
from ._base import IDENT, PLAIN_ASSIGNMENT, TYPED_DECLARATION
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_WRITE = re.compile(r"^Console\.Write(?:Line)?\s*\((?P<args>.*)\)$")
_COMPOSITE = re.compile(r"\{\d+(?::[^}]*)?\}")


class CSharpEngine(BraceEngine):
    """Executes the body of ``Main`` as top-level code."""

    SCAFFOLDING = (
        re.compile(r"^using\b"),
        re.compile(r"^namespace\b"),
        re.compile(r"^(?:(?:public|private|internal|static|sealed|partial)\s+)*class\b"),
        re.compile(r"^(?:(?:public|private|static)\s+)*(?:void|int)\s+Main\s*\("),
    )

    LIST_PATTERNS = (
        (
            re.compile(
                rf"^(?:\w+\s*\[\s*\]|var)\s+(?P<name>{IDENT})\s*=\s*"
                rf"(?:new\s*\w*\s*\[\s*\]\s*)?\{{(?P<items>.*)\}}$"
            ),
            "array_declaration",
        ),
        (
            re.compile(
                rf"^(?:List\s*<\w+>|var)\s+(?P<name>{IDENT})\s*=\s*"
                rf"new\s+List\s*<\w+>\s*(?:\(\s*\))?\s*\{{(?P<items>.*)\}}$"
            ),
            "list_declaration",
        ),
    )
    ASSIGNMENT_PATTERNS = ((TYPED_DECLARATION, True), (PLAIN_ASSIGNMENT, False))
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^foreach\s*\(\s*[\w<>\[\]]+\s+(?P<item>{IDENT})\s+in\s+(?P<items>{IDENT})\s*\)$"
        ),
    )

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _WRITE.match(statement)
        if match is None:
            return None
        args = match.group("args")
        parts = split_args(args)
        if len(parts) == 1 and parts[0].startswith('$"'):
            return interpolate(unquote(parts[0][1:]) or "", variables)
        if parts and unquote(parts[0]) is not None and _COMPOSITE.search(parts[0]):
            return render_brace_format(args, variables)
        if len(parts) == 1:
            return render_plus_concat(parts[0], variables)
        return render_concat_args(args, variables)
