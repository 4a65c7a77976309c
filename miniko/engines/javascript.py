"""JavaScriptEngine — ``let``/``const`` bindings, ``for...of`` and ``console.log``."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..evaluator import coerce_number, evaluate_number, normalize_number
from ..render import interpolate_template_literal, render_concat_arg, split_args, unquote
from ._base import IDENT, PLAIN_ASSIGNMENT
from ._brace import BraceEngine

logger = logging.getLogger(__name__)

_CONSOLE_LOG = re.compile(r"^console\.(?:log|info)\s*\((?P<args>.*)\)$")
_REDUCE = re.compile(rf"^(?P<items>{IDENT})\.reduce\(.+,\s*(?P<init>[^,()]+)\)$")

# Optional TypeScript annotation between the name and ``=``.
_ANNOTATION = r"(?:\s*:\s*[^=]+?)?"


class JavaScriptEngine(BraceEngine):
    """Executes JavaScript snippets."""

    SCAFFOLDING = (re.compile(r"""^["']use strict["']$"""),)

    LIST_PATTERNS = (
        (
            re.compile(
                rf"^(?:(?:const|let|var)\s+)?(?P<name>{IDENT}){_ANNOTATION}\s*=\s*\[(?P<items>.*)\]$"
            ),
            "list_assignment",
        ),
    )
    ASSIGNMENT_PATTERNS = (
        (
            re.compile(
                rf"^(?:const|let|var)\s+(?P<name>{IDENT}){_ANNOTATION}(?:\s*=(?!=)\s*(?P<expr>.+))?$"
            ),
            False,
        ),
        (PLAIN_ASSIGNMENT, False),
    )
    FOR_EACH_PATTERNS = (
        re.compile(
            rf"^for\s*\(\s*(?:const|let|var)\s+(?P<item>{IDENT})\s+of\s+(?P<items>{IDENT})\s*\)$"
        ),
    )

    def _reduce(self, expr: str, variables: Mapping[str, Any]) -> Any:
        match = _REDUCE.match(expr)
        if match is None:
            return None
        items = variables.get(match.group("items"))
        total = evaluate_number(match.group("init"), variables)
        for item in items if isinstance(items, list) else []:
            total += coerce_number(item)
        return normalize_number(total)

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _CONSOLE_LOG.match(statement)
        if match is None:
            return None
        pieces = [self._render_arg(arg, variables) for arg in split_args(match.group("args"))]
        return " ".join(piece for piece in pieces if piece).strip()

    def _render_arg(self, arg: str, variables: Mapping[str, Any]) -> str:
        if arg.startswith("`"):
            template = unquote(arg)
            if template is not None:
                return interpolate_template_literal(template, variables)
        return render_concat_arg(arg, variables)
