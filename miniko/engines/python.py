"""PythonEngine — indentation engine with Python's print forms."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..render import (
    interpolate,
    render_brace_format,
    render_concat_arg,
    split_args,
    unquote,
)
from ._indented import IndentedEngine

logger = logging.getLogger(__name__)

_PRINT_CALL = re.compile(r"^print\s*\((?P<args>.*)\)$")
_KEYWORD_ARG = re.compile(r"^(?:sep|end|file|flush)\s*=")
_F_STRING = re.compile(r"""^[fF](?=["'])""")
_STR_FORMAT = re.compile(r"""^(?P<template>(["']).*\2)\.format\((?P<args>.*)\)$""")


class PythonEngine(IndentedEngine):
    """Runs Python snippets; ``print`` understands f-strings and ``str.format``."""

    COMMENT_MARKERS = ("#",)

    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        match = _PRINT_CALL.match(statement)
        if match is None:
            return None
        args = [arg for arg in split_args(match.group("args")) if not _KEYWORD_ARG.match(arg)]
        pieces = [self._render_arg(arg, variables) for arg in args]
        return " ".join(piece for piece in pieces if piece).strip()

    def _render_arg(self, arg: str, variables: Mapping[str, Any]) -> str:
        if _F_STRING.match(arg):
            return interpolate(unquote(arg[1:]) or "", variables)
        formatted = _STR_FORMAT.match(arg)
        if formatted:
            return render_brace_format(
                f"{formatted.group('template')}, {formatted.group('args')}", variables
            )
        return render_concat_arg(arg, variables)
