"""TypeScriptEngine — JavaScript plus type-only declarations to skip."""

from __future__ import annotations

import logging
import re

from .javascript import JavaScriptEngine

logger = logging.getLogger(__name__)


class TypeScriptEngine(JavaScriptEngine):
    """Executes TypeScript snippets; annotations are ignored by the binding patterns."""

    SCAFFOLDING = JavaScriptEngine.SCAFFOLDING + (
        re.compile(r"^(?:export\s+)?(?:interface|type|declare)\b"),
        re.compile(r"^(?:export\s+)?enum\b"),
    )
