"""Dialect detection from surface patterns; first match wins."""

from __future__ import annotations

import logging
import re

from . import constants
from .messages import translate
from .run_types import DetectedDialect

logger = logging.getLogger(__name__)

# Ordered by how distinctive each dialect's tokens are.
_DIALECT_PATTERNS: tuple[tuple[str, str, re.Pattern, str | None], ...] = (
    (
        constants.DIALECT_JAVA,
        "Java",
        re.compile(r"\bpublic\s+class\b|\bpublic\s+static\s+void\s+main\b|System\.out\.println"),
        None,
    ),
    (
        constants.DIALECT_CSHARP,
        "C#",
        re.compile(r"\busing\s+System\b|Console\.Write(?:Line)?\b"),
        None,
    ),
    (
        constants.DIALECT_CPP,
        "C++",
        re.compile(r"#include\s+<iostream>|std::cout|std::string"),
        None,
    ),
    (
        constants.DIALECT_C,
        "C",
        re.compile(r"#include\s+<stdio\.h>|printf\(|scanf\("),
        None,
    ),
    (
        constants.DIALECT_GO,
        "Go",
        re.compile(r"\bpackage\s+main\b|\bfunc\s+main\b|fmt\.Print"),
        None,
    ),
    (
        constants.DIALECT_RUST,
        "Rust",
        re.compile(r"\bfn\s+main\b|\bprintln!|\blet\s+mut\b"),
        None,
    ),
    (
        constants.DIALECT_TYPESCRIPT,
        "TypeScript",
        re.compile(r"\binterface\b|\btype\s+\w+\s*=|:\s*(?:string|number|boolean|any|unknown)\b"),
        None,
    ),
    (
        constants.DIALECT_JAVASCRIPT,
        "JavaScript",
        re.compile(
            r"\bconsole\.log\b|=>|\bfunction\s+\w+\s*\(|\b(?:let|const|var)\s+[A-Za-z_$][\w$]*\s*="
        ),
        constants.RUNNABLE_JS,
    ),
    (
        constants.DIALECT_PYTHON,
        "Python",
        re.compile(r"def\s|\bimport\s|\bprint\(|\belif\b|\bNone\b|:\s*$", re.MULTILINE),
        None,
    ),
    (
        constants.DIALECT_SQL,
        "SQL",
        re.compile(r"\b(?:select|from|where|insert|update|delete)\b", re.IGNORECASE),
        None,
    ),
)


def detect_dialect(source: str, locale: str = constants.DEFAULT_LOCALE) -> DetectedDialect:
    """Classify *source*; always returns exactly one dialect."""
    sample = source.strip()
    if not sample:
        return DetectedDialect(constants.DIALECT_EMPTY, translate(locale, "no_code"))
    for dialect, label, pattern, runnable in _DIALECT_PATTERNS:
        if pattern.search(sample):
            logger.debug("Detected dialect %s", dialect)
            return DetectedDialect(dialect, label, runnable)
    return DetectedDialect(constants.DIALECT_UNKNOWN, translate(locale, "unknown_language"))
