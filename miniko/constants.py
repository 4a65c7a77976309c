"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

DIALECT_EMPTY = "empty"
DIALECT_UNKNOWN = "unknown"
DIALECT_PYTHON = "python"
DIALECT_TYPESCRIPT = "typescript"
DIALECT_JAVASCRIPT = "javascript"
DIALECT_JAVA = "java"
DIALECT_CSHARP = "csharp"
DIALECT_CPP = "cpp"
DIALECT_C = "c"
DIALECT_GO = "go"
DIALECT_RUST = "rust"
DIALECT_SQL = "sql"

INDENTED_DIALECTS: tuple[str, ...] = (
    DIALECT_PYTHON,
    DIALECT_SQL,
    DIALECT_UNKNOWN,
)

BRACE_DIALECTS: tuple[str, ...] = (
    DIALECT_TYPESCRIPT,
    DIALECT_JAVASCRIPT,
    DIALECT_JAVA,
    DIALECT_C,
    DIALECT_CPP,
    DIALECT_CSHARP,
    DIALECT_GO,
    DIALECT_RUST,
)

RUNNABLE_JS = "js"

LOCALE_EN = "en"
LOCALE_ES = "es"
DEFAULT_LOCALE = LOCALE_EN
SUPPORTED_LOCALES: tuple[str, ...] = (LOCALE_EN, LOCALE_ES)

DEFAULT_MAX_STEPS = 15
DEFAULT_LOOP_GUARD = 100
DEFAULT_MAX_ENGINE_STEPS = 10_000

# Longest integer literal parsed exactly; longer ones exceed a double anyway.
MAX_INTEGER_LITERAL_DIGITS = 310

LIST_PREVIEW_LIMIT = 8
LIST_PREVIEW_HEAD = 3
LIST_PREVIEW_TAIL = 2

ARITHMETIC_OPERATORS: tuple[str, ...] = ("+", "-", "*", "/")
COMPARISON_OPERATORS: tuple[str, ...] = ("==", "!=", ">=", "<=", ">", "<")

IDENTIFIER_PATTERN = r"[A-Za-z_]\w*"

BRACE_ONLY_LINES: frozenset[str] = frozenset({"{", "}", "};"})

DEFAULT_SANDBOX_TIMEOUT_MS = 1200
DEFAULT_LLM_TIMEOUT_SECONDS = 30.0
