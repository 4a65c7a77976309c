"""Expression evaluation over a variable store.

Every resolver here is total: anything that cannot be understood resolves to
0 (numbers), ``None`` (lists / binary splits) or ``False`` (conditions).
"""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from . import constants
from .trace_types import Number

_NUMERIC_LITERAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")
_LENGTH_PROPERTY = re.compile(rf"^({constants.IDENTIFIER_PATTERN})\.(?:length|Length|len\(\)|Count)$")
_LEN_CALL = re.compile(r"^len\((.+)\)$")
_INDEX_READ = re.compile(rf"^({constants.IDENTIFIER_PATTERN})\[(.+)\]$")
_LIST_LITERAL = re.compile(r"^\[(.*)\]$")
_CONDITION = re.compile(r"^(.+?)\s*(==|!=|>=|<=|>|<)\s*(.+)$")

# Ints beyond this no longer fit a double and saturate to infinity.
_LARGEST_FLOAT_INT = int(sys.float_info.max)

_OPENERS = "([{"
_CLOSERS = ")]}"
_QUOTES = "'\"`"


def normalize_number(value: Number) -> Number:
    """Collapse integral floats to ints so ``60.0`` renders as ``60``.

    Ints too large for a double become signed infinity.
    """
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int) and abs(value) > _LARGEST_FLOAT_INT:
        return math.inf if value > 0 else -math.inf
    return value


def parse_number_literal(token: str) -> Number | None:
    """Parse a numeric literal, or return None when *token* is not one."""
    text = token.strip()
    if not _NUMERIC_LITERAL.match(text):
        return None
    if _INTEGER_LITERAL.match(text) and len(text) <= constants.MAX_INTEGER_LITERAL_DIGITS:
        return normalize_number(int(text))
    return normalize_number(float(text))


def coerce_number(value: Any) -> Number:
    """Numeric view of a stored value: numbers pass, strings parse, rest is 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        parsed = parse_number_literal(value) if value.strip() else 0
        return parsed if parsed is not None else 0
    return 0


def _index_into(items: list, index: Number) -> Number:
    if not math.isfinite(index):
        return 0
    position = math.floor(index)
    if position < 0 or position >= len(items):
        return 0
    return coerce_number(items[position])


def resolve_number(token: str, variables: Mapping[str, Any]) -> Number:
    """Resolve *token* to a number; unresolvable input is 0."""
    text = token.strip()
    if not text:
        return 0

    literal = parse_number_literal(text)
    if literal is not None:
        return literal

    length_match = _LENGTH_PROPERTY.match(text)
    if length_match:
        value = variables.get(length_match.group(1))
        if isinstance(value, (list, str)):
            return len(value)

    len_match = _LEN_CALL.match(text)
    if len_match:
        value = variables.get(len_match.group(1).strip())
        if isinstance(value, (list, str)):
            return len(value)

    index_match = _INDEX_READ.match(text)
    if index_match:
        value = variables.get(index_match.group(1))
        if isinstance(value, list):
            return _index_into(value, evaluate_number(index_match.group(2), variables))

    return coerce_number(variables.get(text))


def parse_numeric_list(content: str, variables: Mapping[str, Any]) -> list[Number]:
    """Resolve a bare ``a, b, c`` item list; empty content is an empty list."""
    if not content.strip():
        return []
    return [resolve_number(part, variables) for part in split_top_level(content, ",")]


def resolve_list(expr: str, variables: Mapping[str, Any]) -> list[Number] | None:
    """Recognise a bracket literal ``[a, b, c]``; anything else is None."""
    match = _LIST_LITERAL.match(expr.strip())
    if not match:
        return None
    return parse_numeric_list(match.group(1), variables)


def split_top_level(text: str, separator: str) -> list[str]:
    """Split *text* on *separator* outside quotes and brackets."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote = ""
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            if char == quote:
                quote = ""
        elif char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif depth == 0 and text.startswith(separator, i):
            parts.append("".join(current).strip())
            current = []
            i += len(separator)
            continue
        current.append(char)
        i += 1
    parts.append("".join(current).strip())
    return parts


class Operators:
    """Arithmetic and comparison tables shared by every engine."""

    ARITHMETIC: dict[str, Callable[[Number, Number], Number]] = {
        "+": lambda a, b: a + b,
        "-": lambda a, b: a - b,
        "*": lambda a, b: a * b,
        "/": lambda a, b: a / b if b != 0 else a,
    }

    COMPARISON: dict[str, Callable[[Number, Number], bool]] = {
        "==": lambda a, b: a == b,
        "!=": lambda a, b: a != b,
        ">": lambda a, b: a > b,
        "<": lambda a, b: a < b,
        ">=": lambda a, b: a >= b,
        "<=": lambda a, b: a <= b,
    }

    @classmethod
    def apply(cls, left: Number, right: Number, operator: str) -> Number:
        fn = cls.ARITHMETIC.get(operator)
        if fn is None:
            return left
        try:
            result = fn(left, right)
        except OverflowError:
            negative = (left < 0) != (right < 0) if operator in "*/" else left < 0
            return -math.inf if negative else math.inf
        return normalize_number(result)

    @classmethod
    def compare(cls, left: Number, right: Number, operator: str) -> bool:
        fn = cls.COMPARISON.get(operator)
        if fn is None:
            return False
        return fn(left, right)


def apply_operator(left: Number, right: Number, operator: str) -> Number:
    """Apply one of ``+ - * /``; dividing by zero returns *left* unchanged."""
    return Operators.apply(left, right, operator)


def compare(left: Number, right: Number, operator: str) -> bool:
    return Operators.compare(left, right, operator)


@dataclass(frozen=True)
class BinaryResult:
    """Outcome of a single-operator arithmetic expression."""

    left: Number
    operator: str
    right: Number
    result: Number


def _find_operator(expr: str) -> int:
    """Index of the first top-level arithmetic operator, or -1."""
    depth = 0
    quote = ""
    previous = ""
    for i, char in enumerate(expr):
        if quote:
            if char == quote:
                quote = ""
            previous = char
            continue
        if char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif depth == 0 and char in constants.ARITHMETIC_OPERATORS:
            # A sign at the start or right after another operator is unary.
            if i > 0 and previous not in constants.ARITHMETIC_OPERATORS + ("(", ","):
                return i
        if not char.isspace():
            previous = char
    return -1


def parse_binary(expr: str, variables: Mapping[str, Any]) -> BinaryResult | None:
    """Split *expr* on its first top-level operator and compute it."""
    text = expr.strip()
    if parse_number_literal(text) is not None:
        return None
    position = _find_operator(text)
    if position <= 0 or position == len(text) - 1:
        return None
    left_raw = text[:position].strip()
    right_raw = text[position + 1 :].strip()
    if not left_raw or not right_raw:
        return None
    operator = text[position]
    left = resolve_number(left_raw, variables)
    right = resolve_number(right_raw, variables)
    return BinaryResult(
        left=left,
        operator=operator,
        right=right,
        result=apply_operator(left, right, operator),
    )


def evaluate_number(expr: str, variables: Mapping[str, Any]) -> Number:
    """Binary arithmetic when *expr* has an operator, plain resolution otherwise."""
    operation = parse_binary(expr, variables)
    if operation is not None:
        return operation.result
    return resolve_number(_strip_parens(expr), variables)


def _strip_parens(expr: str) -> str:
    text = expr.strip()
    while text.startswith("(") and text.endswith(")") and _balanced(text[1:-1]):
        text = text[1:-1].strip()
    return text


def _balanced(text: str) -> bool:
    depth = 0
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def evaluate_condition(condition: str, variables: Mapping[str, Any]) -> bool:
    """Evaluate ``left <op> right`` numerically; unmatched syntax is False."""
    text = _strip_parens(condition)
    if text in ("true", "True"):
        return True
    if text in ("false", "False"):
        return False
    match = _CONDITION.match(text)
    if not match:
        return False
    left = evaluate_number(match.group(1), variables)
    right = evaluate_number(match.group(3), variables)
    return compare(left, right, match.group(2))
