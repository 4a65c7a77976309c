"""Output rendering — turns print-like statements into display lines.

Each dialect's print call is decomposed into quote-aware arguments, every
argument is rendered to text, and the pieces are composed in one of the
styles below (placeholder, concatenation, stream insertion, interpolation).
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from . import constants
from .evaluator import (
    coerce_number,
    evaluate_number,
    normalize_number,
    resolve_list,
    split_top_level,
)

_QUOTED = re.compile(r"""^(["'`])(.*)\1$""", re.DOTALL)
_PRINTF_PLACEHOLDER = re.compile(r"%(\.\d{1,2})?[dsfiuvc]")
_BRACE_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")
_TEMPLATE_SPAN = re.compile(r"\$\{([^}]+)\}")
_STREAM_TERMINATORS = frozenset({"std::endl", "endl", '"\\n"', "'\\n'"})


# ── value stringification ────────────────────────────────────────


def format_number(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = normalize_number(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def stringify_value(value: Any) -> str:
    """Display text for a stored value; long lists are elided."""
    if isinstance(value, list):
        items = [format_number(item) for item in value]
        if len(items) <= constants.LIST_PREVIEW_LIMIT:
            return f"[{', '.join(items)}]"
        head = ", ".join(items[: constants.LIST_PREVIEW_HEAD])
        tail = ", ".join(items[-constants.LIST_PREVIEW_TAIL :])
        return f"[{head}, ..., {tail}] ({len(items)} items)"
    return format_number(value)


def format_state(state: Mapping[str, Any]) -> str:
    if not state:
        return "{}"
    body = ", ".join(f"{key}: {stringify_value(value)}" for key, value in state.items())
    return f"{{ {body} }}"


# ── argument splitting ───────────────────────────────────────────


def split_args(text: str) -> list[str]:
    """Split call arguments on top-level commas, ignoring empty trailers."""
    if not text.strip():
        return []
    return [part for part in split_top_level(text, ",") if part]


def split_plus(text: str) -> list[str]:
    return [part for part in split_top_level(text, "+") if part]


def split_stream(text: str) -> list[str]:
    return [part for part in split_top_level(text, "<<") if part]


def unquote(expr: str) -> str | None:
    """Inner text of a quoted literal, or None when *expr* is not one."""
    match = _QUOTED.match(expr.strip())
    if not match:
        return None
    quote, inner = match.group(1), match.group(2)
    if re.search(rf"(?<!\\){re.escape(quote)}", inner):
        return None
    return inner


def _is_quoted(expr: str) -> bool:
    return unquote(expr) is not None


# ── argument rendering ───────────────────────────────────────────


def render_value(expr: str, variables: Mapping[str, Any]) -> str:
    """Render one argument: literal text, list literal, variable or number."""
    text = expr.strip()
    literal = unquote(text)
    if literal is not None:
        return literal
    items = resolve_list(text, variables)
    if items is not None:
        return stringify_value(items)
    if text in variables:
        return stringify_value(variables[text])
    return format_number(evaluate_number(text, variables))


def render_concat_arg(expr: str, variables: Mapping[str, Any]) -> str:
    """Render an argument that may be a ``"a" + b`` concatenation."""
    parts = split_plus(expr)
    if len(parts) > 1 and any(_is_quoted(part) for part in parts):
        return "".join(render_value(part, variables) for part in parts)
    return render_value(expr, variables)


# ── composition styles ───────────────────────────────────────────


def render_concat_args(args: str, variables: Mapping[str, Any]) -> str:
    """Concatenation style: rendered arguments joined by one space."""
    rendered = [render_concat_arg(part, variables) for part in split_args(args)]
    return " ".join(piece for piece in rendered if piece).strip()


def _format_placeholder(placeholder: re.Match, expr: str, variables: Mapping[str, Any]) -> str:
    precision = placeholder.group(1)
    if precision and not _is_quoted(expr):
        value = coerce_number(evaluate_number(expr, variables))
        if not math.isfinite(value):
            return format_number(value)
        return f"{value:.{int(precision[1:])}f}"
    return render_value(expr, variables)


def render_printf(args: str, variables: Mapping[str, Any]) -> str:
    """Placeholder style: ``%d``-like markers are filled left to right."""
    parts = split_args(args)
    if not parts:
        return ""
    template = render_value(parts[0], variables)
    if "%" not in template:
        rest = [render_value(part, variables) for part in parts[1:]]
        return " ".join([template, *rest]).replace("\\n", "").strip()
    output = template
    for part in parts[1:]:
        match = _PRINTF_PLACEHOLDER.search(output)
        if match is None:
            break
        replacement = _format_placeholder(match, part, variables)
        output = output[: match.start()] + replacement + output[match.end() :]
    return output.replace("%%", "%").replace("\\n", "").strip()


def render_brace_format(args: str, variables: Mapping[str, Any]) -> str:
    """``{}`` / ``{0}`` / ``{name}`` placeholders (Rust macros, C# composite)."""
    parts = split_args(args)
    if not parts:
        return ""
    template = unquote(parts[0])
    if template is None:
        return render_concat_args(args, variables)
    positional = parts[1:]
    cursor = 0

    def substitute(match: re.Match) -> str:
        nonlocal cursor
        key = match.group(1).split(":", 1)[0].strip()
        if key.isdigit():
            index = int(key) if len(key) <= 6 else len(positional)
            return render_value(positional[index], variables) if index < len(positional) else match.group(0)
        if key:
            return render_value(key, variables)
        if cursor >= len(positional):
            return match.group(0)
        rendered = render_value(positional[cursor], variables)
        cursor += 1
        return rendered

    return _BRACE_PLACEHOLDER.sub(substitute, template).replace("\\n", "").strip()


def render_stream(expr: str, variables: Mapping[str, Any]) -> str:
    """Stream-insertion style: ``a << b << std::endl`` pieces concatenated."""
    pieces = [part for part in split_stream(expr) if part not in _STREAM_TERMINATORS]
    return "".join(render_value(part, variables) for part in pieces).replace("\\n", "").strip()


def render_plus_concat(expr: str, variables: Mapping[str, Any]) -> str:
    """Java ``println`` argument: string pieces concatenated, pure arithmetic evaluated."""
    parts = split_plus(expr)
    if not any(_is_quoted(part) for part in parts):
        return render_value(expr, variables)
    return "".join(render_value(part, variables) for part in parts)


def interpolate(template: str, variables: Mapping[str, Any], pattern: re.Pattern = _BRACE_PLACEHOLDER) -> str:
    """Interpolated-string style: substitute ``{expr}`` spans in place."""

    def substitute(match: re.Match) -> str:
        expr = match.group(1).split(":", 1)[0].strip()
        if expr in variables:
            return stringify_value(variables[expr])
        return format_number(evaluate_number(expr, variables))

    return pattern.sub(substitute, template)


def interpolate_template_literal(template: str, variables: Mapping[str, Any]) -> str:
    """JavaScript template literal ``${expr}`` spans."""
    return interpolate(template, variables, _TEMPLATE_SPAN)
