"""BaseEngine — statement recognition and loop drivers shared by every dialect."""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Sequence

from .. import constants
from ..evaluator import (
    apply_operator,
    coerce_number,
    evaluate_condition,
    evaluate_number,
    parse_binary,
    parse_numeric_list,
    resolve_number,
    split_top_level,
)
from ..messages import normalize_locale
from ..render import format_number, stringify_value, unquote
from ..run_types import TraceConfig
from ..state import RunState, TraceLimitReached
from ..trace_types import Operation, TraceEntry

logger = logging.getLogger(__name__)

IDENT = constants.IDENTIFIER_PATTERN

PLAIN_ASSIGNMENT = re.compile(rf"^(?P<name>{IDENT})\s*=(?!=)\s*(?P<expr>.+)$")
TYPED_DECLARATION = re.compile(
    r"^(?!(?:return|else|delete|throw|goto|case|new|yield|using|import)\b)"
    r"(?:(?:final|const|static|unsigned|signed|long|short|volatile|readonly)\s+)*"
    rf"[A-Za-z_][\w:<>,\[\]]*[\s*&]+(?P<name>{IDENT})(?:\s*=(?!=)\s*(?P<expr>.+))?$"
)

_COMPOUND = re.compile(rf"^(?P<name>{IDENT})\s*(?P<op>[+\-*/])=\s*(?P<expr>.+)$")
_POSTFIX_STEP = re.compile(rf"^(?P<name>{IDENT})\s*(?P<marker>\+\+|--)$")
_PREFIX_STEP = re.compile(rf"^(?P<marker>\+\+|--)\s*(?P<name>{IDENT})$")
_INDEX_READ = re.compile(rf"^{IDENT}\s*\[.+\]$")
_LOOP_VARIABLE = re.compile(rf"({IDENT})\s*:?=(?!=)")
_UPDATE_VARIABLE = re.compile(rf"^(?:\+\+|--)?\s*({IDENT})")

StatementHandler = Callable[[RunState, str, str], bool]
ControlHandler = Callable[[RunState, int, str], "int | None"]


def first_match(patterns: Iterable[re.Pattern], text: str) -> re.Match | None:
    for pattern in patterns:
        match = pattern.match(text)
        if match:
            return match
    return None


def loop_bound(value: Any) -> int:
    """Floor of a numeric loop bound; infinity and NaN count as 0."""
    if isinstance(value, float):
        return math.floor(value) if math.isfinite(value) else 0
    return int(value)


def bounded_range(start: int, stop: int, step: int, limit: int) -> tuple[range, int]:
    """``range(start, stop, step)`` cut to at most *limit* values, plus its full length."""
    if step > 0:
        total = max(0, (stop - start + step - 1) // step)
    else:
        total = max(0, (start - stop - step - 1) // -step)
    count = min(total, limit)
    return range(start, start + count * step, step), total


class BaseEngine(ABC):
    """Recursive block executor over one dialect's line records.

    Subclasses describe their dialect with the pattern tables below and fill
    ``_CONTROL_DISPATCH`` in ``__init__``; statement recognition runs through
    ``_STATEMENT_DISPATCH`` in fixed priority order, and a line no handler
    claims becomes an "Execution" entry with unchanged state.
    """

    # ── overridable dialect tables ───────────────────────────────

    COMMENT_MARKERS: tuple[str, ...] = ("//",)

    # (pattern with ``name``/``items`` groups, message key)
    LIST_PATTERNS: tuple[tuple[re.Pattern, str], ...] = ()

    # (pattern with ``name``/optional ``expr`` groups, is-declaration)
    ASSIGNMENT_PATTERNS: tuple[tuple[re.Pattern, bool], ...] = ((PLAIN_ASSIGNMENT, False),)

    RANGE_CALL_PATTERNS: tuple[re.Pattern, ...] = ()
    SPAN_PATTERNS: tuple[re.Pattern, ...] = ()
    FOR_EACH_PATTERNS: tuple[re.Pattern, ...] = ()
    THREE_CLAUSE_PATTERNS: tuple[re.Pattern, ...] = ()
    WHILE_PATTERNS: tuple[re.Pattern, ...] = ()

    # ── init ─────────────────────────────────────────────────────

    def __init__(self, config: TraceConfig | None = None):
        self._config = config or TraceConfig()
        self._STATEMENT_DISPATCH: list[StatementHandler] = [
            self._compound_assignment,
            self._step_assignment,
            self._list_declaration,
            self._assignment,
            self._print,
        ]
        self._CONTROL_DISPATCH: list[ControlHandler] = []

    # ── entry point ──────────────────────────────────────────────

    def build(self, source: str, locale: str = constants.DEFAULT_LOCALE) -> list[TraceEntry]:
        state = RunState(config=self._config, locale=normalize_locale(locale))
        self._prepare(state, source)
        try:
            self._run_block(state, 0, len(state.lines))
        except TraceLimitReached:
            logger.debug(
                "%s stopped after %d entries", type(self).__name__, len(state.trace)
            )
        return state.trace

    # ── dialect hooks ────────────────────────────────────────────

    @abstractmethod
    def _prepare(self, state: RunState, source: str) -> None:
        """Populate ``state.lines`` (and any block map) from *source*."""

    @abstractmethod
    def _line_text(self, state: RunState, index: int) -> str: ...

    @abstractmethod
    def _header_text(self, text: str) -> str:
        """Strip block punctuation (``:``, ``{``) from a control header."""

    @abstractmethod
    def _block_bounds(self, state: RunState, index: int) -> tuple[int, int, int]:
        """``(body_start, body_end, next_index)`` for the block opened on *index*."""

    @abstractmethod
    def _render_print(self, statement: str, variables: Mapping[str, Any]) -> str | None:
        """Rendered output line, or None when *statement* is not a print."""

    def _skip_line(self, text: str) -> bool:
        return False

    def _reduce(self, expr: str, variables: Mapping[str, Any]) -> Any:
        return None

    # ── block walk ───────────────────────────────────────────────

    def _run_block(self, state: RunState, start: int, end: int) -> None:
        index = start
        while index < end:
            text = self._line_text(state, index)
            if self._skip_line(text):
                index += 1
                continue
            next_index = self._run_control(state, index, self._header_text(text))
            if next_index is not None:
                index = next_index
                continue
            self._execute_line(state, text)
            index += 1

    def _run_control(self, state: RunState, index: int, header: str) -> int | None:
        for handler in self._CONTROL_DISPATCH:
            next_index = handler(state, index, header)
            if next_index is not None:
                return next_index
        return None

    def _execute_line(self, state: RunState, text: str) -> None:
        statement = text.strip().rstrip(";").strip()
        for handler in self._STATEMENT_DISPATCH:
            if handler(state, text, statement):
                return
        before = state.snapshot()
        state.record(text, state.t("execution"), before)

    # ── statements ───────────────────────────────────────────────

    def _compound_assignment(self, state: RunState, text: str, statement: str) -> bool:
        match = _COMPOUND.match(statement)
        if match is None:
            return False
        right = evaluate_number(match.group("expr"), state.variables)
        self._apply_compound(
            state, text, match.group("name"), match.group("op"), right, state.t("update_variable")
        )
        return True

    def _step_assignment(self, state: RunState, text: str, statement: str) -> bool:
        match = _POSTFIX_STEP.match(statement) or _PREFIX_STEP.match(statement)
        if match is None:
            return False
        increment = match.group("marker") == "++"
        self._apply_compound(
            state,
            text,
            match.group("name"),
            "+" if increment else "-",
            1,
            state.t("increment" if increment else "decrement"),
        )
        return True

    def _apply_compound(
        self, state: RunState, text: str, target: str, operator: str, right, action: str
    ) -> None:
        before = state.snapshot()
        left = coerce_number(state.variables.get(target))
        result = apply_operator(left, right, operator)
        state.variables[target] = result
        operation = Operation(
            left=format_number(left),
            operator=operator,
            right=format_number(right),
            result=result,
            target=target,
        )
        state.record(text, action, before, operation=operation)

    def _list_declaration(self, state: RunState, text: str, statement: str) -> bool:
        for pattern, key in self.LIST_PATTERNS:
            match = pattern.match(statement)
            if match:
                before = state.snapshot()
                state.variables[match.group("name")] = parse_numeric_list(
                    match.group("items"), state.variables
                )
                state.record(text, state.t(key), before)
                return True
        return False

    def _assignment(self, state: RunState, text: str, statement: str) -> bool:
        for pattern, declares in self.ASSIGNMENT_PATTERNS:
            match = pattern.match(statement)
            if match:
                self._bind(state, text, match.group("name"), match.group("expr"), declares)
                return True
        return False

    def _bind(
        self, state: RunState, text: str, name: str, expr: str | None, declares: bool
    ) -> None:
        before = state.snapshot()
        operation = None
        if expr is None:
            value, key = 0, "declaration"
        else:
            value, key, operation = self._evaluate_assignment(state, name, expr.strip(), declares)
        state.variables[name] = value
        state.record(text, state.t(key), before, operation=operation)

    def _evaluate_assignment(
        self, state: RunState, name: str, expr: str, declares: bool
    ) -> tuple[Any, str, Operation | None]:
        prefix = "declaration_" if declares else ""
        variables = state.variables
        literal = unquote(expr)
        if literal is not None:
            return literal, "string_assignment", None
        reduced = self._reduce(expr, variables)
        if reduced is not None:
            return reduced, "reduce_assignment", None
        if isinstance(variables.get(expr), (list, str)):
            current = variables[expr]
            return (list(current) if isinstance(current, list) else current), f"{prefix}assignment", None
        if _INDEX_READ.match(expr):
            return resolve_number(expr, variables), f"{prefix}assignment_from_array", None
        binary = parse_binary(expr, variables)
        if binary is not None:
            operation = Operation(
                left=format_number(binary.left),
                operator=binary.operator,
                right=format_number(binary.right),
                result=binary.result,
                target=name,
            )
            return binary.result, f"{prefix}assignment", operation
        return evaluate_number(expr, variables), f"{prefix}assignment", None

    def _print(self, state: RunState, text: str, statement: str) -> bool:
        rendered = self._render_print(statement, state.variables)
        if rendered is None:
            return False
        before = state.snapshot()
        state.outputs.append(rendered)
        state.record(text, state.t("output"), before, output_line=rendered)
        return True

    # ── control constructs ───────────────────────────────────────

    def _branch(
        self, state: RunState, index: int, condition: str, body_start: int, body_end: int
    ) -> bool:
        """Record the condition outcome and run the body when it holds."""
        before = state.snapshot()
        result = evaluate_condition(condition, state.variables)
        action = state.t("condition", result=state.t("true" if result else "false"))
        state.record(self._line_text(state, index), action, before)
        if result:
            self._run_block(state, body_start, body_end)
        return result

    def _for_range_call(self, state: RunState, index: int, header: str) -> int | None:
        match = first_match(self.RANGE_CALL_PATTERNS, header)
        if match is None:
            return None
        bounds = [
            loop_bound(evaluate_number(arg, state.variables))
            for arg in split_top_level(match.group("args"), ",")
            if arg
        ]
        if len(bounds) == 1:
            start, stop, step = 0, bounds[0], 1
        elif len(bounds) == 2:
            start, stop, step = bounds[0], bounds[1], 1
        elif len(bounds) >= 3 and bounds[2] != 0:
            start, stop, step = bounds[0], bounds[1], bounds[2]
        else:
            return self._iterate(state, index, match.group("item"), ())
        values, total = bounded_range(start, stop, step, state.config.max_engine_steps)
        return self._iterate(state, index, match.group("item"), values, total)

    def _for_span(self, state: RunState, index: int, header: str) -> int | None:
        match = first_match(self.SPAN_PATTERNS, header)
        if match is None:
            return None
        low = loop_bound(evaluate_number(match.group("low"), state.variables))
        high = loop_bound(evaluate_number(match.group("high"), state.variables))
        if match.group("inclusive"):
            high += 1
        values, total = bounded_range(low, high, 1, state.config.max_engine_steps)
        return self._iterate(state, index, match.group("item"), values, total)

    def _for_each(self, state: RunState, index: int, header: str) -> int | None:
        match = first_match(self.FOR_EACH_PATTERNS, header)
        if match is None:
            return None
        items = state.variables.get(match.group("items"))
        values = list(items) if isinstance(items, list) else []
        return self._iterate(state, index, match.group("item"), values)

    def _iterate(
        self,
        state: RunState,
        index: int,
        item: str,
        values: Sequence[Any],
        total: int | None = None,
    ) -> int:
        text = self._line_text(state, index)
        body_start, body_end, next_index = self._block_bounds(state, index)
        if total is None:
            total = len(values)
        for position, value in enumerate(values, start=1):
            before = state.snapshot()
            state.variables[item] = value
            action = state.t(
                "loop_progress",
                name=item,
                value=stringify_value(value),
                index=position,
                total=total,
            )
            state.record(text, action, before)
            self._run_block(state, body_start, body_end)
        return next_index

    def _three_clause(self, state: RunState, index: int, header: str) -> int | None:
        match = first_match(self.THREE_CLAUSE_PATTERNS, header)
        if match is None:
            return None
        init = match.group("init").strip()
        condition = match.group("cond").strip() or "true"
        update = match.group("update").strip()
        variable = _LOOP_VARIABLE.search(init) or _UPDATE_VARIABLE.match(update)
        body_start, body_end, next_index = self._block_bounds(state, index)
        self._apply_silently(state, init)
        self._guarded_loop(
            state,
            index,
            condition,
            body_start,
            body_end,
            variable.group(1) if variable else None,
            update,
        )
        return next_index

    def _while(self, state: RunState, index: int, header: str) -> int | None:
        match = first_match(self.WHILE_PATTERNS, header)
        if match is None:
            return None
        condition = (match.groupdict().get("cond") or "true").strip()
        body_start, body_end, next_index = self._block_bounds(state, index)
        self._guarded_loop(state, index, condition, body_start, body_end)
        return next_index

    def _guarded_loop(
        self,
        state: RunState,
        index: int,
        condition: str,
        body_start: int,
        body_end: int,
        variable: str | None = None,
        update: str = "",
    ) -> None:
        text = self._line_text(state, index)
        guard = state.config.loop_guard
        iteration = 0
        while iteration < guard and evaluate_condition(condition, state.variables):
            iteration += 1
            before = state.snapshot()
            if variable is not None:
                value = stringify_value(state.variables.get(variable, 0))
                action = state.t("loop_value", name=variable, value=value)
            else:
                action = state.t("loop_iteration", index=iteration)
            state.record(text, action, before)
            self._run_block(state, body_start, body_end)
            self._apply_silently(state, update)
        if iteration >= guard:
            logger.debug("Loop guard stopped %r after %d iterations", text, iteration)

    def _apply_silently(self, state: RunState, clause: str) -> None:
        with state.silenced():
            for part in split_top_level(clause, ","):
                if part:
                    self._execute_line(state, part)
