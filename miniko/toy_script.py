"""Toy script interpreter — a program-counter engine over a tiny instruction set.

Instructions, one per line::

    set NAME VALUE          bind a number
    add|sub|mul|div NAME V  update NAME in place (div by 0 keeps NAME)
    print VALUE             append VALUE to the output log
    if A OP B ... endif     run the body only when the comparison holds
    loop COUNT ... end      run the body COUNT times

Blank lines and lines starting with ``#`` are skipped without a trace entry.
``if``/``endif`` and ``loop``/``end`` pairs are matched once, up front, into a
:class:`JumpMap`; unmatched closers are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .evaluator import apply_operator, compare, parse_number_literal
from .render import format_number
from .run_types import TraceConfig
from .trace_types import Number, ToyRunResult, ToyTraceEntry

logger = logging.getLogger(__name__)

_MATH_OPERATORS: dict[str, str] = {"add": "+", "sub": "-", "mul": "*", "div": "/"}


@dataclass(frozen=True)
class JumpMap:
    """Matched construct boundaries, keyed by line index."""

    if_to_end: dict[int, int] = field(default_factory=dict)
    loop_to_end: dict[int, int] = field(default_factory=dict)
    end_to_loop: dict[int, int] = field(default_factory=dict)


def build_jump_map(lines: list[str]) -> JumpMap:
    """One linear scan with an ``if`` stack and a ``loop`` stack."""
    jumps = JumpMap()
    if_stack: list[int] = []
    loop_stack: list[int] = []
    for index, raw in enumerate(lines):
        line = raw.strip()
        if line.startswith("if "):
            if_stack.append(index)
        elif line == "endif":
            if if_stack:
                jumps.if_to_end[if_stack.pop()] = index
            else:
                logger.debug("Ignoring unmatched endif on line %d", index)
        elif line.startswith("loop "):
            loop_stack.append(index)
        elif line == "end":
            if loop_stack:
                start = loop_stack.pop()
                jumps.loop_to_end[start] = index
                jumps.end_to_loop[index] = start
            else:
                logger.debug("Ignoring unmatched end on line %d", index)
    return jumps


def tokenize(line: str) -> list[str]:
    return line.split()


def resolve_value(token: str | None, variables: dict[str, Number]) -> Number:
    """Numeric literal, else a bound variable, else 0."""
    if not token:
        return 0
    literal = parse_number_literal(token)
    if literal is not None:
        return literal
    return variables.get(token, 0)


def evaluate_condition(tokens: list[str], variables: dict[str, Number]) -> bool:
    """``A OP B`` from the tokens after ``if``; an unknown operator is False."""
    padded = tokens + [""] * (3 - len(tokens))
    left = resolve_value(padded[0], variables)
    right = resolve_value(padded[2], variables)
    return compare(left, right, padded[1])


@dataclass
class _ToyRun:
    lines: list[str]
    jumps: JumpMap
    variables: dict[str, Number] = field(default_factory=dict)
    output: list[str] = field(default_factory=list)
    loop_counters: dict[int, Number] = field(default_factory=dict)


class ToyScriptInterpreter:
    """Runs toy scripts; every executed instruction yields one trace entry."""

    def __init__(self, config: TraceConfig | None = None):
        self._config = config or TraceConfig()
        self._COMMAND_DISPATCH: dict[str, Callable[[_ToyRun, int, list[str]], tuple[str, int]]] = {
            "set": self._set,
            "add": self._math,
            "sub": self._math,
            "mul": self._math,
            "div": self._math,
            "print": self._print,
            "if": self._if,
            "endif": self._endif,
            "loop": self._loop,
            "end": self._end,
        }

    def run(self, source: str) -> ToyRunResult:
        lines = source.split("\n")
        run = _ToyRun(lines=lines, jumps=build_jump_map(lines))
        result = ToyRunResult(output=run.output)
        pc = 0
        while pc < len(lines):
            line = lines[pc].strip()
            if not line or line.startswith("#"):
                pc += 1
                continue
            if len(result.trace) >= self._config.max_engine_steps:
                logger.debug("Toy script stopped after %d entries", len(result.trace))
                break
            tokens = tokenize(line)
            handler = self._COMMAND_DISPATCH.get(tokens[0], self._unknown)
            note, pc = handler(run, pc, tokens)
            result.trace.append(
                ToyTraceEntry(
                    step=len(result.trace) + 1,
                    line=line,
                    note=note,
                    variables=dict(run.variables),
                )
            )
        return result

    # ── instructions ─────────────────────────────────────────────

    def _set(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        name = tokens[1] if len(tokens) > 1 else ""
        value = resolve_value(tokens[2] if len(tokens) > 2 else None, run.variables)
        run.variables[name] = value
        return f"set {name} = {format_number(value)}", pc + 1

    def _math(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        command = tokens[0]
        name = tokens[1] if len(tokens) > 1 else ""
        value = resolve_value(tokens[2] if len(tokens) > 2 else None, run.variables)
        base = run.variables.get(name, 0)
        run.variables[name] = apply_operator(base, value, _MATH_OPERATORS[command])
        return f"{command} {name} {format_number(value)}", pc + 1

    def _print(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        value = format_number(resolve_value(tokens[1] if len(tokens) > 1 else None, run.variables))
        run.output.append(value)
        return f"print {value}", pc + 1

    def _if(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        if evaluate_condition(tokens[1:], run.variables):
            return "enter if", pc + 1
        target = run.jumps.if_to_end.get(pc)
        return "skip if", (target + 1 if target is not None else pc + 1)

    def _endif(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        return "end if", pc + 1

    def _loop(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        count = max(0, resolve_value(tokens[1] if len(tokens) > 1 else None, run.variables))
        remaining = run.loop_counters.setdefault(pc, count)
        if remaining <= 0:
            run.loop_counters.pop(pc, None)
            target = run.jumps.loop_to_end.get(pc)
            return "skip loop", (target + 1 if target is not None else pc + 1)
        return f"loop x{format_number(remaining)}", pc + 1

    def _end(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        loop_start = run.jumps.end_to_loop.get(pc)
        if loop_start is None:
            return "unmatched end", pc + 1
        remaining = run.loop_counters.get(loop_start, 0) - 1
        if remaining <= 0:
            run.loop_counters.pop(loop_start, None)
            return "end loop", pc + 1
        run.loop_counters[loop_start] = remaining
        return f"repeat loop ({format_number(remaining)} left)", loop_start + 1

    def _unknown(self, run: _ToyRun, pc: int, tokens: list[str]) -> tuple[str, int]:
        return "unknown command", pc + 1


def run_toy_script(source: str, config: TraceConfig | None = None) -> ToyRunResult:
    """Run *source* and return its output log and trace."""
    return ToyScriptInterpreter(config).run(source)
