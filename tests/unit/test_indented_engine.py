"""Tests for the indentation-driven engines (Python and the generic fallback)."""

from __future__ import annotations

import math

import pytest

from miniko.engines import get_engine
from miniko.engines._base import bounded_range, loop_bound
from miniko.engines._indented import IndentedEngine
from miniko.engines.python import PythonEngine
from miniko.run_types import TraceConfig


def _trace(source: str, dialect: str = "python", locale: str = "en"):
    return get_engine(dialect).build(source, locale)


def _outputs(trace) -> list[str]:
    return trace[-1].outputs_after if trace else []


SUM_LOOP = """\
nums = [10, 20, 30]
suma = 0
for num in nums:
    suma += num
print(suma)
"""


class TestSumLoop:
    def test_output(self):
        assert _outputs(_trace(SUM_LOOP)) == ["60"]

    def test_loop_entries(self):
        trace = _trace(SUM_LOOP)
        loop_entries = [entry for entry in trace if entry.source_line == "for num in nums:"]
        assert [entry.action for entry in loop_entries] == [
            "Loop num = 10 (1/3)",
            "Loop num = 20 (2/3)",
            "Loop num = 30 (3/3)",
        ]
        assert [entry.after["num"] for entry in loop_entries] == [10, 20, 30]

    def test_actions(self):
        actions = [entry.action for entry in _trace(SUM_LOOP)]
        assert actions[0] == "List assignment"
        assert actions[1] == "Assignment"
        assert actions[3] == "Update variable"
        assert actions[-1] == "Output"
        assert len(actions) == 9

    def test_update_operation(self):
        update = _trace(SUM_LOOP)[3]
        assert update.operation is not None
        assert (update.operation.left, update.operation.operator, update.operation.right) == ("0", "+", "10")
        assert update.operation.result == 10
        assert update.operation.target == "suma"

    def test_steps_are_numbered_from_one(self):
        trace = _trace(SUM_LOOP)
        assert [entry.step for entry in trace] == list(range(1, len(trace) + 1))

    def test_spanish_notes(self):
        trace = _trace(SUM_LOOP, locale="es")
        assert trace[2].action == "Bucle num = 10 (1/3)"
        assert trace[-1].action == "Salida"


class TestConditionals:
    def test_elif_chain(self):
        source = """\
x = 5
if x > 10:
    print("big")
elif x > 3:
    print("medium")
else:
    print("small")
"""
        trace = _trace(source)
        assert [entry.action for entry in trace] == [
            "Assignment",
            "Condition: false",
            "Condition: true",
            "Output",
        ]
        assert _outputs(trace) == ["medium"]

    def test_else_branch(self):
        source = "x = 1\nif x > 3:\n    y = 1\nelse:\n    y = 2\nprint(y)\n"
        trace = _trace(source)
        assert trace[1].action == "Condition: false"
        assert _outputs(trace) == ["2"]

    def test_taken_branch_skips_else(self):
        source = "x = 5\nif x > 3:\n    y = 1\nelse:\n    y = 2\n"
        trace = _trace(source)
        assert [entry.action for entry in trace] == ["Assignment", "Condition: true", "Assignment"]
        assert trace[-1].after["y"] == 1

    def test_unparseable_condition_is_false(self):
        trace = _trace("if ready:\n    x = 1\n")
        assert [entry.action for entry in trace] == ["Condition: false"]


class TestRangeLoops:
    def _loop_values(self, header: str) -> list:
        trace = _trace(f"{header}\n    pass\n")
        return [entry.after["i"] for entry in trace if entry.source_line == header]

    def test_single_bound(self):
        assert self._loop_values("for i in range(3):") == [0, 1, 2]

    def test_start_and_stop(self):
        assert self._loop_values("for i in range(2, 5):") == [2, 3, 4]

    def test_step(self):
        assert self._loop_values("for i in range(1, 7, 2):") == [1, 3, 5]

    def test_negative_step(self):
        assert self._loop_values("for i in range(5, 0, -2):") == [5, 3, 1]

    def test_zero_step_is_empty(self):
        assert self._loop_values("for i in range(0, 5, 0):") == []

    def test_body_statement_is_execution(self):
        trace = _trace("for i in range(1):\n    pass\n")
        assert [entry.action for entry in trace] == ["Loop i = 0 (1/1)", "Execution"]

    def test_huge_bound_stops_at_engine_limit(self):
        engine = PythonEngine(TraceConfig(max_engine_steps=5))
        trace = engine.build("for i in range(1e20):\n    pass\n")
        assert len(trace) == 5
        assert trace[0].action == f"Loop i = 0 (1/{10**20})"
        assert trace[2].after["i"] == 1

    def test_infinite_bound_runs_zero_times(self):
        trace = _trace("x = 1e308 * 10\nfor i in range(x):\n    print(i)\n")
        assert len(trace) == 1
        assert trace[0].after["x"] == math.inf
        assert _outputs(trace) == []


class TestLoopBounds:
    def test_loop_bound(self):
        assert loop_bound(3) == 3
        assert loop_bound(2.7) == 2
        assert loop_bound(-0.5) == -1
        assert loop_bound(math.inf) == 0
        assert loop_bound(math.nan) == 0

    @pytest.mark.parametrize(
        "start, stop, step, expected",
        [
            (0, 3, 1, [0, 1, 2]),
            (1, 7, 2, [1, 3, 5]),
            (5, 0, -2, [5, 3, 1]),
            (3, 0, 1, []),
        ],
    )
    def test_small_ranges_are_whole(self, start, stop, step, expected):
        values, total = bounded_range(start, stop, step, limit=100)
        assert list(values) == expected
        assert total == len(expected)

    def test_long_range_is_cut_to_limit(self):
        values, total = bounded_range(0, 10**20, 1, limit=4)
        assert list(values) == [0, 1, 2, 3]
        assert total == 10**20

    def test_long_descending_range(self):
        values, total = bounded_range(0, -(10**30), -3, limit=2)
        assert list(values) == [0, -3]
        assert total == -(-(10**30) // 3)


class TestArithmeticOverflow:
    def test_repeated_squaring_saturates(self):
        source = "x = 10\n" + "x *= x\n" * 10 + "y = x / 3\nprint(y)\n"
        trace = _trace(source)
        assert trace[-2].after["y"] == math.inf
        assert _outputs(trace) == ["Infinity"]

    def test_print_after_many_squarings(self):
        trace = _trace("x = 10\n" + "x *= x\n" * 13 + "print(x)\n")
        assert _outputs(trace) == ["Infinity"]

    @pytest.mark.parametrize(
        "source",
        [
            "for i in range(1e20):\n    print(i)\n",
            "for i in range(-1e20, 1e20, 1e19):\n    print(i)\n",
            "x = 1e308 * 10\nfor i in range(x):\n    print(i)\n",
            "x = 0 - 1e308 * 10\nfor i in range(x, 3):\n    print(i)\n",
            "x = 1e308 * 10\ny = x - x\nfor i in range(y):\n    print(y)\n",
            "x = 10\n" + "x *= x\n" * 20 + "print(x / 3, x * x)\n",
            "xs = [1, 2]\nn = 1e400\nprint(xs[n])\n",
            "print(" + "9" * 5000 + ")\n",
        ],
    )
    def test_out_of_range_numbers_never_raise(self, source):
        engine = PythonEngine(TraceConfig(max_engine_steps=200))
        assert engine.build(source) is not None


class TestForEach:
    def test_non_list_iterable_runs_zero_times(self):
        trace = _trace('word = "abc"\nfor c in word:\n    print(c)\n')
        assert [entry.action for entry in trace] == ["String assignment"]

    def test_list_snapshot_is_iterated(self):
        source = "xs = [1, 2]\nfor x in xs:\n    xs = [9]\n"
        trace = _trace(source)
        loop_values = [entry.after["x"] for entry in trace if entry.source_line == "for x in xs:"]
        assert loop_values == [1, 2]


class TestWhile:
    def test_counts_iterations(self):
        trace = _trace("n = 0\nwhile n < 3:\n    n += 1\n")
        loop_actions = [entry.action for entry in trace if entry.source_line == "while n < 3:"]
        assert loop_actions == ["Loop iteration 1", "Loop iteration 2", "Loop iteration 3"]
        assert trace[-1].after["n"] == 3

    def test_guard_stops_infinite_loop(self):
        trace = _trace("x = 0\nwhile True:\n    x += 1\n")
        assert trace[-1].after["x"] == 100
        assert len([entry for entry in trace if entry.action == "Update variable"]) == 100

    def test_custom_guard(self):
        engine = PythonEngine(TraceConfig(loop_guard=5))
        trace = engine.build("x = 0\nwhile x >= 0:\n    x += 1\n")
        assert trace[-1].after["x"] == 5


class TestPrint:
    def test_fstring(self):
        trace = _trace('total = 3\nprint(f"Total: {total}")\n')
        assert _outputs(trace) == ["Total: 3"]
        assert trace[-1].output_line == "Total: 3"

    def test_str_format(self):
        assert _outputs(_trace('n = 2\nprint("n is {}".format(n))\n')) == ["n is 2"]

    def test_multiple_args_and_keywords(self):
        assert _outputs(_trace('a = 1\nprint("a =", a, end="")\n')) == ["a = 1"]

    def test_concatenation(self):
        assert _outputs(_trace('name = "Ana"\nprint("Hi " + name)\n')) == ["Hi Ana"]


class TestStatements:
    def test_comments_are_ignored(self):
        trace = _trace("# setup\nx = 1  # one\n\n")
        assert len(trace) == 1
        assert trace[0].source_line == "x = 1"

    def test_index_read(self):
        trace = _trace("xs = [4, 5]\ny = xs[1]\n")
        assert trace[-1].action == "Assignment from array"
        assert trace[-1].after["y"] == 5

    def test_list_copy_is_independent(self):
        trace = _trace("a = [1, 2]\nb = a\n")
        assert trace[-1].after["b"] == [1, 2]
        assert trace[-1].after["b"] is not trace[-1].after["a"]

    def test_snapshots_are_independent(self):
        trace = _trace("xs = [1]\nxs = [1, 2]\n")
        assert trace[0].after["xs"] == [1]
        assert trace[1].before["xs"] == [1]
        assert trace[1].after["xs"] == [1, 2]

    def test_engine_limit_stops_recording(self):
        engine = PythonEngine(TraceConfig(max_engine_steps=4))
        trace = engine.build("x = 0\nwhile True:\n    x += 1\n")
        assert len(trace) == 4


class TestGenericEngine:
    def test_unknown_dialect_uses_generic_engine(self):
        assert type(get_engine("unknown")) is IndentedEngine
        assert type(get_engine("sql")) is IndentedEngine

    def test_generic_engine_understands_console_log(self):
        trace = _trace("x = 2\nconsole.log(x)\n", dialect="unknown")
        assert _outputs(trace) == ["2"]

    def test_unrecognized_lines_are_execution(self):
        trace = _trace("SELECT * FROM t", dialect="sql")
        assert [entry.action for entry in trace] == ["Execution"]
        assert trace[0].before == trace[0].after == {}
