"""Tests for the composable API functions in miniko.api."""

from __future__ import annotations

import pytest

from miniko.api import (
    build_trace,
    execute_real_output,
    final_output,
    is_possibly_incomplete,
    trace_source,
)
from miniko.run_types import TraceConfig
from miniko.sandbox import SandboxResult, ScriptSandbox
from miniko.toy_script import run_toy_script

JS_SUM = """\
let total = 0;
for (let i = 1; i <= 3; i++) {
  total += i;
}
console.log(total);
"""

LONG_LOOP = "for i in range(50):\n    print(i)\n"


class FakeSandbox(ScriptSandbox):
    """Records calls instead of spawning a process."""

    runnable = "js"

    def __init__(self):
        self.calls: list[tuple[str, int]] = []

    def execute(self, source: str, timeout_ms: int) -> SandboxResult:
        self.calls.append((source, timeout_ms))
        return SandboxResult(logs=["6"])


class TestBuildTrace:
    def test_three_clause_javascript(self):
        trace = build_trace(JS_SUM, "javascript")
        assert final_output(trace) == ["6"]
        assert [entry.action for entry in trace if entry.source_line.startswith("for")] == [
            "Loop i = 1",
            "Loop i = 2",
            "Loop i = 3",
        ]

    def test_empty_dialect_or_blank_source(self):
        assert build_trace("x = 1", "empty") == []
        assert build_trace("   \n", "python") == []

    def test_deterministic(self):
        first = [entry.to_dict() for entry in build_trace(JS_SUM, "javascript")]
        second = [entry.to_dict() for entry in build_trace(JS_SUM, "javascript")]
        assert first == second

    def test_truncated_to_max_steps(self):
        trace = build_trace(LONG_LOOP, "python")
        assert len(trace) == 15
        assert [entry.step for entry in trace] == list(range(1, 16))

    def test_custom_max_steps(self):
        assert len(build_trace(LONG_LOOP, "python", config=TraceConfig(max_steps=40))) == 40

    def test_outputs_grow_monotonically(self):
        trace = build_trace(LONG_LOOP, "python")
        for entry in trace:
            assert entry.outputs_after[: len(entry.outputs_before)] == entry.outputs_before

    def test_entries_do_not_share_state(self):
        trace = build_trace("xs = [1]\nys = xs\n", "python")
        trace[0].after["xs"].append(99)
        assert trace[1].before["xs"] == [1]

    def test_locale(self):
        trace = build_trace("x = 1\nprint(x)\n", "python", locale="es")
        assert [entry.action for entry in trace] == ["Asignación", "Salida"]

    def test_malformed_input_never_raises(self):
        assert build_trace("if (\n}}}{{ ))\nfor", "c") is not None
        assert build_trace(":::\n  \tfor in range(:\n", "python") is not None

    @pytest.mark.parametrize(
        "source, dialect",
        [
            ("for i in range(1e20):\n    print(i)\n", "python"),
            ("x = 1e308 * 10\nfor i in range(x):\n    print(i)\n", "python"),
            ("x = 10\n" + "x *= x\n" * 10 + "print(x / 3)\n", "python"),
            ("fn main() {\n    for i in 0..1e20 {\n        println!(\"{}\", i);\n    }\n}\n", "rust"),
            ("int x = 10;\n" + "x *= x;\n" * 13 + 'printf("%d\\n", x);\n', "c"),
            ("let n = 1e308 * 10;\nwhile (n > 0) {\n  n = n / 3;\n}\n", "javascript"),
            ("SELECT " + "9" * 5000, "sql"),
        ],
    )
    def test_out_of_range_numbers_never_raise(self, source, dialect):
        trace = build_trace(source, dialect)
        assert 0 < len(trace) <= 15
        assert all(isinstance(line, str) for line in final_output(trace))

    def test_huge_range_is_truncated_like_any_long_loop(self):
        trace = build_trace("for i in range(1e20):\n    print(i)\n", "python")
        assert len(trace) == 15
        assert final_output(trace) == [str(i) for i in range(7)]

    def test_to_dict_includes_operation(self):
        entry = build_trace("x = 2 + 3", "python")[0]
        data = entry.to_dict()
        assert data["operation"]["result"] == 5
        assert data["after"] == {"x": 5}


class TestTraceSource:
    def test_detects_and_traces(self):
        detected, trace = trace_source(JS_SUM)
        assert detected.id == "javascript"
        assert final_output(trace) == ["6"]

    def test_empty_source(self):
        detected, trace = trace_source("")
        assert detected.id == "empty"
        assert trace == []


class TestFinalOutput:
    def test_empty_trace(self):
        assert final_output([]) == []

    def test_returns_copy(self):
        trace = build_trace("print(1)", "python")
        output = final_output(trace)
        output.append("x")
        assert final_output(trace) == ["1"]


class TestIsPossiblyIncomplete:
    @pytest.mark.parametrize(
        "source, dialect, expected",
        [
            ("", "python", True),
            ("for x in xs:", "python", True),
            ("for x in xs:\nprint(x)", "python", True),
            ("for x in xs:\n    print(x)", "python", False),
            ("int main() {\n  return 0;", "c", True),
            ("int main() {\n  return 0;\n}", "c", False),
            ("function f() {", "javascript", False),
            ("if (a) {", "typescript", False),
            ("SELECT 1", "sql", False),
        ],
    )
    def test_cases(self, source, dialect, expected):
        assert is_possibly_incomplete(source, dialect) is expected


class TestExecuteRealOutput:
    def test_runs_javascript(self):
        sandbox = FakeSandbox()
        result = execute_real_output(JS_SUM, sandbox, timeout_ms=500)
        assert result is not None
        assert result.logs == ["6"]
        assert sandbox.calls == [(JS_SUM, 500)]

    def test_other_dialects_are_not_run(self):
        sandbox = FakeSandbox()
        assert execute_real_output("print(1)", sandbox) is None
        assert execute_real_output("let x: number = 1;", sandbox) is None
        assert sandbox.calls == []


class TestEndToEnd:
    def test_python_list_sum(self):
        source = "numeros = [10,20,30]\nsuma = 0\nfor num in numeros:\n  suma += num\nprint(suma)"
        detected, trace = trace_source(source)
        assert detected.id == "python"
        assert final_output(trace) == ["60"]
        loop_entries = [entry for entry in trace if entry.source_line == "for num in numeros:"]
        assert [entry.after["num"] for entry in loop_entries] == [10, 20, 30]

    def test_compact_c_conditional(self):
        trace = build_trace("int x = 5; if (x > 3) { x = 1; } else { x = 2; }", "c")
        assert trace[1].action == "Condition: true"
        assert trace[-1].after["x"] == 1
        assert not any(entry.source_line == "x = 2;" for entry in trace)

    def test_toy_script_loop_over_variable(self):
        result = run_toy_script("set a 3\nloop a\nprint a\nend")
        assert result.output == ["3", "3", "3"]
        assert sum(1 for entry in result.trace if entry.note.startswith("repeat")) == 2

    def test_empty_source(self):
        detected, trace = trace_source("")
        assert detected.id == "empty"
        assert trace == []


class TestToyScriptOverflow:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("set a 10\nloop 13\nmul a a\nend\nprint a", ["Infinity"]),
            ("set a 1e400\ndiv a 3\nprint a", ["Infinity"]),
            ("set a -1e400\nprint a", ["-Infinity"]),
            ("loop 1e400\nend\nprint 2", None),
        ],
    )
    def test_never_raises(self, source, expected):
        result = run_toy_script(source)
        if expected is not None:
            assert result.output == expected
        assert result.trace
