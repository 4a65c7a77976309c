"""Script sandboxes — run a snippet for real in a short-lived subprocess.

A sandbox settles exactly once: either the process finishes (its printed
lines become ``logs`` and anything it reports on stderr becomes ``error``)
or the wall-clock timeout fires, the process is killed, and the lines it
printed so far are returned with ``timed_out=True``.  No retries.

The child runs with a minimal environment and, on POSIX, a CPU-seconds
limit.  This narrows what a buggy snippet can touch; it is not a substitute
for container isolation.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pydantic import BaseModel, Field

from . import constants

logger = logging.getLogger(__name__)

_NODE_WRAPPER = """
let data = "";
process.stdin.setEncoding("utf8");
process.stdin.on("data", (chunk) => { data += chunk; });
process.stdin.on("end", () => {
  const { source } = JSON.parse(data);
  console.log = (...args) => {
    process.stdout.write(args.map((item) => String(item)).join(" ") + "\\n");
  };
  try {
    new Function(source)();
  } catch (error) {
    process.stderr.write(String(error));
    process.exitCode = 1;
  }
});
"""


class SandboxResult(BaseModel):
    """Outcome of one sandboxed run."""

    logs: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    timed_out: bool = False


class ScriptSandbox(ABC):
    """Executes source text for real and reports what it printed."""

    # Matches ``DetectedDialect.runnable`` for the dialects this sandbox runs.
    runnable: str = ""

    @abstractmethod
    def execute(
        self, source: str, timeout_ms: int = constants.DEFAULT_SANDBOX_TIMEOUT_MS
    ) -> SandboxResult:
        ...


def _make_posix_preexec(cpu_seconds: Optional[int]) -> Callable[[], None]:
    """Return a preexec_fn that caps the child's CPU time."""

    def preexec() -> None:
        import resource

        if cpu_seconds is not None:
            resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))

    return preexec


def _split_logs(stdout: str | None) -> list[str]:
    return (stdout or "").splitlines()


class SubprocessSandbox(ScriptSandbox):
    """Feeds ``{"source": ...}`` as JSON on stdin to a command and reads stdout lines."""

    def __init__(self, cpu_seconds: Optional[int] = 2):
        self._cpu_seconds = cpu_seconds

    @abstractmethod
    def _build_command(self) -> list[str]:
        ...

    def execute(
        self, source: str, timeout_ms: int = constants.DEFAULT_SANDBOX_TIMEOUT_MS
    ) -> SandboxResult:
        command = self._build_command()
        logger.info("Running sandbox %s (timeout=%dms)", command[0], timeout_ms)
        popen_kwargs = dict(
            args=command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env={"PATH": os.environ.get("PATH", "")},
            close_fds=True,
        )
        if os.name != "nt":
            popen_kwargs["preexec_fn"] = _make_posix_preexec(self._cpu_seconds)
        try:
            proc = subprocess.Popen(**popen_kwargs)
        except OSError as exc:
            logger.warning("Sandbox could not start %s: %s", command[0], exc)
            return SandboxResult(error=str(exc))

        payload = json.dumps({"source": source})
        try:
            out, err = proc.communicate(payload, timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            proc.kill()
            out, _ = proc.communicate()
            logger.debug("Sandbox timed out after %dms", timeout_ms)
            return SandboxResult(logs=_split_logs(out), timed_out=True)

        error = (err or "").strip() or None
        if error is None and proc.returncode:
            error = f"exit status {proc.returncode}"
        return SandboxResult(logs=_split_logs(out), error=error)


class NodeSandbox(SubprocessSandbox):
    """Runs JavaScript with Node.js, capturing ``console.log`` lines."""

    runnable = constants.RUNNABLE_JS

    def __init__(self, executable: str = "node", cpu_seconds: Optional[int] = 2):
        super().__init__(cpu_seconds)
        self._executable = executable

    def _build_command(self) -> list[str]:
        return [self._executable, "-e", _NODE_WRAPPER]
