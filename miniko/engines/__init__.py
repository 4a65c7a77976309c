"""Pattern-driven execution engines for every supported dialect."""

from __future__ import annotations

import importlib

from .. import constants
from ..run_types import TraceConfig
from ._base import BaseEngine
from ._indented import IndentedEngine

# Lazy imports to avoid loading every dialect module at startup
_ENGINE_CLASSES: dict[str, str] = {
    constants.DIALECT_PYTHON: "python.PythonEngine",
    constants.DIALECT_JAVASCRIPT: "javascript.JavaScriptEngine",
    constants.DIALECT_TYPESCRIPT: "typescript.TypeScriptEngine",
    constants.DIALECT_JAVA: "java.JavaEngine",
    constants.DIALECT_C: "c.CEngine",
    constants.DIALECT_CPP: "cpp.CppEngine",
    constants.DIALECT_CSHARP: "csharp.CSharpEngine",
    constants.DIALECT_GO: "go.GoEngine",
    constants.DIALECT_RUST: "rust.RustEngine",
}


def get_engine(dialect: str, config: TraceConfig | None = None) -> BaseEngine:
    """Instantiate the engine for *dialect*.

    Dialects without a dedicated engine (``sql``, ``unknown`` or any
    unregistered id) get the generic :class:`IndentedEngine`.
    """
    spec = _ENGINE_CLASSES.get(dialect)
    if spec is None:
        return IndentedEngine(config)
    module_name, class_name = spec.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    cls = getattr(mod, class_name)
    return cls(config)


SUPPORTED_ENGINE_DIALECTS: tuple[str, ...] = tuple(_ENGINE_CLASSES.keys())

__all__ = [
    "BaseEngine",
    "IndentedEngine",
    "get_engine",
    "SUPPORTED_ENGINE_DIALECTS",
]
