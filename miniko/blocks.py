"""Block structure resolution — indentation depth and brace matching.

Two independent strategies recover control-flow bodies without a grammar:

* indentation mode walks forward while lines are indented deeper than the
  block's opener;
* brace mode matches ``{``/``}`` across the whole snippet in a single pass and
  answers "where does the block opened on line *i* close?" from that map.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_BLOCK_KEYWORD = re.compile(
    r"^(?:if|else|for|foreach|while|do|switch|try|catch|finally|fn|func|"
    r"class|struct|enum|interface|impl|loop|match|namespace|function|export|"
    r"public|private|protected|internal|static|int\s+main)\b"
)
_ELSE_OPENER = re.compile(r"^(?:}\s*)?else\b")
_INITIALIZER = re.compile(r"(?:[=\]]\s*$)|=\s*new\b")
_QUOTES = "'\"`"


@dataclass(frozen=True)
class IndentedLine:
    """A non-blank source line with its leading indentation width."""

    raw: str
    text: str
    indent: int


# ── indentation mode ─────────────────────────────────────────────


def find_block_end(lines: list[IndentedLine], start: int, parent_indent: int) -> int:
    """First index at or after *start* indented no deeper than *parent_indent*."""
    index = start
    while index < len(lines):
        if lines[index].indent <= parent_indent:
            break
        index += 1
    return index


def _find_clause(
    lines: list[IndentedLine], start: int, parent_indent: int, prefix: str
) -> int:
    if start >= len(lines):
        return -1
    candidate = lines[start]
    if candidate.indent == parent_indent and candidate.text.startswith(prefix):
        return start
    return -1


def find_else_index(lines: list[IndentedLine], start: int, parent_indent: int) -> int:
    """*start* if it holds an ``else`` at the parent's indent, else -1."""
    return _find_clause(lines, start, parent_indent, "else")


def find_elif_index(lines: list[IndentedLine], start: int, parent_indent: int) -> int:
    """*start* if it holds an ``elif`` at the parent's indent, else -1."""
    return _find_clause(lines, start, parent_indent, "elif ")


# ── brace mode ───────────────────────────────────────────────────


def _code_chars(line: str):
    """Yield characters of *line* that sit outside string literals."""
    quote = ""
    escaped = False
    for char in line:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
            continue
        if char in _QUOTES:
            quote = char
            continue
        yield char


def strip_comment(line: str, marker: str) -> str:
    """Cut *line* at the first *marker* that sits outside a string literal."""
    quote = ""
    escaped = False
    for i, char in enumerate(line):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
            continue
        if char in _QUOTES:
            quote = char
        elif line.startswith(marker, i):
            return line[:i]
    return line


def build_brace_map(lines: list[str]) -> dict[int, int]:
    """Map each block-opening line index to the index of its closing line."""
    stack: list[int] = []
    brace_map: dict[int, int] = {}
    for index, line in enumerate(lines):
        for char in _code_chars(line):
            if char == "{":
                stack.append(index)
            elif char == "}":
                if not stack:
                    logger.debug("Ignoring unmatched '}' on line %d", index)
                    continue
                brace_map[stack.pop()] = index
    if stack:
        logger.debug("Unclosed '{' on lines %s", stack)
    return brace_map


def block_end(brace_map: dict[int, int], index: int, line_count: int) -> int:
    """Closing line of the block opened on *index*; unclosed blocks run to the end."""
    return brace_map.get(index, line_count)


@dataclass(frozen=True)
class ElseBlock:
    """Location of an ``else`` clause: its opener line and body range."""

    opener: int
    start: int
    end: int


def find_else_block(
    lines: list[str], brace_map: dict[int, int], if_end: int
) -> ElseBlock | None:
    """Find the ``else`` following an if-block that closes on *if_end*."""
    if if_end < len(lines) and _ELSE_OPENER.match(lines[if_end]):
        opener = if_end
    elif if_end + 1 < len(lines) and _ELSE_OPENER.match(lines[if_end + 1]):
        opener = if_end + 1
    else:
        return None
    if opener not in brace_map:
        return None
    return ElseBlock(opener=opener, start=opener + 1, end=brace_map[opener])


def split_statements(line: str) -> list[str]:
    """Split one physical line of brace code into one statement per entry.

    ``int x = 5; if (x > 3) { x = 1; }`` becomes ``int x = 5;``,
    ``if (x > 3) {``, ``x = 1;`` and ``}``.  Semicolons inside parentheses
    and ``for`` headers are kept, and initializer braces (``= {1, 2}``,
    ``[]int{1, 2}``) stay attached to their statement.
    """
    statements: list[str] = []
    current: list[str] = []
    paren_depth = 0
    init_depth = 0
    quote = ""
    escaped = False

    def flush() -> None:
        text = "".join(current).strip()
        if text:
            statements.append(text)
        current.clear()

    for char in line:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
            continue
        if char in _QUOTES:
            quote = char
            current.append(char)
            continue
        if char in "([":
            paren_depth += 1
        elif char in ")]":
            paren_depth = max(0, paren_depth - 1)
        elif char == "{":
            sofar = "".join(current).strip()
            if init_depth or paren_depth or not _opens_block(sofar):
                init_depth += 1
                current.append(char)
                continue
            current.append(char)
            flush()
            continue
        elif char == "}":
            if init_depth:
                init_depth -= 1
                current.append(char)
                continue
            flush()
            statements.append("}")
            continue
        elif char == ";" and paren_depth == 0 and not init_depth:
            if _is_for_header("".join(current)):
                current.append(char)
                continue
            current.append(char)
            flush()
            continue
        current.append(char)
    flush()
    return _attach_semicolons(statements)


def _opens_block(prefix: str) -> bool:
    if not prefix:
        return True
    if prefix.endswith((")", "else", "=>")):
        return True
    if _INITIALIZER.search(prefix):
        return False
    return bool(_BLOCK_KEYWORD.match(prefix))


def _is_for_header(prefix: str) -> bool:
    return bool(re.match(r"^\s*for\b", prefix))


def _attach_semicolons(statements: list[str]) -> list[str]:
    """Fold stray ``;`` statements into a preceding ``}`` (``};``)."""
    result: list[str] = []
    for statement in statements:
        if statement == ";" and result and result[-1] == "}":
            result[-1] = "};"
            continue
        result.append(statement)
    return result
