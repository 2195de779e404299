"""Template compiler.

A pattern is literal text with backtick-delimited segments of Python. Each
segment is classified once, at compile time, as either an expression (its value
is emitted) or a statement block (run for its builder side effects), and
compiled to a code object. Nothing is evaluated until render time, so one
compiled template serves any number of contexts and nested call sites.
"""

from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass
from functools import lru_cache
from types import CodeType
from typing import Literal as LiteralType, Union

import libcst as cst

from .errors import TemplateSyntaxError, UnterminatedExpression

logger = logging.getLogger(__name__)

DELIMITER: str = "`"
SEGMENT_FILENAME_PREFIX: str = "<litgen-template"


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Expr:
    source: str
    offset: int
    mode: LiteralType["eval", "exec"]
    code: CodeType


Segment = Union[Literal, Expr]


@dataclass(frozen=True)
class Template:
    pattern: str
    segments: tuple[Segment, ...]

    @property
    def expressions(self) -> tuple[Expr, ...]:
        return tuple(s for s in self.segments if isinstance(s, Expr))

    def __repr__(self) -> str:
        kinds = "".join("L" if isinstance(s, Literal) else "E" for s in self.segments)
        return f"Template({kinds!r}, {self.pattern[:30]!r})"


def _classify(source: str, offset: int) -> tuple[LiteralType["eval", "exec"], str]:
    """Decide whether a segment is an expression or a block of statements."""
    stripped = source.strip()
    if not stripped:
        raise TemplateSyntaxError("empty expression segment", offset=offset)
    try:
        cst.parse_expression(stripped)
        return "eval", stripped
    except cst.ParserSyntaxError:
        pass
    body = textwrap.dedent(source).strip("\n") + "\n"
    try:
        cst.parse_module(body)
    except cst.ParserSyntaxError as e:
        raise TemplateSyntaxError(
            f"segment is neither an expression nor a statement block: {e.message}",
            offset=offset,
        ) from e
    return "exec", body


def _make_expr(source: str, offset: int) -> Expr:
    mode, body = _classify(source, offset)
    try:
        code = compile(body, f"{SEGMENT_FILENAME_PREFIX}@{offset}>", mode)
    except SyntaxError as e:
        # LibCST accepts a few constructs the compiler rejects (e.g. `return` at top level)
        raise TemplateSyntaxError(f"invalid segment: {e.msg}", offset=offset) from e
    return Expr(source=source, offset=offset, mode=mode, code=code)


@lru_cache(maxsize=512)
def compile_template(pattern: str) -> Template:
    """Split `pattern` into literal and expression segments.

    A doubled delimiter is an escaped literal backtick. An opening delimiter
    without a partner raises `UnterminatedExpression`.
    """
    segments: list[Segment] = []
    literal: list[str] = []
    pos = 0
    while pos < len(pattern):
        start = pattern.find(DELIMITER, pos)
        if start < 0:
            literal.append(pattern[pos:])
            break
        literal.append(pattern[pos:start])
        if pattern.startswith(DELIMITER * 2, start):
            literal.append(DELIMITER)
            pos = start + 2
            continue
        end = pattern.find(DELIMITER, start + 1)
        if end < 0:
            raise UnterminatedExpression(
                f"unterminated expression opened at offset {start}", offset=start
            )
        if literal:
            text = "".join(literal)
            if text:
                segments.append(Literal(text))
            literal = []
        segments.append(_make_expr(pattern[start + 1:end], start + 1))
        pos = end + 1
    text = "".join(literal)
    if text:
        segments.append(Literal(text))
    logger.debug("compiled template with %d segment(s)", len(segments))
    return Template(pattern=pattern, segments=tuple(segments))
