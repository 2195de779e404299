from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import TracebackType
from typing import Any

from .codegen import TextBuilder
from .errors import UndefinedParameter
from .template import SEGMENT_FILENAME_PREFIX, Expr, Literal, Template

logger = logging.getLogger(__name__)


class Varargs(tuple):
    """Positional arguments of a template call, kept in call order."""

    @property
    def n(self) -> int:
        return len(self)

    def pairs(self, start: int = 1) -> Iterator[tuple[int, Any]]:
        return enumerate(self, start)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def emit(value: Any, builder: TextBuilder) -> None:
    """Write a segment value inline at the builder's cursor.

    Sequences are emitted element by element and callables are treated as
    thunks: they run against the same builder and whatever they return is
    emitted in turn.
    """
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            emit(item, builder)
        return
    if callable(value):
        emit(value(), builder)
        return
    builder.write_text(to_text(value))


def _innermost(tb: TracebackType | None) -> TracebackType | None:
    while tb is not None and tb.tb_next is not None:
        tb = tb.tb_next
    return tb


def _evaluate(seg: Expr, namespace: dict[str, Any]) -> Any:
    try:
        if seg.mode == "eval":
            return eval(seg.code, namespace)
        exec(seg.code, namespace)
        return None
    except NameError as e:
        tb = _innermost(e.__traceback__)
        # only names looked up by the segment itself; helpers keep their own NameError
        if tb is not None and tb.tb_frame.f_code.co_filename.startswith(SEGMENT_FILENAME_PREFIX):
            name = getattr(e, "name", None) or str(e)
            raise UndefinedParameter(name, offset=seg.offset) from e
        raise


def render(
    template: Template,
    context: Mapping[str, Any],
    builder: TextBuilder,
    scope: Mapping[str, Any] | None = None,
) -> None:
    """Render `template` into `builder`.

    Names resolve against `context` first, then `scope` (the enclosing script
    bindings). Nested templates invoked from a segment write into the same
    builder, so their lines pick up the current indentation.
    """
    namespace: dict[str, Any] = dict(scope or {})
    namespace.update(context)
    for seg in template.segments:
        if isinstance(seg, Literal):
            builder.write_text(seg.text)
            continue
        value = _evaluate(seg, namespace)
        if seg.mode == "eval":
            emit(value, builder)
