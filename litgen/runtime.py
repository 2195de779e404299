from __future__ import annotations

import builtins
import logging
from contextlib import contextmanager
from types import CodeType
from typing import Any, Callable, Iterator, Mapping

from .codegen import TextBuilder
from .render import Varargs, render
from .template import Template, compile_template

logger = logging.getLogger(__name__)

# Names every directive script sees at top level.
SCRIPT_API: tuple[str, ...] = ("template", "nl", "indent", "unindent", "write")


class BoundTemplate:
    """A compiled template tied to the runtime of one directive.

    Calling it renders into that runtime's current builder; positional
    arguments are captured as `args` (a `Varargs`), keyword arguments become
    named parameters.
    """

    def __init__(self, template: Template, runtime: ScriptRuntime) -> None:
        self.template = template
        self.runtime = runtime

    @staticmethod
    def context(args: tuple[Any, ...], named: Mapping[str, Any]) -> dict[str, Any]:
        ctx: dict[str, Any] = {"args": Varargs(args)}
        ctx.update(named)
        return ctx

    def __call__(self, *args: Any, **named: Any) -> None:
        self.runtime.render(self.template, self.context(args, named))

    def text(self, *args: Any, **named: Any) -> str:
        """Render into a scratch builder and return the text instead of emitting it.

        Everything the render does, including `nl`/`indent` calls and nested
        template calls, lands in the scratch builder.
        """
        scratch = TextBuilder(indent_width=self.runtime.builder.indent_width)
        with self.runtime.redirect(scratch):
            self(*args, **named)
        return scratch.getvalue()

    def __repr__(self) -> str:
        return f"<BoundTemplate {self.template!r} in {self.runtime.label}>"


class ScriptRuntime:
    """Fresh top-level scope plus builder for executing one directive script.

    The builder functions in the script API always act on `self.builder`, so
    swapping it with `redirect()` captures all output of a nested render.
    """

    def __init__(self, builder: TextBuilder | None = None, label: str = "<memory>") -> None:
        self.builder = builder if builder is not None else TextBuilder()
        self.label = label
        self.globals: dict[str, Any] = {"__name__": "__litgen__", "__builtins__": builtins}
        self.globals.update(self.api())

    def api(self) -> dict[str, Callable[..., Any]]:
        return {
            "template": self.template,
            "nl": self.nl,
            "indent": self.indent,
            "unindent": self.unindent,
            "write": self.write,
        }

    @contextmanager
    def redirect(self, builder: TextBuilder) -> Iterator[TextBuilder]:
        previous, self.builder = self.builder, builder
        try:
            yield builder
        finally:
            self.builder = previous

    def template(self, pattern: str) -> BoundTemplate:
        return BoundTemplate(compile_template(pattern), self)

    def render(self, template: Template, context: Mapping[str, Any]) -> None:
        render(template, context, self.builder, self.globals)

    def nl(self) -> None:
        self.builder.nl()

    def indent(self) -> None:
        self.builder.indent()

    def unindent(self) -> None:
        self.builder.unindent()

    def write(self, *values: Any) -> None:
        # diagnostic only, never part of the generated block
        for value in values:
            logger.debug("%s: write: %r", self.label, value)

    def run(self, code: CodeType) -> None:
        exec(code, self.globals)
