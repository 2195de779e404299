from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import NegativeIndent

logger = logging.getLogger(__name__)

DEFAULT_INDENT_WIDTH: int = 4


@dataclass
class TextBuilder:
    """
    Line-oriented output accumulator with explicit indentation.
    The prefix of a line is fixed when the line is started, so
    `indent()` followed by `nl()` indents the *next* line.
    """
    indent_width: int = DEFAULT_INDENT_WIDTH
    lines: list[str] = field(default_factory=list)
    indent_level: int = 0
    _prefix: str = ""
    _text: str = ""

    @property
    def current_line(self) -> str:
        return f"{self._prefix}{self._text}"

    def write(self, text: str) -> None:
        self._text += text

    def write_text(self, text: str) -> None:
        first, *rest = text.split("\n")
        self.write(first)
        for piece in rest:
            self.nl()
            self.write(piece)

    def nl(self) -> None:
        # blank lines never carry the indent prefix
        self.lines.append(self.current_line if self._text else "")
        self._prefix = " " * (self.indent_width * self.indent_level)
        self._text = ""

    def indent(self) -> None:
        self.indent_level += 1

    def unindent(self) -> None:
        if self.indent_level == 0:
            raise NegativeIndent()
        self.indent_level -= 1

    def getvalue(self) -> str:
        """Text written so far, without flushing or terminating it."""
        return "\n".join([*self.lines, self.current_line if self._text else ""])

    def finish(self) -> str:
        if self._text:
            self.nl()
        if self.indent_level:
            logger.warning("builder finished with %d open indent level(s)", self.indent_level)
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"
