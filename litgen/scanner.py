from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, NamedTuple

from .errors import UnterminatedDirective

logger = logging.getLogger(__name__)

OPENER: str = "/*!!"
BEGIN_SENTINEL: str = "/* ################# !! GENERATED CODE -- DO NOT MODIFY !! ################# */"
END_SENTINEL: str = "/* ######################### END OF GENERATED CODE ######################### */"

_CLOSER_RE = re.compile(r"!![ \t]*(\d*)[ \t]*\*/")

Span = tuple[int, int]


class _Line(NamedTuple):
    number: int
    start: int
    raw: str

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    @property
    def stripped(self) -> str:
        return self.raw.strip()


@dataclass(frozen=True)
class DirectiveBlock:
    """One `/*!! ... !! N */` directive and its generated region, if any.

    Spans are half-open offsets into the scanned, already-decoded `str`, so
    they count code points rather than bytes of the file. `generated_span`
    covers the lines strictly between the two sentinels; `insert_at` is where a
    fresh sentinel pair goes when the region is absent.
    """
    script_text: str
    declared_line_count: int | None
    source_span: Span
    generated_span: Span | None
    margin: str = ""
    line: int = 1
    script_line: int = 2
    closer_span: Span = (0, 0)
    insert_at: int = 0

    @property
    def actual_line_count(self) -> int:
        return len(self.script_text.splitlines())

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.line,
            "declared_line_count": self.declared_line_count,
            "actual_line_count": self.actual_line_count,
            "source_span": list(self.source_span),
            "generated_span": list(self.generated_span) if self.generated_span else None,
        }


def _split_lines(source: str) -> list[_Line]:
    lines: list[_Line] = []
    offset = 0
    for number, raw in enumerate(source.splitlines(keepends=True), 1):
        lines.append(_Line(number, offset, raw))
        offset += len(raw)
    return lines


def _find_closer(lines: list[_Line], first: int) -> int | None:
    for j in range(first, len(lines)):
        text = lines[j].stripped
        if text == OPENER:
            return None
        if _CLOSER_RE.fullmatch(text):
            return j
    return None


def scan(source: str) -> list[DirectiveBlock]:
    """Return every directive in `source`, in order.

    Text inside a generated region is skipped, so output that happens to look
    like a directive is never picked up on the next run.
    """
    lines = _split_lines(source)
    blocks: list[DirectiveBlock] = []
    i = 0
    while i < len(lines):
        opener = lines[i]
        if opener.stripped != OPENER:
            i += 1
            continue
        text = opener.raw.rstrip("\r\n")
        margin = text[: len(text) - len(text.lstrip())]

        j = _find_closer(lines, i + 1)
        if j is None:
            raise UnterminatedDirective(
                f"directive opened at line {opener.number} has no closing `!! N */` marker",
                offset=opener.start,
                line=opener.number,
            )
        closer = lines[j]
        count = _CLOSER_RE.fullmatch(closer.stripped).group(1)  # type: ignore[union-attr]
        script_text = "".join(ln.raw for ln in lines[i + 1:j])

        generated_span: Span | None = None
        end = closer.end
        k = j + 1
        if k < len(lines) and lines[k].stripped == BEGIN_SENTINEL:
            m = k + 1
            while m < len(lines) and lines[m].stripped != END_SENTINEL:
                m += 1
            if m == len(lines):
                raise UnterminatedDirective(
                    f"generated region of directive at line {opener.number} has no end sentinel",
                    offset=opener.start,
                    line=opener.number,
                )
            generated_span = (lines[k].end, lines[m].start)
            end = lines[m].end
            k = m + 1

        blocks.append(DirectiveBlock(
            script_text=script_text,
            declared_line_count=int(count) if count else None,
            source_span=(opener.start, end),
            generated_span=generated_span,
            margin=margin,
            line=opener.number,
            script_line=opener.number + 1,
            closer_span=(closer.start, closer.start + len(closer.raw.rstrip("\r\n"))),
            insert_at=closer.end,
        ))
        i = k
    logger.debug("found %d directive(s)", len(blocks))
    return blocks
