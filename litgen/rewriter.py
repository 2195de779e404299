from __future__ import annotations

import logging
import os
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any

from .codegen import DEFAULT_INDENT_WIDTH, TextBuilder
from .errors import ExecutionFault, LineCountDrift, LitgenError, SentinelCollision
from .runtime import ScriptRuntime
from .scanner import BEGIN_SENTINEL, END_SENTINEL, DirectiveBlock, scan

logger = logging.getLogger(__name__)

DRIFT_SEVERITIES: tuple[str, ...] = ("ignore", "warn", "error")


@dataclass
class RegenConfig:
    indent_width: int = DEFAULT_INDENT_WIDTH
    # in existing files the closer count usually spans the closer plus the generated region
    drift: str = "ignore"
    update_counts: bool = False

    def __post_init__(self) -> None:
        if self.drift not in DRIFT_SEVERITIES:
            raise ValueError(f"Unknown drift severity '{self.drift}'. Allowed: {DRIFT_SEVERITIES}")
        if self.indent_width < 0:
            raise ValueError("indent_width must be non-negative")


@dataclass
class BlockResult:
    block: DirectiveBlock
    artifact: str | None = None
    fault: LitgenError | None = None
    warnings: list[LitgenError] = field(default_factory=list)
    open_indent: int = 0

    @property
    def ok(self) -> bool:
        return self.fault is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.block.line,
            "ok": self.ok,
            "fault": self.fault.kind if self.fault else None,
            "message": self.fault.message if self.fault else None,
            "warnings": [w.kind for w in self.warnings],
            "open_indent": self.open_indent,
        }


@dataclass
class RewriteReport:
    path: str
    original: str
    text: str
    results: list[BlockResult] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.text != self.original

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "changed": self.changed,
            "ok": self.ok,
            "blocks": [r.to_dict() for r in self.results],
        }


# ---------- per-block execution ----------

def _script_lineno(exc: BaseException, filename: str) -> int | None:
    if isinstance(exc, SyntaxError) and exc.filename == filename:
        return exc.lineno
    lineno: int | None = None
    tb: TracebackType | None = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == filename:
            lineno = tb.tb_lineno
        tb = tb.tb_next
    return lineno


def _check_drift(block: DirectiveBlock, config: RegenConfig, result: BlockResult, label: str) -> bool:
    declared = block.declared_line_count
    actual = block.actual_line_count
    if declared is None or declared == actual or config.drift == "ignore":
        return True
    drift = LineCountDrift(declared, actual, line=block.line)
    if config.drift == "error" and not config.update_counts:
        result.fault = drift
        logger.error("%s", drift.describe(label))
        return False
    result.warnings.append(drift)
    logger.warning("%s", drift.describe(label))
    return True


def regenerate(
    block: DirectiveBlock,
    config: RegenConfig | None = None,
    path: str | None = None,
) -> BlockResult:
    """Run one directive script against a fresh builder and scope.

    Faults are recorded on the result, never raised: a failing block leaves
    its sibling blocks unaffected.
    """
    config = config or RegenConfig()
    label = f"{path or '<memory>'}:{block.line}"
    result = BlockResult(block)
    if not _check_drift(block, config, result, path or "<memory>"):
        return result

    filename = f"<litgen {label}>"
    builder = TextBuilder(indent_width=config.indent_width)
    runtime = ScriptRuntime(builder, label)
    fault: LitgenError | None = None
    try:
        runtime.run(compile(textwrap.dedent(block.script_text), filename, "exec"))
    except LitgenError as e:
        fault = e
    except (Exception, SystemExit, GeneratorExit) as e:
        # exit() in a script ends that block only; KeyboardInterrupt still propagates
        fault = ExecutionFault(e)
        fault.__cause__ = e

    if fault is not None:
        lineno = _script_lineno(fault.__cause__ or fault, filename) or _script_lineno(fault, filename)
        fault.line = block.script_line + lineno - 1 if lineno else block.line
        result.fault = fault
        logger.error("%s", fault.describe(path or "<memory>"))
        return result

    result.open_indent = builder.indent_level
    artifact = builder.finish()
    for number, ln in enumerate(artifact.splitlines(), 1):
        if ln.strip() in (BEGIN_SENTINEL, END_SENTINEL):
            result.fault = SentinelCollision(number, line=block.line)
            logger.error("%s", result.fault.describe(path or "<memory>"))
            return result
    result.artifact = artifact
    logger.debug("%s: generated %d line(s)", label, result.artifact.count("\n"))
    return result


# ---------- splicing ----------

def _format_region(artifact: str, margin: str, newline: str) -> str:
    # one blank separator line always precedes the end sentinel
    body = "".join(f"{margin}{ln}{newline}" if ln else newline for ln in artifact.splitlines())
    return body + newline


def rewrite_source(text: str, config: RegenConfig | None = None, path: str | None = None) -> RewriteReport:
    """Regenerate every directive in `text`.

    Structural faults from scanning propagate, since span boundaries cannot be
    trusted afterwards. Everything outside generated regions (and, with
    `update_counts`, the closer lines) is copied through unchanged.
    """
    config = config or RegenConfig()
    blocks = scan(text)
    results = [regenerate(b, config, path) for b in blocks]
    newline = "\r\n" if "\r\n" in text else "\n"

    pieces: list[str] = []
    cursor = 0
    for r in results:
        b = r.block
        if config.update_counts and b.declared_line_count != b.actual_line_count:
            pieces.append(text[cursor:b.closer_span[0]])
            pieces.append(f"{b.margin}!! {b.actual_line_count} */")
            cursor = b.closer_span[1]
        if r.artifact is None:
            continue
        region = _format_region(r.artifact, b.margin, newline)
        if b.generated_span is not None:
            start, end = b.generated_span
            pieces.append(text[cursor:start])
            pieces.append(region)
            cursor = end
        else:
            pieces.append(text[cursor:b.insert_at])
            if not text[:b.insert_at].endswith(("\n", "\r")):
                pieces.append(newline)
            pieces.append(f"{b.margin}{BEGIN_SENTINEL}{newline}{region}{b.margin}{END_SENTINEL}{newline}")
            cursor = b.insert_at
    pieces.append(text[cursor:])

    return RewriteReport(path=path or "<memory>", original=text, text="".join(pieces), results=results)


def _atomic_write(path: Path, text: str) -> None:
    tmp = path.with_suffix(path.suffix + ".litgen.tmp")
    try:
        tmp.write_bytes(text.encode("utf-8"))
        os.chmod(tmp, path.stat().st_mode)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()


def rewrite_file(
    path: str | Path,
    config: RegenConfig | None = None,
    check: bool = False,
    text: str | None = None,
) -> RewriteReport:
    """Regenerate a file in place; in `check` mode only report what would change.

    `text` is the file's already-decoded content, when the caller has read it.
    """
    path = Path(path)
    # bytes, so line endings survive untouched
    original = text if text is not None else path.read_bytes().decode("utf-8")
    report = rewrite_source(original, config, str(path))
    if report.changed and not check:
        _atomic_write(path, report.text)
        logger.info("rewrote %s", path)
    return report
