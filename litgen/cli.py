import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator

from .errors import StructuralError
from .rewriter import DRIFT_SEVERITIES, RegenConfig, RewriteReport, rewrite_file
from .scanner import OPENER, scan

logger = logging.getLogger(__name__)

_SKIP_DIRS = {".git", ".venv", "venv", "__pycache__", "node_modules"}


def _read(path: Path) -> str | None:
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("skipping %s: not UTF-8", path)
        return None


def _iter_source_files(roots: list[str], exts: list[str] | None) -> Iterator[tuple[Path, str]]:
    """Yield `(path, text)` for every candidate file that holds a directive opener."""
    for root in map(Path, roots):
        candidates = [root] if root.is_file() else sorted(p for p in root.rglob("*") if p.is_file())
        for p in candidates:
            if any(part in _SKIP_DIRS for part in p.parts):
                continue
            if exts and p.suffix not in exts:
                continue
            text = _read(p)
            if text is not None and OPENER in text:
                yield p, text


def _config(args: argparse.Namespace) -> RegenConfig:
    return RegenConfig(
        indent_width=args.indent_width,
        drift=args.drift,
        update_counts=args.update_counts,
    )


def _process(args: argparse.Namespace, check: bool) -> int:
    config = _config(args)
    status = 0
    for path, text in _iter_source_files(args.paths, args.ext):
        try:
            report: RewriteReport = rewrite_file(path, config, check=check, text=text)
        except StructuralError as e:
            print(e.describe(str(path)), file=sys.stderr)
            status = 1
            continue
        for r in report.results:
            if r.fault is not None:
                print(r.fault.describe(str(path)), file=sys.stderr)
        if not report.ok:
            status = 1
        if report.changed:
            if check:
                print(f"Out of date: {path}")
                status = 1
            else:
                print(f"Rewrote {path}")
    return status


def cmd_regen(args: argparse.Namespace) -> int:
    return _process(args, check=False)


def cmd_check(args: argparse.Namespace) -> int:
    return _process(args, check=True)


def cmd_scan(args: argparse.Namespace) -> int:
    status = 0
    for path, text in _iter_source_files(args.paths, args.ext):
        try:
            blocks = scan(text)
        except StructuralError as e:
            print(e.describe(str(path)), file=sys.stderr)
            status = 1
            continue
        for block in blocks:
            data = {"path": str(path), **block.to_dict()}
            print(data)
    return status


def _add_common(s: argparse.ArgumentParser) -> None:
    s.add_argument("paths", nargs="+", help="Files or directories to process")
    s.add_argument("--ext", action="append", help="Only consider files with this suffix (repeatable, e.g. .h)")


def _add_regen_options(s: argparse.ArgumentParser) -> None:
    s.add_argument("--indent-width", dest="indent_width", type=int, default=4)
    s.add_argument("--drift", choices=DRIFT_SEVERITIES, default="ignore",
                   help="How to treat a declared script line count that does not match")
    s.add_argument("--update-counts", dest="update_counts", action="store_true",
                   help="Rewrite the `!! N */` count to the actual script length")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("litgen")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output (including script write())")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    sub = p.add_subparsers(required=True)

    s = sub.add_parser("regen", help="Regenerate directive blocks in place")
    _add_common(s)
    _add_regen_options(s)
    s.set_defaults(func=cmd_regen)

    s = sub.add_parser("check", help="Exit non-zero if any generated block is out of date")
    _add_common(s)
    _add_regen_options(s)
    s.set_defaults(func=cmd_check)

    s = sub.add_parser("scan", help="List directive blocks")
    _add_common(s)
    s.set_defaults(func=cmd_scan)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
