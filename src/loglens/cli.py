from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import threading
from collections.abc import Sequence

from loglens.core.classifier import LineClassifier
from loglens.core.config import load_config
from loglens.core.documents import read_lines
from loglens.core.models import LogLevel
from loglens.core.rules import LevelRuleSet
from loglens.core.scanning import DocumentScanner, find_log_files, format_status
from loglens.core.tailing import Appended, TailEvent, TailFailed, TailRegistry, Truncated
from loglens.tools.logs import parse_filter_level


def _level_arg(s: str) -> LogLevel | None:
    try:
        return parse_filter_level(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


class _TailPrinter:
    """Event sink writing tail output to stdout."""

    def __init__(self, classifier: LineClassifier | None, stop: threading.Event) -> None:
        self._classifier = classifier
        self._stop = stop
        self._partial = ""

    def __call__(self, event: TailEvent) -> None:
        if isinstance(event, Appended):
            text = event.data.decode("utf-8", errors="replace")
            if self._classifier is None:
                sys.stdout.write(text)
            else:
                self._write_classified(text)
        elif isinstance(event, Truncated):
            self._partial = ""
            sys.stdout.write("\n--- Log file was truncated ---\n\n")
        elif isinstance(event, TailFailed):
            print(f"Stopped tailing {event.path}: {event.error}", file=sys.stderr)
            self._stop.set()
        sys.stdout.flush()

    def _write_classified(self, text: str) -> None:
        # Deltas can end mid-line; hold the remainder until its newline arrives.
        lines = (self._partial + text).split("\n")
        self._partial = lines.pop()
        for line in lines:
            primary = self._classifier.classify(line).primary
            tag = primary.value if primary is not None else "-"
            sys.stdout.write(f"[{tag:<5}] {line}\n")


def _cmd_scan(args: argparse.Namespace, scanner: DocumentScanner) -> None:
    lines = asyncio.run(read_lines(args.log_path))
    result = scanner.scan(lines)
    status, tooltip = format_status(result.counts)
    for level, count in result.counts.items():
        print(f"{level.value:<5} {count:>6} lines  {len(result.ranges[level]):>6} highlighted")
    print(f"\n{status}  ({tooltip})")


def _cmd_filter(args: argparse.Namespace, scanner: DocumentScanner) -> None:
    lines = scanner.filter_lines(asyncio.run(read_lines(args.log_path)), args.level)
    label = args.level.value if args.level is not None else "All Levels"
    print(f"=== Filtered: {label} ({len(lines)} lines) ===\n")
    for line in lines:
        print(line)


def _cmd_find(args: argparse.Namespace, scanner: DocumentScanner) -> None:
    files = find_log_files(args.root, limit=args.limit)
    if not files:
        print("No log files found", file=sys.stderr)
        return
    for p in files:
        print(os.path.relpath(p, args.root))


def _cmd_tail(args: argparse.Namespace, scanner: DocumentScanner) -> None:
    stop = threading.Event()
    printer = _TailPrinter(scanner.classifier if args.classify else None, stop)
    with TailRegistry(printer) as tails:
        session = tails.start(args.log_path)
        print(f"=== Tailing {os.path.basename(session.path)} ===\n", flush=True)
        try:
            while not stop.wait(0.5):
                pass
        except KeyboardInterrupt:
            pass
    if stop.is_set():
        raise SystemExit(1)


def main(argv: Sequence[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="loglens", description="Log level highlighting and file tailing.")
    p.add_argument("--config", default=None, help="JSON settings file (default: $LOGLENS_CONFIG)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scan", help="Count lines per level")
    s.add_argument("log_path")
    s.set_defaults(func=_cmd_scan)

    f = sub.add_parser("filter", help="Print lines matching a level")
    f.add_argument("log_path")
    f.add_argument(
        "--level",
        type=_level_arg,
        default=LogLevel.ERROR,
        help="ERROR, WARN, INFO, DEBUG or all. Default: ERROR",
    )
    f.set_defaults(func=_cmd_filter)

    t = sub.add_parser("tail", help="Stream content appended to a file (Ctrl-C to stop)")
    t.add_argument("log_path")
    t.add_argument("--classify", action="store_true", help="Prefix each line with its level")
    t.set_defaults(func=_cmd_tail)

    d = sub.add_parser("find", help="List *.log files under a directory")
    d.add_argument("root", nargs="?", default=".")
    d.add_argument("--limit", type=int, default=20)
    d.set_defaults(func=_cmd_find)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(path=args.config)
        scanner = DocumentScanner(LineClassifier(LevelRuleSet.from_config(config)))
        args.func(args, scanner)
    except OSError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
