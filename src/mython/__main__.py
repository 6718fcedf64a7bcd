from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .core import Interpreter


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m mython",
        usage="python -m mython [-v] <script.my>",
    )
    parser.add_argument("script")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args_list = sys.argv[1:] if argv is None else argv
    try:
        args = parser.parse_args(args_list)
    except SystemExit as exc:
        return int(exc.code)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    script_path = Path(args.script).resolve()
    if not script_path.is_file():
        print(f"mython: script not found: {script_path}", file=sys.stderr)
        return 2

    source = script_path.read_text()
    interpreter = Interpreter(output=sys.stdout)
    result = interpreter.run(source, filename=str(script_path))
    if result.exception is not None:
        exc = result.exception
        print(f"mython: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
