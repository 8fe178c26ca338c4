"""mcfcodec command-line interface.

Usage:
    python3 -m mcfcodec split '$6$10000$saltstring$hashedvalue'
    python3 -m mcfcodec decode --record bcrypt '$2a$10$...'
    echo 00ff10 | python3 -m mcfcodec b64encode --alphabet crypt
    python3 -m mcfcodec b64decode --alphabet bcrypt 'ckjEeyTD6estWyoofn4ERO'
    python3 -m mcfcodec version
"""

from __future__ import annotations

import argparse
import dataclasses
import enum
import json
import logging
import sys
from typing import Any, List, Optional

from . import (
    ALPHABETS,
    BcryptHash,
    McfError,
    McfHash,
    __version__,
    b64decode,
    b64encode,
    bind_decode,
    split_fields,
)

RECORDS = {
    "generic": McfHash,
    "bcrypt": BcryptHash,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcfcodec",
        description="mcfcodec — read and write Modular Crypt Format hash strings",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log codec decisions to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── split ──
    split_p = sub.add_parser("split", help="Print the fields of an MCF string as JSON")
    split_p.add_argument("text", nargs="?", help="MCF string (default: stdin)")

    # ── decode ──
    decode_p = sub.add_parser("decode", help="Decode into a built-in record, print as JSON")
    decode_p.add_argument("--record", "-r", choices=sorted(RECORDS), default="generic",
                          help="Record layout to bind (default: generic)")
    decode_p.add_argument("text", nargs="?", help="MCF string (default: stdin)")

    # ── b64encode / b64decode ──
    for name, help_text in (("b64encode", "Hex bytes in, crypt-base64 out"),
                            ("b64decode", "Crypt-base64 in, hex bytes out")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--alphabet", "-a", choices=sorted(ALPHABETS), default="crypt",
                       help="Symbol table (default: crypt)")
        p.add_argument("text", nargs="?", help="Input (default: stdin)")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(text: Optional[str]) -> str:
    """Take the positional argument, or all of stdin with surrounding whitespace stripped."""
    if text is not None:
        return text
    if sys.stdin.isatty():
        print("mcfcodec: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.read().strip()


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _cmd_decode(args: argparse.Namespace) -> None:
    record = bind_decode(_read_input(args.text), RECORDS[args.record])
    out = {f.name: _jsonable(getattr(record, f.name)) for f in dataclasses.fields(record)}
    print(json.dumps(out, indent=2))


def _cmd_b64encode(args: argparse.Namespace) -> None:
    raw = _read_input(args.text)
    try:
        data = bytes.fromhex(raw)
    except ValueError:
        print("mcfcodec: input is not hex: {!r}".format(raw), file=sys.stderr)
        sys.exit(2)
    print(b64encode(data, args.alphabet))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if args.command == "version":
        print(f"mcfcodec {__version__}")
        return

    try:
        if args.command == "split":
            print(json.dumps(split_fields(_read_input(args.text))))
        elif args.command == "decode":
            _cmd_decode(args)
        elif args.command == "b64encode":
            _cmd_b64encode(args)
        elif args.command == "b64decode":
            print(b64decode(_read_input(args.text), args.alphabet).hex())
    except McfError as e:
        print(f"mcfcodec: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
