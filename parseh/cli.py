#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .collector import collect_declarations
from .config import Config
from .emitter import render_extern_block
from .errors import ParsehError
from .parser import parse_header
from .translator import TranslationContext


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="parseh", description="translate C header functions into an extern block")
    ap.add_argument("input", help="input .h file")
    ap.add_argument("-o", "--output", default="", help="output path (default: stdout)")
    ap.add_argument("--std", default=None, help="C standard passed to clang")
    ap.add_argument("--clang-arg", action="append", default=[], help="extra clang args (repeatable)")
    ap.add_argument("--main-file-only", action="store_true", help="skip functions declared in included files")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return ap


def run(args: argparse.Namespace) -> str:
    cfg = Config(clang_args=list(args.clang_arg), std=args.std, main_file_only=args.main_file_only)
    ctx = TranslationContext(config=cfg)
    try:
        tu = parse_header(args.input, cfg)
        result = collect_declarations(tu, ctx=ctx)
    finally:
        # report what was seen before a fatal error too
        for d in ctx.diagnostics:
            print(d, file=sys.stderr)
    return render_extern_block(result.declarations)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        text = run(args)
    except ParsehError as e:
        print(str(e), file=sys.stderr)
        return 1

    if not args.output:
        sys.stdout.write(text)
        return 0

    out_path = os.path.abspath(args.output)
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(text)

    print(f"[ok] wrote {out_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
