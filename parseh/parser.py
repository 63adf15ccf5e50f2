#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from clang import cindex

from .config import Config, env_cflags, try_set_libclang
from .errors import FrontEndError

logger = logging.getLogger(__name__)


def build_clang_args(config: Config) -> List[str]:
    args: List[str] = []
    if config.std:
        args.append(f"-std={config.std}")
    args.extend(config.clang_args)
    args.extend(env_cflags(config.env_cflags_var))
    return args


def format_diagnostic(diag: cindex.Diagnostic) -> str:
    loc = diag.location
    f = str(loc.file) if loc.file else "<unknown>"
    return f"{f} line {loc.line}, column {loc.column}: {diag.spelling}"


def check_diagnostics(tu: cindex.TranslationUnit) -> None:
    errors = [format_diagnostic(d) for d in tu.diagnostics if d.severity > cindex.Diagnostic.Ignored]
    if errors:
        raise FrontEndError(f"{tu.spelling}: header did not parse cleanly", errors)


def parse_header(
    path: str,
    config: Optional[Config] = None,
    unsaved_files: Optional[Sequence[Tuple[str, str]]] = None,
) -> cindex.TranslationUnit:
    cfg = config or Config()
    try_set_libclang()

    args = build_clang_args(cfg)
    logger.debug("parsing %s with %s", path, args)

    idx = cindex.Index.create(excludeDecls=True)
    try:
        tu = idx.parse(path, args=args, unsaved_files=list(unsaved_files or []))
    except cindex.TranslationUnitLoadError as e:
        raise FrontEndError("parse translation unit failure", [str(e)]) from e

    check_diagnostics(tu)
    return tu
