#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from clang import cindex


ENV_CFLAGS = "PARSEH_CFLAGS"


@dataclass
class Config:
    clang_args: List[str] = field(default_factory=list)
    std: Optional[str] = None
    main_file_only: bool = False
    env_cflags_var: str = ENV_CFLAGS


def env_cflags(var: str = ENV_CFLAGS, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    env = os.environ if environ is None else environ
    raw = env.get(var)
    if not raw:
        return []
    return raw.split()


def try_set_libclang(environ: Optional[Mapping[str, str]] = None) -> None:
    if cindex.Config.loaded:
        return

    env = os.environ if environ is None else environ
    lib_file = env.get("LIBCLANG_FILE")
    lib_path = env.get("LIBCLANG_PATH")

    if lib_file and os.path.exists(lib_file):
        cindex.Config.set_library_file(lib_file)
        return
    if lib_path and os.path.isdir(lib_path):
        cindex.Config.set_library_path(lib_path)
        return

    candidates = [
        r"C:\Program Files\LLVM\bin\libclang.dll",
        r"C:\Program Files (x86)\LLVM\bin\libclang.dll",
    ]
    for p in candidates:
        if os.path.exists(p):
            cindex.Config.set_library_file(p)
            return
