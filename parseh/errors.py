#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from typing import List, Optional

from .model import SourceLoc


class ParsehError(Exception):
    def __init__(self, msg: str, location: Optional[SourceLoc] = None) -> None:
        super().__init__(f"{location}: {msg}" if location is not None else msg)
        self.msg = msg
        self.location = location


class UnsupportedTypeError(ParsehError):
    pass


class StructuralInvariantError(ParsehError):
    pass


class FrontEndError(ParsehError):
    def __init__(self, msg: str, diagnostics: Optional[List[str]] = None) -> None:
        self.diagnostics: List[str] = list(diagnostics or [])
        text = "\n".join([msg] + self.diagnostics)
        super().__init__(text)
        self.msg = msg
