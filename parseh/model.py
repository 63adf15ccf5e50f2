#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class SourceLoc:
    file: str = "<unknown>"
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file} line {self.line}, column {self.column}"


UNKNOWN_LOC = SourceLoc()


@dataclass(frozen=True)
class Void:
    pass


@dataclass(frozen=True)
class Bool:
    pass


@dataclass(frozen=True)
class Int:
    # 8/16/32/64 for exact widths, or a C category name ("short", "int",
    # "long", "longlong") whose width the destination resolves per platform.
    width: Union[int, str]
    signed: bool

    @property
    def exact(self) -> bool:
        return isinstance(self.width, int)


@dataclass(frozen=True)
class Float:
    width: int


@dataclass(frozen=True)
class Named:
    identifier: str


@dataclass(frozen=True)
class Pointer:
    mutable: bool
    pointee: "TypeExpr"


@dataclass(frozen=True)
class Array:
    element: "TypeExpr"
    size: int


@dataclass(frozen=True)
class Unsupported:
    reason: str
    placeholder: "TypeExpr"


TypeExpr = Union[Void, Bool, Int, Float, Named, Pointer, Array, Unsupported]

VOID = Void()
BOOL = Bool()
OPAQUE_POINTER = Pointer(mutable=False, pointee=Int(8, False))


@dataclass
class Parameter:
    name: str
    type: TypeExpr


@dataclass
class Declaration:
    name: str
    return_type: TypeExpr
    parameters: List[Parameter] = field(default_factory=list)
    location: SourceLoc = UNKNOWN_LOC


@dataclass(frozen=True)
class Diagnostic:
    severity: str
    message: str
    location: SourceLoc = UNKNOWN_LOC

    def __str__(self) -> str:
        return f"{self.location}\n{self.severity}: {self.message}"


@dataclass
class CollectResult:
    declarations: List[Declaration] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def find(self, name: str) -> Optional[Declaration]:
        for d in self.declarations:
            if d.name == name:
                return d
        return None
