#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

from clang import cindex
from clang.cindex import Cursor, TypeKind

from .config import Config
from .errors import UnsupportedTypeError
from .model import (
    BOOL,
    OPAQUE_POINTER,
    UNKNOWN_LOC,
    VOID,
    Array,
    Diagnostic,
    Float,
    Int,
    Named,
    Pointer,
    SourceLoc,
    TypeExpr,
    Unsupported,
)


@dataclass
class TranslationContext:
    config: Config = field(default_factory=Config)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    location: SourceLoc = UNKNOWN_LOC

    def report(self, severity: str, msg: str) -> None:
        self.diagnostics.append(Diagnostic(severity, msg, self.location))

    def warn(self, msg: str) -> None:
        self.report("warning", msg)

    def note(self, msg: str) -> None:
        self.report("note", msg)


def cursor_loc(cur: Cursor) -> SourceLoc:
    loc = cur.location
    f = str(loc.file) if loc.file else "<unknown>"
    return SourceLoc(f, loc.line, loc.column)


def _kinds(*names: str) -> FrozenSet[TypeKind]:
    acc = set()
    for name in names:
        k = getattr(TypeKind, name, None)
        if k is not None:
            acc.add(k)
    return frozenset(acc)


def all_type_kinds() -> List[TypeKind]:
    kinds = getattr(TypeKind, "_kinds", None)
    if kinds is None:
        return list(TypeKind)
    return [k for k in kinds if k is not None]


OPAQUE_KINDS = _kinds("UNEXPOSED", "ATTRIBUTED")
ELABORATED_KINDS = _kinds("ELABORATED")
POINTER_KINDS = _kinds("POINTER", "INCOMPLETEARRAY")
NAMED_KINDS = _kinds("RECORD", "ENUM")

CHAR_KINDS: Dict[TypeKind, Int] = {
    TypeKind.SCHAR: Int(8, True),
    TypeKind.CHAR_S: Int(8, False),
    TypeKind.CHAR_U: Int(8, False),
    TypeKind.UCHAR: Int(8, False),
}

INT_KINDS: Dict[TypeKind, Int] = {
    TypeKind.SHORT: Int("short", True),
    TypeKind.INT: Int("int", True),
    TypeKind.LONG: Int("long", True),
    TypeKind.LONGLONG: Int("longlong", True),
    TypeKind.USHORT: Int("short", False),
    TypeKind.UINT: Int("int", False),
    TypeKind.ULONG: Int("long", False),
    TypeKind.ULONGLONG: Int("longlong", False),
}

FLOAT_KINDS: Dict[TypeKind, Float] = {
    TypeKind.FLOAT: Float(32),
    TypeKind.DOUBLE: Float(64),
    TypeKind.LONGDOUBLE: Float(128),
}

UNSUPPORTED_KINDS = _kinds(
    "INVALID",
    "INT128",
    "UINT128",
    "WCHAR",
    "CHAR16",
    "CHAR32",
    "HALF",
    "FLOAT16",
    "FLOAT128",
    "BFLOAT16",
    "IBM128",
    "SHORTACCUM",
    "ACCUM",
    "LONGACCUM",
    "USHORTACCUM",
    "UACCUM",
    "ULONGACCUM",
    "NULLPTR",
    "OVERLOAD",
    "DEPENDENT",
    "OBJCID",
    "OBJCCLASS",
    "OBJCSEL",
    "OBJCINTERFACE",
    "OBJCOBJECTPOINTER",
    "OBJCOBJECT",
    "OBJCTYPEPARAM",
    "COMPLEX",
    "BLOCKPOINTER",
    "LVALUEREFERENCE",
    "RVALUEREFERENCE",
    "FUNCTIONNOPROTO",
    "VECTOR",
    "EXTVECTOR",
    "VARIABLEARRAY",
    "DEPENDENTSIZEDARRAY",
    "MEMBERPOINTER",
    "AUTO",
    "PIPE",
    "ATOMIC",
    "BTFTAGATTRIBUTED",
    "HLSLRESOURCE",
    "HLSLATTRIBUTEDRESOURCE",
)

FIXED_WIDTH_TYPEDEFS: Dict[str, Int] = {
    "int8_t": Int(8, True),
    "uint8_t": Int(8, False),
    "int16_t": Int(16, True),
    "uint16_t": Int(16, False),
    "int32_t": Int(32, True),
    "uint32_t": Int(32, False),
    "int64_t": Int(64, True),
    "uint64_t": Int(64, False),
}

_TYPE_PREFIXES = ("struct ", "enum ", "const ")


def is_unsupported_kind(kind: TypeKind) -> bool:
    # OpenCL image/sampler/queue kinds are numerous and grow between releases.
    return kind in UNSUPPORTED_KINDS or kind.name.startswith("OCL")


def _classified(kind: TypeKind) -> bool:
    return (
        kind in OPAQUE_KINDS
        or kind in ELABORATED_KINDS
        or kind in POINTER_KINDS
        or kind in NAMED_KINDS
        or kind in CHAR_KINDS
        or kind in INT_KINDS
        or kind in FLOAT_KINDS
        or kind in (TypeKind.VOID, TypeKind.BOOL, TypeKind.TYPEDEF, TypeKind.CONSTANTARRAY, TypeKind.FUNCTIONPROTO)
        or is_unsupported_kind(kind)
    )


def unclassified_type_kinds() -> List[TypeKind]:
    return [k for k in all_type_kinds() if not _classified(k)]


_unclassified = unclassified_type_kinds()
if _unclassified:
    warnings.warn(
        "clang bindings expose type kinds with no translation rule: "
        + ", ".join(sorted(k.name for k in _unclassified)),
        RuntimeWarning,
    )


def strip_type_prefixes(spelling: str) -> str:
    s = spelling or ""
    changed = True
    while changed:
        changed = False
        for p in _TYPE_PREFIXES:
            if s.startswith(p):
                s = s[len(p) :]
                changed = True
    return s


def _named(t: cindex.Type, ctx: TranslationContext) -> Named:
    name = strip_type_prefixes(t.spelling)
    if not name or "unnamed at" in name or "anonymous at" in name:
        raise UnsupportedTypeError(f"TODO anonymous {t.kind.name.lower()}", ctx.location)
    return Named(name)


def _pointer(pointee: cindex.Type, ctx: TranslationContext) -> Pointer:
    return Pointer(mutable=not pointee.is_const_qualified(), pointee=translate_type(pointee, ctx))


def translate_type(t: cindex.Type, ctx: TranslationContext) -> TypeExpr:
    k = t.kind

    if k in OPAQUE_KINDS:
        canonical = t.get_canonical()
        if canonical.kind in OPAQUE_KINDS:
            raise UnsupportedTypeError("clang C api insufficient", ctx.location)
        return translate_type(canonical, ctx)

    if k in ELABORATED_KINDS:
        return translate_type(t.get_named_type(), ctx)

    if k == TypeKind.VOID:
        return VOID
    if k == TypeKind.BOOL:
        return BOOL
    if k in CHAR_KINDS:
        return CHAR_KINDS[k]
    if k in INT_KINDS:
        return INT_KINDS[k]
    if k in FLOAT_KINDS:
        return FLOAT_KINDS[k]

    if k == TypeKind.POINTER:
        return _pointer(t.get_pointee(), ctx)
    if k == TypeKind.INCOMPLETEARRAY:
        return _pointer(t.element_type, ctx)

    if k == TypeKind.CONSTANTARRAY:
        return Array(translate_type(t.element_type, ctx), t.element_count)

    if k in NAMED_KINDS:
        return _named(t, ctx)

    if k == TypeKind.TYPEDEF:
        name = strip_type_prefixes(t.spelling)
        fixed = FIXED_WIDTH_TYPEDEFS.get(name)
        if fixed is not None:
            return fixed
        return translate_type(t.get_declaration().underlying_typedef_type, ctx)

    if k == TypeKind.FUNCTIONPROTO:
        ctx.warn("TODO function proto")
        return Unsupported("function proto", OPAQUE_POINTER)

    if is_unsupported_kind(k):
        raise UnsupportedTypeError(f"TODO {k.name.lower()}", ctx.location)

    raise UnsupportedTypeError(f"unhandled type kind {k.name}", ctx.location)
