#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from typing import Sequence

from .model import Array, Bool, Declaration, Float, Int, Named, Pointer, TypeExpr, Unsupported, Void

INDENT = " " * 4


def render_type(t: TypeExpr) -> str:
    if isinstance(t, Void):
        return "void"
    if isinstance(t, Bool):
        return "bool"
    if isinstance(t, Int):
        if t.exact:
            return f"{'i' if t.signed else 'u'}{t.width}"
        return f"c_{'' if t.signed else 'u'}{t.width}"
    if isinstance(t, Float):
        return f"f{t.width}"
    if isinstance(t, Named):
        return t.identifier
    if isinstance(t, Pointer):
        return f"*{'mut' if t.mutable else 'const'} {render_type(t.pointee)}"
    if isinstance(t, Array):
        return f"[{render_type(t.element)}; {t.size}]"
    if isinstance(t, Unsupported):
        return render_type(t.placeholder)
    raise TypeError(f"not a type expression: {t!r}")


def render_signature(fn: Declaration) -> str:
    params = ", ".join(f"{p.name}: {render_type(p.type)}" for p in fn.parameters)
    sig = f"fn {fn.name}({params})"
    if not isinstance(fn.return_type, Void):
        sig += f" -> {render_type(fn.return_type)}"
    return sig + ";"


def render_extern_block(decls: Sequence[Declaration]) -> str:
    if not decls:
        return ""
    lines = ["extern {"]
    lines.extend(INDENT + render_signature(fn) for fn in decls)
    lines.append("}")
    return "\n".join(lines) + "\n"
