#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, List, Optional, Tuple

from clang import cindex
from clang.cindex import Cursor, CursorKind, StorageClass, TypeKind

from .config import Config
from .errors import StructuralInvariantError
from .model import CollectResult, Declaration, Parameter, SourceLoc
from .translator import TranslationContext, cursor_loc, translate_type

logger = logging.getLogger(__name__)

CALLING_CONV_C = 1

EXPORTED_STORAGE = {StorageClass.NONE, StorageClass.EXTERN, StorageClass.AUTO}
HIDDEN_STORAGE = {
    StorageClass.STATIC,
    StorageClass.PRIVATEEXTERN,
    StorageClass.OPENCLWORKGROUPLOCAL,
    StorageClass.REGISTER,
}

SKIPPED_KINDS = {
    CursorKind.UNEXPOSED_ATTR,
    CursorKind.COMPOUND_STMT,
    CursorKind.FIELD_DECL,
    CursorKind.TYPEDEF_DECL,
}


class Directive(enum.Enum):
    CONTINUE = "continue"
    RECURSE = "recurse"
    BREAK = "break"


Visitor = Callable[[Cursor, Cursor], Directive]


def walk(cur: Cursor, visitor: Visitor) -> bool:
    for ch in cur.get_children():
        d = visitor(ch, cur)
        if d is Directive.BREAK:
            return False
        if d is Directive.RECURSE and not walk(ch, visitor):
            return False
    return True


def function_type(cur: Cursor) -> Tuple[cindex.Type, bool]:
    t = cur.type
    if t.kind in (TypeKind.FUNCTIONPROTO, TypeKind.FUNCTIONNOPROTO):
        return t, False
    # attributed or typedef'd function types
    return t.get_canonical(), True


def calling_conv(fn_type: cindex.Type) -> int:
    return cindex.conf.lib.clang_getFunctionTypeCallingConv(fn_type)


def is_storage_class_export(storage_class: StorageClass, location: Optional[SourceLoc] = None) -> bool:
    if storage_class in EXPORTED_STORAGE:
        return True
    if storage_class in HIDDEN_STORAGE:
        return False
    raise StructuralInvariantError(f"unexpected storage class {storage_class.name}", location)


class DeclCollector:
    def __init__(self, ctx: TranslationContext) -> None:
        self.ctx = ctx
        self.decls: List[Declaration] = []
        self.cur_fn: Optional[Declaration] = None
        self.cur_args: List[Cursor] = []
        self.arg_index = 0
        self.by_usr: Dict[str, Declaration] = {}
        self.main_file: Optional[str] = None

    def begin_fn(self, decl: Declaration, args: List[Cursor]) -> None:
        if self.cur_fn is not None:
            raise StructuralInvariantError("function started while another is in progress", self.ctx.location)
        self.cur_fn = decl
        self.cur_args = args
        self.arg_index = 0

    def end_fn(self) -> None:
        if self.cur_fn is None:
            return
        if self.arg_index != len(self.cur_fn.parameters):
            raise StructuralInvariantError(
                f"function '{self.cur_fn.name}' bound {self.arg_index} of "
                f"{len(self.cur_fn.parameters)} parameter names",
                self.cur_fn.location,
            )
        logger.debug("collected %s", self.cur_fn.name)
        self.decls.append(self.cur_fn)
        self.cur_fn = None
        self.cur_args = []
        self.arg_index = 0

    def finish(self) -> List[Declaration]:
        self.end_fn()
        return self.decls

    def __call__(self, cur: Cursor, parent: Cursor) -> Directive:
        self.ctx.location = cursor_loc(cur)
        kind = cur.kind

        if kind == CursorKind.FUNCTION_DECL:
            return self.visit_function(cur)
        if kind == CursorKind.PARM_DECL:
            return self.visit_param(cur)
        if kind in SKIPPED_KINDS or kind.is_attribute():
            return Directive.CONTINUE
        return Directive.RECURSE

    def skip(self, cur: Cursor, msg: str, note: bool = False) -> Directive:
        logger.debug("skipping %s: %s", cur.spelling, msg)
        if note:
            self.ctx.note(msg)
        else:
            self.ctx.warn(msg)
        return Directive.CONTINUE

    def visit_function(self, cur: Cursor) -> Directive:
        if not is_storage_class_export(cur.storage_class, self.ctx.location):
            return self.skip(cur, f"skipping non-exported function '{cur.spelling}'", note=True)

        if self.ctx.config.main_file_only and not self.in_main_file(cur):
            return Directive.CONTINUE

        fn_type, sugared = function_type(cur)
        if fn_type.kind != TypeKind.FUNCTIONPROTO:
            return self.skip(cur, "skipping function without prototype, not yet supported")
        if fn_type.is_function_variadic():
            return self.skip(cur, "skipping variadic function, not yet supported")
        if calling_conv(fn_type) != CALLING_CONV_C:
            return self.skip(cur, "skipping non c calling convention function, not yet supported")

        usr = cur.get_usr()
        seen = self.by_usr.get(usr) if usr else None
        if seen is not None:
            logger.debug("merging redeclaration of %s", cur.spelling)
            self.fill_names(seen, cur)
            return Directive.CONTINUE

        self.end_fn()

        decl = Declaration(
            name=cur.spelling,
            return_type=translate_type(fn_type.get_result(), self.ctx),
            location=self.ctx.location,
        )
        for param_type in fn_type.argument_types():
            decl.parameters.append(Parameter("", translate_type(param_type, self.ctx)))

        if usr:
            self.by_usr[usr] = decl
        args = list(cur.get_arguments())
        self.begin_fn(decl, args)

        if sugared:
            # declared through a typedef'd function type: clang synthesizes
            # the parameters but never visits them as children
            for a in args:
                self.visit_param(a)
        return Directive.RECURSE

    def visit_param(self, cur: Cursor) -> Directive:
        if self.cur_fn is None or cur not in self.cur_args:
            # parameters of a nested prototype, e.g. a function pointer type
            return Directive.CONTINUE
        if self.arg_index >= len(self.cur_fn.parameters):
            raise StructuralInvariantError(
                f"function '{self.cur_fn.name}' has more parameter nodes than its type declares",
                self.ctx.location,
            )
        self.cur_fn.parameters[self.arg_index].name = cur.spelling
        self.arg_index += 1
        return Directive.CONTINUE

    def fill_names(self, decl: Declaration, cur: Cursor) -> None:
        for p, a in zip(decl.parameters, cur.get_arguments()):
            if not p.name:
                p.name = a.spelling

    def in_main_file(self, cur: Cursor) -> bool:
        if self.main_file is None:
            return True
        loc = cur.location
        return loc.file is not None and loc.file.name == self.main_file


def collect_declarations(
    tu: cindex.TranslationUnit,
    config: Optional[Config] = None,
    ctx: Optional[TranslationContext] = None,
) -> CollectResult:
    if ctx is None:
        ctx = TranslationContext(config=config or Config())
    collector = DeclCollector(ctx)
    collector.main_file = tu.spelling
    walk(tu.cursor, collector)
    decls = collector.finish()
    return CollectResult(declarations=decls, diagnostics=ctx.diagnostics)
