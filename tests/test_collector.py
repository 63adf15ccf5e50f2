"""
Declaration collection: eligibility, ordering, parameter binding and the
traversal invariants.
"""

import pytest
from clang.cindex import CursorKind, StorageClass

from parseh import (
    Config,
    Declaration,
    DeclCollector,
    Directive,
    Int,
    Parameter,
    Pointer,
    StructuralInvariantError,
    TranslationContext,
    Unsupported,
    Void,
    walk,
)
from parseh.collector import is_storage_class_export
from parseh.model import OPAQUE_POINTER, SourceLoc

from conftest import collect_src


def names(result):
    return [d.name for d in result.declarations]


def test_void_function_without_params(collect):
    res = collect("void f(void);")
    assert len(res.declarations) == 1
    fn = res.declarations[0]
    assert fn.name == "f"
    assert fn.return_type == Void()
    assert fn.parameters == []


def test_add_binds_names_and_types(collect):
    res = collect("int add(int a, int b);")
    fn = res.find("add")
    assert fn.return_type == Int("int", True)
    assert fn.parameters == [Parameter("a", Int("int", True)), Parameter("b", Int("int", True))]


def test_order_is_source_order(collect):
    res = collect(
        """
        void zeta(void);
        int alpha(int x);
        double mid(float y);
        """
    )
    assert names(res) == ["zeta", "alpha", "mid"]


def test_last_function_is_committed(collect):
    res = collect(
        """
        void first(void);
        struct Tail { int v; };
        int last(int n);
        """
    )
    assert names(res) == ["first", "last"]
    assert res.find("last").parameters[0].name == "n"


def test_static_function_excluded(collect):
    res = collect(
        """
        static void hidden(void);
        void shown(void);
        """
    )
    assert names(res) == ["shown"]
    assert any(d.severity == "note" and "hidden" in d.message for d in res.diagnostics)


def test_variadic_function_excluded_with_warning(collect):
    res = collect("void g(int x, ...);")
    assert res.declarations == []
    assert len(res.diagnostics) == 1
    d = res.diagnostics[0]
    assert d.severity == "warning"
    assert "variadic" in d.message
    assert d.location.line == 1


def test_non_c_calling_convention_excluded():
    res = collect_src(
        """
        void __attribute__((ms_abi)) win(int a);
        void plain(int a);
        """,
        "--target=x86_64-unknown-linux-gnu",
    )
    assert names(res) == ["plain"]
    assert any("calling convention" in d.message for d in res.diagnostics)


def test_function_without_prototype_excluded(collect):
    res = collect(
        """
        int kr();
        int proto(void);
        """
    )
    assert names(res) == ["proto"]
    assert any("prototype" in d.message for d in res.diagnostics)


def test_only_eligible_functions_counted():
    res = collect_src(
        """
        static int s(int a);
        void v(const char *fmt, ...);
        void __attribute__((ms_abi)) w(void);
        extern int e(int a);
        int n(int a);
        """,
        "--target=x86_64-unknown-linux-gnu",
    )
    assert names(res) == ["e", "n"]


def test_unnamed_parameters_keep_position(collect):
    res = collect("void anon(int, char *);")
    fn = res.find("anon")
    assert fn.parameters == [
        Parameter("", Int("int", True)),
        Parameter("", Pointer(True, Int(8, False))),
    ]


def test_definition_body_is_not_walked(collect):
    res = collect(
        """
        int body(int a) {
            int local = a;
            return local;
        }
        void after(void);
        """
    )
    assert names(res) == ["body", "after"]
    assert res.find("body").parameters == [Parameter("a", Int("int", True))]


def test_redeclaration_collected_once(collect):
    res = collect(
        """
        int twice(int a);
        void between(void);
        int twice(int a);
        """
    )
    assert names(res) == ["twice", "between"]


def test_redeclaration_fills_missing_parameter_names(collect):
    res = collect("int r(int);\nint r(int value);")
    assert names(res) == ["r"]
    assert res.find("r").parameters == [Parameter("value", Int("int", True))]


def test_redeclaration_keeps_first_names(collect):
    res = collect("int r(int first, int);\nint r(int second, int count);")
    assert res.find("r").parameters == [
        Parameter("first", Int("int", True)),
        Parameter("count", Int("int", True)),
    ]


def test_typedef_function_declaration(collect):
    res = collect("typedef int fn_t(int a, int b);\nfn_t foo;")
    fn = res.find("foo")
    assert fn.return_type == Int("int", True)
    assert [p.type for p in fn.parameters] == [Int("int", True), Int("int", True)]
    # clang synthesizes unnamed parameters from the typedef
    assert [p.name for p in fn.parameters] == ["", ""]


def test_function_returning_function_pointer(collect):
    res = collect("void (*handler(int sig))(int code);")
    fn = res.find("handler")
    assert fn.return_type == Pointer(True, Unsupported("function proto", OPAQUE_POINTER))
    assert fn.parameters == [Parameter("sig", Int("int", True))]


def test_function_pointer_variable_does_not_steal_parameters(collect):
    res = collect(
        """
        int after(int a);
        int (*fp)(int x, int y);
        """
    )
    assert res.find("after").parameters == [Parameter("a", Int("int", True))]


def test_empty_header(collect):
    res = collect("struct Only { int x; };")
    assert res.declarations == []
    assert res.diagnostics == []


def test_main_file_only(tmp_path):
    (tmp_path / "dep.h").write_text("void theirs(void);\n")
    main = tmp_path / "main.h"
    main.write_text('#include "dep.h"\nvoid mine(void);\n')

    from parseh import collect_declarations, parse_header

    cfg = Config(clang_args=["-x", "c"])
    assert names(collect_declarations(parse_header(str(main), cfg), cfg)) == ["theirs", "mine"]

    cfg = Config(clang_args=["-x", "c"], main_file_only=True)
    assert names(collect_declarations(parse_header(str(main), cfg), cfg)) == ["mine"]


class FakeLocation:
    file = None
    line = 0
    column = 0


class FakeCursor:
    def __init__(self, kind, spelling="", children=()):
        self.kind = kind
        self.spelling = spelling
        self.children = list(children)
        self.location = FakeLocation()

    def get_children(self):
        return iter(self.children)


def test_walk_obeys_directives():
    leaf = FakeCursor(CursorKind.PARM_DECL, "leaf")
    skipped = FakeCursor(CursorKind.COMPOUND_STMT, "skipped", [FakeCursor(CursorKind.PARM_DECL, "hidden")])
    entered = FakeCursor(CursorKind.FUNCTION_DECL, "entered", [leaf])
    stop = FakeCursor(CursorKind.VAR_DECL, "stop")
    never = FakeCursor(CursorKind.VAR_DECL, "never")
    root = FakeCursor(CursorKind.TRANSLATION_UNIT, "tu", [skipped, entered, stop, never])

    seen = []

    def visitor(cur, parent):
        seen.append((cur.spelling, parent.spelling))
        if cur.kind == CursorKind.COMPOUND_STMT:
            return Directive.CONTINUE
        if cur.spelling == "stop":
            return Directive.BREAK
        return Directive.RECURSE

    assert walk(root, visitor) is False
    assert seen == [("skipped", "tu"), ("entered", "tu"), ("leaf", "entered"), ("stop", "tu")]


def test_surplus_parameter_node_is_invariant_violation():
    c = DeclCollector(TranslationContext())
    param = FakeCursor(CursorKind.PARM_DECL, "x")
    c.begin_fn(Declaration("f", Void(), []), [param])
    with pytest.raises(StructuralInvariantError, match="more parameter nodes"):
        c.visit_param(param)


def test_missing_parameter_nodes_is_invariant_violation():
    c = DeclCollector(TranslationContext())
    c.begin_fn(Declaration("g", Void(), [Parameter("", Int("int", True))]), [])
    with pytest.raises(StructuralInvariantError, match="bound 0 of 1"):
        c.finish()


def test_nested_begin_is_invariant_violation():
    c = DeclCollector(TranslationContext())
    c.begin_fn(Declaration("a", Void(), []), [])
    with pytest.raises(StructuralInvariantError):
        c.begin_fn(Declaration("b", Void(), []), [])


def test_foreign_parameter_node_is_ignored():
    c = DeclCollector(TranslationContext())
    own = FakeCursor(CursorKind.PARM_DECL, "own")
    c.begin_fn(Declaration("f", Void(), [Parameter("", Int("int", True))]), [own])
    assert c(FakeCursor(CursorKind.PARM_DECL, "stray"), FakeCursor(CursorKind.VAR_DECL)) is Directive.CONTINUE
    assert c(own, FakeCursor(CursorKind.FUNCTION_DECL)) is Directive.CONTINUE
    assert c.finish()[0].parameters == [Parameter("own", Int("int", True))]


def test_storage_classes():
    assert is_storage_class_export(StorageClass.NONE)
    assert is_storage_class_export(StorageClass.EXTERN)
    assert not is_storage_class_export(StorageClass.STATIC)
    assert not is_storage_class_export(StorageClass.REGISTER)
    with pytest.raises(StructuralInvariantError) as exc:
        is_storage_class_export(StorageClass.INVALID, SourceLoc("x.h", 4, 2))
    assert exc.value.location == SourceLoc("x.h", 4, 2)
    assert str(exc.value).startswith("x.h line 4, column 2:")
