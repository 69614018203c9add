"""Tests for the deprecation usage analyzer."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from protomigrate.analyzers import (
    DeprecationUsageAnalyzer,
    MessageShape,
    format_usage_message,
    select_shape,
    selector_name,
)
from protomigrate.errors import InvariantViolation, MalformedInputError
from protomigrate.knowledge import KnowledgeTable, KnownDeprecation, NEVER_USE, USE_NO_LONGER
from protomigrate.models import DeprecationFact, FactSet, ModuleDeprecationFact
from protomigrate.syntax import (
    CallExpr,
    Comment,
    CommentGroup,
    ExprStmt,
    FuncLit,
    FuncType,
    BlockStmt,
    Ident,
    Module,
    Position,
    Selection,
    SelectorExpr,
    Symbol,
    SymbolKind,
)
from tests._fixtures.program_builder import ProgramBuilder


@dataclass
class World:
    legacy: Module
    app: Module
    old: Symbol
    new: Symbol
    facts: FactSet


def _world(builder: ProgramBuilder) -> World:
    legacy = builder.module("example.com/legacy")
    app = builder.module("example.com/app")
    old = builder.symbol(legacy, "Old")
    new = builder.symbol(legacy, "New")
    facts = FactSet.build([DeprecationFact(old, "use New instead.")])
    return World(legacy=legacy, app=app, old=old, new=new, facts=facts)


def _no_knowledge() -> DeprecationUsageAnalyzer:
    return DeprecationUsageAnalyzer(knowledge=KnowledgeTable(), target_version=0)


def test_reports_use_of_deprecated_symbol(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    spec, legacy_name = program_builder.import_spec(world.app, world.legacy)
    main = program_builder.symbol(world.app, "main")
    package = program_builder.package(
        world.app,
        program_builder.file(
            "main.go",
            [
                program_builder.imports(spec),
                program_builder.func(
                    main,
                    [
                        program_builder.call(program_builder.ref(legacy_name, world.old, line=7)),
                        program_builder.call(program_builder.ref(legacy_name, world.new, line=8)),
                    ],
                ),
            ],
        ),
    )

    diagnostics = _no_knowledge().analyze(package, world.facts)

    assert [d.message for d in diagnostics] == ["legacy.Old is deprecated: use New instead."]
    assert diagnostics[0].position == Position("main.go", 7)


def test_module_never_flags_its_own_symbols(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    self_name = Symbol("legacy", SymbolKind.PACKAGE_NAME, world.legacy, imported=world.legacy)
    caller = program_builder.symbol(world.legacy, "Caller")
    body = [program_builder.call(program_builder.ref(self_name, world.old))]
    package = program_builder.package(
        world.legacy,
        program_builder.file("legacy.go", [program_builder.func(caller, body)], package_name="legacy"),
    )

    assert _no_knowledge().analyze(package, world.facts) == []


def test_test_augmentation_does_not_flag_its_module(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    test_module = program_builder.module("example.com/legacy_test")
    spec, legacy_name = program_builder.import_spec(test_module, world.legacy)
    check = program_builder.symbol(test_module, "TestOld")
    package = program_builder.package(
        test_module,
        program_builder.file(
            "legacy_test.go",
            [
                program_builder.imports(spec),
                program_builder.func(check, [program_builder.call(program_builder.ref(legacy_name, world.old))]),
            ],
        ),
    )

    assert _no_knowledge().analyze(package, world.facts) == []


def test_deprecated_function_may_use_deprecated_symbols(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    spec, legacy_name = program_builder.import_spec(world.app, world.legacy)
    wrapper = program_builder.symbol(world.app, "OldWrapper")
    fresh = program_builder.symbol(world.app, "Fresh")
    facts = FactSet.union(world.facts, FactSet.build([DeprecationFact(wrapper, "use Fresh.")]))
    package = program_builder.package(
        world.app,
        program_builder.file(
            "main.go",
            [
                program_builder.imports(spec),
                program_builder.func(wrapper, [program_builder.call(program_builder.ref(legacy_name, world.old, 3))]),
                program_builder.func(fresh, [program_builder.call(program_builder.ref(legacy_name, world.old, 6))]),
            ],
        ),
    )

    diagnostics = _no_knowledge().analyze(package, facts)

    assert [d.position.line for d in diagnostics] == [6]


def test_function_literals_keep_the_enclosing_declaration(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    spec, legacy_name = program_builder.import_spec(world.app, world.legacy)
    wrapper = program_builder.symbol(world.app, "OldWrapper")
    facts = FactSet.union(world.facts, FactSet.build([DeprecationFact(wrapper, "use Fresh.")]))
    closure = FuncLit(
        FuncType(),
        BlockStmt([program_builder.call(program_builder.ref(legacy_name, world.old))]),
    )
    package = program_builder.package(
        world.app,
        program_builder.file(
            "main.go",
            [program_builder.imports(spec), program_builder.func(wrapper, [ExprStmt(CallExpr(closure))])],
        ),
    )

    assert _no_knowledge().analyze(package, facts) == []


def test_enclosing_function_resets_at_top_level(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    spec, legacy_name = program_builder.import_spec(world.app, world.legacy)
    wrapper = program_builder.symbol(world.app, "OldWrapper")
    handler = program_builder.symbol(world.app, "handler", SymbolKind.VAR)
    facts = FactSet.union(world.facts, FactSet.build([DeprecationFact(wrapper, "use Fresh.")]))
    package = program_builder.package(
        world.app,
        program_builder.file(
            "main.go",
            [
                program_builder.imports(spec),
                program_builder.func(wrapper, [program_builder.call(program_builder.ref(legacy_name, world.old, 3))]),
                program_builder.var([handler], [program_builder.ref(legacy_name, world.old, 9)]),
            ],
        ),
    )

    diagnostics = _no_knowledge().analyze(package, facts)

    assert [d.position.line for d in diagnostics] == [9]


def test_symbols_without_module_are_ignored(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    builtin = Symbol("print", SymbolKind.BUILTIN)
    facts = FactSet.build([DeprecationFact(builtin, "never mind.")])
    receiver = Symbol("v", SymbolKind.VAR, world.app)
    sel = SelectorExpr(Ident("v", obj=receiver), Ident("print", obj=builtin), selection=Selection("T"))
    main = program_builder.symbol(world.app, "main")
    package = program_builder.package(
        world.app, program_builder.file("main.go", [program_builder.func(main, [ExprStmt(sel)])])
    )

    assert _no_knowledge().analyze(package, facts) == []


@pytest.fixture
def gated(program_builder: ProgramBuilder):
    """Return a package using ``x.X`` and a factory for analyzers with a given entry."""
    lib = program_builder.module("example.com/x")
    app = program_builder.module("example.com/app")
    symbol = program_builder.symbol(lib, "X")
    spec, lib_name = program_builder.import_spec(app, lib)
    main = program_builder.symbol(app, "main")
    package = program_builder.package(
        app,
        program_builder.file(
            "main.go",
            [program_builder.imports(spec), program_builder.func(main, [program_builder.call(program_builder.ref(lib_name, symbol))])],
        ),
    )
    facts = FactSet.build([DeprecationFact(symbol, "use Y.")])

    def analyze(deprecated: int, alternative: int, target: int) -> list[str]:
        table = KnowledgeTable([KnownDeprecation.from_versions("example.com/x.X", deprecated, alternative)])
        analyzer = DeprecationUsageAnalyzer(knowledge=table, target_version=target)
        return [d.message for d in analyzer.analyze(package, facts)]

    return analyze


def test_alternative_version_gates_reporting(gated) -> None:
    assert gated(6, 3, 4) == [
        "x.X has been deprecated since version 6 and an alternative has been available since version 3: use Y."
    ]
    assert gated(6, 3, 2) == []


def test_never_use_is_reported_for_every_target(gated) -> None:
    expected = ["x.X has been deprecated since version 5 because it shouldn't be used: use Y."]
    for target in range(0, 25):
        assert gated(5, NEVER_USE, target) == expected


def test_use_no_longer_waits_for_the_deprecation_version(gated) -> None:
    assert gated(6, USE_NO_LONGER, 5) == []
    assert gated(6, USE_NO_LONGER, 6) == ["x.X has been deprecated since version 6: use Y."]


def test_alternative_in_same_version_uses_short_wording(gated) -> None:
    assert gated(7, 7, 7) == ["x.X has been deprecated since version 7: use Y."]
    assert gated(7, 7, 6) == []


def test_method_selection_is_looked_up_by_receiver(program_builder: ProgramBuilder) -> None:
    http = program_builder.module("net/http")
    app = program_builder.module("example.com/app")
    cancel = program_builder.symbol(http, "CancelRequest", SymbolKind.METHOD)
    transport = Symbol("t", SymbolKind.VAR, app)
    sel = SelectorExpr(
        Ident("t", obj=transport),
        Ident("CancelRequest", obj=cancel),
        selection=Selection("*net/http.Transport"),
    )
    main = program_builder.symbol(app, "main")
    package = program_builder.package(
        app, program_builder.file("main.go", [program_builder.func(main, [ExprStmt(CallExpr(sel))])])
    )
    facts = FactSet.build([DeprecationFact(cancel, "Use Request.WithContext instead.")])

    assert selector_name(sel) == "(*net/http.Transport).CancelRequest"
    diagnostics = DeprecationUsageAnalyzer(target_version=5).analyze(package, facts)
    assert [d.message for d in diagnostics] == [
        "t.CancelRequest has been deprecated since version 6 and an alternative has been "
        "available since version 5: Use Request.WithContext instead."
    ]
    assert DeprecationUsageAnalyzer(target_version=4).analyze(package, facts) == []


@pytest.fixture
def proto_world(program_builder: ProgramBuilder):
    proto = program_builder.module("github.com/golang/protobuf/proto")
    app = program_builder.module("example.com/app")
    facts = FactSet.build(
        modules=[ModuleDeprecationFact(proto, 'Use the "google.golang.org/protobuf/proto" package instead.')]
    )
    return proto, app, facts


def test_generated_protobuf_file_may_import_legacy_runtime(program_builder: ProgramBuilder, proto_world) -> None:
    proto, app, facts = proto_world
    spec, _ = program_builder.import_spec(app, proto)
    header = CommentGroup([Comment("// Code generated by protoc-gen-go. DO NOT EDIT.")])
    package = program_builder.package(
        app,
        program_builder.file("app.pb.go", [program_builder.imports(spec)], comments=[header]),
    )

    assert _no_knowledge().analyze(package, facts) == []


def test_hand_written_file_import_of_legacy_runtime_is_reported(
    program_builder: ProgramBuilder, proto_world
) -> None:
    proto, app, facts = proto_world
    spec, _ = program_builder.import_spec(app, proto)
    package = program_builder.package(app, program_builder.file("main.go", [program_builder.imports(spec)]))

    diagnostics = _no_knowledge().analyze(package, facts)

    assert [d.message for d in diagnostics] == [
        "module github.com/golang/protobuf/proto is deprecated: "
        'Use the "google.golang.org/protobuf/proto" package instead.'
    ]


def test_generated_exemption_is_limited_to_the_core_package(program_builder: ProgramBuilder) -> None:
    ptypes = program_builder.module("github.com/golang/protobuf/ptypes")
    app = program_builder.module("example.com/app")
    facts = FactSet.build(modules=[ModuleDeprecationFact(ptypes, "Use the well-known types directly.")])
    spec, _ = program_builder.import_spec(app, ptypes, alias="pt")
    header = CommentGroup([Comment("// Code generated by protoc-gen-go. DO NOT EDIT.")])
    package = program_builder.package(
        app,
        program_builder.file("app.pb.go", [program_builder.imports(spec)], comments=[header]),
    )

    diagnostics = _no_knowledge().analyze(package, facts)

    assert len(diagnostics) == 1
    assert diagnostics[0].message.startswith("module github.com/golang/protobuf/ptypes is deprecated")


def test_malformed_import_path_is_fatal(program_builder: ProgramBuilder, proto_world) -> None:
    proto, app, facts = proto_world
    spec, _ = program_builder.import_spec(app, proto, literal='"github.com/golang/protobuf/proto')
    package = program_builder.package(app, program_builder.file("main.go", [program_builder.imports(spec)]))

    with pytest.raises(MalformedInputError):
        _no_knowledge().analyze(package, facts)


def test_unresolved_selector_is_an_invariant_violation(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    main = program_builder.symbol(world.app, "main")
    sel = SelectorExpr(Ident("legacy"), Ident("Old"))
    package = program_builder.package(
        world.app, program_builder.file("main.go", [program_builder.func(main, [ExprStmt(sel)])])
    )

    with pytest.raises(InvariantViolation):
        _no_knowledge().analyze(package, world.facts)


def test_unsupported_selector_shape_is_an_invariant_violation(program_builder: ProgramBuilder) -> None:
    world = _world(program_builder)
    factory = program_builder.symbol(world.app, "factory")
    main = program_builder.symbol(world.app, "main")
    sel = SelectorExpr(CallExpr(program_builder.ident(factory)), Ident("Old", obj=world.old))
    package = program_builder.package(
        world.app, program_builder.file("main.go", [program_builder.func(main, [ExprStmt(sel)])])
    )

    with pytest.raises(InvariantViolation):
        _no_knowledge().analyze(package, world.facts)


def test_message_shapes_follow_policy() -> None:
    never = KnownDeprecation.from_versions("a.A", 3, NEVER_USE)
    no_longer = KnownDeprecation.from_versions("a.B", 3, USE_NO_LONGER)
    same = KnownDeprecation.from_versions("a.C", 3, 3)
    earlier = KnownDeprecation.from_versions("a.D", 6, 3)

    assert select_shape(None) is MessageShape.DEPRECATED
    assert select_shape(never) is MessageShape.NEVER_USE
    assert select_shape(no_longer) is MessageShape.DEPRECATED_SINCE
    assert select_shape(same) is MessageShape.DEPRECATED_SINCE
    assert select_shape(earlier) is MessageShape.ALTERNATIVE_SINCE
    assert format_usage_message(MessageShape.DEPRECATED, "a.A", "gone") == "a.A is deprecated: gone"
    assert (
        format_usage_message(MessageShape.NEVER_USE, "a.A", "gone", never)
        == "a.A has been deprecated since version 3 because it shouldn't be used: gone"
    )


@pytest.mark.parametrize(
    "shape",
    [MessageShape.NEVER_USE, MessageShape.DEPRECATED_SINCE, MessageShape.ALTERNATIVE_SINCE],
)
def test_versioned_message_shapes_require_a_known_deprecation(shape: MessageShape) -> None:
    with pytest.raises(InvariantViolation):
        format_usage_message(shape, "x.X", "gone")
