"""Reporting of deprecated symbols and modules at their use-sites."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

from .base import is_same_module
from ..errors import InvariantViolation, MalformedInputError
from ..generated import Generator, GeneratorClassifier, classify_file
from ..knowledge import AlternativePolicy, KnowledgeTable, KnownDeprecation
from ..logging import get_logger
from ..models import Diagnostic, FactSet
from ..syntax import (
    File,
    FuncDecl,
    Ident,
    ImportSpec,
    Node,
    Package,
    Position,
    SelectorExpr,
    Symbol,
    SymbolKind,
    imported_module,
    iter_child_nodes,
    render,
    unquote_import_path,
)

# Core package of the legacy protobuf runtime; protoc-gen-go output may import it.
LEGACY_PROTO_PACKAGE = "github.com/golang/protobuf/proto"


class MessageShape(Enum):
    """Wording of a deprecated-use diagnostic."""

    DEPRECATED = "deprecated"
    NEVER_USE = "never-use"
    DEPRECATED_SINCE = "deprecated-since"
    ALTERNATIVE_SINCE = "alternative-since"


def select_shape(known: Optional[KnownDeprecation]) -> MessageShape:
    if known is None:
        return MessageShape.DEPRECATED
    if known.policy is AlternativePolicy.NEVER_USE:
        return MessageShape.NEVER_USE
    if (
        known.policy is AlternativePolicy.USE_NO_LONGER
        or known.alternative_since == known.deprecated_since
    ):
        return MessageShape.DEPRECATED_SINCE
    return MessageShape.ALTERNATIVE_SINCE


def _deprecated(expr: str, message: str, known: Optional[KnownDeprecation]) -> str:
    return f"{expr} is deprecated: {message}"


def _never_use(expr: str, message: str, known: KnownDeprecation) -> str:
    return (
        f"{expr} has been deprecated since version {known.deprecated_since} "
        f"because it shouldn't be used: {message}"
    )


def _deprecated_since(expr: str, message: str, known: KnownDeprecation) -> str:
    return f"{expr} has been deprecated since version {known.deprecated_since}: {message}"


def _alternative_since(expr: str, message: str, known: KnownDeprecation) -> str:
    return (
        f"{expr} has been deprecated since version {known.deprecated_since} "
        f"and an alternative has been available since version {known.alternative_since}: "
        f"{message}"
    )


_FORMATTERS: Dict[MessageShape, Callable[[str, str, Any], str]] = {
    MessageShape.DEPRECATED: _deprecated,
    MessageShape.NEVER_USE: _never_use,
    MessageShape.DEPRECATED_SINCE: _deprecated_since,
    MessageShape.ALTERNATIVE_SINCE: _alternative_since,
}


def format_usage_message(
    shape: MessageShape,
    expr: str,
    message: str,
    known: Optional[KnownDeprecation] = None,
) -> str:
    """Render the diagnostic text for a deprecated use of ``expr``.

    Every shape but ``DEPRECATED`` quotes versions and needs ``known``.
    """
    if known is None and shape is not MessageShape.DEPRECATED:
        raise InvariantViolation(f"{shape.value} message for {expr} needs a known deprecation")
    return _FORMATTERS[shape](expr, message, known)


def format_module_message(path: str, message: str) -> str:
    return f"module {path} is deprecated: {message}"


def selector_name(sel: SelectorExpr) -> str:
    """Return the qualified name used to look ``sel`` up in the knowledge table.

    Package-qualified references become ``path.Name``; method and field
    selections become ``(Recv).Name``.
    """
    if sel.selection is not None:
        return f"({sel.selection.recv}).{sel.sel.name}"
    if isinstance(sel.x, Ident):
        owner = sel.x.obj
        if owner is None or owner.kind is not SymbolKind.PACKAGE_NAME or owner.imported is None:
            return f"{sel.x.name}.{sel.sel.name}"
        return f"{owner.imported.path}.{sel.sel.name}"
    raise InvariantViolation(f"unsupported selector: {_render(sel)}")


@dataclass(frozen=True)
class _Unit:
    package: Package
    facts: FactSet
    file: File


class DeprecationUsageAnalyzer:
    """Flags uses of deprecated symbols and imports of deprecated modules."""

    name = "protomigrate"

    def __init__(
        self,
        knowledge: KnowledgeTable | None = None,
        target_version: int | None = None,
        classify: GeneratorClassifier = classify_file,
    ) -> None:
        self.knowledge = knowledge if knowledge is not None else KnowledgeTable.stdlib()
        self.target_version = (
            target_version if target_version is not None else self.knowledge.latest_version()
        )
        self.classify = classify
        self.logger = get_logger("usage")

    def analyze(self, package: Package, facts: FactSet) -> List[Diagnostic]:
        """Return the diagnostics for ``package`` given the facts visible to it.

        Member accesses are reported first, then imports, each in file order.
        """
        diagnostics: List[Diagnostic] = []
        for file in package.files:
            unit = _Unit(package=package, facts=facts, file=file)
            for decl in file.decls:
                # Top-level declarations start outside of any function.
                diagnostics.extend(self._walk(unit, decl, None))
        for file in package.files:
            unit = _Unit(package=package, facts=facts, file=file)
            for spec in file.imports:
                diagnostic = self._check_import(unit, spec)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)
        self.logger.debug("Reported %d diagnostics for %s", len(diagnostics), package.path)
        return diagnostics

    def _walk(self, unit: _Unit, node: Node, enclosing: Optional[Symbol]) -> Iterator[Diagnostic]:
        if isinstance(node, FuncDecl):
            enclosing = node.name.obj
        elif isinstance(node, SelectorExpr):
            diagnostic = self._check_selector(unit, node, enclosing)
            if diagnostic is not None:
                yield diagnostic
        for child in iter_child_nodes(node):
            yield from self._walk(unit, child, enclosing)

    def _check_selector(
        self, unit: _Unit, sel: SelectorExpr, enclosing: Optional[Symbol]
    ) -> Optional[Diagnostic]:
        obj = sel.sel.obj
        if obj is None:
            raise InvariantViolation(
                f"{unit.file.filename}: selector {_render(sel)} is not resolved"
            )
        if obj.module is None:
            return None
        if is_same_module(obj.module, unit.package.module):
            return None
        fact = unit.facts.object_fact(obj)
        if fact is None:
            return None

        known = self.knowledge.get(selector_name(sel))
        if known is not None and not known.reportable_at(self.target_version):
            return None
        if enclosing is not None and unit.facts.object_fact(enclosing) is not None:
            # Deprecated functions may use other deprecated symbols.
            return None

        shape = select_shape(known)
        message = format_usage_message(shape, _render(sel), fact.message, known)
        self.logger.debug("%s: %s", unit.file.filename, message)
        return Diagnostic(position=_position(sel), message=message)

    def _check_import(self, unit: _Unit, spec: ImportSpec) -> Optional[Diagnostic]:
        try:
            path = unquote_import_path(spec.path.value)
        except ValueError as exc:
            raise MalformedInputError(
                f"{unit.file.filename}: malformed import path {spec.path.value}"
            ) from exc
        module = imported_module(spec)
        if module is None:
            raise InvariantViolation(f"{unit.file.filename}: import {path} is not resolved")
        fact = unit.facts.module_fact(module)
        if fact is None:
            return None
        if path == LEGACY_PROTO_PACKAGE and self.classify(unit.file) is Generator.PROTOC_GEN_GO:
            self.logger.debug("Skipping %s import in generated %s", path, unit.file.filename)
            return None
        return Diagnostic(
            position=spec.pos or spec.path.pos,
            message=format_module_message(path, fact.message),
        )


def _render(sel: SelectorExpr) -> str:
    try:
        return render(sel)
    except TypeError as exc:
        raise InvariantViolation(str(exc)) from exc


def _position(sel: SelectorExpr) -> Optional[Position]:
    return sel.pos or sel.x.pos or sel.sel.pos


__all__ = [
    "DeprecationUsageAnalyzer",
    "LEGACY_PROTO_PACKAGE",
    "MessageShape",
    "format_module_message",
    "format_usage_message",
    "select_shape",
    "selector_name",
]
