"""Extraction of deprecation facts from documentation comments."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .base import extract_deprecation_message
from ..errors import InvariantViolation
from ..logging import get_logger
from ..models import DeprecationFact, FactSet, ModuleDeprecationFact
from ..syntax import (
    CommentGroup,
    FieldList,
    FuncDecl,
    GenDecl,
    Ident,
    InterfaceType,
    Package,
    StructType,
    Symbol,
    Token,
    TypeSpec,
    ValueSpec,
)

_DOCUMENTED_TOKENS = {Token.TYPE, Token.CONST, Token.VAR}


class DeprecationFactExtractor:
    """Marks symbols and modules whose documentation carries a deprecation notice."""

    name = "fact.deprecated"

    def __init__(self) -> None:
        self.logger = get_logger("facts")

    def extract(self, package: Package) -> FactSet:
        """Return the deprecation facts declared by ``package``.

        Only declaration headers are examined: function bodies, statements and
        expressions never contribute facts.
        """
        objects: Dict[Symbol, DeprecationFact] = {}
        modules: List[ModuleDeprecationFact] = []

        message = extract_deprecation_message(file.doc for file in package.files)
        if message is not None:
            modules.append(ModuleDeprecationFact(package.module, message))
            self.logger.debug("Module %s is deprecated: %s", package.path, message)

        for file in package.files:
            for decl in file.decls:
                if isinstance(decl, FuncDecl):
                    self._mark(objects, [decl.name], [decl.doc])
                elif isinstance(decl, GenDecl) and decl.tok in _DOCUMENTED_TOKENS:
                    self._visit_gen_decl(objects, decl)

        self.logger.debug(
            "Extracted %d deprecated symbols from %s", len(objects), package.path
        )
        return FactSet(objects=objects, modules={fact.subject: fact for fact in modules})

    def _visit_gen_decl(self, objects: Dict[Symbol, DeprecationFact], decl: GenDecl) -> None:
        # The group doc belongs to the first spec only; later specs use their own.
        group_docs: List[Optional[CommentGroup]] = [decl.doc]
        for spec in decl.specs:
            if isinstance(spec, TypeSpec):
                self._mark(objects, [spec.name], group_docs + [spec.doc])
                # Members are judged by their own doc, never the type's.
                if isinstance(spec.type, StructType):
                    self._visit_members(objects, spec.type.fields)
                elif isinstance(spec.type, InterfaceType):
                    self._visit_members(objects, spec.type.methods)
            elif isinstance(spec, ValueSpec):
                self._mark(objects, spec.names, group_docs + [spec.doc])
            group_docs = []

    def _visit_members(self, objects: Dict[Symbol, DeprecationFact], members: FieldList) -> None:
        for member in members.list:
            self._mark(objects, member.names, [member.doc])

    @staticmethod
    def _mark(
        objects: Dict[Symbol, DeprecationFact],
        names: Sequence[Ident],
        docs: Sequence[Optional[CommentGroup]],
    ) -> None:
        if not names:
            return
        message = extract_deprecation_message(docs)
        if message is None:
            return
        for name in names:
            symbol = name.obj
            if symbol is None:
                continue
            if symbol in objects:
                raise InvariantViolation(f"symbol {name.name} is declared more than once")
            objects[symbol] = DeprecationFact(symbol, message)


__all__ = ["DeprecationFactExtractor"]
