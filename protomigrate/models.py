"""Core data models shared across protomigrate components."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .errors import InvariantViolation
from .syntax import Module, Position, Symbol


@dataclass(frozen=True)
class DeprecationFact:
    """Deprecation message bound to a declared symbol."""

    subject: Symbol
    message: str

    def __str__(self) -> str:
        return f"Deprecated: {self.message}"


@dataclass(frozen=True)
class ModuleDeprecationFact:
    """Deprecation message taken from a module's leading documentation."""

    subject: Module
    message: str

    def __str__(self) -> str:
        return f"Deprecated: {self.message}"


@dataclass(frozen=True)
class FactSet:
    """Read-only deprecation facts for one module or a merged dependency closure."""

    objects: Mapping[Symbol, DeprecationFact] = field(
        default_factory=lambda: MappingProxyType({})
    )
    modules: Mapping[Module, ModuleDeprecationFact] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "objects", MappingProxyType(dict(self.objects)))
        object.__setattr__(self, "modules", MappingProxyType(dict(self.modules)))

    @classmethod
    def build(
        cls,
        objects: Iterable[DeprecationFact] = (),
        modules: Iterable[ModuleDeprecationFact] = (),
    ) -> "FactSet":
        return cls(
            objects={fact.subject: fact for fact in objects},
            modules={fact.subject: fact for fact in modules},
        )

    @classmethod
    def union(cls, *sets: "FactSet") -> "FactSet":
        """Merge fact sets; a subject bound to two different messages is rejected."""
        objects: Dict[Symbol, DeprecationFact] = {}
        modules: Dict[Module, ModuleDeprecationFact] = {}
        for facts in sets:
            for symbol, fact in facts.objects.items():
                _merge_into(objects, symbol, fact)
            for module, module_fact in facts.modules.items():
                _merge_into(modules, module, module_fact)
        return cls(objects=objects, modules=modules)

    def object_fact(self, symbol: Symbol) -> Optional[DeprecationFact]:
        return self.objects.get(symbol)

    def module_fact(self, module: Module) -> Optional[ModuleDeprecationFact]:
        return self.modules.get(module)


def _merge_into(target: Dict, key: object, fact: object) -> None:
    existing = target.get(key)
    if existing is not None and existing != fact:
        raise InvariantViolation(f"conflicting deprecation facts for {key!r}")
    target[key] = fact


@dataclass(frozen=True)
class Diagnostic:
    """A reportable deprecated use-site."""

    position: Optional[Position]
    message: str

    def __str__(self) -> str:
        location = str(self.position) if self.position is not None else "<unknown>"
        return f"{location}: {self.message}"


__all__ = [
    "DeprecationFact",
    "Diagnostic",
    "FactSet",
    "ModuleDeprecationFact",
]
