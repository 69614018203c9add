"""Pipeline that extracts facts along the import graph and reports deprecated uses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .analyzers import DeprecationFactExtractor, DeprecationUsageAnalyzer
from .config import ProtomigrateConfig, load_config
from .errors import AnalysisError, InvariantViolation
from .generated import GeneratorClassifier, classify_file
from .knowledge import KnowledgeTable
from .logging import configure_logging, get_logger
from .models import Diagnostic, FactSet
from .syntax import Package, Program, imported_module


@dataclass
class AnalysisResult:
    """Outcome of analysing one module."""

    path: str
    facts: FactSet = field(default_factory=FactSet)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Runner:
    """Runs fact extraction before usage analysis for the modules of a program.

    Facts are extracted once per module and merged over each module's import
    closure. Caches are tied to the program passed in; analysing a different
    program starts from scratch.
    """

    def __init__(
        self,
        config: ProtomigrateConfig | None = None,
        knowledge: KnowledgeTable | None = None,
        classify: GeneratorClassifier = classify_file,
        extractor: DeprecationFactExtractor | None = None,
    ) -> None:
        table = knowledge if knowledge is not None else KnowledgeTable.stdlib()
        target_version = None
        if config is not None:
            if config.knowledge:
                table = table.with_overrides(config.knowledge)
            target_version = config.target_version
        self.config = config
        self.knowledge = table
        self.extractor = extractor or DeprecationFactExtractor()
        self.usage = DeprecationUsageAnalyzer(
            knowledge=table, target_version=target_version, classify=classify
        )
        self.logger = get_logger("runner")
        self._program: Optional[Program] = None
        self._own_facts: Dict[str, FactSet] = {}
        self._closures: Dict[str, FactSet] = {}

    @classmethod
    def from_config_path(cls, path: Path, **kwargs: object) -> "Runner":
        """Build a runner from the .protomigrate.yml found at ``path``.

        The file's ``logging`` section configures the protomigrate loggers.
        """
        config = load_config(path)
        configure_logging(verbose=config.verbose, log_file=config.log_file)
        return cls(config=config, **kwargs)  # type: ignore[arg-type]

    @property
    def target_version(self) -> int:
        return self.usage.target_version

    def run(self, program: Program, path: str) -> AnalysisResult:
        """Analyse the module at ``path``; analysis errors propagate to the caller."""
        self._bind(program)
        package = self._package(program, path)
        self.logger.info("Analysing %s (target version %d)", path, self.target_version)
        facts = self.facts_for(program, path)
        diagnostics = self.usage.analyze(package, facts)
        self.logger.debug("%s: %d diagnostics", path, len(diagnostics))
        return AnalysisResult(path=path, facts=facts, diagnostics=diagnostics)

    def run_all(self, program: Program) -> Dict[str, AnalysisResult]:
        """Analyse every module, isolating failures to the module that raised them."""
        self._bind(program)
        results: Dict[str, AnalysisResult] = {}
        for path in sorted(program.packages):
            try:
                results[path] = self.run(program, path)
            except AnalysisError as exc:
                self.logger.error("Analysis of %s failed: %s", path, exc)
                results[path] = AnalysisResult(path=path, error=exc)
        return results

    def facts_for(self, program: Program, path: str) -> FactSet:
        """Return the facts visible to ``path``: its own plus its import closure's."""
        self._bind(program)
        return self._closure(program, self._package(program, path), ())

    def own_facts(self, package: Package) -> FactSet:
        cached = self._own_facts.get(package.path)
        if cached is None:
            cached = self.extractor.extract(package)
            self._own_facts[package.path] = cached
        return cached

    def _closure(self, program: Program, package: Package, visiting: Tuple[str, ...]) -> FactSet:
        cached = self._closures.get(package.path)
        if cached is not None:
            return cached
        if package.path in visiting:
            cycle = " -> ".join(visiting + (package.path,))
            raise InvariantViolation(f"import cycle: {cycle}")

        sets = [self.own_facts(package)]
        for dependency in _dependencies(package):
            imported = program.get(dependency)
            if imported is None:
                self.logger.debug("%s imports %s, which is not loaded", package.path, dependency)
                continue
            sets.append(self._closure(program, imported, visiting + (package.path,)))

        merged = FactSet.union(*sets)
        self._closures[package.path] = merged
        return merged

    def _bind(self, program: Program) -> None:
        if self._program is program:
            return
        self._program = program
        self._own_facts.clear()
        self._closures.clear()

    @staticmethod
    def _package(program: Program, path: str) -> Package:
        package = program.get(path)
        if package is None:
            raise AnalysisError(f"package {path} is not loaded")
        return package


def _dependencies(package: Package) -> List[str]:
    paths: List[str] = []
    for file in package.files:
        for spec in file.imports:
            module = imported_module(spec)
            if module is None:
                raise InvariantViolation(
                    f"{file.filename}: import {spec.path.value} is not resolved"
                )
            if module.path not in paths:
                paths.append(module.path)
    return paths


__all__ = ["AnalysisResult", "Runner"]
