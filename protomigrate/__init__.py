"""Deprecation analysis steering Go code off the legacy protobuf runtime."""

from .analyzers import DeprecationFactExtractor, DeprecationUsageAnalyzer
from .errors import AnalysisError, InvariantViolation, MalformedInputError
from .models import DeprecationFact, Diagnostic, FactSet, ModuleDeprecationFact
from .runner import AnalysisResult, Runner

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "DeprecationFact",
    "DeprecationFactExtractor",
    "DeprecationUsageAnalyzer",
    "Diagnostic",
    "FactSet",
    "InvariantViolation",
    "MalformedInputError",
    "ModuleDeprecationFact",
    "Runner",
]
