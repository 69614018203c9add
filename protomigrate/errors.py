"""Errors raised while analysing a module."""


class AnalysisError(RuntimeError):
    """Raised when a module's analysis cannot produce a trustworthy result."""


class MalformedInputError(AnalysisError):
    """Raised when literal data handed over by the front-end cannot be parsed."""


class InvariantViolation(AnalysisError):
    """Raised when the syntax model has a shape the analyzers cannot interpret."""


__all__ = ["AnalysisError", "InvariantViolation", "MalformedInputError"]
