"""Deprecation analyzers: fact extraction and use-site reporting."""

from __future__ import annotations

from .base import extract_deprecation_message, is_same_module
from .facts import DeprecationFactExtractor
from .usage import (
    DeprecationUsageAnalyzer,
    LEGACY_PROTO_PACKAGE,
    MessageShape,
    format_module_message,
    format_usage_message,
    select_shape,
    selector_name,
)

__all__ = [
    "DeprecationFactExtractor",
    "DeprecationUsageAnalyzer",
    "LEGACY_PROTO_PACKAGE",
    "MessageShape",
    "extract_deprecation_message",
    "format_module_message",
    "format_usage_message",
    "is_same_module",
    "select_shape",
    "selector_name",
]
