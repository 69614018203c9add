"""Helpers shared by the deprecation analyzers."""

from __future__ import annotations

from typing import Iterable, Optional

from ..syntax import CommentGroup, Module

DEPRECATED_MARKER = "Deprecated: "
TEST_SUFFIX = "_test"


def extract_deprecation_message(docs: Iterable[Optional[CommentGroup]]) -> Optional[str]:
    """Return the first ``Deprecated: `` paragraph of ``docs`` as a single line.

    Paragraphs are separated by blank lines; absent comment groups are skipped.
    Returns None when no group carries a non-empty deprecation paragraph.
    """
    for doc in docs:
        if doc is None:
            continue
        for paragraph in doc.text().split("\n\n"):
            if not paragraph.startswith(DEPRECATED_MARKER):
                continue
            message = paragraph[len(DEPRECATED_MARKER) :].replace("\n", " ").strip()
            return message or None
    return None


def is_same_module(owner: Module, current: Module) -> bool:
    """Return True when ``current`` is ``owner`` or its test augmentation."""
    return owner is current or owner.path + TEST_SUFFIX == current.path


__all__ = [
    "DEPRECATED_MARKER",
    "extract_deprecation_message",
    "is_same_module",
]
