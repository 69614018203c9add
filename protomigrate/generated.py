"""Classification of generated files by their ``Code generated`` header."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterator, Optional

from .syntax import File

_PREFIX = "// Code generated "
_SUFFIX = " DO NOT EDIT."
# Header written by cgo before Go 1.11.
_OLD_CGO = "// Created by cgo - DO NOT EDIT"


class Generator(str, Enum):
    UNKNOWN = "unknown"
    GOYACC = "goyacc"
    CGO = "cgo"
    STRINGER = "stringer"
    PROTOC_GEN_GO = "protoc-gen-go"


GeneratorClassifier = Callable[[File], Optional[Generator]]


def classify_file(file: File) -> Optional[Generator]:
    """Return the generator that produced ``file``, or None for hand-written code."""
    for line in _comment_lines(file):
        if line.startswith(_PREFIX) and line.endswith(_SUFFIX):
            if len(line) - len(_SUFFIX) < len(_PREFIX):
                return Generator.UNKNOWN
            return _generator_for(line[len(_PREFIX) : len(line) - len(_SUFFIX)])
        if line == _OLD_CGO:
            return Generator.CGO
    return None


def _generator_for(text: str) -> Generator:
    if text == "by goyacc." or text.startswith("by goyacc "):
        return Generator.GOYACC
    if text == "by cmd/cgo;":
        return Generator.CGO
    if text == "by protoc-gen-go.":
        return Generator.PROTOC_GEN_GO
    if text.startswith('by "stringer '):
        return Generator.STRINGER
    return Generator.UNKNOWN


def _comment_lines(file: File) -> Iterator[str]:
    groups = list(file.comments)
    if file.doc is not None and file.doc not in groups:
        groups.insert(0, file.doc)
    for group in groups:
        for comment in group.comments:
            for line in comment.text.splitlines():
                yield line.rstrip("\r")


__all__ = ["Generator", "GeneratorClassifier", "classify_file"]
