"""Tests for generated file classification."""

from __future__ import annotations

import pytest

from protomigrate.generated import Generator, classify_file
from protomigrate.syntax import Comment, CommentGroup, File


def _file(*lines: str, as_doc: bool = False) -> File:
    group = CommentGroup([Comment(line) for line in lines])
    if as_doc:
        return File(filename="x.go", package_name="x", doc=group)
    return File(filename="x.go", package_name="x", comments=[group])


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("// Code generated by protoc-gen-go. DO NOT EDIT.", Generator.PROTOC_GEN_GO),
        ("// Code generated by goyacc. DO NOT EDIT.", Generator.GOYACC),
        ("// Code generated by goyacc -o expr.go expr.y. DO NOT EDIT.", Generator.GOYACC),
        ("// Code generated by cmd/cgo; DO NOT EDIT.", Generator.CGO),
        ('// Code generated by "stringer -type=Kind"; DO NOT EDIT.', Generator.STRINGER),
        ("// Code generated by mockgen. DO NOT EDIT.", Generator.UNKNOWN),
        ("// Code generated DO NOT EDIT.", Generator.UNKNOWN),
        ("// Created by cgo - DO NOT EDIT", Generator.CGO),
    ],
)
def test_classify_generated_headers(header: str, expected: Generator) -> None:
    assert classify_file(_file(header)) is expected


def test_hand_written_file_is_not_classified() -> None:
    assert classify_file(_file("// Package x does things.")) is None
    assert classify_file(File(filename="x.go", package_name="x")) is None


def test_header_in_file_doc_is_recognised() -> None:
    header = "// Code generated by protoc-gen-go. DO NOT EDIT."

    assert classify_file(_file(header, "// source: app.proto", as_doc=True)) is Generator.PROTOC_GEN_GO
