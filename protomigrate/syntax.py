"""Resolved syntax and symbol model handed over by the front-end.

The nodes mirror a Go syntax tree after type checking: identifiers carry the
``Symbol`` they resolve to, selectors carry their method/field selection and
import specs carry the package name they bind. Modules and symbols are identity
objects; two handles are the same entity only when they are the same object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, Iterator, List, Optional


class SymbolKind(str, Enum):
    """Kinds of declared entities a resolver hands out."""

    FUNC = "func"
    METHOD = "method"
    TYPE = "type"
    VAR = "var"
    CONST = "const"
    FIELD = "field"
    PACKAGE_NAME = "package"
    BUILTIN = "builtin"


@dataclass(eq=False)
class Module:
    """A compilation boundary identified by its import path."""

    path: str
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.path.rsplit("/", 1)[-1]

    def __repr__(self) -> str:
        return f"Module({self.path!r})"


@dataclass(eq=False)
class Symbol:
    """Uniquely resolved entity; ``module`` is None for universe objects."""

    name: str
    kind: SymbolKind
    module: Optional[Module] = None
    imported: Optional[Module] = None

    def __repr__(self) -> str:
        owner = self.module.path if self.module is not None else "<universe>"
        return f"Symbol({owner}.{self.name}, {self.kind.value})"


@dataclass(frozen=True)
class Position:
    filename: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(eq=False)
class Node:
    pos: Optional[Position] = field(default=None, kw_only=True)


class Expr(Node):
    pass


class Stmt(Node):
    pass


class Spec(Node):
    pass


class Decl(Node):
    pass


# ----------------------------------------------------------------------
# Comments

_DIRECTIVE_PATTERN = re.compile(r"^[a-z0-9]+:[a-z0-9]")
_DIRECTIVE_PREFIXES = ("line ", "extern ", "export ")


@dataclass(eq=False)
class Comment(Node):
    """A single ``//`` or ``/* */`` comment, markers included."""

    text: str


@dataclass(eq=False)
class CommentGroup(Node):
    """Adjacent comments with no blank line between them."""

    comments: List[Comment] = field(default_factory=list)

    def text(self) -> str:
        """Return the comment text without markers, newline terminated.

        Compiler directives are dropped, trailing whitespace is stripped,
        leading and trailing blank lines are removed and runs of blank lines
        collapse into one, which makes paragraphs split cleanly on ``"\\n\\n"``.
        """
        lines: List[str] = []
        for comment in self.comments:
            raw = comment.text
            if raw.startswith("//"):
                body = raw[2:]
                if _is_directive(body):
                    continue
                if body.startswith(" "):
                    body = body[1:]
                lines.append(body)
            elif raw.startswith("/*"):
                body = raw[2:]
                if body.endswith("*/"):
                    body = body[:-2]
                lines.extend(body.split("\n"))
            else:
                lines.extend(raw.split("\n"))

        collapsed: List[str] = []
        for line in (line.rstrip() for line in lines):
            if not line and (not collapsed or not collapsed[-1]):
                continue
            collapsed.append(line)
        while collapsed and not collapsed[-1]:
            collapsed.pop()
        if not collapsed:
            return ""
        return "\n".join(collapsed) + "\n"


def _is_directive(body: str) -> bool:
    if body.startswith(_DIRECTIVE_PREFIXES):
        return True
    return bool(_DIRECTIVE_PATTERN.match(body))


# ----------------------------------------------------------------------
# Expressions


@dataclass(eq=False)
class Ident(Expr):
    name: str
    obj: Optional[Symbol] = None


@dataclass(eq=False)
class BasicLit(Expr):
    kind: str
    value: str


@dataclass(frozen=True)
class Selection:
    """Method or field selection; ``recv`` is the rendered receiver type."""

    recv: str


@dataclass(eq=False)
class SelectorExpr(Expr):
    x: Expr
    sel: Ident
    selection: Optional[Selection] = None


@dataclass(eq=False)
class CallExpr(Expr):
    fun: Expr
    args: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class StarExpr(Expr):
    x: Expr


@dataclass(eq=False)
class UnaryExpr(Expr):
    op: str
    x: Expr


@dataclass(eq=False)
class BinaryExpr(Expr):
    x: Expr
    op: str
    y: Expr


@dataclass(eq=False)
class ParenExpr(Expr):
    x: Expr


@dataclass(eq=False)
class IndexExpr(Expr):
    x: Expr
    index: Expr


@dataclass(eq=False)
class KeyValueExpr(Expr):
    key: Expr
    value: Expr


@dataclass(eq=False)
class CompositeLit(Expr):
    type: Optional[Expr] = None
    elts: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class ArrayType(Expr):
    elt: Expr
    len: Optional[Expr] = None


@dataclass(eq=False)
class MapType(Expr):
    key: Expr
    value: Expr


@dataclass(eq=False)
class Field(Node):
    """Struct field, interface method, parameter or result."""

    names: List[Ident] = field(default_factory=list)
    type: Optional[Expr] = None
    doc: Optional[CommentGroup] = None
    tag: Optional[BasicLit] = None


@dataclass(eq=False)
class FieldList(Node):
    list: List[Field] = field(default_factory=list)


@dataclass(eq=False)
class FuncType(Expr):
    params: FieldList = field(default_factory=FieldList)
    results: Optional[FieldList] = None


@dataclass(eq=False)
class StructType(Expr):
    fields: FieldList = field(default_factory=FieldList)


@dataclass(eq=False)
class InterfaceType(Expr):
    methods: FieldList = field(default_factory=FieldList)


# ----------------------------------------------------------------------
# Statements


@dataclass(eq=False)
class BlockStmt(Stmt):
    list: List[Stmt] = field(default_factory=list)


@dataclass(eq=False)
class FuncLit(Expr):
    type: FuncType
    body: BlockStmt


@dataclass(eq=False)
class ExprStmt(Stmt):
    x: Expr


@dataclass(eq=False)
class AssignStmt(Stmt):
    lhs: List[Expr]
    tok: str
    rhs: List[Expr]


@dataclass(eq=False)
class ReturnStmt(Stmt):
    results: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class DeclStmt(Stmt):
    decl: Decl


@dataclass(eq=False)
class IfStmt(Stmt):
    cond: Expr
    body: BlockStmt
    init: Optional[Stmt] = None
    orelse: Optional[Stmt] = None


# ----------------------------------------------------------------------
# Declarations


class Token(str, Enum):
    IMPORT = "import"
    CONST = "const"
    TYPE = "type"
    VAR = "var"


@dataclass(eq=False)
class ImportSpec(Spec):
    """Import of ``path``; ``implicit`` is the package name bound without an alias."""

    path: BasicLit
    name: Optional[Ident] = None
    implicit: Optional[Symbol] = None
    doc: Optional[CommentGroup] = None


@dataclass(eq=False)
class ValueSpec(Spec):
    names: List[Ident]
    type: Optional[Expr] = None
    values: List[Expr] = field(default_factory=list)
    doc: Optional[CommentGroup] = None


@dataclass(eq=False)
class TypeSpec(Spec):
    name: Ident
    type: Expr
    doc: Optional[CommentGroup] = None


@dataclass(eq=False)
class GenDecl(Decl):
    tok: Token
    specs: List[Spec] = field(default_factory=list)
    doc: Optional[CommentGroup] = None


@dataclass(eq=False)
class FuncDecl(Decl):
    name: Ident
    type: FuncType = field(default_factory=FuncType)
    body: Optional[BlockStmt] = None
    recv: Optional[FieldList] = None
    doc: Optional[CommentGroup] = None


@dataclass(eq=False)
class File(Node):
    """A single compilation unit."""

    filename: str
    package_name: str
    decls: List[Decl] = field(default_factory=list)
    doc: Optional[CommentGroup] = None
    comments: List[CommentGroup] = field(default_factory=list)

    @property
    def imports(self) -> List[ImportSpec]:
        return [
            spec
            for decl in self.decls
            if isinstance(decl, GenDecl) and decl.tok is Token.IMPORT
            for spec in decl.specs
            if isinstance(spec, ImportSpec)
        ]


@dataclass(eq=False)
class Package:
    """The files of one module as seen by a single analysis run."""

    module: Module
    files: List[File] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.module.path


@dataclass
class Program:
    """Every package loaded for a run, keyed by import path."""

    packages: Dict[str, Package] = field(default_factory=dict)

    def add(self, package: Package) -> Package:
        self.packages[package.path] = package
        return package

    def get(self, path: str) -> Optional[Package]:
        return self.packages.get(path)


# ----------------------------------------------------------------------
# Helpers


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of ``node`` in field order."""
    for item in fields(node):
        value = getattr(node, item.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for element in value:
                if isinstance(element, Node):
                    yield element


def imported_module(spec: ImportSpec) -> Optional[Module]:
    """Return the module bound by an import, via its alias or implicit name."""
    if spec.name is not None and spec.name.obj is not None:
        return spec.name.obj.imported
    if spec.implicit is not None:
        return spec.implicit.imported
    return None


def render(node: Node) -> str:
    """Render an expression back to Go source text."""
    if isinstance(node, Ident):
        return node.name
    if isinstance(node, BasicLit):
        return node.value
    if isinstance(node, SelectorExpr):
        return f"{render(node.x)}.{node.sel.name}"
    if isinstance(node, CallExpr):
        args = ", ".join(render(arg) for arg in node.args)
        return f"{render(node.fun)}({args})"
    if isinstance(node, StarExpr):
        return f"*{render(node.x)}"
    if isinstance(node, UnaryExpr):
        return f"{node.op}{render(node.x)}"
    if isinstance(node, BinaryExpr):
        return f"{render(node.x)} {node.op} {render(node.y)}"
    if isinstance(node, ParenExpr):
        return f"({render(node.x)})"
    if isinstance(node, IndexExpr):
        return f"{render(node.x)}[{render(node.index)}]"
    if isinstance(node, KeyValueExpr):
        return f"{render(node.key)}: {render(node.value)}"
    if isinstance(node, CompositeLit):
        prefix = render(node.type) if node.type is not None else ""
        elts = ", ".join(render(elt) for elt in node.elts)
        return f"{prefix}{{{elts}}}"
    if isinstance(node, ArrayType):
        length = render(node.len) if node.len is not None else ""
        return f"[{length}]{render(node.elt)}"
    if isinstance(node, MapType):
        return f"map[{render(node.key)}]{render(node.value)}"
    if isinstance(node, FuncLit):
        return "func literal"
    if isinstance(node, FuncType):
        return "func(...)"
    if isinstance(node, StructType):
        return "struct{...}"
    if isinstance(node, InterfaceType):
        return "interface{...}"
    raise TypeError(f"cannot render {type(node).__name__}")


_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_OCTAL_DIGITS = frozenset("01234567")


def unquote_import_path(literal: str) -> str:
    """Return the string denoted by a Go string literal.

    Raises ``ValueError`` when the literal is not a well-formed raw or
    interpreted string.
    """
    if len(literal) < 2 or literal[0] != literal[-1] or literal[0] not in "`\"":
        raise ValueError(f"invalid string literal {literal!r}")
    inner = literal[1:-1]
    if literal[0] == "`":
        if "`" in inner:
            raise ValueError(f"invalid raw string literal {literal!r}")
        return inner

    out: List[str] = []
    index = 0
    while index < len(inner):
        char = inner[index]
        if char in {'"', "\n"}:
            raise ValueError(f"invalid string literal {literal!r}")
        if char != "\\":
            out.append(char)
            index += 1
            continue
        if index + 1 >= len(inner):
            raise ValueError(f"unterminated escape in {literal!r}")
        escape = inner[index + 1]
        if escape in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[escape])
            index += 2
        elif escape in _HEX_WIDTHS:
            width = _HEX_WIDTHS[escape]
            digits = inner[index + 2 : index + 2 + width]
            if len(digits) != width or not set(digits) <= _HEX_DIGITS:
                raise ValueError(f"invalid escape in {literal!r}")
            out.append(chr(int(digits, 16)))
            index += 2 + width
        elif escape in _OCTAL_DIGITS:
            digits = inner[index + 1 : index + 4]
            if len(digits) != 3 or not set(digits) <= _OCTAL_DIGITS:
                raise ValueError(f"invalid escape in {literal!r}")
            out.append(chr(int(digits, 8)))
            index += 4
        else:
            raise ValueError(f"unknown escape in {literal!r}")
    return "".join(out)


__all__ = [
    "ArrayType",
    "AssignStmt",
    "BasicLit",
    "BinaryExpr",
    "BlockStmt",
    "CallExpr",
    "Comment",
    "CommentGroup",
    "CompositeLit",
    "Decl",
    "DeclStmt",
    "Expr",
    "ExprStmt",
    "Field",
    "FieldList",
    "File",
    "FuncDecl",
    "FuncLit",
    "FuncType",
    "GenDecl",
    "Ident",
    "IfStmt",
    "ImportSpec",
    "IndexExpr",
    "InterfaceType",
    "KeyValueExpr",
    "MapType",
    "Module",
    "Node",
    "Package",
    "ParenExpr",
    "Position",
    "Program",
    "ReturnStmt",
    "Selection",
    "SelectorExpr",
    "Spec",
    "StarExpr",
    "Stmt",
    "StructType",
    "Symbol",
    "SymbolKind",
    "Token",
    "TypeSpec",
    "UnaryExpr",
    "ValueSpec",
    "imported_module",
    "iter_child_nodes",
    "render",
    "unquote_import_path",
]
