"""
The infix calculator language: AST, configuration, errors and scoping.

A program (Calculation) is a sequence of statements, each either an
assignment `name = expr;` or an output `print "label" expr;`. Expressions
are literals, references to previously assigned names, arithmetic, tuple
literals, `append(...)` and tuple indexing `base . index`.

All nodes are frozen dataclasses, so trees compare structurally with `==`
and sub-trees can be shared between candidates without copying.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
import re
from typing import Dict, Iterator, List, Tuple as TupleType, Union


# =============================================================================
# Constants
# =============================================================================

INT_PATTERN = re.compile(r"[0-9]+")
FLOAT_PATTERN = re.compile(r"[0-9]+\.[0-9]+(?:e[+-]?[0-9]+)?")
STRING_PATTERN = re.compile(r'"[^"]*"')
IDENT_PATTERN = re.compile(r"[_A-Za-z][_A-Za-z0-9]*")

KEYWORDS = frozenset({"print", "append"})


# =============================================================================
# Exceptions
# =============================================================================

class InfixError(Exception):
    """Base exception for all infix errors."""
    pass


class ParseError(InfixError):
    """Raised when source text is rejected by the reader."""

    def __init__(self, message: str, position: int = -1):
        super().__init__(message if position < 0 else f"{message} (at offset {position})")
        self.position = position


class SymbolTableError(InfixError):
    """Raised when a reference cannot be resolved to an earlier assignment."""
    pass


class WriterError(InfixError):
    """Raised when a writer cannot render the tree it was given."""
    pass


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class Config:
    """Reader options; every combination of the two flags is legal."""
    enable_tuples: bool = True
    tuples_require_parens: bool = False

    def sanity(self) -> None:
        for f in fields(self):
            if not isinstance(getattr(self, f.name), bool):
                raise ValueError(f"Config.{f.name} must be a bool, got {getattr(self, f.name)!r}")


DEFAULT_LANGUAGE = Config()


# =============================================================================
# Expression ADT
# =============================================================================

def _check_text(kind: str, pattern: re.Pattern, text: str) -> None:
    if not isinstance(text, str):
        raise TypeError(f"{kind} text must be str, got {type(text)}")
    if not pattern.fullmatch(text):
        raise ValueError(f"Invalid {kind} literal: {text!r}")


@dataclass(frozen=True)
class IntLiteral:
    """Decimal integer, kept as its source text."""
    text: str

    def __post_init__(self):
        _check_text("int", INT_PATTERN, self.text)


@dataclass(frozen=True)
class FloatLiteral:
    text: str

    def __post_init__(self):
        _check_text("float", FLOAT_PATTERN, self.text)


@dataclass(frozen=True)
class StringLiteral:
    """Double-quoted string; `text` includes the quotes."""
    text: str

    def __post_init__(self):
        _check_text("string", STRING_PATTERN, self.text)


@dataclass(frozen=True)
class Reference:
    name: str

    def __post_init__(self):
        _check_text("identifier", IDENT_PATTERN, self.name)
        if self.name in KEYWORDS:
            raise ValueError(f"Keyword {self.name!r} cannot be used as a name")


@dataclass(frozen=True)
class Tuple:
    """Tuple literal `(a, b, ...)`."""
    items: TupleType[Expr, ...] = ()


@dataclass(frozen=True)
class Append:
    """Tuple concatenation `append(a, b, ...)`."""
    items: TupleType[Expr, ...] = ()


@dataclass(frozen=True)
class TupleIndex:
    """`base . index`"""
    base: Expr
    index: Expr


@dataclass(frozen=True)
class Add:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Subtract:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Multiply:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Divide:
    left: Expr
    right: Expr


Literal = Union[IntLiteral, FloatLiteral, StringLiteral]
BinaryOp = Union[Add, Subtract, Multiply, Divide, TupleIndex]
Expr = Union[IntLiteral, FloatLiteral, StringLiteral, Reference,
             Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide]

OPERATOR_SYMBOLS = {
    Add: "+",
    Subtract: "-",
    Multiply: "*",
    Divide: "/",
    TupleIndex: ".",
}


def operands(node: BinaryOp) -> TupleType[Expr, Expr]:
    """(left, right) of any binary node, tuple indexing included."""
    match node:
        case TupleIndex(base=base, index=index):
            return base, index
        case Add(left=l, right=r) | Subtract(left=l, right=r) | Multiply(left=l, right=r) | Divide(left=l, right=r):
            return l, r
        case _:
            raise ValueError(f"Not a binary node: {node}")


# =============================================================================
# Statements
# =============================================================================

@dataclass(frozen=True)
class Assign:
    """`name = value;`"""
    name: str
    value: Expr

    def __post_init__(self):
        Reference(self.name)  # same lexical rules as a reference


@dataclass(frozen=True)
class Output:
    """`print "label" value;`"""
    label: StringLiteral
    value: Expr


Statement = Union[Assign, Output]


@dataclass(frozen=True)
class Calculation:
    statements: TupleType[Statement, ...] = ()

    def extended(self, statement: Statement) -> Calculation:
        return Calculation(self.statements + (statement,))


Node = Union[Calculation, Assign, Output, Expr]


# =============================================================================
# Tree utilities
# =============================================================================

def children(node: Node) -> TupleType[Node, ...]:
    match node:
        case Calculation(statements=statements):
            return statements
        case Assign(value=value):
            return (value,)
        case Output(label=label, value=value):
            return (label, value)
        case Tuple(items=items) | Append(items=items):
            return items
        case Add() | Subtract() | Multiply() | Divide() | TupleIndex():
            return operands(node)
        case _:
            return ()


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal."""
    stack: List[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def contains_tuple_ops(node: Node) -> bool:
    """True if any tuple literal, append or tuple index occurs in `node`."""
    return any(isinstance(n, (Tuple, Append, TupleIndex)) for n in walk(node))


def _label(node: Node) -> str:
    match node:
        case IntLiteral(text=text):
            return f"int {text}"
        case FloatLiteral(text=text):
            return f"float {text}"
        case StringLiteral(text=text):
            return f"string {text}"
        case Reference(name=name):
            return f"ref {name}"
        case Assign(name=name):
            return f"assign {name}"
        case _:
            return re.sub(r"(?<!^)(?=[A-Z])", "_", type(node).__name__).lower()


def format_tree(node: Node) -> str:
    """
    Indented S-expression dump, one node per line.

    Example:
        (calculation
          (assign foo
            (add
              (int 0)
              (int 1))))
    """
    lines: List[str] = []

    def emit(current: Node, indent: int, closers: int) -> None:
        kids = children(current)
        if not kids:
            lines.append("  " * indent + "(" + _label(current) + ")" * (closers + 1))
            return
        lines.append("  " * indent + "(" + _label(current))
        for i, kid in enumerate(kids):
            last = i == len(kids) - 1
            emit(kid, indent + 1, closers + 1 if last else 0)

    emit(node, 0, 0)
    return "\n".join(lines)


# =============================================================================
# Symbol table
# =============================================================================

@dataclass
class SymbolTable:
    """Maps each assigned name to the indices of its defining statements."""
    definitions: Dict[str, List[int]] = field(default_factory=dict)

    def lookup(self, name: str) -> List[int]:
        return list(self.definitions.get(name, []))

    def names(self) -> List[str]:
        return sorted(self.definitions)


def build_symbol_table(calculation: Calculation) -> SymbolTable:
    """
    Resolve every reference in `calculation`.

    A reference must name a variable assigned by an earlier statement;
    an assignment's own name is not in scope on its right-hand side.

    Raises:
        SymbolTableError: If a reference is unresolved
    """
    table = SymbolTable()
    for index, statement in enumerate(calculation.statements):
        for node in walk(statement.value):
            if isinstance(node, Reference) and not table.lookup(node.name):
                raise SymbolTableError(
                    f"Statement {index}: reference to undefined name {node.name!r}"
                )
        if isinstance(statement, Assign):
            table.definitions.setdefault(statement.name, []).append(index)
    return table
