"""
Precedence-aware rendering: every surface form of an AST.

Rendering is a relation, not a function. For a given tree it yields each
string the reader accepts as that tree: redundant parentheses around any
operator whose context would not need them, optional trailing commas in
tuples and appends, and root-level tuples with their parentheses dropped.

Each candidate carries a flag saying whether it dropped tuple parentheses,
since that is exactly what a reader with mandatory tuple parens rejects.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable, List

from infix.language import (
    OPERATOR_SYMBOLS,
    IntLiteral, FloatLiteral, StringLiteral, Reference,
    Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide,
    Assign, Output, Calculation, Expr, Statement, operands,
)
from .stream import Rope, Stream


# =============================================================================
# Precedence table (higher binds tighter)
# =============================================================================

PRECEDENCE_ROOT = -4
PRECEDENCE_TUPLE = -3

OPERATOR_PRECEDENCE = {
    TupleIndex: 0,
    Multiply: -1,
    Divide: -1,
    Add: -2,
    Subtract: -2,
}


# =============================================================================
# Candidates
# =============================================================================

@dataclass(frozen=True)
class Rendering:
    """One surface form, plus whether any tuple in it lost its parens."""
    text: Rope
    tuple_parens_omitted: bool = False

    @staticmethod
    def of(text: str) -> Rendering:
        return Rendering(Rope.leaf(text))

    def concat(self, other: Rendering) -> Rendering:
        return Rendering(
            self.text.concat(other.text),
            self.tuple_parens_omitted or other.tuple_parens_omitted,
        )

    def parens_omitted(self) -> Rendering:
        return Rendering(self.text, True)

    def __str__(self) -> str:
        return self.text.materialize()


Candidates = Stream[Rendering]


def token(text: str) -> Candidates:
    return Stream.single(Rendering.of(text))


def cat(lhs: Candidates, rhs: Candidates) -> Candidates:
    """Cross product of two candidate streams, joined left to right."""
    return lhs.flat_map(lambda prefix: rhs.map(prefix.concat))


def cat_all(parts: Iterable[Candidates]) -> Candidates:
    result = token("")
    for part in parts:
        result = cat(result, part)
    return result


def parenthesised(inner: Candidates) -> Candidates:
    return cat_all([token("("), inner, token(")")])


# =============================================================================
# Grouping context
# =============================================================================

@dataclass(frozen=True)
class GroupPrecedence:
    """
    How tightly the surrounding syntax binds the current position.

    `allow_assoc` is set on the operand side where an operator of the same
    level may chain without parentheses (the left side, since every
    operator is left associative).
    """
    level: int = PRECEDENCE_ROOT
    allow_assoc: bool = False

    def with_level(self, level: int) -> GroupPrecedence:
        return GroupPrecedence(level, self.allow_assoc)

    def with_assoc(self, allow_assoc: bool) -> GroupPrecedence:
        return GroupPrecedence(self.level, allow_assoc)

    def admits(self, level: int) -> bool:
        """True if syntax of `level` may appear here without parentheses."""
        return level > self.level or (level == self.level and self.allow_assoc)

    def wrap_group(self, level: int, render: Callable[[GroupPrecedence], Candidates]) -> Candidates:
        """
        Candidates for syntax of `level` rendered by `render`.

        Parentheses are always a valid choice. When the context admits the
        level, the bare form comes first, then the parenthesised one.
        """
        inner = self.with_level(level).with_assoc(False)
        grouped = lambda: parenthesised(render(inner))
        if self.admits(level):
            return render(inner).concat(grouped)
        return grouped()


# =============================================================================
# Rendering
# =============================================================================

def _comma_separated(items, precedence: GroupPrecedence) -> Candidates:
    result = token("")
    for i, item in enumerate(items):
        if i > 0:
            result = cat(result, token(", "))
        result = cat(result, expression_strings(precedence, item))

    if len(items) < 2:
        # "(,)" and "(x,)" need their comma
        return cat(result, token(","))

    without_comma = result
    return without_comma.concat(lambda: cat(without_comma, token(",")))


def _binary_strings(precedence: GroupPrecedence, node) -> Candidates:
    left, right = operands(node)
    symbol = OPERATOR_SYMBOLS[type(node)]

    def render(inner: GroupPrecedence) -> Candidates:
        return cat_all([
            expression_strings(inner.with_assoc(True), left),
            token(f" {symbol} "),
            expression_strings(inner.with_assoc(False), right),
        ])

    return precedence.wrap_group(OPERATOR_PRECEDENCE[type(node)], render)


def _tuple_strings(precedence: GroupPrecedence, node: Tuple) -> Candidates:
    items = node.items
    element_context = precedence.with_level(PRECEDENCE_TUPLE).with_assoc(False)

    # size 0 and 1 tuples always need their parens
    if len(items) > 1 and precedence.admits(PRECEDENCE_TUPLE):
        omit_choices = Stream.of(True, False)
    else:
        omit_choices = Stream.single(False)

    def render(omit: bool) -> Candidates:
        elements = _comma_separated(items, element_context)
        if omit:
            return elements.map(Rendering.parens_omitted)
        return parenthesised(elements)

    return omit_choices.flat_map(render)


def expression_strings(precedence: GroupPrecedence, expression: Expr) -> Candidates:
    """Every surface form of `expression` in the given context."""
    match expression:
        case IntLiteral(text=text) | FloatLiteral(text=text) | StringLiteral(text=text):
            return token(text)
        case Reference(name=name):
            return token(name)
        case Add() | Subtract() | Multiply() | Divide() | TupleIndex():
            return _binary_strings(precedence, expression)
        case Tuple():
            return _tuple_strings(precedence, expression)
        case Append(items=items):
            element_context = precedence.with_level(PRECEDENCE_TUPLE).with_assoc(False)
            return cat_all([
                token("append("),
                _comma_separated(items, element_context),
                token(")"),
            ])
        case _:
            raise ValueError(f"Unknown expression type: {expression!r}")


def statement_strings(statement: Statement) -> Candidates:
    match statement:
        case Assign(name=name, value=value):
            head = token(f"{name} = ")
        case Output(label=label, value=value):
            head = token(f"print {label.text} ")
        case _:
            raise ValueError(f"Unknown statement type: {statement!r}")
    return cat_all([head, expression_strings(GroupPrecedence(), value), token(";")])


def calculation_strings(calculation: Calculation) -> Candidates:
    """
    Every surface form of a whole program, statements separated by newlines.

    Example:
        foo = 0 + (1 + 2);  ->  "foo = 0 + (1 + 2);", "foo = (0 + (1 + 2));"
    """
    parts: List[Candidates] = []
    for i, statement in enumerate(calculation.statements):
        if i > 0:
            parts.append(token("\n"))
        parts.append(statement_strings(statement))
    return cat_all(parts)
