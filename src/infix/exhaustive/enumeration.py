"""
Enumeration-based program generation for the infix language.

This module provides exhaustive test generation by systematically enumerating
all possible programs within bounded model spaces. Unlike random fuzzing,
enumeration provides guaranteed coverage of the bounded model.

Everything is built on lazy Streams: a depth-3 search space is never held in
memory, only the path currently being consumed.
"""

from typing import FrozenSet, Tuple as TupleType

from infix.language import (
    IntLiteral, Reference, Tuple, Append, TupleIndex,
    Add, Subtract, Multiply, Divide,
    Assign, Calculation, Expr,
)
from .stream import Stream


# ============================================================
# Configuration
# ============================================================

# Names given to successive assignments; bounds op_count.
VARIABLE_NAMES = ("foo", "bar", "ping", "bnorg")

# Literals every depth-0 expression space starts with
BASE_LITERALS = ("0", "1")

# Binary constructors applied to every (lhs, rhs) pair, in output order
PAIR_CONSTRUCTORS = [
    Add,
    Subtract,
    Multiply,
    Divide,
    lambda lhs, rhs: Tuple((lhs, rhs)),
    lambda lhs, rhs: Append((lhs, rhs)),
    TupleIndex,
]

Scope = FrozenSet[str]


# ============================================================
# Expression Enumeration
# ============================================================

def _references(scope: Scope) -> Stream[Expr]:
    refs: Stream[Expr] = Stream.empty()
    for name in sorted(scope):
        refs = refs.concat(lambda name=name: Stream.single(Reference(name)))
    return refs


def enumerate_expressions(scope: Scope, depth: int) -> Stream[Expr]:
    """
    Lazily enumerate every expression of exactly the given nesting depth.

    Args:
        scope: Names that may be referenced
        depth: Expression nesting depth (0 = leaves only)

    Returns:
        Stream of expressions

    Example:
        depth=0: 0, 1, <one reference per name>, (,), append(,)
        depth=1: for each depth-0 lhs: (lhs,), append(lhs,), then for each
                 depth-0 rhs: lhs + rhs, lhs - rhs, lhs * rhs, lhs / rhs,
                 (lhs, rhs), append(lhs, rhs), lhs . rhs
    """
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")

    if depth == 0:
        literals = Stream.of(*(IntLiteral(text) for text in BASE_LITERALS))
        return (literals
                .concat(lambda: _references(scope))
                .concat(lambda: Stream.single(Tuple(())))
                .concat(lambda: Stream.single(Append(()))))

    sub_exprs = enumerate_expressions(scope, depth - 1)

    def with_lhs(lhs: Expr) -> Stream[Expr]:
        def with_rhs(rhs: Expr) -> Stream[Expr]:
            return Stream.of(*(make(lhs, rhs) for make in PAIR_CONSTRUCTORS))

        # rhs gets its own traversal of the same sub-expression stream
        return (Stream.of(Tuple((lhs,)), Append((lhs,)))
                .concat(lambda: sub_exprs.flat_map(with_rhs)))

    return sub_exprs.flat_map(with_lhs)


def enumerate_assignments(scope: Scope, name: str, depth: int) -> Stream[Assign]:
    """Every assignment of a depth-`depth` expression to `name`."""
    return enumerate_expressions(scope, depth).map(lambda value: Assign(name, value))


def enumerate_calculations(op_count: int, depth: int) -> Stream[Calculation]:
    """
    Lazily enumerate every program of `op_count` assignments.

    The i-th assignment binds VARIABLE_NAMES[i] and may reference any name
    bound before it. The result is the Cartesian product of all slots.

    Raises:
        ValueError: If op_count is negative or exceeds VARIABLE_NAMES
    """
    if not 0 <= op_count <= len(VARIABLE_NAMES):
        raise ValueError(
            f"op_count must be in [0, {len(VARIABLE_NAMES)}], got {op_count}"
        )

    partial: Stream[TupleType[Calculation, Scope]] = Stream.single((Calculation(), frozenset()))
    for name in VARIABLE_NAMES[:op_count]:
        def extend(pair, name=name):
            calculation, scope = pair
            return enumerate_assignments(scope, name, depth).map(
                lambda assign: (calculation.extended(assign), scope | {name})
            )
        partial = partial.flat_map(extend)

    return partial.map(lambda pair: pair[0])


def count_expressions(scope_size: int, depth: int) -> int:
    """Closed-form size of enumerate_expressions(scope, depth)."""
    count = len(BASE_LITERALS) + scope_size + 2
    for _ in range(depth):
        count = count * 2 + count * count * len(PAIR_CONSTRUCTORS)
    return count
