"""
Lazy result streams and ropes for exhaustive enumeration.

A Stream is either empty or a cell holding one realized value and a
zero-argument continuation that produces the rest of the stream. Nothing
past the first element is computed until a consumer advances, so streams
can describe search spaces far too large to materialize.

Streams are restartable: iterating the same Stream twice re-runs the
continuations, which must therefore be pure for a given environment.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, List, Optional, TypeVar, Union


T = TypeVar("T")
U = TypeVar("U")


# =============================================================================
# Stream ADT
# =============================================================================

@dataclass(frozen=True)
class Cell(Generic[T]):
    """One realized value plus the deferred remainder of the stream."""
    value: T
    next: Callable[[], Stream[T]]


def _empty_next() -> Stream:
    return EMPTY


@dataclass(frozen=True)
class Stream(Generic[T]):
    """Pull-based, deterministic, restartable sequence."""
    cell: Optional[Cell[T]] = None

    @staticmethod
    def empty() -> Stream[T]:
        return EMPTY

    @staticmethod
    def single(value: T, next: Optional[Callable[[], Stream[T]]] = None) -> Stream[T]:
        """
        Stream holding `value` followed by whatever `next` produces.

        `next` is invoked only when a consumer advances past `value`.
        """
        return Stream(Cell(value, next if next is not None else _empty_next))

    @staticmethod
    def of(*values: T) -> Stream[T]:
        """Stream over a fixed list of already-known values."""
        def from_index(i: int) -> Stream[T]:
            if i >= len(values):
                return EMPTY
            return Stream.single(values[i], lambda: from_index(i + 1))
        return from_index(0)

    def __bool__(self) -> bool:
        return self.cell is not None

    def __iter__(self) -> Iterator[T]:
        current = self
        while current.cell is not None:
            yield current.cell.value
            current = current.cell.next()

    def to_list(self) -> List[T]:
        return list(self)

    def map(self, fn: Callable[[T], U]) -> Stream[U]:
        cell = self.cell
        if cell is None:
            return EMPTY
        return Stream.single(fn(cell.value), lambda: cell.next().map(fn))

    def concat(self, other: Union[Stream[T], Callable[[], Stream[T]]]) -> Stream[T]:
        """
        Append `other` after this stream is exhausted.

        `other` may be a Stream or a zero-argument callable producing one;
        a callable is not invoked until a consumer actually runs past the
        last element of this stream.
        """
        rhs_fn = other if callable(other) else (lambda: other)
        cell = self.cell
        if cell is None:
            return rhs_fn()
        return Stream.single(cell.value, lambda: cell.next().concat(rhs_fn))

    def flat_map(self, fn: Callable[[T], Stream[U]]) -> Stream[U]:
        """
        Map every element to a sub-stream and flatten, in order, lazily.

        Input elements are scanned only until one maps to a non-empty
        sub-stream. That sub-stream's head is returned immediately; the
        rest of it, followed by flat_map over the not-yet-scanned input,
        is deferred.
        """
        current: Stream[T] = self
        while current.cell is not None:
            cell = current.cell
            result = fn(cell.value)
            if result:
                return result.concat(lambda: cell.next().flat_map(fn))
            current = cell.next()

        # every input element produced nothing
        return EMPTY


EMPTY: Stream = Stream()


# =============================================================================
# Rope (O(1) concatenation)
# =============================================================================

@dataclass(frozen=True, eq=False, repr=False)
class Rope:
    """
    Immutable binary string tree.

    A rope is a leaf (`text` set) or the concatenation of `left` and
    `right`. Sub-ropes are freely shared between larger ropes.
    """
    text: Optional[str] = None
    left: Optional[Rope] = None
    right: Optional[Rope] = None

    @staticmethod
    def leaf(text: str) -> Rope:
        return Rope(text=text)

    def concat(self, other: Rope) -> Rope:
        return Rope(left=self, right=other)

    def leaves(self) -> Iterator[str]:
        """
        Leaf strings in order.

        Uses an explicit stack: ropes built during enumeration can be far
        deeper than the interpreter's recursion limit.
        """
        stack: List[Rope] = [self]
        while stack:
            node = stack.pop()
            if node.text is not None:
                yield node.text
            else:
                stack.append(node.right)
                stack.append(node.left)

    def materialize(self) -> str:
        return "".join(self.leaves())

    def __str__(self) -> str:
        return self.materialize()

    def __repr__(self) -> str:
        return f"Rope({self.materialize()!r})"
