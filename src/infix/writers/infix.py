"""
Canonical infix writer.

Writes every optional piece of syntax explicitly: each binary operation is
wrapped in its own parentheses, every tuple is parenthesised and carries a
trailing comma. Statements are separated by newlines.

    foo = ((0 + 1) * 2);
    bar = (foo, (1,), (,),);
    print "bar" append(bar, (2,),);
"""

from typing import List

from ..language import (
    WriterError, OPERATOR_SYMBOLS,
    IntLiteral, FloatLiteral, StringLiteral, Reference,
    Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide,
    Assign, Output, Calculation, Node, operands,
)


def _items(items) -> str:
    # trailing comma always written; "(,)" is the empty tuple
    return ", ".join(write_node(item) for item in items) + ","


def write_node(node: Node) -> str:
    """
    Render a single node.

    Raises:
        WriterError: On anything that is not an infix AST node
    """
    match node:
        case IntLiteral(text=text) | FloatLiteral(text=text) | StringLiteral(text=text):
            return text
        case Reference(name=name):
            return name
        case Add() | Subtract() | Multiply() | Divide() | TupleIndex():
            left, right = operands(node)
            return f"({write_node(left)} {OPERATOR_SYMBOLS[type(node)]} {write_node(right)})"
        case Tuple(items=items):
            return f"({_items(items)})"
        case Append(items=items):
            return f"append({_items(items)})"
        case Assign(name=name, value=value):
            return f"{name} = {write_node(value)};"
        case Output(label=label, value=value):
            return f"print {label.text} {write_node(value)};"
        case Calculation(statements=statements):
            lines: List[str] = [write_node(statement) for statement in statements]
            return "\n".join(lines)
        case _:
            raise WriterError(f"Unknown node type: {node!r}")


def write(calculation: Calculation) -> str:
    """Render a whole program."""
    if not isinstance(calculation, Calculation):
        raise WriterError(f"Expected a Calculation, got {type(calculation).__name__}")
    return write_node(calculation)
