"""
Postfix (reverse Polish) writer.

Operands come first, the operator last:

    foo = (0 + 1) * 2;     ->   foo 0 1 + 2 * =
    print "foo" foo;       ->   "foo" foo print

Tuple syntax has no postfix form and is rejected.
"""

from ..language import (
    WriterError, OPERATOR_SYMBOLS,
    IntLiteral, FloatLiteral, StringLiteral, Reference,
    Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide,
    Assign, Output, Calculation, Node, operands,
)


def write_node(node: Node) -> str:
    match node:
        case IntLiteral(text=text) | FloatLiteral(text=text) | StringLiteral(text=text):
            return text
        case Reference(name=name):
            return name
        case Add() | Subtract() | Multiply() | Divide():
            left, right = operands(node)
            return f"{write_node(left)} {write_node(right)} {OPERATOR_SYMBOLS[type(node)]}"
        case Tuple() | Append() | TupleIndex():
            raise WriterError(f"Postfix writer does not support {type(node).__name__}")
        case Assign(name=name, value=value):
            return f"{name} {write_node(value)} ="
        case Output(label=label, value=value):
            return f"{label.text} {write_node(value)} print"
        case Calculation(statements=statements):
            return "\n".join(write_node(statement) for statement in statements)
        case _:
            raise WriterError(f"Unknown node type: {node!r}")


def write(calculation: Calculation) -> str:
    if not isinstance(calculation, Calculation):
        raise WriterError(f"Expected a Calculation, got {type(calculation).__name__}")
    return write_node(calculation)
