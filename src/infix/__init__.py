"""infix: a small calculator language with exhaustive round-trip testing."""

from .language import (
    # Configuration
    Config, DEFAULT_LANGUAGE,
    # Exceptions
    InfixError, ParseError, SymbolTableError, WriterError,
    # AST
    IntLiteral, FloatLiteral, StringLiteral, Reference,
    Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide,
    Assign, Output, Calculation, Expr, Statement, OPERATOR_SYMBOLS,
    # Tree utilities
    walk, contains_tuple_ops, format_tree,
    # Scoping
    SymbolTable, build_symbol_table,
)

from .reader import parse, tokenize

from .registry import (
    get_available_writers,
    get_writer,
)

__version__ = "0.1.0"
