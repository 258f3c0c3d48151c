"""
Reader for the infix language: tokenizer plus recursive-descent parser.

Precedence, loosest to tightest: bare comma lists (tuples), `+ -`, `* /`,
tuple indexing `.`. All binary operators are left associative.

    calculation := statement*
    statement   := IDENT '=' items ';' | 'print' STRING items ';'
    items       := additive (',' additive)* [',']
    additive    := term (('+' | '-') term)*
    term        := index (('*' | '/') index)*
    index       := primary ('.' primary)*
    primary     := INT | FLOAT | STRING | IDENT
                 | '(' ',' ')' | '(' items ')' | 'append' '(' [items | ','] ')'
"""

from __future__ import annotations
from dataclasses import dataclass
import re
from typing import List

from .language import (
    Config, DEFAULT_LANGUAGE, ParseError,
    IntLiteral, FloatLiteral, StringLiteral, Reference,
    Tuple, Append, TupleIndex, Add, Subtract, Multiply, Divide,
    Assign, Output, Calculation, Expr,
)


# =============================================================================
# Tokens
# =============================================================================

@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


# Order matters: floats before ints, keywords before identifiers.
TOKEN_PATTERNS = [
    ("space", r"\s+"),
    ("comment", r"//[^\n\r]*(?:\r\n?|\n|$)"),
    ("equals", r"="),
    ("comma", r","),
    ("dot", r"\."),
    ("semicolon", r";"),
    ("lparen", r"\("),
    ("rparen", r"\)"),
    ("float", r"[0-9]+\.[0-9]+(?:e[+-]?[0-9]+)?\b"),
    ("string", r'"[^"]*"'),
    ("int", r"[0-9]+\b"),
    ("print", r"print\b"),
    ("append", r"append\b"),
    ("ident", r"[_A-Za-z][_A-Za-z0-9]*\b"),
    ("plus", r"\+"),
    ("minus", r"-"),
    ("star", r"\*"),
    ("slash", r"/"),
]

_TOKEN_RE = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in TOKEN_PATTERNS))

_SKIPPED = {"space", "comment"}

# Tokens that only exist for tuple syntax.
_TUPLE_TOKENS = {"comma", "dot", "append"}

BINARY_LEVELS = [
    {"plus": Add, "minus": Subtract},
    {"star": Multiply, "slash": Divide},
    {"dot": TupleIndex},
]


def tokenize(source: str, config: Config = DEFAULT_LANGUAGE) -> List[Token]:
    """
    Split source text into tokens.

    Raises:
        ParseError: On unrecognised characters, or tuple syntax while
                    tuples are disabled
    """
    tokens: List[Token] = []
    position = 0
    while position < len(source):
        match = _TOKEN_RE.match(source, position)
        if match is None:
            raise ParseError(f"Unexpected character {source[position]!r}", position)
        kind = match.lastgroup
        if kind in _TUPLE_TOKENS and not config.enable_tuples:
            raise ParseError(f"Tuples are disabled, found {match.group()!r}", position)
        if kind not in _SKIPPED:
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    tokens.append(Token("eof", "", len(source)))
    return tokens


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """Single-use parser over a token list."""

    def __init__(self, tokens: List[Token], config: Config):
        self.tokens = tokens
        self.config = config
        self.pos = 0
        self.paren_depth = 0

    # --- token helpers -------------------------------------------------------

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "eof":
            self.pos += 1
        return token

    def accept(self, kind: str) -> bool:
        if self.peek().kind == kind:
            self.advance()
            return True
        return False

    def expect(self, kind: str, what: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            found = token.text or "end of input"
            raise ParseError(f"Expected {what}, found {found!r}", token.position)
        return self.advance()

    # --- grammar -------------------------------------------------------------

    def calculation(self) -> Calculation:
        statements = []
        while self.peek().kind != "eof":
            statements.append(self.statement())
        return Calculation(tuple(statements))

    def statement(self):
        if self.accept("print"):
            label = StringLiteral(self.expect("string", "string label").text)
            value = self.items(bare=True)
            self.expect("semicolon", "';'")
            return Output(label, value)

        name = self.expect("ident", "identifier").text
        self.expect("equals", "'='")
        value = self.items(bare=True)
        self.expect("semicolon", "';'")
        return Assign(name, value)

    def items(self, bare: bool) -> Expr:
        """
        Comma list. With `bare`, a single item without commas is returned
        as itself; anything with a comma is a tuple.
        """
        first = self.binary(0)
        if self.peek().kind != "comma":
            return first if bare else Tuple((first,))

        if bare and self.config.tuples_require_parens and self.paren_depth == 0:
            raise ParseError("Tuples must be parenthesised", self.peek().position)

        elements = [first]
        while self.accept("comma"):
            if self.peek().kind in ("semicolon", "rparen", "eof"):
                break  # trailing comma
            elements.append(self.binary(0))
        return Tuple(tuple(elements))

    def binary(self, level: int) -> Expr:
        if level == len(BINARY_LEVELS):
            return self.primary()
        operators = BINARY_LEVELS[level]
        lhs = self.binary(level + 1)
        while self.peek().kind in operators:
            node_type = operators[self.advance().kind]
            rhs = self.binary(level + 1)
            lhs = node_type(lhs, rhs)
        return lhs

    def primary(self) -> Expr:
        token = self.advance()
        match token.kind:
            case "int":
                return IntLiteral(token.text)
            case "float":
                return FloatLiteral(token.text)
            case "string":
                return StringLiteral(token.text)
            case "ident":
                return Reference(token.text)
            case "lparen":
                return self.group(token)
            case "append":
                self.expect("lparen", "'(' after append")
                return Append(self.parenthesised_items(token).items)
            case _:
                found = token.text or "end of input"
                raise ParseError(f"Expected an expression, found {found!r}", token.position)

    def group(self, opener: Token) -> Expr:
        """Contents of `( ... )`: grouping or a parenthesised tuple."""
        if self.peek().kind == "rparen":
            raise ParseError("Empty parentheses", opener.position)
        self.paren_depth += 1
        try:
            if self.accept("comma"):
                self.expect("rparen", "')' closing empty tuple")
                return Tuple(())
            value = self.items(bare=True)
            self.expect("rparen", "')'")
            return value
        finally:
            self.paren_depth -= 1

    def parenthesised_items(self, opener: Token) -> Tuple:
        self.paren_depth += 1
        try:
            if self.accept("comma"):
                self.expect("rparen", "')'")
                return Tuple(())
            if self.peek().kind == "rparen":
                raise ParseError("Empty argument list", opener.position)
            value = self.items(bare=False)
            self.expect("rparen", "')'")
            return value
        finally:
            self.paren_depth -= 1


def parse(source: str, config: Config = DEFAULT_LANGUAGE) -> Calculation:
    """
    Parse source text into a Calculation.

    Args:
        source: Program text
        config: Reader options (tuples enabled, tuple parens mandatory)

    Returns:
        The parsed Calculation

    Raises:
        ParseError: If the text is not a valid program under `config`
    """
    return Parser(tokenize(source, config), config).calculation()
