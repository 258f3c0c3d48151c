"""
Tests for the writer registry and the infix/postfix writers.

Run with: pytest tests/test_writers.py
"""

import pytest

from infix.language import (
    Config, WriterError,
    IntLiteral, StringLiteral, Reference, Tuple, Append, TupleIndex,
    Add, Multiply, Divide, Assign, Output, Calculation,
)
from infix.reader import parse
from infix.registry import get_available_writers, get_writer, writer_name_from_filename
from infix.exhaustive.enumeration import enumerate_calculations
from infix.exhaustive.rendering import calculation_strings

ZERO, ONE, TWO = (IntLiteral(str(i)) for i in range(3))

PROGRAM = Calculation((
    Assign("foo", Multiply(Add(ZERO, ONE), TWO)),
    Assign("bar", Tuple((Reference("foo"), Tuple((ONE,)), Tuple(())))),
    Output(StringLiteral('"bar"'), Append((Reference("bar"), TupleIndex(Reference("bar"), ZERO)))),
))


def test_registry():
    assert get_available_writers() == ["infix", "postfix"]
    assert callable(get_writer("infix").write)
    with pytest.raises(ValueError, match="Available: infix, postfix"):
        get_writer("prefix")
    assert writer_name_from_filename("infix.py") == "infix"
    assert writer_name_from_filename("__init__.py") is None
    assert writer_name_from_filename("notes.txt") is None


def test_infix_writer():
    write = get_writer("infix").write
    assert write(PROGRAM) == (
        "foo = ((0 + 1) * 2);\n"
        "bar = (foo, (1,), (,),);\n"
        'print "bar" append(bar, (bar . 0),);'
    )
    assert write(Calculation()) == ""


def test_infix_writer_rejects_non_programs():
    write = get_writer("infix").write
    with pytest.raises(WriterError):
        write(Add(ZERO, ONE))


def test_infix_writer_round_trips():
    write = get_writer("infix").write
    assert parse(write(PROGRAM)) == PROGRAM
    assert parse(write(PROGRAM), Config(tuples_require_parens=True)) == PROGRAM


def test_infix_writer_matches_a_rendering():
    write = get_writer("infix").write
    for calc in enumerate_calculations(2, 0):
        assert write(calc) in {str(r) for r in calculation_strings(calc)}
    for calc in enumerate_calculations(1, 1):
        assert write(calc) in {str(r) for r in calculation_strings(calc)}


def test_postfix_writer():
    write = get_writer("postfix").write
    calc = Calculation((
        Assign("foo", Multiply(Add(ZERO, ONE), TWO)),
        Assign("bar", Divide(Reference("foo"), TWO)),
        Output(StringLiteral('"foo"'), Reference("foo")),
    ))
    assert write(calc) == 'foo 0 1 + 2 * =\nbar foo 2 / =\n"foo" foo print'


def test_postfix_writer_rejects_tuples():
    write = get_writer("postfix").write
    for value in [Tuple(()), Append(()), TupleIndex(ZERO, ONE)]:
        with pytest.raises(WriterError):
            write(Calculation((Assign("foo", value),)))
