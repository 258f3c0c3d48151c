"""
Tests for exhaustive round-trip checking.

Run with: pytest tests/test_roundtrip.py
"""

import pytest

from infix.language import (
    Config, ParseError,
    IntLiteral, Reference, Tuple, Add, Assign, Calculation,
    build_symbol_table,
)
from infix.reader import parse
from infix.registry import get_writer
from infix.exhaustive.rendering import Rendering
from infix.exhaustive.roundtrip import (
    ExploreConfig, ExplorationStatistics,
    RoundTripFailure, WriterDesync, InvariantViolation,
    Parsed, Rejected,
    check_calculation, check_rendering, diff_lines, expects_failure,
    explore, format_candidates, main, parse_candidate,
)
from infix.exhaustive.rendering import calculation_strings

ZERO, ONE = IntLiteral("0"), IntLiteral("1")

TUPLE_PROGRAM = Calculation((Assign("foo", Tuple((ZERO, ONE))),))
PLAIN_PROGRAM = Calculation((Assign("foo", Add(ZERO, ONE)),))

ALL_CONFIGS = [
    Config(enable_tuples=enable, tuples_require_parens=strict)
    for enable in (True, False)
    for strict in (False, True)
]


# ============================================================
# Failure prediction
# ============================================================

def test_expects_failure():
    bare = Rendering.of("foo = 0, 1;").parens_omitted()
    paren = Rendering.of("foo = (0, 1);")

    assert not expects_failure(Config(), TUPLE_PROGRAM, bare)
    assert expects_failure(Config(tuples_require_parens=True), TUPLE_PROGRAM, bare)
    assert not expects_failure(Config(tuples_require_parens=True), TUPLE_PROGRAM, paren)
    assert expects_failure(Config(enable_tuples=False), TUPLE_PROGRAM, paren)
    assert not expects_failure(Config(enable_tuples=False), PLAIN_PROGRAM, Rendering.of("foo = 0 + 1;"))


def test_parse_candidate():
    assert parse_candidate("foo = 0 + 1;", Config()) == Parsed(PLAIN_PROGRAM)
    assert isinstance(parse_candidate("foo = 0, 1;", Config(tuples_require_parens=True)), Rejected)


# ============================================================
# Single-rendering checks
# ============================================================

def test_expected_failure_accepts_rejection_or_misparse():
    config = Config(enable_tuples=False)
    rendering = Rendering.of("foo = (0, 1);")

    assert check_rendering(TUPLE_PROGRAM, rendering, config) is True
    # a different tree also satisfies an expected failure
    assert check_rendering(TUPLE_PROGRAM, rendering, config,
                           reader=lambda text, cfg: PLAIN_PROGRAM) is True


def test_expected_failure_rejects_exact_reparse():
    config = Config(tuples_require_parens=True)
    rendering = Rendering.of("foo = 0, 1;").parens_omitted()

    with pytest.raises(RoundTripFailure, match="Should have had error"):
        check_rendering(TUPLE_PROGRAM, rendering, config, reader=lambda text, cfg: TUPLE_PROGRAM)


def test_unexpected_rejection():
    def rejecting_reader(text, config):
        raise ParseError("nope")

    with pytest.raises(RoundTripFailure, match="Error reparsing") as info:
        check_rendering(PLAIN_PROGRAM, Rendering.of("foo = 0 + 1;"), Config(), rejecting_reader)
    assert "Reader error: nope" in info.value.report


def test_misparse_reports_diff():
    with pytest.raises(RoundTripFailure, match="Didn't reparse the same AST") as info:
        check_rendering(PLAIN_PROGRAM, Rendering.of("foo = 0 + 1;"), Config(),
                        reader=lambda text, cfg: Calculation())
    report = info.value.report
    assert "What we rendered:\nfoo = 0 + 1;" in report
    assert "! (calculation)" in report


def test_check_rendering_counts_expected_failures():
    stats = ExplorationStatistics()
    check_calculation(TUPLE_PROGRAM, Config(tuples_require_parens=True), stats)
    assert stats.renderings == 4
    assert stats.expected_rejections == 2


# ============================================================
# Whole-program checks
# ============================================================

def test_unscoped_program_is_invariant_violation():
    calc = Calculation((Assign("foo", Reference("bar")),))
    with pytest.raises(InvariantViolation, match="symbol table"):
        check_calculation(calc, Config(), ExplorationStatistics())


def test_symbol_table_lookup():
    calc = Calculation((
        Assign("foo", ZERO),
        Assign("bar", Reference("foo")),
        Assign("foo", Reference("bar")),
    ))
    table = build_symbol_table(calc)
    assert table.lookup("foo") == [0, 2]
    assert table.lookup("bar") == [1]
    assert table.lookup("ping") == []


def test_writer_desync_detected():
    with pytest.raises(WriterDesync, match="not among the rendered forms") as info:
        check_calculation(PLAIN_PROGRAM, Config(), ExplorationStatistics(),
                          writer=lambda calc: "foo = 1 + 0;")
    assert "Writer output:\nfoo = 1 + 0;" in info.value.report
    assert "parens  | foo = (0 + 1);" in info.value.report


def test_writer_failure_detected():
    postfix = get_writer("postfix").write
    with pytest.raises(WriterDesync, match="Something went wrong"):
        check_calculation(TUPLE_PROGRAM, Config(), ExplorationStatistics(), writer=postfix)


# ============================================================
# Exploration
# ============================================================

@pytest.mark.parametrize("language", ALL_CONFIGS)
def test_explore_depth_one(language):
    result = explore(ExploreConfig(max_depth=1, op_count=1, language=language))
    assert result.ok, result.report
    assert result.statistics.programs_by_depth == {0: 4, 1: 120}
    assert result.report is None


@pytest.mark.parametrize("language", ALL_CONFIGS)
def test_explore_two_assignments(language):
    result = explore(ExploreConfig(max_depth=0, op_count=2, language=language))
    assert result.ok, result.report
    assert result.statistics.programs == 20


def test_explore_stops_at_first_broken_reader(capsys):
    def sign_flipping_reader(text, config):
        return parse(text.replace("+", "-"), config)

    result = explore(ExploreConfig(max_depth=1), reader=sign_flipping_reader)
    assert not result.ok
    assert "Didn't reparse the same AST." in result.report
    # depth 0 has no additions; depth 1 fails at the first one
    assert result.statistics.programs_by_depth == {0: 4, 1: 2}
    assert "Aborting." in capsys.readouterr().out


def test_explore_detects_broken_writer():
    result = explore(ExploreConfig(max_depth=0), writer=get_writer("postfix").write)
    assert not result.ok
    assert "Writer output" in result.report


def test_cli(capsys):
    assert main(["--depth", "0"]) == 0
    out = capsys.readouterr().out
    assert "Exploring depth 0..." in out
    assert "Tested 4 programs, all ok." in out

    assert main(["-d", "0", "-n", "2", "--disable-tuples", "--tuples-require-parens"]) == 0


@pytest.mark.parametrize("config", [
    ExploreConfig(max_depth=-1),
    ExploreConfig(op_count=-1),
    ExploreConfig(op_count=5),
    ExploreConfig(language=Config(enable_tuples="yes")),
])
def test_explore_rejects_bad_bounds(config, capsys):
    with pytest.raises(ValueError):
        explore(config)
    # nothing was printed, so no run was reported
    assert capsys.readouterr().out == ""


def test_cli_rejects_negative_depth(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--depth", "-1"])
    assert info.value.code != 0
    captured = capsys.readouterr()
    assert "depth must be non-negative" in captured.err
    assert "all ok" not in captured.out


# ============================================================
# Reporting helpers
# ============================================================

def test_diff_lines():
    assert diff_lines("a\nb", "a\nc\nd\ne\nf\ng\nh\ni") == [
        "  a", "! c", "+ d", "+ e", "+ f", "+ g", "...",
    ]
    assert diff_lines("a\nb\nc", "a") == ["  a"]


def test_format_candidates():
    listing = format_candidates(calculation_strings(TUPLE_PROGRAM))
    assert listing.splitlines() == [
        "omitted | foo = 0, 1;",
        "omitted | foo = 0, 1,;",
        "parens  | foo = (0, 1);",
        "parens  | foo = (0, 1,);",
    ]


def test_progress_reporting_cadence():
    stats = ExplorationStatistics()
    stats.programs = 300
    assert stats.should_report_progress()
    stats.programs = 1500
    assert not stats.should_report_progress()
    stats.programs = 2000
    assert stats.should_report_progress()
