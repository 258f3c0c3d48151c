"""
Exhaustive round-trip checker for the infix reader and writers.

For every program up to a bounded depth and statement count:
- every rendering produced by the renderer is read back, and must either
  reproduce the original tree or be rejected exactly when the reader
  configuration forbids what the rendering uses;
- the canonical infix writer's output must be one of those renderings.

Any mismatch stops the whole run. The enumeration is exhaustive, so a single
failure points at a systematic bug in the renderer, the writer or the reader.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import sys
from typing import Callable, Dict, List, Optional

from infix.language import (
    InfixError, ParseError, SymbolTableError, WriterError,
    Config, DEFAULT_LANGUAGE, Calculation,
    build_symbol_table, contains_tuple_ops, format_tree,
)
from infix.reader import parse
from infix.registry import get_writer
from .enumeration import VARIABLE_NAMES, enumerate_calculations
from .rendering import Rendering, calculation_strings


# =============================================================================
# Configuration
# =============================================================================

# Trailing unmatched lines shown by diff_lines before eliding the rest
DIFF_TRAILING_LINES = 3


@dataclass
class ExploreConfig:
    """Bounds of the explored program space and the reader configuration."""
    max_depth: int = 0
    op_count: int = 1
    language: Config = DEFAULT_LANGUAGE

    def sanity(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0 <= self.op_count <= len(VARIABLE_NAMES):
            raise ValueError(
                f"op_count must be between 0 and {len(VARIABLE_NAMES)}, got {self.op_count}"
            )
        self.language.sanity()


DEFAULT_CONFIG = ExploreConfig()


# =============================================================================
# Errors
# =============================================================================

class ExplorationError(InfixError):
    """A failed check. `report` is the human-readable explanation."""

    def __init__(self, report: str):
        super().__init__(report)
        self.report = report


class WriterDesync(ExplorationError):
    """The canonical writer disagrees with the renderer."""


class RoundTripFailure(ExplorationError):
    """Reading a rendering did not behave as predicted."""


class InvariantViolation(ExplorationError):
    """A generated program is not even well scoped."""


# =============================================================================
# Read Results
# =============================================================================

@dataclass(frozen=True)
class ReadResult:
    """Base class for read results - used as a union type."""


@dataclass(frozen=True)
class Parsed(ReadResult):
    calculation: Calculation


@dataclass(frozen=True)
class Rejected(ReadResult):
    reason: str


def parse_candidate(text: str, config: Config,
                    reader: Callable[[str, Config], Calculation] = parse) -> ReadResult:
    """Read `text`, turning a ParseError into a Rejected result."""
    try:
        return Parsed(reader(text, config))
    except ParseError as e:
        return Rejected(str(e))


def expects_failure(config: Config, calculation: Calculation, rendering: Rendering) -> bool:
    """Whether the reader is required to reject `rendering` of `calculation`."""
    if not config.enable_tuples and contains_tuple_ops(calculation):
        return True
    if config.tuples_require_parens and rendering.tuple_parens_omitted:
        return True
    return False


# =============================================================================
# Reporting
# =============================================================================

def diff_lines(expected: str, actual: str) -> List[str]:
    """
    Line-by-line view of `actual` against `expected`.

    Lines are prefixed "  " when they match, "! " when they differ and "+ "
    when `actual` runs past the end of `expected`; after a few such extra
    lines the rest is elided with "...".
    """
    expected_lines = expected.splitlines()
    out: List[str] = []
    for pos, line in enumerate(actual.splitlines()):
        if pos < len(expected_lines):
            out.append(("  " if line == expected_lines[pos] else "! ") + line)
        elif pos - len(expected_lines) > DIFF_TRAILING_LINES:
            out.append("...")
            break
        else:
            out.append("+ " + line)
    return out


def format_candidates(renderings) -> str:
    """Readable listing of renderings and their omitted-parens flags."""
    return "\n".join(
        f"{'omitted' if r.tuple_parens_omitted else 'parens '} | {r}" for r in renderings
    )


def _round_trip_report(headline: str, calculation: Calculation, text: str,
                       result: ReadResult) -> str:
    lines = [headline, "What we generated:", format_tree(calculation), "----",
             "What we rendered:", text, "----"]
    match result:
        case Parsed(calculation=reparsed):
            lines.append("What we reparsed (diffy view):")
            lines.extend(diff_lines(format_tree(calculation), format_tree(reparsed)))
        case Rejected(reason=reason):
            lines.append(f"Reader error: {reason}")
    return "\n".join(lines)


# =============================================================================
# Statistics Tracking
# =============================================================================

@dataclass
class ExplorationStatistics:
    """Tracks exploration run statistics."""
    programs: int = 0
    renderings: int = 0
    expected_rejections: int = 0
    programs_by_depth: Dict[int, int] = field(default_factory=dict)

    def record_program(self, depth: int) -> None:
        self.programs += 1
        self.programs_by_depth[depth] = self.programs_by_depth.get(depth, 0) + 1

    def record_rendering(self, expected_failure: bool) -> None:
        self.renderings += 1
        if expected_failure:
            self.expected_rejections += 1

    def should_report_progress(self) -> bool:
        if self.programs > 1000:
            return self.programs % 1000 == 0
        return self.programs % 100 == 0

    def print_summary(self) -> None:
        """Print formatted summary of results."""
        print("\n" + "=" * 60)
        print("Round-Trip Summary")
        print("-" * 40)
        for depth, count in sorted(self.programs_by_depth.items()):
            print(f"Programs at depth {depth}:       {count}")
        print(f"Programs checked:          {self.programs}")
        print(f"Renderings checked:        {self.renderings}")
        print(f"Predicted rejections:      {self.expected_rejections}")


@dataclass(frozen=True)
class ExplorationResult:
    ok: bool
    statistics: ExplorationStatistics
    report: Optional[str] = None


# =============================================================================
# Checks
# =============================================================================

def check_rendering(calculation: Calculation, rendering: Rendering, config: Config,
                    reader: Callable[[str, Config], Calculation] = parse) -> bool:
    """
    Read one rendering back and compare it with `calculation`.

    An expected failure is satisfied by a rejection or by a different tree;
    only an exact reproduction counts as an unexpected success.

    Returns:
        Whether the reader was expected to reject this rendering

    Raises:
        RoundTripFailure: If the reader did not behave as predicted
    """
    text = str(rendering)
    expect_failure = expects_failure(config, calculation, rendering)
    result = parse_candidate(text, config, reader)

    match result:
        case Rejected() if not expect_failure:
            raise RoundTripFailure(
                _round_trip_report("Error reparsing this AST.", calculation, text, result))
        case Parsed(calculation=reparsed) if expect_failure and reparsed == calculation:
            raise RoundTripFailure(
                _round_trip_report("Should have had error reparsing this AST.",
                                   calculation, text, result))
        case Parsed(calculation=reparsed) if not expect_failure and reparsed != calculation:
            raise RoundTripFailure(
                _round_trip_report("Didn't reparse the same AST.", calculation, text, result))

    return expect_failure


def check_calculation(calculation: Calculation, config: Config,
                      stats: ExplorationStatistics,
                      reader: Callable[[str, Config], Calculation] = parse,
                      writer: Optional[Callable[[Calculation], str]] = None) -> None:
    """
    Run every check on one generated program.

    Raises:
        InvariantViolation: If the program is not well scoped
        WriterDesync: If the canonical writer fails or its output is not
                      among the renderer's candidates
        RoundTripFailure: If a rendering does not read back as predicted
    """
    try:
        build_symbol_table(calculation)
    except SymbolTableError as e:
        raise InvariantViolation(
            f"Problem rebuilding symbol table for this program:\n"
            f"{format_tree(calculation)}\n{e}"
        ) from e

    write = writer if writer is not None else get_writer("infix").write
    try:
        written = write(calculation)
    except WriterError as e:
        raise WriterDesync(
            f"Something went wrong when trying to render this AST:\n"
            f"{format_tree(calculation)}\n{e}"
        ) from e

    written_seen = False
    for rendering in calculation_strings(calculation):
        text = str(rendering)
        written_seen = written_seen or text == written
        stats.record_rendering(check_rendering(calculation, rendering, config, reader))

    if not written_seen:
        raise WriterDesync(
            "Canonical writer output is not among the rendered forms of this AST:\n"
            f"{format_tree(calculation)}\n----\nWriter output:\n{written}\n----\n"
            f"Rendered forms:\n{format_candidates(calculation_strings(calculation))}"
        )


# =============================================================================
# Exploration Main Logic
# =============================================================================

def print_header(config: ExploreConfig) -> None:
    """Print exploration run header."""
    print(f"Testing BFS-generated programs, up to depth {config.max_depth}.")
    print(f"Assignments per program: {config.op_count}")
    print(f"Tuples enabled: {config.language.enable_tuples}, "
          f"tuple parens required: {config.language.tuples_require_parens}")
    print("=" * 60)


def explore(config: ExploreConfig = DEFAULT_CONFIG,
            reader: Callable[[str, Config], Calculation] = parse,
            writer: Optional[Callable[[Calculation], str]] = None) -> ExplorationResult:
    """
    Check every program from depth 0 up to config.max_depth.

    Args:
        config: Space bounds and reader configuration
        reader: Reader under test
        writer: Canonical writer under test (defaults to the 'infix' writer)

    Returns:
        ExplorationResult; on the first failure `ok` is False and `report`
        explains it
    """
    config.sanity()
    stats = ExplorationStatistics()
    print_header(config)

    for depth in range(config.max_depth + 1):
        print(f"Exploring depth {depth}...")
        for calculation in enumerate_calculations(config.op_count, depth):
            try:
                check_calculation(calculation, config.language, stats, reader, writer)
            except ExplorationError as e:
                print(e.report)
                print("Aborting.")
                return ExplorationResult(False, stats, e.report)

            stats.record_program(depth)
            if stats.should_report_progress():
                print(f"{stats.programs} programs ok...")

    print(f"Tested {stats.programs} programs, all ok.")
    stats.print_summary()
    return ExplorationResult(True, stats)


# =============================================================================
# CLI Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    def depth(value: str) -> int:
        parsed = int(value)
        if parsed < 0:
            raise argparse.ArgumentTypeError(f"depth must be non-negative, got {parsed}")
        return parsed

    parser = argparse.ArgumentParser(
        description="Exhaustive round-trip testing of the infix reader and writer"
    )
    parser.add_argument(
        "-d", "--depth",
        type=depth,
        default=0,
        help="How deeply nested expressions may be (default: 0)"
    )
    parser.add_argument(
        "-n", "--op-count",
        type=int,
        default=1,
        choices=range(len(VARIABLE_NAMES) + 1),
        help=f"How many assignments per program, at most {len(VARIABLE_NAMES)} (default: 1)"
    )
    parser.add_argument(
        "--disable-tuples",
        action="store_true",
        help="Read with tuple syntax disabled"
    )
    parser.add_argument(
        "--tuples-require-parens",
        action="store_true",
        help="Read with mandatory parentheses around tuple literals"
    )

    args = parser.parse_args(argv)

    result = explore(ExploreConfig(
        max_depth=args.depth,
        op_count=args.op_count,
        language=Config(
            enable_tuples=not args.disable_tuples,
            tuples_require_parens=args.tuples_require_parens,
        ),
    ))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
