"""Exhaustive program generation and round-trip checking."""

from .stream import Stream, Cell, Rope

from .enumeration import (
    VARIABLE_NAMES,
    enumerate_expressions,
    enumerate_assignments,
    enumerate_calculations,
    count_expressions,
)

from .rendering import (
    Rendering, GroupPrecedence,
    expression_strings, statement_strings, calculation_strings,
)

from .roundtrip import (
    ExploreConfig, ExplorationResult, ExplorationStatistics,
    ExplorationError, WriterDesync, RoundTripFailure, InvariantViolation,
    explore,
)
