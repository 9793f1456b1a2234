"""
Pytest fixtures for sum100 tests.

Searches run with tight limits so the suite stays fast and deterministic.
"""

import pytest

from sum100.config import SolverConfig
from sum100.expression.parser import Parser


@pytest.fixture
def fast_config() -> SolverConfig:
    """Small search space that is explored completely in well under a second."""
    return SolverConfig(timeout=10.0, max_depth=4, max_solutions=1000)


@pytest.fixture
def classic_digits() -> list[int]:
    """The classic 1..9 puzzle digits."""
    return [1, 2, 3, 4, 5, 6, 7, 8, 9]


@pytest.fixture
def parser() -> Parser:
    return Parser()


@pytest.fixture
def parse(parser):
    """Parse an equation string into an EquationNode."""
    return parser.parse
