"""
sum100: Expression search over ordered digit sequences.

Given digits in a fixed order and a target, finds arithmetic expressions that
use every digit once, in order, and evaluate to the target, e.g.
1 + 2 + 3 - 4 + 5 + 6 + 78 + 9 = 100.
"""

__version__ = "0.1.0"

from sum100.config import SolverConfig
from sum100.expression.nodes import EquationNode
from sum100.expression.parser import Parser, parse_input
from sum100.search.events import SearchStatus, SolutionResult
from sum100.search.solver import Solver, solve, solve_expression

__all__ = [
    "__version__",
    "SolverConfig",
    "EquationNode",
    "Parser",
    "parse_input",
    "SearchStatus",
    "SolutionResult",
    "Solver",
    "solve",
    "solve_expression",
]
