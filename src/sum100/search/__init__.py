"""Bounded expression search over ordered digits."""

from sum100.search.cache import EvaluationCache
from sum100.search.events import (
    CompleteEvent,
    ProgressEvent,
    SearchEvent,
    SearchStatus,
    SolutionEvent,
    SolutionResult,
)
from sum100.search.solver import (
    SearchContext,
    Solver,
    solve,
    solve_expression,
)

__all__ = [
    "EvaluationCache",
    "CompleteEvent",
    "ProgressEvent",
    "SearchEvent",
    "SearchStatus",
    "SolutionEvent",
    "SolutionResult",
    "SearchContext",
    "Solver",
    "solve",
    "solve_expression",
]
