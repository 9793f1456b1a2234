"""Events and results produced by a search.

A search emits, in order of occurrence:
- ProgressEvent at most once per report interval
- SolutionEvent as soon as a new distinct solution is found
- CompleteEvent exactly once, at the end
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from sum100.expression.nodes import EquationNode


class SearchStatus(Enum):
    """How a search ended."""

    SOLVED = "solved"                        # Solution cap reached
    EXHAUSTED = "exhausted"                  # Whole search space explored
    TIMED_OUT = "timed_out"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressEvent:
    """Periodic progress report.

    Attributes:
        attempts: Recursive steps taken so far
        elapsed: Seconds since the search started
        progress: min(attempts / max_attempts, elapsed / timeout, 1)
        eta: Estimated seconds remaining
        solutions: Number of distinct solutions found so far
    """

    attempts: int
    elapsed: float
    progress: float
    eta: float
    solutions: int

    type: str = field(default="progress", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "attempts": self.attempts,
            "elapsed": self.elapsed,
            "progress": self.progress,
            "eta": self.eta,
            "solutions": self.solutions,
        }


@dataclass(frozen=True)
class SolutionEvent:
    """A new distinct solution."""

    equation: EquationNode
    attempts: int
    elapsed: float

    type: str = field(default="solution", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "expression": self.equation.to_string(),
            "attempts": self.attempts,
            "elapsed": self.elapsed,
        }


@dataclass(frozen=True)
class CompleteEvent:
    """Terminal event, emitted once whatever the reason the search stopped."""

    attempts: int
    elapsed: float
    found: bool
    status: SearchStatus
    progress: float = 1.0

    type: str = field(default="complete", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "attempts": self.attempts,
            "elapsed": self.elapsed,
            "found": self.found,
            "status": self.status.value,
            "progress": self.progress,
        }


SearchEvent = Union[ProgressEvent, SolutionEvent, CompleteEvent]


@dataclass
class SolutionResult:
    """Final result of one search.

    Attributes:
        expression: First solution found, or None
        solutions: All distinct solutions, in discovery order
        attempts: Total recursive steps taken
        duration: Total seconds spent
        found: Whether any solution was found
        status: Why the search stopped
    """

    expression: EquationNode | None
    solutions: list[EquationNode]
    attempts: int
    duration: float
    found: bool
    status: SearchStatus

    def summary(self) -> str:
        lines = [
            f"Status: {self.status.value}",
            f"Found: {'yes' if self.found else 'no'} ({len(self.solutions)} solutions)",
            f"Attempts: {self.attempts:,}",
            f"Duration: {self.duration:.3f}s",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "expression": self.expression.to_string() if self.expression else None,
            "solutions": [s.to_string() for s in self.solutions],
            "attempts": self.attempts,
            "duration": self.duration,
            "found": self.found,
            "status": self.status.value,
        }
