"""Depth-first expression search over an ordered digit sequence.

The search grows a partial expression left to right. From the current
expression it either:
1. combines it with the next unconsumed digit(s) through a binary operator
   (the right operand is a single digit or, with concatenation, a run of
   2-4 digits, optionally with a unary operator pre-applied), or
2. applies a unary operator to it without consuming digits.

An expression that has consumed every digit is tested against the target.

Usage:
    solver = Solver(SolverConfig(timeout=5))
    result = solver.solve([1, 2, 3, 4, 5, 6, 7, 8, 9], 100)
    print(result.expression)
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Callable, Iterator, Sequence

from sum100.config import SolverConfig
from sum100.errors import EvalError, SearchCancelled
from sum100.expression.nodes import (
    EPSILON,
    EQUALITY_TOLERANCE,
    BinaryOpNode,
    ConcatNode,
    EquationNode,
    Node,
    NumberNode,
    UnaryOpNode,
    apply_binary,
    apply_unary,
    factorial_depth,
)
from sum100.expression.parser import parse_input
from sum100.expression.types import BinaryOperator, UnaryOperator
from sum100.search.cache import EvaluationCache
from sum100.search.events import (
    CompleteEvent,
    ProgressEvent,
    SearchEvent,
    SearchStatus,
    SolutionEvent,
    SolutionResult,
)

logger = logging.getLogger(__name__)

EventCallback = Callable[[SearchEvent], None]


@dataclass
class SearchContext:
    """Mutable state owned by exactly one search invocation."""

    digits: tuple[int, ...]
    target: int
    config: SolverConfig
    cache: EvaluationCache
    on_event: EventCallback | None = None
    start_time: float = field(default_factory=time.monotonic)
    last_report: float = 0.0
    attempts: int = 0
    solutions: list[EquationNode] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)
    stop_status: SearchStatus | None = None

    def __post_init__(self) -> None:
        self.last_report = self.start_time

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def emit(self, event: SearchEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)


class Solver:
    """Bounded search for expressions over ordered digits that hit a target.

    A Solver may be reused for several searches, one at a time. cancel() is
    safe to call from another thread; it is observed at the next recursion
    step and also applies to a search that has not started yet. A cancel
    that arrives after a search has already returned is not dropped; it
    stops the next solve() call before its first step.
    """

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()
        self.config.validate()
        self._cancel_requested = threading.Event()
        self.last_cache: EvaluationCache | None = None

    def cancel(self) -> None:
        """Request cancellation of the running search."""
        self._cancel_requested.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested.is_set()

    def solve(
        self,
        digits: Sequence[int],
        target: int,
        on_event: EventCallback | None = None,
    ) -> SolutionResult:
        """Search for expressions over digits that evaluate to target.

        Args:
            digits: Ordered non-negative integers, consumed left to right
            target: Integer the expression must evaluate to
            on_event: Optional callback receiving progress, solution and
                      complete events as they happen

        Returns:
            SolutionResult with every distinct solution found

        Raises:
            ValueError: If digits or target are malformed
        """
        digits = _validate_input(digits, target)
        ctx = SearchContext(
            digits=digits,
            target=target,
            config=self.config,
            cache=EvaluationCache(self.config.cache_size),
            on_event=on_event,
        )
        self.last_cache = ctx.cache

        logger.info(f"Searching {' '.join(map(str, digits))} = {target}")

        try:
            self._search(ctx)
        except SearchCancelled:
            logger.info("Search cancelled")
            ctx.stop_status = SearchStatus.CANCELLED
        finally:
            self._cancel_requested.clear()

        duration = ctx.elapsed
        status = ctx.stop_status or SearchStatus.EXHAUSTED
        found = bool(ctx.solutions)

        ctx.emit(CompleteEvent(
            attempts=ctx.attempts,
            elapsed=duration,
            found=found,
            status=status,
        ))

        logger.info(
            f"Search finished: {status.value}, {len(ctx.solutions)} solutions, "
            f"{ctx.attempts} attempts in {duration:.3f}s"
        )

        return SolutionResult(
            expression=ctx.solutions[0] if found else None,
            solutions=list(ctx.solutions),
            attempts=ctx.attempts,
            duration=duration,
            found=found,
            status=status,
        )

    # -------------------------------------------------------------------------
    # Recursion
    # -------------------------------------------------------------------------

    def _search(self, ctx: SearchContext) -> None:
        """Start from every possible first operand."""
        for length in self._run_lengths(ctx, 0):
            leaf, value = _leaf(ctx.digits, 0, length)
            self._explore(ctx, leaf, value, length, depth=1)
            if ctx.stop_status is not None:
                return

    def _explore(
        self,
        ctx: SearchContext,
        expr: Node,
        value: float,
        position: int,
        depth: int,
    ) -> None:
        """One search step: expr has consumed digits[:position]."""
        if self._should_stop(ctx):
            return
        ctx.attempts += 1
        self._maybe_report(ctx)

        if position == len(ctx.digits):
            self._check_solution(ctx, expr, value)
            if ctx.stop_status is not None:
                return

        if depth >= ctx.config.max_depth:
            return

        # Binary: consume the next run of digits as the right operand
        for length in self._run_lengths(ctx, position):
            leaf, leaf_value = _leaf(ctx.digits, position, length)
            for right, right_value in self._right_operands(ctx, leaf, leaf_value):
                for op in ctx.config.binary_operators:
                    if _skip_binary(op, value, right_value):
                        continue
                    node = BinaryOpNode(expr, op, right)
                    try:
                        node_value = self._evaluate(
                            ctx, node, lambda: apply_binary(op, value, right_value)
                        )
                    except EvalError:
                        continue
                    self._explore(ctx, node, node_value, position + length, depth + 1)
                    if ctx.stop_status is not None:
                        return

        # Unary: transform the current expression in place
        for op in ctx.config.unary_operators:
            if self._skip_unary(ctx, op, expr, value):
                continue
            node = UnaryOpNode(op, expr)
            try:
                node_value = self._evaluate(ctx, node, lambda: apply_unary(op, value))
            except EvalError:
                continue
            self._explore(ctx, node, node_value, position, depth + 1)
            if ctx.stop_status is not None:
                return

    def _right_operands(
        self,
        ctx: SearchContext,
        leaf: Node,
        leaf_value: float,
    ) -> Iterator[tuple[Node, float]]:
        """The bare leaf, then the leaf under each applicable unary operator."""
        yield leaf, leaf_value
        for op in ctx.config.unary_operators:
            if self._skip_unary(ctx, op, leaf, leaf_value):
                continue
            node = UnaryOpNode(op, leaf)
            try:
                node_value = self._evaluate(ctx, node, lambda: apply_unary(op, leaf_value))
            except EvalError:
                continue
            yield node, node_value

    def _run_lengths(self, ctx: SearchContext, position: int) -> range:
        """Digit counts the next operand may consume."""
        longest = ctx.config.max_concat_length if ctx.config.enable_concatenation else 1
        return range(1, min(longest, len(ctx.digits) - position) + 1)

    # -------------------------------------------------------------------------
    # Limits, reporting, solutions
    # -------------------------------------------------------------------------

    def _should_stop(self, ctx: SearchContext) -> bool:
        if self._cancel_requested.is_set():
            raise SearchCancelled()
        if ctx.stop_status is not None:
            return True
        if ctx.attempts >= ctx.config.max_attempts:
            ctx.stop_status = SearchStatus.ATTEMPTS_EXHAUSTED
        elif ctx.elapsed >= ctx.config.timeout:
            ctx.stop_status = SearchStatus.TIMED_OUT
        elif len(ctx.solutions) >= ctx.config.max_solutions:
            ctx.stop_status = SearchStatus.SOLVED
        return ctx.stop_status is not None

    def _maybe_report(self, ctx: SearchContext) -> None:
        now = time.monotonic()
        if now - ctx.last_report < ctx.config.report_interval:
            return
        ctx.last_report = now

        elapsed = now - ctx.start_time
        progress = min(
            ctx.attempts / ctx.config.max_attempts,
            elapsed / ctx.config.timeout,
            1.0,
        )
        eta = elapsed * (1 / progress - 1) if progress > 1e-9 else ctx.config.timeout

        ctx.emit(ProgressEvent(
            attempts=ctx.attempts,
            elapsed=elapsed,
            progress=progress,
            eta=max(0.0, eta),
            solutions=len(ctx.solutions),
        ))

    def _check_solution(self, ctx: SearchContext, expr: Node, value: float) -> None:
        if abs(value - ctx.target) >= EQUALITY_TOLERANCE:
            return

        equation = EquationNode(expression=expr, target=ctx.target)
        key = equation.to_string()
        if key in ctx.seen:
            return
        ctx.seen.add(key)
        ctx.solutions.append(equation)
        logger.debug(f"Solution #{len(ctx.solutions)}: {key}")

        ctx.emit(SolutionEvent(equation=equation, attempts=ctx.attempts, elapsed=ctx.elapsed))

        if len(ctx.solutions) >= ctx.config.max_solutions:
            ctx.stop_status = SearchStatus.SOLVED

    # -------------------------------------------------------------------------
    # Evaluation and pruning
    # -------------------------------------------------------------------------

    @staticmethod
    def _evaluate(ctx: SearchContext, node: Node, compute: Callable[[], float]) -> float:
        """Value of node, memoized by its canonical text."""
        key = node.to_string()
        cached = ctx.cache.get(key)
        if cached is not None:
            return cached
        value = compute()
        ctx.cache.set(key, value)
        return value

    @staticmethod
    def _skip_unary(ctx: SearchContext, op: UnaryOperator, node: Node, value: float) -> bool:
        """Unary applications that cannot help or would explode the space."""
        if op is UnaryOperator.FACTORIAL:
            return (
                factorial_depth(node) >= ctx.config.max_factorial_depth
                or value < 0
                or not float(value).is_integer()
                or value > ctx.config.factorial_ceiling
                or value in (1, 2)
            )
        if op is UnaryOperator.SQRT:
            return value < 0 or value == 1
        if op is UnaryOperator.NEGATE:
            return isinstance(node, UnaryOpNode) and node.operator is UnaryOperator.NEGATE
        return False


def _skip_binary(op: BinaryOperator, left: float, right: float) -> bool:
    if op in (BinaryOperator.DIVIDE, BinaryOperator.MODULO):
        return abs(right) < EPSILON
    if op is BinaryOperator.POWER:
        return (
            left == 1
            or (left == 0 and right < 0)
            or (left < 0 and not float(right).is_integer())
        )
    return False


def _leaf(digits: tuple[int, ...], position: int, length: int) -> tuple[Node, float]:
    if length == 1:
        node: Node = NumberNode(digits[position])
        return node, float(digits[position])
    concat = ConcatNode(digits[position:position + length])
    return concat, float(concat.literal)


def _validate_input(digits: Sequence[int], target: int) -> tuple[int, ...]:
    digits = tuple(digits)
    if not digits:
        raise ValueError("At least one digit is required")
    for d in digits:
        if isinstance(d, bool) or not isinstance(d, int) or d < 0:
            raise ValueError(f"Digits must be non-negative integers, got {d!r}")
    if isinstance(target, bool) or not isinstance(target, int):
        raise ValueError(f"Target must be an integer, got {target!r}")
    return digits


# =============================================================================
# Convenience functions
# =============================================================================

def solve(
    digits: Sequence[int],
    target: int,
    config: SolverConfig | None = None,
    on_event: EventCallback | None = None,
) -> SolutionResult:
    """Run one search with a fresh Solver."""
    return Solver(config).solve(digits, target, on_event=on_event)


def solve_expression(
    text: str,
    config: SolverConfig | None = None,
    on_event: EventCallback | None = None,
) -> SolutionResult:
    """Parse "d1 d2 ... = target" and solve it."""
    parsed = parse_input(text)
    return solve(parsed.digits, parsed.target, config=config, on_event=on_event)
