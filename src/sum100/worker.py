"""Background worker exposing the solver through messages.

Inbound messages (dicts):
    {"type": "solve", "payload": {"input": "1 2 3 = 6", "timeout": 5, ...}}
    {"type": "cancel"}

Outbound messages (WorkerMessage) on the outbox queue:
    progress, solution, complete, error

The search runs on a dedicated thread; the caller never shares mutable state
with it. Every outbound message carries its own freshly built payload.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
import logging
import queue
import threading
from typing import Any, Iterator

from pydantic import BaseModel, Field, ValidationError, model_validator

from sum100.config import SolverConfig
from sum100.errors import Sum100Error
from sum100.expression.parser import parse_input
from sum100.expression.render import render_to_latex, render_to_mathematica
from sum100.search.events import CompleteEvent, SearchEvent, SolutionEvent, SolutionResult
from sum100.search.solver import Solver

logger = logging.getLogger(__name__)

TERMINAL_TYPES = frozenset({"complete", "error"})


class SolveRequest(BaseModel):
    """A puzzle plus optional overrides of the solver configuration.

    Either `input` ("1 2 3 = 6") or both `digits` and `target` are required.
    """

    input: str | None = None
    digits: list[int] | None = None
    target: int | None = None

    max_attempts: int | None = Field(None, ge=1)
    timeout: float | None = Field(None, gt=0)
    max_depth: int | None = Field(None, ge=1)
    max_factorial_depth: int | None = Field(None, ge=0)
    max_solutions: int | None = Field(None, ge=1)
    report_interval: float | None = Field(None, ge=0)

    enable_concatenation: bool | None = None
    enable_addition: bool | None = None
    enable_subtraction: bool | None = None
    enable_multiplication: bool | None = None
    enable_division: bool | None = None
    enable_power: bool | None = None
    enable_factorial: bool | None = None
    enable_square_root: bool | None = None
    enable_negation: bool | None = None
    enable_modulo: bool | None = None

    disable: list[str] = Field(default_factory=list, description="Short operator names to turn off")

    @model_validator(mode="after")
    def _require_problem(self) -> "SolveRequest":
        if self.input is None and (self.digits is None or self.target is None):
            raise ValueError("Provide either 'input' or both 'digits' and 'target'")
        return self

    def problem(self) -> tuple[list[int], int]:
        """Digits and target, parsing `input` when given.

        Raises:
            ParseError: If `input` is malformed
        """
        if self.input is not None:
            parsed = parse_input(self.input)
            return list(parsed.digits), parsed.target
        return list(self.digits or []), int(self.target or 0)

    def to_config(self, base: SolverConfig | None = None) -> SolverConfig:
        """Apply this request's overrides on top of base."""
        overrides = self.model_dump(
            exclude={"input", "digits", "target", "disable"},
            exclude_none=True,
        )
        config = replace(base or SolverConfig(), **overrides)
        if self.disable:
            config = config.with_disabled(*self.disable)
        config.validate()
        return config


@dataclass(frozen=True)
class WorkerMessage:
    """Outbound message.

    Attributes:
        type: progress, solution, complete or error
        payload: Self-contained data for this message
    """

    type: str
    payload: dict[str, Any]

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_TYPES

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": dict(self.payload)}


class SolverWorker:
    """Runs one search at a time on a background thread.

    Usage:
        with SolverWorker() as worker:
            worker.post({"type": "solve", "payload": {"input": "1 2 3 = 6"}})
            for message in worker.messages(timeout=10):
                print(message.type, message.payload)
    """

    def __init__(self, base_config: SolverConfig | None = None) -> None:
        self.base_config = base_config or SolverConfig()
        self.outbox: queue.Queue[WorkerMessage] = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sum100-solver")
        self._lock = threading.Lock()
        self._solver: Solver | None = None
        self._running = False
        self._closed = False

    def __enter__(self) -> "SolverWorker":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    @property
    def busy(self) -> bool:
        """Check if a search is running or queued."""
        return self._running

    @property
    def closed(self) -> bool:
        """Check if the worker has been shut down."""
        return self._closed

    def post(self, message: dict[str, Any]) -> None:
        """Handle one inbound message."""
        kind = message.get("type")
        if kind == "solve":
            self._start(message.get("payload") or {})
        elif kind == "cancel":
            self.cancel()
        else:
            self._send("error", {"error": f"Unknown message type: {kind}"})

    def solve(self, request: SolveRequest | dict[str, Any]) -> Future | None:
        """Start a search; returns its future, or None if it was rejected."""
        if isinstance(request, SolveRequest):
            request = request.model_dump(exclude_none=True)
        return self._start(request)

    def cancel(self) -> None:
        """Cancel the running search. No-op when idle."""
        with self._lock:
            if self._solver is not None:
                logger.info("Cancelling running search")
                self._solver.cancel()

    def messages(self, timeout: float | None = None) -> Iterator[WorkerMessage]:
        """Yield outbound messages up to and including the terminal one.

        Raises:
            queue.Empty: If no message arrives within timeout seconds
        """
        while True:
            message = self.outbox.get(timeout=timeout)
            yield message
            if message.is_terminal:
                return

    def shutdown(self, wait: bool = True) -> None:
        """Cancel any running search and release the thread.

        Pass wait=False when calling from the worker thread itself.
        """
        self.cancel()
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _start(self, payload: dict[str, Any]) -> Future | None:
        try:
            request = SolveRequest.model_validate(payload)
            config = request.to_config(self.base_config)
        except (ValidationError, Sum100Error) as e:
            self._send("error", {"error": str(e)})
            return None

        with self._lock:
            if self._closed:
                self._send("error", {"error": "Worker is shut down"})
                return None
            if self.busy:
                self._send("error", {"error": "A search is already running"})
                return None
            solver = Solver(config)
            self._solver = solver
            self._running = True
            return self._executor.submit(self._run, solver, request)

    def _run(self, solver: Solver, request: SolveRequest) -> SolutionResult | None:
        completed: list[CompleteEvent] = []
        result: SolutionResult | None = None

        def forward(event: SearchEvent) -> None:
            if isinstance(event, CompleteEvent):
                completed.append(event)
                return
            payload = event.to_dict()
            if isinstance(event, SolutionEvent):
                payload["latex"] = render_to_latex(event.equation)
                payload["mathematica"] = render_to_mathematica(event.equation)
            self._send(event.type, payload)

        try:
            digits, target = request.problem()
            result = solver.solve(digits, target, on_event=forward)
        except ValueError as e:
            logger.warning(f"Rejected input: {e}")
            kind, payload = "error", {"error": str(e)}
        except Exception as e:
            logger.exception("Search failed")
            kind, payload = "error", {"error": str(e) or type(e).__name__}
        else:
            kind = "complete"
            payload = completed[-1].to_dict() if completed else {}
            payload.update(result.to_dict())

        # Idle again before the terminal message goes out
        with self._lock:
            self._solver = None
            self._running = False
        self._send(kind, payload)
        return result

    def _send(self, kind: str, payload: dict[str, Any]) -> None:
        payload.pop("type", None)
        self.outbox.put(WorkerMessage(type=kind, payload=payload))
