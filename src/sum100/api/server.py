"""
FastAPI server for sum100.

Provides REST endpoints to start searches, poll their progress and cancel
them, plus stateless equation checking and rendering.
"""

import os
import uuid
from concurrent.futures import Future
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from sum100 import __version__
from sum100.config import SolverConfig
from sum100.errors import EvalError, ParseError
from sum100.expression.parser import Parser
from sum100.expression.render import render_to_latex, render_to_mathematica, render_to_text
from sum100.worker import SolveRequest, SolverWorker, WorkerMessage

# Create FastAPI app
app = FastAPI(
    title="sum100 API",
    description="Search arithmetic expressions over ordered digits",
    version=__version__,
)

# Enable CORS for frontend (configurable via environment variable)
CORS_ORIGINS = os.environ.get("SUM100_CORS_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory run registry (ephemeral); oldest finished runs are dropped past the cap
solve_runs: dict[str, "SolveRun"] = {}
MAX_FINISHED_RUNS = int(os.environ.get("SUM100_MAX_FINISHED_RUNS", "100"))


class SolveResponse(BaseModel):
    solve_id: str
    status: str
    message: str


class EquationRequest(BaseModel):
    expression: str


class EquationResponse(BaseModel):
    valid: bool
    value: float | None
    error: str | None = None
    text: str
    latex: str
    mathematica: str


class SolveRun:
    """One search started through the API, with its worker and collected messages."""

    def __init__(self, solve_id: str, request: SolveRequest) -> None:
        self.solve_id = solve_id
        self.request = request
        self.started_at = datetime.now()
        self.worker = SolverWorker(SolverConfig.from_env())
        self.messages: list[WorkerMessage] = []
        self.cancel_requested = False
        self.future: Future | None = None

    def start(self) -> None:
        """Run the search; the worker thread is released as soon as it ends."""
        self.future = self.worker.solve(self.request)
        if self.future is None:
            self.worker.shutdown()
        else:
            self.future.add_done_callback(lambda _: self.worker.shutdown(wait=False))

    def drain(self) -> None:
        """Move everything the worker has posted into self.messages."""
        while not self.worker.outbox.empty():
            self.messages.append(self.worker.outbox.get_nowait())

    @property
    def finished(self) -> bool:
        return bool(self.messages) and self.messages[-1].is_terminal

    @property
    def status(self) -> str:
        if not self.finished:
            return "running"
        last = self.messages[-1]
        if last.type == "error":
            return "failed"
        if last.payload.get("status") == "cancelled":
            return "cancelled"
        return "completed"

    def to_dict(self) -> dict[str, Any]:
        solutions = [m.payload for m in self.messages if m.type == "solution"]
        progress = [m.payload for m in self.messages if m.type == "progress"]
        last = self.messages[-1] if self.finished else None
        return {
            "solve_id": self.solve_id,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "progress": progress[-1] if progress else None,
            "solutions": solutions,
            "result": last.payload if last and last.type == "complete" else None,
            "error": last.payload.get("error") if last and last.type == "error" else None,
        }


def _prune_runs() -> None:
    finished = []
    for solve_id, run in solve_runs.items():
        run.drain()
        if run.finished:
            finished.append(solve_id)
    for solve_id in finished[:max(0, len(finished) - MAX_FINISHED_RUNS)]:
        del solve_runs[solve_id]


def _get_run(solve_id: str) -> SolveRun:
    run = solve_runs.get(solve_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Solve run not found")
    return run


def _describe(text: str) -> EquationResponse:
    try:
        equation = Parser().parse(text)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    value: float | None = None
    error: str | None = None
    try:
        value = equation.evaluate()
    except EvalError as e:
        error = str(e)

    return EquationResponse(
        valid=equation.is_valid(),
        value=value,
        error=error,
        text=render_to_text(equation),
        latex=render_to_latex(equation),
        mathematica=render_to_mathematica(equation),
    )


# API Endpoints
@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": "sum100 API",
        "version": __version__,
        "status": "online",
    }


@app.post("/api/solve", response_model=SolveResponse)
async def start_solve(request: SolveRequest):
    """
    Start a search.

    Returns immediately with a solve_id. Use GET /api/solve/{solve_id}
    to poll for progress and results.
    """
    _prune_runs()

    solve_id = str(uuid.uuid4())
    run = SolveRun(solve_id, request)
    solve_runs[solve_id] = run
    run.start()

    return SolveResponse(
        solve_id=solve_id,
        status="started",
        message="Search started",
    )


@app.get("/api/solve/{solve_id}")
async def get_solve(solve_id: str):
    """Get progress, solutions found so far and the final result."""
    run = _get_run(solve_id)
    run.drain()
    return run.to_dict()


@app.post("/api/solve/{solve_id}/cancel")
async def cancel_solve(solve_id: str):
    """Request cancellation of a running search."""
    run = _get_run(solve_id)
    run.drain()
    if not run.finished:
        run.cancel_requested = True
        run.worker.cancel()
    return {"solve_id": solve_id, "status": run.status, "cancel_requested": run.cancel_requested}


@app.post("/api/check", response_model=EquationResponse)
async def check_equation(request: EquationRequest):
    """Evaluate a written equation and report whether it holds."""
    return _describe(request.expression)


@app.post("/api/render")
async def render_equation(request: EquationRequest):
    """Render a written equation in every supported format."""
    described = _describe(request.expression)
    return {
        "text": described.text,
        "latex": described.latex,
        "mathematica": described.mathematica,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
