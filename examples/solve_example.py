"""Example: Searching expressions over ordered digits.

This example demonstrates:
- Solving the classic 1..9 = 100 puzzle
- Restricting the operator set
- Following progress and solutions through events
- Rendering solutions as LaTeX and Mathematica
- Cancelling a search from another thread
"""

import threading

from sum100 import SolverConfig, Solver, parse_input
from sum100.expression.render import render_to_latex, render_to_mathematica
from sum100.search.events import ProgressEvent, SolutionEvent


def main():
    """Run the solver examples."""
    print("=" * 80)
    print("sum100 Expression Search")
    print("=" * 80)

    # =========================================================================
    # Step 1: The classic puzzle with + - and concatenation
    # =========================================================================
    print("\n[Step 1] 1 2 3 4 5 6 7 8 9 = 100 using + - and concatenation...")

    problem = parse_input("1 2 3 4 5 6 7 8 9 = 100")
    config = SolverConfig(max_solutions=100).only("concat", "add", "sub")
    result = Solver(config).solve(problem.digits, problem.target)

    for equation in result.solutions:
        print(f"  {equation}")
    print(result.summary())

    # =========================================================================
    # Step 2: Every operator, following events as they happen
    # =========================================================================
    print("\n[Step 2] 4 4 4 4 = 17 with every operator...")

    def on_event(event):
        if isinstance(event, SolutionEvent):
            print(f"  found after {event.attempts:,} attempts: {event.equation}")
        elif isinstance(event, ProgressEvent):
            print(f"  ... {event.progress:.0%} ({event.attempts:,} attempts)")

    config = SolverConfig(timeout=10.0, max_solutions=3, report_interval=1.0)
    result = Solver(config).solve([4, 4, 4, 4], 17, on_event=on_event)
    print(result.summary())

    # =========================================================================
    # Step 3: Render
    # =========================================================================
    if result.expression is not None:
        print("\n[Step 3] Rendering the first solution...")
        print(f"  LaTeX:       {render_to_latex(result.expression)}")
        print(f"  Mathematica: {render_to_mathematica(result.expression)}")

    # =========================================================================
    # Step 4: Cancel a long search
    # =========================================================================
    print("\n[Step 4] Cancelling a long search after one second...")

    solver = Solver(SolverConfig(timeout=60.0, max_solutions=1_000_000))
    timer = threading.Timer(1.0, solver.cancel)
    timer.start()
    result = solver.solve([9, 8, 7, 6, 5, 4, 3, 2, 1], 2024)
    timer.cancel()
    print(result.summary())

    print("\n" + "=" * 80)


if __name__ == "__main__":
    main()
