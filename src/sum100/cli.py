"""
Command-line interface for sum100.

Provides commands for:
- Searching expressions that hit a target
- Checking a written equation
- Rendering an equation as text, LaTeX or Mathematica
"""

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from sum100 import __version__
from sum100.config import OPERATOR_FLAGS, SolverConfig
from sum100.errors import ConfigError, EvalError, ParseError
from sum100.expression.parser import Parser, parse_input
from sum100.expression.render import RENDER_FORMATS, Renderer
from sum100.search.events import ProgressEvent, SearchEvent
from sum100.search.solver import Solver

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("sum100")

EXIT_NOT_FOUND = 1
EXIT_PARSE_ERROR = 2


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """sum100 - Expression search over ordered digits."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command()
@click.argument("input_text", metavar="INPUT")
@click.option("--max-attempts", "-n", type=int, default=None, help="Maximum recursive steps")
@click.option("--timeout", "-t", type=float, default=None, help="Time budget in seconds")
@click.option("--max-depth", "-d", type=int, default=None, help="Maximum construction steps")
@click.option("--no-concat", is_flag=True, help="Do not join adjacent digits")
@click.option(
    "--disable",
    "-x",
    multiple=True,
    type=click.Choice(sorted(OPERATOR_FLAGS)),
    help="Operator family to switch off (repeatable)",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(RENDER_FORMATS),
    default="text",
    help="Output format for solutions",
)
@click.option("--all", "find_all", is_flag=True, help="Collect several solutions instead of one")
@click.option("--progress", is_flag=True, help="Print progress to stderr")
@click.option("--output", "-o", default=None, help="Output file for results")
def solve(
    input_text: str,
    max_attempts: int,
    timeout: float,
    max_depth: int,
    no_concat: bool,
    disable: tuple,
    fmt: str,
    find_all: bool,
    progress: bool,
    output: str,
) -> None:
    """Search expressions for INPUT, e.g. "1 2 3 4 5 6 7 8 9 = 100"."""
    try:
        problem = parse_input(input_text)
    except ParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_PARSE_ERROR)

    try:
        config = SolverConfig.from_env()
        overrides = {
            "max_attempts": max_attempts,
            "timeout": timeout,
            "max_depth": max_depth,
        }
        config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
        if not find_all:
            config = replace(config, max_solutions=1)
        disabled = list(disable) + (["concat"] if no_concat else [])
        if disabled:
            config = config.with_disabled(*disabled)
        solver = Solver(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_PARSE_ERROR)

    def on_event(event: SearchEvent) -> None:
        if progress and isinstance(event, ProgressEvent):
            click.echo(
                f"  {event.progress:6.1%}  {event.attempts:>10,} attempts  "
                f"{event.elapsed:6.2f}s  eta {event.eta:6.2f}s  "
                f"{event.solutions} found",
                err=True,
            )

    digits = " ".join(str(d) for d in problem.digits)
    click.echo(f"Solving {digits} = {problem.target}...")

    result = solver.solve(problem.digits, problem.target, on_event=on_event)

    renderer = Renderer(fmt)
    click.echo("\n" + "=" * 50)
    if result.found:
        for equation in result.solutions:
            click.echo(renderer.render(equation))
    else:
        click.echo("No solution found")
    click.echo("=" * 50)
    click.echo(result.summary())

    if output:
        output_path = Path(output)
        payload = result.to_dict()
        payload["rendered"] = renderer.render_many(result.solutions)
        payload["config"] = config.to_dict()
        output_path.write_text(json.dumps(payload, indent=2))
        click.echo(f"\nResults saved to {output}")

    if not result.found:
        sys.exit(EXIT_NOT_FOUND)


@main.command()
@click.argument("equation")
def check(equation: str) -> None:
    """Evaluate EQUATION, e.g. "(1 + 2) * 3 = 9", and report whether it holds."""
    try:
        node = Parser().parse(equation)
    except ParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_PARSE_ERROR)

    click.echo(f"Equation: {node.to_string()}")
    try:
        value = node.evaluate()
    except EvalError as e:
        click.echo(f"Cannot evaluate: {e}")
        sys.exit(EXIT_NOT_FOUND)

    click.echo(f"Value: {value:g}")
    if node.is_valid():
        click.echo("Valid: yes")
    else:
        click.echo(f"Valid: no (expected {node.target})")
        sys.exit(EXIT_NOT_FOUND)


@main.command()
@click.argument("equation")
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(RENDER_FORMATS),
    default="latex",
    help="Output format",
)
def render(equation: str, fmt: str) -> None:
    """Render EQUATION in another notation."""
    try:
        node = Parser().parse(equation)
    except ParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_PARSE_ERROR)

    click.echo(Renderer(fmt).render(node))


@main.command()
def info() -> None:
    """Show version and dependency information."""
    from importlib.metadata import version

    click.echo(f"sum100 v{__version__}\n")
    click.echo("Dependencies:")
    for package in ("click", "fastapi", "pydantic", "python-dotenv", "uvicorn"):
        click.echo(f"  {package}: {version(package)}")

    config = SolverConfig.from_env()
    click.echo("\nDefault configuration:")
    for name, value in config.to_dict().items():
        click.echo(f"  {name}: {value}")


if __name__ == "__main__":
    main()
