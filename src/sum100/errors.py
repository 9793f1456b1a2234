"""Exception taxonomy for sum100.

Three families of failure:
- ParseError: malformed input text, surfaced directly to the caller
- EvalError: an operator applied outside its domain. Expected and frequent
  during search, where each one only prunes a single candidate
- SearchCancelled: internal signal that unwinds a whole search cleanly

Anything else is a defect and propagates.
"""


class Sum100Error(Exception):
    """Base class for all sum100 errors."""


class ParseError(Sum100Error, ValueError):
    """Input text does not match the expected grammar."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class ConfigError(Sum100Error, ValueError):
    """Solver configuration is out of range."""


class EvalError(Sum100Error, ArithmeticError):
    """Evaluation of an expression node failed."""


class DivisionByZeroError(EvalError):
    """Divisor is (numerically) zero."""


class ModuloByZeroError(EvalError):
    """Modulo divisor is (numerically) zero."""


class FactorialDomainError(EvalError):
    """Factorial of a negative or non-integer value."""


class FactorialOverflowError(EvalError):
    """Factorial operand above the overflow threshold."""


class SqrtDomainError(EvalError):
    """Square root of a negative value."""


class NonFiniteResultError(EvalError):
    """Result is infinite, NaN or not a real number."""


class SearchCancelled(Sum100Error):
    """Raised inside the search when cancellation has been requested."""
